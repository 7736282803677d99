"""Destination-side domain objects.

These are plain classes; the SQLAlchemy adapter maps them imperatively.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(eq=False, kw_only=True)
class ContentEntity:
    """One content record as stored at the destination.

    ``id`` is the internal storage key and stays ``None`` until the record is
    flushed. ``uuid`` is the identity shared with export snapshots.
    """

    uuid: str
    type_id: str
    payload: dict[str, object] = field(default_factory=dict)
    changed: int | None = None
    owner: str | None = None
    revision: int = 1
    id: int | None = None


@dataclass(eq=False, kw_only=True)
class UrlAlias:
    source: str
    alias: str
    langcode: str = "und"
    id: int | None = None
