"""Ports for reading and writing destination state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Hashable

    from contentsync.domain.model import ContentEntity, UrlAlias


@runtime_checkable
class ExistingRecord(Protocol):
    """Read-only handle on a record that already exists at the destination."""

    def last_modified(self) -> int | None:
        """Modification time, or ``None`` when the type does not track one."""
        ...

    def internal_key(self) -> Hashable: ...


@runtime_checkable
class DestinationLookup(Protocol):
    """Read capability the reconciliation engine needs from the destination."""

    def find_by_identity(self, identity: str, *, type_id: str) -> ExistingRecord | None: ...

    def supports_ownership(self, type_id: str) -> bool: ...


@runtime_checkable
class ContentRepository(DestinationLookup, Protocol):
    """Persistence contract for content records."""

    def get(self, key: Hashable) -> ContentEntity | None: ...

    def add(self, entity: ContentEntity) -> None: ...


@runtime_checkable
class UrlAliasRepository(Protocol):
    """Persistence contract for URL aliases."""

    def exists(self, *, alias: str, langcode: str) -> bool: ...

    def add(self, alias: UrlAlias) -> None: ...
