"""Lightweight record descriptors built from scanned source locations.

The index decodes just enough of every payload to order the batch: identity,
destination type, declared modification time, owner, embedded references
and the file URI of records backed by a binary. Full records are only
materialized again by the import driver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from .errors import DuplicateIdentity, MalformedRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping

log = logging.getLogger(__name__)


class DuplicatePolicy(StrEnum):
    """How to treat two source locations claiming the same identity."""

    STRICT = "strict"
    LENIENT = "lenient"


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Opaque handle back to a raw payload."""

    uri: str
    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class DecodedRecord:
    """Fields a decode hook extracts from one payload."""

    identity: str
    references: tuple[str, ...] = ()
    last_modified: int | None = None
    owner: str | None = None
    file_uri: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RecordDescriptor:
    identity: str
    type_id: str
    location: SourceLocation
    references: tuple[str, ...] = ()
    last_modified: int | None = None
    owner: str | None = None
    file_uri: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DuplicateWarning:
    """Recorded when a lenient index drops a later duplicate location."""

    identity: str
    kept: SourceLocation
    ignored: SourceLocation


type RecordDecoder = Callable[[SourceLocation], DecodedRecord]


@dataclass(slots=True)
class RecordIndex:
    """Descriptors of one batch keyed by identity, in first-seen order."""

    _descriptors: dict[str, RecordDescriptor] = field(
        default_factory=dict["str", "RecordDescriptor"], repr=False
    )
    warnings: tuple[DuplicateWarning, ...] = ()

    @property
    def descriptors(self) -> tuple[RecordDescriptor, ...]:
        return tuple(self._descriptors.values())

    def descriptor_for(self, identity: str) -> RecordDescriptor:
        try:
            return self._descriptors[identity]
        except KeyError:
            raise KeyError(f"Identity {identity} is not part of this batch") from None

    def get(self, identity: str) -> RecordDescriptor | None:
        return self._descriptors.get(identity)

    def __contains__(self, identity: object) -> bool:
        return identity in self._descriptors

    def __iter__(self) -> Iterator[RecordDescriptor]:
        return iter(self._descriptors.values())

    def __len__(self) -> int:
        return len(self._descriptors)


def build_record_index(
    locations_by_type: Mapping[str, Iterable[SourceLocation]],
    decode: RecordDecoder,
    *,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.STRICT,
) -> RecordIndex:
    """Decode every scanned location into a descriptor.

    Any decoding failure aborts the whole batch with ``MalformedRecord``.
    Duplicate identities either abort (``STRICT``) or keep the first-seen
    location and record a warning (``LENIENT``).
    """

    descriptors: dict[str, RecordDescriptor] = {}
    warnings: list[DuplicateWarning] = []

    for type_id, locations in locations_by_type.items():
        for location in locations:
            decoded = _decode(location, decode)
            existing = descriptors.get(decoded.identity)
            if existing is not None:
                if duplicate_policy is DuplicatePolicy.STRICT:
                    raise DuplicateIdentity(
                        decoded.identity,
                        first=existing.location,
                        second=location,
                    )
                log.warning(
                    "Record with identity %s exists twice: %s and %s; ignoring %s",
                    decoded.identity,
                    existing.location.uri,
                    location.uri,
                    location.uri,
                )
                warnings.append(
                    DuplicateWarning(
                        identity=decoded.identity,
                        kept=existing.location,
                        ignored=location,
                    )
                )
                continue

            descriptors[decoded.identity] = RecordDescriptor(
                identity=decoded.identity,
                type_id=type_id,
                location=location,
                references=tuple(dict.fromkeys(decoded.references)),
                last_modified=decoded.last_modified,
                owner=decoded.owner,
                file_uri=decoded.file_uri,
            )

    log.debug("Indexed %s records (%s duplicates ignored)", len(descriptors), len(warnings))
    return RecordIndex(descriptors, warnings=tuple(warnings))


def _decode(location: SourceLocation, decode: RecordDecoder) -> DecodedRecord:
    try:
        decoded = decode(location)
    except MalformedRecord:
        raise
    except (ValueError, KeyError, TypeError, OSError) as exc:
        raise MalformedRecord(location, str(exc)) from exc

    if not decoded.identity or not decoded.identity.strip():
        raise MalformedRecord(location, "missing identity")
    return decoded
