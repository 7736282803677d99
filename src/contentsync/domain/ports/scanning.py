"""Ports for reading export snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contentsync.domain.model import UrlAlias
    from contentsync.domain.reconciliation.index import DecodedRecord, SourceLocation


@runtime_checkable
class Scanner(Protocol):
    """Yield source locations grouped by destination type, in stable order."""

    def scan(self) -> dict[str, tuple[SourceLocation, ...]]: ...


@runtime_checkable
class RecordSource(Protocol):
    """Decode hooks for one snapshot format."""

    def decode(self, location: SourceLocation) -> DecodedRecord:
        """Return the fields needed to order and reconcile the record."""
        ...

    def load(self, location: SourceLocation) -> dict[str, object]:
        """Return the full payload to write at the destination."""
        ...


@runtime_checkable
class AliasSource(Protocol):
    def aliases(self) -> tuple[UrlAlias, ...]: ...
