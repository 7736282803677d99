"""Error taxonomy for ordering and reconciling an import batch.

Structural errors (``MalformedRecord``, ``DuplicateIdentity``, ``LookupFailed``)
abort the batch. ``ApplyFailed`` is isolated per decision and aggregated by the
batch loop.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .index import SourceLocation


class ContentSyncError(Exception):
    """Base class for all import batch errors."""


class MalformedRecord(ContentSyncError):
    """Raised when a source location cannot be decoded into a descriptor."""

    def __init__(self, location: SourceLocation, detail: str) -> None:
        self.location = location
        self.detail = detail
        super().__init__(f"Malformed record at {location.uri}: {detail}")


class DuplicateIdentity(ContentSyncError):
    """Raised when two source locations claim the same identity."""

    def __init__(
        self,
        identity: str,
        *,
        first: SourceLocation,
        second: SourceLocation,
    ) -> None:
        self.identity = identity
        self.first = first
        self.second = second
        super().__init__(
            f'Record with identity "{identity}" exists twice: "{first.uri}" "{second.uri}"'
        )


class LookupFailed(ContentSyncError):
    """Raised when the destination cannot answer an existence query."""

    def __init__(self, identity: str, detail: str) -> None:
        self.identity = identity
        self.detail = detail
        super().__init__(f"Destination lookup failed for {identity}: {detail}")


class ApplyFailed(ContentSyncError):
    """Raised by an import driver when one decision could not be applied."""

    def __init__(self, identity: str, detail: str) -> None:
        self.identity = identity
        self.detail = detail
        super().__init__(f"Failed to apply {identity}: {detail}")
