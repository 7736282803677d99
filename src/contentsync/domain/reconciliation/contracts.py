"""Shared reconciliation contract components.

This module holds only the decision types passed from the reconciliation
engine to the import driver and the aggregate counters the driver loop fills.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, field
from enum import StrEnum


class ReconciliationAction(StrEnum):
    """How one incoming record is materialized at the destination."""

    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"


class DecisionReason(StrEnum):
    NOT_FOUND = "not_found"
    SOURCE_NEWER = "source_newer"
    DESTINATION_CURRENT = "destination_same_or_newer"
    STALENESS_UNKNOWN = "staleness_unknown"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationDecision:
    """Decision for one identity of the plan.

    ``target_key`` is the destination's internal storage key inherited on
    ``UPDATE``; the incoming identity itself is never rewritten. ``owner`` is a
    data-completion annotation, not a reconciliation branch.
    """

    identity: str
    type_id: str
    action: ReconciliationAction
    reason: DecisionReason
    target_key: Hashable | None = None
    owner: str | None = None

    def __post_init__(self) -> None:
        if self.action is ReconciliationAction.UPDATE and self.target_key is None:
            raise ValueError(f"Update decision for {self.identity} requires a target key")
        if self.action is not ReconciliationAction.UPDATE and self.target_key is not None:
            raise ValueError(f"Only update decisions carry a target key ({self.identity})")


@dataclass(frozen=True, slots=True)
class ApplyFailure:
    identity: str
    message: str


@dataclass(slots=True)
class BatchResult:
    """Counters for one import batch.

    ``failed`` apply attempts are never counted as created or updated.
    ``cancelled`` is set when the apply phase stopped early; all counters then
    reflect exactly what was applied before the cancellation point.
    """

    processed: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0
    materialized_dependencies: int = 0
    cancelled: bool = False
    failures: list[ApplyFailure] = field(default_factory=list["ApplyFailure"])

    @property
    def pending_changes(self) -> int:
        return self.created + self.updated + self.materialized_dependencies

    @classmethod
    def from_decisions(cls, decisions: list[ReconciliationDecision]) -> BatchResult:
        """Summarize decisions computed without applying them."""

        result = cls()
        for decision in decisions:
            result.processed += 1
            if decision.action is ReconciliationAction.CREATE:
                result.created += 1
            elif decision.action is ReconciliationAction.UPDATE:
                result.updated += 1
            else:
                result.skipped += 1
        return result
