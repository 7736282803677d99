"""Import driver contract and the batch apply loop.

The loop walks decisions strictly in plan order and pulls the next decision
only after the previous one was applied. ``SKIP`` never writes the record;
the driver only restores its missing dependencies. Per-decision
``ApplyFailed`` errors are isolated and counted; structural errors raised
while producing decisions propagate unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .contracts import ApplyFailure, BatchResult, ReconciliationAction
from .errors import ApplyFailed

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Iterable

    from .contracts import ReconciliationDecision
    from .index import RecordDescriptor, RecordIndex

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplyOutcome:
    """What a driver reports back for one applied decision."""

    key: Hashable | None = None
    materialized_dependencies: int = 0


@runtime_checkable
class ImportDriver(Protocol):
    """Apply ``CREATE``/``UPDATE`` decisions against the real store.

    ``UPDATE`` must write to ``decision.target_key`` and keep the existing
    record's revision history; failures are reported as ``ApplyFailed``.
    ``restore`` runs for ``SKIP`` decisions and only recreates missing
    dependencies of the record, never the record itself.
    """

    def apply(
        self, decision: ReconciliationDecision, descriptor: RecordDescriptor
    ) -> ApplyOutcome: ...

    def restore(self, decision: ReconciliationDecision, descriptor: RecordDescriptor) -> int: ...

    def missing_dependencies(self, descriptor: RecordDescriptor) -> int:
        """Count dependencies ``apply`` or ``restore`` would create. Read only."""
        ...


def apply_decisions(
    decisions: Iterable[ReconciliationDecision],
    *,
    index: RecordIndex,
    driver: ImportDriver,
    fail_fast: bool = False,
    should_cancel: Callable[[], bool] | None = None,
) -> BatchResult:
    """Apply ``decisions`` in order and aggregate the outcome.

    ``should_cancel`` is checked before each decision is pulled; once it
    returns ``True`` the loop stops and the result is flagged as cancelled.
    With ``fail_fast`` the first ``ApplyFailed`` is re-raised.
    """

    result = BatchResult()
    iterator = iter(decisions)

    while True:
        if should_cancel is not None and should_cancel():
            result.cancelled = True
            log.warning("Import cancelled after %s records", result.processed)
            break

        decision = next(iterator, None)
        if decision is None:
            break

        result.processed += 1
        descriptor = index.descriptor_for(decision.identity)
        if decision.action is ReconciliationAction.SKIP:
            result.skipped += 1
        try:
            if decision.action is ReconciliationAction.SKIP:
                restored = driver.restore(decision, descriptor)
            else:
                outcome = driver.apply(decision, descriptor)
        except ApplyFailed as exc:
            result.failed += 1
            result.failures.append(ApplyFailure(identity=decision.identity, message=str(exc)))
            log.error("Record %s (type %s) failed: %s", decision.identity, decision.type_id, exc)
            if fail_fast:
                raise
            continue

        if decision.action is ReconciliationAction.SKIP:
            result.materialized_dependencies += restored
            if restored:
                log.info(
                    "Record %s (type %s) unchanged; restored %s missing dependencies",
                    decision.identity,
                    decision.type_id,
                    restored,
                )
            continue

        if decision.action is ReconciliationAction.CREATE:
            result.created += 1
            method = "created"
        else:
            result.updated += 1
            method = "updated"
        result.materialized_dependencies += outcome.materialized_dependencies

        log.info(
            "Record %s (type %s, key %s) %s successfully from %s",
            decision.identity,
            decision.type_id,
            outcome.key,
            method,
            descriptor.location.name,
        )

    return result
