"""Application services for importing one export snapshot.

An import runs in two phases:

- ``preview_import`` computes the plan and every decision without writing;
  it is safe to abandon at any point.
- ``apply_import`` recomputes decisions lazily and applies each one before
  the next record is looked up, then commits once at the end.

Graph, plan and index are rebuilt for every invocation by ``prepare_batch``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from contentsync.domain.reconciliation import (
    BatchResult,
    DependencyGraph,
    DuplicatePolicy,
    ReconciliationEngine,
    apply_decisions,
    build_record_index,
    plan_import,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentsync.domain.ports.scanning import RecordSource, Scanner
    from contentsync.domain.ports.unit_of_work import ImportUnitOfWork
    from contentsync.domain.reconciliation import (
        ImportDriver,
        ImportPlan,
        ReconciliationDecision,
        RecordIndex,
    )

    type DriverFactory = Callable[[ImportUnitOfWork], ImportDriver]

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreparedBatch:
    """Index, graph and plan of one import invocation."""

    index: RecordIndex
    graph: DependencyGraph
    plan: ImportPlan


@dataclass(slots=True)
class ImportPreview:
    """Read-only outcome of reconciling a prepared batch."""

    batch: PreparedBatch
    decisions: list[ReconciliationDecision]
    result: BatchResult


def prepare_batch(
    *,
    scanner: Scanner,
    source: RecordSource,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.STRICT,
) -> PreparedBatch:
    """Scan, index and plan a snapshot. No destination access happens here."""

    locations_by_type = scanner.scan()
    index = build_record_index(
        locations_by_type,
        source.decode,
        duplicate_policy=duplicate_policy,
    )
    graph = DependencyGraph.from_index(index)
    plan = plan_import(graph)
    log.info(
        "Planned %s records across %s types (%s dependencies, %s cycles)",
        len(plan),
        len(locations_by_type),
        graph.edge_count(),
        len(plan.cycles),
    )
    return PreparedBatch(index=index, graph=graph, plan=plan)


def preview_import(
    batch: PreparedBatch,
    *,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    driver_factory: DriverFactory | None = None,
    default_owner: str | None = None,
) -> ImportPreview:
    """Decide every planned record without applying anything.

    With a ``driver_factory`` the preview also counts the dependencies the
    apply phase would have to recreate, so a batch whose records are all
    current but whose files went missing still reports pending changes.
    """

    with unit_of_work_factory() as uow:
        engine = ReconciliationEngine(
            lookup=uow.repositories.content,
            default_owner=default_owner,
        )
        decisions = engine.reconcile(batch.plan, batch.index)
        result = BatchResult.from_decisions(decisions)
        if driver_factory is not None:
            driver = driver_factory(uow)
            result.materialized_dependencies = sum(
                driver.missing_dependencies(batch.index.descriptor_for(decision.identity))
                for decision in decisions
            )

    return ImportPreview(batch=batch, decisions=decisions, result=result)


def apply_import(
    batch: PreparedBatch,
    *,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    driver_factory: DriverFactory,
    default_owner: str | None = None,
    fail_fast: bool = False,
    should_cancel: Callable[[], bool] | None = None,
) -> BatchResult:
    """Reconcile and apply ``batch`` in plan order and commit the outcome.

    A cancelled run still commits what was applied before the cancellation
    point, and the returned counters say exactly how much that was.
    """

    with unit_of_work_factory() as uow:
        engine = ReconciliationEngine(
            lookup=uow.repositories.content,
            default_owner=default_owner,
        )
        result = apply_decisions(
            engine.iter_decisions(batch.plan, batch.index),
            index=batch.index,
            driver=driver_factory(uow),
            fail_fast=fail_fast,
            should_cancel=should_cancel,
        )
        uow.commit()

    log.info(
        "Import finished: processed=%s, created=%s, updated=%s, skipped=%s, "
        "failed=%s, materialized=%s, cancelled=%s",
        result.processed,
        result.created,
        result.updated,
        result.skipped,
        result.failed,
        result.materialized_dependencies,
        result.cancelled,
    )
    return result
