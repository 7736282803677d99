from __future__ import annotations

import pytest

from contentsync.domain.reconciliation import (
    DecisionReason,
    DependencyGraph,
    LookupFailed,
    ReconciliationAction,
    ReconciliationDecision,
    ReconciliationEngine,
    plan_import,
)
from tests.helpers.records import FakeExisting, FakeLookup, RecordSpec, make_index


def _decide(
    spec: RecordSpec, lookup: FakeLookup, *, default_owner: str | None = None
) -> ReconciliationDecision:
    index = make_index(spec)
    engine = ReconciliationEngine(lookup=lookup, default_owner=default_owner)
    return engine.decide(index.descriptor_for(spec.identity))


def test_missing_destination_record_is_created() -> None:
    decision = _decide(RecordSpec("a", last_modified=100), FakeLookup())

    assert decision.action is ReconciliationAction.CREATE
    assert decision.reason is DecisionReason.NOT_FOUND
    assert decision.target_key is None


def test_older_destination_is_updated_with_inherited_key() -> None:
    lookup = FakeLookup(records={"a": FakeExisting(key=42, changed=100)})

    decision = _decide(RecordSpec("a", last_modified=150), lookup)

    assert decision.action is ReconciliationAction.UPDATE
    assert decision.reason is DecisionReason.SOURCE_NEWER
    assert decision.target_key == 42
    assert decision.identity == "a"


@pytest.mark.parametrize("destination_time", [150, 200])
def test_same_or_newer_destination_is_skipped(destination_time: int) -> None:
    lookup = FakeLookup(records={"a": FakeExisting(key=42, changed=destination_time)})

    decision = _decide(RecordSpec("a", last_modified=150), lookup)

    assert decision.action is ReconciliationAction.SKIP
    assert decision.reason is DecisionReason.DESTINATION_CURRENT
    assert decision.target_key is None


@pytest.mark.parametrize(
    ("destination_time", "source_time"),
    [(None, 150), (100, None), (None, None)],
)
def test_unknown_staleness_forces_update(
    destination_time: int | None, source_time: int | None
) -> None:
    lookup = FakeLookup(records={"a": FakeExisting(key=7, changed=destination_time)})

    decision = _decide(RecordSpec("a", last_modified=source_time), lookup)

    assert decision.action is ReconciliationAction.UPDATE
    assert decision.reason is DecisionReason.STALENESS_UNKNOWN
    assert decision.target_key == 7


def test_default_owner_fills_missing_owner_when_supported() -> None:
    decision = _decide(RecordSpec("a"), FakeLookup(), default_owner="admin")

    assert decision.owner == "admin"


def test_default_owner_ignored_when_record_has_owner() -> None:
    decision = _decide(RecordSpec("a", owner="u1"), FakeLookup(), default_owner="admin")

    assert decision.owner is None


def test_default_owner_ignored_when_type_has_no_ownership() -> None:
    decision = _decide(
        RecordSpec("t1", type_id="taxonomy_term"),
        FakeLookup(),
        default_owner="admin",
    )

    assert decision.owner is None


def test_skip_decisions_carry_no_owner() -> None:
    lookup = FakeLookup(records={"a": FakeExisting(key=1, changed=200)})

    decision = _decide(RecordSpec("a", last_modified=100), lookup, default_owner="admin")

    assert decision.action is ReconciliationAction.SKIP
    assert decision.owner is None


def test_lookup_errors_abort_with_lookup_failed() -> None:
    lookup = FakeLookup(error=ConnectionError("database gone"))

    with pytest.raises(LookupFailed) as excinfo:
        _decide(RecordSpec("a"), lookup)

    assert excinfo.value.identity == "a"
    assert "database gone" in str(excinfo.value)


def test_iter_decisions_is_lazy_and_follows_plan_order() -> None:
    index = make_index(RecordSpec("n1", references=("u1",)), RecordSpec("u1"))
    plan = plan_import(DependencyGraph.from_index(index))
    lookup = FakeLookup()
    engine = ReconciliationEngine(lookup=lookup)

    decisions = engine.iter_decisions(plan, index)
    assert lookup.queries == []

    first = next(decisions)
    assert first.identity == "u1"
    assert lookup.queries == ["u1"]

    assert [decision.identity for decision in decisions] == ["n1"]
    assert lookup.queries == ["u1", "n1"]


def test_reconcile_returns_one_decision_per_planned_identity() -> None:
    index = make_index(RecordSpec("a"), RecordSpec("b"), RecordSpec("c"))
    plan = plan_import(DependencyGraph.from_index(index))

    decisions = ReconciliationEngine(lookup=FakeLookup()).reconcile(plan, index)

    assert [decision.identity for decision in decisions] == list(plan.order)


def test_update_decision_requires_target_key() -> None:
    with pytest.raises(ValueError, match="requires a target key"):
        ReconciliationDecision(
            identity="a",
            type_id="node",
            action=ReconciliationAction.UPDATE,
            reason=DecisionReason.SOURCE_NEWER,
        )
