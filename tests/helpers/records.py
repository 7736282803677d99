"""Reusable fakes and builders for import batch tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from contentsync.domain.ports.unit_of_work import ImportRepositories
from contentsync.domain.reconciliation import (
    ApplyFailed,
    ApplyOutcome,
    DecodedRecord,
    DependencyGraph,
    RecordDescriptor,
    RecordIndex,
    SourceLocation,
    build_record_index,
)

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Mapping
    from types import TracebackType

    from contentsync.domain.model import ContentEntity, UrlAlias
    from contentsync.domain.reconciliation import ReconciliationDecision


def location(name: str) -> SourceLocation:
    return SourceLocation(uri=f"memory://{name}", name=name)


@dataclass(frozen=True, slots=True)
class RecordSpec:
    """In-memory description of one snapshot record."""

    identity: str
    type_id: str = "node"
    references: tuple[str, ...] = ()
    last_modified: int | None = None
    owner: str | None = None


class FakeDecoder:
    """Decode hook answering from ``RecordSpec`` entries keyed by location name."""

    def __init__(self, specs: Iterable[RecordSpec]) -> None:
        self._specs: dict[str, RecordSpec] = {}
        for spec in specs:
            self._specs[f"{spec.identity}.json"] = spec
        self.calls: list[SourceLocation] = []

    def __call__(self, source: SourceLocation) -> DecodedRecord:
        self.calls.append(source)
        spec = self._specs[source.name]
        return DecodedRecord(
            identity=spec.identity,
            references=spec.references,
            last_modified=spec.last_modified,
            owner=spec.owner,
        )

    def locations_by_type(self) -> dict[str, tuple[SourceLocation, ...]]:
        grouped: dict[str, list[SourceLocation]] = {}
        for name, spec in self._specs.items():
            grouped.setdefault(spec.type_id, []).append(location(name))
        return {type_id: tuple(locations) for type_id, locations in grouped.items()}


def make_index(*specs: RecordSpec) -> RecordIndex:
    decoder = FakeDecoder(specs)
    return build_record_index(decoder.locations_by_type(), decoder)


def make_graph(
    edges: Iterable[tuple[str, str]], *, vertices: Iterable[str] = ()
) -> DependencyGraph:
    graph = DependencyGraph()
    for identity in vertices:
        graph.add_vertex(identity)
    for source, target in edges:
        graph.add_edge(source, target)
    graph.freeze()
    return graph


@dataclass(frozen=True, slots=True)
class FakeExisting:
    key: Hashable
    changed: int | None = None

    def last_modified(self) -> int | None:
        return self.changed

    def internal_key(self) -> Hashable:
        return self.key


@dataclass
class FakeLookup:
    """Destination lookup backed by a dict of identity -> existing record."""

    records: dict[str, FakeExisting] = field(default_factory=dict[str, FakeExisting])
    ownership: frozenset[str] = frozenset({"node"})
    error: Exception | None = None
    queries: list[str] = field(default_factory=list[str])

    def find_by_identity(self, identity: str, *, type_id: str) -> FakeExisting | None:
        self.queries.append(identity)
        if self.error is not None:
            raise self.error
        return self.records.get(identity)

    def supports_ownership(self, type_id: str) -> bool:
        return type_id in self.ownership


class RecordingDriver:
    """Import driver that records applied decisions in memory.

    Created records become visible to ``lookup`` immediately, which mirrors a
    real store where a later lookup sees earlier writes of the same batch.
    ``missing`` holds dependencies of skipped records that ``restore`` recreates
    once.
    """

    def __init__(
        self,
        lookup: FakeLookup | None = None,
        *,
        failing: Mapping[str, str] | None = None,
        materialized: Mapping[str, int] | None = None,
        missing: Mapping[str, int] | None = None,
    ) -> None:
        self.lookup = lookup
        self.failing = dict(failing or {})
        self.materialized = dict(materialized or {})
        self.missing = dict(missing or {})
        self.applied: list[ReconciliationDecision] = []
        self.restored: list[str] = []
        self._next_key = 1000

    def apply(
        self, decision: ReconciliationDecision, descriptor: RecordDescriptor
    ) -> ApplyOutcome:
        if decision.identity in self.failing:
            raise ApplyFailed(decision.identity, self.failing[decision.identity])
        self.applied.append(decision)

        key = decision.target_key
        if key is None:
            key = self._next_key
            self._next_key += 1
        if self.lookup is not None:
            self.lookup.records[decision.identity] = FakeExisting(
                key=key, changed=descriptor.last_modified
            )
        return ApplyOutcome(
            key=key,
            materialized_dependencies=self.materialized.get(decision.identity, 0),
        )

    @property
    def applied_identities(self) -> list[str]:
        return [decision.identity for decision in self.applied]

    def restore(self, decision: ReconciliationDecision, descriptor: RecordDescriptor) -> int:
        if decision.identity in self.failing:
            raise ApplyFailed(decision.identity, self.failing[decision.identity])
        self.restored.append(decision.identity)
        return self.missing.pop(decision.identity, 0)

    def missing_dependencies(self, descriptor: RecordDescriptor) -> int:
        return self.missing.get(descriptor.identity, 0)


class FakeScanner:
    def __init__(self, decoder: FakeDecoder) -> None:
        self.decoder = decoder

    def scan(self) -> dict[str, tuple[SourceLocation, ...]]:
        return self.decoder.locations_by_type()


class FakeRecordSource:
    """Record source port over ``RecordSpec`` entries."""

    def __init__(self, *specs: RecordSpec) -> None:
        self.decoder = FakeDecoder(specs)

    def decode(self, source: SourceLocation) -> DecodedRecord:
        return self.decoder(source)

    def load(self, source: SourceLocation) -> dict[str, object]:
        decoded = self.decoder(source)
        return {"uuid": [{"value": decoded.identity}]}

    def scanner(self) -> FakeScanner:
        return FakeScanner(self.decoder)


class FakeContentRepository(FakeLookup):
    def get(self, key: Hashable) -> ContentEntity | None:
        return None

    def add(self, entity: ContentEntity) -> None:
        raise AssertionError("content is written through the import driver")


class FakeAliasRepository:
    def __init__(self, existing: Iterable[tuple[str, str]] = ()) -> None:
        self.existing = set(existing)
        self.items: list[UrlAlias] = []

    def exists(self, *, alias: str, langcode: str) -> bool:
        return (alias, langcode) in self.existing

    def add(self, alias: UrlAlias) -> None:
        self.items.append(alias)
        self.existing.add((alias.alias, alias.langcode))


class FakeImportUnitOfWork:
    def __init__(
        self,
        content: FakeContentRepository | None = None,
        aliases: FakeAliasRepository | None = None,
    ) -> None:
        self._repositories = ImportRepositories(
            content=content or FakeContentRepository(),
            aliases=aliases or FakeAliasRepository(),
        )
        self.committed = False
        self.rolled_back = False

    @property
    def repositories(self) -> ImportRepositories:
        return self._repositories

    def __enter__(self) -> FakeImportUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True
