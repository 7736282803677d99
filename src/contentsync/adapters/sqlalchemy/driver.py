"""Import driver writing reconciliation decisions through a SQLAlchemy session.

Each decision is applied inside a SAVEPOINT so a failing record is rolled
back on its own and the batch can continue. The surrounding unit of work owns
the outer transaction and the final commit.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from contentsync.adapters.sqlalchemy.repositories import SqlAlchemyContentRepository
from contentsync.domain.model import ContentEntity
from contentsync.domain.reconciliation import (
    ApplyFailed,
    ApplyOutcome,
    MalformedRecord,
    ReconciliationAction,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from contentsync.adapters.filesystem.files import FileMaterializer
    from contentsync.config.content_types import ContentTypeRegistry
    from contentsync.domain.ports.persistence import ContentRepository
    from contentsync.domain.ports.scanning import RecordSource
    from contentsync.domain.reconciliation import ReconciliationDecision, RecordDescriptor

log = logging.getLogger(__name__)


class SqlAlchemyImportDriver:
    def __init__(
        self,
        session: Session,
        *,
        source: RecordSource,
        registry: ContentTypeRegistry,
        repository: ContentRepository | None = None,
        materializer: FileMaterializer | None = None,
    ) -> None:
        self.session = session
        self.source = source
        self.registry = registry
        self.repository = repository or SqlAlchemyContentRepository(session, registry)
        self.materializer = materializer

    def apply(
        self, decision: ReconciliationDecision, descriptor: RecordDescriptor
    ) -> ApplyOutcome:
        if decision.action is ReconciliationAction.SKIP:
            raise ValueError(f"Skip decisions are not applied ({decision.identity})")

        try:
            payload = self.source.load(descriptor.location)
        except MalformedRecord as exc:
            raise ApplyFailed(decision.identity, str(exc)) from exc

        try:
            with self.session.begin_nested():
                entity = self._write(decision, descriptor, payload)
                self.session.flush()
                materialized = self._materialize(descriptor)
        except (SQLAlchemyError, OSError, ValueError) as exc:
            raise ApplyFailed(decision.identity, str(exc)) from exc

        return ApplyOutcome(key=entity.id, materialized_dependencies=materialized)

    def restore(self, decision: ReconciliationDecision, descriptor: RecordDescriptor) -> int:
        try:
            return self._materialize(descriptor)
        except (OSError, ValueError) as exc:
            raise ApplyFailed(decision.identity, str(exc)) from exc

    def missing_dependencies(self, descriptor: RecordDescriptor) -> int:
        uri = self._file_uri(descriptor)
        if uri is None or self.materializer is None:
            return 0
        try:
            return int(self.materializer.is_missing(uri))
        except ValueError as exc:
            log.warning("Cannot check file of record %s: %s", descriptor.identity, exc)
            return 0

    def _write(
        self,
        decision: ReconciliationDecision,
        descriptor: RecordDescriptor,
        payload: dict[str, object],
    ) -> ContentEntity:
        owner = descriptor.owner or decision.owner

        if decision.action is ReconciliationAction.CREATE:
            entity = ContentEntity(
                uuid=decision.identity,
                type_id=decision.type_id,
                payload=payload,
                changed=descriptor.last_modified,
                owner=owner,
            )
            self.repository.add(entity)
            return entity

        entity = self.repository.get(decision.target_key)
        if entity is None:
            raise ApplyFailed(
                decision.identity,
                f"destination record {decision.target_key} disappeared before update",
            )
        # Same key, same revision: the write replaces content in place.
        entity.payload = payload
        entity.changed = descriptor.last_modified
        if owner is not None:
            entity.owner = owner
        return entity

    def _materialize(self, descriptor: RecordDescriptor) -> int:
        uri = self._file_uri(descriptor)
        if uri is None or self.materializer is None:
            return 0
        return self.materializer.materialize(uri)

    def _file_uri(self, descriptor: RecordDescriptor) -> str | None:
        if not self.registry.has_file(descriptor.type_id):
            return None
        if descriptor.file_uri is None:
            log.debug("File record %s carries no uri", descriptor.identity)
        return descriptor.file_uri
