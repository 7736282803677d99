"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select

from contentsync.adapters.sqlalchemy.mappings import content_record_table, url_alias_table
from contentsync.config.content_types import ContentTypeRegistry, get_content_type_registry
from contentsync.domain.model import ContentEntity, UrlAlias

if TYPE_CHECKING:
    from collections.abc import Hashable

    from sqlalchemy.orm import Session


@dataclass(frozen=True, slots=True)
class StoredRecord:
    """Existing-record handle returned by identity lookups."""

    key: int
    changed: int | None
    tracks_changes: bool

    def last_modified(self) -> int | None:
        return self.changed if self.tracks_changes else None

    def internal_key(self) -> int:
        return self.key


class SqlAlchemyContentRepository:
    def __init__(self, session: Session, registry: ContentTypeRegistry | None = None) -> None:
        self.session = session
        self.registry = registry or get_content_type_registry()

    def find_by_identity(self, identity: str, *, type_id: str) -> StoredRecord | None:
        stmt = (
            select(content_record_table.c.id, content_record_table.c.changed)
            .where(content_record_table.c.uuid == identity)
            .where(content_record_table.c.type_id == type_id)
            .limit(1)
        )
        row = self.session.execute(stmt).one_or_none()
        if row is None:
            return None
        return StoredRecord(
            key=row.id,
            changed=row.changed,
            tracks_changes=self.registry.tracks_changes(type_id),
        )

    def supports_ownership(self, type_id: str) -> bool:
        return self.registry.has_owner(type_id)

    def get(self, key: Hashable) -> ContentEntity | None:
        return self.session.get(ContentEntity, key)

    def add(self, entity: ContentEntity) -> None:
        self.session.add(entity)


class SqlAlchemyUrlAliasRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, *, alias: str, langcode: str) -> bool:
        stmt = (
            select(url_alias_table.c.id)
            .where(url_alias_table.c.alias == alias)
            .where(url_alias_table.c.langcode == langcode)
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none() is not None

    def add(self, alias: UrlAlias) -> None:
        self.session.add(alias)
