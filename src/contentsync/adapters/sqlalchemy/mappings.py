"""SQLAlchemy mapping metadata for the destination store."""

from __future__ import annotations

import logging
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    Integer,
    String,
    Table,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers

from contentsync.domain.model import ContentEntity, UrlAlias

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

content_record_table = Table(
    "content_record",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("uuid", String(128), nullable=False, index=True),
    Column("type_id", String(64), nullable=False, index=True),
    Column("changed", Integer, nullable=True),
    Column("owner", String(128), nullable=True),
    Column("revision", Integer, nullable=False, default=1),
    Column("payload", JSON, nullable=False, default=dict),
    UniqueConstraint("type_id", "uuid"),
)

url_alias_table = Table(
    "url_alias",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("source", String(255), nullable=False),
    Column("alias", String(255), nullable=False),
    Column("langcode", String(12), nullable=False, default="und"),
    UniqueConstraint("alias", "langcode"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(ContentEntity, content_record_table)
    mapper_registry.map_imperatively(UrlAlias, url_alias_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
