"""SQLAlchemy adapter package for the destination store."""

from __future__ import annotations

from .driver import SqlAlchemyImportDriver
from .mappings import (
    content_record_table,
    create_all_tables,
    mapper_registry,
    start_mappers,
    url_alias_table,
)
from .repositories import (
    SqlAlchemyContentRepository,
    SqlAlchemyUrlAliasRepository,
    StoredRecord,
)
from .unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    StartupError,
    enable_sqlite_savepoints,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyContentRepository",
    "SqlAlchemyImportDriver",
    "SqlAlchemyImportUnitOfWork",
    "SqlAlchemyUrlAliasRepository",
    "StartupError",
    "StoredRecord",
    "content_record_table",
    "create_all_tables",
    "enable_sqlite_savepoints",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
    "url_alias_table",
]
