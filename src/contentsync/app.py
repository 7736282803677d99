"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from contentsync.adapters.filesystem import (
    FileMaterializer,
    FilesystemScanner,
    JsonAliasSource,
    JsonRecordSource,
)
from contentsync.adapters.sqlalchemy.driver import SqlAlchemyImportDriver
from contentsync.adapters.sqlalchemy.unit_of_work import (
    BaseSqlAlchemyUnitOfWork,
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from contentsync.config import get_content_type_registry, get_storage_config
from contentsync.config.storage import FILES_DIRNAME
from contentsync.domain.aliases import AliasImportResult, import_url_aliases
from contentsync.domain.batch import (
    ImportPreview,
    PreparedBatch,
    apply_import,
    preview_import,
    prepare_batch,
)
from contentsync.domain.ports.unit_of_work import ImportUnitOfWork
from contentsync.domain.reconciliation import BatchResult, DuplicatePolicy, ImportDriver

if TYPE_CHECKING:
    from pathlib import Path

    from contentsync.config import ContentTypeRegistry, StorageConfig
    from contentsync.domain.ports.scanning import AliasSource, RecordSource, Scanner

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]
DriverFactory = Callable[[ImportUnitOfWork], ImportDriver]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def plan_content_import(
    *,
    content_dir: Path | None = None,
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.STRICT,
    scanner: Scanner | None = None,
    source: RecordSource | None = None,
) -> PreparedBatch:
    """Scan the snapshot directory and compute the import order."""

    storage = get_storage_config(content_dir=content_dir)
    registry = get_content_type_registry()
    effective_scanner = scanner or FilesystemScanner(
        storage.resolve_content_dir(), type_ids=registry.names
    )
    log.info(
        "Planning import from %s (duplicates=%s)",
        storage.resolve_content_dir(),
        duplicate_policy,
    )
    return prepare_batch(
        scanner=effective_scanner,
        source=source or JsonRecordSource(),
        duplicate_policy=duplicate_policy,
    )


def preview_content_import(
    batch: PreparedBatch,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    driver_factory: DriverFactory | None = None,
    content_dir: Path | None = None,
    default_owner: str | None = None,
) -> ImportPreview:
    """Reconcile ``batch`` against the destination without writing."""

    _ensure_started()
    preview = preview_import(
        batch,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyImportUnitOfWork,
        driver_factory=driver_factory or _default_driver_factory(content_dir),
        default_owner=default_owner,
    )
    log.info(
        "Preview: create=%s, update=%s, skip=%s, missing files=%s",
        preview.result.created,
        preview.result.updated,
        preview.result.skipped,
        preview.result.materialized_dependencies,
    )
    return preview


def apply_content_import(
    batch: PreparedBatch,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    driver_factory: DriverFactory | None = None,
    content_dir: Path | None = None,
    default_owner: str | None = None,
    fail_fast: bool = False,
    should_cancel: Callable[[], bool] | None = None,
) -> BatchResult:
    """Apply ``batch`` to the destination store and commit the outcome."""

    _ensure_started()
    return apply_import(
        batch,
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyImportUnitOfWork,
        driver_factory=driver_factory or _default_driver_factory(content_dir),
        default_owner=default_owner,
        fail_fast=fail_fast,
        should_cancel=should_cancel,
    )


def import_aliases(
    *,
    content_dir: Path | None = None,
    source: AliasSource | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> AliasImportResult:
    """Import URL aliases from the snapshot's alias file."""

    _ensure_started()
    storage = get_storage_config(content_dir=content_dir)
    return import_url_aliases(
        source=source or JsonAliasSource(storage.alias_file()),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyImportUnitOfWork,
    )


def build_sqlalchemy_driver_factory(
    *,
    storage: StorageConfig,
    registry: ContentTypeRegistry,
    source: RecordSource | None = None,
) -> DriverFactory:
    """Return a factory binding a SQLAlchemy driver to each unit of work."""

    record_source = source or JsonRecordSource()
    materializer = FileMaterializer(
        storage.resolve_content_dir() / FILES_DIRNAME,
        storage.files_dir(),
    )

    def factory(uow: ImportUnitOfWork) -> ImportDriver:
        if not isinstance(uow, BaseSqlAlchemyUnitOfWork):
            raise TypeError(
                f"SQLAlchemy import driver requires a SQLAlchemy unit of work, got {type(uow)!r}"
            )
        return SqlAlchemyImportDriver(
            uow.session,
            source=record_source,
            registry=registry,
            repository=uow.repositories.content,
            materializer=materializer,
        )

    return factory


def _default_driver_factory(content_dir: Path | None) -> DriverFactory:
    return build_sqlalchemy_driver_factory(
        storage=get_storage_config(content_dir=content_dir),
        registry=get_content_type_registry(),
    )
