from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session, sessionmaker

from contentsync.adapters.sqlalchemy import (
    SqlAlchemyImportUnitOfWork,
    create_all_tables,
    enable_sqlite_savepoints,
    shutdown,
    start_mappers,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence
    from pathlib import Path


class SnapshotBuilder:
    """Write export documents below a temporary content directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def record(
        self,
        type_id: str,
        identity: str,
        *,
        changed: int | None = None,
        owner: str | None = None,
        references: Sequence[str] = (),
        filename: str | None = None,
        **fields: object,
    ) -> Path:
        document: dict[str, object] = {"uuid": [{"value": identity}]}
        if changed is not None:
            document["changed"] = [{"value": changed}]
        if owner is not None:
            document["uid"] = [{"target_uuid": owner}]
        if references:
            document["_embedded"] = {
                "related": [{"uuid": [{"value": reference}]} for reference in references]
            }
        document.update(fields)
        return self.raw(type_id, filename or f"{identity}.json", json.dumps(document))

    def raw(self, type_id: str, filename: str, text: str) -> Path:
        path = self.root / type_id / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    def binary(self, relative: str, content: bytes = b"binary") -> Path:
        path = self.root / "files" / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path

    def aliases(self, entries: dict[str, dict[str, str]]) -> Path:
        path = self.root / "aliases" / "aliases.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(entries), encoding="utf-8")
        return path


@pytest.fixture
def snapshot(tmp_path: Path) -> SnapshotBuilder:
    return SnapshotBuilder(tmp_path / "content")


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    enable_sqlite_savepoints(engine)
    start_mappers()
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def sqlite_session(sqlite_engine: Engine) -> Iterator[Session]:
    session_factory = sessionmaker(bind=sqlite_engine, future=True)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def sqlite_unit_of_work(
    sqlite_engine: Engine,
) -> Iterator[Callable[[], SqlAlchemyImportUnitOfWork]]:
    startup(engine=sqlite_engine, force=True)

    def factory() -> SqlAlchemyImportUnitOfWork:
        return SqlAlchemyImportUnitOfWork()

    try:
        yield factory
    finally:
        shutdown()
