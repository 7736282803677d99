"""Snapshot and destination storage configuration helpers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "contentsync"
DEFAULT_DB_FILENAME: Final[str] = "contentsync.db"
DEFAULT_CONTENT_DIRNAME: Final[str] = "content"
FILES_DIRNAME: Final[str] = "files"
ALIAS_DIRNAME: Final[str] = "aliases"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Where the export snapshot is read from and destination data lives."""

    content_dir: Path
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    files_dirname: str = FILES_DIRNAME

    def resolve_content_dir(self) -> Path:
        return self.content_dir.expanduser().resolve()

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def ensure_data_dir(self) -> Path:
        data_dir = self.resolve_data_dir()
        data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir

    def database_path(self, *, ensure: bool = True) -> Path:
        base = self.ensure_data_dir() if ensure else self.resolve_data_dir()
        return base / self.database_filename

    def files_dir(self) -> Path:
        return self.resolve_data_dir() / self.files_dirname

    def alias_file(self) -> Path:
        return self.resolve_content_dir() / ALIAS_DIRNAME / f"{ALIAS_DIRNAME}.json"

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    if os.name == "nt":
        base = os.getenv("LOCALAPPDATA")
        base_path = Path(base) if base else (Path.home() / "AppData" / "Local")
    else:
        base = os.getenv("XDG_DATA_HOME")
        base_path = Path(base) if base else (Path.home() / ".local" / "share")
    return (base_path / APP_DIR_NAME).expanduser().resolve()


def get_storage_config(*, content_dir: Path | None = None) -> StorageConfig:
    env_content = os.getenv("CONTENTSYNC_CONTENT_DIR")
    env_data = os.getenv("CONTENTSYNC_DATA_DIR")
    if content_dir is None:
        content_dir = Path(env_content) if env_content else Path(DEFAULT_CONTENT_DIRNAME)
    data_dir = Path(env_data) if env_data else _default_data_dir()
    return StorageConfig(content_dir=content_dir, data_dir=data_dir)


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri())
