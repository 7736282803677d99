from __future__ import annotations

from pathlib import Path

import pytest  # noqa: TC002

from contentsync.config import storage


def test_storage_config_reads_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CONTENTSYNC_CONTENT_DIR", str(tmp_path / "export"))
    monkeypatch.setenv("CONTENTSYNC_DATA_DIR", str(tmp_path / "data"))

    config = storage.get_storage_config()

    assert config.resolve_content_dir() == (tmp_path / "export").resolve()
    assert config.files_dir() == (tmp_path / "data" / storage.FILES_DIRNAME).resolve()
    assert config.alias_file() == (tmp_path / "export" / "aliases" / "aliases.json").resolve()


def test_explicit_content_dir_wins(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CONTENTSYNC_CONTENT_DIR", str(tmp_path / "export"))

    config = storage.get_storage_config(content_dir=tmp_path / "other")

    assert config.content_dir == tmp_path / "other"


def test_content_dir_defaults_to_relative_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CONTENTSYNC_CONTENT_DIR", raising=False)

    config = storage.get_storage_config()

    assert config.content_dir == Path(storage.DEFAULT_CONTENT_DIRNAME)


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert storage.get_database_config().uri == "sqlite:///override.db"


def test_database_uri_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("CONTENTSYNC_DATA_DIR", str(tmp_path / "data-dir"))

    uri = storage.get_database_config().uri

    expected_path = (tmp_path / "data-dir" / storage.DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()
