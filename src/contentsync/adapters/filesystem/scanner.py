"""Snapshot directory scanning and JSON decoding.

A snapshot is laid out as ``<content_dir>/<type_id>/<name>.json``. The
``aliases`` and ``files`` directories are reserved for URL aliases and file
binaries and are never scanned as record types.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Final, cast

from pydantic import ValidationError

from contentsync.config.storage import ALIAS_DIRNAME, FILES_DIRNAME
from contentsync.domain.model import UrlAlias
from contentsync.domain.reconciliation import DecodedRecord, MalformedRecord, SourceLocation

from .schema import ALIAS_DOCUMENT, RecordDocument

if TYPE_CHECKING:
    from collections.abc import Iterable

log = logging.getLogger(__name__)

RESERVED_DIRNAMES: Final[frozenset[str]] = frozenset({ALIAS_DIRNAME, FILES_DIRNAME})
RECORD_SUFFIX: Final[str] = ".json"


class FilesystemScanner:
    def __init__(self, content_dir: Path, *, type_ids: Iterable[str] | None = None) -> None:
        self.content_dir = content_dir
        self._type_ids = frozenset(type_ids) if type_ids is not None else None

    def scan(self) -> dict[str, tuple[SourceLocation, ...]]:
        if not self.content_dir.is_dir():
            log.warning("Content directory %s does not exist", self.content_dir)
            return {}

        locations_by_type: dict[str, tuple[SourceLocation, ...]] = {}
        for type_dir in sorted(self.content_dir.iterdir()):
            if not type_dir.is_dir() or type_dir.name in RESERVED_DIRNAMES:
                continue
            if self._type_ids is not None and type_dir.name not in self._type_ids:
                log.debug("Ignoring unknown record type directory %s", type_dir)
                continue
            locations = tuple(
                SourceLocation(uri=str(path), name=path.name)
                for path in sorted(type_dir.glob(f"*{RECORD_SUFFIX}"))
                if path.is_file()
            )
            if locations:
                locations_by_type[type_dir.name] = locations
        return locations_by_type


class JsonRecordSource:
    """Decode hooks for JSON export documents stored on disk."""

    def decode(self, location: SourceLocation) -> DecodedRecord:
        document = self.document(location)
        return DecodedRecord(
            identity=document.identity,
            references=document.references,
            last_modified=document.last_modified,
            owner=document.owner,
            file_uri=document.file_uri,
        )

    def document(self, location: SourceLocation) -> RecordDocument:
        text = _read(location)
        try:
            return RecordDocument.model_validate_json(text)
        except ValidationError as exc:
            raise MalformedRecord(location, _summarize(exc)) from exc

    def load(self, location: SourceLocation) -> dict[str, object]:
        text = _read(location)
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedRecord(location, str(exc)) from exc
        if not isinstance(payload, dict):
            raise MalformedRecord(location, "document is not a JSON object")
        return cast(dict[str, object], payload)


class JsonAliasSource:
    def __init__(self, path: Path) -> None:
        self.path = path

    def aliases(self) -> tuple[UrlAlias, ...]:
        if not self.path.is_file():
            log.info("No alias file at %s", self.path)
            return ()
        entries = ALIAS_DOCUMENT.validate_json(self.path.read_bytes())
        return tuple(
            UrlAlias(source=entry.source, alias=entry.alias, langcode=entry.langcode)
            for entry in entries.values()
        )


def _read(location: SourceLocation) -> str:
    try:
        return Path(location.uri).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise MalformedRecord(location, str(exc)) from exc


def _summarize(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    first = errors[0]
    where = ".".join(str(part) for part in first["loc"]) or "document"
    suffix = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
    return f"{where}: {first['msg']}{suffix}"
