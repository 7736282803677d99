"""Filesystem adapter: snapshot scanning, JSON decoding and file binaries."""

from __future__ import annotations

from .files import FileMaterializer, relative_file_path
from .scanner import FilesystemScanner, JsonAliasSource, JsonRecordSource

__all__ = [
    "FileMaterializer",
    "FilesystemScanner",
    "JsonAliasSource",
    "JsonRecordSource",
    "relative_file_path",
]
