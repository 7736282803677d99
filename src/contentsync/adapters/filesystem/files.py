"""Copy file binaries referenced by ``file`` records into the destination."""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

log = logging.getLogger(__name__)


class FileMaterializer:
    """Create missing destination files from the snapshot's ``files`` directory.

    File URIs look like ``public://images/logo.png``; the scheme is dropped and
    the remainder is resolved below both the snapshot and destination roots.
    """

    def __init__(self, snapshot_files_dir: Path, destination_files_dir: Path) -> None:
        self.snapshot_files_dir = snapshot_files_dir
        self.destination_files_dir = destination_files_dir

    def is_missing(self, uri: str) -> bool:
        return not _contained(self.destination_files_dir, relative_file_path(uri)).exists()

    def materialize(self, uri: str) -> int:
        """Return ``1`` when the binary had to be copied, ``0`` when present."""

        relative = relative_file_path(uri)
        destination = _contained(self.destination_files_dir, relative)
        if destination.exists():
            return 0

        source = _contained(self.snapshot_files_dir, relative)
        if not source.is_file():
            raise FileNotFoundError(f"File {uri} is missing from the snapshot ({source})")

        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
        log.info("Created missing file %s", destination)
        return 1


def relative_file_path(uri: str) -> str:
    _, separator, remainder = uri.partition("://")
    relative = remainder if separator else uri
    relative = relative.lstrip("/")
    if not relative:
        raise ValueError(f"File URI has no path: {uri}")
    return relative


def _contained(root: Path, relative: str) -> Path:
    resolved_root = root.resolve()
    candidate = (resolved_root / relative).resolve()
    if not candidate.is_relative_to(resolved_root):
        raise ValueError(f"File path escapes {resolved_root}: {relative}")
    return candidate
