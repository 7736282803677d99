"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import (
    ContentRepository,
    DestinationLookup,
    ExistingRecord,
    UrlAliasRepository,
)
from .scanning import AliasSource, RecordSource, Scanner
from .unit_of_work import (
    ImportRepositories,
    ImportUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "AliasSource",
    "ContentRepository",
    "DestinationLookup",
    "ExistingRecord",
    "ImportRepositories",
    "ImportUnitOfWork",
    "RecordSource",
    "RepositoryCollection",
    "Scanner",
    "UnitOfWork",
    "UrlAliasRepository",
]
