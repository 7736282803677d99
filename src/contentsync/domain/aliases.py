"""URL alias import: keyed upsert without dependency concerns."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from contentsync.domain.ports.scanning import AliasSource
    from contentsync.domain.ports.unit_of_work import ImportUnitOfWork

log = logging.getLogger(__name__)


@dataclass(slots=True)
class AliasImportResult:
    imported: int = 0
    skipped: int = 0


def import_url_aliases(
    *,
    source: AliasSource,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
) -> AliasImportResult:
    """Add every alias whose (alias, langcode) pair is not yet present."""

    result = AliasImportResult()
    with unit_of_work_factory() as uow:
        repository = uow.repositories.aliases
        seen: set[tuple[str, str]] = set()
        for alias in source.aliases():
            key = (alias.alias, alias.langcode)
            if key in seen or repository.exists(alias=alias.alias, langcode=alias.langcode):
                result.skipped += 1
                continue
            repository.add(alias)
            seen.add(key)
            result.imported += 1
        uow.commit()

    log.info("Imported %s aliases, skipped %s", result.imported, result.skipped)
    return result
