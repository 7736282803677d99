from __future__ import annotations

from contentsync.domain.aliases import import_url_aliases
from contentsync.domain.model import UrlAlias
from tests.helpers.records import FakeAliasRepository, FakeImportUnitOfWork


class _AliasSource:
    def __init__(self, *aliases: UrlAlias) -> None:
        self._aliases = aliases

    def aliases(self) -> tuple[UrlAlias, ...]:
        return self._aliases


def test_import_adds_new_aliases_and_skips_existing() -> None:
    repository = FakeAliasRepository(existing=[("/about", "en")])
    uow = FakeImportUnitOfWork(aliases=repository)
    source = _AliasSource(
        UrlAlias(source="/node/1", alias="/about", langcode="en"),
        UrlAlias(source="/node/2", alias="/contact", langcode="en"),
        UrlAlias(source="/node/1", alias="/about", langcode="de"),
    )

    result = import_url_aliases(source=source, unit_of_work_factory=lambda: uow)

    assert (result.imported, result.skipped) == (2, 1)
    assert [(alias.alias, alias.langcode) for alias in repository.items] == [
        ("/contact", "en"),
        ("/about", "de"),
    ]
    assert uow.committed


def test_import_skips_repeated_alias_within_one_file() -> None:
    repository = FakeAliasRepository()
    source = _AliasSource(
        UrlAlias(source="/node/1", alias="/news"),
        UrlAlias(source="/node/2", alias="/news"),
    )

    result = import_url_aliases(
        source=source,
        unit_of_work_factory=lambda: FakeImportUnitOfWork(aliases=repository),
    )

    assert (result.imported, result.skipped) == (1, 1)
    assert repository.items[0].source == "/node/1"
