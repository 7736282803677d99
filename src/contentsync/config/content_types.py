"""Per-type destination capabilities.

Reconciliation needs to know, for each destination type, whether records
carry a modification time and an owner. Unknown types support neither, which
makes every existing record of such a type an unconditional update.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class ContentTypeDefinition:
    name: str
    tracks_changes: bool = False
    has_owner: bool = False
    has_file: bool = False


DEFAULT_CONTENT_TYPES: tuple[ContentTypeDefinition, ...] = (
    ContentTypeDefinition(name="user", tracks_changes=True),
    ContentTypeDefinition(name="file", tracks_changes=True, has_owner=True, has_file=True),
    ContentTypeDefinition(name="taxonomy_term", tracks_changes=True),
    ContentTypeDefinition(name="node", tracks_changes=True, has_owner=True),
    ContentTypeDefinition(name="media", tracks_changes=True, has_owner=True),
    ContentTypeDefinition(name="comment", tracks_changes=True, has_owner=True),
    ContentTypeDefinition(name="block_content", tracks_changes=True),
    ContentTypeDefinition(name="menu_link_content", tracks_changes=True),
    ContentTypeDefinition(name="paragraph"),
)


@dataclass(frozen=True, slots=True)
class ContentTypeRegistry:
    _definitions: Mapping[str, ContentTypeDefinition] = field(repr=False)

    @classmethod
    def from_definitions(cls, definitions: Iterable[ContentTypeDefinition]) -> ContentTypeRegistry:
        return cls(MappingProxyType({definition.name: definition for definition in definitions}))

    def definition_for(self, type_id: str) -> ContentTypeDefinition:
        definition = self._definitions.get(type_id)
        if definition is None:
            return ContentTypeDefinition(name=type_id)
        return definition

    def tracks_changes(self, type_id: str) -> bool:
        return self.definition_for(type_id).tracks_changes

    def has_owner(self, type_id: str) -> bool:
        return self.definition_for(type_id).has_owner

    def has_file(self, type_id: str) -> bool:
        return self.definition_for(type_id).has_file

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._definitions)


def get_content_type_registry() -> ContentTypeRegistry:
    return ContentTypeRegistry.from_definitions(DEFAULT_CONTENT_TYPES)
