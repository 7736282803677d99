"""Pydantic models for HAL-style JSON export documents."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class ExportBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class StringValue(ExportBaseModel):
    value: str


class IntValue(ExportBaseModel):
    value: int


class OwnerReference(ExportBaseModel):
    target_uuid: str | None = None


class EmbeddedReference(ExportBaseModel):
    uuid: list[StringValue] = Field(default_factory=list)


class RecordDocument(BaseModel):
    """One exported record.

    Only the fields needed for ordering and reconciliation are typed; every
    other key is kept as an extra and written through unchanged.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    uuid: list[StringValue] = Field(min_length=1)
    changed: list[IntValue] = Field(default_factory=list)
    uid: list[OwnerReference] = Field(default_factory=list)
    uri: list[StringValue] = Field(default_factory=list)
    embedded: dict[str, list[EmbeddedReference]] = Field(
        default_factory=dict,
        alias="_embedded",
    )

    @property
    def identity(self) -> str:
        return self.uuid[0].value

    @property
    def last_modified(self) -> int | None:
        return self.changed[0].value if self.changed else None

    @property
    def owner(self) -> str | None:
        for reference in self.uid:
            if reference.target_uuid:
                return reference.target_uuid
        return None

    @property
    def file_uri(self) -> str | None:
        return self.uri[0].value if self.uri else None

    @property
    def references(self) -> tuple[str, ...]:
        return tuple(
            item.uuid[0].value
            for relation in self.embedded.values()
            for item in relation
            if item.uuid
        )


class AliasEntry(ExportBaseModel):
    source: str
    alias: str
    langcode: str = "und"


ALIAS_DOCUMENT = TypeAdapter(dict[str, AliasEntry])
