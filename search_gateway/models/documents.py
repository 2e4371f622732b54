"""Indexed document kinds and their static search descriptors.

Each kind declares, once, everything the gateway needs to know about it:
the physical index name, the pydantic model its hits deserialise into, the
analyzer assigned to every field, the fields the search phrase runs against,
and which kind it cross-references through the shared ``market`` field.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from search_gateway.core.errors import ConfigurationError
from search_gateway.models.enums import AnalyzerKind, DocumentKind


class _Document(BaseModel):
    # Field aliases are the engine's field names (camelCase, as stored in _source)
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str | None = None


class PropertyDocument(_Document):
    name: str | None = None
    former_name: str | None = None
    street_address: str | None = None
    city: str | None = None
    market: str | None = None
    state: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class ManagementDocument(_Document):
    name: str | None = None
    market: str | None = None
    state: str | None = None


Document = PropertyDocument | ManagementDocument


@dataclass(frozen=True)
class KindDescriptor:
    kind: DocumentKind
    index_name: str | None
    model: type[_Document]
    fields: dict[str, AnalyzerKind]
    phrase_fields: tuple[str, ...]
    cross_reference: DocumentKind

    def has_field(self, field_name: str) -> bool:
        return field_name in self.fields


DESCRIPTORS: dict[DocumentKind, KindDescriptor] = {
    DocumentKind.PROPERTY: KindDescriptor(
        kind=DocumentKind.PROPERTY,
        index_name="properties",
        model=PropertyDocument,
        fields={
            "id": AnalyzerKind.KEYWORD,
            "name": AnalyzerKind.FULL_TEXT,
            "formerName": AnalyzerKind.FULL_TEXT,
            "streetAddress": AnalyzerKind.PARTIAL_TEXT,
            "city": AnalyzerKind.PARTIAL_TEXT,
            "market": AnalyzerKind.FULL_TEXT,
            "state": AnalyzerKind.STANDARD_ENGLISH,
            "latitude": AnalyzerKind.NUMERIC,
            "longitude": AnalyzerKind.NUMERIC,
        },
        phrase_fields=("name", "formerName", "streetAddress"),
        cross_reference=DocumentKind.MANAGEMENT,
    ),
    DocumentKind.MANAGEMENT: KindDescriptor(
        kind=DocumentKind.MANAGEMENT,
        index_name="managements",
        model=ManagementDocument,
        fields={
            "id": AnalyzerKind.KEYWORD,
            "name": AnalyzerKind.FULL_TEXT,
            "market": AnalyzerKind.FULL_TEXT,
            "state": AnalyzerKind.STANDARD_ENGLISH,
        },
        phrase_fields=("name",),
        cross_reference=DocumentKind.PROPERTY,
    ),
}

_KIND_BY_MODEL: dict[type[_Document], DocumentKind] = {
    descriptor.model: kind for kind, descriptor in DESCRIPTORS.items()
}


def describe(kind: DocumentKind) -> KindDescriptor:
    try:
        return DESCRIPTORS[kind]
    except KeyError:
        raise ConfigurationError(f"No descriptor declared for document kind {kind!r}") from None


@lru_cache(maxsize=None)
def resolve_index_name(kind: DocumentKind) -> str:
    """Physical index name for a kind, derived from its declared display name."""
    index_name = describe(kind).index_name
    if not index_name:
        raise ConfigurationError(f"Document kind {kind.value!r} has no declared index name")
    return index_name


def kind_of(document: Document) -> DocumentKind:
    try:
        return _KIND_BY_MODEL[type(document)]
    except KeyError:
        raise ConfigurationError(
            f"{type(document).__name__} is not a registered document kind"
        ) from None


def to_source(document: Document) -> dict:
    """Engine-side ``_source`` body for a document."""
    return document.model_dump(by_alias=True, exclude_none=True)
