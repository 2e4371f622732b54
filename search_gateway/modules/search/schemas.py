"""Search request and response schemas."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from search_gateway.models.documents import ManagementDocument, PropertyDocument

DEFAULT_PAGE_SIZE = 25


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FilterSpec(_CamelModel):
    search_phrase: str
    city: str | None = None
    state: str | None = None
    street_address: str | None = None
    markets: list[str] = Field(default_factory=list)
    # limit and offset
    from_: int = Field(default=0, ge=0, alias="from")
    size: int = Field(default=0, ge=0)

    @property
    def effective_size(self) -> int:
        return self.size or DEFAULT_PAGE_SIZE


class SearchResult(_CamelModel):
    property_count: int = 0
    management_count: int = 0
    elapsed_time_millis: int = 0
    properties: list[PropertyDocument] = Field(default_factory=list)
    managements: list[ManagementDocument] = Field(default_factory=list)


class IndexedDocument(_CamelModel):
    id: str
