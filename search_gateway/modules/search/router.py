"""Property and management indexing/search routers.

Thin pass-through: every endpoint hands its body to the search service and
returns the Result envelope as-is.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter

from search_gateway.models.documents import ManagementDocument, PropertyDocument
from search_gateway.models.enums import DocumentKind
from search_gateway.modules.search import service
from search_gateway.modules.search.schemas import FilterSpec, IndexedDocument, SearchResult
from search_gateway.schemas.result import Result

logger = structlog.get_logger()

property_router = APIRouter(prefix="/property", tags=["property"])
management_router = APIRouter(prefix="/management", tags=["management"])


# ── Property ──────────────────────────────────────────────────────────────────


@property_router.post("/post", response_model=Result[IndexedDocument])
async def post_property(document: PropertyDocument) -> Result[IndexedDocument]:
    return await service.index_document(document)


@property_router.post("/post/bulk", response_model=Result[str])
async def post_properties(documents: list[PropertyDocument]) -> Result[str]:
    return await service.index_bulk(documents)


@property_router.post("/find", response_model=Result[SearchResult])
async def find_properties(filter_spec: FilterSpec) -> Result[SearchResult]:
    """Search properties; markets in the filter also pull matching managements."""
    return await service.search(filter_spec, DocumentKind.PROPERTY)


@property_router.delete("/delete-all", response_model=Result[str])
async def delete_all_properties() -> Result[str]:
    logger.warning("search.delete_requested", kind=DocumentKind.PROPERTY.value)
    return await service.delete_index(DocumentKind.PROPERTY)


# ── Management ────────────────────────────────────────────────────────────────


@management_router.post("/post", response_model=Result[IndexedDocument])
async def post_management(document: ManagementDocument) -> Result[IndexedDocument]:
    return await service.index_document(document)


@management_router.post("/post/bulk", response_model=Result[str])
async def post_managements(documents: list[ManagementDocument]) -> Result[str]:
    return await service.index_bulk(documents)


@management_router.post("/find", response_model=Result[SearchResult])
async def find_managements(filter_spec: FilterSpec) -> Result[SearchResult]:
    """Search managements; markets in the filter also pull matching properties."""
    return await service.search(filter_spec, DocumentKind.MANAGEMENT)


@management_router.delete("/delete-all", response_model=Result[str])
async def delete_all_managements() -> Result[str]:
    logger.warning("search.delete_requested", kind=DocumentKind.MANAGEMENT.value)
    return await service.delete_index(DocumentKind.MANAGEMENT)
