"""Search service: document indexing, filtered search and index deletion.

Every public coroutine returns a :class:`Result` envelope.  Engine errors are
caught here, logged, and turned into an error code; nothing is re-raised to
the router.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

import structlog
from elasticsearch import AsyncElasticsearch, NotFoundError

from search_gateway.core.elasticsearch import ensure_index, get_es_client
from search_gateway.core.errors import ErrorCode, code_for_exception
from search_gateway.models.documents import (
    Document,
    describe,
    kind_of,
    resolve_index_name,
    to_source,
)
from search_gateway.models.enums import DocumentKind
from search_gateway.modules.search.bulk import BulkLoader, BulkPolicy, BulkTransmissionError
from search_gateway.modules.search.queries import Clause, bool_must, build_query, market_clause
from search_gateway.modules.search.schemas import FilterSpec, IndexedDocument, SearchResult
from search_gateway.schemas.result import Result

logger = structlog.get_logger()

_WRITE_CONFIRMATIONS = frozenset({"created", "updated"})


@dataclass
class MarketLookup:
    kind: DocumentKind
    count: int
    hits: list[Any]
    clause: Clause


def _raw(response: Any) -> Any:
    return getattr(response, "body", response)


def _total(response: Any) -> int:
    total = response["hits"]["total"]
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


def _documents(response: Any, kind: DocumentKind) -> list[Any]:
    model = describe(kind).model
    documents = []
    for hit in response["hits"]["hits"]:
        source = dict(hit.get("_source") or {})
        source.setdefault("id", hit.get("_id"))
        documents.append(model.model_validate(source))
    return documents


def _fill(payload: SearchResult, kind: DocumentKind, count: int, hits: list[Any]) -> None:
    if kind is DocumentKind.PROPERTY:
        payload.property_count = count
        payload.properties = hits
    else:
        payload.management_count = count
        payload.managements = hits


async def _gather_or_cancel(*coros: Any) -> list[Any]:
    """Run ``coros`` concurrently; the first failure cancels the rest."""
    tasks = [asyncio.ensure_future(coro) for coro in coros]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # Collect the cancelled tasks so their outcomes are retrieved
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def _bulk_action(index_name: str, document: Document) -> dict[str, Any]:
    action: dict[str, Any] = {"_index": index_name, "_source": to_source(document)}
    if document.id:
        action["_id"] = document.id
    return action


# ── Writes ────────────────────────────────────────────────────────────────────


async def index_document(document: Document) -> Result[IndexedDocument]:
    """Write one document, creating its index first if needed."""
    kind = kind_of(document)
    index_name = resolve_index_name(kind)
    client = get_es_client()

    if not await ensure_index(index_name, kind, client):
        return Result[IndexedDocument].of(ErrorCode.FAILED)

    source = to_source(document)
    try:
        response = await client.index(
            index=index_name,
            id=document.id,
            document=source,
            refresh="wait_for",
        )
        doc_id = response.get("_id")
        if doc_id and response.get("result") in _WRITE_CONFIRMATIONS:
            return Result[IndexedDocument].success(IndexedDocument(id=doc_id))

        logger.error(
            "search.index_not_confirmed",
            index=index_name,
            document=source,
            response=_raw(response),
        )
        return Result[IndexedDocument].of(ErrorCode.FAILED)
    except Exception as exc:
        logger.error("search.index_failed", index=index_name, document=source, error=str(exc))
        return Result[IndexedDocument].of(code_for_exception(exc))


async def index_bulk(
    documents: list[Document],
    policy: BulkPolicy | None = None,
) -> Result[str]:
    """Write many documents of one kind and wait until the bulk job settles."""
    if not documents:
        logger.warning("search.bulk_rejected", reason="empty document list")
        return Result[str].of(ErrorCode.BAD_REQUEST)

    kind = kind_of(documents[0])
    if any(kind_of(document) is not kind for document in documents[1:]):
        logger.warning("search.bulk_rejected", reason="mixed document kinds")
        return Result[str].of(ErrorCode.BAD_REQUEST)

    index_name = resolve_index_name(kind)
    client = get_es_client()
    if not await ensure_index(index_name, kind, client):
        return Result[str].of(ErrorCode.FAILED)

    try:
        actions = [_bulk_action(index_name, document) for document in documents]
        outcome = await BulkLoader(client, index_name, policy).run(actions)
    except BulkTransmissionError as exc:
        logger.error(
            "search.bulk_failed",
            index=index_name,
            error=str(exc),
            rejected=exc.failed_items[:10],
        )
        return Result[str].of(ErrorCode.FAILED)
    except Exception as exc:
        logger.error("search.bulk_internal_error", index=index_name, error=str(exc))
        return Result[str].of(ErrorCode.INTERNAL_ERROR)

    logger.info("search.bulk_completed", index=index_name, indexed=outcome.indexed)
    return Result[str].success(f"{outcome.indexed} documents indexed into {index_name}")


async def delete_index(kind: DocumentKind) -> Result[str]:
    """Drop the whole index for ``kind``. Irreversible."""
    index_name = resolve_index_name(kind)
    client = get_es_client()
    code = ErrorCode.INTERNAL_ERROR
    try:
        response = await client.indices.delete(index=index_name)
        code = ErrorCode.SUCCESS if response.get("acknowledged") else ErrorCode.FAILED
    except NotFoundError:
        code = ErrorCode.NOT_FOUND
    except Exception as exc:
        logger.error("search.delete_index_failed", index=index_name, error=str(exc))
        code = code_for_exception(exc)

    if code == ErrorCode.SUCCESS:
        logger.warning("search.index_deleted", index=index_name)
        return Result[str].success(index_name)
    return Result[str].of(code)


# ── Reads ─────────────────────────────────────────────────────────────────────


async def lookup_by_markets(
    markets: list[str],
    kind: DocumentKind,
    client: AsyncElasticsearch | None = None,
) -> MarketLookup:
    """Search the kind cross-referenced by ``kind`` for any of ``markets``.

    Also returns the market clause itself so the caller can AND it into the
    primary query.
    """
    if not markets:
        raise ValueError("markets must not be empty")
    client = client or get_es_client()
    target = describe(kind).cross_reference
    clause = market_clause(markets)

    response = await client.search(
        index=resolve_index_name(target),
        query=bool_must([clause]),
        track_total_hits=True,
    )
    return MarketLookup(
        kind=target,
        count=_total(response),
        hits=_documents(response, target),
        clause=clause,
    )


async def search(filter_spec: FilterSpec, kind: DocumentKind) -> Result[SearchResult]:
    """Filtered search over ``kind``, enriched with cross-kind market matches."""
    payload = SearchResult()
    if not filter_spec.search_phrase or not filter_spec.search_phrase.strip():
        return Result[SearchResult].of(ErrorCode.BAD_REQUEST, payload)

    client = get_es_client()
    try:
        clauses = build_query(filter_spec, kind)
        primary = client.search(
            index=resolve_index_name(kind),
            query=bool_must(clauses),
            from_=filter_spec.from_,
            size=filter_spec.effective_size,
            track_total_hits=True,
        )
        if filter_spec.markets:
            response, lookup = await _gather_or_cancel(
                primary,
                lookup_by_markets(filter_spec.markets, kind, client),
            )
            _fill(payload, lookup.kind, lookup.count, lookup.hits)
        else:
            response = await primary

        count = _total(response)
        _fill(payload, kind, count, _documents(response, kind))
        payload.elapsed_time_millis = int(response.get("took", 0))
    except Exception as exc:
        logger.error(
            "search.failed",
            kind=kind.value,
            search_phrase=filter_spec.search_phrase,
            error=str(exc),
        )
        return Result[SearchResult].of(code_for_exception(exc), payload)

    if count <= 0:
        return Result[SearchResult].of(ErrorCode.NOT_FOUND, payload)
    return Result[SearchResult].success(payload)
