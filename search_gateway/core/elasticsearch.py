"""ElasticSearch async client and index lifecycle management.

Indices are created lazily before the first write to them (and eagerly at
startup) with the gateway's custom analyzers and a mapping derived from the
document kind's field table.  Lifecycle errors are logged and never raised;
callers see a boolean.
"""

from typing import Any

import structlog
from elasticsearch import ApiError, AsyncElasticsearch

from search_gateway.core.config import settings
from search_gateway.models.documents import describe, resolve_index_name
from search_gateway.models.enums import AnalyzerKind, DocumentKind

logger = structlog.get_logger()

# ── Analysis settings ─────────────────────────────────────────────────────────

INDEX_ANALYSIS: dict[str, Any] = {
    "analyzer": {
        "standard_english": {
            "type": "standard",
            "stopwords": "_english_",
        },
        "partial_text": {
            "type": "custom",
            "tokenizer": "standard",
            "filter": ["lowercase", "partial_edge_ngram"],
        },
        "full_text": {
            "type": "custom",
            "tokenizer": "standard",
            "filter": ["lowercase", "stop", "snowball"],
        },
    },
    "filter": {
        # Built-in edge_ngram stops at 2 characters; whole words must be indexed too
        "partial_edge_ngram": {
            "type": "edge_ngram",
            "min_gram": 2,
            "max_gram": 20,
        },
    },
}

_KEYWORD_SUBFIELD = {"keyword": {"type": "keyword", "ignore_above": 256}}


def _field_mapping(analyzer: AnalyzerKind) -> dict[str, Any]:
    if analyzer is AnalyzerKind.KEYWORD:
        return {"type": "keyword"}
    if analyzer is AnalyzerKind.NUMERIC:
        return {"type": "double"}
    mapping: dict[str, Any] = {
        "type": "text",
        "analyzer": analyzer.value,
        "fields": dict(_KEYWORD_SUBFIELD),
    }
    if analyzer is AnalyzerKind.PARTIAL_TEXT:
        # Edge-ngrams at index time only; the query text is not split into prefixes
        mapping["search_analyzer"] = AnalyzerKind.STANDARD_ENGLISH.value
    return mapping


def build_mappings(kind: DocumentKind) -> dict[str, Any]:
    """Field mappings for a kind, from its declared per-field analyzers."""
    fields = describe(kind).fields
    return {
        "properties": {
            field_name: _field_mapping(analyzer) for field_name, analyzer in fields.items()
        }
    }


# ── Singleton client ──────────────────────────────────────────────────────────

_client: AsyncElasticsearch | None = None


def get_es_client() -> AsyncElasticsearch:
    """Return the shared async ES client (lazy-initialised)."""
    global _client
    if _client is None:
        options: dict[str, Any] = {
            "hosts": [settings.ELASTICSEARCH_URL],
            "request_timeout": settings.ELASTICSEARCH_REQUEST_TIMEOUT,
            "max_retries": 2,
            "retry_on_timeout": True,
        }
        if settings.ELASTICSEARCH_LOGIN:
            options["basic_auth"] = (
                settings.ELASTICSEARCH_LOGIN,
                settings.ELASTICSEARCH_PASSWORD,
            )
        _client = AsyncElasticsearch(**options)
    return _client


async def close_es_client() -> None:
    """Close the ES connection pool (called on shutdown)."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
        logger.info("es.client_closed")


# ── Lifecycle ─────────────────────────────────────────────────────────────────


def _already_exists(exc: ApiError) -> bool:
    error = exc.body.get("error") if isinstance(exc.body, dict) else None
    error_type = error.get("type") if isinstance(error, dict) else exc.message
    return error_type == "resource_already_exists_exception"


async def ensure_index(
    index_name: str,
    kind: DocumentKind,
    client: AsyncElasticsearch | None = None,
) -> bool:
    """Make sure ``index_name`` exists, creating it with the custom analyzers.

    Returns True when the index exists afterwards, False otherwise.
    """
    client = client or get_es_client()
    try:
        if await client.indices.exists(index=index_name):
            logger.debug("es.index_exists", index=index_name)
            return True

        response = await client.indices.create(
            index=index_name,
            settings={"analysis": INDEX_ANALYSIS},
            mappings=build_mappings(kind),
        )
        if response.get("acknowledged"):
            logger.info("es.index_created", index=index_name, kind=kind.value)
            return True

        logger.error(
            "es.index_create_rejected",
            index=index_name,
            response=getattr(response, "body", response),
        )
        return False
    except ApiError as exc:
        if _already_exists(exc):
            # Another writer created it between our exists check and create
            logger.info("es.index_created_concurrently", index=index_name)
            return True
        logger.error("es.index_create_failed", index=index_name, error=str(exc))
        return False
    except Exception as exc:
        logger.error("es.index_create_failed", index=index_name, error=str(exc))
        return False


async def setup_indices() -> None:
    """Create every kind's index if missing.

    Called from the FastAPI lifespan handler at startup.  The app starts even
    if ES is down; writes retry the lifecycle check later.
    """
    failed = []
    for kind in DocumentKind:
        if not await ensure_index(resolve_index_name(kind), kind):
            logger.warning("es.setup_incomplete", kind=kind.value)
            failed.append(kind.value)
    if not failed:
        logger.info("es.indices_ready")
