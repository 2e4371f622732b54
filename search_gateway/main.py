"""Search Gateway: Elasticsearch indexing and search for property and management records."""
import asyncio
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

import structlog
from fastapi import APIRouter, FastAPI

from search_gateway.core.config import settings
from search_gateway.core.elasticsearch import close_es_client, get_es_client, setup_indices
from search_gateway.core.errors import global_exception_handler
from search_gateway.core.sentry import init_sentry
from search_gateway.modules.search.router import management_router, property_router

# ── Sentry (initialised before the FastAPI app is created) ───────────────────
init_sentry(settings.SENTRY_DSN, settings.SENTRY_ENVIRONMENT, settings.APP_VERSION)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    logger.info("Starting Search Gateway", env=settings.APP_ENV, port=settings.PORT)
    await setup_indices()
    yield
    logger.info("Shutting down Search Gateway")
    await close_es_client()


_is_prod = settings.APP_ENV == "production"

app = FastAPI(
    title="Search Gateway",
    description="Indexes property and management records and serves filtered search.",
    version="1.0.0",
    docs_url=None if _is_prod else "/docs",
    redoc_url=None if _is_prod else "/redoc",
    lifespan=lifespan,
)

app.add_exception_handler(Exception, global_exception_handler)


@app.get("/health")
async def health_check() -> dict:
    """Probe Elasticsearch and report overall status."""
    try:
        info = await asyncio.wait_for(get_es_client().info(), timeout=3.0)
        elasticsearch = {
            "status": "healthy",
            "version": info.get("version", {}).get("number", "unknown"),
        }
    except Exception as exc:
        elasticsearch = {"status": "unhealthy", "error": str(exc)}

    overall = "healthy" if elasticsearch["status"] == "healthy" else "degraded"
    return {
        "status": overall,
        "service": "search-gateway",
        "checks": {"elasticsearch": elasticsearch},
    }


# ── /v1 versioned router ──────────────────────────────────────────────────────

api_v1 = APIRouter(prefix="/v1")
api_v1.include_router(property_router)
api_v1.include_router(management_router)

app.include_router(api_v1)
