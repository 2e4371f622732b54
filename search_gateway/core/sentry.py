"""Sentry wiring for the search gateway."""

import structlog
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

logger = structlog.get_logger()

_SENSITIVE_HEADERS = {"authorization", "cookie", "x-api-key"}
_SENSITIVE_EXTRA_KEYS = {"basic_auth", "password", "elasticsearch_password"}


def _scrub_sensitive_data(event: dict, hint: dict) -> dict:
    """Strip auth headers and cluster credentials from an outgoing event."""
    headers = event.get("request", {}).get("headers", {})
    for header in list(headers):
        if header.lower() in _SENSITIVE_HEADERS:
            headers[header] = "[REDACTED]"

    extra = event.get("extra", {})
    for key in list(extra):
        if key.lower() in _SENSITIVE_EXTRA_KEYS:
            extra[key] = "[REDACTED]"
    return event


def init_sentry(
    dsn: str | None,
    environment: str = "development",
    release: str | None = None,
) -> None:
    """Initialise Sentry. Must run before the FastAPI app is built.

    Safe to call unconditionally: without a DSN nothing is sent.
    """
    if not dsn:
        logger.warning("sentry_disabled", reason="SENTRY_DSN not set")
        return

    sample_rate = 0.1 if environment == "production" else 1.0
    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        traces_sample_rate=sample_rate,
        integrations=[FastApiIntegration(transaction_style="endpoint")],
        send_default_pii=False,
        before_send=_scrub_sensitive_data,
    )
    logger.info("sentry_initialized", environment=environment, traces_sample_rate=sample_rate)
