"""Error taxonomy shared by every gateway operation, plus the API error handler."""
from enum import Enum, IntEnum

import sentry_sdk
import structlog
from elasticsearch import ConnectionError as ESConnectionError
from elasticsearch import ConnectionTimeout as ESConnectionTimeout
from fastapi import Request
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class ErrorCode(IntEnum):
    """Status codes carried in every Result envelope."""

    SUCCESS = 1000
    FAILED = 1001
    NOT_FOUND = 1002
    BAD_REQUEST = 1003
    INTERNAL_ERROR = 1004
    TIMEOUT = 1005
    SERVICE_UNAVAILABLE = 1006

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[ErrorCode, str] = {
    ErrorCode.SUCCESS: "Success",
    ErrorCode.FAILED: "Failed",
    ErrorCode.NOT_FOUND: "Not found",
    ErrorCode.BAD_REQUEST: "Bad request",
    ErrorCode.INTERNAL_ERROR: "Something bad happened",
    ErrorCode.TIMEOUT: "Timeout of service",
    ErrorCode.SERVICE_UNAVAILABLE: "Upstream service unavailable",
}


class State(str, Enum):
    SUCCESS = "Success"
    FAILED = "Failed"
    PENDING = "Pending"


class ConfigurationError(RuntimeError):
    """Raised at startup when a document kind is declared incompletely."""


def code_for_exception(exc: BaseException) -> ErrorCode:
    """Map an engine exception onto the taxonomy; unknown errors are internal."""
    # ConnectionTimeout is checked first: some transport versions derive it from ConnectionError
    if isinstance(exc, ESConnectionTimeout):
        return ErrorCode.TIMEOUT
    if isinstance(exc, ESConnectionError):
        return ErrorCode.SERVICE_UNAVAILABLE
    return ErrorCode.INTERNAL_ERROR


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch exceptions that escaped the service layer and answer with an envelope."""
    request_id = request.headers.get("x-request-id", "unknown")

    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request_id,
    )

    sentry_sdk.capture_exception(exc)

    code = ErrorCode.INTERNAL_ERROR
    return JSONResponse(
        status_code=500,
        content={
            "code": int(code),
            "payload": None,
            "message": code.description,
            "state": State.FAILED.value,
        },
    )
