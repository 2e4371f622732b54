"""The uniform envelope returned by every gateway operation."""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel

from search_gateway.core.errors import ErrorCode, State

PayloadT = TypeVar("PayloadT")


class Result(BaseModel, Generic[PayloadT]):
    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    payload: PayloadT | None = None
    message: str = ErrorCode.INTERNAL_ERROR.description
    state: State = State.PENDING

    @classmethod
    def of(cls, code: ErrorCode, payload: PayloadT | None = None) -> Result[PayloadT]:
        """Build an envelope whose message and state follow from ``code``."""
        return cls(
            code=code,
            payload=payload,
            message=code.description,
            state=State.SUCCESS if code == ErrorCode.SUCCESS else State.FAILED,
        )

    @classmethod
    def success(cls, payload: PayloadT | None = None) -> Result[PayloadT]:
        return cls.of(ErrorCode.SUCCESS, payload)

    @property
    def ok(self) -> bool:
        return self.code == ErrorCode.SUCCESS
