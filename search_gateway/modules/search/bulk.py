"""Bulk loader for large document sets.

Documents are split into batches and sent with at most
``max_concurrency`` batches in flight.  Items the cluster rejects with 429
are retried up to ``max_retries`` times with a fixed back-off.  The loader
runs as a background job and reports through a completion future, which
:meth:`BulkLoader.run` awaits, so callers block until every batch (retries
included) has settled.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog
from elasticsearch import AsyncElasticsearch
from elasticsearch.helpers import async_streaming_bulk

from search_gateway.core.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class BulkPolicy:
    max_retries: int = 23
    backoff_seconds: float = 30.0
    max_concurrency: int = 4
    chunk_size: int = 500
    refresh_on_completed: bool = True

    @classmethod
    def from_settings(cls) -> BulkPolicy:
        return cls(
            max_retries=settings.BULK_MAX_RETRIES,
            backoff_seconds=settings.BULK_BACKOFF_SECONDS,
            max_concurrency=settings.BULK_MAX_CONCURRENCY,
            chunk_size=settings.BULK_CHUNK_SIZE,
        )


@dataclass
class BulkOutcome:
    indexed: int = 0
    batches: int = 0
    failed: list[dict[str, Any]] = field(default_factory=list)


class BulkTransmissionError(Exception):
    """The bulk job started sending documents and could not finish."""

    def __init__(self, message: str, failed_items: list[dict[str, Any]] | None = None) -> None:
        super().__init__(message)
        self.failed_items = failed_items or []


class BulkLoader:
    def __init__(
        self,
        client: AsyncElasticsearch,
        index_name: str,
        policy: BulkPolicy | None = None,
    ) -> None:
        self.client = client
        self.index_name = index_name
        self.policy = policy or BulkPolicy.from_settings()

    async def run(self, actions: list[dict[str, Any]]) -> BulkOutcome:
        """Start the bulk job and wait for its terminal signal.

        Raises:
            BulkTransmissionError: retries were exhausted, items were rejected
                or the transport failed mid-stream.
        """
        done: asyncio.Future[BulkOutcome] = asyncio.get_running_loop().create_future()
        job = asyncio.create_task(self._drive(actions, done))
        try:
            return await done
        finally:
            await job

    def _split(self, actions: list[dict[str, Any]]) -> list[list[dict[str, Any]]]:
        size = max(1, self.policy.chunk_size)
        return [actions[i:i + size] for i in range(0, len(actions), size)]

    async def _drive(
        self,
        actions: list[dict[str, Any]],
        done: asyncio.Future[BulkOutcome],
    ) -> None:
        outcome = BulkOutcome()
        semaphore = asyncio.Semaphore(self.policy.max_concurrency)
        batches = self._split(actions)

        try:
            results = await asyncio.gather(
                *(
                    self._send_batch(idx, batch, semaphore, outcome)
                    for idx, batch in enumerate(batches)
                ),
                return_exceptions=True,
            )
            errors = [r for r in results if isinstance(r, BaseException)]
            if errors:
                raise BulkTransmissionError(
                    f"{len(errors)} of {len(batches)} batches failed: {errors[0]}",
                    outcome.failed,
                )
            if outcome.failed:
                raise BulkTransmissionError(
                    f"{len(outcome.failed)} documents rejected", outcome.failed
                )
            if self.policy.refresh_on_completed:
                await self.client.indices.refresh(index=self.index_name)
        except BulkTransmissionError as exc:
            logger.error(
                "bulk.failed",
                index=self.index_name,
                error=str(exc),
                indexed=outcome.indexed,
                rejected=len(exc.failed_items),
            )
            done.set_exception(exc)
            return
        except Exception as exc:
            logger.error("bulk.failed", index=self.index_name, error=str(exc))
            done.set_exception(BulkTransmissionError(str(exc), outcome.failed))
            return

        logger.info(
            "bulk.completed",
            index=self.index_name,
            indexed=outcome.indexed,
            batches=outcome.batches,
        )
        done.set_result(outcome)

    async def _send_batch(
        self,
        batch_idx: int,
        batch: list[dict[str, Any]],
        semaphore: asyncio.Semaphore,
        outcome: BulkOutcome,
    ) -> None:
        async with semaphore:
            async for ok, item in async_streaming_bulk(
                self.client,
                batch,
                chunk_size=len(batch),
                max_retries=self.policy.max_retries,
                initial_backoff=self.policy.backoff_seconds,
                # Same ceiling as the start value keeps the back-off fixed
                max_backoff=self.policy.backoff_seconds,
                raise_on_error=False,
            ):
                if ok:
                    outcome.indexed += 1
                else:
                    outcome.failed.append(item)
            outcome.batches += 1
            logger.debug(
                "bulk.batch_sent",
                index=self.index_name,
                batch_idx=batch_idx,
                size=len(batch),
            )
