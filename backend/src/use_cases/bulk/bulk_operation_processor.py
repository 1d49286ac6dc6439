"""Chunked, sequential execution of one mutation over a list of ids.

Chunks run strictly in input order, one store call each. When a chunk
exhausts its retries the run stops: every earlier chunk is committed, the
failing chunk is not, and later chunks are never attempted.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Sequence, TypeVar, Union

import structlog

from core.domain.bulk_operation import BulkMutationResult, BulkOperationResult
from core.domain.retry_policy import RetryPolicy
from core.exceptions.bulk_mutation_error import BulkMutationError
from core.exceptions.bulk_operation_error import (
    BulkOperationAbortedError,
    BulkOperationPartialFailureError,
)
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError

logger = structlog.stdlib.get_logger(__name__)

IdT = TypeVar("IdT")
ItemT = TypeVar("ItemT")

ChunkMutation = Callable[[list[IdT]], Awaitable[BulkMutationResult[ItemT]]]
ProgressCallback = Callable[[int, int], Union[None, Awaitable[None]]]

DEFAULT_CHUNK_SIZE = 50
DEFAULT_INTER_CHUNK_DELAY_SECONDS = 0.1


def chunked(ids: Sequence[IdT], size: int) -> list[list[IdT]]:
    return [list(ids[start : start + size]) for start in range(0, len(ids), size)]


class BulkOperationProcessor:
    def __init__(
        self,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        retry_policy: Optional[RetryPolicy] = None,
        inter_chunk_delay_seconds: float = DEFAULT_INTER_CHUNK_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        if chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        self.chunk_size = chunk_size
        self.retry_policy = retry_policy or RetryPolicy()
        self.inter_chunk_delay_seconds = inter_chunk_delay_seconds
        self._sleep = sleep

    async def process(
        self,
        ids: Sequence[IdT],
        mutation: ChunkMutation,
        on_progress: Optional[ProgressCallback] = None,
        abort_signal: Optional[asyncio.Event] = None,
        operation: str = "bulk_operation",
    ) -> BulkOperationResult[ItemT]:
        if not ids:
            raise InvalidBulkRequestError(f"'{operation}' requires at least one id")

        chunks = chunked(ids, self.chunk_size)
        result: BulkOperationResult[ItemT] = BulkOperationResult(
            operation=operation,
            total_items=len(ids),
            chunk_count=len(chunks),
        )

        for index, chunk in enumerate(chunks):
            if index > 0:
                if abort_signal is not None and abort_signal.is_set():
                    logger.info(f"'{operation}' aborted after {index}/{len(chunks)} chunks")
                    raise BulkOperationAbortedError(operation, index, list(result.processed_ids))

                await self._sleep(self.inter_chunk_delay_seconds)

            chunk_result = await self._run_chunk(operation, index, chunk, mutation, result)

            result.processed_ids.extend(chunk)
            result.items.extend(chunk_result.affected_rows)

            if on_progress is not None:
                maybe_awaitable = on_progress(result.processed_count, result.total_items)
                if inspect.isawaitable(maybe_awaitable):
                    await maybe_awaitable

        logger.info(f"'{operation}' applied to {result.processed_count} items in {result.chunk_count} chunks")

        return result

    async def _run_chunk(
        self,
        operation: str,
        index: int,
        chunk: list[IdT],
        mutation: ChunkMutation,
        progress: BulkOperationResult[ItemT],
    ) -> BulkMutationResult[ItemT]:
        attempt = 0

        while True:
            attempt += 1

            try:
                chunk_result = await mutation(chunk)

                if not chunk_result.success:
                    raise BulkMutationError(operation, chunk, chunk_result.error or "mutation reported failure")

                return chunk_result

            except Exception as e:
                if not self.retry_policy.should_retry(e, attempt):
                    logger.error(
                        f"'{operation}' chunk {index} failed after {attempt} attempts: {e}",
                        committed=progress.processed_count,
                    )
                    raise BulkOperationPartialFailureError(
                        operation=operation,
                        chunk_index=index,
                        failed_ids=list(chunk),
                        succeeded_chunks=index,
                        committed_ids=list(progress.processed_ids),
                        attempts=attempt,
                        cause=e,
                    ) from e

                delay = self.retry_policy.delay_seconds(attempt)
                logger.warning(
                    f"'{operation}' chunk {index} failed (attempt {attempt}/{self.retry_policy.max_attempts}), "
                    f"retrying in {delay:.2f}s: {e}"
                )
                await self._sleep(delay)
