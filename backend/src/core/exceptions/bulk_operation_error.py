from typing import Any, Optional

from core.exceptions.operation_aborted_error import OperationAbortedError


class BulkOperationPartialFailureError(Exception):
    """A chunk exhausted its retries; every earlier chunk is already committed."""

    def __init__(
        self,
        operation: str,
        chunk_index: int,
        failed_ids: list[Any],
        succeeded_chunks: int,
        committed_ids: list[Any],
        attempts: int,
        cause: Optional[BaseException],
    ):
        self.operation = operation
        self.chunk_index = chunk_index
        self.failed_ids = failed_ids
        self.succeeded_chunks = succeeded_chunks
        self.committed_ids = committed_ids
        self.attempts = attempts
        self.cause = cause

        super().__init__(
            f"Partial failure in '{operation}': chunk {chunk_index} ({len(failed_ids)} items) failed after "
            f"{attempts} attempts; {succeeded_chunks} chunks ({len(committed_ids)} items) were already applied. "
            f"Cause: {cause}"
        )

    @property
    def committed_count(self) -> int:
        return len(self.committed_ids)


class BulkOperationAbortedError(OperationAbortedError):
    def __init__(self, operation: str, succeeded_chunks: int, committed_ids: list[Any]):
        self.succeeded_chunks = succeeded_chunks
        self.committed_ids = committed_ids
        super().__init__(operation)

    @property
    def committed_count(self) -> int:
        return len(self.committed_ids)
