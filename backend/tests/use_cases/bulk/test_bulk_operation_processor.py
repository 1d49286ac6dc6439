import asyncio

import pytest

from core.domain.bulk_operation import BulkMutationResult
from core.domain.retry_policy import RetryPolicy
from core.exceptions.bulk_mutation_error import BulkMutationError
from core.exceptions.bulk_operation_error import BulkOperationAbortedError, BulkOperationPartialFailureError
from core.exceptions.data_store_error import DataStoreError, TransientStoreError
from core.exceptions.invalid_bulk_request_error import InvalidBulkRequestError
from use_cases.bulk.bulk_operation_processor import BulkOperationProcessor, chunked


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class ScriptedMutation:
    """Records every chunk; ``failures`` maps a call number (1-based) to an exception or ``False``."""

    def __init__(self, failures: dict | None = None) -> None:
        self.calls: list[list[int]] = []
        self.failures = failures or {}

    async def __call__(self, chunk: list[int]) -> BulkMutationResult[int]:
        self.calls.append(list(chunk))
        failure = self.failures.get(len(self.calls))

        if isinstance(failure, Exception):
            raise failure
        if failure is False:
            return BulkMutationResult(success=False, error="constraint violated")

        return BulkMutationResult(success=True, affected_rows=[item * 10 for item in chunk])


def _processor(sleep: RecordingSleep, **kwargs) -> BulkOperationProcessor:
    kwargs.setdefault("retry_policy", RetryPolicy(max_attempts=3, base_delay_ms=100, max_delay_ms=1_000))
    return BulkOperationProcessor(sleep=sleep, **kwargs)


def test_chunked_preserves_order() -> None:
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]


@pytest.mark.asyncio
async def test_ids_are_processed_in_ordered_chunks() -> None:
    sleep = RecordingSleep()
    mutation = ScriptedMutation()
    ids = list(range(1, 121))

    result = await _processor(sleep, chunk_size=50, inter_chunk_delay_seconds=0.1).process(
        ids, mutation, operation="price"
    )

    assert [len(call) for call in mutation.calls] == [50, 50, 20]
    assert [item for call in mutation.calls for item in call] == ids
    assert result.operation == "price"
    assert result.total_items == 120
    assert result.chunk_count == 3
    assert result.processed_ids == ids
    assert result.items[:2] == [10, 20]
    assert sleep.delays == [0.1, 0.1]


@pytest.mark.asyncio
async def test_failed_chunk_stops_the_run_with_earlier_chunks_committed() -> None:
    failure = TransientStoreError("apply_bulk_mutation", "deadlock detected")
    mutation = ScriptedMutation(failures={2: failure, 3: failure, 4: failure})

    with pytest.raises(BulkOperationPartialFailureError) as error:
        await _processor(RecordingSleep(), chunk_size=50).process(list(range(1, 121)), mutation, operation="update")

    partial = error.value
    assert "Partial failure" in str(partial)
    assert partial.chunk_index == 1
    assert partial.succeeded_chunks == 1
    assert partial.committed_ids == list(range(1, 51))
    assert partial.failed_ids == list(range(51, 101))
    assert partial.attempts == 3
    assert partial.cause is failure
    # the third chunk is never attempted
    assert all(101 not in call for call in mutation.calls)
    assert len(mutation.calls) == 4


@pytest.mark.asyncio
async def test_permanent_store_error_fails_the_chunk_without_retrying() -> None:
    sleep = RecordingSleep()
    failure = DataStoreError("apply_bulk_mutation", "IntegrityError")
    mutation = ScriptedMutation(failures={1: failure})

    with pytest.raises(BulkOperationPartialFailureError) as error:
        await _processor(sleep, chunk_size=10, inter_chunk_delay_seconds=0).process([1, 2, 3], mutation)

    assert mutation.calls == [[1, 2, 3]]
    assert error.value.attempts == 1
    assert error.value.cause is failure
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_transient_failure_is_retried_with_backoff() -> None:
    sleep = RecordingSleep()
    mutation = ScriptedMutation(failures={1: TransientStoreError("apply_bulk_mutation", "timeout")})

    result = await _processor(sleep, chunk_size=10, inter_chunk_delay_seconds=0).process([1, 2, 3], mutation)

    assert mutation.calls == [[1, 2, 3], [1, 2, 3]]
    assert result.processed_count == 3
    assert sleep.delays == [0.1]


@pytest.mark.asyncio
async def test_unsuccessful_result_counts_as_a_failed_attempt() -> None:
    mutation = ScriptedMutation(failures={1: False, 2: False})
    processor = _processor(RecordingSleep(), retry_policy=RetryPolicy(max_attempts=2, base_delay_ms=0))

    with pytest.raises(BulkOperationPartialFailureError) as error:
        await processor.process([1, 2], mutation, operation="delete")

    assert isinstance(error.value.cause, BulkMutationError)
    assert error.value.committed_ids == []
    assert error.value.succeeded_chunks == 0


@pytest.mark.asyncio
async def test_validation_errors_are_not_retried() -> None:
    mutation = ScriptedMutation(failures={1: InvalidBulkRequestError("unknown field")})

    with pytest.raises(BulkOperationPartialFailureError) as error:
        await _processor(RecordingSleep()).process([1], mutation)

    assert error.value.attempts == 1
    assert len(mutation.calls) == 1


@pytest.mark.asyncio
async def test_progress_is_reported_after_each_chunk() -> None:
    seen: list[tuple[int, int]] = []

    await _processor(RecordingSleep(), chunk_size=2).process(
        [1, 2, 3, 4, 5],
        ScriptedMutation(),
        on_progress=lambda processed, total: seen.append((processed, total)),
    )

    assert seen == [(2, 5), (4, 5), (5, 5)]


@pytest.mark.asyncio
async def test_async_progress_callback_is_awaited() -> None:
    seen: list[int] = []

    async def on_progress(processed: int, total: int) -> None:
        seen.append(processed)

    await _processor(RecordingSleep(), chunk_size=2).process([1, 2, 3], ScriptedMutation(), on_progress=on_progress)

    assert seen == [2, 3]


@pytest.mark.asyncio
async def test_abort_between_chunks_reports_committed_ids() -> None:
    abort_signal = asyncio.Event()
    mutation = ScriptedMutation()

    def abort_after_first_chunk(processed: int, total: int) -> None:
        abort_signal.set()

    with pytest.raises(BulkOperationAbortedError) as error:
        await _processor(RecordingSleep(), chunk_size=2).process(
            [1, 2, 3, 4],
            mutation,
            on_progress=abort_after_first_chunk,
            abort_signal=abort_signal,
            operation="duplicate",
        )

    assert mutation.calls == [[1, 2]]
    assert error.value.committed_ids == [1, 2]
    assert error.value.succeeded_chunks == 1
    assert error.value.operation == "duplicate"


@pytest.mark.asyncio
async def test_empty_id_list_is_rejected() -> None:
    mutation = ScriptedMutation()

    with pytest.raises(InvalidBulkRequestError):
        await _processor(RecordingSleep()).process([], mutation)

    assert mutation.calls == []


def test_chunk_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        BulkOperationProcessor(chunk_size=0)
