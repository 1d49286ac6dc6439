import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from core.exceptions.data_store_error import DataStoreError, TransientStoreError
from infra.db.errors import store_operation, translate_store_error


@pytest.mark.parametrize(
    "error",
    [
        OperationalError("SELECT 1", {}, Exception("server closed the connection")),
        PoolTimeoutError("QueuePool limit reached"),
        DBAPIError("SELECT 1", {}, Exception("reset"), connection_invalidated=True),
    ],
)
def test_connection_level_failures_are_transient(error) -> None:
    translated = translate_store_error(error, "find_site", 7)

    assert isinstance(translated, TransientStoreError)
    assert translated.scope_id == 7


def test_constraint_violations_are_permanent() -> None:
    error = IntegrityError("INSERT", {}, Exception("duplicate key value violates unique constraint"))

    translated = translate_store_error(error, "save_product")

    assert type(translated) is DataStoreError
    assert "duplicate key" not in str(translated)
    assert "IntegrityError" in str(translated)


@pytest.mark.asyncio
async def test_store_operation_translates_and_chains() -> None:
    original = IntegrityError("INSERT", {}, Exception("fk violation"))

    with pytest.raises(DataStoreError) as error:
        async with store_operation("apply_bulk_mutation", 3):
            raise original

    assert error.value.operation == "apply_bulk_mutation"
    assert error.value.scope_id == 3
    assert error.value.__cause__ is original


@pytest.mark.asyncio
async def test_store_operation_leaves_other_errors_alone() -> None:
    with pytest.raises(ValueError):
        async with store_operation("find_site"):
            raise ValueError("not a database problem")
