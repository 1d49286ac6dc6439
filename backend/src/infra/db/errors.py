from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from core.exceptions.data_store_error import DataStoreError, TransientStoreError

logger = structlog.stdlib.get_logger(__name__)


def translate_store_error(error: SQLAlchemyError, operation: str, scope_id: Optional[int] = None) -> DataStoreError:
    """Map a SQLAlchemy failure to the domain taxonomy without leaking the driver error."""
    message = error.__class__.__name__

    if isinstance(error, (OperationalError, PoolTimeoutError)):
        return TransientStoreError(operation, message, scope_id)

    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return TransientStoreError(operation, message, scope_id)

    return DataStoreError(operation, message, scope_id)


@asynccontextmanager
async def store_operation(operation: str, scope_id: Optional[int] = None) -> AsyncIterator[None]:
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Data store operation '{operation}' failed: {e}")
        raise translate_store_error(e, operation, scope_id) from e
