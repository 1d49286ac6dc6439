from typing import Optional


class DataStoreError(Exception):
    def __init__(self, operation: str, message: str, scope_id: Optional[int] = None):
        self.operation = operation
        self.scope_id = scope_id

        scope = f" (site_id={scope_id})" if scope_id is not None else ""
        super().__init__(f"Data store operation '{operation}' failed{scope}: {message}")


class TransientStoreError(DataStoreError):
    """Store failure that may succeed when retried (connection loss, timeout, serialization conflict)."""
