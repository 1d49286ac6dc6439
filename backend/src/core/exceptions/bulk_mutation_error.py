from typing import Any


class BulkMutationError(Exception):
    """The store reported an unsuccessful result for one atomic bulk mutation call."""

    def __init__(self, operation: str, ids: list[Any], message: str):
        self.operation = operation
        self.ids = ids
        super().__init__(f"Bulk mutation '{operation}' on {len(ids)} items failed: {message}")
