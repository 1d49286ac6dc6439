import asyncio
from typing import Optional


class OperationAbortedError(Exception):
    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Operation '{operation}' was aborted")

    @classmethod
    def raise_if_set(cls, abort_signal: Optional[asyncio.Event], operation: str) -> None:
        if abort_signal is not None and abort_signal.is_set():
            raise cls(operation)
