from typing import Optional, Sequence


class InvalidBulkRequestError(ValueError):
    def __init__(self, message: str, invalid_ids: Optional[Sequence] = None):
        self.invalid_ids = list(invalid_ids or [])
        super().__init__(message)
