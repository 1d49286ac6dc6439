class InvalidHistoryLimitError(ValueError):
    def __init__(self, limit: int, max_limit: int):
        self.limit = limit
        self.max_limit = max_limit
        super().__init__(f"History limit must be between 1 and {max_limit}, got {limit}")
