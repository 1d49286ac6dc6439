class InvalidTrendWindowError(ValueError):
    def __init__(self, days: int, max_days: int):
        self.days = days
        self.max_days = max_days
        super().__init__(f"Trend window must be between 1 and {max_days} days, got {days}")
