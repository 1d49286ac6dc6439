class SiteUnreachableError(Exception):
    def __init__(self, url: str, reason: str, timed_out: bool = False):
        self.url = url
        self.reason = reason
        self.timed_out = timed_out
        super().__init__(f"Site {url} unreachable: {reason}")
