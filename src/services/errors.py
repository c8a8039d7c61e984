class ServiceError(Exception):
    pass


class UpstreamError(ServiceError):
    pass


class UpstreamStatusError(UpstreamError):
    def __init__(self, url: str, status_code: int, reason: str = "Upstream returned an error"):
        super().__init__(f"{reason} ({status_code}): {url}")
        self.url = url
        self.status_code = status_code
        self.reason = reason


class UpstreamTimeoutError(UpstreamError):
    def __init__(self, url: str, timeout_seconds: float):
        super().__init__(f"No response from upstream after {timeout_seconds}s: {url}")
        self.url = url
        self.timeout_seconds = timeout_seconds


class UpstreamRequestError(UpstreamError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Could not send upstream request {url}: {reason}")
        self.url = url
        self.reason = reason
