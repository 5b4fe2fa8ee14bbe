"""Exception hierarchy for brainus-ai."""


class BrainusError(Exception):
    """Base exception for all brainus-ai errors."""

    pass


class ConfigError(BrainusError):
    """Invalid client configuration (raised at construction time)."""

    pass


class APIError(BrainusError):
    """Error returned by the Brainus API, or a request that never succeeded.

    ``status_code`` is None when no HTTP response was received (network
    failure, timeout, or retries exhausted).
    """

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(APIError):
    """API key rejected by the server (HTTP 401)."""

    def __init__(self, message: str):
        super().__init__(message, 401)


class RateLimitError(APIError):
    """Rate limit hit (HTTP 429).

    ``retry_after`` holds the server's Retry-After hint in seconds, if any.
    """

    def __init__(self, message: str, retry_after: int | None = None):
        super().__init__(message, 429)
        self.retry_after = retry_after


class QuotaExceededError(APIError):
    """Account quota exhausted (HTTP 403 with a quota message)."""

    def __init__(self, message: str):
        super().__init__(message, 403)
