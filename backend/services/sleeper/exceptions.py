class SleeperAPIError(Exception):
    """Base exception for Sleeper API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class SleeperRateLimitError(SleeperAPIError):
    """Rate limit still exceeded after all retries."""

    pass


class SleeperNotFoundError(SleeperAPIError):
    """Resource not found."""

    pass
