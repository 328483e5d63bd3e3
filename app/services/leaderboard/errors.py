class LeaderboardError(Exception):
    """Base error for the leaderboard engine."""


class StoreUnavailableError(LeaderboardError):
    """
    A call to the backing store failed.

    Transient by nature: callers may retry, and must surface a "failed to
    load" state instead of treating it as an empty leaderboard.
    """

    retryable = True

    def __init__(self, operation: str, cause: Exception) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
