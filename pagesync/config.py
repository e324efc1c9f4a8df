from dataclasses import dataclass, field

from .models import Record

# Rows from the end of the list at which the next page is requested.
PREFETCH_THRESHOLD = 3


@dataclass(frozen=True)
class RetryPolicy:
    """
    Automatic retry settings for failed page fetches.

    The delay is fixed, not exponential: every retry waits ``delay`` seconds.
    After ``max_attempts`` consecutive failures the engine gives up until the
    next explicit fetch or refresh.
    """

    max_attempts: int = 3
    delay: float = 2.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")

    def should_retry(self, retry_count: int) -> bool:
        """
        Check whether another automatic attempt is allowed.

        Args:
            retry_count: Number of consecutive failures so far

        Returns:
            True if a retry should be scheduled, False if retries are exhausted
        """
        return retry_count < self.max_attempts


@dataclass
class EngineState:
    """
    Internal container for the engine's pagination state.
    Owned and mutated by PaginationEngine only.
    """

    items: list[Record] = field(default_factory=list)
    cursor: str | None = None
    is_pagination_finished: bool = False
    retry_count: int = 0
    fetch_in_flight: bool = False

    def copy(self) -> "EngineState":
        """Return a snapshot that shares no list with this state."""
        return EngineState(
            items=list(self.items),
            cursor=self.cursor,
            is_pagination_finished=self.is_pagination_finished,
            retry_count=self.retry_count,
            fetch_in_flight=self.fetch_in_flight,
        )
