"""
The pagination engine.

PaginationEngine accumulates a deduplicated list of records across pages
served by a PageFetcher, detects the end of pagination, retries failed fetches
with a fixed delay and reports every change to its listeners as signals.
Failures are never raised to the caller.

The engine belongs to one asyncio event loop. All of its methods must be
called from that loop's thread; fetches run as tasks on it and the retry
delay is a loop timer.
"""

import asyncio
from typing import TYPE_CHECKING, Any

from ._logging import logger, redact_cursor
from .config import PREFETCH_THRESHOLD, EngineState, RetryPolicy
from .events import EngineListener, SignalHub, Subscription
from .exceptions import FetchError

if TYPE_CHECKING:
    from .fetchers import PageFetcher
    from .models import Record
    from .pagination import Page


def describe_failure(error: BaseException) -> str:
    """
    Extracts the human readable description of a failed fetch.

    FetchError carries its own description; for anything else the exception
    text is used, falling back to the exception class name.
    """
    if isinstance(error, FetchError):
        return error.description
    return str(error) or type(error).__name__


class PaginationEngine:
    """
    Incrementally loads a paginated list.

    Usage:
        engine = PaginationEngine(fetcher)
        engine.subscribe(presenter)
        engine.fetch_next()                 # first page
        engine.on_near_end_of_list(row)     # while scrolling
        engine.refresh()                    # pull to refresh
        engine.close()                      # with the owning screen
    """

    def __init__(
        self,
        fetcher: "PageFetcher",
        retry_policy: RetryPolicy | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.retry_policy = retry_policy or RetryPolicy()

        self._loop = loop
        self._state = EngineState()
        self._signals = SignalHub()

        # At most one of these is set at any time
        self._task: asyncio.Task[None] | None = None
        self._retry_handle: asyncio.TimerHandle | None = None

        # Bumped whenever a fetch starts or is abandoned; stale completions compare unequal
        self._generation = 0

        self._idle = asyncio.Event()
        self._idle.set()
        self._closed = False

    # ------------------------------------------------------------------
    # Read-only view of the state
    # ------------------------------------------------------------------

    @property
    def items(self) -> tuple["Record", ...]:
        """Snapshot of the accumulated records, in first-seen order."""
        return tuple(self._state.items)

    @property
    def cursor(self) -> str | None:
        return self._state.cursor

    @property
    def is_pagination_finished(self) -> bool:
        return self._state.is_pagination_finished

    @property
    def retry_count(self) -> int:
        return self._state.retry_count

    @property
    def fetch_in_flight(self) -> bool:
        """True while a fetch is outstanding or a retry is pending."""
        return self._state.fetch_in_flight

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> EngineState:
        """A copy of the internal state; mutating it has no effect on the engine."""
        return self._state.copy()

    def __len__(self) -> int:
        return len(self._state.items)

    def record_at(self, index: int) -> "Record":
        """Returns the record displayed at ``index``. Raises IndexError if out of range."""
        return self._state.items[index]

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: EngineListener) -> Subscription:
        """
        Registers a listener for engine signals.

        Args:
            listener: Object implementing EngineListener (see BaseListener)

        Returns:
            Subscription handle; call unsubscribe() when the listener goes away.
        """
        return self._signals.subscribe(listener)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def fetch_next(self) -> "asyncio.Task[None] | None":
        """
        Requests the page after the current cursor.

        Does nothing while another fetch or a retry is pending, or after
        close(). A call made after retries were exhausted starts over with a
        fresh retry budget.

        Returns:
            The task running the fetch, or None if the call was ignored.
        """
        if self._closed:
            logger.debug("Engine closed, ignoring fetch request")
            return None

        state = self._state
        if state.fetch_in_flight:
            logger.debug(
                "Fetch already in flight, ignoring request",
                extra={"cursor_hash": redact_cursor(state.cursor)},
            )
            return None

        if not self.retry_policy.should_retry(state.retry_count):
            state.retry_count = 0

        loop = self._get_loop()
        state.fetch_in_flight = True
        self._idle.clear()

        logger.info(
            "Fetching page",
            extra={"cursor_hash": redact_cursor(state.cursor), "retry_count": state.retry_count},
        )
        self._generation += 1
        task = loop.create_task(self._run_fetch(state.cursor, self._generation))
        # An eager task factory may already have run the fetch to completion
        if not task.done():
            self._task = task
        return task

    def refresh(self) -> "asyncio.Task[None] | None":
        """
        Starts over from the first page.

        A pending retry and an outstanding fetch are cancelled, their result
        would target the old cursor. The accumulated items are kept until the
        new first page arrives, so a failed refresh leaves the current list
        on screen.
        """
        if self._closed:
            logger.debug("Engine closed, ignoring refresh")
            return None

        self._cancel_pending()

        state = self._state
        state.is_pagination_finished = False
        state.cursor = None
        state.retry_count = 0

        logger.info("Refreshing list", extra={"records": len(state.items)})
        return self.fetch_next()

    def on_near_end_of_list(self, visible_index: int) -> "asyncio.Task[None] | None":
        """
        Prefetch hook for scrolling.

        Args:
            visible_index: Index of the row that was just displayed

        Returns:
            The fetch task if the next page was requested, None otherwise.
        """
        state = self._state
        if state.is_pagination_finished:
            return None
        if visible_index != len(state.items) - PREFETCH_THRESHOLD:
            return None
        return self.fetch_next()

    async def wait_idle(self) -> None:
        """Waits until no fetch is outstanding and no retry is pending."""
        await self._idle.wait()

    def close(self) -> None:
        """
        Tears the engine down.

        Cancels the pending retry timer and the outstanding fetch, and drops
        every listener. Completions that arrive afterwards are ignored.
        Calling close() twice is harmless.
        """
        if self._closed:
            return
        self._closed = True
        self._cancel_pending()
        self._signals.clear()
        logger.info("Engine closed", extra={"records": len(self._state.items)})

    def __enter__(self) -> "PaginationEngine":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> "PaginationEngine":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _is_current(self, generation: int) -> bool:
        """False once the fetch has been superseded or the engine closed."""
        return not self._closed and generation == self._generation

    async def _run_fetch(self, cursor: str | None, generation: int) -> None:
        try:
            page = await self.fetcher.fetch(cursor)
        except Exception as e:
            if not self._is_current(generation):
                return
            self._task = None
            self._handle_failure(describe_failure(e))
            return

        if not self._is_current(generation):
            return
        self._task = None
        self._handle_success(page)

    def _handle_success(self, page: "Page") -> None:
        state = self._state
        state.retry_count = 0

        # A first page supersedes whatever an earlier session left behind
        if state.cursor is None and state.items:
            state.items = []

        added = 0
        if page.records:
            seen = {item.id for item in state.items}
            for record in page.records:
                if record.id in seen:
                    continue
                seen.add(record.id)
                state.items.append(record)
                added += 1
        elif state.items:
            state.items = []

        state.cursor = page.next_cursor
        if page.next_cursor is None:
            state.is_pagination_finished = True
            logger.info("Pagination finished", extra={"records": len(state.items)})

        self._mark_idle()

        logger.debug(
            "Page merged",
            extra={
                "received": page.count,
                "added": added,
                "records": len(state.items),
                "cursor_hash": redact_cursor(state.cursor),
            },
        )

        items = tuple(state.items)
        self._signals.emit("data_changed", items)
        if self._closed:
            return
        self._signals.emit("empty_state_changed", not items)

    def _handle_failure(self, description: str) -> None:
        state = self._state
        policy = self.retry_policy
        state.retry_count += 1
        state.fetch_in_flight = False

        if policy.should_retry(state.retry_count):
            logger.warning(
                "Page fetch failed, retrying",
                extra={
                    "description": description,
                    "retry_count": state.retry_count,
                    "delay": policy.delay,
                },
            )
            # Armed before notifying so a listener cannot start a second fetch
            self._schedule_retry()
            self._signals.emit(
                "error",
                f"Error occurred: {description}. "
                f"Retrying... ({state.retry_count}/{policy.max_attempts})",
            )
            if self._closed:
                return
            self._signals.emit("retry_scheduled")
        else:
            logger.warning(
                "Page fetch failed, retries exhausted",
                extra={"description": description, "retry_count": state.retry_count},
            )
            self._mark_idle()
            self._signals.emit(
                "error",
                f"Error occurred after {policy.max_attempts} attempts. Please try again later.",
            )
            if self._closed:
                return
            self._signals.emit("fetch_ended")

    def _schedule_retry(self) -> None:
        self._state.fetch_in_flight = True
        self._retry_handle = self._get_loop().call_later(self.retry_policy.delay, self._fire_retry)

    def _fire_retry(self) -> None:
        self._retry_handle = None
        if self._closed:
            return
        self._state.fetch_in_flight = False
        self.fetch_next()

    def _cancel_pending(self) -> None:
        self._generation += 1
        if self._retry_handle is not None:
            self._retry_handle.cancel()
            self._retry_handle = None
        if self._task is not None:
            self._task.cancel()
            self._task = None
        self._mark_idle()

    def _mark_idle(self) -> None:
        if self._task is None and self._retry_handle is None:
            self._state.fetch_in_flight = False
            self._idle.set()
