"""
Page fetchers: the collaborators the engine pulls pages from.

A fetcher is stateless per call and does not retry on its own; retrying is
the engine's job. Failures are raised (preferably as FetchError).
"""

import asyncio
import random
from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ._logging import logger, redact_cursor
from .exceptions import CursorError, FetchError
from .models import Record
from .pagination import Page


@runtime_checkable
class PageFetcher(Protocol):
    """Anything that can fetch the page identified by a cursor."""

    async def fetch(self, cursor: str | None) -> Page:
        """
        Fetches one page.

        Args:
            cursor: Cursor returned with the previous page, None for the first page

        Returns:
            The page; its next_cursor is None on the last page.

        Raises:
            FetchError: If the page could not be fetched
        """
        ...


class InMemoryPageFetcher:
    """
    Serves a fixed list of records page by page.

    The cursor is the offset of the next slice, as a string. Useful for demos
    and tests: ``failure_rate`` makes a share of the calls fail and
    ``latency`` delays every call, both simulating a flaky backend.
    """

    def __init__(
        self,
        records: Iterable[Record],
        page_size: int = 10,
        *,
        failure_rate: float = 0.0,
        latency: float = 0.0,
        rng: random.Random | None = None,
    ) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError(f"failure_rate must be between 0 and 1, got {failure_rate}")

        self.records = list(records)
        self.page_size = page_size
        self.failure_rate = failure_rate
        self.latency = latency
        self.rng = rng or random.Random()

    def _parse_cursor(self, cursor: str | None) -> int:
        if cursor is None:
            return 0
        try:
            offset = int(cursor)
        except ValueError as e:
            raise CursorError(cursor, original_error=e) from e
        if not 0 <= offset <= len(self.records):
            raise CursorError(cursor)
        return offset

    async def fetch(self, cursor: str | None) -> Page:
        if self.latency:
            await asyncio.sleep(self.latency)

        offset = self._parse_cursor(cursor)

        if self.failure_rate and self.rng.random() < self.failure_rate:
            logger.debug("Simulated fetch failure", extra={"cursor_hash": redact_cursor(cursor)})
            raise FetchError("Internal Server Error")

        end = offset + self.page_size
        records = self.records[offset:end]
        next_cursor = str(end) if end < len(self.records) else None
        return Page(records=records, next_cursor=next_cursor)
