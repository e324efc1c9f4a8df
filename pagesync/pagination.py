"""
Pagination primitives for pagesync.

A Page is what a PageFetcher hands back for one request: a batch of records
plus the opaque cursor for the request after it.
"""

from dataclasses import dataclass, field

from .models import Record


@dataclass
class Page:
    """
    Represents a single page of records with its pagination cursor.

    Attributes:
        records: Records of this page, in server order
        next_cursor: Cursor for the next page (None if this is the last page)
    """

    records: list[Record] = field(default_factory=list)
    next_cursor: str | None = None

    @property
    def has_more(self) -> bool:
        """Returns True if there are more pages available."""
        return self.next_cursor is not None

    @property
    def count(self) -> int:
        """Number of records in this page."""
        return len(self.records)
