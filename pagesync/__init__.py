from .config import PREFETCH_THRESHOLD, EngineState, RetryPolicy
from .dynamo import DynamoPageFetcher
from .engine import PaginationEngine
from .events import BaseListener, EngineListener, SignalHub, Subscription
from .exceptions import (
    CursorError,
    FetchError,
    PageSyncError,
    RequestTimeoutError,
    TableNotFoundError,
    ThrottledError,
)
from .fetchers import InMemoryPageFetcher, PageFetcher
from .models import Record
from .pagination import Page
from .presenter import ListPresenter, ListView
from .serializer import CursorSerializer

__all__ = [
    "PaginationEngine",
    "Record",
    "Page",
    # Configuration
    "RetryPolicy",
    "EngineState",
    "PREFETCH_THRESHOLD",
    # Signals
    "EngineListener",
    "BaseListener",
    "SignalHub",
    "Subscription",
    # Presentation
    "ListPresenter",
    "ListView",
    # Fetchers
    "PageFetcher",
    "InMemoryPageFetcher",
    "DynamoPageFetcher",
    "CursorSerializer",
    # Exceptions
    "PageSyncError",
    "FetchError",
    "CursorError",
    "TableNotFoundError",
    "ThrottledError",
    "RequestTimeoutError",
]
