"""
Thin adapter between a PaginationEngine and a list view.

The presenter owns no pagination state; it forwards user actions to the
engine and translates engine signals into view calls.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from .events import BaseListener

if TYPE_CHECKING:
    import asyncio

    from .engine import PaginationEngine
    from .models import Record


class ListView(Protocol):
    """What the presenter needs from the screen showing the list."""

    def reload_data(self) -> None: ...

    def set_empty_view_visible(self, visible: bool) -> None: ...

    def show_toast(self, message: str) -> None: ...

    def begin_refreshing(self) -> None: ...

    def end_refreshing(self) -> None: ...


class ListPresenter(BaseListener):
    """
    Drives a ListView from a PaginationEngine.

    Subscribes to the engine on construction; call detach() when the view
    goes away (or close the engine, which drops every listener).
    """

    def __init__(self, engine: "PaginationEngine", view: ListView) -> None:
        self.engine = engine
        self.view = view
        self._subscription = engine.subscribe(self)

    @property
    def row_count(self) -> int:
        return len(self.engine)

    def record_at(self, row: int) -> "Record":
        return self.engine.record_at(row)

    def load(self) -> "asyncio.Task[None] | None":
        return self.engine.fetch_next()

    def pull_to_refresh(self) -> "asyncio.Task[None] | None":
        return self.engine.refresh()

    def will_display(self, row: int) -> "asyncio.Task[None] | None":
        return self.engine.on_near_end_of_list(row)

    def detach(self) -> None:
        self._subscription.unsubscribe()

    # Engine signals

    def data_changed(self, items: Sequence["Record"]) -> None:
        self.view.reload_data()
        self.view.end_refreshing()

    def empty_state_changed(self, is_empty: bool) -> None:
        self.view.set_empty_view_visible(is_empty)

    def error(self, message: str) -> None:
        self.view.show_toast(message)

    def retry_scheduled(self) -> None:
        self.view.begin_refreshing()

    def fetch_ended(self) -> None:
        self.view.end_refreshing()
