"""
Scrolling through a flaky backend

Simulates a list screen backed by an unreliable API: a third of the calls
fail, every call takes a little while, and one page repeats a record.
The console "view" prints what a real table view would render.
"""

import asyncio
import logging
import random

from pagesync import (
    InMemoryPageFetcher,
    ListPresenter,
    PaginationEngine,
    Record,
    RetryPolicy,
)

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

PEOPLE = [Record(id=str(i), display_name=f"Person {i}") for i in range(1, 38)]
PEOPLE.insert(15, PEOPLE[12])  # duplicate across pages, shown once


class ConsoleView:
    def __init__(self) -> None:
        self.presenter: ListPresenter | None = None

    def reload_data(self) -> None:
        assert self.presenter is not None
        print(f"  table now has {self.presenter.row_count} rows")

    def set_empty_view_visible(self, visible: bool) -> None:
        if visible:
            print("  (no people found)")

    def show_toast(self, message: str) -> None:
        print(f"  toast: {message}")

    def begin_refreshing(self) -> None:
        print("  spinner on")

    def end_refreshing(self) -> None:
        print("  spinner off")


async def main() -> None:
    fetcher = InMemoryPageFetcher(
        PEOPLE, page_size=10, failure_rate=0.3, latency=0.1, rng=random.Random(3)
    )
    view = ConsoleView()

    async with PaginationEngine(fetcher, RetryPolicy(delay=0.5)) as engine:
        presenter = ListPresenter(engine, view)
        view.presenter = presenter

        presenter.load()
        await engine.wait_idle()

        # Scroll: display rows one by one until the list is exhausted
        row = 0
        while row < presenter.row_count:
            presenter.will_display(row)
            await engine.wait_idle()
            row += 1

        print(f"\nLoaded {presenter.row_count} people, finished={engine.is_pagination_finished}")

        print("\nPull to refresh:")
        presenter.pull_to_refresh()
        await engine.wait_idle()
        print(f"After refresh: {presenter.row_count} rows")


if __name__ == "__main__":
    asyncio.run(main())
