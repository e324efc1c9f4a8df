"""
Unit tests for InMemoryPageFetcher and its use with the engine.
"""

import asyncio
import random

import pytest

from pagesync import (
    CursorError,
    FetchError,
    InMemoryPageFetcher,
    PageFetcher,
    PaginationEngine,
    Record,
    RetryPolicy,
)


def people(count: int) -> list[Record]:
    return [Record(id=str(i), display_name=f"Person {i}") for i in range(count)]


@pytest.mark.unit
class TestInMemoryPageFetcher:
    def test_is_a_page_fetcher(self):
        assert isinstance(InMemoryPageFetcher([]), PageFetcher)

    @pytest.mark.asyncio
    async def test_pages_through_records(self):
        fetcher = InMemoryPageFetcher(people(25), page_size=10)

        first = await fetcher.fetch(None)
        second = await fetcher.fetch(first.next_cursor)
        third = await fetcher.fetch(second.next_cursor)

        assert [r.id for r in first.records] == [str(i) for i in range(10)]
        assert first.next_cursor == "10"
        assert second.next_cursor == "20"
        assert third.count == 5
        assert third.next_cursor is None
        assert third.has_more is False

    @pytest.mark.asyncio
    async def test_fetching_keeps_no_per_call_state(self):
        fetcher = InMemoryPageFetcher(people(5), page_size=2)
        before = dict(vars(fetcher))

        for _ in range(50):
            await fetcher.fetch(None)
            await fetcher.fetch("2")

        assert vars(fetcher) == before

    @pytest.mark.asyncio
    async def test_exact_multiple_ends_on_last_full_page(self):
        fetcher = InMemoryPageFetcher(people(20), page_size=10)

        second = await fetcher.fetch("10")

        assert second.count == 10
        assert second.next_cursor is None

    @pytest.mark.asyncio
    async def test_empty_source(self):
        page = await InMemoryPageFetcher([]).fetch(None)
        assert page.records == []
        assert page.next_cursor is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("cursor", ["abc", "-1", "999"])
    async def test_invalid_cursor(self, cursor):
        fetcher = InMemoryPageFetcher(people(5))
        with pytest.raises(CursorError) as exc_info:
            await fetcher.fetch(cursor)
        assert exc_info.value.cursor == cursor
        assert isinstance(exc_info.value, FetchError)

    @pytest.mark.asyncio
    async def test_failure_rate_one_always_fails(self):
        fetcher = InMemoryPageFetcher(people(5), failure_rate=1.0)
        with pytest.raises(FetchError, match="Internal Server Error"):
            await fetcher.fetch(None)

    @pytest.mark.asyncio
    async def test_seeded_failures_are_reproducible(self):
        async def outcomes(seed):
            fetcher = InMemoryPageFetcher(people(5), failure_rate=0.5, rng=random.Random(seed))
            results = []
            for _ in range(20):
                try:
                    await fetcher.fetch(None)
                    results.append("ok")
                except FetchError:
                    results.append("fail")
            return results

        first = await outcomes(7)
        assert first == await outcomes(7)
        assert "ok" in first and "fail" in first

    @pytest.mark.parametrize(
        "kwargs", [{"page_size": 0}, {"failure_rate": -0.1}, {"failure_rate": 1.5}]
    )
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(ValueError):
            InMemoryPageFetcher(people(1), **kwargs)


@pytest.mark.unit
class TestEngineWithInMemoryFetcher:
    @pytest.mark.asyncio
    async def test_scrolling_loads_everything(self):
        fetcher = InMemoryPageFetcher(people(23), page_size=5)
        async with PaginationEngine(fetcher, RetryPolicy(delay=0)) as engine:
            await engine.fetch_next()
            while not engine.is_pagination_finished:
                task = engine.on_near_end_of_list(len(engine) - 3)
                assert task is not None
                await task

            assert len(engine) == 23
            assert [r.id for r in engine.items] == [str(i) for i in range(23)]

    @pytest.mark.asyncio
    async def test_latency_keeps_fetch_in_flight(self):
        calls = []

        class CountingFetcher(InMemoryPageFetcher):
            async def fetch(self, cursor):
                calls.append(cursor)
                return await super().fetch(cursor)

        fetcher = CountingFetcher(people(3), latency=0.05)
        async with PaginationEngine(fetcher, RetryPolicy(delay=0)) as engine:
            task = engine.fetch_next()
            await asyncio.sleep(0.01)
            assert engine.fetch_in_flight is True
            assert engine.fetch_next() is None
            await task
            assert engine.fetch_in_flight is False
            assert calls == [None]
