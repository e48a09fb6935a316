"""
Tests del ListingFetchLoop.
"""

import asyncio

import pytest

from conftest import make_page
from vitrina.listing import FetchState, ListingFetchLoop, PageStatus
from vitrina.models import FilterState


def ids_of(loop):
    return [item.id for item in loop.items]


class PagedBackend:
    """Backend falso: páginas fijas por número, registra cada pedido."""

    def __init__(self, pages, total):
        self.pages = pages
        self.total = total
        self.calls = []

    async def __call__(self, filters, page, limit):
        self.calls.append((filters, page))
        return make_page(self.pages[page], page=page, limit=limit, total=self.total)


async def test_initial_load_moves_to_loaded():
    backend = PagedBackend({1: ["1", "2", "3"], 2: ["4"]}, total=4)
    loop = ListingFetchLoop(backend, page_size=3)

    assert loop.state is FetchState.IDLE
    result = await loop.apply_filters(FilterState(city="Cairo"))

    assert result.status is PageStatus.APPLIED
    assert loop.state is FetchState.LOADED
    assert loop.has_next_page
    assert ids_of(loop) == ["1", "2", "3"]
    assert backend.calls == [(FilterState(city="Cairo"), 1)]


async def test_overlapping_pages_are_deduplicated():
    backend = PagedBackend({1: ["1", "2", "3"], 2: ["3", "4", "5"]}, total=6)
    loop = ListingFetchLoop(backend, page_size=3)

    await loop.apply_filters(FilterState())
    result = await loop.on_sentinel_visible()

    assert ids_of(loop) == ["1", "2", "3", "4", "5"]
    assert result.added == 2
    assert loop.page == 2


async def test_last_page_exhausts_the_loop():
    backend = PagedBackend({1: ["1", "2"], 2: ["3"]}, total=3)
    loop = ListingFetchLoop(backend, page_size=2)

    await loop.apply_filters(FilterState())
    await loop.load_more()

    assert loop.state is FetchState.EXHAUSTED
    assert (await loop.load_more()).status is PageStatus.SKIPPED
    assert len(backend.calls) == 2


async def test_filter_change_resets_and_restarts_at_page_one():
    backend = PagedBackend({1: ["1", "2"], 2: ["3", "4"]}, total=10)
    loop = ListingFetchLoop(backend, page_size=2)

    await loop.apply_filters(FilterState(city="Cairo"))
    await loop.load_more()
    assert loop.page == 2

    await loop.apply_filters(FilterState(city="Cairo", bedrooms=3))

    assert loop.page == 1
    assert ids_of(loop) == ["1", "2"]
    assert backend.calls[-1] == (FilterState(city="Cairo", bedrooms=3), 1)


async def test_same_filters_do_not_refetch():
    backend = PagedBackend({1: ["1"]}, total=1)
    loop = ListingFetchLoop(backend, page_size=2)

    await loop.apply_filters(FilterState(city="Cairo"))
    result = await loop.apply_filters(FilterState(city="Cairo"))

    assert result.status is PageStatus.SKIPPED
    assert len(backend.calls) == 1


async def test_only_one_request_in_flight():
    gate = asyncio.Event()

    async def fetch(filters, page, limit):
        if page == 2:
            await gate.wait()
        ids = {1: ["a", "b"], 2: ["c", "d"]}[page]
        return make_page(ids, page=page, limit=limit, total=6)

    loop = ListingFetchLoop(fetch, page_size=2)
    await loop.apply_filters(FilterState())

    pending = asyncio.create_task(loop.on_sentinel_visible())
    await asyncio.sleep(0)
    assert loop.in_flight
    assert loop.is_fetching_next_page

    duplicate = await loop.on_sentinel_visible()
    assert duplicate.status is PageStatus.SKIPPED

    gate.set()
    result = await pending
    assert result.status is PageStatus.APPLIED
    assert ids_of(loop) == ["a", "b", "c", "d"]
    assert not loop.in_flight


async def test_stale_page_from_previous_filters_is_discarded():
    gate = asyncio.Event()

    async def fetch(filters, page, limit):
        if filters.city == "Cairo":
            await gate.wait()
            return make_page(["old-1", "old-2"], page=page, limit=limit, total=2)
        return make_page(["new-1"], page=page, limit=limit, total=1)

    loop = ListingFetchLoop(fetch, page_size=2)

    first = asyncio.create_task(loop.apply_filters(FilterState(city="Cairo")))
    await asyncio.sleep(0)
    await loop.apply_filters(FilterState(city="Giza"))

    gate.set()
    stale = await first

    assert stale.status is PageStatus.STALE
    assert ids_of(loop) == ["new-1"]
    assert loop.filters == FilterState(city="Giza")
    assert loop.state is FetchState.EXHAUSTED


async def test_stale_request_does_not_release_new_in_flight_flag():
    gates = {"Cairo": asyncio.Event(), "Giza": asyncio.Event()}

    async def fetch(filters, page, limit):
        await gates[filters.city].wait()
        return make_page([filters.city], page=page, limit=limit, total=5)

    loop = ListingFetchLoop(fetch, page_size=1)
    old = asyncio.create_task(loop.apply_filters(FilterState(city="Cairo")))
    await asyncio.sleep(0)
    new = asyncio.create_task(loop.apply_filters(FilterState(city="Giza")))
    await asyncio.sleep(0)

    gates["Cairo"].set()
    assert (await old).status is PageStatus.STALE
    assert loop.in_flight
    assert loop.is_loading

    gates["Giza"].set()
    assert (await new).status is PageStatus.APPLIED
    assert ids_of(loop) == ["Giza"]


async def test_failure_moves_to_error_and_retry_refetches_same_page():
    attempts = {"count": 0}

    async def fetch(filters, page, limit):
        if page == 2:
            attempts["count"] += 1
            if attempts["count"] == 1:
                raise ConnectionError("network down")
        ids = {1: ["1", "2"], 2: ["3", "4"]}[page]
        return make_page(ids, page=page, limit=limit, total=4)

    loop = ListingFetchLoop(fetch, page_size=2)
    await loop.apply_filters(FilterState())

    failed = await loop.load_more()
    assert failed.status is PageStatus.FAILED
    assert loop.state is FetchState.ERROR
    assert loop.error == "network down"
    assert ids_of(loop) == ["1", "2"]

    assert (await loop.load_more()).status is PageStatus.SKIPPED

    retried = await loop.retry()
    assert retried.status is PageStatus.APPLIED
    assert retried.page == 2
    assert ids_of(loop) == ["1", "2", "3", "4"]
    assert loop.state is FetchState.EXHAUSTED
    assert loop.error is None


async def test_retry_outside_error_state_is_skipped():
    backend = PagedBackend({1: ["1"]}, total=1)
    loop = ListingFetchLoop(backend, page_size=2)
    assert (await loop.retry()).status is PageStatus.SKIPPED


async def test_empty_page_stops_pagination():
    async def fetch(filters, page, limit):
        # total desactualizado: el backend dice que hay más pero no manda nada
        return make_page([], page=page, limit=limit, total=50)

    loop = ListingFetchLoop(fetch, page_size=10)
    await loop.apply_filters(FilterState())
    assert loop.state is FetchState.EXHAUSTED


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        ListingFetchLoop(PagedBackend({}, total=0), page_size=0)
