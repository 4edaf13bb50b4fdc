import asyncio
from typing import Callable, List, Optional, Tuple

import pytest

from listdeck.models import Item, Page, Query, page_count


class FakeTimer:

    def __init__(self, due_ms: int, callback: Callable, args: tuple):
        self.due_ms = due_ms
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """Stands in for ``loop.call_later`` so debounce timing is deterministic."""

    def __init__(self):
        self.now_ms = 0
        self.timers: List[FakeTimer] = []
        self.fired_at: List[int] = []

    def call_later(self, delay: float, callback: Callable, *args) -> FakeTimer:
        timer = FakeTimer(self.now_ms + round(delay * 1000), callback, args)
        self.timers.append(timer)
        return timer

    @property
    def armed(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = sorted(
                (timer for timer in self.armed if timer.due_ms <= target),
                key=lambda timer: timer.due_ms,
            )
            if not due:
                break
            timer = due[0]
            self.timers.remove(timer)
            self.now_ms = timer.due_ms
            self.fired_at.append(self.now_ms)
            timer.callback(*timer.args)
        self.now_ms = target


def make_item(index: int, active: bool = True, **data) -> Item:
    record = {
        "_id": f"p{index}",
        "title": data.pop("title", f"Property {index}"),
        "isActive": active,
    }
    record.update(data)
    return Item(id=record["_id"], is_active=active, data=record)


class FakeListApi:
    """In-memory Resource/Mutation API.

    With ``manual=True`` every fetch parks on a future the test resolves, so
    response ordering can be controlled.
    """

    def __init__(self, items: Optional[List[Item]] = None, manual: bool = False):
        self.items: List[Item] = list(items or [])
        self.manual = manual
        self.fetch_calls: List[Query] = []
        self.held: List[Tuple[Query, asyncio.Future]] = []
        self.toggle_calls: List[str] = []
        self.delete_calls: List[str] = []
        self.fetch_error: Optional[Exception] = None
        self.toggle_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.echo_toggle = True
        self.toggle_gate: Optional[asyncio.Future] = None

    def page_for(self, query: Query) -> Page:
        term = query.search_term.lower()
        matches = [
            item for item in self.items
            if term in str(item.data.get("title", "")).lower()
        ]
        start = (query.page - 1) * query.page_size
        return Page(
            items=matches[start:start + query.page_size],
            page=query.page,
            total_pages=page_count(len(matches), query.page_size),
            total_count=len(matches),
        )

    async def fetch_page(self, query: Query) -> Page:
        self.fetch_calls.append(query)
        if self.manual:
            future = asyncio.get_running_loop().create_future()
            self.held.append((query, future))
            return await future
        await asyncio.sleep(0)
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.page_for(query)

    async def toggle_status(self, item_id: str):
        self.toggle_calls.append(item_id)
        if self.toggle_gate is not None:
            await self.toggle_gate
        else:
            await asyncio.sleep(0)
        if self.toggle_error is not None:
            raise self.toggle_error
        for index, item in enumerate(self.items):
            if item.id == item_id:
                flipped = Item(id=item.id, is_active=not item.is_active, data=item.data)
                self.items[index] = flipped
                return flipped.is_active if self.echo_toggle else None
        return None

    async def delete_item(self, item_id: str) -> None:
        self.delete_calls.append(item_id)
        await asyncio.sleep(0)
        if self.delete_error is not None:
            raise self.delete_error
        self.items = [item for item in self.items if item.id != item_id]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def catalog():
    return [make_item(index) for index in range(1, 26)]
