"""Token-tagged request dispatch that drops superseded responses."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Awaitable, Callable, Optional, Set

from .errors import FetchFailed, StaleResponseDiscarded
from .models import Page, Query

logger = logging.getLogger(__name__)

FetchPage = Callable[[Query], Awaitable[Page]]


class RequestSequencer:
    """Issues one fetch per dispatch; only the newest token may apply."""

    def __init__(
        self,
        fetch_page: FetchPage,
        on_page: Callable[[int, Query, Page], None],
        on_failure: Callable[[int, Query, FetchFailed], None],
    ):
        self.fetch_page = fetch_page
        self.on_page = on_page
        self.on_failure = on_failure
        self._tokens = itertools.count(1)
        self.current_token: Optional[int] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    def dispatch(self, query: Query) -> int:
        token = next(self._tokens)
        self.current_token = token
        logger.debug("Dispatching token %d for page %d", token, query.page)
        task = asyncio.get_running_loop().create_task(self._run(token, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return token

    def abandon(self) -> None:
        """Stop treating any in-flight request as current."""
        self.current_token = None

    async def drain(self) -> None:
        """Wait until no request is in flight, including ones dispatched meanwhile."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _ensure_current(self, token: int) -> None:
        if token != self.current_token:
            raise StaleResponseDiscarded(token, self.current_token)

    async def _run(self, token: int, query: Query) -> None:
        try:
            try:
                page = await self.fetch_page(query)
            except Exception as exc:  # noqa: BLE001
                self._ensure_current(token)
                logger.warning("Fetch for token %d failed: %s", token, exc)
                self.on_failure(token, query, FetchFailed(str(exc) or type(exc).__name__))
                return
            self._ensure_current(token)
            try:
                self.on_page(token, query, page)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Applying page %d for token %d failed", query.page, token)
                self.on_failure(token, query, FetchFailed(str(exc) or type(exc).__name__))
        except StaleResponseDiscarded as stale:
            logger.debug("Discarded stale response: %s", stale)
