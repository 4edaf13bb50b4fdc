"""Coalesce rapid query changes into a single dispatch."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional, Protocol

from .models import Query

logger = logging.getLogger(__name__)

SEARCH_DELAY_MS = 300
IMMEDIATE_MS = 0


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


CallLater = Callable[..., TimerHandle]


class DebounceScheduler:
    """Holds at most one armed timer; re-arming cancels the previous one."""

    def __init__(self,
                 on_fire: Callable[[Query], Any],
                 call_later: CallLater | None = None):
        self.on_fire = on_fire
        self._call_later = call_later
        self._handle: Optional[TimerHandle] = None
        self._pending: Optional[Query] = None

    @property
    def pending(self) -> Optional[Query]:
        """The query waiting for its quiet period, if any."""
        return self._pending

    def schedule(self, query: Query, delay_ms: int) -> None:
        self.cancel()
        if delay_ms <= 0:
            self.on_fire(query)
            return
        call_later = self._call_later or asyncio.get_running_loop().call_later
        self._pending = query
        self._handle = call_later(delay_ms / 1000, self._fire, query)
        logger.debug("Armed %d ms timer for %r", delay_ms, query.search_term)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Cancelled superseded timer")
        self._handle = None
        self._pending = None

    def _fire(self, query: Query) -> None:
        self._handle = None
        self._pending = None
        self.on_fire(query)
