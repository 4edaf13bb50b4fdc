"""Composition root: one list screen's search, paging and mutation state."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, List, Mapping

from .api import MutationApi, ResourceApi
from .debounce import IMMEDIATE_MS, SEARCH_DELAY_MS, CallLater, DebounceScheduler
from .errors import FetchFailed
from .filters import FilterCompiler
from .models import ListSnapshot, ListStatus, MutationResult, Page, Query
from .mutations import DeletionCoordinator, OptimisticMutator, PendingMutations
from .pagination import PaginationState
from .sequencer import RequestSequencer

logger = logging.getLogger(__name__)

Listener = Callable[[ListSnapshot], None]


class ListController:
    """Reconciles keystrokes, page clicks and mutations into one ListSnapshot.

    All methods must be called from the thread running the event loop. The
    synchronous actions (``set_search_term``, ``set_filter``, ``go_to_page``,
    ``refresh``) schedule work and return at once; ``toggle`` and ``delete``
    are coroutines that resolve to a ``MutationResult``. Nothing raised by the
    collaborators escapes: fetch errors land on the snapshot and mutation
    errors on the result.
    """

    def __init__(
        self,
        resource_api: ResourceApi,
        mutation_api: MutationApi,
        compiler: FilterCompiler | None = None,
        *,
        search_delay_ms: int = SEARCH_DELAY_MS,
        filter_delay_ms: int = IMMEDIATE_MS,
        external_params: Mapping[str, str] | None = None,
        call_later: CallLater | None = None,
    ):
        self.compiler = compiler or FilterCompiler()
        self.search_delay_ms = search_delay_ms
        self.filter_delay_ms = filter_delay_ms
        self.pagination = PaginationState(page_size=self.compiler.page_size)
        self._snapshot = ListSnapshot()
        self._listeners: List[Listener] = []
        self._closed = False

        self.scheduler = DebounceScheduler(self._dispatch, call_later=call_later)
        self.sequencer = RequestSequencer(
            resource_api.fetch_page,
            on_page=self._apply_page,
            on_failure=self._apply_failure,
        )
        pending = PendingMutations()
        self.mutator = OptimisticMutator(mutation_api,
                                         self._read,
                                         self._publish,
                                         pending=pending)
        self.deleter = DeletionCoordinator(mutation_api,
                                           self._read,
                                           self._publish,
                                           pagination=self.pagination,
                                           on_page_emptied=self.go_to_page,
                                           pending=pending)
        if external_params:
            self.compiler.seed(external_params)

    @property
    def snapshot(self) -> ListSnapshot:
        return self._snapshot

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a snapshot listener; the returned callable unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def refresh(self) -> None:
        """Re-fetch the current page immediately."""
        self._schedule(self.compiler.compile(page=self.pagination.page), IMMEDIATE_MS)

    def set_search_term(self, term: str) -> None:
        self.compiler.set_search_term(term)
        self._schedule(self.compiler.compile(page=1), self.search_delay_ms)

    def set_filter(self, name: str, value: str | None) -> None:
        self.compiler.set_filter(name, value)
        self._schedule(self.compiler.compile(page=1), self.filter_delay_ms)

    def go_to_page(self, page: int) -> None:
        target = self.pagination.clamp(page)
        self._schedule(self.compiler.compile(page=target), IMMEDIATE_MS)

    async def toggle(self, item_id: str) -> MutationResult:
        return await self.mutator.toggle(item_id)

    async def delete(self, item_id: str, confirmed: bool) -> MutationResult:
        return await self.deleter.delete(item_id, confirmed)

    async def settle(self) -> None:
        """Wait for every in-flight fetch; armed timers are left alone."""
        await self.sequencer.drain()

    def close(self) -> None:
        """Unmount: drop the armed timer and stop honouring in-flight fetches."""
        self._closed = True
        self.scheduler.cancel()
        self.sequencer.abandon()
        self._listeners.clear()

    def _read(self) -> ListSnapshot:
        return self._snapshot

    def _publish(self, snapshot: ListSnapshot) -> None:
        self._snapshot = snapshot
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:  # noqa: BLE001
                logger.exception("Snapshot listener %r failed", listener)

    def _schedule(self, query: Query, delay_ms: int) -> None:
        if self._closed:
            logger.debug("Controller closed; ignoring %r", query)
            return
        if delay_ms > 0:
            self._publish(replace(self._snapshot,
                                  status=ListStatus.DEBOUNCING,
                                  error_message=None))
        self.scheduler.schedule(query, delay_ms)

    def _dispatch(self, query: Query) -> None:
        if self._closed:
            return
        query = self.pagination.prepare(query)
        self._publish(replace(self._snapshot,
                              status=ListStatus.FETCHING,
                              error_message=None))
        self.sequencer.dispatch(query)

    def _apply_page(self, token: int, query: Query, page: Page) -> None:
        self.pagination.accept(page)
        self._publish(ListSnapshot(
            items=tuple(page.items),
            page=self.pagination.page,
            total_pages=self.pagination.total_pages,
            total_count=self.pagination.total_count,
            status=ListStatus.LOADED,
        ))
        logger.debug("Applied token %d: page %d/%d (%d items)",
                     token, self.pagination.page, self.pagination.total_pages,
                     len(page.items))
        if not page.items and page.page > self.pagination.page:
            logger.info("Page %d is past the end; moving to page %d",
                        page.page, self.pagination.page)
            self._schedule(query.with_page(self.pagination.page), IMMEDIATE_MS)

    def _apply_failure(self, token: int, query: Query, error: FetchFailed) -> None:
        self.pagination.reject()
        self._publish(replace(self._snapshot,
                              status=ListStatus.ERROR,
                              error_message=str(error)))
