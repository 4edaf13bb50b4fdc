"""Optimistic status toggles and confirmed deletions against the visible list."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Dict

from .api import MutationApi
from .errors import MutationConflict, MutationFailed
from .models import ListSnapshot, MutationKind, MutationResult, PendingMutation
from .pagination import PaginationState

logger = logging.getLogger(__name__)

ReadSnapshot = Callable[[], ListSnapshot]
WriteSnapshot = Callable[[ListSnapshot], None]


class PendingMutations:
    """At most one in-flight mutation per item id."""

    def __init__(self) -> None:
        self._pending: Dict[str, PendingMutation] = {}

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def begin(self, item_id: str, kind: MutationKind, prior_value: bool) -> PendingMutation:
        if item_id in self._pending:
            raise MutationConflict(item_id)
        pending = PendingMutation(item_id=item_id, kind=kind, prior_value=prior_value)
        self._pending[item_id] = pending
        return pending

    def finish(self, item_id: str) -> None:
        self._pending.pop(item_id, None)


class OptimisticMutator:
    """Flip ``is_active`` immediately, confirm with the server, roll back on failure."""

    def __init__(self,
                 api: MutationApi,
                 read: ReadSnapshot,
                 write: WriteSnapshot,
                 pending: PendingMutations | None = None):
        self.api = api
        self.read = read
        self.write = write
        self.pending = pending or PendingMutations()

    async def toggle(self, item_id: str) -> MutationResult:
        item = self.read().find(item_id)
        if item is None:
            error = MutationFailed(item_id, f"item {item_id} is not in the current list")
            return MutationResult(item_id, MutationKind.TOGGLE, ok=False, error=error)
        try:
            pending = self.pending.begin(item_id, MutationKind.TOGGLE, item.is_active)
        except MutationConflict as exc:
            logger.info("Rejected toggle for %s: %s", item_id, exc)
            return MutationResult(item_id, MutationKind.TOGGLE, ok=False, error=exc)

        self._set_active(item_id, not pending.prior_value)
        try:
            echoed = await self.api.toggle_status(item_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Toggle for %s failed, rolling back: %s", item_id, exc)
            self._set_active(item_id, pending.prior_value)
            error = MutationFailed(item_id, str(exc) or type(exc).__name__)
            return MutationResult(item_id,
                                  MutationKind.TOGGLE,
                                  ok=False,
                                  is_active=pending.prior_value,
                                  error=error)
        finally:
            self.pending.finish(item_id)

        value = (not pending.prior_value) if echoed is None else bool(echoed)
        self._set_active(item_id, value)
        logger.info("Toggled %s to %s", item_id, "active" if value else "inactive")
        return MutationResult(item_id, MutationKind.TOGGLE, ok=True, is_active=value)

    def _set_active(self, item_id: str, value: bool) -> None:
        # Last writer wins: whatever list is visible now receives the value.
        snapshot = self.read()
        item = snapshot.find(item_id)
        if item is None or item.is_active == value:
            return
        self.write(snapshot.with_item(replace(item, is_active=value)))


class DeletionCoordinator:
    """Delete on the server first, then evict locally."""

    def __init__(self,
                 api: MutationApi,
                 read: ReadSnapshot,
                 write: WriteSnapshot,
                 pagination: PaginationState,
                 on_page_emptied: Callable[[int], None],
                 pending: PendingMutations | None = None):
        self.api = api
        self.read = read
        self.write = write
        self.pagination = pagination
        self.on_page_emptied = on_page_emptied
        self.pending = pending or PendingMutations()

    async def delete(self, item_id: str, confirmed: bool) -> MutationResult:
        if not confirmed:
            logger.debug("Deletion of %s not confirmed; nothing to do", item_id)
            return MutationResult(item_id, MutationKind.DELETE, ok=False)

        item = self.read().find(item_id)
        prior = item.is_active if item is not None else False
        try:
            self.pending.begin(item_id, MutationKind.DELETE, prior)
        except MutationConflict as exc:
            logger.info("Rejected delete for %s: %s", item_id, exc)
            return MutationResult(item_id, MutationKind.DELETE, ok=False, error=exc)

        try:
            await self.api.delete_item(item_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Delete for %s failed: %s", item_id, exc)
            error = MutationFailed(item_id, str(exc) or type(exc).__name__)
            return MutationResult(item_id, MutationKind.DELETE, ok=False, error=error)
        finally:
            self.pending.finish(item_id)

        self._evict(item_id)
        return MutationResult(item_id, MutationKind.DELETE, ok=True)

    def _evict(self, item_id: str) -> None:
        snapshot = self.read()
        if snapshot.find(item_id) is None:
            # A newer accepted fetch already reflects the server state.
            logger.debug("Deleted %s was no longer visible", item_id)
            return

        self.pagination.record_removal()
        snapshot = replace(snapshot.without(item_id),
                           total_count=self.pagination.total_count,
                           total_pages=self.pagination.total_pages)
        self.write(snapshot)
        logger.info("Deleted %s; %d remaining", item_id, snapshot.total_count)

        if not snapshot.items and snapshot.page > 1:
            self.on_page_emptied(snapshot.page - 1)
