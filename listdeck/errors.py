"""Error taxonomy for list controllers and their API collaborators."""

from __future__ import annotations


class ListDeckError(Exception):
    """Base class for all listdeck errors."""


class FetchFailed(ListDeckError):
    """The current page fetch was rejected by the Resource API."""


class MutationConflict(ListDeckError):
    """A toggle or delete was requested while one is pending for the item."""

    def __init__(self, item_id: str):
        super().__init__(f"mutation already in progress for {item_id}")
        self.item_id = item_id


class MutationFailed(ListDeckError):
    """The Mutation API rejected a toggle or delete."""

    def __init__(self, item_id: str, message: str):
        super().__init__(message)
        self.item_id = item_id


class StaleResponseDiscarded(ListDeckError):
    """Internal: a response arrived for a superseded request token."""

    def __init__(self, token: int, current: int | None):
        super().__init__(f"token {token} superseded by {current}")
        self.token = token
        self.current = current


class ApiError(ListDeckError):
    """HTTP or envelope failure reported by the REST backend."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
