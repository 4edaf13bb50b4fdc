"""Collaborator contracts consumed by the list controller."""

from __future__ import annotations

from typing import Protocol

from .models import Page, Query


class ResourceApi(Protocol):
    """Paged read access to one resource collection."""

    async def fetch_page(self, query: Query) -> Page:
        ...


class MutationApi(Protocol):
    """Status toggle and deletion by item id."""

    async def toggle_status(self, item_id: str) -> bool | None:
        """Return the server's new ``isActive`` value when it echoes one."""
        ...

    async def delete_item(self, item_id: str) -> None:
        ...
