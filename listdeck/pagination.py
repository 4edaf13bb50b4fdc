"""Page bookkeeping for server-paginated lists."""

from __future__ import annotations

from dataclasses import dataclass

from .models import Page, Query, page_count


@dataclass
class PaginationState:
    """Current page plus the totals of the last accepted response."""

    page_size: int = 10
    page: int = 1
    total_count: int = 0
    total_pages: int = 0
    last_query: Query | None = None
    accepted_page: int = 1

    def clamp(self, page: int) -> int:
        return max(1, min(page, max(1, self.total_pages)))

    def prepare(self, query: Query) -> Query:
        """Force page 1 when anything but the page differs from the last dispatch."""
        if self.last_query is not None and query.filter_key() != self.last_query.filter_key():
            query = query.with_page(1)
        elif self.last_query is None:
            query = query.with_page(max(1, query.page))
        self.page = query.page
        self.last_query = query
        return query

    def accept(self, page: Page) -> None:
        self.total_count = page.total_count
        self.total_pages = page_count(page.total_count, self.page_size)
        self.page = self.clamp(page.page)
        self.accepted_page = self.page

    def reject(self) -> None:
        """Return to the page of the last accepted response after a failed fetch."""
        self.page = self.accepted_page

    def record_removal(self) -> None:
        self.total_count = max(0, self.total_count - 1)
        self.total_pages = page_count(self.total_count, self.page_size)
