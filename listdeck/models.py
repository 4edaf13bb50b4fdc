"""Core data models for listdeck."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union

NO_CONSTRAINT = {"", "all"}


@dataclass(frozen=True)
class PriceRange:
    """Inclusive numeric bounds; ``max`` of ``None`` means open-ended."""

    min: int
    max: Optional[int] = None


FieldValue = Union[str, int, float, bool, PriceRange]


def normalize_value(value: Any) -> FieldValue | None:
    """Canonicalize one filter value, or return ``None`` when it constrains nothing."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if value.lower() in NO_CONSTRAINT:
            return None
        return value
    if isinstance(value, Mapping):
        return PriceRange(min=int(value["min"]),
                          max=None if value.get("max") is None else int(value["max"]))
    if isinstance(value, (tuple, list)) and len(value) == 2:
        low, high = value
        return PriceRange(min=int(low), max=None if high is None else int(high))
    return value


@dataclass(frozen=True)
class Query:
    """Immutable, comparable description of one page request."""

    search_term: str = ""
    fields: Tuple[Tuple[str, FieldValue], ...] = ()
    page: int = 1
    page_size: int = 10

    @classmethod
    def build(
        cls,
        search_term: str = "",
        fields: Mapping[str, Any] | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> "Query":
        normalized: Dict[str, FieldValue] = {}
        for name, raw in (fields or {}).items():
            value = normalize_value(raw)
            if value is not None:
                normalized[name.strip()] = value
        return cls(
            search_term=(search_term or "").strip(),
            fields=tuple(sorted(normalized.items())),
            page=page,
            page_size=page_size,
        )

    @property
    def field_map(self) -> Dict[str, FieldValue]:
        return dict(self.fields)

    def filter_key(self) -> Tuple[str, Tuple[Tuple[str, FieldValue], ...], int]:
        """Everything that identifies the result set except the page number."""
        return (self.search_term, self.fields, self.page_size)

    def with_page(self, page: int) -> "Query":
        return replace(self, page=page)

    def to_params(self) -> Dict[str, str]:
        """Render the query as REST query-string parameters."""
        params = {"page": str(self.page), "limit": str(self.page_size)}
        if self.search_term:
            params["search"] = self.search_term
        for name, value in self.fields:
            if isinstance(value, PriceRange):
                suffix = name[:1].upper() + name[1:]
                params[f"min{suffix}"] = str(value.min)
                if value.max is not None:
                    params[f"max{suffix}"] = str(value.max)
            elif isinstance(value, bool):
                params[name] = "true" if value else "false"
            else:
                params[name] = str(value)
        return params


@dataclass(frozen=True)
class Item:
    """A listed resource (property, blog post, user)."""

    id: str
    is_active: bool
    data: Mapping[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class Page:
    """One page of results as returned by the Resource API."""

    items: Sequence[Item]
    page: int
    total_pages: int
    total_count: int


class ListStatus(str, enum.Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class ListSnapshot:
    """Render-ready state of one list screen."""

    items: Tuple[Item, ...] = ()
    page: int = 1
    total_pages: int = 0
    total_count: int = 0
    status: ListStatus = ListStatus.IDLE
    error_message: str | None = None

    def find(self, item_id: str) -> Item | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def with_item(self, item: Item) -> "ListSnapshot":
        """Return a copy where the item sharing ``item.id`` is replaced."""
        return replace(
            self,
            items=tuple(item if existing.id == item.id else existing
                        for existing in self.items),
        )

    def without(self, item_id: str) -> "ListSnapshot":
        return replace(
            self,
            items=tuple(item for item in self.items if item.id != item_id),
        )


class MutationKind(str, enum.Enum):
    TOGGLE = "toggle"
    DELETE = "delete"


@dataclass(frozen=True)
class PendingMutation:
    """An in-flight toggle or delete awaiting server confirmation."""

    item_id: str
    kind: MutationKind
    prior_value: bool


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a toggle or delete, returned to the caller."""

    item_id: str
    kind: MutationKind
    ok: bool
    is_active: bool | None = None
    error: Exception | None = None


def page_count(total_count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(max(total_count, 0) / page_size)
