"""Compile raw search/filter inputs into canonical queries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Sequence, Set

from .models import FieldValue, PriceRange, Query

logger = logging.getLogger(__name__)

BUDGET_KEY = "budget"

DEFAULT_BUDGET_RANGES: Dict[str, PriceRange] = {
    "Under ₹10L": PriceRange(min=0, max=1_000_000),
    "₹10L – ₹50L": PriceRange(min=1_000_000, max=5_000_000),
    "₹50L – ₹80L": PriceRange(min=5_000_000, max=8_000_000),
    "₹80L – ₹1Cr": PriceRange(min=8_000_000, max=10_000_000),
    "Above ₹1Cr": PriceRange(min=10_000_000, max=None),
}


def resolve_budget(
    label: str | None,
    table: Mapping[str, PriceRange] = DEFAULT_BUDGET_RANGES,
) -> PriceRange | None:
    """Look up a budget label; unknown labels constrain nothing."""
    if not label:
        return None
    return table.get(label.strip())


def budget_label_for(
    min_price: str | None,
    max_price: str | None,
    table: Mapping[str, PriceRange] = DEFAULT_BUDGET_RANGES,
) -> str | None:
    """Find the label whose range matches a ``minPrice``/``maxPrice`` pair exactly."""
    if min_price is None:
        return None
    try:
        wanted = PriceRange(
            min=int(min_price),
            max=int(max_price) if max_price not in (None, "") else None,
        )
    except ValueError:
        logger.debug("Ignoring non-numeric price bounds %r-%r", min_price, max_price)
        return None
    for label, price_range in table.items():
        if price_range == wanted:
            return label
    return None


@dataclass
class FilterCompiler:
    """Holds the current search/filter selections of one screen."""

    filter_names: Sequence[str] = ()
    page_size: int = 10
    budget_table: Mapping[str, PriceRange] = field(
        default_factory=lambda: dict(DEFAULT_BUDGET_RANGES))
    budget_field: str = "price"
    value_maps: Mapping[str, Mapping[str, FieldValue]] = field(default_factory=dict)
    fixed_fields: Mapping[str, FieldValue] = field(default_factory=dict)
    search_key: str = "search"
    search_aliases: Sequence[str] = ()

    search_term: str = ""
    selections: Dict[str, str] = field(default_factory=dict)
    budget_label: Optional[str] = None
    _seeded: bool = field(default=False, repr=False)
    _touched: Set[str] = field(default_factory=set, repr=False)

    def seed(self, params: Mapping[str, str] | None) -> bool:
        """Apply deep-link parameters once; return whether anything was seeded."""
        if self._seeded:
            logger.debug("External parameters already consumed; ignoring %r", params)
            return False
        self._seeded = True
        if not params:
            return False

        applied = False
        for key in (self.search_key, *self.search_aliases):
            value = params.get(key)
            if value and self.search_key not in self._touched:
                self.search_term = value
                applied = True
                break

        for name in self.filter_names:
            value = params.get(name)
            if value and name not in self._touched:
                self.selections[name] = value
                applied = True

        if BUDGET_KEY not in self._touched:
            label = params.get(BUDGET_KEY) or budget_label_for(
                params.get("minPrice"), params.get("maxPrice"), self.budget_table)
            if label:
                self.budget_label = label
                applied = True
        return applied

    def set_search_term(self, term: str) -> None:
        self._touched.add(self.search_key)
        self.search_term = term

    def set_filter(self, name: str, value: str | None) -> None:
        if name == BUDGET_KEY:
            self._touched.add(BUDGET_KEY)
            self.budget_label = value
            return
        if name not in self.filter_names:
            raise ValueError(f"Unknown filter {name!r}")
        self._touched.add(name)
        if value is None:
            self.selections.pop(name, None)
        else:
            self.selections[name] = value

    def compile(self, page: int = 1) -> Query:
        fields: Dict[str, object] = {}
        for name, raw in self.selections.items():
            mapping = self.value_maps.get(name, {})
            value = raw.strip() if isinstance(raw, str) else raw
            fields[name] = mapping.get(value, value) if isinstance(value, str) else value

        price_range = resolve_budget(self.budget_label, self.budget_table)
        if price_range is not None:
            fields[self.budget_field] = price_range

        fields.update(self.fixed_fields)
        return Query.build(
            search_term=self.search_term,
            fields=fields,
            page=page,
            page_size=self.page_size,
        )
