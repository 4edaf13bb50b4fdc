"""Per-screen wiring of the generic list controller."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Mapping, Sequence

from .config import Settings
from .controller import ListController
from .debounce import CallLater, SEARCH_DELAY_MS
from .filters import DEFAULT_BUDGET_RANGES, FilterCompiler
from .models import FieldValue, PriceRange
from .rest import RestListClient

logger = logging.getLogger(__name__)

STATUS_VALUES: Mapping[str, FieldValue] = {"active": True, "inactive": False}


@dataclass(frozen=True)
class ScreenConfig:
    """What differs between list screens: resource, filters and timings."""

    name: str
    resource: str
    filter_names: Sequence[str] = ()
    page_size: int = 10
    search_delay_ms: int = SEARCH_DELAY_MS
    value_maps: Mapping[str, Mapping[str, FieldValue]] = field(default_factory=dict)
    fixed_fields: Mapping[str, FieldValue] = field(default_factory=dict)
    budget_table: Mapping[str, PriceRange] = field(default_factory=dict)
    search_aliases: Sequence[str] = ()

    def build_compiler(self, page_size: int | None = None) -> FilterCompiler:
        return FilterCompiler(
            filter_names=tuple(self.filter_names),
            page_size=page_size or self.page_size,
            budget_table=dict(self.budget_table),
            value_maps=self.value_maps,
            fixed_fields=dict(self.fixed_fields),
            search_aliases=tuple(self.search_aliases),
        )


SCREENS: Dict[str, ScreenConfig] = {
    config.name: config
    for config in (
        ScreenConfig(
            name="admin-properties",
            resource="properties",
            filter_names=("propertyType", "isActive"),
            value_maps={"isActive": STATUS_VALUES},
        ),
        ScreenConfig(
            name="admin-blogs",
            resource="blogs",
            filter_names=("category", "isActive"),
            value_maps={"isActive": STATUS_VALUES},
        ),
        ScreenConfig(
            name="admin-users",
            resource="users",
            search_delay_ms=500,
        ),
        ScreenConfig(
            name="public-listing",
            resource="properties",
            filter_names=("propertyType", "listingType", "sortBy"),
            page_size=12,
            fixed_fields={"isActive": True},
            budget_table=DEFAULT_BUDGET_RANGES,
            search_aliases=("city",),
        ),
    )
}


def get_screen(name: str) -> ScreenConfig:
    try:
        return SCREENS[name]
    except KeyError:
        raise ValueError(
            f"Unknown screen {name!r}; expected one of {', '.join(sorted(SCREENS))}"
        ) from None


def build_controller(
    screen: str | ScreenConfig,
    client: RestListClient | None = None,
    settings: Settings | None = None,
    external_params: Mapping[str, str] | None = None,
    call_later: CallLater | None = None,
) -> ListController:
    """Create a controller for one screen, backed by the REST client by default."""
    config = get_screen(screen) if isinstance(screen, str) else screen
    settings = settings or Settings.from_env()
    if client is None:
        client = RestListClient(
            base_url=settings.api_base_url,
            resource=config.resource,
            token=settings.api_token,
            timeout=settings.http_timeout,
        )
    search_delay_ms = (settings.search_debounce_ms
                       if settings.search_debounce_ms is not None
                       else config.search_delay_ms)
    logger.debug("Building %s controller for /api/%s", config.name, config.resource)
    return ListController(
        resource_api=client,
        mutation_api=client,
        compiler=config.build_compiler(page_size=settings.page_size),
        search_delay_ms=search_delay_ms,
        external_params=external_params,
        call_later=call_later,
    )
