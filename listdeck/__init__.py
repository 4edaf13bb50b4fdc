"""listdeck package initialization."""

from .controller import ListController
from .debounce import DebounceScheduler
from .errors import (
    ApiError,
    FetchFailed,
    ListDeckError,
    MutationConflict,
    MutationFailed,
    StaleResponseDiscarded,
)
from .export import export_snapshot_to_xlsx
from .filters import DEFAULT_BUDGET_RANGES, FilterCompiler, resolve_budget
from .models import (
    Item,
    ListSnapshot,
    ListStatus,
    MutationKind,
    MutationResult,
    Page,
    PendingMutation,
    PriceRange,
    Query,
)
from .mutations import DeletionCoordinator, OptimisticMutator
from .pagination import PaginationState
from .rest import RestListClient
from .screens import SCREENS, build_controller
from .sequencer import RequestSequencer

__all__ = [
    "ApiError",
    "DEFAULT_BUDGET_RANGES",
    "DebounceScheduler",
    "DeletionCoordinator",
    "FetchFailed",
    "FilterCompiler",
    "Item",
    "ListController",
    "ListDeckError",
    "ListSnapshot",
    "ListStatus",
    "MutationConflict",
    "MutationFailed",
    "MutationKind",
    "MutationResult",
    "OptimisticMutator",
    "Page",
    "PaginationState",
    "PendingMutation",
    "PriceRange",
    "Query",
    "RequestSequencer",
    "RestListClient",
    "SCREENS",
    "StaleResponseDiscarded",
    "build_controller",
    "export_snapshot_to_xlsx",
    "resolve_budget",
]
