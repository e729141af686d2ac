"""Engine Layer - Query Orchestration

This module provides the core engine layer, implementing:
- QueryOrchestrator: Search screen entry point (text/filter/category/load more/refresh)
- HomeFeedOrchestrator: Home feed entry point (categories/offers/popular infinite scroll)
- DebouncedDispatcher: Delays dispatch until input settles
- RequestSequencer: Generation stamping and stale-response rejection
- PageAccumulator: Replace/append merge with dedup and exhaustion tracking
- FilterNormalizer: Filter labels -> request params, category display ordering
- ErrorClassifier: RateLimited / Transport / Unknown taxonomy
- QueryStateStore: Single source of truth consumed by the UI
- DispatchOutcome: Standardized operation result
"""

from .accumulator import PageAccumulator
from .debounce import DebouncedDispatcher
from .error_classifier import ClassifiedError, ErrorClassifier, ErrorKind
from .home_feed import HomeFeedOrchestrator
from .normalizer import AllPosition, CategoryDisplayList, FilterNormalizer
from .orchestrator import PagedQueryEngine, QueryOrchestrator
from .result import DispatchOutcome, DispatchStatus
from .sequencer import RequestSequencer, SequencedResponse
from .shuffle import shuffled
from .state import QueryStateSnapshot, QueryStateStore

__all__ = [
    "QueryOrchestrator",
    "HomeFeedOrchestrator",
    "PagedQueryEngine",
    "DebouncedDispatcher",
    "RequestSequencer",
    "SequencedResponse",
    "PageAccumulator",
    "FilterNormalizer",
    "CategoryDisplayList",
    "AllPosition",
    "ErrorClassifier",
    "ClassifiedError",
    "ErrorKind",
    "QueryStateStore",
    "QueryStateSnapshot",
    "DispatchOutcome",
    "DispatchStatus",
    "shuffled",
]
