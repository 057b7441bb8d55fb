"""NDBC observation normalization and cache layer."""

from .aliases import DEFAULT_ALIASES, FieldAliases
from .cache import CacheEntry, TTLCache
from .models import FetchResult, NormalizedObservation
from .ndbc import NDBCClient, ObservationSource, StaticPayloadClient
from .normalizer import normalize
from .resolver import resolve_numeric
from .service import FetchStage, MarineObservationService
from .validation import validate_station

__all__ = [
    "CacheEntry",
    "DEFAULT_ALIASES",
    "FetchResult",
    "FetchStage",
    "FieldAliases",
    "MarineObservationService",
    "NDBCClient",
    "NormalizedObservation",
    "ObservationSource",
    "StaticPayloadClient",
    "TTLCache",
    "normalize",
    "resolve_numeric",
    "validate_station",
]
