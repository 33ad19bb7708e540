from .base import (
    CacheBaseModel,
    RequestCachePolicy,
    StoragePolicy,
    validate_interval,
    validate_positive_size,
)
from .response import CachedResponse, CacheRequest
from .settings import CacheSettings
from .snapshot import IndexSnapshot

__all__ = [
    # Base infrastructure
    "CacheBaseModel",
    "StoragePolicy",
    "RequestCachePolicy",
    "validate_positive_size",
    "validate_interval",
    # Request / response records
    "CacheRequest",
    "CachedResponse",
    # Persisted index
    "IndexSnapshot",
    # Configuration
    "CacheSettings",
]
