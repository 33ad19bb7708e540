# ABOUTME: Persistent two-tier HTTP response cache package
# ABOUTME: Expiration policy, versioned keys, memory/disk tiering, LRU disk index and background maintenance

from .blobstore import BlobStore, FileBlobStore
from .codec import ResponseCodec
from .eviction import EvictionEngine
from .exceptions import ConfigurationError, PersistenceError, StorageError, URLCacheError
from .expiration import expiration_date_from_headers
from .index import CacheEntryMeta, DiskIndex
from .keys import CACHE_KEY_VERSION, CacheKeyGenerator
from .manager import CacheManager
from .memory import MemoryCache
from .scheduler import IOQueue, MaintenanceScheduler
from .tiering import StorageTier, TieringPolicy
from .url_cache import URLCache

__all__ = [
    "URLCache",
    "CacheManager",
    "MemoryCache",
    "DiskIndex",
    "CacheEntryMeta",
    "EvictionEngine",
    "IOQueue",
    "MaintenanceScheduler",
    "BlobStore",
    "FileBlobStore",
    "ResponseCodec",
    "CacheKeyGenerator",
    "CACHE_KEY_VERSION",
    "StorageTier",
    "TieringPolicy",
    "expiration_date_from_headers",
    "URLCacheError",
    "StorageError",
    "PersistenceError",
    "ConfigurationError",
]
