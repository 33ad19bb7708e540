# ABOUTME: Two-tier HTTP response cache coordinating the memory tier, disk index and background IO
# ABOUTME: Public get/put/remove/clear surface with an explicit open/close lifecycle

import logging
import threading
import time
from collections import Counter
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError

from models import CachedResponse, CacheRequest, CacheSettings

from .blobstore import BlobStore, FileBlobStore
from .codec import ResponseCodec
from .eviction import EvictionEngine
from .exceptions import ConfigurationError, StorageError
from .expiration import expiration_date_from_headers
from .index import DiskIndex
from .keys import CacheKeyGenerator
from .memory import MemoryCache
from .scheduler import IOQueue, MaintenanceScheduler
from .tiering import StorageTier, TieringPolicy

logger = logging.getLogger(__name__)

RequestLike = Union[CacheRequest, str]


def _build_settings(settings: Optional[CacheSettings], options: Dict[str, Any]) -> CacheSettings:
    try:
        if settings is None:
            return CacheSettings(**options)
        if options:
            return CacheSettings(**{**settings.model_dump(), **options})
        return settings
    except ValidationError as e:
        raise ConfigurationError(f"Invalid cache configuration: {e}") from e


def _prepare_directory(path: Path) -> None:
    if path.exists() and not path.is_dir():
        raise ConfigurationError(f"Cache path {path} exists and is not a directory")
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Cannot create cache directory {path}: {e}") from e


class URLCache:
    """Persistent, capacity-bounded HTTP response cache.

    Small or short-lived responses stay in memory; the rest are serialized to
    a blob store on a single background worker, which also persists the disk
    index and runs LRU eviction. Construction validates the configuration and
    prepares the cache directory; ``open()`` starts periodic maintenance and
    ``close()`` flushes pending work and saves the index.

    Example::

        with URLCache(cache_dir="/tmp/http-cache",
                      disk_capacity_bytes=20 * 1024 * 1024,
                      memory_capacity_bytes=2 * 1024 * 1024) as cache:
            cache.put(CacheRequest(url=url), CachedResponse(url=url, status_code=200, body=b"..."))
            hit = cache.get(url)
    """

    def __init__(
        self,
        settings: Optional[CacheSettings] = None,
        blob_store: Optional[BlobStore] = None,
        clock: Callable[[], float] = time.time,
        **options: Any,
    ):
        self.settings = _build_settings(settings, options)
        _prepare_directory(self.settings.cache_dir)

        self.clock = clock
        self.key_generator = CacheKeyGenerator()
        self.codec = ResponseCodec(compression_enabled=self.settings.compression_enabled)
        self.tiering = TieringPolicy.from_settings(self.settings)

        self.blob_store = blob_store or FileBlobStore(self.settings.cache_dir)
        self.memory_cache = MemoryCache(capacity_bytes=self.settings.memory_capacity_bytes)
        self.index = DiskIndex(self.settings.cache_dir, self.blob_store, clock=clock)
        self.evictor = EvictionEngine(self.index, self.settings.disk_capacity_bytes)
        self.io_queue = IOQueue()
        self.scheduler = MaintenanceScheduler(
            self.index,
            self.evictor,
            self.io_queue,
            interval=self.settings.maintenance_interval,
        )

        # Disk records queued on the IO worker but not yet indexed
        self._pending_writes: Dict[str, CachedResponse] = {}
        self._pending_lock = threading.Lock()

        self._stats: Counter = Counter()
        self._stats_lock = threading.Lock()
        self._closed = False

    # Lifecycle

    def open(self) -> "URLCache":
        self._check_open()
        self.scheduler.start()
        return self

    def close(self) -> None:
        """Stop maintenance, finish queued disk work and save the index."""
        if self._closed:
            return
        self.scheduler.stop()
        if self.index.is_loaded:
            self.io_queue.submit(self._persist_if_dirty).result()
        self.io_queue.shutdown(wait=True)
        self._closed = True

    def __enter__(self) -> "URLCache":
        return self.open()

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("URL cache has been closed")

    def _count(self, name: str) -> None:
        with self._stats_lock:
            self._stats[name] += 1

    def _as_request(self, request: RequestLike) -> CacheRequest:
        if isinstance(request, str):
            request = CacheRequest(url=request)
        return self.key_generator.canonical_request(request)

    # Cache operations

    def get(self, request: RequestLike) -> Optional[CachedResponse]:
        """Look up a response, memory tier first; any failure reads as a miss."""
        self._check_open()
        request = self._as_request(request)
        if request.method != "GET" or request.ignores_local_cache:
            return None

        key = self.key_generator.generate_key(request.url)

        response = self.memory_cache.get(key)
        if response is not None:
            return response

        with self._pending_lock:
            response = self._pending_writes.get(key)
        if response is not None:
            return response

        # Check the in-memory index before touching the file system
        if not self.index.contains(key):
            self._count("disk_misses")
            return None

        try:
            data = self.blob_store.get(key)
        except StorageError as e:
            logger.warning(f"Treating unreadable blob as a miss for {request.url}: {e}")
            self._count("disk_misses")
            return None

        if data is None:
            # Evicted between the index check and the read
            self._count("disk_misses")
            return None

        response = self.codec.decode(data)
        if response is None:
            logger.warning(f"Ignoring undecodable cache record for {request.url}")
            self._count("disk_misses")
            return None

        # Access time only; the index is saved later by maintenance
        self.index.touch(key)
        # Large records stay disk-only so one hit cannot flush the memory tier
        if len(response.body) < self.tiering.memory_item_limit:
            self.memory_cache.set(key, response)
        self._count("disk_hits")
        logger.debug(f"Disk cache hit for {request.url}")
        return response

    def put(self, request: RequestLike, response: CachedResponse) -> StorageTier:
        """Store a response in the tier its expiry and size call for."""
        self._check_open()
        request = self._as_request(request)
        if request.method != "GET" or request.ignores_local_cache:
            self._count("rejected")
            return StorageTier.REJECT

        now = self.clock()
        expires_at = expiration_date_from_headers(
            response.status_code, response.headers, clock=self.clock
        )
        tier = self.tiering.decide(len(response.body), expires_at, response.storage_policy, now)

        key = self.key_generator.generate_key(request.url)
        record = response.model_copy(update={"url": request.url, "expires_at": expires_at})

        if tier == StorageTier.MEMORY:
            self.memory_cache.set(key, record)
            self._count("stored_memory")
        elif tier == StorageTier.DISK:
            # Readable from the pending map until the worker has indexed it
            with self._pending_lock:
                self._pending_writes[key] = record
            # A memory copy would shadow the newer disk record
            self.memory_cache.remove(key)
            self.io_queue.submit(self._store_to_disk, key, record)
        else:
            logger.debug(f"Not caching response for {request.url}")
            self._count("rejected")

        return tier

    def remove(self, request: RequestLike) -> None:
        self._check_open()
        request = self._as_request(request)
        key = self.key_generator.generate_key(request.url)

        self.memory_cache.remove(key)
        with self._pending_lock:
            self._pending_writes.pop(key, None)
        self.io_queue.submit(self._remove_from_disk, key).result()

    def clear(self) -> None:
        """Drop every entry from both tiers and reset disk usage to zero."""
        self._check_open()
        self.memory_cache.clear()
        with self._pending_lock:
            self._pending_writes.clear()
        self.io_queue.submit(self._clear_disk).result()

    def balance(self) -> List[str]:
        """Run an eviction sweep now, in order with queued writes."""
        self._check_open()
        return self.io_queue.submit(self.evictor.balance).result()

    def current_disk_usage(self) -> int:
        return self.index.usage()

    def is_cached(self, url: str) -> bool:
        """True when either tier holds the URL; unindexed blob files do not count."""
        self._check_open()
        key = self.key_generator.generate_key(self.key_generator.canonical_url(url))
        if self.memory_cache.contains(key):
            return True
        with self._pending_lock:
            if key in self._pending_writes:
                return True
        return self.index.contains(key) and self.blob_store.exists(key)

    def flush(self, timeout: Optional[float] = None) -> None:
        """Wait for queued disk writes to complete."""
        self._check_open()
        self.io_queue.drain(timeout=timeout)

    def get_stats(self) -> Dict[str, Any]:
        with self._stats_lock:
            counters = dict(self._stats)
        return {
            "memory_cache": self.memory_cache.get_stats(),
            "disk_cache": {
                "entries": len(self.index),
                "current_size_bytes": self.index.usage(),
                "max_size_bytes": self.settings.disk_capacity_bytes,
                "hits": counters.get("disk_hits", 0),
                "misses": counters.get("disk_misses", 0),
                "evicted": self.evictor.evicted_count,
                "persist_failures": self.index.persist_failures,
                "compression_enabled": self.settings.compression_enabled,
            },
            "stored_memory": counters.get("stored_memory", 0),
            "stored_disk": counters.get("stored_disk", 0),
            "rejected": counters.get("rejected", 0),
            "storage_failures": counters.get("storage_failures", 0),
        }

    # Background tasks, run on the IO queue

    def _store_to_disk(self, key: str, response: CachedResponse) -> bool:
        try:
            try:
                size = self.blob_store.put(key, self.codec.encode(response))
            except StorageError as e:
                # Index stays untouched so it never points at a missing blob
                logger.warning(f"Failed to store {response.url} on disk: {e}")
                self._count("storage_failures")
                return False

            self.index.put(key, size)
        finally:
            with self._pending_lock:
                # A later put of the same key owns the slot now
                if self._pending_writes.get(key) is response:
                    del self._pending_writes[key]

        self.index.persist()
        self._count("stored_disk")

        self.scheduler.tick()
        return True

    def _remove_from_disk(self, key: str) -> None:
        if not self.index.remove([key]):
            try:
                self.blob_store.delete(key)
            except StorageError as e:
                logger.warning(f"Could not delete orphaned blob {key}: {e}")
        self.index.persist()

    def _clear_disk(self) -> None:
        self.blob_store.clear()
        self.index.discard()

    def _persist_if_dirty(self) -> None:
        if self.index.dirty:
            self.index.persist()
