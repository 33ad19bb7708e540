# ABOUTME: Asyncio front end for the HTTP response cache
# ABOUTME: Runs blocking cache calls in the default executor so coroutine callers never block the loop

import asyncio
import functools
from typing import Any, Callable, Dict, List, Optional, TypeVar

from models import CachedResponse, CacheSettings

from .tiering import StorageTier
from .url_cache import RequestLike, URLCache

T = TypeVar("T")


class CacheManager:
    """Async wrapper over URLCache with initialize/close lifecycle."""

    def __init__(self, settings: Optional[CacheSettings] = None, **options: Any):
        """Build the underlying cache; configuration errors surface here."""
        self.cache = URLCache(settings, **options)
        self._initialized = False

    async def _run(self, fn: Callable[..., T], *args: Any) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(fn, *args))

    async def initialize(self) -> None:
        """Start maintenance and load the disk index."""
        if self._initialized:
            return
        self.cache.open()
        await self._run(self.cache.index.ensure_loaded)
        self._initialized = True

    async def get(self, request: RequestLike) -> Optional[CachedResponse]:
        return await self._run(self.cache.get, request)

    async def put(self, request: RequestLike, response: CachedResponse) -> StorageTier:
        return await self._run(self.cache.put, request, response)

    async def remove(self, request: RequestLike) -> None:
        await self._run(self.cache.remove, request)

    async def clear_all(self) -> None:
        await self._run(self.cache.clear)

    async def balance(self) -> List[str]:
        return await self._run(self.cache.balance)

    async def is_cached(self, url: str) -> bool:
        return await self._run(self.cache.is_cached, url)

    async def current_disk_usage(self) -> int:
        return await self._run(self.cache.current_disk_usage)

    async def flush(self) -> None:
        await self._run(self.cache.flush)

    async def get_statistics(self) -> Dict[str, Any]:
        return await self._run(self.cache.get_stats)

    async def close(self) -> None:
        """Flush pending writes and release the worker thread."""
        await self._run(self.cache.close)
        self._initialized = False

    async def __aenter__(self) -> "CacheManager":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
