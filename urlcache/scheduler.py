# ABOUTME: Single-worker IO queue and the periodic maintenance scheduler feeding it
# ABOUTME: Serializes every disk mutation and coalesces maintenance to one pending task

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Optional

from .eviction import EvictionEngine
from .index import DiskIndex

logger = logging.getLogger(__name__)


class IOQueue:
    """Background queue with a single worker thread."""

    def __init__(self, name: str = "urlcache-io"):
        self.name = name
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=name)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any) -> "Future[Any]":
        if self._closed:
            raise RuntimeError("IO queue has been shut down")

        def run() -> Any:
            try:
                return fn(*args)
            except Exception:
                logger.exception(f"Background task {getattr(fn, '__name__', fn)} failed")
                raise

        return self._executor.submit(run)

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every task submitted before this call has finished."""
        if self._closed:
            return
        self._executor.submit(lambda: None).result(timeout=timeout)

    def shutdown(self, wait: bool = True) -> None:
        self._closed = True
        self._executor.shutdown(wait=wait)


class MaintenanceScheduler:
    """Periodically schedules eviction or index persistence on the IO queue.

    Each tick cancels the task left pending by the previous tick, so queued
    work from foreground writes runs first and maintenance is grouped behind
    it. At most one maintenance task is pending at any time.
    """

    def __init__(
        self,
        index: DiskIndex,
        evictor: EvictionEngine,
        io_queue: IOQueue,
        interval: float = 5.0,
    ):
        self.index = index
        self.evictor = evictor
        self.io_queue = io_queue
        self.interval = interval

        self.pending: Optional["Future[Any]"] = None
        self.ticks = 0
        self._lock = threading.Lock()
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> Optional["Future[Any]"]:
        with self._lock:
            self.ticks += 1
            if self.pending is not None:
                self.pending.cancel()
                self.pending = None

            # Nothing to maintain until the index has been read
            if not self.index.is_loaded or self.io_queue.closed:
                return None

            if self.evictor.over_capacity():
                self.pending = self.io_queue.submit(self.evictor.balance)
            elif self.index.dirty:
                self.pending = self.io_queue.submit(self.index.persist)

            return self.pending

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.tick()
            except Exception:
                logger.exception("Cache maintenance tick failed")

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._run, name="urlcache-maintenance", daemon=True
        )
        self._thread.start()

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        with self._lock:
            if self.pending is not None:
                self.pending.cancel()
                self.pending = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()
