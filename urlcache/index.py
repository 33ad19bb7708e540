# ABOUTME: Disk index tracking last access and size of every disk-resident cache entry
# ABOUTME: Keeps the usage total exact under one lock and persists itself as a single JSON record

import logging
import os
import tempfile
import threading
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from models import IndexSnapshot

from .blobstore import BlobStore
from .exceptions import PersistenceError, StorageError

logger = logging.getLogger(__name__)

INFO_FILE_NAME = "cacheInfo.json"


@dataclass
class CacheEntryMeta:
    """Bookkeeping for one blob on disk"""

    key: str
    last_access: float
    size_bytes: int


class DiskIndex:
    """In-memory directory of disk entries plus the aggregate usage counter.

    The index is loaded lazily, exactly once, from ``cacheInfo.json``. A
    missing or unreadable record means an empty index. Every read and write
    of the shared state happens under ``self._lock``; blob deletion and the
    metadata write happen outside of it.
    """

    def __init__(
        self,
        directory: Path,
        blob_store: BlobStore,
        clock: Callable[[], float] = time.time,
    ):
        self.directory = Path(directory)
        self.info_path = self.directory / INFO_FILE_NAME
        self.blob_store = blob_store
        self.clock = clock

        self._entries: Optional[Dict[str, CacheEntryMeta]] = None
        self._usage = 0
        self._dirty = False
        self._lock = threading.Lock()

        self.persist_count = 0
        self.persist_failures = 0

    @property
    def is_loaded(self) -> bool:
        return self._entries is not None

    @property
    def dirty(self) -> bool:
        return self._dirty

    def ensure_loaded(self) -> None:
        if self._entries is None:
            with self._lock:
                # Another thread may have loaded it while we waited for the lock
                if self._entries is None:
                    self._load()

    def _entries_locked(self) -> Dict[str, CacheEntryMeta]:
        if self._entries is None:
            self._load()
        assert self._entries is not None
        return self._entries

    def _load(self) -> None:
        snapshot = self._read_snapshot()

        entries: Dict[str, CacheEntryMeta] = {}
        for key, size in snapshot.sizes.items():
            last_access = snapshot.accesses.get(key)
            if last_access is None:
                continue
            entries[key] = CacheEntryMeta(key=key, last_access=last_access, size_bytes=size)

        usage = sum(meta.size_bytes for meta in entries.values())
        repaired = not snapshot.is_consistent()
        if repaired:
            logger.warning(
                f"Cache index {self.info_path} was inconsistent "
                f"(recorded {snapshot.disk_usage} bytes, entries sum to {usage}); repairing"
            )

        self._entries = entries
        self._usage = usage
        self._dirty = repaired
        logger.debug(f"Loaded cache index with {len(entries)} entries ({usage} bytes)")

    def _read_snapshot(self) -> IndexSnapshot:
        try:
            with open(self.info_path, "r", encoding="utf-8") as f:
                return IndexSnapshot.model_validate_json(f.read())
        except FileNotFoundError:
            return IndexSnapshot()
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable cache index {self.info_path}: {e}")
            return IndexSnapshot()

    def get(self, key: str) -> Optional[CacheEntryMeta]:
        with self._lock:
            meta = self._entries_locked().get(key)
            return replace(meta) if meta is not None else None

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._entries_locked()

    def put(self, key: str, size: int) -> None:
        """Insert or replace the entry for key, subtracting any previous size first."""
        if size < 0:
            raise ValueError("Size cannot be negative")

        with self._lock:
            entries = self._entries_locked()
            previous = entries.pop(key, None)
            if previous is not None:
                self._usage -= previous.size_bytes

            entries[key] = CacheEntryMeta(key=key, last_access=self.clock(), size_bytes=size)
            self._usage += size
            self._dirty = True

    def touch(self, key: str) -> bool:
        """Record an access without saving; returns False for unknown keys."""
        with self._lock:
            meta = self._entries_locked().get(key)
            if meta is None:
                return False
            meta.last_access = self.clock()
            self._dirty = True
            return True

    def remove(self, keys: Iterable[str]) -> List[str]:
        """Drop entries and delete their blobs; returns the keys that were indexed."""
        removed: List[str] = []
        with self._lock:
            entries = self._entries_locked()
            for key in keys:
                meta = entries.pop(key, None)
                if meta is None:
                    continue
                self._usage -= meta.size_bytes
                removed.append(key)
            if removed:
                self._dirty = True

        for key in removed:
            try:
                self.blob_store.delete(key)
            except StorageError as e:
                logger.warning(f"Could not delete blob for {key}: {e}")

        return removed

    def usage(self) -> int:
        with self._lock:
            self._entries_locked()
            return self._usage

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries_locked())

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._entries_locked())

    def entries_by_access(self) -> List[CacheEntryMeta]:
        """Entries oldest access first; ties keep index insertion order."""
        with self._lock:
            metas = [replace(meta) for meta in self._entries_locked().values()]
        return sorted(metas, key=lambda meta: meta.last_access)

    def snapshot(self) -> IndexSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> IndexSnapshot:
        entries = self._entries_locked()
        return IndexSnapshot(
            disk_usage=self._usage,
            accesses={key: meta.last_access for key, meta in entries.items()},
            sizes={key: meta.size_bytes for key, meta in entries.items()},
        )

    def persist(self) -> bool:
        """Write the whole index to disk. Failures are logged and leave it dirty."""
        with self._lock:
            snapshot = self._snapshot_locked()
            self._dirty = False

        try:
            self._write_snapshot(snapshot)
        except PersistenceError as e:
            with self._lock:
                self._dirty = True
            self.persist_failures += 1
            logger.error(f"Failed to persist cache index: {e}")
            return False

        self.persist_count += 1
        return True

    def _write_snapshot(self, snapshot: IndexSnapshot) -> None:
        data = snapshot.model_dump_json(by_alias=True)
        tmp_path: Optional[str] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{INFO_FILE_NAME}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(data)
            # Atomic rename (replaces destination if it exists)
            os.replace(tmp_path, self.info_path)
            tmp_path = None
        except OSError as e:
            raise PersistenceError(f"Could not write {self.info_path}: {e}") from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def discard(self) -> None:
        """Forget every entry and the persisted record; the next access starts empty."""
        with self._lock:
            self._entries = None
            self._usage = 0
            self._dirty = False

        try:
            self.info_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove cache index {self.info_path}: {e}")
