# ABOUTME: Least-recently-used eviction bringing disk usage back under capacity
# ABOUTME: Removes whole entries, oldest access first, then saves the index

import logging
from typing import List

from .index import DiskIndex

logger = logging.getLogger(__name__)


class EvictionEngine:
    """LRU sweep over the disk index."""

    def __init__(self, index: DiskIndex, capacity_bytes: int):
        self.index = index
        self.capacity_bytes = capacity_bytes
        self.evicted_count = 0

    def over_capacity(self) -> bool:
        return self.index.usage() > self.capacity_bytes

    def select_victims(self) -> List[str]:
        """Oldest keys whose combined size covers the excess over capacity."""
        capacity_to_save = self.index.usage() - self.capacity_bytes
        victims: List[str] = []
        if capacity_to_save <= 0:
            return victims

        for meta in self.index.entries_by_access():
            if capacity_to_save <= 0:
                break
            victims.append(meta.key)
            capacity_to_save -= meta.size_bytes

        return victims

    def balance(self) -> List[str]:
        """Evict until usage <= capacity; returns the evicted keys."""
        if not self.over_capacity():
            return []

        victims = self.select_victims()
        removed = self.index.remove(victims)
        self.evicted_count += len(removed)
        logger.debug(
            f"Evicted {len(removed)} entries, disk usage now {self.index.usage()} "
            f"of {self.capacity_bytes} bytes"
        )

        self.index.persist()
        return removed
