# ABOUTME: Memory/disk tier selection for cacheable responses
# ABOUTME: Keeps short-lived and small responses off the disk and rejects what cannot be stored

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from models import CacheSettings, StoragePolicy


class StorageTier(str, Enum):
    MEMORY = "memory"
    DISK = "disk"
    REJECT = "reject"


@dataclass
class TieringPolicy:
    """Capacities and intervals that drive the tier decision"""

    disk_capacity: int
    memory_item_limit: int
    min_disk_interval: float
    max_memory_interval: float
    allow_disk_for_memory_only: bool = True

    @classmethod
    def from_settings(cls, settings: CacheSettings) -> "TieringPolicy":
        return cls(
            disk_capacity=settings.disk_capacity_bytes,
            memory_item_limit=settings.memory_item_limit,
            min_disk_interval=settings.min_disk_cache_item_interval,
            max_memory_interval=settings.max_memory_cache_item_interval,
            allow_disk_for_memory_only=settings.allow_disk_for_memory_only_policy,
        )

    def disk_allowed(self, storage_policy: StoragePolicy) -> bool:
        if storage_policy == StoragePolicy.ALLOWED:
            return True
        return (
            storage_policy == StoragePolicy.ALLOWED_IN_MEMORY_ONLY
            and self.allow_disk_for_memory_only
        )

    def decide(
        self,
        size: int,
        expires_at: Optional[float],
        storage_policy: StoragePolicy,
        now: float,
    ) -> StorageTier:
        if expires_at is None or expires_at <= now:
            return StorageTier.REJECT
        if storage_policy == StoragePolicy.NOT_ALLOWED:
            return StorageTier.REJECT
        if size >= self.disk_capacity:
            return StorageTier.REJECT

        time_to_live = expires_at - now
        disk_eligible = (
            self.disk_allowed(storage_policy)
            and size < self.disk_capacity
            and time_to_live > self.min_disk_interval
        )
        memory_eligible = size < self.memory_item_limit

        if memory_eligible and (
            not disk_eligible or time_to_live <= self.max_memory_interval
        ):
            return StorageTier.MEMORY
        if disk_eligible:
            return StorageTier.DISK
        return StorageTier.REJECT
