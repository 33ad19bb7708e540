import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from pydantic import Field, field_validator

from .base import CacheBaseModel, validate_interval, validate_positive_size

DEFAULT_MIN_DISK_CACHE_ITEM_INTERVAL = 15 * 60  # 15 minutes
DEFAULT_MAX_MEMORY_CACHE_ITEM_INTERVAL = 36 * 60 * 60  # 36 hours
DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE = 16 * 1024  # 16 KiB
DEFAULT_MAINTENANCE_INTERVAL = 5.0

ENV_PREFIX = "URLCACHE_"

# Environment variable suffix -> settings field
ENV_FIELDS: Dict[str, str] = {
    "DIR": "cache_dir",
    "DISK_CAPACITY": "disk_capacity_bytes",
    "MEMORY_CAPACITY": "memory_capacity_bytes",
    "MIN_DISK_ITEM_INTERVAL": "min_disk_cache_item_interval",
    "MAX_MEMORY_ITEM_INTERVAL": "max_memory_cache_item_interval",
    "MAX_MEMORY_ITEM_SIZE": "max_memory_cache_item_size",
    "ALLOW_DISK_FOR_MEMORY_ONLY": "allow_disk_for_memory_only_policy",
    "MAINTENANCE_INTERVAL": "maintenance_interval",
    "COMPRESSION": "compression_enabled",
}


class CacheSettings(CacheBaseModel):
    cache_dir: Path = Field(..., description="Directory holding blobs and the index record")
    disk_capacity_bytes: int = Field(..., description="Disk usage ceiling in bytes")
    memory_capacity_bytes: int = Field(..., description="Memory tier ceiling in bytes")
    min_disk_cache_item_interval: float = Field(
        default=DEFAULT_MIN_DISK_CACHE_ITEM_INTERVAL,
        description="Minimum seconds to expiry for a response to be written to disk",
    )
    max_memory_cache_item_interval: float = Field(
        default=DEFAULT_MAX_MEMORY_CACHE_ITEM_INTERVAL,
        description="Maximum seconds to expiry for a disk-eligible response to stay memory-only",
    )
    max_memory_cache_item_size: int = Field(
        default=DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE,
        description="Responses at least this large never go to the memory tier",
    )
    allow_disk_for_memory_only_policy: bool = Field(
        default=True,
        description="Write memory-only storage policy responses to disk anyway",
    )
    maintenance_interval: float = Field(
        default=DEFAULT_MAINTENANCE_INTERVAL, description="Seconds between maintenance ticks"
    )
    compression_enabled: bool = Field(default=True, description="Compress blobs with zstd")

    @field_validator("disk_capacity_bytes", "memory_capacity_bytes", "max_memory_cache_item_size")
    @classmethod
    def validate_capacity(cls, v: int) -> int:
        return validate_positive_size(v)

    @field_validator("min_disk_cache_item_interval", "max_memory_cache_item_interval")
    @classmethod
    def validate_item_interval(cls, v: float) -> float:
        return validate_interval(v)

    @field_validator("maintenance_interval")
    @classmethod
    def validate_maintenance_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Maintenance interval must be positive")
        return v

    @property
    def memory_item_limit(self) -> int:
        return min(self.max_memory_cache_item_size, self.memory_capacity_bytes)

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, **overrides: object
    ) -> "CacheSettings":
        """Build settings from URLCACHE_* variables, with keyword overrides on top."""
        environ = os.environ if environ is None else environ
        values: Dict[str, object] = {}
        for suffix, field_name in ENV_FIELDS.items():
            raw = environ.get(ENV_PREFIX + suffix)
            if raw is not None and raw != "":
                values[field_name] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
