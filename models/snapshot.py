from typing import Dict

from pydantic import Field, field_validator

from .base import CacheBaseModel


class IndexSnapshot(CacheBaseModel):
    """Persisted form of the disk index, rewritten wholesale on every save."""

    disk_usage: int = Field(default=0, alias="diskUsage", description="Total bytes on disk")
    accesses: Dict[str, float] = Field(
        default_factory=dict, description="Last access time per cache key"
    )
    sizes: Dict[str, int] = Field(default_factory=dict, description="Blob size per cache key")

    @field_validator("disk_usage")
    @classmethod
    def validate_disk_usage(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Disk usage cannot be negative")
        return v

    @field_validator("sizes")
    @classmethod
    def validate_sizes(cls, v: Dict[str, int]) -> Dict[str, int]:
        for key, size in v.items():
            if size < 0:
                raise ValueError(f"Negative size recorded for {key}")
        return v

    def is_consistent(self) -> bool:
        return set(self.accesses) == set(self.sizes) and self.disk_usage == sum(
            self.sizes.values()
        )
