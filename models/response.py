import time
from typing import Dict, Optional

from pydantic import Field, field_validator

from .base import CacheBaseModel, RequestCachePolicy, StoragePolicy


class CacheRequest(CacheBaseModel):
    url: str = Field(..., description="Absolute request URL")
    method: str = Field(default="GET", description="HTTP method")
    cache_policy: RequestCachePolicy = Field(
        default=RequestCachePolicy.USE_PROTOCOL, description="Request cache policy"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("URL must be a non-empty string")
        return v.strip()

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        return v.upper()

    @property
    def ignores_local_cache(self) -> bool:
        return self.cache_policy in (
            RequestCachePolicy.RELOAD_IGNORING_LOCAL_CACHE,
            RequestCachePolicy.RELOAD_IGNORING_LOCAL_AND_REMOTE_CACHE,
        )


class CachedResponse(CacheBaseModel):
    url: str = Field(..., description="URL the response was fetched from")
    status_code: int = Field(..., description="HTTP status code")
    headers: Dict[str, str] = Field(default_factory=dict, description="Response headers")
    body: bytes = Field(default=b"", description="Raw response body")
    storage_policy: StoragePolicy = Field(
        default=StoragePolicy.ALLOWED, description="Where the response may be stored"
    )
    expires_at: Optional[float] = Field(
        default=None, description="Expiration time in epoch seconds, set on store"
    )

    @field_validator("status_code")
    @classmethod
    def validate_status_code(cls, v: int) -> int:
        if not 100 <= v <= 599:
            raise ValueError(f"Invalid HTTP status code: {v}")
        return v

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return None

    def is_fresh(self, now: Optional[float] = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at > (time.time() if now is None else now)
