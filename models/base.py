from enum import Enum

from pydantic import BaseModel


class StoragePolicy(str, Enum):
    ALLOWED = "allowed"
    ALLOWED_IN_MEMORY_ONLY = "allowed_in_memory_only"
    NOT_ALLOWED = "not_allowed"


class RequestCachePolicy(str, Enum):
    USE_PROTOCOL = "use_protocol"
    RELOAD_IGNORING_LOCAL_CACHE = "reload_ignoring_local_cache"
    RELOAD_IGNORING_LOCAL_AND_REMOTE_CACHE = "reload_ignoring_local_and_remote_cache"
    RETURN_CACHE_DATA_ELSE_LOAD = "return_cache_data_else_load"
    RETURN_CACHE_DATA_DONT_LOAD = "return_cache_data_dont_load"


class CacheBaseModel(BaseModel):
    class Config:
        validate_assignment = True
        populate_by_name = True


def validate_positive_size(size: int) -> int:
    if size <= 0:
        raise ValueError("Size must be a positive number of bytes")
    return size


def validate_interval(seconds: float) -> float:
    if seconds < 0:
        raise ValueError("Interval must not be negative")
    return seconds
