#!/usr/bin/env python3
"""
Model validation tests
Tests request/response records, cache settings and the persisted index snapshot
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from models import (
    CachedResponse,
    CacheRequest,
    CacheSettings,
    IndexSnapshot,
    RequestCachePolicy,
    StoragePolicy,
    validate_interval,
    validate_positive_size,
)
from models.settings import (
    DEFAULT_MAX_MEMORY_CACHE_ITEM_INTERVAL,
    DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE,
    DEFAULT_MIN_DISK_CACHE_ITEM_INTERVAL,
)


class TestValidators:
    """Test shared validator helpers"""

    def test_validate_positive_size(self):
        assert validate_positive_size(1) == 1
        with pytest.raises(ValueError):
            validate_positive_size(0)
        with pytest.raises(ValueError):
            validate_positive_size(-5)

    def test_validate_interval(self):
        assert validate_interval(0) == 0
        assert validate_interval(12.5) == 12.5
        with pytest.raises(ValueError):
            validate_interval(-1)


class TestCacheRequest:
    """Test request records"""

    def test_defaults(self):
        request = CacheRequest(url="https://example.com/")
        assert request.method == "GET"
        assert request.cache_policy == RequestCachePolicy.USE_PROTOCOL
        assert not request.ignores_local_cache

    def test_method_is_uppercased(self):
        assert CacheRequest(url="https://example.com/", method="post").method == "POST"

    @pytest.mark.parametrize("url", ["", "   "])
    def test_blank_url_is_rejected(self, url):
        with pytest.raises(ValidationError):
            CacheRequest(url=url)

    @pytest.mark.parametrize(
        "policy",
        [
            RequestCachePolicy.RELOAD_IGNORING_LOCAL_CACHE,
            RequestCachePolicy.RELOAD_IGNORING_LOCAL_AND_REMOTE_CACHE,
        ],
    )
    def test_reload_policies_ignore_local_cache(self, policy):
        assert CacheRequest(url="https://example.com/", cache_policy=policy).ignores_local_cache

    def test_return_cache_data_policy_uses_local_cache(self):
        request = CacheRequest(
            url="https://example.com/",
            cache_policy=RequestCachePolicy.RETURN_CACHE_DATA_ELSE_LOAD,
        )
        assert not request.ignores_local_cache


class TestCachedResponse:
    """Test cached response records"""

    def test_minimal_response(self):
        response = CachedResponse(url="https://example.com/", status_code=200)
        assert response.body == b""
        assert response.headers == {}
        assert response.storage_policy == StoragePolicy.ALLOWED
        assert response.expires_at is None

    @pytest.mark.parametrize("status_code", [0, 99, 600, 1000])
    def test_invalid_status_code(self, status_code):
        with pytest.raises(ValidationError):
            CachedResponse(url="https://example.com/", status_code=status_code)

    def test_header_lookup_is_case_insensitive(self):
        response = CachedResponse(
            url="https://example.com/",
            status_code=200,
            headers={"Content-Type": "text/html"},
        )
        assert response.header("content-type") == "text/html"
        assert response.header("CONTENT-TYPE") == "text/html"
        assert response.header("ETag") is None

    def test_is_fresh(self):
        response = CachedResponse(url="https://example.com/", status_code=200, expires_at=100.0)
        assert response.is_fresh(now=99.0)
        assert not response.is_fresh(now=100.0)
        assert not response.is_fresh(now=101.0)

    def test_without_expiry_is_never_fresh(self):
        response = CachedResponse(url="https://example.com/", status_code=200)
        assert not response.is_fresh(now=0.0)

    def test_validate_assignment(self):
        response = CachedResponse(url="https://example.com/", status_code=200)
        with pytest.raises(ValidationError):
            response.status_code = 42


class TestCacheSettings:
    """Test cache configuration"""

    def test_defaults(self, tmp_path):
        settings = CacheSettings(
            cache_dir=tmp_path, disk_capacity_bytes=1000, memory_capacity_bytes=500
        )
        assert settings.min_disk_cache_item_interval == DEFAULT_MIN_DISK_CACHE_ITEM_INTERVAL
        assert settings.max_memory_cache_item_interval == DEFAULT_MAX_MEMORY_CACHE_ITEM_INTERVAL
        assert settings.max_memory_cache_item_size == DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE
        assert settings.allow_disk_for_memory_only_policy is True
        assert settings.compression_enabled is True
        assert settings.maintenance_interval == 5.0

    def test_default_constants(self):
        assert DEFAULT_MIN_DISK_CACHE_ITEM_INTERVAL == 900
        assert DEFAULT_MAX_MEMORY_CACHE_ITEM_INTERVAL == 129_600
        assert DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE == 16_384

    @pytest.mark.parametrize("field", ["disk_capacity_bytes", "memory_capacity_bytes"])
    def test_capacity_must_be_positive(self, tmp_path, field):
        values = {"cache_dir": tmp_path, "disk_capacity_bytes": 1000, "memory_capacity_bytes": 500}
        values[field] = 0
        with pytest.raises(ValidationError):
            CacheSettings(**values)

    def test_maintenance_interval_must_be_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            CacheSettings(
                cache_dir=tmp_path,
                disk_capacity_bytes=1000,
                memory_capacity_bytes=500,
                maintenance_interval=0,
            )

    def test_memory_item_limit(self, tmp_path):
        small = CacheSettings(cache_dir=tmp_path, disk_capacity_bytes=1000, memory_capacity_bytes=500)
        assert small.memory_item_limit == 500

        large = CacheSettings(
            cache_dir=tmp_path, disk_capacity_bytes=1000, memory_capacity_bytes=10_000_000
        )
        assert large.memory_item_limit == DEFAULT_MAX_MEMORY_CACHE_ITEM_SIZE

    def test_from_env(self, tmp_path):
        environ = {
            "URLCACHE_DIR": str(tmp_path),
            "URLCACHE_DISK_CAPACITY": "2048",
            "URLCACHE_MEMORY_CAPACITY": "1024",
            "URLCACHE_COMPRESSION": "false",
            "URLCACHE_MAINTENANCE_INTERVAL": "0.5",
        }
        settings = CacheSettings.from_env(environ)
        assert settings.cache_dir == Path(tmp_path)
        assert settings.disk_capacity_bytes == 2048
        assert settings.memory_capacity_bytes == 1024
        assert settings.compression_enabled is False
        assert settings.maintenance_interval == 0.5

    def test_overrides_win_over_environment(self, tmp_path):
        environ = {
            "URLCACHE_DIR": "/nonexistent",
            "URLCACHE_DISK_CAPACITY": "2048",
            "URLCACHE_MEMORY_CAPACITY": "1024",
        }
        settings = CacheSettings.from_env(environ, cache_dir=tmp_path, disk_capacity_bytes=None)
        assert settings.cache_dir == tmp_path
        assert settings.disk_capacity_bytes == 2048

    def test_from_env_missing_required(self):
        with pytest.raises(ValidationError):
            CacheSettings.from_env({})


class TestIndexSnapshot:
    """Test the persisted index record"""

    def test_dump_uses_record_field_names(self):
        snapshot = IndexSnapshot(disk_usage=10, accesses={"k": 1.0}, sizes={"k": 10})
        data = snapshot.model_dump(by_alias=True)
        assert data == {"diskUsage": 10, "accesses": {"k": 1.0}, "sizes": {"k": 10}}

    def test_load_from_alias(self):
        snapshot = IndexSnapshot.model_validate({"diskUsage": 3, "accesses": {}, "sizes": {}})
        assert snapshot.disk_usage == 3

    def test_negative_usage_is_rejected(self):
        with pytest.raises(ValidationError):
            IndexSnapshot(disk_usage=-1)

    def test_negative_size_is_rejected(self):
        with pytest.raises(ValidationError):
            IndexSnapshot(accesses={"k": 1.0}, sizes={"k": -1})

    def test_consistency(self):
        assert IndexSnapshot().is_consistent()
        assert IndexSnapshot(disk_usage=5, accesses={"k": 1.0}, sizes={"k": 5}).is_consistent()
        assert not IndexSnapshot(disk_usage=6, accesses={"k": 1.0}, sizes={"k": 5}).is_consistent()
        assert not IndexSnapshot(disk_usage=5, accesses={}, sizes={"k": 5}).is_consistent()
