# ABOUTME: Cache key generation from canonicalized request URLs
# ABOUTME: Keys are namespaced by a format version so records from older layouts simply miss

from urllib.parse import quote

from models import CacheRequest

# Bump whenever the serialized record format changes. Entries stored under an
# older version are never read again and age out through LRU eviction.
CACHE_KEY_VERSION = "UC1"


class CacheKeyGenerator:
    """Generates consistent cache keys from request URLs."""

    def __init__(self, version: str = CACHE_KEY_VERSION) -> None:
        self.version = version

    @staticmethod
    def canonical_url(url: str) -> str:
        """Drop the fragment, which never reaches the server."""
        return url.split("#", 1)[0]

    def canonical_request(self, request: CacheRequest) -> CacheRequest:
        if "#" not in request.url:
            return request
        return request.model_copy(update={"url": self.canonical_url(request.url)})

    def generate_key(self, url: str) -> str:
        # Every reserved RFC 3986 character is escaped, over the UTF-8 bytes
        encoded = quote(self.canonical_url(url), safe="", encoding="utf-8")
        return f"{self.version}_{encoded}"
