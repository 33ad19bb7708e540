# ABOUTME: Serialization of cached responses into opaque blobs
# ABOUTME: JSON with a base64 body, optionally zstandard-compressed

import base64
import json
from typing import Optional

import zstandard as zstd

from models import CachedResponse

ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"


class ResponseCodec:
    """Encodes CachedResponse records to bytes and back."""

    def __init__(self, compression_enabled: bool = True, level: int = 3):
        self.compression_enabled = compression_enabled
        if self.compression_enabled:
            self.compressor = zstd.ZstdCompressor(level=level)
        self.decompressor = zstd.ZstdDecompressor()

    def encode(self, response: CachedResponse) -> bytes:
        record = response.model_dump(mode="json", exclude={"body"})
        record["body"] = base64.b64encode(response.body).decode("ascii")

        data = json.dumps(record, separators=(",", ":")).encode("utf-8")
        if self.compression_enabled:
            data = self.compressor.compress(data)
        return data

    def decode(self, data: bytes) -> Optional[CachedResponse]:
        """Decode a blob, returning None for anything unreadable."""
        try:
            # Blobs written with compression on stay readable after it is turned off
            if data.startswith(ZSTD_MAGIC):
                data = self.decompressor.decompress(data)
            record = json.loads(data.decode("utf-8"))
            record["body"] = base64.b64decode(record.get("body", ""))
            return CachedResponse.model_validate(record)
        except (zstd.ZstdError, ValueError, TypeError, AttributeError):
            return None
