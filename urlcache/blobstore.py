# ABOUTME: Opaque blob storage contract and its file-system implementation
# ABOUTME: One file per cache key, named by SHA-256 and written atomically through a temp file

import hashlib
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .exceptions import StorageError

logger = logging.getLogger(__name__)

BLOB_SUFFIX = ".cache"


class BlobStore(ABC):
    """Byte storage for serialized response records."""

    @abstractmethod
    def put(self, key: str, data: bytes) -> int:
        """Store data under key and return the number of bytes it occupies."""
        pass

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class FileBlobStore(BlobStore):
    """Stores each blob as ``<sha256(key)>.cache`` inside a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def initialize(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def _get_file_path(self, key: str) -> Path:
        # Percent-encoded URLs easily exceed file name limits, so hash them
        key_hash = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.directory / f"{key_hash}{BLOB_SUFFIX}"

    def put(self, key: str, data: bytes) -> int:
        file_path = self._get_file_path(key)
        tmp_path: Optional[str] = None
        try:
            self.initialize()
            fd, tmp_path = tempfile.mkstemp(
                dir=self.directory, prefix=f".{file_path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_path, file_path)
            tmp_path = None
            return file_path.stat().st_size
        except OSError as e:
            raise StorageError(f"Failed to write blob for {key}: {e}", key=key) from e
        finally:
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

    def get(self, key: str) -> Optional[bytes]:
        file_path = self._get_file_path(key)
        try:
            with open(file_path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read blob for {key}: {e}", key=key) from e

    def delete(self, key: str) -> None:
        try:
            self._get_file_path(key).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete blob for {key}: {e}", key=key) from e

    def exists(self, key: str) -> bool:
        return self._get_file_path(key).is_file()

    def clear(self) -> None:
        if not self.directory.exists():
            return
        for cache_file in self.directory.glob(f"*{BLOB_SUFFIX}"):
            try:
                cache_file.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning(f"Failed to remove blob file {cache_file}: {e}")

    def total_size(self) -> int:
        """Bytes currently held by blob files."""
        if not self.directory.exists():
            return 0
        return sum(
            cache_file.stat().st_size
            for cache_file in self.directory.glob(f"*{BLOB_SUFFIX}")
            if cache_file.is_file()
        )
