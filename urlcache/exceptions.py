# ABOUTME: Exception hierarchy for the HTTP response cache
# ABOUTME: Storage and persistence failures degrade gracefully; configuration errors surface at construction


class URLCacheError(Exception):
    """Base class for all cache errors"""

    pass


class StorageError(URLCacheError):
    """Raised when a blob cannot be read, written or deleted"""

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class PersistenceError(URLCacheError):
    """Raised when the index metadata record cannot be written"""

    pass


class ConfigurationError(URLCacheError):
    """Raised at construction for invalid capacities or storage locations"""

    pass
