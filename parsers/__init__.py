from .cache_control import CacheControl, parse_cache_control, pragma_no_cache
from .http_date import format_http_date, parse_http_date

__all__ = [
    # HTTP dates
    "parse_http_date",
    "format_http_date",
    # Cache headers
    "CacheControl",
    "parse_cache_control",
    "pragma_no_cache",
]
