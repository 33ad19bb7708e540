# ABOUTME: RFC 2616 style expiration computation from response status and headers
# ABOUTME: Returns an absolute expiry time in epoch seconds, or None for responses that must not be cached

import time
from typing import Callable, Mapping, Optional

from parsers import parse_cache_control, parse_http_date, pragma_no_cache

CACHEABLE_STATUS_CODES = frozenset({200, 203, 300, 301, 302, 307, 410})
REDIRECT_STATUS_CODES = frozenset({302, 307})

# 10% of the time since Last-Modified, as suggested by RFC 2616 section 13.2.4
LAST_MODIFIED_FRACTION = 0.1
DEFAULT_EXPIRATION_DELAY = 3600.0


def _lookup(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    lowered = name.lower()
    for key, candidate in headers.items():
        if key.lower() == lowered:
            return candidate
    return None


def expiration_date_from_headers(
    status: int,
    headers: Mapping[str, str],
    clock: Callable[[], float] = time.time,
) -> Optional[float]:
    """Determine when a response expires.

    The reference "now" is the response Date header when it parses, and the
    local clock otherwise. Rules are applied in order and the first one that
    matches decides:

    1. uncacheable status codes are rejected
    2. ``Pragma: no-cache`` and ``Cache-Control: no-store`` are rejected
    3. ``max-age=N`` expires N seconds after now (N <= 0 is rejected)
    4. ``Expires`` is converted from the remote clock to the local clock
    5. 302 and 307 without explicit freshness are rejected
    6. ``Last-Modified`` gives a heuristic lifetime of 10% of the document age
    7. otherwise the response expires one hour after now
    """
    if status not in CACHEABLE_STATUS_CODES:
        return None

    if pragma_no_cache(_lookup(headers, "Pragma")):
        return None

    local_now = clock()
    now = parse_http_date(_lookup(headers, "Date"))
    if now is None:
        now = local_now

    cache_control = parse_cache_control(_lookup(headers, "Cache-Control"))
    if cache_control.no_store:
        return None

    max_age = cache_control.max_age
    if max_age is not None:
        if max_age > 0:
            return now + max_age
        return None

    expires = _lookup(headers, "Expires")
    if expires is not None:
        expiration_interval = 0.0
        expiration_date = parse_http_date(expires)
        if expiration_date is not None:
            expiration_interval = expiration_date - now
        if expiration_interval > 0:
            # Convert remote expiration date to local expiration date
            return local_now + expiration_interval
        return None

    if status in REDIRECT_STATUS_CODES:
        return None

    last_modified = _lookup(headers, "Last-Modified")
    if last_modified is not None:
        age = 0.0
        last_modified_date = parse_http_date(last_modified)
        if last_modified_date is not None:
            age = now - last_modified_date
        if age > 0:
            return now + age * LAST_MODIFIED_FRACTION
        return None

    return now + DEFAULT_EXPIRATION_DELAY
