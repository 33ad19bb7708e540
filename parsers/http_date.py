# ABOUTME: Locale-invariant HTTP-date parsing for the three formats allowed by RFC 2616 section 3.3.1
# ABOUTME: Returns epoch seconds in GMT, or None when the value matches none of the formats

import calendar
import re
import time
from typing import Optional

MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

SHORT_DAYS = r"(?:Mon|Tue|Wed|Thu|Fri|Sat|Sun)"
LONG_DAYS = r"(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)"
MONTH = r"(?P<month>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)"
TIME = r"(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2})"

# Sun, 06 Nov 1994 08:49:37 GMT
RFC1123_PATTERN = re.compile(
    rf"^{SHORT_DAYS}, (?P<day>\d{{1,2}}) {MONTH} (?P<year>\d{{4}}) {TIME} (?:GMT|UTC)$",
    re.IGNORECASE,
)

# Sun Nov  6 08:49:37 1994
ASCTIME_PATTERN = re.compile(
    rf"^{SHORT_DAYS} {MONTH} +(?P<day>\d{{1,2}}) {TIME} (?P<year>\d{{4}})$",
    re.IGNORECASE,
)

# Sunday, 06-Nov-94 08:49:37 GMT
RFC850_PATTERN = re.compile(
    rf"^{LONG_DAYS}, (?P<day>\d{{1,2}})-{MONTH}-(?P<year>\d{{2}}) {TIME} (?:GMT|UTC)$",
    re.IGNORECASE,
)

DATE_PATTERNS = (RFC1123_PATTERN, ASCTIME_PATTERN, RFC850_PATTERN)


def _expand_two_digit_year(year: int) -> int:
    """Map an RFC 850 two-digit year onto a full year (69 and below are 20xx)."""
    if year < 70:
        return 2000 + year
    return 1900 + year


def _to_timestamp(match: "re.Match[str]") -> Optional[float]:
    year = int(match.group("year"))
    if len(match.group("year")) == 2:
        year = _expand_two_digit_year(year)

    fields = (
        year,
        MONTHS[match.group("month").lower()],
        int(match.group("day")),
        int(match.group("hour")),
        int(match.group("minute")),
        int(match.group("second")),
    )

    # Reject out-of-range components such as "31 Feb" or "25:00:00"
    _, days_in_month = calendar.monthrange(fields[0], fields[1])
    if not 1 <= fields[2] <= days_in_month:
        return None
    if fields[3] > 23 or fields[4] > 59 or fields[5] > 60:
        return None

    return float(calendar.timegm(fields + (0, 0, 0)))


def parse_http_date(value: Optional[str]) -> Optional[float]:
    """Parse an HTTP-date header value into epoch seconds.

    Formats are tried in order: RFC 1123, ANSI C asctime, RFC 850. Month and
    day names come from a fixed English table so the process locale never
    affects the result. Anything that does not parse yields None.
    """
    if not value:
        return None

    candidate = value.strip()
    for pattern in DATE_PATTERNS:
        match = pattern.match(candidate)
        if match:
            return _to_timestamp(match)

    return None


def format_http_date(timestamp: float) -> str:
    """Format epoch seconds as an RFC 1123 date (the preferred HTTP-date form)."""
    parts = time.gmtime(timestamp)
    day_name = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")[parts.tm_wday]
    month_name = list(MONTHS)[parts.tm_mon - 1].capitalize()
    return (
        f"{day_name}, {parts.tm_mday:02d} {month_name} {parts.tm_year} "
        f"{parts.tm_hour:02d}:{parts.tm_min:02d}:{parts.tm_sec:02d} GMT"
    )
