# ABOUTME: Directive parsing for the Cache-Control and Pragma response headers
# ABOUTME: Tolerates malformed input by skipping unparseable directives instead of raising

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

DIRECTIVE_PATTERN = re.compile(
    r"""\s*(?P<name>[^\s=,]+)\s*(?:=\s*(?P<value>"[^"]*"|[^,]*))?\s*(?:,|$)"""
)


@dataclass
class CacheControl:
    """Parsed Cache-Control header"""

    directives: Dict[str, Optional[str]] = field(default_factory=dict)

    @property
    def no_store(self) -> bool:
        return "no-store" in self.directives

    @property
    def no_cache(self) -> bool:
        return "no-cache" in self.directives

    @property
    def max_age(self) -> Optional[int]:
        """Integer max-age, or None when absent or not a valid integer."""
        raw = self.directives.get("max-age")
        if raw is None:
            return None
        match = re.match(r"^[+-]?\d+", raw.strip())
        if not match:
            return None
        return int(match.group(0))


def parse_cache_control(value: Optional[str]) -> CacheControl:
    """Split a Cache-Control value into lower-cased directive names and raw values."""
    directives: Dict[str, Optional[str]] = {}
    if not value:
        return CacheControl(directives)

    for match in DIRECTIVE_PATTERN.finditer(value):
        name = match.group("name").lower()
        raw_value = match.group("value")
        if raw_value is not None:
            raw_value = raw_value.strip().strip('"')
        # First occurrence wins, as with duplicated header fields
        directives.setdefault(name, raw_value)

    return CacheControl(directives)


def pragma_no_cache(value: Optional[str]) -> bool:
    """True when a Pragma header carries the no-cache token."""
    if not value:
        return False
    return any(token.strip().lower() == "no-cache" for token in value.split(","))
