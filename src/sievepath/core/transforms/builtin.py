"""
Built-in transforms available in every registry.
"""

from __future__ import annotations

import re
import time
from datetime import datetime, timezone
from typing import Any, Callable
from urllib.parse import urljoin, urlsplit

from ..config.models import RegexRule
from ..logging import get_logger
from ..normalize.parsing import (
    extract_email,
    format_magnitude,
    parse_date,
    parse_magnitude,
)
from .base import Transform

logger = get_logger("transforms")


# =============================================================================
# Regex
# =============================================================================


_FLAG_MAP = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
}

# $$, $& and $1..$99 as understood by JavaScript replacement strings
_REPLACEMENT_TOKEN = re.compile(r"\$(\$|&|\d{1,2})")


def _compile_flags(flags: str) -> tuple[int, int]:
    """Map flag letters to (re flags, substitution count)."""
    re_flags = 0
    for letter in flags:
        re_flags |= _FLAG_MAP.get(letter, 0)
    count = 0 if "g" in flags else 1
    return re_flags, count


def replacement_template(template: str) -> Callable[[re.Match[str]], str]:
    """Build an re.sub replacement callable from a $1-style template.

    Backslashes in the template are literal.
    """
    def expand(match: re.Match[str]) -> str:
        def token(tok: re.Match[str]) -> str:
            ref = tok.group(1)
            if ref == "$":
                return "$"
            if ref == "&":
                return match.group(0)

            index = int(ref)
            if 0 < index <= match.re.groups:
                return match.group(index) or ""
            # $12 with a single group reads as $1 followed by "2"
            if len(ref) == 2 and 0 < int(ref[0]) <= match.re.groups:
                return (match.group(int(ref[0])) or "") + ref[1]
            return tok.group(0)

        return _REPLACEMENT_TOKEN.sub(token, template)

    return expand


class RegexTransform(Transform):
    """Apply regex replacement rules in order.

    Flags use the letters g (replace all), i, m and s. Without g only the
    first match is replaced. Replacements may reference groups as $1.
    """

    type = "regex"

    def __init__(self, rules: list[dict[str, Any] | RegexRule]):
        if not rules:
            raise ValueError("regex transform requires at least one rule")

        self.rules: list[tuple[re.Pattern[str], Callable[[re.Match[str]], str], int]] = []
        for rule in rules:
            if not isinstance(rule, RegexRule):
                rule = RegexRule.model_validate(rule)
            re_flags, count = _compile_flags(rule.flags or "g")
            self.rules.append(
                (re.compile(rule.pattern, re_flags), replacement_template(rule.replacement), count)
            )

    def transform(self, value: Any) -> Any:
        if not value or not isinstance(value, str):
            return value or ""
        for pattern, replacement, count in self.rules:
            value = pattern.sub(replacement, value, count=count)
        return value


# =============================================================================
# Numbers
# =============================================================================


class NumberNormalizeTransform(Transform):
    """Turn counts like "1.5K" into integers."""

    type = "num-normalize"

    def transform(self, value: Any) -> int:
        return parse_magnitude(value)

    def reverse(self, value: Any) -> str:
        return format_magnitude(value)


# =============================================================================
# URLs
# =============================================================================


def _is_absolute_http(value: str) -> bool:
    return value.startswith("http://") or value.startswith("https://")


class UrlResolveTransform(Transform):
    """Resolve relative URLs against an explicit base URL."""

    type = "url-resolve"

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url

    def transform(self, value: Any) -> str:
        if not value or not isinstance(value, str):
            return ""

        value = value.strip()
        if _is_absolute_http(value):
            return value
        if value.startswith("//"):
            return "https:" + value
        if not self.base_url:
            return value

        if value.startswith("/"):
            base = urlsplit(self.base_url)
            return f"{base.scheme}://{base.netloc}{value}"
        return self.base_url.rstrip("/") + "/" + value

    def reverse(self, value: Any) -> Any:
        if not self.base_url or not isinstance(value, str):
            return value
        url = urlsplit(value)
        if url.netloc and url.netloc == urlsplit(self.base_url).netloc:
            return url.path or "/"
        return value


class ParseAsUrlTransform(Transform):
    """Resolve relative URLs against the document URL."""

    type = "parse-as-url"

    def __init__(self, base_url: str | None = None):
        self.base_url = base_url

    def transform(self, value: Any) -> str:
        if not value or not isinstance(value, str):
            return ""
        if _is_absolute_http(value) or not self.base_url:
            return value
        try:
            return urljoin(self.base_url, value)
        except ValueError:
            return value


# =============================================================================
# Text
# =============================================================================


class ExtractEmailTransform(Transform):
    """Keep only the first e-mail address in the value."""

    type = "extract-email"

    def transform(self, value: Any) -> str:
        if not isinstance(value, str):
            return ""
        return extract_email(value)


# =============================================================================
# Dates
# =============================================================================


class DateFormatTransform(Transform):
    """Convert a date string to a Unix timestamp (seconds).

    ``format`` is tried with strptime before free-form parsing. Values that
    cannot be parsed map to the current time.
    """

    type = "date-format"

    def __init__(self, format: str = "%Y-%m-%d"):
        self.format = format

    def transform(self, value: Any) -> int:
        if not value or not isinstance(value, str):
            return 0

        parsed = parse_date(value.strip(), formats=[self.format])
        if parsed.timestamp is None:
            logger.debug(f"Unparseable date {value!r}, using current time")
            return int(time.time())
        return parsed.timestamp

    def reverse(self, value: Any) -> str:
        return datetime.fromtimestamp(int(value), tz=timezone.utc).date().isoformat()


BUILTIN_TRANSFORMS: dict[str, type[Transform]] = {
    cls.type: cls
    for cls in (
        RegexTransform,
        NumberNormalizeTransform,
        UrlResolveTransform,
        ParseAsUrlTransform,
        ExtractEmailTransform,
        DateFormatTransform,
    )
}
