"""
Parsing utilities for normalizing extracted values.

Handles dates, magnitude-suffixed numbers, e-mail addresses, entities and
whitespace. The built-in transforms are thin wrappers around these helpers.
"""

from __future__ import annotations

import html
import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Any

import dateparser

from ..logging import get_logger

logger = get_logger("normalize")


# =============================================================================
# Date Parsing
# =============================================================================


@dataclass
class ParsedDate:
    """Result of parsing a date string."""

    value: datetime | None
    original: str
    confidence: float  # 0.0 - 1.0
    format_detected: str | None = None

    @property
    def timestamp(self) -> int | None:
        """Unix timestamp in seconds (naive values are taken as UTC)."""
        if self.value is None:
            return None
        return to_unix_timestamp(self.value)


def parse_date(
    value: str | datetime | date | None,
    *,
    formats: list[str] | None = None,
    prefer_day_first: bool = False,
    relative_base: datetime | None = None,
) -> ParsedDate:
    """Parse a date/datetime from various formats.

    Handles:
    - Explicit strptime formats (tried first)
    - ISO 8601 formats, including offsets and a trailing Z
    - US formats (MM/DD/YYYY)
    - Natural language and relative dates ("2 days ago")

    Args:
        value: String or datetime to parse
        formats: strptime formats to try before the built-in patterns
        prefer_day_first: Prefer DD/MM/YYYY over MM/DD/YYYY
        relative_base: Base datetime for relative parsing

    Returns:
        ParsedDate with parsed value and metadata
    """
    if value is None:
        return ParsedDate(value=None, original="", confidence=0.0)

    original = str(value).strip()

    if not original:
        return ParsedDate(value=None, original=original, confidence=0.0)

    if isinstance(value, datetime):
        return ParsedDate(
            value=value,
            original=original,
            confidence=1.0,
            format_detected="datetime",
        )

    if isinstance(value, date):
        return ParsedDate(
            value=datetime.combine(value, time.min),
            original=original,
            confidence=1.0,
            format_detected="date",
        )

    for fmt in formats or []:
        try:
            return ParsedDate(
                value=datetime.strptime(original, fmt),
                original=original,
                confidence=1.0,
                format_detected=fmt,
            )
        except ValueError:
            continue

    text = _clean_date_string(original)

    if not text:
        return ParsedDate(value=None, original=original, confidence=0.0)

    # Fast path before dateparser
    result = _try_common_patterns(text, day_first=prefer_day_first)
    if result:
        return ParsedDate(
            value=result[0],
            original=original,
            confidence=result[1],
            format_detected=result[2],
        )

    settings: dict[str, Any] = {
        "PREFER_DAY_OF_MONTH": "first",
        "STRICT_PARSING": False,
        "DATE_ORDER": "DMY" if prefer_day_first else "MDY",
    }
    if relative_base:
        settings["RELATIVE_BASE"] = relative_base

    try:
        parsed = dateparser.parse(text, settings=settings)
    except Exception as e:
        logger.debug(f"dateparser failed on {text!r}: {e}")
        parsed = None

    if parsed:
        return ParsedDate(
            value=parsed,
            original=original,
            confidence=_calculate_date_confidence(text, parsed),
            format_detected="dateparser",
        )

    return ParsedDate(value=None, original=original, confidence=0.0)


def _clean_date_string(text: str) -> str:
    """Clean and normalize a date string for parsing."""
    text = re.sub(r"^(?:date|posted|published|updated):\s*", "", text, flags=re.IGNORECASE)
    return normalize_whitespace(text)


_COMMON_DATE_PATTERNS = [
    (
        re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})\s+(?P<hour>\d{2}):(?P<minute>\d{2})"),
        0.95,
        "iso_space_no_sec",
    ),
    (
        re.compile(r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"),
        0.9,
        "iso_date",
    ),
    (
        re.compile(
            r"^(?P<lead>\d{1,2})/(?P<middle>\d{1,2})/(?P<year>\d{4})\s+"
            r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?\s*(?P<ampm>AM|PM)?",
            re.IGNORECASE,
        ),
        0.85,
        "us_datetime",
    ),
    (
        re.compile(r"^(?P<lead>\d{1,2})/(?P<middle>\d{1,2})/(?P<year>\d{4})$"),
        0.85,
        "us_date",
    ),
    (
        re.compile(r"^(?P<lead>\d{1,2})/(?P<middle>\d{1,2})/(?P<year>\d{2})$"),
        0.75,
        "us_date_short",
    ),
]


def _datetime_from_match(match: re.Match[str], day_first: bool) -> datetime:
    parts = match.groupdict()

    year = int(parts["year"])
    if year < 100:
        year += 2000 if year < 50 else 1900

    if "lead" in parts:
        month, day = int(parts["lead"]), int(parts["middle"])
        if day_first:
            month, day = day, month
    else:
        month, day = int(parts["month"]), int(parts["day"])

    hour = int(parts.get("hour") or 0)
    ampm = (parts.get("ampm") or "").upper()
    if ampm == "PM" and hour < 12:
        hour += 12
    elif ampm == "AM" and hour == 12:
        hour = 0

    return datetime(
        year,
        month,
        day,
        hour,
        int(parts.get("minute") or 0),
        int(parts.get("second") or 0),
    )


def _try_common_patterns(text: str, day_first: bool = False) -> tuple[datetime, float, str] | None:
    """Fast path for ISO and slash-separated dates before dateparser."""
    if re.match(r"^\d{4}-\d{2}-\d{2}", text):
        try:
            return (datetime.fromisoformat(text.replace("Z", "+00:00")), 1.0, "iso8601")
        except ValueError:
            pass

    for pattern, confidence, name in _COMMON_DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        try:
            return (_datetime_from_match(match, day_first), confidence, name)
        except ValueError:
            continue

    return None


def _calculate_date_confidence(text: str, parsed: datetime) -> float:
    """Calculate confidence score for a parsed date."""
    confidence = 0.7

    if re.search(r"\d{4}", text):
        confidence += 0.1
    if re.search(r"\d{1,2}:\d{2}", text):
        confidence += 0.1

    relative_words = ["today", "tomorrow", "yesterday", "ago", "next", "last"]
    if any(word in text.lower() for word in relative_words):
        confidence -= 0.1

    return min(1.0, max(0.0, confidence))


def to_unix_timestamp(value: datetime) -> int:
    """Seconds since the epoch, floored. Naive datetimes are UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return math.floor(value.timestamp())


# =============================================================================
# Number Parsing
# =============================================================================


MAGNITUDE_SUFFIXES = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?")


def parse_magnitude(value: Any) -> int:
    """Parse a count like "1.5K" or "2,3m" into an integer.

    Commas are read as decimal points, a trailing k/m/b multiplies, and the
    result is rounded half up. Anything without a leading number gives 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return _round_half_up(float(value))
    if not isinstance(value, str):
        return 0

    normalized = value.lower().replace(",", ".")
    match = _LEADING_NUMBER.match(normalized)
    if not match:
        return 0

    number = float(match.group())
    multiplier = MAGNITUDE_SUFFIXES.get(normalized[-1:])
    if multiplier:
        number *= multiplier

    return _round_half_up(number)


def format_magnitude(value: int | float) -> str:
    """Inverse of parse_magnitude: 1500 -> "1.5K"."""
    for suffix, divisor in (("B", 1_000_000_000), ("M", 1_000_000), ("K", 1_000)):
        if value >= divisor:
            return f"{value / divisor:.1f}{suffix}"
    return str(value)


def _round_half_up(number: float) -> int:
    if math.isnan(number) or math.isinf(number):
        return 0
    return math.floor(number + 0.5)


# =============================================================================
# Utility Functions
# =============================================================================


EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._-]+@[a-zA-Z0-9._-]+\.[a-zA-Z0-9_-]+")


def normalize_whitespace(text: str | None) -> str:
    """Collapse whitespace runs to one space and trim."""
    if text is None:
        return ""
    return " ".join(text.split())


def decode_entities(text: str | None) -> str:
    """Decode HTML entities (&amp;, &#39;, &nbsp; ...)."""
    if text is None:
        return ""
    return html.unescape(text)


def extract_email(text: str | None) -> str:
    """Extract the first e-mail address from text, or ""."""
    if not text:
        return ""
    match = EMAIL_PATTERN.search(text)
    return match.group(0) if match else ""
