"""Normalization of extracted values."""

from .parsing import (
    ParsedDate,
    parse_date,
    parse_magnitude,
    format_magnitude,
    to_unix_timestamp,
    normalize_whitespace,
    decode_entities,
    extract_email,
)

__all__ = [
    "ParsedDate",
    "parse_date",
    "parse_magnitude",
    "format_magnitude",
    "to_unix_timestamp",
    "normalize_whitespace",
    "decode_entities",
    "extract_email",
]
