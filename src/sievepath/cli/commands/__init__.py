"""CLI command modules."""

from . import check, extract, patterns, validate

__all__ = [
    "check",
    "extract",
    "patterns",
    "validate",
]
