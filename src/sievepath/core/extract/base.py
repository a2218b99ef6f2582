"""
Extraction data structures.

Defines the records, results and selector reports returned by the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# One output record: field key -> value, in descriptor order
Record = dict[str, Any]


@dataclass
class ExtractionResult:
    """Result of a service-level extraction."""

    # Extracted records
    records: list[Record] = field(default_factory=list)
    record_count: int = 0

    # Source metadata
    source_url: str | None = None
    engine: str | None = None
    elapsed_ms: float = 0.0

    # Warnings
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.record_count:
            self.record_count = len(self.records)

    @property
    def ok(self) -> bool:
        """Check if extraction produced any record."""
        return self.record_count > 0

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)


@dataclass
class SelectorReport:
    """Outcome of checking one XPath expression against a document."""

    expression: str
    valid: bool
    match_count: int = 0
    sample: str | None = None  # text value of the first match
    error: str | None = None


@dataclass
class ValidationReport:
    """Outcome of validate_selectors."""

    valid: bool = True
    results: list[SelectorReport] = field(default_factory=list)

    @property
    def invalid(self) -> list[SelectorReport]:
        return [r for r in self.results if not r.valid]
