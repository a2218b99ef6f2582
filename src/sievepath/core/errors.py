"""
Exception taxonomy for sievepath.

Fatal errors (raised to the caller):
- MissingInputError, UnsupportedPatternType, InvalidDescriptorError,
  DocumentParseError

Absorbed errors (logged, extraction continues):
- SelectorSyntaxError, TransformExecutionError, EngineStateError
"""

from __future__ import annotations


class SieveError(Exception):
    """Base exception for all sievepath errors."""


class MissingInputError(SieveError):
    """Neither document text nor a retrievable source URL was supplied."""


class UnsupportedPatternType(SieveError):
    """A descriptor requests a query dialect the engine does not support."""

    def __init__(self, pattern_type: str, key: str | None = None):
        self.pattern_type = pattern_type
        self.key = key
        where = f" (field '{key}')" if key else ""
        super().__init__(
            f"Unsupported pattern type '{pattern_type}'{where}: only xpath is supported"
        )


class InvalidDescriptorError(SieveError):
    """A descriptor list violates its structural invariants."""


class DocumentParseError(SieveError):
    """The engine could not build a tree from the document."""

    def __init__(self, message: str, engine: str | None = None, cause: Exception | None = None):
        super().__init__(message)
        self.engine = engine
        self.cause = cause


class SelectorSyntaxError(SieveError):
    """Malformed query expression."""

    def __init__(self, expression: str, message: str):
        super().__init__(f"Invalid XPath '{expression}': {message}")
        self.expression = expression
        self.reason = message


class TransformExecutionError(SieveError):
    """A custom transform raised while processing a value."""

    def __init__(self, transform: str, cause: Exception):
        super().__init__(f"Transform '{transform}' failed: {cause}")
        self.transform = transform
        self.cause = cause


class EngineStateError(SieveError):
    """Restoring engine-global diagnostic state failed."""


class FetchError(SieveError):
    """Document retrieval failed."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
        self.cause = cause
