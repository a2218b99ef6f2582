"""Tree engines behind a uniform node facade."""

from __future__ import annotations

from ..config.models import ContentType, EngineMode
from .base import DiagnosticSuppression, DocumentHandle
from .browser import BrowserDocument
from .native import NativeDocument

ENGINES: dict[EngineMode, type[DocumentHandle]] = {
    EngineMode.NATIVE: NativeDocument,
    EngineMode.BROWSER: BrowserDocument,
}


def parse_document(
    text: str | None,
    engine: EngineMode | str = EngineMode.NATIVE,
    content_type: ContentType | str = ContentType.HTML,
    suppress_errors: bool = False,
) -> DocumentHandle:
    """Parse a document with the selected engine.

    Args:
        text: Document markup
        engine: Tree engine to use
        content_type: text/html or text/xml
        suppress_errors: Silence selector diagnostics until disposal

    Returns:
        Open DocumentHandle (use as a context manager)

    Raises:
        MissingInputError: If text is empty
        DocumentParseError: If no tree can be built
    """
    document_class = ENGINES[EngineMode(engine)]
    return document_class(text, content_type=content_type, suppress_errors=suppress_errors)


__all__ = [
    "BrowserDocument",
    "DiagnosticSuppression",
    "DocumentHandle",
    "ENGINES",
    "NativeDocument",
    "parse_document",
]
