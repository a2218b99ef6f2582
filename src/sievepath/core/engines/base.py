"""
Document handle base class and diagnostic suppression.

Defines the node facade shared by every tree engine. Engines only differ in
how they build the tree and which serializer raw markup uses.
"""

from __future__ import annotations

import logging
import threading
import warnings
from abc import ABC, abstractmethod
from typing import Any

from lxml import etree

from ..config.models import ContentType, EngineMode
from ..errors import EngineStateError, MissingInputError, SelectorSyntaxError
from ..logging import get_logger
from ..normalize.parsing import normalize_whitespace

logger = get_logger("engines")

# Loggers silenced while a suppressing document is open
SUPPRESSED_LOGGERS = ("sievepath.extract.resolver", "sievepath.extract.assembler")

_STRING_VALUE = etree.XPath("string()")

# Warning filters are process-wide: the first open scope installs "ignore",
# the last one to close restores the previous filters.
_warnings_lock = threading.Lock()
_warnings_depth = 0
_warnings_scope: warnings.catch_warnings | None = None


def _ignore_warnings() -> None:
    global _warnings_depth, _warnings_scope
    with _warnings_lock:
        if _warnings_depth == 0:
            scope = warnings.catch_warnings()
            scope.__enter__()
            warnings.simplefilter("ignore")
            _warnings_scope = scope
        _warnings_depth += 1


def _restore_warnings() -> None:
    global _warnings_depth, _warnings_scope
    with _warnings_lock:
        if _warnings_depth == 0:
            return
        _warnings_depth -= 1
        if _warnings_depth == 0 and _warnings_scope is not None:
            scope, _warnings_scope = _warnings_scope, None
            scope.__exit__(None, None, None)


class _DropRecords(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return False


class DiagnosticSuppression:
    """Scope object silencing selector diagnostics and parser warnings.

    Created by a document handle when ``suppress_errors`` is set and closed
    when the handle is disposed. Each scope attaches its own log filter, so
    scopes may close in any order. Closing is idempotent.
    """

    def __init__(self, logger_names: tuple[str, ...] = SUPPRESSED_LOGGERS):
        self.logger_names = logger_names
        self._filter = _DropRecords()
        self._warnings_ignored = False
        self.active = False

    def open(self) -> "DiagnosticSuppression":
        for name in self.logger_names:
            logging.getLogger(name).addFilter(self._filter)

        _ignore_warnings()
        self._warnings_ignored = True

        self.active = True
        return self

    def close(self) -> None:
        """Remove this scope's log filter and release the warning filters."""
        if not self.active:
            return
        self.active = False

        try:
            for name in self.logger_names:
                logging.getLogger(name).removeFilter(self._filter)
            if self._warnings_ignored:
                _restore_warnings()
        except Exception as e:
            error = EngineStateError(f"Failed to restore diagnostic state: {e}")
            logger.error(str(error), exc_info=True)
        finally:
            self._warnings_ignored = False

    def __enter__(self) -> "DiagnosticSuppression":
        return self.open()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


class DocumentHandle(ABC):
    """Parsed document owned by exactly one extraction call.

    Use as a context manager so ``dispose`` runs on every path::

        with parse_document(html) as doc:
            nodes = doc.query("//h1")
    """

    engine: EngineMode

    def __init__(
        self,
        text: str | None,
        content_type: ContentType | str = ContentType.HTML,
        suppress_errors: bool = False,
    ):
        if text is None or not text.strip():
            raise MissingInputError("Document text is empty")

        self.content_type = ContentType(content_type)
        self._suppression: DiagnosticSuppression | None = None
        self._disposed = False

        if suppress_errors:
            self._suppression = DiagnosticSuppression().open()

        try:
            root = self._build_tree(text)
        except BaseException:
            self.dispose()
            raise

        self.root = root
        self._tree = root.getroottree()

    @property
    def is_xml(self) -> bool:
        return self.content_type == ContentType.XML

    @property
    def suppressing(self) -> bool:
        return self._suppression is not None and self._suppression.active

    @property
    def disposed(self) -> bool:
        return self._disposed

    @abstractmethod
    def _build_tree(self, text: str) -> etree._Element:
        """Parse text into a tree and return its root element.

        Raises:
            DocumentParseError: If no tree can be built
        """

    def _serialization_method(self) -> str:
        return "xml" if self.is_xml else "html"

    # -------------------------------------------------------------------------
    # Node facade
    # -------------------------------------------------------------------------

    def query(self, expression: str, scope: Any = None) -> list[Any]:
        """Evaluate an XPath expression.

        Args:
            expression: XPath 1.0 expression
            scope: Context node; the document when omitted

        Returns:
            Matches in document order. Scalar results (count(), string())
            are wrapped in a one-element list; an empty string yields [].

        Raises:
            SelectorSyntaxError: If the expression is malformed
        """
        if self._disposed:
            raise EngineStateError("Document handle already disposed")

        if scope is None:
            context: Any = self._tree
        elif isinstance(scope, etree._Element):
            context = scope
        else:
            # Attribute values and text results cannot scope a query
            return []

        try:
            result = context.xpath(expression)
        except etree.XPathError as e:
            raise SelectorSyntaxError(expression, str(e)) from e

        if isinstance(result, list):
            return result
        if isinstance(result, str) and not result:
            return []
        return [result]

    def text_value(self, node: Any) -> str:
        """String-value of a node with whitespace runs collapsed."""
        if isinstance(node, etree._Element):
            raw = _STRING_VALUE(node)
        elif isinstance(node, bool):
            raw = "true" if node else "false"
        elif isinstance(node, float):
            raw = str(int(node)) if node.is_integer() else repr(node)
        else:
            raw = str(node)
        return normalize_whitespace(raw)

    def raw_markup(self, node: Any) -> str:
        """Outer markup of an element, without its tail text."""
        if isinstance(node, etree._Element):
            return etree.tostring(
                node,
                encoding="unicode",
                method=self._serialization_method(),
                with_tail=False,
            )
        if isinstance(node, str):
            return str(node)
        return self.text_value(node)

    def dispose(self) -> None:
        """Release the tree and restore diagnostic state. Runs once."""
        if self._disposed:
            return
        self._disposed = True

        if self._suppression is not None:
            self._suppression.close()
            self._suppression = None

        self.root = None
        self._tree = None

    def __enter__(self) -> "DocumentHandle":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "open"
        return f"<{type(self).__name__} {self.content_type.value} {state}>"
