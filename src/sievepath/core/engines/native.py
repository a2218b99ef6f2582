"""
Native tree engine backed by libxml2 (lxml).
"""

from __future__ import annotations

from lxml import etree
from lxml import html as lxml_html

from ..config.models import EngineMode
from ..errors import DocumentParseError
from .base import DocumentHandle


class NativeDocument(DocumentHandle):
    """Document parsed with lxml's HTML or recovering XML parser."""

    engine = EngineMode.NATIVE

    def _build_tree(self, text: str) -> etree._Element:
        data = text.encode("utf-8")

        try:
            if self.is_xml:
                parser = etree.XMLParser(
                    recover=True,
                    encoding="utf-8",
                    resolve_entities=False,
                    no_network=True,
                )
                root = etree.fromstring(data, parser)
            else:
                parser = lxml_html.HTMLParser(encoding="utf-8")
                root = lxml_html.document_fromstring(data, parser=parser)
        except (etree.ParserError, etree.XMLSyntaxError, ValueError) as e:
            raise DocumentParseError(
                f"Cannot parse document: {e}",
                engine=self.engine.value,
                cause=e,
            ) from e

        if root is None:
            raise DocumentParseError(
                "Parser produced no root element",
                engine=self.engine.value,
            )
        return root
