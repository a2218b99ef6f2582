"""
Browser-grade tree engine.

HTML is tree-built by html5lib (the WHATWG algorithm browsers follow) through
BeautifulSoup, then converted into an lxml tree so XPath works unchanged.
"""

from __future__ import annotations

import copy
import re

from lxml import etree
from lxml.html import soupparser

from ..config.models import EngineMode
from ..errors import DocumentParseError
from .base import DocumentHandle

_XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")


class BrowserDocument(DocumentHandle):
    """Document parsed by html5lib (HTML) or BeautifulSoup's lxml-xml builder (XML)."""

    engine = EngineMode.BROWSER

    def _build_tree(self, text: str) -> etree._Element:
        try:
            if self.is_xml:
                # The declaration cannot be converted into a processing instruction
                root = soupparser.fromstring(_XML_DECLARATION.sub("", text), features="lxml-xml")
                # soupparser wraps non-html documents in an <html> element
                if root is not None and root.tag == "html" and len(root) == 1:
                    root = copy.deepcopy(root[0])
            else:
                root = soupparser.fromstring(text, features="html5lib")
        except (etree.LxmlError, ValueError, TypeError) as e:
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
