"""Tests for the node facade and both tree engines."""

from __future__ import annotations

import logging
import warnings

import pytest

from sievepath.core.config.models import ContentType, EngineMode
from sievepath.core.engines import (
    BrowserDocument,
    DiagnosticSuppression,
    NativeDocument,
    parse_document,
)
from sievepath.core.errors import EngineStateError, MissingInputError, SelectorSyntaxError


ENGINES = [EngineMode.NATIVE, EngineMode.BROWSER]


class TestParseDocument:
    """Engine selection and input checks."""

    def test_selects_native_engine_by_default(self):
        """Default engine is the native one."""
        with parse_document("<h1>Title</h1>") as doc:
            assert isinstance(doc, NativeDocument)
            assert doc.engine == EngineMode.NATIVE

    def test_selects_browser_engine(self):
        """Engine names are accepted as strings."""
        with parse_document("<h1>Title</h1>", engine="browser") as doc:
            assert isinstance(doc, BrowserDocument)

    @pytest.mark.parametrize("text", ["", "   \n\t ", None])
    def test_empty_document_raises(self, text):
        """Empty input is a missing-input error on every engine."""
        for engine in ENGINES:
            with pytest.raises(MissingInputError):
                parse_document(text, engine=engine)

    def test_unknown_engine_raises(self):
        with pytest.raises(ValueError):
            parse_document("<p>x</p>", engine="webkit")


@pytest.mark.parametrize("engine", ENGINES)
class TestQuery:
    """query() behaves the same on both engines."""

    def test_text_nodes(self, engine):
        with parse_document("<h1>Title</h1>", engine=engine) as doc:
            assert doc.query("//h1/text()") == ["Title"]

    def test_zero_matches_is_empty_list(self, engine):
        with parse_document("<h1>Title</h1>", engine=engine) as doc:
            assert doc.query("//h2") == []

    def test_malformed_expression_raises(self, engine):
        with parse_document("<h1>Title</h1>", engine=engine) as doc:
            with pytest.raises(SelectorSyntaxError) as exc_info:
                doc.query("//h1[[[x")
            assert exc_info.value.expression == "//h1[[[x"
            assert str(exc_info.value)

    def test_malformed_expression_raises_without_matches(self, engine):
        """Syntax errors do not depend on the document content."""
        with parse_document("<p>nothing here</p>", engine=engine) as doc:
            with pytest.raises(SelectorSyntaxError):
                doc.query("//*[")

    def test_scalar_results_are_wrapped(self, engine, product_html):
        with parse_document(product_html, engine=engine) as doc:
            counted = doc.query("count(//li)")
            assert len(counted) == 1
            assert doc.text_value(counted[0]) == "3"

            assert doc.query("string(//h1)") == ["Products"]
            assert doc.query("string(//h6)") == []

    def test_scoped_query(self, engine, product_html):
        with parse_document(product_html, engine=engine) as doc:
            items = doc.query('//li[@class="product"]')
            assert len(items) == 3

            prices = doc.query('.//span[@class="price"]', items[0])
            assert len(prices) == 1
            assert doc.text_value(prices[0]) == "10.5K"

            assert doc.query(".//span[@class='tag']", items[2]) == []

    def test_non_element_scope_matches_nothing(self, engine, product_html):
        with parse_document(product_html, engine=engine) as doc:
            href = doc.query("//a/@href")[0]
            assert doc.query(".//span", href) == []

    def test_attribute_values(self, engine, product_html):
        with parse_document(product_html, engine=engine) as doc:
            hrefs = doc.query("//a/@href")
            assert [doc.text_value(h) for h in hrefs] == [
                "/items/1",
                "/items/2",
                "https://other.example/items/3",
            ]


@pytest.mark.parametrize("engine", ENGINES)
class TestNodeValues:
    """text_value and raw_markup."""

    def test_text_value_collapses_whitespace(self, engine, article_html):
        with parse_document(article_html, engine=engine) as doc:
            heading = doc.query("//h1")[0]
            assert doc.text_value(heading) == "Breaking News"

    def test_text_value_includes_descendants(self, engine, article_html):
        with parse_document(article_html, engine=engine) as doc:
            body = doc.query('//p[@class="body"]')[0]
            assert doc.text_value(body) == "First & second paragraph."

    def test_raw_markup_is_outer_html_without_tail(self, engine):
        html = '<div><p class="x">Hi <b>there</b></p>tail</div>'
        with parse_document(html, engine=engine) as doc:
            paragraph = doc.query("//p")[0]
            assert doc.raw_markup(paragraph) == '<p class="x">Hi <b>there</b></p>'

    def test_raw_markup_of_string_result(self, engine, product_html):
        with parse_document(product_html, engine=engine) as doc:
            href = doc.query("//a/@href")[0]
            assert doc.raw_markup(href) == "/items/1"


@pytest.mark.parametrize("engine", ENGINES)
class TestXmlDocuments:
    """XML content type."""

    def test_query_and_markup(self, engine, feed_xml):
        with parse_document(feed_xml, engine=engine, content_type=ContentType.XML) as doc:
            titles = doc.query("//entry/title/text()")
            assert titles == ["Alpha", "Beta"]

            entry = doc.query('//entry[@id="b2"]')[0]
            assert doc.raw_markup(entry) == '<entry id="b2"><title>Beta</title><link>/b2</link></entry>'

    def test_xml_keeps_link_text(self, engine, feed_xml):
        """<link> is an empty element in HTML but not in XML."""
        with parse_document(feed_xml, engine=engine, content_type="text/xml") as doc:
            assert doc.query("//entry/link/text()") == ["/a1", "/b2"]


class TestBrowserEngine:
    """Browser-grade repair of malformed markup."""

    def test_unclosed_paragraphs(self):
        with parse_document("<p>one<p>two", engine=EngineMode.BROWSER) as doc:
            assert doc.query("//p/text()") == ["one", "two"]

    def test_head_and_body_are_synthesized(self):
        with parse_document("<title>T</title><b>bold</b>", engine=EngineMode.BROWSER) as doc:
            assert doc.query("/html/head/title/text()") == ["T"]
            assert doc.query("/html/body/b/text()") == ["bold"]


class TestDisposal:
    """dispose() runs once and restores diagnostic state."""

    def test_dispose_is_idempotent(self):
        doc = parse_document("<h1>Title</h1>")
        doc.dispose()
        doc.dispose()
        assert doc.disposed

    def test_query_after_dispose_raises(self):
        doc = parse_document("<h1>Title</h1>")
        doc.dispose()
        with pytest.raises(EngineStateError):
            doc.query("//h1")

    def test_context_manager_disposes(self):
        with parse_document("<h1>Title</h1>") as doc:
            assert not doc.disposed
        assert doc.disposed

    @pytest.mark.parametrize("engine", ENGINES)
    def test_suppression_is_restored(self, engine, caplog):
        target = logging.getLogger("sievepath.extract.resolver")

        doc = parse_document("<h1>Title</h1>", engine=engine, suppress_errors=True)
        assert doc.suppressing
        with caplog.at_level(logging.DEBUG):
            target.debug("hidden")

        doc.dispose()
        assert not doc.suppressing
        assert target.filters == []
        with caplog.at_level(logging.DEBUG):
            target.debug("visible")

        assert [r.getMessage() for r in caplog.records] == ["visible"]

    def test_out_of_order_dispose(self, caplog):
        target = logging.getLogger("sievepath.extract.resolver")

        first = parse_document("<h1>A</h1>", suppress_errors=True)
        second = parse_document("<h1>B</h1>", suppress_errors=True)

        first.dispose()
        with caplog.at_level(logging.DEBUG):
            target.debug("still hidden")

        second.dispose()
        with caplog.at_level(logging.DEBUG):
            target.debug("visible")

        assert target.filters == []
        assert [r.getMessage() for r in caplog.records] == ["visible"]

    def test_suppression_restored_when_body_raises(self):
        target = logging.getLogger("sievepath.extract.resolver")

        with pytest.raises(RuntimeError):
            with parse_document("<h1>Title</h1>", suppress_errors=True):
                raise RuntimeError("boom")

        assert target.filters == []

    def test_no_suppression_by_default(self):
        with parse_document("<h1>Title</h1>") as doc:
            assert not doc.suppressing


class TestDiagnosticSuppression:
    """The suppression scope object on its own."""

    def test_silences_warnings_until_closed(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")

            scope = DiagnosticSuppression().open()
            warnings.warn("hidden")
            scope.close()

            warnings.warn("visible")

        assert [str(w.message) for w in caught] == ["visible"]

    def test_close_twice(self):
        scope = DiagnosticSuppression().open()
        scope.close()
        scope.close()
        assert not scope.active

    def test_warnings_silenced_until_last_scope_closes(self):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")

            first = DiagnosticSuppression().open()
            second = DiagnosticSuppression().open()
            first.close()
            warnings.warn("hidden")
            second.close()

            warnings.warn("visible")

        assert [str(w.message) for w in caught] == ["visible"]
