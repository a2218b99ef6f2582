"""Tests for record assembly and the evaluate entry point."""

from __future__ import annotations

import pytest

from sievepath.core.config.models import EngineMode, EvaluateOptions, FieldDescriptor
from sievepath.core.engines import parse_document
from sievepath.core.errors import InvalidDescriptorError, UnsupportedPatternType
from sievepath.core.extract.assembler import RecordAssembler, check_descriptors
from sievepath.core.service import evaluate
from sievepath.core.transforms.base import Transform


def _product_fields(**price_pipes):
    return [
        FieldDescriptor(key="item", patterns=['//li[@class="product"]'], is_container=True),
        FieldDescriptor(key="name", patterns=[".//a/text()"]),
        FieldDescriptor(key="price", patterns=['.//span[@class="price"]/text()'], pipes=price_pipes),
    ]


class TestScenarios:
    """End-to-end extraction scenarios."""

    def test_fallback_pattern_value(self):
        """Primary misses, fallback matches."""
        descriptors = [
            FieldDescriptor(key="t", patterns=["//h2/text()"], fallback_patterns=["//h1/text()"]),
        ]
        assert evaluate("<h1>Title</h1>", descriptors) == [{"t": "Title"}]

    def test_container_records_are_trimmed(self, product_html):
        """One record per container, values trimmed."""
        records = evaluate(product_html, _product_fields(trim=True))

        assert len(records) == 3
        assert [r["price"] for r in records] == ["10.5K", "2,3m", "99"]
        assert [r["name"] for r in records] == ["First", "Second", "Third"]

    def test_plain_dict_descriptors(self, product_html):
        records = evaluate(
            product_html,
            [{"key": "title", "patterns": ["//title/text()"]}],
        )
        assert records == [{"title": "Catalog"}]


class TestContainers:
    """Container partitioning."""

    def test_records_without_values_are_dropped(self):
        html = """
        <ul>
          <li><b>one</b></li>
          <li><i>no bold here</i></li>
          <li><b>three</b></li>
        </ul>
        """
        descriptors = [
            FieldDescriptor(key="row", patterns=["//li"], is_container=True),
            FieldDescriptor(key="bold", patterns=[".//b/text()"]),
        ]
        assert evaluate(html, descriptors) == [{"bold": "one"}, {"bold": "three"}]

    def test_container_matching_nothing(self, product_html):
        descriptors = [
            FieldDescriptor(key="row", patterns=["//tr"], is_container=True),
            FieldDescriptor(key="name", patterns=[".//a/text()"]),
        ]
        assert evaluate(product_html, descriptors) == []

    def test_container_position_in_list_does_not_matter(self, product_html):
        descriptors = _product_fields(trim=True)
        reordered = descriptors[1:] + descriptors[:1]
        assert evaluate(product_html, reordered) == evaluate(product_html, descriptors)

    def test_record_keys_follow_descriptor_order(self, product_html):
        records = evaluate(product_html, _product_fields())
        assert list(records[0]) == ["name", "price"]

    def test_no_container_gives_single_record(self, product_html):
        descriptors = [
            FieldDescriptor(key="heading", patterns=["//h1/text()"]),
            FieldDescriptor(key="missing", patterns=["//h5/text()"]),
        ]
        assert evaluate(product_html, descriptors) == [{"heading": "Products"}]

    def test_no_value_at_all_gives_no_record(self, product_html):
        descriptors = [FieldDescriptor(key="missing", patterns=["//h5/text()"])]
        assert evaluate(product_html, descriptors) == []


class TestFieldValues:
    """Per-field value rules."""

    def test_multiple_returns_list(self, product_html):
        descriptors = [FieldDescriptor(key="tags", patterns=['//span[@class="tag"]/text()'], multiple=True)]
        assert evaluate(product_html, descriptors) == [{"tags": ["new", "sale", "old"]}]

    def test_multiple_with_comma(self, product_html):
        descriptors = [
            FieldDescriptor(key="tags", patterns=['//span[@class="tag"]/text()'], multiple="with comma"),
        ]
        assert evaluate(product_html, descriptors) == [{"tags": "new, sale, old"}]

    def test_multiline_joins_with_space(self, product_html):
        descriptors = [
            FieldDescriptor(
                key="tags",
                patterns=['//span[@class="tag"]/text()'],
                multiple=True,
                multiline=True,
            ),
        ]
        assert evaluate(product_html, descriptors) == [{"tags": "new sale old"}]

    def test_multiple_inside_container(self, product_html):
        descriptors = [
            FieldDescriptor(key="item", patterns=['//li[@class="product"]'], is_container=True),
            FieldDescriptor(key="tags", patterns=['.//span[@class="tag"]/text()'], multiple=True),
        ]
        assert evaluate(product_html, descriptors) == [
            {"tags": ["new", "sale"]},
            {"tags": ["old"]},
        ]

    def test_single_value_takes_first_match(self, product_html):
        descriptors = [FieldDescriptor(key="tag", patterns=['//span[@class="tag"]/text()'])]
        assert evaluate(product_html, descriptors) == [{"tag": "new"}]

    def test_raw_html_return_type(self):
        html = '<div id="c"><p>Hello <b>world</b></p></div>'
        descriptors = [FieldDescriptor(key="body", patterns=['//div[@id="c"]/p'], return_type="raw_html")]
        assert evaluate(html, descriptors) == [{"body": "<p>Hello <b>world</b></p>"}]

    def test_empty_string_is_kept(self):
        descriptors = [
            FieldDescriptor(
                key="t",
                patterns=["//h1/text()"],
                pipes={"replace": [{"from": ".*", "to": ""}]},
            ),
        ]
        assert evaluate("<h1>Title</h1>", descriptors) == [{"t": ""}]

    def test_none_from_transform_leaves_key_absent(self, registry):
        class Drop(Transform):
            type = "drop"

            def transform(self, value):
                return None

        registry.register("drop", Drop)
        descriptors = [
            FieldDescriptor(key="t", patterns=["//h1/text()"], pipes={"custom": [{"type": "drop"}]}),
            FieldDescriptor(key="kept", patterns=["//h1/text()"]),
        ]
        assert evaluate("<h1>Title</h1>", descriptors, registry=registry) == [{"kept": "Title"}]

    def test_base_url_reaches_transforms(self, product_html):
        descriptors = [
            FieldDescriptor(
                key="links",
                patterns=["//a/@href"],
                multiple=True,
                pipes={"custom": [{"type": "parse-as-url"}]},
            ),
        ]
        options = EvaluateOptions(base_url="https://shop.example/catalog/page")
        assert evaluate(product_html, descriptors, options) == [
            {
                "links": [
                    "https://shop.example/items/1",
                    "https://shop.example/items/2",
                    "https://other.example/items/3",
                ]
            }
        ]


class TestDescriptorChecks:
    """Structural validation before extraction."""

    def test_unsupported_pattern_type(self):
        descriptors = [
            FieldDescriptor(key="ok", patterns=["//h1/text()"]),
            FieldDescriptor(key="css", pattern_type="css", patterns=["h1"]),
        ]
        with pytest.raises(UnsupportedPatternType) as exc_info:
            evaluate("<h1>Title</h1>", descriptors)
        assert exc_info.value.key == "css"
        assert exc_info.value.pattern_type == "css"

    def test_two_containers(self):
        descriptors = [
            FieldDescriptor(key="a", patterns=["//li"], is_container=True),
            FieldDescriptor(key="b", patterns=["//ul"], is_container=True),
        ]
        with pytest.raises(InvalidDescriptorError):
            check_descriptors(descriptors)

    def test_check_returns_container(self):
        container = FieldDescriptor(key="a", patterns=["//li"], is_container=True)
        assert check_descriptors([FieldDescriptor(key="x"), container]) is container
        assert check_descriptors([FieldDescriptor(key="x")]) is None


class TestEngineParity:
    """Both engines produce the same records for well-formed documents."""

    def test_product_list(self, product_html):
        descriptors = _product_fields(trim=True, custom=[{"type": "num-normalize"}])
        native = evaluate(product_html, descriptors, EvaluateOptions(engine=EngineMode.NATIVE))
        browser = evaluate(product_html, descriptors, EvaluateOptions(engine=EngineMode.BROWSER))

        assert native == browser
        assert [r["price"] for r in native] == [10500, 2300000, 99]

    def test_assembler_on_open_handle(self, article_html, registry):
        descriptors = [FieldDescriptor(key="heading", patterns=["//h1"])]
        for engine in (EngineMode.NATIVE, EngineMode.BROWSER):
            with parse_document(article_html, engine=engine) as doc:
                records = RecordAssembler(registry=registry).assemble(descriptors, doc)
            assert records == [{"heading": "Breaking News"}]
