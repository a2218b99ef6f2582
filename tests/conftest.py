"""Shared fixtures for sievepath tests."""

from __future__ import annotations

import logging

import pytest

from sievepath.core.engines.base import SUPPRESSED_LOGGERS
from sievepath.core.transforms.registry import TransformRegistry


PRODUCT_LIST_HTML = """\
<html>
  <head><title>Catalog</title></head>
  <body>
    <h1>Products</h1>
    <ul>
      <li class="product">
        <a href="/items/1">First</a>
        <span class="price">  10.5K  </span>
        <span class="tag">new</span>
        <span class="tag">sale</span>
      </li>
      <li class="product">
        <a href="/items/2">Second</a>
        <span class="price">
          2,3m
        </span>
        <span class="tag">old</span>
      </li>
      <li class="product">
        <a href="https://other.example/items/3">Third</a>
        <span class="price">99</span>
      </li>
    </ul>
    <p class="contact">Write to sales@example.com or call.</p>
  </body>
</html>
"""

ARTICLE_HTML = """\
<html>
  <body>
    <article>
      <h1>  Breaking   News  </h1>
      <div class="meta"><b>Judul</b> <i>: Test</i></div>
      <p class="body">First &amp; <em>second</em> paragraph.</p>
      <time datetime="2024-01-15">15 January 2024</time>
    </article>
  </body>
</html>
"""

FEED_XML = """\
<?xml version="1.0" encoding="UTF-8"?>
<feed>
  <entry id="a1"><title>Alpha</title><link>/a1</link></entry>
  <entry id="b2"><title>Beta</title><link>/b2</link></entry>
</feed>
"""


@pytest.fixture
def product_html() -> str:
    return PRODUCT_LIST_HTML


@pytest.fixture
def article_html() -> str:
    return ARTICLE_HTML


@pytest.fixture
def feed_xml() -> str:
    return FEED_XML


@pytest.fixture
def registry() -> TransformRegistry:
    """Isolated registry with the built-in transforms."""
    return TransformRegistry.with_builtins()


@pytest.fixture(autouse=True)
def restore_extract_logger_filters():
    """Keep suppression tests from leaking log filters."""
    targets = [logging.getLogger(name) for name in SUPPRESSED_LOGGERS]
    saved = [list(target.filters) for target in targets]
    yield
    for target, filters in zip(targets, saved):
        target.filters[:] = filters
