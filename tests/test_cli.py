"""Tests for the command line interface."""

from __future__ import annotations

import logging
from pathlib import Path

import orjson
import pytest
from typer.testing import CliRunner

from sievepath import __version__
from sievepath.cli.main import app
from sievepath.core.config import load_app_config, load_pattern_set

runner = CliRunner()


PATTERNS_YAML = """\
name: products
fields:
  - key: item
    patterns: ['//li[@class="product"]']
    is_container: true
  - key: name
    patterns: ['.//a/text()']
  - key: price
    patterns: ['.//span[@class="price"]/text()']
    pipes:
      trim: true
      custom:
        - type: num-normalize
"""


@pytest.fixture(autouse=True)
def restore_package_logger():
    """The CLI callback reconfigures the package logger."""
    target = logging.getLogger("sievepath")
    level, handlers = target.level, list(target.handlers)
    yield
    target.setLevel(level)
    target.handlers[:] = handlers


@pytest.fixture
def files(tmp_path: Path, product_html: str) -> dict[str, Path]:
    document = tmp_path / "products.html"
    document.write_text(product_html, encoding="utf-8")
    patterns = tmp_path / "products.yaml"
    patterns.write_text(PATTERNS_YAML, encoding="utf-8")
    return {"document": document, "patterns": patterns, "dir": tmp_path}


class TestMain:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_invalid_app_config(self, tmp_path: Path):
        config = tmp_path / "sievepath.yaml"
        config.write_text("fetch:\n  max_retries: 99\n")
        result = runner.invoke(app, ["--config", str(config), "patterns", "lint", str(config)])
        assert result.exit_code == 1


class TestInitCommand:
    """sievepath init."""

    def test_writes_loadable_files(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("SIEVEPATH_PROXY", raising=False)
        result = runner.invoke(app, ["init", str(tmp_path)])
        assert result.exit_code == 0, result.output

        settings = load_app_config(tmp_path / "sievepath.yaml")
        assert settings.fetch.max_retries == 3
        assert not settings.fetch.proxy

        pattern_set = load_pattern_set(tmp_path / "patterns" / "example.yaml")
        assert [f.key for f in pattern_set.fields] == ["item", "title", "link", "published"]

    def test_keeps_existing_files(self, tmp_path: Path):
        config = tmp_path / "sievepath.yaml"
        config.write_text("logging:\n  level: DEBUG\n")

        runner.invoke(app, ["init", str(tmp_path)])
        assert config.read_text() == "logging:\n  level: DEBUG\n"

        runner.invoke(app, ["init", str(tmp_path), "--force"])
        assert "engine:" in config.read_text()


class TestExtractCommand:
    """sievepath extract."""

    def test_prints_records(self, files):
        result = runner.invoke(
            app,
            ["--log-level", "WARNING", "extract", str(files["document"]), "-p", str(files["patterns"])],
        )
        assert result.exit_code == 0, result.output
        records = orjson.loads(result.stdout)
        assert records == [
            {"name": "First", "price": 10500},
            {"name": "Second", "price": 2300000},
            {"name": "Third", "price": 99},
        ]

    def test_writes_output_file(self, files):
        output = files["dir"] / "out" / "records.json"
        result = runner.invoke(
            app,
            [
                "--log-level",
                "WARNING",
                "extract",
                str(files["document"]),
                "--patterns",
                str(files["patterns"]),
                "--engine",
                "browser",
                "--output",
                str(output),
            ],
        )
        assert result.exit_code == 0, result.output
        assert len(orjson.loads(output.read_bytes())) == 3

    def test_invalid_pattern_file(self, files):
        bad = files["dir"] / "bad.yaml"
        bad.write_text("- key: a\n- key: a\n")
        result = runner.invoke(app, ["extract", str(files["document"]), "-p", str(bad)])
        assert result.exit_code == 1

    def test_no_document_and_no_url(self, files):
        result = runner.invoke(app, ["--log-level", "WARNING", "extract", "-p", str(files["patterns"])])
        assert result.exit_code == 1


class TestValidateCommand:
    """sievepath validate."""

    def test_valid_expressions(self, files):
        result = runner.invoke(app, ["validate", str(files["document"]), "-x", "//h1", "-x", "//li"])
        assert result.exit_code == 0, result.output
        assert "Products" in result.output

    def test_invalid_expression_exits_nonzero(self, files):
        result = runner.invoke(app, ["validate", str(files["document"]), "-x", "//h1[[[x"])
        assert result.exit_code == 1


class TestPatternsCommands:
    """sievepath patterns lint/show."""

    def test_lint_ok(self, files):
        result = runner.invoke(app, ["patterns", "lint", str(files["patterns"])])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_lint_reports_errors(self, files):
        bad = files["dir"] / "bad.yaml"
        bad.write_text("fields:\n  - patterns: ['//a']\n")
        result = runner.invoke(app, ["patterns", "lint", str(bad)])
        assert result.exit_code == 1

    def test_show(self, files):
        result = runner.invoke(app, ["patterns", "show", str(files["patterns"])])
        assert result.exit_code == 0, result.output
        assert "price" in result.output
        assert "container" in result.output
