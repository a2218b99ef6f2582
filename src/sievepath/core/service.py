"""
Service entry points.

- evaluate: parse a document and assemble records (synchronous core)
- validate_selectors: check XPath expressions against a document, never raises
- ScraperService: async facade wiring the document provider to the core
"""

from __future__ import annotations

import time
from typing import Any, Iterable, Mapping, Sequence

from .config.models import (
    AppConfig,
    ContentType,
    EngineMode,
    EvaluateOptions,
    FieldDescriptor,
    ScrapeRequest,
)
from .engines import parse_document
from .errors import MissingInputError, SelectorSyntaxError, SieveError
from .extract.assembler import RecordAssembler, check_descriptors
from .extract.base import ExtractionResult, Record, SelectorReport, ValidationReport
from .fetch.http import HttpDocumentProvider, UrlHealth
from .logging import get_contextual_logger, get_logger
from .transforms.registry import TransformRegistry

logger = get_logger("service")


def _as_descriptors(descriptors: Iterable[FieldDescriptor | Mapping[str, Any]]) -> list[FieldDescriptor]:
    return [
        d if isinstance(d, FieldDescriptor) else FieldDescriptor.model_validate(d)
        for d in descriptors
    ]


# =============================================================================
# Core Entry Points
# =============================================================================


def evaluate(
    document: str | None,
    descriptors: Sequence[FieldDescriptor | Mapping[str, Any]],
    options: EvaluateOptions | None = None,
    *,
    registry: TransformRegistry | None = None,
) -> list[Record]:
    """Extract records from a document.

    Args:
        document: HTML or XML text
        descriptors: Field descriptors (models or plain mappings)
        options: Engine, content type, base URL and suppression settings
        registry: Transform registry (default registry when omitted)

    Returns:
        Records in document order; possibly empty

    Raises:
        MissingInputError: If the document is empty
        UnsupportedPatternType: If a descriptor is not xpath
        InvalidDescriptorError: If more than one descriptor is a container
        DocumentParseError: If the engine cannot build a tree
    """
    options = options or EvaluateOptions()
    fields = _as_descriptors(descriptors)
    check_descriptors(fields)

    with parse_document(
        document,
        engine=options.engine,
        content_type=options.content_type,
        suppress_errors=options.suppress_errors,
    ) as handle:
        return RecordAssembler(registry=registry).assemble(fields, handle, base_url=options.base_url)


def validate_selectors(
    document: str | None,
    expressions: Iterable[str] | str | None,
    *,
    engine: EngineMode | str = EngineMode.NATIVE,
    content_type: ContentType | str = ContentType.HTML,
) -> ValidationReport:
    """Check XPath expressions against a document.

    Each expression is evaluated on its own (no fallback). Problems are
    reported in the result instead of raised; an unparseable document marks
    every expression invalid.
    """
    report = ValidationReport()
    if isinstance(expressions, str):
        expressions = [expressions]
    expressions = list(expressions or [])
    if not expressions:
        return report

    try:
        handle = parse_document(document, engine=engine, content_type=content_type)
    except (SieveError, ValueError) as e:
        report.valid = False
        report.results = [
            SelectorReport(expression=expression, valid=False, error=str(e) or type(e).__name__)
            for expression in expressions
        ]
        return report

    with handle:
        for expression in expressions:
            try:
                nodes = handle.query(expression)
            except (SelectorSyntaxError, TypeError, ValueError) as e:
                report.valid = False
                report.results.append(
                    SelectorReport(expression=expression, valid=False, error=str(e) or type(e).__name__)
                )
                continue

            report.results.append(
                SelectorReport(
                    expression=expression,
                    valid=True,
                    match_count=len(nodes),
                    sample=handle.text_value(nodes[0]) if nodes else None,
                )
            )

    return report


# =============================================================================
# Async Service
# =============================================================================


class ScraperService:
    """Fetch-and-extract facade.

    Example::

        service = ScraperService()
        result = await service.evaluate_website(
            ScrapeRequest(url="https://example.com", patterns=[...])
        )
    """

    def __init__(
        self,
        provider: HttpDocumentProvider | None = None,
        registry: TransformRegistry | None = None,
        settings: AppConfig | None = None,
    ):
        self.settings = settings or AppConfig()
        self.provider = provider or HttpDocumentProvider(self.settings.fetch)
        self.registry = registry

    async def evaluate_website(self, request: ScrapeRequest | Mapping[str, Any]) -> ExtractionResult:
        """Extract records from inline HTML or a fetched URL.

        The URL, when given, is also the base URL for URL-aware transforms.

        Raises:
            MissingInputError: If neither html nor url is given
            FetchError: If the document cannot be retrieved
        """
        if not isinstance(request, ScrapeRequest):
            request = ScrapeRequest.model_validate(request)

        log = get_contextual_logger("service", url=request.url)
        started = time.perf_counter()

        html = request.html
        if not html and request.url:
            html = await self.provider.fetch(request.url, use_proxy=request.use_proxy)

        if not html:
            raise MissingInputError("Either html or url must be provided")

        engine = request.engine or self.settings.engine.engine
        options = EvaluateOptions(
            engine=engine,
            content_type=request.content_type,
            base_url=request.url,
            suppress_errors=self.settings.engine.suppress_errors,
        )
        records = evaluate(html, request.patterns, options, registry=self.registry)

        result = ExtractionResult(
            records=records,
            record_count=len(records),
            source_url=request.url,
            engine=engine.value,
            elapsed_ms=(time.perf_counter() - started) * 1000,
        )
        if not records:
            result.add_warning("No records extracted")

        log.info(f"Extracted {result.record_count} record(s) in {result.elapsed_ms:.0f}ms")
        return result

    def validate_xpath(
        self,
        html: str | None,
        expressions: Iterable[str] | str | None,
        content_type: ContentType | str = ContentType.HTML,
    ) -> ValidationReport:
        """validate_selectors with the configured engine."""
        return validate_selectors(
            html,
            expressions,
            engine=self.settings.engine.engine,
            content_type=content_type,
        )

    async def check_url_alive(
        self,
        urls: str | Iterable[str],
        use_proxy: bool | str = False,
    ) -> list[UrlHealth]:
        """HEAD each URL concurrently. Never raises."""
        if isinstance(urls, str):
            urls = [urls]
        return await self.provider.check_many(urls, use_proxy=use_proxy)
