"""
Value pipeline.

Cleans a raw extracted string in a fixed order:

1. decode       HTML entities
2. to_lower / to_upper (upper wins when both are set)
3. trim
4. replace      regex rules, every occurrence
5. custom       registry transforms, in order
6. collapse     whitespace runs to one space (string results only)
"""

from __future__ import annotations

import re
from typing import Any, Iterable

from ..config.models import MergeMode, PipelineConfig
from ..errors import TransformExecutionError
from ..logging import get_logger
from ..normalize.parsing import decode_entities, normalize_whitespace
from .base import Transform
from .builtin import replacement_template
from .registry import TransformRegistry, default_registry

logger = get_logger("transforms.pipeline")

MERGE_SEPARATORS = {
    MergeMode.SPACE: " ",
    MergeMode.COMMA: ", ",
}


class ValuePipeline:
    """Apply a PipelineConfig to extracted values.

    Transform instances are built once per ``apply``/``apply_many`` call
    from the given registry.
    """

    def __init__(self, registry: TransformRegistry | None = None):
        self.registry = registry if registry is not None else default_registry

    def apply(
        self,
        raw: Any,
        config: PipelineConfig | None,
        base_url: str | None = None,
    ) -> Any:
        """Run the pipeline on one value.

        Args:
            raw: Raw value (text content or markup)
            config: Pipeline settings; None returns the value unchanged
            base_url: Document URL for URL-aware transforms

        Returns:
            Cleaned value. Falsy input is returned unchanged.
        """
        if config is None or not raw:
            return raw
        transforms = self.registry.instantiate(config.custom, base_url=base_url)
        return self._run(raw, config, transforms)

    def apply_many(
        self,
        raws: Iterable[Any],
        config: PipelineConfig | None,
        base_url: str | None = None,
    ) -> Any:
        """Run the pipeline on a multi-valued field.

        With a merge mode, empty values are dropped, the rest are joined and
        the pipeline runs once on the merged string (a single value is
        returned). Otherwise each value goes through the pipeline and empty
        results are dropped (a list is returned).
        """
        raws = list(raws)
        if config is None:
            return [raw for raw in raws if raw not in ("", None)]

        transforms = self.registry.instantiate(config.custom, base_url=base_url)

        if config.merge != MergeMode.NONE:
            merged = MERGE_SEPARATORS[config.merge].join(str(raw) for raw in raws if raw)
            return self._run(merged, config, transforms)

        results = [self._run(raw, config, transforms) for raw in raws]
        # Blank items are dropped rather than kept as empty slots, so a later
        # join never produces ", ," runs.
        return [value for value in results if value not in ("", None)]

    def _run(self, value: Any, config: PipelineConfig, transforms: list[Transform]) -> Any:
        if not value:
            return value

        if isinstance(value, str):
            value = self._clean(value, config)

        for transform in transforms:
            try:
                value = transform.transform(value)
            except Exception as e:
                error = TransformExecutionError(transform.type or type(transform).__name__, e)
                logger.warning(str(error), extra={"transform": error.transform})

        if isinstance(value, str):
            value = normalize_whitespace(value)
        return value

    def _clean(self, value: str, config: PipelineConfig) -> str:
        if config.decode:
            value = decode_entities(value)
        if config.to_lower:
            value = value.lower()
        if config.to_upper:
            value = value.upper()
        if config.trim:
            value = value.strip()

        for rule in config.replace:
            try:
                value = re.sub(rule.from_, replacement_template(rule.to), value)
            except re.error as e:
                logger.warning(f"Invalid replace pattern {rule.from_!r}: {e}")

        return value


def apply_pipeline(
    raw: Any,
    config: PipelineConfig | None,
    base_url: str | None = None,
    *,
    registry: TransformRegistry | None = None,
) -> Any:
    """Shortcut for ``ValuePipeline(registry).apply(...)``."""
    return ValuePipeline(registry).apply(raw, config, base_url=base_url)
