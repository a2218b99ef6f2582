"""
Selector resolution with primary and fallback patterns.
"""

from __future__ import annotations

from typing import Any

from ..config.models import FieldDescriptor
from ..engines.base import DocumentHandle
from ..errors import SelectorSyntaxError
from ..logging import get_contextual_logger


class SelectorResolver:
    """Try a descriptor's candidate patterns until one matches.

    Candidates are the primary patterns followed by the fallback patterns,
    in list order. A malformed candidate is logged and skipped. The first
    candidate with at least one match wins; later ones are never evaluated.
    """

    def resolve(
        self,
        descriptor: FieldDescriptor,
        handle: DocumentHandle,
        scope: Any = None,
    ) -> list[Any]:
        """Resolve a descriptor to its matches.

        Args:
            descriptor: Field descriptor with candidate patterns
            handle: Open document
            scope: Container node to query under; the document when omitted

        Returns:
            Matches of the first non-empty candidate, or [] when none match
        """
        log = get_contextual_logger(
            "extract.resolver",
            field=descriptor.key,
            engine=handle.engine.value,
        )

        for expression in descriptor.candidate_patterns:
            try:
                nodes = handle.query(expression, scope)
            except SelectorSyntaxError as e:
                log.debug(f"XPath failed: {e}", extra={"expression": expression})
                continue

            if nodes:
                return nodes

        return []


def resolve(
    descriptor: FieldDescriptor,
    handle: DocumentHandle,
    scope: Any = None,
) -> list[Any]:
    """Module-level shortcut for SelectorResolver().resolve."""
    return SelectorResolver().resolve(descriptor, handle, scope)
