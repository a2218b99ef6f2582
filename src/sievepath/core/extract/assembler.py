"""
Record assembly.

Turns a descriptor list into records: one record per container match when a
container descriptor is present, otherwise a single document-scoped record.
"""

from __future__ import annotations

from typing import Any, Sequence

from ..config.models import (
    SUPPORTED_PATTERN_TYPES,
    WITH_COMMA,
    FieldDescriptor,
    MergeMode,
    ReturnType,
)
from ..engines.base import DocumentHandle
from ..errors import InvalidDescriptorError, UnsupportedPatternType
from ..logging import get_logger
from ..transforms.pipeline import ValuePipeline
from ..transforms.registry import TransformRegistry
from .base import Record
from .resolver import SelectorResolver

logger = get_logger("extract.assembler")


def check_descriptors(descriptors: Sequence[FieldDescriptor]) -> FieldDescriptor | None:
    """Validate a descriptor list and return its container, if any.

    Raises:
        UnsupportedPatternType: If a descriptor uses a dialect other than xpath
        InvalidDescriptorError: If more than one descriptor is a container
    """
    for descriptor in descriptors:
        if descriptor.pattern_type not in SUPPORTED_PATTERN_TYPES:
            raise UnsupportedPatternType(descriptor.pattern_type, descriptor.key)

    containers = [d for d in descriptors if d.is_container]
    if len(containers) > 1:
        keys = ", ".join(d.key for d in containers)
        raise InvalidDescriptorError(f"At most one container descriptor allowed, got: {keys}")

    return containers[0] if containers else None


class RecordAssembler:
    """Drive selector resolution and the value pipeline for every field."""

    def __init__(
        self,
        resolver: SelectorResolver | None = None,
        registry: TransformRegistry | None = None,
    ):
        self.resolver = resolver or SelectorResolver()
        self.pipeline = ValuePipeline(registry)

    def assemble(
        self,
        descriptors: Sequence[FieldDescriptor],
        handle: DocumentHandle,
        base_url: str | None = None,
    ) -> list[Record]:
        """Build records from an open document.

        Args:
            descriptors: Field descriptors (at most one container)
            handle: Open document
            base_url: Document URL for URL-aware transforms

        Returns:
            Non-empty records in document order
        """
        container = check_descriptors(descriptors)
        fields = [d for d in descriptors if not d.is_container]

        if container is None:
            record = self._build_record(fields, handle, None, base_url)
            return [record] if record else []

        scopes = self.resolver.resolve(container, handle)
        logger.debug(f"Container '{container.key}' matched {len(scopes)} node(s)")

        records: list[Record] = []
        for scope in scopes:
            record = self._build_record(fields, handle, scope, base_url)
            if record:
                records.append(record)
        return records

    def _build_record(
        self,
        fields: Sequence[FieldDescriptor],
        handle: DocumentHandle,
        scope: Any,
        base_url: str | None,
    ) -> Record:
        record: Record = {}
        for descriptor in fields:
            value = self.extract_field(descriptor, handle, scope, base_url)
            if value is not None:
                record[descriptor.key] = value
        return record

    def extract_field(
        self,
        descriptor: FieldDescriptor,
        handle: DocumentHandle,
        scope: Any = None,
        base_url: str | None = None,
    ) -> Any:
        """Extract one field value; None means the key is absent."""
        nodes = self.resolver.resolve(descriptor, handle, scope)
        if not nodes:
            return None

        if not descriptor.multiple:
            raw = self._node_value(descriptor, handle, nodes[0])
            return self.pipeline.apply(raw, descriptor.pipes, base_url=base_url)

        raws = [self._node_value(descriptor, handle, node) for node in nodes]
        values = self.pipeline.apply_many(raws, descriptor.pipes, base_url=base_url)

        if descriptor.pipes.merge != MergeMode.NONE:
            return values

        if not values:
            return None
        if descriptor.multiple == WITH_COMMA:
            return ", ".join(str(v) for v in values)
        if descriptor.multiline:
            return " ".join(str(v) for v in values)
        return values

    def _node_value(self, descriptor: FieldDescriptor, handle: DocumentHandle, node: Any) -> str:
        if descriptor.return_type == ReturnType.RAW_HTML:
            return handle.raw_markup(node)
        return handle.text_value(node)
