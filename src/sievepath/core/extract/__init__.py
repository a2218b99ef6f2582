"""Selector resolution and record assembly."""

from .base import ExtractionResult, Record, SelectorReport, ValidationReport
from .resolver import SelectorResolver, resolve
from .assembler import RecordAssembler, check_descriptors

__all__ = [
    "ExtractionResult",
    "Record",
    "SelectorReport",
    "ValidationReport",
    "SelectorResolver",
    "resolve",
    "RecordAssembler",
    "check_descriptors",
]
