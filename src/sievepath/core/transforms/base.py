"""
Transform base class.

A transform is a small object built from one ``custom`` pipeline entry. Its
constructor receives the entry's properties as keyword arguments, and
``transform`` is called once per value.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class Transform(ABC):
    """Base class for value transforms.

    Subclasses set ``type`` to the name used in pipeline configs. A transform
    that declares a ``base_url`` attribute receives the document URL from the
    pipeline when one is known.
    """

    type: ClassVar[str] = ""

    @abstractmethod
    def transform(self, value: Any) -> Any:
        """Transform a single value."""

    def reverse(self, value: Any) -> Any:
        """Best-effort inverse of ``transform``. Identity by default."""
        return value

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.type!r}>"
