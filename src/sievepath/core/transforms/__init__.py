"""Value pipeline and pluggable transforms."""

from .base import Transform
from .builtin import (
    BUILTIN_TRANSFORMS,
    DateFormatTransform,
    ExtractEmailTransform,
    NumberNormalizeTransform,
    ParseAsUrlTransform,
    RegexTransform,
    UrlResolveTransform,
)
from .registry import TransformRegistry, default_registry, register_transform
from .pipeline import ValuePipeline, apply_pipeline

__all__ = [
    "Transform",
    "BUILTIN_TRANSFORMS",
    "DateFormatTransform",
    "ExtractEmailTransform",
    "NumberNormalizeTransform",
    "ParseAsUrlTransform",
    "RegexTransform",
    "UrlResolveTransform",
    "TransformRegistry",
    "default_registry",
    "register_transform",
    "ValuePipeline",
    "apply_pipeline",
]
