"""
sievepath - Declarative XPath extraction with value pipelines.

Evaluates field descriptors against HTML/XML documents with a native (lxml)
or browser-grade (html5lib) tree engine and normalizes the extracted values
through a pluggable transform pipeline.
"""

__version__ = "0.1.0"
__app_name__ = "sievepath"

from sievepath.core.config.models import (  # noqa: E402
    EvaluateOptions,
    FieldDescriptor,
    PatternSet,
    PipelineConfig,
    ScrapeRequest,
)
from sievepath.core.service import ScraperService, evaluate, validate_selectors  # noqa: E402
from sievepath.core.transforms import (  # noqa: E402
    Transform,
    TransformRegistry,
    default_registry,
    register_transform,
)

__all__ = [
    "__version__",
    "__app_name__",
    "EvaluateOptions",
    "FieldDescriptor",
    "PatternSet",
    "PipelineConfig",
    "ScrapeRequest",
    "ScraperService",
    "Transform",
    "TransformRegistry",
    "default_registry",
    "evaluate",
    "register_transform",
    "validate_selectors",
]
