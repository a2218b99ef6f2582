"""Configuration loading and validation."""

from .models import (
    # Enums
    ContentType,
    EngineMode,
    MergeMode,
    ReturnType,
    # Descriptor models
    FieldDescriptor,
    PatternSet,
    PipelineConfig,
    ReplaceRule,
    RegexRule,
    TransformConfig,
    CustomTransformConfig,
    # Call models
    EvaluateOptions,
    ScrapeRequest,
    # Settings models
    AppConfig,
    EngineConfig,
    FetchConfig,
    LoggingConfig,
    WITH_COMMA,
)
from .loader import ConfigError, load_app_config, load_pattern_set, validate_pattern_file

__all__ = [
    # Enums
    "ContentType",
    "EngineMode",
    "MergeMode",
    "ReturnType",
    # Descriptor models
    "FieldDescriptor",
    "PatternSet",
    "PipelineConfig",
    "ReplaceRule",
    "RegexRule",
    "TransformConfig",
    "CustomTransformConfig",
    # Call models
    "EvaluateOptions",
    "ScrapeRequest",
    # Settings models
    "AppConfig",
    "EngineConfig",
    "FetchConfig",
    "LoggingConfig",
    "WITH_COMMA",
    # Loaders
    "ConfigError",
    "load_app_config",
    "load_pattern_set",
    "validate_pattern_file",
]
