"""
Pydantic configuration models for sievepath.

These models provide type-safe configuration with validation for:
- Field descriptors and pattern sets
- Value pipeline and transform settings
- Engine, fetch and logging settings
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    field_validator,
    model_validator,
)


# =============================================================================
# Enums
# =============================================================================


class EngineMode(str, Enum):
    """Tree engines available behind the node facade."""

    NATIVE = "native"  # libxml2 through lxml
    BROWSER = "browser"  # html5lib tree building, browser-grade repair


class ContentType(str, Enum):
    """Document content types."""

    HTML = "text/html"
    XML = "text/xml"


class ReturnType(str, Enum):
    """What to read from a matched node."""

    TEXT = "text"
    RAW_HTML = "raw_html"


class MergeMode(str, Enum):
    """How multi-valued raw strings are merged before the pipeline."""

    NONE = "none"
    SPACE = "space"
    COMMA = "comma"


XPATH = "xpath"
SUPPORTED_PATTERN_TYPES = frozenset({XPATH})

# Sentinel for FieldDescriptor.multiple: join all values with ", "
WITH_COMMA = "with comma"


# =============================================================================
# Cleaner Rules
# =============================================================================


class ReplaceRule(BaseModel):
    """Regex substitution applied by the built-in replace step."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    from_: str = Field(
        ...,
        alias="from",
        description="Regex pattern to replace (all occurrences)",
    )
    to: str = Field(
        default="",
        description="Replacement text",
    )


class RegexRule(BaseModel):
    """Single rule of the regex transform."""

    model_config = ConfigDict(frozen=True)

    pattern: str = Field(..., description="Regex pattern")
    replacement: str = Field(default="", description="Replacement, $1 style groups allowed")
    flags: str = Field(default="g", description="g (global), i, m, s")


# =============================================================================
# Transform Configuration
# =============================================================================


class _TransformConfigBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    def options(self) -> dict[str, Any]:
        """Constructor keyword arguments for the transform instance."""
        return self.model_dump(exclude={"type"}, exclude_none=True)


class RegexTransformConfig(_TransformConfigBase):
    type: Literal["regex"] = "regex"
    rules: list[RegexRule] = Field(..., min_length=1)


class NumberNormalizeConfig(_TransformConfigBase):
    type: Literal["num-normalize"] = "num-normalize"


class UrlResolveConfig(_TransformConfigBase):
    type: Literal["url-resolve"] = "url-resolve"
    base_url: str | None = Field(
        default=None,
        description="Base URL; replaced by the document URL when one is known",
    )


class ParseAsUrlConfig(_TransformConfigBase):
    type: Literal["parse-as-url"] = "parse-as-url"


class ExtractEmailConfig(_TransformConfigBase):
    type: Literal["extract-email"] = "extract-email"


class DateFormatConfig(_TransformConfigBase):
    type: Literal["date-format"] = "date-format"
    format: str = Field(
        default="%Y-%m-%d",
        description="strptime format tried before free-form parsing",
    )


class CustomTransformConfig(BaseModel):
    """Config for a transform registered at runtime.

    Extra properties are kept as-is and passed to the transform factory.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: str = ""

    def options(self) -> dict[str, Any]:
        return dict(self.model_extra or {})


BUILTIN_TRANSFORM_TYPES = frozenset({
    "regex",
    "num-normalize",
    "url-resolve",
    "parse-as-url",
    "extract-email",
    "date-format",
})


def _transform_tag(value: Any) -> str:
    if isinstance(value, dict):
        kind = value.get("type")
    else:
        kind = getattr(value, "type", None)
    return kind if kind in BUILTIN_TRANSFORM_TYPES else "custom"


TransformConfig = Annotated[
    Union[
        Annotated[RegexTransformConfig, Tag("regex")],
        Annotated[NumberNormalizeConfig, Tag("num-normalize")],
        Annotated[UrlResolveConfig, Tag("url-resolve")],
        Annotated[ParseAsUrlConfig, Tag("parse-as-url")],
        Annotated[ExtractEmailConfig, Tag("extract-email")],
        Annotated[DateFormatConfig, Tag("date-format")],
        Annotated[CustomTransformConfig, Tag("custom")],
    ],
    Discriminator(_transform_tag),
]


# =============================================================================
# Pipeline Configuration
# =============================================================================


class PipelineConfig(BaseModel):
    """Cleaning steps applied to every extracted value.

    Order: decode, case, trim, replace, custom, whitespace collapse.
    When both case flags are set, to_lower runs first and to_upper wins.
    """

    model_config = ConfigDict(frozen=True)

    trim: bool = False
    to_lower: bool = False
    to_upper: bool = False
    decode: bool = Field(
        default=False,
        description="Decode HTML entities",
    )
    replace: list[ReplaceRule] = Field(default_factory=list)
    merge: MergeMode = Field(
        default=MergeMode.NONE,
        description="Merge multi-valued raw strings before the pipeline",
    )
    custom: list[TransformConfig] = Field(default_factory=list)

    @field_validator("merge", mode="before")
    @classmethod
    def coerce_merge_flag(cls, v: Any) -> Any:
        """Accept true/false as shorthand for space/none."""
        if v is True:
            return MergeMode.SPACE
        if v is False or v is None:
            return MergeMode.NONE
        return v


# =============================================================================
# Field Descriptors
# =============================================================================


class FieldDescriptor(BaseModel):
    """Declarative description of one extracted value."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(
        ...,
        min_length=1,
        description="Output key, unique within a pattern set",
    )
    pattern_type: str = Field(
        default=XPATH,
        description="Query dialect (only xpath is supported)",
    )
    return_type: ReturnType = Field(
        default=ReturnType.TEXT,
        description="Read text content or raw markup",
    )
    patterns: list[str] = Field(
        default_factory=list,
        description="Primary XPath expressions, tried in order",
    )
    fallback_patterns: list[str] = Field(
        default_factory=list,
        description="Tried only when every primary pattern matches nothing",
    )
    is_container: bool = Field(
        default=False,
        description="Each match scopes one output record",
    )
    multiple: Literal["with comma"] | bool = Field(
        default=False,
        description="Collect every match; 'with comma' joins them with ', '",
    )
    multiline: bool = Field(
        default=False,
        description="Join multiple values with a single space",
    )
    pipes: PipelineConfig = Field(default_factory=PipelineConfig)

    @field_validator("return_type", mode="before")
    @classmethod
    def accept_raw_html_spelling(cls, v: Any) -> Any:
        if isinstance(v, str) and v.lower() in ("rawhtml", "raw-html"):
            return ReturnType.RAW_HTML
        return v

    @property
    def candidate_patterns(self) -> list[str]:
        """Primary patterns followed by fallback patterns."""
        return [*self.patterns, *self.fallback_patterns]


class PatternSet(BaseModel):
    """A validated list of field descriptors, as stored in pattern files."""

    name: str | None = Field(
        default=None,
        description="Human-readable name for logging",
    )
    url: str | None = Field(
        default=None,
        description="Default document URL (also the base URL for transforms)",
    )
    content_type: ContentType = Field(default=ContentType.HTML)
    engine: EngineMode | None = Field(
        default=None,
        description="Engine override for this pattern set",
    )
    fields: list[FieldDescriptor] = Field(..., min_length=1)

    @model_validator(mode="after")
    def check_descriptor_invariants(self) -> "PatternSet":
        seen: set[str] = set()
        for descriptor in self.fields:
            if descriptor.key in seen:
                raise ValueError(f"Duplicate field key: {descriptor.key}")
            seen.add(descriptor.key)

        containers = [d.key for d in self.fields if d.is_container]
        if len(containers) > 1:
            raise ValueError(f"At most one container field allowed, got: {', '.join(containers)}")
        return self


# =============================================================================
# Call Options
# =============================================================================


class EvaluateOptions(BaseModel):
    """Per-call options for the core evaluate entry point."""

    engine: EngineMode = Field(default=EngineMode.NATIVE)
    content_type: ContentType = Field(default=ContentType.HTML)
    base_url: str | None = Field(
        default=None,
        description="Injected into transforms exposing base_url",
    )
    suppress_errors: bool = Field(
        default=False,
        description="Silence selector diagnostics while the document is open",
    )


class ScrapeRequest(BaseModel):
    """Service-level request: a document or a URL, plus descriptors."""

    url: str | None = None
    html: str | None = None
    patterns: list[FieldDescriptor] = Field(default_factory=list)
    use_proxy: bool | str = Field(
        default=False,
        description="True to use HTTP_PROXY/HTTPS_PROXY, or an explicit proxy URL",
    )
    content_type: ContentType = Field(default=ContentType.HTML)
    engine: EngineMode | None = None


# =============================================================================
# Engine Configuration
# =============================================================================


class EngineConfig(BaseModel):
    """Default engine selection."""

    engine: EngineMode = Field(
        default=EngineMode.NATIVE,
        description="Tree engine used when a call does not choose one",
    )
    suppress_errors: bool = Field(
        default=False,
        description="Suppress selector diagnostics while documents are open",
    )


# =============================================================================
# Fetch Configuration
# =============================================================================


DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:125.0) Gecko/20100101 Firefox/125.0",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_4) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
]


class FetchConfig(BaseModel):
    """Document provider settings."""

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt on retryable failures",
    )
    timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Request timeout in seconds",
    )
    backoff_max_seconds: float = Field(
        default=10.0,
        ge=0.0,
        description="Cap for exponential backoff between retries",
    )
    user_agents: list[str] = Field(
        default_factory=lambda: list(DEFAULT_USER_AGENTS),
        min_length=1,
        description="User agents rotated per request",
    )
    proxy: str | None = Field(
        default=None,
        description="Proxy URL used when a request asks for a proxy",
    )


# =============================================================================
# Logging Configuration
# =============================================================================


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    file: Path | None = Field(
        default=None,
        description="Log file path",
    )
    json_format: bool = Field(
        default=True,
        description="Use JSON format for file logs",
    )
    rich_console: bool = Field(
        default=True,
        description="Use Rich for console output",
    )


# =============================================================================
# Application Configuration
# =============================================================================


class AppConfig(BaseModel):
    """Root application configuration, loaded from sievepath.yaml."""

    engine: EngineConfig = Field(default_factory=EngineConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
