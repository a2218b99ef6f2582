"""Document retrieval - HTTP provider and retries."""

from .http import HttpDocumentProvider, UrlHealth, resolve_proxy
from .retries import RetryConfig, RetryableStatusError, build_retrying

__all__ = [
    "HttpDocumentProvider",
    "UrlHealth",
    "resolve_proxy",
    "RetryConfig",
    "RetryableStatusError",
    "build_retrying",
]
