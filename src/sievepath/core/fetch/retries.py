"""
Retry utilities with tenacity.

Retries transport failures and 5xx responses with capped exponential
backoff. Client errors (4xx) are never retried.
"""

from __future__ import annotations

import logging

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..logging import get_logger

logger = get_logger("fetch.retries")


# Default retry configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_MAX_WAIT = 10  # seconds


class RetryableStatusError(Exception):
    """Server answered with a status worth retrying (5xx)."""

    def __init__(self, response: httpx.Response):
        self.response = response
        self.status_code = response.status_code
        super().__init__(f"Server error {response.status_code} for {response.url}")


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        max_wait: float = DEFAULT_MAX_WAIT,
        multiplier: float = 1.0,
    ):
        """Initialize retry configuration.

        Args:
            max_retries: Retries after the first attempt
            max_wait: Cap for the wait between attempts, in seconds
            multiplier: First wait in seconds (doubles on every retry)
        """
        self.max_retries = max_retries
        self.max_wait = max_wait
        self.multiplier = multiplier

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1


def is_retryable(error: BaseException) -> bool:
    """Transport failures and 5xx answers are retried."""
    return isinstance(error, (httpx.TransportError, RetryableStatusError))


def build_retrying(config: RetryConfig | None = None) -> AsyncRetrying:
    """Build an AsyncRetrying controller for one fetch.

    Waits 1s, 2s, 4s ... capped at ``max_wait``. The last error is re-raised
    once attempts run out.
    """
    if config is None:
        config = RetryConfig()

    return AsyncRetrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(
            multiplier=config.multiplier,
            min=0,
            max=config.max_wait,
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
