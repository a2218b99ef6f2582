"""
HTTP document provider using httpx.

Provides async document retrieval with:
- A random user agent per request
- Optional proxying (explicit URL or HTTP_PROXY/HTTPS_PROXY)
- Retry with capped exponential backoff
- URL liveness checks
"""

from __future__ import annotations

import asyncio
import os
import random
from dataclasses import dataclass
from typing import Iterable

import httpx

from ..config.models import FetchConfig
from ..errors import FetchError
from ..logging import get_contextual_logger, get_logger
from .retries import RetryableStatusError, RetryConfig, build_retrying

logger = get_logger("fetch.http")

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}


@dataclass
class UrlHealth:
    """Result of a liveness check."""

    url: str
    alive: bool
    status_code: int | None = None
    error: str | None = None


def resolve_proxy(use_proxy: bool | str | None, default: str | None = None) -> str | None:
    """Pick the proxy URL for a request.

    Args:
        use_proxy: False for none, a proxy URL, or True for the configured/env proxy
        default: Configured proxy used before the environment

    Returns:
        Proxy URL or None
    """
    if not use_proxy:
        return None
    if isinstance(use_proxy, str):
        return use_proxy
    return default or os.environ.get("HTTP_PROXY") or os.environ.get("HTTPS_PROXY")


class HttpDocumentProvider:
    """Fetches documents over HTTP for the service layer."""

    def __init__(
        self,
        config: FetchConfig | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the provider.

        Args:
            config: Fetch settings (retries, timeout, user agents, proxy)
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or FetchConfig()
        self.transport = transport
        self.retry = RetryConfig(
            max_retries=self.config.max_retries,
            max_wait=self.config.backoff_max_seconds,
            multiplier=min(1.0, self.config.backoff_max_seconds),
        )

    def random_user_agent(self) -> str:
        return random.choice(self.config.user_agents)

    def _client(self, proxy: str | None) -> httpx.AsyncClient:
        kwargs: dict = {
            "timeout": httpx.Timeout(self.config.timeout_seconds),
            "follow_redirects": True,
            "headers": DEFAULT_HEADERS,
        }
        if self.transport is not None:
            kwargs["transport"] = self.transport
        elif proxy:
            kwargs["proxy"] = proxy
        return httpx.AsyncClient(**kwargs)

    async def fetch(self, url: str, use_proxy: bool | str = False) -> str:
        """Fetch a document.

        Args:
            url: Document URL
            use_proxy: False, True (configured/env proxy) or a proxy URL

        Returns:
            Response body as text

        Raises:
            FetchError: On 4xx, or when retries are exhausted
        """
        proxy = resolve_proxy(use_proxy, self.config.proxy)
        log = get_contextual_logger("fetch.http", url=url)
        if proxy:
            log.debug(f"Using proxy: {proxy}")

        async with self._client(proxy) as client:
            try:
                async for attempt in build_retrying(self.retry):
                    with attempt:
                        user_agent = self.random_user_agent()
                        log.debug(f"Fetching {url} with User-Agent: {user_agent}")

                        response = await client.get(url, headers={"User-Agent": user_agent})

                        if response.status_code >= 500:
                            raise RetryableStatusError(response)
                        if response.status_code >= 400:
                            log.error(f"Non-retryable status {response.status_code} fetching {url}")
                            raise FetchError(
                                f"HTTP {response.status_code} for {url}",
                                url=url,
                                status_code=response.status_code,
                            )

                        return response.text
            except RetryableStatusError as e:
                raise FetchError(
                    f"Failed to fetch {url} after {self.retry.max_attempts} attempts: {e}",
                    url=url,
                    status_code=e.status_code,
                    cause=e,
                ) from e
            except httpx.HTTPError as e:
                raise FetchError(
                    f"Failed to fetch {url} after {self.retry.max_attempts} attempts: {e}",
                    url=url,
                    cause=e,
                ) from e

        # AsyncRetrying either returns from the block or re-raises
        raise FetchError(f"Failed to fetch {url}", url=url)

    async def check(self, url: str, use_proxy: bool | str = False) -> UrlHealth:
        """HEAD a URL. Alive means a 2xx or 3xx answer. Never raises."""
        proxy = resolve_proxy(use_proxy, self.config.proxy)

        try:
            async with self._client(proxy) as client:
                response = await client.head(
                    url,
                    headers={"User-Agent": self.random_user_agent()},
                    follow_redirects=False,
                )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.debug(f"Liveness check failed for {url}: {e}")
            return UrlHealth(url=url, alive=False, error=str(e) or type(e).__name__)

        status = response.status_code
        return UrlHealth(url=url, alive=200 <= status < 400, status_code=status)

    async def check_many(self, urls: Iterable[str], use_proxy: bool | str = False) -> list[UrlHealth]:
        """Check several URLs concurrently, preserving input order."""
        return list(await asyncio.gather(*(self.check(url, use_proxy) for url in urls)))
