"""
aiohttp-based upstream client for SafeWatch.

This module provides the HTTP client the feed adapters use to reach
NWS, USGS, Open-Meteo and the configured RSS feeds.
"""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from safewatch.common.errors import UpstreamUnavailable
from safewatch.common.retry import retry_with_backoff
from safewatch.observability.logging_setup import get_logger

log = get_logger("safewatch.http")

DEFAULT_USER_AGENT = "SafeWatch/0.1 (personal safety monitor)"


class AiohttpFetcher:
    """Upstream HTTP client"""

    def __init__(self,
                 *,
                 user_agent: str = DEFAULT_USER_AGENT,
                 timeout: float = 10.0,
                 max_retries: int = 1,
                 backoff_initial: float = 0.5):
        """
        Initialize the client.

        Args:
            user_agent: User-Agent header (NWS rejects requests without one)
            timeout: total timeout per request (seconds)
            max_retries: retries after the first attempt
            backoff_initial: delay before the first retry (seconds)
        """
        self.user_agent = user_agent
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_initial = backoff_initial

    async def get_text(self, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        async def _request() -> str:
            try:
                async with aiohttp.ClientSession(
                    headers={"User-Agent": self.user_agent},
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as session:
                    async with session.get(url, params=params) as response:
                        body = await response.text()
                        if not 200 <= response.status < 300:
                            raise UpstreamUnavailable(
                                f"HTTP {response.status}: {body[:200]}",
                                url=url,
                                status=response.status,
                            )
                        return body
            except asyncio.TimeoutError as e:
                raise UpstreamUnavailable("Timeout", url=url) from e
            except aiohttp.ClientError as e:
                raise UpstreamUnavailable(str(e) or e.__class__.__name__, url=url) from e

        return await retry_with_backoff(
            _request,
            max_retries=self.max_retries,
            base_delay=self.backoff_initial,
            max_delay=self.timeout,
            retry_on=(UpstreamUnavailable,),
        )

    async def get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        body = await self.get_text(url, params)
        try:
            return json.loads(body)
        except ValueError as e:
            raise UpstreamUnavailable(f"Invalid JSON from upstream: {e}", url=url) from e
