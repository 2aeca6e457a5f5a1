#!/usr/bin/env python3
"""
Async JSON HTTP client.

Every GET goes through the retry executor with the HTTP retry predicate.
Caching is the caller's job; this layer only knows status codes and
transient network failures.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

import aiohttp

from .exceptions import (
    HttpStatusError,
    NetworkError,
    NETWORK_CLIENT_ERROR,
    NETWORK_CONNECTION_FAILED,
    NETWORK_CONNECTION_RESET,
    NETWORK_DNS_FAILURE,
    NETWORK_PAYLOAD_ERROR,
    NETWORK_SERVER_DISCONNECTED,
    NETWORK_TIMEOUT,
)
from .retry import RetryPolicy, is_retryable_http_error, with_retry

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; TopicCoverage/1.0)'


@dataclass
class FetchResponse:
    """Parsed JSON body plus the response headers (names lowercased)."""
    data: Any
    headers: Mapping[str, str]


def classify_client_error(error: BaseException, url: str) -> NetworkError:
    """Map an aiohttp/asyncio failure to a NetworkError with a reason code."""
    if isinstance(error, asyncio.TimeoutError):
        reason = NETWORK_TIMEOUT
    elif isinstance(error, aiohttp.ServerDisconnectedError):
        reason = NETWORK_SERVER_DISCONNECTED
    elif isinstance(error, aiohttp.ClientConnectorError):
        os_error = getattr(error, 'os_error', None)
        if os_error is not None and 'name resolution' in str(os_error).lower():
            reason = NETWORK_DNS_FAILURE
        else:
            reason = NETWORK_CONNECTION_FAILED
    elif isinstance(error, (aiohttp.ClientOSError, ConnectionResetError)):
        reason = NETWORK_CONNECTION_RESET
    elif isinstance(error, aiohttp.ClientPayloadError):
        reason = NETWORK_PAYLOAD_ERROR
    else:
        # Bad URLs and other request-side errors fail the same way every time
        reason = NETWORK_CLIENT_ERROR
    return NetworkError(reason, url, error)


class JsonHttpClient:
    """Retry-guarded JSON GET client over a shared aiohttp session."""

    def __init__(self,
                 timeout: int = 30,
                 user_agent: str = DEFAULT_USER_AGENT,
                 retry_policy: Optional[RetryPolicy] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize HTTP client.

        Args:
            timeout: Total per-request timeout in seconds
            user_agent: User-Agent header sent with every request
            retry_policy: Base retry configuration; the HTTP predicate is always applied
            session: Existing session to reuse (not closed by this client)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        base_policy = retry_policy or RetryPolicy()
        self.retry_policy = RetryPolicy(
            max_retries=base_policy.max_retries,
            initial_delay_ms=base_policy.initial_delay_ms,
            backoff_multiplier=base_policy.backoff_multiplier,
            max_delay_ms=base_policy.max_delay_ms,
            retry_immediately_once=base_policy.retry_immediately_once,
            should_retry=is_retryable_http_error,
        )
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent}
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session and self._owns_session:
            await self._session.close()
            self._session = None

    async def _get_once(self, url: str, headers: Optional[Dict[str, str]]) -> FetchResponse:
        if not self._session:
            raise RuntimeError("JsonHttpClient must be used as async context manager")

        try:
            async with self._session.get(url, headers=headers) as response:
                if response.status < 200 or response.status >= 300:
                    error_text = await response.text()
                    raise HttpStatusError(response.status, url, error_text)

                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise NetworkError(NETWORK_PAYLOAD_ERROR, url, e) from e
                return FetchResponse(
                    data=data,
                    headers={key.lower(): value for key, value in response.headers.items()}
                )
        except (HttpStatusError, NetworkError):
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionResetError) as e:
            raise classify_client_error(e, url) from e

    async def fetch_json_with_headers(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResponse:
        """
        GET a URL and return the parsed JSON body and the response headers.

        Useful when callers need to inspect rate-limit or tier headers
        without a second request.

        Raises:
            HttpStatusError: Non-2xx status after all retries
            NetworkError: Connection-level failure after all retries
        """
        return await with_retry(
            lambda: self._get_once(url, headers),
            self.retry_policy,
            f"HTTP GET {url}"
        )

    async def fetch_json(self, url: str, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET a URL and return the parsed JSON body."""
        response = await self.fetch_json_with_headers(url, headers)
        return response.data
