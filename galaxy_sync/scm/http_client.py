"""
HTTP transport shared by the SCM clients, the hub client, the subscription
check and the status feed client.

``HTTPClient`` wraps one ``httpx.AsyncClient`` per ``async with`` block,
sends a fixed set of headers (tokens, accept types) with every request and
retries 429/5xx responses and connection-level failures with exponential
backoff. Provider-specific API mapping lives in github.py / gitlab.py.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
RETRYABLE_EXCEPTIONS = (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError)


@dataclass
class RetryConfig:
    """
    Retry budget and backoff curve.

    Attempt ``n`` (0-indexed) waits ``min(max_backoff_seconds,
    base_delay * 2**n)`` plus up to ``jitter_factor`` of that again.
    """

    max_retries: int = 3
    max_backoff_seconds: float = 60.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        delay = min(self.base_delay * (2**attempt), self.max_backoff_seconds)
        return delay + delay * self.jitter_factor * random.random()

    def is_retryable_status(self, status_code: int) -> bool:
        return status_code in RETRYABLE_STATUS_CODES


class HTTPClientError(Exception):
    """A request that failed for good; carries the last status and body when there was one."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """429 responses kept coming until the retry budget ran out."""


class NotFoundError(HTTPClientError):
    """Raised on a 404 response."""


class HTTPClient:
    """
    Async HTTP client with retries and fixed headers.

    404 is raised as NotFoundError (never retried) so SCM clients can turn
    it into "absent"; other 4xx responses are raised immediately.

    Example:
        async with HTTPClient(headers={"Authorization": "Bearer x"}) as client:
            response = await client.get("https://api.github.com/orgs/ansible/repos")
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        verify: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self.headers = dict(headers or {})
        self.verify = verify
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            verify=self.verify,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        GET with retries.

        Raises:
            NotFoundError: On 404
            RateLimitError: 429 until retries ran out
            HTTPClientError: Any other failure
        """
        return await self._request_with_retry("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        return await self._request_with_retry(
            "POST", url, params=params, headers=headers, json_body=json_body
        )

    async def _request_with_retry(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> httpx.Response:
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        attempts = self.retry_config.max_retries + 1
        response: httpx.Response | None = None

        for attempt in range(attempts):
            final = attempt == attempts - 1
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params or None,
                    headers=headers or None,
                    json=json_body,
                )
            except RETRYABLE_EXCEPTIONS as e:
                if final:
                    raise HTTPClientError(f"Request failed after {attempts} attempts: {e}") from e
                await self._backoff(attempt, url, type(e).__name__)
                continue
            except httpx.HTTPError as e:
                raise HTTPClientError(f"Request to {url} failed: {e}") from e

            if not self.retry_config.is_retryable_status(response.status_code):
                self._raise_for_status(response, url)
                return response
            if final:
                break
            await self._backoff(attempt, url, f"status {response.status_code}")

        status_code = response.status_code
        error_cls = RateLimitError if status_code == 429 else HTTPClientError
        raise error_cls(
            f"{method} {url} still failing with status {status_code} after {attempts} attempts",
            status_code=status_code,
            response_body=response.text,
        )

    async def _backoff(self, attempt: int, url: str, reason: str) -> None:
        delay = self.retry_config.calculate_backoff(attempt)
        logger.warning(
            f"Retrying {url} after {reason} "
            f"(attempt {attempt + 1}/{self.retry_config.max_retries + 1}, waiting {delay:.2f}s)"
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _raise_for_status(response: httpx.Response, url: str) -> None:
        """Raise for non-retryable error statuses; 404 gets its own type."""
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {url}", status_code=404, response_body=response.text)
        if response.status_code >= 400:
            raise HTTPClientError(
                f"Request to {url} failed with status {response.status_code}",
                status_code=response.status_code,
                response_body=response.text,
            )
