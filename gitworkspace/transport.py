"""
Async HTTP Transport for the GitHub REST API.

Handles async HTTP communication with automatic retry logic, token
authentication and error handling using httpx async client.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from gitworkspace.exceptions import (
    AuthenticationError,
    AuthorizationError,
    HostingAPIError,
    RateLimitedError,
    RepositoryMovedError,
    RepositoryNotFoundError,
    ServerError,
    ValidationError,
)
from gitworkspace.logging import log_http_request, log_http_response
from gitworkspace.rate_limiter import RateLimiter


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class AsyncHTTPTransport:
    """
    Async HTTP transport layer with token authentication and retry logic.

    Handles:
    - Token authentication header on every request
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions

    Redirects are never followed: a 301 for a renamed repository is
    reported as RepositoryMovedError.
    """

    DEFAULT_BASE_URL = "https://api.github.com"

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
        limiter: RateLimiter | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            token: GitHub access token
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            http_transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
            limiter: Limiter each request attempt runs under; backoff sleeps
                between attempts do not hold a slot
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()
        self.limiter = limiter

        headers = {"Accept": "application/vnd.github+json"}
        if token:
            headers["Authorization"] = f"token {token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            follow_redirects=False,
            transport=http_transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Make a GET request with automatic retry.

        Args:
            path: API path (e.g., "/repos/Polymer/polymer")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            HostingAPIError: On API errors
        """
        async def send() -> httpx.Response:
            log_http_request("GET", path, dict(self._client.headers), params)
            start = time.monotonic()
            response = await self._client.get(path, params=params)
            log_http_response(
                response.status_code, path, (time.monotonic() - start) * 1000
            )
            return response

        async def make_request() -> httpx.Response:
            if self.limiter is None:
                return await send()
            return await self.limiter.schedule(send)

        return await self._execute_with_retry(make_request)

    async def _execute_with_retry(
        self, request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]]
    ) -> Any:
        """
        Execute a request with automatic retry on retryable errors.

        Args:
            request_fn: Async function that makes the HTTP request

        Returns:
            Parsed JSON response

        Raises:
            HostingAPIError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await request_fn()

                if response.status_code < 300:
                    return response.json()

                # Parse error response
                error = self._parse_error_response(response)

                # Check if we should retry
                if not self._should_retry(response.status_code, attempt):
                    raise error

                last_error = error

                # Calculate backoff time
                retry_after = response.headers.get("Retry-After")
                wait_time = self._get_backoff_time(attempt, retry_after)
                await asyncio.sleep(wait_time)

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                wait_time = self._get_backoff_time(attempt, None)
                await asyncio.sleep(wait_time)

        if last_error:
            if isinstance(last_error, HostingAPIError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(self, status_code: int, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        return status_code in self.retry_config.retry_on

    def _get_backoff_time(
        self, attempt: int, retry_after: str | None
    ) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return float(retry_after)
            except ValueError:
                pass  # Fall through to exponential backoff

        # Exponential backoff: backoff_factor ^ attempt
        base_wait = self.retry_config.backoff_factor ** attempt

        # Apply jitter (±jitter%)
        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> HostingAPIError:
        """
        Parse an error response into a typed exception.

        GitHub error bodies look like ``{"message": ..., "documentation_url": ...}``.

        Args:
            response: HTTP response with a 3xx/4xx/5xx status

        Returns:
            Appropriate HostingAPIError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        status_code = response.status_code
        message = data.get("message") or f"HTTP {status_code}"

        if status_code == 301:
            location = data.get("url") or response.headers.get("Location")
            return RepositoryMovedError(
                "MOVED_PERMANENTLY", message, location, status_code
            )
        elif status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, status_code)
        elif status_code == 403:
            return AuthorizationError("FORBIDDEN", message, status_code)
        elif status_code == 404:
            return RepositoryNotFoundError("NOT_FOUND", message, status_code)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError("RATE_LIMITED", message, retry_after, status_code)
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, status_code)
        else:
            return ValidationError("HTTP_ERROR", message, status_code)
