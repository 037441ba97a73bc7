"""
HTTP Transport for the GitHub REST API.

Handles HTTP communication with token authentication, automatic retry
logic, pagination metadata and error handling.
"""

import random
import re
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from stars.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    StarsError,
    ValidationError,
)
from stars.logging import log_http_request, log_http_response

DEFAULT_ACCEPT = "application/vnd.github+json"
USER_AGENT = "stars-cli"

_LINK_LAST_RE = re.compile(r'<([^>]+)>;\s*rel="last"')
_PAGE_PARAM_RE = re.compile(r"[?&]page=(\d+)")


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 3
    backoff_factor: float = 2.0
    retry_on: list[int] = field(default_factory=lambda: [429, 500, 502, 503])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


def parse_last_page(link_header: str | None, current_page: int = 1) -> int:
    """
    Extract the last page number from a GitHub ``Link`` header.

    GitHub omits ``rel="last"`` on the last page itself, and omits the whole
    header when a collection fits in one page. In both cases the current
    page is the last one.
    """
    if not link_header:
        return current_page

    match = _LINK_LAST_RE.search(link_header)
    if not match:
        return current_page

    page = _PAGE_PARAM_RE.search(match.group(1))
    if not page:
        return current_page
    return max(int(page.group(1)), current_page)


class HTTPTransport:
    """
    HTTP transport layer with token authentication and retry logic.

    Handles:
    - Authorization header for personal access tokens
    - Exponential backoff with jitter for retries
    - Retry-After header respect for rate limiting
    - Error response parsing into typed exceptions
    - Pagination metadata from the Link header
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: Personal access token (optional for public reads)
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        headers = {"Accept": DEFAULT_ACCEPT, "User-Agent": USER_AGENT}
        if token:
            headers["Authorization"] = f"token {token}"

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        """
        Make a request with automatic retry.

        Args:
            method: HTTP method (GET, PUT, DELETE)
            path: API path (e.g., "/user/starred/owner/name")
            params: Query parameters
            accept: Media type overriding the default Accept header

        Returns:
            The successful response

        Raises:
            StarsError: On API errors
        """
        headers = {"Accept": accept} if accept else None

        def make_request() -> httpx.Response:
            log_http_request(method, path, headers=dict(self._client.headers), params=params)
            started = time.monotonic()
            response = self._client.request(method, path, params=params, headers=headers)
            log_http_response(
                response.status_code,
                path,
                elapsed_ms=(time.monotonic() - started) * 1000,
            )
            return response

        return self._execute_with_retry(make_request)

    def get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> Any:
        """GET a path and return the decoded JSON body."""
        return self.request("GET", path, params=params, accept=accept).json()

    def get_page(
        self,
        path: str,
        page: int,
        per_page: int,
        params: dict[str, Any] | None = None,
        accept: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        GET one page of a paginated collection.

        Returns:
            Tuple of (page items, last page number)
        """
        query = dict(params or {})
        query.update({"page": page, "per_page": per_page})

        response = self.request("GET", path, params=query, accept=accept)
        items = response.json()
        if not isinstance(items, list):
            raise ValidationError(
                "UNEXPECTED_RESPONSE", f"Expected a list from {path}, got {type(items).__name__}"
            )
        return items, parse_last_page(response.headers.get("Link"), page)

    def _execute_with_retry(
        self, request_fn: Callable[[], httpx.Response]
    ) -> httpx.Response:
        """
        Execute a request with automatic retry on retryable errors.

        Raises:
            StarsError: On non-retryable errors or after max retries
        """
        last_error: Exception | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = request_fn()

                if response.status_code < 400:
                    return response

                error = self._parse_error_response(response)

                if not self._should_retry(response.status_code, attempt, error):
                    raise error

                last_error = error

                retry_after = response.headers.get("Retry-After")
                if retry_after is None and isinstance(error, RateLimitedError):
                    retry_after = str(min(error.retry_after, self.retry_config.max_backoff))
                time.sleep(self._get_backoff_time(attempt, retry_after))

            except httpx.RequestError as e:
                # Network errors are retryable
                if attempt >= self.retry_config.max_retries:
                    raise ServerError("CONNECTION_ERROR", str(e)) from e

                last_error = e
                time.sleep(self._get_backoff_time(attempt, None))

        if last_error:
            if isinstance(last_error, StarsError):
                raise last_error
            raise ServerError("MAX_RETRIES_EXCEEDED", str(last_error))

        raise ServerError("UNKNOWN_ERROR", "Request failed with no error details")

    def _should_retry(
        self, status_code: int, attempt: int, error: StarsError | None = None
    ) -> bool:
        """
        Determine if a request should be retried.

        Rate limiting is always retried, including GitHub's 403 with an
        exhausted X-RateLimit-Remaining.

        Args:
            status_code: HTTP status code
            attempt: Current attempt number (0-indexed)
            error: Exception the response was mapped to
        """
        if attempt >= self.retry_config.max_retries:
            return False

        if isinstance(error, RateLimitedError):
            return True

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

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)

    def _parse_error_response(self, response: httpx.Response) -> StarsError:
        """
        Parse a GitHub error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate StarsError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        request_id = response.headers.get("X-GitHub-Request-Id")
        status_code = response.status_code
        code = f"HTTP_{status_code}"

        if status_code == 401:
            return AuthenticationError(code, message, request_id)
        elif status_code == 403:
            if response.headers.get("X-RateLimit-Remaining") == "0":
                return RateLimitedError(
                    code, message, self._rate_limit_wait(response), request_id
                )
            return AuthorizationError(code, message, request_id)
        elif status_code == 404:
            return NotFoundError(code, message, request_id)
        elif status_code == 409:
            return ConflictError(code, message, request_id)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError(code, message, retry_after, request_id)
        elif status_code >= 500:
            return ServerError(code, message, request_id)
        else:
            return ValidationError(code, message, request_id)

    @staticmethod
    def _rate_limit_wait(response: httpx.Response) -> int:
        reset = response.headers.get("X-RateLimit-Reset", "")
        if reset.isdigit():
            return max(0, int(reset) - int(time.time())) + 1
        return 60
