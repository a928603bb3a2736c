"""
HTTP Transport for the GitHub REST API.

Handles HTTP communication, token authentication and error handling.
Retries are not performed here; a failed call surfaces as a typed exception.
"""

import time
from typing import Any

import httpx

from prrepost.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitedError,
    RepostError,
    ServerError,
    TransientNetworkError,
    ValidationError,
)
from prrepost.logging import log_http_request, log_http_response

GITHUB_API_VERSION = "2022-11-28"


class HTTPTransport:
    """
    HTTP transport layer with token authentication.

    Handles:
    - Bearer token authentication
    - Error response parsing into typed exceptions
    - Mapping of connection failures to TransientNetworkError
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        http_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: Personal access or app token
            timeout: Request timeout in seconds
            http_transport: Optional httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers=headers,
            transport=http_transport,
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
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request and return the parsed JSON response.

        Args:
            method: HTTP method
            path: API path (e.g., "/repos/owner/repo/pulls/1")
            params: Query parameters
            body: JSON request body (for POST/PATCH)

        Returns:
            Parsed JSON response

        Raises:
            RepostError: On API errors
            TransientNetworkError: When the API could not be reached
        """
        log_http_request(method, f"{self.base_url}{path}", dict(self._client.headers), body)
        started = time.monotonic()
        try:
            response = self._client.request(method, path, params=params, json=body)
        except httpx.RequestError as e:
            raise TransientNetworkError("CONNECTION_ERROR", str(e)) from e

        elapsed_ms = (time.monotonic() - started) * 1000
        log_http_response(response.status_code, str(response.url), None, elapsed_ms)

        if response.status_code >= 400:
            raise self._parse_error_response(response)

        if not response.content:
            return {}
        return response.json()

    def _parse_error_response(self, response: httpx.Response) -> RepostError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate RepostError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        details = [
            e.get("message") or e.get("code")
            for e in data.get("errors", [])
            if isinstance(e, dict) and (e.get("message") or e.get("code"))
        ]
        if details:
            message = f"{message}: {'; '.join(details)}"
        request_id = response.headers.get("X-GitHub-Request-Id")

        status_code = response.status_code

        if self._is_rate_limited(response):
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError("RATE_LIMITED", message, retry_after, request_id)
        if status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, request_id)
        elif status_code == 403:
            return AuthorizationError("FORBIDDEN", message, request_id)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, request_id)
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, request_id)
        else:
            return ValidationError("VALIDATION_FAILED", message, request_id)

    def _is_rate_limited(self, response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        if response.headers.get("Retry-After"):
            return True
        return response.headers.get("X-RateLimit-Remaining") == "0"
