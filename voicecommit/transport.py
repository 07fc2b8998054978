"""
Async HTTP Transport for the GitHub REST API.

Handles bearer authentication, the fixed client identifier header, request
logging and error response parsing using the httpx async client.
"""

import time
from typing import Any

import httpx

from voicecommit.exceptions import ApiError, NetworkError, NotAuthenticatedError
from voicecommit.logging import log_http_request, log_http_response
from voicecommit.types.auth import AuthToken


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for the remote source-control API.

    Handles:
    - Bearer token authorization (checked for expiry before every call)
    - Fixed User-Agent client identifier
    - Error response parsing into typed exceptions

    No automatic retry is performed; a failed call surfaces to the caller.
    """

    def __init__(
        self,
        base_url: str,
        user_agent: str,
        timeout: float = 30.0,
        token: AuthToken | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            user_agent: Client identifier sent with every request
            timeout: Request timeout in seconds
            token: Initial access token (optional, may be set later)
            http_transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self._token = token

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=http_transport,
            headers={
                "Accept": "application/vnd.github.v3+json",
                "Content-Type": "application/json",
                "User-Agent": user_agent,
            },
        )

    @property
    def token(self) -> AuthToken | None:
        return self._token

    def set_token(self, token: AuthToken | None) -> None:
        """Replace the token used for subsequent calls."""
        self._token = token

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make an authenticated request.

        Args:
            method: HTTP method
            path: API path (e.g., "/user/repos")
            params: Query parameters
            body: JSON request body

        Returns:
            Parsed JSON response (None for empty bodies)

        Raises:
            NotAuthenticatedError: If no usable token is set or the API answers 401
            ApiError: On any other non-2xx status
            NetworkError: If no response was received
        """
        headers = self._auth_headers()
        url = f"{self.base_url}{path}"
        log_http_request(method, url, headers=headers, body=body)

        started = time.monotonic()
        try:
            response = await self._client.request(
                method, path, params=params, json=body, headers=headers
            )
        except httpx.RequestError as e:
            raise NetworkError(f"{method} {path} failed: {e}") from e

        log_http_response(response.status_code, url, (time.monotonic() - started) * 1000)

        if response.status_code >= 400:
            raise self._parse_error_response(response)

        if not response.content:
            return None
        return response.json()

    def _auth_headers(self) -> dict[str, str]:
        if self._token is None or not self._token.value:
            raise NotAuthenticatedError()
        if self._token.is_expired():
            raise NotAuthenticatedError("GitHub token has expired")
        return {"Authorization": f"Bearer {self._token.value}"}

    def _parse_error_response(self, response: httpx.Response) -> Exception:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            NotAuthenticatedError for 401, ApiError otherwise
        """
        try:
            data: Any = response.json()
        except ValueError:
            data = response.text

        message = None
        if isinstance(data, dict):
            message = data.get("message")

        if response.status_code == 401:
            return NotAuthenticatedError(message or "Invalid or expired token")

        detail = f"HTTP {response.status_code}: {message}" if message else None
        return ApiError(response.status_code, data, detail)
