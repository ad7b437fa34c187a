"""
CI Summarizer - HTTP API Client
===============================

Async HTTP client for the external REST APIs (GitHub, Semaphore).
Adds the credential and accept headers, tags requests with the run ID
and turns non-2xx responses into UpstreamError.

Usage:
    from ci_summarizer.utils.http_client import ApiClient

    async with ApiClient("https://api.github.com", auth_header="Bearer xyz") as client:
        diff = await client.get_text("/repos/o/r/commits/abc")
"""

import httpx
from typing import Any, Optional
from dataclasses import dataclass

from ci_summarizer.exceptions import UpstreamError
from ci_summarizer.utils.logging import get_logger, get_run_id

logger = get_logger(__name__)


@dataclass
class ApiClientConfig:
    """Configuration for the HTTP API client."""
    timeout_seconds: float = 30.0
    user_agent: str = "ci-summarizer/0.1"


class ApiClient:
    """
    Async HTTP client for one external API.

    Features:
    - Authorization header on every request
    - Run ID propagation
    - Configurable timeouts
    - Async context manager support

    Example:
        async with ApiClient(settings.github_api_url, auth_header=f"Bearer {token}") as client:
            payload = await client.get_json("/repos/o/r/compare/a...b")
    """

    def __init__(
        self,
        base_url: str,
        auth_header: Optional[str] = None,
        config: Optional[ApiClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the API client.

        Args:
            base_url: Base URL of the target API (e.g., "https://api.github.com")
            auth_header: Value of the Authorization header, if any
            config: Optional configuration overrides
            transport: Optional httpx transport (used to fake the network in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.auth_header = auth_header
        self.config = config or ApiClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                follow_redirects=True,
                transport=self._transport
            )
        return self._client

    def _build_headers(self, extra_headers: Optional[dict] = None) -> dict:
        """Build request headers with credential and run ID."""
        headers = {
            "User-Agent": self.config.user_agent,
        }

        if self.auth_header:
            headers["Authorization"] = self.auth_header

        run_id = get_run_id()
        if run_id:
            headers["X-Request-ID"] = run_id

        if extra_headers:
            headers.update(extra_headers)

        return headers

    async def get(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None
    ) -> httpx.Response:
        """
        Make a GET request and return the raw response.

        Transport failures are raised as UpstreamError; the status code is
        not checked here.
        """
        client = await self._get_client()

        logger.debug(
            f"GET {self.base_url}{path}",
            extra={"params": params}
        )

        try:
            response = await client.get(
                path,
                params=params,
                headers=self._build_headers(headers)
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"GET {self.base_url}{path} failed: {e}") from e

        logger.debug(
            f"Response: {response.status_code}",
            extra={"path": path, "status": response.status_code}
        )

        return response

    async def get_text(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        error_message: str = "Request failed"
    ) -> str:
        """
        GET a path and return the body as text.

        Raises:
            UpstreamError: on transport failure or a non-2xx status
        """
        response = await self.get(path, params=params, headers=headers)
        raise_for_status(response, error_message)
        return response.text

    async def get_json(
        self,
        path: str,
        params: Optional[dict] = None,
        headers: Optional[dict] = None,
        error_message: str = "Request failed"
    ) -> Any:
        """
        GET a path and decode the body as JSON.

        Raises:
            UpstreamError: on transport failure, a non-2xx status or an
                undecodable body
        """
        response = await self.get(path, params=params, headers=headers)
        raise_for_status(response, error_message)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"{error_message}: response is not valid JSON",
                status_code=response.status_code
            ) from e

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def raise_for_status(response: httpx.Response, error_message: str) -> None:
    """
    Raise UpstreamError for a non-2xx response.

    The message has the form ``"<error_message>: <status> - <reason>"``.
    """
    if response.is_success:
        return

    logger.debug(
        f"{error_message}: response body = {response.text}",
        extra={"status": response.status_code}
    )
    raise UpstreamError(
        f"{error_message}: {response.status_code} - {response.reason_phrase}",
        status_code=response.status_code,
        reason=response.reason_phrase
    )
