"""Authenticated async HTTP client for the LMS API.

Thin wrapper over httpx.AsyncClient that turns every way a request can go
wrong into one of the data layer's error types:

- httpx.TransportError (no response at all) -> NetworkFailure
- status outside 200-299                     -> RequestFailure
- 2xx with a body that is not JSON           -> ParseFailure
"""

import logging
from typing import Any

import httpx

from .config import get_access_token, get_lms_base_url, get_request_timeout
from .errors import NetworkFailure, ParseFailure, RequestFailure

logger = logging.getLogger(__name__)


def _get_headers(access_token: str | None) -> dict[str, str]:
    """Get HTTP headers for LMS requests."""
    headers = {"Accept": "application/json"}
    if access_token:
        headers["Authorization"] = f"JWT {access_token}"
    return headers


class LmsClient:
    """Performs GET/POST requests against the LMS and decodes JSON bodies."""

    def __init__(
        self,
        base_url: str | None = None,
        access_token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or get_lms_base_url()).rstrip("/")
        self._client = httpx.AsyncClient(
            headers=_get_headers(access_token or get_access_token()),
            timeout=timeout if timeout is not None else get_request_timeout(),
            transport=transport,
        )

    def url(self, path: str) -> str:
        """Absolute URL for a path relative to the LMS base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET a URL and return its decoded JSON body.

        Raises:
            NetworkFailure, RequestFailure, ParseFailure
        """
        return await self._request("GET", url, params=params)

    async def post_json(self, url: str, data: dict[str, Any] | None = None) -> Any:
        """POST a JSON body and return the decoded JSON response.

        An empty response body decodes to an empty dict.

        Raises:
            NetworkFailure, RequestFailure, ParseFailure
        """
        return await self._request("POST", url, json=data or {})

    async def _request(self, method: str, url: str, **kwargs) -> Any:
        logger.debug(f"{method} {url}")
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise NetworkFailure(url, str(e) or type(e).__name__) from e

        if not response.is_success:
            raise RequestFailure(url, response.status_code, response.text)

        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailure(url, str(e)) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "LmsClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
