"""API client for the Bunny Todo REST server."""

from __future__ import annotations

from typing import Any

import httpx

from bunny_todo.services.config_service import get_config_service
from bunny_todo.utils.logger import get_logger

DEVICE_HEADER = "X-Device-Id"


class APIClient:
    """HTTP client for the Bunny Todo API.

    Requests are single round trips; failed requests are not retried.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        device_id: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if base_url is None or timeout is None:
            config = get_config_service().config
            base_url = base_url or config.api.endpoint
            timeout = timeout if timeout is not None else config.api.timeout
        self.base_url = base_url
        self.timeout = timeout
        self.device_id = device_id
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers, including the device identity when known."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.device_id:
            headers[DEVICE_HEADER] = self.device_id
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
                transport=self._transport,
            )
        self._client.headers.update(self._get_headers())
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Raises:
            httpx.HTTPStatusError: For 4xx/5xx responses
            httpx.RequestError: For transport failures
        """
        client = await self._get_client()
        url = f"{path}" if path.startswith("/") else f"/{path}"

        get_logger().debug("%s %s%s", method, self.base_url, url)
        response = await client.request(method=method, url=url, json=json, params=params)
        response.raise_for_status()
        return response

    async def get(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, json=json)

    async def put(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path)


def get_client(device_id: str | None = None) -> APIClient:
    """Get an API client instance."""
    return APIClient(device_id=device_id)
