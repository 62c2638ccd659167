"""Shared async HTTP transport for provider adapters"""

from typing import Any

import httpx

DEFAULT_TIMEOUT = 30.0


class HTTPClient:
    """Thin wrapper around a pooled httpx.AsyncClient.

    The timeout is fixed at construction. Adapters only issue requests through
    it and never change its state.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.session = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get(self, url: str, headers: dict[str, str] | None = None) -> httpx.Response:
        """Make GET request"""
        return await self.session.get(url, headers=headers)

    async def post(
        self,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make POST request with a JSON body"""
        return await self.session.post(url, json=json, headers=headers)

    @property
    def is_closed(self) -> bool:
        return self.session.is_closed

    async def aclose(self) -> None:
        await self.session.aclose()
