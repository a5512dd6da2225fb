"""Async HTTP client for the OpenAlex API."""

import logging
from typing import Any

import httpx

from ..errors import MalformedResponseError, ProviderHttpError
from ..settings import OPENALEX_BASE_URL, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

PROVIDER_NAME = "OpenAlex"


class OpenAlexClient:
    """Async client for OpenAlex.

    Single request per call, no retry: any non-success response is raised
    immediately with its status code and body.
    """

    def __init__(
        self,
        email: str,
        base_url: str = OPENALEX_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.email = email
        self.base_url = base_url
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "OpenAlexClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError(
                "Client not initialized. Use 'async with' context manager."
            )
        return self._client

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``path`` with the polite-pool ``mailto`` and decode the JSON body."""
        params = {**(params or {}), "mailto": self.email}
        logger.debug(f"GET {path} params={params}")

        try:
            response = await self.client.get(path, params=params)
        except httpx.TransportError as e:
            logger.error(f"OpenAlex request failed: {e}")
            raise ProviderHttpError(PROVIDER_NAME, None, str(e), params) from e

        if not response.is_success:
            logger.error(f"OpenAlex HTTP {response.status_code}: {response.text[:200]}")
            raise ProviderHttpError(
                PROVIDER_NAME, response.status_code, response.text, params
            )

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(PROVIDER_NAME, f"invalid JSON: {e}", params) from e

    async def search_works(
        self,
        search: str,
        filter: str,
        sort: str,
        page: int,
        per_page: int,
    ) -> dict[str, Any]:
        """Search the /works endpoint."""
        params = {
            "filter": filter,
            "search": search,
            "sort": sort,
            "page": page,
            "per_page": per_page,
        }
        logger.info(f"Searching works: search='{search}', page={page}, filter='{filter}'")
        return await self.get_json("/works", params=params)

    async def get_work(self, work_id: str) -> dict[str, Any]:
        """Fetch a single work by OpenAlex id, full URL id or DOI."""
        work_id = work_id.removeprefix("https://openalex.org/")
        return await self.get_json(f"/works/{work_id}")
