"""Async client for Semantic Scholar, reached through the same-origin relay."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import httpx

from ..cancellation import CancellationToken
from ..errors import (
    ConfigurationError,
    MalformedResponseError,
    ProviderHttpError,
    RateLimitError,
    SearchCancelledError,
    SearchFailedError,
)
from ..settings import (
    MAX_ATTEMPTS,
    RATE_LIMIT_RETRY_DELAY,
    RELAY_URL,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_UNIT,
)

logger = logging.getLogger(__name__)

PROVIDER_NAME = "Semantic Scholar"

DEFAULT_FIELDS = [
    "paperId",
    "title",
    "abstract",
    "year",
    "referenceCount",
    "citationCount",
    "isOpenAccess",
    "openAccessPdf",
    "authors",
    "venue",
    "url",
    "publicationTypes",
    "publicationDate",
    "externalIds",
]


@dataclass
class RequestOutcome:
    """Result of a relay request: either decoded JSON or the final error."""

    data: Any = None
    error: Exception | None = None
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def _error_body(response: httpx.Response) -> str:
    """Prefer the relay's ``{"error": ...}`` message over the raw body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict) and payload.get("error"):
        details = payload.get("details")
        return f"{payload['error']} {details}" if details else str(payload["error"])
    return response.text


class SemanticScholarClient:
    """Async client posting ``{endpoint, ...params}`` to the relay.

    Retry policy: ``max_attempts`` attempts in total. A 429 waits
    ``rate_limit_delay`` seconds; any other failure waits
    ``attempt * backoff_unit`` seconds. Malformed bodies are not retried.
    """

    def __init__(
        self,
        contact_email: str,
        relay_url: str = RELAY_URL,
        max_attempts: int = MAX_ATTEMPTS,
        rate_limit_delay: float = RATE_LIMIT_RETRY_DELAY,
        backoff_unit: float = RETRY_BACKOFF_UNIT,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {max_attempts}")

        self.contact_email = contact_email
        self.relay_url = relay_url
        self.max_attempts = max_attempts
        self.rate_limit_delay = rate_limit_delay
        self.backoff_unit = backoff_unit
        self.timeout = timeout
        self._transport = transport
        self._sleep = sleep

        self.headers = {"Accept": "application/json", "From": contact_email}
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "SemanticScholarClient":
        self._client = httpx.AsyncClient(
            headers=self.headers,
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

    async def _request_with_retry(
        self,
        payload: dict[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> RequestOutcome:
        """Post to the relay, retrying per the policy above."""
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            if cancel_token is not None and cancel_token.cancelled:
                logger.info(f"Search cancelled before attempt {attempt}")
                return RequestOutcome(
                    error=SearchCancelledError(PROVIDER_NAME, attempt - 1, payload),
                    attempts=attempt - 1,
                )

            logger.debug(
                f"Request attempt {attempt}/{self.max_attempts}: {payload.get('endpoint')}"
            )
            try:
                response = await self.client.post(self.relay_url, json=payload)
            except httpx.TransportError as e:
                logger.warning(f"Connection error: {e}")
                last_error = ProviderHttpError(PROVIDER_NAME, None, str(e), payload)
                delay = attempt * self.backoff_unit
            else:
                logger.debug(f"Response status: {response.status_code}")
                if response.status_code == 429:
                    last_error = RateLimitError(PROVIDER_NAME, _error_body(response), payload)
                    delay = self.rate_limit_delay
                    logger.warning(
                        f"Rate limited (429), waiting {delay}s (attempt {attempt})"
                    )
                elif not response.is_success:
                    last_error = ProviderHttpError(
                        PROVIDER_NAME, response.status_code, _error_body(response), payload
                    )
                    delay = attempt * self.backoff_unit
                    logger.warning(
                        f"HTTP error {response.status_code}, backoff {delay}s (attempt {attempt})"
                    )
                else:
                    try:
                        data = response.json()
                    except ValueError as e:
                        return RequestOutcome(
                            error=MalformedResponseError(
                                PROVIDER_NAME, f"invalid JSON: {e}", payload
                            ),
                            attempts=attempt,
                        )
                    return RequestOutcome(data=data, attempts=attempt)

            if attempt < self.max_attempts:
                await self._sleep(delay)

        logger.error(f"Request failed after {self.max_attempts} attempts: {last_error}")
        return RequestOutcome(
            error=SearchFailedError(PROVIDER_NAME, last_error, self.max_attempts, payload),
            attempts=self.max_attempts,
        )

    async def relay(
        self,
        endpoint: str,
        params: dict[str, Any],
        cancel_token: CancellationToken | None = None,
    ) -> Any:
        """Send one request through the relay and return the decoded body."""
        outcome = await self._request_with_retry(
            {"endpoint": endpoint, **params}, cancel_token
        )
        if not outcome.ok:
            raise outcome.error
        return outcome.data

    async def search_papers(
        self,
        query: str,
        offset: int,
        limit: int,
        fields: list[str] | None = None,
        cancel_token: CancellationToken | None = None,
        **filter_params: str,
    ) -> dict[str, Any]:
        """Search for papers using the paper/search endpoint."""
        params: dict[str, Any] = {
            "query": query,
            "offset": offset,
            "limit": limit,
            "fields": ",".join(fields or DEFAULT_FIELDS),
        }
        params.update(filter_params)

        logger.info(f"Searching papers: query='{query}', limit={limit}, offset={offset}")
        logger.debug(f"Filter params: {filter_params}")

        return await self.relay("paper/search", params, cancel_token)

    async def get_paper(
        self,
        paper_id: str,
        fields: list[str] | None = None,
    ) -> dict[str, Any]:
        """Fetch a single paper using the paper/{id} endpoint."""
        params = {"fields": ",".join(fields or DEFAULT_FIELDS)}
        return await self.relay(f"paper/{paper_id}", params)
