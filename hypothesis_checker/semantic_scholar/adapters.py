"""Semantic Scholar adapter implementing the research client protocol."""

import asyncio
import logging
from datetime import date
from typing import Awaitable, Callable

import httpx
from pydantic import ValidationError

from ..cancellation import CancellationToken
from ..errors import ConfigurationError, MalformedResponseError
from ..models import Author, CanonicalPaper, PaginatedResult, SearchOptions
from ..query import clean_query
from ..scoring import calculate_relevance_score, sort_papers
from ..settings import (
    MAX_ATTEMPTS,
    PAGE_SIZE,
    RATE_LIMIT_RETRY_DELAY,
    RELAY_URL,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_UNIT,
)
from .client import PROVIDER_NAME, SemanticScholarClient
from .models import Paper, SearchFilters, SearchResponse

logger = logging.getLogger(__name__)


def paper_to_canonical(paper: Paper) -> CanonicalPaper:
    """Convert a Semantic Scholar paper to a CanonicalPaper (unscored).

    Only the first reported publication type is kept.
    """
    doi = None
    if paper.external_ids and paper.external_ids.get("DOI"):
        doi = str(paper.external_ids["DOI"])

    return CanonicalPaper(
        id=paper.paper_id,
        provider="semanticscholar",
        title=paper.title,
        abstract=paper.abstract,
        publication_year=paper.year,
        type=paper.publication_types[0] if paper.publication_types else "paper",
        cited_by_count=paper.citation_count,
        is_open_access=bool(paper.is_open_access),
        open_access_url=paper.open_access_pdf.url if paper.open_access_pdf else None,
        doi=doi,
        authors=[
            Author(id=a.author_id, display_name=a.name or "") for a in paper.authors
        ],
    )


class SemanticScholarAdapter:
    """
    Adapter for Semantic Scholar, called through the relay.

    Publication types cannot be filtered server-side, so papers are dropped
    after fetching. ``total`` still reports the provider's count for the
    unfiltered query and can exceed what the page actually holds.

    Usage:
        async with SemanticScholarAdapter("me@example.com") as adapter:
            page = await adapter.search_by_hypothesis("sleep improves memory")
    """

    provider = "semanticscholar"

    def __init__(
        self,
        contact_email: str | None,
        relay_url: str = RELAY_URL,
        max_attempts: int = MAX_ATTEMPTS,
        rate_limit_delay: float = RATE_LIMIT_RETRY_DELAY,
        backoff_unit: float = RETRY_BACKOFF_UNIT,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        current_year: int | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the Semantic Scholar adapter.

        Args:
            contact_email: Contact email identifying the caller (required)
            relay_url: URL of the relay endpoint forwarding to the Graph API
            max_attempts: Total attempts per request
            rate_limit_delay: Seconds to wait after a 429
            backoff_unit: Seconds multiplied by the attempt number after other failures
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
            current_year: Fixed year for recency scoring; defaults to today
            sleep: Coroutine used for retry waits
        """
        if not contact_email:
            raise ConfigurationError("Contact email is required for Semantic Scholar API")
        self._client = SemanticScholarClient(
            contact_email=contact_email,
            relay_url=relay_url,
            max_attempts=max_attempts,
            rate_limit_delay=rate_limit_delay,
            backoff_unit=backoff_unit,
            timeout=timeout,
            transport=transport,
            sleep=sleep,
        )
        self._current_year = current_year
        self._entered = False

    async def __aenter__(self) -> "SemanticScholarAdapter":
        await self._client.__aenter__()
        self._entered = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self._client.__aexit__(exc_type, exc_val, exc_tb)
        self._entered = False

    def _ensure_entered(self) -> None:
        if not self._entered:
            raise RuntimeError(
                "Adapter not initialized. Use 'async with' context manager."
            )

    @property
    def current_year(self) -> int:
        return self._current_year or date.today().year

    def _score(self, paper: CanonicalPaper) -> CanonicalPaper:
        return paper.model_copy(
            update={"relevance_score": calculate_relevance_score(paper, self.current_year)}
        )

    async def search_by_hypothesis(
        self,
        hypothesis: str,
        page: int = 1,
        options: SearchOptions | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> PaginatedResult:
        """Search Semantic Scholar for a hypothesis and rank results locally."""
        self._ensure_entered()
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        options = options or SearchOptions()
        filters = SearchFilters.from_options(options)

        # Short tokens are noise for this provider; keep them if nothing else is left
        query = clean_query(hypothesis, min_token_length=2) or clean_query(hypothesis)
        offset = (page - 1) * PAGE_SIZE

        data = await self._client.search_papers(
            query=query,
            offset=offset,
            limit=PAGE_SIZE,
            cancel_token=cancel_token,
            **filters.to_query_params(),
        )

        try:
            response = SearchResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                PROVIDER_NAME, str(e), {"query": query, "offset": offset}
            ) from e

        kept = [p for p in response.data if filters.matches(p)]
        if len(kept) < len(response.data):
            logger.info(
                f"Client-side filters dropped {len(response.data) - len(kept)} "
                f"of {len(response.data)} papers"
            )

        papers = [self._score(paper_to_canonical(p)) for p in kept]
        return PaginatedResult.build(
            results=sort_papers(papers, options.sort_by),
            total=response.total,
            page=page,
            page_size=PAGE_SIZE,
        )

    async def get_paper(self, paper_id: str) -> CanonicalPaper:
        """Fetch a single paper by id and score it."""
        self._ensure_entered()
        data = await self._client.get_paper(paper_id)
        try:
            paper = Paper.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(PROVIDER_NAME, str(e), {"id": paper_id}) from e
        return self._score(paper_to_canonical(paper))
