"""OpenAlex adapter implementing the research client protocol."""

import logging
from datetime import date

import httpx
from pydantic import ValidationError

from ..cancellation import CancellationToken
from ..errors import ConfigurationError, MalformedResponseError, SearchCancelledError
from ..models import Author, CanonicalPaper, PaginatedResult, SearchOptions
from ..query import clean_query
from ..scoring import calculate_relevance_score, sort_papers
from ..settings import DEFAULT_MIN_CITATIONS, OPENALEX_BASE_URL, PAGE_SIZE, REQUEST_TIMEOUT
from .client import PROVIDER_NAME, OpenAlexClient
from .models import Work, WorksResponse

logger = logging.getLogger(__name__)


# Server-side sort requested for each generic sort key; results are
# re-sorted locally afterwards.
OPENALEX_SORT = {
    "relevance": "relevance_score:desc",
    "citations": "cited_by_count:desc",
    "year": "publication_year:desc",
    "title": "display_name:asc",
}


def reconstruct_abstract(inverted_index: dict[str, list[int]] | None) -> str | None:
    """Rebuild abstract text from OpenAlex's word -> positions index."""
    if not inverted_index:
        return None
    positioned = [
        (position, word)
        for word, positions in inverted_index.items()
        for position in positions
    ]
    return " ".join(word for _, word in sorted(positioned))


def work_to_paper(work: Work) -> CanonicalPaper:
    """Convert an OpenAlex Work to a CanonicalPaper (unscored)."""
    open_access = work.open_access
    doi = work.doi.removeprefix("https://doi.org/") if work.doi else None

    return CanonicalPaper(
        id=work.id,
        provider="openalex",
        title=work.display_name or work.title,
        abstract=reconstruct_abstract(work.abstract_inverted_index),
        publication_year=work.publication_year,
        type=work.type or "paper",
        cited_by_count=work.cited_by_count,
        is_open_access=open_access.is_oa if open_access else False,
        open_access_url=open_access.oa_url if open_access else None,
        doi=doi,
        authors=[
            Author(id=a.author.id, display_name=a.author.display_name or "")
            for a in work.authorships
        ],
    )


def build_filter(options: SearchOptions) -> str:
    """Translate generic options into one comma-joined OpenAlex filter."""
    parts = ["has_abstract:true"]

    if options.year_from is not None and options.year_to is not None:
        parts.append(f"publication_year:{options.year_from}-{options.year_to}")
    elif options.year_from is not None:
        parts.append(f"publication_year:>{options.year_from - 1}")
    elif options.year_to is not None:
        parts.append(f"publication_year:<{options.year_to + 1}")

    min_citations = (
        DEFAULT_MIN_CITATIONS if options.min_citations is None else options.min_citations
    )
    if options.max_citations is not None:
        parts.append(f"cited_by_count:{min_citations}-{options.max_citations}")
    elif min_citations > 0:
        parts.append(f"cited_by_count:>{min_citations - 1}")

    if options.publication_types:
        parts.append("type:" + "|".join(options.publication_types))

    if options.open_access_only:
        parts.append("is_oa:true")

    return ",".join(parts)


class OpenAlexAdapter:
    """
    Adapter for the OpenAlex API.

    One GET per search; year, citation, type and open access filtering all
    happen server-side.

    Usage:
        async with OpenAlexAdapter("me@example.com") as adapter:
            page = await adapter.search_by_hypothesis("sleep improves memory")
    """

    provider = "openalex"

    def __init__(
        self,
        contact_email: str | None,
        base_url: str = OPENALEX_BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        current_year: int | None = None,
    ):
        """
        Initialize the OpenAlex adapter.

        Args:
            contact_email: Email sent as ``mailto`` for the polite pool (required)
            base_url: API root, overridable for tests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
            current_year: Fixed year for recency scoring; defaults to today
        """
        if not contact_email:
            raise ConfigurationError("Contact email is required for OpenAlex API")
        self._client = OpenAlexClient(
            email=contact_email, base_url=base_url, timeout=timeout, transport=transport
        )
        self._current_year = current_year
        self._entered = False

    async def __aenter__(self) -> "OpenAlexAdapter":
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
        """Search OpenAlex works for a hypothesis and rank them locally."""
        self._ensure_entered()
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        options = options or SearchOptions()

        if cancel_token and cancel_token.cancelled:
            raise SearchCancelledError(PROVIDER_NAME, attempts=0)

        filter_expr = build_filter(options)
        data = await self._client.search_works(
            search=clean_query(hypothesis),
            filter=filter_expr,
            sort=OPENALEX_SORT[options.sort_by],
            page=page,
            per_page=PAGE_SIZE,
        )

        try:
            response = WorksResponse.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(
                PROVIDER_NAME, str(e), {"filter": filter_expr, "page": page}
            ) from e

        papers = [self._score(work_to_paper(w)) for w in response.results]
        logger.info(
            f"OpenAlex returned {len(papers)} works (total available: {response.meta.count})"
        )

        return PaginatedResult.build(
            results=sort_papers(papers, options.sort_by),
            total=response.meta.count,
            page=page,
            page_size=PAGE_SIZE,
        )

    async def get_paper(self, paper_id: str) -> CanonicalPaper:
        """Fetch a single work by id and score it."""
        self._ensure_entered()
        data = await self._client.get_work(paper_id)
        try:
            work = Work.model_validate(data)
        except ValidationError as e:
            raise MalformedResponseError(PROVIDER_NAME, str(e), {"id": paper_id}) from e
        return self._score(work_to_paper(work))
