"""Protocol definitions for research search clients."""

from typing import Protocol, runtime_checkable

from .cancellation import CancellationToken
from .models import CanonicalPaper, PaginatedResult, SearchOptions


@runtime_checkable
class ResearchClient(Protocol):
    """Capability set every provider adapter offers.

    Implement this protocol to add another search provider; the facade
    selects implementations by provider name.
    """

    async def search_by_hypothesis(
        self,
        hypothesis: str,
        page: int = 1,
        options: SearchOptions | None = None,
        *,
        cancel_token: CancellationToken | None = None,
    ) -> PaginatedResult:
        """
        Search papers relevant to a free-text hypothesis.

        Args:
            hypothesis: Free text typed by the user
            page: 1-based page number
            options: Filters and sort key; defaults to relevance, no filters
            cancel_token: Optional token that aborts the search between attempts

        Returns:
            PaginatedResult with every paper scored and sorted
        """
        ...

    async def get_paper(self, paper_id: str) -> CanonicalPaper:
        """
        Fetch one paper by its provider identifier.

        Args:
            paper_id: Identifier as returned in CanonicalPaper.id

        Returns:
            Scored CanonicalPaper
        """
        ...
