"""Interactive search session that drops superseded responses."""

import logging

from ..cancellation import CancellationToken
from ..errors import SearchCancelledError
from ..models import PaginatedResult, SearchOptions
from ..protocols import ResearchClient

logger = logging.getLogger(__name__)


class SearchSession:
    """
    Tracks the latest search issued by one caller.

    Each search gets a monotonically increasing generation and cancels the
    previous search's token. A response (or error) from any generation older
    than the latest issued is discarded, so ``latest`` only ever holds the
    result of the newest search.

    Usage:
        async with create_research_client("openalex", email) as client:
            session = SearchSession(client)
            result = await session.search("sleep improves memory")
            if result is None:
                ...  # superseded by a newer search
    """

    def __init__(self, client: ResearchClient):
        self._client = client
        self._generation = 0
        self._token: CancellationToken | None = None
        self.latest: PaginatedResult | None = None

    @property
    def generation(self) -> int:
        return self._generation

    async def search(
        self,
        hypothesis: str,
        page: int = 1,
        options: SearchOptions | None = None,
    ) -> PaginatedResult | None:
        """Run a search; returns None when a newer search superseded it."""
        self._generation += 1
        generation = self._generation

        if self._token is not None:
            self._token.cancel()
        token = CancellationToken()
        self._token = token

        try:
            result = await self._client.search_by_hypothesis(
                hypothesis, page, options, cancel_token=token
            )
        except SearchCancelledError:
            logger.debug(f"Search #{generation} cancelled")
            return None
        except Exception as e:
            if generation != self._generation:
                logger.info(f"Discarding error from superseded search #{generation}: {e}")
                return None
            raise

        if generation != self._generation:
            logger.info(f"Discarding stale result of search #{generation}")
            return None

        self.latest = result
        return result
