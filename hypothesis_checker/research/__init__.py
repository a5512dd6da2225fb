"""Research search facade.

Usage:
    from hypothesis_checker.research import create_research_client, SearchSession

    async with create_research_client("semanticscholar", email) as client:
        page = await client.search_by_hypothesis("sleep improves memory", page=2)
"""

from .client import PROVIDERS, create_research_client
from .session import SearchSession

__all__ = [
    "PROVIDERS",
    "create_research_client",
    "SearchSession",
]
