"""Hypothesis checker: search academic providers for papers about a hypothesis."""

from .cancellation import CancellationToken
from .errors import (
    ConfigurationError,
    HypothesisCheckerError,
    MalformedResponseError,
    ProviderError,
    ProviderHttpError,
    RateLimitError,
    SearchCancelledError,
    SearchFailedError,
)
from .models import Author, CanonicalPaper, PaginatedResult, SearchOptions, SendResult
from .protocols import ResearchClient
from .research import SearchSession, create_research_client
from .scoring import calculate_relevance_score, sort_papers

__all__ = [
    "CancellationToken",
    # Errors
    "ConfigurationError",
    "HypothesisCheckerError",
    "MalformedResponseError",
    "ProviderError",
    "ProviderHttpError",
    "RateLimitError",
    "SearchCancelledError",
    "SearchFailedError",
    # Models
    "Author",
    "CanonicalPaper",
    "PaginatedResult",
    "SearchOptions",
    "SendResult",
    # Facade
    "ResearchClient",
    "SearchSession",
    "create_research_client",
    # Scoring
    "calculate_relevance_score",
    "sort_papers",
]
