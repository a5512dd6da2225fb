"""Semantic Scholar integration through the same-origin relay."""

from .models import (
    Author,
    OpenAccessPdf,
    Paper,
    SearchFilters,
    SearchResponse,
    normalize_type,
)
from .adapters import SemanticScholarAdapter, paper_to_canonical
from .client import DEFAULT_FIELDS, RequestOutcome, SemanticScholarClient

__all__ = [
    # Models
    "Author",
    "OpenAccessPdf",
    "Paper",
    "SearchFilters",
    "SearchResponse",
    "normalize_type",
    # Adapter
    "SemanticScholarAdapter",
    "paper_to_canonical",
    # Low-level client
    "DEFAULT_FIELDS",
    "RequestOutcome",
    "SemanticScholarClient",
]
