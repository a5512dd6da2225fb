"""OpenAlex API integration."""

from .models import Authorship, Meta, OpenAccess, OpenAlexAuthor, Work, WorksResponse
from .adapters import OpenAlexAdapter, build_filter, reconstruct_abstract, work_to_paper
from .client import OpenAlexClient

__all__ = [
    # Models
    "Authorship",
    "Meta",
    "OpenAccess",
    "OpenAlexAuthor",
    "Work",
    "WorksResponse",
    # Adapter
    "OpenAlexAdapter",
    "build_filter",
    "reconstruct_abstract",
    "work_to_paper",
    # Low-level client
    "OpenAlexClient",
]
