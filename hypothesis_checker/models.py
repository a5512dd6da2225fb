"""Canonical models shared by every search provider."""

import math
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ProviderName = Literal["openalex", "semanticscholar"]
SortKey = Literal["relevance", "citations", "year", "title"]


class Author(BaseModel):
    """Author as reported by the provider, in the provider's order."""

    id: str | None = None
    display_name: str = ""


class CanonicalPaper(BaseModel):
    """A paper after adapting one provider's record.

    ``cited_by_count`` is None when the provider did not report it; that is
    scored differently from a reported zero. ``relevance_score`` is attached
    by the adapter after fetching.
    """

    id: str
    provider: ProviderName
    title: str = "Untitled"
    abstract: str | None = None
    publication_year: int = 0  # 0 means unknown
    type: str = "paper"
    cited_by_count: int | None = Field(None, ge=0)
    is_open_access: bool = False
    open_access_url: str | None = None
    doi: str | None = None
    authors: list[Author] = Field(default_factory=list)
    relevance_score: float | None = None

    @field_validator("title", mode="before")
    @classmethod
    def _default_title(cls, value: str | None) -> str:
        if value is None or not str(value).strip():
            return "Untitled"
        return value

    @field_validator("publication_year", mode="before")
    @classmethod
    def _default_year(cls, value: int | None) -> int:
        return value or 0

    @property
    def key(self) -> str:
        """Stable cross-provider key, ``"<provider>:<id>"``."""
        return f"{self.provider}:{self.id}"


class SearchOptions(BaseModel):
    """Generic search options, translated per provider by the adapters.

    Ranges are inclusive. An empty ``publication_types`` means no type filter.
    """

    model_config = ConfigDict(frozen=True)

    year_from: int | None = None
    year_to: int | None = None
    min_citations: int | None = Field(None, ge=0)
    max_citations: int | None = Field(None, ge=0)
    publication_types: tuple[str, ...] = ()
    open_access_only: bool = False
    sort_by: SortKey = "relevance"


class PaginatedResult(BaseModel):
    """One page of canonical papers."""

    results: list[CanonicalPaper] = Field(default_factory=list)
    total: int = 0
    page: int = 1
    total_pages: int = 0

    @classmethod
    def build(
        cls,
        results: list[CanonicalPaper],
        total: int,
        page: int,
        page_size: int,
    ) -> "PaginatedResult":
        return cls(
            results=results,
            total=total,
            page=page,
            total_pages=math.ceil(total / page_size) if total > 0 else 0,
        )


class SendResult(BaseModel):
    """Outcome of sending a paper summary."""

    success: bool
    note: str | None = None
    error: str | None = None
    message_id: str | None = None
