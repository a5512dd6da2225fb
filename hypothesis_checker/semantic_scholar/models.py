"""Pydantic models for Semantic Scholar API responses and filters."""

import re

from pydantic import BaseModel, Field

from ..models import SearchOptions
from ..settings import DEFAULT_MIN_CITATIONS


class Author(BaseModel):
    """Author information."""

    author_id: str | None = Field(None, alias="authorId")
    name: str | None = None

    model_config = {"populate_by_name": True}


class OpenAccessPdf(BaseModel):
    """Open access PDF information."""

    url: str | None = None
    status: str | None = None


class Paper(BaseModel):
    """Paper record returned by /paper/search and /paper/{id}."""

    paper_id: str = Field(..., alias="paperId")
    title: str | None = None
    abstract: str | None = None
    year: int | None = None
    reference_count: int | None = Field(None, alias="referenceCount")
    citation_count: int | None = Field(None, ge=0, alias="citationCount")
    is_open_access: bool | None = Field(None, alias="isOpenAccess")
    open_access_pdf: OpenAccessPdf | None = Field(None, alias="openAccessPdf")
    authors: list[Author] = Field(default_factory=list)
    venue: str | None = None
    url: str | None = None
    publication_types: list[str] | None = Field(None, alias="publicationTypes")
    publication_date: str | None = Field(None, alias="publicationDate")
    external_ids: dict[str, str | int] | None = Field(None, alias="externalIds")

    model_config = {"populate_by_name": True}


def normalize_type(value: str) -> str:
    """Fold a publication type for comparison: "JournalArticle" == "journal-article"."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


class SearchFilters(BaseModel):
    """Filters for paper search.

    Year, minimum citations and open access go to the API; publication types
    and the citation maximum are not supported server-side and are applied
    to each returned paper with ``matches``.
    """

    year: str | None = None  # e.g. "2019-2023", "2019-", "-2023"
    min_citation_count: int | None = None
    max_citation_count: int | None = None
    publication_types: list[str] | None = None
    open_access_only: bool = False

    @classmethod
    def from_options(cls, options: SearchOptions) -> "SearchFilters":
        year = None
        if options.year_from is not None or options.year_to is not None:
            start = "" if options.year_from is None else str(options.year_from)
            end = "" if options.year_to is None else str(options.year_to)
            year = f"{start}-{end}"

        min_citations = (
            DEFAULT_MIN_CITATIONS if options.min_citations is None else options.min_citations
        )
        return cls(
            year=year,
            min_citation_count=min_citations or None,
            max_citation_count=options.max_citations,
            publication_types=list(options.publication_types) or None,
            open_access_only=options.open_access_only,
        )

    def to_query_params(self) -> dict[str, str]:
        """Convert filters to API query parameters."""
        params: dict[str, str] = {}

        if self.year:
            params["year"] = self.year

        if self.min_citation_count is not None:
            params["minCitationCount"] = str(self.min_citation_count)

        if self.open_access_only:
            params["openAccessPdf"] = ""

        return params

    def matches(self, paper: Paper) -> bool:
        """Client-side part of the filter."""
        if self.publication_types:
            wanted = {normalize_type(t) for t in self.publication_types}
            reported = {normalize_type(t) for t in paper.publication_types or []}
            if not wanted & reported:
                return False

        if (
            self.max_citation_count is not None
            and paper.citation_count is not None
            and paper.citation_count > self.max_citation_count
        ):
            return False

        return True


class SearchResponse(BaseModel):
    """Response from the paper search endpoint."""

    total: int = 0
    offset: int = 0
    next: int | None = None
    data: list[Paper] = Field(default_factory=list)
