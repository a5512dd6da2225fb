"""Pydantic models for OpenAlex API responses."""

from pydantic import BaseModel, Field


class OpenAlexAuthor(BaseModel):
    """Author inside an authorship entry."""

    id: str | None = None
    display_name: str | None = None


class Authorship(BaseModel):
    """One authorship; institutions are not needed downstream."""

    author: OpenAlexAuthor = Field(default_factory=OpenAlexAuthor)


class OpenAccess(BaseModel):
    """Open access status of a work."""

    is_oa: bool = False
    oa_url: str | None = None


class Work(BaseModel):
    """A work returned by /works or /works/{id}."""

    id: str
    doi: str | None = None
    title: str | None = None
    display_name: str | None = None
    publication_year: int | None = None
    type: str | None = None
    cited_by_count: int | None = Field(None, ge=0)
    open_access: OpenAccess | None = None
    abstract_inverted_index: dict[str, list[int]] | None = None
    authorships: list[Authorship] = Field(default_factory=list)


class Meta(BaseModel):
    """Pagination metadata."""

    count: int = 0
    page: int | None = None
    per_page: int | None = None


class WorksResponse(BaseModel):
    """Response from the /works search endpoint."""

    meta: Meta = Field(default_factory=Meta)
    results: list[Work] = Field(default_factory=list)
