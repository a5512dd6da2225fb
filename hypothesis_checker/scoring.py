"""Local relevance scoring and sorting of canonical papers.

The score is the only notion of relevance used for ranking; any relevance
number a provider returns is ignored so rankings agree across providers.
"""

import math

from .models import CanonicalPaper, SortKey


def _citation_term(cited_by_count: int | None) -> float:
    if cited_by_count is None:
        return -7.0

    score = math.log10(cited_by_count + 1) * 5
    if cited_by_count >= 50:
        score += 10
    elif cited_by_count >= 20:
        score += 7
    elif cited_by_count >= 10:
        score += 5
    elif cited_by_count >= 5:
        score += 2
    else:
        score -= 5
    return score


def calculate_relevance_score(paper: CanonicalPaper, current_year: int) -> float:
    """Score a paper by citations, recency, open access and abstract quality.

    Args:
        paper: Canonical paper to score
        current_year: Year the recency bonus is measured against

    Returns:
        Unbounded score, higher is more relevant
    """
    score = _citation_term(paper.cited_by_count)

    if paper.publication_year:
        year_diff = current_year - paper.publication_year
        if year_diff <= 5:
            score += (5 - year_diff) * 1.5

    if paper.is_open_access:
        score += 2

    if paper.abstract and len(paper.abstract) > 100:
        score += 3

    return score


def score_papers(papers: list[CanonicalPaper], current_year: int) -> list[CanonicalPaper]:
    """Return copies of ``papers`` with ``relevance_score`` attached."""
    return [
        paper.model_copy(
            update={"relevance_score": calculate_relevance_score(paper, current_year)}
        )
        for paper in papers
    ]


def sort_papers(papers: list[CanonicalPaper], sort_by: SortKey = "relevance") -> list[CanonicalPaper]:
    """Sort scored papers by the requested key.

    relevance, citations and year sort descending; title sorts ascending.
    """
    if sort_by == "relevance":
        return sorted(papers, key=lambda p: p.relevance_score or 0.0, reverse=True)
    if sort_by == "citations":
        return sorted(papers, key=lambda p: p.cited_by_count or 0, reverse=True)
    if sort_by == "year":
        return sorted(papers, key=lambda p: p.publication_year, reverse=True)
    if sort_by == "title":
        return sorted(papers, key=lambda p: p.title)
    raise ValueError(f"Unknown sort key: {sort_by}")
