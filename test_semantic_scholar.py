"""Tests for the Semantic Scholar adapter and its retry policy."""

import asyncio
import json

import httpx
import pytest

from hypothesis_checker.cancellation import CancellationToken
from hypothesis_checker.errors import (
    ConfigurationError,
    MalformedResponseError,
    ProviderHttpError,
    RateLimitError,
    SearchCancelledError,
    SearchFailedError,
)
from hypothesis_checker.models import SearchOptions
from hypothesis_checker.semantic_scholar import (
    Paper,
    SearchFilters,
    SemanticScholarAdapter,
    paper_to_canonical,
)

EMAIL = "researcher@example.com"
RELAY_URL = "http://relay.test/api/semanticscholar"
CURRENT_YEAR = 2024


def make_paper(paper_id: str, citation_count: int | None = 10, **fields) -> dict:
    paper = {
        "paperId": paper_id,
        "title": f"Paper {paper_id}",
        "abstract": None,
        "year": 2012,
        "citationCount": citation_count,
        "isOpenAccess": False,
        "openAccessPdf": None,
        "authors": [{"authorId": "1741101", "name": "Grace Hopper"}],
        "publicationTypes": ["JournalArticle"],
        "externalIds": {"DOI": "10.1000/" + paper_id},
    }
    paper.update(fields)
    return paper


def search_response(papers: list[dict], total: int | None = None, offset: int = 0) -> dict:
    return {"total": len(papers) if total is None else total, "offset": offset, "data": papers}


class SleepRecorder:
    """Stands in for asyncio.sleep and records requested delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def run_search(
    handler,
    hypothesis="mindfulness meditation reduces anxiety",
    page=1,
    options=None,
    sleep=None,
    cancel_token=None,
):
    async def _run():
        async with SemanticScholarAdapter(
            EMAIL,
            relay_url=RELAY_URL,
            transport=httpx.MockTransport(handler),
            current_year=CURRENT_YEAR,
            sleep=sleep or SleepRecorder(),
        ) as adapter:
            return await adapter.search_by_hypothesis(
                hypothesis, page, options, cancel_token=cancel_token
            )

    return asyncio.run(_run())


# ============================================================
# Request building
# ============================================================


def test_relay_payload_carries_endpoint_query_and_filters():
    payloads = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert str(request.url) == RELAY_URL
        assert request.method == "POST"
        assert request.headers["from"] == EMAIL
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json=search_response([]))

    options = SearchOptions(year_from=2015, year_to=2020, open_access_only=True)
    run_search(handler, hypothesis='Does "yoga" in adults cut stress?', page=3, options=options)

    payload = payloads[0]
    assert payload["endpoint"] == "paper/search"
    assert payload["query"] == "Does yoga adults cut stress?"
    assert payload["offset"] == 50
    assert payload["limit"] == 25
    assert payload["year"] == "2015-2020"
    assert payload["minCitationCount"] == "5"
    assert payload["openAccessPdf"] == ""
    assert "publicationTypes" not in payload
    assert "paperId" in payload["fields"].split(",")


def test_filters_translation():
    assert SearchFilters.from_options(SearchOptions(year_from=2019)).year == "2019-"
    assert SearchFilters.from_options(SearchOptions(year_to=2019)).year == "-2019"
    no_floor = SearchFilters.from_options(SearchOptions(min_citations=0))
    assert "minCitationCount" not in no_floor.to_query_params()


def test_query_of_only_short_tokens_is_kept():
    payloads = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(200, json=search_response([]))

    run_search(handler, hypothesis="AI in VR")
    assert payloads[0]["query"] == "AI in VR"


# ============================================================
# Normalization and filtering
# ============================================================


def test_paper_to_canonical_preserves_identity_fields():
    raw = make_paper(
        "abc123",
        42,
        isOpenAccess=True,
        openAccessPdf={"url": "https://example.org/abc.pdf", "status": "GREEN"},
        publicationTypes=["Review", "JournalArticle"],
    )
    paper = paper_to_canonical(Paper.model_validate(raw))

    assert paper.id == "abc123"
    assert paper.title == "Paper abc123"
    assert paper.cited_by_count == 42
    assert [(a.id, a.display_name) for a in paper.authors] == [("1741101", "Grace Hopper")]
    assert paper.type == "Review"
    assert paper.doi == "10.1000/abc123"
    assert paper.is_open_access is True
    assert paper.open_access_url == "https://example.org/abc.pdf"
    assert paper.key == "semanticscholar:abc123"


def test_paper_without_types_or_year():
    paper = paper_to_canonical(
        Paper.model_validate(make_paper("x", None, publicationTypes=None, year=None, title=""))
    )
    assert paper.type == "paper"
    assert paper.publication_year == 0
    assert paper.cited_by_count is None
    assert paper.title == "Untitled"


def test_publication_type_post_filter_is_case_insensitive():
    papers = [
        make_paper("review-only", 30, publicationTypes=["Review"]),
        make_paper("journal", 30, publicationTypes=["JournalArticle", "Review"]),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response(papers, total=2))

    result = run_search(handler, options=SearchOptions(publication_types=("journal-article",)))

    assert [p.id for p in result.results] == ["journal"]
    # total reflects the provider's unfiltered count, not the filtered page
    assert result.total == 2
    assert result.total > len(result.results)


def test_max_citations_post_filter():
    papers = [make_paper("small", 8), make_paper("huge", 9000)]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response(papers))

    result = run_search(handler, options=SearchOptions(max_citations=100))
    assert [p.id for p in result.results] == ["small"]


def test_results_are_scored_and_sorted_by_relevance():
    papers = [make_paper("low", 3), make_paper("high", 120), make_paper("mid", 25)]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response(papers, total=60))

    result = run_search(handler)
    assert [p.id for p in result.results] == ["high", "mid", "low"]
    assert all(p.relevance_score is not None for p in result.results)
    assert result.total_pages == 3
    assert result.page == 1


def test_sort_by_citations():
    papers = [make_paper("a", 3), make_paper("b", 120), make_paper("c", None)]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response(papers))

    result = run_search(handler, options=SearchOptions(sort_by="citations"))
    assert [p.id for p in result.results] == ["b", "a", "c"]


# ============================================================
# Retry policy
# ============================================================


def test_two_rate_limits_then_success_takes_three_attempts():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) <= 2:
            return httpx.Response(429, json={"error": "Rate limit exceeded."})
        return httpx.Response(200, json=search_response([make_paper("ok", 12)]))

    sleep = SleepRecorder()
    result = run_search(handler, sleep=sleep)

    assert len(attempts) == 3
    assert [p.id for p in result.results] == ["ok"]
    assert sleep.delays == [5.0, 5.0]


def test_persistent_rate_limit_fails_with_last_cause():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(429, json={"error": "Rate limit exceeded."})

    with pytest.raises(SearchFailedError) as exc_info:
        run_search(handler)

    assert len(attempts) == 3
    assert isinstance(exc_info.value.cause, RateLimitError)
    assert exc_info.value.status_code == 429
    assert exc_info.value.attempts == 3


def test_server_errors_back_off_linearly_then_fail():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(
            500, json={"error": "Semantic Scholar API error: 500", "details": "boom"}
        )

    sleep = SleepRecorder()
    with pytest.raises(SearchFailedError) as exc_info:
        run_search(handler, sleep=sleep)

    assert len(attempts) == 3
    assert sleep.delays == [1.0, 2.0]
    cause = exc_info.value.cause
    assert isinstance(cause, ProviderHttpError)
    assert cause.status_code == 500
    assert "boom" in cause.body
    assert "Semantic Scholar" in str(exc_info.value)


def test_connection_error_is_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, json=search_response([]))

    sleep = SleepRecorder()
    result = run_search(handler, sleep=sleep)
    assert result.results == []
    assert len(attempts) == 2
    assert sleep.delays == [1.0]


def test_malformed_body_is_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(200, text="not json at all")

    with pytest.raises(MalformedResponseError):
        run_search(handler)
    assert len(attempts) == 1


def test_wrong_shape_is_malformed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"total": 1, "data": [{"title": "no id"}]})

    with pytest.raises(MalformedResponseError):
        run_search(handler)


def test_negative_citation_count_is_malformed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=search_response([make_paper("neg", -2)]))

    with pytest.raises(MalformedResponseError):
        run_search(handler)


def test_zero_max_attempts_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        SemanticScholarAdapter(EMAIL, relay_url=RELAY_URL, max_attempts=0)


def test_cancellation_stops_retries_between_attempts():
    attempts = []
    token = CancellationToken()

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(429, json={"error": "Rate limit exceeded."})

    async def cancelling_sleep(seconds: float) -> None:
        token.cancel()

    with pytest.raises(SearchCancelledError) as exc_info:
        run_search(handler, sleep=cancelling_sleep, cancel_token=token)

    assert len(attempts) == 1
    assert exc_info.value.attempts == 1


def test_contact_email_is_required():
    with pytest.raises(ConfigurationError):
        SemanticScholarAdapter(None)


def test_get_paper_goes_through_relay():
    def handler(request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        assert payload["endpoint"] == "paper/abc"
        return httpx.Response(200, json=make_paper("abc", 60))

    async def _run():
        async with SemanticScholarAdapter(
            EMAIL,
            relay_url=RELAY_URL,
            transport=httpx.MockTransport(handler),
            current_year=CURRENT_YEAR,
        ) as adapter:
            return await adapter.get_paper("abc")

    paper = asyncio.run(_run())
    assert paper.id == "abc"
    assert paper.relevance_score is not None
