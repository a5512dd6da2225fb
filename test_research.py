"""Tests for the provider facade and the search session guard."""

import asyncio

import httpx
import pytest

from hypothesis_checker import (
    CancellationToken,
    ConfigurationError,
    PaginatedResult,
    ProviderHttpError,
    ResearchClient,
    SearchSession,
    create_research_client,
)
from hypothesis_checker.openalex import OpenAlexAdapter
from hypothesis_checker.semantic_scholar import SemanticScholarAdapter

EMAIL = "researcher@example.com"


# ============================================================
# Facade
# ============================================================


def test_creates_each_provider():
    openalex = create_research_client("openalex", EMAIL)
    semantic = create_research_client("semanticscholar", EMAIL)

    assert isinstance(openalex, OpenAlexAdapter)
    assert isinstance(semantic, SemanticScholarAdapter)
    assert isinstance(openalex, ResearchClient)
    assert isinstance(semantic, ResearchClient)


def test_unknown_provider_is_configuration_error():
    with pytest.raises(ConfigurationError):
        create_research_client("pubmed", EMAIL)


@pytest.mark.parametrize("email", [None, ""])
def test_missing_contact_email_is_configuration_error(email):
    with pytest.raises(ConfigurationError):
        create_research_client("openalex", email)


def test_facade_passes_adapter_errors_through():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    async def _run():
        async with create_research_client(
            "openalex", EMAIL, transport=httpx.MockTransport(handler)
        ) as client:
            await client.search_by_hypothesis("anything")

    with pytest.raises(ProviderHttpError) as exc_info:
        asyncio.run(_run())
    assert exc_info.value.status_code == 404


# ============================================================
# Search session
# ============================================================


class GatedClient:
    """Fake client whose searches finish only when their gate opens."""

    def __init__(self):
        self.gates: dict[str, asyncio.Event] = {}
        self.tokens: dict[str, CancellationToken] = {}
        self.failures: dict[str, Exception] = {}

    async def search_by_hypothesis(self, hypothesis, page=1, options=None, *, cancel_token=None):
        self.tokens[hypothesis] = cancel_token
        gate = self.gates.setdefault(hypothesis, asyncio.Event())
        await gate.wait()
        if hypothesis in self.failures:
            raise self.failures[hypothesis]
        return PaginatedResult(total=len(hypothesis), page=page, total_pages=1)

    async def get_paper(self, paper_id):
        raise NotImplementedError


def test_stale_response_is_discarded():
    async def _run():
        client = GatedClient()
        session = SearchSession(client)

        first = asyncio.create_task(session.search("first"))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.search("second!"))
        await asyncio.sleep(0)

        client.gates["second!"].set()
        newest = await second
        client.gates["first"].set()
        stale = await first
        return client, session, newest, stale

    client, session, newest, stale = asyncio.run(_run())

    assert stale is None
    assert newest is not None and newest.total == len("second!")
    assert session.latest is newest
    assert session.generation == 2
    assert client.tokens["first"].cancelled
    assert not client.tokens["second!"].cancelled


def test_error_from_superseded_search_is_discarded():
    async def _run():
        client = GatedClient()
        client.failures["first"] = ProviderHttpError("OpenAlex", 500, "boom")
        session = SearchSession(client)

        first = asyncio.create_task(session.search("first"))
        await asyncio.sleep(0)
        second = asyncio.create_task(session.search("second"))
        await asyncio.sleep(0)

        client.gates["first"].set()
        client.gates["second"].set()
        return await first, await second

    stale, newest = asyncio.run(_run())
    assert stale is None
    assert newest is not None


def test_error_from_latest_search_propagates():
    async def _run():
        client = GatedClient()
        client.failures["only"] = ProviderHttpError("OpenAlex", 500, "boom")
        client.gates["only"] = asyncio.Event()
        client.gates["only"].set()
        await SearchSession(client).search("only")

    with pytest.raises(ProviderHttpError):
        asyncio.run(_run())
