"""Command-line interface for the hypothesis checker."""

import asyncio
from typing import Annotated

import typer

from .config.loader import load_config, ProfileConfig
from .config.factory import (
    create_client_from_profile,
    create_relay_app_from_profile,
    create_summary_sender,
)
from .errors import HypothesisCheckerError
from .models import PaginatedResult, SearchOptions

app = typer.Typer(
    name="hypothesis-checker",
    help="Search academic papers relevant to a research hypothesis.",
    add_completion=False,
)

VALID_PROVIDERS = ("openalex", "semanticscholar")
VALID_SORT_KEYS = ("relevance", "citations", "year", "title")


def _load_profile(profile: str | None, email: str | None) -> ProfileConfig:
    try:
        config = load_config(profile=profile)
    except HypothesisCheckerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)
    if email:
        config = config.model_copy(update={"contact_email": email})
    return config


@app.command()
def search(
    hypothesis: Annotated[str, typer.Argument(help="Research hypothesis to search for")],
    provider: Annotated[
        str,
        typer.Option("--provider", "-p", help="openalex or semanticscholar (default from profile)"),
    ] = None,
    page: Annotated[int, typer.Option("--page", help="1-based page number")] = 1,
    year_from: Annotated[int, typer.Option("--year-from", help="Earliest publication year")] = None,
    year_to: Annotated[int, typer.Option("--year-to", help="Latest publication year")] = None,
    min_citations: Annotated[
        int, typer.Option("--min-citations", help="Minimum citations (default 5)")
    ] = None,
    max_citations: Annotated[int, typer.Option("--max-citations", help="Maximum citations")] = None,
    publication_types: Annotated[
        list[str],
        typer.Option("--type", "-t", help="Publication type to allow (repeatable)"),
    ] = None,
    open_access: Annotated[
        bool, typer.Option("--open-access", help="Only open access papers")
    ] = False,
    sort_by: Annotated[
        str, typer.Option("--sort", help="relevance, citations, year or title")
    ] = "relevance",
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
    profile: Annotated[str, typer.Option("--profile", help="Configuration profile")] = None,
    email: Annotated[str, typer.Option("--email", help="Contact email override")] = None,
):
    """
    Search papers relevant to a hypothesis.

    Examples:

        hypothesis-checker search "mindfulness meditation reduces anxiety"

        hypothesis-checker search "sleep improves memory" -p semanticscholar -t JournalArticle

        hypothesis-checker search "exercise and depression" --year-from 2018 --sort citations
    """
    if provider is not None and provider not in VALID_PROVIDERS:
        typer.echo(f"Error: Invalid provider '{provider}'. Must be one of: {VALID_PROVIDERS}", err=True)
        raise typer.Exit(1)
    if sort_by not in VALID_SORT_KEYS:
        typer.echo(f"Error: Sort must be one of: {', '.join(VALID_SORT_KEYS)}", err=True)
        raise typer.Exit(1)

    config = _load_profile(profile, email)
    options = SearchOptions(
        year_from=year_from,
        year_to=year_to,
        min_citations=min_citations,
        max_citations=max_citations,
        publication_types=tuple(publication_types or ()),
        open_access_only=open_access,
        sort_by=sort_by,
    )

    try:
        result = asyncio.run(_search_async(config, provider, hypothesis, page, options))
    except HypothesisCheckerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if output_format == "json":
        typer.echo(result.model_dump_json(indent=2))
        return

    if not result.results:
        typer.echo("No papers found.")
        return

    typer.echo(f"Page {result.page} of {result.total_pages} ({result.total} papers):\n")
    for i, p in enumerate(result.results, 1):
        typer.echo(f"{i}. {p.title}")
        typer.echo(
            f"   Year: {p.publication_year or 'N/A'} | Citations: "
            f"{'N/A' if p.cited_by_count is None else p.cited_by_count} | "
            f"Score: {p.relevance_score:.2f}"
        )
        if p.authors:
            authors = ", ".join(a.display_name or "Unknown" for a in p.authors[:3])
            if len(p.authors) > 3:
                authors += " et al."
            typer.echo(f"   Authors: {authors}")
        typer.echo(f"   Key: {p.key}")
        typer.echo()


async def _search_async(
    config: ProfileConfig,
    provider: str | None,
    hypothesis: str,
    page: int,
    options: SearchOptions,
) -> PaginatedResult:
    """Async implementation of search."""
    async with create_client_from_profile(config, provider=provider) as client:
        return await client.search_by_hypothesis(hypothesis, page, options)


@app.command("send-summary")
def send_summary(
    paper_key: Annotated[
        str, typer.Argument(help="Paper key as printed by search, e.g. openalex:W2741809807")
    ],
    to: Annotated[str, typer.Option("--to", help="Destination email address")],
    profile: Annotated[str, typer.Option("--profile", help="Configuration profile")] = None,
    email: Annotated[str, typer.Option("--email", help="Contact email override")] = None,
):
    """Email a paper's summary."""
    provider, _, paper_id = paper_key.partition(":")
    if provider not in VALID_PROVIDERS or not paper_id:
        typer.echo("Error: Paper key must look like '<provider>:<id>'", err=True)
        raise typer.Exit(1)

    config = _load_profile(profile, email)

    async def _send():
        async with create_client_from_profile(config, provider=provider) as client:
            paper = await client.get_paper(paper_id)
        sender = create_summary_sender(config.email, config.contact_email)
        return await sender.send(paper, to)

    try:
        result = asyncio.run(_send())
    except HypothesisCheckerError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not result.success:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)
    typer.echo("Email sent successfully")
    if result.note:
        typer.echo(f"Note: {result.note}")


@app.command("serve-relay")
def serve_relay(
    host: Annotated[str, typer.Option("--host", help="Bind address (default from profile)")] = None,
    port: Annotated[int, typer.Option("--port", help="Port (default from profile)")] = None,
    profile: Annotated[str, typer.Option("--profile", help="Configuration profile")] = None,
):
    """Run the Semantic Scholar relay and summary endpoint."""
    import uvicorn

    config = _load_profile(profile, None)
    relay_app = create_relay_app_from_profile(config)
    uvicorn.run(
        relay_app,
        host=host or config.relay.host,
        port=port or config.relay.port,
    )


@app.command()
def profiles():
    """List available configuration profiles."""
    import yaml

    from .config.loader import DEFAULT_CONFIG_PATH

    with open(DEFAULT_CONFIG_PATH) as f:
        data = yaml.safe_load(f)

    typer.echo("Available profiles:\n")
    for name, profile in data.get("profiles", {}).items():
        typer.echo(f"  {name}")
        typer.echo(f"    Provider: {profile.get('provider', 'openalex')}")
        typer.echo()


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
