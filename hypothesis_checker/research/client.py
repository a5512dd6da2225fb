"""Provider selection for research search clients."""

import logging
from typing import Any, Literal

from ..errors import ConfigurationError
from ..openalex.adapters import OpenAlexAdapter
from ..protocols import ResearchClient
from ..semantic_scholar.adapters import SemanticScholarAdapter

logger = logging.getLogger(__name__)

PROVIDERS = {
    "openalex": OpenAlexAdapter,
    "semanticscholar": SemanticScholarAdapter,
}


def create_research_client(
    provider: Literal["openalex", "semanticscholar"] | str,
    contact_email: str | None,
    **adapter_options: Any,
) -> ResearchClient:
    """Create the adapter for ``provider``.

    Errors raised by the returned client are passed through untouched.

    Args:
        provider: "openalex" or "semanticscholar"
        contact_email: Email identifying the caller to the provider
        **adapter_options: Forwarded to the adapter (transport, relay_url, ...)

    Returns:
        Client implementing ResearchClient; use it as an async context manager

    Raises:
        ConfigurationError: Unknown provider or missing contact email

    Example:
        async with create_research_client("openalex", "me@example.com") as client:
            page = await client.search_by_hypothesis("sleep improves memory")
    """
    if not contact_email:
        raise ConfigurationError("Email is required for API identification")

    adapter_class = PROVIDERS.get(provider)
    if adapter_class is None:
        raise ConfigurationError(
            f"Unsupported provider: {provider!r}. Must be one of: {', '.join(PROVIDERS)}"
        )

    logger.debug(f"Creating {adapter_class.__name__} for {contact_email}")
    return adapter_class(contact_email, **adapter_options)
