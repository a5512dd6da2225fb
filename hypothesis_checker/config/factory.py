"""Factory functions to create components from configuration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fastapi import FastAPI

    from ..notify.email import SummarySender
    from ..protocols import ResearchClient
    from .loader import EmailConfig, ProfileConfig


def create_client_from_profile(
    profile: ProfileConfig,
    provider: str | None = None,
    **overrides: Any,
) -> ResearchClient:
    """Create the research client selected by a profile.

    Args:
        profile: Loaded configuration profile
        provider: Overrides ``profile.provider`` when given
        **overrides: Extra adapter arguments (transport, current_year, ...)

    Returns:
        OpenAlexAdapter or SemanticScholarAdapter
    """
    from ..research.client import create_research_client

    provider = provider or profile.provider
    if provider == "semanticscholar":
        ss = profile.semantic_scholar
        options: dict[str, Any] = {
            "relay_url": ss.relay_url,
            "max_attempts": ss.max_attempts,
            "rate_limit_delay": ss.rate_limit_delay,
            "backoff_unit": ss.backoff_unit,
            "timeout": ss.timeout,
        }
    elif provider == "openalex":
        options = {
            "base_url": profile.openalex.base_url,
            "timeout": profile.openalex.timeout,
        }
    else:
        options = {}

    options.update(overrides)
    return create_research_client(provider, profile.contact_email, **options)


def create_summary_sender(
    config: EmailConfig,
    contact_email: str | None = None,
    **overrides: Any,
) -> SummarySender:
    """Create the summary mailer.

    Args:
        config: Email configuration
        contact_email: Fallback verified address when the config names none

    Returns:
        SummarySender instance
    """
    from ..notify.email import SummarySender

    return SummarySender(
        api_key=config.api_key,
        verified_address=config.verified_address or contact_email,
        sender=config.sender,
        **overrides,
    )


def create_relay_app_from_profile(profile: ProfileConfig, **overrides: Any) -> FastAPI:
    """Create the relay app, wiring in the summary mailer."""
    from ..relay.app import create_relay_app

    return create_relay_app(
        contact_email=profile.contact_email,
        api_key=profile.relay.api_key,
        upstream_base_url=profile.relay.upstream_base_url,
        summary_sender=create_summary_sender(profile.email, profile.contact_email),
        **overrides,
    )
