"""Configuration system for providers, relay and mailer."""

from .loader import (
    load_config,
    load_config_from_env,
    load_config_from_yaml,
    ConfigFile,
    EmailConfig,
    OpenAlexConfig,
    ProfileConfig,
    RelayConfig,
    SemanticScholarConfig,
)
from .factory import (
    create_client_from_profile,
    create_relay_app_from_profile,
    create_summary_sender,
)

__all__ = [
    # Loader
    "load_config",
    "load_config_from_env",
    "load_config_from_yaml",
    "ConfigFile",
    "EmailConfig",
    "OpenAlexConfig",
    "ProfileConfig",
    "RelayConfig",
    "SemanticScholarConfig",
    # Factory
    "create_client_from_profile",
    "create_relay_app_from_profile",
    "create_summary_sender",
]
