"""Configuration loader with Pydantic validation and env var expansion."""

import logging
import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .. import settings
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "profiles.yaml"
DEFAULT_PROFILE = "dev"


class OpenAlexConfig(BaseModel):
    """Configuration for the OpenAlex adapter."""

    base_url: str = settings.OPENALEX_BASE_URL
    timeout: float = settings.REQUEST_TIMEOUT


class SemanticScholarConfig(BaseModel):
    """Configuration for the Semantic Scholar adapter and its retry policy."""

    relay_url: str = settings.RELAY_URL
    max_attempts: int = Field(settings.MAX_ATTEMPTS, ge=1)
    rate_limit_delay: float = settings.RATE_LIMIT_RETRY_DELAY
    backoff_unit: float = settings.RETRY_BACKOFF_UNIT
    timeout: float = settings.REQUEST_TIMEOUT


class RelayConfig(BaseModel):
    """Configuration for the relay server."""

    host: str = "127.0.0.1"
    port: int = 8000
    upstream_base_url: str = settings.SEMANTIC_SCHOLAR_BASE_URL
    api_key: str | None = None


class EmailConfig(BaseModel):
    """Configuration for the summary mailer."""

    api_key: str | None = None
    verified_address: str | None = None  # defaults to the contact email
    sender: str = settings.EMAIL_SENDER


class ProfileConfig(BaseModel):
    """Configuration profile containing every component config."""

    provider: Literal["openalex", "semanticscholar"] = "openalex"
    contact_email: str | None = None
    openalex: OpenAlexConfig = OpenAlexConfig()
    semantic_scholar: SemanticScholarConfig = SemanticScholarConfig()
    relay: RelayConfig = RelayConfig()
    email: EmailConfig = EmailConfig()


class ConfigFile(BaseModel):
    """Root configuration file structure."""

    profiles: dict[str, ProfileConfig]


def expand_env_vars(value: str) -> str:
    """Expand ${VAR} references in a string with environment variables.

    Unset variables are left as written.
    """
    if not isinstance(value, str):
        return value

    pattern = r"\$\{([^}]+)\}"

    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))

    return re.sub(pattern, replacer, value)


def _drop_unresolved(value):
    if isinstance(value, str) and re.fullmatch(r"\$\{[^}]+\}", value):
        return None
    return value


def expand_env_vars_recursive(data):
    """Recursively expand env vars in nested dict/list structures.

    A value that is only an unset ``${VAR}`` is dropped so the model
    default applies.
    """
    if isinstance(data, dict):
        expanded = {k: expand_env_vars_recursive(v) for k, v in data.items()}
        return {k: v for k, v in expanded.items() if v is not None}
    elif isinstance(data, list):
        return [expand_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return _drop_unresolved(expand_env_vars(data))
    else:
        return data


def load_config_from_yaml(config_path: Path, profile_name: str) -> ProfileConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config YAML file
        profile_name: Name of profile to load

    Returns:
        ProfileConfig for the requested profile

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config is invalid
        KeyError: If profile doesn't exist
    """
    with open(config_path) as f:
        raw_data = yaml.safe_load(f)

    expanded_data = expand_env_vars_recursive(raw_data)
    config_file = ConfigFile(**expanded_data)

    if profile_name not in config_file.profiles:
        available = ", ".join(config_file.profiles.keys())
        raise KeyError(
            f"Profile '{profile_name}' not found. " f"Available profiles: {available}"
        )

    return config_file.profiles[profile_name]


def load_config_from_env() -> ProfileConfig:
    """Load configuration from environment variables (fallback mode)."""
    provider = os.environ.get("HC_PROVIDER", "openalex")
    if provider not in ("openalex", "semanticscholar"):
        raise ConfigurationError(f"Unsupported provider in HC_PROVIDER: {provider!r}")

    return ProfileConfig(
        provider=provider,
        contact_email=settings.CONTACT_EMAIL,
        semantic_scholar=SemanticScholarConfig(relay_url=settings.RELAY_URL),
        relay=RelayConfig(api_key=settings.SEMANTIC_SCHOLAR_API_KEY),
        email=EmailConfig(api_key=settings.RESEND_API_KEY),
    )


def load_config(
    profile: str | None = None,
    config_path: Path | None = None,
) -> ProfileConfig:
    """Load configuration from the YAML profiles file or environment variables.

    A missing or invalid file falls back to environment variables.

    Args:
        profile: Profile name to load. If None, uses HC_PROFILE env var
                or "dev" as default.
        config_path: Path to config file. If None, uses the bundled
                    hypothesis_checker/config/profiles.yaml.

    Returns:
        ProfileConfig with all component configurations

    Raises:
        ConfigurationError: If the requested profile is not in the file
    """
    if profile is None:
        profile = os.environ.get("HC_PROFILE", DEFAULT_PROFILE)

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        logger.info(f"Config file {config_path} not found, using environment variables")
        return load_config_from_env()

    try:
        return load_config_from_yaml(config_path, profile)
    except KeyError as e:
        raise ConfigurationError(str(e.args[0])) from e
    except (ValidationError, yaml.YAMLError, TypeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        logger.warning("Falling back to environment variables...")
        return load_config_from_env()
