"""
Configuration management for the carbon emission client.

Uses dynaconf for flexible configuration with YAML files and environment overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any

from dynaconf import Dynaconf, Validator

from ..providers.base import ConfigurationError

logger = logging.getLogger(__name__)

# Defaults ship inside the package; overrides are read from ./config of the working directory
DEFAULTS_FILE = Path(__file__).parent / "config.yaml"
CONFIG_DIR = Path.cwd() / "config"

ENVVAR_PREFIX = "CARBEM"

# Initialize dynaconf with multiple configuration sources
settings = Dynaconf(
    envvar_prefix=ENVVAR_PREFIX,
    settings_files=[
        str(DEFAULTS_FILE),  # Base configuration
        str(CONFIG_DIR / "config.local.yaml"),  # Local overrides (git-ignored)
        str(CONFIG_DIR / ".secrets.yaml"),  # Secrets file (git-ignored)
    ],
    environments=False,
    load_dotenv=True,
    merge_enabled=True,
    envvar_separator="__",  # Support nested config via CARBEM_HTTP__TIMEOUT=60
    validators=[
        Validator("http.timeout", default=30, gte=1),
        Validator("clouds.azure.access_token", must_exist=True, when=Validator("clouds.azure.enabled", eq=True)),
        Validator("clouds.ibm.api_key", must_exist=True, when=Validator("clouds.ibm.enabled", eq=True)),
    ],
)


def _lookup_env(provider_var: str, library_var: str) -> str | None:
    """Resolve a credential from its provider-prefixed or library-prefixed variable."""
    # Read straight from the environment so values stay verbatim strings
    for var in (provider_var, library_var):
        value = os.environ.get(var)
        if value:
            return value
    return None


def env_credential(provider_var: str, library_var: str) -> str:
    """
    Read a required credential from the environment.

    Args:
        provider_var: Provider-prefixed variable (e.g. IBM_API_KEY)
        library_var: Library-prefixed fallback (e.g. CARBEM_IBM_API_KEY)

    Returns:
        Credential value

    Raises:
        ConfigurationError: If neither variable is set
    """
    value = _lookup_env(provider_var, library_var)
    if value is None:
        raise ConfigurationError(
            f"{provider_var} or {library_var} environment variable not set"
        )
    return value


class CarbemConfig:
    """Configuration wrapper for client and provider settings."""

    def __init__(self):
        self.settings = settings
        self._validate_config()

    def _validate_config(self):
        """Validate the configuration on initialization."""
        try:
            settings.validators.validate()
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    @property
    def http(self) -> dict[str, Any]:
        """HTTP transport settings."""
        return self.settings.get("http", {})

    @property
    def timeout(self) -> float:
        return float(self.http.get("timeout", 30))

    @property
    def azure(self) -> dict[str, Any]:
        """Azure configuration settings."""
        return self.settings.get("clouds.azure", {})

    @property
    def ibm(self) -> dict[str, Any]:
        """IBM Cloud configuration settings."""
        return self.settings.get("clouds.ibm", {})

    @property
    def enabled_providers(self) -> list[str]:
        """List of providers enabled in the settings files."""
        clouds = self.settings.get("clouds", {})
        return [name for name, cfg in clouds.items() if cfg.get("enabled", False)]

    def get_provider_config(self, provider: str) -> dict[str, Any]:
        """Get credential configuration for a specific provider, without the enabled flag."""
        provider_config = dict(self.settings.get(f"clouds.{provider}", {}))
        provider_config.pop("enabled", None)
        return provider_config

    def azure_from_env(self) -> dict[str, Any]:
        """Azure credentials discovered from the environment."""
        return {"access_token": env_credential("AZURE_TOKEN", "CARBEM_AZURE_ACCESS_TOKEN")}

    def ibm_from_env(self) -> dict[str, Any]:
        """IBM Cloud credentials discovered from the environment."""
        return {
            "api_key": env_credential("IBM_API_KEY", "CARBEM_IBM_API_KEY"),
            "enterprise_id": env_credential("IBM_ACCOUNT_ID", "CARBEM_IBM_ACCOUNT_ID"),
        }


# Global configuration instance
config = None


def get_config() -> CarbemConfig:
    """Get the global configuration instance."""
    global config
    if config is None:
        config = CarbemConfig()
    return config


def reload_config() -> CarbemConfig:
    """Reload configuration from files and the environment."""
    global config
    settings.reload()
    config = CarbemConfig()
    return config
