"""Configuration loading for the carbon emission client."""

from .settings import CarbemConfig, env_credential, get_config, reload_config
