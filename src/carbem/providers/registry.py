"""
Registry mapping provider names to adapter classes.

Supports dynamic, config-driven construction: a provider name plus an untyped
configuration payload (dict, JSON string or model) produces a ready adapter.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ValidationError

from ..utils.http_client import HTTPClient
from .base import CarbonProvider, ConfigurationError, UnsupportedProviderError

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Factory class for creating carbon provider instances."""

    _providers: dict[str, type[CarbonProvider]] = {}

    @classmethod
    def register_provider(cls, name: str, provider_class: type[CarbonProvider]):
        """Register a provider class with the registry.

        The class must expose a ``config_model`` pydantic model describing its
        credentials and accept ``(config, http_client=None)`` in its constructor.
        """
        cls._providers[name.lower()] = provider_class

    @classmethod
    def parse_config(cls, name: str, payload: Any) -> BaseModel:
        """
        Deserialize an untyped payload into the provider's credential model.

        Args:
            name: Provider name (azure, ibm, ...)
            payload: Mapping, JSON string or already typed configuration

        Returns:
            Strongly typed provider configuration

        Raises:
            UnsupportedProviderError: If the provider is not registered
            ConfigurationError: If the payload does not match the expected shape
        """
        provider_class = cls._get_provider_class(name)
        config_model = provider_class.config_model

        try:
            if isinstance(payload, config_model):
                return payload
            if isinstance(payload, BaseModel):
                payload = payload.model_dump()
            if isinstance(payload, (str, bytes)):
                return config_model.model_validate_json(payload)
            return config_model.model_validate(payload)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid {name} configuration: {e}") from e

    @classmethod
    def create_provider(
        cls, name: str, payload: Any, http_client: HTTPClient | None = None
    ) -> CarbonProvider:
        """
        Create a provider instance.

        Args:
            name: Provider name (azure, ibm, aws, gcp)
            payload: Untyped provider configuration
            http_client: Optional shared transport

        Returns:
            Provider instance

        Raises:
            UnsupportedProviderError: If provider not found
            ConfigurationError: If the configuration is invalid
        """
        config = cls.parse_config(name, payload)
        provider_class = cls._get_provider_class(name)
        logger.debug(f"Creating {name} provider")
        return provider_class(config, http_client=http_client)

    @classmethod
    def create_provider_from_json(
        cls, name: str, config_json: str, http_client: HTTPClient | None = None
    ) -> CarbonProvider:
        """Create a provider from a JSON document."""
        return cls.create_provider(
            name, cls.load_json_config(name, config_json), http_client=http_client
        )

    @classmethod
    def load_json_config(cls, name: str, config_json: str) -> BaseModel:
        """Parse a JSON document into the provider's credential model."""
        try:
            payload = json.loads(config_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON config: {e}") from e
        return cls.parse_config(name, payload)

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of registered provider names."""
        return list(cls._providers.keys())

    @classmethod
    def _get_provider_class(cls, name: str) -> type[CarbonProvider]:
        provider_class = cls._providers.get(name.lower())
        if provider_class is None:
            raise UnsupportedProviderError(
                name,
                f"Unknown provider '{name}'. Available providers: "
                f"{', '.join(cls._providers.keys())}",
            )
        return provider_class
