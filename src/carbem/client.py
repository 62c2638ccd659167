"""
Client façade for querying carbon emissions across cloud providers.

A CarbemClient is a name-keyed dispatch table over configured provider
adapters. It performs no translation of its own.
"""

import json
import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from .config.settings import get_config
from .models import CarbonEmission, EmissionQuery
from .providers.azure import AzureConfig
from .providers.base import (
    CarbemError,
    CarbonProvider,
    ConfigurationError,
    UnsupportedProviderError,
)
from .providers.ibm import IbmConfig
from .providers.registry import ProviderRegistry
from .utils.http_client import HTTPClient

logger = logging.getLogger(__name__)


class CarbemClient:
    """Main client, always holding at least one configured provider."""

    def __init__(
        self,
        providers: Iterable[CarbonProvider],
        http_client: HTTPClient | None = None,
    ):
        self._providers = list(providers)
        if not self._providers:
            raise ConfigurationError("At least one provider must be configured")
        self._http_client = http_client

    @classmethod
    def builder(cls, http_client: HTTPClient | None = None) -> "CarbemClientBuilder":
        """Create a new builder."""
        return CarbemClientBuilder(http_client=http_client)

    async def query_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        """
        Query emissions from the provider named by the query.

        Args:
            query: Unified emission query

        Returns:
            The provider's emission records, unchanged

        Raises:
            UnsupportedProviderError: If no configured provider matches
        """
        for provider in self._providers:
            if provider.name() == query.provider:
                return await provider.get_emissions(query)
        raise UnsupportedProviderError(query.provider)

    def available_providers(self) -> list[str]:
        """Names of all configured providers, in configuration order."""
        return [provider.name() for provider in self._providers]

    def has_provider(self, name: str) -> bool:
        """Check if a specific provider is configured."""
        return any(provider.name() == name for provider in self._providers)

    def clone(self) -> "CarbemClient":
        """Copy the client, duplicating every adapter rather than aliasing it.

        The copy shares the transport but does not own it: closing a clone
        leaves the original usable.
        """
        return CarbemClient([provider.clone_provider() for provider in self._providers])

    def __copy__(self) -> "CarbemClient":
        return self.clone()

    def __deepcopy__(self, memo: dict) -> "CarbemClient":
        return self.clone()

    async def aclose(self) -> None:
        """Close the shared HTTP transport, if this client owns one, and every adapter."""
        for provider in self._providers:
            await provider.aclose()
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def __aenter__(self) -> "CarbemClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()


class CarbemClientBuilder:
    """Builder collecting provider adapters for a CarbemClient.

    All adapters share one HTTP transport whose timeout comes from settings.
    """

    def __init__(self, http_client: HTTPClient | None = None):
        self._http_client = http_client
        self._providers: list[CarbonProvider] = []

    @property
    def http_client(self) -> HTTPClient:
        if self._http_client is None:
            self._http_client = HTTPClient(timeout=get_config().timeout)
        return self._http_client

    def with_provider(self, name: str, payload: Any) -> "CarbemClientBuilder":
        """Add a provider from an untyped configuration payload."""
        # Validate before the shared transport is created
        config = ProviderRegistry.parse_config(name, payload)
        provider = ProviderRegistry.create_provider(name, config, http_client=self.http_client)
        self._providers.append(provider)
        logger.debug(f"Configured {name} provider")
        return self

    def with_provider_from_json(self, name: str, config_json: str) -> "CarbemClientBuilder":
        """Add a provider from a JSON configuration document."""
        return self.with_provider(name, ProviderRegistry.load_json_config(name, config_json))

    def with_azure(self, config: AzureConfig) -> "CarbemClientBuilder":
        """Add an Azure provider (may be called once per subscription set)."""
        return self.with_provider("azure", config)

    def with_ibm(self, config: IbmConfig) -> "CarbemClientBuilder":
        """Add an IBM Cloud provider."""
        return self.with_provider("ibm", config)

    def with_azure_from_env(self) -> "CarbemClientBuilder":
        """Add an Azure provider using AZURE_TOKEN / CARBEM_AZURE_ACCESS_TOKEN."""
        return self.with_provider("azure", get_config().azure_from_env())

    def with_ibm_from_env(self) -> "CarbemClientBuilder":
        """Add an IBM provider using IBM_API_KEY / IBM_ACCOUNT_ID (or CARBEM_ prefixed)."""
        return self.with_provider("ibm", get_config().ibm_from_env())

    def with_configured_providers(self) -> "CarbemClientBuilder":
        """Add every provider enabled in the settings files."""
        config = get_config()
        for name in config.enabled_providers:
            self.with_provider(name, config.get_provider_config(name))
        return self

    def build(self) -> CarbemClient:
        """Build the client. Fails if no provider was added."""
        if not self._providers:
            raise ConfigurationError(
                "At least one provider must be configured before building the client"
            )
        return CarbemClient(self._providers, http_client=self._http_client)

    async def aclose(self) -> None:
        """Close the transport of a builder whose client was never built."""
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()


async def get_emissions(
    provider: str, config_json: str, query_json: str
) -> list[CarbonEmission]:
    """
    One-shot JSON entry point.

    Args:
        provider: Provider name
        config_json: Provider credentials as JSON
        query_json: EmissionQuery as JSON

    Returns:
        Normalized emission records
    """
    try:
        query = EmissionQuery.model_validate_json(query_json)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid query: {e}") from e

    builder = CarbemClient.builder()
    try:
        client = builder.with_provider_from_json(provider, config_json).build()
    except CarbemError:
        await builder.aclose()
        raise

    async with client:
        return await client.query_emissions(query)


def emissions_to_json(emissions: list[CarbonEmission]) -> str:
    """Serialize emission records to a JSON array."""
    return json.dumps([emission.to_dict() for emission in emissions], indent=2)
