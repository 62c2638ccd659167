"""
Abstract base provider class for carbon emission retrieval.

Defines the interface that all cloud provider adapters must follow, and the
error taxonomy shared by the adapters, the registry and the client.
"""

from abc import ABC, abstractmethod

from ..models import CarbonEmission, EmissionQuery


class CarbemError(Exception):
    """Base exception for carbon emission client errors."""

    pass


class ConfigurationError(CarbemError):
    """Missing or invalid credential or query configuration."""

    pass


class UnsupportedProviderError(CarbemError):
    """Unknown provider name at dispatch or registry lookup."""

    def __init__(self, provider: str, message: str | None = None):
        super().__init__(message or f"Unsupported provider: {provider}")
        self.provider = provider


class APIError(CarbemError):
    """Upstream HTTP failure or non-success status."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: str | None = None,
        provider: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.provider = provider


class SerializationError(CarbemError):
    """Response body does not match the expected schema."""

    pass


class CarbonProvider(ABC):
    """Contract every carbon emission provider adapter implements."""

    @abstractmethod
    def name(self) -> str:
        """Return the stable, lowercase provider identifier (azure, ibm, ...)."""
        pass

    @abstractmethod
    def is_configured(self) -> bool:
        """
        Check whether all credential fields required to authenticate are set.

        Must not perform network I/O.
        """
        pass

    @abstractmethod
    async def get_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        """
        Retrieve carbon emissions matching the query.

        Args:
            query: Unified emission query addressed to this provider

        Returns:
            Normalized emission records

        Raises:
            ConfigurationError: If provider_config is missing or invalid
            APIError: If the HTTP call fails or returns a non-success status
            SerializationError: If the response does not match the expected schema
        """
        pass

    @abstractmethod
    async def get_regions(self) -> list[str]:
        """
        Get list of regions known to this provider.

        Returns:
            List of region identifiers
        """
        pass

    @abstractmethod
    def clone_provider(self) -> "CarbonProvider":
        """Return a configuration-preserving duplicate of this adapter."""
        pass

    async def aclose(self) -> None:
        """Release resources the adapter created for itself. Shared transports are left open."""
        pass
