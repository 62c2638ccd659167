"""
Google Cloud Platform (GCP) carbon emission provider stub.

GCP publishes Carbon Footprint data as a BigQuery export rather than a REST
endpoint; this adapter validates its configuration but cannot yet retrieve
emissions.
"""

from pydantic import BaseModel, ConfigDict

from ..models import CarbonEmission, EmissionQuery
from ..utils.http_client import HTTPClient
from .base import CarbonProvider, UnsupportedProviderError
from .registry import ProviderRegistry


class GcpConfig(BaseModel):
    """Credentials for the GCP provider."""

    model_config = ConfigDict(frozen=True)

    project_id: str
    credentials_path: str | None = None


class GcpCarbonProvider(CarbonProvider):
    """GCP provider placeholder."""

    config_model = GcpConfig

    def __init__(self, config: GcpConfig, http_client: HTTPClient | None = None):
        self.config = config
        self.http_client = http_client

    def name(self) -> str:
        return "gcp"

    def is_configured(self) -> bool:
        return bool(self.config.project_id)

    async def get_regions(self) -> list[str]:
        return []

    def clone_provider(self) -> "GcpCarbonProvider":
        return GcpCarbonProvider(self.config.model_copy(), http_client=self.http_client)

    async def get_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        raise UnsupportedProviderError(
            self.name(), "Carbon emission retrieval is not implemented for gcp"
        )


# Register the GCP provider with the registry
ProviderRegistry.register_provider("gcp", GcpCarbonProvider)
