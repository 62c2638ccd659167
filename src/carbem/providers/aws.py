"""
AWS carbon emission provider stub.

AWS exposes carbon data only through the Customer Carbon Footprint Tool
console, so this adapter validates its credentials but cannot yet retrieve
emissions.
"""

from pydantic import BaseModel, ConfigDict

from ..models import CarbonEmission, EmissionQuery
from ..utils.http_client import HTTPClient
from .base import CarbonProvider, UnsupportedProviderError
from .registry import ProviderRegistry


class AwsConfig(BaseModel):
    """Credentials for the AWS provider."""

    model_config = ConfigDict(frozen=True)

    access_key_id: str
    secret_access_key: str
    region: str = "us-east-1"


class AwsCarbonProvider(CarbonProvider):
    """AWS provider placeholder."""

    config_model = AwsConfig

    def __init__(self, config: AwsConfig, http_client: HTTPClient | None = None):
        self.config = config
        self.http_client = http_client

    def name(self) -> str:
        return "aws"

    def is_configured(self) -> bool:
        return bool(self.config.access_key_id and self.config.secret_access_key)

    async def get_regions(self) -> list[str]:
        return [self.config.region]

    def clone_provider(self) -> "AwsCarbonProvider":
        return AwsCarbonProvider(self.config.model_copy(), http_client=self.http_client)

    async def get_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        raise UnsupportedProviderError(
            self.name(), "Carbon emission retrieval is not implemented for aws"
        )


# Register the AWS provider with the registry
ProviderRegistry.register_provider("aws", AwsCarbonProvider)
