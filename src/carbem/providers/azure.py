"""
Azure carbon emission provider implementation.

Uses the Azure Carbon Optimization reports API
(``Microsoft.Carbon/carbonEmissionReports``). Azure reports emissions in
kgCO2e at month granularity, so only the date range needs normalizing.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from ..models import CarbonEmission, EmissionMetadata, EmissionQuery, TimePeriod, month_period
from ..query_config import AzureQueryConfig
from ..utils.http_client import HTTPClient
from .base import APIError, CarbonProvider, ConfigurationError, SerializationError
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

AZURE_MANAGEMENT_URL = "https://management.azure.com"
AZURE_CARBON_API_VERSION = "2025-04-01"

AZURE_REGIONS = [
    "eastus",
    "eastus2",
    "westus",
    "westus2",
    "centralus",
    "northeurope",
    "westeurope",
    "uksouth",
    "francecentral",
    "germanywestcentral",
    "swedencentral",
    "japaneast",
    "australiaeast",
    "southeastasia",
    "brazilsouth",
    "canadacentral",
]

# Response fields kept verbatim in provider_data when present
PASSTHROUGH_FIELDS = (
    "dataType",
    "previousMonthEmissions",
    "monthOverMonthEmissionsChangeRatio",
    "monthlyEmissionsChangeValue",
    "itemName",
    "categoryType",
    "subscriptionId",
    "resourceGroup",
    "resourceId",
)


class AzureConfig(BaseModel):
    """Credentials for the Azure provider."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    base_url: str = AZURE_MANAGEMENT_URL


class AzureEmissionData(BaseModel):
    """A single report item as returned by Azure."""

    model_config = ConfigDict(extra="allow")

    dataType: str | None = None
    latestMonthEmissions: float
    previousMonthEmissions: float | None = None
    monthOverMonthEmissionsChangeRatio: float | None = None
    monthlyEmissionsChangeValue: float | None = None
    date: str | None = None
    itemName: str | None = None
    categoryType: str | None = None
    location: str | None = None
    resourceType: str | None = None
    subscriptionId: str | None = None
    resourceGroup: str | None = None
    resourceId: str | None = None


class AzureCarbonEmissionResponse(BaseModel):
    value: list[AzureEmissionData]
    skipToken: str | None = None
    subscriptionAccessDecisionList: list[dict[str, Any]] | None = None


class AzureCarbonProvider(CarbonProvider):
    """Azure Carbon Optimization provider."""

    config_model = AzureConfig

    def __init__(self, config: AzureConfig, http_client: HTTPClient | None = None):
        self.config = config
        self.http_client = http_client or HTTPClient()
        self._owns_http_client = http_client is None

    def name(self) -> str:
        return "azure"

    def is_configured(self) -> bool:
        return bool(self.config.access_token)

    async def get_regions(self) -> list[str]:
        return list(AZURE_REGIONS)

    async def aclose(self) -> None:
        """Close the HTTP transport if this adapter created it."""
        if self._owns_http_client and not self.http_client.is_closed:
            await self.http_client.aclose()

    def clone_provider(self) -> "AzureCarbonProvider":
        return AzureCarbonProvider(self.config.model_copy(), http_client=self.http_client)

    def _extract_query_config(self, query: EmissionQuery) -> AzureQueryConfig:
        """Extract and validate the Azure slice of provider_config."""
        azure_config = query.provider_config
        if azure_config is None:
            raise ConfigurationError("provider_config with Azure configuration is required")
        if not isinstance(azure_config, AzureQueryConfig):
            raise ConfigurationError(
                "provider_config must be Azure configuration for Azure provider"
            )
        if not azure_config.subscription_list:
            raise ConfigurationError("subscription_list is required and cannot be empty")
        if not azure_config.carbon_scope_list:
            raise ConfigurationError("carbon_scope_list is required and cannot be empty")
        if azure_config.report_type.requires_category and azure_config.category_type is None:
            raise ConfigurationError(
                f"category_type is required for {azure_config.report_type.value}"
            )
        return azure_config

    def build_date_range(self, time_period: TimePeriod) -> dict[str, str]:
        """
        Build the Azure date range from a time period.

        Azure only accepts the first day of a month, so both bounds widen to
        whole months.
        """
        start = time_period.start.astimezone(timezone.utc)
        end = time_period.end.astimezone(timezone.utc)
        return {
            "start": date(start.year, start.month, 1).isoformat(),
            "end": date(end.year, end.month, 1).isoformat(),
        }

    def build_request_body(self, query: EmissionQuery) -> dict[str, Any]:
        """Convert a unified query into the Azure report request body."""
        azure_config = self._extract_query_config(query)

        body: dict[str, Any] = {
            "reportType": azure_config.report_type.value,
            "subscriptionList": list(azure_config.subscription_list),
            "carbonScopeList": [scope.value for scope in azure_config.carbon_scope_list],
            "dateRange": self.build_date_range(query.time_period),
        }

        if query.regions:
            body["locationList"] = [region.lower() for region in query.regions]
        if query.services:
            body["resourceTypeList"] = list(query.services)
        if azure_config.resource_group_url_list:
            body["resourceGroupUrlList"] = list(azure_config.resource_group_url_list)
        if azure_config.category_type is not None:
            body["categoryType"] = azure_config.category_type.value
        if azure_config.order_by is not None:
            body["orderBy"] = azure_config.order_by
        if azure_config.sort_direction is not None:
            body["sortDirection"] = azure_config.sort_direction.value
        if azure_config.top_items is not None:
            body["topItems"] = azure_config.top_items
        if azure_config.page_size is not None:
            body["pageSize"] = azure_config.page_size
        if azure_config.skip_token is not None:
            body["skipToken"] = azure_config.skip_token

        return body

    def build_endpoint_url(self) -> str:
        return (
            f"{self.config.base_url.rstrip('/')}/providers/Microsoft.Carbon/"
            f"carbonEmissionReports?api-version={AZURE_CARBON_API_VERSION}"
        )

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.access_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def parse_date_to_time_period(self, value: str) -> TimePeriod | None:
        """Parse a "YYYY-MM-DD" report date into its calendar month span."""
        try:
            parsed = datetime.strptime(value[:10], "%Y-%m-%d")
        except ValueError:
            return None
        return month_period(parsed.year, parsed.month)

    def convert_to_carbon_emission(
        self, data: AzureEmissionData, query_time_period: TimePeriod
    ) -> CarbonEmission:
        """Normalize an Azure report item into a CarbonEmission."""
        emission_time_period = None
        if data.date:
            emission_time_period = self.parse_date_to_time_period(data.date)

        region = data.location
        if region is None and data.categoryType == "Location":
            region = data.itemName

        service = data.resourceType
        if service is None and data.categoryType == "ResourceType":
            service = data.itemName

        provider_data = {
            field: getattr(data, field)
            for field in PASSTHROUGH_FIELDS
            if getattr(data, field) is not None
        }

        return CarbonEmission(
            provider=self.name(),
            region=region or "unknown",
            service=service,
            # Azure already reports kgCO2e
            emissions_kg_co2eq=data.latestMonthEmissions,
            time_period=emission_time_period or query_time_period,
            metadata=EmissionMetadata(provider_data=provider_data or None),
        )

    async def get_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        """Retrieve emissions from the Azure carbon emission reports API."""
        body = self.build_request_body(query)

        if query.time_period.is_inverted:
            logger.debug("Azure: inverted time period, returning no emissions")
            return []

        logger.debug(f"Azure: requesting {body['reportType']} for {body['dateRange']}")

        if self.http_client.is_closed:
            raise APIError("Azure API request failed: HTTP client is closed", provider=self.name())

        try:
            response = await self.http_client.post(
                self.build_endpoint_url(), json=body, headers=self.build_headers()
            )
        except httpx.HTTPError as e:
            raise APIError(f"Azure API request failed: {e}", provider=self.name()) from e

        if not response.is_success:
            raise APIError(
                f"Azure API returned error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
                provider=self.name(),
            )

        # ValueError covers both UTF-8 and JSON decode failures
        try:
            azure_response = AzureCarbonEmissionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SerializationError(f"Failed to parse Azure API response: {e}") from e

        if azure_response.skipToken:
            logger.debug("Azure: more results available via skip_token")

        emissions = [
            self.convert_to_carbon_emission(data, query.time_period)
            for data in azure_response.value
        ]
        logger.info(f"Azure: retrieved {len(emissions)} emission records")
        return emissions


# Register the Azure provider with the registry
ProviderRegistry.register_provider("azure", AzureCarbonProvider)
