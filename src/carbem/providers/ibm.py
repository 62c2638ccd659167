"""
IBM Cloud carbon emission provider implementation.

Queries the IBM Cloud Carbon Calculator API and normalizes its monthly
emission data points (grams CO2e, Wh) into unified kg / kWh records.
"""

import logging
from datetime import datetime, timezone
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..models import CarbonEmission, EmissionMetadata, EmissionQuery, TimePeriod, month_period
from ..query_config import IbmQueryConfig
from ..utils.http_client import HTTPClient
from .base import APIError, CarbonProvider, ConfigurationError, SerializationError
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)

IBM_CARBON_API_BASE_URL = "https://api.carbon-calculator.cloud.ibm.com"
IBM_API_VERSION = "v1"

IBM_REGIONS = [
    "Dallas",
    "Washington DC",
    "Toronto",
    "Sao Paulo",
    "London",
    "Frankfurt",
    "Madrid",
    "Paris",
    "Tokyo",
    "Osaka",
    "Sydney",
    "Chennai",
]


class IbmConfig(BaseModel):
    """Credentials for the IBM Cloud provider."""

    model_config = ConfigDict(frozen=True)

    api_key: str
    # Informational account identity; queries must still carry IbmQueryConfig
    enterprise_id: str | None = None
    base_url: str = IBM_CARBON_API_BASE_URL


class IbmCarbonEmissionRequest(BaseModel):
    """Query parameters for GET /v1/carbon_emissions."""

    enterprise_id: str
    # Examples: "gte:2023-01", "lte:2023-03"
    month: list[str] | None = None
    locations: list[str] | None = None
    services: list[str] | None = None
    enterprise_account_id: str | None = None
    group_by: str | None = None
    limit: int | None = None
    offset: int | None = None


class IbmMonthInfo(BaseModel):
    value: str
    min: str | None = None
    max: str | None = None


class IbmGroupByInfo(BaseModel):
    group_type: str = Field(alias="type")
    value: str


class IbmEmissionData(BaseModel):
    """A single emission data point as returned by IBM."""

    account_id: str
    # grams CO2e
    carbon_emission: float
    # Wh
    energy_consumption: float
    month: IbmMonthInfo
    group_by: IbmGroupByInfo | None = None
    location: str | None = None
    service: str | None = None


class IbmPaginationLink(BaseModel):
    href: str


class IbmCarbonEmissionResponse(BaseModel):
    carbon_emissions: list[IbmEmissionData]
    total_emission: float | None = None
    offset: int | None = None
    limit: int | None = None
    total_count: int | None = None
    first: IbmPaginationLink | None = None
    last: IbmPaginationLink | None = None
    previous: IbmPaginationLink | None = None
    next: IbmPaginationLink | None = None


class IbmCarbonProvider(CarbonProvider):
    """IBM Cloud Carbon Calculator provider."""

    config_model = IbmConfig

    def __init__(self, config: IbmConfig, http_client: HTTPClient | None = None):
        self.config = config
        self.http_client = http_client or HTTPClient()
        self._owns_http_client = http_client is None

    def name(self) -> str:
        return "ibm"

    def is_configured(self) -> bool:
        return bool(self.config.api_key)

    async def get_regions(self) -> list[str]:
        return list(IBM_REGIONS)

    async def aclose(self) -> None:
        """Close the HTTP transport if this adapter created it."""
        if self._owns_http_client and not self.http_client.is_closed:
            await self.http_client.aclose()

    def clone_provider(self) -> "IbmCarbonProvider":
        return IbmCarbonProvider(self.config.model_copy(), http_client=self.http_client)

    def _extract_query_config(self, query: EmissionQuery) -> IbmQueryConfig:
        """Extract and validate the IBM slice of provider_config."""
        ibm_config = query.provider_config
        if ibm_config is None:
            raise ConfigurationError("provider_config with IBM configuration is required")
        if not isinstance(ibm_config, IbmQueryConfig):
            raise ConfigurationError(
                "provider_config must be IBM configuration for IBM provider"
            )
        if not ibm_config.enterprise_id:
            raise ConfigurationError("enterprise_id is required and cannot be empty")
        return ibm_config

    def build_month_filters(self, time_period: TimePeriod) -> list[str]:
        """
        Build month filters from a time period.

        IBM only filters by month, so sub-month ranges widen to whole months.
        """
        return [
            f"gte:{time_period.start.astimezone(timezone.utc).strftime('%Y-%m')}",
            f"lte:{time_period.end.astimezone(timezone.utc).strftime('%Y-%m')}",
        ]

    def convert_emission_query_to_ibm_request(
        self, query: EmissionQuery
    ) -> IbmCarbonEmissionRequest:
        """Convert a unified query into IBM request parameters."""
        ibm_config = self._extract_query_config(query)

        return IbmCarbonEmissionRequest(
            enterprise_id=ibm_config.enterprise_id,
            month=self.build_month_filters(query.time_period),
            locations=list(query.regions) or None,
            services=list(query.services) if query.services else None,
            enterprise_account_id=ibm_config.enterprise_account_id,
            group_by=ibm_config.group_by.value if ibm_config.group_by else None,
            limit=ibm_config.limit,
            offset=ibm_config.offset,
        )

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Accept": "application/json",
        }

    def build_endpoint_url(self, request: IbmCarbonEmissionRequest) -> str:
        """Build the API endpoint URL with percent-encoded query parameters."""
        base_url = f"{self.config.base_url.rstrip('/')}/{IBM_API_VERSION}/carbon_emissions"

        params = [f"enterprise_id={quote(request.enterprise_id, safe='')}"]

        for month in request.month or []:
            params.append(f"month={quote(month, safe='')}")

        # Lists are sent comma-separated in a single parameter
        if request.locations:
            params.append(f"locations={quote(', '.join(request.locations), safe='')}")
        if request.services:
            params.append(f"services={quote(', '.join(request.services), safe='')}")

        if request.enterprise_account_id is not None:
            params.append(
                f"enterprise_account_id={quote(request.enterprise_account_id, safe='')}"
            )
        if request.group_by is not None:
            params.append(f"group_by={request.group_by}")
        if request.limit is not None:
            params.append(f"limit={request.limit}")
        if request.offset is not None:
            params.append(f"offset={request.offset}")

        return f"{base_url}?{'&'.join(params)}"

    def parse_month_to_time_period(self, month: str) -> TimePeriod | None:
        """Parse a "YYYY-MM" marker into its calendar month span."""
        try:
            parsed = datetime.strptime(month, "%Y-%m")
        except ValueError:
            return None
        return month_period(parsed.year, parsed.month)

    def convert_to_carbon_emission(
        self, data: IbmEmissionData, query_time_period: TimePeriod
    ) -> CarbonEmission:
        """Normalize an IBM data point into a CarbonEmission."""
        emission_time_period = (
            self.parse_month_to_time_period(data.month.value) or query_time_period
        )

        provider_data = {"account_id": data.account_id}
        if data.group_by is not None:
            provider_data["group_by_type"] = data.group_by.group_type
            provider_data["group_by_value"] = data.group_by.value

        region = data.location
        if region is None and data.group_by and data.group_by.group_type == "location":
            region = data.group_by.value

        service = data.service
        if service is None and data.group_by and data.group_by.group_type == "service":
            service = data.group_by.value

        return CarbonEmission(
            provider=self.name(),
            region=region or "unknown",
            service=service,
            emissions_kg_co2eq=data.carbon_emission / 1000.0,
            time_period=emission_time_period,
            metadata=EmissionMetadata(
                energy_kwh=data.energy_consumption / 1000.0,
                provider_data=provider_data,
            ),
        )

    async def get_emissions(self, query: EmissionQuery) -> list[CarbonEmission]:
        """Retrieve emissions from the IBM Carbon Calculator API."""
        ibm_request = self.convert_emission_query_to_ibm_request(query)

        if query.time_period.is_inverted:
            logger.debug("IBM: inverted time period, returning no emissions")
            return []

        url = self.build_endpoint_url(ibm_request)
        logger.debug(f"IBM: requesting {url}")

        if self.http_client.is_closed:
            raise APIError("IBM API request failed: HTTP client is closed", provider=self.name())

        try:
            response = await self.http_client.get(url, headers=self.build_headers())
        except httpx.HTTPError as e:
            raise APIError(f"IBM API request failed: {e}", provider=self.name()) from e

        if not response.is_success:
            raise APIError(
                f"IBM API returned error {response.status_code}: {response.text}",
                status_code=response.status_code,
                body=response.text,
                provider=self.name(),
            )

        # ValueError covers both UTF-8 and JSON decode failures
        try:
            ibm_response = IbmCarbonEmissionResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SerializationError(f"Failed to parse IBM API response: {e}") from e

        emissions = [
            self.convert_to_carbon_emission(data, query.time_period)
            for data in ibm_response.carbon_emissions
        ]
        logger.info(f"IBM: retrieved {len(emissions)} emission records")
        return emissions


# Register the IBM provider with the registry
ProviderRegistry.register_provider("ibm", IbmCarbonProvider)
