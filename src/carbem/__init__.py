"""
Carbem

A unified client for retrieving carbon emission data from cloud providers
(Azure, IBM Cloud, with AWS and GCP stubs), normalized to kg CO2eq.
"""

__version__ = "0.1.0"
__author__ = "Carbem Team"

from .client import CarbemClient, CarbemClientBuilder, get_emissions
from .models import CarbonEmission, EmissionMetadata, EmissionQuery, TimePeriod
from .providers import (
    APIError,
    AzureConfig,
    CarbemError,
    CarbonProvider,
    ConfigurationError,
    IbmConfig,
    ProviderRegistry,
    SerializationError,
    UnsupportedProviderError,
)
from .query_config import (
    AzureCarbonScope,
    AzureCategoryType,
    AzureQueryConfig,
    AzureReportType,
    IbmGroupBy,
    IbmQueryConfig,
)
