"""Cloud provider adapters for Azure, IBM Cloud, AWS and GCP."""

# Import provider implementations to register them with ProviderRegistry
from . import aws
from . import azure
from . import gcp
from . import ibm

# Make key classes available at package level
from .azure import AzureCarbonProvider, AzureConfig
from .aws import AwsCarbonProvider, AwsConfig
from .base import (
    APIError,
    CarbemError,
    CarbonProvider,
    ConfigurationError,
    SerializationError,
    UnsupportedProviderError,
)
from .gcp import GcpCarbonProvider, GcpConfig
from .ibm import IbmCarbonProvider, IbmConfig
from .registry import ProviderRegistry
