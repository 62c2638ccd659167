"""
Pytest configuration and shared fixtures for carbem tests.

This module provides common fixtures used across all test modules: typed
provider configurations, sample queries and native payloads, and HTTP
transports stubbed with httpx.MockTransport.
"""

import json
import os
from collections.abc import Callable, Generator
from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from carbem.models import EmissionQuery, TimePeriod
from carbem.providers.azure import AzureConfig
from carbem.providers.ibm import IbmConfig
from carbem.query_config import (
    AzureCategoryType,
    AzureQueryConfig,
    AzureReportType,
    IbmGroupBy,
    IbmQueryConfig,
)
from carbem.utils.http_client import HTTPClient


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "azure: mark test as Azure-specific")
    config.addinivalue_line("markers", "ibm: mark test as IBM-specific")


# Environment fixture
@pytest.fixture
def clean_env() -> Generator[os._Environ, None, None]:
    """Provide a clean environment for testing."""
    original_env = os.environ.copy()
    env_vars_to_clear = [
        "AZURE_TOKEN",
        "CARBEM_AZURE_ACCESS_TOKEN",
        "IBM_API_KEY",
        "CARBEM_IBM_API_KEY",
        "IBM_ACCOUNT_ID",
        "CARBEM_IBM_ACCOUNT_ID",
    ]

    for var in env_vars_to_clear:
        os.environ.pop(var, None)

    yield os.environ

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


# Configuration fixtures
@pytest.fixture
def ibm_config() -> IbmConfig:
    """Provide IBM credentials for testing."""
    return IbmConfig(api_key="test-api-key")  # pragma: allowlist secret


@pytest.fixture
def azure_config() -> AzureConfig:
    """Provide Azure credentials for testing."""
    return AzureConfig(access_token="test-azure-token")  # pragma: allowlist secret


@pytest.fixture
def q1_2023() -> TimePeriod:
    """First quarter of 2023."""
    return TimePeriod(
        start=datetime(2023, 1, 1, 0, 0, 0, tzinfo=timezone.utc),
        end=datetime(2023, 3, 31, 23, 59, 59, tzinfo=timezone.utc),
    )


@pytest.fixture
def ibm_query(q1_2023) -> EmissionQuery:
    """IBM query for Dallas and Frankfurt over Q1 2023."""
    return EmissionQuery(
        provider="ibm",
        regions=["Dallas", "Frankfurt"],
        services=["Cloud Object Storage", "Kubernetes Service"],
        time_period=q1_2023,
        provider_config=IbmQueryConfig(
            enterprise_id="x2x261x8x5x84xxxx49x4891xx077xx9",
            group_by=IbmGroupBy.MONTH,
            limit=10,
        ),
    )


@pytest.fixture
def azure_query(q1_2023) -> EmissionQuery:
    """Azure monthly summary query over Q1 2023."""
    return EmissionQuery(
        provider="azure",
        regions=["EastUS", "WestEurope"],
        time_period=q1_2023,
        provider_config=AzureQueryConfig(
            report_type=AzureReportType.MONTHLY_SUMMARY,
            subscription_list=["00000000-0000-0000-0000-000000000001"],
        ),
    )


@pytest.fixture
def azure_top_items_query(q1_2023) -> EmissionQuery:
    """Azure top items query grouped by location."""
    return EmissionQuery(
        provider="azure",
        time_period=q1_2023,
        provider_config=AzureQueryConfig(
            report_type=AzureReportType.TOP_ITEMS_SUMMARY,
            subscription_list=["00000000-0000-0000-0000-000000000001"],
            category_type=AzureCategoryType.LOCATION,
            top_items=5,
        ),
    )


# Sample native payloads
@pytest.fixture
def ibm_response_payload() -> dict[str, Any]:
    """A typical IBM Carbon Calculator response grouped by location."""
    return {
        "carbon_emissions": [
            {
                "account_id": "acc-1",
                "carbon_emission": 1500.0,
                "energy_consumption": 3000.0,
                "month": {"value": "2023-02"},
                "group_by": {"type": "location", "value": "Dallas"},
            },
            {
                "account_id": "acc-1",
                "carbon_emission": 250.0,
                "energy_consumption": 400.0,
                "month": {"value": "2023-03", "min": "2023-03", "max": "2023-03"},
                "group_by": {"type": "location", "value": "Frankfurt"},
                "service": "Cloud Object Storage",
            },
        ],
        "total_emission": 1750.0,
        "offset": 0,
        "limit": 10,
        "total_count": 2,
        "first": {"href": "https://api.carbon-calculator.cloud.ibm.com/v1/carbon_emissions?offset=0"},
    }


@pytest.fixture
def azure_response_payload() -> dict[str, Any]:
    """A typical Azure MonthlySummaryReport response."""
    return {
        "value": [
            {
                "dataType": "MonthlySummaryData",
                "latestMonthEmissions": 12.5,
                "previousMonthEmissions": 10.0,
                "monthOverMonthEmissionsChangeRatio": 0.25,
                "monthlyEmissionsChangeValue": 2.5,
                "date": "2023-02-01",
                "carbonIntensity": 0.1,
            },
        ],
        "subscriptionAccessDecisionList": [
            {"subscriptionId": "00000000-0000-0000-0000-000000000001", "decision": "Allowed"}
        ],
    }


# HTTP fixtures
@pytest.fixture
def make_http_client() -> Callable[..., HTTPClient]:
    """Build an HTTPClient whose transport is served by a handler.

    Requests seen by the transport are recorded on ``client.requests``.
    """

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> HTTPClient:
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = HTTPClient(timeout=5, transport=httpx.MockTransport(_record))
        client.requests = requests
        return client

    return _make


@pytest.fixture
def json_responder() -> Callable[..., Callable[[httpx.Request], httpx.Response]]:
    """Handler factory returning a fixed JSON body and status."""

    def _responder(payload: Any, status_code: int = 200):
        def _handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                status_code,
                content=json.dumps(payload).encode(),
                headers={"Content-Type": "application/json"},
            )

        return _handler

    return _responder


@pytest.fixture
def failing_transport_handler() -> Callable[[httpx.Request], httpx.Response]:
    """Handler that fails every request at the transport level."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    return _handler
