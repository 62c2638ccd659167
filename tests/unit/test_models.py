"""
Tests for the unified data model.

Covers construction, immutability, equality, the tagged provider_config union
and calendar-month period construction.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from carbem.models import (
    CarbonEmission,
    EmissionMetadata,
    EmissionQuery,
    TimePeriod,
    month_period,
)
from carbem.query_config import AzureQueryConfig, IbmGroupBy, IbmQueryConfig


class TestTimePeriod:
    """Test cases for TimePeriod."""

    def test_create_time_period(self, q1_2023):
        """Test basic TimePeriod creation."""
        assert q1_2023.start.year == 2023
        assert q1_2023.end.month == 3
        assert not q1_2023.is_inverted

    def test_naive_datetimes_rejected(self):
        """Test that timestamps must be timezone-aware."""
        with pytest.raises(ValidationError):
            TimePeriod(start=datetime(2023, 1, 1), end=datetime(2023, 2, 1))

    def test_inverted_period_allowed(self):
        """Test that start > end is tolerated by the type."""
        period = TimePeriod(
            start=datetime(2023, 3, 1, tzinfo=timezone.utc),
            end=datetime(2023, 1, 1, tzinfo=timezone.utc),
        )

        assert period.is_inverted

    def test_time_period_is_immutable(self, q1_2023):
        """Test that TimePeriod cannot be mutated after construction."""
        with pytest.raises(ValidationError):
            q1_2023.start = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_time_period_equality(self):
        """Test that periods compare by value."""
        first = TimePeriod(
            start=datetime(2023, 1, 1, 12, tzinfo=timezone.utc),
            end=datetime(2023, 1, 2, 12, tzinfo=timezone.utc),
        )
        same = TimePeriod(
            start=datetime(2023, 1, 1, 12, tzinfo=timezone.utc),
            end=datetime(2023, 1, 2, 12, tzinfo=timezone.utc),
        )

        assert first == same


class TestMonthPeriod:
    """Test cases for calendar month spans."""

    @pytest.mark.parametrize(
        "year,month,last_day",
        [(2024, 2, 29), (2023, 2, 28), (2023, 12, 31), (2023, 4, 30), (2000, 2, 29), (1900, 2, 28)],
    )
    def test_month_end_day(self, year, month, last_day):
        """Test end-of-month days, leap years included."""
        period = month_period(year, month)

        assert period.start == datetime(year, month, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert period.end == datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc)


class TestEmissionQuery:
    """Test cases for EmissionQuery."""

    def test_optional_fields_default_to_none(self, q1_2023):
        """Test EmissionQuery with minimal fields."""
        query = EmissionQuery(provider="ibm", time_period=q1_2023)

        assert query.regions == ()
        assert query.services is None
        assert query.resources is None
        assert query.provider_config is None

    def test_sequences_preserve_order(self, ibm_query):
        """Test that regions and services keep their order."""
        assert ibm_query.regions == ("Dallas", "Frankfurt")
        assert ibm_query.services == ("Cloud Object Storage", "Kubernetes Service")

    def test_provider_config_discriminated_from_dict(self, q1_2023):
        """Test that a dict provider_config resolves to the tagged variant."""
        query = EmissionQuery(
            provider="ibm",
            time_period=q1_2023,
            provider_config={"provider": "ibm", "enterprise_id": "E1", "group_by": "location"},
        )

        assert isinstance(query.provider_config, IbmQueryConfig)
        assert query.provider_config.group_by == IbmGroupBy.LOCATION

    def test_adjacently_tagged_provider_config(self, q1_2023):
        """Test the {"provider": ..., "config": {...}} wire form."""
        query = EmissionQuery(
            provider="azure",
            time_period=q1_2023,
            provider_config={"provider": "azure", "config": {"subscription_list": ["sub-1"]}},
        )

        assert isinstance(query.provider_config, AzureQueryConfig)
        assert query.provider_config.subscription_list == ("sub-1",)

    def test_unknown_provider_config_tag_rejected(self, q1_2023):
        """Test that an unknown tag fails validation."""
        with pytest.raises(ValidationError):
            EmissionQuery(
                provider="ibm",
                time_period=q1_2023,
                provider_config={"provider": "oracle", "tenancy": "t1"},
            )

    def test_query_from_json(self):
        """Test parsing a full query from JSON."""
        query = EmissionQuery.model_validate_json(
            """
            {
                "provider": "ibm",
                "regions": ["Dallas"],
                "time_period": {"start": "2023-01-01T00:00:00Z", "end": "2023-03-31T23:59:59Z"},
                "provider_config": {"provider": "ibm", "config": {"enterprise_id": "E1", "limit": 10}}
            }
            """
        )

        assert query.provider_config.enterprise_id == "E1"
        assert query.provider_config.limit == 10
        assert query.time_period.end - query.time_period.start > timedelta(days=89)

    def test_provider_config_dumped_adjacently_tagged(self, ibm_query):
        """Test that provider_config serializes as {"provider": ..., "config": {...}}."""
        data = ibm_query.model_dump(mode="json")

        assert data["provider_config"] == {
            "provider": "ibm",
            "config": {
                "enterprise_id": "x2x261x8x5x84xxxx49x4891xx077xx9",
                "group_by": "month",
                "enterprise_account_id": None,
                "limit": 10,
                "offset": None,
            },
        }

    def test_query_json_round_trip(self, ibm_query, azure_top_items_query):
        """Test that dumped queries parse back to equal values."""
        for query in (ibm_query, azure_top_items_query):
            assert EmissionQuery.model_validate_json(query.model_dump_json()) == query
            assert EmissionQuery.model_validate(query.model_dump()) == query

    def test_query_without_provider_config_dumps_none(self, q1_2023):
        """Test serialization when no provider_config is set."""
        query = EmissionQuery(provider="aws", time_period=q1_2023)

        assert query.model_dump()["provider_config"] is None


class TestCarbonEmission:
    """Test cases for CarbonEmission."""

    def test_create_emission_with_metadata(self, q1_2023):
        """Test CarbonEmission with metadata and provider_data."""
        emission = CarbonEmission(
            provider="ibm",
            region="Dallas",
            emissions_kg_co2eq=1.5,
            time_period=q1_2023,
            metadata=EmissionMetadata(energy_kwh=3.0, provider_data={"account_id": "a"}),
        )

        assert emission.service is None
        assert emission.metadata.grid_carbon_intensity is None
        assert emission.metadata.provider_data == {"account_id": "a"}

    def test_emission_serialization(self, q1_2023):
        """Test JSON-compatible serialization."""
        emission = CarbonEmission(
            provider="azure", region="eastus", emissions_kg_co2eq=2.0, time_period=q1_2023
        )

        data = emission.to_dict()
        assert data["emissions_kg_co2eq"] == 2.0
        assert data["time_period"]["start"].startswith("2023-01-01T00:00:00")
        assert data["metadata"] is None

    def test_emission_equality(self, q1_2023):
        """Test that emissions compare by value."""
        first = CarbonEmission(
            provider="ibm", region="Dallas", emissions_kg_co2eq=1.0, time_period=q1_2023
        )
        second = CarbonEmission(
            provider="ibm", region="Dallas", emissions_kg_co2eq=1.0, time_period=q1_2023
        )

        assert first == second
