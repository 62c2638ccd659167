"""
Unified, provider-agnostic data model.

These records are immutable values: built once per query/response cycle and
compared by value. Validity rules are provider-specific and are enforced by the
adapters, not here.
"""

from calendar import monthrange
from datetime import datetime, timezone
from typing import Any

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    FieldSerializationInfo,
    field_serializer,
    model_validator,
)

from .query_config import ProviderQueryConfig


class TimePeriod(BaseModel):
    """Inclusive time range. ``start <= end`` is not enforced."""

    model_config = ConfigDict(frozen=True)

    start: AwareDatetime
    end: AwareDatetime

    @property
    def is_inverted(self) -> bool:
        return self.start > self.end


class EmissionQuery(BaseModel):
    """Provider-agnostic emission query."""

    model_config = ConfigDict(frozen=True)

    provider: str
    regions: tuple[str, ...] = ()
    services: tuple[str, ...] | None = None
    resources: tuple[str, ...] | None = None
    time_period: TimePeriod
    provider_config: ProviderQueryConfig | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_tagged_config(cls, data: Any) -> Any:
        # Accept the adjacently tagged wire form {"provider": ..., "config": {...}}
        if isinstance(data, dict):
            config = data.get("provider_config")
            if isinstance(config, dict) and "config" in config and "provider" in config:
                data = {
                    **data,
                    "provider_config": {**config["config"], "provider": config["provider"]},
                }
        return data

    @field_serializer("provider_config")
    def serialize_provider_config(
        self, value: ProviderQueryConfig | None, info: FieldSerializationInfo
    ) -> dict[str, Any] | None:
        # Emitted adjacently tagged: {"provider": ..., "config": {...}}
        if value is None:
            return None
        return {
            "provider": value.provider,
            "config": value.model_dump(mode=info.mode, exclude={"provider"}),
        }


class EmissionMetadata(BaseModel):
    """Optional enrichment attached to an emission record."""

    model_config = ConfigDict(frozen=True)

    energy_kwh: float | None = None
    grid_carbon_intensity: float | None = None
    renewable_percentage: float | None = None
    # Raw provider fields that do not map onto the unified schema
    provider_data: dict[str, Any] | None = None


class CarbonEmission(BaseModel):
    """Normalized emission record. Emissions are always in kg CO2eq."""

    model_config = ConfigDict(frozen=True)

    provider: str
    region: str
    service: str | None = None
    emissions_kg_co2eq: float
    time_period: TimePeriod
    metadata: EmissionMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")


def month_period(year: int, month: int) -> TimePeriod:
    """Full calendar month in UTC, from 00:00:00 on the 1st to 23:59:59 on the last day."""
    last_day = monthrange(year, month)[1]
    return TimePeriod(
        start=datetime(year, month, 1, 0, 0, 0, tzinfo=timezone.utc),
        end=datetime(year, month, last_day, 23, 59, 59, tzinfo=timezone.utc),
    )
