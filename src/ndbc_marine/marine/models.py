"""Typed models for normalized NDBC observations."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

SOURCE_NDBC = "ndbc"


class NormalizedObservation(BaseModel):
    """Fixed-schema buoy observation.

    Attribute names are snake_case; the wire format uses the camelCase
    aliases (``seaTemperature`` and so on). Every numeric field is either a
    finite float or None.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: Literal["ndbc"] = SOURCE_NDBC
    station: str
    timestamp: str | None = None
    sea_temperature: float | None = Field(default=None, alias="seaTemperature")
    wave_height: float | None = Field(default=None, alias="waveHeight")
    swell_height: float | None = Field(default=None, alias="swellHeight")
    swell_period: float | None = Field(default=None, alias="swellPeriod")
    swell_direction: float | None = Field(default=None, alias="swellDirection")
    raw: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready camelCase representation."""
        return self.model_dump(mode="json", by_alias=True)


class FetchResult(BaseModel):
    """Observation returned by the service plus whether it came from cache."""

    model_config = ConfigDict(frozen=True)

    observation: NormalizedObservation
    cached: bool = False
