"""Ordered NDBC field aliases, one tuple per normalized measurement.

Earlier names win when an observation carries several of them at once.
"""

from __future__ import annotations

from dataclasses import dataclass

SEA_TEMPERATURE_KEYS: tuple[str, ...] = ("wtmp", "sea_temp", "water_temp", "water_temperature")
WAVE_HEIGHT_KEYS: tuple[str, ...] = ("wvht", "wave_height", "significant_wave_height")
SWELL_HEIGHT_KEYS: tuple[str, ...] = ("swh", "swell_height")
SWELL_PERIOD_KEYS: tuple[str, ...] = ("swp", "swell_period", "dpd")
SWELL_DIRECTION_KEYS: tuple[str, ...] = ("swdir", "swell_direction", "mwd")

TIME_KEYS: tuple[str, ...] = ("time_iso8601", "time", "timestamp", "date_time", "t")


@dataclass(frozen=True)
class FieldAliases:
    """Alias lists used by the normalizer for each output field."""

    sea_temperature: tuple[str, ...] = SEA_TEMPERATURE_KEYS
    wave_height: tuple[str, ...] = WAVE_HEIGHT_KEYS
    swell_height: tuple[str, ...] = SWELL_HEIGHT_KEYS
    swell_period: tuple[str, ...] = SWELL_PERIOD_KEYS
    swell_direction: tuple[str, ...] = SWELL_DIRECTION_KEYS
    time: tuple[str, ...] = TIME_KEYS

    def numeric_fields(self) -> dict[str, tuple[str, ...]]:
        """Map normalized numeric field name to its alias list."""
        return {
            "sea_temperature": self.sea_temperature,
            "wave_height": self.wave_height,
            "swell_height": self.swell_height,
            "swell_period": self.swell_period,
            "swell_direction": self.swell_direction,
        }


DEFAULT_ALIASES = FieldAliases()
