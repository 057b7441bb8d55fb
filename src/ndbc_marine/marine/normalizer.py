"""Normalize raw NDBC realtime2 JSON into a NormalizedObservation."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from ..exceptions import FormatError
from .aliases import DEFAULT_ALIASES, FieldAliases
from .models import NormalizedObservation
from .resolver import resolve_numeric

_SEQUENCE_KEYS = ("observations", "data")


def normalize(
    raw_payload: Any,
    station: str,
    aliases: FieldAliases = DEFAULT_ALIASES,
) -> NormalizedObservation:
    """Resolve ``raw_payload`` into the fixed observation schema.

    The timestamp is left as None when nothing in the payload parses; the
    caller decides whether to substitute the current time.
    """
    observation = locate_observation(raw_payload)
    meta = _as_mapping(raw_payload.get("meta")) if isinstance(raw_payload, Mapping) else None

    timestamp = resolve_timestamp(observation, aliases.time)
    if timestamp is None and meta is not None:
        timestamp = format_timestamp(parse_timestamp(meta.get("date")))

    numeric = {
        name: resolve_numeric(observation, keys)
        for name, keys in aliases.numeric_fields().items()
    }
    return NormalizedObservation(
        station=_resolve_station(observation, raw_payload, meta, station),
        timestamp=timestamp,
        raw=raw_payload,
        **numeric,
    )


def locate_observation(raw_payload: Any) -> Mapping[str, Any]:
    """Pick the newest observation record out of a payload.

    NDBC feeds list the newest reading first.
    """
    if isinstance(raw_payload, list):
        if not raw_payload:
            raise FormatError("Invalid NDBC data: payload contained no observations.")
        return _require_record(raw_payload[0])
    if not isinstance(raw_payload, Mapping):
        raise FormatError(
            f"Invalid NDBC data: expected an object or array, got {type(raw_payload).__name__}."
        )
    for key in _SEQUENCE_KEYS:
        nested = raw_payload.get(key)
        if isinstance(nested, list) and nested:
            return _require_record(nested[0])
    return raw_payload


def resolve_timestamp(observation: Mapping[str, Any], keys: tuple[str, ...]) -> str | None:
    """Return the first parseable candidate time as a canonical ISO string."""
    for key in keys:
        parsed = parse_timestamp(observation.get(key))
        if parsed is not None:
            return format_timestamp(parsed)
    return None


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string, datetime or epoch-milliseconds number as UTC."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value.astimezone(UTC) if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000.0, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        if candidate.endswith(("Z", "z")):
            candidate = candidate[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(candidate)
        except ValueError:
            return None
        return parsed.astimezone(UTC) if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


def format_timestamp(value: datetime | None) -> str | None:
    """Render ``2025-12-14T08:00:00.000Z`` style timestamps."""
    if value is None:
        return None
    value = value.astimezone(UTC)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def _resolve_station(
    observation: Mapping[str, Any],
    raw_payload: Any,
    meta: Mapping[str, Any] | None,
    fallback: str,
) -> str:
    candidates = [observation.get("station")]
    if isinstance(raw_payload, Mapping):
        candidates.append(raw_payload.get("station"))
    if meta is not None:
        candidates.append(meta.get("station"))
    for candidate in candidates:
        if isinstance(candidate, bool):
            continue
        if isinstance(candidate, int):
            return str(candidate)
        if isinstance(candidate, str) and candidate.strip():
            return candidate.strip()
    return fallback


def _require_record(value: Any) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise FormatError(
            f"Invalid NDBC data: observation entry is {type(value).__name__}, not an object."
        )
    return value


def _as_mapping(value: Any) -> Mapping[str, Any] | None:
    return value if isinstance(value, Mapping) else None
