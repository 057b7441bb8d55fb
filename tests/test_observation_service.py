"""Fetch orchestration tests: validation, cache, classification, fallbacks."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import pytest

from ndbc_marine.config import Settings
from ndbc_marine.exceptions import (
    FormatError,
    InternalError,
    StationValidationError,
    UpstreamError,
)
from ndbc_marine.marine.cache import TTLCache
from ndbc_marine.marine.models import FetchResult, NormalizedObservation
from ndbc_marine.marine.ndbc import StaticPayloadClient
from ndbc_marine.marine.service import MarineObservationService

SCENARIO_PAYLOAD = {
    "time": "2025-12-14T08:00:00Z",
    "wtmp": "12.3",
    "wvht": "1.5",
    "swh": "0.8",
    "dpd": "8.5",
    "swdir": "120",
}


class FakeSource:
    """Records calls and replays queued payloads or exceptions."""

    def __init__(self, *responses: Any) -> None:
        self.responses = list(responses)
        self.calls: list[str] = []
        self.closed = False

    async def fetch_realtime(self, station: str) -> Any:
        self.calls.append(station)
        await asyncio.sleep(0)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class BrokenCache(TTLCache[NormalizedObservation]):
    def put(self, key: str, value: NormalizedObservation) -> None:
        raise RuntimeError("eviction bug")


def _default_cache() -> TTLCache[NormalizedObservation]:
    return TTLCache(ttl_seconds=300, max_entries=10, sweep_probability=0.0)


def _service(
    source: FakeSource,
    cache: TTLCache[NormalizedObservation] | None = None,
    **kwargs: Any,
) -> MarineObservationService:
    return MarineObservationService(
        source=source,
        cache=cache if cache is not None else _default_cache(),
        logger=logging.getLogger("test_observation_service"),
        **kwargs,
    )


def _fetch(service: MarineObservationService, station: str) -> FetchResult:
    return asyncio.run(service.fetch_observation(station))


def test_miss_fetches_normalizes_and_stores() -> None:
    source = FakeSource(SCENARIO_PAYLOAD)
    service = _service(source)

    result = _fetch(service, "46042")

    assert result.cached is False
    assert source.calls == ["46042"]
    assert result.observation.to_wire() == {
        "source": "ndbc",
        "station": "46042",
        "timestamp": "2025-12-14T08:00:00.000Z",
        "seaTemperature": 12.3,
        "waveHeight": 1.5,
        "swellHeight": 0.8,
        "swellPeriod": 8.5,
        "swellDirection": 120.0,
        "raw": SCENARIO_PAYLOAD,
    }
    assert service.cache.get("46042") == result.observation


def test_hit_is_served_from_cache_without_fetching() -> None:
    source = FakeSource(SCENARIO_PAYLOAD)
    service = _service(source)

    first = _fetch(service, "46042")
    second = _fetch(service, "46042")

    assert source.calls == ["46042"]
    assert second.cached is True
    assert second.observation == first.observation


def test_cache_lookup_is_case_insensitive() -> None:
    source = FakeSource({"time": "2025-12-14T08:00:00Z", "wtmp": 10})
    service = _service(source)
    _fetch(service, "SGOF1")
    result = _fetch(service, "sgof1")
    assert result.cached is True
    assert source.calls == ["SGOF1"]


def test_expired_entry_triggers_refetch() -> None:
    clock = FakeClock()
    source = FakeSource(
        {"time": "2025-12-14T08:00:00Z", "wtmp": 10},
        {"time": "2025-12-14T09:00:00Z", "wtmp": 11},
    )
    cache: TTLCache[NormalizedObservation] = TTLCache(
        ttl_seconds=300, max_entries=10, sweep_probability=0.0, time_func=clock
    )
    service = _service(source, cache=cache)

    assert _fetch(service, "46042").observation.sea_temperature == 10.0
    clock.now = 300
    result = _fetch(service, "46042")

    assert result.cached is False
    assert result.observation.sea_temperature == 11.0
    assert source.calls == ["46042", "46042"]


@pytest.mark.parametrize("station", ["", "abc!", "46042/../x", None])
def test_invalid_station_short_circuits(station: Any) -> None:
    source = FakeSource(SCENARIO_PAYLOAD)
    cache = TTLCache[NormalizedObservation](ttl_seconds=300, max_entries=10)
    service = _service(source, cache=cache)

    with pytest.raises(StationValidationError) as excinfo:
        _fetch(service, station)
    assert excinfo.value.http_status == 400
    assert source.calls == []
    assert len(cache) == 0


def test_upstream_not_found_propagates_without_retry() -> None:
    source = FakeSource(UpstreamError("missing", kind="not_found", status_code=404))
    service = _service(source)

    with pytest.raises(UpstreamError) as excinfo:
        _fetch(service, "99999")
    assert excinfo.value.kind == "not_found"
    assert source.calls == ["99999"]
    assert service.cache.get("99999") is None


def test_format_error_propagates_and_is_not_cached() -> None:
    source = FakeSource("not an object")
    service = _service(source)

    with pytest.raises(FormatError):
        _fetch(service, "46042")
    assert len(service.cache) == 0


def test_unclassified_failure_becomes_internal_error() -> None:
    source = FakeSource(KeyError("boom"))
    service = _service(source)

    with pytest.raises(InternalError) as excinfo:
        _fetch(service, "46042")
    assert excinfo.value.http_status == 500
    assert isinstance(excinfo.value.__cause__, KeyError)


def test_cache_write_failure_still_serves_result(caplog: pytest.LogCaptureFixture) -> None:
    source = FakeSource(SCENARIO_PAYLOAD)
    cache = BrokenCache(ttl_seconds=300, max_entries=10)
    service = _service(source, cache=cache)

    with caplog.at_level(logging.ERROR, logger="test_observation_service"):
        result = _fetch(service, "46042")

    assert result.cached is False
    assert result.observation.wave_height == 1.5
    assert "Cache write failed" in caplog.text


def test_missing_timestamp_is_filled_with_normalization_time() -> None:
    fixed_now = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
    source = FakeSource({"wt": 15.0, "wtmp": 15.0})
    service = _service(source, clock=lambda: fixed_now)

    result = _fetch(service, "46042")
    assert result.observation.timestamp == "2026-01-02T03:04:05.678Z"


def test_caller_station_used_when_payload_has_none() -> None:
    source = FakeSource([{"wvht": "2.0"}])
    service = _service(source)
    assert _fetch(service, "46086").observation.station == "46086"


def test_concurrent_misses_each_fetch_upstream() -> None:
    source = FakeSource(SCENARIO_PAYLOAD)
    service = _service(source)

    async def _run() -> list[FetchResult]:
        return list(
            await asyncio.gather(
                service.fetch_observation("46042"),
                service.fetch_observation("46042"),
            )
        )

    results = asyncio.run(_run())
    assert all(not result.cached for result in results)
    assert source.calls == ["46042", "46042"]


def test_from_settings_uses_demo_source_in_mock_mode() -> None:
    settings = Settings(MARINE_USE_MOCK_DATA=True, MARINE_CACHE_MAX_ENTRIES=5)
    service = MarineObservationService.from_settings(
        settings, logging.getLogger("test_observation_service")
    )

    assert isinstance(service.source, StaticPayloadClient)
    assert service.cache.max_entries == 5
    result = _fetch(service, "46042")
    assert result.observation.sea_temperature == 15.8
    assert result.observation.swell_period == 11.0
    assert result.observation.swell_direction == 285.0


def test_mutating_returned_raw_does_not_change_cached_record() -> None:
    source = FakeSource({"time": "2025-12-14T08:00:00Z", "wtmp": 12.0, "nested": {"a": 1}})
    service = _service(source)

    first = _fetch(service, "46042")
    first.observation.raw["wtmp"] = 999
    first.observation.raw["nested"]["a"] = 2

    second = _fetch(service, "46042")
    assert second.cached is True
    assert second.observation.raw == {
        "time": "2025-12-14T08:00:00Z",
        "wtmp": 12.0,
        "nested": {"a": 1},
    }

    second.observation.raw["wtmp"] = -1
    third = _fetch(service, "46042")
    assert third.observation.raw["wtmp"] == 12.0
    assert source.calls == ["46042"]
