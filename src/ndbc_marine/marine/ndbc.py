"""NDBC realtime2 JSON client."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from ..config import Settings
from ..exceptions import FormatError, UpstreamError


class ObservationSource(Protocol):
    """Anything that can hand back a raw realtime2 payload for a station."""

    async def fetch_realtime(self, station: str) -> Any: ...

    async def aclose(self) -> None: ...


class NDBCClient:
    """Fetches raw buoy payloads from ``/data/realtime2/<station>.json``.

    Failures are classified once here: HTTP 404 is ``not_found``, any other
    error status or transport failure is ``unavailable``, and a body that is
    not JSON is a FormatError. Nothing is retried.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self._base_url = settings.ndbc_base
        self._client = httpx.AsyncClient(
            timeout=settings.ndbc_timeout_seconds,
            headers={
                "Accept": "application/json",
                "User-Agent": settings.ndbc_user_agent,
            },
            transport=transport,
        )

    async def __aenter__(self) -> NDBCClient:
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, exc_tb: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def realtime_url(self, station: str) -> str:
        return f"{self._base_url}/data/realtime2/{quote(station, safe='')}.json"

    async def fetch_realtime(self, station: str) -> Any:
        url = self.realtime_url(station)
        self.logger.info("Fetching NDBC data from %s", url, extra={"station": station})
        try:
            response = await self._client.get(url)
        except httpx.HTTPError as exc:
            # Timeouts, DNS and connection failures all land here.
            self.logger.error(
                "NDBC request failed (%s)", type(exc).__name__, extra={"station": station}
            )
            raise UpstreamError(
                "Could not connect to NDBC service",
                kind="unavailable",
            ) from exc

        if response.status_code == 404:
            self.logger.warning("NDBC station %s not found", station, extra={"station": station})
            raise UpstreamError(
                f"NDBC station {station} not found or has no data available",
                kind="not_found",
                status_code=404,
            )
        if response.is_error:
            self.logger.error(
                "NDBC API error: %d %s",
                response.status_code,
                response.reason_phrase,
                extra={"station": station},
            )
            raise UpstreamError(
                "Failed to fetch data from NDBC: "
                f"{response.status_code} {response.reason_phrase}".rstrip(),
                kind="unavailable",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise FormatError(f"NDBC returned a non-JSON response for station {station}.") from exc


class StaticPayloadClient:
    """Demo source that answers every station with a fixed reading.

    Used when ``MARINE_USE_MOCK_DATA`` is enabled so the service can run
    without reaching NDBC.
    """

    def __init__(self, payload: dict[str, Any] | None = None) -> None:
        self._payload = payload

    async def fetch_realtime(self, station: str) -> Any:
        if self._payload is not None:
            return dict(self._payload)
        return {
            "time": datetime.now(UTC).isoformat(),
            "wtmp": 15.8,
            "wvht": 2.1,
            "dpd": 11,
            "mwd": 285,
        }

    async def aclose(self) -> None:
        return None
