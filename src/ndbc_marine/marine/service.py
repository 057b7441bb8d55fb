"""Fetch orchestration: validate, check cache, fetch, normalize, store."""

from __future__ import annotations

import copy
import enum
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from ..config import Settings
from ..exceptions import InternalError, MarineServiceError, StationValidationError
from .aliases import DEFAULT_ALIASES, FieldAliases
from .cache import TTLCache
from .models import FetchResult, NormalizedObservation
from .ndbc import NDBCClient, ObservationSource, StaticPayloadClient
from .normalizer import format_timestamp, normalize
from .validation import validate_station


class FetchStage(str, enum.Enum):
    VALIDATING = "validating"
    CACHE_CHECK = "cache_check"
    FETCHING = "fetching"
    NORMALIZING = "normalizing"
    STORING = "storing"
    DONE = "done"
    REJECTED = "rejected"
    FAILED = "failed"


class MarineObservationService:
    """Serves normalized observations for one station at a time.

    Concurrent misses for the same station are not coalesced; each one
    fetches from NDBC independently.
    """

    def __init__(
        self,
        *,
        source: ObservationSource,
        cache: TTLCache[NormalizedObservation],
        logger: logging.Logger | None = None,
        aliases: FieldAliases = DEFAULT_ALIASES,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.cache = cache
        self.aliases = aliases
        self._log = logger or logging.getLogger(self.__class__.__name__)
        self._clock = clock or (lambda: datetime.now(UTC))

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        logger: logging.Logger,
        source: ObservationSource | None = None,
    ) -> MarineObservationService:
        """Build a service with its own cache and an NDBC (or demo) source."""
        if source is None:
            if settings.use_mock_data:
                source = StaticPayloadClient()
            else:
                source = NDBCClient(settings=settings, logger=logger)
        cache: TTLCache[NormalizedObservation] = TTLCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
            sweep_probability=settings.cache_sweep_probability,
        )
        return cls(source=source, cache=cache, logger=logger)

    async def aclose(self) -> None:
        await self.source.aclose()

    async def fetch_observation(self, station: str) -> FetchResult:
        """Return a fresh observation for ``station``, from cache when possible."""
        stage = FetchStage.VALIDATING
        try:
            if not validate_station(station):
                self._transition(station, FetchStage.REJECTED)
                raise StationValidationError(
                    "Station ID must be letters, digits, '_' or '-' only"
                )

            stage = self._transition(station, FetchStage.CACHE_CHECK)
            cached = self.cache.get(station)
            if cached is not None:
                self._log.info("Cache hit for station %s", station, extra={"station": station})
                self._transition(station, FetchStage.DONE)
                return FetchResult(observation=_detached(cached), cached=True)

            stage = self._transition(station, FetchStage.FETCHING)
            payload = await self.source.fetch_realtime(station)

            stage = self._transition(station, FetchStage.NORMALIZING)
            observation = normalize(payload, station, self.aliases)
            if observation.timestamp is None:
                observation = observation.model_copy(
                    update={"timestamp": format_timestamp(self._clock())}
                )

            stage = self._transition(station, FetchStage.STORING)
            self._store(station, observation)

            self._transition(station, FetchStage.DONE)
            return FetchResult(observation=observation, cached=False)
        except StationValidationError:
            raise
        except MarineServiceError as exc:
            self._log.warning(
                "Marine fetch failed at %s: %s",
                stage.value,
                exc,
                extra={"station": station},
            )
            self._transition(station, FetchStage.FAILED)
            raise
        except Exception as exc:
            self._log.exception(
                "Unexpected error fetching marine data at %s",
                stage.value,
                extra={"station": station},
            )
            self._transition(station, FetchStage.FAILED)
            raise InternalError(str(exc) or type(exc).__name__) from exc

    def _store(self, station: str, observation: NormalizedObservation) -> None:
        try:
            self.cache.put(station, _detached(observation))
        except Exception:
            self._log.exception(
                "Cache write failed; serving uncached result", extra={"station": station}
            )

    def _transition(self, station: str, stage: FetchStage) -> FetchStage:
        self._log.debug("station=%s stage=%s", station, stage.value, extra={"station": station})
        return stage


def _detached(observation: NormalizedObservation) -> NormalizedObservation:
    """Copy of ``observation`` whose ``raw`` payload shares nothing with the original."""
    return observation.model_copy(update={"raw": copy.deepcopy(observation.raw)})
