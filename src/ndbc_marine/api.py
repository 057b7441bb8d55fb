"""HTTP surface: ``GET /api/marine/{station}`` backed by the observation service."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .config import Settings, load_settings
from .exceptions import MarineServiceError
from .log_setup import setup_logger
from .marine.service import MarineObservationService

router = APIRouter(prefix="/api/marine", tags=["marine"])


def _service(request: Request) -> MarineObservationService:
    return request.app.state.marine_service


@router.get("/{station}")
async def get_marine_observation(station: str, request: Request, response: Response) -> dict:
    """Return the normalized observation for one NDBC station."""
    result = await _service(request).fetch_observation(station)
    response.headers["X-Cache"] = "HIT" if result.cached else "MISS"
    return result.observation.to_wire()


async def _marine_error_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, MarineServiceError):  # pragma: no cover - registered for subclasses
        raise exc
    return JSONResponse(status_code=exc.http_status, content=exc.to_payload())


def create_app(
    service: MarineObservationService | None = None,
    settings: Settings | None = None,
    logger: logging.Logger | None = None,
) -> FastAPI:
    """Build the FastAPI app; a service is created from settings when not given."""
    if service is None:
        settings = settings or load_settings()
        logger = logger or setup_logger(level=settings.log_level)
        logger.info("Starting marine API with config %s", settings.safe_summary())
        service = MarineObservationService.from_settings(settings, logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.marine_service.aclose()

    app = FastAPI(title="NDBC Marine Observations", lifespan=lifespan)
    app.state.marine_service = service
    app.include_router(router)
    app.add_exception_handler(MarineServiceError, _marine_error_handler)

    @app.get("/healthz")
    async def healthz() -> dict:
        return {"status": "ok", "cache_entries": len(app.state.marine_service.cache)}

    return app


def serve() -> int:
    """Run the API under uvicorn using host/port from settings."""
    settings = load_settings()
    logger = setup_logger(level=settings.log_level)
    logger.info(
        "API available at http://%s:%d/api/marine/:station",
        settings.api_host,
        settings.api_port,
    )
    uvicorn.run(
        create_app(settings=settings, logger=logger),
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
    return 0
