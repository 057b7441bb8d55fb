"""Application exception classes."""

from __future__ import annotations

from typing import Literal

UpstreamErrorKind = Literal["not_found", "unavailable"]


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class MarineServiceError(Exception):
    """Base for errors surfaced to marine observation callers.

    ``error`` is a short client-facing summary, the exception message is the
    detail, and ``http_status`` is the status the HTTP layer responds with.
    """

    error = "Marine service error"
    http_status = 500

    def __init__(self, message: str, *, error: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error

    def to_payload(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class StationValidationError(MarineServiceError):
    """Raised when a station identifier is rejected before any lookup."""

    error = "Invalid station ID"
    http_status = 400


class UpstreamError(MarineServiceError):
    """Raised when NDBC responds with a failure status or is unreachable."""

    http_status = 502

    def __init__(
        self,
        message: str,
        *,
        kind: UpstreamErrorKind = "unavailable",
        status_code: int | None = None,
    ) -> None:
        summary = "Station not found" if kind == "not_found" else "NDBC service unavailable"
        super().__init__(message, error=summary)
        self.kind = kind
        self.status_code = status_code

    @property
    def not_found(self) -> bool:
        return self.kind == "not_found"


class FormatError(MarineServiceError):
    """Raised when an NDBC payload cannot be interpreted as an observation record."""

    error = "Invalid NDBC data"
    http_status = 502


class InternalError(MarineServiceError):
    """Raised for failures that fit no other category."""

    error = "Internal server error"
    http_status = 500
