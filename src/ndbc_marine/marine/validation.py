"""Station identifier validation.

A single permissive profile is used everywhere: one or more ASCII letters,
digits, underscores or hyphens, with no length cap.
"""

from __future__ import annotations

import re
from typing import Any

_STATION_RE = re.compile(r"[A-Za-z0-9_-]+")


def validate_station(station: Any) -> bool:
    """Return True when ``station`` is an acceptable NDBC station identifier."""
    if not isinstance(station, str):
        return False
    return _STATION_RE.fullmatch(station) is not None
