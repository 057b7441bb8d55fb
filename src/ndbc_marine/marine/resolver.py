"""Alias-ordered numeric field resolution for shape-variable observations."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from typing import Any


def parse_finite(value: Any) -> float | None:
    """Parse ``value`` as a finite float, or return None.

    Booleans are not numbers here, and NDBC's ``"MM"`` missing marker simply
    fails to parse.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return None
        try:
            number = float(candidate)
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def resolve_numeric(observation: Mapping[str, Any], aliases: Iterable[str]) -> float | None:
    """Return the first alias value that is present and finite.

    Presence is checked by key, never by truthiness, so ``0`` resolves to
    ``0.0``. Present-but-unusable values fall through to the next alias.
    """
    for key in aliases:
        if key not in observation:
            continue
        number = parse_finite(observation[key])
        if number is not None:
            return number
    return None
