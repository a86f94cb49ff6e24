"""Mean lunar phase and zodiac position.

The calculation is a mean-motion approximation anchored to a known new moon.
It needs no ephemeris files, so results are reproducible for a fixed instant
and cheap enough to evaluate on every request.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional, Union

from .constants import (
    CATEGORIES,
    ELEMENTS,
    PHASE_CATEGORY,
    PHASE_LABELS,
    PHASE_THRESHOLDS,
    PHASES,
    SIGN_NAMES,
    element_for_sign,
    fmt_sign,
    sign_index,
    signs_for_element,
)
from .errors import InvalidInputError

UTC = timezone.utc

SYNODIC_MONTH = 29.53058867
SIDEREAL_MONTH = 27.32166
REFERENCE_NEW_MOON = datetime(2000, 1, 6, 18, 14, tzinfo=UTC)

# Phase shown when an override names only a category.
REPRESENTATIVE_PHASE = {
    "new": "new",
    "waxing": "waxing-crescent",
    "full": "full",
    "waning": "waning-gibbous",
}

Instant = Union[datetime, date, str, None]


@dataclass(frozen=True)
class LunarState:
    phase: str
    category: str
    illumination_percent: int
    day_in_cycle: float
    zodiac_sign: str
    zodiac_index: int
    element: str
    overridden: bool = False

    @property
    def phase_label(self) -> str:
        return PHASE_LABELS[self.phase]

    def as_dict(self) -> dict:
        return {
            "phase": self.phase,
            "phase_label": self.phase_label,
            "category": self.category,
            "illumination_percent": self.illumination_percent,
            "day_in_cycle": self.day_in_cycle,
            "zodiac_sign": self.zodiac_sign,
            "zodiac_label": fmt_sign(self.zodiac_sign),
            "zodiac_index": self.zodiac_index,
            "element": self.element,
            "overridden": self.overridden,
        }


@dataclass(frozen=True)
class LunarOverride:
    """Simulated lunar conditions that replace the computed state wholesale.

    Either ``category`` or ``phase`` must be given, and either ``element`` or
    ``zodiac_sign``. Missing members are filled from fixed representatives
    (never from the real sky) so the result is internally consistent.
    """

    category: Optional[str] = None
    element: Optional[str] = None
    zodiac_sign: Optional[str] = None
    phase: Optional[str] = None


def to_utc(value: Instant = None) -> datetime:
    """Coerce ``value`` into an aware UTC datetime. ``None`` means now."""

    if value is None:
        return datetime.now(UTC)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(text)
        except ValueError as exc:
            raise InvalidInputError("at", f"not an ISO-8601 timestamp: {value!r}") from exc
    if not isinstance(value, datetime):
        value = datetime.combine(value, time(0, 0))
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_since_epoch(at: Instant = None) -> float:
    delta = to_utc(at) - REFERENCE_NEW_MOON
    return delta.total_seconds() / 86400.0


def normalize_cycle(days: float, period: float) -> float:
    """Return ``days`` folded into ``[0, period)``."""

    value = math.fmod(days, period)
    if value < 0:
        value += period
    # A tiny negative remainder can round up to exactly ``period``.
    if value >= period:
        value = 0.0
    return value


def phase_for_day(day_in_cycle: float) -> str:
    for upper, phase in PHASE_THRESHOLDS:
        if day_in_cycle < upper:
            return phase
    return "waning-crescent"


def phase_bounds(phase: str) -> tuple[float, float]:
    lowers = [0.0] + [upper for upper, _ in PHASE_THRESHOLDS]
    uppers = [upper for upper, _ in PHASE_THRESHOLDS] + [SYNODIC_MONTH]
    idx = PHASES.index(phase)
    return lowers[idx], uppers[idx]


def illumination_for_day(day_in_cycle: float) -> int:
    fraction = (1 - math.cos(2 * math.pi * day_in_cycle / SYNODIC_MONTH)) / 2
    return int(math.floor(fraction * 100 + 0.5))


def zodiac_index_for_days(days: float) -> int:
    zodiac_day = normalize_cycle(days, SIDEREAL_MONTH)
    return int(math.floor(zodiac_day / SIDEREAL_MONTH * 12)) % 12


def compute_lunar_state(at: Instant = None, override: Optional[LunarOverride] = None) -> LunarState:
    """Compute the lunar state for ``at`` (UTC; defaults to now).

    When ``override`` is supplied the computed sky is ignored entirely and
    the state is built from the override alone.
    """

    if override is not None:
        return state_from_override(override)

    days = days_since_epoch(at)
    day_in_cycle = normalize_cycle(days, SYNODIC_MONTH)
    phase = phase_for_day(day_in_cycle)
    idx = zodiac_index_for_days(days)
    sign = SIGN_NAMES[idx]
    return LunarState(
        phase=phase,
        category=PHASE_CATEGORY[phase],
        illumination_percent=illumination_for_day(day_in_cycle),
        day_in_cycle=day_in_cycle,
        zodiac_sign=sign,
        zodiac_index=idx,
        element=element_for_sign(sign),
    )


def _lookup(field: str, value: Optional[str], options: list[str]) -> Optional[str]:
    if value is None:
        return None
    key = str(value).strip().lower().replace("_", "-").replace(" ", "-")
    for option in options:
        if option.lower() == key:
            return option
    raise InvalidInputError(field, f"unrecognized value {value!r}; expected one of {', '.join(options)}")


def state_from_override(override: LunarOverride) -> LunarState:
    category = _lookup("category", override.category, CATEGORIES)
    phase = _lookup("phase", override.phase, PHASES)
    element = _lookup("element", override.element, ELEMENTS)
    sign = _lookup("zodiac_sign", override.zodiac_sign, SIGN_NAMES)

    if phase is None and category is None:
        raise InvalidInputError("category", "an override needs a category or a phase")
    if phase is None:
        phase = REPRESENTATIVE_PHASE[category]
    elif category is not None and PHASE_CATEGORY[phase] != category:
        raise InvalidInputError("phase", f"{phase} is not a {category} phase")

    if sign is None and element is None:
        raise InvalidInputError("element", "an override needs an element or a zodiac sign")
    if sign is None:
        sign = signs_for_element(element)[0]
    elif element is not None and element_for_sign(sign) != element:
        raise InvalidInputError("zodiac_sign", f"{sign} is not a {element} sign")

    low, high = phase_bounds(phase)
    day_in_cycle = (low + high) / 2
    return LunarState(
        phase=phase,
        category=PHASE_CATEGORY[phase],
        illumination_percent=illumination_for_day(day_in_cycle),
        day_in_cycle=day_in_cycle,
        zodiac_sign=sign,
        zodiac_index=sign_index(sign),
        element=element_for_sign(sign),
        overridden=True,
    )
