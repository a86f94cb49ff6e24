"""Seasonal movements: named month-day windows with crop allow/block lists."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence, Union

from .errors import InvalidInputError
from .lunar import to_utc

logger = logging.getLogger(__name__)

# Month lengths in a leap year so Feb 29 is always covered.
_MONTH_DAYS = [31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


@dataclass(frozen=True)
class SeasonalMovement:
    id: str
    name: str
    octave: str
    start: tuple[int, int]
    end: tuple[int, int]
    hz: int
    allowed_crops: tuple[str, ...] = ()
    blocked_crops: tuple[str, ...] = ()
    block_message: str = ""

    @property
    def start_code(self) -> int:
        return self.start[0] * 100 + self.start[1]

    @property
    def end_code(self) -> int:
        return self.end[0] * 100 + self.end[1]

    @property
    def wraps(self) -> bool:
        return self.start_code > self.end_code

    @property
    def start_label(self) -> str:
        return f"{self.start[0]:02d}-{self.start[1]:02d}"

    @property
    def end_label(self) -> str:
        return f"{self.end[0]:02d}-{self.end[1]:02d}"

    def contains(self, code: int) -> bool:
        if self.wraps:
            return code >= self.start_code or code <= self.end_code
        return self.start_code <= code <= self.end_code

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "octave": self.octave,
            "start": self.start_label,
            "end": self.end_label,
            "hz": self.hz,
            "allowed_crops": list(self.allowed_crops),
            "blocked_crops": list(self.blocked_crops),
            "block_message": self.block_message,
        }


SEASONAL_MOVEMENTS: tuple[SeasonalMovement, ...] = (
    SeasonalMovement(
        id="root-whisper",
        name="THE ROOT WHISPER",
        octave="Deep Octave",
        start=(1, 15),
        end=(3, 15),
        hz=396,
        allowed_crops=("Carrots", "Beets", "Radish", "Turnips", "Potatoes"),
        blocked_crops=("Tomatoes", "Peppers", "Okra", "Watermelon", "Corn"),
        block_message="The Soil is still sleeping. Heat crops require warmer soil temps.",
    ),
    SeasonalMovement(
        id="cool-octave",
        name="THE COOL OCTAVE",
        octave="Cool Octave",
        start=(3, 16),
        end=(5, 28),
        hz=417,
        allowed_crops=("Lettuce", "Spinach", "Kale", "Peas", "Broccoli", "Cabbage"),
        blocked_crops=("Okra", "Watermelon", "Cantaloupe", "Sweet Potato", "Eggplant"),
        block_message="The Soil is singing the Cool Octave. Heat crops will stall.",
    ),
    SeasonalMovement(
        id="solar-peak",
        name="THE SOLAR PEAK",
        octave="Hot Octave",
        start=(5, 29),
        end=(8, 14),
        hz=528,
        allowed_crops=("Tomatoes", "Peppers", "Okra", "Watermelon", "Corn", "Beans", "Squash"),
        blocked_crops=("Lettuce", "Spinach", "Peas"),
        block_message="The Fire is too strong. Cool crops will bolt to seed.",
    ),
    SeasonalMovement(
        id="harvest-return",
        name="THE HARVEST RETURN",
        octave="Harvest Octave",
        start=(8, 15),
        end=(10, 31),
        hz=639,
        allowed_crops=("Fall Greens", "Garlic", "Onions", "Cover Crops", "Brassicas"),
        blocked_crops=("Watermelon", "Cantaloupe", "Corn"),
        block_message="The energy is descending. Summer crops will not mature.",
    ),
    SeasonalMovement(
        id="seed-sanctuary",
        name="THE SEED SANCTUARY",
        octave="Rest Octave",
        start=(11, 1),
        end=(1, 14),
        hz=963,
        allowed_crops=("Cover Crops", "Garlic", "Planning"),
        blocked_crops=("Most crops - rest period",),
        block_message="The soil is resting. Honor the fallow period.",
    ),
)

# Returned when a table has no window for the date. Blocks nothing.
OFF_SEASON = SeasonalMovement(
    id="off-season",
    name="OFF-SEASON",
    octave="Unscored",
    start=(0, 0),
    end=(0, 0),
    hz=0,
    block_message="No seasonal movement covers this date; check the movement table.",
)


def date_code(month: int, day: int) -> int:
    return month * 100 + day


def _month_day(on: Union[date, datetime, str, tuple[int, int], None]) -> tuple[int, int]:
    if isinstance(on, tuple):
        month, day = on
        if not 1 <= month <= 12 or not 1 <= day <= _MONTH_DAYS[month - 1]:
            raise InvalidInputError("on", f"no such month-day {month:02d}-{day:02d}")
        return month, day
    if isinstance(on, date) and not isinstance(on, datetime):
        return on.month, on.day
    moment = to_utc(on)
    return moment.month, moment.day


def resolve_movement(
    on: Union[date, datetime, str, tuple[int, int], None] = None,
    movements: Sequence[SeasonalMovement] = SEASONAL_MOVEMENTS,
) -> SeasonalMovement:
    """Return the first movement whose window covers ``on``.

    ``on`` may be a date, a datetime (converted to UTC), an ISO string or a
    ``(month, day)`` pair. A malformed table that leaves the date uncovered
    yields ``OFF_SEASON`` rather than an arbitrary movement.
    """

    month, day = _month_day(on)
    code = date_code(month, day)
    for movement in movements:
        if movement.contains(code):
            return movement
    logger.warning("seasonal_window_no_match", extra={"date_code": code})
    return OFF_SEASON


def find_movement_allowing(crop: str, movements: Iterable[SeasonalMovement] = SEASONAL_MOVEMENTS) -> Optional[SeasonalMovement]:
    name = crop.lower()
    for movement in movements:
        if any(token.lower() in name for token in movement.allowed_crops):
            return movement
    return None


@dataclass
class PartitionReport:
    gaps: list[str] = field(default_factory=list)
    overlaps: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.gaps and not self.overlaps


def validate_partition(movements: Sequence[SeasonalMovement] = SEASONAL_MOVEMENTS) -> PartitionReport:
    """Check that ``movements`` cover every month-day exactly once."""

    report = PartitionReport()
    for month, days in enumerate(_MONTH_DAYS, start=1):
        for day in range(1, days + 1):
            code = date_code(month, day)
            hits = [m.id for m in movements if m.contains(code)]
            label = f"{month:02d}-{day:02d}"
            if not hits:
                report.gaps.append(label)
            elif len(hits) > 1:
                report.overlaps.append(f"{label}: {', '.join(hits)}")
    return report
