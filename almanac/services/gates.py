"""Celestial gates: lunar, dry-day seed saving, and seasonal windows.

Lunar gates are OR-composed (phase condition *or* sign triad). The seed
saving gate is an AND of a dry element and a waning/full moon; keep the two
compositions apart when adding rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from .constants import DRY_ELEMENTS, EARTH_SIGNS, FIRE_SIGNS, WATER_SIGNS, AIR_SIGNS
from .errors import InvalidInputError
from .lunar import Instant, LunarOverride, LunarState, compute_lunar_state
from .seasons import OFF_SEASON, SEASONAL_MOVEMENTS, SeasonalMovement, find_movement_allowing, resolve_movement

logger = logging.getLogger(__name__)

LUNAR_GATE = "LUNAR GATE"
SEED_GATE = "DRY-DAY GATE"
SEASONAL_GATE = "SEASONAL GATE"

TASK_CLASSES = ("root", "leaf", "fruit", "seed-saving", "season-bound")

GATES_BY_CLASS = {
    "root": (LUNAR_GATE, SEASONAL_GATE),
    "leaf": (LUNAR_GATE, SEASONAL_GATE),
    "fruit": (LUNAR_GATE, SEASONAL_GATE),
    "seed-saving": (SEED_GATE,),
    "season-bound": (SEASONAL_GATE,),
}


@dataclass(frozen=True)
class GateResult:
    passed: bool
    gate: str
    message: str
    resolution: Optional[str] = None
    wait_until: Optional[str] = None

    def as_dict(self) -> dict:
        return {
            "passed": self.passed,
            "gate": self.gate,
            "message": self.message,
            "resolution": self.resolution,
            "wait_until": self.wait_until,
        }


@dataclass(frozen=True)
class TaskDescriptor:
    task_class: str
    crop: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        key = (self.task_class or "").strip().lower().replace("_", "-").replace(" ", "-")
        if key not in TASK_CLASSES:
            raise InvalidInputError("task_class", f"unrecognized class {self.task_class!r}")
        object.__setattr__(self, "task_class", key)


@dataclass(frozen=True)
class TaskEvaluation:
    task: TaskDescriptor
    lunar: LunarState
    movement: SeasonalMovement
    results: tuple[GateResult, ...]

    @property
    def blocked(self) -> bool:
        return any(not r.passed for r in self.results)


def _triad(signs: Sequence[str]) -> str:
    return "/".join(signs)


def lunar_gate(task_class: str, lunar: LunarState) -> GateResult:
    observed = f"Moon is {lunar.category} ({lunar.phase}) in {lunar.zodiac_sign}"

    if task_class == "root":
        waning = lunar.category == "waning"
        earth = lunar.zodiac_sign in EARTH_SIGNS
        if waning or earth:
            why = "Waning Moon (energy descending)" if waning else f"Moon in {lunar.zodiac_sign} (Earth Sign)"
            return GateResult(True, LUNAR_GATE, f"Root window open: {why}")
        return GateResult(
            False,
            LUNAR_GATE,
            f"Root window closed: {observed}; root work needs a waning moon or an earth sign ({_triad(EARTH_SIGNS)}).",
            resolution="Root crops need descending energy. Hold planting until the moon wanes.",
            wait_until=f"Next waning moon or Earth sign ({_triad(EARTH_SIGNS)})",
        )

    if task_class == "leaf":
        rising = lunar.category in ("waxing", "new")
        water = lunar.zodiac_sign in WATER_SIGNS
        if rising or water:
            why = "Waxing Moon (energy rising)" if rising else f"Moon in {lunar.zodiac_sign} (Water Sign)"
            return GateResult(True, LUNAR_GATE, f"Leaf window open: {why}")
        return GateResult(
            False,
            LUNAR_GATE,
            f"Leaf window closed: {observed}; leaf work needs a new or waxing moon or a water sign ({_triad(WATER_SIGNS)}).",
            resolution="Leaf crops need rising water. Hold planting until the moon waxes.",
            wait_until=f"Next waxing moon or Water sign ({_triad(WATER_SIGNS)})",
        )

    if task_class == "fruit":
        peak = lunar.category == "full" or lunar.phase == "waxing-gibbous"
        fire = lunar.zodiac_sign in FIRE_SIGNS
        if peak or fire:
            why = "Full Moon approach (maximum light)" if peak else f"Moon in {lunar.zodiac_sign} (Fire Sign)"
            return GateResult(True, LUNAR_GATE, f"Fruit window open: {why}")
        return GateResult(
            False,
            LUNAR_GATE,
            f"Fruit window closed: {observed}; fruit work needs a full or waxing-gibbous moon or a fire sign ({_triad(FIRE_SIGNS)}).",
            resolution="Fruit swelling peaks with maximum lunar light.",
            wait_until=f"Next full moon or Fire sign ({_triad(FIRE_SIGNS)})",
        )

    return GateResult(True, LUNAR_GATE, "Not applicable")


def seed_saving_gate(lunar: LunarState) -> GateResult:
    dry = lunar.element in DRY_ELEMENTS
    strong = lunar.category in ("waning", "full")

    if dry and strong:
        return GateResult(
            True,
            SEED_GATE,
            f"Seed window open: dry day (Moon in {lunar.zodiac_sign} / {lunar.element}) with a {lunar.category} moon",
        )
    if not dry:
        return GateResult(
            False,
            SEED_GATE,
            f"Seed window closed: Moon in {lunar.zodiac_sign} ({lunar.element}) is a moist day.",
            resolution="Seeds need fire or air days to dry properly and avoid mold.",
            wait_until=f"Next dry day: Fire sign ({_triad(FIRE_SIGNS)}) or Air sign ({_triad(AIR_SIGNS)})",
        )
    return GateResult(
        False,
        SEED_GATE,
        f"Seed window closed: {lunar.category} moon ({lunar.phase}) is a low energy window.",
        resolution="Seeds prefer a waning moon (dormancy) or a full moon (peak vitality).",
        wait_until="Next waning or full moon",
    )


def matching_token(crop: str, tokens: Sequence[str]) -> Optional[str]:
    """Return the first token contained in ``crop`` (case-insensitive)."""

    name = crop.lower()
    for token in tokens:
        if token.lower() in name:
            return token
    return None


def seasonal_gate(
    crop: str,
    movement: SeasonalMovement,
    movements: Sequence[SeasonalMovement] = SEASONAL_MOVEMENTS,
) -> GateResult:
    if movement is OFF_SEASON:
        return GateResult(True, SEASONAL_GATE, f"No seasonal movement is active; {crop} is not seasonally gated.")

    token = matching_token(crop, movement.blocked_crops)
    if token is None:
        return GateResult(True, SEASONAL_GATE, f"Seasonal window open: {crop} aligns with {movement.name}")

    allowed = find_movement_allowing(crop, movements)
    return GateResult(
        False,
        SEASONAL_GATE,
        f"Frequency mismatch: the soil is singing the {movement.octave}. {crop} ({token}) will stall.",
        resolution=movement.block_message,
        wait_until=f"{allowed.name} ({allowed.start_label})" if allowed else None,
    )


def run_gates(
    task: TaskDescriptor,
    lunar: LunarState,
    movement: SeasonalMovement,
    gates: Optional[Sequence[str]] = None,
    movements: Sequence[SeasonalMovement] = SEASONAL_MOVEMENTS,
) -> tuple[GateResult, ...]:
    results = []
    if gates is None:
        gates = GATES_BY_CLASS[task.task_class]
    for gate in gates:
        if gate == LUNAR_GATE:
            results.append(lunar_gate(task.task_class, lunar))
        elif gate == SEED_GATE:
            results.append(seed_saving_gate(lunar))
        elif gate == SEASONAL_GATE:
            results.append(seasonal_gate(task.crop, movement, movements))
        else:
            raise InvalidInputError("gates", f"unknown gate {gate!r}")
    return tuple(results)


def evaluate_task(
    task: TaskDescriptor,
    at: Instant = None,
    override: Optional[LunarOverride] = None,
    gates: Optional[Sequence[str]] = None,
    movements: Sequence[SeasonalMovement] = SEASONAL_MOVEMENTS,
) -> TaskEvaluation:
    """Evaluate every applicable gate for ``task`` at instant ``at``."""

    lunar = compute_lunar_state(at, override=override)
    movement = resolve_movement(at, movements)
    results = run_gates(task, lunar, movement, gates=gates, movements=movements)
    evaluation = TaskEvaluation(task=task, lunar=lunar, movement=movement, results=results)
    logger.info(
        "celestial_task_evaluated",
        extra={
            "task_class": task.task_class,
            "crop": task.crop,
            "blocked": evaluation.blocked,
            "overridden": lunar.overridden,
        },
    )
    return evaluation
