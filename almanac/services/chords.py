"""Chord slots on planting beds.

Every bed carries four ground roles modelled on a seventh chord. Each role
holds at most one crop; filling an occupied role is rejected, never
overwritten. Two overlays (fungal inoculant, aerial companion) sit outside
the four-slot constraint.
"""

from __future__ import annotations

import logging
import math
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from . import config
from .catalog import (
    CHORD_RECIPES,
    FIFTH,
    ROOT,
    SEVENTH,
    THIRD,
    ChordRecipe,
    CropCatalog,
    CropRecord,
    parse_spacing,
)
from .constants import ZONE_BANDS
from .errors import INVALID_ENTRY, NO_ROLE, SLOT_EMPTY, SLOT_OCCUPIED, InvalidInputError
from .lunar import to_utc

logger = logging.getLogger(__name__)

CHORD_ROLES = (ROOT, THIRD, FIFTH, SEVENTH)

HEX_PACKING = 0.866

INOCULANT_OPTIONS = (
    "Mycorrhizae",
    "Red Reishi",
    "Lion's Mane",
    "Wine Cap",
    "Oyster Mushrooms",
    "Turkey Tail",
    "Purple Spore Woodear",
    "White Ghost Fungus",
)

_ROLE_ALIASES = {
    "root": ROOT, "lead": ROOT, "1st": ROOT, "first": ROOT,
    "3rd": THIRD, "third": THIRD, "triad": THIRD,
    "5th": FIFTH, "fifth": FIFTH, "stabilizer": FIFTH,
    "7th": SEVENTH, "seventh": SEVENTH, "signal": SEVENTH,
}


def normalize_role(label: Optional[str]) -> Optional[str]:
    """Canonical role for ``label``; ``None`` stays ``None``."""

    if label is None:
        return None
    text = str(label).strip().lower()
    for role in CHORD_ROLES:
        if role.lower() == text:
            return role
    head = re.split(r"[\s(]", text, maxsplit=1)[0]
    if head in _ROLE_ALIASES:
        return _ROLE_ALIASES[head]
    raise InvalidInputError("role", f"unrecognized chord role {label!r}")


def plant_count(spacing_inches, length_ft: float, width_ft: float) -> int:
    """Hexagonal-packing plant count for a bed; at least one plant."""

    spacing = parse_spacing(spacing_inches)
    if spacing is None:
        return 1
    area = (length_ft * 12) * (width_ft * 12)
    return max(1, math.floor(area / (spacing * spacing * HEX_PACKING)))


@dataclass(frozen=True)
class Assignment:
    crop_id: str
    crop_name: str
    role: str
    plant_count: int
    assigned_at: datetime

    def as_dict(self) -> dict:
        return {
            "crop_id": self.crop_id,
            "crop_name": self.crop_name,
            "role": self.role,
            "plant_count": self.plant_count,
            "assigned_at": self.assigned_at.isoformat(),
        }


def _empty_slots() -> Dict[str, Optional[Assignment]]:
    return {role: None for role in CHORD_ROLES}


@dataclass
class Bed:
    id: str
    bed_number: int
    frequency_hz: int
    length_ft: float = field(default_factory=config.default_bed_length_ft)
    width_ft: float = field(default_factory=config.default_bed_width_ft)
    slots: Dict[str, Optional[Assignment]] = field(default_factory=_empty_slots)
    inoculant_type: Optional[str] = None
    aerial_crop_id: Optional[str] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.frequency_hz not in ZONE_BANDS:
            raise InvalidInputError("frequency_hz", f"{self.frequency_hz} is not a zone band")
        if self.length_ft <= 0:
            raise InvalidInputError("length_ft", "bed length must be positive")
        if self.width_ft <= 0:
            raise InvalidInputError("width_ft", "bed width must be positive")

    @property
    def width_inches(self) -> float:
        return self.width_ft * 12

    def empty_roles(self) -> List[str]:
        return [role for role in CHORD_ROLES if self.slots.get(role) is None]

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "bed_number": self.bed_number,
            "frequency_hz": self.frequency_hz,
            "length_ft": self.length_ft,
            "width_ft": self.width_ft,
            "slots": {role: (a.as_dict() if a else None) for role, a in self.slots.items()},
            "inoculant_type": self.inoculant_type,
            "aerial_crop_id": self.aerial_crop_id,
        }


@dataclass(frozen=True)
class AssignmentResult:
    ok: bool
    bed_id: str
    role: Optional[str]
    error: Optional[str] = None
    message: str = ""
    assignment: Optional[Assignment] = None


@dataclass(frozen=True)
class Suggestion:
    role: str
    crop: CropRecord
    source: str
    rank: int = 0


@dataclass
class BulkApplyResult:
    total: int
    results: List[AssignmentResult] = field(default_factory=list)
    aborted: bool = False

    @property
    def applied(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def summary(self) -> str:
        return f"{self.applied} of {self.total} applied"


@dataclass(frozen=True)
class ComplexityScore:
    level: str
    percentage: int
    label: str
    is_master_conductor: bool = False


class ChordSlotAssigner:
    def __init__(self, catalog: CropCatalog, recipes: Sequence[ChordRecipe] = CHORD_RECIPES) -> None:
        self.catalog = catalog
        self.recipes = tuple(recipes)

    # Direct assignment ---------------------------------------------------

    def assign(self, bed: Bed, crop: CropRecord, at=None) -> AssignmentResult:
        try:
            role = normalize_role(crop.chord_interval)
        except InvalidInputError:
            # Overlay intervals such as "11th (Fungal)" hold no ground slot.
            role = None
        if role is None:
            return AssignmentResult(False, bed.id, None, NO_ROLE, f"{crop.display_name} has no chord interval assignment.")

        count = plant_count(crop.spacing_inches, bed.length_ft, bed.width_ft)
        # Occupancy is re-checked under the lock so two writers cannot both fill a slot.
        with bed.lock:
            current = bed.slots.get(role)
            if current is not None:
                logger.info("chord_slot_occupied", extra={"bed_id": bed.id, "role": role, "crop_id": crop.id})
                return AssignmentResult(
                    False,
                    bed.id,
                    role,
                    SLOT_OCCUPIED,
                    f"{role} slot is already filled by {current.crop_name}. Remove the existing crop first.",
                )
            assignment = Assignment(crop.id, crop.display_name, role, count, to_utc(at))
            bed.slots[role] = assignment
        logger.info("chord_slot_assigned", extra={"bed_id": bed.id, "role": role, "crop_id": crop.id, "plant_count": count})
        return AssignmentResult(True, bed.id, role, message=f"{crop.display_name} -> {role}", assignment=assignment)

    def remove(self, bed: Bed, role: str) -> AssignmentResult:
        role = normalize_role(role)
        with bed.lock:
            current = bed.slots.get(role)
            if current is None:
                return AssignmentResult(False, bed.id, role, SLOT_EMPTY, f"{role} slot has no crop to remove.")
            bed.slots[role] = None
        logger.info("chord_slot_removed", extra={"bed_id": bed.id, "role": role, "crop_id": current.crop_id})
        return AssignmentResult(True, bed.id, role, message=f"Removed {current.crop_name}", assignment=current)

    # Suggestions -----------------------------------------------------------

    def fits(self, crop: CropRecord, bed: Bed) -> bool:
        spacing = parse_spacing(crop.spacing_inches)
        return spacing is None or spacing <= bed.width_inches

    def _planted_ids(self, bed: Bed) -> set:
        return {a.crop_id for a in bed.slots.values() if a is not None}

    def _recipe_crop(self, recipe: ChordRecipe, role: str) -> Optional[CropRecord]:
        entry = recipe.entry_for(role)
        if entry is None:
            return None
        known = self.catalog.find_by_name(entry.crop_name)
        if known is not None:
            return known
        slug = re.sub(r"[^a-z0-9]+", "-", entry.crop_name.lower()).strip("-")
        return CropRecord(
            id=f"recipe-{slug}",
            name=entry.crop_name,
            frequency_hz=recipe.frequency_hz,
            chord_interval=role,
            spacing_inches=entry.spacing_inches,
        )

    def suggest_for_slot(self, bed: Bed, role: str) -> Optional[Suggestion]:
        """Best crop for an empty ``role``: Root companions first, then recipes."""

        role = normalize_role(role)
        planted = self._planted_ids(bed)

        root = bed.slots.get(ROOT)
        root_crop = self.catalog.get(root.crop_id) if root else None
        if root_crop is not None:
            for name in root_crop.companion_crops:
                candidate = self.catalog.find_by_name(name)
                if candidate is None or candidate.id in planted:
                    continue
                if candidate.chord_interval == role and self.fits(candidate, bed):
                    return Suggestion(role, candidate, "companion")

        for recipe in self.recipes:
            if recipe.frequency_hz != bed.frequency_hz:
                continue
            candidate = self._recipe_crop(recipe, role)
            if candidate is None or candidate.id in planted or candidate.chord_interval != role:
                continue
            if self.fits(candidate, bed):
                return Suggestion(role, candidate, "recipe")
        return None

    def suggest(self, bed: Bed) -> List[Suggestion]:
        """Suggestions for every empty role, ranked in chord order."""

        found = []
        for role in bed.empty_roles():
            suggestion = self.suggest_for_slot(bed, role)
            if suggestion is not None:
                found.append(suggestion)
        return [Suggestion(s.role, s.crop, s.source, rank=i) for i, s in enumerate(found, start=1)]

    def apply_suggestions(
        self,
        bed: Bed,
        suggestions: Sequence[Suggestion],
        should_continue: Optional[Callable[[], bool]] = None,
        at=None,
    ) -> BulkApplyResult:
        """Assign each suggestion in turn; a rejected slot does not stop the rest.

        ``should_continue`` is polled before every fill; returning False
        aborts the remaining fills.
        """

        outcome = BulkApplyResult(total=len(suggestions))
        for suggestion in suggestions:
            if should_continue is not None and not should_continue():
                outcome.aborted = True
                break
            try:
                result = self.assign(bed, suggestion.crop, at=at)
            except InvalidInputError as exc:
                logger.warning("chord_suggestion_invalid", extra={"bed_id": bed.id, "crop_id": suggestion.crop.id, "field": exc.field})
                result = AssignmentResult(False, bed.id, None, INVALID_ENTRY, str(exc))
            outcome.results.append(result)
        logger.info(
            "chord_suggestions_applied",
            extra={"bed_id": bed.id, "applied": outcome.applied, "total": outcome.total, "aborted": outcome.aborted},
        )
        return outcome

    # Overlays --------------------------------------------------------------

    def set_inoculant(self, bed: Bed, inoculant: Optional[str]) -> Bed:
        if inoculant is not None and inoculant not in INOCULANT_OPTIONS:
            raise InvalidInputError("inoculant_type", f"unknown inoculant {inoculant!r}")
        with bed.lock:
            bed.inoculant_type = inoculant
        return bed

    def set_aerial_crop(self, bed: Bed, crop_id: Optional[str]) -> Bed:
        if crop_id is not None and self.catalog.get(crop_id) is None:
            raise InvalidInputError("aerial_crop_id", f"unknown crop {crop_id!r}")
        with bed.lock:
            bed.aerial_crop_id = crop_id
        return bed


def complexity_score(bed: Bed) -> ComplexityScore:
    filled = {role: bed.slots.get(role) is not None for role in CHORD_ROLES}
    has_11th = bed.inoculant_type is not None
    has_13th = bed.aerial_crop_id is not None
    triad = filled[ROOT] and filled[THIRD] and filled[FIFTH]
    seventh = triad and filled[SEVENTH]

    if seventh and has_11th and has_13th:
        return ComplexityScore("jazz_13th", 100, "Jazz 13th", True)
    if seventh:
        return ComplexityScore("seventh", 80, "7th Chord")
    if triad:
        return ComplexityScore("triad", 60, "Triad")
    ground = sum(filled.values()) * 20
    overlay = (int(has_11th) + int(has_13th)) * 10
    return ComplexityScore("incomplete", min(ground + overlay, 59), "Building...")


def water_factor(bed: Bed) -> float:
    """Share of the usual water a bed needs; the fungal network saves 10%."""

    return 0.90 if bed.inoculant_type is not None else 1.0
