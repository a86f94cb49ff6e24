"""Crop catalog lookups and the static chord recipe table."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def parse_spacing(value: Union[str, float, int, None]) -> Optional[float]:
    """Leading number of a spacing value in inches; ``None`` when unusable.

    "12-18" reads as 12 so ranges use their tightest spacing.
    """

    if value is None:
        return None
    if isinstance(value, (int, float)):
        spacing = float(value)
    else:
        match = _NUMBER.search(str(value))
        if not match:
            return None
        spacing = float(match.group(0))
    return spacing if spacing > 0 else None


@dataclass(frozen=True)
class CropRecord:
    id: str
    name: str
    frequency_hz: int
    chord_interval: Optional[str] = None
    spacing_inches: Optional[float] = None
    common_name: Optional[str] = None
    companion_crops: tuple[str, ...] = ()

    @property
    def display_name(self) -> str:
        return self.common_name or self.name

    def matches_name(self, name: str) -> bool:
        key = name.strip().lower()
        return key in {self.name.lower(), (self.common_name or "").lower()}

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "common_name": self.common_name,
            "frequency_hz": self.frequency_hz,
            "chord_interval": self.chord_interval,
            "spacing_inches": self.spacing_inches,
            "companion_crops": list(self.companion_crops),
        }


class CropCatalog:
    def __init__(self, crops: Iterable[CropRecord] = ()) -> None:
        self._crops: Dict[str, CropRecord] = {}
        self._lock = threading.Lock()
        for crop in crops:
            self.add(crop)

    def add(self, crop: CropRecord) -> CropRecord:
        with self._lock:
            self._crops[crop.id] = crop
        return crop

    def get(self, crop_id: str) -> Optional[CropRecord]:
        with self._lock:
            return self._crops.get(crop_id)

    def find_by_name(self, name: str) -> Optional[CropRecord]:
        with self._lock:
            crops = list(self._crops.values())
        for crop in crops:
            if crop.matches_name(name):
                return crop
        return None

    def all(self) -> List[CropRecord]:
        with self._lock:
            return list(self._crops.values())


ROOT = "Root (Lead)"
THIRD = "3rd (Triad)"
FIFTH = "5th (Stabilizer)"
SEVENTH = "7th (Signal)"

SEED_CROPS = (
    CropRecord("heirloom-tomato", "Heirloom Tomato", 396, ROOT, 24.0,
               companion_crops=("Genovese Basil", "Bush Beans", "Marigold", "Mammoth Sunflower")),
    CropRecord("abe-lincoln-tomato", "Abe Lincoln Tomato", 396, ROOT, 24.0,
               companion_crops=("Basil (Red Rubin)", "Bocking 14 Comfrey")),
    CropRecord("genovese-basil", "Genovese Basil", 396, THIRD, 12.0, common_name="Basil"),
    CropRecord("red-rubin-basil", "Basil (Red Rubin)", 396, THIRD, 12.0),
    CropRecord("bush-beans", "Bush Beans", 396, FIFTH, 6.0),
    CropRecord("bocking-comfrey", "Bocking 14 Comfrey", 396, FIFTH, 36.0),
    CropRecord("marigold", "Marigold", 396, SEVENTH, 10.0, common_name="Marigold (Sentinel)"),
    CropRecord("red-carrots", "Red Carrots", 396, None, 3.0),
    CropRecord("butternut-squash", "Butternut Squash", 417, ROOT, 36.0,
               companion_crops=("Dill (Bouquet)", "Pole Beans", "Calendula")),
    CropRecord("dill", "Dill (Bouquet)", 417, THIRD, 12.0),
    CropRecord("pole-beans", "Pole Beans", 417, FIFTH, 6.0),
    CropRecord("calendula", "Calendula", 417, SEVENTH, 12.0),
    CropRecord("glass-gem-corn", "Glass Gem Corn", 528, ROOT, 12.0,
               companion_crops=("Lemon Balm", "Cowpea", "Mammoth Sunflower")),
    CropRecord("lemon-balm", "Lemon Balm", 528, THIRD, 18.0),
    CropRecord("cowpea", "Cowpea", 528, FIFTH, 6.0),
    CropRecord("mammoth-sunflower", "Mammoth Sunflower", 528, SEVENTH, 60.0),
    CropRecord("arikara-sunflower", "Arikara Sunflower", 528, SEVENTH, 24.0),
    CropRecord("garlic", "Garlic", 963, None, 6.0),
)


@dataclass(frozen=True)
class RecipeEntry:
    role: str
    crop_name: str
    spacing_inches: Optional[float] = None


@dataclass(frozen=True)
class ChordRecipe:
    frequency_hz: int
    chord_name: str
    entries: tuple[RecipeEntry, ...]

    def entry_for(self, role: str) -> Optional[RecipeEntry]:
        for entry in self.entries:
            if entry.role == role:
                return entry
        return None


CHORD_RECIPES: tuple[ChordRecipe, ...] = (
    ChordRecipe(396, "The Root 13th", (
        RecipeEntry(ROOT, "Heirloom Tomato", 24.0),
        RecipeEntry(THIRD, "Genovese Basil", 12.0),
        RecipeEntry(FIFTH, "Bush Beans", 6.0),
        RecipeEntry(SEVENTH, "Marigold (Sentinel)", 10.0),
    )),
    ChordRecipe(396, "The Abe Lincoln 13th", (
        RecipeEntry(ROOT, "Abe Lincoln Tomato", 24.0),
        RecipeEntry(THIRD, "Basil (Red Rubin)", 12.0),
        RecipeEntry(FIFTH, "Bocking 14 Comfrey", 36.0),
        RecipeEntry(SEVENTH, "Red Knight Calendula", 12.0),
    )),
    ChordRecipe(417, "The Flow 13th", (
        RecipeEntry(ROOT, "Butternut Squash", 36.0),
        RecipeEntry(THIRD, "Dill (Bouquet)", 12.0),
        RecipeEntry(FIFTH, "Pole Beans", 6.0),
        RecipeEntry(SEVENTH, "Calendula", 12.0),
    )),
    ChordRecipe(528, "The Solar 13th", (
        RecipeEntry(ROOT, "Glass Gem Corn", 12.0),
        RecipeEntry(THIRD, "Lemon Balm", 18.0),
        RecipeEntry(FIFTH, "Cowpea", 6.0),
        RecipeEntry(SEVENTH, "Mammoth Sunflower", 60.0),
    )),
    ChordRecipe(528, "The Pollinator Solar 13th", (
        RecipeEntry(ROOT, "Glass Gem Corn", 12.0),
        RecipeEntry(THIRD, "Lemon Bergamot", 18.0),
        RecipeEntry(FIFTH, "Cowpea", 6.0),
        RecipeEntry(SEVENTH, "Arikara Sunflower", 24.0),
    )),
    ChordRecipe(639, "The Heart 13th", (
        RecipeEntry(ROOT, "Lacinato Kale", 18.0),
        RecipeEntry(THIRD, "Chamomile", 8.0),
        RecipeEntry(FIFTH, "Crimson Clover", 4.0),
        RecipeEntry(SEVENTH, "Borage", 18.0),
    )),
)

# Catalog shared by the HTTP routes.
CATALOG = CropCatalog(SEED_CROPS)
