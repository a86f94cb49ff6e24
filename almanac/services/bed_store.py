"""In-memory bed store.

Stands in for the persistence service: beds are kept in-process behind a
threading lock and addressed by id. Slot writes go through the assigner,
which takes each bed's own lock.
"""

import threading
import uuid
from typing import Dict, List, Optional

from .chords import Bed


class BedStore:
    def __init__(self) -> None:
        self._beds: Dict[str, Bed] = {}
        self._lock = threading.Lock()

    # Basic get/set helpers ---------------------------------------------

    def get(self, bed_id: str) -> Optional[Bed]:
        with self._lock:
            return self._beds.get(bed_id)

    def put(self, bed: Bed) -> Bed:
        with self._lock:
            self._beds[bed.id] = bed
        return bed

    def create(self, frequency_hz: int, bed_number: Optional[int] = None, **dims: float) -> Bed:
        """Create a bed and return it. ``bed_number`` defaults to the next free number."""

        with self._lock:
            if bed_number is None:
                bed_number = max((b.bed_number for b in self._beds.values()), default=0) + 1
            bed = Bed(id="bed_" + uuid.uuid4().hex[:12], bed_number=bed_number, frequency_hz=frequency_hz, **dims)
            self._beds[bed.id] = bed
        return bed

    def delete(self, bed_id: str) -> bool:
        with self._lock:
            return self._beds.pop(bed_id, None) is not None

    def list(self) -> List[Bed]:
        with self._lock:
            return sorted(self._beds.values(), key=lambda b: b.bed_number)


# Global singleton store used by the API.
STORE = BedStore()
