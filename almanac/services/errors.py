"""Error kinds shared by the almanac engines.

Only malformed input raises. No-match lookups return sentinels and slot
constraint violations come back as result values so callers can recover
locally (pick another slot, date or crop).
"""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised at the boundary when a field cannot be interpreted."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


SLOT_OCCUPIED = "slot_occupied"
SLOT_EMPTY = "slot_empty"
NO_ROLE = "no_role"
INVALID_ENTRY = "invalid_entry"

ASSIGNMENT_ERRORS = (SLOT_OCCUPIED, SLOT_EMPTY, NO_ROLE, INVALID_ENTRY)
