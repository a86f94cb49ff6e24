from pydantic import BaseModel, Field
from typing import Optional, List, Dict


class BedCreateRequest(BaseModel):
    frequency_hz: int
    bed_number: Optional[int] = None
    length_ft: Optional[float] = Field(default=None, gt=0)
    width_ft: Optional[float] = Field(default=None, gt=0)


class AssignmentOut(BaseModel):
    crop_id: str
    crop_name: str
    role: str
    plant_count: int
    assigned_at: str


class ComplexityOut(BaseModel):
    level: str
    percentage: int
    label: str
    is_master_conductor: bool = False


class BedOut(BaseModel):
    id: str
    bed_number: int
    frequency_hz: int
    length_ft: float
    width_ft: float
    slots: Dict[str, Optional[AssignmentOut]]
    inoculant_type: Optional[str] = None
    aerial_crop_id: Optional[str] = None
    complexity: ComplexityOut
    water_factor: float


class AssignRequest(BaseModel):
    crop_id: str


class AssignmentResultOut(BaseModel):
    ok: bool
    bed_id: str
    role: Optional[str] = None
    error: Optional[str] = None
    message: str = ""
    assignment: Optional[AssignmentOut] = None


class SuggestionOut(BaseModel):
    role: str
    crop_id: str
    crop_name: str
    source: str
    rank: int


class SuggestionsResponse(BaseModel):
    bed_id: str
    suggestions: List[SuggestionOut]


class ApplySuggestionsRequest(BaseModel):
    # Crop ids applied in the given order; ids with no current suggestion are
    # skipped. Omitted means every current suggestion in rank order.
    crop_ids: Optional[List[str]] = None


class ApplySuggestionsResponse(BaseModel):
    bed_id: str
    applied: int
    total: int
    summary: str
    aborted: bool = False
    results: List[AssignmentResultOut]


class OverlayRequest(BaseModel):
    inoculant_type: Optional[str] = None
    aerial_crop_id: Optional[str] = None
