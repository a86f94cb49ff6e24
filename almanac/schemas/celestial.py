from pydantic import BaseModel, Field
from typing import Optional, List


class LunarOverrideIn(BaseModel):
    category: Optional[str] = None
    element: Optional[str] = None
    zodiac_sign: Optional[str] = None
    phase: Optional[str] = None


class TaskIn(BaseModel):
    task_class: str
    crop: str
    name: Optional[str] = None


class CelestialStateRequest(BaseModel):
    at: Optional[str] = None  # ISO-8601, defaults to now
    override: Optional[LunarOverrideIn] = None


class CelestialCheckRequest(BaseModel):
    task: TaskIn
    at: Optional[str] = None
    override: Optional[LunarOverrideIn] = None
    gates: Optional[List[str]] = None


class LunarStateOut(BaseModel):
    phase: str
    phase_label: str
    category: str
    illumination_percent: int = Field(ge=0, le=100)
    day_in_cycle: float
    zodiac_sign: str
    zodiac_label: str
    zodiac_index: int = Field(ge=0, le=11)
    element: str
    overridden: bool = False


class MovementOut(BaseModel):
    id: str
    name: str
    octave: str
    start: str  # MM-DD
    end: str
    hz: int
    allowed_crops: List[str] = []
    blocked_crops: List[str] = []
    block_message: str = ""


class GateResultOut(BaseModel):
    passed: bool
    gate: str
    message: str
    resolution: Optional[str] = None
    wait_until: Optional[str] = None


class CelestialStateResponse(BaseModel):
    lunar: LunarStateOut
    movement: MovementOut


class CelestialCheckResponse(BaseModel):
    task: TaskIn
    lunar: LunarStateOut
    movement: MovementOut
    results: List[GateResultOut]
    blocked: bool
