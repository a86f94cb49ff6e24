from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union


class ZoneReading(BaseModel):
    id: int
    value: Optional[float] = None


class IrrigationIn(BaseModel):
    at: str  # ISO-8601
    zone: int
    amount: float = 0.0
    method: str = "drip"


class HarmonicCheckRequest(BaseModel):
    target_zone: int
    zones: List[ZoneReading] = []
    irrigation: List[IrrigationIn] = []
    now: Optional[str] = None
    policy: Optional[Literal["fail-open", "fail-closed"]] = None


class HarmonicAlertOut(BaseModel):
    kind: str
    dependency_id: str
    message: str
    resolution: Optional[str] = None
    source_zone: Optional[int] = None
    target_zone: Union[int, str, None] = None
    observed_value: Optional[float] = None
    threshold: Optional[float] = None
    severity: Optional[str] = None
    irrigation_issue: Optional[str] = None


class HarmonicCheckResponse(BaseModel):
    target_zone: int
    approved: bool
    note: Optional[str] = None
    alerts: List[HarmonicAlertOut]


class SignalRequest(BaseModel):
    event: str = Field(min_length=1)
    payload: Optional[dict] = None


class DirectiveOut(BaseModel):
    alert: HarmonicAlertOut
    signals: int
    activated_at: str


class DirectivesResponse(BaseModel):
    directives: List[DirectiveOut]
