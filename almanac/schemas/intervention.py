from pydantic import BaseModel
from typing import Optional, List


class TextRequest(BaseModel):
    text: str


class ActionVerdictOut(BaseModel):
    allowed: bool
    rule: Optional[str] = None
    matched_keyword: Optional[str] = None
    alternatives: List[str] = []
    citation: Optional[str] = None


class PestVerdictOut(BaseModel):
    recognized: bool
    pest: str
    matched_keyword: Optional[str] = None
    likely_cause: str
    directive: str
    actions: List[str] = []
