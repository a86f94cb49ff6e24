from fastapi import APIRouter
from ..schemas import TextRequest, ActionVerdictOut, PestVerdictOut
from ..services.events import CHANNEL
from ..services.intervention import classify_action, diagnose_pest

router = APIRouter(prefix="/v1/intervention", tags=["intervention"])


@router.post("/action", response_model=ActionVerdictOut)
def intervention_action(req: TextRequest):
    verdict = classify_action(req.text)
    if verdict.allowed:
        return {"allowed": True}
    return {
        "allowed": False,
        "rule": verdict.rule.name,
        "matched_keyword": verdict.matched_keyword,
        "alternatives": list(verdict.rule.alternatives),
        "citation": verdict.rule.citation,
    }


@router.post("/pest", response_model=PestVerdictOut)
def intervention_pest(req: TextRequest):
    verdict = diagnose_pest(req.text, channel=CHANNEL)
    d = verdict.diagnosis
    return {
        "recognized": verdict.recognized,
        "pest": d.pest,
        "matched_keyword": verdict.matched_keyword,
        "likely_cause": d.likely_cause,
        "directive": d.directive,
        "actions": list(d.actions),
    }
