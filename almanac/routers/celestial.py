from fastapi import APIRouter, Body
from ..schemas import (
    CelestialStateRequest,
    CelestialStateResponse,
    CelestialCheckRequest,
    CelestialCheckResponse,
    LunarOverrideIn,
    MovementOut,
)
from typing import List, Optional
from ..services.gates import TaskDescriptor, evaluate_task
from ..services.lunar import LunarOverride, compute_lunar_state
from ..services.seasons import SEASONAL_MOVEMENTS, resolve_movement

router = APIRouter(prefix="/v1/celestial", tags=["celestial"])


def _override(payload: Optional[LunarOverrideIn]) -> Optional[LunarOverride]:
    if payload is None:
        return None
    return LunarOverride(**payload.model_dump())


@router.post("/state", response_model=CelestialStateResponse)
def celestial_state(req: Optional[CelestialStateRequest] = None):
    req = req or CelestialStateRequest()
    lunar = compute_lunar_state(req.at, override=_override(req.override))
    movement = resolve_movement(req.at)
    return {"lunar": lunar.as_dict(), "movement": movement.as_dict()}


@router.post("/check", response_model=CelestialCheckResponse)
def celestial_check(
    req: CelestialCheckRequest = Body(
        ...,
        example={
            "task": {"task_class": "root", "crop": "Carrots"},
            "at": "2024-02-10T12:00:00Z",
        },
    )
):
    task = TaskDescriptor(req.task.task_class, req.task.crop, req.task.name)
    evaluation = evaluate_task(task, at=req.at, override=_override(req.override), gates=req.gates)
    return {
        "task": {"task_class": task.task_class, "crop": task.crop, "name": task.name},
        "lunar": evaluation.lunar.as_dict(),
        "movement": evaluation.movement.as_dict(),
        "results": [r.as_dict() for r in evaluation.results],
        "blocked": evaluation.blocked,
    }


@router.get("/movements", response_model=List[MovementOut])
def celestial_movements():
    return [m.as_dict() for m in SEASONAL_MOVEMENTS]
