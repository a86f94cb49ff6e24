from fastapi import APIRouter, HTTPException
from ..schemas import HarmonicCheckRequest, HarmonicCheckResponse, SignalRequest, DirectivesResponse
from ..services.events import CHANNEL
from ..services.harmonic import RESOLVER, HarmonicDependencyResolver, IrrigationEntry, default_zones
from ..services.lunar import to_utc

router = APIRouter(prefix="/v1/harmonic", tags=["harmonic"])


@router.post("/check", response_model=HarmonicCheckResponse)
def harmonic_check(req: HarmonicCheckRequest):
    zones = default_zones({z.id: z.value for z in req.zones})
    log = [IrrigationEntry(at=to_utc(e.at), zone=e.zone, amount=e.amount, method=e.method) for e in req.irrigation]
    # A per-request policy gets its own resolver; directives stay on the shared one.
    resolver = HarmonicDependencyResolver(RESOLVER.dependencies, policy=req.policy) if req.policy else RESOLVER
    result = resolver.check(req.target_zone, zones, irrigation_log=log, now=req.now)
    return {
        "target_zone": result.target_zone,
        "approved": result.approved,
        "note": result.note,
        "alerts": [a.as_dict() for a in result.alerts],
    }


@router.post("/signal")
def harmonic_signal(req: SignalRequest):
    handlers = CHANNEL.signal(req.event, req.payload)
    return {"event": req.event, "handlers": handlers}


@router.get("/directives", response_model=DirectivesResponse)
def harmonic_directives():
    return {
        "directives": [
            {"alert": d.alert.as_dict(), "signals": d.signals, "activated_at": d.activated_at.isoformat()}
            for d in RESOLVER.active_directives()
        ]
    }


@router.delete("/directives/{dependency_id}")
def harmonic_acknowledge(dependency_id: str):
    if not RESOLVER.acknowledge(dependency_id):
        raise HTTPException(status_code=404, detail="NOT_FOUND")
    return {"acknowledged": dependency_id}
