from dataclasses import asdict
from fastapi import APIRouter, HTTPException
from typing import Optional
from ..schemas import (
    BedCreateRequest,
    BedOut,
    AssignRequest,
    AssignmentResultOut,
    SuggestionsResponse,
    ApplySuggestionsRequest,
    ApplySuggestionsResponse,
    OverlayRequest,
)
from ..services.bed_store import STORE
from ..services.catalog import CATALOG
from ..services.chords import ChordSlotAssigner, complexity_score, water_factor
from ..services.errors import InvalidInputError

router = APIRouter(prefix="/v1/beds", tags=["chords"])

ASSIGNER = ChordSlotAssigner(CATALOG)


def _bed_or_404(bed_id: str):
    bed = STORE.get(bed_id)
    if bed is None:
        raise HTTPException(status_code=404, detail="NOT_FOUND")
    return bed


def _bed_out(bed) -> dict:
    out = bed.as_dict()
    out["complexity"] = asdict(complexity_score(bed))
    out["water_factor"] = water_factor(bed)
    return out


def _result_out(result) -> dict:
    return {
        "ok": result.ok,
        "bed_id": result.bed_id,
        "role": result.role,
        "error": result.error,
        "message": result.message,
        "assignment": result.assignment.as_dict() if result.assignment else None,
    }


def _suggestion_out(s) -> dict:
    return {"role": s.role, "crop_id": s.crop.id, "crop_name": s.crop.display_name, "source": s.source, "rank": s.rank}


@router.post("", response_model=BedOut, status_code=201)
def create_bed(req: BedCreateRequest):
    dims = {k: v for k, v in {"length_ft": req.length_ft, "width_ft": req.width_ft}.items() if v is not None}
    bed = STORE.create(req.frequency_hz, bed_number=req.bed_number, **dims)
    return _bed_out(bed)


@router.get("/{bed_id}", response_model=BedOut)
def get_bed(bed_id: str):
    return _bed_out(_bed_or_404(bed_id))


@router.post("/{bed_id}/assign", response_model=AssignmentResultOut)
def assign_crop(bed_id: str, req: AssignRequest):
    bed = _bed_or_404(bed_id)
    crop = CATALOG.get(req.crop_id)
    if crop is None:
        raise InvalidInputError("crop_id", f"unknown crop {req.crop_id!r}")
    result = ASSIGNER.assign(bed, crop)
    if not result.ok:
        raise HTTPException(status_code=409, detail={"error": result.error, "message": result.message})
    return _result_out(result)


@router.delete("/{bed_id}/slots/{role}", response_model=AssignmentResultOut)
def remove_crop(bed_id: str, role: str):
    bed = _bed_or_404(bed_id)
    result = ASSIGNER.remove(bed, role)
    if not result.ok:
        raise HTTPException(status_code=409, detail={"error": result.error, "message": result.message})
    return _result_out(result)


@router.put("/{bed_id}/overlays", response_model=BedOut)
def set_overlays(bed_id: str, req: OverlayRequest):
    bed = _bed_or_404(bed_id)
    ASSIGNER.set_inoculant(bed, req.inoculant_type)
    ASSIGNER.set_aerial_crop(bed, req.aerial_crop_id)
    return _bed_out(bed)


@router.get("/{bed_id}/suggestions", response_model=SuggestionsResponse)
def bed_suggestions(bed_id: str):
    bed = _bed_or_404(bed_id)
    return {"bed_id": bed.id, "suggestions": [_suggestion_out(s) for s in ASSIGNER.suggest(bed)]}


@router.post("/{bed_id}/suggestions/apply", response_model=ApplySuggestionsResponse)
def apply_bed_suggestions(bed_id: str, req: Optional[ApplySuggestionsRequest] = None):
    bed = _bed_or_404(bed_id)
    req = req or ApplySuggestionsRequest()
    suggestions = ASSIGNER.suggest(bed)
    if req.crop_ids is not None:
        by_id = {s.crop.id: s for s in suggestions}
        suggestions = [by_id[crop_id] for crop_id in dict.fromkeys(req.crop_ids) if crop_id in by_id]
    outcome = ASSIGNER.apply_suggestions(bed, suggestions)
    return {
        "bed_id": bed.id,
        "applied": outcome.applied,
        "total": outcome.total,
        "summary": outcome.summary,
        "aborted": outcome.aborted,
        "results": [_result_out(r) for r in outcome.results],
    }
