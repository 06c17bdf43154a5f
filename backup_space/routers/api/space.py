"""API routes for destination space checks."""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from backup_space.schemas import CapacityInfo, ProbeFailure, SpaceCheckRequest, SpaceCheckResponse
from backup_space.services.capacity_probe import probe
from backup_space.services.destination_checker import evaluate_all, format_verdict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/space", tags=["space"])


@router.post("/check", response_model=SpaceCheckResponse)
def check_space(request: SpaceCheckRequest):
    """Check all backup destinations for enough space to copy ``required_bytes``."""
    decision = evaluate_all(request.destinations, request.required_bytes, request.buffer_bytes)
    return SpaceCheckResponse(
        **decision.model_dump(include={"can_proceed", "warnings", "errors"}),
        verdicts=decision.verdicts,
        messages=[format_verdict(v) for v in decision.verdicts],
    )


@router.get("/capacity", response_model=CapacityInfo)
def get_capacity(path: str = Query(..., min_length=1)):
    """Get the probed capacity of the volume holding a path."""
    result = probe(path)
    if isinstance(result, ProbeFailure):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unable to determine available disk space for {path}",
        )
    return result
