"""Delta endpoints - detection and reviewer status changes."""
from collections import Counter
from fastapi import APIRouter, HTTPException

from supplement_engine.exceptions import IllegalStatusTransition
from supplement_engine.models.delta import DeltaItem
from supplement_engine.models.schemas import DetectDeltasRequest, DetectDeltasResponse, TransitionRequest
from supplement_engine.services import (
    detect_deltas,
    normalize_scope,
    signals_from_measurement_report,
    signals_from_photo_analysis,
    transition_delta,
)
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/deltas")


@router.post("/detect", response_model=DetectDeltasResponse)
async def detect(request: DetectDeltasRequest):
    """Detect deltas between a carrier scope and the collected evidence.

    Evidence is the union of explicit signals, signals derived from photo
    analyses and signals derived from the measurement report.
    """
    if not request.scope:
        raise HTTPException(status_code=400, detail="Scope payload is empty")

    scope = normalize_scope(request.scope)
    signals = list(request.signals)
    for analysis in request.photo_analyses:
        signals.extend(signals_from_photo_analysis(analysis))
    signals.extend(signals_from_measurement_report(request.measurement_report))

    deltas = detect_deltas(scope, signals)
    counts = Counter(delta.type.value for delta in deltas)

    return DetectDeltasResponse(
        deltas=deltas,
        scope_warnings=scope.warnings,
        counts=dict(counts),
    )


@router.post("/transition", response_model=DeltaItem)
async def transition(request: TransitionRequest):
    """Move a delta to a new review status.

    Raises:
        HTTPException: 409 when the transition is not allowed
    """
    try:
        return transition_delta(request.delta, request.target_status)
    except IllegalStatusTransition as e:
        raise HTTPException(status_code=409, detail=e.message)
