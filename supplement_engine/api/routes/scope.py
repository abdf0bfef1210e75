"""Scope endpoints."""
from fastapi import APIRouter

from supplement_engine.models.schemas import NormalizeScopeRequest, NormalizeScopeResponse
from supplement_engine.services import normalize_scope, summarize_scope
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/scope")


@router.post("/normalize", response_model=NormalizeScopeResponse)
async def normalize(request: NormalizeScopeRequest):
    """Normalize an extracted carrier scope.

    Never fails on bad numbers; recoveries are reported in ``scope.warnings``.
    """
    scope = normalize_scope(request.scope)
    logger.info(
        "Scope normalized",
        claim_number=scope.claim.claim_number,
        line_items=len(scope.line_items),
        warnings=len(scope.warnings),
    )
    return NormalizeScopeResponse(scope=scope, summary=summarize_scope(scope))
