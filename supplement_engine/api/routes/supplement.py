"""Supplement endpoints - assemble, validate and export a package."""
import asyncio

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse, Response

from supplement_engine.models.schemas import SupplementRequest, SupplementResponse
from supplement_engine.services import (
    ProseWriter,
    assemble_package,
    export_csv,
    export_document,
    export_photo_index,
    mark_included,
    normalize_scope,
    validate_package,
)
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import format_money

logger = get_logger(__name__)
router = APIRouter()


@router.post("/supplement")
async def build_supplement(request: SupplementRequest):
    """Assemble a supplement from approved deltas and render it.

    ``format`` selects the output: ``json`` returns the package with its
    validation result, ``csv`` the Xactimate-style line items, ``document``
    the plain-text supplement, ``photos`` the photo index and ``letter`` the
    model-written letter (falls back to the document when prose is off).
    """
    if not request.scope:
        raise HTTPException(status_code=400, detail="Scope payload is empty")

    scope = normalize_scope(request.scope)
    package = assemble_package(
        scope,
        request.deltas,
        photos=request.photos,
        contractor=request.contractor,
    )
    validation = validate_package(package)

    logger.info(
        "Supplement assembled",
        claim_number=package.claim_ref.claim_number,
        line_items=len(package.line_items),
        total_supplement_rcv=str(package.total_supplement_rcv),
        is_valid=validation.is_valid,
        output_format=request.format,
    )

    if request.format == "csv":
        filename = f"supplement-{package.claim_ref.claim_number or 'claim'}.csv"
        return Response(
            content=export_csv(package),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    if request.format == "document":
        return PlainTextResponse(export_document(package, prepared_on=request.prepared_on))
    if request.format == "photos":
        return PlainTextResponse(export_photo_index(package, prepared_on=request.prepared_on))
    if request.format == "letter":
        letter = await asyncio.to_thread(ProseWriter().write, package, prepared_on=request.prepared_on)
        return PlainTextResponse(letter)

    return SupplementResponse(
        package=package,
        validation=validation,
        new_total_rcv=format_money(package.new_total_rcv),
        included_deltas=mark_included(request.deltas) if validation.is_valid else [],
    )
