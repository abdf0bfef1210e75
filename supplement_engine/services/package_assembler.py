"""Package assembler: price approved deltas into a supplement package.

``assemble_package`` is a pure function of its inputs. Re-running it after a
reviewer changes a status always reflects the latest approvals.
"""
from decimal import Decimal
from typing import Iterable, List, Optional

from supplement_engine.knowledge import KnowledgeBase, get_knowledge_base
from supplement_engine.models.delta import DeltaItem
from supplement_engine.models.knowledge import CodeCitation, LineItemCode, UnitOfMeasure
from supplement_engine.models.scope import LineItem, NormalizedScope
from supplement_engine.models.supplement import (
    ClaimReference,
    Contractor,
    DefenseNote,
    Insured,
    PhotoRef,
    SupplementPackage,
)
from supplement_engine.services.defense_notes import defense_note
from supplement_engine.services.delta_status import approved_only
from supplement_engine.services.evidence_adapter import photo_refs_from_signals
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import ZERO, quantize_money

logger = get_logger(__name__)


def _catalogue_quantity(
    delta: DeltaItem,
    quantity: Decimal,
    code_ref: LineItemCode,
    label: str,
    warnings: List[str],
) -> Decimal:
    """Express a delta quantity in the unit the catalogue price is quoted in."""
    target = code_ref.unit
    if not delta.unit or delta.unit.upper() == target.value:
        return quantity
    try:
        converted = UnitOfMeasure(delta.unit.upper()).convert(quantity, target)
    except ValueError:
        converted = None
    if converted is None:
        warnings.append(
            f"Unit {delta.unit} on {label} does not match catalogue unit {target.value}; quantity used as {target.value}"
        )
        return quantity
    warnings.append(f"Converted {quantity} {delta.unit} to {converted} {target.value} for {label}")
    return converted


def _price_delta(
    delta: DeltaItem,
    line_number: int,
    knowledge_base: KnowledgeBase,
    warnings: List[str],
) -> LineItem:
    label = f"{delta.line_item_code or 'uncoded'} ({delta.description})"
    code_ref = knowledge_base.lookup_line_item_code(delta.line_item_code)
    if delta.line_item_code and code_ref is None:
        warnings.append(f"Unknown line item code {delta.line_item_code} for {delta.description}")

    quantity = delta.quantity
    if quantity is None or quantity <= 0:
        warnings.append(f"No quantity for {label}; defaulted to 1")
        quantity = Decimal("1")

    unit = delta.unit or (code_ref.unit.value if code_ref else "EA")
    if delta.estimated_rcv is not None:
        rcv = quantize_money(delta.estimated_rcv)
        unit_price = quantize_money(rcv / quantity)
    elif code_ref is not None and code_ref.reference_price is not None:
        quantity = _catalogue_quantity(delta, quantity, code_ref, label, warnings)
        unit = code_ref.unit.value
        unit_price = quantize_money(code_ref.reference_price)
        rcv = quantize_money(quantity * unit_price)
    else:
        warnings.append(f"No reference price for {label}; priced at 0")
        unit_price = ZERO
        rcv = quantize_money(ZERO)

    citation_id = delta.citation_id
    if citation_id is None and delta.line_item_code:
        found = knowledge_base.citations_for(delta.line_item_code)
        citation_id = found[0].id if found else None

    return LineItem(
        line_number=line_number,
        code=delta.line_item_code,
        description=code_ref.description if code_ref else delta.description,
        category=code_ref.category if code_ref else "roofing",
        quantity=quantity,
        unit=unit,
        unit_price=unit_price,
        rcv=rcv,
        acv=rcv,
        citation_id=citation_id,
        notes=f"Supplement item - {delta.description}",
    )


def assemble_package(
    scope: NormalizedScope,
    approved_deltas: Iterable[DeltaItem],
    knowledge_base: Optional[KnowledgeBase] = None,
    photos: Optional[Iterable[PhotoRef]] = None,
    contractor: Optional[Contractor] = None,
) -> SupplementPackage:
    """Build a supplement package from approved deltas.

    Args:
        scope: The carrier scope being supplemented
        approved_deltas: Reviewed deltas; anything not ``approved`` is skipped with a warning
        knowledge_base: Catalogue used for pricing and citations
        photos: Photos to attach in addition to those referenced by delta evidence
        contractor: Contractor details for the document header

    Returns:
        A fresh SupplementPackage
    """
    kb = knowledge_base or get_knowledge_base()
    warnings: List[str] = []

    deltas = list(approved_deltas)
    approved = approved_only(deltas)
    for delta in deltas:
        if delta not in approved:
            warnings.append(
                f"Skipped delta {delta.delta_id} ({delta.description}): status is {delta.status.value}, not approved"
            )

    first_line = len(scope.line_items) + 1
    line_items = [
        _price_delta(delta, first_line + index, kb, warnings)
        for index, delta in enumerate(approved)
    ]

    notes = [
        DefenseNote(
            delta_id=delta.delta_id,
            line_number=item.line_number,
            line_item_code=item.code,
            citation_id=item.citation_id,
            note=defense_note(delta, kb),
        )
        for delta, item in zip(approved, line_items)
    ]

    citations: List[CodeCitation] = []
    for item in line_items:
        if not item.citation_id or any(c.id == item.citation_id for c in citations):
            continue
        citation = kb.lookup_citation(item.citation_id)
        if citation is None:
            warnings.append(f"Unknown citation {item.citation_id} on line {item.line_number}")
            continue
        citations.append(citation)

    attached: List[PhotoRef] = [photo.model_copy(deep=True) for photo in photos or []]
    attached_ids = {photo.photo_id for photo in attached}
    evidence = [signal for delta in approved for signal in delta.evidence_refs]
    for ref in photo_refs_from_signals(evidence):
        if ref.photo_id not in attached_ids:
            attached.append(ref)
            attached_ids.add(ref.photo_id)

    claim = scope.claim
    package = SupplementPackage(
        claim_ref=ClaimReference(
            claim_number=claim.claim_number,
            carrier=claim.carrier,
            policy_number=claim.policy_number,
            date_of_loss=claim.date_of_loss,
            adjuster_name=claim.adjuster_name,
        ),
        insured=Insured(name=claim.insured_name, property_address=claim.property_address),
        contractor=contractor,
        roof_metrics=scope.roof_metrics.model_copy(),
        line_items=line_items,
        citations=citations,
        photos=attached,
        total_original_rcv=quantize_money(scope.totals.replacement_cost_value),
        total_supplement_rcv=quantize_money(sum((item.rcv for item in line_items), ZERO)),
        delta_ids=[delta.delta_id for delta in approved],
        defense_notes=notes,
        warnings=warnings,
    )

    for warning in warnings:
        logger.warning("Package assembly issue", issue=warning)
    logger.info(
        "Supplement package assembled",
        claim_number=claim.claim_number,
        line_items=len(line_items),
        citations=len(citations),
        photos=len(attached),
        total_supplement_rcv=str(package.total_supplement_rcv),
    )
    return package
