"""Defense notes: the per-item argument sent to the adjuster with each supplement line.

A note is built from the code citation, the catalogue entry and the evidence
attached to the delta. Building one makes no external calls, so the same
delta always yields the same note.
"""
from typing import List, Optional

from supplement_engine.knowledge import KnowledgeBase, get_knowledge_base
from supplement_engine.models.delta import DeltaItem
from supplement_engine.models.evidence import EvidenceSourceType
from supplement_engine.models.knowledge import CodeCitation


def _citation_for(delta: DeltaItem, kb: KnowledgeBase) -> Optional[CodeCitation]:
    citation = kb.lookup_citation(delta.citation_id)
    if citation is None and delta.line_item_code:
        found = kb.citations_for(delta.line_item_code)
        citation = found[0] if found else None
    return citation


def _photo_evidence(delta: DeltaItem) -> List[str]:
    entries: List[str] = []
    for signal in delta.evidence_refs:
        if signal.source_type != EvidenceSourceType.PHOTO or not signal.photo_id:
            continue
        if signal.detected_damage is not None:
            seen = signal.detected_damage.description or signal.detected_damage.summary()
        elif signal.detected_component:
            seen = signal.detected_component if signal.component_present else f"no {signal.detected_component}"
        else:
            continue
        entry = f"photo {signal.photo_id} shows {seen}"
        if signal.location_hint:
            entry += f" at {signal.location_hint}"
        if entry not in entries:
            entries.append(entry)
    return entries


def _measurements(delta: DeltaItem) -> List[str]:
    return [
        f"{signal.detected_component} {signal.quantity.normalize():f} {signal.unit or ''}".rstrip()
        for signal in delta.evidence_refs
        if signal.source_type == EvidenceSourceType.MEASUREMENT and signal.quantity is not None
    ]


def defense_note(delta: DeltaItem, knowledge_base: Optional[KnowledgeBase] = None) -> str:
    """Render the defense note for one delta.

    Layout: ``Per <citation>, <item> is required.`` followed by the citation
    requirement, catalogue notes, the reason the item was raised, and the
    photo and measurement evidence behind it.
    """
    kb = knowledge_base or get_knowledge_base()
    code_ref = kb.lookup_line_item_code(delta.line_item_code)
    citation = _citation_for(delta, kb)

    parts: List[str] = []
    subject = f"{code_ref.description} ({code_ref.code}) is required." if code_ref else f"{delta.description}."
    parts.append(f"Per {citation.id}, {subject}" if citation else subject)
    if citation is not None:
        parts.append(citation.requirement_summary.rstrip(".") + ".")
    if code_ref is not None and code_ref.notes:
        parts.append(code_ref.notes)
    if delta.rationale:
        parts.append(delta.rationale.rstrip(".") + ".")
    elif delta.trigger_reason:
        parts.append(f"Applies because {delta.trigger_reason}.")

    photos = _photo_evidence(delta)
    if photos:
        parts.append(f"Photo evidence: {'; '.join(photos)}.")
    measured = _measurements(delta)
    if measured:
        parts.append(f"Measured: {', '.join(measured)}.")
    return " ".join(parts)
