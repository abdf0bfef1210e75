"""Delta detection: diff a carrier scope against the knowledge base and evidence.

Three passes run in order:

1. Omission pass: every applicable omitted-item template that the scope does
   not already contain (by code, or by its name appearing in a line item
   description) becomes a ``missing`` delta. Photo signals showing the
   component and the measurements behind the quantity are attached. A line
   matched by description but carrying another catalogue code becomes
   ``wrong-code``.
2. Evidence pass: moderate or severe photo damage not already attached in
   pass 1 becomes ``recommend-add``; measured quantities well above a scoped
   line become ``underscoped``.
3. Deduplication on (line-item code, normalized description); the first
   occurrence wins and absorbs the duplicates' evidence.

Description matching is a substring heuristic. It can over-match and
under-match loosely worded carrier lines; that trade-off is accepted.
"""
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from supplement_engine.config import settings
from supplement_engine.knowledge import KnowledgeBase, get_knowledge_base
from supplement_engine.models.delta import DeltaItem, DeltaType, make_delta_id
from supplement_engine.models.evidence import DamageSeverity, EvidenceSignal, EvidenceSourceType
from supplement_engine.models.knowledge import (
    OmittedItemTemplate,
    Priority,
    ScopeContext,
    normalize_component,
)
from supplement_engine.models.scope import LineItem, NormalizedScope
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)


def build_scope_context(scope: NormalizedScope, evidence: Iterable[EvidenceSignal]) -> ScopeContext:
    """Collect the facts omitted-item triggers are evaluated against."""
    present = set()
    damaged = set()
    for signal in evidence:
        component = normalize_component(signal.detected_component)
        if not component:
            continue
        if signal.source_type == EvidenceSourceType.MEASUREMENT:
            if signal.quantity is not None and signal.quantity > 0:
                present.add(component)
            continue
        if signal.component_present:
            present.add(component)
        if signal.detected_damage is not None and signal.detected_damage.severity.actionable:
            damaged.add(component)

    metrics = scope.roof_metrics
    return ScopeContext(
        pitch=metrics.pitch,
        stories=metrics.stories,
        total_area_units=metrics.total_area_units,
        line_item_codes=frozenset(item.code.upper() for item in scope.line_items if item.code),
        descriptions=tuple(item.description.lower() for item in scope.line_items),
        present_components=frozenset(present),
        damaged_components=frozenset(damaged),
    )


def find_matching_line_item(scope: NormalizedScope, template: OmittedItemTemplate) -> Optional[LineItem]:
    """The scope line that already covers a template, if any.

    A code match (including equivalent codes) takes precedence over a
    description match.
    """
    codes = template.match_codes
    for item in scope.line_items:
        if item.code and item.code.upper() in codes:
            return item
    phrases = template.match_phrases
    for item in scope.line_items:
        description = item.description.lower()
        if any(phrase in description for phrase in phrases):
            return item
    return None


def deduplicate_deltas(deltas: Iterable[DeltaItem]) -> List[DeltaItem]:
    """Keep the first delta per (code, normalized description) and merge evidence into it."""
    kept: Dict[tuple, DeltaItem] = {}
    for delta in deltas:
        existing = kept.get(delta.dedup_key)
        if existing is None:
            kept[delta.dedup_key] = delta
            continue
        known = set(existing.evidence_ids)
        extra = [signal for signal in delta.evidence_refs if signal.signal_id not in known]
        if extra:
            kept[delta.dedup_key] = existing.model_copy(
                update={"evidence_refs": [*existing.evidence_refs, *extra]}
            )
    return list(kept.values())


class DeltaDetector:
    """Runs the detection passes against one knowledge base."""

    def __init__(self, knowledge_base: KnowledgeBase):
        self.knowledge_base = knowledge_base

    def detect(self, scope: NormalizedScope, evidence: Iterable[EvidenceSignal]) -> List[DeltaItem]:
        """Detect deltas for one claim.

        Args:
            scope: Normalized carrier scope
            evidence: Photo and measurement signals for the same structure

        Returns:
            Deduplicated deltas, omission pass first
        """
        signals = list(evidence)
        context = build_scope_context(scope, signals)
        measurements, measurement_signals = self._measurements(signals)

        missing, matched = self._omission_pass(scope, signals, context, measurements, measurement_signals)
        referenced = {signal_id for delta in missing for signal_id in delta.evidence_ids}
        evidence_driven = self._damage_pass(signals, referenced)
        underscoped = self._underscope_pass(matched, measurements, measurement_signals)

        combined = [*missing, *evidence_driven, *underscoped]
        deltas = deduplicate_deltas(combined)

        logger.info(
            "Delta detection completed",
            claim_number=scope.claim.claim_number,
            signals=len(signals),
            missing=sum(1 for d in missing if d.type == DeltaType.MISSING),
            wrong_code=sum(1 for d in missing if d.type == DeltaType.WRONG_CODE),
            recommend_add=len(evidence_driven),
            underscoped=len(underscoped),
            duplicates_merged=len(combined) - len(deltas),
            total=len(deltas),
        )
        return deltas

    @staticmethod
    def _measurements(signals: List[EvidenceSignal]) -> Tuple[Dict[str, Decimal], Dict[str, EvidenceSignal]]:
        quantities: Dict[str, Decimal] = {}
        sources: Dict[str, EvidenceSignal] = {}
        for signal in signals:
            if signal.source_type != EvidenceSourceType.MEASUREMENT or signal.quantity is None:
                continue
            feature = normalize_component(signal.detected_component)
            if feature and feature not in quantities:
                quantities[feature] = signal.quantity
                sources[feature] = signal
        return quantities, sources

    def _unit_for(self, code: Optional[str]) -> Optional[str]:
        line_item_code = self.knowledge_base.lookup_line_item_code(code)
        return line_item_code.unit.value if line_item_code else None

    def _omission_pass(
        self,
        scope: NormalizedScope,
        signals: List[EvidenceSignal],
        context: ScopeContext,
        measurements: Dict[str, Decimal],
        measurement_signals: Dict[str, EvidenceSignal],
    ) -> Tuple[List[DeltaItem], List[Tuple[OmittedItemTemplate, LineItem]]]:
        deltas: List[DeltaItem] = []
        matched: List[Tuple[OmittedItemTemplate, LineItem]] = []

        for template in self.knowledge_base.omitted_item_templates(context):
            existing = find_matching_line_item(scope, template)
            if existing is not None:
                matched.append((template, existing))
                if self._is_wrong_code(existing, template):
                    deltas.append(self._wrong_code_delta(existing, template))
                continue

            components = template.components
            refs = [
                signal for signal in signals
                if signal.source_type == EvidenceSourceType.PHOTO
                and signal.component_present
                and normalize_component(signal.detected_component) in components
            ]

            quantity = None
            if template.quantity_rule is not None:
                quantity, used = template.quantity_rule.derive(measurements, context.total_area_units)
                refs.extend(measurement_signals[name] for name in used)
            if quantity is None:
                quantity = template.default_quantity

            if self.knowledge_base.lookup_line_item_code(template.line_item_code) is None:
                logger.warning("Omitted item references unknown code", code=template.line_item_code)

            deltas.append(DeltaItem(
                delta_id=make_delta_id(DeltaType.MISSING, template.line_item_code, template.name),
                type=DeltaType.MISSING,
                line_item_code=template.line_item_code,
                description=template.name,
                citation_id=template.citation_id,
                priority=template.priority,
                quantity=quantity,
                unit=self._unit_for(template.line_item_code),
                evidence_refs=refs,
                trigger_reason=template.trigger_reason(context),
                rationale=template.rationale,
                evidence_hints=list(template.evidence_hints),
            ))
        return deltas, matched

    def _is_wrong_code(self, item: LineItem, template: OmittedItemTemplate) -> bool:
        """The line describes the template but is coded as a different catalogue item."""
        if not item.code or item.code.upper() in template.match_codes:
            return False
        return self.knowledge_base.lookup_line_item_code(item.code) is not None

    def _wrong_code_delta(self, item: LineItem, template: OmittedItemTemplate) -> DeltaItem:
        return DeltaItem(
            delta_id=make_delta_id(DeltaType.WRONG_CODE, template.line_item_code, template.name),
            type=DeltaType.WRONG_CODE,
            line_item_code=template.line_item_code,
            description=template.name,
            citation_id=template.citation_id,
            priority=template.priority,
            quantity=item.quantity or None,
            unit=self._unit_for(template.line_item_code),
            rationale=(
                f"Carrier line {item.line_number} describes {template.name} but is coded {item.code}; "
                f"expected {template.line_item_code}"
            ),
            evidence_hints=list(template.evidence_hints),
        )

    def _damage_pass(self, signals: List[EvidenceSignal], referenced: set) -> List[DeltaItem]:
        deltas: List[DeltaItem] = []
        for signal in signals:
            damage = signal.detected_damage
            if signal.source_type != EvidenceSourceType.PHOTO or damage is None:
                continue
            if not damage.severity.actionable or signal.signal_id in referenced:
                continue

            priority = Priority.HIGH if damage.severity == DamageSeverity.SEVERE else Priority.MEDIUM
            template = self.knowledge_base.resolve_component(signal.detected_component)
            finding = damage.description or damage.damage_type
            if template is not None:
                code = template.line_item_code
                description = template.name
                citation_id = template.citation_id
            else:
                code = None
                description = f"{finding} ({damage.severity.value} damage)"
                citation_id = None

            deltas.append(DeltaItem(
                delta_id=make_delta_id(DeltaType.RECOMMEND_ADD, code, description),
                type=DeltaType.RECOMMEND_ADD,
                line_item_code=code,
                description=description,
                citation_id=citation_id,
                priority=priority,
                quantity=signal.quantity,
                unit=signal.unit or self._unit_for(code),
                evidence_refs=[signal],
                rationale=(
                    f"Damage identified in {signal.photo_type or 'unclassified'} photo at "
                    f"{signal.location_hint or 'unspecified location'}: {finding}"
                ),
                evidence_hints=list(template.evidence_hints) if template else [],
            ))
        return deltas

    def _underscope_pass(
        self,
        matched: List[Tuple[OmittedItemTemplate, LineItem]],
        measurements: Dict[str, Decimal],
        measurement_signals: Dict[str, EvidenceSignal],
    ) -> List[DeltaItem]:
        deltas: List[DeltaItem] = []
        threshold = Decimal("1") + settings.underscope_tolerance_ratio
        for template, item in matched:
            if template.quantity_rule is None:
                continue
            measured, used = template.quantity_rule.derive(measurements)
            if measured is None or not used:
                continue
            unit = self._unit_for(template.line_item_code)
            if unit is None or item.unit != unit:
                continue
            if measured <= item.quantity * threshold:
                continue

            code = item.code or template.line_item_code
            deltas.append(DeltaItem(
                delta_id=make_delta_id(DeltaType.UNDERSCOPED, code, template.name),
                type=DeltaType.UNDERSCOPED,
                line_item_code=code,
                description=template.name,
                citation_id=template.citation_id,
                priority=template.priority,
                quantity=measured - item.quantity,
                unit=unit,
                evidence_refs=[measurement_signals[name] for name in used],
                rationale=(
                    f"Measured {measured} {unit} against {item.quantity} {unit} on carrier line "
                    f"{item.line_number}"
                ),
                evidence_hints=list(template.evidence_hints),
            ))
        return deltas


def detect_deltas(
    scope: NormalizedScope,
    evidence: Iterable[EvidenceSignal],
    knowledge_base: Optional[KnowledgeBase] = None,
) -> List[DeltaItem]:
    """Detect missing, underscoped and evidence-driven items for a claim."""
    return DeltaDetector(knowledge_base or get_knowledge_base()).detect(scope, evidence)
