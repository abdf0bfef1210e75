"""Knowledge base records: line-item codes, code citations and omitted-item templates.

All records are frozen. Catalogue data is loaded once and shared by reference,
so nothing downstream may mutate it.
"""

from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Dict, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from supplement_engine.utils.money import format_pitch


class UnitOfMeasure(str, Enum):
    """Units used by the line-item catalogue."""

    SQ = "SQ"  # roofing square, 100 sq ft
    SF = "SF"
    LF = "LF"
    EA = "EA"
    HR = "HR"
    DA = "DA"

    @property
    def kind(self) -> str:
        return _UNIT_KINDS[self]

    def convert(self, quantity: Decimal, target: "UnitOfMeasure") -> Optional[Decimal]:
        """``quantity`` expressed in ``target``, or None when the units measure different things."""
        if self == target:
            return quantity
        if self.kind != target.kind or self not in _AREA_FACTORS or target not in _AREA_FACTORS:
            return None
        return quantity * _AREA_FACTORS[self] / _AREA_FACTORS[target]


_UNIT_KINDS = {
    UnitOfMeasure.SQ: "area",
    UnitOfMeasure.SF: "area",
    UnitOfMeasure.LF: "length",
    UnitOfMeasure.EA: "count",
    UnitOfMeasure.HR: "hour",
    UnitOfMeasure.DA: "day",
}

# Square feet per unit
_AREA_FACTORS = {
    UnitOfMeasure.SQ: Decimal("100"),
    UnitOfMeasure.SF: Decimal("1"),
}


class Priority(str, Enum):
    """How strongly an omitted item should be pursued."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"

    @property
    def rank(self) -> int:
        """Higher rank wins tie-breaks (critical > high > medium)."""
        return {"critical": 3, "high": 2, "medium": 1}[self.value]


def normalize_component(name: Optional[str]) -> str:
    """Canonical form for component names coming from vision or measurement tools.

    ``"Drip_Edge"`` and ``"drip-edge"`` both become ``"drip edge"``.
    """
    if not name:
        return ""
    return re.sub(r"\s+", " ", re.sub(r"[_\-]+", " ", name.lower())).strip()


class LineItemCode(BaseModel):
    """A construction-cost line-item code from the estimating catalogue."""

    model_config = ConfigDict(frozen=True)

    code: str
    description: str
    unit: UnitOfMeasure
    category: str = "roofing"
    reference_price: Optional[Decimal] = Field(
        default=None, description="Regional average unit price, advisory only"
    )
    code_citation_ids: Tuple[str, ...] = ()
    notes: Optional[str] = None


class CodeCitation(BaseModel):
    """A building-code or safety-regulation reference used to justify line items."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    section: Optional[str] = None
    requirement_summary: str
    full_text: str
    applicable_line_item_codes: FrozenSet[str] = frozenset()
    citation_template: str

    def placeholders(self) -> List[str]:
        """Named placeholders used by ``citation_template``, in order of appearance."""
        seen: List[str] = []
        for name in re.findall(r"\{(\w+)\}", self.citation_template):
            if name not in seen:
                seen.append(name)
        return seen


class ScopeContext(BaseModel):
    """Facts about a claim that omitted-item triggers are evaluated against."""

    model_config = ConfigDict(frozen=True)

    pitch: Optional[float] = None
    stories: Optional[int] = None
    total_area_units: Optional[Decimal] = None
    line_item_codes: FrozenSet[str] = frozenset()
    descriptions: Tuple[str, ...] = ()
    present_components: FrozenSet[str] = frozenset()
    damaged_components: FrozenSet[str] = frozenset()


class TriggerCondition(BaseModel):
    """Declarative predicate deciding whether a conditional template applies.

    Each configured clause is checked against a ``ScopeContext``. With
    ``match="all"`` every configured clause must hold; with ``match="any"``
    one is enough. ``evaluate`` returns a readable reason naming the clauses
    that held, or ``None``.
    """

    model_config = ConfigDict(frozen=True)

    min_pitch: Optional[float] = None
    max_pitch: Optional[float] = Field(default=None, description="Exclusive upper bound")
    min_stories: Optional[int] = None
    required_components: Tuple[str, ...] = ()
    required_damaged_components: Tuple[str, ...] = ()
    match: Literal["all", "any"] = "all"

    def _pitch_clause(self, context: ScopeContext) -> Tuple[bool, Optional[str]]:
        if self.min_pitch is None and self.max_pitch is None:
            return False, None
        pitch = context.pitch
        if pitch is None:
            return True, None
        if self.min_pitch is not None and pitch < self.min_pitch:
            return True, None
        if self.max_pitch is not None and pitch >= self.max_pitch:
            return True, None
        parts = []
        if self.min_pitch is not None:
            parts.append(f"at or above {format_pitch(self.min_pitch)}")
        if self.max_pitch is not None:
            parts.append(f"below {format_pitch(self.max_pitch)}")
        return True, f"roof pitch {format_pitch(pitch)} is {' and '.join(parts)}"

    def _stories_clause(self, context: ScopeContext) -> Tuple[bool, Optional[str]]:
        if self.min_stories is None:
            return False, None
        if context.stories is None or context.stories < self.min_stories:
            return True, None
        return True, (
            f"{context.stories}-story structure meets the {self.min_stories}-story threshold"
        )

    @staticmethod
    def _component_clause(
        wanted: Tuple[str, ...], available: FrozenSet[str], label: str
    ) -> Tuple[bool, Optional[str]]:
        if not wanted:
            return False, None
        hits = [name for name in wanted if normalize_component(name) in available]
        if not hits:
            return True, None
        return True, f"evidence shows {label}{', '.join(hits)}"

    def evaluate(self, context: ScopeContext) -> Optional[str]:
        clauses = [
            self._pitch_clause(context),
            self._stories_clause(context),
            self._component_clause(self.required_components, context.present_components, ""),
            self._component_clause(
                self.required_damaged_components, context.damaged_components, "damaged "
            ),
        ]
        configured = [reason for active, reason in clauses if active]
        if not configured:
            return None
        held = [reason for reason in configured if reason]
        if self.match == "all" and len(held) != len(configured):
            return None
        if not held:
            return None
        return "; ".join(held)


class QuantityRule(BaseModel):
    """Derives a template quantity from measured roof features.

    ``quantity = sum(feature_length * multiplier) / divisor``, falling back to
    the scope's total area when ``use_total_area`` is set and no feature was
    measured.
    """

    model_config = ConfigDict(frozen=True)

    features: Dict[str, Decimal] = Field(default_factory=dict)
    divisor: Decimal = Decimal("1")
    use_total_area: bool = False

    def derive(
        self,
        measurements: Dict[str, Decimal],
        total_area_units: Optional[Decimal] = None,
    ) -> Tuple[Optional[Decimal], List[str]]:
        """Return the derived quantity and the measured features it used."""
        used = [name for name in self.features if measurements.get(name)]
        if used:
            total = sum((measurements[name] * self.features[name] for name in used), Decimal("0"))
            quantity = (total / self.divisor).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            return quantity, used
        if self.use_total_area:
            if measurements.get("roof area"):
                return measurements["roof area"], ["roof area"]
            if total_area_units:
                return total_area_units, []
        return None, []


class OmittedItemTemplate(BaseModel):
    """A line item carriers commonly leave out of their scopes."""

    model_config = ConfigDict(frozen=True)

    line_item_code: str
    name: str = Field(..., description="Canonical name, matched against scope descriptions")
    category: str = "roofing"
    priority: Priority
    trigger: Optional[TriggerCondition] = Field(
        default=None, description="Absent means the template always applies"
    )
    citation_id: Optional[str] = None
    rationale: str
    evidence_hints: Tuple[str, ...] = ()
    aliases: Tuple[str, ...] = ()
    equivalent_codes: Tuple[str, ...] = ()
    evidence_components: Tuple[str, ...] = ()
    quantity_rule: Optional[QuantityRule] = None
    default_quantity: Optional[Decimal] = None
    quantity_source: Optional[str] = None

    @property
    def match_codes(self) -> FrozenSet[str]:
        return frozenset(c.upper() for c in (self.line_item_code, *self.equivalent_codes))

    @property
    def match_phrases(self) -> Tuple[str, ...]:
        return tuple(p.lower() for p in (self.name, *self.aliases))

    @property
    def components(self) -> FrozenSet[str]:
        return frozenset(normalize_component(c) for c in self.evidence_components)

    def applies_to(self, context: ScopeContext) -> bool:
        if self.priority == Priority.CRITICAL or self.trigger is None:
            return True
        return self.trigger.evaluate(context) is not None

    def trigger_reason(self, context: ScopeContext) -> Optional[str]:
        if self.trigger is None:
            return None
        return self.trigger.evaluate(context)
