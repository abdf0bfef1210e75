"""Supplement package and validation result models."""

from __future__ import annotations

from decimal import Decimal
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from supplement_engine.models.evidence import PhotoType
from supplement_engine.models.knowledge import CodeCitation, normalize_component
from supplement_engine.models.scope import LineItem, RoofMetrics

ZERO = Decimal("0")


class PhotoRef(BaseModel):
    """A photo attached to the supplement, with what the vision model saw in it."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: str
    photo_type: str = "rooftop"
    location_hint: Optional[str] = None
    components: List[str] = Field(default_factory=list)
    damage: List[str] = Field(default_factory=list, description="Damage summaries, e.g. 'hail (severe)'")
    url: Optional[str] = None
    checklist_ids: List[str] = Field(default_factory=list, description="Checklist shots the photographer tagged")


class PhotoChecklistItem(BaseModel):
    """A shot adjusters expect in the photo documentation.

    A photo satisfies the item when it is tagged with the item id, or when it
    matches every filter the item sets (photo type, location keyword, visible
    damage, and at least one of the listed components).
    """

    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    title: str
    description: str
    required: bool = False
    photo_types: Tuple[PhotoType, ...] = ()
    location: Optional[str] = None
    shows_damage: bool = False
    components: Tuple[str, ...] = ()
    related_codes: Tuple[str, ...] = ()
    tips: Tuple[str, ...] = ()

    def satisfied_by(self, photo: PhotoRef) -> bool:
        if self.id in photo.checklist_ids:
            return True
        if not (self.photo_types or self.location or self.shows_damage or self.components):
            return False
        if self.photo_types and photo.photo_type not in {t.value for t in self.photo_types}:
            return False
        if self.location and self.location not in (photo.location_hint or "").lower():
            return False
        if self.shows_damage and not photo.damage:
            return False
        if self.components:
            seen = {normalize_component(c) for c in photo.components}
            return any(c in seen for c in self.components)
        return True


class ChecklistCompletion(BaseModel):
    completed: int
    total: int
    percentage: int
    missing: List[str] = Field(default_factory=list, description="Ids of checklist items no photo satisfies")


class DefenseNote(BaseModel):
    """The argument sent to the adjuster for one supplement line."""

    delta_id: str
    line_number: Optional[int] = None
    line_item_code: Optional[str] = None
    citation_id: Optional[str] = None
    note: str


class ClaimReference(BaseModel):
    claim_number: Optional[str] = None
    carrier: Optional[str] = None
    policy_number: Optional[str] = None
    date_of_loss: Optional[str] = None
    adjuster_name: Optional[str] = None


class Insured(BaseModel):
    name: Optional[str] = None
    property_address: Optional[str] = None


class Contractor(BaseModel):
    name: str
    license: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None


class SupplementPackage(BaseModel):
    """Priced, citation-backed supplement request built from approved deltas."""

    claim_ref: ClaimReference = Field(default_factory=ClaimReference)
    insured: Insured = Field(default_factory=Insured)
    contractor: Optional[Contractor] = None
    roof_metrics: RoofMetrics = Field(default_factory=RoofMetrics)
    line_items: List[LineItem] = Field(default_factory=list)
    citations: List[CodeCitation] = Field(default_factory=list)
    photos: List[PhotoRef] = Field(default_factory=list)
    total_original_rcv: Decimal = ZERO
    total_supplement_rcv: Decimal = ZERO
    delta_ids: List[str] = Field(default_factory=list)
    defense_notes: List[DefenseNote] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list, description="Assembly warnings")

    @property
    def new_total_rcv(self) -> Decimal:
        return self.total_original_rcv + self.total_supplement_rcv

    def citation(self, citation_id: Optional[str]) -> Optional[CodeCitation]:
        if not citation_id:
            return None
        return next((c for c in self.citations if c.id == citation_id), None)

    def defense_note_for(self, line_number: Optional[int]) -> Optional[DefenseNote]:
        return next((n for n in self.defense_notes if n.line_number == line_number), None)


class ValidationResult(BaseModel):
    """Outcome of package validation. Errors block sending; warnings never do."""

    is_valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
