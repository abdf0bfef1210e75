"""Evidence models consumed by delta detection.

Signals come from external collaborators: the vision model that tags roof
photos and the measurement report for the roof. They are read-only inputs;
detection attaches them to the deltas they support.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EvidenceSourceType(str, Enum):
    """Where a signal came from."""

    PHOTO = "photo"
    MEASUREMENT = "measurement"


class PhotoType(str, Enum):
    GROUND = "ground"
    EDGE = "edge"
    ROOFTOP = "rooftop"
    COMPONENT = "component"
    ATTIC = "attic"
    DAMAGE = "damage"
    MEASUREMENT = "measurement"


class DamageSeverity(str, Enum):
    MINOR = "minor"
    MODERATE = "moderate"
    SEVERE = "severe"

    @property
    def actionable(self) -> bool:
        """Moderate and severe damage justify adding an item."""
        return self in (DamageSeverity.MODERATE, DamageSeverity.SEVERE)


class DetectedDamage(BaseModel):
    """A damage finding from photo analysis."""

    model_config = ConfigDict(populate_by_name=True)

    damage_type: str = Field(..., alias="damageType")
    severity: DamageSeverity
    description: str = ""
    location: Optional[str] = None
    component: Optional[str] = Field(default=None, description="Damaged component, when the vision model names one")

    def summary(self) -> str:
        return f"{self.damage_type} ({self.severity.value})"


class EvidenceSignal(BaseModel):
    """A single piece of evidence about the structure."""

    model_config = ConfigDict(populate_by_name=True)

    signal_id: str = Field(default_factory=lambda: f"sig-{uuid.uuid4().hex[:12]}")
    source_type: EvidenceSourceType

    # Component the signal talks about, e.g. "drip edge", "chimney", "valley"
    detected_component: Optional[str] = None
    component_present: bool = True
    detected_damage: Optional[DetectedDamage] = None
    confidence: float = Field(default=1.0, ge=0, le=1)
    location_hint: Optional[str] = None

    # Photo anchors
    photo_id: Optional[str] = None
    photo_type: Optional[str] = None

    # Measured quantity (measurement signals)
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None


class DetectedComponent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    component: str
    present: bool = True
    condition: Optional[str] = None
    confidence: float = Field(default=1.0, ge=0, le=1)


class PhotoAnalysis(BaseModel):
    """Output of the vision collaborator for one photo."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: str = Field(..., alias="photoId")
    photo_type: str = Field(default="rooftop", alias="photoType")
    location: Optional[str] = None
    components: List[DetectedComponent] = Field(default_factory=list)
    damage: List[DetectedDamage] = Field(default_factory=list)
    confidence: float = Field(default=1.0, ge=0, le=1)
