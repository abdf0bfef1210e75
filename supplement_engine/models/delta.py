"""Delta items: discrepancies between a carrier scope and ground truth."""

from __future__ import annotations

import hashlib
import re
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from supplement_engine.models.evidence import EvidenceSignal
from supplement_engine.models.knowledge import Priority


class DeltaType(str, Enum):
    MISSING = "missing"
    UNDERSCOPED = "underscoped"
    WRONG_CODE = "wrong-code"
    CODE_REQUIRED = "code-required"
    RECOMMEND_ADD = "recommend-add"


class DeltaStatus(str, Enum):
    """Reviewer-driven lifecycle of a delta.

    identified -> approved | denied; approved -> included.
    """

    IDENTIFIED = "identified"
    APPROVED = "approved"
    DENIED = "denied"
    INCLUDED = "included"


def normalize_description(description: str) -> str:
    """Lower-case and collapse whitespace; used for dedup keys."""
    return re.sub(r"\s+", " ", description or "").strip().lower()


def make_delta_id(delta_type: DeltaType, line_item_code: Optional[str], description: str) -> str:
    """Stable id so the same input always yields the same deltas."""
    key = "|".join([delta_type.value, (line_item_code or "").upper(), normalize_description(description)])
    return "delta-" + hashlib.sha1(key.encode("utf-8")).hexdigest()[:12]


class DeltaItem(BaseModel):
    """A detected discrepancy. Only ``status`` changes after creation, via the status machine."""

    model_config = ConfigDict(frozen=True)

    delta_id: str
    type: DeltaType
    status: DeltaStatus = DeltaStatus.IDENTIFIED
    line_item_code: Optional[str] = None
    description: str
    citation_id: Optional[str] = None
    priority: Priority
    quantity: Optional[Decimal] = None
    unit: Optional[str] = None
    estimated_rcv: Optional[Decimal] = None
    evidence_refs: List[EvidenceSignal] = Field(default_factory=list)

    # Why the item was raised
    trigger_reason: Optional[str] = None
    rationale: Optional[str] = None
    evidence_hints: List[str] = Field(default_factory=list)

    @property
    def dedup_key(self) -> tuple:
        return ((self.line_item_code or "").upper(), normalize_description(self.description))

    @property
    def evidence_ids(self) -> List[str]:
        return [signal.signal_id for signal in self.evidence_refs]
