"""Pydantic models for API requests and responses."""
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

from supplement_engine.models.delta import DeltaItem, DeltaStatus
from supplement_engine.models.evidence import EvidenceSignal, PhotoAnalysis
from supplement_engine.models.scope import NormalizedScope, ScopeSummary
from supplement_engine.models.supplement import Contractor, PhotoRef, SupplementPackage, ValidationResult


class NormalizeScopeRequest(BaseModel):
    """Raw scope as produced by the extraction step."""

    scope: Dict[str, Any] = Field(..., description="Extracted scope record (camelCase or snake_case keys)")


class NormalizeScopeResponse(BaseModel):
    scope: NormalizedScope
    summary: ScopeSummary


class DetectDeltasRequest(BaseModel):
    """Scope plus evidence for one claim."""

    model_config = ConfigDict(populate_by_name=True)

    scope: Dict[str, Any] = Field(..., description="Extracted scope record")
    signals: List[EvidenceSignal] = Field(default_factory=list, description="Pre-built evidence signals")
    photo_analyses: List[PhotoAnalysis] = Field(
        default_factory=list, alias="photoAnalyses", description="Vision results, one per photo"
    )
    measurement_report: Optional[Dict[str, Any]] = Field(
        default=None, alias="measurementReport", description="Roof feature lengths and total squares"
    )


class DetectDeltasResponse(BaseModel):
    deltas: List[DeltaItem]
    scope_warnings: List[str] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict, description="Delta count per type")


class TransitionRequest(BaseModel):
    delta: DeltaItem
    target_status: DeltaStatus


class SupplementRequest(BaseModel):
    """Everything needed to assemble and export a supplement."""

    scope: Dict[str, Any] = Field(..., description="Extracted scope record")
    deltas: List[DeltaItem] = Field(default_factory=list, description="Reviewed deltas; only approved ones are priced")
    photos: List[PhotoRef] = Field(default_factory=list)
    contractor: Optional[Contractor] = None
    format: Literal["json", "csv", "document", "photos", "letter"] = "json"
    prepared_on: Optional[str] = Field(default=None, description="Date printed on the document")


class SupplementResponse(BaseModel):
    package: SupplementPackage
    validation: ValidationResult
    new_total_rcv: str
    included_deltas: List[DeltaItem] = Field(
        default_factory=list, description="Approved deltas moved to included; empty when the package is not sendable"
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    services: Dict[str, bool] = Field(..., description="Status of individual services")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
