"""Data models initialization."""
from supplement_engine.models.knowledge import (
    UnitOfMeasure,
    Priority,
    LineItemCode,
    CodeCitation,
    TriggerCondition,
    QuantityRule,
    OmittedItemTemplate,
    ScopeContext,
)
from supplement_engine.models.scope import (
    ClaimIdentity,
    LineItem,
    ScopeTotals,
    RoofMetrics,
    NormalizedScope,
    ScopeSummary,
)
from supplement_engine.models.evidence import (
    EvidenceSourceType,
    DamageSeverity,
    DetectedDamage,
    EvidenceSignal,
    PhotoAnalysis,
)
from supplement_engine.models.delta import DeltaType, DeltaStatus, DeltaItem
from supplement_engine.models.supplement import (
    PhotoRef,
    PhotoChecklistItem,
    ChecklistCompletion,
    DefenseNote,
    ClaimReference,
    Insured,
    Contractor,
    SupplementPackage,
    ValidationResult,
)

__all__ = [
    "UnitOfMeasure",
    "Priority",
    "LineItemCode",
    "CodeCitation",
    "TriggerCondition",
    "QuantityRule",
    "OmittedItemTemplate",
    "ScopeContext",
    "ClaimIdentity",
    "LineItem",
    "ScopeTotals",
    "RoofMetrics",
    "NormalizedScope",
    "ScopeSummary",
    "EvidenceSourceType",
    "DamageSeverity",
    "DetectedDamage",
    "EvidenceSignal",
    "PhotoAnalysis",
    "DeltaType",
    "DeltaStatus",
    "DeltaItem",
    "PhotoRef",
    "PhotoChecklistItem",
    "ChecklistCompletion",
    "DefenseNote",
    "ClaimReference",
    "Insured",
    "Contractor",
    "SupplementPackage",
    "ValidationResult",
]
