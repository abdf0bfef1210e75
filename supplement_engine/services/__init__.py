"""Services initialization."""
from supplement_engine.services.scope_normalizer import normalize_scope, summarize_scope, looks_like_carrier_scope
from supplement_engine.services.evidence_adapter import (
    signals_from_photo_analysis,
    signals_from_measurement_report,
    photo_refs_from_signals,
)
from supplement_engine.services.delta_detector import DeltaDetector, detect_deltas, deduplicate_deltas
from supplement_engine.services.delta_status import transition_delta, mark_included, approved_only
from supplement_engine.services.defense_notes import defense_note
from supplement_engine.services.package_assembler import assemble_package
from supplement_engine.services.package_validator import PackageValidator, validate_package
from supplement_engine.services.exporters import export_csv, export_document, export_photo_index, render_citation
from supplement_engine.services.prose_writer import ProseWriter, build_prose_context

__all__ = [
    "normalize_scope",
    "summarize_scope",
    "looks_like_carrier_scope",
    "signals_from_photo_analysis",
    "signals_from_measurement_report",
    "photo_refs_from_signals",
    "DeltaDetector",
    "detect_deltas",
    "deduplicate_deltas",
    "transition_delta",
    "mark_included",
    "approved_only",
    "defense_note",
    "assemble_package",
    "PackageValidator",
    "validate_package",
    "export_csv",
    "export_document",
    "export_photo_index",
    "render_citation",
    "ProseWriter",
    "build_prose_context",
]
