"""Roofing supplement engine: delta detection and supplement package assembly."""
from supplement_engine.knowledge import KnowledgeBase, get_knowledge_base
from supplement_engine.services import (
    normalize_scope,
    detect_deltas,
    transition_delta,
    assemble_package,
    validate_package,
    export_csv,
    export_document,
    export_photo_index,
)

__all__ = [
    "KnowledgeBase",
    "get_knowledge_base",
    "normalize_scope",
    "detect_deltas",
    "transition_delta",
    "assemble_package",
    "validate_package",
    "export_csv",
    "export_document",
    "export_photo_index",
]
