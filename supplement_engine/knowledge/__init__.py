"""Knowledge base initialization."""
from supplement_engine.knowledge.knowledge_base import KnowledgeBase, get_knowledge_base
from supplement_engine.knowledge.photo_checklist import (
    checklist_items,
    required_checklist_items,
    items_for_code,
    checklist_completion,
    next_incomplete_items,
)

__all__ = [
    "KnowledgeBase",
    "get_knowledge_base",
    "checklist_items",
    "required_checklist_items",
    "items_for_code",
    "checklist_completion",
    "next_incomplete_items",
]
