"""Read-only lookups over the line-item, citation and omitted-item catalogues."""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError

from supplement_engine.config import settings
from supplement_engine.exceptions import KnowledgeBaseError
from supplement_engine.models.knowledge import (
    CodeCitation,
    LineItemCode,
    OmittedItemTemplate,
    Priority,
    ScopeContext,
    normalize_component,
)
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)


class KnowledgeBase:
    """Catalogue of line-item codes, code citations and commonly omitted items.

    Constructed explicitly and passed to the engine, so tests can substitute a
    small catalogue. Lookups never raise for unknown ids; they return ``None``.
    """

    def __init__(
        self,
        line_item_codes: Iterable[LineItemCode],
        citations: Iterable[CodeCitation],
        omitted_items: Iterable[OmittedItemTemplate],
    ):
        self._codes: Dict[str, LineItemCode] = {}
        for item in line_item_codes:
            self._codes.setdefault(item.code.upper(), item)
        self._citations: Dict[str, CodeCitation] = {}
        for citation in citations:
            self._citations.setdefault(citation.id, citation)
        self._templates: List[OmittedItemTemplate] = list(omitted_items)

        issues = self.integrity_issues()
        for issue in issues:
            logger.warning("Knowledge base integrity issue", issue=issue)
        logger.info(
            "KnowledgeBase initialized",
            codes=len(self._codes),
            citations=len(self._citations),
            omitted_items=len(self._templates),
            integrity_issues=len(issues),
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeBase":
        """Build a knowledge base from plain catalogue records.

        Args:
            data: Mapping with ``line_item_codes``, ``citations`` and ``omitted_items`` lists

        Returns:
            KnowledgeBase over the given records

        Raises:
            KnowledgeBaseError: If a record does not match its schema
        """
        try:
            return cls(
                line_item_codes=[LineItemCode.model_validate(r) for r in data.get("line_item_codes", [])],
                citations=[CodeCitation.model_validate(r) for r in data.get("citations", [])],
                omitted_items=[OmittedItemTemplate.model_validate(r) for r in data.get("omitted_items", [])],
            )
        except ValidationError as e:
            raise KnowledgeBaseError(f"Invalid knowledge base record: {e}", original_error=e) from e

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "KnowledgeBase":
        """Load a JSON catalogue with the same layout as ``from_dict``."""
        catalogue_path = Path(path)
        if not catalogue_path.exists():
            raise FileNotFoundError(f"Knowledge base file not found: {catalogue_path}")
        try:
            data = json.loads(catalogue_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise KnowledgeBaseError(f"Knowledge base file is not valid JSON: {catalogue_path}", original_error=e) from e
        if not isinstance(data, dict):
            raise KnowledgeBaseError(f"Knowledge base file must contain an object: {catalogue_path}")
        logger.info("Loading knowledge base from file", path=str(catalogue_path))
        return cls.from_dict(data)

    @classmethod
    def default(cls) -> "KnowledgeBase":
        """The shipped roofing catalogue."""
        from supplement_engine.knowledge.citations import CODE_CITATIONS
        from supplement_engine.knowledge.line_item_codes import LINE_ITEM_CODES
        from supplement_engine.knowledge.omitted_items import OMITTED_ITEMS

        return cls.from_dict({
            "line_item_codes": LINE_ITEM_CODES,
            "citations": CODE_CITATIONS,
            "omitted_items": OMITTED_ITEMS,
        })

    def integrity_issues(self) -> List[str]:
        """Dangling references between catalogues."""
        issues: List[str] = []
        for citation in self._citations.values():
            for code in sorted(citation.applicable_line_item_codes):
                if code.upper() not in self._codes:
                    issues.append(f"Citation {citation.id} references unknown line item code {code}")
        for item in self._codes.values():
            for citation_id in item.code_citation_ids:
                if citation_id not in self._citations:
                    issues.append(f"Line item code {item.code} references unknown citation {citation_id}")
        for template in self._templates:
            if template.line_item_code.upper() not in self._codes:
                issues.append(f"Omitted item {template.name} references unknown line item code {template.line_item_code}")
            if template.citation_id and template.citation_id not in self._citations:
                issues.append(f"Omitted item {template.name} references unknown citation {template.citation_id}")
        return issues

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def line_item_codes(self) -> List[LineItemCode]:
        return list(self._codes.values())

    @property
    def citations(self) -> List[CodeCitation]:
        return list(self._citations.values())

    @property
    def templates(self) -> List[OmittedItemTemplate]:
        return list(self._templates)

    def lookup_line_item_code(self, code: Optional[str]) -> Optional[LineItemCode]:
        """Case-insensitive code lookup; ``None`` when the code is unknown."""
        if not code:
            return None
        return self._codes.get(code.strip().upper())

    def lookup_citation(self, citation_id: Optional[str]) -> Optional[CodeCitation]:
        if not citation_id:
            return None
        return self._citations.get(citation_id)

    def citations_for(self, code: Optional[str]) -> List[CodeCitation]:
        """All citations justifying a line-item code, in catalogue order."""
        if not code:
            return []
        wanted = code.strip().upper()
        item = self._codes.get(wanted)
        named = set(item.code_citation_ids) if item else set()
        return [
            citation for citation in self._citations.values()
            if citation.id in named
            or wanted in {c.upper() for c in citation.applicable_line_item_codes}
        ]

    def omitted_item_templates(self, context: ScopeContext) -> List[OmittedItemTemplate]:
        """Templates that apply to a claim.

        Critical templates always apply; others only when their trigger holds.
        When two applicable templates share a line-item code, the higher
        priority wins and ties go to the template defined first.
        """
        winners: Dict[str, OmittedItemTemplate] = {}
        for template in self._templates:
            if not template.applies_to(context):
                continue
            key = template.line_item_code.upper()
            current = winners.get(key)
            if current is None or template.priority.rank > current.priority.rank:
                winners[key] = template
        chosen = {id(t) for t in winners.values()}
        return [t for t in self._templates if id(t) in chosen]

    def templates_by_priority(self, priority: Union[Priority, str]) -> List[OmittedItemTemplate]:
        wanted = Priority(priority)
        return [t for t in self._templates if t.priority == wanted]

    def code_required_templates(self) -> List[OmittedItemTemplate]:
        """Templates backed by a building-code or safety citation."""
        return [t for t in self._templates if t.citation_id]

    def template_for_code(self, code: Optional[str]) -> Optional[OmittedItemTemplate]:
        if not code:
            return None
        wanted = code.strip().upper()
        return next((t for t in self._templates if wanted in t.match_codes), None)

    def resolve_component(self, component: Optional[str]) -> Optional[OmittedItemTemplate]:
        """Map a vision component name (e.g. ``"Drip_Edge"``) to its omitted-item template."""
        name = normalize_component(component)
        if not name:
            return None
        for template in self._templates:
            if name in template.components or name == template.name.lower():
                return template
        return None

    def search_codes(self, query: str) -> List[LineItemCode]:
        """Substring search over codes and descriptions."""
        needle = (query or "").strip().lower()
        if not needle:
            return self.line_item_codes
        return [
            item for item in self._codes.values()
            if needle in item.code.lower() or needle in item.description.lower()
        ]

    def codes_by_category(self, category: str) -> List[LineItemCode]:
        wanted = (category or "").strip().lower()
        return [item for item in self._codes.values() if item.category.lower() == wanted]


# Global singleton instance
_knowledge_base: Optional[KnowledgeBase] = None


def get_knowledge_base() -> KnowledgeBase:
    """Get the process-wide knowledge base.

    Loads ``settings.knowledge_base_path`` when configured, otherwise the
    shipped catalogue.

    Returns:
        KnowledgeBase singleton
    """
    global _knowledge_base
    if _knowledge_base is None:
        if settings.knowledge_base_path:
            _knowledge_base = KnowledgeBase.from_file(settings.knowledge_base_path)
        else:
            _knowledge_base = KnowledgeBase.default()
    return _knowledge_base
