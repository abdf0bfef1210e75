"""Knowledge base endpoints - read access to codes, citations and omitted-item templates."""
from typing import List, Optional
from fastapi import APIRouter, HTTPException, Query

from supplement_engine.knowledge import checklist_items, get_knowledge_base, required_checklist_items
from supplement_engine.models.knowledge import CodeCitation, LineItemCode, OmittedItemTemplate, Priority
from supplement_engine.models.supplement import PhotoChecklistItem

router = APIRouter(prefix="/knowledge")


@router.get("/codes", response_model=List[LineItemCode])
async def list_codes(
    q: Optional[str] = Query(default=None, description="Substring of code or description"),
    category: Optional[str] = Query(default=None, description="Category filter, e.g. roofing"),
):
    """List catalogue line item codes, optionally filtered."""
    kb = get_knowledge_base()
    codes = kb.search_codes(q) if q else kb.line_item_codes
    if category:
        codes = [code for code in codes if code.category.lower() == category.lower()]
    return codes


@router.get("/codes/{code}")
async def get_code(code: str):
    """Get one line item code with the citations that support it.

    Raises:
        HTTPException: 404 when the code is not in the catalogue
    """
    kb = get_knowledge_base()
    found = kb.lookup_line_item_code(code)
    if found is None:
        raise HTTPException(status_code=404, detail=f"Line item code {code} not found")
    citations: List[CodeCitation] = kb.citations_for(found.code)
    return {
        "code": found,
        "citations": citations,
        "template": kb.template_for_code(found.code),
    }


@router.get("/citations/{citation_id:path}", response_model=CodeCitation)
async def get_citation(citation_id: str):
    """Get one code citation by id (ids may contain spaces, dots and slashes)."""
    citation = get_knowledge_base().lookup_citation(citation_id)
    if citation is None:
        raise HTTPException(status_code=404, detail=f"Citation {citation_id} not found")
    return citation


@router.get("/omitted-items", response_model=List[OmittedItemTemplate])
async def list_omitted_items(
    priority: Optional[Priority] = Query(default=None),
    code_required: bool = Query(default=False, description="Only templates backed by a code citation"),
):
    """List omitted-item templates, optionally for a single priority."""
    kb = get_knowledge_base()
    if not code_required:
        return kb.templates if priority is None else kb.templates_by_priority(priority)
    templates = kb.code_required_templates()
    if priority is not None:
        templates = [t for t in templates if t.priority == priority]
    return templates


@router.get("/photo-checklist", response_model=List[PhotoChecklistItem])
async def list_photo_checklist(required_only: bool = Query(default=False)):
    """List the photo documentation checklist."""
    return required_checklist_items() if required_only else checklist_items()
