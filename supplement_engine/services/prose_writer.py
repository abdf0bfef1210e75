"""Optional prose generation for supplement letters.

The hosted language model only improves presentation. When it is disabled,
unconfigured or failing, the templated document from ``export_document`` is
returned instead.
"""
import json
from typing import Any, Dict, Optional

from supplement_engine.azure import OpenAIClient, get_openai_client
from supplement_engine.config import settings
from supplement_engine.models.supplement import SupplementPackage
from supplement_engine.services.exporters import STANDARD_JUSTIFICATION, citation_values, export_document, render_citation
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import format_money, format_quantity

logger = get_logger(__name__)

SYSTEM_PROMPT = """You write insurance supplement request letters for roofing contractors.
Write in a professional, factual tone addressed to the insurance adjuster.
Use only the claim details, line items and code citations you are given.
Do not invent quantities, prices, code sections or photos.
Cite each code reference by its id exactly as given.
Build each item's argument from its defense note and the photo evidence it names."""


def build_prose_context(package: SupplementPackage) -> Dict[str, Any]:
    """Structured context handed to the prose collaborator."""
    items = []
    for item in package.line_items:
        citation = package.citation(item.citation_id)
        note = package.defense_note_for(item.line_number)
        items.append({
            "line": item.line_number,
            "code": item.code,
            "description": item.description,
            "quantity": format_quantity(item.quantity),
            "unit": item.unit,
            "rcv": format_money(item.rcv),
            "citation_id": citation.id if citation else None,
            "justification": (
                render_citation(citation, citation_values(package, item)) if citation else STANDARD_JUSTIFICATION
            ),
            "defense_note": note.note if note else None,
        })
    return {
        "claim": package.claim_ref.model_dump(),
        "insured": package.insured.model_dump(),
        "contractor": package.contractor.model_dump() if package.contractor else None,
        "line_items": items,
        "citations": [
            {"id": c.id, "title": c.title, "summary": c.requirement_summary, "text": c.full_text}
            for c in package.citations
        ],
        "photo_count": len(package.photos),
        "totals": {
            "original_rcv": format_money(package.total_original_rcv),
            "supplement_rcv": format_money(package.total_supplement_rcv),
            "new_total_rcv": format_money(package.new_total_rcv),
        },
    }


class ProseWriter:
    """Turns a package into letter prose, falling back to the templated document."""

    def __init__(self, client: Optional[OpenAIClient] = None, enabled: Optional[bool] = None):
        self._client = client
        self.enabled = settings.prose_configured if enabled is None else enabled

    @property
    def client(self) -> OpenAIClient:
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    def write(self, package: SupplementPackage, prepared_on: Optional[str] = None) -> str:
        fallback = export_document(package, prepared_on=prepared_on)
        if not self.enabled:
            return fallback

        context = build_prose_context(package)
        try:
            response = self.client.chat_completions_create(
                model=settings.azure_openai_deployment_name,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": json.dumps(context, indent=2)},
                ],
                max_tokens=settings.prose_max_tokens,
                temperature=0.2,
            )
            text = (response.choices[0].message.content or "").strip()
        except Exception as e:
            logger.error(
                "Prose generation failed; using templated document",
                claim_number=package.claim_ref.claim_number,
                error=str(e),
            )
            return fallback

        if not text:
            logger.warning("Prose generation returned no text; using templated document")
            return fallback
        logger.info("Prose generated", claim_number=package.claim_ref.claim_number, characters=len(text))
        return text
