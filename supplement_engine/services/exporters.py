"""Export formatters for supplement packages.

All renderers are deterministic and make no external calls. The only date
that appears in output is ``prepared_on`` when the caller passes one.
"""
import csv
import io
import re
from typing import Dict, List, Mapping, Optional

from supplement_engine.config import settings
from supplement_engine.models.knowledge import CodeCitation
from supplement_engine.models.scope import LineItem
from supplement_engine.models.supplement import PhotoRef, SupplementPackage
from supplement_engine.utils.logging import get_logger
from supplement_engine.utils.money import format_money, format_quantity

logger = get_logger(__name__)

CSV_COLUMNS = ["line", "code", "description", "quantity", "unit", "unitPrice", "rcv"]
PLACEHOLDER = re.compile(r"\{(\w+)\}")
WIDTH = 80
TABLE_WIDTH = 84

STANDARD_JUSTIFICATION = (
    "This item is required for proper roof installation per industry standards and manufacturer "
    "specifications."
)


def render_citation(
    citation: CodeCitation,
    values: Mapping[str, Optional[object]],
    missing_token: Optional[str] = None,
) -> str:
    """Fill ``{name}`` placeholders in a citation template.

    Placeholders without a value render as ``missing_token`` (by default
    ``settings.unresolved_placeholder_token``); rendering never fails.
    """
    token = settings.unresolved_placeholder_token if missing_token is None else missing_token
    unresolved: List[str] = []

    def substitute(match: re.Match) -> str:
        value = values.get(match.group(1))
        if value is None or str(value).strip() == "":
            unresolved.append(match.group(1))
            return token
        return str(value)

    rendered = PLACEHOLDER.sub(substitute, citation.citation_template)
    if unresolved:
        logger.warning("Unresolved citation placeholders", citation_id=citation.id, placeholders=unresolved)
    return rendered


def citation_values(package: SupplementPackage, item: LineItem) -> Dict[str, Optional[str]]:
    """Placeholder values available when rendering a citation for one line item."""
    metrics = package.roof_metrics
    return {
        "description": item.description,
        "line_item_code": item.code,
        "quantity": format_quantity(item.quantity) if item.quantity else None,
        "unit": item.unit,
        "claim_number": package.claim_ref.claim_number,
        "carrier": package.claim_ref.carrier,
        "insured_name": package.insured.name,
        "property_address": package.insured.property_address,
        "pitch": metrics.pitch_text,
        "stories": str(metrics.stories) if metrics.stories is not None else None,
    }


def export_csv(package: SupplementPackage) -> str:
    """One row per priced line item, RFC 4180 quoting, CRLF line endings."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(CSV_COLUMNS)
    for item in package.line_items:
        writer.writerow([
            item.line_number if item.line_number is not None else "",
            item.code or "",
            item.description,
            format_quantity(item.quantity),
            item.unit,
            format_quantity(item.unit_price),
            format_quantity(item.rcv),
        ])
    return buffer.getvalue()


def _banner(lines: List[str], title: str, width: int = WIDTH) -> None:
    lines.append("=" * width)
    lines.append(title.center(width).rstrip())
    lines.append("=" * width)
    lines.append("")


def _heading(lines: List[str], title: str, width: int = WIDTH) -> None:
    lines.append(title)
    lines.append("-" * width)


def _field(value: Optional[str]) -> str:
    return value if value else "Not provided"


def _group_photos(photos: List[PhotoRef]) -> Dict[str, List[PhotoRef]]:
    grouped: Dict[str, List[PhotoRef]] = {}
    for photo in photos:
        grouped.setdefault(photo.photo_type or "other", []).append(photo)
    return grouped


def export_document(package: SupplementPackage, prepared_on: Optional[str] = None) -> str:
    """Render the plain-text supplement request.

    Sections, in order: claim identity, summary totals, line-item table,
    per-item justifications with their defense notes, photo documentation,
    footer.
    """
    lines: List[str] = []
    _banner(lines, "SUPPLEMENT REQUEST")

    _heading(lines, "CLAIM INFORMATION")
    claim = package.claim_ref
    lines.append(f"Claim Number: {_field(claim.claim_number)}")
    lines.append(f"Carrier: {_field(claim.carrier)}")
    if claim.policy_number:
        lines.append(f"Policy Number: {claim.policy_number}")
    if claim.date_of_loss:
        lines.append(f"Date of Loss: {claim.date_of_loss}")
    if claim.adjuster_name:
        lines.append(f"Adjuster: {claim.adjuster_name}")
    lines.append("")

    _heading(lines, "INSURED INFORMATION")
    lines.append(f"Name: {_field(package.insured.name)}")
    lines.append(f"Property Address: {_field(package.insured.property_address)}")
    lines.append("")

    if package.contractor:
        _heading(lines, "CONTRACTOR INFORMATION")
        lines.append(f"Company: {package.contractor.name}")
        if package.contractor.license:
            lines.append(f"License: {package.contractor.license}")
        if package.contractor.phone:
            lines.append(f"Phone: {package.contractor.phone}")
        if package.contractor.email:
            lines.append(f"Email: {package.contractor.email}")
        lines.append("")

    _heading(lines, "SUPPLEMENT SUMMARY")
    lines.append(f"Total Items Requested: {len(package.line_items)}")
    lines.append(f"Total Supplement RCV: {format_money(package.total_supplement_rcv)}")
    lines.append(f"Original Carrier RCV: {format_money(package.total_original_rcv)}")
    lines.append(f"New Total RCV: {format_money(package.new_total_rcv)}")
    lines.append("")

    _banner(lines, "SUPPLEMENT LINE ITEMS")
    lines.append(
        "Line".ljust(6) + "Code".ljust(12) + "Description".ljust(40)
        + "Qty".rjust(8) + "Unit".rjust(6) + "RCV".rjust(12)
    )
    lines.append("-" * TABLE_WIDTH)
    for item in package.line_items:
        lines.append(
            str(item.line_number or "").ljust(6)
            + (item.code or "-").ljust(12)
            + item.description[:38].ljust(40)
            + format_quantity(item.quantity).rjust(8)
            + item.unit.rjust(6)
            + format_money(item.rcv).rjust(12)
        )
    lines.append("-" * TABLE_WIDTH)
    lines.append("TOTAL:".rjust(72) + format_money(package.total_supplement_rcv).rjust(12))
    lines.append("")

    _banner(lines, "DETAILED JUSTIFICATIONS")
    for index, item in enumerate(package.line_items, start=1):
        lines.append(f"{index}. {item.description}")
        if item.code:
            lines.append(f"   Line Item Code: {item.code}")
        citation = package.citation(item.citation_id)
        if citation is not None:
            lines.append(f"   Code Reference: {citation.id} - {citation.title}")
            body = render_citation(citation, citation_values(package, item))
        else:
            body = STANDARD_JUSTIFICATION
        lines.append("")
        lines.append(f"   {body}")
        note = package.defense_note_for(item.line_number)
        if note is not None:
            lines.append("")
            lines.append(f"   Defense Note: {note.note}")
        lines.append("")
        lines.append("-" * WIDTH)
        lines.append("")

    _banner(lines, "PHOTO DOCUMENTATION")
    if package.photos:
        lines.append(f"{len(package.photos)} photos attached to this supplement request.")
        lines.append("")
        for photo_type, photos in _group_photos(package.photos).items():
            locations = [p.location_hint for p in photos if p.location_hint]
            summary = f"{photo_type}: {len(photos)}"
            if locations:
                summary += f" ({', '.join(locations)})"
            lines.append(summary)
    else:
        lines.append("No photos attached.")
    lines.append("")

    lines.append("=" * WIDTH)
    lines.append("This supplement request has been prepared with reference to the")
    lines.append("International Residential Code (IRC) and manufacturer specifications.")
    if prepared_on:
        lines.append("")
        lines.append(f"Date Prepared: {prepared_on}")
    lines.append("=" * WIDTH)
    return "\n".join(lines) + "\n"


def export_photo_index(package: SupplementPackage, prepared_on: Optional[str] = None) -> str:
    """Photo binder: photos grouped by type, each with location, components and damage."""
    lines: List[str] = []
    lines.append("=" * 60)
    lines.append("PHOTO DOCUMENTATION INDEX".center(60).rstrip())
    lines.append("=" * 60)
    lines.append("")
    lines.append(f"Total Photos: {len(package.photos)}")
    if prepared_on:
        lines.append(f"Date: {prepared_on}")
    lines.append("")

    for photo_type, photos in _group_photos(package.photos).items():
        lines.append("-" * 60)
        lines.append(f"{photo_type.upper()} PHOTOS ({len(photos)})")
        lines.append("-" * 60)
        lines.append("")
        for index, photo in enumerate(photos, start=1):
            lines.append(f"Photo {index}: {photo.photo_id}")
            lines.append(f"  Location: {photo.location_hint or 'Not specified'}")
            if photo.components:
                lines.append(f"  Components: {', '.join(photo.components)}")
            if photo.damage:
                lines.append(f"  Damage: {', '.join(photo.damage)}")
            lines.append("")
    return "\n".join(lines) + "\n"
