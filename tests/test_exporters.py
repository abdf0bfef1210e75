import csv
import io
from decimal import Decimal

import pytest


@pytest.fixture
def package(raw_scope: dict) -> "SupplementPackage":
    from supplement_engine.models.delta import DeltaItem
    from supplement_engine.models.supplement import Contractor, PhotoRef
    from supplement_engine.services import assemble_package, normalize_scope

    deltas = [
        DeltaItem(
            delta_id="delta-drip",
            type="missing",
            status="approved",
            line_item_code="RFGDRIP",
            description="Drip Edge",
            priority="critical",
            quantity=Decimal("200"),
        ),
        DeltaItem(
            delta_id="delta-custom",
            type="recommend-add",
            status="approved",
            description="Skylight, flashing kit",
            priority="medium",
            quantity=Decimal("1"),
            estimated_rcv=Decimal("275"),
        ),
    ]
    return assemble_package(
        normalize_scope(raw_scope),
        deltas,
        photos=[
            PhotoRef(photo_id="p1", photo_type="edge", location_hint="north eave", components=["drip edge"]),
            PhotoRef(photo_id="p2", photo_type="ground", damage=["hail (severe)"]),
        ],
        contractor=Contractor(name="Summit Roofing LLC", license="TX-44821"),
    )


def test_csv_export_quotes_commas(package) -> None:
    from supplement_engine.services import export_csv

    text = export_csv(package)

    assert text.startswith("line,code,description,quantity,unit,unitPrice,rcv\r\n")
    rows = list(csv.reader(io.StringIO(text)))
    assert rows[1] == ["3", "RFGDRIP", "Drip edge - aluminum", "200.00", "LF", "3.50", "700.00"]
    assert rows[2][2] == "Skylight, flashing kit"
    assert rows[2][1] == ""
    assert rows[2][6] == "275.00"
    assert len(rows) == 3


def test_document_sections_in_order(package) -> None:
    from supplement_engine.services import export_document

    text = export_document(package, prepared_on="2024-05-01")

    headings = [
        "SUPPLEMENT REQUEST",
        "CLAIM INFORMATION",
        "INSURED INFORMATION",
        "CONTRACTOR INFORMATION",
        "SUPPLEMENT SUMMARY",
        "SUPPLEMENT LINE ITEMS",
        "DETAILED JUSTIFICATIONS",
        "PHOTO DOCUMENTATION",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)
    assert "Claim Number: CLM-2024-0415" in text
    assert "New Total RCV: $7,375.00" in text
    assert "Code Reference: R905.2.8.5 - Drip Edge" in text
    assert "We request 200.00 LF of Drip edge - aluminum (RFGDRIP) for the property at 418 Pecan Ridge Dr" in text
    assert "required for proper roof installation" in text
    assert "Date Prepared: 2024-05-01" in text


def test_document_is_deterministic_without_date(package) -> None:
    from supplement_engine.services import export_document

    assert export_document(package) == export_document(package)
    assert "Date Prepared" not in export_document(package)


def test_missing_claim_fields_render_as_not_provided() -> None:
    from supplement_engine.models.supplement import SupplementPackage
    from supplement_engine.services import export_document

    text = export_document(SupplementPackage())

    assert "Claim Number: Not provided" in text
    assert "No photos attached." in text
    assert "CONTRACTOR INFORMATION" not in text


def test_unresolved_placeholders_use_token() -> None:
    from supplement_engine.knowledge import KnowledgeBase
    from supplement_engine.services import render_citation

    citation = KnowledgeBase.default().lookup_citation("R905.2.8.5")

    rendered = render_citation(citation, {"quantity": "200.00", "unit": "LF", "description": "Drip edge"})

    assert "{" not in rendered
    assert "We request 200.00 LF of Drip edge ([____])" in rendered
    assert rendered.endswith("for the property at [____], measured as total eave and rake length.")
    assert "[MISSING]" in render_citation(citation, {}, missing_token="[MISSING]")


def test_photo_index_groups_by_type(package) -> None:
    from supplement_engine.services import export_photo_index

    text = export_photo_index(package)

    assert "Total Photos: 2" in text
    assert "EDGE PHOTOS (1)" in text
    assert "GROUND PHOTOS (1)" in text
    assert "  Location: north eave" in text
    assert "  Damage: hail (severe)" in text


def test_prose_writer_disabled_returns_document(package) -> None:
    from supplement_engine.services import ProseWriter, export_document

    assert ProseWriter(enabled=False).write(package) == export_document(package)


def test_prose_writer_uses_model_output(package) -> None:
    from types import SimpleNamespace
    from supplement_engine.services import ProseWriter

    class DummyClient:
        def __init__(self) -> None:
            self.calls = []

        def chat_completions_create(self, **kwargs):
            self.calls.append(kwargs)
            message = SimpleNamespace(content="Dear adjuster, please review the attached items.")
            return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    client = DummyClient()
    text = ProseWriter(client=client, enabled=True).write(package)

    assert text == "Dear adjuster, please review the attached items."
    assert "RFGDRIP" in client.calls[0]["messages"][1]["content"]


def test_prose_writer_falls_back_on_error(package) -> None:
    from supplement_engine.services import ProseWriter, export_document

    class FailingClient:
        def chat_completions_create(self, **kwargs):
            raise RuntimeError("endpoint unavailable")

    assert ProseWriter(client=FailingClient(), enabled=True).write(package) == export_document(package)


def test_document_and_prose_context_carry_defense_notes(package) -> None:
    from supplement_engine.services import build_prose_context, export_document

    text = export_document(package)
    context = build_prose_context(package)

    assert "   Defense Note: Per R905.2.8.5, Drip edge - aluminum (RFGDRIP) is required." in text
    assert "   Defense Note: Skylight, flashing kit." in text
    assert context["line_items"][0]["defense_note"].startswith("Per R905.2.8.5")
    assert context["line_items"][1]["defense_note"] == "Skylight, flashing kit."
