from decimal import Decimal


def test_note_for_uncoded_delta_uses_description_and_trigger() -> None:
    from supplement_engine.models.delta import DeltaItem
    from supplement_engine.services import defense_note

    delta = DeltaItem(
        delta_id="delta-skylight",
        type="recommend-add",
        description="Skylight flashing kit",
        priority="medium",
        trigger_reason="evidence shows skylight",
    )

    assert defense_note(delta) == "Skylight flashing kit. Applies because evidence shows skylight."


def test_note_for_wrong_code_carries_rationale(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.services import defense_note, detect_deltas, normalize_scope

    raw_scope["lineItems"].append(
        {"lineNumber": 3, "code": "RFGSTRT", "description": "Drip edge", "quantity": 180, "unit": "LF"}
    )
    wrong = next(d for d in detect_deltas(normalize_scope(raw_scope), []) if d.type == DeltaType.WRONG_CODE)

    note = defense_note(wrong)

    assert note.startswith("Per R905.2.8.5, Drip edge - aluminum (RFGDRIP) is required.")
    assert "Carrier line 3 describes Drip Edge but is coded RFGSTRT; expected RFGDRIP." in note


def test_note_lists_damage_findings_once() -> None:
    from supplement_engine.models.delta import DeltaItem
    from supplement_engine.models.evidence import EvidenceSignal
    from supplement_engine.services import defense_note

    damage = {"damageType": "hail", "severity": "severe", "description": "Fractured ridge cap shingles"}
    signal = EvidenceSignal(signal_id="p3:damage:0", source_type="photo", detected_damage=damage, photo_id="p3")
    delta = DeltaItem(
        delta_id="delta-ridge",
        type="recommend-add",
        line_item_code="RFGRIDGC",
        description="Hip/Ridge Cap",
        priority="high",
        quantity=Decimal("60"),
        evidence_refs=[signal, signal],
    )

    note = defense_note(delta)

    assert note.count("photo p3 shows Fractured ridge cap shingles") == 1
