from decimal import Decimal


def _photo(photo_id: str, components=(), damage=()) -> "PhotoAnalysis":
    from supplement_engine.models.evidence import PhotoAnalysis

    return PhotoAnalysis.model_validate({
        "photoId": photo_id,
        "photoType": "edge",
        "location": "north eave",
        "components": [{"component": c} for c in components],
        "damage": list(damage),
    })


def _evidence(*photos, report=None) -> list:
    from supplement_engine.services import signals_from_measurement_report, signals_from_photo_analysis

    signals = []
    for photo in photos:
        signals.extend(signals_from_photo_analysis(photo))
    signals.extend(signals_from_measurement_report(report))
    return signals


def test_missing_drip_edge_is_critical_with_evidence(raw_scope: dict, measurement_report: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.models.knowledge import Priority
    from supplement_engine.services import detect_deltas, normalize_scope

    scope = normalize_scope(raw_scope)
    evidence = _evidence(_photo("p1", components=["Drip_Edge"]), report=measurement_report)

    deltas = detect_deltas(scope, evidence)

    drip = next(d for d in deltas if d.line_item_code == "RFGDRIP")
    assert drip.type == DeltaType.MISSING
    assert drip.priority == Priority.CRITICAL
    assert drip.citation_id == "R905.2.8.5"
    assert drip.quantity == Decimal("200.00")
    assert drip.unit == "LF"
    assert drip.evidence_ids == ["p1:component:0", "report:eave", "report:rake"]


def test_description_match_suppresses_missing_item(raw_scope: dict) -> None:
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append({"description": "Drip edge - aluminum", "quantity": 200, "unit": "LF"})
    scope = normalize_scope(raw_scope)

    deltas = detect_deltas(scope, [])

    assert all(d.line_item_code != "RFGDRIP" for d in deltas)


def test_equivalent_code_suppresses_missing_item(raw_scope: dict) -> None:
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append({"code": "RFGRIDGCS", "description": "Cap", "quantity": 60, "unit": "LF"})

    deltas = detect_deltas(normalize_scope(raw_scope), [])

    assert all(d.line_item_code != "RFGRIDGC" for d in deltas)


def test_steep_two_story_roof_triggers_labor_items(raw_scope: dict) -> None:
    from supplement_engine.models.knowledge import Priority
    from supplement_engine.services import detect_deltas, normalize_scope

    deltas = detect_deltas(normalize_scope(raw_scope), [])
    by_code = {d.line_item_code: d for d in deltas}

    steep = by_code["RFGSTEEP"]
    supervisor = by_code["RFGSUPR"]
    assert steep.priority == Priority.HIGH
    assert supervisor.priority == Priority.HIGH
    assert "8/12" in steep.trigger_reason
    assert "8/12" in supervisor.trigger_reason
    assert "2-story" in supervisor.trigger_reason
    assert steep.quantity == Decimal("20")
    assert supervisor.quantity == Decimal("8")
    assert "RFGHIGH" in by_code
    assert "RFGSTEEP2" not in by_code
    assert "RFGCRKT" not in by_code


def test_detection_is_deterministic(raw_scope: dict, measurement_report: dict) -> None:
    from supplement_engine.services import detect_deltas, normalize_scope

    scope = normalize_scope(raw_scope)
    evidence = _evidence(_photo("p1", components=["chimney"]), report=measurement_report)

    first = detect_deltas(scope, evidence)
    second = detect_deltas(scope, evidence)

    assert [d.delta_id for d in first] == [d.delta_id for d in second]
    assert len({d.delta_id for d in first}) == len(first)


def test_photo_component_triggers_conditional_item(raw_scope: dict) -> None:
    from supplement_engine.services import detect_deltas, normalize_scope

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(_photo("p2", components=["Chimney"])))

    cricket = next(d for d in deltas if d.line_item_code == "RFGCRKT")
    assert cricket.trigger_reason == "evidence shows chimney"
    assert cricket.quantity == Decimal("1")


def test_damage_on_scoped_component_is_recommended(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.models.knowledge import Priority
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append({"code": "RFGRIDGCS", "description": "Ridge cap", "quantity": 60, "unit": "LF"})
    photo = _photo("p3", damage=[{
        "damageType": "hail",
        "severity": "severe",
        "description": "Fractured ridge cap shingles",
        "component": "ridge cap",
    }])

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(photo))

    added = [d for d in deltas if d.type == DeltaType.RECOMMEND_ADD]
    assert len(added) == 1
    assert added[0].line_item_code == "RFGRIDGC"
    assert added[0].description == "Hip/Ridge Cap"
    assert added[0].priority == Priority.HIGH
    assert added[0].evidence_ids == ["p3:damage:0"]


def test_unmapped_damage_is_described_from_finding(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.models.knowledge import Priority
    from supplement_engine.services import detect_deltas, normalize_scope

    photo = _photo("p4", damage=[
        {"damageType": "hail", "severity": "moderate", "description": "Cracked skylight lens", "component": "skylight"},
        {"damageType": "granule loss", "severity": "minor", "component": "shingles"},
    ])

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(photo))

    added = [d for d in deltas if d.type == DeltaType.RECOMMEND_ADD]
    assert len(added) == 1
    assert added[0].line_item_code is None
    assert added[0].description == "Cracked skylight lens (moderate damage)"
    assert added[0].priority == Priority.MEDIUM


def test_damage_already_supporting_missing_item_is_not_repeated(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.services import detect_deltas, normalize_scope

    photo = _photo("p5", damage=[{"damageType": "dent", "severity": "severe", "component": "drip edge"}])

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(photo))

    drip = [d for d in deltas if d.line_item_code == "RFGDRIP"]
    assert len(drip) == 1
    assert drip[0].type == DeltaType.MISSING
    assert "p5:damage:0" in drip[0].evidence_ids
    assert not any(d.type == DeltaType.RECOMMEND_ADD for d in deltas)


def test_measured_quantity_above_scoped_line_is_underscoped(raw_scope: dict, measurement_report: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append({"code": "RFGDRIP", "description": "Drip edge", "quantity": 100, "unit": "LF"})

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(report=measurement_report))

    under = [d for d in deltas if d.type == DeltaType.UNDERSCOPED]
    assert [d.line_item_code for d in under] == ["RFGDRIP"]
    assert under[0].quantity == Decimal("100.00")
    assert under[0].evidence_ids == ["report:eave", "report:rake"]


def test_measured_quantity_within_tolerance_is_not_underscoped(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append({"code": "RFGDRIP", "description": "Drip edge", "quantity": 195, "unit": "LF"})

    deltas = detect_deltas(normalize_scope(raw_scope), _evidence(report={"eaves": 120, "rakes": 80}))

    assert not any(d.type == DeltaType.UNDERSCOPED for d in deltas)


def test_deduplicate_merges_evidence_into_first() -> None:
    from supplement_engine.models.delta import DeltaItem, DeltaType
    from supplement_engine.models.evidence import EvidenceSignal
    from supplement_engine.services import deduplicate_deltas

    first = DeltaItem(
        delta_id="delta-a",
        type=DeltaType.MISSING,
        line_item_code="RFGDRIP",
        description="Drip Edge",
        priority="critical",
        evidence_refs=[EvidenceSignal(signal_id="s1", source_type="photo")],
    )
    duplicate = DeltaItem(
        delta_id="delta-b",
        type=DeltaType.RECOMMEND_ADD,
        line_item_code="rfgdrip",
        description="  drip   edge ",
        priority="high",
        evidence_refs=[
            EvidenceSignal(signal_id="s1", source_type="photo"),
            EvidenceSignal(signal_id="s2", source_type="photo"),
        ],
    )

    merged = deduplicate_deltas([first, duplicate])

    assert len(merged) == 1
    assert merged[0].delta_id == "delta-a"
    assert merged[0].evidence_ids == ["s1", "s2"]


def test_measurement_report_adapter_accepts_nested_and_suffixed_keys() -> None:
    from supplement_engine.services import signals_from_measurement_report

    signals = signals_from_measurement_report(
        {"measurements": {"eaves_lf": "120", "totalSquares": 24, "chimneys": 1, "valleys": 0}}
    )

    by_feature = {s.detected_component: s for s in signals}
    assert set(by_feature) == {"eave", "roof area"}
    assert by_feature["eave"].quantity == Decimal("120")
    assert by_feature["roof area"].unit == "SQ"


def test_line_described_as_item_but_coded_otherwise_is_wrong_code(raw_scope: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.services import detect_deltas, normalize_scope

    raw_scope["lineItems"].append(
        {"lineNumber": 3, "code": "RFGSTRT", "description": "Drip edge", "quantity": 180, "unit": "LF"}
    )
    raw_scope["lineItems"].append(
        {"lineNumber": 4, "code": "RFGDRIPR", "description": "Remove drip edge", "quantity": 180, "unit": "LF"}
    )

    deltas = detect_deltas(normalize_scope(raw_scope), [])

    wrong = [d for d in deltas if d.type == DeltaType.WRONG_CODE]
    assert [d.line_item_code for d in wrong] == ["RFGDRIP"]
    assert wrong[0].quantity == Decimal("180")
    assert "coded RFGSTRT" in wrong[0].rationale
    assert not any(d.type == DeltaType.MISSING and d.line_item_code == "RFGDRIP" for d in deltas)


def test_missing_item_and_damage_finding_merge_into_one_delta(raw_scope: dict, measurement_report: dict) -> None:
    from supplement_engine.models.delta import DeltaType
    from supplement_engine.models.evidence import EvidenceSignal
    from supplement_engine.services import detect_deltas, normalize_scope

    damage = EvidenceSignal(
        signal_id="p9:damage:0",
        source_type="photo",
        detected_component="drip edge",
        component_present=False,
        detected_damage={"damageType": "dent", "severity": "severe"},
        photo_id="p9",
        photo_type="edge",
    )

    deltas = detect_deltas(normalize_scope(raw_scope), [damage, *_evidence(report=measurement_report)])

    drip = [d for d in deltas if d.line_item_code == "RFGDRIP"]
    assert len(drip) == 1
    assert drip[0].type == DeltaType.MISSING
    assert drip[0].evidence_ids == ["report:eave", "report:rake", "p9:damage:0"]
    assert not any(d.type == DeltaType.RECOMMEND_ADD for d in deltas)
