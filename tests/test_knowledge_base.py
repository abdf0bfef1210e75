import json

import pytest


def test_lookup_line_item_code_is_case_insensitive() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    kb = KnowledgeBase.default()

    code = kb.lookup_line_item_code("rfgdrip")
    assert code is not None
    assert code.code == "RFGDRIP"
    assert code.unit.value == "LF"
    assert kb.lookup_line_item_code("NOPE") is None
    assert kb.lookup_line_item_code(None) is None


def test_citations_for_code() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    kb = KnowledgeBase.default()

    ids = [c.id for c in kb.citations_for("RFGDRIP")]
    assert ids == ["R905.2.8.5"]
    assert "R905.2.7" in [c.id for c in kb.citations_for("RFGIWS")]
    assert kb.citations_for("UNKNOWN") == []


def test_shipped_catalogue_has_no_dangling_references() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    assert KnowledgeBase.default().integrity_issues() == []


def test_critical_templates_always_apply() -> None:
    from supplement_engine.knowledge import KnowledgeBase
    from supplement_engine.models.knowledge import Priority, ScopeContext

    kb = KnowledgeBase.default()
    templates = kb.omitted_item_templates(ScopeContext())

    codes = [t.line_item_code for t in templates]
    for critical in ("RFGDRIP", "RFGSTRT", "RFGIWS", "RFGSTEP", "RFGRIDGC"):
        assert critical in codes
    # Conditional templates need their trigger
    assert "RFGSTEEP" not in codes
    assert "RFGCRKT" not in codes
    assert all(t.priority == Priority.CRITICAL or t.trigger is None for t in templates)


@pytest.mark.parametrize(
    "pitch,expected,absent",
    [
        (6.0, [], ["RFGSTEEP", "RFGSTEEP2"]),
        (7.0, ["RFGSTEEP"], ["RFGSTEEP2"]),
        (9.5, ["RFGSTEEP"], ["RFGSTEEP2"]),
        (10.0, ["RFGSTEEP2"], ["RFGSTEEP"]),
    ],
)
def test_steep_pitch_bands(pitch: float, expected: list, absent: list) -> None:
    from supplement_engine.knowledge import KnowledgeBase
    from supplement_engine.models.knowledge import ScopeContext

    codes = [t.line_item_code for t in KnowledgeBase.default().omitted_item_templates(ScopeContext(pitch=pitch))]

    for code in expected:
        assert code in codes
    for code in absent:
        assert code not in codes


def test_component_triggered_template() -> None:
    from supplement_engine.knowledge import KnowledgeBase
    from supplement_engine.models.knowledge import ScopeContext

    kb = KnowledgeBase.default()
    context = ScopeContext(present_components=frozenset({"chimney"}))

    cricket = next(t for t in kb.omitted_item_templates(context) if t.line_item_code == "RFGCRKT")
    assert cricket.trigger_reason(context) == "evidence shows chimney"


def test_shared_code_resolves_to_higher_priority_then_first_defined() -> None:
    from supplement_engine.knowledge import KnowledgeBase
    from supplement_engine.models.knowledge import ScopeContext

    kb = KnowledgeBase.from_dict({
        "line_item_codes": [{"code": "RFGX", "description": "Test item", "unit": "EA"}],
        "omitted_items": [
            {"line_item_code": "RFGX", "name": "Medium first", "priority": "medium", "rationale": "m1"},
            {"line_item_code": "RFGX", "name": "High one", "priority": "high", "rationale": "h"},
            {"line_item_code": "RFGX", "name": "High two", "priority": "high", "rationale": "h2"},
        ],
    })

    templates = kb.omitted_item_templates(ScopeContext())
    assert [t.name for t in templates] == ["High one"]


def test_from_dict_rejects_invalid_record() -> None:
    from supplement_engine.exceptions import KnowledgeBaseError
    from supplement_engine.knowledge import KnowledgeBase

    with pytest.raises(KnowledgeBaseError):
        KnowledgeBase.from_dict({"line_item_codes": [{"code": "RFGX", "unit": "BUSHEL"}]})


def test_from_file_loads_catalogue(tmp_path) -> None:
    from supplement_engine.knowledge import KnowledgeBase

    path = tmp_path / "catalogue.json"
    path.write_text(json.dumps({
        "line_item_codes": [{"code": "RFGX", "description": "Test item", "unit": "EA", "reference_price": "10"}],
        "citations": [],
        "omitted_items": [],
    }))

    kb = KnowledgeBase.from_file(path)
    assert kb.lookup_line_item_code("RFGX").reference_price == 10


def test_from_file_errors(tmp_path) -> None:
    from supplement_engine.exceptions import KnowledgeBaseError
    from supplement_engine.knowledge import KnowledgeBase

    with pytest.raises(FileNotFoundError):
        KnowledgeBase.from_file(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    with pytest.raises(KnowledgeBaseError):
        KnowledgeBase.from_file(bad)

    listing = tmp_path / "list.json"
    listing.write_text("[]")
    with pytest.raises(KnowledgeBaseError):
        KnowledgeBase.from_file(listing)


def test_integrity_issues_report_dangling_references() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    kb = KnowledgeBase.from_dict({
        "line_item_codes": [],
        "citations": [],
        "omitted_items": [
            {"line_item_code": "RFGX", "name": "Ghost", "priority": "medium", "citation_id": "R1", "rationale": "r"},
        ],
    })

    issues = kb.integrity_issues()
    assert len(issues) == 2
    assert any("RFGX" in issue for issue in issues)
    assert any("R1" in issue for issue in issues)


def test_resolve_component_and_search() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    kb = KnowledgeBase.default()

    assert kb.resolve_component("Drip_Edge").line_item_code == "RFGDRIP"
    assert kb.resolve_component("skylight") is None
    assert any(c.code == "RFGDRIP" for c in kb.search_codes("drip edge"))
    assert all(c.category == "roofing" for c in kb.codes_by_category("Roofing"))


def test_citation_placeholders() -> None:
    from supplement_engine.knowledge import KnowledgeBase

    citation = KnowledgeBase.default().lookup_citation("R905.2.8.5")

    assert citation.placeholders() == ["quantity", "unit", "description", "line_item_code", "property_address"]
