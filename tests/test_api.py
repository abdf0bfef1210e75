import pytest
from fastapi.testclient import TestClient


def test_root_and_health() -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    root = client.get("/")
    assert root.status_code == 200
    assert root.json()["service"] == "Roofing Supplement Engine API"

    health = client.get("/health")
    assert health.status_code == 200
    body = health.json()
    assert body["status"] == "healthy"
    assert body["services"]["knowledge_base"] is True


def test_knowledge_routes() -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    codes = client.get("/api/v1/knowledge/codes", params={"q": "drip"})
    assert codes.status_code == 200
    assert {c["code"] for c in codes.json()} == {"RFGDRIP", "RFGDRIPG"}

    detail = client.get("/api/v1/knowledge/codes/rfgdrip")
    assert detail.status_code == 200
    assert detail.json()["citations"][0]["id"] == "R905.2.8.5"

    missing = client.get("/api/v1/knowledge/codes/NOPE")
    assert missing.status_code == 404

    critical = client.get("/api/v1/knowledge/omitted-items", params={"priority": "critical"})
    assert [t["line_item_code"] for t in critical.json()] == ["RFGDRIP", "RFGSTRT", "RFGIWS", "RFGSTEP", "RFGRIDGC"]


def test_normalize_route_reports_warnings(raw_scope: dict) -> None:
    from supplement_engine.api.main import app

    raw_scope["lineItems"][1]["rcv"] = "n/a"
    client = TestClient(app)

    resp = client.post("/api/v1/scope/normalize", json={"scope": raw_scope})

    assert resp.status_code == 200
    body = resp.json()
    assert body["summary"]["line_item_count"] == 2
    assert any("lineItems[1].rcv" in w for w in body["scope"]["warnings"])


def test_detect_route_combines_evidence(raw_scope: dict, measurement_report: dict) -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    resp = client.post(
        "/api/v1/deltas/detect",
        json={
            "scope": raw_scope,
            "photoAnalyses": [{"photoId": "p1", "photoType": "rooftop", "components": [{"component": "chimney"}]}],
            "measurementReport": measurement_report,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    codes = [d["line_item_code"] for d in body["deltas"]]
    assert "RFGDRIP" in codes
    assert "RFGCRKT" in codes
    assert body["counts"]["missing"] == len(body["deltas"])


def test_detect_route_rejects_empty_scope() -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    resp = client.post("/api/v1/deltas/detect", json={"scope": {}})

    assert resp.status_code == 400


def test_transition_route(raw_scope: dict) -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)
    delta = client.post("/api/v1/deltas/detect", json={"scope": raw_scope}).json()["deltas"][0]

    approved = client.post("/api/v1/deltas/transition", json={"delta": delta, "target_status": "approved"})
    assert approved.status_code == 200
    assert approved.json()["status"] == "approved"

    denied = client.post("/api/v1/deltas/transition", json={"delta": approved.json(), "target_status": "denied"})
    assert denied.status_code == 409
    assert "approved -> denied" in denied.json()["detail"]


def _approved_drip() -> dict:
    return {
        "delta_id": "delta-drip",
        "type": "missing",
        "status": "approved",
        "line_item_code": "RFGDRIP",
        "description": "Drip Edge",
        "priority": "critical",
        "quantity": "200",
    }


def test_supplement_route_json(raw_scope: dict) -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    resp = client.post(
        "/api/v1/supplement",
        json={"scope": raw_scope, "deltas": [_approved_drip()], "photos": [{"photo_id": "p1"}]},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["validation"]["is_valid"] is True
    assert body["new_total_rcv"] == "$7,100.00"
    assert [d["status"] for d in body["included_deltas"]] == ["included"]


def test_supplement_route_invalid_package_includes_nothing(raw_scope: dict) -> None:
    from supplement_engine.api.main import app

    del raw_scope["claimNumber"]
    client = TestClient(app)

    resp = client.post("/api/v1/supplement", json={"scope": raw_scope, "deltas": [_approved_drip()]})

    body = resp.json()
    assert body["validation"]["is_valid"] is False
    assert "Claim number is required" in body["validation"]["errors"]
    assert body["included_deltas"] == []


@pytest.mark.parametrize(
    "output_format,media_type,marker",
    [
        ("csv", "text/csv", "line,code,description"),
        ("document", "text/plain", "SUPPLEMENT REQUEST"),
        ("photos", "text/plain", "PHOTO DOCUMENTATION INDEX"),
        ("letter", "text/plain", "SUPPLEMENT REQUEST"),
    ],
)
def test_supplement_route_text_formats(raw_scope: dict, output_format: str, media_type: str, marker: str) -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    resp = client.post(
        "/api/v1/supplement",
        json={"scope": raw_scope, "deltas": [_approved_drip()], "format": output_format},
    )

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(media_type)
    assert marker in resp.text



def test_letter_is_written_off_the_event_loop(raw_scope: dict, monkeypatch) -> None:
    import asyncio

    from supplement_engine.api.main import app
    from supplement_engine.services.prose_writer import ProseWriter

    seen = {}

    def fake_write(self, package, prepared_on=None) -> str:
        try:
            asyncio.get_running_loop()
            seen["on_loop"] = True
        except RuntimeError:
            seen["on_loop"] = False
        return "LETTER"

    monkeypatch.setattr(ProseWriter, "write", fake_write)
    client = TestClient(app)

    resp = client.post(
        "/api/v1/supplement",
        json={"scope": raw_scope, "deltas": [_approved_drip()], "format": "letter"},
    )

    assert resp.status_code == 200
    assert resp.text == "LETTER"
    assert seen["on_loop"] is False


def test_knowledge_filters_and_photo_checklist() -> None:
    from supplement_engine.api.main import app

    client = TestClient(app)

    cited = client.get("/api/v1/knowledge/omitted-items", params={"code_required": "true"}).json()
    assert cited
    assert all(t["citation_id"] for t in cited)

    critical_cited = client.get(
        "/api/v1/knowledge/omitted-items", params={"code_required": "true", "priority": "critical"}
    ).json()
    assert {t["priority"] for t in critical_cited} == {"critical"}

    checklist = client.get("/api/v1/knowledge/photo-checklist", params={"required_only": "true"})
    assert checklist.status_code == 200
    assert len(checklist.json()) == 10
    assert checklist.json()[0]["id"] == "ov_front"
