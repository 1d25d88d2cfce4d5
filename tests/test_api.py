"""
HTTP surface, with engine/service overridden by the test catalog.
"""
import pytest
from fastapi.testclient import TestClient

from quote_engine.api.main import app
from quote_engine.api.state import get_engine, get_quote_service

CLIENT = {"X-Client-Id": "client-1"}


@pytest.fixture
def client(engine, service):
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_quote_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def quote_body(status="sent", **project):
    details = {"title": "Portal", "type": "webapp", "features": ["auth"],
               "designType": "custom", "complexity": "medium"}
    details.update(project)
    return {"projectDetails": details, "timeline": {"urgency": "normal"}, "status": status}


def test_calculate_budget(client):
    res = client.post("/api/budget/calculate", json={
        "category": "webapp",
        "features": ["auth", "nonexistent"],
        "complexity": "medium",
        "timeline": "normal",
        "designType": "custom",
        "customRequirements": [],
    })
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["totalPrice"] == 27000
    assert data["estimatedHours"] == 75
    assert data["estimatedDays"] == 13
    assert data["currency"] == "INR"
    assert [f["name"] for f in data["selectedFeatures"]] == ["auth"]


def test_calculate_defaults_and_unknown_tiers(client):
    res = client.post("/api/budget/calculate", json={
        "category": "webapp",
        "complexity": "cosmic",
    })
    assert res.status_code == 200
    assert res.json()["data"]["multipliers"] == {"complexity": 1.5, "timeline": 1, "design": 1.5}


def test_calculate_uses_client_currency(client):
    res = client.post(
        "/api/budget/calculate",
        json={"category": "webapp", "features": ["auth"]},
        headers={"X-Client-Id": "client-usd"},
    )
    assert res.json()["data"]["currency"] == "USD"
    assert res.json()["data"]["totalPrice"] == 324


def test_calculate_unknown_category(client):
    res = client.post("/api/budget/calculate", json={"category": "maintenance"})
    assert res.status_code == 404
    assert "not available for this project type" in res.json()["detail"]


def test_templates_list_only_active(client):
    res = client.get("/api/budget/templates")
    assert res.status_code == 200
    categories = {t["category"] for t in res.json()["data"]}
    assert categories == {"webapp", "mobile"}


def test_quotes_require_identity(client):
    assert client.post("/api/quotes/generate", json=quote_body()).status_code == 401
    assert client.get("/api/quotes").status_code == 401


def test_quote_flow(client):
    res = client.post("/api/quotes/generate", json=quote_body(), headers=CLIENT)
    assert res.status_code == 201
    quote = res.json()["data"]
    number = quote["quoteNumber"]
    assert quote["status"] == "sent"
    assert quote["pricing"]["totalAmount"] == 31860
    assert len(quote["milestones"]) == 3

    viewed = client.get(f"/api/quotes/{number}", headers=CLIENT).json()["data"]
    assert viewed["status"] == "viewed"
    assert viewed["viewedAt"] is not None

    listed = client.get("/api/quotes", headers=CLIENT).json()["data"]
    assert [q["quoteNumber"] for q in listed] == [number]

    res = client.put(f"/api/quotes/{number}/reject", json={"reason": "Too slow"}, headers=CLIENT)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "rejected"
    assert res.json()["data"]["notes"] == "Too slow"

    res = client.put(f"/api/quotes/{number}/accept", headers=CLIENT)
    assert res.status_code == 409


def test_reject_without_body(client):
    number = client.post(
        "/api/quotes/generate", json=quote_body(), headers=CLIENT
    ).json()["data"]["quoteNumber"]

    res = client.put(f"/api/quotes/{number}/reject", headers=CLIENT)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "rejected"
    assert res.json()["data"]["notes"] is None


def test_quote_payload_uses_camel_case(client):
    quote = client.post("/api/quotes/generate", json=quote_body(), headers=CLIENT).json()["data"]
    assert {"quoteNumber", "clientId", "validUntil", "createdAt", "respondedAt"} <= set(quote)
    assert "quote_number" not in quote
    assert {"basePrice", "addOns", "discountTotal", "totalAmount", "estimatedHours"} <= set(quote["pricing"])
    assert "designType" in quote["projectDetails"]
    assert "estimatedDays" in quote["milestones"][0]
    assert "paymentTerms" in quote["terms"]


def test_accept_draft_conflicts(client):
    number = client.post(
        "/api/quotes/generate", json=quote_body(status="draft"), headers=CLIENT
    ).json()["data"]["quoteNumber"]

    assert client.put(f"/api/quotes/{number}/accept", headers=CLIENT).status_code == 409

    assert client.put(f"/api/admin/quotes/{number}/send").status_code == 200
    res = client.put(f"/api/quotes/{number}/accept", headers=CLIENT)
    assert res.status_code == 200
    assert res.json()["data"]["status"] == "accepted"


def test_quote_of_other_client_not_found(client):
    number = client.post(
        "/api/quotes/generate", json=quote_body(), headers=CLIENT
    ).json()["data"]["quoteNumber"]
    res = client.get(f"/api/quotes/{number}", headers={"X-Client-Id": "client-2"})
    assert res.status_code == 404


def test_generate_for_unavailable_type(client):
    res = client.post("/api/quotes/generate", json=quote_body(type="maintenance"), headers=CLIENT)
    assert res.status_code == 404


def test_system_status(client):
    data = client.get("/system/status").json()
    assert data["engine_active"] is True
    assert data["active_templates"] == 2
    assert data["templates_count"] == 3
