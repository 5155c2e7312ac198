from fastapi.testclient import TestClient

BLOCK = {"make_name": "Komatsu", "model_name": "PC210", "costs": {"loading_cost": 1000}}


def test_terms_update_bumps_version(client: TestClient, auth_headers: dict) -> None:
    before = client.get("/api/settings/terms", headers=auth_headers).json()
    assert before["terms_version"] == 1
    assert before["terms_dismantle"]

    after = client.put("/api/settings/terms", json={"terms_inland": "New inland terms"}, headers=auth_headers).json()
    assert after["terms_version"] == 2
    assert after["terms_inland"] == "New inland terms"
    assert after["terms_dismantle"] == before["terms_dismantle"]

    assert client.put("/api/settings/terms", json={}, headers=auth_headers).status_code == 400


def test_settings_update_and_validation(client: TestClient, auth_headers: dict) -> None:
    resp = client.put(
        "/api/settings",
        json={"company_name": "Gulf Dismantling", "primary_color": "#112233", "quote_prefix": "GD"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    assert resp.json()["company_name"] == "Gulf Dismantling"

    bad = client.put("/api/settings", json={"primary_color": "blue"}, headers=auth_headers)
    assert bad.status_code == 422

    quote = client.post(
        "/api/quotes", json={"customer_name": "Dana", "equipment_blocks": [BLOCK]}, headers=auth_headers
    ).json()
    assert quote["quote_number"].startswith("GD-")


def test_popular_makes_round_trip(client: TestClient, auth_headers: dict) -> None:
    makes = client.get("/api/settings/popular-makes", headers=auth_headers).json()
    assert makes[:2] == ["Caterpillar", "CAT"]

    saved = client.put(
        "/api/settings/popular-makes", json={"makes": ["Volvo", "  ", " Bobcat "]}, headers=auth_headers
    ).json()
    assert saved == ["Volvo", "Bobcat"]


def test_current_user_profile(client: TestClient, auth_headers: dict) -> None:
    me = client.get("/api/user/me", headers=auth_headers).json()
    assert me["email"] == "dispatch@example.com"

    patched = client.patch("/api/user/me", json={"first_name": "Dani"}, headers=auth_headers).json()
    assert patched["first_name"] == "Dani"
    assert patched["last_name"] == "Ruiz"


def test_only_one_default_template_per_type(client: TestClient, auth_headers: dict) -> None:
    first = client.post("/api/templates", json={"name": "A", "is_default": True}, headers=auth_headers).json()
    second = client.post("/api/templates", json={"name": "B", "is_default": True}, headers=auth_headers).json()

    templates = {row["id"]: row for row in client.get("/api/templates", headers=auth_headers).json()}
    assert templates[first["id"]]["is_default"] is False
    assert templates[second["id"]]["is_default"] is True


def test_equipment_catalog_and_block_from_schedule(client: TestClient, auth_headers: dict) -> None:
    makes = client.get("/api/equipment/makes", params={"search": "cat"}, headers=auth_headers).json()
    assert makes[0]["name"] == "Caterpillar"

    model = client.post(
        "/api/equipment/models", json={"make_id": makes[0]["id"], "name": "320"}, headers=auth_headers
    ).json()
    dims = client.put(
        f"/api/equipment/models/{model['id']}/dimensions",
        json={"operating_weight": 48000, "transport_length": 372},
        headers=auth_headers,
    ).json()
    assert dims["equipment_type"] == "excavator"

    costs = client.put(
        f"/api/equipment/models/{model['id']}/costs/Houston",
        json={"loading_cost": 900, "tolls_cost": 80},
        headers=auth_headers,
    )
    assert costs.status_code == 200
    bad_location = client.put(
        f"/api/equipment/models/{model['id']}/costs/Denver", json={"loading_cost": 1}, headers=auth_headers
    )
    assert bad_location.status_code == 400

    block = client.get(
        f"/api/equipment/models/{model['id']}/block",
        params={"location": "Houston", "quantity": 2},
        headers=auth_headers,
    ).json()
    assert block["make_name"] == "Caterpillar"
    assert block["quantity"] == 2
    assert block["costs"]["loading_cost"] == 900.0
    assert block["dimensions"]["weight_lbs"] == 48000.0

    classified = client.get(
        "/api/equipment/classify", params={"make": "Bobcat", "model": "S650"}, headers=auth_headers
    ).json()
    assert classified["equipment_type"] == "skid_steer"


def test_global_search_spans_quotes_companies_and_contacts(client: TestClient, auth_headers: dict) -> None:
    client.post("/api/companies", json={"name": "Gulfport Cranes"}, headers=auth_headers)
    client.post("/api/contacts", json={"first_name": "Gulliver", "email": "g@x.test"}, headers=auth_headers)
    client.post(
        "/api/quotes",
        json={"customer_name": "Gulf Marine", "equipment_blocks": [BLOCK]},
        headers=auth_headers,
    )

    found = client.get("/api/search", params={"q": "gul"}, headers=auth_headers).json()
    assert [hit["title"] for hit in found["companies"]] == ["Gulfport Cranes"]
    assert [hit["title"] for hit in found["contacts"]] == ["Gulliver"]
    assert len(found["quotes"]) == 1
    assert found["inland_quotes"] == []

    assert client.get("/api/search", params={"q": "g"}, headers=auth_headers).status_code == 422


def test_reports_aggregate_both_quote_types(client: TestClient, auth_headers: dict) -> None:
    accepted = client.post(
        "/api/quotes",
        json={"customer_name": "Dana", "customer_company": "Acme", "equipment_blocks": [BLOCK], "margin_percentage": 0},
        headers=auth_headers,
    ).json()
    client.post(f"/api/quotes/{accepted['id']}/status", json={"status": "accepted"}, headers=auth_headers)
    client.post(
        "/api/inland",
        json={"customer_name": "Lee", "pickup_address": "A", "dropoff_address": "B", "manual_total": 500},
        headers=auth_headers,
    )

    stats = client.get("/api/reports/stats", headers=auth_headers).json()
    assert stats["total_quotes"] == 2
    assert stats["accepted_count"] == 1
    assert stats["accepted_value"] == 1000.0
    assert stats["total_value"] == 1500.0
    assert stats["pending_count"] == 1
    assert stats["conversion_rate"] == 50
    assert stats["dismantling_count"] == 1
    assert stats["inland_count"] == 1

    by_status = {row["status"]: row["count"] for row in client.get("/api/reports/by-status", headers=auth_headers).json()}
    assert by_status == {"accepted": 1, "draft": 1}

    revenue = client.get("/api/reports/revenue-by-month", params={"months": 3}, headers=auth_headers).json()
    assert len(revenue) == 3
    assert revenue[-1]["dismantling"] == 1000.0
    assert revenue[-1]["total"] == 1000.0

    top = client.get("/api/reports/top-customers", headers=auth_headers).json()
    assert top == [{"name": "Dana", "company": "Acme", "total": 1000.0, "count": 1}]

    activity = client.get("/api/reports/activity-summary", headers=auth_headers).json()
    assert {"type": "status_change", "count": 1} in activity
