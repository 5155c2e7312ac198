from datetime import UTC, datetime, timedelta

from fastapi.testclient import TestClient


def test_company_creation_adds_primary_contact(client: TestClient, auth_headers: dict) -> None:
    resp = client.post("/api/companies", json={"name": "Acme Rigging", "status": "prospect"}, headers=auth_headers)
    assert resp.status_code == 201
    company = resp.json()
    assert company["status"] == "prospect"
    assert len(company["contacts"]) == 1
    assert company["contacts"][0]["is_primary"] is True

    detail = client.get(f"/api/companies/{company['id']}", headers=auth_headers).json()
    assert detail["contacts"][0]["first_name"] == "Primary Contact"


def test_contact_without_company_lands_in_unassigned(client: TestClient, auth_headers: dict) -> None:
    contact = client.post("/api/contacts", json={"first_name": "Lone"}, headers=auth_headers).json()
    companies = client.get("/api/companies", params={"search": "unassigned"}, headers=auth_headers).json()
    assert contact["company_id"] == companies[0]["id"]


def test_company_update_delete_and_filters(client: TestClient, auth_headers: dict) -> None:
    company = client.post("/api/companies", json={"name": "Beta Haul", "industry": "Logistics"}, headers=auth_headers)
    cid = company.json()["id"]

    updated = client.put(f"/api/companies/{cid}", json={"status": "vip"}, headers=auth_headers).json()
    assert updated["status"] == "vip"
    assert updated["industry"] == "Logistics"

    vip = client.get("/api/companies", params={"status": "vip"}, headers=auth_headers).json()
    assert [item["name"] for item in vip] == ["Beta Haul"]

    assert client.delete(f"/api/companies/{cid}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/companies/{cid}", headers=auth_headers).status_code == 404
    assert client.put("/api/companies/9999", json={"name": "x"}, headers=auth_headers).status_code == 404


def test_customer_crud(client: TestClient, auth_headers: dict) -> None:
    created = client.post(
        "/api/customers",
        json={"name": "Dana Ruiz", "company": "Acme", "credit_limit": 5000},
        headers=auth_headers,
    )
    assert created.status_code == 201
    cid = created.json()["id"]

    client.put(f"/api/customers/{cid}", json={"phone": "555-0100"}, headers=auth_headers)
    fetched = client.get(f"/api/customers/{cid}", headers=auth_headers).json()
    assert fetched["phone"] == "555-0100"
    assert fetched["credit_limit"] == 5000.0

    found = client.get("/api/customers", params={"search": "dana"}, headers=auth_headers).json()
    assert [item["id"] for item in found] == [cid]
    assert client.delete(f"/api/customers/{cid}", headers=auth_headers).status_code == 204


def test_reminders_are_scoped_and_classified(client: TestClient, auth_headers: dict) -> None:
    now = datetime.now(UTC)
    overdue = client.post(
        "/api/reminders",
        json={"title": "Call back", "due_date": (now - timedelta(days=1)).isoformat(), "priority": "high"},
        headers=auth_headers,
    ).json()
    upcoming = client.post(
        "/api/reminders",
        json={"title": "Send revised quote", "due_date": (now + timedelta(days=2)).isoformat()},
        headers=auth_headers,
    ).json()

    assert [row["id"] for row in client.get("/api/reminders/overdue", headers=auth_headers).json()] == [overdue["id"]]
    assert [row["id"] for row in client.get("/api/reminders/upcoming", headers=auth_headers).json()] == [
        upcoming["id"]
    ]

    toggled = client.post(f"/api/reminders/{overdue['id']}/toggle", headers=auth_headers).json()
    assert toggled["is_completed"] is True
    assert toggled["completed_at"] is not None

    stats = client.get("/api/reminders/stats", headers=auth_headers).json()
    assert stats == {"total": 2, "pending": 1, "overdue": 0, "completed": 1}

    assert client.delete(f"/api/reminders/{upcoming['id']}", headers=auth_headers).status_code == 204
    assert client.delete(f"/api/reminders/{upcoming['id']}", headers=auth_headers).status_code == 404


def test_manual_activity_updates_company_last_activity(client: TestClient, auth_headers: dict) -> None:
    company = client.post("/api/companies", json={"name": "Acme Rigging"}, headers=auth_headers).json()
    assert company["last_activity_at"] is None

    resp = client.post(
        "/api/activity",
        json={"activity_type": "call", "title": "Intro call", "company_id": company["id"]},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    assert resp.json()["created_by"] is not None

    refreshed = client.get(f"/api/companies/{company['id']}", headers=auth_headers).json()
    assert refreshed["last_activity_at"] is not None

    stats = client.get("/api/activity/stats", headers=auth_headers).json()
    assert stats["total_activities"] == 1
    assert stats["monthly_by_type"] == {"call": 1}


def test_reminder_links_must_exist(client: TestClient, auth_headers: dict) -> None:
    due = (datetime.now(UTC) + timedelta(days=1)).isoformat()
    resp = client.post(
        "/api/reminders",
        json={"title": "Follow up", "due_date": due, "company_id": 9999},
        headers=auth_headers,
    )
    assert resp.status_code == 404
    assert client.get("/api/reminders", headers=auth_headers).json() == []
