from fastapi.testclient import TestClient

from dismantlepro.db.repositories import Repository
from dismantlepro.db.session import SessionLocal


def test_preview_suggests_mappings_and_flags_missing_required(client: TestClient, auth_headers: dict) -> None:
    resp = client.post(
        "/api/imports/companies/preview",
        json={"csv_text": "Phone,Fleet Size\n555-0100,12\n"},
        headers=auth_headers,
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["headers"] == ["Phone", "Fleet Size"]
    assert body["row_count"] == 1
    assert body["mappings"][0]["system_field"] == "phone"
    assert body["unmapped_required"] == ["name"]


def test_preview_rejects_csv_without_rows(client: TestClient, auth_headers: dict) -> None:
    resp = client.post("/api/imports/companies/preview", json={"csv_text": "name\n"}, headers=auth_headers)
    assert resp.status_code == 400


def test_commit_imports_valid_rows_and_reports_failures(client: TestClient, auth_headers: dict) -> None:
    csv_text = "Company Name,Phone,Notes\nAcme Rigging,555-0100,Repeat customer\n,555-0101,No name\n"
    resp = client.post("/api/imports/companies/commit", json={"csv_text": csv_text}, headers=auth_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["success_count"] == 1
    assert body["errors"] == ["Row 3: Name is required"]
    assert body["message"] == "Imported 1 records with 1 errors"

    with SessionLocal() as db:
        company = Repository(db).find_company_by_name("acme rigging")
        assert company is not None
        assert company.phone == "555-0100"
        assert company.notes == "Repeat customer"
        assert company.contacts == []


def test_commit_creates_custom_fields_from_explicit_mappings(client: TestClient, auth_headers: dict) -> None:
    payload = {
        "csv_text": "Company Name,Fleet Size\nAcme Rigging,12\n",
        "mappings": [
            {"csv_column": "Company Name", "system_field": "name"},
            {
                "csv_column": "Fleet Size",
                "create_new": True,
                "new_field_name": "fleet_size",
                "new_field_type": "number",
            },
        ],
    }
    resp = client.post("/api/imports/companies/commit", json=payload, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["created_custom_fields"] == ["fleet_size"]

    with SessionLocal() as db:
        company = Repository(db).find_company_by_name("Acme Rigging")
        assert company.custom_data == {"fleet_size": 12.0}

    fields = client.get("/api/imports/companies/fields", headers=auth_headers).json()
    assert any(item["name"] == "fleet_size" for item in fields["custom_fields"])
    assert any(item["name"] == "name" and item["required"] for item in fields["system_fields"])


def test_commit_refuses_when_required_field_is_unmapped(client: TestClient, auth_headers: dict) -> None:
    resp = client.post("/api/imports/companies/commit", json={"csv_text": "Phone\n555\n"}, headers=auth_headers)
    assert resp.status_code == 400
    assert "name" in resp.json()["detail"]


def test_contacts_attach_to_named_company_or_unassigned(client: TestClient, auth_headers: dict) -> None:
    with SessionLocal() as db:
        acme_id = Repository(db).import_company({"name": "Acme Rigging", "tags": []}).id

    csv_text = "First Name,Company,Role\nJo,Acme Rigging,Billing\nAl,Nowhere Inc,astronaut\n"
    resp = client.post("/api/imports/contacts/commit", json={"csv_text": csv_text}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["success_count"] == 2

    with SessionLocal() as db:
        repo = Repository(db)
        unassigned = repo.find_company_by_name("Unassigned")
        by_name = {contact.first_name: contact for contact in repo.list_contacts()}
        assert by_name["Jo"].company_id == acme_id
        assert by_name["Jo"].role == "billing"
        assert by_name["Al"].company_id == unassigned.id
        assert by_name["Al"].role == "general"


def test_error_list_is_truncated_for_display(client: TestClient, auth_headers: dict) -> None:
    csv_text = "Company Name,Phone\n" + "".join(f",555-{index:04d}\n" for index in range(25))
    body = client.post("/api/imports/companies/commit", json={"csv_text": csv_text}, headers=auth_headers).json()

    assert body["success_count"] == 0
    assert len(body["errors"]) == 25
    assert len(body["visible_errors"]) == 20
    assert body["hidden_error_count"] == 5
    assert body["message"] == "Import failed. Check errors below."


def test_inland_quote_rows_import_with_generated_numbers(client: TestClient, auth_headers: dict) -> None:
    csv_text = (
        "Customer Name,Origin Address,Destination Address,Total Price\n"
        'Dana Ruiz,Port of Houston,"Dallas, TX","$2,400"\n'
    )
    body = client.post("/api/imports/inland_quotes/commit", json={"csv_text": csv_text}, headers=auth_headers).json()
    assert body["success_count"] == 1

    quotes = client.get("/api/inland", headers=auth_headers).json()
    assert quotes[0]["quote_number"].startswith("IQ-")
    assert quotes[0]["total"] == 2400.0
    assert quotes[0]["dropoff_address"] == "Dallas, TX"


def test_second_import_fills_existing_custom_field(client: TestClient, auth_headers: dict) -> None:
    first = {
        "csv_text": "Company Name,Fleet Size\nAcme Rigging,12\n",
        "mappings": [
            {"csv_column": "Company Name", "system_field": "name"},
            {"csv_column": "Fleet Size", "create_new": True, "new_field_name": "fleet_size", "new_field_type": "number"},
        ],
    }
    assert client.post("/api/imports/companies/commit", json=first, headers=auth_headers).status_code == 200

    csv_text = "Company Name,Fleet Size\nBeta Haul,7\n"
    preview = client.post("/api/imports/companies/preview", json={"csv_text": csv_text}, headers=auth_headers).json()
    assert preview["mappings"][1]["system_field"] == "custom:fleet_size"

    second = client.post("/api/imports/companies/commit", json={"csv_text": csv_text}, headers=auth_headers).json()
    assert second["success_count"] == 1
    assert second["errors"] == []
    assert second["created_custom_fields"] == []

    with SessionLocal() as db:
        company = Repository(db).find_company_by_name("Beta Haul")
        assert company.custom_data == {"fleet_size": 7.0}


def test_explicit_mapping_drops_unmapped_columns(client: TestClient, auth_headers: dict) -> None:
    payload = {
        "csv_text": "Company Name,Phone,Notes\nAcme Rigging,555-0100,Repeat customer\n",
        "mappings": [
            {"csv_column": "Company Name", "system_field": "name"},
            {"csv_column": "Phone", "system_field": "phone"},
            {"csv_column": "Notes"},
        ],
    }
    body = client.post("/api/imports/companies/commit", json=payload, headers=auth_headers).json()

    assert body["success_count"] == 1
    assert body["errors"] == []
    assert body["created_custom_fields"] == []

    with SessionLocal() as db:
        company = Repository(db).find_company_by_name("Acme Rigging")
        assert company.phone == "555-0100"
        assert company.notes is None
        assert company.custom_data is None
