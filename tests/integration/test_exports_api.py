from fastapi.testclient import TestClient

from dismantlepro.core.csv_import import parse_csv
from dismantlepro.db.models import Company
from dismantlepro.db.repositories import Repository
from dismantlepro.db.session import SessionLocal


def _seed_equipment(client: TestClient, headers: dict) -> None:
    make = client.get("/api/equipment/makes", params={"search": "caterpillar"}, headers=headers).json()[0]
    model = client.post("/api/equipment/models", json={"make_id": make["id"], "name": "320"}, headers=headers).json()
    client.put(
        f"/api/equipment/models/{model['id']}/dimensions",
        json={"operating_weight": 48000, "transport_length": 372, "transport_width": 118.5},
        headers=headers,
    )
    client.put(
        f"/api/equipment/models/{model['id']}/costs/Houston",
        json={"loading_cost": 900, "tolls_cost": 80},
        headers=headers,
    )
    client.post("/api/equipment/models", json={"make_id": make["id"], "name": "336"}, headers=headers)


def test_exports_require_auth_and_known_table(client: TestClient, auth_headers: dict) -> None:
    assert client.get("/api/exports/companies").status_code == 401
    assert client.get("/api/exports/quotes", headers=auth_headers).status_code == 422


def test_company_export_round_trips_through_import(client: TestClient, auth_headers: dict) -> None:
    payload = {
        "csv_text": 'Company Name,Tags,Fleet Size\n"Acme Rigging, LLC",crane; rigging,12\n',
        "mappings": [
            {"csv_column": "Company Name", "system_field": "name"},
            {"csv_column": "Tags", "system_field": "tags"},
            {"csv_column": "Fleet Size", "create_new": True, "new_field_name": "fleet_size", "new_field_type": "number"},
        ],
    }
    client.post("/api/imports/companies/commit", json=payload, headers=auth_headers)

    resp = client.get("/api/exports/companies", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="companies-export.csv"' in resp.headers["content-disposition"]

    parsed = parse_csv(resp.text)
    assert parsed.headers[0] == "Name"
    assert parsed.headers[-1] == "fleet_size"
    acme = next(row for row in parsed.rows if row["Name"] == "Acme Rigging, LLC")
    assert acme["Tags"] == "crane; rigging"
    assert acme["Status"] == "active"
    assert acme["fleet_size"] == "12"

    reimport = client.post("/api/imports/companies/commit", json={"csv_text": resp.text}, headers=auth_headers).json()
    assert reimport["success_count"] == len(parsed.rows)
    assert reimport["errors"] == []

    with SessionLocal() as db:
        copies = [row for row in Repository(db).export_rows(Company) if row.name == "Acme Rigging, LLC"]
        assert len(copies) == 2
        assert all(row.tags == ["crane", "rigging"] for row in copies)
        assert all(row.custom_data == {"fleet_size": 12.0} for row in copies)


def test_contact_export_names_the_company(client: TestClient, auth_headers: dict) -> None:
    client.post("/api/companies", json={"name": "Beta Haul"}, headers=auth_headers)

    parsed = parse_csv(client.get("/api/exports/contacts", headers=auth_headers).text)

    assert parsed.headers[:2] == ["First name", "Last name"]
    assert parsed.rows == [
        {
            **{header: "" for header in parsed.headers},
            "First name": "Primary Contact",
            "Role": "general",
            "Company name": "Beta Haul",
            "Is primary": "Yes",
        }
    ]


def test_equipment_export_lists_dimensions_and_costs_per_location(client: TestClient, auth_headers: dict) -> None:
    _seed_equipment(client, auth_headers)

    resp = client.get("/api/exports/equipment", headers=auth_headers)
    parsed = parse_csv(resp.text)

    assert len(parsed.headers) == 3 + 6 + 6 * 11 + 1
    assert [(row["Make"], row["Model"]) for row in parsed.rows] == [("Caterpillar", "320"), ("Caterpillar", "336")]
    row = parsed.rows[0]
    assert row["Equipment Type"] == "excavator"
    assert row["Operating Weight (lbs)"] == "48000"
    assert row["Transport Width (in)"] == "118.5"
    assert row["Has Front Image"] == "No"
    assert row["Houston - Loading"] == "900"
    assert row["Houston - Tolls"] == "80"
    assert row["Savannah - Loading"] == ""
    assert row["Last Updated"]
    assert parsed.rows[1]["Operating Weight (lbs)"] == ""

    dimensions = parse_csv(client.get("/api/exports/dimensions", headers=auth_headers).text)
    assert [row["Model"] for row in dimensions.rows] == ["320"]
    assert dimensions.rows[0]["Transport Length (in)"] == "372"
