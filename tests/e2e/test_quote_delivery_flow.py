from fastapi.testclient import TestClient

from dismantlepro.core.quotes import QuoteService
from dismantlepro.db.session import SessionLocal
from dismantlepro.types import DismantleQuoteInput, NotificationResult


class _FailingNotifier:
    def send(self, **kwargs) -> NotificationResult:
        return NotificationResult(status="failed", message="mailbox unavailable")


def _quote_payload() -> dict:
    return {
        "customer_name": "Dana Ruiz",
        "customer_company": "Acme Rigging",
        "customer_email": "dana@acme.test",
        "equipment_blocks": [
            {
                "make_name": "Caterpillar",
                "model_name": "320",
                "location": "Houston",
                "costs": {"dismantling_loading_cost": 2500, "blocking_bracing_cost": 350},
                "dimensions": {"length_inches": 372, "width_inches": 118, "height_inches": 114, "weight_lbs": 48000},
            }
        ],
        "margin_percentage": 12,
        "inland_transport": {"enabled": True, "pickup_address": "Houston", "dropoff_address": "Savannah", "total": 1800},
        "quote_notes": "Crew on site 7am.",
    }


def test_quote_is_rendered_emailed_viewed_and_accepted(client: TestClient, auth_headers: dict) -> None:
    quote = client.post("/api/quotes", json=_quote_payload(), headers=auth_headers).json()
    qid = quote["id"]
    assert quote["total"] == 4992.0

    pdf = client.get(f"/api/quotes/{qid}/pdf", params={"renderer": "vector"}, headers=auth_headers)
    assert pdf.status_code == 200
    assert pdf.headers["content-type"] == "application/pdf"
    assert pdf.headers["x-pdf-renderer"] == "vector"
    assert "attachment;" in pdf.headers["content-disposition"]
    assert pdf.content.startswith(b"%PDF")

    sent = client.post(
        "/api/email/send-quote",
        json={"quote_type": "dismantle", "quote_id": qid, "recipient_email": "dana@acme.test", "recipient_name": "Dana"},
        headers=auth_headers,
    )
    assert sent.status_code == 200
    assert sent.json()["status"] == "sent"

    after_send = client.get(f"/api/quotes/{qid}", headers=auth_headers).json()
    assert after_send["status"] == "sent"
    history = client.get("/api/email/history", params={"quote_type": "dismantle", "quote_id": qid}, headers=auth_headers)
    assert len(history.json()) == 1
    activity = client.get("/api/activity", params={"quote_id": qid, "activity_type": "quote_sent"}, headers=auth_headers)
    assert len(activity.json()) == 1

    token = client.post(f"/api/quotes/{qid}/public-link", headers=auth_headers).json()["public_token"]
    assert token

    viewed = client.get(f"/api/public/quotes/{token}")
    assert viewed.status_code == 200
    assert viewed.json()["status"] == "viewed"
    assert viewed.json()["total"] == 4992.0

    accepted = client.post(f"/api/public/quotes/{token}/accept")
    assert accepted.status_code == 200
    assert accepted.json()["status"] == "accepted"

    again = client.post(f"/api/public/quotes/{token}/accept")
    assert again.status_code == 400

    statuses = [row["to_status"] for row in client.get(f"/api/quotes/{qid}/history", headers=auth_headers).json()]
    assert statuses == ["sent", "viewed", "accepted"]


def test_public_reject_records_reason_and_draft_links_cannot_be_answered(
    client: TestClient, auth_headers: dict
) -> None:
    quote = client.post("/api/quotes", json=_quote_payload(), headers=auth_headers).json()
    token = client.post(f"/api/quotes/{quote['id']}/public-link", headers=auth_headers).json()["public_token"]

    assert client.post(f"/api/public/quotes/{token}/accept").status_code == 400

    client.post(f"/api/quotes/{quote['id']}/status", json={"status": "sent"}, headers=auth_headers)
    rejected = client.post(f"/api/public/quotes/{token}/reject", json={"reason": "Went with another vendor"})
    assert rejected.json()["status"] == "rejected"

    stored = client.get(f"/api/quotes/{quote['id']}", headers=auth_headers).json()
    assert stored["rejection_reason"] == "Went with another vendor"
    assert client.get("/api/public/quotes/not-a-token").status_code == 404


def test_failed_delivery_is_logged_and_quote_stays_draft() -> None:
    with SessionLocal() as db:
        service = QuoteService(db, notifier=_FailingNotifier())
        quote = service.create(DismantleQuoteInput.model_validate(_quote_payload()))

        log = service.send_by_email(quote.id, recipient_email="dana@acme.test", include_pdf=False)

        assert log.status == "failed"
        assert log.error == "mailbox unavailable"
        assert service.get(quote.id).status == "draft"
        assert service.status_history(quote.id) == []
