import base64

import requests

from dismantlepro.config import Settings
from dismantlepro.core.notifications import EmailNotifier, render_quote_email, render_status_change_email


class _Response:
    def __init__(self, payload: dict, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code
        self.content = b"{}"

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> dict:
        return self.payload


class _Http:
    def __init__(self, response: _Response | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def post(self, url: str, **kwargs) -> _Response:
        self.calls.append({"url": url, **kwargs})
        if self.error:
            raise self.error
        return self.response


def test_send_posts_payload_with_base64_attachment() -> None:
    http = _Http(_Response({"id": "em_123"}))
    notifier = EmailNotifier(Settings(resend_api_key="re_test"), http=http)

    result = notifier.send(
        to=["buyer@example.com"],
        subject="Quote QT-1",
        html="<p>hi</p>",
        attachments=[("quote.pdf", b"%PDF-1")],
    )

    assert result.status == "sent"
    assert result.provider_id == "em_123"
    call = http.calls[0]
    assert call["headers"]["Authorization"] == "Bearer re_test"
    assert call["json"]["to"] == ["buyer@example.com"]
    assert call["json"]["attachments"][0]["content"] == base64.b64encode(b"%PDF-1").decode("ascii")


def test_send_is_skipped_without_api_key() -> None:
    http = _Http(_Response({}))
    result = EmailNotifier(Settings(resend_api_key=""), http=http).send(to=["a@example.com"], subject="s", html="")
    assert result.status == "skipped"
    assert http.calls == []


def test_transport_and_http_errors_become_failed_results() -> None:
    settings = Settings(resend_api_key="re_test")
    down = EmailNotifier(settings, http=_Http(error=requests.ConnectionError("refused")))
    assert down.send(to=["a@example.com"], subject="s", html="").status == "failed"

    rejected = EmailNotifier(settings, http=_Http(_Response({"message": "bad"}, status_code=422)))
    result = rejected.send(to=["a@example.com"], subject="s", html="")
    assert result.status == "failed"
    assert "422" in result.message


def test_email_bodies_escape_user_text() -> None:
    subject, html = render_status_change_email(
        quote_number="QT-1",
        status="rejected",
        customer_name="<b>Acme</b>",
        total=1250.5,
        reason="Too high",
    )
    assert subject == "Quote QT-1 was rejected"
    assert "&lt;b&gt;Acme&lt;/b&gt;" in html
    assert "$1,250.50" in html
    assert "Too high" in html

    body = render_quote_email(
        quote_number="QT-1",
        recipient_name="",
        message="See attached",
        total=10,
        company_name="Dismantle Pro",
        attached=True,
    )
    assert "Hello there" in body
    assert "attached" in body
