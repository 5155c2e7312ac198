from __future__ import annotations

import base64
import logging
from typing import Any

import requests
from jinja2 import Environment

from dismantlepro.config import Settings, get_settings
from dismantlepro.types import NotificationResult

logger = logging.getLogger(__name__)

_env = Environment(autoescape=True)

STATUS_CHANGE_TEMPLATE = _env.from_string(
    """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: {{ color }}; padding: 20px; border-radius: 10px 10px 0 0;">
    <h1 style="color: white; margin: 0; font-size: 22px;">Quote {{ status|capitalize }}</h1>
    <p style="color: rgba(255,255,255,0.85); margin: 5px 0 0 0;">{{ quote_number }}</p>
  </div>
  <div style="background: #f9fafb; padding: 20px; border: 1px solid #e5e7eb; border-top: none;">
    <p>Customer: <strong>{{ customer_name or "Unknown" }}</strong></p>
    <p>Total: <strong>${{ "{:,.2f}".format(total) }}</strong></p>
    {% if reason %}<p>Reason: {{ reason }}</p>{% endif %}
  </div>
</div>"""
)

QUOTE_MESSAGE_TEMPLATE = _env.from_string(
    """<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <p>Hello {{ recipient_name or "there" }},</p>
  {% if message %}<p style="white-space: pre-wrap;">{{ message }}</p>{% endif %}
  <p>Please find quote <strong>{{ quote_number }}</strong> for a total of
     <strong>${{ "{:,.2f}".format(total) }}</strong>{% if attached %} attached{% endif %}.</p>
  <p>{{ company_name }}</p>
</div>"""
)


def render_status_change_email(
    *,
    quote_number: str,
    status: str,
    customer_name: str,
    total: float,
    reason: str | None = None,
) -> tuple[str, str]:
    color = "#16a34a" if status == "accepted" else "#dc2626"
    subject = f"Quote {quote_number} was {status}"
    html = STATUS_CHANGE_TEMPLATE.render(
        color=color,
        status=status,
        quote_number=quote_number,
        customer_name=customer_name,
        total=total or 0.0,
        reason=reason,
    )
    return subject, html


def render_quote_email(
    *,
    quote_number: str,
    recipient_name: str,
    message: str | None,
    total: float,
    company_name: str,
    attached: bool,
) -> str:
    return QUOTE_MESSAGE_TEMPLATE.render(
        quote_number=quote_number,
        recipient_name=recipient_name,
        message=message,
        total=total or 0.0,
        company_name=company_name,
        attached=attached,
    )


class EmailNotifier:
    """Sends transactional mail through a Resend-compatible HTTP API. Never raises."""

    def __init__(self, settings: Settings | None = None, http: requests.Session | None = None):
        self.settings = settings or get_settings()
        self.http = http or requests.Session()

    def send(
        self,
        *,
        to: list[str],
        subject: str,
        html: str,
        attachments: list[tuple[str, bytes]] | None = None,
    ) -> NotificationResult:
        if not self.settings.email_enabled:
            logger.info("Email not configured; notification logged only: to=%s subject=%s", to, subject)
            return NotificationResult(status="skipped", message="Notification logged (email not configured)")

        payload: dict[str, Any] = {
            "from": self.settings.email_from,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if attachments:
            payload["attachments"] = [
                {"filename": filename, "content": base64.b64encode(content).decode("ascii")}
                for filename, content in attachments
            ]

        try:
            response = self.http.post(
                self.settings.resend_api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.settings.resend_api_key}"},
                timeout=self.settings.email_timeout_sec,
            )
            response.raise_for_status()
            data = response.json() if response.content else {}
        except Exception as exc:
            logger.warning("Email delivery failed to=%s subject=%s: %s", to, subject, exc)
            return NotificationResult(status="failed", message=str(exc))

        if not isinstance(data, dict):
            data = {"raw": data}
        return NotificationResult(status="sent", provider_id=str(data.get("id", "")), raw=data)
