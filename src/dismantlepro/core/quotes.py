from __future__ import annotations

import copy
import logging
import secrets
from datetime import UTC, date, datetime, timedelta
from typing import Any, ClassVar, Generic

from sqlalchemy import inspect
from sqlalchemy.orm import Session

from dismantlepro.config import Settings, get_settings
from dismantlepro.core.notifications import EmailNotifier, render_quote_email, render_status_change_email
from dismantlepro.core.pricing import price_inland, price_quote
from dismantlepro.db.models import EmailLog, InlandQuote, QuoteHistory, QuoteStatusHistory
from dismantlepro.db.repositories import QuoteRow, Repository
from dismantlepro.pdf.document import UnifiedPDFData, build_pdf_data
from dismantlepro.pdf.renderer import PdfRenderError, RenderedDocument, render_quote_document
from dismantlepro.types import (
    QUOTE_STATUSES,
    CostField,
    DismantleQuoteInput,
    EquipmentBlock,
    InlandQuoteInput,
    NotFoundError,
    QuoteCustomerInfo,
)

logger = logging.getLogger(__name__)

# Columns a new version never inherits from its source row.
LINEAGE_RESET_COLUMNS = frozenset(
    {
        "id",
        "created_at",
        "updated_at",
        "quote_number",
        "version",
        "parent_quote_id",
        "original_quote_id",
        "status",
        "sent_at",
        "accepted_at",
        "rejected_at",
        "rejection_reason",
        "public_token",
    }
)

PUBLIC_RESPONSE_STATUSES = {"sent", "viewed"}


def branch_version(
    repo: Repository,
    source: QuoteRow,
    *,
    prefix: str,
    overrides: dict[str, Any] | None = None,
    created_by: int | None = None,
) -> QuoteRow:
    """Copy a quote into a new draft row one version higher; the source row is left untouched."""
    model = type(source)
    values = {
        attr.key: copy.deepcopy(getattr(source, attr.key))
        for attr in inspect(model).column_attrs
        if attr.key not in LINEAGE_RESET_COLUMNS
    }
    values.update(overrides or {})
    values.update(
        quote_number=repo.next_quote_number(model, prefix),
        version=source.version + 1,
        parent_quote_id=source.id,
        original_quote_id=source.original_quote_id or source.id,
        status="draft",
    )
    if created_by is not None:
        values["created_by"] = created_by
    return repo.add_quote(model(**values))


def lineage_root_id(quote: QuoteHistory | InlandQuote) -> int:
    return quote.original_quote_id or quote.id


def _costs_json(values: dict[CostField, Any]) -> dict[str, Any]:
    return {field.value: amount for field, amount in values.items()}


class QuoteLifecycle(Generic[QuoteRow]):
    """Shared create/version/status/email flow for both quote tables."""

    model: ClassVar[type]
    quote_type: ClassVar[str]

    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        notifier: EmailNotifier | None = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.notifier = notifier or EmailNotifier(self.settings)

    # hooks

    def _prefix(self) -> str:
        raise NotImplementedError

    def _priced_values(self, payload: Any) -> dict[str, Any]:
        raise NotImplementedError

    # reads

    def get(self, quote_id: int) -> QuoteRow:
        quote = self.repo.get_quote(self.model, quote_id)
        if quote is None:
            raise NotFoundError(f"quote {quote_id} not found")
        return quote

    def list_quotes(self, **filters: Any) -> list[QuoteRow]:
        return self.repo.list_quotes(self.model, **filters)

    def lineage(self, quote_id: int) -> list[QuoteRow]:
        return self.repo.list_lineage(self.model, lineage_root_id(self.get(quote_id)))

    def status_history(self, quote_id: int) -> list[QuoteStatusHistory]:
        self.get(quote_id)
        return self.repo.list_status_history(self.quote_type, quote_id)

    def email_history(self, quote_id: int) -> list[EmailLog]:
        self.get(quote_id)
        return self.repo.list_email_logs(self.quote_type, quote_id)

    # writes

    def create(self, payload: Any, *, user_id: int | None = None) -> QuoteRow:
        values = self._customer_values(payload)
        values.update(self._priced_values(payload))
        quote = self.model(
            quote_number=self.repo.next_quote_number(self.model, self._prefix()),
            version=1,
            status="draft",
            created_by=user_id,
            **values,
        )
        quote = self.repo.add_quote(quote)
        logger.info("Created %s quote %s total=%.2f", self.quote_type, quote.quote_number, quote.total)
        return quote

    def update(self, quote_id: int, payload: Any) -> QuoteRow:
        quote = self.get(quote_id)
        values = self._customer_values(payload)
        values.update(self._priced_values(payload))
        for key, value in values.items():
            setattr(quote, key, value)
        return self.repo.save_quote(quote)

    def save_as_new_version(
        self,
        quote_id: int,
        payload: Any | None = None,
        *,
        user_id: int | None = None,
    ) -> QuoteRow:
        source = self.get(quote_id)
        overrides: dict[str, Any] = {}
        if payload is not None:
            overrides = self._customer_values(payload)
            overrides.update(self._priced_values(payload))
        quote = branch_version(
            self.repo, source, prefix=self._prefix(), overrides=overrides, created_by=user_id
        )
        logger.info(
            "Branched %s quote %s -> %s (v%s)",
            self.quote_type,
            source.quote_number,
            quote.quote_number,
            quote.version,
        )
        return quote

    def delete(self, quote_id: int) -> None:
        self.repo.delete_quote(self.model, quote_id)

    def change_status(
        self,
        quote_id: int,
        status: str,
        *,
        user_id: int | None = None,
        notes: str | None = None,
        rejection_reason: str | None = None,
    ) -> QuoteRow:
        if status not in QUOTE_STATUSES:
            raise ValueError(f"invalid quote status '{status}'")

        quote = self.get(quote_id)
        previous = quote.status
        now = datetime.now(UTC)
        quote.status = status
        if status == "sent":
            quote.sent_at = now
        elif status == "accepted":
            quote.accepted_at = now
        elif status == "rejected":
            quote.rejected_at = now
            quote.rejection_reason = rejection_reason
        quote = self.repo.save_quote(quote)

        self.repo.add_status_history(
            quote_type=self.quote_type,
            quote_id=quote.id,
            from_status=previous,
            to_status=status,
            notes=notes or rejection_reason,
            changed_by=user_id,
        )
        self.repo.log_activity(
            {
                "activity_type": "status_change",
                "title": f"Quote {quote.quote_number} status changed to {status}",
                "description": notes or rejection_reason,
                "company_id": quote.company_id,
                "contact_id": quote.contact_id,
                "quote_id": quote.id,
                "quote_type": self.quote_type,
                "created_by": user_id,
            }
        )
        if status in {"accepted", "rejected"}:
            self._notify_status_change(quote, status, rejection_reason or notes)
        return quote

    def ensure_public_token(self, quote_id: int) -> QuoteRow:
        quote = self.get(quote_id)
        if quote.public_token:
            return quote
        quote.public_token = secrets.token_urlsafe(24)
        return self.repo.save_quote(quote)

    # documents and email

    def pdf_data(self, quote: QuoteRow) -> UnifiedPDFData:
        return build_pdf_data(quote, self.repo.get_company_settings())

    def render_pdf(self, quote_id: int, preferred: str | None = None) -> RenderedDocument:
        quote = self.get(quote_id)
        return render_quote_document(self.pdf_data(quote), preferred or self.settings.pdf_renderer)

    def send_by_email(
        self,
        quote_id: int,
        *,
        recipient_email: str,
        recipient_name: str = "",
        subject: str | None = None,
        message: str | None = None,
        include_pdf: bool = True,
        user_id: int | None = None,
    ) -> EmailLog:
        quote = self.get(quote_id)
        company = self.repo.get_company_settings()
        subject = subject or f"Quote from {self.settings.app_name}"
        log = self.repo.create_email_log(
            {
                "quote_type": self.quote_type,
                "quote_id": quote.id,
                "recipient_email": recipient_email,
                "recipient_name": recipient_name,
                "subject": subject,
                "message": message,
                "sent_by": user_id,
            }
        )

        attachments: list[tuple[str, bytes]] = []
        if include_pdf:
            try:
                document = self.render_pdf(quote.id)
            except PdfRenderError as exc:
                self.repo.update_email_log(log.id, {"status": "failed", "error": str(exc)})
                raise
            attachments.append((document.filename, document.content))

        html = render_quote_email(
            quote_number=quote.quote_number,
            recipient_name=recipient_name,
            message=message,
            total=quote.total,
            company_name=company.company_name,
            attached=bool(attachments),
        )
        result = self.notifier.send(to=[recipient_email], subject=subject, html=html, attachments=attachments)
        if result.status == "failed":
            logger.warning("Quote %s email to %s failed: %s", quote.quote_number, recipient_email, result.message)
            return self.repo.update_email_log(log.id, {"status": "failed", "error": result.message})

        log = self.repo.update_email_log(
            log.id,
            {"status": "sent", "sent_at": datetime.now(UTC), "error": result.message or None},
        )
        self.change_status(quote.id, "sent", user_id=user_id, notes=f"Emailed to {recipient_email}")
        self.repo.log_activity(
            {
                "activity_type": "quote_sent",
                "title": f"Quote {quote.quote_number} sent to {recipient_email}",
                "description": subject,
                "company_id": quote.company_id,
                "contact_id": quote.contact_id,
                "quote_id": quote.id,
                "quote_type": self.quote_type,
                "created_by": user_id,
            }
        )
        return log

    def _notify_status_change(self, quote: QuoteRow, status: str, reason: str | None) -> None:
        company = self.repo.get_company_settings()
        if not company.email_notifications_enabled or not company.notification_email:
            return

        subject, html = render_status_change_email(
            quote_number=quote.quote_number,
            status=status,
            customer_name=quote.customer_company or quote.customer_name,
            total=quote.total,
            reason=reason,
        )
        log = self.repo.create_email_log(
            {
                "quote_type": self.quote_type,
                "quote_id": quote.id,
                "recipient_email": company.notification_email,
                "subject": subject,
            }
        )
        try:
            result = self.notifier.send(to=[company.notification_email], subject=subject, html=html)
        except Exception as exc:
            logger.warning("Status notification for %s failed: %s", quote.quote_number, exc)
            self.repo.update_email_log(log.id, {"status": "failed", "error": str(exc)})
            return

        if result.status == "failed":
            logger.warning("Status notification for %s failed: %s", quote.quote_number, result.message)
            self.repo.update_email_log(log.id, {"status": "failed", "error": result.message})
        else:
            self.repo.update_email_log(
                log.id,
                {"status": "sent", "sent_at": datetime.now(UTC), "error": result.message or None},
            )

    # helpers

    def _customer_values(self, payload: QuoteCustomerInfo) -> dict[str, Any]:
        values = payload.model_dump(include=set(QuoteCustomerInfo.model_fields))
        if payload.company_id is not None:
            company = self.repo.get_company(payload.company_id)
            if company is None:
                raise NotFoundError(f"company {payload.company_id} not found")
            values["customer_company"] = values["customer_company"] or company.name
            values["payment_terms"] = values["payment_terms"] or company.payment_terms
            for key in ("billing_address", "billing_city", "billing_state", "billing_zip"):
                values[key] = values[key] or getattr(company, key)
        if payload.contact_id is not None:
            contact = self.repo.get_contact(payload.contact_id)
            if contact is None:
                raise NotFoundError(f"contact {payload.contact_id} not found")
            full_name = " ".join(part for part in (contact.first_name, contact.last_name) if part)
            values["customer_name"] = values["customer_name"] or full_name
            values["customer_email"] = values["customer_email"] or contact.email
            values["customer_phone"] = values["customer_phone"] or contact.phone

        company_settings = self.repo.get_company_settings()
        values["payment_terms"] = values["payment_terms"] or company_settings.default_payment_terms
        if values["valid_until"] is None:
            values["valid_until"] = date.today() + timedelta(days=company_settings.quote_validity_days)
        return values

    def _margin(self, requested: float | None, fallback: float | None = None) -> float:
        if requested is not None:
            return requested
        if fallback is not None:
            return fallback
        return self.repo.get_company_settings().default_margin_percentage


class QuoteService(QuoteLifecycle[QuoteHistory]):
    """Dismantling quotes: one or more equipment blocks priced from the cost schedule."""

    model = QuoteHistory
    quote_type = "dismantle"

    def _prefix(self) -> str:
        return self.repo.get_company_settings().quote_prefix or self.settings.quote_prefix

    def _priced_values(self, payload: DismantleQuoteInput) -> dict[str, Any]:
        blocks = list(payload.equipment_blocks)
        template_margin = None
        if payload.template_id is not None:
            template = self.repo.get_template(payload.template_id)
            if template is None or template.template_type != "dismantle":
                raise NotFoundError(f"template {payload.template_id} not found")
            blocks = [apply_template_costs(block, template.costs, template.location) for block in blocks]
            template_margin = template.default_margin_percentage
            self.repo.increment_template_use(template.id)

        margin = self._margin(payload.margin_percentage, template_margin)
        transport = payload.inland_transport
        inland_total = transport.total if transport and transport.enabled else 0.0
        totals = price_quote(blocks, margin, inland_total)

        first = blocks[0]
        return {
            "make_name": first.make_name,
            "model_name": first.model_name,
            "model_id": first.model_id,
            "location": first.location,
            "costs": _costs_json(first.costs),
            "enabled_costs": _costs_json(first.enabled_costs),
            "cost_overrides": _costs_json(first.cost_overrides),
            "cost_descriptions": _costs_json(first.cost_descriptions),
            "miscellaneous_fees": [fee.model_dump() for fee in first.miscellaneous_fees],
            "is_multi_equipment": len(blocks) > 1,
            "equipment_blocks": [block.model_dump(mode="json") for block in blocks],
            "inland_transport": transport.model_dump() if transport else None,
            "margin_percentage": margin,
            "subtotal": totals.subtotal,
            "margin_amount": totals.margin_amount,
            "inland_total": totals.inland_total,
            "total": totals.total,
            "quote_notes": payload.quote_notes,
            "internal_notes": payload.internal_notes,
        }

    def block_from_schedule(
        self,
        *,
        model_id: int,
        location: str,
        quantity: int = 1,
    ) -> EquipmentBlock:
        """Build an equipment block from the stored cost schedule and dimensions of a model."""
        model = self.repo.get_model(model_id)
        if model is None:
            raise NotFoundError(f"model {model_id} not found")
        schedule = self.repo.get_location_cost(model_id, location)
        costs = {field: getattr(schedule, field.value) for field in CostField} if schedule else {}
        dims = self.repo.get_dimensions(model_id)
        dimensions = None
        if dims:
            dimensions = {
                "length_inches": dims.transport_length or 0.0,
                "width_inches": dims.transport_width or 0.0,
                "height_inches": dims.transport_height or 0.0,
                "weight_lbs": dims.operating_weight or 0.0,
            }
        return EquipmentBlock(
            make_name=model.make.name,
            model_name=model.name,
            model_id=model.id,
            location=location,
            quantity=quantity,
            costs=costs,
            dimensions=dimensions,
            front_image_base64=dims.front_image_base64 if dims else None,
            side_image_base64=dims.side_image_base64 if dims else None,
        )


class InlandQuoteService(QuoteLifecycle[InlandQuote]):
    """Inland trucking quotes priced from line haul, fuel surcharge and accessorials."""

    model = InlandQuote
    quote_type = "inland"

    def _prefix(self) -> str:
        return self.settings.inland_quote_prefix

    def _priced_values(self, payload: InlandQuoteInput) -> dict[str, Any]:
        margin = self._margin(payload.margin_percentage)
        totals = price_inland(
            base_rate=payload.base_rate,
            distance_miles=payload.distance_miles,
            rate_per_mile=payload.rate_per_mile,
            fuel_surcharge_percent=payload.fuel_surcharge_percent,
            accessorial_charges=payload.accessorial_charges,
            margin_percentage=margin,
            manual_total=payload.manual_total,
        )
        return {
            "pickup_address": payload.pickup_address,
            "dropoff_address": payload.dropoff_address,
            "distance_miles": payload.distance_miles,
            "rate_per_mile": payload.rate_per_mile,
            "base_rate": payload.base_rate,
            "fuel_surcharge_percent": payload.fuel_surcharge_percent,
            "accessorial_charges": [charge.model_dump() for charge in payload.accessorial_charges],
            "manual_total": payload.manual_total,
            "margin_percentage": margin,
            "line_haul_total": totals.line_haul_total,
            "fuel_surcharge_amount": totals.fuel_surcharge_amount,
            "accessorial_total": totals.accessorial_total,
            "subtotal": totals.subtotal,
            "margin_amount": totals.margin_amount,
            "total": totals.total,
            "equipment_description": payload.equipment_description,
            "weight_lbs": payload.weight_lbs,
            "length_inches": payload.length_inches,
            "width_inches": payload.width_inches,
            "height_inches": payload.height_inches,
            "notes": payload.notes,
        }


def apply_template_costs(
    block: EquipmentBlock,
    template_costs: dict[str, Any],
    template_location: str | None = None,
) -> EquipmentBlock:
    """Fill cost fields the block leaves unset with the template's defaults."""
    costs = dict(block.costs)
    for key, amount in (template_costs or {}).items():
        try:
            field = CostField(key)
        except ValueError:
            logger.warning("Ignoring unknown template cost field %s", key)
            continue
        if costs.get(field) is None and amount is not None:
            costs[field] = float(amount)
    return block.model_copy(update={"costs": costs, "location": block.location or template_location})


def service_for(quote_type: str, session: Session, **kwargs: Any) -> QuoteLifecycle:
    if quote_type == "dismantle":
        return QuoteService(session, **kwargs)
    if quote_type == "inland":
        return InlandQuoteService(session, **kwargs)
    raise ValueError(f"invalid quote type '{quote_type}'")


def find_public_quote(session: Session, token: str, **kwargs: Any) -> tuple[QuoteLifecycle, Any]:
    for service in (QuoteService(session, **kwargs), InlandQuoteService(session, **kwargs)):
        quote = service.repo.get_quote_by_token(service.model, token)
        if quote is not None:
            return service, quote
    raise NotFoundError("quote not found")


def view_public_quote(session: Session, token: str, **kwargs: Any) -> Any:
    service, quote = find_public_quote(session, token, **kwargs)
    if quote.status == "sent":
        quote = service.change_status(quote.id, "viewed", notes="Viewed via public link")
    return quote


def respond_public_quote(
    session: Session,
    token: str,
    *,
    accept: bool,
    reason: str | None = None,
    **kwargs: Any,
) -> Any:
    service, quote = find_public_quote(session, token, **kwargs)
    if quote.status not in PUBLIC_RESPONSE_STATUSES:
        raise ValueError(f"quote {quote.quote_number} can no longer be answered (status {quote.status})")
    if accept:
        return service.change_status(quote.id, "accepted", notes="Accepted via public link")
    return service.change_status(quote.id, "rejected", rejection_reason=reason or "Declined via public link")
