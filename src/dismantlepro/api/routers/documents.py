from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.routers.quotes import pdf_response
from dismantlepro.api.schemas import (
    EmailLogResponse,
    ImportCommitRequest,
    ImportCommitResponse,
    ImportPreviewRequest,
    ImportPreviewResponse,
    PublicQuoteResponse,
    PublicRejectRequest,
    SendQuoteEmailRequest,
)
from dismantlepro.core.csv_export import export_table
from dismantlepro.core.csv_import import CsvImporter, system_fields_for, unmapped_required_fields
from dismantlepro.core.quotes import find_public_quote, respond_public_quote, service_for, view_public_quote
from dismantlepro.db.models import InlandQuote, User
from dismantlepro.db.repositories import Repository
from dismantlepro.pdf.renderer import PdfRenderError
from dismantlepro.types import ExportTable, ImportTable, QuoteType

logger = logging.getLogger(__name__)

email_router = APIRouter(prefix="/api/email", tags=["email"])
imports_router = APIRouter(prefix="/api/imports", tags=["imports"])
exports_router = APIRouter(prefix="/api/exports", tags=["exports"], dependencies=[Depends(get_current_user)])
public_router = APIRouter(prefix="/api/public/quotes", tags=["public"])


# email


@email_router.post("/send-quote", response_model=EmailLogResponse)
def send_quote(
    payload: SendQuoteEmailRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> EmailLogResponse:
    try:
        service = service_for(payload.quote_type, db)
        log = service.send_by_email(
            payload.quote_id,
            recipient_email=payload.recipient_email,
            recipient_name=payload.recipient_name,
            subject=payload.subject,
            message=payload.message,
            include_pdf=payload.include_pdf,
            user_id=user.id,
        )
    except ValueError as exc:
        raise http_error(exc) from exc
    except PdfRenderError as exc:
        logger.error("PDF attachment failed for quote %s: %s", payload.quote_id, exc)
        raise HTTPException(status_code=500, detail="Failed to generate PDF") from exc
    return EmailLogResponse.model_validate(log)


@email_router.get("/history", response_model=list[EmailLogResponse])
def email_history(
    quote_type: QuoteType,
    quote_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[EmailLogResponse]:
    try:
        rows = service_for(quote_type, db).email_history(quote_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return [EmailLogResponse.model_validate(row) for row in rows]


# csv imports


@imports_router.get("/{table}/fields")
def import_fields(
    table: ImportTable,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> dict:
    return {
        "system_fields": [
            {"name": item.name, "label": item.label, "field_type": item.field_type, "required": item.required}
            for item in system_fields_for(table)
        ],
        "custom_fields": [
            {"name": item.field_name, "label": item.display_name, "field_type": item.field_type}
            for item in Repository(db).list_custom_fields(table)
        ],
    }


@imports_router.post("/{table}/preview", response_model=ImportPreviewResponse)
def preview_import(
    table: ImportTable,
    payload: ImportPreviewRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ImportPreviewResponse:
    try:
        parsed, mappings = CsvImporter(Repository(db)).preview(payload.csv_text, table)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ImportPreviewResponse(
        target_table=table,
        headers=parsed.headers,
        row_count=len(parsed.rows),
        mappings=mappings,
        unmapped_required=unmapped_required_fields(table, mappings),
    )


@imports_router.post("/{table}/commit", response_model=ImportCommitResponse)
def commit_import(
    table: ImportTable,
    payload: ImportCommitRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ImportCommitResponse:
    try:
        result = CsvImporter(Repository(db)).run(payload.csv_text, table, payload.mappings, created_by=user.id)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return ImportCommitResponse(**result.model_dump(), message=result.summary)


# csv exports


@exports_router.get("/{table}")
def export_csv(table: ExportTable, db: Session = Depends(get_db)) -> Response:
    export = export_table(Repository(db), table)
    return Response(
        content=export.content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )


# public quote links


def _public_view(quote) -> PublicQuoteResponse:
    return PublicQuoteResponse(
        quote_type="inland" if isinstance(quote, InlandQuote) else "dismantle",
        quote_number=quote.quote_number,
        version=quote.version,
        status=quote.status,
        customer_name=quote.customer_name,
        customer_company=quote.customer_company,
        total=quote.total,
        valid_until=quote.valid_until,
    )


@public_router.get("/{token}", response_model=PublicQuoteResponse)
def view_quote(token: str, db: Session = Depends(get_db)) -> PublicQuoteResponse:
    try:
        return _public_view(view_public_quote(db, token))
    except ValueError as exc:
        raise http_error(exc) from exc


@public_router.get("/{token}/pdf")
def public_pdf(token: str, db: Session = Depends(get_db)) -> Response:
    try:
        service, quote = find_public_quote(db, token)
        document = service.render_pdf(quote.id)
    except ValueError as exc:
        raise http_error(exc) from exc
    except PdfRenderError as exc:
        logger.error("PDF generation failed for public quote: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to generate PDF") from exc
    return pdf_response(document, inline=True)


@public_router.post("/{token}/accept", response_model=PublicQuoteResponse)
def accept_quote(token: str, db: Session = Depends(get_db)) -> PublicQuoteResponse:
    try:
        return _public_view(respond_public_quote(db, token, accept=True))
    except ValueError as exc:
        raise http_error(exc) from exc


@public_router.post("/{token}/reject", response_model=PublicQuoteResponse)
def reject_quote(
    token: str,
    payload: PublicRejectRequest | None = None,
    db: Session = Depends(get_db),
) -> PublicQuoteResponse:
    try:
        reason = payload.reason if payload else None
        return _public_view(respond_public_quote(db, token, accept=False, reason=reason))
    except ValueError as exc:
        raise http_error(exc) from exc
