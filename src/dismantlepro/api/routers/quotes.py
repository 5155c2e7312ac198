# No postponed annotations: endpoint signatures refer to the factory arguments.
import logging
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.schemas import (
    DismantleQuoteResponse,
    EmailLogResponse,
    InlandQuoteResponse,
    StatusChangeRequest,
    StatusHistoryResponse,
)
from dismantlepro.core.quotes import InlandQuoteService, QuoteLifecycle, QuoteService
from dismantlepro.db.models import User
from dismantlepro.pdf.renderer import PdfRenderError, RenderedDocument
from dismantlepro.types import DismantleQuoteInput, InlandQuoteInput, QuoteStatus

logger = logging.getLogger(__name__)


def pdf_response(document: RenderedDocument, *, inline: bool = False) -> Response:
    disposition = "inline" if inline else "attachment"
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={
            "Content-Disposition": (
                f"{disposition}; filename=\"{document.filename}\"; filename*=UTF-8''{quote(document.filename)}"
            ),
            "X-PDF-Renderer": document.renderer,
        },
    )


def build_quote_router(
    *,
    prefix: str,
    tag: str,
    service_class: type[QuoteLifecycle],
    input_model: type,
    response_model: type,
) -> APIRouter:
    router = APIRouter(prefix=prefix, tags=[tag], dependencies=[Depends(get_current_user)])

    @router.get("", response_model=list[response_model])
    def list_quotes(
        status: QuoteStatus | None = None,
        search: str | None = None,
        company_id: int | None = None,
        limit: int = Query(default=50, ge=1, le=200),
        offset: int = Query(default=0, ge=0),
        db: Session = Depends(get_db),
    ):
        service = service_class(db)
        return service.list_quotes(
            status=status, search=search, company_id=company_id, limit=limit, offset=offset
        )

    @router.post("", response_model=response_model, status_code=201)
    def create_quote(
        payload: input_model,
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user),
    ):
        try:
            return service_class(db).create(payload, user_id=user.id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.get("/{quote_id}", response_model=response_model)
    def get_quote(quote_id: int, db: Session = Depends(get_db)):
        try:
            return service_class(db).get(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.put("/{quote_id}", response_model=response_model)
    def update_quote(quote_id: int, payload: input_model, db: Session = Depends(get_db)):
        try:
            return service_class(db).update(quote_id, payload)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.delete("/{quote_id}", status_code=204)
    def delete_quote(quote_id: int, db: Session = Depends(get_db)) -> Response:
        try:
            service_class(db).delete(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc
        return Response(status_code=204)

    @router.post("/{quote_id}/versions", response_model=response_model, status_code=201)
    def save_as_new_version(
        quote_id: int,
        payload: input_model | None = Body(default=None),
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user),
    ):
        try:
            return service_class(db).save_as_new_version(quote_id, payload, user_id=user.id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.get("/{quote_id}/versions", response_model=list[response_model])
    def list_versions(quote_id: int, db: Session = Depends(get_db)):
        try:
            return service_class(db).lineage(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.post("/{quote_id}/status", response_model=response_model)
    def change_status(
        quote_id: int,
        payload: StatusChangeRequest,
        db: Session = Depends(get_db),
        user: User = Depends(get_current_user),
    ):
        try:
            return service_class(db).change_status(
                quote_id,
                payload.status,
                user_id=user.id,
                notes=payload.notes,
                rejection_reason=payload.rejection_reason,
            )
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.get("/{quote_id}/history", response_model=list[StatusHistoryResponse])
    def status_history(quote_id: int, db: Session = Depends(get_db)):
        try:
            return service_class(db).status_history(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.get("/{quote_id}/emails", response_model=list[EmailLogResponse])
    def email_history(quote_id: int, db: Session = Depends(get_db)):
        try:
            return service_class(db).email_history(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.post("/{quote_id}/public-link", response_model=response_model)
    def create_public_link(quote_id: int, db: Session = Depends(get_db)):
        try:
            return service_class(db).ensure_public_token(quote_id)
        except ValueError as exc:
            raise http_error(exc) from exc

    @router.get("/{quote_id}/pdf")
    def download_pdf(
        quote_id: int,
        renderer: str | None = Query(default=None, pattern="^(html|vector)$"),
        inline: bool = False,
        db: Session = Depends(get_db),
    ) -> Response:
        try:
            document = service_class(db).render_pdf(quote_id, renderer)
        except ValueError as exc:
            raise http_error(exc) from exc
        except PdfRenderError as exc:
            logger.error("PDF generation failed for quote %s: %s", quote_id, exc)
            raise HTTPException(status_code=500, detail="Failed to generate PDF") from exc
        return pdf_response(document, inline=inline)

    return router


router = build_quote_router(
    prefix="/api/quotes",
    tag="quotes",
    service_class=QuoteService,
    input_model=DismantleQuoteInput,
    response_model=DismantleQuoteResponse,
)

inland_router = build_quote_router(
    prefix="/api/inland",
    tag="inland",
    service_class=InlandQuoteService,
    input_model=InlandQuoteInput,
    response_model=InlandQuoteResponse,
)
