from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db
from dismantlepro.api.schemas import QuoteStatsResponse, SearchHit, SearchResponse
from dismantlepro.core.reports import ReportService
from dismantlepro.db.repositories import Repository

reports_router = APIRouter(prefix="/api/reports", tags=["reports"], dependencies=[Depends(get_current_user)])
search_router = APIRouter(prefix="/api/search", tags=["search"], dependencies=[Depends(get_current_user)])


@reports_router.get("/stats", response_model=QuoteStatsResponse)
def quote_stats(
    start: datetime | None = None,
    end: datetime | None = None,
    db: Session = Depends(get_db),
) -> QuoteStatsResponse:
    return QuoteStatsResponse(**ReportService(db).quote_stats(start, end))


@reports_router.get("/revenue-by-month")
def revenue_by_month(months: int = Query(default=6, ge=1, le=12), db: Session = Depends(get_db)) -> list[dict]:
    return ReportService(db).revenue_by_month(months)


@reports_router.get("/by-status")
def quotes_by_status(db: Session = Depends(get_db)) -> list[dict]:
    return ReportService(db).quotes_by_status()


@reports_router.get("/top-customers")
def top_customers(limit: int = Query(default=10, ge=1, le=20), db: Session = Depends(get_db)) -> list[dict]:
    return ReportService(db).top_customers(limit)


@reports_router.get("/activity-summary")
def activity_summary(days: int = Query(default=30, ge=1, le=90), db: Session = Depends(get_db)) -> list[dict]:
    return ReportService(db).activity_summary(days)


@search_router.get("", response_model=SearchResponse)
def global_search(
    q: str = Query(min_length=2, max_length=100),
    limit: int = Query(default=5, ge=1, le=20),
    db: Session = Depends(get_db),
) -> SearchResponse:
    found = Repository(db).global_search(q, limit=limit)
    return SearchResponse(
        quotes=[
            SearchHit(id=row.id, kind="quote", title=row.quote_number, subtitle=row.customer_company or row.customer_name)
            for row in found["quotes"]
        ],
        inland_quotes=[
            SearchHit(
                id=row.id,
                kind="inland_quote",
                title=row.quote_number,
                subtitle=row.customer_company or row.customer_name,
            )
            for row in found["inland_quotes"]
        ],
        companies=[
            SearchHit(id=row.id, kind="company", title=row.name, subtitle=row.industry or "")
            for row in found["companies"]
        ],
        contacts=[
            SearchHit(
                id=row.id,
                kind="contact",
                title=" ".join(part for part in (row.first_name, row.last_name) if part),
                subtitle=row.email or "",
            )
            for row in found["contacts"]
        ],
    )
