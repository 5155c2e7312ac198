from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.orm import Session

from dismantlepro.core.pricing import money
from dismantlepro.db.models import InlandQuote, QuoteHistory
from dismantlepro.db.repositories import Repository

PENDING_STATUSES = {"draft", "sent"}


def month_start(moment: datetime) -> datetime:
    return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def shift_months(moment: datetime, months: int) -> datetime:
    index = moment.year * 12 + (moment.month - 1) + months
    return moment.replace(year=index // 12, month=index % 12 + 1, day=1)


class ReportService:
    """Pipeline and revenue aggregates across dismantle and inland quotes."""

    def __init__(self, session: Session):
        self.repo = Repository(session)

    def _both(self, **filters: Any) -> tuple[list[QuoteHistory], list[InlandQuote]]:
        return (
            self.repo.quote_rows_for_reports(QuoteHistory, **filters),
            self.repo.quote_rows_for_reports(InlandQuote, **filters),
        )

    def quote_stats(self, start: datetime | None = None, end: datetime | None = None) -> dict[str, Any]:
        now = datetime.now(UTC)
        dismantle, inland = self._both(start=start or month_start(now), end=end or now)
        rows = [*dismantle, *inland]
        accepted = [row for row in rows if row.status == "accepted"]
        total = len(rows)
        return {
            "total_quotes": total,
            "total_value": money(sum(row.total or 0.0 for row in rows)),
            "accepted_count": len(accepted),
            "accepted_value": money(sum(row.total or 0.0 for row in accepted)),
            "pending_count": sum(1 for row in rows if row.status in PENDING_STATUSES),
            "conversion_rate": round(len(accepted) / total * 100) if total else 0,
            "dismantling_count": len(dismantle),
            "inland_count": len(inland),
        }

    def revenue_by_month(self, months: int = 6) -> list[dict[str, Any]]:
        months = max(1, min(months, 12))
        current = month_start(datetime.now(UTC))
        results = []
        for offset in range(months - 1, -1, -1):
            start = shift_months(current, -offset)
            end = shift_months(start, 1) - timedelta(microseconds=1)
            dismantle, inland = self._both(start=start, end=end, status="accepted")
            dismantle_total = money(sum(row.total or 0.0 for row in dismantle))
            inland_total = money(sum(row.total or 0.0 for row in inland))
            results.append(
                {
                    "month": start.strftime("%b %y"),
                    "dismantling": dismantle_total,
                    "inland": inland_total,
                    "total": money(dismantle_total + inland_total),
                }
            )
        return results

    def quotes_by_status(self) -> list[dict[str, Any]]:
        dismantle, inland = self._both()
        counts: dict[str, int] = {}
        for row in [*dismantle, *inland]:
            counts[row.status] = counts.get(row.status, 0) + 1
        return [{"status": status, "count": count} for status, count in counts.items()]

    def top_customers(self, limit: int = 10) -> list[dict[str, Any]]:
        dismantle, inland = self._both(status="accepted")
        grouped: dict[str, dict[str, Any]] = {}
        for row in [*dismantle, *inland]:
            key = row.customer_company or row.customer_name or "Unknown"
            entry = grouped.setdefault(
                key,
                {"name": row.customer_name or "Unknown", "company": row.customer_company, "total": 0.0, "count": 0},
            )
            entry["total"] = money(entry["total"] + (row.total or 0.0))
            entry["count"] += 1
        ranked = sorted(grouped.values(), key=lambda item: item["total"], reverse=True)
        return ranked[: max(1, min(limit, 20))]

    def activity_summary(self, days: int = 30) -> list[dict[str, Any]]:
        days = max(1, min(days, 90))
        counts = self.repo.activity_counts(datetime.now(UTC) - timedelta(days=days))
        return [{"type": activity_type, "count": count} for activity_type, count in counts.items()]
