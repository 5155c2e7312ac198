from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.schemas import (
    ActivityRequest,
    ActivityResponse,
    ReminderRequest,
    ReminderResponse,
    ReminderStatsResponse,
    ReminderUpdateRequest,
)
from dismantlepro.core.reports import month_start
from dismantlepro.db.models import User
from dismantlepro.db.repositories import Repository
from dismantlepro.types import ActivityType, ReminderPriority

reminders_router = APIRouter(prefix="/api/reminders", tags=["reminders"])
activity_router = APIRouter(prefix="/api/activity", tags=["activity"], dependencies=[Depends(get_current_user)])


# reminders are private to the user who created them


@reminders_router.get("", response_model=list[ReminderResponse])
def list_reminders(
    completed: bool | None = None,
    priority: ReminderPriority | None = None,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ReminderResponse]:
    rows = Repository(db).list_reminders(user.id, completed=completed, priority=priority)
    return [ReminderResponse.model_validate(row) for row in rows]


@reminders_router.get("/upcoming", response_model=list[ReminderResponse])
def upcoming_reminders(
    days: int = Query(default=7, ge=1, le=90),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ReminderResponse]:
    rows = Repository(db).upcoming_reminders(user.id, days=days, limit=limit)
    return [ReminderResponse.model_validate(row) for row in rows]


@reminders_router.get("/overdue", response_model=list[ReminderResponse])
def overdue_reminders(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> list[ReminderResponse]:
    return [ReminderResponse.model_validate(row) for row in Repository(db).overdue_reminders(user.id)]


@reminders_router.get("/stats", response_model=ReminderStatsResponse)
def reminder_stats(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReminderStatsResponse:
    return ReminderStatsResponse(**Repository(db).reminder_stats(user.id))


@reminders_router.post("", response_model=ReminderResponse, status_code=201)
def create_reminder(
    payload: ReminderRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReminderResponse:
    try:
        reminder = Repository(db).create_reminder(user.id, payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    return ReminderResponse.model_validate(reminder)


@reminders_router.put("/{reminder_id}", response_model=ReminderResponse)
def update_reminder(
    reminder_id: int,
    payload: ReminderUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReminderResponse:
    try:
        reminder = Repository(db).update_reminder(user.id, reminder_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise http_error(exc) from exc
    return ReminderResponse.model_validate(reminder)


@reminders_router.post("/{reminder_id}/toggle", response_model=ReminderResponse)
def toggle_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ReminderResponse:
    try:
        reminder = Repository(db).toggle_reminder(user.id, reminder_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return ReminderResponse.model_validate(reminder)


@reminders_router.delete("/{reminder_id}", status_code=204)
def delete_reminder(
    reminder_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> Response:
    try:
        Repository(db).delete_reminder(user.id, reminder_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)


# activity log


@activity_router.get("", response_model=list[ActivityResponse])
def list_activity(
    company_id: int | None = None,
    quote_id: int | None = None,
    quote_type: str | None = None,
    activity_type: ActivityType | None = None,
    limit: int = Query(default=50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[ActivityResponse]:
    rows = Repository(db).list_activities(
        company_id=company_id,
        quote_id=quote_id,
        quote_type=quote_type,
        activity_type=activity_type,
        limit=limit,
    )
    return [ActivityResponse.model_validate(row) for row in rows]


@activity_router.post("", response_model=ActivityResponse, status_code=201)
def create_activity(
    payload: ActivityRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> ActivityResponse:
    activity = Repository(db).log_activity({**payload.model_dump(), "created_by": user.id})
    return ActivityResponse.model_validate(activity)


@activity_router.get("/stats")
def activity_stats(db: Session = Depends(get_db)) -> dict:
    repo = Repository(db)
    monthly = repo.activity_counts(month_start(datetime.now(UTC)))
    return {
        "total_activities": sum(repo.activity_counts().values()),
        "monthly_by_type": monthly,
        "monthly_total": sum(monthly.values()),
    }


@activity_router.delete("/{activity_id}", status_code=204)
def delete_activity(activity_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        Repository(db).delete_activity(activity_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)
