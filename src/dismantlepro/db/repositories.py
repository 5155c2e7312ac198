from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any, TypeVar

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.orm import Session

from dismantlepro.config import get_settings
from dismantlepro.core.pricing import generate_quote_number
from dismantlepro.core.silhouette import detect_equipment_type
from dismantlepro.db.models import (
    ActivityLog,
    Company,
    CompanySettings,
    Contact,
    Customer,
    CustomField,
    EmailLog,
    EquipmentDimensions,
    EquipmentModel,
    FollowUpReminder,
    InlandQuote,
    LocationCost,
    Make,
    QuoteHistory,
    QuoteStatusHistory,
    QuoteTemplate,
    User,
)
from dismantlepro.types import UNASSIGNED_COMPANY_NAME, NotFoundError

QuoteRow = TypeVar("QuoteRow", QuoteHistory, InlandQuote)

DEFAULT_POPULAR_MAKES: list[str] = [
    "Caterpillar",
    "CAT",
    "Komatsu",
    "John Deere",
    "Hitachi",
    "Volvo",
    "Liebherr",
    "Case",
    "Kobelco",
    "Doosan",
    "JCB",
    "Kubota",
    "Bobcat",
    "Terex",
    "Hyundai",
]


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _like(term: str) -> str:
    return f"%{term.strip().lower()}%"


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def _save(self, obj: Any) -> Any:
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def _apply(self, obj: Any, values: dict[str, Any]) -> Any:
        for key, value in values.items():
            setattr(obj, key, value)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def _require_links(self, values: dict[str, Any]) -> None:
        company_id = values.get("company_id")
        if company_id is not None and not self.get_company(company_id):
            raise NotFoundError(f"company {company_id} not found")
        contact_id = values.get("contact_id")
        if contact_id is not None and not self.get_contact(contact_id):
            raise NotFoundError(f"contact {contact_id} not found")

    # users

    def create_user(
        self,
        *,
        email: str,
        first_name: str = "",
        last_name: str = "",
        role: str = "member",
        api_token: str | None = None,
    ) -> User:
        if self.get_user_by_email(email):
            raise ValueError(f"user {email} already exists")
        user = User(
            email=email.strip().lower(),
            first_name=first_name,
            last_name=last_name,
            role=role,
            api_token=api_token or secrets.token_urlsafe(32),
        )
        return self._save(user)

    def get_user(self, user_id: int) -> User | None:
        return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> User | None:
        return self.session.scalar(select(User).where(User.email == email.strip().lower()))

    def get_user_by_token(self, token: str) -> User | None:
        if not token:
            return None
        return self.session.scalar(select(User).where(User.api_token == token))

    def get_or_create_local_user(self, email: str) -> User:
        existing = self.get_user_by_email(email)
        if existing:
            return existing
        return self.create_user(email=email, first_name="Local", last_name="User", role="admin")

    def update_user(self, user_id: int, values: dict[str, Any]) -> User:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError(f"user {user_id} not found")
        return self._apply(user, values)

    # equipment

    def list_makes(self, search: str | None = None) -> list[Make]:
        statement = select(Make)
        if search:
            statement = statement.where(func.lower(Make.name).like(_like(search)))
        statement = statement.order_by(Make.popularity_rank.asc(), Make.name.asc())
        return list(self.session.scalars(statement).all())

    def get_make(self, make_id: int) -> Make | None:
        return self.session.get(Make, make_id)

    def get_or_create_make(self, name: str, popularity_rank: int = 999) -> Make:
        existing = self.session.scalar(select(Make).where(func.lower(Make.name) == name.strip().lower()))
        if existing:
            return existing
        return self._save(Make(name=name.strip(), popularity_rank=popularity_rank))

    def list_models(self, make_id: int | None = None, search: str | None = None) -> list[EquipmentModel]:
        statement = select(EquipmentModel)
        if make_id is not None:
            statement = statement.where(EquipmentModel.make_id == make_id)
        if search:
            statement = statement.where(func.lower(EquipmentModel.name).like(_like(search)))
        return list(self.session.scalars(statement.order_by(EquipmentModel.name.asc())).all())

    def get_model(self, model_id: int) -> EquipmentModel | None:
        return self.session.get(EquipmentModel, model_id)

    def get_or_create_model(self, make_id: int, name: str) -> EquipmentModel:
        if not self.get_make(make_id):
            raise NotFoundError(f"make {make_id} not found")
        existing = self.session.scalar(
            select(EquipmentModel).where(
                and_(EquipmentModel.make_id == make_id, EquipmentModel.name == name.strip())
            )
        )
        if existing:
            return existing
        return self._save(EquipmentModel(make_id=make_id, name=name.strip()))

    def get_dimensions(self, model_id: int) -> EquipmentDimensions | None:
        return self.session.scalar(
            select(EquipmentDimensions).where(EquipmentDimensions.model_id == model_id)
        )

    def upsert_dimensions(self, model_id: int, values: dict[str, Any]) -> EquipmentDimensions:
        model = self.get_model(model_id)
        if not model:
            raise NotFoundError(f"model {model_id} not found")

        values = dict(values)
        if not values.get("equipment_type"):
            values["equipment_type"] = detect_equipment_type(model.make.name, model.name)

        existing = self.get_dimensions(model_id)
        if existing:
            return self._apply(existing, values)
        return self._save(EquipmentDimensions(model_id=model_id, **values))

    def list_location_costs(self, model_id: int) -> list[LocationCost]:
        statement = select(LocationCost).where(LocationCost.model_id == model_id).order_by(LocationCost.location)
        return list(self.session.scalars(statement).all())

    def equipment_catalog(
        self,
    ) -> list[tuple[EquipmentModel, EquipmentDimensions | None, dict[str, LocationCost]]]:
        models = self.session.scalars(
            select(EquipmentModel).join(Make).order_by(Make.name.asc(), EquipmentModel.name.asc())
        ).all()
        dimensions = {row.model_id: row for row in self.session.scalars(select(EquipmentDimensions)).all()}
        costs: dict[int, dict[str, LocationCost]] = {}
        for row in self.session.scalars(select(LocationCost)).all():
            costs.setdefault(row.model_id, {})[row.location] = row
        return [(model, dimensions.get(model.id), costs.get(model.id, {})) for model in models]

    def get_location_cost(self, model_id: int, location: str) -> LocationCost | None:
        return self.session.scalar(
            select(LocationCost).where(
                and_(LocationCost.model_id == model_id, LocationCost.location == location)
            )
        )

    def upsert_location_cost(self, model_id: int, location: str, values: dict[str, Any]) -> LocationCost:
        if not self.get_model(model_id):
            raise NotFoundError(f"model {model_id} not found")
        existing = self.get_location_cost(model_id, location)
        if existing:
            return self._apply(existing, values)
        return self._save(LocationCost(model_id=model_id, location=location, **values))

    # companies and contacts

    def create_company(self, values: dict[str, Any]) -> Company:
        company = self._save(Company(**values))
        self.session.add(
            Contact(
                company_id=company.id,
                first_name="Primary Contact",
                role="general",
                is_primary=True,
            )
        )
        self.session.commit()
        self.session.refresh(company)
        return company

    def import_company(self, values: dict[str, Any]) -> Company:
        return self._save(Company(**values))

    def list_companies(
        self,
        *,
        search: str | None = None,
        status: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Company]:
        statement = select(Company)
        if search:
            term = _like(search)
            statement = statement.where(
                or_(func.lower(Company.name).like(term), func.lower(Company.industry).like(term))
            )
        if status:
            statement = statement.where(Company.status == status)
        statement = statement.order_by(Company.name.asc()).limit(limit).offset(offset)
        return list(self.session.scalars(statement).all())

    def get_company(self, company_id: int) -> Company | None:
        return self.session.get(Company, company_id)

    def update_company(self, company_id: int, values: dict[str, Any]) -> Company:
        company = self.session.get(Company, company_id)
        if not company:
            raise NotFoundError(f"company {company_id} not found")
        return self._apply(company, values)

    def delete_company(self, company_id: int) -> None:
        company = self.session.get(Company, company_id)
        if not company:
            raise NotFoundError(f"company {company_id} not found")
        self.session.delete(company)
        self.session.commit()

    def find_company_by_name(self, name: str) -> Company | None:
        statement = select(Company).where(func.lower(Company.name) == name.strip().lower()).order_by(Company.id)
        return self.session.scalars(statement).first()

    def get_or_create_unassigned_company(self) -> Company:
        existing = self.find_company_by_name(UNASSIGNED_COMPANY_NAME)
        if existing:
            return existing
        return self._save(Company(name=UNASSIGNED_COMPANY_NAME, status="active", tags=[]))

    def create_contact(self, values: dict[str, Any]) -> Contact:
        values = dict(values)
        company_id = values.get("company_id")
        if company_id is None or not self.get_company(company_id):
            values["company_id"] = self.get_or_create_unassigned_company().id
        return self._save(Contact(**values))

    def import_contact(self, values: dict[str, Any]) -> Contact:
        return self._save(Contact(**values))

    def list_contacts(
        self,
        *,
        company_id: int | None = None,
        search: str | None = None,
        limit: int = 100,
    ) -> list[Contact]:
        statement = select(Contact)
        if company_id is not None:
            statement = statement.where(Contact.company_id == company_id)
        if search:
            term = _like(search)
            statement = statement.where(
                or_(
                    func.lower(Contact.first_name).like(term),
                    func.lower(Contact.last_name).like(term),
                    func.lower(Contact.email).like(term),
                )
            )
        statement = statement.order_by(Contact.is_primary.desc(), Contact.first_name.asc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def get_contact(self, contact_id: int) -> Contact | None:
        return self.session.get(Contact, contact_id)

    def update_contact(self, contact_id: int, values: dict[str, Any]) -> Contact:
        contact = self.session.get(Contact, contact_id)
        if not contact:
            raise NotFoundError(f"contact {contact_id} not found")
        self._require_links(values)
        return self._apply(contact, values)

    def delete_contact(self, contact_id: int) -> None:
        contact = self.session.get(Contact, contact_id)
        if not contact:
            raise NotFoundError(f"contact {contact_id} not found")
        self.session.delete(contact)
        self.session.commit()

    # customers

    def create_customer(self, values: dict[str, Any]) -> Customer:
        return self._save(Customer(**values))

    def import_customer(self, values: dict[str, Any]) -> Customer:
        return self._save(Customer(**values))

    def list_customers(self, *, search: str | None = None, limit: int = 100) -> list[Customer]:
        statement = select(Customer)
        if search:
            term = _like(search)
            statement = statement.where(
                or_(
                    func.lower(Customer.name).like(term),
                    func.lower(Customer.company).like(term),
                    func.lower(Customer.email).like(term),
                )
            )
        return list(self.session.scalars(statement.order_by(Customer.name.asc()).limit(limit)).all())

    def get_customer(self, customer_id: int) -> Customer | None:
        return self.session.get(Customer, customer_id)

    def update_customer(self, customer_id: int, values: dict[str, Any]) -> Customer:
        customer = self.session.get(Customer, customer_id)
        if not customer:
            raise NotFoundError(f"customer {customer_id} not found")
        return self._apply(customer, values)

    def delete_customer(self, customer_id: int) -> None:
        customer = self.session.get(Customer, customer_id)
        if not customer:
            raise NotFoundError(f"customer {customer_id} not found")
        self.session.delete(customer)
        self.session.commit()

    # exports

    def export_rows(self, model: type[Company] | type[Contact] | type[Customer]) -> list[Any]:
        return list(self.session.scalars(select(model).order_by(model.id.asc())).all())

    # custom fields

    def list_custom_fields(self, table_name: str) -> list[CustomField]:
        statement = select(CustomField).where(CustomField.table_name == table_name).order_by(CustomField.id)
        return list(self.session.scalars(statement).all())

    def ensure_custom_field(
        self,
        *,
        table_name: str,
        field_name: str,
        field_type: str = "text",
        display_name: str = "",
    ) -> CustomField:
        existing = self.session.scalar(
            select(CustomField).where(
                and_(CustomField.table_name == table_name, CustomField.field_name == field_name)
            )
        )
        if existing:
            return existing
        return self._save(
            CustomField(
                table_name=table_name,
                field_name=field_name,
                field_type=field_type,
                display_name=display_name or field_name,
                is_required=False,
                default_value=None,
            )
        )

    # quotes

    def next_quote_number(self, model: type[QuoteRow], prefix: str) -> str:
        while True:
            number = generate_quote_number(prefix)
            if not self.session.scalar(select(model.id).where(model.quote_number == number)):
                return number

    def add_quote(self, quote: QuoteRow) -> QuoteRow:
        return self._save(quote)

    def save_quote(self, quote: QuoteRow) -> QuoteRow:
        self.session.commit()
        self.session.refresh(quote)
        return quote

    def get_quote(self, model: type[QuoteRow], quote_id: int) -> QuoteRow | None:
        return self.session.get(model, quote_id)

    def get_quote_by_token(self, model: type[QuoteRow], token: str) -> QuoteRow | None:
        return self.session.scalar(select(model).where(model.public_token == token))

    def list_quotes(
        self,
        model: type[QuoteRow],
        *,
        status: str | None = None,
        search: str | None = None,
        company_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[QuoteRow]:
        statement = select(model)
        if status:
            statement = statement.where(model.status == status)
        if company_id is not None:
            statement = statement.where(model.company_id == company_id)
        if search:
            term = _like(search)
            statement = statement.where(
                or_(
                    func.lower(model.quote_number).like(term),
                    func.lower(model.customer_name).like(term),
                    func.lower(model.customer_company).like(term),
                )
            )
        statement = statement.order_by(model.created_at.desc(), model.id.desc()).limit(limit).offset(offset)
        return list(self.session.scalars(statement).all())

    def list_lineage(self, model: type[QuoteRow], root_id: int) -> list[QuoteRow]:
        statement = (
            select(model)
            .where(or_(model.id == root_id, model.original_quote_id == root_id))
            .order_by(model.version.asc(), model.id.asc())
        )
        return list(self.session.scalars(statement).all())

    def delete_quote(self, model: type[QuoteRow], quote_id: int) -> None:
        quote = self.session.get(model, quote_id)
        if not quote:
            raise NotFoundError(f"quote {quote_id} not found")
        self.session.delete(quote)
        self.session.commit()

    def import_inland_quote(self, values: dict[str, Any], *, created_by: int | None = None) -> InlandQuote:
        values = dict(values)
        if not values.get("quote_number"):
            values["quote_number"] = self.next_quote_number(InlandQuote, get_settings().inland_quote_prefix)
        return self._save(InlandQuote(version=1, status="draft", created_by=created_by, **values))

    def add_status_history(
        self,
        *,
        quote_type: str,
        quote_id: int,
        from_status: str | None,
        to_status: str,
        notes: str | None = None,
        changed_by: int | None = None,
    ) -> QuoteStatusHistory:
        return self._save(
            QuoteStatusHistory(
                quote_type=quote_type,
                quote_id=quote_id,
                from_status=from_status,
                to_status=to_status,
                notes=notes,
                changed_by=changed_by,
            )
        )

    def list_status_history(self, quote_type: str, quote_id: int) -> list[QuoteStatusHistory]:
        statement = (
            select(QuoteStatusHistory)
            .where(and_(QuoteStatusHistory.quote_type == quote_type, QuoteStatusHistory.quote_id == quote_id))
            .order_by(QuoteStatusHistory.id.asc())
        )
        return list(self.session.scalars(statement).all())

    # activity

    def log_activity(self, values: dict[str, Any]) -> ActivityLog:
        activity = self._save(ActivityLog(**values))
        company_id = values.get("company_id")
        if company_id is not None:
            self.session.execute(
                update(Company).where(Company.id == company_id).values(last_activity_at=datetime.now(UTC))
            )
            self.session.commit()
        return activity

    def list_activities(
        self,
        *,
        company_id: int | None = None,
        quote_id: int | None = None,
        quote_type: str | None = None,
        activity_type: str | None = None,
        limit: int = 50,
    ) -> list[ActivityLog]:
        statement = select(ActivityLog)
        if company_id is not None:
            statement = statement.where(ActivityLog.company_id == company_id)
        if quote_id is not None:
            statement = statement.where(ActivityLog.quote_id == quote_id)
        if quote_type:
            statement = statement.where(ActivityLog.quote_type == quote_type)
        if activity_type:
            statement = statement.where(ActivityLog.activity_type == activity_type)
        statement = statement.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def delete_activity(self, activity_id: int) -> None:
        activity = self.session.get(ActivityLog, activity_id)
        if not activity:
            raise NotFoundError(f"activity {activity_id} not found")
        self.session.delete(activity)
        self.session.commit()

    def activity_counts(self, since: datetime | None = None) -> dict[str, int]:
        statement = select(ActivityLog.activity_type, func.count(ActivityLog.id)).group_by(
            ActivityLog.activity_type
        )
        if since is not None:
            statement = statement.where(ActivityLog.created_at >= as_utc(since))
        return {row[0]: int(row[1]) for row in self.session.execute(statement).all()}

    # reminders

    def create_reminder(self, user_id: int, values: dict[str, Any]) -> FollowUpReminder:
        values = dict(values)
        self._require_links(values)
        values["due_date"] = as_utc(values["due_date"])
        return self._save(FollowUpReminder(user_id=user_id, **values))

    def get_reminder(self, user_id: int, reminder_id: int) -> FollowUpReminder | None:
        reminder = self.session.get(FollowUpReminder, reminder_id)
        if reminder is None or reminder.user_id != user_id:
            return None
        return reminder

    def _require_reminder(self, user_id: int, reminder_id: int) -> FollowUpReminder:
        reminder = self.get_reminder(user_id, reminder_id)
        if not reminder:
            raise NotFoundError(f"reminder {reminder_id} not found")
        return reminder

    def list_reminders(
        self,
        user_id: int,
        *,
        completed: bool | None = None,
        priority: str | None = None,
        limit: int = 100,
    ) -> list[FollowUpReminder]:
        statement = select(FollowUpReminder).where(FollowUpReminder.user_id == user_id)
        if completed is not None:
            statement = statement.where(FollowUpReminder.is_completed.is_(completed))
        if priority:
            statement = statement.where(FollowUpReminder.priority == priority)
        statement = statement.order_by(FollowUpReminder.due_date.asc()).limit(limit)
        return list(self.session.scalars(statement).all())

    def upcoming_reminders(self, user_id: int, *, days: int = 7, limit: int = 10) -> list[FollowUpReminder]:
        now = datetime.now(UTC)
        statement = (
            select(FollowUpReminder)
            .where(
                and_(
                    FollowUpReminder.user_id == user_id,
                    FollowUpReminder.is_completed.is_(False),
                    FollowUpReminder.due_date >= now,
                    FollowUpReminder.due_date <= now + timedelta(days=days),
                )
            )
            .order_by(FollowUpReminder.due_date.asc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def overdue_reminders(self, user_id: int, *, limit: int = 50) -> list[FollowUpReminder]:
        statement = (
            select(FollowUpReminder)
            .where(
                and_(
                    FollowUpReminder.user_id == user_id,
                    FollowUpReminder.is_completed.is_(False),
                    FollowUpReminder.due_date < datetime.now(UTC),
                )
            )
            .order_by(FollowUpReminder.due_date.asc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def update_reminder(self, user_id: int, reminder_id: int, values: dict[str, Any]) -> FollowUpReminder:
        reminder = self._require_reminder(user_id, reminder_id)
        values = dict(values)
        self._require_links(values)
        if values.get("due_date") is not None:
            values["due_date"] = as_utc(values["due_date"])
        return self._apply(reminder, values)

    def toggle_reminder(self, user_id: int, reminder_id: int) -> FollowUpReminder:
        reminder = self._require_reminder(user_id, reminder_id)
        completed = not reminder.is_completed
        return self._apply(
            reminder,
            {"is_completed": completed, "completed_at": datetime.now(UTC) if completed else None},
        )

    def delete_reminder(self, user_id: int, reminder_id: int) -> None:
        reminder = self._require_reminder(user_id, reminder_id)
        self.session.delete(reminder)
        self.session.commit()

    def reminder_stats(self, user_id: int) -> dict[str, int]:
        base = select(func.count(FollowUpReminder.id)).where(FollowUpReminder.user_id == user_id)
        total = self.session.scalar(base) or 0
        pending = self.session.scalar(base.where(FollowUpReminder.is_completed.is_(False))) or 0
        overdue = (
            self.session.scalar(
                base.where(
                    and_(
                        FollowUpReminder.is_completed.is_(False),
                        FollowUpReminder.due_date < datetime.now(UTC),
                    )
                )
            )
            or 0
        )
        return {"total": total, "pending": pending, "overdue": overdue, "completed": total - pending}

    # settings

    def get_company_settings(self) -> CompanySettings:
        existing = self.session.scalar(select(CompanySettings).order_by(CompanySettings.id))
        if existing:
            return existing
        return self._save(CompanySettings(popular_makes=list(DEFAULT_POPULAR_MAKES)))

    def update_company_settings(self, values: dict[str, Any]) -> CompanySettings:
        settings = self.get_company_settings()
        values = dict(values)
        if "terms_dismantle" in values or "terms_inland" in values:
            values["terms_version"] = (settings.terms_version or 0) + 1
        return self._apply(settings, values)

    # templates

    def list_templates(self, template_type: str | None = None) -> list[QuoteTemplate]:
        statement = select(QuoteTemplate)
        if template_type:
            statement = statement.where(QuoteTemplate.template_type == template_type)
        statement = statement.order_by(QuoteTemplate.is_default.desc(), QuoteTemplate.use_count.desc())
        return list(self.session.scalars(statement).all())

    def get_template(self, template_id: int) -> QuoteTemplate | None:
        return self.session.get(QuoteTemplate, template_id)

    def _clear_default_templates(self, template_type: str) -> None:
        self.session.execute(
            update(QuoteTemplate).where(QuoteTemplate.template_type == template_type).values(is_default=False)
        )

    def create_template(self, values: dict[str, Any]) -> QuoteTemplate:
        if values.get("is_default"):
            self._clear_default_templates(values.get("template_type", "dismantle"))
        return self._save(QuoteTemplate(**values))

    def update_template(self, template_id: int, values: dict[str, Any]) -> QuoteTemplate:
        template = self.session.get(QuoteTemplate, template_id)
        if not template:
            raise NotFoundError(f"template {template_id} not found")
        if values.get("is_default"):
            self._clear_default_templates(values.get("template_type", template.template_type))
        return self._apply(template, values)

    def delete_template(self, template_id: int) -> None:
        self.session.execute(delete(QuoteTemplate).where(QuoteTemplate.id == template_id))
        self.session.commit()

    def increment_template_use(self, template_id: int) -> QuoteTemplate:
        template = self.session.get(QuoteTemplate, template_id)
        if not template:
            raise NotFoundError(f"template {template_id} not found")
        return self._apply(template, {"use_count": template.use_count + 1})

    # email logs

    def create_email_log(self, values: dict[str, Any]) -> EmailLog:
        return self._save(EmailLog(status="pending", **values))

    def update_email_log(self, log_id: int, values: dict[str, Any]) -> EmailLog:
        log = self.session.get(EmailLog, log_id)
        if not log:
            raise NotFoundError(f"email log {log_id} not found")
        return self._apply(log, values)

    def list_email_logs(self, quote_type: str, quote_id: int) -> list[EmailLog]:
        statement = (
            select(EmailLog)
            .where(and_(EmailLog.quote_type == quote_type, EmailLog.quote_id == quote_id))
            .order_by(EmailLog.created_at.desc(), EmailLog.id.desc())
        )
        return list(self.session.scalars(statement).all())

    # search and reporting reads

    def global_search(self, term: str, limit: int = 5) -> dict[str, list[Any]]:
        like = _like(term)
        results: dict[str, list[Any]] = {}
        for key, model in (("quotes", QuoteHistory), ("inland_quotes", InlandQuote)):
            statement = (
                select(model)
                .where(
                    or_(
                        func.lower(model.quote_number).like(like),
                        func.lower(model.customer_name).like(like),
                        func.lower(model.customer_company).like(like),
                    )
                )
                .order_by(model.created_at.desc())
                .limit(limit)
            )
            results[key] = list(self.session.scalars(statement).all())

        results["companies"] = list(
            self.session.scalars(
                select(Company).where(func.lower(Company.name).like(like)).order_by(Company.name).limit(limit)
            ).all()
        )
        results["contacts"] = list(
            self.session.scalars(
                select(Contact)
                .where(
                    or_(
                        func.lower(Contact.first_name).like(like),
                        func.lower(Contact.last_name).like(like),
                        func.lower(Contact.email).like(like),
                    )
                )
                .order_by(Contact.first_name)
                .limit(limit)
            ).all()
        )
        return results

    def quote_rows_for_reports(
        self,
        model: type[QuoteRow],
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        status: str | None = None,
    ) -> list[QuoteRow]:
        statement = select(model)
        if start is not None:
            statement = statement.where(model.created_at >= as_utc(start))
        if end is not None:
            statement = statement.where(model.created_at <= as_utc(end))
        if status:
            statement = statement.where(model.status == status)
        return list(self.session.scalars(statement).all())
