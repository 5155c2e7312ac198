from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dismantlepro.db.base import Base, TimestampMixin, utcnow


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    last_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    role: Mapped[str] = mapped_column(String(40), default="member", nullable=False)
    api_token: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    avatar_url: Mapped[str] = mapped_column(String(500), default="", nullable=False)


class Make(TimestampMixin, Base):
    __tablename__ = "makes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    popularity_rank: Mapped[int] = mapped_column(Integer, default=999, nullable=False)


class EquipmentModel(TimestampMixin, Base):
    __tablename__ = "models"
    __table_args__ = (UniqueConstraint("make_id", "name", name="uq_models_make_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    make_id: Mapped[int] = mapped_column(ForeignKey("makes.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)

    make: Mapped[Make] = relationship()


class EquipmentDimensions(TimestampMixin, Base):
    __tablename__ = "equipment_dimensions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    model_id: Mapped[int] = mapped_column(ForeignKey("models.id", ondelete="CASCADE"), unique=True)
    operating_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    transport_length: Mapped[float | None] = mapped_column(Float, nullable=True)
    transport_width: Mapped[float | None] = mapped_column(Float, nullable=True)
    transport_height: Mapped[float | None] = mapped_column(Float, nullable=True)
    overall_length: Mapped[float | None] = mapped_column(Float, nullable=True)
    overall_width: Mapped[float | None] = mapped_column(Float, nullable=True)
    overall_height: Mapped[float | None] = mapped_column(Float, nullable=True)
    front_image_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    side_image_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    equipment_type: Mapped[str] = mapped_column(String(40), default="other", nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)


class LocationCost(TimestampMixin, Base):
    __tablename__ = "location_costs"
    __table_args__ = (UniqueConstraint("model_id", "location", name="uq_location_costs_model_location"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    model_id: Mapped[int] = mapped_column(ForeignKey("models.id", ondelete="CASCADE"), index=True)
    location: Mapped[str] = mapped_column(String(40), nullable=False)
    dismantling_loading_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    loading_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    blocking_bracing_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    ncb_survey_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    local_drayage_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    chassis_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    tolls_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    escorts_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    power_wash_cost: Mapped[float | None] = mapped_column(Float, nullable=True)
    waste_fluids_disposal_fee: Mapped[float | None] = mapped_column(Float, nullable=True)
    miscellaneous_costs: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)


class Company(TimestampMixin, Base):
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    industry: Mapped[str | None] = mapped_column(String(120), nullable=True)
    website: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    zip: Mapped[str | None] = mapped_column(String(30), nullable=True)
    billing_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_zip: Mapped[str | None] = mapped_column(String(30), nullable=True)
    billing_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(120), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(120), nullable=True)
    mc_number: Mapped[str | None] = mapped_column(String(60), nullable=True)
    dot_number: Mapped[str | None] = mapped_column(String(60), nullable=True)
    credit_limit: Mapped[float | None] = mapped_column(Float, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_activity_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    custom_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    contacts: Mapped[list[Contact]] = relationship(
        back_populates="company", order_by="(Contact.is_primary.desc(), Contact.last_name)"
    )


class Contact(TimestampMixin, Base):
    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), index=True, nullable=True
    )
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    title: Mapped[str | None] = mapped_column(String(120), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mobile: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[str] = mapped_column(String(40), default="general", nullable=False)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    company: Mapped[Company | None] = relationship(back_populates="contacts")


class Customer(TimestampMixin, Base):
    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_zip: Mapped[str | None] = mapped_column(String(30), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(120), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    mc_number: Mapped[str | None] = mapped_column(String(60), nullable=True)
    dot_number: Mapped[str | None] = mapped_column(String(60), nullable=True)
    credit_limit: Mapped[float | None] = mapped_column(Float, nullable=True)
    custom_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class CustomField(TimestampMixin, Base):
    __tablename__ = "custom_fields"
    __table_args__ = (UniqueConstraint("table_name", "field_name", name="uq_custom_fields_table_field"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    table_name: Mapped[str] = mapped_column(String(60), index=True, nullable=False)
    field_name: Mapped[str] = mapped_column(String(120), nullable=False)
    field_type: Mapped[str] = mapped_column(String(20), default="text", nullable=False)
    display_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    is_required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    default_value: Mapped[str | None] = mapped_column(String(255), nullable=True)


class VersionedQuoteMixin:
    quote_number: Mapped[str] = mapped_column(String(40), unique=True, index=True, nullable=False)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    parent_quote_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    original_quote_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True, nullable=False)
    company_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    contact_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    customer_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    customer_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    customer_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    customer_company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    billing_city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_state: Mapped[str | None] = mapped_column(String(120), nullable=True)
    billing_zip: Mapped[str | None] = mapped_column(String(30), nullable=True)
    payment_terms: Mapped[str | None] = mapped_column(String(120), nullable=True)
    margin_percentage: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    subtotal: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    margin_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    valid_until: Mapped[date | None] = mapped_column(Date, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    public_token: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)


class QuoteHistory(VersionedQuoteMixin, TimestampMixin, Base):
    __tablename__ = "quote_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    make_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    model_name: Mapped[str] = mapped_column(String(120), default="", nullable=False)
    model_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    location: Mapped[str | None] = mapped_column(String(40), nullable=True)
    costs: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    enabled_costs: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    cost_overrides: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    cost_descriptions: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    miscellaneous_fees: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    is_multi_equipment: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    equipment_blocks: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    inland_transport: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    inland_total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    quote_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    internal_notes: Mapped[str | None] = mapped_column(Text, nullable=True)


class InlandQuote(VersionedQuoteMixin, TimestampMixin, Base):
    __tablename__ = "inland_quotes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    pickup_address: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    dropoff_address: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    distance_miles: Mapped[float | None] = mapped_column(Float, nullable=True)
    rate_per_mile: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    base_rate: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    fuel_surcharge_percent: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    accessorial_charges: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list, nullable=False)
    manual_total: Mapped[float | None] = mapped_column(Float, nullable=True)
    line_haul_total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    fuel_surcharge_amount: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    accessorial_total: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    equipment_description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    weight_lbs: Mapped[float | None] = mapped_column(Float, nullable=True)
    length_inches: Mapped[float | None] = mapped_column(Float, nullable=True)
    width_inches: Mapped[float | None] = mapped_column(Float, nullable=True)
    height_inches: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    custom_data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)


class QuoteStatusHistory(Base):
    __tablename__ = "quote_status_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quote_type: Mapped[str] = mapped_column(String(20), nullable=False)
    quote_id: Mapped[int] = mapped_column(Integer, index=True, nullable=False)
    from_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str] = mapped_column(String(20), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    changed_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class ActivityLog(TimestampMixin, Base):
    __tablename__ = "activity_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    activity_type: Mapped[str] = mapped_column(String(40), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    company_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    contact_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quote_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quote_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_by: Mapped[int | None] = mapped_column(Integer, nullable=True)


class FollowUpReminder(TimestampMixin, Base):
    __tablename__ = "follow_up_reminders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    company_id: Mapped[int | None] = mapped_column(
        ForeignKey("companies.id", ondelete="SET NULL"), nullable=True
    )
    contact_id: Mapped[int | None] = mapped_column(
        ForeignKey("contacts.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True, nullable=False)
    priority: Mapped[str] = mapped_column(String(20), default="medium", nullable=False)
    related_quote_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    company: Mapped[Company | None] = relationship()
    contact: Mapped[Contact | None] = relationship()


class CompanySettings(TimestampMixin, Base):
    __tablename__ = "company_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    company_name: Mapped[str] = mapped_column(String(255), default="My Company", nullable=False)
    company_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    company_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    logo_base64: Mapped[str | None] = mapped_column(Text, nullable=True)
    logo_size_percentage: Mapped[int] = mapped_column(Integer, default=100, nullable=False)
    primary_color: Mapped[str] = mapped_column(String(20), default="#6366F1", nullable=False)
    secondary_color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    quote_prefix: Mapped[str] = mapped_column(String(10), default="QT", nullable=False)
    quote_validity_days: Mapped[int] = mapped_column(Integer, default=30, nullable=False)
    default_margin_percentage: Mapped[float] = mapped_column(Float, default=15.0, nullable=False)
    default_payment_terms: Mapped[str] = mapped_column(String(120), default="Net 30", nullable=False)
    email_notifications_enabled: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notification_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    terms_dismantle: Mapped[str | None] = mapped_column(Text, nullable=True)
    terms_inland: Mapped[str | None] = mapped_column(Text, nullable=True)
    terms_version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    popular_makes: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    footer_text: Mapped[str | None] = mapped_column(Text, nullable=True)


class QuoteTemplate(TimestampMixin, Base):
    __tablename__ = "quote_templates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    template_type: Mapped[str] = mapped_column(String(20), default="dismantle", nullable=False)
    location: Mapped[str | None] = mapped_column(String(40), nullable=True)
    costs: Mapped[dict[str, Any]] = mapped_column(JSON, default=dict, nullable=False)
    default_margin_percentage: Mapped[float] = mapped_column(Float, default=15.0, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    use_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class EmailLog(TimestampMixin, Base):
    __tablename__ = "email_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    quote_type: Mapped[str | None] = mapped_column(String(20), nullable=True)
    quote_id: Mapped[int | None] = mapped_column(Integer, index=True, nullable=True)
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    recipient_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    subject: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    sent_by: Mapped[int | None] = mapped_column(Integer, nullable=True)
