from __future__ import annotations

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from dismantlepro.types import (
    AccessorialCharge,
    ActivityType,
    CompanyStatus,
    ContactRole,
    EquipmentType,
    FieldMapping,
    ImportResult,
    InlandTransport,
    Location,
    QuoteStatus,
    QuoteType,
    ReminderPriority,
)


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# users


class UserResponse(ORMModel):
    id: int
    email: str
    first_name: str
    last_name: str
    role: str
    avatar_url: str


class UserUpdateRequest(BaseModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar_url: str | None = None


# equipment


class MakeResponse(ORMModel):
    id: int
    name: str
    popularity_rank: int


class MakeCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    popularity_rank: int = 999


class ModelResponse(ORMModel):
    id: int
    make_id: int
    name: str


class ModelCreateRequest(BaseModel):
    make_id: int
    name: str = Field(min_length=1)


class DimensionsRequest(BaseModel):
    operating_weight: float | None = Field(default=None, ge=0)
    transport_length: float | None = Field(default=None, ge=0)
    transport_width: float | None = Field(default=None, ge=0)
    transport_height: float | None = Field(default=None, ge=0)
    overall_length: float | None = Field(default=None, ge=0)
    overall_width: float | None = Field(default=None, ge=0)
    overall_height: float | None = Field(default=None, ge=0)
    front_image_base64: str | None = None
    side_image_base64: str | None = None
    equipment_type: EquipmentType | None = None
    notes: str = ""


class DimensionsResponse(ORMModel):
    id: int
    model_id: int
    operating_weight: float | None
    transport_length: float | None
    transport_width: float | None
    transport_height: float | None
    overall_length: float | None
    overall_width: float | None
    overall_height: float | None
    front_image_base64: str | None
    side_image_base64: str | None
    equipment_type: str
    notes: str


class LocationCostRequest(BaseModel):
    dismantling_loading_cost: float | None = Field(default=None, ge=0)
    loading_cost: float | None = Field(default=None, ge=0)
    blocking_bracing_cost: float | None = Field(default=None, ge=0)
    ncb_survey_cost: float | None = Field(default=None, ge=0)
    local_drayage_cost: float | None = Field(default=None, ge=0)
    chassis_cost: float | None = Field(default=None, ge=0)
    tolls_cost: float | None = Field(default=None, ge=0)
    escorts_cost: float | None = Field(default=None, ge=0)
    power_wash_cost: float | None = Field(default=None, ge=0)
    waste_fluids_disposal_fee: float | None = Field(default=None, ge=0)
    miscellaneous_costs: float | None = Field(default=None, ge=0)
    notes: str = ""


class LocationCostResponse(ORMModel):
    id: int
    model_id: int
    location: str
    dismantling_loading_cost: float | None
    loading_cost: float | None
    blocking_bracing_cost: float | None
    ncb_survey_cost: float | None
    local_drayage_cost: float | None
    chassis_cost: float | None
    tolls_cost: float | None
    escorts_cost: float | None
    power_wash_cost: float | None
    waste_fluids_disposal_fee: float | None
    miscellaneous_costs: float | None
    notes: str


class ClassifyResponse(BaseModel):
    make: str
    model: str
    equipment_type: EquipmentType


class EquipmentBlockRequest(BaseModel):
    model_id: int
    location: Location
    quantity: int = Field(default=1, ge=1)


# companies, contacts, customers


class CompanyRequest(BaseModel):
    name: str = Field(min_length=1)
    industry: str | None = None
    website: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip: str | None = None
    billing_email: str | None = None
    payment_terms: str | None = None
    tax_id: str | None = None
    mc_number: str | None = None
    dot_number: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    tags: list[str] = Field(default_factory=list)
    status: CompanyStatus = "active"
    notes: str | None = None
    custom_data: dict[str, Any] | None = None


class CompanyUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    industry: str | None = None
    website: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip: str | None = None
    billing_email: str | None = None
    payment_terms: str | None = None
    tax_id: str | None = None
    mc_number: str | None = None
    dot_number: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    tags: list[str] | None = None
    status: CompanyStatus | None = None
    notes: str | None = None
    custom_data: dict[str, Any] | None = None


class ContactResponse(ORMModel):
    id: int
    company_id: int | None
    first_name: str
    last_name: str | None
    title: str | None
    email: str | None
    phone: str | None
    mobile: str | None
    role: str
    is_primary: bool
    notes: str | None
    custom_data: dict[str, Any] | None


class CompanyResponse(ORMModel):
    id: int
    name: str
    industry: str | None
    website: str | None
    phone: str | None
    address: str | None
    city: str | None
    state: str | None
    zip: str | None
    billing_address: str | None
    billing_city: str | None
    billing_state: str | None
    billing_zip: str | None
    billing_email: str | None
    payment_terms: str | None
    tax_id: str | None
    mc_number: str | None
    dot_number: str | None
    credit_limit: float | None
    tags: list[str]
    status: str
    notes: str | None
    last_activity_at: datetime | None
    custom_data: dict[str, Any] | None
    created_at: datetime


class CompanyDetailResponse(CompanyResponse):
    contacts: list[ContactResponse] = Field(default_factory=list)


class ContactRequest(BaseModel):
    company_id: int | None = None
    first_name: str = Field(min_length=1)
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile: str | None = None
    role: ContactRole = "general"
    is_primary: bool = False
    notes: str | None = None
    custom_data: dict[str, Any] | None = None


class ContactUpdateRequest(BaseModel):
    company_id: int | None = None
    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile: str | None = None
    role: ContactRole | None = None
    is_primary: bool | None = None
    notes: str | None = None
    custom_data: dict[str, Any] | None = None


class CustomerRequest(BaseModel):
    name: str = Field(min_length=1)
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip: str | None = None
    payment_terms: str | None = None
    notes: str | None = None
    mc_number: str | None = None
    dot_number: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    custom_data: dict[str, Any] | None = None


class CustomerUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    company: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip: str | None = None
    payment_terms: str | None = None
    notes: str | None = None
    mc_number: str | None = None
    dot_number: str | None = None
    credit_limit: float | None = Field(default=None, ge=0)
    custom_data: dict[str, Any] | None = None


class CustomerResponse(ORMModel):
    id: int
    name: str
    company: str | None
    email: str | None
    phone: str | None
    address: str | None
    billing_address: str | None
    billing_city: str | None
    billing_state: str | None
    billing_zip: str | None
    payment_terms: str | None
    notes: str | None
    mc_number: str | None
    dot_number: str | None
    credit_limit: float | None
    custom_data: dict[str, Any] | None


# quotes


class QuoteBaseResponse(ORMModel):
    id: int
    quote_number: str
    version: int
    parent_quote_id: int | None
    original_quote_id: int | None
    status: str
    company_id: int | None
    contact_id: int | None
    customer_name: str
    customer_email: str | None
    customer_phone: str | None
    customer_company: str | None
    billing_address: str | None
    billing_city: str | None
    billing_state: str | None
    billing_zip: str | None
    payment_terms: str | None
    margin_percentage: float
    subtotal: float
    margin_amount: float
    total: float
    valid_until: date | None
    sent_at: datetime | None
    accepted_at: datetime | None
    rejected_at: datetime | None
    rejection_reason: str | None
    public_token: str | None
    created_by: int | None
    created_at: datetime
    updated_at: datetime


class DismantleQuoteResponse(QuoteBaseResponse):
    make_name: str
    model_name: str
    model_id: int | None
    location: str | None
    costs: dict[str, Any]
    enabled_costs: dict[str, Any]
    cost_overrides: dict[str, Any]
    cost_descriptions: dict[str, Any]
    miscellaneous_fees: list[dict[str, Any]]
    is_multi_equipment: bool
    equipment_blocks: list[dict[str, Any]]
    inland_transport: InlandTransport | None
    inland_total: float
    quote_notes: str | None
    internal_notes: str | None


class InlandQuoteResponse(QuoteBaseResponse):
    pickup_address: str
    dropoff_address: str
    distance_miles: float | None
    rate_per_mile: float
    base_rate: float
    fuel_surcharge_percent: float
    accessorial_charges: list[AccessorialCharge]
    manual_total: float | None
    line_haul_total: float
    fuel_surcharge_amount: float
    accessorial_total: float
    equipment_description: str | None
    weight_lbs: float | None
    length_inches: float | None
    width_inches: float | None
    height_inches: float | None
    notes: str | None
    custom_data: dict[str, Any] | None


class StatusChangeRequest(BaseModel):
    status: QuoteStatus
    notes: str | None = None
    rejection_reason: str | None = None


class StatusHistoryResponse(ORMModel):
    id: int
    quote_type: str
    quote_id: int
    from_status: str | None
    to_status: str
    notes: str | None
    changed_by: int | None
    created_at: datetime


class SendQuoteEmailRequest(BaseModel):
    quote_type: QuoteType
    quote_id: int
    recipient_email: str = Field(min_length=3)
    recipient_name: str = ""
    subject: str | None = None
    message: str | None = None
    include_pdf: bool = True


class EmailLogResponse(ORMModel):
    id: int
    quote_type: str | None
    quote_id: int | None
    recipient_email: str
    recipient_name: str
    subject: str
    message: str | None
    status: str
    error: str | None
    sent_at: datetime | None
    sent_by: int | None
    created_at: datetime


class PublicQuoteResponse(BaseModel):
    quote_type: QuoteType
    quote_number: str
    version: int
    status: str
    customer_name: str
    customer_company: str | None
    total: float
    valid_until: date | None


class PublicRejectRequest(BaseModel):
    reason: str | None = None


# reminders and activity


class ReminderRequest(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    due_date: datetime
    priority: ReminderPriority = "medium"
    company_id: int | None = None
    contact_id: int | None = None
    related_quote_id: int | None = None


class ReminderUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    due_date: datetime | None = None
    priority: ReminderPriority | None = None
    company_id: int | None = None
    contact_id: int | None = None
    related_quote_id: int | None = None


class ReminderResponse(ORMModel):
    id: int
    user_id: int
    company_id: int | None
    contact_id: int | None
    title: str
    description: str | None
    due_date: datetime
    priority: str
    related_quote_id: int | None
    is_completed: bool
    completed_at: datetime | None
    created_at: datetime


class ReminderStatsResponse(BaseModel):
    total: int
    pending: int
    overdue: int
    completed: int


class ActivityRequest(BaseModel):
    activity_type: ActivityType
    title: str = Field(min_length=1)
    description: str | None = None
    company_id: int | None = None
    contact_id: int | None = None
    quote_id: int | None = None
    quote_type: QuoteType | None = None


class ActivityResponse(ORMModel):
    id: int
    activity_type: str
    title: str
    description: str | None
    company_id: int | None
    contact_id: int | None
    quote_id: int | None
    quote_type: str | None
    created_by: int | None
    created_at: datetime


# settings and templates


class CompanySettingsResponse(ORMModel):
    company_name: str
    company_address: str | None
    company_phone: str | None
    company_email: str | None
    company_website: str | None
    logo_base64: str | None
    logo_size_percentage: int
    primary_color: str
    secondary_color: str | None
    quote_prefix: str
    quote_validity_days: int
    default_margin_percentage: float
    default_payment_terms: str
    email_notifications_enabled: bool
    notification_email: str | None
    terms_dismantle: str | None
    terms_inland: str | None
    terms_version: int
    popular_makes: list[str]
    footer_text: str | None


class CompanySettingsUpdateRequest(BaseModel):
    company_name: str | None = Field(default=None, min_length=1)
    company_address: str | None = None
    company_phone: str | None = None
    company_email: str | None = None
    company_website: str | None = None
    logo_base64: str | None = None
    logo_size_percentage: int | None = Field(default=None, ge=10, le=200)
    primary_color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    secondary_color: str | None = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")
    quote_prefix: str | None = Field(default=None, min_length=1, max_length=10)
    quote_validity_days: int | None = Field(default=None, ge=1)
    default_margin_percentage: float | None = Field(default=None, ge=0)
    default_payment_terms: str | None = None
    email_notifications_enabled: bool | None = None
    notification_email: str | None = None
    footer_text: str | None = None


class TermsResponse(BaseModel):
    terms_dismantle: str | None
    terms_inland: str | None
    terms_version: int


class TermsUpdateRequest(BaseModel):
    terms_dismantle: str | None = None
    terms_inland: str | None = None


class PopularMakesRequest(BaseModel):
    makes: list[str]


class TemplateRequest(BaseModel):
    name: str = Field(min_length=1)
    template_type: QuoteType = "dismantle"
    location: Location | None = None
    costs: dict[str, float] = Field(default_factory=dict)
    default_margin_percentage: float = Field(default=15.0, ge=0)
    is_default: bool = False


class TemplateUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1)
    template_type: QuoteType | None = None
    location: Location | None = None
    costs: dict[str, float] | None = None
    default_margin_percentage: float | None = Field(default=None, ge=0)
    is_default: bool | None = None


class TemplateResponse(ORMModel):
    id: int
    name: str
    template_type: str
    location: str | None
    costs: dict[str, Any]
    default_margin_percentage: float
    is_default: bool
    use_count: int


# imports


class ImportPreviewRequest(BaseModel):
    csv_text: str


class ImportPreviewResponse(BaseModel):
    target_table: str
    headers: list[str]
    row_count: int
    mappings: list[FieldMapping]
    unmapped_required: list[str]


class ImportCommitRequest(BaseModel):
    csv_text: str
    mappings: list[FieldMapping] | None = None


class ImportCommitResponse(ImportResult):
    message: str = ""


# search and reports


class SearchHit(BaseModel):
    id: int
    kind: Literal["quote", "inland_quote", "company", "contact"]
    title: str
    subtitle: str = ""


class SearchResponse(BaseModel):
    quotes: list[SearchHit] = Field(default_factory=list)
    inland_quotes: list[SearchHit] = Field(default_factory=list)
    companies: list[SearchHit] = Field(default_factory=list)
    contacts: list[SearchHit] = Field(default_factory=list)


class QuoteStatsResponse(BaseModel):
    total_quotes: int
    total_value: float
    accepted_count: int
    accepted_value: float
    pending_count: int
    conversion_rate: int
    dismantling_count: int
    inland_count: int
