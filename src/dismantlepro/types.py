from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

QuoteStatus = Literal["draft", "sent", "viewed", "accepted", "rejected", "expired"]
QuoteType = Literal["dismantle", "inland"]
CompanyStatus = Literal["active", "inactive", "prospect", "lead", "vip"]
ContactRole = Literal["general", "decision_maker", "billing", "operations", "technical"]
ReminderPriority = Literal["low", "medium", "high", "urgent"]
ImportTable = Literal["companies", "customers", "contacts", "inland_quotes"]
ImportFieldType = Literal["text", "number", "date", "boolean", "json"]
ExportTable = Literal["companies", "contacts", "customers", "equipment", "dimensions"]
ActivityType = Literal[
    "call",
    "email",
    "meeting",
    "note",
    "task",
    "quote_sent",
    "quote_accepted",
    "quote_rejected",
    "follow_up",
    "status_change",
]
EquipmentType = Literal[
    "excavator",
    "wheel_loader",
    "bulldozer",
    "skid_steer",
    "compact_track_loader",
    "backhoe",
    "forklift",
    "crane",
    "dump_truck",
    "motor_grader",
    "roller",
    "telehandler",
    "other",
]
Location = Literal["New Jersey", "Savannah", "Houston", "Chicago", "Oakland", "Long Beach"]

QUOTE_STATUSES: tuple[str, ...] = ("draft", "sent", "viewed", "accepted", "rejected", "expired")
COMPANY_STATUSES: tuple[str, ...] = ("active", "inactive", "prospect", "lead", "vip")
CONTACT_ROLES: tuple[str, ...] = ("general", "decision_maker", "billing", "operations", "technical")
LOCATIONS: tuple[str, ...] = ("New Jersey", "Savannah", "Houston", "Chicago", "Oakland", "Long Beach")
UNASSIGNED_COMPANY_NAME = "Unassigned"


class NotFoundError(ValueError):
    """A referenced row does not exist."""


class CostField(str, Enum):
    DISMANTLING_LOADING = "dismantling_loading_cost"
    LOADING = "loading_cost"
    BLOCKING_BRACING = "blocking_bracing_cost"
    NCB_SURVEY = "ncb_survey_cost"
    LOCAL_DRAYAGE = "local_drayage_cost"
    CHASSIS = "chassis_cost"
    TOLLS = "tolls_cost"
    ESCORTS = "escorts_cost"
    POWER_WASH = "power_wash_cost"
    WASTE_FLUIDS_DISPOSAL = "waste_fluids_disposal_fee"
    MISCELLANEOUS = "miscellaneous_costs"

    @property
    def label(self) -> str:
        return COST_FIELD_LABELS[self]


COST_FIELD_LABELS: dict[CostField, str] = {
    CostField.DISMANTLING_LOADING: "Dismantling & Loading",
    CostField.LOADING: "Loading",
    CostField.BLOCKING_BRACING: "Blocking & Bracing",
    CostField.NCB_SURVEY: "NCB Survey",
    CostField.LOCAL_DRAYAGE: "Local Drayage",
    CostField.CHASSIS: "Chassis",
    CostField.TOLLS: "Tolls",
    CostField.ESCORTS: "Escorts",
    CostField.POWER_WASH: "Power Wash",
    CostField.WASTE_FLUIDS_DISPOSAL: "Waste Fluids Disposal Fee",
    CostField.MISCELLANEOUS: "Miscellaneous",
}


def _non_negative(value: float | None) -> float | None:
    if value is not None and value < 0:
        raise ValueError("cost values cannot be negative")
    return value


class MiscellaneousFee(BaseModel):
    title: str
    description: str = ""
    amount: float = 0.0
    is_percentage: bool = False


class EquipmentDimensionsInfo(BaseModel):
    length_inches: float = 0.0
    width_inches: float = 0.0
    height_inches: float = 0.0
    weight_lbs: float = 0.0


class EquipmentBlock(BaseModel):
    make_name: str
    model_name: str
    model_id: int | None = None
    location: Location | None = None
    quantity: int = Field(default=1, ge=1)
    costs: dict[CostField, float | None] = Field(default_factory=dict)
    enabled_costs: dict[CostField, bool] = Field(default_factory=dict)
    cost_overrides: dict[CostField, float | None] = Field(default_factory=dict)
    cost_descriptions: dict[CostField, str] = Field(default_factory=dict)
    miscellaneous_fees: list[MiscellaneousFee] = Field(default_factory=list)
    dimensions: EquipmentDimensionsInfo | None = None
    front_image_base64: str | None = None
    side_image_base64: str | None = None
    notes: str = ""

    @field_validator("costs", "cost_overrides")
    @classmethod
    def validate_costs(cls, value: dict[CostField, float | None]) -> dict[CostField, float | None]:
        for amount in value.values():
            _non_negative(amount)
        return value


class InlandTransport(BaseModel):
    enabled: bool = False
    pickup_address: str = ""
    dropoff_address: str = ""
    description: str = ""
    total: float = Field(default=0.0, ge=0)


class AccessorialCharge(BaseModel):
    name: str
    amount: float = 0.0
    is_percentage: bool = False
    quantity: float = Field(default=1.0, ge=0)
    billing_unit: Literal["flat", "hour", "day", "way", "week", "month", "stop"] = "flat"
    condition_text: str = ""


class FieldMapping(BaseModel):
    csv_column: str
    system_field: str | None = None
    create_new: bool = False
    new_field_name: str = ""
    new_field_type: ImportFieldType = "text"
    sample_values: list[str] = Field(default_factory=list)


class ImportResult(BaseModel):
    target_table: ImportTable
    total_rows: int = 0
    success_count: int = 0
    errors: list[str] = Field(default_factory=list)
    visible_errors: list[str] = Field(default_factory=list)
    hidden_error_count: int = 0
    created_custom_fields: list[str] = Field(default_factory=list)

    @property
    def summary(self) -> str:
        if self.success_count and not self.errors:
            return f"Successfully imported {self.success_count} records"
        if self.success_count:
            return f"Imported {self.success_count} records with {len(self.errors)} errors"
        if self.errors:
            return "Import failed. Check errors below."
        return "Nothing to import"


class NotificationResult(BaseModel):
    status: Literal["sent", "failed", "skipped"]
    message: str = ""
    provider_id: str = ""
    raw: dict[str, Any] = Field(default_factory=dict)


class QuoteCustomerInfo(BaseModel):
    company_id: int | None = None
    contact_id: int | None = None
    customer_name: str = ""
    customer_email: str | None = None
    customer_phone: str | None = None
    customer_company: str | None = None
    billing_address: str | None = None
    billing_city: str | None = None
    billing_state: str | None = None
    billing_zip: str | None = None
    payment_terms: str | None = None
    valid_until: date | None = None


class DismantleQuoteInput(QuoteCustomerInfo):
    equipment_blocks: list[EquipmentBlock] = Field(min_length=1)
    margin_percentage: float | None = Field(default=None, ge=0)
    inland_transport: InlandTransport | None = None
    quote_notes: str | None = None
    internal_notes: str | None = None
    template_id: int | None = None


class InlandQuoteInput(QuoteCustomerInfo):
    pickup_address: str = Field(min_length=1)
    dropoff_address: str = Field(min_length=1)
    distance_miles: float | None = Field(default=None, ge=0)
    rate_per_mile: float = Field(default=0.0, ge=0)
    base_rate: float = Field(default=0.0, ge=0)
    fuel_surcharge_percent: float = Field(default=0.0, ge=0)
    accessorial_charges: list[AccessorialCharge] = Field(default_factory=list)
    manual_total: float | None = Field(default=None, ge=0)
    margin_percentage: float | None = Field(default=None, ge=0)
    equipment_description: str | None = None
    weight_lbs: float | None = Field(default=None, ge=0)
    length_inches: float | None = Field(default=None, ge=0)
    width_inches: float | None = Field(default=None, ge=0)
    height_inches: float | None = Field(default=None, ge=0)
    notes: str | None = None
