from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime

from dismantlepro.core.pricing import LineItem, money, price_inland, price_quote
from dismantlepro.db.models import CompanySettings, InlandQuote, QuoteHistory
from dismantlepro.types import AccessorialCharge, EquipmentBlock, EquipmentDimensionsInfo, InlandTransport


@dataclass(slots=True)
class CompanyInfo:
    name: str
    address: str = ""
    phone: str = ""
    email: str = ""
    website: str = ""
    logo_base64: str | None = None
    logo_size_percentage: int = 100
    primary_color: str = "#6366F1"
    secondary_color: str | None = None
    footer_text: str = ""


@dataclass(slots=True)
class CustomerInfo:
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""

    @property
    def address_lines(self) -> list[str]:
        region = " ".join(part for part in (self.state, self.zip) if part)
        locality = ", ".join(part for part in (self.city, region) if part)
        return [line for line in (self.address, locality) if line]


@dataclass(slots=True)
class EquipmentInfo:
    make_name: str
    model_name: str
    location: str = ""
    quantity: int = 1
    dimensions: EquipmentDimensionsInfo | None = None
    front_image_base64: str | None = None
    side_image_base64: str | None = None
    cost_subtotal: float = 0.0
    misc_fees_total: float = 0.0
    subtotal: float = 0.0
    total_with_quantity: float = 0.0

    @property
    def label(self) -> str:
        name = f"{self.make_name} {self.model_name}".strip()
        return f"{name} (×{self.quantity})" if self.quantity > 1 else name


@dataclass(slots=True)
class InlandInfo:
    pickup_address: str
    dropoff_address: str
    description: str = ""
    distance_miles: float | None = None
    total: float = 0.0


@dataclass(slots=True)
class UnifiedPDFData:
    """Renderer-neutral view of one quote document."""

    quote_type: str
    quote_number: str
    issue_date: str
    company: CompanyInfo
    customer: CustomerInfo
    valid_until: str | None = None
    version: int = 1
    equipment: list[EquipmentInfo] = field(default_factory=list)
    is_multi_equipment: bool = False
    location: str = ""
    inland: InlandInfo | None = None
    line_items: list[LineItem] = field(default_factory=list)
    equipment_subtotal: float = 0.0
    misc_fees_total: float = 0.0
    margin_amount: float = 0.0
    inland_total: float = 0.0
    grand_total: float = 0.0
    customer_notes: str = ""
    terms_and_conditions: str = ""

    @property
    def title(self) -> str:
        return "QUOTATION" if self.quote_type == "dismantle" else "INLAND QUOTATION"

    @property
    def subtotal(self) -> float:
        return money(self.equipment_subtotal + self.misc_fees_total)


def format_date(value: date | datetime | None) -> str | None:
    if value is None:
        return None
    return value.strftime("%B %d, %Y").replace(" 0", " ")


def format_money(value: float) -> str:
    return f"${value:,.2f}"


def format_dimension(inches: float | None) -> str:
    if not inches:
        return "-"
    feet, rest = divmod(round(inches), 12)
    return f"{feet}' {rest}\"" if feet else f"{rest}\""


def format_weight(pounds: float | None) -> str:
    if not pounds:
        return "-"
    return f"{pounds:,.0f} lbs"


def company_info(settings: CompanySettings) -> CompanyInfo:
    return CompanyInfo(
        name=settings.company_name,
        address=settings.company_address or "",
        phone=settings.company_phone or "",
        email=settings.company_email or "",
        website=settings.company_website or "",
        logo_base64=settings.logo_base64,
        logo_size_percentage=settings.logo_size_percentage,
        primary_color=settings.primary_color or "#6366F1",
        secondary_color=settings.secondary_color,
        footer_text=settings.footer_text or "",
    )


def customer_info(quote: QuoteHistory | InlandQuote) -> CustomerInfo:
    return CustomerInfo(
        name=quote.customer_name or "",
        company=quote.customer_company or "",
        email=quote.customer_email or "",
        phone=quote.customer_phone or "",
        address=quote.billing_address or "",
        city=quote.billing_city or "",
        state=quote.billing_state or "",
        zip=quote.billing_zip or "",
    )


def _issue_date(quote: QuoteHistory | InlandQuote) -> str:
    return format_date(quote.created_at or datetime.now()) or ""


def build_dismantle_pdf_data(quote: QuoteHistory, settings: CompanySettings) -> UnifiedPDFData:
    blocks = [EquipmentBlock.model_validate(item) for item in quote.equipment_blocks or []]
    totals = price_quote(blocks, quote.margin_percentage or 0.0, quote.inland_total or 0.0)

    equipment = [
        EquipmentInfo(
            make_name=block.make_name,
            model_name=block.model_name,
            location=block.location or "",
            quantity=block.quantity,
            dimensions=block.dimensions,
            front_image_base64=block.front_image_base64,
            side_image_base64=block.side_image_base64,
            cost_subtotal=priced.cost_subtotal,
            misc_fees_total=priced.misc_fees_total,
            subtotal=priced.block_subtotal,
            total_with_quantity=priced.total,
        )
        for block, priced in zip(blocks, totals.blocks)
    ]

    inland = None
    if quote.inland_transport:
        transport = InlandTransport.model_validate(quote.inland_transport)
        if transport.enabled:
            inland = InlandInfo(
                pickup_address=transport.pickup_address,
                dropoff_address=transport.dropoff_address,
                description=transport.description,
                total=totals.inland_total,
            )

    misc_total = money(sum(priced.misc_fees_total * priced.quantity for priced in totals.blocks))
    return UnifiedPDFData(
        quote_type="dismantle",
        quote_number=quote.quote_number,
        issue_date=_issue_date(quote),
        valid_until=format_date(quote.valid_until),
        version=quote.version,
        company=company_info(settings),
        customer=customer_info(quote),
        equipment=equipment,
        is_multi_equipment=len(equipment) > 1,
        location=quote.location or (equipment[0].location if equipment else ""),
        inland=inland,
        line_items=totals.line_items,
        equipment_subtotal=money(totals.subtotal - misc_total),
        misc_fees_total=misc_total,
        margin_amount=totals.margin_amount,
        inland_total=totals.inland_total,
        grand_total=totals.total,
        customer_notes=quote.quote_notes or "",
        terms_and_conditions=settings.terms_dismantle or "",
    )


def build_inland_pdf_data(quote: InlandQuote, settings: CompanySettings) -> UnifiedPDFData:
    charges = [AccessorialCharge.model_validate(item) for item in quote.accessorial_charges or []]
    totals = price_inland(
        base_rate=quote.base_rate or 0.0,
        distance_miles=quote.distance_miles,
        rate_per_mile=quote.rate_per_mile or 0.0,
        fuel_surcharge_percent=quote.fuel_surcharge_percent or 0.0,
        accessorial_charges=charges,
        margin_percentage=quote.margin_percentage or 0.0,
        manual_total=quote.manual_total,
    )
    line_items = list(totals.line_items)
    if not line_items and quote.total:
        line_items.append(LineItem("Inland Transportation", money(quote.total), 1, money(quote.total)))

    dimensions = None
    if any((quote.weight_lbs, quote.length_inches, quote.width_inches, quote.height_inches)):
        dimensions = EquipmentDimensionsInfo(
            length_inches=quote.length_inches or 0.0,
            width_inches=quote.width_inches or 0.0,
            height_inches=quote.height_inches or 0.0,
            weight_lbs=quote.weight_lbs or 0.0,
        )
    equipment = []
    if quote.equipment_description or dimensions:
        equipment.append(
            EquipmentInfo(
                make_name=quote.equipment_description or "Cargo",
                model_name="",
                dimensions=dimensions,
            )
        )

    return UnifiedPDFData(
        quote_type="inland",
        quote_number=quote.quote_number,
        issue_date=_issue_date(quote),
        valid_until=format_date(quote.valid_until),
        version=quote.version,
        company=company_info(settings),
        customer=customer_info(quote),
        equipment=equipment,
        inland=InlandInfo(
            pickup_address=quote.pickup_address,
            dropoff_address=quote.dropoff_address,
            description=quote.equipment_description or "",
            distance_miles=quote.distance_miles,
            total=quote.total,
        ),
        line_items=line_items,
        equipment_subtotal=0.0,
        misc_fees_total=0.0,
        margin_amount=quote.margin_amount or 0.0,
        inland_total=money(quote.total - (quote.margin_amount or 0.0)),
        grand_total=quote.total,
        customer_notes=quote.notes or "",
        terms_and_conditions=settings.terms_inland or "",
    )


def build_pdf_data(quote: QuoteHistory | InlandQuote, settings: CompanySettings) -> UnifiedPDFData:
    if isinstance(quote, InlandQuote):
        return build_inland_pdf_data(quote, settings)
    return build_dismantle_pdf_data(quote, settings)


def _filename_part(value: str) -> str:
    # Header-safe and path-safe: no separators, quotes or non-ASCII.
    return re.sub(r"_+", "_", re.sub(r"[^A-Za-z0-9._-]", "_", value.strip())).strip("_.")


def quote_filename(data: UnifiedPDFData) -> str:
    number = _filename_part(data.quote_number) or "quote"
    if data.quote_type == "dismantle" and len(data.equipment) == 1:
        item = data.equipment[0]
        parts = [_filename_part(item.make_name), _filename_part(item.model_name)]
        return "_".join(["Quote", number, *[part for part in parts if part]]) + ".pdf"
    return f"quote-{number}.pdf"
