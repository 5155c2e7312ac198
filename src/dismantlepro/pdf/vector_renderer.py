from __future__ import annotations

import base64
import binascii
import logging
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.enums import TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from xml.sax.saxutils import escape

from dismantlepro.pdf.document import (
    EquipmentInfo,
    InlandInfo,
    UnifiedPDFData,
    format_dimension,
    format_money,
    format_weight,
)

logger = logging.getLogger(__name__)

CONTENT_WIDTH = A4[0] - 30 * mm
MUTED = colors.HexColor("#64748B")
BORDER = colors.HexColor("#E2E8F0")
ALT_ROW = colors.HexColor("#F8FAFC")


def decode_image(value: str | None) -> bytes | None:
    if not value:
        return None
    payload = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        logger.warning("Skipping undecodable embedded image")
        return None


def _brand_color(data: UnifiedPDFData) -> colors.Color:
    try:
        return colors.HexColor(data.company.primary_color)
    except (TypeError, ValueError):
        return colors.HexColor("#6366F1")


class VectorQuoteRenderer:
    """Draws the quote with reportlab platypus tables on A4."""

    name = "vector"

    def __init__(self) -> None:
        base = getSampleStyleSheet()
        self.styles = {
            "body": ParagraphStyle("QuoteBody", parent=base["Normal"], fontSize=9, leading=12),
            "muted": ParagraphStyle("QuoteMuted", parent=base["Normal"], fontSize=8, textColor=MUTED),
            "title": ParagraphStyle(
                "QuoteTitle", parent=base["Heading1"], fontSize=18, alignment=TA_RIGHT, spaceAfter=2
            ),
            "right": ParagraphStyle("QuoteRight", parent=base["Normal"], fontSize=9, alignment=TA_RIGHT),
            "company": ParagraphStyle(
                "QuoteCompany", parent=base["Heading2"], fontSize=14, spaceAfter=2
            ),
            "section": ParagraphStyle(
                "QuoteSection", parent=base["Heading3"], fontSize=10, spaceBefore=8, spaceAfter=4
            ),
        }

    def render(self, data: UnifiedPDFData) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=15 * mm,
            rightMargin=15 * mm,
            topMargin=12 * mm,
            bottomMargin=12 * mm,
            title=f"{data.title} {data.quote_number}",
            author=data.company.name,
        )
        story: list = []
        story.extend(self._header(data))
        story.extend(self._customer(data))
        if data.inland:
            story.extend(self._route(data, data.inland))
        for item in data.equipment:
            story.extend(self._equipment(data, item))
        story.extend(self._line_items(data))
        story.extend(self._totals(data))
        story.extend(self._notes(data))
        doc.build(story)
        return buffer.getvalue()

    def _header(self, data: UnifiedPDFData) -> list:
        company = data.company
        left: list = []
        logo = decode_image(company.logo_base64)
        if logo:
            reader = ImageReader(BytesIO(logo))
            width, height = reader.getSize()
            target_height = 18 * mm * max(company.logo_size_percentage, 10) / 100
            left.append(Image(BytesIO(logo), width=target_height * width / height, height=target_height))
        else:
            left.append(Paragraph(escape(company.name), self.styles["company"]))
        for line in (company.address, company.phone, company.email, company.website):
            if line:
                left.append(Paragraph(escape(line), self.styles["muted"]))

        right = [
            Paragraph(data.title, self.styles["title"]),
            Paragraph(f"Quote ID <b>#{escape(data.quote_number)}</b>", self.styles["right"]),
            Paragraph(f"Issue Date {escape(data.issue_date)}", self.styles["right"]),
        ]
        if data.valid_until:
            right.append(Paragraph(f"Valid Until {escape(data.valid_until)}", self.styles["right"]))
        if data.version > 1:
            right.append(Paragraph(f"Version {data.version}", self.styles["right"]))

        table = Table([[left, right]], colWidths=[CONTENT_WIDTH * 0.55, CONTENT_WIDTH * 0.45])
        table.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LINEBELOW", (0, 0), (-1, 0), 2, _brand_color(data)),
                    ("BOTTOMPADDING", (0, 0), (-1, -1), 8),
                ]
            )
        )
        return [table, Spacer(1, 6 * mm)]

    def _customer(self, data: UnifiedPDFData) -> list:
        customer = data.customer
        rows = [
            ["Company Name", customer.company or "-", "Contact Person", customer.name or "-"],
            ["Phone Number", customer.phone or "-", "Email Address", customer.email or "-"],
            ["Billing Address", ", ".join(customer.address_lines) or "-", "", ""],
        ]
        table = Table(
            [[Paragraph(escape(cell), self.styles["body"]) for cell in row] for row in rows],
            colWidths=[CONTENT_WIDTH * 0.18, CONTENT_WIDTH * 0.32] * 2,
        )
        table.setStyle(
            TableStyle(
                [
                    ("TEXTCOLOR", (0, 0), (0, -1), MUTED),
                    ("TEXTCOLOR", (2, 0), (2, -1), MUTED),
                    ("SPAN", (1, 2), (3, 2)),
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ]
            )
        )
        return [Paragraph("Client Information", self.styles["section"]), table]

    def _route(self, data: UnifiedPDFData, inland: InlandInfo) -> list:
        rows = [
            ["Pickup", inland.pickup_address or "-"],
            ["Delivery", inland.dropoff_address or "-"],
        ]
        if inland.distance_miles:
            rows.append(["Distance", f"{inland.distance_miles:,.0f} miles"])
        if inland.description and data.quote_type == "dismantle":
            rows.append(["Details", inland.description])
        table = Table(
            [[Paragraph(escape(a), self.styles["muted"]), Paragraph(escape(b), self.styles["body"])] for a, b in rows],
            colWidths=[CONTENT_WIDTH * 0.18, CONTENT_WIDTH * 0.82],
        )
        return [Paragraph("Transportation", self.styles["section"]), table]

    def _equipment(self, data: UnifiedPDFData, item: EquipmentInfo) -> list:
        heading = item.label
        if item.location:
            heading = f"{heading} | Location: {item.location}"
        flowables: list = [Paragraph(escape(heading), self.styles["section"])]

        dims = item.dimensions
        specs = [
            ["Length", format_dimension(dims.length_inches if dims else None)],
            ["Width", format_dimension(dims.width_inches if dims else None)],
            ["Height", format_dimension(dims.height_inches if dims else None)],
            ["Weight", format_weight(dims.weight_lbs if dims else None)],
        ]
        spec_table = Table(specs, colWidths=[25 * mm, 35 * mm])
        spec_table.setStyle(
            TableStyle(
                [
                    ("FONTSIZE", (0, 0), (-1, -1), 8),
                    ("TEXTCOLOR", (0, 0), (0, -1), MUTED),
                    ("LINEBELOW", (0, 0), (-1, -2), 0.5, BORDER),
                ]
            )
        )

        images = []
        for encoded in (item.front_image_base64, item.side_image_base64):
            raw = decode_image(encoded)
            if raw:
                images.append(Image(BytesIO(raw), width=45 * mm, height=30 * mm, kind="proportional"))
        if images:
            row = [images + [""] * (2 - len(images)) + [spec_table]]
            table = Table(row, colWidths=[CONTENT_WIDTH * 0.3, CONTENT_WIDTH * 0.3, CONTENT_WIDTH * 0.4])
            table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
            flowables.append(table)
        else:
            flowables.append(spec_table)
        return flowables

    def _line_items(self, data: UnifiedPDFData) -> list:
        rows: list[list] = [["Service Description", "Qty", "Rate", "Line Total"]]
        for item in data.line_items:
            rows.append(
                [
                    Paragraph(escape(item.description), self.styles["body"]),
                    str(item.quantity),
                    format_money(item.unit_rate),
                    format_money(item.total),
                ]
            )
        if data.quote_type == "dismantle" and data.inland:
            rows.append(
                [Paragraph("Inland Transportation", self.styles["body"]), "1", "", format_money(data.inland_total)]
            )

        table = Table(
            rows,
            colWidths=[CONTENT_WIDTH * 0.55, CONTENT_WIDTH * 0.1, CONTENT_WIDTH * 0.17, CONTENT_WIDTH * 0.18],
            repeatRows=1,
        )
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), _brand_color(data)),
            ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("LINEBELOW", (0, 1), (-1, -1), 0.5, BORDER),
        ]
        for index in range(2, len(rows), 2):
            style.append(("BACKGROUND", (0, index), (-1, index), ALT_ROW))
        table.setStyle(TableStyle(style))
        return [Spacer(1, 4 * mm), Paragraph("Services", self.styles["section"]), table]

    def _totals(self, data: UnifiedPDFData) -> list:
        rows = []
        if data.quote_type == "dismantle":
            rows.append(["Equipment Subtotal", format_money(data.equipment_subtotal)])
            if data.misc_fees_total:
                rows.append(["Additional Fees", format_money(data.misc_fees_total)])
        else:
            rows.append(["Transportation", format_money(data.inland_total)])
        if data.margin_amount:
            rows.append(["Service Fee", format_money(data.margin_amount)])
        if data.quote_type == "dismantle" and data.inland_total:
            rows.append(["Inland Transportation", format_money(data.inland_total)])
        rows.append(["Grand Total", format_money(data.grand_total)])

        table = Table(rows, colWidths=[CONTENT_WIDTH * 0.25, CONTENT_WIDTH * 0.2], hAlign="RIGHT")
        table.setStyle(
            TableStyle(
                [
                    ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                    ("FONTSIZE", (0, 0), (-1, -1), 9),
                    ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, -1), (-1, -1), 11),
                    ("LINEABOVE", (0, -1), (-1, -1), 1, _brand_color(data)),
                ]
            )
        )
        return [Spacer(1, 3 * mm), table]

    def _notes(self, data: UnifiedPDFData) -> list:
        flowables: list = []
        if data.customer_notes:
            flowables.append(Paragraph("Notes", self.styles["section"]))
            flowables.append(Paragraph(escape(data.customer_notes).replace("\n", "<br/>"), self.styles["body"]))
        if data.terms_and_conditions:
            flowables.append(Paragraph("Terms &amp; Conditions", self.styles["section"]))
            flowables.append(
                Paragraph(escape(data.terms_and_conditions).replace("\n", "<br/>"), self.styles["muted"])
            )
        if data.company.footer_text:
            flowables.append(Spacer(1, 4 * mm))
            flowables.append(Paragraph(escape(data.company.footer_text), self.styles["muted"]))
        return flowables
