import pytest

from dismantlepro.core.pricing import LineItem
from dismantlepro.pdf.document import (
    CompanyInfo,
    CustomerInfo,
    EquipmentInfo,
    InlandInfo,
    UnifiedPDFData,
    format_dimension,
    format_money,
    format_weight,
    quote_filename,
)
from dismantlepro.pdf.html_renderer import HtmlQuoteRenderer
from dismantlepro.pdf.renderer import PdfRenderError, render_quote_document
from dismantlepro.pdf.vector_renderer import VectorQuoteRenderer, decode_image
from dismantlepro.types import EquipmentDimensionsInfo


class _Fixed:
    def __init__(self, name: str, content: bytes = b"%PDF-fake") -> None:
        self.name = name
        self.content = content
        self.calls = 0

    def render(self, data: UnifiedPDFData) -> bytes:
        self.calls += 1
        return self.content


class _Broken:
    def __init__(self, name: str) -> None:
        self.name = name
        self.calls = 0

    def render(self, data: UnifiedPDFData) -> bytes:
        self.calls += 1
        raise RuntimeError("layout engine exploded")


def _data(**kwargs) -> UnifiedPDFData:
    values = {
        "quote_type": "dismantle",
        "quote_number": "QT-20260304-0042",
        "issue_date": "March 4, 2026",
        "valid_until": "April 3, 2026",
        "company": CompanyInfo(name="Dismantle Pro", phone="555-0100", primary_color="#1E40AF"),
        "customer": CustomerInfo(name="Dana Ruiz", company="Acme <Heavy> Haul", city="Houston", state="TX"),
        "equipment": [
            EquipmentInfo(
                make_name="Caterpillar",
                model_name="320 GC",
                location="Houston",
                dimensions=EquipmentDimensionsInfo(
                    length_inches=372, width_inches=118, height_inches=114, weight_lbs=48000
                ),
                cost_subtotal=150.0,
                subtotal=150.0,
                total_with_quantity=150.0,
            )
        ],
        "location": "Houston",
        "line_items": [
            LineItem("Loading", 100.0, 1, 100.0, "loading_cost"),
            LineItem("Tolls", 50.0, 1, 50.0, "tolls_cost"),
        ],
        "equipment_subtotal": 150.0,
        "margin_amount": 15.0,
        "grand_total": 165.0,
        "customer_notes": "Site access after 7am.",
        "terms_and_conditions": "Prices valid 30 days.",
    }
    values.update(kwargs)
    return UnifiedPDFData(**values)


def test_html_failure_falls_back_to_vector_once() -> None:
    html, vector = _Broken("html"), _Fixed("vector")
    document = render_quote_document(_data(), "html", {"html": html, "vector": vector})

    assert document.renderer == "vector"
    assert document.content == b"%PDF-fake"
    assert html.calls == 1
    assert vector.calls == 1


def test_preferred_renderer_used_when_it_succeeds() -> None:
    html, vector = _Fixed("html", b"%PDF-html"), _Fixed("vector")
    document = render_quote_document(_data(), "html", {"html": html, "vector": vector})
    assert document.renderer == "html"
    assert vector.calls == 0


def test_vector_failure_does_not_retry_html() -> None:
    html, vector = _Fixed("html"), _Broken("vector")
    with pytest.raises(PdfRenderError):
        render_quote_document(_data(), "vector", {"html": html, "vector": vector})
    assert html.calls == 0


def test_both_paths_failing_raises_render_error() -> None:
    with pytest.raises(PdfRenderError):
        render_quote_document(_data(), "html", {"html": _Broken("html"), "vector": _Broken("vector")})


def test_unknown_renderer_is_rejected() -> None:
    with pytest.raises(ValueError):
        render_quote_document(_data(), "svg", {"html": _Fixed("html")})


def test_quote_filename() -> None:
    assert quote_filename(_data()) == "Quote_QT-20260304-0042_Caterpillar_320_GC.pdf"
    assert quote_filename(_data(quote_type="inland")) == "quote-QT-20260304-0042.pdf"
    assert quote_filename(_data(equipment=[])) == "quote-QT-20260304-0042.pdf"


def test_quote_filename_strips_unsafe_characters() -> None:
    accented = EquipmentInfo(make_name="Liebherr", model_name="R 920 \u2013 Gr\u00f6\u00dfe")
    assert quote_filename(_data(equipment=[accented])) == "Quote_QT-20260304-0042_Liebherr_R_920_Gr_e.pdf"

    slashed = EquipmentInfo(make_name="Caterpillar", model_name='D6/D6R "XL"')
    name = quote_filename(_data(equipment=[slashed]))
    assert name == "Quote_QT-20260304-0042_Caterpillar_D6_D6R_XL.pdf"
    assert "/" not in name


def test_formatters() -> None:
    assert format_money(1234.5) == "$1,234.50"
    assert format_dimension(372) == "31' 0\""
    assert format_dimension(8) == '8"'
    assert format_dimension(None) == "-"
    assert format_weight(48000) == "48,000 lbs"
    assert format_weight(0) == "-"


def test_html_template_escapes_and_shows_totals() -> None:
    html = HtmlQuoteRenderer().render_html(_data())
    assert "QT-20260304-0042" in html
    assert "Acme &lt;Heavy&gt; Haul" in html
    assert "$165.00" in html
    assert "Service Fee" in html


def test_vector_renderer_produces_pdf_bytes() -> None:
    content = VectorQuoteRenderer().render(_data())
    assert content.startswith(b"%PDF")


def test_vector_renderer_includes_route_for_inland_transport() -> None:
    route = InlandInfo(pickup_address="Port of Houston", dropoff_address="Savannah, GA", distance_miles=1040)
    with_route = VectorQuoteRenderer().render(_data(inland=route, inland_total=1800.0))
    assert with_route.startswith(b"%PDF")
    assert len(with_route) > len(VectorQuoteRenderer().render(_data()))


def test_decode_image_accepts_data_urls_and_raw_base64() -> None:
    assert decode_image("data:image/png;base64,aGVsbG8=") == b"hello"
    assert decode_image("aGVsbG8=") == b"hello"
    assert decode_image(None) is None
