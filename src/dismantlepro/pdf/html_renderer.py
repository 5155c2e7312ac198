from __future__ import annotations

from io import BytesIO
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from xhtml2pdf import pisa

from dismantlepro.pdf.document import UnifiedPDFData, format_dimension, format_money, format_weight

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


def _image_src(value: str | None) -> str | None:
    if not value:
        return None
    if value.startswith("data:"):
        return value
    return f"data:image/png;base64,{value}"


class HtmlQuoteRenderer:
    """Renders quote.html with Jinja2 and converts it with xhtml2pdf."""

    name = "html"

    def __init__(self, template_dir: Path = TEMPLATE_DIR, template_name: str = "quote.html"):
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["money"] = format_money
        self.env.filters["dimension"] = format_dimension
        self.env.filters["weight"] = format_weight
        self.env.filters["image_src"] = _image_src
        self.template_name = template_name

    def render_html(self, data: UnifiedPDFData) -> str:
        return self.env.get_template(self.template_name).render(doc=data)

    def render(self, data: UnifiedPDFData) -> bytes:
        html = self.render_html(data)
        result = BytesIO()
        pdf = pisa.pisaDocument(BytesIO(html.encode("UTF-8")), result)
        if pdf.err:
            raise RuntimeError(f"xhtml2pdf reported {pdf.err} error(s) for quote {data.quote_number}")
        return result.getvalue()
