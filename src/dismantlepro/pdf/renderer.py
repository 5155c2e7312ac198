from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from dismantlepro.pdf.document import UnifiedPDFData, quote_filename
from dismantlepro.pdf.html_renderer import HtmlQuoteRenderer
from dismantlepro.pdf.vector_renderer import VectorQuoteRenderer

logger = logging.getLogger(__name__)


class PdfRenderError(RuntimeError):
    pass


@dataclass(slots=True)
class RenderedDocument:
    filename: str
    content: bytes
    renderer: str
    media_type: str = "application/pdf"


class QuoteRenderer(Protocol):
    name: str

    def render(self, data: UnifiedPDFData) -> bytes: ...


def default_renderers() -> dict[str, QuoteRenderer]:
    return {"html": HtmlQuoteRenderer(), "vector": VectorQuoteRenderer()}


def render_quote_document(
    data: UnifiedPDFData,
    preferred: str = "html",
    renderers: dict[str, QuoteRenderer] | None = None,
) -> RenderedDocument:
    """Render with the preferred path; an HTML failure retries once on the vector path."""
    renderers = renderers or default_renderers()
    if preferred not in renderers:
        raise ValueError(f"unknown pdf renderer '{preferred}'")

    filename = quote_filename(data)
    try:
        content = renderers[preferred].render(data)
        return RenderedDocument(filename=filename, content=content, renderer=preferred)
    except Exception as exc:
        if preferred != "html" or "vector" not in renderers:
            logger.error("PDF render failed for %s via %s: %s", data.quote_number, preferred, exc)
            raise PdfRenderError(f"could not render quote {data.quote_number}") from exc

        logger.warning(
            "HTML renderer failed for quote %s; falling back to vector renderer (%s)",
            data.quote_number,
            exc,
        )

    try:
        content = renderers["vector"].render(data)
    except Exception as exc:
        logger.error("Vector fallback failed for quote %s: %s", data.quote_number, exc)
        raise PdfRenderError(f"could not render quote {data.quote_number}") from exc
    return RenderedDocument(filename=filename, content=content, renderer="vector")
