from __future__ import annotations

import logging
import sys

from dismantlepro.config import get_settings

# PDF libraries log every unsupported CSS rule and font lookup at INFO/DEBUG.
NOISY_LOGGERS = ("xhtml2pdf", "reportlab", "fontTools", "PIL", "urllib3")

_LOG_CONFIGURED = False


def configure_logging() -> None:
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    _LOG_CONFIGURED = True
