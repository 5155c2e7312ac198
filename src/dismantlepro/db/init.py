from __future__ import annotations

from pathlib import Path

from dismantlepro.config import get_settings
from dismantlepro.db.base import Base
from dismantlepro.db.session import SessionLocal, engine
from dismantlepro.db import models  # noqa: F401
from dismantlepro.db.seed import seed_company_settings, seed_makes, seed_unassigned_company


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir, settings.pdf_output_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database(*, seed_equipment: bool = True) -> dict[str, int]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        counts = {
            "seeded_settings": seed_company_settings(session),
            "seeded_companies": seed_unassigned_company(session),
            "seeded_makes": seed_makes(session) if seed_equipment else 0,
        }
    return counts
