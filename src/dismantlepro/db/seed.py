from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from dismantlepro.db.models import Company, CompanySettings, Make
from dismantlepro.db.repositories import DEFAULT_POPULAR_MAKES
from dismantlepro.types import UNASSIGNED_COMPANY_NAME

DEFAULT_TERMS_DISMANTLE = (
    "Prices are valid for the period stated on this quote.\n"
    "Equipment must be accessible and free of debris at the scheduled time.\n"
    "Additional charges apply for waiting time, permits and escorts not listed above."
)

DEFAULT_TERMS_INLAND = (
    "Rates assume a single pickup and a single delivery on standard business days.\n"
    "Detention, layover and accessorial services are billed as listed.\n"
    "Loads exceeding declared dimensions or weight will be re-quoted."
)

# "CAT" is a picker alias for Caterpillar, not a separate make row.
SEED_MAKES: list[str] = [name for name in DEFAULT_POPULAR_MAKES if name != "CAT"]


def seed_company_settings(session: Session) -> int:
    if session.scalar(select(CompanySettings.id)):
        return 0
    session.add(
        CompanySettings(
            popular_makes=list(DEFAULT_POPULAR_MAKES),
            terms_dismantle=DEFAULT_TERMS_DISMANTLE,
            terms_inland=DEFAULT_TERMS_INLAND,
        )
    )
    session.commit()
    return 1


def seed_unassigned_company(session: Session) -> int:
    existing = session.scalar(
        select(Company.id).where(func.lower(Company.name) == UNASSIGNED_COMPANY_NAME.lower())
    )
    if existing:
        return 0
    session.add(Company(name=UNASSIGNED_COMPANY_NAME, status="active", tags=[]))
    session.commit()
    return 1


def seed_makes(session: Session) -> int:
    inserted = 0
    for rank, name in enumerate(SEED_MAKES, start=1):
        existing = session.scalar(select(Make.id).where(func.lower(Make.name) == name.lower()))
        if existing:
            continue
        session.add(Make(name=name, popularity_rank=rank))
        inserted += 1

    session.commit()
    return inserted
