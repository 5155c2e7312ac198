"""Quoting and CRM tables

Equipment catalog, per-location cost schedule, companies/contacts/customers,
dismantle and inland quotes with status history, activity, reminders,
settings, templates and email logs.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op

from dismantlepro.db import models  # noqa: F401
from dismantlepro.db.base import Base

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    Base.metadata.create_all(bind=op.get_bind(), checkfirst=True)


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind(), checkfirst=True)
