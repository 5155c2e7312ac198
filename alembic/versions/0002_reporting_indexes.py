"""Reporting indexes for activity and email history

Revision ID: 0002_reporting_indexes
Revises: 0001_initial_schema
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_reporting_indexes"
down_revision = "0001_initial_schema"
branch_labels = None
depends_on = None

INDEXES: list[tuple[str, str, list[str]]] = [
    ("activity_logs", "ix_activity_logs_company_created", ["company_id", "created_at"]),
    ("activity_logs", "ix_activity_logs_type_created", ["activity_type", "created_at"]),
    ("email_logs", "ix_email_logs_quote", ["quote_type", "quote_id"]),
    ("quote_status_history", "ix_quote_status_history_quote", ["quote_type", "quote_id"]),
    ("quote_history", "ix_quote_history_status_created", ["status", "created_at"]),
    ("inland_quotes", "ix_inland_quotes_status_created", ["status", "created_at"]),
]


def _index_names(table: str) -> set[str]:
    insp = sa.inspect(op.get_bind())
    if table not in insp.get_table_names():
        return set()
    return {idx["name"] for idx in insp.get_indexes(table)}


def upgrade() -> None:
    for table, name, columns in INDEXES:
        if name not in _index_names(table):
            op.create_index(name, table, columns, unique=False)


def downgrade() -> None:
    for table, name, _columns in reversed(INDEXES):
        if name in _index_names(table):
            op.drop_index(name, table_name=table)
