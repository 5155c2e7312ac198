import os
import sqlite3
import subprocess
import sys
from pathlib import Path


def _indexes(cur: sqlite3.Cursor, table: str) -> set[str]:
    cur.execute(f"PRAGMA index_list({table})")
    return {row[1] for row in cur.fetchall()}


def test_alembic_upgrade_and_downgrade_for_reporting_indexes(tmp_path: Path) -> None:
    repo_root = Path(__file__).resolve().parents[2]
    db_path = tmp_path / "migration_test.db"
    env = os.environ.copy()
    env["DATABASE_URL"] = f"sqlite:///{db_path}"

    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "upgrade", "head"],
        cwd=repo_root,
        env=env,
        check=True,
    )

    conn = sqlite3.connect(db_path)
    cur = conn.cursor()
    cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='quote_history'")
    assert cur.fetchone() is not None

    cur.execute("PRAGMA table_info(company_settings)")
    settings_cols = {row[1] for row in cur.fetchall()}
    assert {"terms_version", "popular_makes", "notification_email"} <= settings_cols

    assert "ix_activity_logs_company_created" in _indexes(cur, "activity_logs")
    assert "ix_email_logs_quote" in _indexes(cur, "email_logs")

    subprocess.run(
        [sys.executable, "-m", "alembic", "-c", "alembic.ini", "downgrade", "0001_initial_schema"],
        cwd=repo_root,
        env=env,
        check=True,
    )

    assert "ix_activity_logs_company_created" not in _indexes(cur, "activity_logs")
    assert "ix_email_logs_quote" not in _indexes(cur, "email_logs")
    cur.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='quote_history'")
    assert cur.fetchone() is not None

    conn.close()
