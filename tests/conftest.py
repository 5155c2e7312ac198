from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TMP = Path(tempfile.mkdtemp(prefix="dismantlepro-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["DATA_DIR"] = str(_TMP)
os.environ["PDF_OUTPUT_DIR"] = str(_TMP / "quotes")
os.environ["API_AUTH_MODE"] = "token"
os.environ["APP_ENV"] = "test"
os.environ["RESEND_API_KEY"] = ""

import pytest
from fastapi.testclient import TestClient

from dismantlepro.api.app import create_app
from dismantlepro.db.base import Base
from dismantlepro.db.models import User
from dismantlepro.db.repositories import Repository
from dismantlepro.db.seed import seed_company_settings, seed_makes, seed_unassigned_company
from dismantlepro.db.session import SessionLocal, engine


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        seed_company_settings(session)
        seed_unassigned_company(session)
        seed_makes(session)
    yield


@pytest.fixture()
def db_session():
    with SessionLocal() as session:
        yield session


@pytest.fixture()
def user(db_session) -> User:
    return Repository(db_session).create_user(email="dispatch@example.com", first_name="Dana", last_name="Ruiz")


@pytest.fixture()
def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {user.api_token}"}


@pytest.fixture()
def client() -> TestClient:
    return TestClient(create_app())
