from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from dismantlepro.config import get_settings
from dismantlepro.db.models import User
from dismantlepro.db.repositories import Repository
from dismantlepro.db.session import get_db_session
from dismantlepro.types import NotFoundError


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    settings = get_settings()
    repo = Repository(db)
    if settings.api_auth_mode == "disabled":
        return repo.get_or_create_local_user(settings.local_user_email)

    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    user = repo.get_user_by_token(token.strip())
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid API token")
    return user


def http_error(exc: ValueError) -> HTTPException:
    status_code = 404 if isinstance(exc, NotFoundError) else 400
    return HTTPException(status_code=status_code, detail=str(exc))
