from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.schemas import (
    CompanySettingsResponse,
    CompanySettingsUpdateRequest,
    PopularMakesRequest,
    TemplateRequest,
    TemplateResponse,
    TemplateUpdateRequest,
    TermsResponse,
    TermsUpdateRequest,
    UserResponse,
    UserUpdateRequest,
)
from dismantlepro.db.models import User
from dismantlepro.db.repositories import Repository
from dismantlepro.types import QuoteType

settings_router = APIRouter(prefix="/api/settings", tags=["settings"], dependencies=[Depends(get_current_user)])
templates_router = APIRouter(
    prefix="/api/templates", tags=["templates"], dependencies=[Depends(get_current_user)]
)
user_router = APIRouter(prefix="/api/user", tags=["user"])


@settings_router.get("", response_model=CompanySettingsResponse)
def read_settings(db: Session = Depends(get_db)) -> CompanySettingsResponse:
    return CompanySettingsResponse.model_validate(Repository(db).get_company_settings())


@settings_router.put("", response_model=CompanySettingsResponse)
def update_settings(
    payload: CompanySettingsUpdateRequest,
    db: Session = Depends(get_db),
) -> CompanySettingsResponse:
    values = payload.model_dump(exclude_unset=True)
    return CompanySettingsResponse.model_validate(Repository(db).update_company_settings(values))


@settings_router.get("/terms", response_model=TermsResponse)
def get_terms(db: Session = Depends(get_db)) -> TermsResponse:
    settings = Repository(db).get_company_settings()
    return TermsResponse(
        terms_dismantle=settings.terms_dismantle,
        terms_inland=settings.terms_inland,
        terms_version=settings.terms_version,
    )


@settings_router.put("/terms", response_model=TermsResponse)
def update_terms(payload: TermsUpdateRequest, db: Session = Depends(get_db)) -> TermsResponse:
    values = payload.model_dump(exclude_unset=True)
    if not values:
        raise HTTPException(status_code=400, detail="No terms provided")
    settings = Repository(db).update_company_settings(values)
    return TermsResponse(
        terms_dismantle=settings.terms_dismantle,
        terms_inland=settings.terms_inland,
        terms_version=settings.terms_version,
    )


@settings_router.get("/popular-makes")
def get_popular_makes(db: Session = Depends(get_db)) -> list[str]:
    return list(Repository(db).get_company_settings().popular_makes or [])


@settings_router.put("/popular-makes")
def update_popular_makes(payload: PopularMakesRequest, db: Session = Depends(get_db)) -> list[str]:
    makes = [name.strip() for name in payload.makes if name.strip()]
    return list(Repository(db).update_company_settings({"popular_makes": makes}).popular_makes)


# quote templates


@templates_router.get("", response_model=list[TemplateResponse])
def list_templates(template_type: QuoteType | None = None, db: Session = Depends(get_db)) -> list[TemplateResponse]:
    return [TemplateResponse.model_validate(row) for row in Repository(db).list_templates(template_type)]


@templates_router.post("", response_model=TemplateResponse, status_code=201)
def create_template(payload: TemplateRequest, db: Session = Depends(get_db)) -> TemplateResponse:
    return TemplateResponse.model_validate(Repository(db).create_template(payload.model_dump()))


@templates_router.get("/{template_id}", response_model=TemplateResponse)
def get_template(template_id: int, db: Session = Depends(get_db)) -> TemplateResponse:
    template = Repository(db).get_template(template_id)
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    return TemplateResponse.model_validate(template)


@templates_router.put("/{template_id}", response_model=TemplateResponse)
def update_template(
    template_id: int,
    payload: TemplateUpdateRequest,
    db: Session = Depends(get_db),
) -> TemplateResponse:
    try:
        template = Repository(db).update_template(template_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise http_error(exc) from exc
    return TemplateResponse.model_validate(template)


@templates_router.post("/{template_id}/use", response_model=TemplateResponse)
def use_template(template_id: int, db: Session = Depends(get_db)) -> TemplateResponse:
    try:
        return TemplateResponse.model_validate(Repository(db).increment_template_use(template_id))
    except ValueError as exc:
        raise http_error(exc) from exc


@templates_router.delete("/{template_id}", status_code=204)
def delete_template(template_id: int, db: Session = Depends(get_db)) -> Response:
    Repository(db).delete_template(template_id)
    return Response(status_code=204)


# current user


@user_router.get("/me", response_model=UserResponse)
def current_user(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@user_router.patch("/me", response_model=UserResponse)
def update_current_user(
    payload: UserUpdateRequest,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
) -> UserResponse:
    values = payload.model_dump(exclude_unset=True, exclude_none=True)
    return UserResponse.model_validate(Repository(db).update_user(user.id, values))
