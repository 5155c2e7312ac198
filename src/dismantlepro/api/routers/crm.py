from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.schemas import (
    CompanyDetailResponse,
    CompanyRequest,
    CompanyResponse,
    CompanyUpdateRequest,
    ContactRequest,
    ContactResponse,
    ContactUpdateRequest,
    CustomerRequest,
    CustomerResponse,
    CustomerUpdateRequest,
)
from dismantlepro.db.repositories import Repository
from dismantlepro.types import CompanyStatus

companies_router = APIRouter(
    prefix="/api/companies", tags=["companies"], dependencies=[Depends(get_current_user)]
)
contacts_router = APIRouter(prefix="/api/contacts", tags=["contacts"], dependencies=[Depends(get_current_user)])
customers_router = APIRouter(
    prefix="/api/customers", tags=["customers"], dependencies=[Depends(get_current_user)]
)


# companies


@companies_router.get("", response_model=list[CompanyResponse])
def list_companies(
    search: str | None = None,
    status: CompanyStatus | None = None,
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
) -> list[CompanyResponse]:
    rows = Repository(db).list_companies(search=search, status=status, limit=limit, offset=offset)
    return [CompanyResponse.model_validate(row) for row in rows]


@companies_router.post("", response_model=CompanyDetailResponse, status_code=201)
def create_company(payload: CompanyRequest, db: Session = Depends(get_db)) -> CompanyDetailResponse:
    company = Repository(db).create_company(payload.model_dump())
    return CompanyDetailResponse.model_validate(company)


@companies_router.get("/{company_id}", response_model=CompanyDetailResponse)
def get_company(company_id: int, db: Session = Depends(get_db)) -> CompanyDetailResponse:
    company = Repository(db).get_company(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyDetailResponse.model_validate(company)


@companies_router.put("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: int,
    payload: CompanyUpdateRequest,
    db: Session = Depends(get_db),
) -> CompanyResponse:
    try:
        company = Repository(db).update_company(company_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise http_error(exc) from exc
    return CompanyResponse.model_validate(company)


@companies_router.delete("/{company_id}", status_code=204)
def delete_company(company_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        Repository(db).delete_company(company_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)


# contacts


@contacts_router.get("", response_model=list[ContactResponse])
def list_contacts(
    company_id: int | None = None,
    search: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[ContactResponse]:
    rows = Repository(db).list_contacts(company_id=company_id, search=search, limit=limit)
    return [ContactResponse.model_validate(row) for row in rows]


@contacts_router.post("", response_model=ContactResponse, status_code=201)
def create_contact(payload: ContactRequest, db: Session = Depends(get_db)) -> ContactResponse:
    return ContactResponse.model_validate(Repository(db).create_contact(payload.model_dump()))


@contacts_router.get("/{contact_id}", response_model=ContactResponse)
def get_contact(contact_id: int, db: Session = Depends(get_db)) -> ContactResponse:
    contact = Repository(db).get_contact(contact_id)
    if not contact:
        raise HTTPException(status_code=404, detail="Contact not found")
    return ContactResponse.model_validate(contact)


@contacts_router.put("/{contact_id}", response_model=ContactResponse)
def update_contact(
    contact_id: int,
    payload: ContactUpdateRequest,
    db: Session = Depends(get_db),
) -> ContactResponse:
    try:
        contact = Repository(db).update_contact(contact_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise http_error(exc) from exc
    return ContactResponse.model_validate(contact)


@contacts_router.delete("/{contact_id}", status_code=204)
def delete_contact(contact_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        Repository(db).delete_contact(contact_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)


# customers


@customers_router.get("", response_model=list[CustomerResponse])
def list_customers(
    search: str | None = None,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
) -> list[CustomerResponse]:
    return [CustomerResponse.model_validate(row) for row in Repository(db).list_customers(search=search, limit=limit)]


@customers_router.post("", response_model=CustomerResponse, status_code=201)
def create_customer(payload: CustomerRequest, db: Session = Depends(get_db)) -> CustomerResponse:
    return CustomerResponse.model_validate(Repository(db).create_customer(payload.model_dump()))


@customers_router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: int, db: Session = Depends(get_db)) -> CustomerResponse:
    customer = Repository(db).get_customer(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return CustomerResponse.model_validate(customer)


@customers_router.put("/{customer_id}", response_model=CustomerResponse)
def update_customer(
    customer_id: int,
    payload: CustomerUpdateRequest,
    db: Session = Depends(get_db),
) -> CustomerResponse:
    try:
        customer = Repository(db).update_customer(customer_id, payload.model_dump(exclude_unset=True))
    except ValueError as exc:
        raise http_error(exc) from exc
    return CustomerResponse.model_validate(customer)


@customers_router.delete("/{customer_id}", status_code=204)
def delete_customer(customer_id: int, db: Session = Depends(get_db)) -> Response:
    try:
        Repository(db).delete_customer(customer_id)
    except ValueError as exc:
        raise http_error(exc) from exc
    return Response(status_code=204)
