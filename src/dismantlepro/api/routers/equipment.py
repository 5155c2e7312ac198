from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from dismantlepro.api.deps import get_current_user, get_db, http_error
from dismantlepro.api.schemas import (
    ClassifyResponse,
    DimensionsRequest,
    DimensionsResponse,
    LocationCostRequest,
    LocationCostResponse,
    MakeCreateRequest,
    MakeResponse,
    ModelCreateRequest,
    ModelResponse,
)
from dismantlepro.core.quotes import QuoteService
from dismantlepro.core.silhouette import detect_equipment_type
from dismantlepro.db.repositories import Repository
from dismantlepro.types import LOCATIONS, EquipmentBlock

router = APIRouter(prefix="/api/equipment", tags=["equipment"], dependencies=[Depends(get_current_user)])


def _check_location(location: str) -> None:
    if location not in LOCATIONS:
        raise HTTPException(status_code=400, detail=f"unknown location '{location}'")


@router.get("/classify", response_model=ClassifyResponse)
def classify(make: str = "", model: str = "") -> ClassifyResponse:
    return ClassifyResponse(make=make, model=model, equipment_type=detect_equipment_type(make, model))


@router.get("/makes", response_model=list[MakeResponse])
def list_makes(search: str | None = None, db: Session = Depends(get_db)) -> list[MakeResponse]:
    return [MakeResponse.model_validate(row) for row in Repository(db).list_makes(search)]


@router.post("/makes", response_model=MakeResponse, status_code=201)
def create_make(payload: MakeCreateRequest, db: Session = Depends(get_db)) -> MakeResponse:
    make = Repository(db).get_or_create_make(payload.name, payload.popularity_rank)
    return MakeResponse.model_validate(make)


@router.get("/models", response_model=list[ModelResponse])
def list_models(
    make_id: int | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
) -> list[ModelResponse]:
    return [ModelResponse.model_validate(row) for row in Repository(db).list_models(make_id, search)]


@router.post("/models", response_model=ModelResponse, status_code=201)
def create_model(payload: ModelCreateRequest, db: Session = Depends(get_db)) -> ModelResponse:
    try:
        model = Repository(db).get_or_create_model(payload.make_id, payload.name)
    except ValueError as exc:
        raise http_error(exc) from exc
    return ModelResponse.model_validate(model)


@router.get("/models/{model_id}/dimensions", response_model=DimensionsResponse)
def get_dimensions(model_id: int, db: Session = Depends(get_db)) -> DimensionsResponse:
    dimensions = Repository(db).get_dimensions(model_id)
    if not dimensions:
        raise HTTPException(status_code=404, detail="Dimensions not found")
    return DimensionsResponse.model_validate(dimensions)


@router.put("/models/{model_id}/dimensions", response_model=DimensionsResponse)
def save_dimensions(
    model_id: int,
    payload: DimensionsRequest,
    db: Session = Depends(get_db),
) -> DimensionsResponse:
    try:
        dimensions = Repository(db).upsert_dimensions(model_id, payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    return DimensionsResponse.model_validate(dimensions)


@router.get("/models/{model_id}/costs", response_model=list[LocationCostResponse])
def list_costs(model_id: int, db: Session = Depends(get_db)) -> list[LocationCostResponse]:
    return [LocationCostResponse.model_validate(row) for row in Repository(db).list_location_costs(model_id)]


@router.put("/models/{model_id}/costs/{location}", response_model=LocationCostResponse)
def save_costs(
    model_id: int,
    location: str,
    payload: LocationCostRequest,
    db: Session = Depends(get_db),
) -> LocationCostResponse:
    _check_location(location)
    try:
        row = Repository(db).upsert_location_cost(model_id, location, payload.model_dump())
    except ValueError as exc:
        raise http_error(exc) from exc
    return LocationCostResponse.model_validate(row)


@router.get("/models/{model_id}/block", response_model=EquipmentBlock)
def equipment_block(
    model_id: int,
    location: str,
    quantity: int = Query(default=1, ge=1),
    db: Session = Depends(get_db),
) -> EquipmentBlock:
    _check_location(location)
    try:
        return QuoteService(db).block_from_schedule(model_id=model_id, location=location, quantity=quantity)
    except ValueError as exc:
        raise http_error(exc) from exc
