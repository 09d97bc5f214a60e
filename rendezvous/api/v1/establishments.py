from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from uuid import UUID

from rendezvous.db.session import get_session
from rendezvous.services.establishment_service import EstablishmentService
from rendezvous.schemas.establishment import (
    EstablishmentCreate,
    EstablishmentResponse,
    EstablishmentUpdate,
    ValidationUpdate,
)

router = APIRouter()

async def get_establishment_service(session: AsyncSession = Depends(get_session)) -> EstablishmentService:
    return EstablishmentService(session)

@router.post("/", response_model=EstablishmentResponse, status_code=201)
async def create_establishment(
    data: EstablishmentCreate,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.create_establishment(data)

@router.get("/", response_model=List[EstablishmentResponse])
async def read_establishments(
    city: Optional[str] = None,
    region: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.get_establishments(city, region, skip, limit)

@router.get("/validated", response_model=List[EstablishmentResponse])
async def read_validated_establishments(
    region: Optional[str] = None,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.get_validated(region)

@router.get("/pending", response_model=List[EstablishmentResponse])
async def read_pending_establishments(
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.get_pending_validation()

@router.get("/{establishment_id}", response_model=EstablishmentResponse)
async def read_establishment(
    establishment_id: UUID,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.get_establishment(establishment_id)

@router.patch("/{establishment_id}", response_model=EstablishmentResponse)
async def update_establishment(
    establishment_id: UUID,
    data: EstablishmentUpdate,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.update_establishment(establishment_id, data)

@router.post("/{establishment_id}/validation", response_model=EstablishmentResponse)
async def set_establishment_validation(
    establishment_id: UUID,
    data: ValidationUpdate,
    service: EstablishmentService = Depends(get_establishment_service)
):
    return await service.set_validation_status(establishment_id, data.status)
