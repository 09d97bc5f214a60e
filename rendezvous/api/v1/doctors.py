from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from rendezvous.db.session import get_session
from rendezvous.schemas.doctor import DoctorCreate, DoctorResponse
from rendezvous.services.doctor_service import DoctorService

router = APIRouter()

@router.post("/{establishment_id}/doctors", response_model=DoctorResponse, status_code=201)
async def create_doctor(
    establishment_id: UUID,
    data: DoctorCreate,
    session: AsyncSession = Depends(get_session)
):
    service = DoctorService(session)
    return await service.create_doctor(establishment_id, data)

@router.get("/{establishment_id}/doctors", response_model=List[DoctorResponse])
async def read_doctors(
    establishment_id: UUID,
    session: AsyncSession = Depends(get_session)
):
    service = DoctorService(session)
    return await service.get_doctors(establishment_id)

@router.post("/{doctor_id}/deactivate", response_model=DoctorResponse)
async def deactivate_doctor(
    doctor_id: UUID,
    session: AsyncSession = Depends(get_session)
):
    service = DoctorService(session)
    return await service.deactivate_doctor(doctor_id)
