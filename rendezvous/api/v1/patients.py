from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from rendezvous.core.exceptions import NotFoundError
from rendezvous.db.session import get_session
from rendezvous.schemas.patient_record import (
    PatientRecordCreate,
    PatientRecordResponse,
    PatientRecordUpdate,
)
from rendezvous.services.patient_record_service import PatientRecordService

router = APIRouter()

async def get_patient_record_service(session: AsyncSession = Depends(get_session)) -> PatientRecordService:
    return PatientRecordService(session)

@router.post("/records", response_model=PatientRecordResponse, status_code=201)
async def create_record(
    payload: PatientRecordCreate,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.create_record(payload)

@router.get("/records", response_model=List[PatientRecordResponse])
async def read_records(
    skip: int = 0,
    limit: int = 100,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.get_records(skip, limit)

@router.get("/records/search", response_model=List[PatientRecordResponse])
async def search_records(
    q: str,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.search(q)

@router.get("/records/by-patient/{patient_id}", response_model=PatientRecordResponse)
async def read_record_by_patient(
    patient_id: UUID,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    record = await service.get_by_patient_id(patient_id)
    if not record:
        raise NotFoundError("Patient record not found")
    return record

@router.get("/records/{record_id}", response_model=PatientRecordResponse)
async def read_record(
    record_id: UUID,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.get_record(record_id)

@router.patch("/records/{record_id}", response_model=PatientRecordResponse)
async def update_record(
    record_id: UUID,
    payload: PatientRecordUpdate,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.update_record(record_id, payload)

@router.delete("/records/{record_id}", response_model=PatientRecordResponse)
async def delete_record(
    record_id: UUID,
    service: PatientRecordService = Depends(get_patient_record_service)
):
    return await service.delete_record(record_id)
