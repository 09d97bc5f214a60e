from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from rendezvous.core.redis import Notifier, notifier
from rendezvous.db.session import get_session
from rendezvous.schemas.appointment import (
    AppointmentCancel,
    AppointmentComplete,
    AppointmentConfirm,
    AppointmentCreate,
    AppointmentReassign,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentStatusUpdate,
    EstablishmentStatistics,
    MigrationResult,
)
from rendezvous.services.appointment_service import AppointmentService
from rendezvous.services.migration_service import MigrationService

router = APIRouter()

def get_notifier() -> Notifier:
    return notifier

async def get_appointment_service(
    session: AsyncSession = Depends(get_session),
    notifier: Notifier = Depends(get_notifier),
) -> AppointmentService:
    return AppointmentService(session, notifier)

@router.post("/", response_model=AppointmentResponse, status_code=201)
async def create_demand(
    request: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.create_demand(request)

@router.get("/establishment/{establishment_id}", response_model=List[AppointmentResponse])
async def read_establishment_appointments(
    establishment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_by_establishment(establishment_id)

@router.get("/establishment/{establishment_id}/pending", response_model=List[AppointmentResponse])
async def read_pending_demands(
    establishment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_pending(establishment_id)

@router.get("/establishment/{establishment_id}/stats", response_model=EstablishmentStatistics)
async def read_establishment_statistics(
    establishment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.establishment_statistics(establishment_id)

@router.post("/establishment/{establishment_id}/migrate", response_model=MigrationResult)
async def migrate_establishment_appointments(
    establishment_id: UUID,
    session: AsyncSession = Depends(get_session)
):
    updated = await MigrationService(session).clean_and_migrate(establishment_id)
    message = f"{updated} appointments cleaned and migrated" if updated else "Nothing to migrate"
    return MigrationResult(establishment_id=establishment_id, updated=updated, message=message)

@router.get("/doctor/{doctor_id}", response_model=List[AppointmentResponse])
async def read_doctor_appointments(
    doctor_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_by_doctor(doctor_id)

@router.get("/doctor/{doctor_id}/today", response_model=List[AppointmentResponse])
async def read_doctor_appointments_today(
    doctor_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_today_for_doctor(doctor_id)

@router.get("/patient/{patient_id}", response_model=List[AppointmentResponse])
async def read_patient_appointments(
    patient_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.list_by_patient(patient_id)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def read_appointment(
    appointment_id: UUID,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.get_appointment(appointment_id)

@router.post("/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: UUID,
    request: AppointmentConfirm,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.confirm_and_assign(
        appointment_id, request.doctor_id, request.secretary_id, request.notes
    )

@router.post("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: UUID,
    request: AppointmentReschedule,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.reschedule(
        appointment_id,
        request.appointment_date,
        request.start_time,
        request.end_time,
        request.actor_id,
        request.reason,
    )

@router.post("/{appointment_id}/reassign", response_model=AppointmentResponse)
async def reassign_appointment(
    appointment_id: UUID,
    request: AppointmentReassign,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.reassign_doctor(
        appointment_id, request.doctor_id, request.actor_id, request.reason
    )

@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: UUID,
    request: AppointmentCancel,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.cancel(appointment_id, request.actor_id, request.reason)

@router.post("/{appointment_id}/complete", response_model=AppointmentResponse)
async def complete_appointment(
    appointment_id: UUID,
    request: AppointmentComplete,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.complete(appointment_id, request.doctor_id, request.notes)

@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: UUID,
    request: AppointmentStatusUpdate,
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.update_status(
        appointment_id, request.status, request.actor_id, request.reason
    )
