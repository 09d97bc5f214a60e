from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import status as http_status
from sqlmodel import select

from rendezvous.core.exceptions import AppException, AppointmentNotFound, InvalidStatusTransition, NotFoundError
from rendezvous.core.logger import get_logger
from rendezvous.core.redis import Notifier
from rendezvous.db.models import Appointment, Establishment
from rendezvous.schemas.appointment import (
    LEGACY_STATUSES,
    AppointmentCreate,
    AppointmentStatus,
    CreatorRole,
    EstablishmentStatistics,
    HistoryAction,
    HistoryEntry,
)
from rendezvous.services.doctor_service import DoctorService

logger = get_logger("appointments")

S = AppointmentStatus

# Single authority for status changes. Pending is only ever entered at creation.
ALLOWED_TRANSITIONS = {
    S.PENDING: {S.CONFIRMED, S.RESCHEDULED, S.CANCELLED},
    S.CONFIRMED: {S.CONFIRMED, S.RESCHEDULED, S.COMPLETED, S.CANCELLED},
    S.RESCHEDULED: {S.CONFIRMED, S.RESCHEDULED, S.COMPLETED, S.CANCELLED},
    S.CANCELLED: {S.CANCELLED},
    S.COMPLETED: {S.CANCELLED},
}

def stored_values(*statuses: AppointmentStatus) -> List[str]:
    """Every spelling, canonical or legacy, that reads back as one of ``statuses``."""
    values = [status.value for status in statuses]
    values.extend(raw for raw, status in LEGACY_STATUSES.items() if status in statuses)
    return values

def can_transition(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]

def _date_str(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None

def _id_str(value: Optional[UUID]) -> Optional[str]:
    return str(value) if value else None


class AppointmentService:
    def __init__(self, session: AsyncSession, notifier: Optional[Notifier] = None):
        self.session = session
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_id(self, appointment_id: UUID) -> Optional[Appointment]:
        return await self.session.get(Appointment, appointment_id)

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = await self.get_by_id(appointment_id)
        if not appointment:
            raise AppointmentNotFound(appointment_id)
        return appointment

    async def list_by_establishment(self, establishment_id: UUID) -> List[Appointment]:
        # Rows written before establishment_id existed are matched through their doctor
        doctor_ids = await DoctorService(self.session).get_active_doctor_ids(establishment_id)
        condition = Appointment.establishment_id == establishment_id
        if doctor_ids:
            condition = or_(condition, Appointment.doctor_id.in_(doctor_ids))

        stmt = select(Appointment).where(condition).order_by(Appointment.appointment_date.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_pending(self, establishment_id: UUID) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.establishment_id == establishment_id,
            Appointment.status.in_(stored_values(S.PENDING))
        ).order_by(Appointment.created_at.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_by_doctor(self, doctor_id: UUID) -> List[Appointment]:
        # Doctors only see what a secretary has confirmed for them
        stmt = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.status.in_(stored_values(S.CONFIRMED, S.COMPLETED))
        ).order_by(Appointment.appointment_date.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_today_for_doctor(self, doctor_id: UUID, today: Optional[date] = None) -> List[Appointment]:
        today = today or date.today()
        stmt = select(Appointment).where(
            Appointment.doctor_id == doctor_id,
            Appointment.appointment_date == today,
            Appointment.status.in_(stored_values(S.CONFIRMED, S.RESCHEDULED, S.COMPLETED))
        ).order_by(Appointment.start_time)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_by_patient(self, patient_id: UUID) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.patient_id == patient_id
        ).order_by(Appointment.appointment_date.desc())
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def establishment_statistics(self, establishment_id: UUID, today: Optional[date] = None) -> EstablishmentStatistics:
        today = today or date.today()
        appointments = await self.list_by_establishment(establishment_id)
        statuses = [AppointmentStatus.parse(a.status) for a in appointments]
        return EstablishmentStatistics(
            total=len(appointments),
            pending=statuses.count(S.PENDING),
            confirmed=statuses.count(S.CONFIRMED),
            today=sum(1 for a in appointments if a.appointment_date == today),
            rescheduled=statuses.count(S.RESCHEDULED),
            cancelled=statuses.count(S.CANCELLED),
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create_demand(self, data: AppointmentCreate) -> Appointment:
        establishment = await self.session.get(Establishment, data.establishment_id)
        if not establishment:
            raise NotFoundError("Establishment not found")

        doctor_id = data.doctor_id
        if doctor_id and data.created_by != CreatorRole.SECRETARY:
            # Only a secretary attributes doctors; a pending demand carries none
            logger.info(f"Ignoring doctor {doctor_id} on a demand created by {data.created_by.value}")
            doctor_id = None
        if doctor_id:
            await DoctorService(self.session).get_doctor(doctor_id)

        status = S.CONFIRMED if doctor_id else S.PENDING
        entry = HistoryEntry(
            action=HistoryAction.CREATION,
            actor=data.created_by.value,
            new_status=status.value,
            new_doctor_id=_id_str(doctor_id),
            reason=f"Appointment demand created by {data.created_by.value}",
        )
        appointment = Appointment(
            patient_id=data.patient_id,
            establishment_id=data.establishment_id,
            doctor_id=doctor_id,
            appointment_date=data.appointment_date,
            start_time=data.start_time,
            end_time=data.end_time,
            motive=data.motive,
            kind=data.kind.value,
            status=status.value,
            specialty=data.specialty,
            created_by=data.created_by.value,
            secretary_notes=data.secretary_notes,
            history=[entry.to_document()],
        )
        self.session.add(appointment)
        await self.session.commit()
        await self.session.refresh(appointment)

        logger.info(f"Appointment {appointment.id} created as {status.value}")
        await self._notify("created", appointment)
        return appointment

    async def confirm_and_assign(
        self,
        appointment_id: UUID,
        doctor_id: UUID,
        secretary_id: str,
        notes: Optional[str] = None,
    ) -> Appointment:
        async with self._locked(appointment_id) as appointment:
            await DoctorService(self.session).get_doctor(doctor_id)
            current = self._transition(appointment, S.CONFIRMED)

            old_doctor_id = appointment.doctor_id
            appointment.doctor_id = doctor_id
            appointment.status = S.CONFIRMED.value
            if notes is not None:
                appointment.secretary_notes = notes
            self._record(appointment, HistoryEntry(
                action=HistoryAction.CONFIRMATION,
                actor=secretary_id,
                old_status=current.value,
                new_status=S.CONFIRMED.value,
                old_doctor_id=_id_str(old_doctor_id),
                new_doctor_id=_id_str(doctor_id),
                reason="Appointment confirmed and attributed to the doctor",
            ))
        return await self._finish(appointment, "confirmed")

    async def reschedule(
        self,
        appointment_id: UUID,
        new_date: date,
        start_time: str,
        end_time: str,
        actor_id: str,
        reason: str,
    ) -> Appointment:
        if not reason or not reason.strip():
            raise AppException(http_status.HTTP_422_UNPROCESSABLE_ENTITY, "A reason is required to reschedule an appointment")

        async with self._locked(appointment_id) as appointment:
            current = self._transition(appointment, S.RESCHEDULED)

            old_date = appointment.appointment_date
            appointment.appointment_date = new_date
            appointment.start_time = start_time
            appointment.end_time = end_time
            appointment.status = S.RESCHEDULED.value
            self._record(appointment, HistoryEntry(
                action=HistoryAction.REPORT,
                actor=actor_id,
                old_status=current.value,
                new_status=S.RESCHEDULED.value,
                old_date=_date_str(old_date),
                new_date=_date_str(new_date),
                reason=reason,
            ))
        return await self._finish(appointment, "rescheduled")

    async def reassign_doctor(
        self,
        appointment_id: UUID,
        doctor_id: UUID,
        actor_id: str,
        reason: str,
    ) -> Appointment:
        if not reason or not reason.strip():
            raise AppException(http_status.HTTP_422_UNPROCESSABLE_ENTITY, "A reason is required to reassign an appointment")

        async with self._locked(appointment_id) as appointment:
            await DoctorService(self.session).get_doctor(doctor_id)
            current = AppointmentStatus.parse(appointment.status)
            if current not in (S.CONFIRMED, S.RESCHEDULED) or not appointment.doctor_id:
                raise InvalidStatusTransition(
                    current.value, current.value,
                    f"Only an attributed appointment can be reassigned (status '{current.value}')",
                )

            old_doctor_id = appointment.doctor_id
            appointment.doctor_id = doctor_id
            self._record(appointment, HistoryEntry(
                action=HistoryAction.ATTRIBUTION,
                actor=actor_id,
                old_doctor_id=_id_str(old_doctor_id),
                new_doctor_id=_id_str(doctor_id),
                reason=reason,
            ))
        return await self._finish(appointment, "reassigned")

    async def cancel(self, appointment_id: UUID, actor_id: str, reason: Optional[str] = None) -> Appointment:
        async with self._locked(appointment_id) as appointment:
            current = self._transition(appointment, S.CANCELLED)

            appointment.status = S.CANCELLED.value
            self._record(appointment, HistoryEntry(
                action=HistoryAction.CANCELLATION,
                actor=actor_id,
                old_status=current.value,
                new_status=S.CANCELLED.value,
                reason=reason or "Appointment cancelled",
            ))
        return await self._finish(appointment, "cancelled")

    async def complete(self, appointment_id: UUID, doctor_id: UUID, notes: Optional[str] = None) -> Appointment:
        async with self._locked(appointment_id) as appointment:
            current = self._transition(appointment, S.COMPLETED)
            if not appointment.doctor_id:
                raise InvalidStatusTransition(
                    current.value, S.COMPLETED.value,
                    "Only an appointment attributed to a doctor can be completed",
                )

            appointment.status = S.COMPLETED.value
            if notes is not None:
                appointment.doctor_notes = notes
            self._record(appointment, HistoryEntry(
                action=HistoryAction.COMPLETION,
                actor=str(doctor_id),
                old_status=current.value,
                new_status=S.COMPLETED.value,
                reason="Consultation completed",
            ))
        return await self._finish(appointment, "completed")

    async def update_status(
        self,
        appointment_id: UUID,
        status: AppointmentStatus,
        actor_id: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Appointment:
        status = AppointmentStatus.parse(status)
        async with self._locked(appointment_id) as appointment:
            current = self._transition(appointment, status)
            if status in (S.CONFIRMED, S.COMPLETED) and not appointment.doctor_id:
                raise InvalidStatusTransition(
                    current.value, status.value,
                    f"A {status.value} appointment must have an attributed doctor",
                )

            appointment.status = status.value
            self._record(appointment, HistoryEntry(
                action=HistoryAction.STATUS_CHANGE,
                actor=actor_id or "system",
                old_status=current.value,
                new_status=status.value,
                reason=reason or f"Status changed to {status.value}",
            ))
        return await self._finish(appointment, "status_changed")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _locked(self, appointment_id: UUID) -> "_LockedAppointment":
        return _LockedAppointment(self.session, appointment_id)

    def _transition(self, appointment: Appointment, target: AppointmentStatus) -> AppointmentStatus:
        current = AppointmentStatus.parse(appointment.status)
        if not can_transition(current, target):
            raise InvalidStatusTransition(current.value, target.value)
        return current

    @staticmethod
    def _record(appointment: Appointment, entry: HistoryEntry) -> None:
        # Assign a new list so the JSON column is flagged as modified
        appointment.history = [*(appointment.history or []), entry.to_document()]
        appointment.updated_at = datetime.utcnow()

    async def _finish(self, appointment: Appointment, event: str) -> Appointment:
        await self.session.refresh(appointment)
        logger.info(f"Appointment {appointment.id} {event} (status {appointment.status})")
        await self._notify(event, appointment)
        return appointment

    async def _notify(self, event: str, appointment: Appointment) -> None:
        if self.notifier is None:
            return
        await self.notifier.notify(f"appointment.{event}", {
            "appointment_id": str(appointment.id),
            "status": appointment.status,
            "establishment_id": _id_str(appointment.establishment_id),
            "doctor_id": _id_str(appointment.doctor_id),
        })


class _LockedAppointment:
    """
    Re-read an appointment under a row lock and commit on exit.

    The whole read-modify-write runs in one transaction so that two
    writers on the same appointment serialize instead of overwriting
    each other's history. Any exception rolls the transaction back.
    """

    def __init__(self, session: AsyncSession, appointment_id: UUID):
        self.session = session
        self.appointment_id = appointment_id

    async def __aenter__(self) -> Appointment:
        stmt = (
            select(Appointment)
            .where(Appointment.id == self.appointment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.session.execute(stmt)
            appointment = result.scalars().first()
        except Exception:
            await self.session.rollback()
            raise
        if not appointment:
            await self.session.rollback()
            raise AppointmentNotFound(self.appointment_id)
        return appointment

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            await self.session.rollback()
            return False
        await self.session.commit()
        return False
