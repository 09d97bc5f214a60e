"""
Repair sweep for appointments written under older schemas.

Records created before the current data model may lack an establishment,
keep their date only in the legacy field, keep a doctor while still
pending, store their slot as a single "HH:MM - HH:MM" string, or spell
their status the old way. The sweep fixes all of these for one
establishment and commits the result as a single batch. Running it
again on repaired data changes nothing.
"""
from datetime import datetime
from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from rendezvous.core.logger import get_logger
from rendezvous.core.utils import parse_time_slot
from rendezvous.db.models import Appointment
from rendezvous.schemas.appointment import AppointmentStatus, HistoryAction, HistoryEntry
from rendezvous.services.doctor_service import DoctorService

logger = get_logger("migration")

SYSTEM_ACTOR = "system"


class MigrationService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def clean_and_migrate(self, establishment_id: UUID) -> int:
        """Repair every appointment of ``establishment_id``; return how many changed."""
        doctor_ids = set(await DoctorService(self.session).get_active_doctor_ids(establishment_id))

        stmt = select(Appointment).with_for_update().execution_options(populate_existing=True)
        try:
            result = await self.session.execute(stmt)
            appointments = result.scalars().all()

            now = datetime.utcnow()
            updated = 0
            for appointment in appointments:
                if not self._belongs_to(appointment, establishment_id, doctor_ids):
                    continue
                fixes = self.repair(appointment, establishment_id, now)
                if fixes:
                    appointment.history = [*(appointment.history or []), *(f.to_document() for f in fixes)]
                    appointment.updated_at = now
                    self.session.add(appointment)
                    updated += 1

            # Single commit: either every fix lands or none does
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            logger.exception(f"Migration sweep failed for establishment {establishment_id}")
            raise

        if updated:
            logger.info(f"{updated} appointments cleaned and migrated for establishment {establishment_id}")
        else:
            logger.info(f"No appointment to migrate for establishment {establishment_id}")
        return updated

    @staticmethod
    def _belongs_to(appointment: Appointment, establishment_id: UUID, doctor_ids: set) -> bool:
        return (
            appointment.establishment_id == establishment_id
            or (appointment.doctor_id is not None and appointment.doctor_id in doctor_ids)
        )

    @staticmethod
    def repair(appointment: Appointment, establishment_id: UUID, now: datetime) -> List[HistoryEntry]:
        """Apply in place every fix ``appointment`` needs and describe each one."""
        fixes = []

        if appointment.establishment_id is None:
            appointment.establishment_id = establishment_id
            fixes.append(HistoryEntry(
                date=now,
                action=HistoryAction.MIGRATION,
                actor=SYSTEM_ACTOR,
                field="establishment_id",
                old_value=None,
                new_value=str(establishment_id),
                reason="Migration: missing establishment_id added",
            ))

        if appointment.appointment_date is None and appointment.legacy_date is not None:
            appointment.appointment_date = appointment.legacy_date
            fixes.append(HistoryEntry(
                date=now,
                action=HistoryAction.MIGRATION,
                actor=SYSTEM_ACTOR,
                field="appointment_date",
                old_value=None,
                new_value=appointment.legacy_date.isoformat(),
                reason="Migration: legacy date copied into appointment_date",
            ))

        status = AppointmentStatus.parse(appointment.status)
        if not AppointmentStatus.is_canonical(appointment.status):
            old_status = appointment.status
            appointment.status = status.value
            fixes.append(HistoryEntry(
                date=now,
                action=HistoryAction.MIGRATION,
                actor=SYSTEM_ACTOR,
                field="status",
                old_value=old_status,
                new_value=status.value,
                reason="Migration: legacy status spelling normalized",
            ))

        if status == AppointmentStatus.PENDING and appointment.doctor_id is not None:
            old_doctor_id = appointment.doctor_id
            appointment.doctor_id = None
            fixes.append(HistoryEntry(
                date=now,
                action=HistoryAction.CLEANUP,
                actor=SYSTEM_ACTOR,
                field="doctor_id",
                old_value=str(old_doctor_id),
                new_value=None,
                reason="Cleanup: a pending appointment must not have an attributed doctor",
            ))

        if appointment.time_slot and (not appointment.start_time or not appointment.end_time):
            parsed = parse_time_slot(appointment.time_slot)
            if parsed:
                appointment.start_time, appointment.end_time = parsed
                fixes.append(HistoryEntry(
                    date=now,
                    action=HistoryAction.MIGRATION,
                    actor=SYSTEM_ACTOR,
                    field="start_end_time",
                    old_value=appointment.time_slot,
                    new_value=f"{parsed[0]} - {parsed[1]}",
                    reason="Migration: time_slot split into start_time/end_time",
                ))

        return fixes
