from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, or_
from sqlmodel import select

from rendezvous.core.exceptions import NotFoundError
from rendezvous.db.models import PatientRecord
from rendezvous.schemas.patient_record import PatientRecordCreate, PatientRecordUpdate

class PatientRecordService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_record(self, data: PatientRecordCreate) -> PatientRecord:
        record = PatientRecord(**data.model_dump(), active=True)
        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def get_record(self, record_id: UUID) -> PatientRecord:
        record = await self.session.get(PatientRecord, record_id)
        if not record:
            raise NotFoundError("Patient record not found")
        return record

    async def get_by_patient_id(self, patient_id: UUID) -> Optional[PatientRecord]:
        stmt = select(PatientRecord).where(
            PatientRecord.patient_id == patient_id,
            PatientRecord.active == True
        ).limit(1)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_records(self, skip: int = 0, limit: int = 100) -> List[PatientRecord]:
        stmt = select(PatientRecord).where(
            PatientRecord.active == True
        ).order_by(PatientRecord.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def update_record(self, record_id: UUID, data: PatientRecordUpdate) -> PatientRecord:
        record = await self.get_record(record_id)

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(record, key, value)
        record.updated_at = datetime.utcnow()

        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def delete_record(self, record_id: UUID) -> PatientRecord:
        # Soft delete: records are kept for the medical history
        record = await self.get_record(record_id)
        record.active = False
        record.updated_at = datetime.utcnow()

        self.session.add(record)
        await self.session.commit()
        await self.session.refresh(record)
        return record

    async def search(self, term: str) -> List[PatientRecord]:
        escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        pattern = f"%{escaped}%"
        stmt = select(PatientRecord).where(
            PatientRecord.active == True,
            or_(
                func.lower(PatientRecord.first_name).like(pattern, escape="\\"),
                func.lower(PatientRecord.last_name).like(pattern, escape="\\"),
                func.lower(PatientRecord.email).like(pattern, escape="\\"),
            )
        ).order_by(PatientRecord.last_name)
        result = await self.session.execute(stmt)
        return result.scalars().all()
