from typing import List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from rendezvous.core.exceptions import NotFoundError
from rendezvous.core.logger import get_logger
from rendezvous.db.models import Establishment, User
from rendezvous.schemas.doctor import DoctorCreate

logger = get_logger("doctors")

DOCTOR_ROLE = "doctor"

class DoctorService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_doctor(self, establishment_id: UUID, data: DoctorCreate) -> User:
        establishment = await self.session.get(Establishment, establishment_id)
        if not establishment:
            raise NotFoundError("Establishment not found")

        doctor = User(
            establishment_id=establishment_id,
            role=DOCTOR_ROLE,
            active=True,
            **data.model_dump(),
        )
        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        logger.info(f"Doctor {doctor.id} added to establishment {establishment_id}")
        return doctor

    async def get_doctor(self, doctor_id: UUID) -> User:
        doctor = await self.session.get(User, doctor_id)
        if not doctor or doctor.role != DOCTOR_ROLE:
            raise NotFoundError("Doctor not found")
        return doctor

    async def get_doctors(self, establishment_id: UUID) -> List[User]:
        query = select(User).where(
            User.role == DOCTOR_ROLE,
            User.establishment_id == establishment_id,
            User.active == True
        ).order_by(User.last_name, User.first_name)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_active_doctor_ids(self, establishment_id: UUID) -> List[UUID]:
        query = select(User.id).where(
            User.role == DOCTOR_ROLE,
            User.establishment_id == establishment_id,
            User.active == True
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def deactivate_doctor(self, doctor_id: UUID) -> User:
        doctor = await self.get_doctor(doctor_id)
        doctor.active = False
        self.session.add(doctor)
        await self.session.commit()
        await self.session.refresh(doctor)
        return doctor
