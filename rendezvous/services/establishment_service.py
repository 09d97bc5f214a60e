from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, or_
from uuid import UUID
from typing import List, Optional

from rendezvous.core.exceptions import NotFoundError
from rendezvous.core.logger import get_logger
from rendezvous.core.utils import generate_slug
from rendezvous.db.models import Establishment
from rendezvous.schemas.establishment import (
    EstablishmentCreate,
    EstablishmentUpdate,
    ValidationStatus,
)

logger = get_logger("establishments")

class EstablishmentService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_establishment(self, data: EstablishmentCreate) -> Establishment:
        establishment = Establishment(**data.model_dump(mode="json"))
        establishment.slug = generate_slug(data.name)
        # New establishments wait for a superadmin before their secretaries get access
        establishment.validation_status = ValidationStatus.PENDING.value

        self.session.add(establishment)
        await self.session.commit()
        await self.session.refresh(establishment)
        logger.info(f"Establishment {establishment.id} registered, awaiting validation")
        return establishment

    async def get_establishments(
        self,
        city: Optional[str] = None,
        region: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Establishment]:
        query = select(Establishment)
        if city:
            query = query.where(Establishment.city == city)
        if region:
            query = query.where(Establishment.region == region)
        query = query.order_by(Establishment.created_at.desc()).offset(skip).limit(limit)
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_validated(self, region: Optional[str] = None) -> List[Establishment]:
        # Rows that predate the validation workflow have no status and count as validated
        query = select(Establishment).where(or_(
            Establishment.validation_status == ValidationStatus.VALIDATED.value,
            Establishment.validation_status.is_(None),
        ))
        if region:
            query = query.where(Establishment.region == region)
        result = await self.session.execute(query.order_by(Establishment.name))
        return result.scalars().all()

    async def get_pending_validation(self) -> List[Establishment]:
        query = select(Establishment).where(
            Establishment.validation_status == ValidationStatus.PENDING.value
        ).order_by(Establishment.created_at.desc())
        result = await self.session.execute(query)
        return result.scalars().all()

    async def get_establishment(self, establishment_id: UUID) -> Establishment:
        establishment = await self.session.get(Establishment, establishment_id)
        if not establishment:
            raise NotFoundError("Establishment not found")
        return establishment

    async def update_establishment(self, establishment_id: UUID, data: EstablishmentUpdate) -> Establishment:
        establishment = await self.get_establishment(establishment_id)

        update_data = data.model_dump(mode="json", exclude_unset=True)
        for key, value in update_data.items():
            setattr(establishment, key, value)

        self.session.add(establishment)
        await self.session.commit()
        await self.session.refresh(establishment)
        return establishment

    async def set_validation_status(self, establishment_id: UUID, status: ValidationStatus) -> Establishment:
        establishment = await self.get_establishment(establishment_id)
        establishment.validation_status = status.value

        self.session.add(establishment)
        await self.session.commit()
        await self.session.refresh(establishment)
        logger.info(f"Establishment {establishment_id} marked {status.value}")
        return establishment
