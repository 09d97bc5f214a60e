import enum
from pydantic import BaseModel
from typing import Optional, List
from uuid import UUID
from datetime import datetime

class ValidationStatus(str, enum.Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    REJECTED = "rejected"

class EstablishmentKind(str, enum.Enum):
    HOSPITAL = "hospital"
    CLINIC = "clinic"
    PRACTICE = "practice"

class EstablishmentBase(BaseModel):
    name: str
    kind: EstablishmentKind = EstablishmentKind.CLINIC
    address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    emergency_service: bool = False
    open_24h: bool = False
    services: List[str] = []
    specialties: List[str] = []

class EstablishmentCreate(EstablishmentBase):
    pass

class EstablishmentUpdate(BaseModel):
    name: Optional[str] = None
    kind: Optional[EstablishmentKind] = None
    address: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    emergency_service: Optional[bool] = None
    open_24h: Optional[bool] = None
    services: Optional[List[str]] = None
    specialties: Optional[List[str]] = None

class ValidationUpdate(BaseModel):
    status: ValidationStatus

class EstablishmentResponse(EstablishmentBase):
    id: UUID
    slug: str
    kind: str
    validation_status: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
