from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import datetime

class DoctorBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    specialty: Optional[str] = None

class DoctorCreate(DoctorBase):
    pass

class DoctorResponse(DoctorBase):
    id: UUID
    establishment_id: Optional[UUID]
    role: str
    active: bool
    created_at: datetime

    class Config:
        from_attributes = True
