from pydantic import BaseModel
from typing import Optional
from uuid import UUID
from datetime import date, datetime

class PatientRecordBase(BaseModel):
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    allergies: Optional[str] = None
    chronic_diseases: Optional[str] = None
    regular_treatment: Optional[str] = None

class PatientRecordCreate(PatientRecordBase):
    patient_id: UUID

class PatientRecordUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    blood_group: Optional[str] = None
    weight_kg: Optional[float] = None
    height_cm: Optional[float] = None
    allergies: Optional[str] = None
    chronic_diseases: Optional[str] = None
    regular_treatment: Optional[str] = None

class PatientRecordResponse(PatientRecordBase):
    id: UUID
    patient_id: UUID
    active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
