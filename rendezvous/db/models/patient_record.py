from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID, uuid4

class PatientRecord(SQLModel, table=True):
    __tablename__ = "patient_records"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    patient_id: UUID = Field(index=True)
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
    regular_treatment: Optional[str] = None # comma separated medication names
    active: bool = Field(default=True, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
