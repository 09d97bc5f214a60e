from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import date, datetime
from uuid import UUID, uuid4
from sqlalchemy import JSON, Column

if TYPE_CHECKING:
    from .establishment import Establishment
    from .user import User

class Appointment(SQLModel, table=True):
    __tablename__ = "rendez_vous"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    patient_id: UUID = Field(index=True)
    establishment_id: Optional[UUID] = Field(default=None, foreign_key="establishments.id", index=True)
    doctor_id: Optional[UUID] = Field(default=None, foreign_key="users.id", index=True)
    # Empty on rows that only carry the legacy date until the migration sweep runs
    appointment_date: Optional[date] = Field(default=None, index=True)
    legacy_date: Optional[date] = None # legacy date_rendez_vous
    start_time: Optional[str] = None # HH:MM
    end_time: Optional[str] = None # HH:MM
    time_slot: Optional[str] = None # legacy "HH:MM - HH:MM"
    motive: str = ""
    kind: str = "consultation" # consultation, urgency, follow_up
    # Raw stored value; may hold a legacy spelling until the migration sweep runs
    status: str = Field(default="pending", index=True)
    specialty: Optional[str] = None
    created_by: str = "patient" # patient, secretary, doctor
    secretary_notes: Optional[str] = None
    doctor_notes: Optional[str] = None
    history: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    establishment: Optional["Establishment"] = Relationship(back_populates="appointments")
    doctor: Optional["User"] = Relationship(back_populates="appointments")
