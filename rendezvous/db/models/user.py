from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .establishment import Establishment
    from .appointment import Appointment

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    establishment_id: Optional[UUID] = Field(default=None, foreign_key="establishments.id", index=True)
    role: str = Field(index=True) # superadmin, secretary, doctor, patient
    first_name: str
    last_name: str
    email: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    specialty: Optional[str] = None
    active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    establishment: Optional["Establishment"] = Relationship(back_populates="users")
    appointments: List["Appointment"] = Relationship(back_populates="doctor")
