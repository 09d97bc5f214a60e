from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import JSON, Column
from typing import Optional, List, TYPE_CHECKING
from datetime import datetime
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from .user import User
    from .appointment import Appointment

class Establishment(SQLModel, table=True):
    __tablename__ = "establishments"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str
    slug: str = Field(unique=True, index=True)
    kind: str = "clinic" # hospital, clinic, practice
    address: Optional[str] = None
    city: Optional[str] = Field(default=None, index=True)
    region: Optional[str] = Field(default=None, index=True)
    phone: Optional[str] = None
    email: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    emergency_service: bool = Field(default=False)
    open_24h: bool = Field(default=False)
    services: List[str] = Field(default=[], sa_column=Column(JSON))
    specialties: List[str] = Field(default=[], sa_column=Column(JSON))
    # pending, validated, rejected; NULL on rows created before validation existed
    validation_status: Optional[str] = Field(default="pending", index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    users: List["User"] = Relationship(back_populates="establishment")
    appointments: List["Appointment"] = Relationship(back_populates="establishment")
