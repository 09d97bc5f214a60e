from sqlmodel import SQLModel
from .establishment import Establishment
from .user import User
from .patient_record import PatientRecord
from .appointment import Appointment

__all__ = [
    "SQLModel",
    "Establishment",
    "User",
    "PatientRecord",
    "Appointment",
]
