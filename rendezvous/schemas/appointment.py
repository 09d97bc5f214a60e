import enum
from pydantic import BaseModel, Field, field_validator, model_validator
from uuid import UUID
from datetime import date, datetime
from typing import Optional, List

from rendezvous.core.utils import is_valid_time


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value) -> "AppointmentStatus":
        """
        Map a stored status onto the canonical vocabulary.

        Older documents carry French spellings, sometimes without the
        feminine suffix ("confirme" next to "confirmee"). Anything
        unrecognised is treated as pending.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.PENDING
        raw = str(value).strip().lower()
        try:
            return cls(raw)
        except ValueError:
            return LEGACY_STATUSES.get(raw, cls.PENDING)

    @classmethod
    def is_canonical(cls, value) -> bool:
        return value in cls._value2member_map_


LEGACY_STATUSES = {
    "en_attente": AppointmentStatus.PENDING,
    "confirmee": AppointmentStatus.CONFIRMED,
    "confirme": AppointmentStatus.CONFIRMED,
    "reportee": AppointmentStatus.RESCHEDULED,
    "reporte": AppointmentStatus.RESCHEDULED,
    "annulee": AppointmentStatus.CANCELLED,
    "annule": AppointmentStatus.CANCELLED,
    "terminee": AppointmentStatus.COMPLETED,
    "termine": AppointmentStatus.COMPLETED,
}


class AppointmentKind(str, enum.Enum):
    CONSULTATION = "consultation"
    URGENCY = "urgency"
    FOLLOW_UP = "follow_up"


class CreatorRole(str, enum.Enum):
    PATIENT = "patient"
    SECRETARY = "secretary"
    DOCTOR = "doctor"


class HistoryAction(str, enum.Enum):
    CREATION = "creation"
    CONFIRMATION = "confirmation"
    REPORT = "report"
    ATTRIBUTION = "attribution"
    CANCELLATION = "cancellation"
    COMPLETION = "completion"
    STATUS_CHANGE = "status_change"
    MIGRATION = "migration"
    CLEANUP = "cleanup"


# Keys written by the previous French data model
LEGACY_HISTORY_KEYS = {
    "modifie_par": "actor",
    "motif_modification": "reason",
    "ancien_medecin_id": "old_doctor_id",
    "nouveau_medecin_id": "new_doctor_id",
    "ancienne_date": "old_date",
    "nouvelle_date": "new_date",
    "ancien_statut": "old_status",
    "nouveau_statut": "new_status",
    "champ_modifie": "field",
    "ancienne_valeur": "old_value",
    "nouvelle_valeur": "new_value",
}

LEGACY_HISTORY_ACTIONS = {
    "annulation": HistoryAction.CANCELLATION,
    "terminaison": HistoryAction.COMPLETION,
    "nettoyage": HistoryAction.CLEANUP,
    "changement_statut": HistoryAction.STATUS_CHANGE,
}

HISTORY_TEXT_FIELDS = (
    "old_doctor_id", "new_doctor_id", "old_date", "new_date",
    "old_status", "new_status", "field", "old_value", "new_value",
)


class HistoryEntry(BaseModel):
    date: datetime = Field(default_factory=datetime.utcnow)
    action: HistoryAction
    actor: str = "system"
    reason: Optional[str] = None
    old_doctor_id: Optional[str] = None
    new_doctor_id: Optional[str] = None
    old_date: Optional[str] = None
    new_date: Optional[str] = None
    old_status: Optional[str] = None
    new_status: Optional[str] = None
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy(cls, data):
        """Read entries stored under the French keys and action names."""
        if not isinstance(data, dict):
            return data
        entry = {LEGACY_HISTORY_KEYS.get(key, key): value for key, value in data.items()}
        action = entry.get("action")
        if isinstance(action, str):
            entry["action"] = LEGACY_HISTORY_ACTIONS.get(action.strip().lower(), action.strip().lower())
        if entry.get("date") is None:
            entry.pop("date", None)
        if entry.get("actor") is None:
            entry.pop("actor", None)
        for name in HISTORY_TEXT_FIELDS:
            if entry.get(name) is not None and not isinstance(entry[name], str):
                entry[name] = str(entry[name])
        return entry

    def to_document(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


def _check_time(value: Optional[str]) -> Optional[str]:
    if value is not None and not is_valid_time(value):
        raise ValueError("Time must use the HH:MM format")
    return value


class AppointmentCreate(BaseModel):
    patient_id: UUID
    establishment_id: UUID
    appointment_date: date
    start_time: str
    end_time: str
    motive: str
    kind: AppointmentKind = AppointmentKind.CONSULTATION
    created_by: CreatorRole = CreatorRole.PATIENT
    specialty: Optional[str] = None
    doctor_id: Optional[UUID] = None
    secretary_notes: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        return _check_time(value)


class AppointmentConfirm(BaseModel):
    doctor_id: UUID
    secretary_id: str
    notes: Optional[str] = None


class AppointmentReschedule(BaseModel):
    appointment_date: date
    start_time: str
    end_time: str
    actor_id: str
    reason: str = Field(min_length=1)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, value: str) -> str:
        return _check_time(value)


class AppointmentReassign(BaseModel):
    doctor_id: UUID
    actor_id: str
    reason: str = Field(min_length=1)


class AppointmentCancel(BaseModel):
    actor_id: str
    reason: Optional[str] = None


class AppointmentComplete(BaseModel):
    doctor_id: UUID
    notes: Optional[str] = None


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus
    actor_id: Optional[str] = None
    reason: Optional[str] = None


class AppointmentResponse(BaseModel):
    id: UUID
    patient_id: UUID
    establishment_id: Optional[UUID]
    doctor_id: Optional[UUID]
    appointment_date: Optional[date]
    legacy_date: Optional[date] = None
    start_time: Optional[str]
    end_time: Optional[str]
    time_slot: Optional[str] = None
    motive: str
    kind: str
    status: AppointmentStatus
    specialty: Optional[str] = None
    created_by: str
    secretary_notes: Optional[str] = None
    doctor_notes: Optional[str] = None
    history: List[HistoryEntry] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value):
        return AppointmentStatus.parse(value)


class AppointmentCreatedResponse(BaseModel):
    id: UUID
    status: AppointmentStatus


class EstablishmentStatistics(BaseModel):
    total: int = 0
    pending: int = 0
    confirmed: int = 0
    today: int = 0
    rescheduled: int = 0
    cancelled: int = 0


class MigrationResult(BaseModel):
    establishment_id: UUID
    updated: int
    message: str
