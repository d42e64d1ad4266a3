"""Smart Gestion — Raw Participation Records (Immutable).

One row of the store's `participations` table with the activity and faculty
it references embedded. Source of truth for every aggregate.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from smartgestion.core.stats import safe_amount, safe_int


class ParticipantKind(str, Enum):
    STUDENT = "student"
    VISITOR = "visitor"


class PaymentStatus(str, Enum):
    """Payment states written by the registration desk."""

    VALIDATED = "valide"
    PENDING = "en_attente"
    CANCELLED = "annule"


class ActivityTypeRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))


class ActivityRef(BaseModel):
    """Embedded `activities(...)` columns."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))
    capacity: int = Field(default=0, validation_alias=AliasChoices("capacity", "capacite"))
    type_id: Optional[Union[int, str]] = None
    activity_type: Optional[ActivityTypeRef] = Field(
        default=None, validation_alias=AliasChoices("activity_type", "activity_types")
    )

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return v or ""

    @field_validator("capacity", mode="before")
    @classmethod
    def _capacity(cls, v: Any) -> int:
        return safe_int(v)


class FacultyRef(BaseModel):
    """Embedded `faculties(nom)`."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return v or ""


class ParticipationRecord(BaseModel):
    """A single registration / payment event."""

    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    participant_name: str = Field(
        default="", validation_alias=AliasChoices("participant_name", "nom_complet")
    )
    participant_kind: ParticipantKind = Field(
        default=ParticipantKind.VISITOR,
        validation_alias=AliasChoices("participant_kind", "type_participant"),
    )
    amount: float = Field(default=0.0, validation_alias=AliasChoices("amount", "montant"))
    payment_status: str = Field(
        default=PaymentStatus.PENDING.value,
        validation_alias=AliasChoices("payment_status", "statut_paiement"),
    )
    created_at: datetime
    activity_id: Optional[Union[int, str]] = None
    faculty_id: Optional[Union[int, str]] = None
    activity: Optional[ActivityRef] = Field(
        default=None, validation_alias=AliasChoices("activity", "activities")
    )
    faculty: Optional[FacultyRef] = Field(
        default=None, validation_alias=AliasChoices("faculty", "faculties")
    )

    @field_validator("participant_name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return v or ""

    @field_validator("created_at")
    @classmethod
    def _created_at(cls, v: datetime) -> datetime:
        # Store timestamps without an offset are UTC
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @field_validator("participant_kind", mode="before")
    @classmethod
    def _kind(cls, v: Any) -> ParticipantKind:
        if isinstance(v, ParticipantKind):
            return v
        if v in ("etudiant", "student"):
            return ParticipantKind.STUDENT
        return ParticipantKind.VISITOR

    @field_validator("amount", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("payment_status", mode="before")
    @classmethod
    def _status(cls, v: Any) -> str:
        if isinstance(v, PaymentStatus):
            return v.value
        return v or PaymentStatus.PENDING.value

    @property
    def normalized_name(self) -> str:
        return self.participant_name.lower().strip()
