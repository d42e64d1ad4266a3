"""Smart Gestion — Aggregate Views (Universal Bundle Schema).

Every aggregate the analyzers read, whether it came from a precomputed store
view or was recomputed from raw records. Fields accept both their Python name
and the store's column name, so both paths produce the same types.
"""

from typing import Any, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from smartgestion.core.stats import safe_amount, safe_int
from smartgestion.models.participation_models import ParticipationRecord


def _alias(*names: str) -> AliasChoices:
    return AliasChoices(*names)


def _coalesce(data: Any, field: str, *columns: str) -> Any:
    """Fill `field` from the first of `columns` that is not null."""
    if not isinstance(data, dict) or data.get(field) is not None:
        return data
    for column in columns:
        if data.get(column) is not None:
            return {**data, field: data[column]}
    return data


class DailyRevenuePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str = Field(validation_alias=_alias("day", "jour"))
    revenue: float = Field(
        default=0.0, validation_alias=_alias("revenue", "revenu_valide", "revenu_total", "revenu")
    )
    payment_count: int = Field(
        default=0, validation_alias=_alias("payment_count", "nb_paiements", "nb_participations")
    )

    @model_validator(mode="before")
    @classmethod
    def _fallback_columns(cls, data: Any) -> Any:
        data = _coalesce(data, "revenue", "revenu_valide", "revenu_total", "revenu")
        return _coalesce(data, "payment_count", "nb_paiements", "nb_participations")

    @field_validator("day", mode="before")
    @classmethod
    def _day(cls, v: Any) -> str:
        return str(v)[:10]

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("payment_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return safe_int(v)


class MonthlyRevenuePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    month: str = Field(validation_alias=_alias("month", "mois"))
    revenue: float = Field(default=0.0, validation_alias=_alias("revenue", "revenu"))
    payment_count: int = Field(default=0, validation_alias=_alias("payment_count", "nb_paiements"))

    @field_validator("month", mode="before")
    @classmethod
    def _month(cls, v: Any) -> str:
        return str(v)[:7]

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("payment_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return safe_int(v)


class HourlyParticipationPoint(BaseModel):
    """Bucket keyed by hour of day (0–23) and weekday (0 = Sunday … 6)."""

    model_config = ConfigDict(frozen=True)

    hour: int = Field(validation_alias=_alias("hour", "heure"))
    day_of_week: int = Field(default=0, validation_alias=_alias("day_of_week", "jour_semaine"))
    participation_count: int = Field(
        default=0, validation_alias=_alias("participation_count", "nb_participations")
    )
    revenue: float = Field(default=0.0, validation_alias=_alias("revenue", "revenu"))

    @field_validator("hour", "day_of_week", "participation_count", mode="before")
    @classmethod
    def _ints(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)


class FacultyParticipationPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    faculty: str = Field(default="", validation_alias=_alias("faculty", "faculte"))
    participation_count: int = Field(
        default=0, validation_alias=_alias("participation_count", "nb_participations")
    )
    revenue: float = Field(default=0.0, validation_alias=_alias("revenue", "revenu"))
    student_count: int = Field(default=0, validation_alias=_alias("student_count", "nb_etudiants"))
    visitor_count: int = Field(default=0, validation_alias=_alias("visitor_count", "nb_visiteurs"))

    @field_validator("faculty", mode="before")
    @classmethod
    def _label(cls, v: Any) -> str:
        return v or ""

    @field_validator("participation_count", "student_count", "visitor_count", mode="before")
    @classmethod
    def _ints(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)


class ActivityTypePerformance(BaseModel):
    model_config = ConfigDict(frozen=True)

    activity_type: str = Field(default="", validation_alias=_alias("activity_type", "type_activite"))
    revenue: float = Field(default=0.0, validation_alias=_alias("revenue", "revenu"))
    participation_count: int = Field(
        default=0, validation_alias=_alias("participation_count", "nb_participations")
    )

    @field_validator("activity_type", mode="before")
    @classmethod
    def _label(cls, v: Any) -> str:
        return v or ""

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("participation_count", mode="before")
    @classmethod
    def _count(cls, v: Any) -> int:
        return safe_int(v)


class ActivityProfitabilityRow(BaseModel):
    """Per-activity revenue; fill rate is only meaningful when capacity > 0."""

    model_config = ConfigDict(frozen=True)

    activity_id: Optional[Union[int, str]] = Field(
        default=None, validation_alias=_alias("activity_id", "id")
    )
    name: str = Field(default="", validation_alias=_alias("name", "nom"))
    activity_type: str = Field(default="", validation_alias=_alias("activity_type", "type_activite"))
    participant_count: int = Field(
        default=0, validation_alias=_alias("participant_count", "nb_participants", "nb_participations")
    )
    capacity: int = Field(default=0, validation_alias=_alias("capacity", "capacite"))
    revenue: float = Field(default=0.0, validation_alias=_alias("revenue", "revenu"))
    fill_rate_pct: Optional[float] = Field(
        default=None, validation_alias=_alias("fill_rate_pct", "taux_remplissage_pct")
    )

    @model_validator(mode="before")
    @classmethod
    def _fallback_columns(cls, data: Any) -> Any:
        return _coalesce(data, "participant_count", "nb_participants", "nb_participations")

    @field_validator("name", "activity_type", mode="before")
    @classmethod
    def _labels(cls, v: Any) -> str:
        return v or ""

    @field_validator("participant_count", "capacity", mode="before")
    @classmethod
    def _ints(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("revenue", mode="before")
    @classmethod
    def _revenue(cls, v: Any) -> float:
        return safe_amount(v)

    @field_validator("fill_rate_pct", mode="before")
    @classmethod
    def _fill_rate(cls, v: Any) -> Optional[float]:
        return None if v is None else safe_amount(v)


class RecurrentUserRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    normalized_name: str = Field(default="", validation_alias=_alias("normalized_name", "nom_normalise"))
    participation_count: int = Field(
        default=0, validation_alias=_alias("participation_count", "nb_participations")
    )
    distinct_activities: int = Field(
        default=0, validation_alias=_alias("distinct_activities", "nb_activites_distinctes")
    )
    total_spent: float = Field(default=0.0, validation_alias=_alias("total_spent", "total_depense"))

    @field_validator("normalized_name", mode="before")
    @classmethod
    def _label(cls, v: Any) -> str:
        return v or ""

    @field_validator("participation_count", "distinct_activities", mode="before")
    @classmethod
    def _ints(cls, v: Any) -> int:
        return safe_int(v)

    @field_validator("total_spent", mode="before")
    @classmethod
    def _spent(cls, v: Any) -> float:
        return safe_amount(v)


class AggregateBundle(BaseModel):
    """Everything one analytics run reads.

    Built either from the store's precomputed views or by the fallback
    aggregator; analyzers must not care which.
    """

    model_config = ConfigDict(frozen=True)

    daily_revenue: List[DailyRevenuePoint] = []
    monthly_revenue: List[MonthlyRevenuePoint] = []
    hourly_participation: List[HourlyParticipationPoint] = []
    faculty_participation: List[FacultyParticipationPoint] = []
    activity_type_performance: List[ActivityTypePerformance] = []
    activity_profitability: List[ActivityProfitabilityRow] = []
    recurrent_users: List[RecurrentUserRow] = []
    participations: List[ParticipationRecord] = []
