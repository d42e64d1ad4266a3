"""Smart Gestion — Store View Registry.

Defines the read-only resources the analytics run pulls from the store, the
ordering each is read in and the record type every row is parsed into.
"""

from enum import Enum
from typing import Dict, Optional, Type

from pydantic import BaseModel

from smartgestion.models.aggregate_models import (
    ActivityProfitabilityRow,
    ActivityTypePerformance,
    DailyRevenuePoint,
    FacultyParticipationPoint,
    HourlyParticipationPoint,
    MonthlyRevenuePoint,
    RecurrentUserRow,
)
from smartgestion.models.participation_models import ParticipationRecord


class ViewKind(str, Enum):
    """Where the rows come from."""

    AGGREGATE = "aggregate"  # Precomputed analytics view
    RAW = "raw"  # Source table


class ViewDefinition:
    """Describes a single store resource."""

    def __init__(
        self,
        name: str,
        resource: str,
        model: Type[BaseModel],
        kind: ViewKind = ViewKind.AGGREGATE,
        order: Optional[str] = None,
        select: str = "*",
    ):
        self.name = name
        self.resource = resource
        self.model = model
        self.kind = kind
        self.order = order
        self.select = select

    def __repr__(self) -> str:
        return f"<View {self.name} ({self.resource})>"


# Embeds needed to bucket raw records by activity type and faculty
PARTICIPATION_SELECT = (
    "id,nom_complet,montant,type_participant,statut_paiement,created_at,"
    "activity_id,faculty_id,"
    "activities(nom,capacite,type_id,activity_types(nom)),"
    "faculties(nom)"
)


# ─────────────────────────────────────────────
# ANALYTICS VIEWS — Canonical Registry
# ─────────────────────────────────────────────

VIEWS: Dict[str, ViewDefinition] = {
    "daily_revenue": ViewDefinition(
        "daily_revenue", "v_analytics_daily_revenue", DailyRevenuePoint, order="jour.asc"
    ),
    "monthly_revenue": ViewDefinition(
        "monthly_revenue", "v_analytics_monthly_revenue", MonthlyRevenuePoint, order="mois.desc"
    ),
    "hourly_participation": ViewDefinition(
        "hourly_participation", "v_analytics_hourly_participation", HourlyParticipationPoint
    ),
    "faculty_participation": ViewDefinition(
        "faculty_participation",
        "v_analytics_faculty_participation",
        FacultyParticipationPoint,
        order="nb_participations.desc",
    ),
    "activity_type_performance": ViewDefinition(
        "activity_type_performance",
        "v_analytics_activity_type_performance",
        ActivityTypePerformance,
        order="revenu.desc",
    ),
    "activity_profitability": ViewDefinition(
        "activity_profitability",
        "v_analytics_activity_profitability",
        ActivityProfitabilityRow,
        order="revenu.desc",
    ),
    "recurrent_users": ViewDefinition(
        "recurrent_users", "v_analytics_recurrent_users", RecurrentUserRow
    ),
    "participations": ViewDefinition(
        "participations",
        "participations",
        ParticipationRecord,
        kind=ViewKind.RAW,
        order="created_at.desc",
        select=PARTICIPATION_SELECT,
    ),
}


# ─────────────────────────────────────────────
# HELPERS
# ─────────────────────────────────────────────


def views_by_kind(kind: ViewKind) -> list[ViewDefinition]:
    """Return all views of a given kind, in registry order."""
    return [v for v in VIEWS.values() if v.kind == kind]
