"""Smart Gestion — Behavioral Insight Engine.

Recurrent participants and bursts of rapid registrations.
"""

from typing import List, Optional

from smartgestion.core.stats import mean
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    Insight,
    InsightCategory,
    InsightParameters,
    Sentiment,
)
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.behavioral")


def _recurrent_users(bundle: AggregateBundle) -> Optional[Insight]:
    eligible = [u for u in bundle.recurrent_users if u.participation_count > 1]
    if not eligible:
        return None

    top = max(eligible, key=lambda u: u.participation_count)
    return Insight(
        category=InsightCategory.BEHAVIORAL,
        code="recurrent",
        text=f"{len(eligible)} recurrent participants identified. "
        f"Most active: {top.participation_count} registrations",
        value=str(len(eligible)),
        sentiment=Sentiment.POSITIVE,
    )


def _rapid_registrations(
    bundle: AggregateBundle, params: InsightParameters
) -> Optional[Insight]:
    if len(bundle.participations) < max(params.rapid_registration_min_records, 2):
        return None

    timestamps = sorted(p.created_at.timestamp() for p in bundle.participations)
    recent = timestamps[-params.rapid_registration_window :]
    gaps = [(b - a) / 60 for a, b in zip(recent, recent[1:])]
    avg_gap = mean(gaps)

    # A zero gap means every record shares one timestamp
    if not 0 < avg_gap < params.rapid_registration_gap_minutes:
        return None

    return Insight(
        category=InsightCategory.BEHAVIORAL,
        code="speed",
        text=f"Closely spaced registrations detected "
        f"(one every {avg_gap:.1f} min on average)",
        value=f"{avg_gap:.1f} min",
        sentiment=Sentiment.INFO,
    )


def generate_behavioral_insights(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> List[Insight]:
    """Generate all behavioral insights for one bundle."""
    params = params or InsightParameters()
    insights: List[Insight] = []

    recurrent = _recurrent_users(bundle)
    if recurrent:
        insights.append(recurrent)
    rapid = _rapid_registrations(bundle, params)
    if rapid:
        insights.append(rapid)

    logger.info(
        f"Generated {len(insights)} behavioral insights", extra={"count": len(insights)}
    )
    return insights
