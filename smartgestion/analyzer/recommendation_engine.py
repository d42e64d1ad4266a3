"""Smart Gestion — Recommendation Engine.

Turns the bundle into actionable suggestions, in fixed precedence:
- Best revenue hour → timing
- Best revenue weekday → scheduling
- Low-revenue activity types → marketing

Order reflects generation order; the list is truncated, never re-ranked.
"""

from collections import defaultdict
from typing import Dict, List

from smartgestion.core.formatting import weekday_label
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    InsightParameters,
    Recommendation,
    RecommendationCategory,
)
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.recommendation")


def _best(totals: Dict[int, float]) -> tuple[int, float]:
    return min(totals.items(), key=lambda kv: (-kv[1], kv[0]))


def generate_recommendations(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> List[Recommendation]:
    """Build at most `max_recommendations` suggestions from one bundle."""
    params = params or InsightParameters()
    recs: List[Recommendation] = []

    if bundle.hourly_participation:
        by_hour: Dict[int, float] = defaultdict(float)
        by_day: Dict[int, float] = defaultdict(float)
        for row in bundle.hourly_participation:
            by_hour[row.hour] += row.revenue
            by_day[row.day_of_week] += row.revenue

        hour, _ = _best(by_hour)
        recs.append(
            Recommendation(
                text=f"Favour time slots around {hour}h to maximise revenue",
                category=RecommendationCategory.TIMING,
            )
        )

        day, day_revenue = _best(by_day)
        if day_revenue > 0:
            recs.append(
                Recommendation(
                    text=f"Schedule training sessions on {weekday_label(day)} (best day)",
                    category=RecommendationCategory.SCHEDULING,
                )
            )

    low = [
        t
        for t in bundle.activity_type_performance
        if t.revenue < params.low_revenue_threshold
    ]
    if low:
        names = ", ".join(t.activity_type for t in low)
        recs.append(
            Recommendation(
                text=f"Consider a promotion or a redesign of «{names}» activities",
                category=RecommendationCategory.MARKETING,
            )
        )

    recs = recs[: params.max_recommendations]
    logger.info(f"Generated {len(recs)} recommendations", extra={"count": len(recs)})
    return recs
