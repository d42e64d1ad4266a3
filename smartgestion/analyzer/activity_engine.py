"""Smart Gestion — Activity Insight Engine.

Underperforming activity types, the most popular type and activities that
struggle to fill their seats.
"""

from typing import List

from smartgestion.core.formatting import format_amount
from smartgestion.core.stats import mean
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    Insight,
    InsightCategory,
    InsightParameters,
    Sentiment,
)
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.activity")


def generate_activity_insights(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> List[Insight]:
    """Generate all activity insights for one bundle."""
    params = params or InsightParameters()
    insights: List[Insight] = []
    types = bundle.activity_type_performance

    if types:
        average = mean([t.revenue for t in types])
        cutoff = average * params.underperformer_ratio
        underperformers = [t for t in types if 0 <= t.revenue < cutoff]
        for t in underperformers[: params.max_underperformers]:
            insights.append(
                Insight(
                    category=InsightCategory.ACTIVITY,
                    code="underperform",
                    text=f"«{t.activity_type}» activities are underperforming "
                    f"({format_amount(t.revenue, params.currency)})",
                    value=format_amount(t.revenue, params.currency),
                    sentiment=Sentiment.WARNING,
                )
            )

        popular = max(types, key=lambda t: t.participation_count)
        insights.append(
            Insight(
                category=InsightCategory.ACTIVITY,
                code="popular",
                text=f"Most popular type: «{popular.activity_type}» "
                f"({popular.participation_count} participants)",
                value=str(popular.participation_count),
                sentiment=Sentiment.POSITIVE,
            )
        )

    with_capacity = [a for a in bundle.activity_profitability if a.capacity > 0]
    low_fill = [
        a for a in with_capacity if (a.fill_rate_pct or 0.0) < params.low_fill_rate_pct
    ]
    if low_fill:
        insights.append(
            Insight(
                category=InsightCategory.ACTIVITY,
                code="capacity",
                text=f"{len(low_fill)} activit{'y' if len(low_fill) == 1 else 'ies'} "
                f"below {params.low_fill_rate_pct:.0f}% fill rate",
                value=str(len(low_fill)),
                sentiment=Sentiment.WARNING,
            )
        )

    logger.info(f"Generated {len(insights)} activity insights", extra={"count": len(insights)})
    return insights
