"""Smart Gestion — Financial Insight Engine.

Produces financial insights:
- Month-over-month revenue change
- Revenue spikes / drops over the last 7 days (z-score)
- Average revenue per participant
- Most profitable activity
"""

from typing import List, Optional

from smartgestion.core.formatting import format_amount
from smartgestion.core.stats import detect_anomalies
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    Insight,
    InsightCategory,
    InsightParameters,
    Sentiment,
)
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.financial")

RECENT_DAYS = 7


def _month_over_month(bundle: AggregateBundle, params: InsightParameters) -> Optional[Insight]:
    months = bundle.monthly_revenue
    if len(months) < 2:
        return None

    last = months[-1].revenue
    prev = months[-2].revenue
    change = (last - prev) / prev * 100 if prev > 0 else 0.0
    if abs(change) < params.month_change_min_pct:
        return None

    direction = "up" if change > 0 else "down"
    return Insight(
        category=InsightCategory.FINANCIAL,
        code="trend",
        text=f"Revenue for the latest month is {direction} {abs(change):.1f}% on the previous month",
        value=format_amount(last, params.currency),
        sentiment=Sentiment.POSITIVE if change > 0 else Sentiment.NEGATIVE,
    )


def _recent_spikes(bundle: AggregateBundle, params: InsightParameters) -> List[Insight]:
    if len(bundle.daily_revenue) < RECENT_DAYS:
        return []

    recent = bundle.daily_revenue[-RECENT_DAYS:]
    scored = detect_anomalies([d.revenue for d in recent], params.spike_z_threshold)
    threshold = params.spike_z_threshold

    spikes = [p for p in scored if p.z_score > threshold]
    drops = [p for p in scored if p.z_score < -threshold and p.value > 0]

    insights: List[Insight] = []
    if spikes:
        spike = max(spikes, key=lambda p: p.z_score)
        insights.append(
            Insight(
                category=InsightCategory.FINANCIAL,
                code="spike",
                text=f"Revenue spike detected on {recent[spike.index].day} "
                f"({spike.z_score:.1f}σ above normal)",
                value=format_amount(spike.value, params.currency),
                sentiment=Sentiment.INFO,
            )
        )
    if drops:
        drop = min(drops, key=lambda p: p.z_score)
        insights.append(
            Insight(
                category=InsightCategory.FINANCIAL,
                code="drop",
                text=f"Unusual revenue drop detected on {recent[drop.index].day}",
                value=format_amount(drop.value, params.currency),
                sentiment=Sentiment.WARNING,
            )
        )
    return insights


def _average_per_participant(
    bundle: AggregateBundle, params: InsightParameters
) -> Optional[Insight]:
    total_participants = len(bundle.participations)
    total_revenue = sum(p.amount for p in bundle.participations)
    if total_participants <= 0 or total_revenue <= 0:
        return None

    average = total_revenue / total_participants
    return Insight(
        category=InsightCategory.FINANCIAL,
        code="average",
        text=f"Average revenue per participant: {format_amount(average, params.currency, 0)}",
        value=format_amount(average, params.currency),
        sentiment=Sentiment.NEUTRAL,
    )


def _top_activity(bundle: AggregateBundle, params: InsightParameters) -> Optional[Insight]:
    if not bundle.activity_profitability:
        return None

    top = max(bundle.activity_profitability, key=lambda a: a.revenue)
    return Insight(
        category=InsightCategory.FINANCIAL,
        code="top_activity",
        text=f"Most profitable activity: «{top.name or 'N/A'}» "
        f"({format_amount(top.revenue, params.currency)})",
        value=format_amount(top.revenue, params.currency),
        sentiment=Sentiment.POSITIVE,
    )


def generate_financial_insights(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> List[Insight]:
    """Generate all financial insights for one bundle."""
    params = params or InsightParameters()
    insights: List[Insight] = []

    trend = _month_over_month(bundle, params)
    if trend:
        insights.append(trend)
    insights.extend(_recent_spikes(bundle, params))
    average = _average_per_participant(bundle, params)
    if average:
        insights.append(average)
    top = _top_activity(bundle, params)
    if top:
        insights.append(top)

    logger.info(f"Generated {len(insights)} financial insights", extra={"count": len(insights)})
    return insights
