"""Smart Gestion — Participation Insight Engine.

Peak hour, busiest weekday, faculty dominance and the student / visitor split.
"""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from smartgestion.core.formatting import weekday_label
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    Insight,
    InsightCategory,
    InsightParameters,
    Sentiment,
)
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.participation")


def _peak(totals: Dict[int, int]) -> Optional[Tuple[int, int]]:
    """Highest total; ties go to the lowest key."""
    if not totals:
        return None
    return min(totals.items(), key=lambda kv: (-kv[1], kv[0]))


def _peak_times(bundle: AggregateBundle) -> List[Insight]:
    by_hour: Dict[int, int] = defaultdict(int)
    by_day: Dict[int, int] = defaultdict(int)
    for row in bundle.hourly_participation:
        by_hour[row.hour] += row.participation_count
        by_day[row.day_of_week] += row.participation_count

    insights: List[Insight] = []
    peak_hour = _peak(by_hour)
    if peak_hour:
        hour, count = peak_hour
        insights.append(
            Insight(
                category=InsightCategory.PARTICIPATION,
                code="peak_hour",
                text=f"Peak hour: {hour:02d}h ({count} registrations)",
                value=f"{hour}h",
                sentiment=Sentiment.POSITIVE,
            )
        )

    peak_day = _peak(by_day)
    if peak_day:
        dow, count = peak_day
        insights.append(
            Insight(
                category=InsightCategory.PARTICIPATION,
                code="peak_day",
                text=f"{weekday_label(dow)} is the busiest day ({count} registrations)",
                value=weekday_label(dow),
                sentiment=Sentiment.POSITIVE,
            )
        )
    return insights


def _faculty_dominance(
    bundle: AggregateBundle, params: InsightParameters
) -> Optional[Insight]:
    if len(bundle.faculty_participation) < 2:
        return None

    ranked = sorted(
        bundle.faculty_participation, key=lambda f: f.participation_count, reverse=True
    )
    first, second = ranked[0], ranked[1]
    if first.participation_count <= 0 or second.participation_count <= 0:
        return None

    ratio = first.participation_count / second.participation_count
    if ratio < params.faculty_dominance_ratio:
        return None

    return Insight(
        category=InsightCategory.PARTICIPATION,
        code="faculty_dominance",
        text=f"Participants from {first.faculty or 'N/A'} take part about {ratio:.1f}× "
        f"more than those from {second.faculty or 'the next faculty'}",
        value=f"{ratio:.1f}×",
        sentiment=Sentiment.INFO,
    )


def _student_visitor_split(bundle: AggregateBundle) -> Optional[Insight]:
    students = sum(f.student_count for f in bundle.faculty_participation)
    visitors = sum(f.visitor_count for f in bundle.faculty_participation)
    total = students + visitors
    if total <= 0:
        return None

    share = students / total * 100
    return Insight(
        category=InsightCategory.PARTICIPATION,
        code="student_ratio",
        text=f"Student / visitor split: {share:.0f}% students, {100 - share:.0f}% visitors",
        value=f"{share:.0f}%",
        sentiment=Sentiment.NEUTRAL,
    )


def generate_participation_insights(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> List[Insight]:
    """Generate all participation insights for one bundle."""
    params = params or InsightParameters()
    insights = _peak_times(bundle)

    dominance = _faculty_dominance(bundle, params)
    if dominance:
        insights.append(dominance)
    split = _student_visitor_split(bundle)
    if split:
        insights.append(split)

    logger.info(
        f"Generated {len(insights)} participation insights", extra={"count": len(insights)}
    )
    return insights
