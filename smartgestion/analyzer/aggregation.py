"""Smart Gestion — Fallback Aggregation.

Recomputes every aggregate view directly from raw participation records when
the store's precomputed views are unavailable. One pass over the records fills
all the grouping maps at once; the output has exactly the shapes the views
return, so analyzers never need to know which path built the bundle.
"""

from collections import defaultdict
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, List, Optional, Sequence
from zoneinfo import ZoneInfo

from smartgestion.config import settings
from smartgestion.core.formatting import HEATMAP_DAY_LABELS
from smartgestion.core.logging import get_logger
from smartgestion.models.aggregate_models import (
    ActivityProfitabilityRow,
    ActivityTypePerformance,
    AggregateBundle,
    DailyRevenuePoint,
    FacultyParticipationPoint,
    HourlyParticipationPoint,
    MonthlyRevenuePoint,
    RecurrentUserRow,
)
from smartgestion.models.analysis_models import HeatmapRow
from smartgestion.models.participation_models import ParticipantKind, ParticipationRecord

logger = get_logger("analyzer.aggregation")

UNKNOWN_FACULTY = "Unspecified"
UNKNOWN_TYPE = "Other"
UNKNOWN_KEY = "unknown"


def _zone(tz: Optional[str]) -> tzinfo:
    return ZoneInfo(tz or settings.timezone)


def localize(moment: datetime, zone: tzinfo) -> datetime:
    """Express a timestamp in the institution's timezone; naive means UTC."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(zone)


def store_weekday(moment: datetime) -> int:
    """Weekday numbered the way the store does: 0 = Sunday … 6 = Saturday."""
    return (moment.weekday() + 1) % 7


def aggregate_from_records(
    records: Sequence[ParticipationRecord],
    tz: Optional[str] = None,
    daily_days: int = 90,
    months: int = 12,
) -> AggregateBundle:
    """Build a full AggregateBundle from raw records in a single pass."""
    zone = _zone(tz)

    by_day: Dict[str, Dict[str, float]] = defaultdict(lambda: {"revenue": 0.0, "count": 0})
    by_month: Dict[str, Dict[str, float]] = defaultdict(lambda: {"revenue": 0.0, "count": 0})
    by_hour: Dict[tuple[int, int], Dict[str, float]] = defaultdict(
        lambda: {"revenue": 0.0, "count": 0}
    )
    by_faculty: Dict[str, dict] = {}
    by_type: Dict[str, dict] = {}
    by_activity: Dict[str, dict] = {}
    recurrent: Dict[str, dict] = {}

    for p in records:
        moment = localize(p.created_at, zone)
        amount = p.amount

        day = by_day[moment.strftime("%Y-%m-%d")]
        day["revenue"] += amount
        day["count"] += 1

        month = by_month[moment.strftime("%Y-%m")]
        month["revenue"] += amount
        month["count"] += 1

        hour = by_hour[(store_weekday(moment), moment.hour)]
        hour["revenue"] += amount
        hour["count"] += 1

        fkey = str(p.faculty_id) if p.faculty_id is not None else UNKNOWN_KEY
        if fkey not in by_faculty:
            by_faculty[fkey] = {
                "faculty": (p.faculty.name if p.faculty else "") or UNKNOWN_FACULTY,
                "count": 0,
                "revenue": 0.0,
                "students": 0,
                "visitors": 0,
            }
        faculty = by_faculty[fkey]
        faculty["count"] += 1
        faculty["revenue"] += amount
        if p.participant_kind == ParticipantKind.STUDENT:
            faculty["students"] += 1
        else:
            faculty["visitors"] += 1

        activity = p.activity
        tkey = (
            str(activity.type_id)
            if activity is not None and activity.type_id is not None
            else UNKNOWN_KEY
        )
        if tkey not in by_type:
            type_name = (
                activity.activity_type.name
                if activity is not None and activity.activity_type is not None
                else ""
            )
            by_type[tkey] = {"type": type_name or UNKNOWN_TYPE, "revenue": 0.0, "count": 0}
        by_type[tkey]["revenue"] += amount
        by_type[tkey]["count"] += 1

        if p.activity_id is not None:
            akey = str(p.activity_id)
            if akey not in by_activity:
                by_activity[akey] = {
                    "id": p.activity_id,
                    "name": activity.name if activity else "",
                    "type": by_type[tkey]["type"],
                    "capacity": activity.capacity if activity else 0,
                    "count": 0,
                    "revenue": 0.0,
                }
            by_activity[akey]["count"] += 1
            by_activity[akey]["revenue"] += amount

        name = p.normalized_name
        if name:
            user = recurrent.setdefault(
                name, {"count": 0, "activities": set(), "spent": 0.0}
            )
            user["count"] += 1
            user["activities"].add(p.activity_id)
            user["spent"] += amount

    daily = [
        DailyRevenuePoint(day=k, revenue=v["revenue"], payment_count=v["count"])
        for k, v in sorted(by_day.items())
    ]
    monthly = [
        MonthlyRevenuePoint(month=k, revenue=v["revenue"], payment_count=v["count"])
        for k, v in sorted(by_month.items())
    ]
    hourly = [
        HourlyParticipationPoint(
            hour=h, day_of_week=dow, participation_count=v["count"], revenue=v["revenue"]
        )
        for (dow, h), v in sorted(by_hour.items())
    ]
    faculties = sorted(
        (
            FacultyParticipationPoint(
                faculty=f["faculty"],
                participation_count=f["count"],
                revenue=f["revenue"],
                student_count=f["students"],
                visitor_count=f["visitors"],
            )
            for f in by_faculty.values()
        ),
        key=lambda row: row.participation_count,
        reverse=True,
    )
    types = sorted(
        (
            ActivityTypePerformance(
                activity_type=t["type"], revenue=t["revenue"], participation_count=t["count"]
            )
            for t in by_type.values()
        ),
        key=lambda row: row.revenue,
        reverse=True,
    )
    profitability = sorted(
        (
            ActivityProfitabilityRow(
                activity_id=a["id"],
                name=a["name"],
                activity_type=a["type"],
                participant_count=a["count"],
                capacity=a["capacity"],
                revenue=a["revenue"],
                fill_rate_pct=(a["count"] / a["capacity"] * 100) if a["capacity"] > 0 else None,
            )
            for a in by_activity.values()
        ),
        key=lambda row: row.revenue,
        reverse=True,
    )
    recurrent_users = sorted(
        (
            RecurrentUserRow(
                normalized_name=name,
                participation_count=u["count"],
                distinct_activities=len(u["activities"]),
                total_spent=u["spent"],
            )
            for name, u in recurrent.items()
            if u["count"] > 1
        ),
        key=lambda row: row.participation_count,
        reverse=True,
    )

    logger.info(
        f"Recomputed aggregates from {len(records)} records: "
        f"{len(daily)} days, {len(monthly)} months, {len(faculties)} faculties, "
        f"{len(types)} types, {len(recurrent_users)} recurrent users",
        extra={"source": "fallback", "count": len(records)},
    )

    return AggregateBundle(
        daily_revenue=daily[-daily_days:] if daily_days > 0 else [],
        monthly_revenue=monthly[-months:] if months > 0 else [],
        hourly_participation=hourly,
        faculty_participation=faculties,
        activity_type_performance=types,
        activity_profitability=profitability,
        recurrent_users=recurrent_users,
        participations=list(records),
    )


def participation_heatmap(
    records: Sequence[ParticipationRecord],
    now: datetime,
    weeks: int = 12,
    tz: Optional[str] = None,
) -> List[HeatmapRow]:
    """Registrations per weekday (Mon…Sun) over the trailing `weeks` weeks.

    The last column is the current week; anything older is clamped into the
    first column and future-dated records are ignored.
    """
    if weeks <= 0:
        return []
    zone = _zone(tz)
    now_local = localize(now, zone)
    grid = [[0] * weeks for _ in HEATMAP_DAY_LABELS]

    for p in records:
        moment = localize(p.created_at, zone)
        elapsed = now_local - moment
        if elapsed < timedelta(0):
            continue
        week_diff = elapsed // timedelta(weeks=1)
        column = weeks - 1 - min(week_diff, weeks - 1)
        grid[moment.weekday()][column] += 1

    return [
        HeatmapRow(label=label, values=values)
        for label, values in zip(HEATMAP_DAY_LABELS, grid)
    ]
