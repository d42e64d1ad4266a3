"""Smart Gestion — Analysis Pipeline Orchestrator.

Runs the full data flow:
  fan-out fetch (8 views) → bundle (or fallback recomputation) → insight engine
  → forecast + heatmap → AnalyticsReport

Per-view failures degrade to empty views. Only when every aggregate view is
unavailable does the pipeline switch to recomputing the bundle from one raw
record fetch; the two paths are never mixed within one bundle.
"""

import asyncio
import time
from datetime import date, datetime, timezone
from typing import Any, List, Optional, Tuple

from smartgestion.config import settings
from smartgestion.connectors.store.client import StoreClient
from smartgestion.connectors.store.endpoints import StoreEndpoints
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import AnalyticsReport, InsightParameters
from smartgestion.analyzer.aggregation import aggregate_from_records, participation_heatmap
from smartgestion.analyzer.forecast_engine import simple_forecast
from smartgestion.analyzer.insight_engine import run_insight_engine
from smartgestion.core.logging import get_logger
from smartgestion.core.view_registry import ViewKind, views_by_kind

logger = get_logger("analyzer.pipeline")

ANALYSIS_SCHEMA_VERSION = settings.analysis_schema_version

SOURCE_PRIMARY = "primary"
SOURCE_FALLBACK = "fallback"

# Bundle field for each aggregate fetch, in gather order
AGGREGATE_FIELDS = tuple(v.name for v in views_by_kind(ViewKind.AGGREGATE))


def insight_parameters() -> InsightParameters:
    """Map configured thresholds onto engine parameters."""
    fields = set(InsightParameters.model_fields)
    return InsightParameters(**settings.model_dump(include=fields))


def _unwrap(name: str, result: Any) -> List[Any]:
    """Swap a failed view for an empty one."""
    if isinstance(result, Exception):
        logger.error(f"View {name} failed: {result}", extra={"view": name})
        return []
    if isinstance(result, BaseException):
        raise result
    return result


async def fetch_bundle(
    endpoints: StoreEndpoints,
    today: Optional[date] = None,
) -> Tuple[AggregateBundle, str]:
    """Fetch all eight views concurrently and join them into one bundle.

    Returns the bundle and which path produced it ("primary" / "fallback").
    """
    started = time.perf_counter()
    results = await asyncio.gather(
        endpoints.fetch_daily_revenue(settings.daily_revenue_days, today=today),
        endpoints.fetch_monthly_revenue(settings.monthly_revenue_months),
        endpoints.fetch_hourly_participation(),
        endpoints.fetch_faculty_participation(),
        endpoints.fetch_activity_type_performance(),
        endpoints.fetch_activity_profitability(settings.profitability_limit),
        endpoints.fetch_recurrent_users(settings.recurrent_users_limit),
        endpoints.fetch_participations(settings.participations_limit),
        return_exceptions=True,
    )
    aggregates, participations = results[: len(AGGREGATE_FIELDS)], results[-1]

    if all(isinstance(r, Exception) for r in aggregates):
        logger.warning(
            "All analytics views unavailable, recomputing from raw participations",
            extra={"source": SOURCE_FALLBACK},
        )
        # Store failures here are not recoverable and propagate
        records = await endpoints.fetch_participations(settings.fallback_participations_limit)
        bundle = aggregate_from_records(
            records,
            tz=settings.timezone,
            daily_days=settings.daily_revenue_days,
            months=settings.monthly_revenue_months,
        )
        source = SOURCE_FALLBACK
    else:
        views = {
            name: _unwrap(name, result) for name, result in zip(AGGREGATE_FIELDS, aggregates)
        }
        bundle = AggregateBundle(
            **views, participations=_unwrap("participations", participations)
        )
        source = SOURCE_PRIMARY

    logger.info(
        f"Bundle ready from {source} path: {len(bundle.participations)} records",
        extra={
            "source": source,
            "count": len(bundle.participations),
            "duration_ms": round((time.perf_counter() - started) * 1000, 1),
        },
    )
    return bundle, source


def build_report(
    bundle: AggregateBundle,
    source: str,
    now: datetime,
    params: Optional[InsightParameters] = None,
) -> AnalyticsReport:
    """Compose the dashboard report from a fetched bundle."""
    params = params or insight_parameters()
    insights = run_insight_engine(bundle, params)
    forecast = simple_forecast(
        [m.revenue for m in bundle.monthly_revenue], settings.forecast_periods
    )
    heatmap = participation_heatmap(
        bundle.participations, now, weeks=settings.heatmap_weeks, tz=settings.timezone
    )

    return AnalyticsReport(
        schema_version=ANALYSIS_SCHEMA_VERSION,
        generated_at=now.isoformat(),
        currency=params.currency,
        source=source,
        bundle=bundle,
        insights=insights,
        forecast=forecast,
        heatmap=heatmap,
    )


async def run_analysis(
    client: Optional[StoreClient] = None,
    now: Optional[datetime] = None,
) -> AnalyticsReport:
    """Execute the full analytics pipeline against the store."""
    now = now or datetime.now(timezone.utc)
    logger.info(f"Starting analysis pipeline at {now.isoformat()}")

    owns_client = client is None
    client = client or StoreClient()
    try:
        bundle, source = await fetch_bundle(StoreEndpoints(client), today=now.date())
    finally:
        if owns_client:
            await client.close()

    report = build_report(bundle, source, now)
    insights = report.insights
    logger.info(
        f"Analysis complete. Source: {source}. "
        f"Insights: {len(insights.financial) + len(insights.participation) + len(insights.activity) + len(insights.behavioral)}. "
        f"Recommendations: {len(insights.recommendations)}. "
        f"Duplicates: {len(insights.anomalies.duplicates)}. "
        f"Payment outliers: {len(insights.anomalies.payment_outliers)}",
        extra={"source": source},
    )
    return report
