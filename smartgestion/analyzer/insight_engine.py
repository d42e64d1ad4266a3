"""Smart Gestion — Insight Engine.

Runs every generator and detector over one aggregate bundle and composes the
report. Pure: no I/O, no clock, no shared state.
"""

from smartgestion.analyzer.activity_engine import generate_activity_insights
from smartgestion.analyzer.anomaly_engine import (
    detect_duplicate_candidates,
    detect_payment_outliers,
)
from smartgestion.analyzer.behavioral_engine import generate_behavioral_insights
from smartgestion.analyzer.financial_engine import generate_financial_insights
from smartgestion.analyzer.participation_engine import generate_participation_insights
from smartgestion.analyzer.recommendation_engine import generate_recommendations
from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.analysis_models import (
    AnomalyReport,
    InsightParameters,
    InsightReport,
)


def run_insight_engine(
    bundle: AggregateBundle, params: InsightParameters | None = None
) -> InsightReport:
    """Generate all insights, anomalies and recommendations for one bundle."""
    params = params or InsightParameters()

    duplicates = detect_duplicate_candidates(
        bundle.participations, window_hours=params.duplicate_window_hours
    )
    outliers = detect_payment_outliers(
        bundle.participations,
        threshold_multiplier=params.payment_outlier_multiplier,
        min_sample=params.payment_outlier_min_sample,
    )

    return InsightReport(
        financial=generate_financial_insights(bundle, params),
        participation=generate_participation_insights(bundle, params),
        activity=generate_activity_insights(bundle, params),
        behavioral=generate_behavioral_insights(bundle, params),
        recommendations=generate_recommendations(bundle, params),
        anomalies=AnomalyReport(
            duplicates=duplicates[: params.max_anomalies],
            payment_outliers=outliers[: params.max_anomalies],
        ),
    )
