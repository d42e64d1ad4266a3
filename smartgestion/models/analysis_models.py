"""Smart Gestion — Analysis Output Models (Versioned)."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from smartgestion.models.aggregate_models import AggregateBundle
from smartgestion.models.participation_models import ParticipationRecord


# ─────────────────────────────────────────────
# ENGINE PARAMETERS
# ─────────────────────────────────────────────


class InsightParameters(BaseModel):
    """Tunable thresholds for every analyzer.

    Defaults are the historical constants; the pipeline overrides them from
    settings.
    """

    model_config = ConfigDict(frozen=True)

    currency: str = "FC"
    month_change_min_pct: float = 5.0
    spike_z_threshold: float = 2.0
    payment_outlier_multiplier: float = 3.0
    payment_outlier_min_sample: int = 5
    duplicate_window_hours: float = 24.0
    underperformer_ratio: float = 0.5
    max_underperformers: int = 2
    faculty_dominance_ratio: float = 1.5
    low_fill_rate_pct: float = 50.0
    low_revenue_threshold: float = 1000.0
    rapid_registration_window: int = 50
    rapid_registration_gap_minutes: float = 5.0
    rapid_registration_min_records: int = 10
    max_recommendations: int = 5
    max_anomalies: int = 10


# ─────────────────────────────────────────────
# INSIGHT OUTPUT v1
# ─────────────────────────────────────────────


class InsightCategory(str, Enum):
    FINANCIAL = "financial"
    PARTICIPATION = "participation"
    ACTIVITY = "activity"
    BEHAVIORAL = "behavioral"


class Sentiment(str, Enum):
    """Coarse polarity used by the presentation layer for styling."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    WARNING = "warning"
    INFO = "info"
    NEUTRAL = "neutral"


class Insight(BaseModel):
    """A self-contained, human-readable finding."""

    model_config = ConfigDict(frozen=True)

    category: InsightCategory
    code: str  # machine-readable kind, e.g. "trend", "spike", "peak_hour"
    text: str
    value: Optional[str] = None
    sentiment: Sentiment = Sentiment.NEUTRAL


class RecommendationCategory(str, Enum):
    TIMING = "timing"
    SCHEDULING = "scheduling"
    MARKETING = "marketing"


class Recommendation(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    category: RecommendationCategory


class DuplicateCandidate(BaseModel):
    """Two near-identical registrations made within the duplicate window."""

    model_config = ConfigDict(frozen=True)

    current: ParticipationRecord
    previous: ParticipationRecord
    hours_apart: float


class PaymentOutlier(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: ParticipationRecord
    z_score: float


class AnomalyReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    duplicates: List[DuplicateCandidate] = []
    payment_outliers: List[PaymentOutlier] = []


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    period: int
    forecast: float


class InsightReport(BaseModel):
    """Output of one insight-engine run over one bundle."""

    model_config = ConfigDict(frozen=True)

    financial: List[Insight] = []
    participation: List[Insight] = []
    activity: List[Insight] = []
    behavioral: List[Insight] = []
    recommendations: List[Recommendation] = []
    anomalies: AnomalyReport = AnomalyReport()


class HeatmapRow(BaseModel):
    """Registrations for one weekday across the trailing weeks (oldest first)."""

    model_config = ConfigDict(frozen=True)

    label: str
    values: List[int]


class AnalyticsReport(BaseModel):
    """Smart Gestion Analytics Output v1 — everything the dashboard renders."""

    schema_version: str = "1.0.0"
    generated_at: str = ""
    currency: str = "FC"
    source: str = "primary"  # "primary" | "fallback"
    bundle: AggregateBundle = AggregateBundle()
    insights: InsightReport = InsightReport()
    forecast: List[ForecastPoint] = []
    heatmap: List[HeatmapRow] = []
