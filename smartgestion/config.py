"""Smart Gestion — Central Configuration via Pydantic Settings."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Managed store (REST) ──
    store_url: str = ""
    store_api_key: str = ""
    store_timeout: float = 30.0

    # ── App ──
    log_level: str = "INFO"
    timezone: str = "Africa/Kinshasa"
    currency: str = "FC"
    analysis_schema_version: str = "1.0.0"

    # ── Fetch windows ──
    daily_revenue_days: int = 90
    monthly_revenue_months: int = 12
    profitability_limit: int = 15
    recurrent_users_limit: int = 30
    participations_limit: int = 3000
    fallback_participations_limit: int = 2000

    # ── Report ──
    forecast_periods: int = 3
    heatmap_weeks: int = 12

    # ── Analyzer thresholds ──
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

    @property
    def store_rest_url(self) -> str:
        """Base URL of the store's REST interface."""
        return f"{self.store_url.rstrip('/')}/rest/v1"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
