"""Smart Gestion — Forecast Engine.

Short-horizon revenue projection from recent history.

This is a deliberately naive linear extrapolation: the mean of the last few
periods plus the per-period slope between the first and last of them. It is
meant as an at-a-glance direction indicator on the dashboard, not as a
statistical model, and makes no claim about confidence.
"""

from typing import List, Sequence

from smartgestion.core.stats import mean
from smartgestion.models.analysis_models import ForecastPoint
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.forecast")

FORECAST_WINDOW = 6  # Most recent periods considered


def simple_forecast(history: Sequence[float], periods: int = 3) -> List[ForecastPoint]:
    """Project `periods` future values from the trailing window of `history`."""
    if not history or periods <= 0:
        return []

    window = list(history[-FORECAST_WINDOW:])
    avg = mean(window)
    trend = window[-1] - window[0] if len(window) >= 2 else 0.0
    slope = trend / len(window)

    # Revenue cannot go negative
    points = [
        ForecastPoint(period=step, forecast=max(0.0, avg + slope * step))
        for step in range(1, periods + 1)
    ]
    logger.info(
        f"Forecast {periods} periods from {len(window)} points (trend {trend:+.2f})",
        extra={"count": periods},
    )
    return points
