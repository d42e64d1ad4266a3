"""Smart Gestion — Statistical Primitives.

Mean, population standard deviation and z-scores shared by every analyzer,
plus the single coercion used wherever a monetary value is read.
"""

import math
from typing import Any, List, Sequence

from pydantic import BaseModel


class ZScorePoint(BaseModel):
    """One value of a series with its standardized distance from the mean."""

    index: int
    value: float
    z_score: float
    is_anomaly: bool = False


def safe_amount(value: Any) -> float:
    """Convert a store value to a float amount; missing or garbage reads as 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(amount) or math.isinf(amount):
        return 0.0
    return amount


def safe_int(value: Any) -> int:
    """Integer counterpart of safe_amount for counts."""
    return int(safe_amount(value))


def mean(values: Sequence[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation (divides by N)."""
    if not values:
        return 0.0
    m = mean(values)
    return math.sqrt(sum((v - m) ** 2 for v in values) / len(values))


def z_score(value: float, mean_value: float, std: float) -> float:
    # A zero spread means every value equals the mean, so z is 0 for all of them
    if std == 0:
        std = 1.0
    return (value - mean_value) / std


def detect_anomalies(values: Sequence[float], threshold: float = 2.0) -> List[ZScorePoint]:
    """Score every value of a series; |z| above threshold is flagged."""
    m = mean(values)
    s = std_dev(values)
    points: List[ZScorePoint] = []
    for i, v in enumerate(values):
        z = z_score(v, m, s)
        points.append(
            ZScorePoint(index=i, value=v, z_score=z, is_anomaly=abs(z) > threshold)
        )
    return points
