"""Smart Gestion — Anomaly Engine.

Detects:
- Duplicate registrations (same person, same activity, close in time)
- Payment outliers (amounts far above the usual payment)
"""

from typing import Dict, List, Sequence, Tuple, Union

from smartgestion.core.stats import mean, std_dev, z_score
from smartgestion.models.analysis_models import DuplicateCandidate, PaymentOutlier
from smartgestion.models.participation_models import ParticipationRecord
from smartgestion.core.logging import get_logger

logger = get_logger("analyzer.anomaly")

DUPLICATE_WINDOW_HOURS = 24.0
OUTLIER_MULTIPLIER = 3.0
OUTLIER_MIN_SAMPLE = 5  # Positive amounts needed before z-scores mean anything


def detect_duplicate_candidates(
    records: Sequence[ParticipationRecord],
    window_hours: float = DUPLICATE_WINDOW_HOURS,
) -> List[DuplicateCandidate]:
    """Flag records registered shortly after the first one with the same key.

    Records are keyed by (normalized name, activity). Each record is compared
    only to the first record seen with its key, never to later duplicates.
    """
    first_seen: Dict[Tuple[str, Union[int, str, None]], ParticipationRecord] = {}
    duplicates: List[DuplicateCandidate] = []

    for record in records:
        key = (record.normalized_name, record.activity_id)
        previous = first_seen.get(key)
        if previous is None:
            first_seen[key] = record
            continue

        gap_hours = abs((record.created_at - previous.created_at).total_seconds()) / 3600
        if gap_hours < window_hours:
            duplicates.append(
                DuplicateCandidate(current=record, previous=previous, hours_apart=gap_hours)
            )

    logger.info(
        f"Found {len(duplicates)} duplicate candidates in {len(records)} records",
        extra={"count": len(duplicates)},
    )
    return duplicates


def detect_payment_outliers(
    records: Sequence[ParticipationRecord],
    threshold_multiplier: float = OUTLIER_MULTIPLIER,
    min_sample: int = OUTLIER_MIN_SAMPLE,
) -> List[PaymentOutlier]:
    """Flag payments whose z-score over all positive amounts exceeds the multiplier."""
    amounts = [r.amount for r in records if r.amount > 0]
    if len(amounts) < min_sample:
        logger.info(
            f"Skipping payment outlier detection: {len(amounts)} positive amounts (< {min_sample})"
        )
        return []

    m = mean(amounts)
    s = std_dev(amounts)

    outliers: List[PaymentOutlier] = []
    for record in records:
        if record.amount <= 0:
            continue
        z = z_score(record.amount, m, s)
        if z > threshold_multiplier:
            outliers.append(PaymentOutlier(record=record, z_score=z))

    logger.info(
        f"Found {len(outliers)} payment outliers among {len(amounts)} payments",
        extra={"count": len(outliers)},
    )
    return outliers
