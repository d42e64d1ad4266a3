from datetime import datetime, timedelta, timezone

import pytest

from smartgestion.analyzer.anomaly_engine import (
    detect_duplicate_candidates,
    detect_payment_outliers,
)
from smartgestion.models.participation_models import ParticipationRecord

T0 = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)


def _record(
    record_id: int,
    name: str = "Jean Dupont",
    activity_id: int = 1,
    at: datetime = T0,
    amount: float = 0.0,
) -> ParticipationRecord:
    return ParticipationRecord(
        id=record_id,
        participant_name=name,
        activity_id=activity_id,
        created_at=at,
        amount=amount,
    )


def test_same_person_same_activity_one_hour_apart_is_a_duplicate() -> None:
    rows = [
        ParticipationRecord.model_validate(
            {"id": 1, "nom_complet": "Jean Dupont", "activity_id": 1, "created_at": T0.isoformat()}
        ),
        ParticipationRecord.model_validate(
            {
                "id": 2,
                "nom_complet": "jean dupont",
                "activity_id": 1,
                "created_at": (T0 + timedelta(hours=1)).isoformat(),
            }
        ),
    ]
    duplicates = detect_duplicate_candidates(rows)
    assert len(duplicates) == 1
    assert duplicates[0].hours_apart == pytest.approx(1.0)
    assert duplicates[0].previous.id == 1
    assert duplicates[0].current.id == 2


def test_duplicate_window_boundary() -> None:
    just_inside = [_record(1), _record(2, at=T0 + timedelta(hours=23, minutes=59))]
    just_outside = [_record(1), _record(2, at=T0 + timedelta(hours=24, minutes=1))]
    assert len(detect_duplicate_candidates(just_inside)) == 1
    assert detect_duplicate_candidates(just_outside) == []


def test_different_activity_is_not_a_duplicate() -> None:
    rows = [_record(1, activity_id=1), _record(2, activity_id=2, at=T0 + timedelta(minutes=5))]
    assert detect_duplicate_candidates(rows) == []


def test_later_duplicates_are_compared_to_the_first_record_only() -> None:
    rows = [
        _record(1),
        _record(2, at=T0 + timedelta(hours=20)),
        _record(3, at=T0 + timedelta(hours=30)),
    ]
    duplicates = detect_duplicate_candidates(rows)
    assert [d.current.id for d in duplicates] == [2]


def test_payment_outliers_need_five_positive_amounts() -> None:
    rows = [
        _record(1, amount=0),
        _record(2, amount=0),
        _record(3, amount=100),
        _record(4, amount=100),
        _record(5, amount=100),
        _record(6, amount=1_000_000_000),
    ]
    assert detect_payment_outliers(rows) == []


def test_payment_outlier_is_flagged_above_multiplier() -> None:
    rows = [_record(i, amount=100) for i in range(20)]
    rows.append(_record(99, amount=10_000))
    outliers = detect_payment_outliers(rows)
    assert len(outliers) == 1
    assert outliers[0].record.id == 99
    assert outliers[0].z_score > 3


def test_payment_outlier_multiplier_is_configurable() -> None:
    rows = [_record(i, amount=100) for i in range(20)]
    rows.append(_record(99, amount=10_000))
    assert detect_payment_outliers(rows, threshold_multiplier=5) == []


def test_identical_payments_are_never_outliers() -> None:
    rows = [_record(i, amount=250) for i in range(10)]
    assert detect_payment_outliers(rows) == []


def test_offset_less_timestamps_compare_as_utc() -> None:
    rows = [
        ParticipationRecord.model_validate(
            {"id": 1, "nom_complet": "Awa", "activity_id": 1, "created_at": "2024-03-01T10:00:00+00:00"}
        ),
        ParticipationRecord.model_validate(
            {"id": 2, "nom_complet": "awa", "activity_id": 1, "created_at": "2024-03-01T11:00:00"}
        ),
    ]
    duplicates = detect_duplicate_candidates(rows)
    assert len(duplicates) == 1
    assert duplicates[0].hours_apart == pytest.approx(1.0)
