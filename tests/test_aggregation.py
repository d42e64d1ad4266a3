from datetime import datetime, timedelta, timezone

import pytest

from smartgestion.analyzer.aggregation import aggregate_from_records, participation_heatmap
from smartgestion.models.participation_models import ParticipationRecord


def _row(record_id: int, at: datetime, **fields) -> ParticipationRecord:
    payload = {"id": record_id, "created_at": at.isoformat()}
    payload.update(fields)
    return ParticipationRecord.model_validate(payload)


def _store_rows() -> list[ParticipationRecord]:
    workshop = {"nom": "Python 101", "capacite": 20, "type_id": 3, "activity_types": {"nom": "Workshop"}}
    conference = {"nom": "AI Day", "capacite": 0, "type_id": 4, "activity_types": {"nom": "Conference"}}
    return [
        # 2024-01-15 is a Monday, 2024-02-03 a Saturday
        _row(
            1,
            datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc),
            nom_complet="Jean Dupont",
            montant=1000,
            type_participant="etudiant",
            statut_paiement="valide",
            activity_id=10,
            faculty_id=1,
            activities=workshop,
            faculties={"nom": "Sciences"},
        ),
        _row(
            2,
            datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc),
            nom_complet="jean dupont ",
            montant="500",
            type_participant="visiteur",
            activity_id=10,
            faculty_id=1,
            activities=workshop,
            faculties={"nom": "Sciences"},
        ),
        _row(
            3,
            datetime(2024, 2, 3, 9, 0, tzinfo=timezone.utc),
            nom_complet="Awa",
            montant=2000,
            type_participant="etudiant",
            activity_id=11,
            faculty_id=None,
            activities=conference,
            faculties=None,
        ),
    ]


def test_fallback_builds_every_view_in_one_pass() -> None:
    bundle = aggregate_from_records(_store_rows(), tz="UTC")

    assert [(d.day, d.revenue, d.payment_count) for d in bundle.daily_revenue] == [
        ("2024-01-15", 1500.0, 2),
        ("2024-02-03", 2000.0, 1),
    ]
    assert [(m.month, m.revenue, m.payment_count) for m in bundle.monthly_revenue] == [
        ("2024-01", 1500.0, 2),
        ("2024-02", 2000.0, 1),
    ]
    assert [
        (h.day_of_week, h.hour, h.participation_count) for h in bundle.hourly_participation
    ] == [(1, 9, 1), (1, 10, 1), (6, 9, 1)]

    sciences, unspecified = bundle.faculty_participation
    assert sciences.faculty == "Sciences"
    assert (sciences.participation_count, sciences.student_count, sciences.visitor_count) == (2, 1, 1)
    assert sciences.revenue == 1500.0
    assert unspecified.faculty == "Unspecified"
    assert unspecified.student_count == 1

    assert [(t.activity_type, t.revenue) for t in bundle.activity_type_performance] == [
        ("Conference", 2000.0),
        ("Workshop", 1500.0),
    ]

    conference_row, workshop_row = bundle.activity_profitability
    assert conference_row.activity_id == 11
    assert conference_row.fill_rate_pct is None
    assert workshop_row.name == "Python 101"
    assert workshop_row.participant_count == 2
    assert workshop_row.fill_rate_pct == pytest.approx(10.0)

    assert len(bundle.recurrent_users) == 1
    jean = bundle.recurrent_users[0]
    assert jean.normalized_name == "jean dupont"
    assert (jean.participation_count, jean.distinct_activities, jean.total_spent) == (2, 1, 1500.0)

    assert len(bundle.participations) == 3


def test_fallback_buckets_in_local_timezone() -> None:
    # 23:30 UTC on Jan 31 is 00:30 on Feb 1 in Kinshasa (UTC+1)
    rows = [_row(1, datetime(2024, 1, 31, 23, 30, tzinfo=timezone.utc), montant=100)]
    bundle = aggregate_from_records(rows, tz="Africa/Kinshasa")
    assert bundle.daily_revenue[0].day == "2024-02-01"
    assert bundle.monthly_revenue[0].month == "2024-02"
    assert bundle.hourly_participation[0].hour == 0


def test_fallback_keeps_only_the_latest_days() -> None:
    start = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    rows = [_row(i, start + timedelta(days=i), montant=10) for i in range(5)]
    bundle = aggregate_from_records(rows, tz="UTC", daily_days=3)
    assert [d.day for d in bundle.daily_revenue] == ["2024-05-03", "2024-05-04", "2024-05-05"]


def test_fallback_on_no_records_is_an_empty_bundle() -> None:
    bundle = aggregate_from_records([], tz="UTC")
    assert bundle.daily_revenue == []
    assert bundle.hourly_participation == []
    assert bundle.recurrent_users == []
    assert bundle.participations == []


def test_missing_amounts_count_as_zero() -> None:
    rows = [
        _row(1, datetime(2024, 6, 1, 8, 0, tzinfo=timezone.utc), montant=None),
        _row(2, datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc), montant="n/a"),
    ]
    bundle = aggregate_from_records(rows, tz="UTC")
    assert bundle.daily_revenue[0].revenue == 0
    assert bundle.daily_revenue[0].payment_count == 2


def test_heatmap_places_registrations_by_weekday_and_week() -> None:
    now = datetime(2024, 3, 18, 12, 0, tzinfo=timezone.utc)  # Monday
    rows = [
        _row(1, now - timedelta(hours=1)),  # Monday, current week
        _row(2, now - timedelta(days=8)),  # Sunday, previous week
        _row(3, now - timedelta(days=200)),  # Thursday, clamped into the oldest column
        _row(4, now + timedelta(days=1)),  # future, ignored
    ]
    heatmap = participation_heatmap(rows, now, weeks=12, tz="UTC")

    assert [row.label for row in heatmap] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert all(len(row.values) == 12 for row in heatmap)
    assert heatmap[0].values[11] == 1
    assert heatmap[6].values[10] == 1
    assert heatmap[3].values[0] == 1
    assert sum(sum(row.values) for row in heatmap) == 3
