import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from smartgestion.analyzer.pipeline import (
    SOURCE_FALLBACK,
    SOURCE_PRIMARY,
    build_report,
    fetch_bundle,
    run_analysis,
)
from smartgestion.config import settings
from smartgestion.connectors.store.client import StoreAPIError, StoreClient
from smartgestion.models.aggregate_models import (
    AggregateBundle,
    FacultyParticipationPoint,
    MonthlyRevenuePoint,
)
from smartgestion.models.participation_models import ParticipationRecord

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _record(record_id: int, hours_ago: float, amount: float = 500) -> ParticipationRecord:
    return ParticipationRecord(
        id=record_id,
        participant_name=f"Participant {record_id}",
        amount=amount,
        created_at=NOW - timedelta(hours=hours_ago),
        activity_id=record_id % 3,
    )


class FakeEndpoints:
    """Stands in for StoreEndpoints; each fetch returns or raises a canned value."""

    def __init__(self, fail=(), participations=None, fallback_error=None):
        self.fail = set(fail)
        self.participations = participations or []
        self.fallback_error = fallback_error
        self.participation_limits = []

    async def _view(self, name, value):
        if name in self.fail:
            raise StoreAPIError(f"{name} is down", 503)
        return value

    async def fetch_daily_revenue(self, days=90, today=None):
        return await self._view("daily_revenue", [])

    async def fetch_monthly_revenue(self, months=12):
        return await self._view(
            "monthly_revenue",
            [
                MonthlyRevenuePoint(month="2024-01", revenue=1000),
                MonthlyRevenuePoint(month="2024-02", revenue=1200),
            ],
        )

    async def fetch_hourly_participation(self):
        return await self._view("hourly_participation", [])

    async def fetch_faculty_participation(self):
        return await self._view(
            "faculty_participation",
            [FacultyParticipationPoint(faculty="Sciences", participation_count=4)],
        )

    async def fetch_activity_type_performance(self):
        return await self._view("activity_type_performance", [])

    async def fetch_activity_profitability(self, limit=20):
        return await self._view("activity_profitability", [])

    async def fetch_recurrent_users(self, limit=50):
        return await self._view("recurrent_users", [])

    async def fetch_participations(self, limit=5000):
        self.participation_limits.append(limit)
        if self.fallback_error and len(self.participation_limits) > 1:
            raise self.fallback_error
        return await self._view("participations", self.participations)


ALL_AGGREGATES = (
    "daily_revenue",
    "monthly_revenue",
    "hourly_participation",
    "faculty_participation",
    "activity_type_performance",
    "activity_profitability",
    "recurrent_users",
)


def test_single_failed_view_degrades_to_empty() -> None:
    endpoints = FakeEndpoints(fail={"monthly_revenue"}, participations=[_record(1, 2)])
    bundle, source = asyncio.run(fetch_bundle(endpoints))

    assert source == SOURCE_PRIMARY
    assert bundle.monthly_revenue == []
    assert bundle.faculty_participation[0].faculty == "Sciences"
    assert [r.id for r in bundle.participations] == [1]
    assert endpoints.participation_limits == [settings.participations_limit]


def test_failed_participations_view_keeps_the_aggregates() -> None:
    endpoints = FakeEndpoints(fail={"participations"})
    bundle, source = asyncio.run(fetch_bundle(endpoints))

    assert source == SOURCE_PRIMARY
    assert bundle.participations == []
    assert len(bundle.monthly_revenue) == 2


def test_all_aggregates_failing_switches_to_fallback() -> None:
    records = [_record(1, 2, 300), _record(2, 30, 700)]
    endpoints = FakeEndpoints(fail=ALL_AGGREGATES, participations=records)
    bundle, source = asyncio.run(fetch_bundle(endpoints))

    assert source == SOURCE_FALLBACK
    assert endpoints.participation_limits == [
        settings.participations_limit,
        settings.fallback_participations_limit,
    ]
    assert sum(m.revenue for m in bundle.monthly_revenue) == 1000
    assert len(bundle.participations) == 2


def test_fallback_fetch_failure_propagates() -> None:
    endpoints = FakeEndpoints(
        fail=ALL_AGGREGATES, fallback_error=StoreAPIError("participations is down", 503)
    )
    with pytest.raises(StoreAPIError):
        asyncio.run(fetch_bundle(endpoints))


def test_build_report_adds_forecast_and_heatmap() -> None:
    bundle = AggregateBundle(
        monthly_revenue=[
            MonthlyRevenuePoint(month="2024-01", revenue=1000),
            MonthlyRevenuePoint(month="2024-02", revenue=1200),
        ],
        participations=[_record(1, 2), _record(2, 50)],
    )
    report = build_report(bundle, SOURCE_PRIMARY, NOW)

    assert report.source == SOURCE_PRIMARY
    assert report.currency == settings.currency
    assert len(report.forecast) == settings.forecast_periods
    assert [p.period for p in report.forecast] == [1, 2, 3]
    assert len(report.heatmap) == 7
    assert all(len(row.values) == settings.heatmap_weeks for row in report.heatmap)
    assert sum(sum(row.values) for row in report.heatmap) == 2
    assert report.insights.financial[0].code == "trend"


# ── End to end against a mocked store ──


def _store_handler(fail_views: bool):
    def handler(request: httpx.Request) -> httpx.Response:
        resource = request.url.path.rsplit("/", 1)[-1]
        if resource == "participations":
            rows = [
                {
                    "id": i,
                    "nom_complet": f"Participant {i}",
                    "montant": 500,
                    "type_participant": "etudiant",
                    "statut_paiement": "valide",
                    "created_at": (NOW - timedelta(days=i)).isoformat(),
                    "activity_id": 1,
                    "faculty_id": 1,
                    "activities": {"nom": "Python 101", "capacite": 40, "type_id": 1, "activity_types": {"nom": "Workshop"}},
                    "faculties": {"nom": "Sciences"},
                }
                for i in range(1, 6)
            ]
            return httpx.Response(200, json=rows)
        if fail_views:
            return httpx.Response(
                404, json={"message": f'relation "{resource}" does not exist', "code": "42P01"}
            )
        if resource == "v_analytics_monthly_revenue":
            return httpx.Response(
                200,
                json=[
                    {"mois": "2024-02-01", "revenu": 1200, "nb_paiements": 3},
                    {"mois": "2024-01-01", "revenu": 1000, "nb_paiements": 2},
                ],
            )
        return httpx.Response(200, json=[])

    return handler


def _client(fail_views: bool) -> StoreClient:
    return StoreClient(
        base_url="https://store.test/rest/v1",
        api_key="test-key",
        transport=httpx.MockTransport(_store_handler(fail_views)),
        retry_base_delay=0,
    )


def test_run_analysis_primary_path() -> None:
    report = asyncio.run(run_analysis(client=_client(fail_views=False), now=NOW))

    assert report.source == SOURCE_PRIMARY
    assert [m.month for m in report.bundle.monthly_revenue] == ["2024-01", "2024-02"]
    assert report.insights.financial[0].value == "1 200 FC"
    assert len(report.bundle.participations) == 5


def test_run_analysis_falls_back_when_views_are_missing() -> None:
    report = asyncio.run(run_analysis(client=_client(fail_views=True), now=NOW))

    assert report.source == SOURCE_FALLBACK
    assert sum(m.revenue for m in report.bundle.monthly_revenue) == 2500
    assert report.bundle.activity_type_performance[0].activity_type == "Workshop"
    assert report.bundle.activity_profitability[0].fill_rate_pct == pytest.approx(12.5)
