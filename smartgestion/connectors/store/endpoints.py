"""Smart Gestion — Store Analytics Endpoints.

Fetch functions for each analytics view and the raw participation table.
Each returns typed records over a bounded recent window.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Dict, List

from smartgestion.connectors.store.client import StoreClient
from smartgestion.connectors.store.transformer import transform_rows
from smartgestion.core.view_registry import VIEWS
from smartgestion.models.aggregate_models import (
    ActivityProfitabilityRow,
    ActivityTypePerformance,
    DailyRevenuePoint,
    FacultyParticipationPoint,
    HourlyParticipationPoint,
    MonthlyRevenuePoint,
    RecurrentUserRow,
)
from smartgestion.models.participation_models import ParticipationRecord
from smartgestion.core.logging import get_logger

logger = get_logger("store.endpoints")


class StoreEndpoints:
    """Read analytics data from the store."""

    def __init__(self, client: StoreClient):
        self.client = client

    async def _fetch_view(
        self,
        name: str,
        limit: int | None = None,
        filters: Dict[str, str] | None = None,
    ) -> list:
        view = VIEWS[name]
        rows = await self.client.select(
            view.resource,
            select=view.select,
            order=view.order,
            limit=limit,
            filters=filters,
        )
        return transform_rows(rows, view.model, view=name)

    # ── Revenue Time Series ──

    async def fetch_daily_revenue(
        self, days: int = 90, today: date | None = None
    ) -> List[DailyRevenuePoint]:
        """Daily validated revenue for the last `days` days, oldest first."""
        today = today or datetime.now(timezone.utc).date()
        since = (today - timedelta(days=days)).isoformat()
        return await self._fetch_view("daily_revenue", filters={"jour": f"gte.{since}"})

    async def fetch_monthly_revenue(self, months: int = 12) -> List[MonthlyRevenuePoint]:
        """The latest `months` months, returned oldest first."""
        points = await self._fetch_view("monthly_revenue", limit=months)
        return list(reversed(points))

    # ── Participation Breakdowns ──

    async def fetch_hourly_participation(self) -> List[HourlyParticipationPoint]:
        return await self._fetch_view("hourly_participation")

    async def fetch_faculty_participation(self) -> List[FacultyParticipationPoint]:
        return await self._fetch_view("faculty_participation")

    async def fetch_activity_type_performance(self) -> List[ActivityTypePerformance]:
        return await self._fetch_view("activity_type_performance")

    async def fetch_activity_profitability(
        self, limit: int = 20
    ) -> List[ActivityProfitabilityRow]:
        """Top activities by revenue."""
        return await self._fetch_view("activity_profitability", limit=limit)

    async def fetch_recurrent_users(self, limit: int = 50) -> List[RecurrentUserRow]:
        return await self._fetch_view("recurrent_users", limit=limit)

    # ── Raw Records ──

    async def fetch_participations(self, limit: int = 5000) -> List[ParticipationRecord]:
        """Most recent participation records, newest first, with embeds."""
        records = await self._fetch_view("participations", limit=limit)
        logger.info(
            f"Fetched {len(records)} participation records",
            extra={"view": "participations", "count": len(records)},
        )
        return records
