"""Smart Gestion — Analysis API Routes."""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from smartgestion.models.analysis_models import AnalyticsReport
from smartgestion.analyzer.pipeline import run_analysis
from smartgestion.connectors.store.client import StoreAPIError
from smartgestion.core.logging import get_logger

logger = get_logger("api.analysis")

router = APIRouter(tags=["Analysis"])


# ── Response Models ──


class RunAnalysisResponse(BaseModel):
    """Response for POST /run-analysis."""

    status: str = "success"
    report: AnalyticsReport


# ── Endpoints ──


@router.post("/run-analysis", response_model=RunAnalysisResponse)
async def trigger_analysis():
    """Run the analytics pipeline over a fresh snapshot of the store.

    Fetches all analytics views (or recomputes them from raw records),
    runs every analyzer and returns the composed report.
    """
    try:
        report = await run_analysis()
        return RunAnalysisResponse(status="success", report=report)
    except StoreAPIError as e:
        logger.error(f"Store unavailable: {e}", extra={"status_code": e.status_code})
        raise HTTPException(status_code=502, detail=f"Store unavailable: {str(e)}")
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")
