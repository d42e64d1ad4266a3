"""Smart Gestion — FastAPI Application Entry Point.

Insight & analytics engine for activity registrations and payments.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartgestion.config import settings
from smartgestion.api.analysis_routes import router as analysis_router
from smartgestion.core.logging import get_logger

logger = get_logger("main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("Smart Gestion analytics starting up...")
    if not settings.store_url:
        logger.error("STORE_URL is not set, analysis runs will fail")
    yield
    logger.info("Smart Gestion analytics shut down")


app = FastAPI(
    title="Smart Gestion Analytics",
    description="Aggregates participation and payment history, detects anomalies, forecasts revenue and writes insights.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(analysis_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "smartgestion",
        "version": "1.0.0",
    }
