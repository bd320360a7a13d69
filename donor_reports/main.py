"""
Donor Reports FastAPI Application - Main entry point.

Donation reporting for a fundraising back office:

- Grouped donations report (by donor, campaign, payment method or fundraiser)
  bucketed by Hebrew calendar year
- Payments report (promised vs. paid for commitments and standing orders)
- Yearly summary and the list of years that have donations
- Per-user persisted global filters

All endpoints live under /api/v1 and require a bearer token, except login
and the health check.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from donor_reports import __version__
from donor_reports.core.config import settings
from donor_reports.core.logging_config import configure_logging
from donor_reports.db.base import init_db
from donor_reports.api.v1 import auth, health, reports

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Startup: Initialize database
    # Note: In production, use Alembic migrations instead
    await init_db()
    logger.info(f"{settings.APP_NAME} started ({settings.APP_ENV})")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version=__version__,
    description="""
Donation reporting and effective-amount aggregation.

## Reports

- **Grouped donations**: yearly totals per group and currency
- **Payments**: commitments and standing orders, promised vs. paid
- **Yearly summary**: effective totals per Hebrew year
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# ROUTERS
# ============================================================================

app.include_router(health.router, prefix=settings.API_V1_PREFIX, tags=["health"])

app.include_router(auth.router, prefix=f"{settings.API_V1_PREFIX}/auth", tags=["auth"])

app.include_router(reports.router, prefix=f"{settings.API_V1_PREFIX}/reports", tags=["reports"])
