"""Health check endpoints.

/health is a liveness probe with no dependencies. /health/ready reports
whether the database answers and whether the dashboard tables exist, so a
server started against an unseeded or unmigrated file shows up as degraded.
"""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from src.dealboard.config import get_settings
from src.dealboard.core.database import get_engine
from src.dealboard.deals.models import OrganizationModel

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Liveness: the process is up."""
    settings = get_settings()
    return {"status": "ok", "environment": settings.ENVIRONMENT.value}


async def _check_database() -> dict:
    checks: dict = {"database": "ok", "schema": "ok"}

    try:
        async with get_engine().connect() as conn:
            await conn.execute(text("SELECT 1"))
            try:
                organizations = await conn.scalar(
                    select(func.count()).select_from(OrganizationModel)
                )
                checks["organizations"] = organizations
            except SQLAlchemyError as e:
                checks["schema"] = "error"
                checks["schema_error"] = str(e)
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = "error"
        checks["schema"] = "unknown"
        checks["database_error"] = str(e)

    return checks


@router.get("/health/ready")
async def readiness_check():
    """Readiness: 200 when the database and tables are usable, 503 otherwise."""
    checks = await _check_database()
    healthy = checks["database"] == "ok" and checks["schema"] == "ok"

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if healthy else "degraded",
            "checks": checks,
        },
    )
