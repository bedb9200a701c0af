"""REST API endpoints for the deals dashboard.

Provides the landing endpoint listing every organization and the nested deals
report for one organization. Failures surface as the dashboard error types and
are rendered to ``{"error": ...}`` by the handlers in src/dealboard/api/errors.py.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import SQLAlchemyError

from src.dealboard.api.deps import get_deal_repository
from src.dealboard.core.monitoring import record_deal_report
from src.dealboard.deals.errors import DealboardError, DealQueryError, OrganizationListError
from src.dealboard.deals.filters import build_filter, parse_organization_id
from src.dealboard.deals.repository import DealRepository
from src.dealboard.deals.schemas import OrganizationDealsReport, OrganizationListResponse

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["organizations"])

WELCOME_MESSAGE = "Welcome to the server! 🎉"


@router.get("/", response_model=OrganizationListResponse)
async def list_organizations(
    repo: DealRepository = Depends(get_deal_repository),
) -> OrganizationListResponse:
    """List all organizations, unfiltered."""
    try:
        rows = await repo.list_organizations()
    except SQLAlchemyError as exc:
        logger.error("organizations.list_failed", exc_info=True)
        raise OrganizationListError() from exc
    return OrganizationListResponse(message=WELCOME_MESSAGE, rows=rows)


@router.get(
    "/api/organizations/{organization_id}/deals",
    response_model=OrganizationDealsReport,
)
async def get_organization_deals(
    organization_id: str,
    status: str | None = Query(default=None, description="Exact deal status to keep"),
    year: str | None = Query(default=None, description="Calendar year the deal must overlap"),
    repo: DealRepository = Depends(get_deal_repository),
) -> OrganizationDealsReport:
    """Accounts and deals for one organization, with totals, for accordion rendering."""
    org_id = parse_organization_id(organization_id)
    filters = build_filter(status, year)
    try:
        report = await repo.get_organization_deals(org_id, filters)
    except DealboardError:
        raise
    except Exception as exc:
        logger.error(
            "deals.report_unexpected_error",
            organization_id=org_id,
            exc_info=True,
        )
        raise DealQueryError() from exc

    record_deal_report(status_filter=bool(filters.status), year_filter=filters.year_supplied)
    return report
