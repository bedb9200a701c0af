"""Deals dashboard repository -- async reads for organizations, accounts and deals.

Provides DealRepository with the session_factory callable pattern: every method
opens its own AsyncSession from the factory, so the repository holds no
connection state between calls.

get_organization_deals() is the report operation. It resolves the organization,
loads its accounts, runs one filtered deals query for all of them, and hands
the rows to the pure aggregation functions.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import AsyncGenerator, Callable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.dealboard.core.monitoring import track_report_query
from src.dealboard.deals.aggregation import build_report, summarize_account
from src.dealboard.deals.errors import DealQueryError, OrganizationNotFoundError
from src.dealboard.deals.filters import account_clause, combine_clauses, deal_filter_clauses
from src.dealboard.deals.models import AccountModel, DealModel, OrganizationModel
from src.dealboard.deals.schemas import (
    DealFilter,
    DealRead,
    OrganizationDealsReport,
    OrganizationRead,
    OrganizationSummary,
)

logger = structlog.get_logger(__name__)


# ── Serialization Helpers ───────────────────────────────────────────────────


def _model_to_organization(model: OrganizationModel) -> OrganizationRead:
    """Convert OrganizationModel to OrganizationRead schema."""
    return OrganizationRead(
        id=model.id,
        name=model.name,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _model_to_deal(model: DealModel) -> DealRead:
    """Convert DealModel to DealRead schema."""
    return DealRead(
        id=model.id,
        start_date=model.start_date,
        end_date=model.end_date,
        value=model.value,
        status=model.status,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


# ── Repository ──────────────────────────────────────────────────────────────


class DealRepository:
    """Async read operations backing the dashboard endpoints.

    Args:
        session_factory: Async callable that yields AsyncSession instances.
    """

    def __init__(
        self, session_factory: Callable[..., AsyncGenerator[AsyncSession, None]]
    ) -> None:
        self._session_factory = session_factory

    # ── Organizations ───────────────────────────────────────────────────────

    async def list_organizations(self) -> list[OrganizationRead]:
        """List every organization in storage order."""
        async for session in self._session_factory():
            stmt = select(OrganizationModel).order_by(OrganizationModel.id)
            result = await session.execute(stmt)
            return [_model_to_organization(m) for m in result.scalars().all()]
        return []

    # ── Report ──────────────────────────────────────────────────────────────

    async def get_organization_deals(
        self, organization_id: int, filters: DealFilter | None = None
    ) -> OrganizationDealsReport:
        """Build the nested deals report for one organization.

        Args:
            organization_id: Parsed, positive organization ID.
            filters: Optional status/year restrictions.

        Returns:
            OrganizationDealsReport with per-account and organization totals.

        Raises:
            OrganizationNotFoundError: If the organization does not exist.
            DealQueryError: If the underlying queries fail.
        """
        filters = filters or DealFilter()
        try:
            async for session in self._session_factory():
                async with track_report_query(filters.is_active):
                    report = await self._build_report(session, organization_id, filters)
                logger.info(
                    "deals.report_built",
                    organization_id=organization_id,
                    status=filters.status,
                    year=filters.year,
                    accounts_count=report.accounts_count,
                )
                return report
        except SQLAlchemyError as exc:
            logger.error(
                "deals.report_query_failed",
                organization_id=organization_id,
                status=filters.status,
                year=filters.year,
                exc_info=True,
            )
            raise DealQueryError() from exc
        raise DealQueryError("No database session available")

    async def _build_report(
        self, session: AsyncSession, organization_id: int, filters: DealFilter
    ) -> OrganizationDealsReport:
        organization = await session.get(OrganizationModel, organization_id)
        if organization is None:
            raise OrganizationNotFoundError(organization_id)

        accounts_stmt = (
            select(AccountModel)
            .where(AccountModel.organization_id == organization_id)
            .order_by(AccountModel.id)
        )
        accounts = (await session.execute(accounts_stmt)).scalars().all()

        # One query for all accounts; rows are grouped back per account below
        deals_by_account: dict[int, list[DealRead]] = defaultdict(list)
        if accounts:
            clauses = [account_clause(a.id for a in accounts)]
            clauses.extend(deal_filter_clauses(filters))
            deals_stmt = (
                select(DealModel)
                .where(combine_clauses(clauses))
                .order_by(DealModel.id)
            )
            for deal in (await session.execute(deals_stmt)).scalars().all():
                deals_by_account[deal.account_id].append(_model_to_deal(deal))

        summaries = [
            summarize_account(a.id, a.name, deals_by_account.get(a.id, []))
            for a in accounts
        ]
        return build_report(
            OrganizationSummary(id=organization.id, name=organization.name),
            summaries,
            filters,
        )
