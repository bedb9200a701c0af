"""Dashboard controller -- expand/collapse state, filters and lazy report loading.

DashboardController holds everything the rendered view depends on:
- the organizations list (or the error that replaced it)
- the active FilterTag (status, year)
- two independent sets of expanded ids: organizations and accounts
- per-organization loading and failed markers
- an OrganizationDealsStore of fetched reports

Expanding an organization fetches its report only when the store has nothing
for the current filters. Changing a filter refetches every expanded
organization concurrently; collapsed ones are refetched on their next expand.
Every request is tagged with the filters it was issued under and a response
whose tag no longer matches is dropped, so out-of-order completions cannot
overwrite newer data.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from src.dashboard.client import DashboardApiError, DealsApiClient
from src.dashboard.store import FilterTag, OrganizationDealsStore
from src.dealboard.deals.schemas import OrganizationDealsReport, OrganizationRead

logger = structlog.get_logger(__name__)

ORGANIZATIONS_ERROR = "Failed to load organizations. Please try again later."

_UNSET: Any = object()

_FETCH_ERRORS = (DashboardApiError, httpx.HTTPError, ValidationError)


@dataclass(frozen=True)
class DashboardTotals:
    """Totals across every report loaded under the current filters."""

    accounts: int = 0
    deals: int = 0
    value: Decimal = Decimal("0")


class DashboardController:
    """State and actions behind the nested organization/account panels.

    Args:
        client: API client used for all fetches.
        store: Report store; a fresh one is created when omitted.
    """

    def __init__(
        self,
        client: DealsApiClient,
        store: OrganizationDealsStore | None = None,
    ) -> None:
        self._client = client
        self.store = store if store is not None else OrganizationDealsStore()
        self.organizations: list[OrganizationRead] = []
        self.error: str | None = None
        self.loaded = False
        self.filters = FilterTag()
        self.expanded_organizations: set[int] = set()
        self.expanded_accounts: set[int] = set()
        self.loading: set[int] = set()
        self.failed: set[int] = set()
        self._inflight: dict[int, FilterTag] = {}

    # ── Organizations ───────────────────────────────────────────────────────

    async def load_organizations(self) -> bool:
        """Fetch the organizations list; on failure the whole view shows an error."""
        try:
            self.organizations = await self._client.fetch_organizations()
            self.error = None
        except _FETCH_ERRORS:
            logger.warning("dashboard.organizations_load_failed", exc_info=True)
            self.organizations = []
            self.error = ORGANIZATIONS_ERROR
        finally:
            self.loaded = True
        return self.error is None

    # ── Panels ──────────────────────────────────────────────────────────────

    async def toggle_organization(self, organization_id: int, expanded: bool) -> None:
        """Expand or collapse an organization panel, fetching on first expand."""
        if not expanded:
            self.expanded_organizations.discard(organization_id)
            return

        self.expanded_organizations.add(organization_id)
        if not self.store.is_fresh(organization_id, self.filters):
            await self.load_organization_deals(organization_id)

    def toggle_account(self, account_id: int, expanded: bool) -> None:
        """Expand or collapse an account panel. Account data is already loaded."""
        if expanded:
            self.expanded_accounts.add(account_id)
        else:
            self.expanded_accounts.discard(account_id)

    # ── Filters ─────────────────────────────────────────────────────────────

    async def set_filters(self, *, status: str | None = _UNSET, year: int | None = _UNSET) -> None:
        """Change one or both filters and refetch every expanded organization.

        Passing only ``status`` or only ``year`` leaves the other unchanged.
        Empty strings count as unset.
        """
        new_status = self.filters.status if status is _UNSET else (status or None)
        new_year = self.filters.year if year is _UNSET else year
        new_tag = FilterTag(status=new_status, year=new_year)
        if new_tag == self.filters:
            return

        self.filters = new_tag
        self.failed.clear()
        logger.info(
            "dashboard.filters_changed",
            status=new_tag.status,
            year=new_tag.year,
            expanded=sorted(self.expanded_organizations),
        )
        await self.refresh_expanded()

    async def clear_status(self) -> None:
        await self.set_filters(status=None)

    async def clear_year(self) -> None:
        await self.set_filters(year=None)

    async def refresh_expanded(self) -> None:
        """Refetch reports for every expanded organization, concurrently."""
        targets = [
            org_id
            for org_id in sorted(self.expanded_organizations)
            if not self.store.is_fresh(org_id, self.filters)
        ]
        if targets:
            await asyncio.gather(*(self.load_organization_deals(org_id) for org_id in targets))

    # ── Loading ─────────────────────────────────────────────────────────────

    async def load_organization_deals(self, organization_id: int) -> bool:
        """Fetch one organization's report under the current filters.

        Returns True if a report was stored. A request already in flight for
        the same organization and filters is not duplicated. Failures mark only
        this organization as failed.
        """
        tag = self.filters
        if self._inflight.get(organization_id) == tag:
            return False

        self._inflight[organization_id] = tag
        self.loading.add(organization_id)
        self.failed.discard(organization_id)
        try:
            report = await self._client.fetch_organization_deals(
                organization_id, status=tag.status, year=tag.year
            )
        except _FETCH_ERRORS:
            if tag == self.filters:
                self.failed.add(organization_id)
            logger.warning(
                "dashboard.organization_deals_failed",
                organization_id=organization_id,
                status=tag.status,
                year=tag.year,
                exc_info=True,
            )
            return False
        finally:
            if self._inflight.get(organization_id) == tag:
                del self._inflight[organization_id]
                self.loading.discard(organization_id)

        stored = self.store.put(organization_id, tag, report, current_tag=self.filters)
        if not stored:
            logger.info(
                "dashboard.stale_result_discarded",
                organization_id=organization_id,
                status=tag.status,
                year=tag.year,
            )
        return stored

    # ── Queries ─────────────────────────────────────────────────────────────

    def report_for(self, organization_id: int) -> OrganizationDealsReport | None:
        """Report for the organization under the current filters, if loaded."""
        return self.store.get(organization_id, self.filters)

    def is_expanded(self, organization_id: int) -> bool:
        return organization_id in self.expanded_organizations

    def is_account_expanded(self, account_id: int) -> bool:
        return account_id in self.expanded_accounts

    def totals(self) -> DashboardTotals:
        """Accounts, deals and value summed over the reports loaded for the current filters."""
        accounts = 0
        deals = 0
        value = Decimal("0")
        for report in self.store.reports(self.filters).values():
            accounts += report.accounts_count
            value += report.total_value
            deals += sum(account.deals_count for account in report.accounts)
        return DashboardTotals(accounts=accounts, deals=deals, value=value)
