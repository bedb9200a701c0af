"""Report aggregation -- per-account and per-organization deal totals.

Pure functions over read models, no database access. Totals are accumulated
as Decimal so two-decimal amounts sum exactly regardless of row count.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from decimal import Decimal

from src.dealboard.deals.schemas import (
    AccountDeals,
    DealFilter,
    DealRead,
    OrganizationDealsReport,
    OrganizationSummary,
)


def sum_values(values: Iterable[Decimal]) -> Decimal:
    """Exact Decimal sum; an empty iterable sums to Decimal("0")."""
    return sum(values, Decimal("0"))


def summarize_account(account_id: int, name: str, deals: Sequence[DealRead]) -> AccountDeals:
    """Build an AccountDeals entry with totalValue and dealsCount for ``deals``."""
    return AccountDeals(
        id=account_id,
        name=name,
        total_value=sum_values(deal.value for deal in deals),
        deals_count=len(deals),
        deals=list(deals),
    )


def build_report(
    organization: OrganizationSummary,
    accounts: Sequence[AccountDeals],
    filters: DealFilter,
) -> OrganizationDealsReport:
    """Assemble the organization report from per-account summaries.

    Under an active filter, accounts with no matching deals are dropped. Without
    a filter every account is kept, including ones with zero deals.
    """
    if filters.is_active:
        kept = [account for account in accounts if account.deals_count > 0]
    else:
        kept = list(accounts)

    return OrganizationDealsReport(
        organization=organization,
        total_value=sum_values(account.total_value for account in kept),
        accounts_count=len(kept),
        accounts=kept,
    )
