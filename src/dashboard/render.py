"""Plain-text rendering of the dashboard.

Mirrors the panel layout of the web view: a header, the filter card with its
active-filter chips, one panel per organization (▸ collapsed, ▾ expanded)
and, inside an expanded organization, one panel per account with a deals
table when the account is expanded.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.dashboard.controller import DashboardController
from src.dealboard.deals.schemas import AccountDeals, DealStatus, OrganizationDealsReport

HEADER = "SponsorCX Deals Dashboard"

COLLAPSED = "▸"
EXPANDED = "▾"

DEAL_COLUMNS = ("ID", "Start Date", "End Date", "Value", "Status")


def available_years(today: date | None = None) -> list[int]:
    """Years offered by the year filter: two before through two after the current year."""
    current = (today or date.today()).year
    return [current - 2 + offset for offset in range(5)]


def format_money(value: Decimal) -> str:
    """Thousands-separated amount without trailing zero cents (30000.50 -> 30,000.5)."""
    text = f"{value:,.2f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def status_label(status: str | None) -> str:
    if not status:
        return "All statuses"
    try:
        return DealStatus(status).value.capitalize()
    except ValueError:
        return status


def _render_filters(controller: DashboardController, today: date | None) -> list[str]:
    tag = controller.filters
    years = ", ".join(str(y) for y in available_years(today))
    lines = [
        "Filters",
        f"  Status: {status_label(tag.status)}"
        f"  (options: {', '.join(s.value for s in DealStatus)})",
        f"  Year: {tag.year if tag.year is not None else 'All years'}  (options: {years})",
    ]
    chips = []
    if tag.status:
        chips.append(f"[Status: {tag.status} ×]")
    if tag.year is not None:
        chips.append(f"[Year: {tag.year} ×]")
    if chips:
        lines.append("  Active filters: " + " ".join(chips))
    return lines


def _render_deals_table(account: AccountDeals, indent: str) -> list[str]:
    rows = [
        (
            str(deal.id),
            deal.start_date.isoformat(),
            deal.end_date.isoformat(),
            f"${format_money(deal.value)}",
            deal.status.capitalize(),
        )
        for deal in account.deals
    ]
    widths = [
        max([len(header)] + [len(row[i]) for row in rows])
        for i, header in enumerate(DEAL_COLUMNS)
    ]
    lines = [indent + "  ".join(h.ljust(w) for h, w in zip(DEAL_COLUMNS, widths)).rstrip()]
    lines.append(indent + "  ".join("-" * w for w in widths))
    for row in rows:
        lines.append(indent + "  ".join(c.ljust(w) for c, w in zip(row, widths)).rstrip())
    return lines


def _render_report(
    controller: DashboardController, report: OrganizationDealsReport
) -> list[str]:
    lines = [
        f"    Total Value: ${format_money(report.total_value)}"
        f"  [{report.accounts_count} accounts] [{status_label(controller.filters.status)}]"
    ]
    if not report.accounts:
        lines.append("    No accounts found for this organization.")
        return lines

    for account in report.accounts:
        expanded = controller.is_account_expanded(account.id)
        marker = EXPANDED if expanded else COLLAPSED
        lines.append(
            f"    {marker} {account.name}"
            f"  ({account.deals_count} deals, ${format_money(account.total_value)})"
        )
        if expanded:
            lines.extend(_render_deals_table(account, indent="        "))
    return lines


def render_dashboard(controller: DashboardController, today: date | None = None) -> str:
    """Render the controller's current state as text."""
    lines = [HEADER, "=" * len(HEADER)]

    if not controller.loaded:
        lines.append("Loading…")
        return "\n".join(lines)
    if controller.error:
        lines.append(controller.error)
        return "\n".join(lines)

    lines.extend(_render_filters(controller, today))
    lines.append("")

    if not controller.organizations:
        lines.append("No organizations found.")
        return "\n".join(lines)

    for org in controller.organizations:
        expanded = controller.is_expanded(org.id)
        lines.append(f"{EXPANDED if expanded else COLLAPSED} {org.name}")
        if not expanded:
            continue
        if org.id in controller.loading:
            lines.append("    Loading…")
            continue
        report = controller.report_for(org.id)
        if report is None:
            lines.append("    Failed to load deals for this organization.")
            continue
        lines.extend(_render_report(controller, report))

    return "\n".join(lines)
