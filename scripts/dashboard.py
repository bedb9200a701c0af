#!/usr/bin/env python3
"""CLI script to print the deals dashboard for a running server.

Usage:
    python scripts/dashboard.py
    python scripts/dashboard.py --expand 1 --expand-account 3 --status active --year 2025

Talks to the API at DASHBOARD_API_URL (environment or .env file) unless
--api-url is given. Expanded organizations are fetched under the chosen
filters, exactly as the web view does when a panel is opened.
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Ensure project root is on sys.path so we can import src.dashboard
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

# Load .env from project root
load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))


async def show(
    api_url: str | None,
    status: str | None,
    year: int | None,
    expand: list[int],
    expand_accounts: list[int],
) -> int:
    """Load the dashboard state and print it. Returns a process exit code."""
    from src.dashboard.client import DealsApiClient
    from src.dashboard.controller import DashboardController
    from src.dashboard.render import render_dashboard
    from src.dealboard.api.middleware.logging import configure_structlog
    from src.dealboard.config import get_settings

    configure_structlog()
    settings = get_settings()
    client = DealsApiClient(
        api_url or settings.DASHBOARD_API_URL,
        timeout=settings.DASHBOARD_TIMEOUT,
    )
    controller = DashboardController(client)

    if not await controller.load_organizations():
        print(render_dashboard(controller))
        return 1

    await controller.set_filters(status=status, year=year)
    for organization_id in expand:
        await controller.toggle_organization(organization_id, True)
    for account_id in expand_accounts:
        controller.toggle_account(account_id, True)

    print(render_dashboard(controller))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Print the sponsorship deals dashboard")
    parser.add_argument("--api-url", default=None, help="API root (default: DASHBOARD_API_URL)")
    parser.add_argument(
        "--status",
        default=None,
        choices=["active", "pending", "completed", "cancelled"],
        help="Only show deals with this status",
    )
    parser.add_argument("--year", type=int, default=None, help="Only show deals active in this year")
    parser.add_argument(
        "--expand",
        type=int,
        action="append",
        default=[],
        metavar="ORG_ID",
        help="Expand an organization panel (repeatable)",
    )
    parser.add_argument(
        "--expand-account",
        type=int,
        action="append",
        default=[],
        metavar="ACCOUNT_ID",
        help="Expand an account panel to show its deals table (repeatable)",
    )
    args = parser.parse_args()

    sys.exit(
        asyncio.run(show(args.api_url, args.status, args.year, args.expand, args.expand_account))
    )


if __name__ == "__main__":
    main()
