"""Demo data seeding service.

Clears the three dashboard tables and inserts a fixed set of organizations and
accounts, each account getting one to four randomly generated deals. Deal
windows rotate through past, current and future relative to ``today`` and
always last one year.
"""

from __future__ import annotations

import calendar
import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.dealboard.deals.models import AccountModel, DealModel, OrganizationModel
from src.dealboard.deals.schemas import DealStatus

logger = structlog.get_logger(__name__)

SEED_ACCOUNTS: dict[str, list[str]] = {
    "SponsorCX": ["Coca-Cola", "Microsoft", "Nike", "Amazon"],
    "Sports Team Inc.": ["Adidas", "Gatorade", "Under Armour"],
    "Event Management LLC": ["Red Bull", "IBM"],
}

MIN_DEALS_PER_ACCOUNT = 1
MAX_DEALS_PER_ACCOUNT = 4
MIN_DEAL_VALUE = 10_000
MAX_DEAL_VALUE = 500_000


@dataclass(frozen=True)
class DealSeed:
    start_date: date
    end_date: date
    value: Decimal
    status: str


@dataclass(frozen=True)
class SeedCounts:
    organizations: int
    accounts: int
    deals: int


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _random_date(
    rng: random.Random, start_year: int, start_month: int, end_year: int, end_month: int
) -> date:
    """Uniform date between the first of the start month and the last of the end month."""
    # Month 13 rolls into January of the next year
    start_year += (start_month - 1) // 12
    start_month = (start_month - 1) % 12 + 1
    start = date(start_year, start_month, 1)
    end = _month_end(end_year, end_month)
    if end < start:
        end = start
    return start + timedelta(days=rng.randint(0, (end - start).days))


def _one_year_later(day: date) -> date:
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        # 29 February
        return day.replace(year=day.year + 1, day=28)


def generate_deals(rng: random.Random, today: date) -> list[DealSeed]:
    """Generate the deals for one account: past, current and future windows in turn."""
    statuses = [s.value for s in DealStatus]
    current_year = today.year
    deals: list[DealSeed] = []

    for i in range(rng.randint(MIN_DEALS_PER_ACCOUNT, MAX_DEALS_PER_ACCOUNT)):
        value = Decimal(rng.randint(MIN_DEAL_VALUE, MAX_DEAL_VALUE))
        status = rng.choice(statuses)

        if i % 3 == 0:
            start = _random_date(rng, current_year - 2, 1, current_year - 1, 12)
        elif i % 3 == 1:
            start = _random_date(rng, current_year - 1, 1, current_year, 3)
        else:
            start = _random_date(rng, current_year, today.month + 1, current_year + 1, 12)

        deals.append(
            DealSeed(start_date=start, end_date=_one_year_later(start), value=value, status=status)
        )
    return deals


async def seed_database(
    engine: AsyncEngine,
    rng: random.Random | None = None,
    today: date | None = None,
) -> SeedCounts:
    """Replace all dashboard data with freshly generated demo rows."""
    rng = rng or random.Random()
    today = today or date.today()

    async with AsyncSession(engine, expire_on_commit=False) as session:
        await session.execute(delete(DealModel))
        await session.execute(delete(AccountModel))
        await session.execute(delete(OrganizationModel))
        logger.info("seed.cleared")

        for org_name, account_names in SEED_ACCOUNTS.items():
            organization = OrganizationModel(name=org_name)
            for account_name in account_names:
                account = AccountModel(name=account_name)
                account.deals = [
                    DealModel(
                        start_date=d.start_date,
                        end_date=d.end_date,
                        value=d.value,
                        status=d.status,
                    )
                    for d in generate_deals(rng, today)
                ]
                organization.accounts.append(account)
            session.add(organization)

        await session.commit()

        counts = SeedCounts(
            organizations=await session.scalar(select(func.count(OrganizationModel.id))) or 0,
            accounts=await session.scalar(select(func.count(AccountModel.id))) or 0,
            deals=await session.scalar(select(func.count(DealModel.id))) or 0,
        )

    logger.info(
        "seed.completed",
        organizations=counts.organizations,
        accounts=counts.accounts,
        deals=counts.deals,
    )
    return counts
