"""Test fixtures for the deals dashboard.

Provides:
- A temporary SQLite database per test (DATABASE_URL pointed at tmp_path)
- Initialized engine with the organizations/accounts/deals tables
- FastAPI app and an async HTTP client over ASGITransport
- insert_organization(): direct inserts of an organization with accounts and deals
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from src.dealboard.config import get_settings
from src.dealboard.core.database import close_db, get_engine, init_db
from src.dealboard.deals.models import AccountModel, DealModel, OrganizationModel
from src.dealboard.main import create_app

# (start_date, end_date, value, status)
DealRow = tuple[str, str, str, str]


@dataclass
class SeededOrganization:
    id: int
    name: str
    account_ids: dict[str, int] = field(default_factory=dict)


InsertOrganization = Callable[[str, dict[str, list[DealRow]]], Awaitable[SeededOrganization]]


@pytest.fixture
def database_url(tmp_path, monkeypatch) -> str:
    """Point settings at a fresh SQLite file for this test."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'dealboard.sqlite'}"
    monkeypatch.setenv("DATABASE_URL", url)
    get_settings.cache_clear()
    yield url
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def engine(database_url) -> AsyncGenerator[AsyncEngine, None]:
    """Initialized engine bound to the temporary database."""
    await close_db()
    await init_db()
    yield get_engine()
    await close_db()


@pytest_asyncio.fixture
async def app(engine):
    """FastAPI app whose repository reads the temporary database."""
    return create_app()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing the API."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def insert_organization(engine) -> InsertOrganization:
    """Return a helper that inserts one organization with its accounts and deals."""

    async def _insert(name: str, accounts: dict[str, list[DealRow]]) -> SeededOrganization:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            organization = OrganizationModel(name=name)
            created: list[AccountModel] = []
            for account_name, deals in accounts.items():
                account = AccountModel(name=account_name)
                account.deals = [
                    DealModel(
                        start_date=date.fromisoformat(start),
                        end_date=date.fromisoformat(end),
                        value=Decimal(value),
                        status=status,
                    )
                    for start, end, value, status in deals
                ]
                organization.accounts.append(account)
                created.append(account)
            session.add(organization)
            await session.commit()

            return SeededOrganization(
                id=organization.id,
                name=organization.name,
                account_ids={a.name: a.id for a in created},
            )

    return _insert
