"""Pydantic schemas for the deals dashboard -- filters, read models and the report.

Defines all structured types exchanged between the repository, the HTTP layer
and the dashboard client:
- Enums: DealStatus
- Filters: DealFilter
- Read models: OrganizationRead, OrganizationSummary, DealRead
- Aggregates: AccountDeals, OrganizationDealsReport
- Envelopes: OrganizationListResponse

Monetary amounts are carried as Decimal and emitted as JSON numbers. Aggregate
fields use camelCase aliases on the wire (totalValue, dealsCount, accountsCount)
while deal fields stay snake_case, matching the dashboard's JSON contract.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

Amount = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

# Row timestamps go out in SQLite CURRENT_TIMESTAMP text form, e.g. "2026-10-19 17:51:00"
Timestamp = Annotated[
    datetime,
    PlainSerializer(lambda d: d.strftime("%Y-%m-%d %H:%M:%S"), return_type=str, when_used="json"),
]


# ── Enums ───────────────────────────────────────────────────────────────────


class DealStatus(str, Enum):
    """Known deal statuses. Storage accepts any text; these drive display and seeding."""

    ACTIVE = "active"
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# ── Filters ─────────────────────────────────────────────────────────────────


class DealFilter(BaseModel):
    """Optional status and year restrictions for the organization report.

    ``year_supplied`` records that a year query value was sent even if it did
    not parse. Such a value restricts no deals but still counts as a filter,
    so accounts left without deals are dropped.
    """

    status: str | None = None
    year: int | None = None
    year_supplied: bool = False

    @property
    def is_active(self) -> bool:
        """True when a status or a year (parsable or not) was supplied."""
        return bool(self.status) or self.year is not None or self.year_supplied


# ── Read Models ─────────────────────────────────────────────────────────────


class OrganizationRead(BaseModel):
    """Organization row as listed on the landing endpoint."""

    id: int
    name: str
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None


class OrganizationSummary(BaseModel):
    """Organization identity embedded in the deals report."""

    id: int
    name: str


class DealRead(BaseModel):
    """Deal row as returned inside an account."""

    id: int
    start_date: date
    end_date: date
    value: Amount
    status: str
    created_at: Timestamp | None = None
    updated_at: Timestamp | None = None


# ── Aggregates ──────────────────────────────────────────────────────────────


class AccountDeals(BaseModel):
    """Account with its (possibly filtered) deals and their totals."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    total_value: Amount = Field(default=Decimal("0"), alias="totalValue")
    deals_count: int = Field(default=0, alias="dealsCount")
    deals: list[DealRead] = Field(default_factory=list)


class OrganizationDealsReport(BaseModel):
    """Nested deals report for one organization."""

    model_config = ConfigDict(populate_by_name=True)

    organization: OrganizationSummary
    total_value: Amount = Field(default=Decimal("0"), alias="totalValue")
    accounts_count: int = Field(default=0, alias="accountsCount")
    accounts: list[AccountDeals] = Field(default_factory=list)


# ── Envelopes ───────────────────────────────────────────────────────────────


class OrganizationListResponse(BaseModel):
    """Landing endpoint payload: greeting plus every organization."""

    message: str
    rows: list[OrganizationRead] = Field(default_factory=list)
