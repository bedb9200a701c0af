"""Tests for deal filter parsing, the year-overlap predicate and SQL clauses."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.dealboard.deals.errors import InvalidInputError, OrganizationNotFoundError
from src.dealboard.deals.filters import (
    MAX_SQL_INTEGER,
    build_filter,
    combine_clauses,
    deal_active_in_year,
    deal_filter_clauses,
    parse_organization_id,
    parse_year,
    status_clause,
    year_clause,
)
from src.dealboard.deals.models import DealModel
from src.dealboard.deals.schemas import DealFilter


# ── Organization ID ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", 1), ("42", 42), (" 7 ", 7), ("999999", 999999), (3, 3)],
)
def test_parse_organization_id_accepts_positive_integers(raw, expected):
    assert parse_organization_id(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["abc", "", "   ", None, "0", "-1", "1.5", "1e3", "12abc", "١٢", True, 0, -5],
)
def test_parse_organization_id_rejects_malformed(raw):
    with pytest.raises(InvalidInputError) as exc_info:
        parse_organization_id(raw)
    assert exc_info.value.public_message == "Invalid organization ID"


def test_parse_organization_id_beyond_integer_range_is_not_found():
    raw = str(MAX_SQL_INTEGER + 1)
    with pytest.raises(OrganizationNotFoundError) as exc_info:
        parse_organization_id(raw)
    assert exc_info.value.public_message == "Organization not found"
    assert parse_organization_id(str(MAX_SQL_INTEGER)) == MAX_SQL_INTEGER


# ── Year ─────────────────────────────────────────────────────────────────────


def test_parse_year():
    assert parse_year("2024") == 2024
    assert parse_year(" 2025 ") == 2025
    assert parse_year(2023) == 2023
    assert parse_year(None) is None
    assert parse_year("") is None
    assert parse_year("abc") is None
    assert parse_year("2024.5") is None


def test_build_filter_treats_empty_values_as_unset():
    for status, year in (("", ""), (None, None)):
        filters = build_filter(status, year)
        assert filters.status is None
        assert filters.year is None
        assert filters.year_supplied is False
        assert filters.is_active is False


def test_build_filter_malformed_year_still_counts_as_supplied():
    filters = build_filter("", "abc")
    assert filters.status is None
    assert filters.year is None
    assert filters.year_supplied is True
    assert filters.is_active is True
    # Restricts no deals
    assert deal_filter_clauses(filters) == []


def test_build_filter_with_both_values():
    filters = build_filter("active", "2024")
    assert filters == DealFilter(status="active", year=2024, year_supplied=True)
    assert filters.is_active is True


# ── Year Overlap Predicate ───────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("start", "end", "year", "expected"),
    [
        (date(2024, 3, 1), date(2025, 3, 1), 2024, True),  # starts in year
        (date(2023, 6, 1), date(2024, 6, 1), 2024, True),  # ends in year
        (date(2022, 1, 1), date(2026, 1, 1), 2024, True),  # spans year
        (date(2024, 1, 1), date(2024, 12, 31), 2024, True),  # inside year
        (date(2020, 1, 1), date(2023, 12, 31), 2024, False),  # entirely before
        (date(2025, 1, 1), date(2026, 1, 1), 2024, False),  # entirely after
        (date(2023, 1, 1), date(2023, 12, 31), 2024, False),  # ends 31 Dec of prior year
    ],
)
def test_deal_active_in_year(start, end, year, expected):
    assert deal_active_in_year(start, end, year) is expected


@pytest.mark.parametrize("year", [2021, 2022, 2023, 2024, 2025])
def test_spanning_deal_active_in_every_year_strictly_between(year):
    assert deal_active_in_year(date(2020, 7, 1), date(2026, 2, 1), year)


# ── Clause Composition ───────────────────────────────────────────────────────


def test_no_clauses_for_inactive_filter():
    assert deal_filter_clauses(DealFilter()) == []


def test_one_clause_per_active_restriction():
    assert len(deal_filter_clauses(DealFilter(status="active"))) == 1
    assert len(deal_filter_clauses(DealFilter(year=2024))) == 1
    assert len(deal_filter_clauses(DealFilter(status="active", year=2024))) == 2


def test_status_clause_binds_value_as_parameter():
    compiled = status_clause("active' OR 1=1 --").compile()
    assert "OR 1=1" not in str(compiled)
    assert "active' OR 1=1 --" in compiled.params.values()


_PARITY_DEALS = [
    (date(2019, 5, 1), date(2020, 5, 1)),
    (date(2020, 1, 1), date(2020, 12, 31)),
    (date(2020, 12, 31), date(2023, 1, 1)),
    (date(2021, 1, 1), date(2022, 1, 1)),
    (date(2022, 6, 15), date(2026, 6, 15)),
    (date(2025, 1, 1), date(2025, 1, 1)),
]


@pytest.mark.asyncio
async def test_year_clause_matches_pure_predicate(engine, insert_organization):
    """The SQL year clause selects exactly the deals the pure predicate accepts."""
    await insert_organization(
        "Parity Org",
        {
            "Parity Account": [
                (start.isoformat(), end.isoformat(), "100.00", "active")
                for start, end in _PARITY_DEALS
            ]
        },
    )

    async with AsyncSession(engine) as session:
        deals = (await session.execute(select(DealModel))).scalars().all()
        for year in range(2018, 2028):
            stmt = select(DealModel.id).where(year_clause(year))
            matched = set((await session.execute(stmt)).scalars().all())
            expected = {
                d.id for d in deals if deal_active_in_year(d.start_date, d.end_date, year)
            }
            assert matched == expected, f"year {year}"


@pytest.mark.asyncio
async def test_combined_clauses_are_anded(engine, insert_organization):
    await insert_organization(
        "Combo Org",
        {
            "Combo Account": [
                ("2024-02-01", "2025-02-01", "10.00", "active"),
                ("2024-02-01", "2025-02-01", "20.00", "pending"),
                ("2021-02-01", "2022-02-01", "30.00", "active"),
            ]
        },
    )

    async with AsyncSession(engine) as session:
        everything = combine_clauses([])
        both = combine_clauses(deal_filter_clauses(DealFilter(status="active", year=2024)))
        all_values = (await session.execute(select(DealModel.value).where(everything))).scalars()
        both_values = (await session.execute(select(DealModel.value).where(both))).scalars()

        assert len(list(all_values)) == 3
        assert [str(v) for v in both_values] == ["10.00"]


@pytest.mark.asyncio
async def test_year_clause_beyond_integer_range_matches_nothing(engine, insert_organization):
    await insert_organization(
        "Range Org",
        {"Range Account": [("2024-02-01", "2025-02-01", "10.00", "active")]},
    )

    async with AsyncSession(engine) as session:
        for year in (MAX_SQL_INTEGER + 1, -(MAX_SQL_INTEGER + 1)):
            stmt = select(DealModel.id).where(year_clause(year))
            assert (await session.execute(stmt)).scalars().all() == []
