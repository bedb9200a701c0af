"""Deal filter predicates -- input parsing, the year-overlap rule and SQL clauses.

The report query is built from independent clauses joined with AND:
- account_clause: deals owned by the given accounts
- status_clause: exact status match
- year_clause: deal date range intersects the calendar year

deal_active_in_year() is the pure form of the year rule; year_clause() is the
same rule expressed over the deals table with bound parameters.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from sqlalchemy import ColumnElement, and_, extract, false, or_, true

from src.dealboard.deals.errors import InvalidInputError, OrganizationNotFoundError
from src.dealboard.deals.models import DealModel
from src.dealboard.deals.schemas import DealFilter

# Largest value a SQLite INTEGER (signed 64-bit) can hold
MAX_SQL_INTEGER = 2**63 - 1


# ── Input Parsing ───────────────────────────────────────────────────────────


def parse_organization_id(raw: str | int | None) -> int:
    """Parse a path value into a positive organization ID.

    Raises:
        InvalidInputError: If the value is not a positive base-10 integer.
        OrganizationNotFoundError: If the value is too large to be a stored ID.
    """
    if isinstance(raw, bool):
        raise InvalidInputError()
    if isinstance(raw, int):
        value = raw
    else:
        text = (raw or "").strip()
        if not text.isdigit() or not text.isascii():
            raise InvalidInputError()
        value = int(text)
    if value <= 0:
        raise InvalidInputError()
    if value > MAX_SQL_INTEGER:
        raise OrganizationNotFoundError(value)
    return value


def parse_year(raw: str | int | None) -> int | None:
    """Parse the optional year query value; anything non-numeric counts as unset."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = raw.strip()
    try:
        return int(text)
    except ValueError:
        return None


def build_filter(status: str | None, year: str | int | None) -> DealFilter:
    """Normalize raw query values into a DealFilter.

    An empty status means unset. A non-empty year that does not parse restricts
    nothing but is still recorded as supplied.
    """
    year_supplied = bool(year) if isinstance(year, str) else year is not None
    return DealFilter(status=status or None, year=parse_year(year), year_supplied=year_supplied)


# ── Year Overlap ────────────────────────────────────────────────────────────


def deal_active_in_year(start_date: date, end_date: date, year: int) -> bool:
    """True if any part of the deal's date range falls within calendar ``year``.

    A deal counts when it starts in the year, ends in the year, or spans it
    entirely (starts before and ends after).
    """
    start_year = start_date.year
    end_year = end_date.year
    return start_year == year or end_year == year or start_year < year < end_year


# ── SQL Clauses ─────────────────────────────────────────────────────────────


def account_clause(account_ids: Iterable[int]) -> ColumnElement[bool]:
    return DealModel.account_id.in_(list(account_ids))


def status_clause(status: str) -> ColumnElement[bool]:
    return DealModel.status == status


def year_clause(year: int) -> ColumnElement[bool]:
    """SQL form of deal_active_in_year() using numeric year extraction."""
    if abs(year) > MAX_SQL_INTEGER:
        # No stored date has a year outside the INTEGER range
        return false()
    start_year = extract("year", DealModel.start_date)
    end_year = extract("year", DealModel.end_date)
    return or_(
        start_year == year,
        end_year == year,
        and_(start_year < year, end_year > year),
    )


def deal_filter_clauses(filters: DealFilter) -> list[ColumnElement[bool]]:
    """Return one clause per active restriction in ``filters``."""
    clauses: list[ColumnElement[bool]] = []
    if filters.status:
        clauses.append(status_clause(filters.status))
    if filters.year is not None:
        clauses.append(year_clause(filters.year))
    return clauses


def combine_clauses(clauses: Iterable[ColumnElement[bool]]) -> ColumnElement[bool]:
    """AND the clauses together; an empty list yields an always-true clause."""
    return and_(true(), *clauses)
