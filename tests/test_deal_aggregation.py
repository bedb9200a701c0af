"""Tests for per-account and per-organization report aggregation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.dealboard.deals.aggregation import build_report, sum_values, summarize_account
from src.dealboard.deals.schemas import DealFilter, DealRead, OrganizationSummary

ORG = OrganizationSummary(id=1, name="SponsorCX")


def _deal(deal_id: int, value: str, status: str = "active") -> DealRead:
    return DealRead(
        id=deal_id,
        start_date=date(2024, 1, 1),
        end_date=date(2025, 1, 1),
        value=Decimal(value),
        status=status,
    )


def test_sum_values_empty_is_zero():
    assert sum_values([]) == Decimal("0")


def test_sum_values_is_exact_for_two_decimal_amounts():
    assert sum_values([Decimal("0.10")] * 3) == Decimal("0.30")
    assert sum_values([Decimal("0.01")] * 1000) == Decimal("10.00")


def test_summarize_account_totals():
    account = summarize_account(3, "Nike", [_deal(1, "10000.50"), _deal(2, "20000.25")])

    assert account.total_value == Decimal("30000.75")
    assert account.deals_count == 2
    assert [d.id for d in account.deals] == [1, 2]


def test_summarize_account_without_deals():
    account = summarize_account(4, "Amazon", [])
    assert account.total_value == Decimal("0")
    assert account.deals_count == 0
    assert account.deals == []


def test_unfiltered_report_keeps_accounts_without_deals():
    accounts = [
        summarize_account(1, "Coca-Cola", [_deal(1, "100.00")]),
        summarize_account(2, "Microsoft", []),
    ]
    report = build_report(ORG, accounts, DealFilter())

    assert report.accounts_count == 2
    assert [a.name for a in report.accounts] == ["Coca-Cola", "Microsoft"]
    assert report.total_value == Decimal("100.00")


def test_filtered_report_drops_accounts_without_matching_deals():
    accounts = [
        summarize_account(1, "Coca-Cola", [_deal(1, "100.00")]),
        summarize_account(2, "Microsoft", []),
    ]

    for filters in (
        DealFilter(status="active"),
        DealFilter(year=2024),
        DealFilter(year_supplied=True),
    ):
        report = build_report(ORG, accounts, filters)
        assert report.accounts_count == 1
        assert [a.name for a in report.accounts] == ["Coca-Cola"]


def test_organization_total_is_sum_of_account_totals():
    accounts = [
        summarize_account(1, "Adidas", [_deal(1, "12345.67"), _deal(2, "0.33")]),
        summarize_account(2, "Gatorade", [_deal(3, "99999.99")]),
        summarize_account(3, "Under Armour", [_deal(4, "0.01"), _deal(5, "0.02")]),
    ]
    report = build_report(ORG, accounts, DealFilter())

    assert report.total_value == Decimal("112346.02")
    assert report.total_value == sum_values(a.total_value for a in report.accounts)
    assert report.total_value == sum_values(
        d.value for a in report.accounts for d in a.deals
    )


def test_report_serializes_with_camel_case_keys_and_numeric_amounts():
    report = build_report(
        ORG,
        [summarize_account(3, "Nike", [_deal(1, "10000.50"), _deal(2, "20000.25")])],
        DealFilter(),
    )
    payload = report.model_dump(mode="json", by_alias=True)

    assert set(payload) == {"organization", "totalValue", "accountsCount", "accounts"}
    account = payload["accounts"][0]
    assert account["totalValue"] == 30000.75
    assert account["dealsCount"] == 2
    assert account["deals"][0]["value"] == 10000.5
    assert account["deals"][0]["start_date"] == "2024-01-01"
