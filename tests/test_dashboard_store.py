"""Tests for the keyed organization report store."""

from __future__ import annotations

from decimal import Decimal

from src.dashboard.store import FilterTag, OrganizationDealsStore
from src.dealboard.deals.schemas import OrganizationDealsReport, OrganizationSummary


def _report(org_id: int, total: str = "0") -> OrganizationDealsReport:
    return OrganizationDealsReport(
        organization=OrganizationSummary(id=org_id, name=f"Org {org_id}"),
        total_value=Decimal(total),
    )


def test_filter_tag_activity():
    assert FilterTag().is_active is False
    assert FilterTag(status="active").is_active is True
    assert FilterTag(year=2024).is_active is True


def test_get_hits_only_for_matching_tag():
    store = OrganizationDealsStore()
    tag = FilterTag(status="active")
    report = _report(1)
    store.put(1, tag, report)

    assert store.get(1, tag) is report
    assert store.get(1, FilterTag()) is None
    assert store.get(2, tag) is None
    assert store.is_fresh(1, tag)
    assert not store.is_fresh(1, FilterTag(status="active", year=2024))


def test_put_discards_result_for_stale_tag():
    store = OrganizationDealsStore()
    old = FilterTag(status="pending")
    new = FilterTag(status="active")

    assert store.put(1, old, _report(1), current_tag=new) is False
    assert 1 not in store

    assert store.put(1, new, _report(1), current_tag=new) is True
    assert 1 in store


def test_newer_put_replaces_entry_and_latest_tracks_it():
    store = OrganizationDealsStore()
    store.put(1, FilterTag(), _report(1, "10"))
    store.put(1, FilterTag(year=2024), _report(1, "5"))

    latest = store.latest(1)
    assert latest is not None
    assert latest.tag == FilterTag(year=2024)
    assert latest.report.total_value == Decimal("5")
    assert len(store) == 1


def test_invalidate_and_clear():
    store = OrganizationDealsStore()
    store.put(1, FilterTag(), _report(1))
    store.put(2, FilterTag(), _report(2))

    store.invalidate(1)
    store.invalidate(99)
    assert 1 not in store
    assert 2 in store

    store.clear()
    assert len(store) == 0


def test_reports_filters_by_tag():
    store = OrganizationDealsStore()
    store.put(1, FilterTag(), _report(1))
    store.put(2, FilterTag(status="active"), _report(2))
    store.put(3, FilterTag(), _report(3))

    assert sorted(store.reports(FilterTag())) == [1, 3]
    assert sorted(store.reports(FilterTag(status="active"))) == [2]
