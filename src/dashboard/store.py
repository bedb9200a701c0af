"""Keyed store of per-organization deal reports.

Each entry remembers the FilterTag it was fetched under. A lookup with a tag
only hits when the tags match, so a filter change makes every entry stale
without touching the store. Collapsing a panel never evicts anything.
"""

from __future__ import annotations

from dataclasses import dataclass

from src.dealboard.deals.schemas import OrganizationDealsReport


@dataclass(frozen=True)
class FilterTag:
    """Filter values active when a report request was issued."""

    status: str | None = None
    year: int | None = None

    @property
    def is_active(self) -> bool:
        return bool(self.status) or self.year is not None


@dataclass(frozen=True)
class StoredResult:
    tag: FilterTag
    report: OrganizationDealsReport


class OrganizationDealsStore:
    """Explicit organization id -> last successful report map."""

    def __init__(self) -> None:
        self._entries: dict[int, StoredResult] = {}

    def __contains__(self, organization_id: object) -> bool:
        return organization_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def latest(self, organization_id: int) -> StoredResult | None:
        """Last stored result for the organization, whatever its tag."""
        return self._entries.get(organization_id)

    def get(self, organization_id: int, tag: FilterTag) -> OrganizationDealsReport | None:
        """Stored report for the organization if it was fetched under ``tag``."""
        entry = self._entries.get(organization_id)
        if entry is None or entry.tag != tag:
            return None
        return entry.report

    def is_fresh(self, organization_id: int, tag: FilterTag) -> bool:
        return self.get(organization_id, tag) is not None

    def put(
        self,
        organization_id: int,
        tag: FilterTag,
        report: OrganizationDealsReport,
        *,
        current_tag: FilterTag | None = None,
    ) -> bool:
        """Store ``report`` under ``tag``.

        When ``current_tag`` is given and differs from ``tag`` the result is
        stale and is discarded. Returns True if the report was stored.
        """
        if current_tag is not None and tag != current_tag:
            return False
        self._entries[organization_id] = StoredResult(tag=tag, report=report)
        return True

    def invalidate(self, organization_id: int) -> None:
        self._entries.pop(organization_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def reports(self, tag: FilterTag) -> dict[int, OrganizationDealsReport]:
        """All reports fetched under ``tag``, keyed by organization id."""
        return {
            org_id: entry.report
            for org_id, entry in self._entries.items()
            if entry.tag == tag
        }
