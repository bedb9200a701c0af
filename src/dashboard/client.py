"""Async HTTP client for the deals dashboard API.

Provides DealsApiClient with retry logic (tenacity, 3 attempts, exponential
backoff 1-10s) on connection failures and timeouts. HTTP error statuses are
not retried; they raise DashboardApiError carrying the server's ``error``
message. Responses are parsed into the server's own Pydantic read models.
"""

from __future__ import annotations

import httpx
import structlog
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.dealboard.deals.schemas import (
    OrganizationDealsReport,
    OrganizationListResponse,
    OrganizationRead,
)

logger = structlog.get_logger(__name__)

_api_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((httpx.ConnectError, httpx.TimeoutException)),
    reraise=True,
)


class DashboardApiError(Exception):
    """Non-2xx response from the dashboard API.

    Attributes:
        status_code: HTTP status returned by the server.
        message: The ``error`` field of the body, or the raw text.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"HTTP {status_code}: {message}")


class DealsApiClient:
    """Async client for the organizations list and per-organization deal reports.

    Args:
        base_url: Server root, e.g. ``http://localhost:3000``.
        timeout: Per-request timeout in seconds.
        transport: Optional httpx transport (tests pass an ASGITransport).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        """Create a new httpx client bound to the API root."""
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    @staticmethod
    def _raise_for_error(response: httpx.Response) -> None:
        if response.is_success:
            return
        try:
            message = response.json().get("error") or response.text
        except ValueError:
            message = response.text
        raise DashboardApiError(response.status_code, message)

    @_api_retry
    async def fetch_organizations(self) -> list[OrganizationRead]:
        """GET / and return its ``rows``."""
        async with self._client() as client:
            response = await client.get("/")
        self._raise_for_error(response)
        payload = OrganizationListResponse.model_validate(response.json())
        logger.debug("dashboard.organizations_fetched", count=len(payload.rows))
        return payload.rows

    @_api_retry
    async def fetch_organization_deals(
        self,
        organization_id: int,
        status: str | None = None,
        year: int | None = None,
    ) -> OrganizationDealsReport:
        """GET the deals report for one organization, sending only the filters that are set."""
        params: dict[str, str] = {}
        if status:
            params["status"] = status
        if year is not None:
            params["year"] = str(year)

        async with self._client() as client:
            response = await client.get(
                f"/api/organizations/{organization_id}/deals",
                params=params,
            )
        self._raise_for_error(response)
        report = OrganizationDealsReport.model_validate(response.json())
        logger.debug(
            "dashboard.organization_deals_fetched",
            organization_id=organization_id,
            status=status,
            year=year,
            accounts_count=report.accounts_count,
        )
        return report
