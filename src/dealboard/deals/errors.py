"""
Custom exceptions for the deals dashboard.

Three failure kinds are distinguishable at the report boundary: malformed input,
a missing organization, and an internal query failure. Each carries the public
message the HTTP layer returns to callers.
"""


class DealboardError(Exception):
    """Base exception for all dashboard errors."""

    public_message = "Internal error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_message)


class InvalidInputError(DealboardError):
    """Malformed organization identifier."""

    public_message = "Invalid organization ID"


class OrganizationNotFoundError(DealboardError):
    """No organization row for the requested identifier."""

    public_message = "Organization not found"

    def __init__(self, organization_id: int) -> None:
        self.organization_id = organization_id
        super().__init__(f"Organization not found: {organization_id}")


class DealQueryError(DealboardError):
    """Storage or query failure while building a deals report."""

    public_message = "Failed to fetch organization deals"


class OrganizationListError(DealboardError):
    """Storage failure while listing organizations."""

    public_message = "Failed to fetch organizations"
