"""FastAPI dependency injection for the deals repository."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from src.dealboard.deals.repository import DealRepository


def get_deal_repository(request: Request) -> DealRepository:
    """Retrieve DealRepository from app.state, 503 if not available."""
    repo = getattr(request.app.state, "deal_repository", None)
    if repo is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Deal repository not initialized",
        )
    return repo
