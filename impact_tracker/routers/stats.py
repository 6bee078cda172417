"""Dashboard statistics endpoints."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from impact_tracker.models.auth import UserPublic
from impact_tracker.models.domain import Stats
from impact_tracker.routers.auth import get_current_user
from impact_tracker.services import impact_store
from impact_tracker.services.stats import compute_stats

router = APIRouter(prefix="/stats", tags=["stats"])


# PUBLIC_INTERFACE
@router.get("/", response_model=Stats, summary="Impact statistics", description="Counts per craft skill and category, unit totals and a six-month trend.")
def get_stats(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound on impact date"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound on impact date"),
    current: UserPublic = Depends(get_current_user),
):
    """Return statistics over the current user's impacts."""
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    impacts = impact_store.list_impacts(current.id, start_date=start_date, end_date=end_date)
    return compute_stats(impacts)
