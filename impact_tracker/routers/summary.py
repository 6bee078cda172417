"""Period summary and export endpoints."""
from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse

from impact_tracker.core.config import get_settings
from impact_tracker.models.auth import UserPublic
from impact_tracker.models.domain import Period, PeriodPreset, Summary
from impact_tracker.routers.auth import get_current_user
from impact_tracker.services import impact_store
from impact_tracker.services.summary import (
    PERIOD_PRESETS,
    build_summary,
    fiscal_period,
    fiscal_periods,
    render_markdown,
    render_plain_text,
    report_title,
)

router = APIRouter(prefix="/summary", tags=["summary"])

PresetKey = Literal["q1", "q2", "q3", "q4", "h1", "h2", "fy"]


def _resolve_period(start_date: Optional[date], end_date: Optional[date], period: Optional[str]) -> Period:
    if period:
        return fiscal_period(period, start_month=get_settings().fiscal_year_start_month).period
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="start_date and end_date (or period) are required")
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    return Period(start=start_date, end=end_date)


def _summary_for(user_id: str, rng: Period) -> Summary:
    impacts = impact_store.list_impacts(user_id, start_date=rng.start, end_date=rng.end)
    return build_summary(impacts, rng)


# PUBLIC_INTERFACE
@router.get("/periods", response_model=List[PeriodPreset], summary="Fiscal period presets", description="Quarter, half and full fiscal year ranges for today.")
def periods():
    """Return the period presets for the current fiscal year."""
    return fiscal_periods(start_month=get_settings().fiscal_year_start_month)


# PUBLIC_INTERFACE
@router.get("/", response_model=Summary, summary="Period summary", description="Impacts in a period grouped by craft skill.")
def get_summary(
    start_date: Optional[date] = Query(None, description="First day of the period"),
    end_date: Optional[date] = Query(None, description="Last day of the period"),
    period: Optional[PresetKey] = Query(None, description=f"Preset instead of explicit dates: {', '.join(PERIOD_PRESETS)}"),
    current: UserPublic = Depends(get_current_user),
):
    """Return the summary for an explicit range or a fiscal preset."""
    return _summary_for(current.id, _resolve_period(start_date, end_date, period))


# PUBLIC_INTERFACE
@router.get("/export", response_class=PlainTextResponse, summary="Export summary", description="Plain-text or markdown rendering of a period summary.")
def export_summary(
    start_date: Optional[date] = Query(None, description="First day of the period"),
    end_date: Optional[date] = Query(None, description="Last day of the period"),
    period: Optional[PresetKey] = Query(None, description="Fiscal preset; h1 and fy produce mid-year and end-year reports"),
    fmt: Literal["text", "markdown"] = Query("text", alias="format", description="Output format"),
    current: UserPublic = Depends(get_current_user),
):
    """Render the summary as text."""
    summary = _summary_for(current.id, _resolve_period(start_date, end_date, period))
    title = report_title(period, start_month=get_settings().fiscal_year_start_month)
    if fmt == "markdown":
        return PlainTextResponse(render_markdown(summary, title=title), media_type="text/markdown")
    return PlainTextResponse(render_plain_text(summary, title=title))
