"""Health and diagnostics endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from impact_tracker.core.config import get_settings
from impact_tracker.data_readers.json_provider import get_rubric_taxonomy
from impact_tracker.rubric.taxonomy import RubricTaxonomy

router = APIRouter(tags=["health"])


# PUBLIC_INTERFACE
@router.get(
    "/",
    summary="Health Check",
    description="Report service status, persistence provider and loaded rubric size.",
    operation_id="health_check",
)
def health_check(taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy)):
    """Return a simple health status."""
    return {
        "status": "ok",
        "data_provider": get_settings().data_provider,
        "rubric_expectations": taxonomy.expectation_count,
    }
