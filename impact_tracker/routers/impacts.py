"""Impact (logged entry) CRUD endpoints."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from impact_tracker.data_readers.json_provider import get_rubric_taxonomy
from impact_tracker.models.auth import UserPublic
from impact_tracker.models.domain import QUANTIFICATION_UNITS, Impact, ImpactCategory, ImpactCreate
from impact_tracker.routers.auth import get_current_user
from impact_tracker.rubric.enums import CraftSkill
from impact_tracker.rubric.taxonomy import RubricTaxonomy
from impact_tracker.services import impact_store

router = APIRouter(prefix="/impacts", tags=["impacts"])


def _resolve_payload(payload: ImpactCreate, taxonomy: RubricTaxonomy) -> ImpactCreate:
    """Check expectation_id against the rubric and default the title to its text.

    The expectation's craft skill must be among the impact's skills and must
    apply to its job family, otherwise the entry could never cover it.
    """
    if payload.expectation_id:
        found = taxonomy.find_expectation(payload.expectation_id)
        if found is None:
            raise HTTPException(status_code=422, detail=f"Unknown expectation id: {payload.expectation_id}")
        skill = found[0]
        if skill not in payload.craft_skills:
            raise HTTPException(
                status_code=422,
                detail=f"Expectation {payload.expectation_id} belongs to {skill.value!r}, which is not in craft_skills",
            )
        if payload.job_family not in skill.applicable_job_families:
            raise HTTPException(
                status_code=422,
                detail=f"{skill.value!r} does not apply to job family {payload.job_family.value}",
            )
        if not payload.title or not payload.title.strip():
            payload = payload.model_copy(update={"title": found[2].text})
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=422, detail="title is required")
    return payload


def _date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")


# PUBLIC_INTERFACE
@router.get("/", response_model=List[Impact], summary="List my impacts", description="List impacts for the current user, newest first.")
def list_my_impacts(
    start_date: Optional[date] = Query(None, description="Inclusive lower bound on impact date"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound on impact date"),
    craft_skill: Optional[CraftSkill] = Query(None, description="Only impacts tagged with this craft skill"),
    category: Optional[ImpactCategory] = Query(None, description="Only impacts in this category"),
    current: UserPublic = Depends(get_current_user),
):
    """List impacts with optional filters."""
    _date_range(start_date, end_date)
    return impact_store.list_impacts(
        current.id,
        start_date=start_date,
        end_date=end_date,
        craft_skill=craft_skill.value if craft_skill else None,
        category=category.value if category else None,
    )


# PUBLIC_INTERFACE
@router.get("/options", summary="Impact form options", description="Categories and suggested quantification units.")
def options():
    """Return the values offered by the impact form."""
    return {
        "categories": [c.value for c in ImpactCategory],
        "units": list(QUANTIFICATION_UNITS),
    }


# PUBLIC_INTERFACE
@router.get("/{impact_id}", response_model=Impact, summary="Get impact", description="Return one impact owned by the current user.")
def get_impact(impact_id: str, current: UserPublic = Depends(get_current_user)):
    """Return an impact or 404."""
    imp = impact_store.get_impact(current.id, impact_id)
    if imp is None:
        raise HTTPException(status_code=404, detail="Impact not found")
    return imp


# PUBLIC_INTERFACE
@router.post("/", response_model=Impact, status_code=status.HTTP_201_CREATED, summary="Log impact", description="Log a new impact for the current user.")
def create_impact(
    payload: ImpactCreate,
    current: UserPublic = Depends(get_current_user),
    taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy),
):
    """Create an impact."""
    payload = _resolve_payload(payload, taxonomy)
    return impact_store.create_impact(current.id, payload, source=payload.source)


# PUBLIC_INTERFACE
@router.put("/{impact_id}", response_model=Impact, summary="Update impact", description="Replace an impact's fields.")
def update_impact(
    impact_id: str,
    payload: ImpactCreate,
    current: UserPublic = Depends(get_current_user),
    taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy),
):
    """Update an impact or 404."""
    payload = _resolve_payload(payload, taxonomy)
    source = payload.source if "source" in payload.model_fields_set else None
    imp = impact_store.update_impact(current.id, impact_id, payload, source=source)
    if imp is None:
        raise HTTPException(status_code=404, detail="Impact not found")
    return imp


# PUBLIC_INTERFACE
@router.delete("/{impact_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete impact", description="Delete an impact.")
def delete_impact(impact_id: str, current: UserPublic = Depends(get_current_user)):
    """Delete an impact or 404."""
    if not impact_store.delete_impact(current.id, impact_id):
        raise HTTPException(status_code=404, detail="Impact not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
