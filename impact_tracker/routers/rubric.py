"""Craft skills rubric endpoints: taxonomy lookups and coverage."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from impact_tracker.core.config import get_settings
from impact_tracker.data_readers.json_provider import get_rubric_taxonomy
from impact_tracker.models.auth import UserPublic
from impact_tracker.routers.auth import get_current_user
from impact_tracker.rubric.coverage import CoverageResult, compute_coverage
from impact_tracker.rubric.enums import CraftSkill, JobFamily, Level
from impact_tracker.rubric.taxonomy import CraftSkillInfo, Expectation, JobFamilyInfo, LevelInfo, RubricTaxonomy
from impact_tracker.services import impact_store

router = APIRouter(prefix="/rubric", tags=["rubric"])


# PUBLIC_INTERFACE
@router.get("/job-families", response_model=List[JobFamilyInfo], summary="Job families", description="List job families with their job-specific craft skill.")
def job_families(taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy)):
    """Return job families."""
    return taxonomy.job_families()


# PUBLIC_INTERFACE
@router.get("/levels", response_model=List[LevelInfo], summary="Levels", description="List levels from least to most senior.")
def levels(taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy)):
    """Return levels."""
    return taxonomy.levels()


# PUBLIC_INTERFACE
@router.get("/skills", response_model=List[CraftSkillInfo], summary="Craft skills", description="Shared craft skills followed by the job family's specific skill.")
def skills(
    job_family: JobFamily = Query(..., description="Job family code"),
    taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy),
):
    """Return the five craft skills for a job family."""
    return [taxonomy.skill_info(s) for s in taxonomy.skills_for_job_family(job_family)]


# PUBLIC_INTERFACE
@router.get("/expectations", response_model=List[Expectation], summary="Expectations", description="Expectations for a craft skill at a level; empty when none apply.")
def expectations(
    job_family: JobFamily = Query(..., description="Job family code"),
    skill: CraftSkill = Query(..., description="Craft skill name"),
    level: Level = Query(..., description="Level name"),
    taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy),
):
    """Return expectations; a skill outside the job family yields an empty list."""
    return taxonomy.expectations_for(job_family, skill, level)


# PUBLIC_INTERFACE
@router.get("/coverage", response_model=CoverageResult, summary="Rubric coverage", description="Per-skill expectation coverage from the current user's impacts.")
def coverage(
    job_family: Optional[JobFamily] = Query(None, description="Defaults to the user's selection"),
    level: Optional[Level] = Query(None, description="Defaults to the user's selection"),
    start_date: Optional[date] = Query(None, description="Only count impacts on or after this date"),
    end_date: Optional[date] = Query(None, description="Only count impacts on or before this date"),
    current: UserPublic = Depends(get_current_user),
    taxonomy: RubricTaxonomy = Depends(get_rubric_taxonomy),
):
    """Compute coverage for the selected (or stored, or default) job family and level.

    A stored selection that is no longer a valid value raises
    InvalidEnumerationValue, which the app maps to 422.
    """
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")
    settings = get_settings()
    jf = job_family or current.job_family or settings.default_job_family
    lv = level or current.level or settings.default_level
    impacts = impact_store.list_impacts(current.id, start_date=start_date, end_date=end_date)
    return compute_coverage(taxonomy, jf, lv, impacts)
