"""Domain DTOs for impacts, statistics, period summaries and classification."""
from __future__ import annotations
from datetime import date as Date
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from impact_tracker.rubric.enums import CraftSkill, JobFamily


class ImpactCategory(str, Enum):
    """Kind of outcome an impact produced."""
    RISK_PREVENTED = "Risk Prevented"
    DECISION_ACCELERATED = "Decision Accelerated"
    LAUNCH_UNBLOCKED = "Launch Unblocked"
    TIME_SAVED = "Time Saved"
    PROCESS_IMPROVED = "Process Improved"
    CHANGE_DELIVERED = "Change Delivered"
    TECHNICAL_LEADERSHIP = "Technical Leadership"


QUANTIFICATION_UNITS = (
    "days",
    "hours",
    "weeks",
    "dollars",
    "percent",
    "teams",
    "people",
    "incidents",
    "meetings",
)


class ImpactBase(BaseModel):
    """Fields a user supplies when logging an impact."""
    title: str = Field(..., min_length=1, max_length=500, description="Impact title (or picked expectation text)")
    description: str = Field("", max_length=5000, description="What happened")
    job_family: JobFamily = Field(JobFamily.TPM, description="Job family the impact is logged under")
    impact_category: ImpactCategory = Field(..., description="Impact category")
    craft_skills: List[CraftSkill] = Field(..., min_length=1, description="Craft skills the impact evidences")
    expectation_id: Optional[str] = Field(None, description="Rubric expectation id chosen in the picker")
    quantified_value: Optional[float] = Field(None, description="Quantified value, e.g. 12")
    quantified_unit: Optional[str] = Field(None, max_length=50, description="Unit, e.g. days")
    date: Date = Field(..., description="Date of the impact")
    program_tags: List[str] = Field(default_factory=list, description="Program tags")
    stakeholders: List[str] = Field(default_factory=list, description="Stakeholders involved")
    evidence_links: List[str] = Field(default_factory=list, description="Links to evidence")


class ImpactCreate(ImpactBase):
    """Create/replace payload. Title may be omitted when expectation_id is given."""
    title: Optional[str] = Field(None, max_length=500, description="Impact title; defaults to the expectation text")
    source: str = Field("web", max_length=50, description="Where the impact was captured")


class Impact(ImpactBase):
    """Stored impact."""
    id: str = Field(..., description="Unique ID")
    user_id: str = Field(..., description="Owner user ID")
    source: str = Field("web", description="Where the impact was captured")
    created_at: str = Field(..., description="Creation timestamp (ISO 8601)")
    updated_at: str = Field(..., description="Last update timestamp (ISO 8601)")


class Stats(BaseModel):
    """Aggregated statistics over a user's impacts."""
    total_impacts: int = Field(..., ge=0, description="Number of impacts")
    by_craft_skill: Dict[str, int] = Field(default_factory=dict, description="Impact count per craft skill")
    by_category: Dict[str, int] = Field(default_factory=dict, description="Impact count per category")
    quantified_totals: Dict[str, float] = Field(default_factory=dict, description="Summed values per unit")
    monthly_trend: Dict[str, int] = Field(default_factory=dict, description="Impacts per month (YYYY-MM)")
    craft_skill_coverage: Dict[str, int] = Field(
        default_factory=dict, description="Percent of impacts tagged with each craft skill"
    )


class Period(BaseModel):
    """Inclusive date range."""
    start: Date = Field(..., description="First day")
    end: Date = Field(..., description="Last day")


class PeriodPreset(BaseModel):
    key: str = Field(..., description="Preset key (q1..q4, h1, h2, fy)")
    label: str = Field(..., description="Display label")
    period: Period = Field(..., description="Resolved date range")


class SummaryItem(BaseModel):
    title: str = Field(..., description="Impact title")
    description: str = Field("", description="Impact description")
    quantified_value: Optional[float] = Field(None, description="Quantified value")
    quantified_unit: Optional[str] = Field(None, description="Unit")


class Summary(BaseModel):
    """Impacts in a period grouped by craft skill."""
    period: Period = Field(..., description="Summarized period")
    total_impacts: int = Field(..., ge=0, description="Impacts in the period")
    by_craft_skill: Dict[str, List[SummaryItem]] = Field(default_factory=dict, description="Impacts per craft skill")
    craft_skills_covered: int = Field(..., ge=0, description="Craft skills with at least one impact")
    quantified_totals: Dict[str, float] = Field(default_factory=dict, description="Summed values per unit")


class ClassifyRequest(BaseModel):
    description: str = Field(..., min_length=1, description="Free text to classify")
    job_family: Optional[JobFamily] = Field(None, description="Restrict suggested skills to this job family")


class ClassificationResult(BaseModel):
    """Suggested category, craft skills and metrics for a piece of text."""
    category: ImpactCategory = Field(..., description="Suggested impact category")
    craft_skills: List[CraftSkill] = Field(default_factory=list, description="Suggested craft skills")
    suggested_metrics: List[str] = Field(default_factory=list, description="Suggested units/metrics")
    quantification_prompt: str = Field(..., description="Question prompting the user to quantify")
    confidence: float = Field(..., ge=0, le=1, description="Heuristic confidence")
