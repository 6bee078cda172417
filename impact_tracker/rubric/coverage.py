"""Rubric coverage aggregation.

Matches logged entries against the expectations of a (job family, level)
selection. An entry covers an expectation when its job family equals the
selected one, its craft skills include the expectation's skill, and either
its title equals the expectation text exactly or it carries that
expectation's id. The computation is pure: entries and taxonomy are only read.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from impact_tracker.rubric.enums import CraftSkill, JobFamily, Level, parse_job_family, parse_level
from impact_tracker.rubric.taxonomy import Expectation, RubricTaxonomy


class LoggedEntry(BaseModel):
    """Minimal shape of a logged impact as seen by the coverage computation."""
    title: str = Field(..., description="Entry title; equals an expectation text when picked from the rubric")
    job_family: str = Field(..., description="Job family code the entry was logged under")
    craft_skills: List[str] = Field(default_factory=list, description="Craft skill labels")
    expectation_id: Optional[str] = Field(None, description="Expectation id recorded by the picker flow")
    quantified_value: Optional[float] = Field(None, description="Quantified value")
    quantified_unit: Optional[str] = Field(None, description="Unit for the quantified value")


class ExpectationStatus(BaseModel):
    id: str = Field(..., description="Expectation id")
    text: str = Field(..., description="Expectation text")
    covered: bool = Field(..., description="True when at least one entry matches")
    impact_count: int = Field(..., ge=0, description="Number of matching entries")


class SkillCoverage(BaseModel):
    skill: CraftSkill = Field(..., description="Craft skill")
    expectations: List[ExpectationStatus] = Field(default_factory=list, description="Per-expectation status")
    covered: int = Field(..., ge=0, description="Expectations with at least one match")
    total: int = Field(..., ge=0, description="Expectations defined for the skill and level")


class CoverageResult(BaseModel):
    job_family: JobFamily = Field(..., description="Evaluated job family")
    level: Level = Field(..., description="Evaluated level")
    skills: List[SkillCoverage] = Field(default_factory=list, description="Per-skill coverage, display order")
    covered: int = Field(..., ge=0, description="Sum of covered expectations")
    total: int = Field(..., ge=0, description="Sum of defined expectations")
    coverage_percent: int = Field(..., ge=0, le=100, description="round(100 * covered / total), 0 when total is 0")
    remaining: int = Field(..., ge=0, description="Expectations still lacking evidence")


def _percent(part: int, whole: int) -> int:
    # Half-up rounding; whole is never negative.
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def _matches(entry, expectation: Expectation, job_family: JobFamily, skill: CraftSkill) -> bool:
    if entry.job_family != job_family.value:
        return False
    if skill.value not in (entry.craft_skills or ()):
        return False
    if getattr(entry, "expectation_id", None) == expectation.id:
        return True
    return entry.title == expectation.text


# PUBLIC_INTERFACE
def compute_coverage(
    taxonomy: RubricTaxonomy,
    job_family: Union[JobFamily, str],
    level: Union[Level, str],
    entries: Iterable,
) -> CoverageResult:
    """Compute per-skill expectation coverage for a job family and level.

    Args:
        taxonomy: Rubric to evaluate against.
        job_family: Selected job family (member or code).
        level: Selected level (member or name).
        entries: Objects exposing ``title``, ``job_family`` and
            ``craft_skills`` (and optionally ``expectation_id``). Order is
            irrelevant; duplicates each count.

    Returns:
        A freshly built CoverageResult.

    Raises:
        InvalidEnumerationValue: If job_family or level is not a known value.
    """
    jf = parse_job_family(job_family)
    lv = parse_level(level)
    pool = list(entries)

    skills: List[SkillCoverage] = []
    for skill in taxonomy.skills_for_job_family(jf):
        statuses = []
        for exp in taxonomy.expectations_for(jf, skill, lv):
            count = sum(1 for e in pool if _matches(e, exp, jf, skill))
            statuses.append(ExpectationStatus(id=exp.id, text=exp.text, covered=count > 0, impact_count=count))
        skills.append(
            SkillCoverage(
                skill=skill,
                expectations=statuses,
                covered=sum(1 for s in statuses if s.covered),
                total=len(statuses),
            )
        )

    covered = sum(s.covered for s in skills)
    total = sum(s.total for s in skills)
    return CoverageResult(
        job_family=jf,
        level=lv,
        skills=skills,
        covered=covered,
        total=total,
        coverage_percent=_percent(covered, total),
        remaining=total - covered,
    )
