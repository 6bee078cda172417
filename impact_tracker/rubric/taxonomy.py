"""Craft skills rubric taxonomy.

Holds the static (craft skill, level) -> expectations table together with the
descriptive data for job families, levels and skills. A RubricTaxonomy is
built once from the rubric dataset and never mutated afterwards, so a single
instance is shared by every request.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from impact_tracker.rubric.enums import (
    CraftSkill,
    InvalidEnumerationValue,
    JobFamily,
    Level,
    parse_craft_skill,
    parse_job_family,
    parse_level,
)


class RubricDataError(ValueError):
    """The rubric dataset is malformed or disagrees with the fixed enumerations."""


class Expectation(BaseModel):
    """One rubric statement for a (craft skill, level) pair."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable expectation identifier (e.g., cse-st-1)")
    text: str = Field(..., description="Expectation display text")


class JobFamilyInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: JobFamily = Field(..., description="Job family code")
    full_name: str = Field(..., description="Job family display name")
    description: str = Field("", description="Job family summary")
    specific_skill: CraftSkill = Field(..., description="The job-specific craft skill")


class LevelInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Level = Field(..., description="Level name")
    ic_grade: Optional[str] = Field(None, description="Individual contributor grade(s)")
    manager_grade: Optional[str] = Field(None, description="People manager grade(s)")
    description: str = Field("", description="Level summary")


class CraftSkillInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: CraftSkill = Field(..., description="Craft skill name")
    description: str = Field("", description="Craft skill summary")
    shared: bool = Field(..., description="True if the skill applies to every job family")
    applicable_to: Tuple[JobFamily, ...] = Field(..., description="Job families the skill applies to")


ExpectationTable = Mapping[Tuple[CraftSkill, Level], Tuple[Expectation, ...]]


class RubricTaxonomy:
    """Immutable lookup over the rubric.

    Missing (skill, level) cells are allowed and read as zero expectations.
    """

    def __init__(
        self,
        expectations: Mapping[Tuple[CraftSkill, Level], List[Expectation]],
        skills: Optional[Mapping[CraftSkill, CraftSkillInfo]] = None,
        levels: Optional[Mapping[Level, LevelInfo]] = None,
        job_families: Optional[Mapping[JobFamily, JobFamilyInfo]] = None,
    ):
        table: Dict[Tuple[CraftSkill, Level], Tuple[Expectation, ...]] = {}
        by_id: Dict[str, Tuple[CraftSkill, Level, Expectation]] = {}
        for (skill, level), items in expectations.items():
            skill, level = parse_craft_skill(skill), parse_level(level)
            table[(skill, level)] = tuple(items)
            for exp in items:
                if exp.id in by_id:
                    raise RubricDataError(f"Duplicate expectation id: {exp.id}")
                by_id[exp.id] = (skill, level, exp)
        self._expectations: ExpectationTable = MappingProxyType(table)
        self._by_id = MappingProxyType(by_id)

        self._skills = MappingProxyType({
            s: (skills or {}).get(s) or CraftSkillInfo(
                name=s,
                shared=s.shared,
                applicable_to=tuple(jf for jf in JobFamily if jf in s.applicable_job_families),
            )
            for s in CraftSkill
        })
        self._levels = MappingProxyType({
            lv: (levels or {}).get(lv) or LevelInfo(name=lv) for lv in Level
        })
        self._job_families = MappingProxyType({
            jf: (job_families or {}).get(jf) or JobFamilyInfo(
                name=jf, full_name=jf.full_name, specific_skill=jf.specific_skill
            )
            for jf in JobFamily
        })

    # PUBLIC_INTERFACE
    @classmethod
    def from_dataset(cls, data: Mapping[str, Any]) -> "RubricTaxonomy":
        """Build a taxonomy from the rubric dataset dictionary.

        Expected shape: ``{"job_families": [...], "levels": [...],
        "craft_skills": [{"name", "description", "shared", "applicable_to",
        "expectations": {level: [{"id", "text"}, ...]}}]}``.

        Raises:
            RubricDataError: On unknown names, duplicate ids, or an
                ``applicable_to`` list that disagrees with the job families.
        """
        try:
            job_families = {}
            for row in data.get("job_families", []):
                jf = parse_job_family(row["name"])
                job_families[jf] = JobFamilyInfo(
                    name=jf,
                    full_name=row.get("full_name") or jf.full_name,
                    description=row.get("description") or "",
                    specific_skill=jf.specific_skill,
                )

            levels = {}
            for row in data.get("levels", []):
                lv = parse_level(row["name"])
                levels[lv] = LevelInfo(
                    name=lv,
                    ic_grade=row.get("ic_grade"),
                    manager_grade=row.get("manager_grade"),
                    description=row.get("description") or "",
                )

            skills = {}
            expectations: Dict[Tuple[CraftSkill, Level], List[Expectation]] = {}
            for row in data.get("craft_skills", []):
                skill = parse_craft_skill(row["name"])
                declared = {parse_job_family(v) for v in row.get("applicable_to", [])}
                if declared and declared != set(skill.applicable_job_families):
                    raise RubricDataError(f"applicable_to for {skill.value!r} does not match job families")
                if "shared" in row and bool(row["shared"]) != skill.shared:
                    raise RubricDataError(f"shared flag for {skill.value!r} is wrong")
                skills[skill] = CraftSkillInfo(
                    name=skill,
                    description=row.get("description") or "",
                    shared=skill.shared,
                    applicable_to=tuple(jf for jf in JobFamily if jf in skill.applicable_job_families),
                )
                for level_name, items in (row.get("expectations") or {}).items():
                    expectations[(skill, parse_level(level_name))] = [
                        Expectation(id=str(i["id"]), text=str(i["text"])) for i in items
                    ]
        except InvalidEnumerationValue as exc:
            raise RubricDataError(str(exc)) from exc
        except (KeyError, TypeError, AttributeError) as exc:
            raise RubricDataError(f"Malformed rubric dataset: {exc!r}") from exc

        return cls(expectations, skills=skills, levels=levels, job_families=job_families)

    # PUBLIC_INTERFACE
    def skills_for_job_family(self, job_family: Union[JobFamily, str]) -> List[CraftSkill]:
        """Return the four shared skills in declaration order, then the family's specific skill."""
        return list(parse_job_family(job_family).craft_skills)

    # PUBLIC_INTERFACE
    def expectations_for(
        self,
        job_family: Union[JobFamily, str],
        skill: Union[CraftSkill, str],
        level: Union[Level, str],
    ) -> List[Expectation]:
        """Return the ordered expectations for (skill, level) under a job family.

        A skill that does not apply to the job family, or a cell with no
        entries, yields an empty list. Values outside the enumerations raise
        InvalidEnumerationValue.
        """
        jf = parse_job_family(job_family)
        skill = parse_craft_skill(skill)
        level = parse_level(level)
        if jf not in skill.applicable_job_families:
            return []
        return list(self._expectations.get((skill, level), ()))

    def job_specific_skill(self, job_family: Union[JobFamily, str]) -> CraftSkill:
        return parse_job_family(job_family).specific_skill

    def job_families(self) -> List[JobFamilyInfo]:
        return list(self._job_families.values())

    def job_family_info(self, job_family: Union[JobFamily, str]) -> JobFamilyInfo:
        return self._job_families[parse_job_family(job_family)]

    def levels(self) -> List[LevelInfo]:
        return list(self._levels.values())

    def level_info(self, level: Union[Level, str]) -> LevelInfo:
        return self._levels[parse_level(level)]

    def skill_info(self, skill: Union[CraftSkill, str]) -> CraftSkillInfo:
        return self._skills[parse_craft_skill(skill)]

    def find_expectation(self, expectation_id: str) -> Optional[Tuple[CraftSkill, Level, Expectation]]:
        """Look up an expectation by id; returns (skill, level, expectation) or None."""
        return self._by_id.get(expectation_id)

    @property
    def expectation_count(self) -> int:
        return len(self._by_id)
