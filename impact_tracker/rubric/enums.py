"""Closed enumerations for the craft skills rubric.

Job families, levels and craft skills are fixed reference values. Each job
family carries its one job-specific craft skill, so the family -> skill
mapping cannot be incomplete.

Callers that hold raw strings (query params, stored rows) should go through
the parse_* helpers, which raise InvalidEnumerationValue instead of silently
defaulting.
"""
from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Tuple, Type, TypeVar, Union


class InvalidEnumerationValue(ValueError):
    """A job family, level or craft skill outside the fixed set was supplied."""

    def __init__(self, kind: str, value: object, allowed: Tuple[str, ...]):
        self.kind = kind
        self.value = value
        self.allowed = allowed
        super().__init__(f"Invalid {kind}: {value!r}. Expected one of: {', '.join(allowed)}")


class CraftSkill(str, Enum):
    """Competency areas; the first four are shared by every job family."""

    CONNECT_STRATEGY_TO_EXECUTION = "Connect Strategy to Execution"
    EXECUTE_WITH_RIGOR = "Execute with Rigor"
    ENABLE_SCALE_AND_VELOCITY = "Enable Scale and Velocity"
    LEAD_CHANGE = "Lead Change"
    TECHNICAL_DOMAIN_EXPERTISE = "Technical Domain Expertise"
    DOMAIN_EXPERTISE = "Domain Expertise"
    SOLVE_BUSINESS_PROBLEMS = "Solve Business Problems"

    @property
    def shared(self) -> bool:
        return self in SHARED_CRAFT_SKILLS

    @property
    def applicable_job_families(self) -> FrozenSet["JobFamily"]:
        if self.shared:
            return frozenset(JobFamily)
        return frozenset(jf for jf in JobFamily if jf.specific_skill is self)


# Declaration order is the display order for every job family.
SHARED_CRAFT_SKILLS: Tuple[CraftSkill, ...] = (
    CraftSkill.CONNECT_STRATEGY_TO_EXECUTION,
    CraftSkill.EXECUTE_WITH_RIGOR,
    CraftSkill.ENABLE_SCALE_AND_VELOCITY,
    CraftSkill.LEAD_CHANGE,
)


class JobFamily(str, Enum):
    """Career tracks. Each member is (code, full name, job-specific skill)."""

    TPM = ("TPM", "Technical Program Manager", CraftSkill.TECHNICAL_DOMAIN_EXPERTISE)
    PGM = ("PgM", "Program Manager", CraftSkill.DOMAIN_EXPERTISE)
    PJM = ("PjM", "Project Manager", CraftSkill.DOMAIN_EXPERTISE)
    BIZOPS = ("BizOps", "Business Operations", CraftSkill.SOLVE_BUSINESS_PROBLEMS)

    def __new__(cls, value: str, full_name: str, specific_skill: CraftSkill):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.full_name = full_name
        obj.specific_skill = specific_skill
        return obj

    @property
    def craft_skills(self) -> Tuple[CraftSkill, ...]:
        return SHARED_CRAFT_SKILLS + (self.specific_skill,)


class Level(str, Enum):
    """Seniority tiers, least to most senior."""

    MANAGER = "Manager"
    SENIOR = "Senior"
    STAFF = "Staff"
    SR_STAFF = "Sr. Staff"
    PRINCIPAL = "Principal"
    DIRECTOR = "Director"
    VP = "VP"


E = TypeVar("E", bound=Enum)


def _parse(enum_cls: Type[E], kind: str, value: Union[E, str]) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidEnumerationValue(kind, value, tuple(m.value for m in enum_cls)) from None


# PUBLIC_INTERFACE
def parse_job_family(value: Union[JobFamily, str]) -> JobFamily:
    """Return the JobFamily for a member or its code; raise InvalidEnumerationValue otherwise."""
    return _parse(JobFamily, "job family", value)


# PUBLIC_INTERFACE
def parse_level(value: Union[Level, str]) -> Level:
    """Return the Level for a member or its name; raise InvalidEnumerationValue otherwise."""
    return _parse(Level, "level", value)


# PUBLIC_INTERFACE
def parse_craft_skill(value: Union[CraftSkill, str]) -> CraftSkill:
    """Return the CraftSkill for a member or its name; raise InvalidEnumerationValue otherwise."""
    return _parse(CraftSkill, "craft skill", value)
