"""Impact text classification.

Routers depend on the ImpactClassifier protocol; KeywordClassifier is the
default substring heuristic. A model-backed classifier can replace it by
overriding get_classifier().
"""
from __future__ import annotations

from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from impact_tracker.models.domain import ClassificationResult, ImpactCategory
from impact_tracker.rubric.enums import CraftSkill, JobFamily

# Evaluated in order; the first matching rule wins.
CATEGORY_RULES: Sequence[Tuple[ImpactCategory, Tuple[str, ...]]] = (
    (ImpactCategory.RISK_PREVENTED, ("risk", "prevent", "avoid", "mitigat")),
    (ImpactCategory.DECISION_ACCELERATED, ("decision", "align", "stakeholder", "agreement")),
    (ImpactCategory.LAUNCH_UNBLOCKED, ("launch", "unblock", "blocker", "dependency")),
    (ImpactCategory.TIME_SAVED, ("automat", "save", "time", "efficien")),
    (ImpactCategory.PROCESS_IMPROVED, ("process", "framework", "template", "standard")),
    (ImpactCategory.CHANGE_DELIVERED, ("change", "transform", "adopt", "rollout")),
    (ImpactCategory.TECHNICAL_LEADERSHIP, ("architect", "technical", "design", "system")),
)

DEFAULT_CATEGORY = ImpactCategory.PROCESS_IMPROVED

CATEGORY_SKILLS: Dict[ImpactCategory, Tuple[CraftSkill, ...]] = {
    ImpactCategory.RISK_PREVENTED: (CraftSkill.EXECUTE_WITH_RIGOR, CraftSkill.TECHNICAL_DOMAIN_EXPERTISE),
    ImpactCategory.DECISION_ACCELERATED: (CraftSkill.CONNECT_STRATEGY_TO_EXECUTION, CraftSkill.LEAD_CHANGE),
    ImpactCategory.LAUNCH_UNBLOCKED: (CraftSkill.EXECUTE_WITH_RIGOR, CraftSkill.ENABLE_SCALE_AND_VELOCITY),
    ImpactCategory.TIME_SAVED: (CraftSkill.ENABLE_SCALE_AND_VELOCITY,),
    ImpactCategory.PROCESS_IMPROVED: (CraftSkill.ENABLE_SCALE_AND_VELOCITY,),
    ImpactCategory.CHANGE_DELIVERED: (CraftSkill.LEAD_CHANGE,),
    ImpactCategory.TECHNICAL_LEADERSHIP: (
        CraftSkill.TECHNICAL_DOMAIN_EXPERTISE,
        CraftSkill.CONNECT_STRATEGY_TO_EXECUTION,
    ),
}

CATEGORY_METRICS: Dict[ImpactCategory, Tuple[str, ...]] = {
    ImpactCategory.TIME_SAVED: ("hours saved", "days saved", "weeks saved"),
    ImpactCategory.RISK_PREVENTED: ("risks mitigated", "incidents prevented"),
    ImpactCategory.LAUNCH_UNBLOCKED: ("teams unblocked", "days saved"),
    ImpactCategory.DECISION_ACCELERATED: ("decisions made", "days saved"),
}
DEFAULT_METRICS = ("teams impacted", "processes improved")

DEFAULT_CONFIDENCE = 0.7


class ImpactClassifier(Protocol):
    def classify(self, text: str, job_family: Optional[JobFamily] = None) -> ClassificationResult:
        ...


def _any_in(text: str, needles: Sequence[str]) -> bool:
    return any(n in text for n in needles)


def _quantification_prompt(text: str) -> str:
    if _any_in(text, ("week", "day", "time")):
        return "How many days/weeks were saved or prevented?"
    if _any_in(text, ("team", "people")):
        return "How many teams or people were impacted?"
    if _any_in(text, ("cost", "$", "dollar")):
        return "What was the dollar value of the impact?"
    return "How would you quantify this impact?"


class KeywordClassifier:
    """Substring keyword heuristic over lower-cased text.

    The category decides the suggested craft skills and metrics. Skills that
    do not apply to ``job_family`` are dropped; every category maps to at
    least one shared skill, so the list is never empty.
    """

    def classify(self, text: str, job_family: Optional[JobFamily] = None) -> ClassificationResult:
        lowered = text.lower()

        category = next(
            (cat for cat, words in CATEGORY_RULES if _any_in(lowered, words)),
            DEFAULT_CATEGORY,
        )

        skills: List[CraftSkill] = list(CATEGORY_SKILLS[category])
        if job_family is not None:
            skills = [s for s in skills if job_family in s.applicable_job_families]

        return ClassificationResult(
            category=category,
            craft_skills=skills,
            suggested_metrics=list(CATEGORY_METRICS.get(category, DEFAULT_METRICS)),
            quantification_prompt=_quantification_prompt(lowered),
            confidence=DEFAULT_CONFIDENCE,
        )


_default_classifier = KeywordClassifier()


# PUBLIC_INTERFACE
def get_classifier() -> ImpactClassifier:
    """FastAPI dependency returning the active classifier."""
    return _default_classifier
