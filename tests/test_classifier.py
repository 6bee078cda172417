import pytest

from impact_tracker.models.domain import ImpactCategory
from impact_tracker.rubric.enums import CraftSkill, JobFamily
from impact_tracker.services.classifier import DEFAULT_CONFIDENCE, KeywordClassifier


@pytest.mark.parametrize(
    "text, category",
    [
        ("Aligned stakeholders and reached agreement on scope", ImpactCategory.DECISION_ACCELERATED),
        ("Automated the weekly report", ImpactCategory.TIME_SAVED),
        ("Removed a dependency blocking the team", ImpactCategory.LAUNCH_UNBLOCKED),
        ("Introduced a standard intake framework", ImpactCategory.PROCESS_IMPROVED),
        ("Drove adoption of the new on-call rotation", ImpactCategory.CHANGE_DELIVERED),
        ("Led the design review for the payments system", ImpactCategory.TECHNICAL_LEADERSHIP),
        ("Met with folks", ImpactCategory.PROCESS_IMPROVED),
    ],
)
def test_category_keywords(text, category):
    assert KeywordClassifier().classify(text).category is category


def test_first_matching_category_wins():
    result = KeywordClassifier().classify("Prevented a risky launch slip, saving 3 weeks for 4 teams")
    assert result.category is ImpactCategory.RISK_PREVENTED
    assert result.craft_skills == [CraftSkill.EXECUTE_WITH_RIGOR, CraftSkill.TECHNICAL_DOMAIN_EXPERTISE]
    assert result.suggested_metrics == ["risks mitigated", "incidents prevented"]
    assert result.quantification_prompt == "How many days/weeks were saved or prevented?"
    assert result.confidence == DEFAULT_CONFIDENCE


def test_skills_and_metrics_follow_category():
    clf = KeywordClassifier()
    decision = clf.classify("Aligned stakeholders and reached agreement on scope")
    assert decision.craft_skills == [CraftSkill.CONNECT_STRATEGY_TO_EXECUTION, CraftSkill.LEAD_CHANGE]
    assert decision.suggested_metrics == ["decisions made", "days saved"]
    assert decision.quantification_prompt == "How would you quantify this impact?"

    saved = clf.classify("Automated the weekly report")
    assert saved.craft_skills == [CraftSkill.ENABLE_SCALE_AND_VELOCITY]
    assert saved.suggested_metrics == ["hours saved", "days saved", "weeks saved"]

    unblocked = clf.classify("Removed a dependency blocking the team")
    assert unblocked.suggested_metrics == ["teams unblocked", "days saved"]
    assert unblocked.quantification_prompt == "How many teams or people were impacted?"

    default = clf.classify("Met with folks")
    assert default.craft_skills == [CraftSkill.ENABLE_SCALE_AND_VELOCITY]
    assert default.suggested_metrics == ["teams impacted", "processes improved"]


def test_skills_filtered_by_job_family():
    clf = KeywordClassifier()
    text = "Led the design review for the payments system"
    assert clf.classify(text).craft_skills == [CraftSkill.TECHNICAL_DOMAIN_EXPERTISE, CraftSkill.CONNECT_STRATEGY_TO_EXECUTION]
    assert clf.classify(text, job_family=JobFamily.TPM).craft_skills == [
        CraftSkill.TECHNICAL_DOMAIN_EXPERTISE,
        CraftSkill.CONNECT_STRATEGY_TO_EXECUTION,
    ]
    assert clf.classify(text, job_family=JobFamily.PGM).craft_skills == [CraftSkill.CONNECT_STRATEGY_TO_EXECUTION]
    risk = clf.classify("Mitigated an outage risk", job_family=JobFamily.BIZOPS)
    assert risk.craft_skills == [CraftSkill.EXECUTE_WITH_RIGOR]


def test_classify_endpoint(client):
    r = client.post("/ai/classify", json={"description": "Cut cost by $40k with a roadmap reset", "job_family": "TPM"})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["category"] == "Process Improved"
    assert data["craft_skills"] == ["Enable Scale and Velocity"]
    assert data["suggested_metrics"] == ["teams impacted", "processes improved"]
    assert data["quantification_prompt"] == "What was the dollar value of the impact?"

    r = client.post("/ai/classify", json={"description": ""})
    assert r.status_code == 422
