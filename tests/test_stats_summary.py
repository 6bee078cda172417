from datetime import date

import pytest

from impact_tracker.models.domain import Impact, Period
from impact_tracker.services.stats import compute_stats
from impact_tracker.services.summary import (
    build_summary,
    fiscal_period,
    fiscal_periods,
    fiscal_year,
    render_markdown,
    render_plain_text,
    report_title,
)

TODAY = date(2026, 10, 19)


def _impact(n, day, skills, category="Time Saved", value=None, unit=None, title=None):
    return Impact(
        id=f"i{n}",
        user_id="u1",
        title=title or f"Impact {n}",
        description=f"Description {n}",
        impact_category=category,
        craft_skills=skills,
        quantified_value=value,
        quantified_unit=unit,
        date=day,
        created_at="2026-10-01T00:00:00+00:00",
        updated_at="2026-10-01T00:00:00+00:00",
    )


@pytest.fixture
def impacts():
    return [
        _impact(1, date(2026, 10, 2), ["Execute with Rigor", "Lead Change"], value=12, unit="days"),
        _impact(2, date(2026, 9, 15), ["Execute with Rigor"], category="Risk Prevented", value=3, unit="days"),
        _impact(3, date(2026, 8, 1), ["Technical Domain Expertise"], value=2.5, unit="teams"),
        _impact(4, date(2025, 12, 1), ["Lead Change"], value=0, unit="hours"),
    ]


def test_stats_counts_and_trend(impacts):
    stats = compute_stats(impacts, today=TODAY)
    assert stats.total_impacts == 4
    assert stats.by_craft_skill["Execute with Rigor"] == 2
    assert stats.by_craft_skill["Solve Business Problems"] == 0
    assert stats.by_category == {
        "Risk Prevented": 1,
        "Decision Accelerated": 0,
        "Launch Unblocked": 0,
        "Time Saved": 3,
        "Process Improved": 0,
        "Change Delivered": 0,
        "Technical Leadership": 0,
    }
    assert stats.quantified_totals == {"days": 15, "teams": 2.5}
    assert list(stats.monthly_trend) == ["2026-05", "2026-06", "2026-07", "2026-08", "2026-09", "2026-10"]
    assert stats.monthly_trend["2026-10"] == 1
    assert stats.monthly_trend["2026-08"] == 1
    assert sum(stats.monthly_trend.values()) == 3
    assert stats.craft_skill_coverage["Execute with Rigor"] == 50
    assert stats.craft_skill_coverage["Technical Domain Expertise"] == 25


def test_stats_empty():
    stats = compute_stats([], today=TODAY)
    assert stats.total_impacts == 0
    assert set(stats.craft_skill_coverage.values()) == {0}
    assert stats.quantified_totals == {}


def test_repeated_skill_counts_once():
    stats = compute_stats([_impact(1, TODAY, ["Lead Change", "Lead Change"])], today=TODAY)
    assert stats.by_craft_skill["Lead Change"] == 1
    assert stats.craft_skill_coverage["Lead Change"] == 100


def test_fiscal_year_starts_in_august():
    assert fiscal_year(TODAY) == 2027
    assert fiscal_year(date(2026, 7, 31)) == 2026
    fy = fiscal_period("fy", today=TODAY)
    assert fy.label == "FY27"
    assert fy.period == Period(start=date(2026, 8, 1), end=date(2027, 7, 31))
    assert fiscal_period("q1", today=TODAY).period == Period(start=date(2026, 8, 1), end=date(2026, 10, 31))
    assert fiscal_period("q2", today=TODAY).period == Period(start=date(2026, 11, 1), end=date(2027, 1, 31))
    assert fiscal_period("h2", today=TODAY).period == Period(start=date(2027, 2, 1), end=date(2027, 7, 31))
    assert [p.key for p in fiscal_periods(today=TODAY)] == ["q1", "q2", "q3", "q4", "h1", "h2", "fy"]
    with pytest.raises(KeyError):
        fiscal_period("q5", today=TODAY)


def test_fiscal_year_with_january_start():
    assert fiscal_period("fy", today=TODAY, start_month=1).period == Period(start=date(2026, 1, 1), end=date(2026, 12, 31))
    assert fiscal_year(TODAY, start_month=1) == 2026


def test_report_titles():
    assert report_title("h1", today=TODAY) == "Mid-Year Impact Summary - H1 FY27"
    assert report_title("fy", today=TODAY) == "End-Year Impact Summary - FY27"
    assert report_title(None, today=TODAY) == "Impact Summary"


def test_summary_groups_by_skill_in_order(impacts):
    summary = build_summary(impacts, fiscal_period("q1", today=TODAY).period)
    assert summary.total_impacts == 3
    assert list(summary.by_craft_skill) == ["Execute with Rigor", "Lead Change", "Technical Domain Expertise"]
    assert [i.title for i in summary.by_craft_skill["Execute with Rigor"]] == ["Impact 1", "Impact 2"]
    assert summary.craft_skills_covered == 3
    assert summary.quantified_totals == {"days": 15, "teams": 2.5}


def test_plain_text_report(impacts):
    summary = build_summary(impacts, fiscal_period("q1", today=TODAY).period)
    text = render_plain_text(summary)
    lines = text.splitlines()
    assert lines[:3] == ["Impact Summary", "Period: 2026-08-01 to 2026-10-31", "Total Impacts: 3"]
    assert "=== BY CRAFT SKILL ===" in lines
    assert "Execute with Rigor (2)" in lines
    assert "  • Impact 1 [12 days]" in lines
    assert "  • Impact 3 [2.5 teams]" in lines
    assert lines[-2:] == ["  days: 15", "  teams: 2.5"]


def test_markdown_report(impacts):
    summary = build_summary(impacts, fiscal_period("fy", today=TODAY).period)
    md = render_markdown(summary, title="End-Year Impact Summary - FY27")
    assert md.startswith("# End-Year Impact Summary - FY27\n")
    assert "## Lead Change\n" in md
    assert "- **Impact 1** (12 days)\n  Description 1\n" in md
    assert "## Quantified Impact" in md
    assert "- **15 days**" in md


def test_empty_summary_renders():
    summary = build_summary([], Period(start=TODAY, end=TODAY))
    assert summary.by_craft_skill == {}
    assert "QUANTIFIED TOTALS" not in render_plain_text(summary)
