"""Dashboard statistics over a user's impacts."""
from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Optional

from impact_tracker.models.domain import Impact, ImpactCategory, Stats
from impact_tracker.rubric.enums import CraftSkill


def quantified_totals(impacts: Iterable[Impact]) -> Dict[str, float]:
    """Sum quantified values per unit; impacts missing either part (or with 0) are skipped."""
    totals: Dict[str, float] = {}
    for imp in impacts:
        if imp.quantified_value and imp.quantified_unit:
            totals[imp.quantified_unit] = totals.get(imp.quantified_unit, 0) + imp.quantified_value
    return totals


def _recent_months(today: date, months: int) -> List[str]:
    keys = []
    for back in range(months - 1, -1, -1):
        y, m = divmod(today.year * 12 + today.month - 1 - back, 12)
        keys.append(f"{y:04d}-{m + 1:02d}")
    return keys


# PUBLIC_INTERFACE
def compute_stats(impacts: Iterable[Impact], today: Optional[date] = None, months: int = 6) -> Stats:
    """Aggregate counts per craft skill and category, unit totals and a monthly trend.

    The trend covers the last ``months`` calendar months ending with today's
    month; impacts outside that window are not counted there.
    """
    items = list(impacts)
    today = today or date.today()

    by_skill = {s.value: 0 for s in CraftSkill}
    by_category = {c.value: 0 for c in ImpactCategory}
    trend = {k: 0 for k in _recent_months(today, months)}

    for imp in items:
        for skill in set(imp.craft_skills):
            by_skill[skill.value] += 1
        by_category[imp.impact_category.value] += 1
        key = imp.date.strftime("%Y-%m")
        if key in trend:
            trend[key] += 1

    total = len(items)
    coverage = {
        skill: ((200 * count + total) // (2 * total) if total else 0) for skill, count in by_skill.items()
    }
    return Stats(
        total_impacts=total,
        by_craft_skill=by_skill,
        by_category=by_category,
        quantified_totals=quantified_totals(items),
        monthly_trend=trend,
        craft_skill_coverage=coverage,
    )
