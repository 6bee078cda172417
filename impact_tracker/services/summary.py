"""Period summaries, fiscal period presets and text exports.

The fiscal year starts on the first day of ``start_month`` and is named after
the calendar year in which it ends (with an August start, FY26 runs
2025-08-01 .. 2026-07-31).
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable, List, Optional

from impact_tracker.models.domain import Impact, Period, PeriodPreset, Summary, SummaryItem
from impact_tracker.rubric.enums import CraftSkill
from impact_tracker.services.stats import quantified_totals

# key -> (label, month offset from fiscal year start, length in months)
PERIOD_PRESETS = {
    "q1": ("Q1", 0, 3),
    "q2": ("Q2", 3, 3),
    "q3": ("Q3", 6, 3),
    "q4": ("Q4", 9, 3),
    "h1": ("H1", 0, 6),
    "h2": ("H2", 6, 6),
    "fy": ("FY", 0, 12),
}


def _add_months(d: date, months: int) -> date:
    y, m = divmod(d.year * 12 + d.month - 1 + months, 12)
    return date(y, m + 1, 1)


def fiscal_year_start(today: date, start_month: int = 8) -> date:
    """First day of the fiscal year containing ``today``."""
    year = today.year if today.month >= start_month else today.year - 1
    return date(year, start_month, 1)


def fiscal_year(today: date, start_month: int = 8) -> int:
    """Calendar year in which the fiscal year containing ``today`` ends."""
    return (_add_months(fiscal_year_start(today, start_month), 12) - timedelta(days=1)).year


# PUBLIC_INTERFACE
def fiscal_period(key: str, today: Optional[date] = None, start_month: int = 8) -> PeriodPreset:
    """Resolve a preset key (q1..q4, h1, h2, fy) within the current fiscal year.

    Raises:
        KeyError: For an unknown preset key.
    """
    label, offset, length = PERIOD_PRESETS[key]
    today = today or date.today()
    fy_start = fiscal_year_start(today, start_month)
    start = _add_months(fy_start, offset)
    end = _add_months(start, length) - timedelta(days=1)
    if key == "fy":
        label = f"FY{fiscal_year(today, start_month) % 100:02d}"
    return PeriodPreset(key=key, label=label, period=Period(start=start, end=end))


def fiscal_periods(today: Optional[date] = None, start_month: int = 8) -> List[PeriodPreset]:
    return [fiscal_period(k, today, start_month) for k in PERIOD_PRESETS]


def report_title(preset: Optional[str], today: Optional[date] = None, start_month: int = 8) -> str:
    """Heading for exported summaries; mid-year and end-year reports get their own names."""
    fy = f"FY{fiscal_year(today or date.today(), start_month) % 100:02d}"
    if preset == "h1":
        return f"Mid-Year Impact Summary - H1 {fy}"
    if preset == "fy":
        return f"End-Year Impact Summary - {fy}"
    return "Impact Summary"


# PUBLIC_INTERFACE
def build_summary(impacts: Iterable[Impact], period: Period) -> Summary:
    """Group impacts inside ``period`` by craft skill, in craft skill declaration order."""
    items = [i for i in impacts if period.start <= i.date <= period.end]
    by_skill = {}
    for skill in CraftSkill:
        tagged = [
            SummaryItem(
                title=i.title,
                description=i.description,
                quantified_value=i.quantified_value,
                quantified_unit=i.quantified_unit,
            )
            for i in items
            if skill in i.craft_skills
        ]
        if tagged:
            by_skill[skill.value] = tagged
    return Summary(
        period=period,
        total_impacts=len(items),
        by_craft_skill=by_skill,
        craft_skills_covered=len(by_skill),
        quantified_totals=quantified_totals(items),
    )


def _num(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


def _quantity(item: SummaryItem) -> Optional[str]:
    if item.quantified_value and item.quantified_unit:
        return f"{_num(item.quantified_value)} {item.quantified_unit}"
    return None


# PUBLIC_INTERFACE
def render_plain_text(summary: Summary, title: str = "Impact Summary") -> str:
    """Render a summary as the plain-text report used for copy/paste."""
    lines = [
        title,
        f"Period: {summary.period.start.isoformat()} to {summary.period.end.isoformat()}",
        f"Total Impacts: {summary.total_impacts}",
        "",
        "=== BY CRAFT SKILL ===",
        "",
    ]
    for skill, items in summary.by_craft_skill.items():
        lines.append(f"{skill} ({len(items)})")
        for item in items:
            qty = _quantity(item)
            lines.append(f"  • {item.title}" + (f" [{qty}]" if qty else ""))
        lines.append("")
    if summary.quantified_totals:
        lines.append("=== QUANTIFIED TOTALS ===")
        for unit, total in summary.quantified_totals.items():
            lines.append(f"  {unit}: {_num(total)}")
    return "\n".join(lines) + "\n"


# PUBLIC_INTERFACE
def render_markdown(summary: Summary, title: str = "Impact Summary") -> str:
    """Render a summary as markdown with one section per craft skill."""
    out = f"# {title}\n\n"
    out += f"_{summary.period.start.isoformat()} to {summary.period.end.isoformat()}, {summary.total_impacts} impacts_\n\n"
    for skill, items in summary.by_craft_skill.items():
        out += f"## {skill}\n\n"
        for item in items:
            qty = _quantity(item)
            out += f"- **{item.title}**" + (f" ({qty})" if qty else "") + "\n"
            if item.description:
                out += f"  {item.description}\n"
            out += "\n"
    if summary.quantified_totals:
        out += "## Quantified Impact\n\n"
        for unit, total in summary.quantified_totals.items():
            out += f"- **{_num(total)} {unit}**\n"
    return out
