"""
Templated narrative text for the strategic analysis panel, plus the small
display helpers the panel and opportunity cards share.
"""
from string import Template
from typing import Optional, Sequence

from .models import Branch, BranchStatus, Opportunity

NATIONAL_VIEW = "National View"

INSIGHT_TEMPLATE = Template(
    "Your selection targets $count sites with ~$potential potential clients. "
    "Current overall penetration is $rate%, indicating significant untapped market potential."
)

EMPTY_INSIGHT = (
    "No opportunities match your specific criteria. "
    "Consider widening your filters to uncover more possibilities."
)

STATUS_ICONS = {
    BranchStatus.VALIDATED: ("check-circle", "success"),
    BranchStatus.NEEDS_ANALYSIS: ("alert-triangle", "warning"),
    BranchStatus.HIGH_POTENTIAL: ("trending-up", "info"),
    BranchStatus.LOW_POTENTIAL: ("trending-down", "danger"),
}


def summarize(opportunities: Sequence[Opportunity]) -> dict:
    """Totals behind the insight sentence."""
    total_potential = sum(o.max_employees for o in opportunities)
    total_penetration = sum(o.current_penetration for o in opportunities)
    rate = (total_penetration / total_potential) * 100 if total_potential > 0 else 0.0
    return {
        "count": len(opportunities),
        "total_potential": total_potential,
        "total_penetration": total_penetration,
        "penetration_rate": rate,
    }


def build_insight(opportunities: Sequence[Opportunity]) -> str:
    if not opportunities:
        return EMPTY_INSIGHT
    totals = summarize(opportunities)
    return INSIGHT_TEMPLATE.substitute(
        count=totals["count"],
        potential=f"{totals['total_potential']:,}",
        rate=f"{totals['penetration_rate']:.1f}",
    )


def insight_title(branch: Optional[Branch]) -> str:
    return f"Analysis for {branch.city if branch else NATIONAL_VIEW}"


def status_icon(status: BranchStatus) -> tuple[str, str]:
    """(icon name, colour class) for a branch status."""
    return STATUS_ICONS.get(status, ("help-circle", "muted"))


def format_median_income(value: float) -> str:
    return f"R{value:,.2f}"


def format_headcount(max_employees: int) -> str:
    """Compact marker label: 1.2k above 999, the plain number otherwise."""
    if max_employees > 999:
        return f"{max_employees / 1000:.1f}k"
    return str(max_employees)


def penetration_badge(percent: int) -> str:
    if percent <= 15:
        return "success"
    if percent <= 30:
        return "warning"
    return "danger"
