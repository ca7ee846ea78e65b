"""
Marker geometry and styling for branches and opportunities.
"""
import math
from dataclasses import dataclass

from portal.insights import format_headcount, penetration_badge
from portal.models import Branch, Opportunity

MIN_MARKER_SIZE = 24
MAX_MARKER_SIZE = 48
SIZE_REFERENCE_EMPLOYEES = 4000
BRANCH_MARKER_SIZE = 40

SELECTED_OPPORTUNITY_SCALE = 1.25
SELECTED_BRANCH_SCALE = 1.1
DIMMED_OPACITY = 0.5


@dataclass(frozen=True)
class MarkerStyle:
    """Visual state of a single marker, independent of the map backend."""
    kind: str                 # "branch" or "opportunity"
    size: float               # Pixels
    color: str                # "success" / "warning" / "danger" / "branch" / "branch-selected"
    opacity: float = 1.0
    scale: float = 1.0
    selected: bool = False
    ring: bool = False
    label: str = ""
    font_size: int = 10
    tooltip: str = ""


def branch_marker_id(code: str) -> str:
    return f"branch-{code}"


def is_valid_coordinate(lng, lat) -> bool:
    """Both finite numbers, longitude in [-180, 180] and latitude in [-90, 90]."""
    for value in (lng, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if math.isnan(value) or math.isinf(value):
            return False
    return -180 <= lng <= 180 and -90 <= lat <= 90


def opportunity_marker_size(max_employees: int) -> float:
    """Linear in headcount, clamped to [24, 48]."""
    size = (max_employees / SIZE_REFERENCE_EMPLOYEES) * MAX_MARKER_SIZE
    return max(MIN_MARKER_SIZE, min(MAX_MARKER_SIZE, size))


def penetration_color(opp: Opportunity) -> str:
    return penetration_badge(opp.penetration_percent)


def opportunity_marker_style(opp: Opportunity, in_current_page: bool, selected: bool) -> MarkerStyle:
    size = opportunity_marker_size(opp.max_employees)
    return MarkerStyle(
        kind="opportunity",
        size=size,
        color=penetration_color(opp),
        opacity=1.0 if in_current_page else DIMMED_OPACITY,
        scale=SELECTED_OPPORTUNITY_SCALE if selected else 1.0,
        selected=selected,
        ring=selected,
        label=format_headcount(opp.max_employees),
        font_size=12 if size > 32 else 10,
        tooltip=f"{opp.name} · {opp.penetration_percent}% penetration",
    )


def branch_marker_style(branch: Branch, selected: bool) -> MarkerStyle:
    return MarkerStyle(
        kind="branch",
        size=BRANCH_MARKER_SIZE,
        color="branch-selected" if selected else "branch",
        scale=SELECTED_BRANCH_SCALE if selected else 1.0,
        selected=selected,
        tooltip=branch.city,
    )
