"""
Filtering and ranking of opportunities.
Matches opportunities against the dashboard's filter criteria and orders
the survivors by potential headcount.
"""
import logging
from typing import Iterable

from config import ALL, FilterCriteria

from .models import Opportunity

logger = logging.getLogger(__name__)

EMPLOYEE = "employee"
DISTANCE = "distance"

# Inclusive ranges; the "All" entry is the fallback for unknown keys
EMPLOYEE_BINS: dict[str, tuple[int, int]] = {
    "Small": (0, 250),
    "Medium": (251, 1000),
    "Large": (1001, 4000),
    ALL: (0, 4000),
}

DISTANCE_BINS: dict[str, tuple[int, int]] = {
    "Close": (0, 5),
    "Nearby": (6, 15),
    "Far": (16, 30),
    ALL: (0, 30),
}

EMPLOYEE_BIN_LABELS = {"Small": "0-250", "Medium": "251-1k", "Large": "1k+"}
DISTANCE_BIN_LABELS = {"Close": "0-5 km", "Nearby": "6-15 km", "Far": "16-30 km"}

_BIN_TABLES = {EMPLOYEE: EMPLOYEE_BINS, DISTANCE: DISTANCE_BINS}


def bin_range(kind: str, key: str) -> tuple[int, int]:
    """Inclusive range for a bin key. Unknown kinds or keys mean "All"."""
    table = _BIN_TABLES.get(kind, EMPLOYEE_BINS)
    return table.get(key, table[ALL])


class OpportunityFilter:
    """Filter opportunities based on criteria."""

    def __init__(self, criteria: FilterCriteria):
        self.criteria = criteria

    def matches(self, opp: Opportunity) -> tuple[bool, str]:
        """
        Check if an opportunity matches the filter criteria.

        Returns:
            Tuple of (matches: bool, reason: str)
        """
        criteria = self.criteria
        failed_reasons = []

        if criteria.branch != ALL and opp.branch_code != str(criteria.branch):
            failed_reasons.append(f"branch {opp.branch_code} != {criteria.branch}")

        departments = criteria.departments or ()
        if departments and opp.department not in departments:
            failed_reasons.append(f"department {opp.department} not in filter")

        min_emp, max_emp = bin_range(EMPLOYEE, criteria.employee_bin)
        if not min_emp <= opp.max_employees <= max_emp:
            failed_reasons.append(f"employees {opp.max_employees} outside {min_emp}-{max_emp}")

        # Distance is relative to a branch, so the national view ignores it
        if criteria.branch != ALL:
            min_dist, max_dist = bin_range(DISTANCE, criteria.distance_bin)
            if not min_dist <= opp.distance <= max_dist:
                failed_reasons.append(f"distance {opp.distance} outside {min_dist}-{max_dist} km")

        term = str(criteria.search_term or "").lower()
        if term and term not in opp.name.lower():
            failed_reasons.append(f"name does not contain '{criteria.search_term}'")

        if failed_reasons:
            return False, "; ".join(failed_reasons)
        return True, "passed all criteria"

    def filter_opportunities(self, opportunities: Iterable[Opportunity]) -> list[Opportunity]:
        """
        Filter and rank opportunities.

        Returns:
            Matching opportunities, largest ``max_employees`` first. Ties keep
            their catalog order.
        """
        matched = []
        total = 0

        for opp in opportunities:
            total += 1
            ok, reason = self.matches(opp)
            if ok:
                matched.append(opp)
            else:
                logger.debug(f"Opportunity {opp.display_name} FILTERED: {reason}")

        matched.sort(key=lambda o: o.max_employees, reverse=True)
        logger.info(f"Filtered {total} opportunities -> {len(matched)} matches")
        return matched


def filter_opportunities(opportunities: Iterable[Opportunity], criteria: FilterCriteria) -> list[Opportunity]:
    return OpportunityFilter(criteria).filter_opportunities(opportunities)


def unique_departments(opportunities: Iterable[Opportunity]) -> list[str]:
    """Departments in order of first appearance."""
    return list(dict.fromkeys(o.department for o in opportunities))
