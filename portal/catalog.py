"""
Static catalog of branches and opportunities.

The catalog is loaded once at start-up and is read-only afterwards, so
every component can share the same instance.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Protocol, Sequence

from .models import Branch, Opportunity

logger = logging.getLogger(__name__)


class CatalogProvider(Protocol):
    """Anything that can hand out the branch and opportunity lists."""

    def get_branches(self) -> Sequence[Branch]:
        ...

    def get_opportunities(self) -> Sequence[Opportunity]:
        ...


class StaticCatalog:
    """In-memory catalog backed by immutable tuples."""

    def __init__(self, branches: Sequence[Branch], opportunities: Sequence[Opportunity]):
        self._branches = tuple(branches)
        self._opportunities = tuple(opportunities)
        self._branch_index = {b.code: b for b in self._branches}
        self._opportunity_index = {o.id: o for o in self._opportunities}

    def get_branches(self) -> tuple[Branch, ...]:
        return self._branches

    def get_opportunities(self) -> tuple[Opportunity, ...]:
        return self._opportunities

    def find_branch(self, code: str) -> Optional[Branch]:
        return self._branch_index.get(str(code))

    def find_opportunity(self, opportunity_id: str) -> Optional[Opportunity]:
        return self._opportunity_index.get(str(opportunity_id))

    @classmethod
    def from_dict(cls, data: dict) -> "StaticCatalog":
        branches = [Branch.from_dict(b) for b in data.get("branches", [])]
        opportunities = [Opportunity.from_dict(o) for o in data.get("opportunities", [])]
        _validate(branches, opportunities)
        return cls(branches, opportunities)


def _validate(branches: list[Branch], opportunities: list[Opportunity]):
    """Reject duplicate keys and broken penetration figures."""
    codes = [b.code for b in branches]
    if len(codes) != len(set(codes)):
        raise ValueError("Duplicate branch codes in catalog")

    ids = [o.id for o in opportunities]
    if len(ids) != len(set(ids)):
        raise ValueError("Duplicate opportunity ids in catalog")

    known = set(codes)
    for opp in opportunities:
        if opp.current_penetration > opp.max_employees:
            raise ValueError(
                f"Opportunity {opp.display_name}: penetration {opp.current_penetration} "
                f"exceeds max employees {opp.max_employees}"
            )
        if opp.branch_code not in known:
            logger.warning(f"Opportunity {opp.display_name} references unknown branch {opp.branch_code}")


def load_catalog(path: str) -> StaticCatalog:
    """Load the catalog JSON file (``{"branches": [...], "opportunities": [...]}``)."""
    filepath = Path(path)
    if not filepath.exists():
        raise FileNotFoundError(f"Catalog not found: {filepath}")

    with open(filepath, "r", encoding="utf-8") as f:
        data = json.load(f)

    catalog = StaticCatalog.from_dict(data)
    logger.info(
        f"Loaded catalog from {filepath}: {len(catalog.get_branches())} branches, "
        f"{len(catalog.get_opportunities())} opportunities"
    )
    return catalog
