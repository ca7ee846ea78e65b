"""
Agent Opportunity Portal
========================

Filtering, ranking and pagination of branch sales opportunities, with the
state object that drives the dashboard and its map.

Usage:
    from config import Settings
    from portal import DashboardSession, load_catalog

    settings = Settings.from_env()
    session = DashboardSession(load_catalog(settings.catalog_path), settings)
    session.select_branch("101")
"""

from .models import Branch, BranchStatus, Opportunity, StrategicValue
from .catalog import CatalogProvider, StaticCatalog, load_catalog
from .filter import OpportunityFilter, filter_opportunities, bin_range, unique_departments
from .pagination import Page, PageCursor, paginate
from .insights import build_insight, insight_title
from .debounce import AsyncioScheduler, Debouncer, ImmediateScheduler, ManualScheduler
from .session import DashboardSession

__all__ = [
    "Branch",
    "BranchStatus",
    "Opportunity",
    "StrategicValue",
    "CatalogProvider",
    "StaticCatalog",
    "load_catalog",
    "OpportunityFilter",
    "filter_opportunities",
    "bin_range",
    "unique_departments",
    "Page",
    "PageCursor",
    "paginate",
    "build_insight",
    "insight_title",
    "AsyncioScheduler",
    "Debouncer",
    "ImmediateScheduler",
    "ManualScheduler",
    "DashboardSession",
]

__version__ = "1.0.0"
