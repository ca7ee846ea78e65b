"""
Dashboard session: the single owner of filter and selection state.

Every mutation goes through a named method that replaces the criteria value
as a whole. Derived values (filtered list, page window, insight) are read
through properties. Listeners are told after each change so the map view
can reconcile.
"""
import dataclasses
import logging
from typing import Callable, Optional, Union

from config import ALL, FilterCriteria, Settings

from .catalog import CatalogProvider
from .debounce import Debouncer, ManualScheduler, Scheduler
from .filter import DISTANCE, EMPLOYEE, filter_opportunities, unique_departments
from .insights import build_insight, insight_title
from .models import Branch, Opportunity
from .pagination import PageCursor

logger = logging.getLogger(__name__)

Listener = Callable[["DashboardSession"], None]

# Accepted spellings for set_filter_field
_FIELD_ALIASES = {
    "branch": "branch",
    "departments": "departments",
    "employee_bin": "employee_bin",
    "employeeBin": "employee_bin",
    "distance_bin": "distance_bin",
    "distanceBin": "distance_bin",
    "search_term": "search_term",
    "searchTerm": "search_term",
}

_BIN_FIELDS = {EMPLOYEE: "employee_bin", DISTANCE: "distance_bin"}


class DashboardSession:
    """Filter, pagination, selection and insight state for one user session."""

    def __init__(
        self,
        catalog: CatalogProvider,
        settings: Optional[Settings] = None,
        scheduler: Optional[Scheduler] = None,
    ):
        self.settings = settings or Settings()
        self.catalog = catalog
        self._branches = {b.code: b for b in catalog.get_branches()}
        self._departments = unique_departments(catalog.get_opportunities())

        self._filters = self.settings.filter_criteria
        self._filtered = filter_opportunities(catalog.get_opportunities(), self._filters)
        self._cursor = PageCursor(self.settings.page_size)
        self._cursor.reset(len(self._filtered))
        self._selected_opportunity: Optional[Opportunity] = None

        self._listeners: list[Listener] = []

        self.insight_text = ""
        self.insight_title = "Strategic Analysis"
        self.is_loading = False
        self._debouncer = Debouncer(
            self.settings.insight_debounce,
            self._compute_insight,
            scheduler or ManualScheduler(),
        )
        self._schedule_insight()

    # ------------------------------------------------------------------
    # Derived, read-only values
    # ------------------------------------------------------------------

    @property
    def filters(self) -> FilterCriteria:
        return self._filters

    @property
    def filtered_opportunities(self) -> list[Opportunity]:
        return list(self._filtered)

    @property
    def paginated_opportunities(self) -> list[Opportunity]:
        return self._cursor.window(self._filtered).items

    @property
    def total_pages(self) -> int:
        return self._cursor.total_pages

    @property
    def current_page(self) -> int:
        return self._cursor.page

    @property
    def selected_branch(self) -> Optional[Branch]:
        if self._filters.branch == ALL:
            return None
        return self._branches.get(str(self._filters.branch))

    @property
    def selected_opportunity(self) -> Optional[Opportunity]:
        return self._selected_opportunity

    @property
    def branches(self) -> list[Branch]:
        return list(self._branches.values())

    @property
    def departments(self) -> list[str]:
        return list(self._departments)

    @property
    def has_active_filters(self) -> bool:
        return self._filters.has_active_filters

    @property
    def selected_branch_name(self) -> str:
        branch = self.selected_branch
        return branch.city if branch else "National View"

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self)

    # ------------------------------------------------------------------
    # Filter mutators
    # ------------------------------------------------------------------

    def set_filter_field(self, key: str, value):
        field_name = _FIELD_ALIASES.get(key)
        if field_name is None:
            logger.warning(f"Ignoring unknown filter field '{key}'")
            return
        if field_name == "departments":
            if isinstance(value, str):
                value = (value,) if value else ()
            else:
                value = tuple(str(d) for d in (value or ()))
        elif field_name == "search_term":
            value = str(value) if value is not None else ""
        else:
            value = str(value) if value is not None else ALL
        self._replace_filters(dataclasses.replace(self._filters, **{field_name: value}))

    def toggle_department(self, department: str):
        current = self._filters.departments
        if department in current:
            departments = tuple(d for d in current if d != department)
        else:
            departments = current + (department,)
        self._replace_filters(dataclasses.replace(self._filters, departments=departments))

    def toggle_bin(self, kind: str, value: str):
        """Select a bin, or go back to "All" when it is already selected."""
        field_name = _BIN_FIELDS.get(kind) or _FIELD_ALIASES.get(kind)
        if field_name not in ("employee_bin", "distance_bin"):
            logger.warning(f"Ignoring unknown bin kind '{kind}'")
            return
        current = getattr(self._filters, field_name)
        new_value = ALL if current == value else value
        self._replace_filters(dataclasses.replace(self._filters, **{field_name: new_value}))

    def clear_filters(self):
        """Reset departments and bins. Branch and search term are kept."""
        self._replace_filters(dataclasses.replace(
            self._filters,
            departments=(),
            employee_bin=ALL,
            distance_bin=ALL,
        ))

    def select_branch(self, code: Union[str, int]):
        code = str(code)
        if code == ALL:
            new_filters = dataclasses.replace(self._filters, branch=ALL)
        else:
            if code not in self._branches:
                logger.warning(f"Selecting unknown branch {code}")
            new_filters = dataclasses.replace(self._filters, branch=code, search_term="")
        self._replace_filters(new_filters)

    def _replace_filters(self, new_filters: FilterCriteria):
        if new_filters == self._filters:
            return
        self._filters = new_filters
        self._filtered = filter_opportunities(self.catalog.get_opportunities(), new_filters)
        # A new result set invalidates the page and any selection made in the old one
        self._cursor.reset(len(self._filtered))
        self._selected_opportunity = None
        self._schedule_insight()
        self._notify()

    # ------------------------------------------------------------------
    # Pagination and selection
    # ------------------------------------------------------------------

    def set_page(self, page: int):
        before = self._cursor.page
        if self._cursor.set_page(page) != before:
            self._notify()

    def next_page(self):
        before = self._cursor.page
        if self._cursor.next() != before:
            self._notify()

    def previous_page(self):
        before = self._cursor.page
        if self._cursor.previous() != before:
            self._notify()

    def select_opportunity(self, opportunity: Union[str, Opportunity, None]):
        """Select by id (or instance). Only members of the current result set are selectable."""
        if opportunity is None:
            selected = None
        else:
            opp_id = opportunity.id if isinstance(opportunity, Opportunity) else str(opportunity)
            selected = next((o for o in self._filtered if o.id == opp_id), None)
            if selected is None:
                logger.warning(f"Opportunity {opp_id} is not in the current selection, ignoring")
                return

        if selected == self._selected_opportunity:
            return
        self._selected_opportunity = selected
        self._notify()

    # ------------------------------------------------------------------
    # Debounced insight
    # ------------------------------------------------------------------

    def _schedule_insight(self):
        self.is_loading = True
        self._debouncer.trigger()

    def _compute_insight(self):
        self.insight_title = insight_title(self.selected_branch)
        self.insight_text = build_insight(self._filtered)
        self.is_loading = False
        logger.debug(f"Insight updated: {self.insight_text}")
        self._notify()

    def flush_insight(self):
        """Compute a pending insight immediately."""
        self._debouncer.flush()

    def close(self):
        self._debouncer.cancel()
        self.is_loading = False
        self._listeners.clear()
