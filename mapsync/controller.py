"""
Keeps the map's markers and camera in step with the dashboard state.

The controller is the only code that touches the renderer's viewport.
Every reconciliation pass removes all markers and rebuilds them from the
current state, so calling ``sync`` repeatedly is always safe.
"""

import logging
from typing import Any, Callable, Dict, Optional, Sequence

from config import ALL, MapConfig
from mapsync.markers import (
    branch_marker_id,
    branch_marker_style,
    is_valid_coordinate,
    opportunity_marker_style,
)
from mapsync.protocol import MapRenderer
from portal.models import Branch, Opportunity

logger = logging.getLogger(__name__)

LOAD_FAILED = "Failed to load mapping library"
TOKEN_MISSING = "Mapbox token is missing"
INIT_FAILED = "Failed to initialize map"
RUNTIME_FAILED = "Map failed to load"


class MapSyncController:
    """Marker lifecycle and camera control for one map view."""

    def __init__(
        self,
        renderer: Optional[MapRenderer],
        branches: Sequence[Branch],
        map_config: Optional[MapConfig] = None,
        on_select: Optional[Callable[[Opportunity], None]] = None,
        on_branch_select: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
    ):
        self.renderer = renderer
        self.branches = list(branches)
        self.config = map_config or MapConfig()
        self.on_select = on_select
        self.on_branch_select = on_branch_select
        self.on_error = on_error

        self.viewport: Any = None
        self.markers: Dict[str, Any] = {}
        self.error: Optional[str] = None

        self._last_branch_code: Optional[str] = None
        self._last_opportunity_id: Optional[str] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    @property
    def active(self) -> bool:
        return self.viewport is not None and self.error is None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self, container: Any = None, selected_branch: Optional[Branch] = None) -> bool:
        """Create the viewport once. Returns False when the map is unavailable."""
        if self.error:
            return False
        if self.viewport is not None:
            return True

        if self.renderer is None:
            self._fail(LOAD_FAILED)
            return False

        token = self.config.access_token
        if self.renderer.requires_token and not token:
            self._fail(TOKEN_MISSING)
            return False

        if selected_branch and is_valid_coordinate(selected_branch.longitude, selected_branch.latitude):
            center = (selected_branch.longitude, selected_branch.latitude)
            zoom = self.config.branch_initial_zoom
        else:
            center = self.config.national_center
            zoom = self.config.national_zoom

        try:
            self.viewport = self.renderer.create_viewport(container, center, zoom, token)
            self.renderer.on_error(self.viewport, self._handle_map_error)
        except Exception as e:
            logger.error(f"Map initialization error: {e}", exc_info=True)
            self._fail(INIT_FAILED)
            return False

        self._last_branch_code = selected_branch.code if selected_branch else ALL
        self._last_opportunity_id = None
        logger.info(f"Map mounted at {center} zoom {zoom} using {self.renderer.name}")
        return True

    def attach(self, session, container: Any = None) -> bool:
        """Mount against a DashboardSession and follow its changes."""
        self.on_select = session.select_opportunity
        self.on_branch_select = session.select_branch
        if not self.mount(container, session.selected_branch):
            return False
        if self._unsubscribe is None:
            self._unsubscribe = session.subscribe(self.sync_session)
        self.sync_session(session)
        return True

    def teardown(self):
        """Release markers, listeners and the viewport. Safe to call twice."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

        if self.renderer is not None:
            self._clear_markers()
            if self.viewport is not None:
                try:
                    self.renderer.remove_viewport(self.viewport)
                except Exception as e:
                    logger.error(f"Failed to remove map viewport: {e}")
        self.markers.clear()
        self.viewport = None
        self._last_branch_code = None
        self._last_opportunity_id = None

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def sync_session(self, session):
        self.sync(
            session.filtered_opportunities,
            session.paginated_opportunities,
            session.selected_branch,
            session.selected_opportunity,
        )

    def sync(
        self,
        opportunities: Sequence[Opportunity],
        visible: Sequence[Opportunity],
        selected_branch: Optional[Branch],
        selected_opportunity: Optional[Opportunity],
    ):
        """Rebuild every marker, then move the camera if the selection changed."""
        if not self.active:
            return
        try:
            self._rebuild_markers(opportunities, visible, selected_branch, selected_opportunity)
            self._update_branch_camera(selected_branch)
            self._update_opportunity_camera(selected_opportunity)
        except Exception as e:
            logger.error(f"Map error: {e}", exc_info=True)
            self._fail(RUNTIME_FAILED)

    def _rebuild_markers(self, opportunities, visible, selected_branch, selected_opportunity):
        self._clear_markers()

        selected_code = selected_branch.code if selected_branch else None
        for branch in self.branches:
            if not is_valid_coordinate(branch.longitude, branch.latitude):
                logger.debug(f"Skipping branch {branch.code}: invalid coordinates")
                continue
            style = branch_marker_style(branch, branch.code == selected_code)
            marker_id = branch_marker_id(branch.code)
            marker = self.renderer.add_marker(
                self.viewport, marker_id, (branch.longitude, branch.latitude), style
            )
            self.renderer.on_click(marker, self._branch_click_handler(branch))
            self.markers[marker_id] = marker

        visible_ids = {o.id for o in visible}
        selected_id = selected_opportunity.id if selected_opportunity else None
        skipped = 0
        for opp in opportunities:
            if not is_valid_coordinate(opp.longitude, opp.latitude):
                skipped += 1
                logger.debug(f"Skipping opportunity {opp.display_name}: invalid coordinates")
                continue
            style = opportunity_marker_style(opp, opp.id in visible_ids, opp.id == selected_id)
            marker = self.renderer.add_marker(
                self.viewport, opp.id, (opp.longitude, opp.latitude), style
            )
            self.renderer.on_click(marker, self._opportunity_click_handler(opp))
            self.markers[opp.id] = marker

        if skipped:
            logger.warning(f"Skipped {skipped} opportunities with invalid coordinates")

    def _clear_markers(self):
        for marker in self.markers.values():
            try:
                self.renderer.remove_marker(marker)
            except Exception as e:
                logger.error(f"Failed to remove marker: {e}")
        self.markers.clear()

    def _opportunity_click_handler(self, opp: Opportunity) -> Callable[[], None]:
        def handler():
            if self.error is None and self.on_select is not None:
                self.on_select(opp)
        return handler

    def _branch_click_handler(self, branch: Branch) -> Callable[[], None]:
        def handler():
            if self.error is None and self.on_branch_select is not None:
                self.on_branch_select(branch.code)
        return handler

    # ------------------------------------------------------------------
    # Camera
    # ------------------------------------------------------------------

    def _update_branch_camera(self, selected_branch: Optional[Branch]):
        code = selected_branch.code if selected_branch else ALL
        if code == self._last_branch_code:
            return
        self._last_branch_code = code

        cfg = self.config
        if selected_branch is None:
            self.renderer.fly_to(self.viewport, cfg.national_center, cfg.national_zoom, cfg.national_speed)
        elif is_valid_coordinate(selected_branch.longitude, selected_branch.latitude):
            self.renderer.fly_to(
                self.viewport,
                (selected_branch.longitude, selected_branch.latitude),
                cfg.branch_zoom,
                cfg.branch_speed,
                cfg.branch_curve,
            )
        else:
            logger.warning(f"Branch {selected_branch.code} has invalid coordinates, camera not moved")

    def _update_opportunity_camera(self, selected_opportunity: Optional[Opportunity]):
        opp_id = selected_opportunity.id if selected_opportunity else None
        if opp_id == self._last_opportunity_id:
            return
        self._last_opportunity_id = opp_id

        if selected_opportunity is None:
            return
        if not is_valid_coordinate(selected_opportunity.longitude, selected_opportunity.latitude):
            logger.warning(f"Opportunity {selected_opportunity.display_name} has invalid coordinates")
            return
        cfg = self.config
        self.renderer.fly_to(
            self.viewport,
            (selected_opportunity.longitude, selected_opportunity.latitude),
            cfg.opportunity_zoom,
            cfg.opportunity_speed,
            cfg.opportunity_curve,
        )

    # ------------------------------------------------------------------
    # Errors
    # ------------------------------------------------------------------

    def _handle_map_error(self, error: Exception):
        logger.error(f"Map error: {error}")
        self._fail(RUNTIME_FAILED)

    def _fail(self, message: str):
        if self.error is not None:
            return
        self.error = message
        logger.error(f"Map unavailable: {message}")
        if self.on_error is not None:
            self.on_error(message)
