"""
Map renderer protocol for the opportunity map.

Each renderer module (folium_renderer.py, mock_renderer.py) must expose an
object that satisfies this protocol. Duck typed, no base class.
Positions are always (longitude, latitude).
"""

from typing import Any, Callable, Optional, Protocol, Tuple

from mapsync.markers import MarkerStyle

LngLat = Tuple[float, float]


class MapRenderer(Protocol):
    """Interface that every map backend must implement."""

    # --- Identity ---
    name: str               # Registry key: "folium", "mock"
    requires_token: bool    # True when the tiles need an access token

    # --- Viewport lifecycle ---
    def create_viewport(
        self, container: Any, center: LngLat, zoom: float, access_token: str = ""
    ) -> Any:
        """Create the map surface and return an opaque viewport handle.

        May raise; the controller turns any exception into its terminal
        error state.
        """
        ...

    def remove_viewport(self, viewport: Any) -> None:
        """Release the viewport and everything attached to it."""
        ...

    # --- Markers ---
    def add_marker(
        self, viewport: Any, marker_id: str, position: LngLat, style: MarkerStyle
    ) -> Any:
        """Place a marker and return its handle."""
        ...

    def remove_marker(self, marker: Any) -> None:
        ...

    def on_click(self, marker: Any, callback: Callable[[], None]) -> None:
        """Call ``callback`` whenever the marker is clicked."""
        ...

    # --- Camera ---
    def fly_to(
        self,
        viewport: Any,
        center: LngLat,
        zoom: float,
        speed: float,
        curve: Optional[float] = None,
    ) -> None:
        ...

    # --- Errors ---
    def on_error(self, viewport: Any, callback: Callable[[Exception], None]) -> None:
        """Call ``callback`` when the backend reports a runtime failure."""
        ...
