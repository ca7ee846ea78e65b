"""
Recording map renderer for tests and headless runs.
Keeps everything in memory and never draws anything.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from config import MapConfig
from mapsync import register_renderer
from mapsync.markers import MarkerStyle
from mapsync.protocol import LngLat

logger = logging.getLogger(__name__)


@dataclass
class MockMarker:
    marker_id: str
    position: LngLat
    style: MarkerStyle
    removed: bool = False
    click_callbacks: List[Callable[[], None]] = field(default_factory=list)


@dataclass
class MockViewport:
    container: Any
    center: LngLat
    zoom: float
    access_token: str = ""
    removed: bool = False
    markers: Dict[str, MockMarker] = field(default_factory=dict)
    error_callbacks: List[Callable[[Exception], None]] = field(default_factory=list)
    flights: List[dict] = field(default_factory=list)


class MockMapRenderer:
    """In-memory renderer that records every call."""

    name = "mock"

    def __init__(self, requires_token: bool = False, fail_on_create: bool = False):
        self.requires_token = requires_token
        self.fail_on_create = fail_on_create
        self.viewports: List[MockViewport] = []
        self.calls: List[tuple] = []

    def create_viewport(self, container, center, zoom, access_token=""):
        self.calls.append(("create_viewport", center, zoom))
        if self.fail_on_create:
            raise RuntimeError("mock viewport creation failed")
        viewport = MockViewport(container, center, zoom, access_token)
        self.viewports.append(viewport)
        return viewport

    def remove_viewport(self, viewport: MockViewport):
        self.calls.append(("remove_viewport",))
        viewport.removed = True
        viewport.markers.clear()
        viewport.error_callbacks.clear()

    def add_marker(self, viewport: MockViewport, marker_id, position, style):
        self.calls.append(("add_marker", marker_id))
        marker = MockMarker(marker_id, position, style)
        viewport.markers[marker_id] = marker
        return marker

    def remove_marker(self, marker: MockMarker):
        self.calls.append(("remove_marker", marker.marker_id))
        marker.removed = True
        marker.click_callbacks.clear()
        for viewport in self.viewports:
            if viewport.markers.get(marker.marker_id) is marker:
                del viewport.markers[marker.marker_id]

    def on_click(self, marker: MockMarker, callback):
        marker.click_callbacks.append(callback)

    def fly_to(self, viewport: MockViewport, center, zoom, speed, curve=None):
        self.calls.append(("fly_to", center, zoom))
        viewport.flights.append({"center": center, "zoom": zoom, "speed": speed, "curve": curve})
        viewport.center = center
        viewport.zoom = zoom

    def on_error(self, viewport: MockViewport, callback):
        viewport.error_callbacks.append(callback)

    # --- Test helpers ---

    @property
    def viewport(self) -> Optional[MockViewport]:
        return self.viewports[-1] if self.viewports else None

    def click(self, marker_id: str):
        """Simulate a user click on a live marker."""
        marker = self.viewport.markers[marker_id]
        for callback in list(marker.click_callbacks):
            callback()

    def emit_error(self, error: Exception):
        for callback in list(self.viewport.error_callbacks):
            callback(error)


def _create(map_config: MapConfig) -> MockMapRenderer:
    return MockMapRenderer()


register_renderer("mock", _create)
