"""
folium-backed map renderer.

folium produces a static Leaflet page, so the viewport keeps the live state
(camera and markers) and ``render_html`` draws a fresh map from it. Camera
flights become the map's centre and zoom on the next render.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import folium

from config import MapConfig
from mapsync import register_renderer
from mapsync.markers import MarkerStyle
from mapsync.protocol import LngLat

logger = logging.getLogger(__name__)

MARKER_COLORS = {
    "success": "#16A34A",
    "warning": "#F59E0B",
    "danger": "#DC2626",
    "branch": "#2E2A8A",
    "branch-selected": "#7F00FF",
}
RING_COLOR = "#F97316"
BUILDING_GLYPH = "&#127970;"

MAPBOX_TILE_URL = "https://api.mapbox.com/styles/v1/{style}/tiles/{{z}}/{{x}}/{{y}}?access_token={token}"
MAPBOX_ATTRIBUTION = "© Mapbox © OpenStreetMap"

# Degrees; Leaflet reports the marker's own position on click
CLICK_TOLERANCE = 1e-6


@dataclass
class FoliumMarker:
    marker_id: str
    position: LngLat
    style: MarkerStyle
    click_callbacks: List[Callable[[], None]] = field(default_factory=list)
    viewport: Any = field(default=None, repr=False, compare=False)


@dataclass
class FoliumViewport:
    container: Any
    center: LngLat
    zoom: float
    access_token: str = ""
    markers: Dict[str, FoliumMarker] = field(default_factory=dict)
    error_callbacks: List[Callable[[Exception], None]] = field(default_factory=list)


def marker_html(style: MarkerStyle) -> str:
    """Inline-styled element for a DivIcon."""
    size = style.size
    background = MARKER_COLORS.get(style.color, "#6B7280")
    border = f"3px solid {RING_COLOR}" if style.ring else "2px solid rgba(255,255,255,0.85)"
    content = BUILDING_GLYPH if style.kind == "branch" else style.label
    return (
        f'<div style="width:{size:.0f}px;height:{size:.0f}px;border-radius:50%;'
        f"background:{background};border:{border};opacity:{style.opacity};"
        f"transform:scale({style.scale});display:flex;align-items:center;"
        f"justify-content:center;color:#fff;font-weight:700;font-size:{style.font_size}px;"
        f'box-shadow:0 2px 6px rgba(0,0,0,0.3);cursor:pointer;">{content}</div>'
    )


class FoliumRenderer:
    """Renders the opportunity map as a Leaflet page through folium."""

    name = "folium"

    def __init__(self, tiles: str = "mapbox", style_url: str = "mapbox://styles/mapbox/light-v11"):
        self.tiles = tiles
        self.style = style_url.replace("mapbox://styles/", "")

    @property
    def requires_token(self) -> bool:
        return self.tiles == "mapbox"

    def create_viewport(self, container, center, zoom, access_token=""):
        return FoliumViewport(container, tuple(center), zoom, access_token)

    def remove_viewport(self, viewport: FoliumViewport):
        viewport.markers.clear()
        viewport.error_callbacks.clear()

    def add_marker(self, viewport: FoliumViewport, marker_id, position, style):
        marker = FoliumMarker(marker_id, tuple(position), style, viewport=viewport)
        viewport.markers[marker_id] = marker
        return marker

    def remove_marker(self, marker: FoliumMarker):
        marker.click_callbacks.clear()
        viewport = marker.viewport
        if viewport is not None and viewport.markers.get(marker.marker_id) is marker:
            del viewport.markers[marker.marker_id]

    def on_click(self, marker: FoliumMarker, callback):
        marker.click_callbacks.append(callback)

    def fly_to(self, viewport: FoliumViewport, center, zoom, speed, curve=None):
        logger.debug(f"Camera to {center} zoom {zoom} (speed {speed}, curve {curve})")
        viewport.center = tuple(center)
        viewport.zoom = zoom

    def on_error(self, viewport: FoliumViewport, callback):
        viewport.error_callbacks.append(callback)

    def dispatch_click(self, viewport: FoliumViewport, marker_id: str) -> bool:
        """Forward a click reported by the page back to the marker's handlers."""
        marker = viewport.markers.get(marker_id)
        if marker is None:
            return False
        for callback in list(marker.click_callbacks):
            callback()
        return True

    def marker_at(self, viewport: FoliumViewport, lat: float, lng: float) -> Optional[str]:
        """Id of the marker drawn at (lat, lng). Opportunities win over a branch on the same spot."""
        hits = [
            mk for mk in viewport.markers.values()
            if abs(mk.position[1] - lat) <= CLICK_TOLERANCE and abs(mk.position[0] - lng) <= CLICK_TOLERANCE
        ]
        if not hits:
            return None
        hits.sort(key=lambda mk: mk.style.kind == "branch")
        return hits[0].marker_id

    def dispatch_map_event(self, viewport: FoliumViewport, event: Optional[dict]) -> Optional[str]:
        """Route the ``last_object_clicked`` position from st_folium to the clicked marker.

        Returns the marker id that handled the click, or None.
        """
        clicked = (event or {}).get("last_object_clicked")
        if not clicked:
            return None
        try:
            lat, lng = float(clicked["lat"]), float(clicked["lng"])
        except (KeyError, TypeError, ValueError):
            logger.debug(f"Ignoring malformed map click: {clicked}")
            return None
        marker_id = self.marker_at(viewport, lat, lng)
        if marker_id is None or not self.dispatch_click(viewport, marker_id):
            return None
        return marker_id

    # --- Drawing ---

    def build_map(self, viewport: FoliumViewport) -> folium.Map:
        lng, lat = viewport.center
        if self.tiles == "mapbox":
            m = folium.Map(
                location=[lat, lng],
                zoom_start=viewport.zoom,
                tiles=MAPBOX_TILE_URL.format(style=self.style, token=viewport.access_token),
                attr=MAPBOX_ATTRIBUTION,
            )
        else:
            m = folium.Map(location=[lat, lng], zoom_start=viewport.zoom, tiles=self.tiles)

        # Branches first so opportunity markers sit on top
        ordered = sorted(viewport.markers.values(), key=lambda mk: mk.style.kind != "branch")
        for marker in ordered:
            m_lng, m_lat = marker.position
            size = marker.style.size
            folium.Marker(
                location=[m_lat, m_lng],
                icon=folium.DivIcon(
                    html=marker_html(marker.style),
                    icon_size=(size, size),
                    icon_anchor=(size / 2, size / 2),
                ),
                tooltip=marker.style.tooltip or None,
            ).add_to(m)
        return m

    def render_map(self, viewport: FoliumViewport) -> Optional[folium.Map]:
        """folium.Map for the viewport, or None after reporting an error."""
        try:
            return self.build_map(viewport)
        except Exception as e:
            self._report(viewport, e)
            return None

    def render_html(self, viewport: FoliumViewport) -> Optional[str]:
        """Full HTML page for the viewport, or None after reporting an error."""
        try:
            return self.build_map(viewport).get_root().render()
        except Exception as e:
            self._report(viewport, e)
            return None

    def save(self, viewport: FoliumViewport, path: str) -> Optional[Path]:
        html = self.render_html(viewport)
        if html is None:
            return None
        filepath = Path(path)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(html, encoding="utf-8")
        logger.info(f"Map saved to {filepath}")
        return filepath

    def _report(self, viewport: FoliumViewport, error: Exception):
        logger.error(f"Map rendering failed: {error}", exc_info=True)
        for callback in list(viewport.error_callbacks):
            callback(error)


def _create(map_config: MapConfig) -> FoliumRenderer:
    return FoliumRenderer(tiles=map_config.tiles, style_url=map_config.style_url)


register_renderer("folium", _create)
