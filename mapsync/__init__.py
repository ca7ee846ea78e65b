"""
Renderer registry for the opportunity map.

Renderer modules register themselves at import time. ``load_renderer`` is a
one-shot attempt to import and build the configured backend; it returns
None on failure and the controller reports the map as unavailable.
"""

import importlib
import logging
from typing import Callable, Dict, Optional

from config import MapConfig
from mapsync.protocol import MapRenderer

logger = logging.getLogger(__name__)

RendererFactory = Callable[[MapConfig], MapRenderer]

RENDERER_REGISTRY: Dict[str, RendererFactory] = {}


def register_renderer(name: str, factory: RendererFactory) -> None:
    """Register a renderer factory. Called at module import time."""
    RENDERER_REGISTRY[name] = factory
    logger.debug(f"Registered map renderer: {name}")


def get_renderer_factory(name: str) -> RendererFactory:
    """Get a renderer factory by name. Raises KeyError if not registered."""
    return RENDERER_REGISTRY[name]


def load_renderer(map_config: MapConfig) -> Optional[MapRenderer]:
    """Import the configured renderer module and build the renderer.

    MAP_RENDERER=folium → mapsync.folium_renderer
    MAP_RENDERER=mock   → mapsync.mock_renderer
    """
    name = map_config.renderer
    if name not in RENDERER_REGISTRY:
        try:
            importlib.import_module(f"mapsync.{name}_renderer")
        except ImportError as e:
            logger.error(f"Failed to load map renderer '{name}': {e}")
            return None

    if name not in RENDERER_REGISTRY:
        logger.error(f"Map renderer '{name}' did not register itself")
        return None

    try:
        return RENDERER_REGISTRY[name](map_config)
    except Exception as e:
        logger.error(f"Failed to create map renderer '{name}': {e}", exc_info=True)
        return None
