"""
Environment diagnostics shown when the map is not configured correctly.
"""
import platform
from datetime import datetime, timezone

from config import Settings


def collect_diagnostics(settings: Settings) -> dict:
    return {
        "map_token": "Set" if settings.map_config.access_token else "Missing",
        "map_renderer": settings.map_config.renderer,
        "environment": settings.environment or "unknown",
        "checked_at": datetime.now(timezone.utc).isoformat(),
        "python": platform.python_version(),
    }


def should_show_diagnostics(settings: Settings, diagnostics: dict) -> bool:
    """Hide the panel in production once the token is present."""
    return not (settings.environment == "production" and diagnostics["map_token"] == "Set")
