"""
Configuration settings for the Agent Opportunity Portal.
Loads from environment variables with sensible defaults.
"""
import os
from dataclasses import dataclass, field
from typing import Optional

ALL = "All"


@dataclass(frozen=True)
class FilterCriteria:
    """User-facing filter state. Replace it, never mutate it."""
    branch: str = ALL  # Branch code or "All" for the national view
    departments: tuple[str, ...] = ()
    employee_bin: str = ALL  # "All", "Small", "Medium", "Large"
    distance_bin: str = ALL  # "All", "Close", "Nearby", "Far"
    search_term: str = ""

    @property
    def is_national_view(self) -> bool:
        return self.branch == ALL

    @property
    def has_active_filters(self) -> bool:
        return (
            len(self.departments) > 0
            or self.employee_bin != ALL
            or self.distance_bin != ALL
        )


@dataclass
class MapConfig:
    """Camera and tile configuration for the map view."""
    renderer: str = "folium"
    access_token: str = ""
    tiles: str = "mapbox"  # "mapbox" needs a token; "cartodbpositron" does not
    style_url: str = "mapbox://styles/mapbox/light-v11"

    # (longitude, latitude)
    national_center: tuple[float, float] = (24.5, -29.0)
    national_zoom: float = 5
    branch_initial_zoom: float = 10
    branch_zoom: float = 12
    branch_speed: float = 1.8
    branch_curve: Optional[float] = 1.4
    national_speed: float = 1.8
    opportunity_zoom: float = 14
    opportunity_speed: float = 1.5
    opportunity_curve: Optional[float] = 1.0


@dataclass
class Settings:
    """Main application settings."""
    catalog_path: str = "data/catalog.json"

    page_size: int = 6
    insight_debounce: float = 0.5  # Seconds

    environment: str = "development"

    filter_criteria: FilterCriteria = field(default_factory=FilterCriteria)
    map_config: MapConfig = field(default_factory=MapConfig)

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        filter_criteria = FilterCriteria(
            branch=os.getenv("FILTER_BRANCH", ALL) or ALL,
            departments=tuple(
                d.strip() for d in os.getenv("FILTER_DEPARTMENTS", "").split(",") if d.strip()
            ),
            employee_bin=os.getenv("FILTER_EMPLOYEE_BIN", ALL) or ALL,
            distance_bin=os.getenv("FILTER_DISTANCE_BIN", ALL) or ALL,
            search_term=os.getenv("FILTER_SEARCH", ""),
        )

        map_config = MapConfig(
            renderer=os.getenv("MAP_RENDERER", "folium"),
            access_token=os.getenv("MAPBOX_PK", ""),
            tiles=os.getenv("MAP_TILES", "mapbox"),
        )

        return cls(
            catalog_path=os.getenv("CATALOG_PATH", "data/catalog.json"),
            page_size=int(os.getenv("PAGE_SIZE", 6)),
            insight_debounce=int(os.getenv("INSIGHT_DEBOUNCE_MS", 500)) / 1000,
            environment=os.getenv("APP_ENV", "development"),
            filter_criteria=filter_criteria,
            map_config=map_config,
        )
