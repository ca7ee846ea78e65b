from .settings import ALL, FilterCriteria, MapConfig, Settings

__all__ = ["ALL", "FilterCriteria", "MapConfig", "Settings"]
