"""Core configuration, unit conversions and shared constants."""

from .config import Settings, settings, get_max_workers
from .exceptions import MeasureError, ConfigError, AnalysisError
from .units import convert

__all__ = [
    "Settings",
    "settings",
    "get_max_workers",
    "MeasureError",
    "ConfigError",
    "AnalysisError",
    "convert",
]
