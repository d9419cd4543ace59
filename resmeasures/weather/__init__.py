"""Weather files and station lookup."""

from .epw import EPWFile, EPWHeader, DesignConditions, parse_location
from .stations import WeatherStations, WeatherStationError, fetch_weather, unzip_weather

__all__ = [
    "EPWFile",
    "EPWHeader",
    "DesignConditions",
    "parse_location",
    "WeatherStations",
    "WeatherStationError",
    "fetch_weather",
    "unzip_weather",
]
