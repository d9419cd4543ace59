"""
EPW weather file reader.

Reads the LOCATION header and the hourly data block into a pandas
DataFrame and derives the statistics the measures need: annual and monthly
average dry-bulb, heating/cooling design temperatures and degree days.

Usage:
    epw = EPWFile.load(Path("weather/USA_CO_Denver.725650_TMY3.epw"))
    print(epw.header.city, epw.annual_avg_drybulb, epw.design.heat_99)
"""

from dataclasses import dataclass
from functools import cached_property
from pathlib import Path
from typing import List, Union
import io
import logging

import numpy as np
import pandas as pd

from ..core.units import convert

logger = logging.getLogger(__name__)

# Hourly columns of the EPW data block
EPW_COLUMNS = [
    "year", "month", "day", "hour", "minute", "data_source",
    "drybulb", "dewpoint", "rel_humidity", "pressure",
    "extraterrestrial_horizontal", "extraterrestrial_direct", "horizontal_infrared",
    "ghi", "dni", "dhi",
    "global_illuminance", "direct_illuminance", "diffuse_illuminance", "zenith_luminance",
    "wind_direction", "wind_speed", "total_sky_cover", "opaque_sky_cover",
    "visibility", "ceiling_height", "present_weather_observation", "present_weather_codes",
    "precipitable_water", "aerosol_optical_depth", "snow_depth", "days_since_last_snowfall",
    "albedo", "liquid_precipitation_depth", "liquid_precipitation_quantity",
]


@dataclass
class EPWHeader:
    """EPW LOCATION record."""
    city: str
    state: str
    country: str
    source: str
    wmo: str
    latitude: float
    longitude: float
    timezone: float
    elevation: float  # m


@dataclass
class DesignConditions:
    """Design temperatures in F."""
    heat_99: float
    cool_01: float
    heat_996: float
    cool_004: float
    daily_temp_range: float


def parse_location(line: str) -> EPWHeader:
    """
    Parse the LOCATION line.

    Raises:
        ValueError: If the line is not a LOCATION record
    """
    parts = [p.strip() for p in line.strip().split(",")]
    if not parts or parts[0].upper() != "LOCATION" or len(parts) < 10:
        raise ValueError(f"Invalid EPW LOCATION record: '{line.strip()}'")
    return EPWHeader(
        city=parts[1],
        state=parts[2],
        country=parts[3],
        source=parts[4],
        wmo=parts[5],
        latitude=float(parts[6]),
        longitude=float(parts[7]),
        timezone=float(parts[8]),
        elevation=float(parts[9]),
    )


class EPWFile:
    """Parsed EPW file. Temperatures in `data` are in C, statistics in F."""

    def __init__(self, header: EPWHeader, data: pd.DataFrame, path: Union[Path, None] = None):
        self.header = header
        self.data = data
        self.path = path

    @classmethod
    def load(cls, path: Union[str, Path]) -> "EPWFile":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"'{path}' could not be found.")
        epw = cls.from_string(path.read_text(encoding="utf-8", errors="replace"))
        epw.path = path
        logger.info(f"Loaded weather {epw.header.city}, {epw.header.state} (WMO {epw.header.wmo}) from {path.name}")
        return epw

    @classmethod
    def from_string(cls, text: str) -> "EPWFile":
        lines = text.splitlines()
        if len(lines) < 9:
            raise ValueError("EPW file is missing its header or data records.")
        header = parse_location(lines[0])
        data = pd.read_csv(io.StringIO("\n".join(lines[8:])), header=None)
        data = data.iloc[:, :len(EPW_COLUMNS)]
        data.columns = EPW_COLUMNS[:data.shape[1]]
        return cls(header, data)

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    @property
    def drybulb_f(self) -> pd.Series:
        return self.data["drybulb"] * 1.8 + 32.0

    @cached_property
    def monthly_avg_drybulb(self) -> List[float]:
        """Average dry-bulb (F) per month."""
        return [float(v) for v in self.drybulb_f.groupby(self.data["month"]).mean().reindex(range(1, 13))]

    @property
    def annual_avg_drybulb(self) -> float:
        return float(self.drybulb_f.mean())

    @property
    def daily_avg_drybulb(self) -> pd.Series:
        return self.drybulb_f.groupby([self.data["month"], self.data["day"]]).mean()

    @cached_property
    def design(self) -> DesignConditions:
        temps = self.drybulb_f.to_numpy()
        daily = self.drybulb_f.groupby([self.data["month"], self.data["day"]])
        return DesignConditions(
            heat_99=float(np.percentile(temps, 1.0)),
            cool_01=float(np.percentile(temps, 99.0)),
            heat_996=float(np.percentile(temps, 0.4)),
            cool_004=float(np.percentile(temps, 99.6)),
            daily_temp_range=float((daily.max() - daily.min()).mean()),
        )

    def degree_days(self, base_f: float = 65.0):
        """
        Returns:
            (heating degree days, cooling degree days) from daily averages
        """
        daily = self.daily_avg_drybulb
        hdd = float((base_f - daily).clip(lower=0).sum())
        cdd = float((daily - base_f).clip(lower=0).sum())
        return hdd, cdd

    @property
    def max_monthly_avg_drybulb_diff(self) -> float:
        """Difference (F) between the warmest and coldest monthly averages."""
        return max(self.monthly_avg_drybulb) - min(self.monthly_avg_drybulb)

    @property
    def elevation_ft(self) -> float:
        return convert(self.header.elevation, "m", "ft")
