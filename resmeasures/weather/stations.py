"""
Weather station lookup and weather archive download.

`weather_dir/data.csv` maps WMO station numbers to EPW file names.
"""

from pathlib import Path
from typing import Optional, Union
import logging
import zipfile

import pandas as pd

from ..utils.retry import download_file

logger = logging.getLogger(__name__)


class WeatherStationError(LookupError):
    """Raised when a station or its EPW file cannot be found."""


class WeatherStations:
    """WMO -> EPW file lookup backed by data.csv."""

    def __init__(self, weather_dir: Union[str, Path]):
        self.weather_dir = Path(weather_dir)
        self._table: Optional[pd.DataFrame] = None

    @property
    def table(self) -> pd.DataFrame:
        if self._table is None:
            csv_path = self.weather_dir / "data.csv"
            if not csv_path.exists():
                raise WeatherStationError(f"'{csv_path}' could not be found.")
            self._table = pd.read_csv(csv_path, dtype=str)
        return self._table

    def epw_path(self, wmo: str) -> Path:
        """
        EPW path of a station.

        Raises:
            WeatherStationError: If the WMO is unknown or its file is missing
        """
        rows = self.table[self.table["wmo"] == str(wmo)]
        if rows.empty:
            raise WeatherStationError(f"Weather station WMO '{wmo}' could not be found in weather/data.csv.")
        epw = self.weather_dir / rows.iloc[0]["filename"]
        if not epw.exists():
            raise WeatherStationError(f"'{epw}' could not be found.")
        return epw


def unzip_weather(zip_path: Path, weather_dir: Path) -> int:
    """
    Extract a weather archive into one flat directory, skipping files that
    already exist.

    Members whose base name was already taken by an earlier member of the
    same archive are skipped with a warning.

    Returns:
        Number of files extracted
    """
    weather_dir.mkdir(parents=True, exist_ok=True)
    extracted = 0
    seen = {}
    with zipfile.ZipFile(zip_path) as archive:
        for member in archive.infolist():
            if member.is_dir():
                continue
            name = Path(member.filename).name
            if name in seen:
                logger.warning(f"Skipping {member.filename} in {zip_path.name}: "
                               f"same file name as {seen[name]}")
                continue
            seen[name] = member.filename
            target = weather_dir / name
            if target.exists():
                continue
            with archive.open(member) as src:
                target.write_bytes(src.read())
            extracted += 1
    logger.info(f"Extracted {extracted} weather files to {weather_dir}")
    return extracted


def fetch_weather(url: str, weather_dir: Path, timeout: int = 600) -> int:
    """
    Download a weather archive (once) and extract it.

    The archive is streamed to a ``.part`` file that only replaces the
    final name once the download completes.
    """
    weather_dir.mkdir(parents=True, exist_ok=True)
    zip_path = weather_dir / Path(url.split("?")[0]).name
    if not zip_path.exists():
        part_path = zip_path.with_name(zip_path.name + ".part")
        logger.info(f"Downloading weather files from {url}")
        try:
            download_file(url, part_path, timeout=timeout)
        except Exception:
            part_path.unlink(missing_ok=True)
            raise
        part_path.replace(zip_path)
    return unzip_weather(zip_path, weather_dir)
