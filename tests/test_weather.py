"""
Tests for EPW parsing and weather station lookup.
"""

import zipfile
from unittest.mock import patch

import pytest

from resmeasures.weather import (
    EPWFile,
    WeatherStationError,
    WeatherStations,
    fetch_weather,
    parse_location,
    unzip_weather,
)


class TestEPWFile:
    """Tests for weather statistics."""

    @pytest.fixture
    def epw(self, sample_epw_content):
        return EPWFile.from_string(sample_epw_content)

    def test_header(self, epw):
        assert epw.header.wmo == "725650"
        assert epw.header.latitude == pytest.approx(39.83)
        assert epw.elevation_ft == pytest.approx(5413.4, rel=1e-4)

    def test_monthly_averages(self, epw):
        monthly = epw.monthly_avg_drybulb

        assert len(monthly) == 12
        assert monthly[0] == pytest.approx(28.4)
        assert monthly[6] == pytest.approx(75.2)
        assert epw.max_monthly_avg_drybulb_diff == pytest.approx(46.8)

    def test_design_conditions(self, epw):
        design = epw.design

        assert design.heat_99 == pytest.approx(28.4)
        assert design.cool_01 == pytest.approx(75.2)
        assert design.daily_temp_range == pytest.approx(0.0)

    def test_degree_days(self, epw):
        """June, July and August are the only months above 65 F."""
        hdd, cdd = epw.degree_days(65.0)

        assert cdd == pytest.approx(666.6)
        assert hdd > cdd

    def test_too_short(self):
        with pytest.raises(ValueError, match="missing its header"):
            EPWFile.from_string("LOCATION,a,b,c,d,1,0,0,0,0\n")

    def test_load_missing(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            EPWFile.load(temp_dir / "missing.epw")

    def test_load(self, weather_dir):
        epw = EPWFile.load(weather_dir / "USA_CO_Denver.725650_TMY3.epw")
        assert epw.path.name == "USA_CO_Denver.725650_TMY3.epw"
        assert len(epw.data) == 8760


class TestParseLocation:
    """Tests for the LOCATION record."""

    def test_wrong_record(self):
        with pytest.raises(ValueError, match="Invalid EPW LOCATION record"):
            parse_location("DESIGN CONDITIONS,0")

    def test_too_few_fields(self):
        with pytest.raises(ValueError, match="Invalid EPW LOCATION record"):
            parse_location("LOCATION,Denver,CO")


class TestWeatherStations:
    """Tests for WMO lookup."""

    def test_epw_path(self, weather_dir):
        path = WeatherStations(weather_dir).epw_path("725650")
        assert path == weather_dir / "USA_CO_Denver.725650_TMY3.epw"

    def test_unknown_wmo(self, weather_dir):
        with pytest.raises(WeatherStationError, match="WMO '999999'"):
            WeatherStations(weather_dir).epw_path("999999")

    def test_missing_csv(self, temp_dir):
        with pytest.raises(WeatherStationError, match="data.csv"):
            WeatherStations(temp_dir).epw_path("725650")

    def test_missing_epw(self, weather_dir):
        (weather_dir / "USA_CO_Denver.725650_TMY3.epw").unlink()
        with pytest.raises(WeatherStationError, match="could not be found"):
            WeatherStations(weather_dir).epw_path("725650")


class TestWeatherArchive:
    """Tests for unzipping and downloading weather files."""

    @pytest.fixture
    def weather_zip(self, temp_dir):
        path = temp_dir / "weather.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("weather/a.epw", "a")
            archive.writestr("weather/b.epw", "b")
        return path

    def test_unzip_flattens(self, temp_dir, weather_zip):
        out = temp_dir / "out"
        assert unzip_weather(weather_zip, out) == 2
        assert (out / "a.epw").read_text() == "a"
        assert (out / "b.epw").exists()

    def test_unzip_skips_existing(self, temp_dir, weather_zip):
        out = temp_dir / "out"
        out.mkdir()
        (out / "a.epw").write_text("keep")

        assert unzip_weather(weather_zip, out) == 1
        assert (out / "a.epw").read_text() == "keep"

    def test_fetch_downloads_once(self, temp_dir, weather_zip):
        out = temp_dir / "out"

        def fake_download(url, dest, timeout=600):
            dest.write_bytes(weather_zip.read_bytes())

        with patch("resmeasures.weather.stations.download_file", side_effect=fake_download) as mock_download:
            assert fetch_weather("https://example.com/weather.zip?x=1", out) == 2
            assert fetch_weather("https://example.com/weather.zip?x=1", out) == 0

        mock_download.assert_called_once()
        assert (out / "weather.zip").exists()

    def test_unzip_skips_duplicate_names(self, temp_dir, caplog):
        """Members that flatten onto an earlier member's name are not written."""
        path = temp_dir / "dupes.zip"
        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("east/a.epw", "east")
            archive.writestr("west/a.epw", "west")
        out = temp_dir / "out"

        with caplog.at_level("WARNING", logger="resmeasures.weather.stations"):
            assert unzip_weather(path, out) == 1

        assert (out / "a.epw").read_text() == "east"
        assert "west/a.epw" in caplog.text

    def test_failed_download_leaves_no_archive(self, temp_dir, weather_zip):
        """An interrupted download is removed so the next run downloads again."""
        out = temp_dir / "out"

        def broken_download(url, dest, timeout=600):
            dest.write_bytes(weather_zip.read_bytes()[:10])
            raise ConnectionError("connection reset")

        with patch("resmeasures.weather.stations.download_file", side_effect=broken_download):
            with pytest.raises(ConnectionError):
                fetch_weather("https://example.com/weather.zip", out)

        assert list(out.iterdir()) == []

        def fake_download(url, dest, timeout=600):
            dest.write_bytes(weather_zip.read_bytes())

        with patch("resmeasures.weather.stations.download_file", side_effect=fake_download) as mock_download:
            assert fetch_weather("https://example.com/weather.zip", out) == 2
        mock_download.assert_called_once()
