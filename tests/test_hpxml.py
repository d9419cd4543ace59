"""
Tests for HPXML parsing and location mapping.
"""

import pytest

from resmeasures.core import constants
from resmeasures.core.exceptions import MeasureError
from resmeasures.hpxml import (
    HPXMLDocument,
    get_foundation_adjacent_to,
    get_space_type,
    get_space_type_from_location,
    is_external_thermal_boundary,
)


class TestHPXMLDocument:
    """Tests for document loading."""

    def test_load_file(self, sample_hpxml_file):
        doc = HPXMLDocument.load(sample_hpxml_file)
        assert doc.path == sample_hpxml_file
        assert doc.building.conditioned_floor_area == 2700

    def test_namespaces_stripped(self, sample_hpxml_content):
        """Queries use plain tag names after loading."""
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        assert doc.root.tag == "HPXML"
        assert len(doc.xpath("BuildingDetails/Enclosure/Walls/Wall")) == 1

    def test_building_construction(self, sample_hpxml_content):
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        assert doc.building.number_of_conditioned_floors == 2
        assert doc.building.number_of_conditioned_floors_above_grade == 1
        assert doc.building.number_of_bedrooms == 3
        assert doc.building.number_of_bathrooms == 2
        assert doc.building.conditioned_building_volume == 21600
        assert doc.building.garage_present is False

    def test_climate(self, sample_hpxml_content):
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        assert doc.weather_station.wmo == "725650"
        assert doc.weather_station.name == "Denver, CO"
        assert doc.iecc_zone_2006 == "5B"

    def test_enclosure(self, sample_hpxml_content):
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        wall = doc.walls[0]
        assert wall.id == "Wall"
        assert wall.wall_type == "WoodStud"
        assert wall.insulation_assembly_r_value == 23.0
        assert wall.azimuth is None

        window = doc.windows[0]
        assert window.area == 108.0
        assert window.wall_idref == "Wall"
        assert window.ufactor == pytest.approx(0.33)

        leakage = doc.air_infiltration_measurements[0]
        assert leakage.house_pressure == 50
        assert leakage.unit_of_measure == "ACH"
        assert leakage.air_leakage == 3

    def test_empty_lists(self, sample_hpxml_content):
        """Absent sections parse to empty lists or None."""
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        assert doc.foundations == []
        assert doc.heat_pumps == []
        assert doc.pv_systems == []
        assert doc.hvac_control is None
        assert doc.clothes_washer is None
        assert doc.heating_load_fraction == 0

    def test_water_heater(self, sample_hpxml_content):
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        wh = doc.water_heating_systems[0]
        assert wh.fuel_type == "natural gas"
        assert wh.water_heater_type == "storage water heater"
        assert wh.tank_volume == 40
        assert wh.energy_factor == pytest.approx(0.59)
        assert wh.recovery_efficiency == pytest.approx(0.76)
        assert doc.hot_water_distribution is None

    def test_plug_load(self, sample_hpxml_content):
        doc = HPXMLDocument.from_string(sample_hpxml_content)

        assert doc.plug_load("other").kwh_per_year == 2457
        assert doc.plug_load("TV other") is None

    def test_missing_building(self):
        with pytest.raises(MeasureError, match="no Building element"):
            HPXMLDocument.from_string("<HPXML><XMLTransactionHeaderInformation/></HPXML>")

    def test_missing_building_construction(self):
        text = "<HPXML><Building><BuildingDetails><BuildingSummary/></BuildingDetails></Building></HPXML>"
        with pytest.raises(MeasureError, match="no BuildingConstruction element"):
            HPXMLDocument.from_string(text)


class TestAdjacency:
    """Tests for HPXML location to space type mapping."""

    def test_foundation_adjacent_to(self):
        assert get_foundation_adjacent_to("VentedCrawlspace") == constants.LOCATION_CRAWL_VENTED
        assert get_foundation_adjacent_to("SlabOnGrade") == constants.LOCATION_LIVING
        with pytest.raises(MeasureError, match="Unexpected foundation type"):
            get_foundation_adjacent_to("Stilts")

    def test_thermal_boundary(self):
        assert is_external_thermal_boundary(constants.LOCATION_LIVING, constants.LOCATION_OUTSIDE)
        assert not is_external_thermal_boundary(constants.LOCATION_GARAGE, constants.LOCATION_OUTSIDE)
        with pytest.raises(MeasureError, match="Unexpected adjacent_to"):
            is_external_thermal_boundary(constants.LOCATION_LIVING, "moon")

    def test_space_type(self):
        assert get_space_type(constants.LOCATION_ATTIC_VENTED) == constants.SPACE_TYPE_UNFINISHED_ATTIC
        with pytest.raises(MeasureError, match="surface 'Wall1'"):
            get_space_type(constants.LOCATION_OUTSIDE, "Wall1")

    def test_space_type_from_location(self):
        assert get_space_type_from_location(None, "water heater") == constants.SPACE_TYPE_LIVING
        assert get_space_type_from_location(constants.LOCATION_GARAGE, "water heater") == \
            constants.SPACE_TYPE_GARAGE
        with pytest.raises(MeasureError, match="Unhandled water heater location: outside."):
            get_space_type_from_location(constants.LOCATION_OUTSIDE, "water heater")
