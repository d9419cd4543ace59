"""
Tests for the in-memory model, unit conversions and surface geometry.

Run with: pytest tests/test_model.py -v
"""

import pytest

from resmeasures.core import constants
from resmeasures.core.exceptions import MeasureError
from resmeasures.core.units import convert
from resmeasures.envelope.geometry import (
    add_ceiling_polygon,
    add_floor_polygon,
    add_wall_polygon,
    check_for_errors,
    get_abs_azimuth,
    get_finished_floor_area,
    get_floor_area,
    get_foundation_top,
    get_slab_dimensions,
    get_walls_top,
    set_zone_volumes,
)
from resmeasures.model import Model, ModelObject, Surface


class TestUnits:
    """Tests for unit conversion."""

    def test_length_and_area(self):
        assert convert(10.0, "ft", "m") == pytest.approx(3.048)
        assert convert(1.0, "m^2", "ft^2") == pytest.approx(10.7639, rel=1e-4)

    def test_reverse_pair_is_derived(self):
        """Only ft->m is declared; m->ft comes from it."""
        assert convert(3.048, "m", "ft") == pytest.approx(10.0)
        assert convert(1.0, "Btu/hr", "W") == pytest.approx(0.29307, rel=1e-4)
        assert convert(1.0, "W", "Btu/hr") == pytest.approx(3.41214, rel=1e-5)

    def test_temperatures(self):
        assert convert(212.0, "F", "C") == pytest.approx(100.0)
        assert convert(0.0, "C", "K") == pytest.approx(273.15)
        assert convert(10.0, "deltaC", "deltaF") == pytest.approx(18.0)

    def test_case_insensitive_identity(self):
        assert convert(5.0, "GAL", "gal") == 5.0

    def test_unknown_pair(self):
        with pytest.raises(ValueError, match="Unhandled unit conversion from ft to kWh."):
            convert(1.0, "ft", "kWh")


class TestModel:
    """Tests for the object store."""

    def test_add_object(self, empty_model):
        """Keyword field names have underscores replaced by spaces."""
        obj = empty_model.add_object("Schedule:Constant", "always on", Hourly_Value=1)

        assert isinstance(obj, ModelObject)
        assert obj.get("Hourly Value") == 1
        assert empty_model.get("Schedule:Constant", "always on") is obj
        assert empty_model.has("Schedule:Constant")
        assert not empty_model.has("Schedule:Constant", "always off")

    def test_duplicate_name(self, empty_model):
        empty_model.add_object("Schedule:Constant", "always on")
        with pytest.raises(ValueError, match="Duplicate Schedule:Constant name 'always on'."):
            empty_model.add_object("Schedule:Constant", "always on")

    def test_same_name_other_type(self, empty_model):
        """Names only need to be unique within a type."""
        empty_model.add_object("Schedule:Constant", "shared")
        empty_model.add_object("ScheduleTypeLimits", "shared")
        assert len(empty_model) == 2

    def test_unique_name(self, empty_model):
        empty_model.add_object("Material", "Stud")
        empty_model.add_object("Material", "Stud 1")
        assert empty_model.unique_name("Material", "Stud") == "Stud 2"
        assert empty_model.unique_name("Material", "Drywall") == "Drywall"

    def test_remove(self, empty_model):
        obj = empty_model.add_object("Material", "Stud")
        empty_model.add_object("Material", "Drywall")

        empty_model.remove(obj)
        assert not empty_model.has("Material", "Stud")
        assert empty_model.remove_type("Material") == 1
        assert empty_model.summary() == {}

    def test_create_or_get_space(self, empty_model):
        """One space and one zone per space type."""
        living = empty_model.create_or_get_space(constants.SPACE_TYPE_LIVING)

        assert living.name == "living space"
        assert living.thermal_zone.name == "living zone"
        assert empty_model.create_or_get_space(constants.SPACE_TYPE_LIVING) is living
        assert empty_model.get_space(constants.SPACE_TYPE_GARAGE) is None
        assert len(empty_model.thermal_zones) == 1

    def test_summary(self, box_model):
        summary = box_model.summary()
        assert summary["BuildingSurface:Detailed"] == 6
        assert summary["Zone"] == 1
        assert summary["Space"] == 1

    def test_write_idf(self, box_model, temp_dir):
        path = box_model.write(temp_dir / "out" / "in.idf")

        text = path.read_text()
        assert text.startswith("Building,")
        assert "Window 1," in text
        assert "Roof," in text
        assert "FenestrationSurface:Detailed" in text


class TestSurfaces:
    """Tests for surface areas and orientation."""

    def test_wall_areas(self, box_model):
        """Gross area includes openings, net area excludes them."""
        south = box_model.get("BuildingSurface:Detailed", "Wall 180")

        assert convert(south.gross_area, "m^2", "ft^2") == pytest.approx(320.0)
        assert convert(south.net_area, "m^2", "ft^2") == pytest.approx(305.0)

    def test_wall_orientation(self, box_model):
        for azimuth in (0, 90, 180, 270):
            wall = box_model.get("BuildingSurface:Detailed", f"Wall {azimuth}")
            assert wall.azimuth == pytest.approx(azimuth, abs=1e-6)
            assert wall.tilt == pytest.approx(90.0)

    def test_floor_and_ceiling_tilt(self):
        floor = Surface("Floor", "Floor", add_floor_polygon(10.0, 10.0, 0.0))
        ceiling = Surface("Ceiling", "RoofCeiling", add_ceiling_polygon(10.0, 10.0, 8.0))

        assert floor.tilt == pytest.approx(180.0)
        assert ceiling.tilt == pytest.approx(0.0)

    def test_translate_moves_sub_surfaces(self, box_model):
        south = box_model.get("BuildingSurface:Detailed", "Wall 180")
        z_before = south.sub_surfaces[0].vertices[0][2]

        south.translate(dz=1.0)
        assert south.sub_surfaces[0].vertices[0][2] == pytest.approx(z_before + 1.0)
        assert min(south.z_values) == pytest.approx(1.0)

    def test_wall_polygon_height(self):
        vertices = add_wall_polygon(20.0, 8.0, 2.0, 90.0)
        zs = sorted({round(v[2], 6) for v in vertices})
        assert zs == [round(convert(2.0, "ft", "m"), 6), round(convert(10.0, "ft", "m"), 6)]


class TestGeometry:
    """Tests for model-level geometry queries."""

    def test_floor_area(self, box_model):
        living = box_model.get_space(constants.SPACE_TYPE_LIVING)

        assert get_floor_area(box_model, [living]) == pytest.approx(1000.0)
        assert get_finished_floor_area(box_model) == pytest.approx(1000.0)

    def test_tops(self, box_model):
        assert get_walls_top(box_model) == pytest.approx(8.0)
        assert get_foundation_top(box_model) == pytest.approx(0.0, abs=1e-9)

    def test_no_walls(self, empty_model):
        with pytest.raises(MeasureError, match="walls top"):
            get_walls_top(empty_model)

    def test_box_is_valid(self, box_model):
        assert check_for_errors(box_model) == []

    def test_zone_without_floor(self, empty_model):
        space = empty_model.create_or_get_space(constants.SPACE_TYPE_GARAGE)
        empty_model.add(Surface("Wall", "Wall", add_wall_polygon(10.0, 8.0, 0.0), space=space))

        errors = check_for_errors(empty_model)
        assert "Thermal zone 'garage zone' must have at least one floor surface." in errors
        assert len(errors) == 2

    def test_zone_volumes(self, box_model):
        set_zone_volumes(box_model, 8000.0)
        zone = box_model.thermal_zones[0]
        assert zone.volume == pytest.approx(convert(8000.0, "ft^3", "m^3"))

    def test_zone_volume_must_be_positive(self, box_model):
        with pytest.raises(MeasureError, match="living zone"):
            set_zone_volumes(box_model, 0.0)

    def test_slab_dimensions(self):
        length, width = get_slab_dimensions(130.0, 1000.0)
        assert length * width == pytest.approx(1000.0)
        assert 2 * (length + width) == pytest.approx(130.0)

    def test_slab_dimensions_fallback(self):
        assert get_slab_dimensions(40.0, 1000.0) == (10.0, 10.0)

    def test_abs_azimuth(self):
        assert get_abs_azimuth(constants.COORD_RELATIVE, 90.0, 45.0) == pytest.approx(315.0)
        assert get_abs_azimuth("absolute", 90.0, 45.0) == pytest.approx(270.0)
