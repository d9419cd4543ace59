"""
Tests for internal loads: equipment, plug loads and lighting.
"""

import pytest

from resmeasures.core import constants
from resmeasures.loads.equipment import add_equipment, gain_fractions
from resmeasures.loads.lighting import (
    add_lighting,
    calc_lighting_energy,
    calc_lighting_profiles,
    check_fractions,
    get_reference_fractions,
)
from resmeasures.loads.misc_loads import apply_plug, calc_plug_loads_annual_kwh
from resmeasures.measures import MiscPlugLoads


def _plug_objects(model):
    return [o for o in model.objects_of("ElectricEquipment") if o.get("End-Use Subcategory") == "misc plug loads"]


class TestEquipment:
    """Tests for internal gain objects."""

    def test_gain_fractions(self):
        frac_lat, frac_rad, frac_lost = gain_fractions(0.93, 0.021)
        assert frac_lat == 0.021
        assert frac_rad == pytest.approx(0.558)
        assert frac_lost == pytest.approx(0.049)

    @pytest.mark.parametrize("sens,lat,message", [
        (1.2, 0.0, "Sensible fraction"),
        (0.5, -0.1, "Latent fraction"),
        (0.8, 0.3, "Sum of sensible and latent"),
    ])
    def test_gain_fraction_errors(self, sens, lat, message):
        with pytest.raises(ValueError, match=message):
            gain_fractions(sens, lat)

    def test_zero_design_level(self, box_model):
        living = box_model.get_space(constants.SPACE_TYPE_LIVING)
        assert add_equipment(box_model, "nothing", living, 0.0, "sch") is None

    def test_fuel_equipment(self, box_model):
        living = box_model.get_space(constants.SPACE_TYPE_LIVING)
        obj = add_equipment(box_model, "range", living, 500.0, "sch", fuel=constants.FUEL_GAS)

        assert obj.obj_type == "OtherEquipment"
        assert obj.get("Fuel Type") == constants.EPLUS_FUELS[constants.FUEL_GAS]
        assert obj.get("End-Use Subcategory") == "range"


class TestPlugLoads:
    """Tests for plug load sizing and placement."""

    def test_benchmark_kwh(self):
        assert calc_plug_loads_annual_kwh(3, 1000.0) == pytest.approx(1927.2)
        assert calc_plug_loads_annual_kwh(3, 1000.0, 0.5) == pytest.approx(963.6)

    def test_apply_plug(self, box_model):
        schedule = apply_plug(box_model, 2000.0, 0.93, 0.021)

        objects = _plug_objects(box_model)
        assert len(objects) == 1
        design_w = objects[0].get("Design Level")
        annual = design_w * schedule.annual_equivalent_full_load_hrs() / 1000.0
        assert annual == pytest.approx(2000.0, rel=1e-4)

    def test_negative_energy(self, box_model):
        with pytest.raises(ValueError, match="greater than or equal to 0"):
            apply_plug(box_model, -1.0, 0.93, 0.021)

    def test_no_geometry(self, empty_model):
        with pytest.raises(ValueError, match="No building geometry"):
            apply_plug(empty_model, 100.0, 0.93, 0.021)


class TestMiscPlugLoadsMeasure:
    """Tests for the plug loads measure."""

    def test_benchmark_multiplier(self, box_model):
        success, runner = MiscPlugLoads().apply(box_model)

        assert success
        assert runner.values["annual_kwh"] == 1927
        assert runner.final_condition == ("Plug loads with 1927 kWhs annual energy consumption "
                                          "have been assigned.")

    def test_energy_use_option(self, box_model):
        args = {"option_type": constants.OPTION_TYPE_PLUG_LOADS_ENERGY_USE, "energy_use": 1500,
                "diversity_mult": 0.8}
        success, runner = MiscPlugLoads().apply(box_model, args)

        assert success
        assert runner.values["annual_kwh"] == 1200

    def test_reapply_replaces(self, box_model):
        MiscPlugLoads().apply(box_model)
        success, runner = MiscPlugLoads().apply(box_model, {"energy_mult": 2.0})

        assert success
        assert len(_plug_objects(box_model)) == 1
        assert runner.infos == ["Removed 1 existing plug load object(s)."]

    def test_zero_energy(self, box_model):
        success, runner = MiscPlugLoads().apply(box_model, {"energy_mult": 0})
        assert success
        assert _plug_objects(box_model) == []
        assert runner.final_condition == "No plug loads have been assigned."

    def test_negative_multiplier(self, box_model):
        success, runner = MiscPlugLoads().apply(box_model, {"energy_mult": -1})
        assert not success
        assert runner.errors == ["Annual energy use must be greater than or equal to 0."]

    def test_bad_schedule(self, box_model):
        success, runner = MiscPlugLoads().apply(box_model, {"monthly_sch": "1, 2, 3"})
        assert not success
        assert "12 numbers" in runner.errors[0]

    def test_bad_schedule_keeps_existing_loads(self, box_model):
        """A rejected re-apply leaves the earlier plug load and schedule in place."""
        MiscPlugLoads().apply(box_model)
        before = _plug_objects(box_model)

        success, runner = MiscPlugLoads().apply(box_model, {"monthly_sch": "1, 2, 3"})

        assert not success
        assert runner.infos == []
        assert _plug_objects(box_model) == before
        assert box_model.get("Schedule:Compact", before[0].get("Schedule Name")) is not None


class TestLighting:
    """Tests for lighting energy and profiles."""

    def test_reference_energy(self):
        int_kwh, ext_kwh, grg_kwh = calc_lighting_energy(1000.0, False, *get_reference_fractions())

        assert int_kwh == pytest.approx(1255.0)
        assert ext_kwh == pytest.approx(150.0)
        assert grg_kwh == 0.0

    def test_garage_and_efficient_fixtures(self):
        int_kwh, ext_kwh, grg_kwh = calc_lighting_energy(1000.0, True, 0.0, 0.0, 0.0, 1.0, 1.0, 1.0)

        assert int_kwh < 1255.0
        assert ext_kwh == pytest.approx(37.5)
        assert grg_kwh == pytest.approx(25.0)

    def test_fractions_over_one(self):
        with pytest.raises(ValueError, match="qualifying exterior lighting"):
            check_fractions(0.0, 0.6, 0.0, 0.0, 0.6, 0.0)

    def test_profiles(self):
        hourly, monthly = calc_lighting_profiles(40.0)

        assert len(hourly) == 24
        assert sum(monthly) / 12.0 == pytest.approx(1.0)
        # Longer nights in winter
        assert monthly[11] > monthly[5]

    def test_add_lighting(self, box_model):
        schedule = add_lighting(box_model, 1255.0, 150.0, 100.0, latitude=40.0)

        assert schedule is not None
        assert box_model.get("ElectricEquipment", "interior lighting living") is not None
        assert box_model.get("Exterior:Lights", "exterior lighting") is not None
        # No garage space in the box
        assert box_model.get("ElectricEquipment", "garage lighting") is None

    def test_no_lighting(self, box_model):
        assert add_lighting(box_model, 0.0, 0.0, 0.0) is None
