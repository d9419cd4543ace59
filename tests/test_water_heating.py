"""
Tests for water heating.

Tests tank physics, defaults, hot water distribution, mains temperatures
and the tank, heat pump and solar water heater measures.
"""

import pytest

from resmeasures.core import constants
from resmeasures.core.exceptions import MeasureError
from resmeasures.measures import HeatPumpWaterHeater, SolarHotWater, WaterHeaterTank
from resmeasures.waterheating.hot_water import (
    DIST_STANDARD,
    get_default_std_pipe_length,
    get_dist_energy_consumption_adjustment,
    get_dist_energy_waste_factor,
    get_fixtures_gpd,
)
from resmeasures.waterheating.mains import annual_avg, calc_mains_temperatures, get_mains_temperatures
from resmeasures.waterheating.solar import calc_shw_storage_volume
from resmeasures.waterheating.water_heater import (
    calc_ef_from_uef,
    calc_tank_ua,
    check_setpoint,
    get_default_capacity,
    get_default_ef,
    get_default_recovery_efficiency,
    get_default_tank_volume,
    get_space_from_location,
    read_hourly_schedule,
    remove_water_heaters,
)


# =============================================================================
# TANK PHYSICS
# =============================================================================

class TestTankUA:
    """Tests for standby loss and thermal efficiency from the rating test."""

    def test_gas_tank(self):
        """40 gal gas tank, EF 0.59, RE 0.76, 40 kBtu/hr."""
        ua, eta_c = calc_tank_ua(40.0, constants.FUEL_GAS, 0.59, 0.76, 40.0)

        assert ua == pytest.approx(7.880, abs=0.005)
        assert eta_c == pytest.approx(0.7733, abs=0.0005)

    def test_gas_ua_independent_of_volume(self):
        """The rating test fixes the draw, so UA does not depend on volume."""
        ua_40, _ = calc_tank_ua(40.0, constants.FUEL_GAS, 0.59, 0.76, 40.0)
        ua_50, _ = calc_tank_ua(50.0, constants.FUEL_GAS, 0.59, 0.76, 40.0)

        assert ua_40 == pytest.approx(ua_50)

    def test_electric_tank(self):
        """Electric elements are 100% efficient."""
        ua, eta_c = calc_tank_ua(50.0, constants.FUEL_ELECTRIC, 0.92, 0.98, 15.35)

        assert ua == pytest.approx(2.206, abs=0.005)
        assert eta_c == 1.0

    def test_tankless(self):
        """Tankless heaters have no standby loss and a cycling derate."""
        ua, eta_c = calc_tank_ua(1.0, constants.FUEL_GAS, 0.82, 0.0, 100000.0, constants.WATER_HEATER_TANKLESS)

        assert ua == 0.0
        assert eta_c == pytest.approx(0.82 * 0.92)

    def test_efficiency_above_one(self):
        """An impossible burner efficiency is rejected."""
        with pytest.raises(MeasureError, match="efficiency of > 1"):
            calc_tank_ua(40.0, constants.FUEL_GAS, 0.6, 0.99, 10.0)

    def test_negative_ua(self):
        """An energy factor above 1 gives a negative UA."""
        with pytest.raises(MeasureError, match="negative water heater standby loss"):
            calc_tank_ua(50.0, constants.FUEL_ELECTRIC, 1.05, 0.98, 15.35)


class TestDefaults:
    """Tests for default water heater sizing and efficiency."""

    def test_tank_volume(self):
        """Volume grows with bedrooms; electric tanks are larger."""
        assert get_default_tank_volume(1, 1, constants.FUEL_GAS) == 20.0
        assert get_default_tank_volume(3, 2, constants.FUEL_GAS) == 40.0
        assert get_default_tank_volume(3, 2, constants.FUEL_ELECTRIC) == 50.0
        assert get_default_tank_volume(4, 3, constants.FUEL_ELECTRIC) == 66.0
        assert get_default_tank_volume(4, 2, constants.FUEL_ELECTRIC) == 50.0
        assert get_default_tank_volume(6, 3, constants.FUEL_GAS) == 50.0

    def test_capacity(self):
        """Electric capacity is 4.5 kW regardless of bedrooms."""
        assert get_default_capacity(3, constants.FUEL_GAS) == 36.0
        assert get_default_capacity(5, constants.FUEL_GAS) == 48.0
        assert get_default_capacity(5, constants.FUEL_ELECTRIC) == pytest.approx(15.355, abs=0.01)

    def test_energy_factor(self):
        """Federal minimum energy factors."""
        assert get_default_ef(40.0, constants.FUEL_GAS) == pytest.approx(0.594)
        assert get_default_ef(50.0, constants.FUEL_ELECTRIC) == pytest.approx(0.904)
        assert get_default_ef(0.0, constants.FUEL_GAS, constants.WATER_HEATER_TANKLESS) == 0.82

    def test_recovery_efficiency(self):
        """Electric recovery efficiency is fixed."""
        assert get_default_recovery_efficiency(constants.FUEL_ELECTRIC) == 0.98
        assert get_default_recovery_efficiency(constants.FUEL_GAS) == 0.76

    def test_ef_from_uef(self):
        """UEF conversions by water heater type."""
        assert calc_ef_from_uef(0.6, constants.WATER_HEATER_STORAGE, constants.FUEL_GAS) == \
            pytest.approx(0.61506)
        assert calc_ef_from_uef(0.9, constants.WATER_HEATER_TANKLESS, constants.FUEL_GAS) == 0.9
        with pytest.raises(ValueError, match="Unhandled water heater"):
            calc_ef_from_uef(0.9, "space heater", constants.FUEL_GAS)


class TestSetpoint:
    """Tests for setpoint checks."""

    def test_normal_setpoint(self):
        assert check_setpoint(125.0) is None

    def test_scalding_warning(self):
        """Setpoints above 140 F warn about scalding."""
        assert "scalding" in check_setpoint(150.0)

    def test_microbial_warning(self):
        """Setpoints below 110 F warn about microbial growth."""
        assert "microbial growth" in check_setpoint(100.0)

    def test_out_of_range(self):
        with pytest.raises(ValueError, match="less than 0F or greater than 212F"):
            check_setpoint(250.0)
        with pytest.raises(ValueError):
            check_setpoint(-5.0)


class TestHourlySchedule:
    """Tests for hourly schedule files."""

    def test_full_year(self, temp_dir):
        path = temp_dir / "setpoints.csv"
        path.write_text("\n".join(["125"] * 8760) + "\n")

        values = read_hourly_schedule(path)
        assert len(values) == 8760
        assert values[0] == 125.0

    def test_missing_file(self, temp_dir):
        path = temp_dir / "missing.csv"
        with pytest.raises(ValueError, match="does not exist"):
            read_hourly_schedule(path)

    def test_wrong_length(self, temp_dir):
        path = temp_dir / "short.csv"
        path.write_text("\n".join(["125"] * 100) + "\n")

        with pytest.raises(ValueError, match="length of the simulation period"):
            read_hourly_schedule(path)


class TestLocation:
    """Tests for water heater location lookup."""

    def test_auto_picks_living(self, box_model):
        """The box model has only a living space."""
        space = get_space_from_location(box_model, constants.AUTO, "5B")
        assert space.space_type == constants.SPACE_TYPE_LIVING

    def test_auto_warm_climate_prefers_garage(self, box_model):
        """Warm climates put the water heater in the garage when there is one."""
        box_model.create_or_get_space(constants.SPACE_TYPE_GARAGE)

        space = get_space_from_location(box_model, constants.AUTO, "2A")
        assert space.space_type == constants.SPACE_TYPE_GARAGE

    def test_missing_explicit_location(self, box_model):
        assert get_space_from_location(box_model, constants.SPACE_TYPE_UNFINISHED_BASEMENT) is None


# =============================================================================
# DISTRIBUTION AND MAINS
# =============================================================================

class TestHotWaterDistribution:
    """Tests for distribution losses and fixture use."""

    def test_reference_pipe_length(self):
        """2 * sqrt(cfa / ncfl) + 10 * ncfl (+5 with an unconditioned basement)."""
        assert get_default_std_pipe_length(False, 2000.0, 2.0) == pytest.approx(83.246, abs=0.001)
        assert get_default_std_pipe_length(True, 2000.0, 2.0) == pytest.approx(88.246, abs=0.001)

    def test_reference_system_has_no_adjustment(self):
        """A standard system at the reference length has an adjustment of 1."""
        length = get_default_std_pipe_length(False, 2000.0, 2.0)
        adj = get_dist_energy_consumption_adjustment(False, 2000.0, 2.0, DIST_STANDARD, None, 0.0, length, None)

        assert adj == pytest.approx(1.0)

    def test_insulated_pipes_reduce_waste(self):
        assert get_dist_energy_waste_factor(DIST_STANDARD, None, 0.0) == 32.0
        assert get_dist_energy_waste_factor(DIST_STANDARD, None, 3.0) == 28.8

    def test_unknown_distribution(self):
        with pytest.raises(ValueError, match="Unexpected hot water distribution"):
            get_dist_energy_waste_factor("Bucket", None, 0.0)

    def test_fixture_use(self):
        """Low-flow fixtures use 5% less water."""
        assert get_fixtures_gpd(3, False) == pytest.approx(44.6)
        assert get_fixtures_gpd(3, True) == pytest.approx(44.6 * 0.95)


class TestMains:
    """Tests for mains water temperatures."""

    def test_annual_average(self):
        """Mains run about 6 F above the annual outdoor average."""
        annual, monthly, daily = calc_mains_temperatures(50.0, 40.0, 40.0)

        assert annual == pytest.approx(56.0, abs=0.5)
        assert len(monthly) == 12
        assert len(daily) == 365
        assert annual_avg(monthly) == pytest.approx(annual, abs=0.1)

    def test_northern_hemisphere_phase(self):
        """Coldest in late winter in the north, the reverse in the south."""
        _, north, _ = calc_mains_temperatures(50.0, 40.0, 40.0)
        _, south, _ = calc_mains_temperatures(50.0, 40.0, -30.0)

        assert north[1] < north[7]
        assert south[1] > south[7]

    def test_leap_year(self):
        _, _, daily = calc_mains_temperatures(50.0, 40.0, 40.0, num_days=366)
        assert len(daily) == 366

    def test_model_mains(self, box_model):
        """The model records monthly values; a missing mains setting is an error."""
        assert len(get_mains_temperatures(box_model)) == 12

    def test_model_mains_missing(self, box_model_no_mains):
        with pytest.raises(ValueError, match="Mains water temperature has not been set"):
            get_mains_temperatures(box_model_no_mains)


# =============================================================================
# MEASURES
# =============================================================================

class TestWaterHeaterTankMeasure:
    """Tests for the storage tank water heater measure."""

    def test_gas_tank_defaults(self, box_model):
        """Default arguments add a 40 kBtu/hr gas tank in the living space."""
        success, runner = WaterHeaterTank().apply(box_model, {"tank_volume": "40"})

        assert success, runner.errors
        heater = box_model.get("WaterHeater:Mixed", "WaterHeater water heater")
        assert heater is not None
        assert heater.get("Ambient Temperature Zone Name") == "living zone"
        assert heater.get("Heater Fuel Type") == constants.EPLUS_FUELS[constants.FUEL_GAS]
        assert runner.values["tank_ua"] == pytest.approx(7.88, abs=0.01)
        assert runner.values["thermal_efficiency"] == pytest.approx(0.773, abs=0.001)
        assert "40 gallon" in runner.final_condition

    def test_auto_sizing(self, box_model):
        """Auto volume uses 3 bedrooms / 2 baths."""
        success, runner = WaterHeaterTank().apply(box_model, {
            "fuel_type": constants.FUEL_ELECTRIC,
            "tank_volume": constants.AUTO,
            "capacity": constants.AUTO,
            "energy_factor": constants.AUTO,
        })

        assert success, runner.errors
        assert runner.values["tank_volume_gal"] == 50.0
        assert runner.values["input_capacity_kw"] == pytest.approx(4.5, abs=0.01)
        assert runner.values["thermal_efficiency"] == 1.0

    def test_replaces_existing(self, box_model):
        """Applying twice leaves one water heater."""
        WaterHeaterTank().apply(box_model, {"tank_volume": "40"})
        success, runner = WaterHeaterTank().apply(box_model, {"tank_volume": "50"})

        assert success
        assert len(box_model.objects_of("WaterHeater:Mixed")) == 1
        assert any("Removed 1 existing" in m for m in runner.infos)
        assert box_model.properties["water_heaters"]["WaterHeater"].volume_gal == 50.0

    def test_stratified(self, box_model):
        success, _ = WaterHeaterTank().apply(box_model, {"tank_model_type": "stratified"})

        assert success
        assert box_model.objects_of("WaterHeater:Stratified")
        assert not box_model.objects_of("WaterHeater:Mixed")

    def test_invalid_energy_factor(self, box_model):
        success, runner = WaterHeaterTank().apply(box_model, {"energy_factor": "1.2"})

        assert not success
        assert "Rated energy factor must be greater than 0 and less than 1." in runner.errors

    def test_invalid_volume(self, box_model):
        success, runner = WaterHeaterTank().apply(box_model, {"tank_volume": "0"})

        assert not success
        assert "Storage tank volume must be greater than 0." in runner.errors

    def test_no_geometry(self, empty_model):
        success, runner = WaterHeaterTank().apply(empty_model)

        assert not success
        assert runner.errors == ["No building geometry has been defined."]

    def test_no_mains(self, box_model_no_mains):
        success, runner = WaterHeaterTank().apply(box_model_no_mains)

        assert not success
        assert "Mains water temperature has not been set." in runner.errors

    def test_missing_location(self, box_model):
        success, runner = WaterHeaterTank().apply(box_model, {"location": constants.SPACE_TYPE_GARAGE})

        assert not success
        assert "No space found for water heater location 'garage'." in runner.errors

    def test_setpoint_warning(self, box_model):
        success, runner = WaterHeaterTank().apply(box_model, {"setpoint_temp": 150})

        assert success
        assert any("scalding" in w for w in runner.warnings)

    def test_scheduled_setpoint(self, box_model, temp_dir):
        """A scheduled setpoint reads an hourly file from the schedule directory."""
        (temp_dir / "hourly_setpoint_schedule.csv").write_text("\n".join(["120"] * 8760) + "\n")

        success, runner = WaterHeaterTank().apply(box_model, {
            "setpoint_type": constants.WATER_HEATER_SETPOINT_SCHEDULED,
            "schedule_directory": str(temp_dir),
        })

        assert success, runner.errors
        assert box_model.objects_of("Schedule:File:Values")

    def test_scheduled_setpoint_missing_file(self, box_model, temp_dir):
        success, runner = WaterHeaterTank().apply(box_model, {
            "setpoint_type": constants.WATER_HEATER_SETPOINT_SCHEDULED,
            "schedule_directory": str(temp_dir),
        })

        assert not success
        assert "does not exist" in runner.errors[0]


class TestHeatPumpWaterHeaterMeasure:
    """Tests for the heat pump water heater measure."""

    def test_defaults(self, box_model):
        """Default 50 gal unit: 0.5 kW input at COP 2.8."""
        success, runner = HeatPumpWaterHeater().apply(box_model)

        assert success, runner.errors
        assert box_model.has("WaterHeater:HeatPump:WrappedCondenser", "WaterHeater hpwh")
        assert box_model.has("Coil:WaterHeating:AirToWaterHeatPump:Wrapped", "WaterHeater hpwh coil")
        assert runner.values["heat_pump_capacity_kw"] == 1.4
        record = box_model.properties["water_heaters"]["WaterHeater"]
        assert record.wh_type == constants.WATER_HEATER_HEAT_PUMP

    def test_heat_pump_only_disables_elements(self, box_model):
        success, _ = HeatPumpWaterHeater().apply(box_model, {
            "operating_mode": constants.WATER_HEATER_MODE_HP_ONLY,
        })

        assert success
        tank = box_model.objects_of("WaterHeater:Stratified")[0]
        assert tank.get("Heater 1 Capacity") == 0.0

    def test_replaces_tank(self, box_model):
        WaterHeaterTank().apply(box_model)
        success, _ = HeatPumpWaterHeater().apply(box_model)

        assert success
        assert not box_model.objects_of("WaterHeater:Mixed")

    def test_invalid_temperatures(self, box_model):
        success, runner = HeatPumpWaterHeater().apply(box_model, {"min_temp": 130, "max_temp": 120})

        assert not success
        assert "Minimum temperature must be less than the maximum temperature." in runner.errors

    def test_invalid_shr(self, box_model):
        success, runner = HeatPumpWaterHeater().apply(box_model, {"shr": 1.5})

        assert not success
        assert any("sensible heat ratio" in e for e in runner.errors)


class TestSolarHotWaterMeasure:
    """Tests for the solar water heating measure."""

    def test_storage_volume(self):
        assert calc_shw_storage_volume(40.0, constants.AUTO) == 60.0
        assert calc_shw_storage_volume(40.0, "80") == 80.0

    def test_requires_water_heater(self, box_model):
        """Without a water heater the measure warns and does nothing."""
        success, runner = SolarHotWater().apply(box_model)

        assert success
        assert "Model must have a water heater." in runner.warnings
        assert not box_model.has("PlantLoop", "WaterHeater solar hot water loop")

    def test_adds_collector_loop(self, box_model):
        WaterHeaterTank().apply(box_model)
        success, runner = SolarHotWater().apply(box_model, {"collector_area": 64})

        assert success, runner.errors
        assert box_model.has("PlantLoop", "WaterHeater solar hot water loop")
        assert runner.values["storage_volume_gal"] == 96.0

    def test_reapply_replaces(self, box_model):
        """Applying twice does not duplicate the collector loop."""
        WaterHeaterTank().apply(box_model)
        SolarHotWater().apply(box_model)
        success, _ = SolarHotWater().apply(box_model)

        assert success
        loops = [o for o in box_model.objects_of("PlantLoop") if "solar" in o.name]
        assert len(loops) == 1

    def test_invalid_azimuth(self, box_model):
        success, runner = SolarHotWater().apply(box_model, {"azimuth": 400})

        assert not success
        assert "Invalid azimuth entered." in runner.errors

    def test_invalid_storage_volume(self, box_model):
        success, runner = SolarHotWater().apply(box_model, {"storage_vol": "lots"})

        assert not success
        assert "Invalid storage volume 'lots'." in runner.errors


class TestRemoveWaterHeaters:
    """Tests for removing water heaters."""

    def test_remove(self, box_model):
        WaterHeaterTank().apply(box_model)

        assert remove_water_heaters(box_model) == 1
        assert not box_model.objects_of("WaterHeater:Mixed")
        assert not box_model.objects_of("PlantLoop")
        assert box_model.properties["water_heaters"] == {}
