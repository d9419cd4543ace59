"""
Tests for HVAC equipment parameters, setpoints, ceiling fans and the
central boiler measure.
"""

import pytest

from resmeasures.core import constants
from resmeasures.hvac.ceiling_fans import apply_ceiling_fans, calc_ceiling_fan_annual_kwh, get_default_efficiency
from resmeasures.hvac.eae import eae_to_power
from resmeasures.hvac.equipment import (
    BOILER,
    FURNACE,
    calc_cop_from_eer,
    calc_cop_heating_wo_fan,
    get_ac_num_speeds,
    get_ashp_params,
    get_default_eae,
    get_hvac_systems,
    speed_label,
)
from resmeasures.hvac.setpoints import PROGRAMMABLE, SetpointInputs, calc_setpoint_arrays
from resmeasures.hvac.systems import apply_central_ashp, apply_electric_baseboard
from resmeasures.measures import CentralBoilerBaseboards

COLD_MONTHS_F = [30.0] * 12
WARM_SUMMER_F = [30.0, 35.0, 45.0, 55.0, 65.0, 75.0, 80.0, 78.0, 70.0, 55.0, 40.0, 30.0]


class TestEquipment:
    """Tests for equipment parameter helpers."""

    @pytest.mark.parametrize("seer,speeds", [(13, 1), (15, 1), (16, 2), (21, 2), (22, 4)])
    def test_num_speeds(self, seer, speeds):
        assert get_ac_num_speeds(seer) == speeds

    def test_speed_label(self):
        assert speed_label(4) == "Variable-Speed"

    def test_cop_from_eer(self):
        """Removing 0.365 W/cfm of fan power raises the compressor COP above EER / 3.412."""
        cop = calc_cop_from_eer(13.0, 0.365)
        assert cop == pytest.approx(4.760, rel=1e-3)
        assert cop > 13.0 / 3.412

    def test_cop_heating_without_fan(self):
        assert calc_cop_heating_wo_fan(3.0, 0.365) == pytest.approx(3.2716, rel=1e-3)

    def test_two_speed_ashp_params(self):
        """SEER 16 / HSPF 8.6 selects two speeds with the rated per-speed EERs and COPs."""
        params = get_ashp_params(16.0, 8.6)

        assert params.num_speeds == 2
        assert params.eers == pytest.approx([13.1, 11.7], abs=0.01)
        assert params.cops == pytest.approx([3.8, 3.3], abs=0.01)
        assert params.capacity_ratios == [0.72, 1.0]
        assert params.rated_speed == 1

    def test_two_speed_ashp_coils(self, box_model):
        """Compressor-only coil COPs and the supply air temperature limit."""
        apply_central_ashp(box_model, "ASHP", 16.0, 8.6, None, None, None, 1.0, 1.0)

        clg = box_model.get("Coil:Cooling:DX:MultiSpeed", "ASHP cooling coil")
        htg = box_model.get("Coil:Heating:DX:MultiSpeed", "ASHP heating coil")
        unitary = box_model.get("AirLoopHVAC:UnitarySystem", "ASHP unitary system")

        assert [clg.get(f"Speed {i} Gross Rated Cooling COP") for i in (1, 2)] == \
            pytest.approx([4.16, 3.69], rel=0.01)
        assert [htg.get(f"Speed {i} Gross Rated Heating COP") for i in (1, 2)] == \
            pytest.approx([3.97, 3.43], rel=0.01)
        assert unitary.get("Maximum Supply Air Temperature") == pytest.approx(76.66, abs=0.01)

    def test_default_eae(self):
        assert get_default_eae(BOILER, "natural gas", 1.0, None) == 170.0
        assert get_default_eae(BOILER, "fuel oil", 0.5, None) == 165.0
        assert get_default_eae(FURNACE, "natural gas", 1.0, 40.0) == pytest.approx(561.0)
        assert get_default_eae("Stove", "wood", 1.0, None) == 0.0

    def test_eae_to_power(self):
        assert eae_to_power(2080.0) == pytest.approx(1000.0)


class TestSetpoints:
    """Tests for thermostat schedules."""

    def test_constant_setpoints(self):
        heating, cooling = calc_setpoint_arrays(SetpointInputs(), COLD_MONTHS_F)

        assert len(heating) == 12 and all(len(day) == 24 for day in heating)
        assert heating[0][0] == 68.0
        assert cooling[6][12] == 78.0

    def test_programmable_offsets(self):
        inputs = SetpointInputs(control_type=PROGRAMMABLE, heating_setback=66.0, heating_setback_hrs_per_week=49.0,
                                cooling_setup=80.0, cooling_setup_hrs_per_week=42.0)
        heating, cooling = calc_setpoint_arrays(inputs, COLD_MONTHS_F)

        assert [h for h in range(24) if heating[0][h] == 66.0] == [0, 1, 2, 3, 4, 5, 23]
        assert [h for h in range(24) if cooling[0][h] == 80.0] == [9, 10, 11, 12, 13, 14]

    def test_overlap_averaged(self):
        """Heating above cooling meets in the middle."""
        heating, cooling = calc_setpoint_arrays(SetpointInputs(heating_setpoint=80.0, cooling_setpoint=76.0),
                                                COLD_MONTHS_F)
        assert heating[0][0] == cooling[0][0] == 78.0

    def test_ceiling_fan_offset(self):
        inputs = SetpointInputs(ceiling_fan_offset=0.5)
        _, cooling = calc_setpoint_arrays(inputs, WARM_SUMMER_F)

        assert cooling[6][0] == 78.5
        assert cooling[0][0] == 78.0


class TestCeilingFans:
    """Tests for ceiling fan loads."""

    def test_annual_kwh(self):
        # 4 fans at 42.6 W for 10.5 h/day
        assert calc_ceiling_fan_annual_kwh(4, get_default_efficiency()) == pytest.approx(653.05, rel=1e-4)

    def test_only_warm_months(self, box_model):
        obj = apply_ceiling_fans(box_model, 3, WARM_SUMMER_F)

        assert obj is not None
        assert obj.get("End-Use Subcategory") == "ceiling fan"
        # May through September
        assert box_model.properties["ceiling_fan_kwh"] == pytest.approx(653.05 * 153 / 365, rel=1e-3)

    def test_cold_climate(self, box_model):
        assert apply_ceiling_fans(box_model, 3, COLD_MONTHS_F) is None
        assert "ceiling_fan_kwh" not in box_model.properties


class TestCentralBoilerBaseboards:
    """Tests for the central boiler measure."""

    def test_adds_boiler(self, box_model):
        success, runner = CentralBoilerBaseboards().apply(box_model)

        assert success
        boiler = box_model.get("Boiler:HotWater", "Central boiler")
        assert boiler.get("Nominal Thermal Efficiency") == 0.8
        assert boiler.get("Fuel Type") == "NaturalGas"
        assert box_model.get("Pump:VariableSpeed", "Central pump") is not None
        assert box_model.get("Pump:VariableSpeed", "Central hydronic pump") is None
        assert box_model.get("EnergyManagementSystem:OutputVariable",
                             "Central htg pump:Pumps:Electricity") is not None
        assert box_model.properties["has_hvac_flue"] is True
        assert "Central" in get_hvac_systems(box_model)

    def test_replaces_heating(self, box_model):
        apply_electric_baseboard(box_model, "Baseboard", 1.0, None, 1.0)

        success, runner = CentralBoilerBaseboards().apply(box_model)

        assert success
        assert "Baseboard" not in get_hvac_systems(box_model)
        assert not box_model.has("ZoneHVAC:Baseboard:Convective:Electric")
        assert "Removed 'Baseboard' (ElectricResistance)." in runner.infos

    def test_steam_pump_has_no_power(self, box_model):
        success, _ = CentralBoilerBaseboards().apply(
            box_model, {"central_boiler_system_type": constants.BOILER_TYPE_STEAM})

        assert success
        assert box_model.get("Pump:VariableSpeed", "Central pump").get("Design Power Consumption") == 0.0

    def test_sizing_periods_enabled(self, box_model):
        box_model.add_object("SimulationControl", "SimulationControl",
                             Run_Simulation_for_Sizing_Periods="No")
        CentralBoilerBaseboards().apply(box_model)

        sim_control = box_model.get("SimulationControl", "SimulationControl")
        assert sim_control.get("Run Simulation for Sizing Periods") == "Yes"

    def test_no_geometry(self, empty_model):
        success, runner = CentralBoilerBaseboards().apply(empty_model)
        assert not success
        assert runner.errors == ["No building geometry has been defined."]
