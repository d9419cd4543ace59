"""
Tests for infiltration, mechanical ventilation and duct losses.
"""

import pytest

from resmeasures.airflow import (
    Ducts,
    Infiltration,
    MechanicalVentilation,
    NaturalVentilation,
    apply_infiltration,
    apply_mechanical_ventilation,
    apply_natural_ventilation,
    calc_ashrae_622_whole_house_cfm,
    calc_delivery_effectiveness,
    calc_ela_from_ach50,
    calc_natural_ach,
    calc_sla,
)
from resmeasures.airflow.ducts import get_duct_insulation_rvalue, get_duct_surface_areas
from resmeasures.airflow.infiltration import sherman_grimsrud_coefficients
from resmeasures.airflow.mech_vent import VENT_TYPE_BALANCED, VENT_TYPE_CFIS, VENT_TYPE_EXHAUST
from resmeasures.core import constants
from resmeasures.core.exceptions import MeasureError
from resmeasures.weather import EPWFile


def _infiltration(ach50=3.0, volume=8000.0) -> Infiltration:
    return Infiltration(living_ach50=ach50, living_constant_ach=None, shelter_coef=0.5, garage_ach50=ach50,
                        crawl_sla=0.0, attic_sla=0.0, attic_const_ach=None, volume=volume)


def _attic_ducts(r=6.0) -> Ducts:
    return Ducts(total_leakage=0.3, norm_leakage_25pa=None, supply_area_mult=1.0, return_area_mult=1.0, r=r,
                 supply_frac=0.6, return_frac=0.067, ah_supply_frac=0.067, ah_return_frac=0.267,
                 location_frac=1.0, num_returns=1, location=constants.SPACE_TYPE_UNFINISHED_ATTIC,
                 supply_area=300.0, return_area=100.0)


class TestInfiltration:
    """Tests for leakage area and natural air changes."""

    def test_ela_from_ach50(self):
        """400 cfm50 scaled to 4 Pa with exponent 0.65."""
        assert calc_ela_from_ach50(3.0, 8000.0) == pytest.approx(0.1524, rel=1e-3)

    def test_ela_scales_with_leakage(self):
        assert calc_ela_from_ach50(6.0, 8000.0) == pytest.approx(2 * calc_ela_from_ach50(3.0, 8000.0))

    def test_sla(self):
        assert calc_sla(0.15, 1000.0) == pytest.approx(0.00015)
        assert calc_sla(0.15, 0.0) == 0.0

    def test_natural_ach(self):
        """At the reference height, ACH = 0.052 * cfm50 * wsf * 60 / volume."""
        assert calc_natural_ach(3.0, 8000.0, 8.202, 0.5) == pytest.approx(0.078)
        assert calc_natural_ach(3.0, 8000.0, 16.404, 0.5) > 0.078
        assert calc_natural_ach(3.0, 0.0, 8.0, 0.5) == 0.0

    def test_stack_coefficients_capped(self):
        assert sherman_grimsrud_coefficients(5) == sherman_grimsrud_coefficients(3)
        assert sherman_grimsrud_coefficients(0) == sherman_grimsrud_coefficients(1)

    def test_apply_infiltration(self, box_model):
        results = apply_infiltration(box_model, _infiltration(), num_stories=1, height_ft=8.0)

        assert results["sla"] == pytest.approx(results["ela"] / 1000.0, rel=1e-3)
        obj = box_model.get("ZoneInfiltration:EffectiveLeakageArea", "living infiltration")
        assert obj is not None
        assert obj.get("Zone or ZoneList or Space or SpaceList Name") == "living space"
        assert box_model.properties["natural_ach"] == results["natural_ach"]
        assert box_model.properties["terrain"] == "Suburbs"

    def test_constant_ach(self, box_model):
        infil = _infiltration(ach50=None)
        infil.living_constant_ach = 0.35
        results = apply_infiltration(box_model, infil, num_stories=1, height_ft=8.0)

        assert results["natural_ach"] == 0.35
        obj = box_model.get("ZoneInfiltration:DesignFlowRate", "living infiltration")
        assert obj.get("Air Changes per Hour") == 0.35


class TestMechanicalVentilation:
    """Tests for whole-house ventilation."""

    def test_ashrae_622_rate(self):
        assert calc_ashrae_622_whole_house_cfm(2000.0, 3) == pytest.approx(90.0)

    def test_none(self, box_model):
        assert apply_mechanical_ventilation(box_model, MechanicalVentilation()) == []
        assert box_model.properties["mech_vent_cfm"] == 0.0

    def test_exhaust(self, box_model):
        mech_vent = MechanicalVentilation(vent_type=VENT_TYPE_EXHAUST, cfm=60.0, fan_power=0.3,
                                          hours_in_operation=12.0)
        created = apply_mechanical_ventilation(box_model, mech_vent)

        assert [o.name for o in created] == ["mech vent exhaust"]
        assert created[0].get("Ventilation Type") == "Exhaust"
        assert box_model.properties["mech_vent_cfm"] == pytest.approx(30.0)
        assert box_model.get("Schedule:Constant", "mech vent operation").value == 0.5

    def test_balanced_with_recovery(self, box_model):
        mech_vent = MechanicalVentilation(vent_type=VENT_TYPE_BALANCED, cfm=80.0, fan_power=0.5,
                                          sensible_efficiency=0.7, total_efficiency=0.5)
        created = apply_mechanical_ventilation(box_model, mech_vent)

        names = {o.name for o in created}
        assert {"mech vent supply fan", "mech vent exhaust fan", "mech vent erv"} <= names
        hx = box_model.get("HeatExchanger:AirToAir:SensibleAndLatent", "mech vent heat exchanger")
        assert hx.get("Latent Effectiveness at 100% Heating Air Flow") == 0.0
        assert mech_vent.fan_w == pytest.approx(80.0)

    def test_cfis_needs_air_loop(self, box_model):
        mech_vent = MechanicalVentilation(vent_type=VENT_TYPE_CFIS, cfm=50.0)
        with pytest.raises(MeasureError, match="CFIS system must be attached"):
            apply_mechanical_ventilation(box_model, mech_vent, air_loops=[])

    def test_cfis(self, box_model):
        mech_vent = MechanicalVentilation(vent_type=VENT_TYPE_CFIS, cfm=50.0)
        created = apply_mechanical_ventilation(box_model, mech_vent, air_loops=["Furnace air loop"])

        assert created[0].name == "Furnace air loop cfis outdoor air controller"
        assert box_model.get("Schedule:Constant", "cfis damper open fraction").value == pytest.approx(1.0 / 3.0)


class TestNaturalVentilation:
    """Tests for operable window ventilation."""

    def test_disabled(self):
        assert not NaturalVentilation.disabled().enabled
        assert NaturalVentilation().enabled

    def test_open_area(self):
        assert NaturalVentilation().open_area_ft2(100.0) == pytest.approx(6.6)

    def test_disabled_adds_nothing(self, box_model):
        before = len(box_model)
        assert apply_natural_ventilation(box_model, NaturalVentilation.disabled()) is None
        assert len(box_model) == before


class TestDucts:
    """Tests for duct delivery effectiveness."""

    def test_insulation_rvalue(self):
        assert get_duct_insulation_rvalue(0.0, True) == 1.7
        assert get_duct_insulation_rvalue(6.0, True) == pytest.approx(5.6152)
        assert get_duct_insulation_rvalue(6.0, False) == pytest.approx(6.2706)

    def test_default_areas(self):
        supply, ret = get_duct_surface_areas(2000.0, 2)
        assert supply == pytest.approx(540.0)
        assert ret == pytest.approx(200.0)

    def test_leakage_fractions(self):
        ducts = _attic_ducts()
        assert ducts.supply_leakage == pytest.approx(0.2001)
        assert ducts.return_leakage == pytest.approx(0.1002)

    def test_conditioned_ducts(self):
        assert calc_delivery_effectiveness(Ducts.none(), None, 1000.0, heating=True) == 1.0

    def test_attic_ducts(self, sample_epw_content):
        epw = EPWFile.from_string(sample_epw_content)
        insulated = calc_delivery_effectiveness(_attic_ducts(r=8.0), epw, 1200.0, heating=True)
        bare = calc_delivery_effectiveness(_attic_ducts(r=0.0), epw, 1200.0, heating=True)

        assert 0.0 < bare < insulated < 1.0

    def test_cooling_effectiveness(self, sample_epw_content):
        epw = EPWFile.from_string(sample_epw_content)
        de = calc_delivery_effectiveness(_attic_ducts(), epw, 1200.0, heating=False)
        assert 0.0 < de < 1.0
