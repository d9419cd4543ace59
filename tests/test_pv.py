"""
Tests for PVWatts photovoltaic systems.
"""

import pytest

from resmeasures.core.exceptions import MeasureError
from resmeasures.generation.pv import PVSystemParams, apply_pv, apply_pv_systems
from resmeasures.hpxml import HPXMLDocument

PV_XML = '''
        <Photovoltaics>
          <PVSystem>
            <SystemIdentifier id="PVSystem"/>
            <ModuleType>{module_type}</ModuleType>
            <ArrayType>fixed open rack</ArrayType>
            <ArrayAzimuth>180</ArrayAzimuth>
            <ArrayTilt>20</ArrayTilt>
            <MaxPowerOutput>4000</MaxPowerOutput>
            <InverterEfficiency>0.95</InverterEfficiency>
          </PVSystem>
        </Photovoltaics>
      </Systems>'''


def _hpxml_with_pv(content: str, module_type: str = "premium") -> HPXMLDocument:
    return HPXMLDocument.from_string(content.replace("</Systems>", PV_XML.format(module_type=module_type)))


class TestApplyPV:
    """Tests for generator objects."""

    def test_objects(self, empty_model):
        params = PVSystemParams("PV1", 3000.0, "Standard", "FixedRoofMounted", 30.0, 180.0)
        gen, inverter, generators, elcd = apply_pv(empty_model, params)

        assert gen.name == "PV1 generator"
        assert gen.get("DC System Capacity") == 3000.0
        assert gen.get("System Losses") == 0.14
        assert inverter.get("Inverter Efficiency") == 0.96
        assert generators.get("Generator 1 Name") == "PV1 generator"
        assert elcd.get("Inverter Name") == "PV1 inverter"
        assert elcd.get("Generator List Name") == "PV1 generators"

    def test_zero_power(self, empty_model):
        with pytest.raises(MeasureError, match="must have a positive max power output"):
            apply_pv(empty_model, PVSystemParams("PV1", 0.0, "Standard", "FixedRoofMounted", 30.0, 180.0))

    @pytest.mark.parametrize("tilt,azimuth", [(95.0, 180.0), (-1.0, 180.0), (30.0, 360.0)])
    def test_bad_angles(self, empty_model, tilt, azimuth):
        with pytest.raises(MeasureError, match="invalid tilt or azimuth"):
            apply_pv(empty_model, PVSystemParams("PV1", 3000.0, "Standard", "FixedRoofMounted", tilt, azimuth))


class TestPVFromHPXML:
    """Tests for reading PV systems from HPXML."""

    def test_mapping(self, sample_hpxml_content):
        hpxml = _hpxml_with_pv(sample_hpxml_content)
        params = PVSystemParams.from_hpxml(hpxml.pv_systems[0])

        assert params.module_type == "Premium"
        assert params.array_type == "FixedOpenRack"
        assert params.inv_eff == 0.95
        assert params.losses == 0.14

    def test_unknown_module(self, sample_hpxml_content):
        hpxml = _hpxml_with_pv(sample_hpxml_content, module_type="bifacial")
        with pytest.raises(MeasureError, match="Unexpected PV module type: bifacial"):
            PVSystemParams.from_hpxml(hpxml.pv_systems[0])

    def test_apply_all(self, empty_model, sample_hpxml_content):
        assert apply_pv_systems(empty_model, _hpxml_with_pv(sample_hpxml_content)) == 1
        assert empty_model.get("Generator:PVWatts", "PVSystem generator") is not None

    def test_no_pv(self, empty_model, sample_hpxml_content):
        assert apply_pv_systems(empty_model, HPXMLDocument.from_string(sample_hpxml_content)) == 0
