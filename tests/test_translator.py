"""
Tests for the HPXML translator: entry checks, a full home and output variable mapping.
"""

import pytest

from resmeasures.core import constants
from resmeasures.hvac.equipment import get_hvac_systems
from resmeasures.hvac.systems import apply_electric_baseboard
from resmeasures.model import Model
from resmeasures.translator import HPXMLTranslator
from resmeasures.translator.output_vars import add_building_output_variables, add_output_variables
from resmeasures.core.exceptions import MeasureError


MINIMAL_XSD = '''<?xml version="1.0"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="HPXML"/>
</xs:schema>
'''


def _translate(hpxml_path, weather_dir, **extra):
    args = {"hpxml_path": str(hpxml_path), "weather_dir": str(weather_dir), "skip_validation": True}
    args.update(extra)
    return HPXMLTranslator().apply(Model(), args)


class TestTranslatorInputs:
    """Tests for rejected inputs."""

    def test_not_xml(self, temp_dir, weather_dir):
        path = temp_dir / "home.txt"
        path.write_text("<HPXML/>")

        success, runner = _translate(path, weather_dir)

        assert not success
        assert "is not an .xml file" in runner.errors[0]

    def test_missing_file(self, temp_dir, weather_dir):
        success, runner = _translate(temp_dir / "missing.xml", weather_dir)
        assert not success
        assert "does not exist" in runner.errors[0]

    def test_no_wmo(self, temp_dir, weather_dir, sample_hpxml_content):
        path = temp_dir / "no_wmo.xml"
        path.write_text(sample_hpxml_content.replace("<WMO>725650</WMO>", ""))

        success, runner = _translate(path, weather_dir)

        assert not success
        assert runner.errors[-1].startswith("HPXML document has no weather station WMO.")
        # Skipped validation is reported after the failure
        assert any("No schema dir provided" in w for w in runner.warnings)

    def test_unknown_wmo(self, temp_dir, weather_dir, sample_hpxml_content):
        path = temp_dir / "unknown.xml"
        path.write_text(sample_hpxml_content.replace("725650", "999999"))

        success, runner = _translate(path, weather_dir)

        assert not success
        assert "WMO '999999' could not be found" in runner.errors[-1]

    def test_no_eri_version(self, temp_dir, weather_dir, sample_hpxml_content):
        path = temp_dir / "no_eri.xml"
        path.write_text(sample_hpxml_content.replace("<Version>2014AEG</Version>", ""))

        success, runner = _translate(path, weather_dir)

        assert not success
        assert runner.errors[-1].startswith("Could not find ERI Version")

    def test_missing_schemas_dir(self, temp_dir, weather_dir, sample_hpxml_file):
        success, runner = _translate(sample_hpxml_file, weather_dir, skip_validation=False,
                                     schemas_dir=str(temp_dir / "schemas"))
        assert not success
        assert runner.errors[0].endswith("does not exist.")

    @pytest.mark.parametrize("skip_validation", [True, False])
    def test_malformed_xml(self, temp_dir, weather_dir, skip_validation):
        """Truncated documents fail with parse errors naming the file."""
        schemas = temp_dir / "schemas"
        schemas.mkdir()
        (schemas / "HPXML.xsd").write_text(MINIMAL_XSD)
        path = temp_dir / "truncated.xml"
        path.write_text("<HPXML><Building><BuildingDetails>")

        success, runner = _translate(path, weather_dir, skip_validation=skip_validation,
                                     schemas_dir=str(schemas))

        assert not success
        assert runner.errors[0].startswith(str(path.resolve()))
        assert runner.result()["status"] == "Fail"


class TestOutputVariables:
    """Tests for end use output variables and TSV maps."""

    def test_baseboard_variables(self, box_model, temp_dir):
        apply_electric_baseboard(box_model, "Baseboard", 1.0, None, 1.0)

        count = add_building_output_variables(box_model, temp_dir / "maps")

        assert count == 2
        keys = {o.get("Variable Name") for o in box_model.objects_of("Output:Variable")}
        assert keys == {"Baseboard Electricity Energy", "Baseboard Total Heating Energy"}

        heating = (temp_dir / "maps" / "map_hvac_heating.tsv").read_text().splitlines()
        assert heating == ["HPXML Name\tE+ Name(s)", "Baseboard\tBaseboard electric baseboard"]
        cooling = (temp_dir / "maps" / "map_hvac_cooling.tsv").read_text().splitlines()
        assert cooling == ["HPXML Name\tE+ Name(s)"]

    def test_no_duplicates(self, box_model):
        apply_electric_baseboard(box_model, "Baseboard", 1.0, None, 1.0)
        add_building_output_variables(box_model)
        assert add_building_output_variables(box_model) == 2

    def test_unexpected_object_type(self, empty_model):
        with pytest.raises(MeasureError, match="Unexpected object type Coil:Heating:Steam"):
            add_output_variables(empty_model, {"Boiler:HotWater": []}, [("Coil:Heating:Steam", "coil")])

    def test_wildcard_key(self, empty_model):
        added = add_output_variables(empty_model, {None: ["Site Outdoor Air Drybulb Temperature"]}, None)
        assert added[0].get("Key Value") == "*"


class TestFullHomeTranslation:
    """Tests for translating a complete home."""

    def test_translates(self, full_home_hpxml_file, weather_dir):
        """Enclosure, HVAC and sizing all come through for a slab home with a vented attic."""
        model = Model()
        args = {"hpxml_path": str(full_home_hpxml_file), "weather_dir": str(weather_dir), "skip_validation": True}

        success, runner = HPXMLTranslator().apply(model, args)

        assert success, runner.errors
        assert runner.result()["status"] == "Success"
        space_types = {s.space_type for s in model.spaces}
        assert {constants.SPACE_TYPE_LIVING, constants.SPACE_TYPE_UNFINISHED_ATTIC} <= space_types

        glazing = model.objects_of("WindowMaterial:SimpleGlazingSystem")
        assert len(glazing) == 1
        assert glazing[0].get("U-Factor") == pytest.approx(0.33 * 5.678263337, abs=1e-3)
        assert glazing[0].get("Solar Heat Gain Coefficient") == 0.45

        assert runner.values["design_heating_load_btuh"] > 0
        assert runner.values["design_cooling_load_btuh"] > 0
        systems = get_hvac_systems(model)
        assert set(systems) == {"Furnace", "CentralAC"}
        assert systems["Furnace"].heating_capacity > 0
        assert systems["CentralAC"].cooling_capacity > 0
        assert model.get("Coil:Cooling:DX:SingleSpeed", "CentralAC cooling coil") is not None

    def test_window_on_missing_wall(self, temp_dir, weather_dir, full_home_hpxml_content):
        """A window attached to an unknown wall fails the translation."""
        window = '<SHGC>0.45</SHGC>\n            <AttachedToWall idref="Wall"/>'
        assert window in full_home_hpxml_content
        path = temp_dir / "orphan_window.xml"
        path.write_text(full_home_hpxml_content.replace(window, window.replace('"Wall"', '"Garage"')))

        success, runner = _translate(path, weather_dir)

        assert not success
        assert "Attached wall 'Garage' not found for window 'WindowNorth'." in runner.errors[-1]
