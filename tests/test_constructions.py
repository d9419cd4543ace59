"""
Tests for layered constructions and the envelope construction measures.
"""

import pytest

from resmeasures.envelope import materials as mats
from resmeasures.envelope.constructions import (
    Construction,
    check_surface_assembly_rvalue,
    get_construction,
    get_gap_factor,
)
from resmeasures.core.exceptions import MeasureError
from resmeasures.measures import FinishedRoofConstruction, GenericWallConstruction

# hr-ft^2-F/Btu per m^2-K/W
SI_TO_IP_RVALUE = 5.678263337


class TestConstruction:
    """Tests for parallel-path assemblies."""

    def test_parallel_paths(self, box_model):
        """Two paths of R-4 and R-16 at 25/75 give R-10.67 and keep it after collapsing."""
        c = Construction("Test", [0.25, 0.75])
        c.add_layer([mats.Material("Stud", r=4.0), mats.Material("Cavity", r=16.0)], "StudAndCavity")

        assert c.assembly_rvalue() == pytest.approx(1.0 / (0.25 / 4.0 + 0.75 / 16.0))

        wall = box_model.get("BuildingSurface:Detailed", "Wall 90")
        constr = c.create_and_assign(box_model, [wall])
        assert constr.rvalue == pytest.approx(c.assembly_rvalue())
        assert wall.construction == "Test"

    def test_films_count_but_are_not_layers(self, box_model):
        c = Construction("Filmed", [1.0])
        c.add_film(0.68)
        c.add_layer(mats.Material("Board", r=2.0))

        assert c.assembly_rvalue() == pytest.approx(2.68)
        assert [m.rvalue for m in c.effective_layers()] == [pytest.approx(2.0)]

    def test_bad_fractions(self):
        with pytest.raises(ValueError, match="sum to"):
            Construction("Bad", [0.5, 0.4])
        with pytest.raises(ValueError, match="needs at least one path"):
            Construction("Bad", [])

    def test_layer_path_count(self):
        c = Construction("Two", [0.5, 0.5])
        with pytest.raises(ValueError, match="has 1 materials for 2 paths"):
            c.add_layer([mats.Material("Only", r=1.0)], "Odd")

    def test_gap_factor(self):
        assert get_gap_factor(1, 0.1, 13.0) == 0.0
        assert get_gap_factor(3, 0.2, 13.0) == pytest.approx(0.04)
        assert get_gap_factor(3, 0.2, 0.0) == 0.0
        with pytest.raises(ValueError, match="Invalid installation grade"):
            get_gap_factor(4, 0.2, 13.0)

    def test_check_assembly_rvalue(self, box_model):
        wall = box_model.get("BuildingSurface:Detailed", "Wall 90")
        with pytest.raises(MeasureError, match="has no construction"):
            check_surface_assembly_rvalue(box_model, wall, 0.0, 10.0)

        c = Construction("R10", [1.0])
        c.add_layer(mats.Material("Board", r=10.0))
        c.create_and_assign(box_model, [wall])

        check_surface_assembly_rvalue(box_model, wall, 0.0, 10.0)
        with pytest.raises(MeasureError, match="does not match"):
            check_surface_assembly_rvalue(box_model, wall, 0.5, 10.0)


class TestFinishedRoofConstruction:
    """Tests for the finished roof measure."""

    def test_defaults(self, box_model):
        success, runner = FinishedRoofConstruction().apply(box_model)

        assert success
        roof = box_model.get("BuildingSurface:Detailed", "Roof 1")
        constr = get_construction(box_model, roof)
        assert constr is not None
        assert constr.layers[0].solar_abs == pytest.approx(0.85)
        assert constr.layers[0].thermal_abs == pytest.approx(0.91)
        assert runner.values["assembly_r"] == pytest.approx(constr.rvalue, abs=1e-3)
        assert "1 roof surface(s)" in runner.final_condition

    def test_install_grade_lowers_r(self, box_model):
        _, grade1 = FinishedRoofConstruction().apply(box_model, {"install_grade": "1"})
        _, grade3 = FinishedRoofConstruction().apply(box_model, {"install_grade": "3"})

        assert grade3.values["assembly_r"] < grade1.values["assembly_r"]

    @pytest.mark.parametrize("args,ins_thick_m,ins_k", [
        ({"cavity_r": 0, "install_grade": "3", "cavity_depth": 5.5, "filled_cavity": False,
          "framing_factor": 0.07}, 0.1397, 0.6819557830565512),
        ({"cavity_r": 0, "install_grade": "3", "cavity_depth": 5.5, "filled_cavity": True,
          "framing_factor": 0.07}, 0.1397, 0.6819557830565512),
        ({"cavity_r": 17.3, "install_grade": "1", "cavity_depth": 5.5, "filled_cavity": True,
          "framing_factor": 0.07}, 0.1397, 0.0499725655190589),
        ({"cavity_r": 19, "install_grade": "3", "cavity_depth": 9.25, "filled_cavity": False,
          "framing_factor": 0.11}, 0.23495, 0.0902761063120803),
    ])
    def test_assembly_r(self, box_model, args, ins_thick_m, ins_k):
        """Layer R-values of reference assemblies, with the roof films in the parallel paths."""
        # Roofing, OSB and drywall layers in SI (m^2-K/W)
        fixed_si = 0.0094488 / 0.162714 + 0.01905 / 0.1154577 + 0.0127 / 0.1602906
        expected = (fixed_si + ins_thick_m / ins_k) * SI_TO_IP_RVALUE

        success, runner = FinishedRoofConstruction().apply(box_model, args)

        assert success
        assert runner.values["assembly_r"] == pytest.approx(expected, rel=0.01)

    def test_unfilled_cavity_adds_air_gap(self, box_model):
        """An unfilled R-19 cavity in a 2x10 gets the extra air gap resistance."""
        args = {"cavity_r": 19, "install_grade": "3", "cavity_depth": 9.25, "framing_factor": 0.11}
        _, filled = FinishedRoofConstruction().apply(box_model, {**args, "filled_cavity": True})
        _, unfilled = FinishedRoofConstruction().apply(box_model, {**args, "filled_cavity": False})

        assert unfilled.values["assembly_r"] == pytest.approx(16.495, rel=0.01)
        assert unfilled.values["assembly_r"] > filled.values["assembly_r"]

    def test_no_roofs(self, empty_model):
        success, runner = FinishedRoofConstruction().apply(empty_model)
        assert success
        assert runner.infos == ["No surfaces found to apply the finished roof construction to."]

    @pytest.mark.parametrize("args,message", [
        ({"cavity_r": -1}, "Cavity Insulation Installed R-value must be greater than or equal to 0."),
        ({"cavity_depth": 0}, "Cavity Depth must be greater than 0."),
        ({"framing_factor": 1.0}, "Framing Factor must be greater than or equal to 0 and less than 1."),
    ])
    def test_invalid_args(self, box_model, args, message):
        success, runner = FinishedRoofConstruction().apply(box_model, args)
        assert not success
        assert runner.errors == [message]

    def test_invalid_grade(self, box_model):
        success, runner = FinishedRoofConstruction().apply(box_model, {"install_grade": "4"})
        assert not success
        assert "install_grade" in runner.errors[0]


class TestGenericWallConstruction:
    """Tests for the generic wall measure."""

    def test_one_layer(self, box_model):
        args = {"thick_in_1": 2.0, "conductivity_1": 0.5, "density_1": 30.0, "specific_heat_1": 0.3,
                "drywall_thick_in": 0, "osb_thick_in": 0}
        success, runner = GenericWallConstruction().apply(box_model, args)

        assert success
        # Wood finish R-1.4 plus the R-4 layer
        assert runner.values["assembly_r"] == pytest.approx(5.4)
        for azimuth in (0, 90, 180, 270):
            wall = box_model.get("BuildingSurface:Detailed", f"Wall {azimuth}")
            assert wall.construction == "ExtInsFinWallConstruction"

    def test_partial_layer(self, box_model):
        success, runner = GenericWallConstruction().apply(box_model, {"thick_in_1": 2.0})
        assert not success
        assert runner.errors[0].startswith("Layer 1 does not have all four properties")

    def test_non_positive_value(self, box_model):
        args = {"thick_in_2": 1.0, "conductivity_2": 0.0, "density_2": 30.0, "specific_heat_2": 0.3}
        success, runner = GenericWallConstruction().apply(box_model, args)
        assert not success
        assert runner.errors == ["Conductivity 2 must be greater than 0."]

    def test_no_finish(self, box_model):
        success, runner = GenericWallConstruction().apply(box_model, {"exterior_finish": "None"})
        assert not success
        assert runner.errors == ["Generic wall type cannot have a 'None' exterior finish"]
