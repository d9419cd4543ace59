"""
Tests for the measure contract and the measure registry.
"""

from unittest.mock import patch

import pytest

from resmeasures.core.exceptions import MeasureError
from resmeasures.measure import Measure, MeasureArgument, MeasureRunner
from resmeasures.measures import MEASURES, WaterHeaterTank, get_measure


class EchoMeasure(Measure):
    """Records its arguments as runner values."""

    name = "Echo"

    def arguments(self):
        return [
            MeasureArgument("count", "integer"),
            MeasureArgument("scale", "double", default=1.5),
            MeasureArgument("enabled", "boolean", default=False),
            MeasureArgument("mode", "choice", default="a", choices=("a", "b")),
            MeasureArgument("label", "string", required=False),
        ]

    def run(self, model, runner, args):
        for key, value in args.items():
            runner.register_value(key, value)
        if args["count"] < 0:
            raise MeasureError("count must not be negative")
        return True


class TestMeasureArgument:
    """Tests for argument coercion."""

    def test_numbers(self):
        assert MeasureArgument("x", "double").coerce("2.5") == 2.5
        assert MeasureArgument("n", "integer").coerce("3.0") == 3

    def test_booleans(self):
        arg = MeasureArgument("flag", "boolean")
        assert arg.coerce("true") is True
        assert arg.coerce("No") is False
        assert arg.coerce(True) is True
        with pytest.raises(ValueError, match="Invalid boolean"):
            arg.coerce("maybe")

    def test_choice(self):
        arg = MeasureArgument("fuel", "choice", choices=("gas", "electric"))
        assert arg.coerce("gas") == "gas"
        with pytest.raises(ValueError, match="is not one of"):
            arg.coerce("coal")

    def test_none_passes_through(self):
        assert MeasureArgument("x", "double").coerce(None) is None

    def test_bad_definitions(self):
        with pytest.raises(ValueError, match="Unknown argument type"):
            MeasureArgument("x", "float")
        with pytest.raises(ValueError, match="has no choices"):
            MeasureArgument("x", "choice")


class TestMeasure:
    """Tests for validation and apply()."""

    def test_apply_coerces_and_fills_defaults(self, empty_model):
        success, runner = EchoMeasure().apply(empty_model, {"count": "4", "enabled": "true"})

        assert success
        assert runner.values == {"count": 4, "scale": 1.5, "enabled": True, "mode": "a", "label": None}
        assert runner.result()["status"] == "Success"

    def test_missing_required(self, empty_model):
        success, runner = EchoMeasure().apply(empty_model, {})

        assert not success
        assert runner.errors == ["Missing required argument 'count'."]

    def test_invalid_value(self, empty_model):
        success, runner = EchoMeasure().apply(empty_model, {"count": 1, "mode": "c"})
        assert not success
        assert "is not one of" in runner.errors[0]

    def test_unknown_argument_warns(self, empty_model):
        success, runner = EchoMeasure().apply(empty_model, {"count": 1, "colour": "blue"})

        assert success
        assert runner.warnings == ["Ignoring unknown argument 'colour'."]

    def test_measure_error_becomes_failure(self, empty_model):
        success, runner = EchoMeasure().apply(empty_model, {"count": -1})

        assert not success
        assert runner.errors[0].startswith("count must not be negative")
        assert runner.result()["status"] == "Fail"

    def test_unexpected_error_becomes_failure(self, empty_model):
        """Errors outside MeasureError are registered, not raised."""
        with patch.object(EchoMeasure, "run", side_effect=KeyError("Roof")):
            success, runner = EchoMeasure().apply(empty_model, {"count": 1})

        assert not success
        assert runner.errors[0].startswith("'Roof'")
        assert runner.result()["status"] == "Fail"

    def test_existing_runner_is_used(self, empty_model):
        runner = MeasureRunner("Echo", context={"building_id": 7})
        _, returned = EchoMeasure().apply(empty_model, {"count": 1}, runner)
        assert returned is runner
        assert runner.context == {"building_id": 7}


class TestMeasureRunner:
    """Tests for runner bookkeeping."""

    def test_register_error_returns_false(self):
        runner = MeasureRunner("Test")
        assert runner.register_error("broken") is False
        assert not runner.succeeded

    def test_conditions(self):
        runner = MeasureRunner("Test")
        runner.register_initial_condition("before")
        runner.register_final_condition("after")
        runner.register_info("note")

        result = runner.result()
        assert result["initial_condition"] == "before"
        assert result["final_condition"] == "after"
        assert result["info"] == ["note"]


class TestRegistry:
    """Tests for the measure registry."""

    def test_get_measure(self):
        measure = get_measure("ResidentialHotWaterHeaterTank")
        assert isinstance(measure, WaterHeaterTank)

    def test_unknown_measure(self):
        with pytest.raises(KeyError, match="Unknown measure 'Nope'"):
            get_measure("Nope")

    def test_every_measure_has_a_name(self):
        for cls in MEASURES.values():
            measure = cls()
            assert measure.name
            assert all(isinstance(a, MeasureArgument) for a in measure.arguments())
