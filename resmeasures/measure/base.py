"""
Measure contract.

A measure declares its arguments, receives a model and a runner, mutates the
model and returns True/False. Diagnostics go to the runner, which keeps them
for the caller and mirrors them to logging.

Usage:
    measure = WaterHeaterTank()
    runner = MeasureRunner(measure.name)
    ok = measure.apply(model, {"fuel_type": "gas"}, runner)
    print(runner.errors, runner.final_condition)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple
import logging
import traceback

from ..model import Model

logger = logging.getLogger(__name__)

ARG_TYPES = ("string", "double", "integer", "boolean", "choice", "path")


@dataclass
class MeasureArgument:
    """One user-facing measure argument."""
    name: str
    arg_type: str
    required: bool = True
    default: Any = None
    choices: Optional[Sequence[str]] = None
    units: Optional[str] = None
    display_name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self):
        if self.arg_type not in ARG_TYPES:
            raise ValueError(f"Unknown argument type '{self.arg_type}' for '{self.name}'.")
        if self.arg_type == "choice" and not self.choices:
            raise ValueError(f"Choice argument '{self.name}' has no choices.")

    def coerce(self, value: Any) -> Any:
        """
        Convert a raw value (often a string from a workflow file) to the
        argument's type.

        Raises:
            ValueError: If the value cannot be converted or is not a valid choice
        """
        if value is None:
            return None
        if self.arg_type == "double":
            return float(value)
        if self.arg_type == "integer":
            return int(float(value))
        if self.arg_type == "boolean":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in ("true", "1", "yes"):
                return True
            if text in ("false", "0", "no"):
                return False
            raise ValueError(f"Invalid boolean '{value}' for argument '{self.name}'.")
        if self.arg_type == "choice":
            text = str(value)
            if text not in self.choices:
                raise ValueError(f"Value '{text}' for argument '{self.name}' is not one of {list(self.choices)}.")
            return text
        return str(value)


class MeasureRunner:
    """Collects a measure's messages and registered values."""

    def __init__(self, measure_name: str = "", context: Optional[Dict[str, Any]] = None):
        self.measure_name = measure_name
        self.context = dict(context or {})
        self.infos: List[str] = []
        self.warnings: List[str] = []
        self.errors: List[str] = []
        self.initial_condition: Optional[str] = None
        self.final_condition: Optional[str] = None
        self.values: Dict[str, Any] = {}

    def _extra(self) -> Dict[str, Any]:
        extra = {"measure": self.measure_name} if self.measure_name else {}
        extra.update(self.context)
        return extra

    def register_info(self, message: str) -> None:
        self.infos.append(message)
        logger.info(message, extra=self._extra())

    def register_warning(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message, extra=self._extra())

    def register_error(self, message: str) -> bool:
        """Record an error. Returns False so callers can `return runner.register_error(...)`."""
        self.errors.append(message)
        logger.error(message, extra=self._extra())
        return False

    def register_initial_condition(self, message: str) -> None:
        self.initial_condition = message
        logger.info(message, extra=self._extra())

    def register_final_condition(self, message: str) -> None:
        self.final_condition = message
        logger.info(message, extra=self._extra())

    def register_value(self, name: str, value: Any) -> None:
        self.values[name] = value

    @property
    def succeeded(self) -> bool:
        return not self.errors

    def result(self) -> Dict[str, Any]:
        return {
            "measure": self.measure_name,
            "status": "Success" if self.succeeded else "Fail",
            "initial_condition": self.initial_condition,
            "final_condition": self.final_condition,
            "info": list(self.infos),
            "warning": list(self.warnings),
            "error": list(self.errors),
            "values": dict(self.values),
        }


class Measure:
    """
    Base class for measures.

    Subclasses set `name`, implement `arguments()` and `run()`.
    """

    name: str = ""
    description: str = ""

    def arguments(self) -> List[MeasureArgument]:
        return []

    def validate_arguments(self, args: Optional[Dict[str, Any]], runner: MeasureRunner) -> Optional[Dict[str, Any]]:
        """
        Fill defaults and coerce types.

        Returns:
            Argument dict, or None after registering an error
        """
        args = dict(args or {})
        values: Dict[str, Any] = {}
        for arg in self.arguments():
            raw = args.pop(arg.name, None)
            if raw is None:
                raw = arg.default
            if raw is None and arg.required:
                runner.register_error(f"Missing required argument '{arg.name}'.")
                return None
            try:
                values[arg.name] = arg.coerce(raw)
            except ValueError as e:
                runner.register_error(str(e))
                return None
        for unknown in args:
            runner.register_warning(f"Ignoring unknown argument '{unknown}'.")
        return values

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        raise NotImplementedError

    def apply(
        self,
        model: Model,
        args: Optional[Dict[str, Any]] = None,
        runner: Optional[MeasureRunner] = None,
    ) -> Tuple[bool, MeasureRunner]:
        """
        Validate arguments and run, turning errors into registered failures.

        Returns:
            (success, runner)
        """
        runner = runner or MeasureRunner(self.name)
        values = self.validate_arguments(args, runner)
        if values is None:
            return False, runner
        try:
            success = bool(self.run(model, runner, values))
        except Exception as e:
            runner.register_error(f"{e}\n{traceback.format_exc()}")
            success = False
        if success and runner.errors:
            success = False
        return success, runner
