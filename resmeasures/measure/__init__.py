"""Measure contract: arguments, runner and base class."""

from .base import Measure, MeasureArgument, MeasureRunner

__all__ = ["Measure", "MeasureArgument", "MeasureRunner"]
