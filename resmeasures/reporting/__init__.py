"""Simulation output reporting: cost multipliers and annual end uses."""

from .simulation_output import (
    COST_MULTIPLIER_TYPES,
    EndUseTotals,
    SimulationOutputReport,
)

__all__ = [
    "COST_MULTIPLIER_TYPES",
    "EndUseTotals",
    "SimulationOutputReport",
]
