"""HVAC: performance curves, equipment, setpoints, ceiling fans and sizing."""

from .curves import PerformanceCurve, cooling_curves, heating_curves
from .equipment import (
    HVACSystemRecord,
    get_ac_num_speeds,
    get_ashp_num_speeds,
    get_central_ac_params,
    get_ashp_params,
    calc_cop_from_eer,
    get_dse,
    get_hvac_systems,
)
from .translate import add_hvac, apply_load_distribution
from .setpoints import SetpointInputs, apply_setpoints
from .ceiling_fans import apply_ceiling_fans, calc_ceiling_fan_annual_kwh
from .sizing import DesignLoads, apply_sizing
from .eae import apply_fuel_eae

__all__ = [
    "PerformanceCurve",
    "cooling_curves",
    "heating_curves",
    "HVACSystemRecord",
    "get_ac_num_speeds",
    "get_ashp_num_speeds",
    "get_central_ac_params",
    "get_ashp_params",
    "calc_cop_from_eer",
    "get_dse",
    "get_hvac_systems",
    "add_hvac",
    "apply_load_distribution",
    "SetpointInputs",
    "apply_setpoints",
    "apply_ceiling_fans",
    "calc_ceiling_fan_annual_kwh",
    "DesignLoads",
    "apply_sizing",
    "apply_fuel_eae",
]
