"""
Photovoltaics as PVWatts generators behind a PVWatts inverter.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

from ..core.exceptions import MeasureError
from ..model import Model, ModelObject

logger = logging.getLogger(__name__)

MODULE_TYPES = {
    "standard": "Standard",
    "premium": "Premium",
    "thin film": "ThinFilm",
}

ARRAY_TYPES = {
    "fixed open rack": "FixedOpenRack",
    "fixed roof mount": "FixedRoofMounted",
    "1-axis": "OneAxis",
    "1-axis backtracked": "OneAxisBacktracking",
    "2-axis": "TwoAxis",
}

DEFAULT_SYSTEM_LOSSES = 0.14
DEFAULT_INVERTER_EFFICIENCY = 0.96
DC_TO_AC_SIZE_RATIO = 1.1
GROUND_COVERAGE_RATIO = 0.4


@dataclass
class PVSystemParams:
    """One PV array. Power in W, angles in degrees."""
    pv_id: str
    power_w: float
    module_type: str
    array_type: str
    tilt: float
    azimuth: float
    system_losses: Optional[float] = None
    inverter_efficiency: Optional[float] = None

    @classmethod
    def from_hpxml(cls, pv) -> "PVSystemParams":
        if pv.module_type not in MODULE_TYPES:
            raise MeasureError(f"Unexpected PV module type: {pv.module_type}.")
        if pv.array_type not in ARRAY_TYPES:
            raise MeasureError(f"Unexpected PV array type: {pv.array_type}.")
        return cls(pv.id, pv.max_power_output, MODULE_TYPES[pv.module_type], ARRAY_TYPES[pv.array_type],
                   pv.array_tilt, pv.array_azimuth, pv.system_losses_fraction, pv.inverter_efficiency)

    @property
    def losses(self) -> float:
        return DEFAULT_SYSTEM_LOSSES if self.system_losses is None else self.system_losses

    @property
    def inv_eff(self) -> float:
        return DEFAULT_INVERTER_EFFICIENCY if self.inverter_efficiency is None else self.inverter_efficiency


def apply_pv(model: Model, params: PVSystemParams) -> List[ModelObject]:
    """
    Add a PVWatts generator, inverter and load center for one array.

    Raises:
        MeasureError: If the power is not positive or the angles are out of range
    """
    if params.power_w <= 0:
        raise MeasureError(f"PV system '{params.pv_id}' must have a positive max power output.")
    if not 0 <= params.tilt <= 90 or not 0 <= params.azimuth < 360:
        raise MeasureError(f"PV system '{params.pv_id}' has an invalid tilt or azimuth.")

    gen = model.add(ModelObject("Generator:PVWatts", f"{params.pv_id} generator", {
        "PVWatts Version": 5,
        "DC System Capacity": round(params.power_w, 2),
        "Module Type": params.module_type,
        "Array Type": params.array_type,
        "System Losses": params.losses,
        "Array Geometry Type": "TiltAzimuth",
        "Tilt Angle": params.tilt,
        "Azimuth Angle": params.azimuth,
        "Surface Name": None,
        "Ground Coverage Ratio": GROUND_COVERAGE_RATIO,
    }))
    inverter = model.add(ModelObject("ElectricLoadCenter:Inverter:PVWatts", f"{params.pv_id} inverter", {
        "DC to AC Size Ratio": DC_TO_AC_SIZE_RATIO,
        "Inverter Efficiency": params.inv_eff,
    }))
    generators = model.add(ModelObject("ElectricLoadCenter:Generators", f"{params.pv_id} generators", {
        "Generator 1 Name": gen.name,
        "Generator 1 Object Type": gen.obj_type,
        "Generator 1 Rated Electric Power Output": round(params.power_w, 2),
        "Generator 1 Availability Schedule Name": None,
        "Generator 1 Rated Thermal to Electrical Power Ratio": None,
    }))
    dist = model.add(ModelObject("ElectricLoadCenter:Distribution", f"{params.pv_id} elcd", {
        "Generator List Name": generators.name,
        "Generator Operation Scheme Type": "Baseload",
        "Electrical Buss Type": "DirectCurrentWithInverter",
        "Inverter Name": inverter.name,
    }))
    logger.info(f"PV '{params.pv_id}': {params.power_w:.0f} W {params.module_type} {params.array_type}, "
                f"tilt {params.tilt}, azimuth {params.azimuth}")
    return [gen, inverter, generators, dist]


def apply_pv_systems(model: Model, hpxml) -> int:
    """Add every PV system in the HPXML. Returns the number added."""
    for pv in hpxml.pv_systems:
        apply_pv(model, PVSystemParams.from_hpxml(pv))
    return len(hpxml.pv_systems)
