"""
Standalone measures that modify an existing model.

`MEASURES` maps each measure's directory-style name (as used in workflow
files) to its class.
"""

from typing import Dict, Type

from ..measure import Measure
from .constructions import FinishedRoofConstruction, GenericWallConstruction
from .hvac import CentralBoilerBaseboards
from .misc_loads import MiscPlugLoads
from .water_heaters import HeatPumpWaterHeater, SolarHotWater, WaterHeaterTank

MEASURES: Dict[str, Type[Measure]] = {
    "ResidentialConstructionsFinishedRoof": FinishedRoofConstruction,
    "ResidentialConstructionsWallsExteriorGeneric": GenericWallConstruction,
    "ResidentialHotWaterHeaterTank": WaterHeaterTank,
    "ResidentialHotWaterHeaterHeatPump": HeatPumpWaterHeater,
    "ResidentialHotWaterSolar": SolarHotWater,
    "ResidentialHVACCentralSystemBoilerBaseboards": CentralBoilerBaseboards,
    "ResidentialMiscPlugLoads": MiscPlugLoads,
}


def get_measure(name: str) -> Measure:
    """
    Instantiate a registered measure.

    Raises:
        KeyError: For an unknown measure name
    """
    try:
        return MEASURES[name]()
    except KeyError:
        raise KeyError(f"Unknown measure '{name}'. Available: {', '.join(sorted(MEASURES))}") from None


__all__ = [
    "MEASURES",
    "get_measure",
    "FinishedRoofConstruction",
    "GenericWallConstruction",
    "WaterHeaterTank",
    "HeatPumpWaterHeater",
    "SolarHotWater",
    "CentralBoilerBaseboards",
    "MiscPlugLoads",
]
