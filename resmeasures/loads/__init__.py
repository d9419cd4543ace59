"""Internal loads: occupants, appliances, lighting and plug loads."""

from .equipment import add_equipment, gain_fractions
from .occupancy import process_occupants, get_occupancy_default_num
from .appliances import add_appliances, ApplianceEnergy
from .lighting import add_lighting, calc_lighting_energy, get_reference_fractions
from .misc_loads import add_mels, apply_plug, calc_plug_loads_annual_kwh

__all__ = [
    "add_equipment",
    "gain_fractions",
    "process_occupants",
    "get_occupancy_default_num",
    "add_appliances",
    "ApplianceEnergy",
    "add_lighting",
    "calc_lighting_energy",
    "get_reference_fractions",
    "add_mels",
    "apply_plug",
    "calc_plug_loads_annual_kwh",
]
