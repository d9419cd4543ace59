"""Water heaters, hot water use, mains temperature and solar water heating."""

from .mains import calc_mains_temperatures, set_mains_temperature, get_mains_temperatures
from .water_heater import (
    HeatPumpWaterHeaterParams,
    WaterHeaterRecord,
    apply_heatpump,
    apply_tank,
    apply_tankless,
    calc_ef_from_uef,
    calc_tank_ua,
    get_space_from_location,
    remove_water_heaters,
)
from .hot_water import HotWaterSystemInputs, apply_hot_water
from .translate import add_water_heater, add_water_heaters
from .solar import SolarHotWaterSystem, apply_solar_hot_water, calc_shw_storage_volume

__all__ = [
    "calc_mains_temperatures",
    "set_mains_temperature",
    "get_mains_temperatures",
    "HeatPumpWaterHeaterParams",
    "WaterHeaterRecord",
    "apply_heatpump",
    "apply_tank",
    "apply_tankless",
    "calc_ef_from_uef",
    "calc_tank_ua",
    "get_space_from_location",
    "remove_water_heaters",
    "HotWaterSystemInputs",
    "apply_hot_water",
    "add_water_heater",
    "add_water_heaters",
    "SolarHotWaterSystem",
    "apply_solar_hot_water",
    "calc_shw_storage_volume",
]
