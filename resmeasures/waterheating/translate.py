"""
HPXML water heating systems to model water heaters.
"""

from typing import Dict, Optional
import logging

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..hpxml.adjacency import get_space_type_from_location
from ..model import Model
from .water_heater import (
    HeatPumpWaterHeaterParams,
    WaterHeaterRecord,
    apply_heatpump,
    apply_tank,
    apply_tankless,
    calc_ef_from_uef,
    get_default_capacity,
    get_default_ef,
    get_default_hot_water_temperature,
    get_default_recovery_efficiency,
    get_default_tank_volume,
)

logger = logging.getLogger(__name__)


def _energy_factor(wh) -> Optional[float]:
    if wh.energy_factor is not None:
        return wh.energy_factor
    if wh.uniform_energy_factor is not None:
        return calc_ef_from_uef(wh.uniform_energy_factor, wh.water_heater_type, wh.fuel_type)
    return None


def add_water_heater(model: Model, hpxml, wh, nbeds: int, ec_adj: float, t_set: float) -> WaterHeaterRecord:
    """
    One HPXML WaterHeatingSystem.

    Raises:
        MeasureError: For an unexpected type or location
    """
    space = model.create_or_get_space(get_space_type_from_location(wh.location, "water heater"))
    fuel = wh.fuel_type or constants.FUEL_ELECTRIC
    ef = _energy_factor(wh)

    if wh.water_heater_type == constants.WATER_HEATER_STORAGE:
        vol = wh.tank_volume or get_default_tank_volume(nbeds, hpxml.building.number_of_bathrooms, fuel)
        cap = get_default_capacity(nbeds, fuel)
        if wh.heating_capacity is not None:
            cap = convert(wh.heating_capacity, "Btu/hr", "kBtu/hr")
        re = wh.recovery_efficiency
        if re is None:
            re = get_default_recovery_efficiency(fuel)
        if ef is None:
            ef = get_default_ef(vol, fuel)
        return apply_tank(model, wh.id, space, fuel, cap, vol, ef, re, t_set, ec_adj=ec_adj)

    if wh.water_heater_type == constants.WATER_HEATER_TANKLESS:
        if ef is None:
            ef = get_default_ef(1.0, fuel, constants.WATER_HEATER_TANKLESS)
        ef *= wh.energy_factor_multiplier if wh.energy_factor_multiplier is not None else 1.0
        return apply_tankless(model, wh.id, space, fuel, ef, t_set, ec_adj=ec_adj)

    if wh.water_heater_type == constants.WATER_HEATER_HEAT_PUMP:
        params = HeatPumpWaterHeaterParams()
        if wh.tank_volume:
            params.vol = wh.tank_volume
        return apply_heatpump(model, wh.id, space, params, t_set, ec_adj=ec_adj)

    raise MeasureError(f"Unexpected water heater type: {wh.water_heater_type}.")


def add_water_heaters(model: Model, hpxml, nbeds: int, ec_adj: float = 1.0) -> Dict[str, float]:
    """
    Every water heater in the HPXML.

    Returns:
        DHW plant loop name -> fraction of the hot water load it serves
    """
    t_set = get_default_hot_water_temperature(hpxml.eri_version)
    loop_fracs = {}
    for wh in hpxml.water_heating_systems:
        record = add_water_heater(model, hpxml, wh, nbeds, ec_adj, t_set)
        loop_fracs[record.loop] = wh.fraction_dhw_load_served
    total = sum(loop_fracs.values())
    if loop_fracs and abs(total - 1.0) > 0.01:
        logger.warning(f"Water heaters serve {total:.2f} of the hot water load")
    return loop_fracs
