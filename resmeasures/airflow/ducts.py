"""
Duct leakage and conduction.

Ducts outside conditioned space lose a share of the delivered heating and
cooling. Losses are expressed as seasonal delivery effectiveness (ASHRAE
152 form) and applied to the efficiencies of the attached air systems once
they are sized.
"""

from dataclasses import dataclass
import math
from typing import Dict, List, Optional
import logging

from ..core import constants
from ..core.exceptions import MeasureError
from ..hvac.equipment import get_hvac_systems
from ..model import Model
from ..weather.epw import EPWFile

logger = logging.getLogger(__name__)

DUCT_LOCATION_MAP = {
    constants.LOCATION_LIVING: constants.SPACE_TYPE_LIVING,
    constants.LOCATION_BASEMENT_CONDITIONED: constants.SPACE_TYPE_FINISHED_BASEMENT,
    constants.LOCATION_BASEMENT_UNCONDITIONED: constants.SPACE_TYPE_UNFINISHED_BASEMENT,
    constants.LOCATION_CRAWL_VENTED: constants.SPACE_TYPE_CRAWL,
    constants.LOCATION_CRAWL_UNVENTED: constants.SPACE_TYPE_CRAWL,
    constants.LOCATION_ATTIC_VENTED: constants.SPACE_TYPE_UNFINISHED_ATTIC,
    constants.LOCATION_ATTIC_UNVENTED: constants.SPACE_TYPE_UNFINISHED_ATTIC,
    constants.LOCATION_ATTIC_CONDITIONED: constants.SPACE_TYPE_LIVING,
    constants.LOCATION_GARAGE: constants.SPACE_TYPE_GARAGE,
}
NO_DUCTS = "none"

HEATING_SUPPLY_RISE_F = 60.0
COOLING_SUPPLY_DROP_F = 20.0
INDOOR_HEATING_F = 70.0
INDOOR_COOLING_F = 75.0
ATTIC_COOLING_RISE_F = 20.0
AIR_HEAT_FACTOR = 1.08
CFM_PER_TON = 400.0


def get_duct_insulation_rvalue(nominal_r: float, is_supply: bool) -> float:
    """Effective R-value of flex duct insulation, including air films."""
    if nominal_r <= 0:
        return 1.7
    if is_supply:
        return 2.2438 + 0.5619 * nominal_r
    return 2.0388 + 0.7053 * nominal_r


def get_duct_surface_areas(cfa_served: float, num_returns: int, supply_mult: float = 1.0,
                           return_mult: float = 1.0):
    """
    Default duct surface areas (ft^2).

    Returns:
        (supply area, return area)
    """
    supply = 0.27 * cfa_served * supply_mult
    return_area = min(0.05 * num_returns, 0.25) * cfa_served * return_mult
    return supply, return_area


@dataclass
class Ducts:
    total_leakage: float
    norm_leakage_25pa: Optional[float]
    supply_area_mult: float
    return_area_mult: float
    r: float
    supply_frac: float
    return_frac: float
    ah_supply_frac: float
    ah_return_frac: float
    location_frac: float
    num_returns: int
    location: str
    supply_area: Optional[float] = None
    return_area: Optional[float] = None
    return_r: Optional[float] = None
    supply_leakage_cfm25: Optional[float] = None
    return_leakage_cfm25: Optional[float] = None

    @classmethod
    def none(cls) -> "Ducts":
        return cls(0.0, None, 1.0, 1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1, NO_DUCTS)

    @classmethod
    def from_distribution(cls, dist) -> "Ducts":
        supply = next((d for d in dist.ducts if d.duct_type == "supply"), None)
        ret = next((d for d in dist.ducts if d.duct_type == "return"), None)
        if supply is None:
            raise MeasureError(f"Air distribution '{dist.id}' has no supply ducts.")
        location = supply.duct_location or constants.LOCATION_ATTIC_VENTED
        if location not in DUCT_LOCATION_MAP:
            raise MeasureError(f"Unexpected duct location: {location}.")
        return cls(
            total_leakage=0.3,
            norm_leakage_25pa=None,
            supply_area_mult=supply.duct_surface_area / 100.0,
            return_area_mult=(ret.duct_surface_area if ret else 0.0) / 100.0,
            r=supply.duct_insulation_r_value,
            supply_frac=0.6,
            return_frac=0.067,
            ah_supply_frac=0.067,
            ah_return_frac=0.267,
            location_frac=1.0,
            num_returns=1,
            location=DUCT_LOCATION_MAP[location],
            supply_area=supply.duct_surface_area,
            return_area=ret.duct_surface_area if ret else 0.0,
            return_r=ret.duct_insulation_r_value if ret else supply.duct_insulation_r_value,
            supply_leakage_cfm25=dist.supply_leakage_cfm25,
            return_leakage_cfm25=dist.return_leakage_cfm25,
        )

    @property
    def in_conditioned_space(self) -> bool:
        return self.location == NO_DUCTS or self.location in constants.CONDITIONED_SPACE_TYPES

    @property
    def supply_leakage(self) -> float:
        """Supply leakage as a fraction of fan flow (ducts plus air handler)."""
        return self.total_leakage * (self.supply_frac + self.ah_supply_frac)

    @property
    def return_leakage(self) -> float:
        return self.total_leakage * (self.return_frac + self.ah_return_frac)


def _ambient_temps(location: str, epw: EPWFile):
    """Seasonal (heating, cooling) ambient temperature (F) at the duct location."""
    monthly = epw.monthly_avg_drybulb
    heat_out = min(monthly)
    cool_out = max(monthly)
    ground = epw.annual_avg_drybulb
    if location == constants.SPACE_TYPE_UNFINISHED_ATTIC:
        return heat_out, cool_out + ATTIC_COOLING_RISE_F
    if location in (constants.SPACE_TYPE_UNFINISHED_BASEMENT, constants.SPACE_TYPE_CRAWL):
        return (INDOOR_HEATING_F + ground) / 2.0, (INDOOR_COOLING_F + ground) / 2.0
    if location == constants.SPACE_TYPE_GARAGE:
        return heat_out + 5.0, cool_out + 5.0
    return INDOOR_HEATING_F, INDOOR_COOLING_F


def calc_delivery_effectiveness(ducts: Ducts, epw: EPWFile, fan_cfm: float, heating: bool) -> float:
    """
    Seasonal delivery effectiveness of a duct system.

    Args:
        fan_cfm: Air handler flow
        heating: Heating season (else cooling, sensible only)
    """
    if ducts.in_conditioned_space or fan_cfm <= 0:
        return 1.0
    t_heat, t_cool = _ambient_temps(ducts.location, epw)
    a_s = 1.0 - ducts.supply_leakage
    a_r = 1.0 - ducts.return_leakage
    supply_area, return_area = ducts.supply_area, ducts.return_area
    r_s = get_duct_insulation_rvalue(ducts.r, True)
    r_r = get_duct_insulation_rvalue(ducts.return_r if ducts.return_r is not None else ducts.r, False)
    b_s = math.exp(-supply_area / (AIR_HEAT_FACTOR * fan_cfm * r_s))
    b_r = math.exp(-return_area / (AIR_HEAT_FACTOR * fan_cfm * r_r))
    if heating:
        dt_e = HEATING_SUPPLY_RISE_F
        dt_s = INDOOR_HEATING_F - t_heat
        dt_r = INDOOR_HEATING_F - t_heat
    else:
        dt_e = COOLING_SUPPLY_DROP_F
        dt_s = t_cool - INDOOR_COOLING_F
        dt_r = t_cool - INDOOR_COOLING_F
    de = a_s * b_s - a_s * b_s * (1.0 - b_r * a_r) * (dt_r / dt_e) - a_s * (1.0 - b_s) * (dt_s / dt_e)
    de = ducts.location_frac * de + (1.0 - ducts.location_frac)
    return max(min(de, 1.0), 0.0)


def register_duct_systems(model: Model, hpxml) -> Dict[str, Ducts]:
    """Map each system id attached to an air distribution to its ducts."""
    duct_systems = {}
    for dist in hpxml.hvac_distributions:
        if dist.distribution_system_type != "AirDistribution" or not dist.ducts:
            continue
        ducts = Ducts.from_distribution(dist)
        for sys in list(hpxml.heating_systems) + list(hpxml.cooling_systems) + list(hpxml.heat_pumps):
            if sys.distribution_system_idref == dist.id:
                duct_systems[sys.id] = ducts
    model.properties["duct_systems"] = duct_systems
    return duct_systems


def apply_duct_losses(model: Model, epw: EPWFile) -> Dict[str, List[float]]:
    """
    Scale efficiencies of sized air systems by their duct delivery effectiveness.

    Returns:
        sys_id -> [heating DE, cooling DE]
    """
    applied = {}
    systems = get_hvac_systems(model)
    for sys_id, ducts in model.properties.get("duct_systems", {}).items():
        rec = systems.get(sys_id)
        if rec is None:
            continue
        if ducts.supply_area is None:
            cfa = model.properties.get("cfa", 0.0)
            ducts.supply_area, ducts.return_area = get_duct_surface_areas(
                cfa, ducts.num_returns, ducts.supply_area_mult, ducts.return_area_mult)
        heat_cfm = (rec.heating_capacity or 0.0) / 12000.0 * CFM_PER_TON
        cool_cfm = (rec.cooling_capacity or 0.0) / 12000.0 * CFM_PER_TON
        de_heat = calc_delivery_effectiveness(ducts, epw, heat_cfm, heating=True) if rec.is_heating else 1.0
        de_cool = calc_delivery_effectiveness(ducts, epw, cool_cfm, heating=False) if rec.is_cooling else 1.0
        rec.apply_distribution_efficiency(model, de_heat, de_cool)
        applied[sys_id] = [de_heat, de_cool]
        logger.info(f"Ducts for '{sys_id}' in {ducts.location}: heating DE {de_heat:.3f}, cooling DE {de_cool:.3f}")
    return applied
