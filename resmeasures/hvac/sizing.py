"""
HVAC sizing.

A simplified block load: conduction through the conditioned envelope plus
infiltration at the 99% heating and 1% cooling design temperatures, solar
gains through glazing and internal gains for cooling. Autosized systems
receive their share of the design load, divided by their distribution
efficiency.
"""

from dataclasses import dataclass, field
from typing import Dict
import logging

from ..core import constants
from ..core.units import convert
from ..envelope.constructions import LayeredConstruction
from ..model import Model
from ..weather.epw import EPWFile
from .equipment import (
    ASHP, BOILER, ELECTRIC_RESISTANCE, FURNACE, GSHP, IDEAL_AIR, MSHP, STOVE, WALL_FURNACE,
    get_hvac_systems,
)

logger = logging.getLogger(__name__)

HEATING_INDOOR_F = 70.0
COOLING_INDOOR_F = 75.0
EXTERIOR_FILM_R = 0.85
INTERIOR_FILM_R = 1.36
UNCONDITIONED_DT_FRACTION = 0.5
GLAZING_SOLAR_BTUH_PER_FT2 = 30.0
INTERNAL_GAINS_BTUH = 1600.0
INTERNAL_GAINS_PER_BEDROOM_BTUH = 230.0
LATENT_FACTOR = 1.3
AIR_HEAT_FACTOR = 1.08  # Btu/hr-cfm-F
DEFAULT_NATURAL_ACH = 0.5
MIN_CAPACITY_BTUH = 6000.0
HEAT_PUMP_TYPES = (ASHP, MSHP, GSHP)


@dataclass
class DesignLoads:
    """Design loads in Btu/hr."""
    heating: float = 0.0
    cooling_sensible: float = 0.0
    cooling_latent: float = 0.0
    ua: float = 0.0  # Btu/hr-F to outdoors
    ua_ground: float = 0.0
    ua_unconditioned: float = 0.0
    infiltration_cfm: float = 0.0
    components: Dict[str, float] = field(default_factory=dict)

    @property
    def cooling(self) -> float:
        return self.cooling_sensible + self.cooling_latent


def _surface_r(model: Model, construction: str, film_r: float) -> float:
    constr = model.get("Construction", construction)
    if constr is None:
        return film_r
    if isinstance(constr, LayeredConstruction):
        return constr.rvalue + film_r
    # Simple glazing U-factors include films
    mat = model.get("WindowMaterial:SimpleGlazingSystem", constr.get("Outside Layer"))
    if mat is None:
        return film_r
    return 1.0 / convert(mat.get("U-Factor"), "W/(m^2*K)", "Btu/(hr*ft^2*F)")


def calc_envelope_ua(model: Model, loads: DesignLoads) -> None:
    """UA of conditioned-space surfaces, split by what they face."""
    for surface in model.surfaces:
        if surface.space is None or surface.space.space_type not in constants.CONDITIONED_SPACE_TYPES:
            continue
        bc = surface.outside_boundary_condition
        if bc == "Surface":
            adj = surface.adjacent_space
            if adj is None or adj.space_type in constants.CONDITIONED_SPACE_TYPES:
                continue
        elif bc == "Adiabatic":
            continue
        film = EXTERIOR_FILM_R if bc in ("Outdoors", "Ground", "Foundation") else INTERIOR_FILM_R
        opaque_ft2 = convert(surface.net_area, "m^2", "ft^2")
        ua = opaque_ft2 / _surface_r(model, surface.construction, film)
        for sub in surface.sub_surfaces:
            sub_ft2 = convert(sub.area, "m^2", "ft^2")
            ua += sub_ft2 / _surface_r(model, sub.construction, film)
            if sub.sub_surface_type != "Door" and bc == "Outdoors":
                loads.components["glazing_ft2"] = loads.components.get("glazing_ft2", 0.0) + sub_ft2
        if bc == "Outdoors":
            loads.ua += ua
        elif bc in ("Ground", "Foundation"):
            loads.ua_ground += ua
        else:
            loads.ua_unconditioned += ua


def calc_design_loads(model: Model, epw: EPWFile, nbeds: int) -> DesignLoads:
    design = epw.design
    loads = DesignLoads()
    calc_envelope_ua(model, loads)

    volume_ft3 = sum(convert(z.volume or 0.0, "m^3", "ft^3") for z in model.thermal_zones
                     if z.name.replace(" zone", "") in constants.CONDITIONED_SPACE_TYPES)
    ach = model.properties.get("natural_ach", DEFAULT_NATURAL_ACH)
    loads.infiltration_cfm = ach * volume_ft3 / 60.0 + model.properties.get("mech_vent_cfm", 0.0)
    ua_inf = AIR_HEAT_FACTOR * loads.infiltration_cfm

    dt_heat = HEATING_INDOOR_F - design.heat_99
    dt_cool = max(design.cool_01 - COOLING_INDOOR_F, 0.0)
    dt_ground = max(HEATING_INDOOR_F - epw.annual_avg_drybulb, 0.0)
    loads.heating = ((loads.ua + ua_inf) * dt_heat + loads.ua_unconditioned * dt_heat * UNCONDITIONED_DT_FRACTION
                     + loads.ua_ground * dt_ground)

    solar = loads.components.get("glazing_ft2", 0.0) * GLAZING_SOLAR_BTUH_PER_FT2
    internal = INTERNAL_GAINS_BTUH + INTERNAL_GAINS_PER_BEDROOM_BTUH * nbeds
    loads.cooling_sensible = ((loads.ua + ua_inf) * dt_cool
                              + loads.ua_unconditioned * dt_cool * UNCONDITIONED_DT_FRACTION + solar + internal)
    loads.cooling_latent = loads.cooling_sensible * (LATENT_FACTOR - 1.0)
    logger.info(f"Design loads: heating {loads.heating:.0f} Btu/hr at {design.heat_99:.1f} F, "
                f"cooling {loads.cooling:.0f} Btu/hr at {design.cool_01:.1f} F")
    return loads


def _round_capacity(btuh: float) -> float:
    return round(max(btuh, MIN_CAPACITY_BTUH) / 100.0) * 100.0


def apply_sizing(model: Model, epw: EPWFile, nbeds: int) -> DesignLoads:
    """
    Fill in autosized capacities of every registered HVAC system.

    Heat pump compressors are sized to the larger of their heating and
    cooling shares; backup heat covers the full heating share.
    """
    loads = calc_design_loads(model, epw, nbeds)
    model.properties["design_loads"] = loads
    for rec in get_hvac_systems(model).values():
        if rec.system_type == IDEAL_AIR:
            continue
        heat = loads.heating * rec.load_frac_heat / rec.dse_heat
        cool = loads.cooling * rec.load_frac_cool / rec.dse_cool
        if rec.system_type in HEAT_PUMP_TYPES:
            nominal = _round_capacity(max(heat, cool))
            if rec.heating_capacity is None:
                rec.heating_capacity = nominal
            if rec.cooling_capacity is None:
                rec.cooling_capacity = nominal
            if rec.backup_capacity is None:
                rec.backup_capacity = _round_capacity(heat)
        elif rec.system_type in (FURNACE, BOILER, ELECTRIC_RESISTANCE, WALL_FURNACE, STOVE):
            if rec.heating_capacity is None:
                rec.heating_capacity = _round_capacity(heat)
        elif rec.cooling_capacity is None:
            rec.cooling_capacity = _round_capacity(cool)
        rec.apply_capacities(model)
        logger.debug(f"Sized '{rec.sys_id}': heating {rec.heating_capacity}, cooling {rec.cooling_capacity}, "
                     f"backup {rec.backup_capacity} Btu/hr")
    return loads
