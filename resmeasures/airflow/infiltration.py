"""
Infiltration.

Living space and garage leakage is given as ACH50 and converted to an
effective leakage area for the Sherman-Grimsrud model; the other zones use
specific leakage areas (vented crawlspaces and attics) or constant air
changes.
"""

from dataclasses import dataclass
from typing import Dict, Optional
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import ConstantSchedule

logger = logging.getLogger(__name__)

FLOW_EXPONENT = 0.65
REFERENCE_PRESSURE_PA = 4.0
TEST_PRESSURE_PA = 50.0
AIR_DENSITY = 1.2  # kg/m^3
ASHRAE_622_COEFF = 0.052
ASHRAE_622_REF_HEIGHT_FT = 8.202
ASHRAE_622_HEIGHT_EXP = 0.4

TERRAIN_OCEAN = "ocean"
TERRAIN_PLAINS = "plains"
TERRAIN_RURAL = "rural"
TERRAIN_SUBURBAN = "suburban"
TERRAIN_CITY = "city"
TERRAIN_EPLUS = {
    TERRAIN_OCEAN: "Ocean",
    TERRAIN_PLAINS: "Country",
    TERRAIN_RURAL: "Country",
    TERRAIN_SUBURBAN: "Suburbs",
    TERRAIN_CITY: "City",
}

# Sherman-Grimsrud coefficients by number of stories (1, 2, 3+)
STACK_COEFFICIENTS = (0.000145, 0.000290, 0.000435)  # (L/s)^2/(cm^4*K)
WIND_COEFFICIENTS = (0.000174, 0.000234, 0.000271)  # (L/s)^2/(cm^4*(m/s)^2), shelter class 3


def get_default_shelter_coefficient() -> float:
    return 0.5


def get_default_unfinished_basement_ach() -> float:
    return 0.1


def calc_ela_from_ach50(ach50: float, volume_ft3: float) -> float:
    """
    Effective leakage area (ft^2) at 4 Pa from a blower door ACH50.

    Args:
        ach50: Air changes per hour at 50 Pa
        volume_ft3: Infiltration volume
    """
    cfm50 = ach50 * volume_ft3 / 60.0
    q50 = convert(cfm50, "cfm", "m^3/s")
    q4 = q50 * (REFERENCE_PRESSURE_PA / TEST_PRESSURE_PA) ** FLOW_EXPONENT
    ela_m2 = q4 / (2.0 * REFERENCE_PRESSURE_PA / AIR_DENSITY) ** 0.5
    return convert(ela_m2, "m^2", "ft^2")


def calc_sla(ela_ft2: float, floor_area_ft2: float) -> float:
    if floor_area_ft2 <= 0:
        return 0.0
    return ela_ft2 / floor_area_ft2


def calc_natural_ach(ach50: float, volume_ft3: float, height_ft: float, wsf: float) -> float:
    """Annual average natural ACH (ASHRAE 62.2-2013 infiltration estimate)."""
    if volume_ft3 <= 0:
        return 0.0
    cfm50 = ach50 * volume_ft3 / 60.0
    qinf = ASHRAE_622_COEFF * cfm50 * wsf * (height_ft / ASHRAE_622_REF_HEIGHT_FT) ** ASHRAE_622_HEIGHT_EXP
    return qinf * 60.0 / volume_ft3


def sherman_grimsrud_coefficients(num_stories: int):
    i = min(max(num_stories, 1), 3) - 1
    return STACK_COEFFICIENTS[i], WIND_COEFFICIENTS[i]


@dataclass
class Infiltration:
    living_ach50: Optional[float]
    living_constant_ach: Optional[float]
    shelter_coef: float
    garage_ach50: Optional[float]
    crawl_sla: float
    attic_sla: Optional[float]
    attic_const_ach: Optional[float]
    unfinished_basement_ach: float = 0.1
    finished_basement_ach: float = 0.0
    pier_beam_ach: float = 100.0
    has_flue_chimney: bool = False
    is_existing_home: bool = False
    terrain: str = TERRAIN_SUBURBAN
    volume: Optional[float] = None  # ft^3

    @classmethod
    def from_hpxml(cls, hpxml, volume_ft3: float) -> "Infiltration":
        ach50 = const_ach = None
        volume = None
        for m in hpxml.air_infiltration_measurements:
            if m.house_pressure == 50 and m.unit_of_measure == "ACH":
                ach50 = m.air_leakage
            else:
                const_ach = m.constant_ach_natural
            volume = m.infiltration_volume or volume_ft3

        crawl_area = crawl_sla_area = 0.0
        for fnd in hpxml.foundations:
            if fnd.foundation_type != "VentedCrawlspace":
                continue
            area = sum(f.area for f in fnd.frame_floors)
            sla = fnd.crawlspace_specific_leakage_area
            sla = constants.get_default_vented_crawl_sla() if sla is None else sla
            crawl_sla_area += sla * area
            crawl_area += area

        attic_area = attic_sla_area = 0.0
        attic_ach = None
        for attic in hpxml.attics:
            if attic.attic_type != "VentedAttic":
                continue
            area = sum(f.area for f in attic.floors)
            attic_ach = attic.attic_constant_ach_natural
            sla = attic.attic_specific_leakage_area
            if sla is None and attic_ach is None:
                sla = constants.get_default_vented_attic_sla()
            if sla is not None:
                attic_sla_area += sla * area
            attic_area += area
        if attic_area == 0:
            attic_sla, attic_const_ach = 0.0, None
        elif attic_sla_area > 0:
            attic_sla, attic_const_ach = attic_sla_area / attic_area, None
        else:
            attic_sla, attic_const_ach = None, attic_ach

        shelter = hpxml.shelter_coefficient
        return cls(
            living_ach50=ach50,
            living_constant_ach=const_ach,
            shelter_coef=get_default_shelter_coefficient() if shelter is None else shelter,
            garage_ach50=ach50,
            crawl_sla=crawl_sla_area / crawl_area if crawl_area > 0 else 0.0,
            attic_sla=attic_sla,
            attic_const_ach=attic_const_ach,
            volume=volume or volume_ft3,
        )


# =============================================================================
# Model objects
# =============================================================================

def _add_ela(model: Model, space_type: str, ela_ft2: float, num_stories: int) -> Optional[ModelObject]:
    space = model.get_space(space_type)
    if space is None or ela_ft2 <= 0:
        return None
    stack, wind = sherman_grimsrud_coefficients(num_stories)
    return model.add(ModelObject("ZoneInfiltration:EffectiveLeakageArea", f"{space_type} infiltration", {
        "Zone or ZoneList or Space or SpaceList Name": space.name,
        "Schedule Name": "Always On Discrete",
        "Effective Air Leakage Area": round(convert(ela_ft2, "ft^2", "m^2") * 10000.0, 4),  # cm^2
        "Stack Coefficient": stack,
        "Wind Coefficient": wind,
    }))


def _add_constant_ach(model: Model, space_type: str, ach: float) -> Optional[ModelObject]:
    space = model.get_space(space_type)
    if space is None or ach <= 0:
        return None
    return model.add(ModelObject("ZoneInfiltration:DesignFlowRate", f"{space_type} infiltration", {
        "Zone or ZoneList or Space or SpaceList Name": space.name,
        "Schedule Name": "Always On Discrete",
        "Design Flow Rate Calculation Method": "AirChanges/Hour",
        "Air Changes per Hour": round(ach, 6),
        "Constant Term Coefficient": 1.0,
        "Temperature Term Coefficient": 0.0,
        "Velocity Term Coefficient": 0.0,
        "Velocity Squared Term Coefficient": 0.0,
    }))


def _floor_area_ft2(model: Model, space_type: str) -> float:
    space = model.get_space(space_type)
    if space is None:
        return 0.0
    return sum(convert(s.gross_area, "m^2", "ft^2") for s in model.surfaces_in(space) if s.surface_type == "Floor")


def _volume_ft3(model: Model, space_type: str) -> float:
    space = model.get_space(space_type)
    if space is None or space.thermal_zone.volume is None:
        return 0.0
    return convert(space.thermal_zone.volume, "m^3", "ft^3")


def apply_infiltration(model: Model, infil: Infiltration, num_stories: int, height_ft: float) -> Dict[str, float]:
    """
    Add infiltration to every zone present in the model.

    Returns:
        Living space results: ELA (ft^2), SLA, natural ACH
    """
    ConstantSchedule("Always On Discrete", 1.0, type_limits="OnOff").add_to(model)
    model.properties["terrain"] = TERRAIN_EPLUS.get(infil.terrain, "Suburbs")
    results = {"ela": 0.0, "sla": 0.0, "natural_ach": 0.0}

    living_volume = infil.volume or _volume_ft3(model, constants.SPACE_TYPE_LIVING)
    if infil.living_ach50 is not None:
        ela = calc_ela_from_ach50(infil.living_ach50, living_volume)
        results["ela"] = ela
        results["sla"] = calc_sla(ela, _floor_area_ft2(model, constants.SPACE_TYPE_LIVING))
        results["natural_ach"] = calc_natural_ach(infil.living_ach50, living_volume, height_ft, infil.shelter_coef)
        _add_ela(model, constants.SPACE_TYPE_LIVING, ela, num_stories)
    elif infil.living_constant_ach is not None:
        results["natural_ach"] = infil.living_constant_ach
        _add_constant_ach(model, constants.SPACE_TYPE_LIVING, infil.living_constant_ach)

    if infil.garage_ach50 is not None:
        garage_ela = calc_ela_from_ach50(infil.garage_ach50, _volume_ft3(model, constants.SPACE_TYPE_GARAGE))
        _add_ela(model, constants.SPACE_TYPE_GARAGE, garage_ela, 1)
    _add_ela(model, constants.SPACE_TYPE_CRAWL,
             infil.crawl_sla * _floor_area_ft2(model, constants.SPACE_TYPE_CRAWL), 1)
    if infil.attic_sla:
        _add_ela(model, constants.SPACE_TYPE_UNFINISHED_ATTIC,
                 infil.attic_sla * _floor_area_ft2(model, constants.SPACE_TYPE_UNFINISHED_ATTIC), 1)
    elif infil.attic_const_ach:
        _add_constant_ach(model, constants.SPACE_TYPE_UNFINISHED_ATTIC, infil.attic_const_ach)
    _add_constant_ach(model, constants.SPACE_TYPE_UNFINISHED_BASEMENT, infil.unfinished_basement_ach)
    _add_constant_ach(model, constants.SPACE_TYPE_FINISHED_BASEMENT, infil.finished_basement_ach)

    model.properties["natural_ach"] = results["natural_ach"]
    logger.info(f"Infiltration: living ELA {results['ela']:.2f} ft^2, SLA {results['sla']:.5f}, "
                f"natural ACH {results['natural_ach']:.3f}")
    return results
