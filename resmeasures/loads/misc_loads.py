"""
Miscellaneous electric loads: residual MELs, televisions and plug loads.
"""

from typing import Dict, Optional, Tuple
import logging

from ..core import constants
from ..envelope.geometry import get_floor_area
from ..model import Model
from ..schedules import MonthWeekdayWeekendSchedule
from .equipment import add_equipment

logger = logging.getLogger(__name__)

MISC_WEEKDAY_SCH = ("0.04, 0.037, 0.037, 0.036, 0.033, 0.036, 0.043, 0.047, 0.034, 0.023, 0.024, 0.025, "
                    "0.024, 0.028, 0.031, 0.032, 0.039, 0.053, 0.063, 0.067, 0.071, 0.069, 0.059, 0.05")
MISC_WEEKEND_SCH = MISC_WEEKDAY_SCH
MISC_MONTHLY_SCH = "1.248, 1.257, 0.993, 0.989, 0.993, 0.827, 0.821, 0.821, 0.827, 0.99, 0.987, 1.248"


def get_residual_mels_values(cfa: float) -> Tuple[float, float, float]:
    """
    Returns:
        (kWh/yr, sensible fraction, latent fraction)
    """
    return 0.91 * cfa, 0.93, 0.021


def get_televisions_values(cfa: float, nbeds: int) -> Tuple[float, float, float]:
    """
    Returns:
        (kWh/yr, sensible fraction, latent fraction)
    """
    return 413.0 + 69.0 * nbeds, 1.0, 0.0


def calc_plug_loads_annual_kwh(nbeds: int, ffa: float, mult: float = 1.0) -> float:
    """Annual plug load electricity scaled from the bedroom/floor area regression."""
    return (1108.1 + 180.2 * nbeds + 0.2785 * ffa) * mult


def apply_plug(model: Model, annual_kwh: float, frac_sens: float, frac_lat: float,
               weekday_sch: str = MISC_WEEKDAY_SCH, weekend_sch: str = MISC_WEEKEND_SCH,
               monthly_sch: str = MISC_MONTHLY_SCH,
               schedule: Optional[MonthWeekdayWeekendSchedule] = None) -> MonthWeekdayWeekendSchedule:
    """
    Spread an annual plug load over the conditioned spaces by floor area.

    Returns:
        The schedule used, so other loads can share it

    Raises:
        ValueError: On a negative energy or invalid schedule strings
    """
    if annual_kwh < 0:
        raise ValueError("Annual energy use must be greater than or equal to 0.")
    if schedule is None:
        schedule = MonthWeekdayWeekendSchedule("misc plug loads schedule", weekday_sch, weekend_sch, monthly_sch)
        schedule.add_to(model)

    spaces = [s for s in model.spaces if s.space_type in constants.CONDITIONED_SPACE_TYPES]
    areas: Dict[str, float] = {s.name: get_floor_area(model, [s]) for s in spaces}
    total_area = sum(areas.values())
    if not spaces or total_area <= 0:
        raise ValueError("No building geometry has been defined.")

    for space in spaces:
        space_kwh = annual_kwh * areas[space.name] / total_area
        design_w = schedule.calc_design_level_from_annual_kwh(space_kwh)
        add_equipment(model, f"misc plug loads {space.space_type}", space, design_w, schedule.name,
                      frac_sens, frac_lat, end_use="misc plug loads")
    logger.info(f"Plug loads: {annual_kwh:.0f} kWh/yr over {len(spaces)} spaces")
    return schedule


def apply_tv(model: Model, annual_kwh: float, schedule: MonthWeekdayWeekendSchedule, frac_sens: float = 1.0,
             frac_lat: float = 0.0) -> None:
    """Television load in the living space, sharing the plug load schedule."""
    if annual_kwh <= 0:
        return
    living = model.create_or_get_space(constants.SPACE_TYPE_LIVING)
    add_equipment(model, "television", living, schedule.calc_design_level_from_annual_kwh(annual_kwh),
                  schedule.name, frac_sens, frac_lat, end_use="television")


def add_mels(model: Model, hpxml, cfa: float, nbeds: int) -> None:
    """Residual MELs and television from the HPXML plug loads."""
    schedule = None
    other = hpxml.plug_load("other")
    if other is not None:
        default_kwh, default_sens, default_lat = get_residual_mels_values(cfa)
        kwh = default_kwh if other.kwh_per_year is None else other.kwh_per_year
        frac_sens = default_sens if other.frac_sensible is None else other.frac_sensible
        frac_lat = default_lat if other.frac_latent is None else other.frac_latent
        sch = hpxml.misc_loads_schedule
        schedule = apply_plug(model, kwh, frac_sens, frac_lat,
                              sch.weekday_fractions or MISC_WEEKDAY_SCH,
                              sch.weekend_fractions or MISC_WEEKEND_SCH,
                              sch.monthly_multipliers or MISC_MONTHLY_SCH)

    tv = hpxml.plug_load("TV other")
    if tv is not None:
        kwh, frac_sens, frac_lat = get_televisions_values(cfa, nbeds)
        if tv.kwh_per_year is not None:
            kwh = tv.kwh_per_year
        if schedule is None:
            schedule = MonthWeekdayWeekendSchedule("misc plug loads schedule", MISC_WEEKDAY_SCH,
                                                   MISC_WEEKEND_SCH, MISC_MONTHLY_SCH)
            schedule.add_to(model)
        apply_tv(model, kwh, schedule, frac_sens, frac_lat)
