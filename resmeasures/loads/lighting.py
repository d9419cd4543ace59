"""
Interior, exterior and garage lighting.

Annual energy depends on conditioned floor area and the fraction of
qualifying (Tier I / Tier II) fixtures. The interior schedule follows
sunrise and sunset at the site latitude.
"""

import math
from typing import List, Optional, Tuple
import logging

from ..core import constants
from ..envelope.geometry import get_floor_area
from ..model import Model
from ..schedules import MonthWeekdayWeekendSchedule
from .equipment import add_equipment

logger = logging.getLogger(__name__)

# Mid-month day of year
_MID_MONTH_DAYS = [15, 46, 74, 105, 135, 166, 196, 227, 258, 288, 319, 349]


def get_reference_fractions() -> Tuple[float, float, float, float, float, float]:
    """
    Qualifying fixture fractions of the reference home.

    Returns:
        (Tier I interior, Tier I exterior, Tier I garage,
         Tier II interior, Tier II exterior, Tier II garage)
    """
    return 0.10, 0.0, 0.0, 0.0, 0.0, 0.0


def check_fractions(fFI_int: float, fFI_ext: float, fFI_grg: float,
                    fFII_int: float, fFII_ext: float, fFII_grg: float) -> None:
    """
    Raises:
        ValueError: If qualifying fractions of a location sum to more than 1
    """
    for label, total in (("interior", fFI_int + fFII_int), ("exterior", fFI_ext + fFII_ext),
                         ("garage", fFI_grg + fFII_grg)):
        if total > 1:
            raise ValueError(f"Fraction of qualifying {label} lighting fixtures {total} is greater than 1.")


def calc_lighting_energy(cfa: float, garage_present: bool,
                         fFI_int: float, fFI_ext: float, fFI_grg: float,
                         fFII_int: float, fFII_ext: float, fFII_grg: float) -> Tuple[float, float, float]:
    """
    Annual lighting electricity.

    Returns:
        (interior kWh, exterior kWh, garage kWh)
    """
    check_fractions(fFI_int, fFI_ext, fFI_grg, fFII_int, fFII_ext, fFII_grg)
    q_int = fFI_int + fFII_int
    q_ext = fFI_ext + fFII_ext
    q_grg = fFI_grg + fFII_grg

    int_kwh = 0.8 * ((4.0 - 3.0 * q_int) / 3.7) * (455.0 + 0.8 * cfa) + 0.2 * (455.0 + 0.8 * cfa)
    ext_kwh = (100.0 + 0.05 * cfa) * (1.0 - q_ext) + 0.25 * (100.0 + 0.05 * cfa) * q_ext
    grg_kwh = 0.0
    if garage_present:
        grg_kwh = 100.0 * (1.0 - q_grg) + 25.0 * q_grg
    return int_kwh, ext_kwh, grg_kwh


def day_length_hours(latitude: float, day_of_year: int) -> float:
    """Hours between sunrise and sunset."""
    declination = 23.45 * math.sin(math.radians(360.0 * (284 + day_of_year) / 365.0))
    cos_h = -math.tan(math.radians(latitude)) * math.tan(math.radians(declination))
    cos_h = min(1.0, max(-1.0, cos_h))
    return 2.0 * math.degrees(math.acos(cos_h)) / 15.0


def calc_lighting_profiles(latitude: float) -> Tuple[List[float], List[float]]:
    """
    Hourly lighting profile and monthly multipliers for a latitude.

    Lights are used from one hour before sunset until 23:00 and from 06:00
    until sunrise, with a small daytime base.

    Returns:
        (24 hourly values, 12 monthly multipliers)
    """
    monthly_profiles = []
    for day in _MID_MONTH_DAYS:
        half = day_length_hours(latitude, day) / 2.0
        sunrise = 12.0 - half
        sunset = 12.0 + half
        profile = []
        for hour in range(24):
            mid = hour + 0.5
            if mid < 6.0 or mid >= 23.0:
                value = 0.1
            elif mid < sunrise or mid >= sunset - 1.0:
                value = 1.0
            else:
                value = 0.2
            profile.append(value)
        monthly_profiles.append(profile)
    daily_totals = [sum(p) for p in monthly_profiles]
    average = sum(daily_totals) / 12.0
    monthly = [t / average for t in daily_totals]
    hourly = [sum(p[h] for p in monthly_profiles) / 12.0 for h in range(24)]
    return hourly, monthly


def add_lighting(model: Model, int_kwh: float, ext_kwh: float, grg_kwh: float,
                 latitude: float = 40.0) -> Optional[MonthWeekdayWeekendSchedule]:
    """
    Add lighting loads. Interior lighting is spread over the conditioned
    spaces by floor area; all three use the interior schedule.

    Returns:
        The lighting schedule, or None when nothing was added
    """
    hourly, monthly = calc_lighting_profiles(latitude)
    schedule = MonthWeekdayWeekendSchedule("lighting schedule", hourly, hourly, monthly)
    if int_kwh + ext_kwh + grg_kwh <= 0:
        return None
    schedule.add_to(model)

    conditioned = [s for s in model.spaces if s.space_type in constants.CONDITIONED_SPACE_TYPES]
    areas = {s.name: get_floor_area(model, [s]) for s in conditioned}
    total_area = sum(areas.values())
    if not conditioned:
        conditioned = [model.create_or_get_space(constants.SPACE_TYPE_LIVING)]
        areas = {conditioned[0].name: 1.0}
        total_area = 1.0
    for space in conditioned:
        frac = areas[space.name] / total_area if total_area > 0 else 1.0 / len(conditioned)
        design_w = schedule.calc_design_level_from_annual_kwh(int_kwh * frac)
        add_equipment(model, f"interior lighting {space.space_type}", space, design_w, schedule.name,
                      frac_sens=1.0, frac_lat=0.0, end_use="interior lighting")

    if grg_kwh > 0:
        garage = model.get_space(constants.SPACE_TYPE_GARAGE)
        if garage is not None:
            add_equipment(model, "garage lighting", garage, schedule.calc_design_level_from_annual_kwh(grg_kwh),
                          schedule.name, frac_sens=1.0, frac_lat=0.0, end_use="garage lighting")
        else:
            logger.warning("Garage lighting requested but the model has no garage space.")

    if ext_kwh > 0:
        model.add_object("Exterior:Lights", "exterior lighting",
                         Schedule_Name=schedule.name,
                         Design_Level=round(schedule.calc_design_level_from_annual_kwh(ext_kwh), 4),
                         Control_Option="ScheduleNameOnly",
                         EndUse_Subcategory="exterior lighting")
    logger.info(f"Lighting: interior {int_kwh:.0f}, exterior {ext_kwh:.0f}, garage {grg_kwh:.0f} kWh/yr")
    return schedule
