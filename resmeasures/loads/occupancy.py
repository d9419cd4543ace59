"""
Occupants: count defaults, heat gains and the occupancy schedule.
"""

from typing import Optional
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import ConstantSchedule, MonthWeekdayWeekendSchedule

logger = logging.getLogger(__name__)

OCCUPANCY_WEEKDAY_SCH = ("1.00000, 1.00000, 1.00000, 1.00000, 1.00000, 1.00000, 1.00000, 0.88310, 0.40861, "
                         "0.24189, 0.24189, 0.24189, 0.24189, 0.24189, 0.24189, 0.24189, 0.29498, 0.55310, "
                         "0.89693, 0.89693, 0.89693, 1.00000, 1.00000, 1.00000")
OCCUPANCY_WEEKEND_SCH = OCCUPANCY_WEEKDAY_SCH
OCCUPANCY_MONTHLY_SCH = ", ".join(["1.0"] * 12)

# Radiant share of the sensible gain
OCCUPANT_FRAC_RADIANT = 0.558


def get_occupancy_default_num(nbeds: int) -> float:
    return float(nbeds)


def get_occupancy_default_values():
    """
    Returns:
        (heat gain Btu/person/hr, hours/day, sensible fraction, latent fraction)
    """
    return 384.0, 16.5, 0.573, 0.427


def process_occupants(
    model: Model,
    num_occ: float,
    occ_gain: Optional[float] = None,
    sens_frac: Optional[float] = None,
    lat_frac: Optional[float] = None,
    weekday_sch: str = OCCUPANCY_WEEKDAY_SCH,
    weekend_sch: str = OCCUPANCY_WEEKEND_SCH,
    monthly_sch: str = OCCUPANCY_MONTHLY_SCH,
) -> Optional[ModelObject]:
    """
    Add occupants to the living space.

    Raises:
        ValueError: On a negative count or invalid schedules/fractions
    """
    default_gain, _, default_sens, default_lat = get_occupancy_default_values()
    occ_gain = default_gain if occ_gain is None else occ_gain
    sens_frac = default_sens if sens_frac is None else sens_frac
    lat_frac = default_lat if lat_frac is None else lat_frac

    if num_occ < 0:
        raise ValueError("Number of occupants must be greater than or equal to 0.")
    if occ_gain < 0:
        raise ValueError("Internal gains cannot be negative.")
    if sens_frac < 0 or sens_frac > 1 or lat_frac < 0 or lat_frac > 1 or sens_frac + lat_frac > 1:
        raise ValueError("Sensible and latent fractions must be between 0 and 1 and sum to at most 1.")
    if num_occ == 0:
        return None

    living = model.create_or_get_space(constants.SPACE_TYPE_LIVING)

    schedule = MonthWeekdayWeekendSchedule("occupants schedule", weekday_sch, weekend_sch, monthly_sch)
    schedule.add_to(model)
    activity_w = convert(occ_gain, "Btu/hr", "W")
    activity = ConstantSchedule("occupants activity schedule", round(activity_w, 4), type_limits="Any Number")
    activity.add_to(model)

    people = model.add(ModelObject("People", "occupants", {
        "Zone or ZoneList or Space or SpaceList Name": living.name,
        "Number of People Schedule Name": schedule.name,
        "Number of People Calculation Method": "People",
        "Number of People": num_occ,
        "People per Floor Area": None,
        "Floor Area per Person": None,
        "Fraction Radiant": OCCUPANT_FRAC_RADIANT,
        "Sensible Heat Fraction": sens_frac,
        "Activity Level Schedule Name": activity.name,
    }))
    model.properties["num_occupants"] = num_occ
    logger.info(f"Added {num_occ:g} occupants at {occ_gain:g} Btu/person/hr")
    return people
