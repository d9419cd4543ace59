"""Ceiling fan energy and schedule."""

from typing import Optional, Sequence
import logging

from ..core import constants
from ..loads import add_equipment
from ..model import Model, ModelObject
from ..schedules import MonthWeekdayWeekendSchedule
from .setpoints import CEILING_FAN_MONTH_TEMP_F

logger = logging.getLogger(__name__)

MEDIUM_CFM = 3000.0
DEFAULT_POWER_W = 42.6
FAN_WEEKDAY_SCH = [0.0] * 9 + [0.5] + [1.0] * 10 + [0.0] * 4


def hours_per_day() -> float:
    return sum(FAN_WEEKDAY_SCH)


def get_default_efficiency() -> float:
    """cfm/W at medium speed."""
    return MEDIUM_CFM / DEFAULT_POWER_W


def get_default_quantity(nbeds: int) -> int:
    return nbeds + 1


def calc_ceiling_fan_annual_kwh(quantity: int, cfm_per_w: float) -> float:
    return quantity * MEDIUM_CFM / cfm_per_w * hours_per_day() * 365.0 / 1000.0


def apply_ceiling_fans(model: Model, nbeds: int, monthly_temps: Sequence[float], efficiency: Optional[float] = None,
                       quantity: Optional[int] = None) -> Optional[ModelObject]:
    """
    Add ceiling fans to the living space; they run only in months warmer than 63 F.

    Returns:
        The equipment object, or None when no month is warm enough
    """
    cfm_per_w = efficiency or get_default_efficiency()
    quantity = get_default_quantity(nbeds) if quantity is None else quantity
    annual_kwh = calc_ceiling_fan_annual_kwh(quantity, cfm_per_w)
    monthly = [1.0 if t > CEILING_FAN_MONTH_TEMP_F else 0.0 for t in monthly_temps]
    if not any(monthly):
        logger.info("No months warm enough for ceiling fan operation")
        return None

    sch = MonthWeekdayWeekendSchedule("ceiling fan", FAN_WEEKDAY_SCH, FAN_WEEKDAY_SCH, monthly,
                                      normalize_values=False)
    # Energy is only spent in operating months
    design_level = annual_kwh * 1000.0 / (hours_per_day() * 365.0)
    compact = sch.add_to(model)
    space = model.create_or_get_space(constants.SPACE_TYPE_LIVING)
    model.properties["ceiling_fan_kwh"] = design_level * sch.annual_equivalent_full_load_hrs() / 1000.0
    return add_equipment(model, "ceiling fan", space, design_level, compact.name, end_use="ceiling fan")
