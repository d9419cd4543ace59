"""
Miscellaneous plug loads measure.
"""

from typing import Any, Dict, List
import logging

from ..core import constants
from ..envelope.geometry import get_finished_floor_area
from ..loads.misc_loads import (
    MISC_MONTHLY_SCH,
    MISC_WEEKDAY_SCH,
    MISC_WEEKEND_SCH,
    apply_plug,
    calc_plug_loads_annual_kwh,
)
from ..measure import Measure, MeasureArgument, MeasureRunner
from ..model import Model
from ..schedules import MonthWeekdayWeekendSchedule

logger = logging.getLogger(__name__)

END_USE = "misc plug loads"
SCHEDULE_NAME = f"{END_USE} schedule"


def remove_plug_loads(model: Model) -> int:
    """Remove plug load equipment and schedules added by an earlier run."""
    removed = 0
    for obj in list(model.objects_of("ElectricEquipment")):
        if obj.get("End-Use Subcategory") == END_USE:
            model.remove(obj)
            removed += 1
    for obj in list(model.objects_of("Schedule:Compact")):
        if obj.name.startswith(SCHEDULE_NAME):
            model.remove(obj)
    return removed


class MiscPlugLoads(Measure):
    """Plug loads sized from bedrooms and floor area, or from a given annual energy use."""

    name = "Set Residential Plug Loads"
    description = ("Adds (or replaces) miscellaneous plug loads in the finished spaces, split by floor area. "
                   "Energy use is either a multiplier on the Building America benchmark or a fixed annual "
                   "value.")

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("option_type", "choice", default=constants.OPTION_TYPE_PLUG_LOADS_MULTIPLIER,
                            choices=(constants.OPTION_TYPE_PLUG_LOADS_MULTIPLIER,
                                     constants.OPTION_TYPE_PLUG_LOADS_ENERGY_USE),
                            display_name="Option Type",
                            description="Inputs used are based on the option type."),
            MeasureArgument("energy_use", "double", default=2000.0, units="kWh/yr",
                            display_name="Annual Energy Use",
                            description=f"Annual electricity use. Only used if the option type is "
                                        f"'{constants.OPTION_TYPE_PLUG_LOADS_ENERGY_USE}'."),
            MeasureArgument("energy_mult", "double", default=1.0,
                            display_name="Building America Benchmark Multiplier",
                            description=f"Multiplier on the benchmark annual energy use. Only used if the "
                                        f"option type is '{constants.OPTION_TYPE_PLUG_LOADS_MULTIPLIER}'."),
            MeasureArgument("diversity_mult", "double", default=1.0, display_name="Diversity Multiplier",
                            description="Applied to the annual energy use for either option type."),
            MeasureArgument("weekday_sch", "string", default=MISC_WEEKDAY_SCH, display_name="Weekday schedule",
                            description="24 comma-separated hourly weekday values."),
            MeasureArgument("weekend_sch", "string", default=MISC_WEEKEND_SCH, display_name="Weekend schedule",
                            description="24 comma-separated hourly weekend values."),
            MeasureArgument("monthly_sch", "string", default=MISC_MONTHLY_SCH, display_name="Month schedule",
                            description="12 comma-separated monthly multipliers."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        if args["option_type"] == constants.OPTION_TYPE_PLUG_LOADS_ENERGY_USE:
            annual_kwh = args["energy_use"]
        else:
            if args["energy_mult"] < 0:
                return runner.register_error("Annual energy use must be greater than or equal to 0.")
            nbeds = model.properties.get("num_bedrooms", 3)
            annual_kwh = calc_plug_loads_annual_kwh(nbeds, get_finished_floor_area(model), args["energy_mult"])
        annual_kwh *= args["diversity_mult"]
        if annual_kwh < 0:
            return runner.register_error("Annual energy use must be greater than or equal to 0.")

        # Existing loads stay in place unless the new schedule is valid
        try:
            schedule = MonthWeekdayWeekendSchedule(SCHEDULE_NAME, args["weekday_sch"], args["weekend_sch"],
                                                   args["monthly_sch"])
        except ValueError as e:
            return runner.register_error(str(e))

        removed = remove_plug_loads(model)
        if removed:
            runner.register_info(f"Removed {removed} existing plug load object(s).")

        schedule.add_to(model)
        try:
            apply_plug(model, annual_kwh, 0.93, 0.021, schedule=schedule)
        except ValueError as e:
            return runner.register_error(str(e))

        runner.register_value("annual_kwh", round(annual_kwh))
        if annual_kwh > 0:
            runner.register_final_condition(f"Plug loads with {annual_kwh:.0f} kWhs annual energy consumption "
                                            f"have been assigned.")
        else:
            runner.register_final_condition("No plug loads have been assigned.")
        return True
