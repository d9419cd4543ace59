"""
Thermostat setpoint schedules.

Manual thermostats hold one temperature all year; programmable thermostats
add a nightly heating setback and a daytime cooling setup. Months warm enough
for ceiling fan use get a raised cooling setpoint.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import HourlyByMonthSchedule

logger = logging.getLogger(__name__)

PROGRAMMABLE = "programmable thermostat"
MANUAL = "manual thermostat"

DEFAULT_HEATING_SETPOINT = 68.0
DEFAULT_HEATING_SETBACK = 66.0
DEFAULT_HEATING_SETBACK_HRS_PER_WEEK = 7 * 7.0
DEFAULT_HEATING_SETBACK_START_HR = 23
DEFAULT_COOLING_SETPOINT = 78.0
DEFAULT_COOLING_SETUP = 80.0
DEFAULT_COOLING_SETUP_HRS_PER_WEEK = 6 * 7.0
DEFAULT_COOLING_SETUP_START_HR = 9
CEILING_FAN_OFFSET = 0.5
CEILING_FAN_MONTH_TEMP_F = 63.0


@dataclass
class SetpointInputs:
    """Thermostat inputs, temperatures in F."""
    control_type: str = MANUAL
    heating_setpoint: float = DEFAULT_HEATING_SETPOINT
    cooling_setpoint: float = DEFAULT_COOLING_SETPOINT
    heating_setback: Optional[float] = None
    heating_setback_hrs_per_week: float = 0.0
    heating_setback_start_hr: int = DEFAULT_HEATING_SETBACK_START_HR
    cooling_setup: Optional[float] = None
    cooling_setup_hrs_per_week: float = 0.0
    cooling_setup_start_hr: int = DEFAULT_COOLING_SETUP_START_HR
    ceiling_fan_offset: float = 0.0

    @classmethod
    def from_hpxml(cls, hpxml) -> "SetpointInputs":
        """Setpoints from the HVAC control, with reference defaults where it gives none."""
        ctrl = hpxml.hvac_control
        control_type = ctrl.control_type if ctrl is not None else MANUAL
        inputs = cls(control_type=control_type)
        if ctrl is not None and ctrl.setpoint_temp_heating_season is not None:
            inputs.heating_setpoint = ctrl.setpoint_temp_heating_season
        elif control_type == PROGRAMMABLE:
            inputs.heating_setback = DEFAULT_HEATING_SETBACK
            inputs.heating_setback_hrs_per_week = DEFAULT_HEATING_SETBACK_HRS_PER_WEEK
        if ctrl is not None and ctrl.setpoint_temp_cooling_season is not None:
            inputs.cooling_setpoint = ctrl.setpoint_temp_cooling_season
        elif control_type == PROGRAMMABLE:
            inputs.cooling_setup = DEFAULT_COOLING_SETUP
            inputs.cooling_setup_hrs_per_week = DEFAULT_COOLING_SETUP_HRS_PER_WEEK
        if hpxml.ceiling_fan is not None:
            offset = ctrl.ceiling_fan_cooling_setpoint_temp_offset if ctrl is not None else None
            inputs.ceiling_fan_offset = CEILING_FAN_OFFSET if offset is None else offset
        return inputs


def offset_hours(start_hr: int, hrs_per_week: float) -> List[int]:
    """Hours of the day (wrapping past midnight) covered by a daily setback/setup period."""
    return [h % 24 for h in range(start_hr, start_hr + int(hrs_per_week / 7.0))]


def daily_values(setpoint: float, offset_temp: Optional[float], hours: Sequence[int]) -> List[float]:
    values = [setpoint] * 24
    if offset_temp is not None:
        for h in hours:
            values[h] = offset_temp
    return values


def calc_setpoint_arrays(inputs: SetpointInputs,
                         monthly_temps: Sequence[float]) -> Tuple[List[List[float]], List[List[float]]]:
    """
    12 x 24 heating and cooling setpoints (F).

    Where heating exceeds cooling in an hour, both are set to their average.
    """
    htg_day = daily_values(inputs.heating_setpoint, inputs.heating_setback,
                           offset_hours(inputs.heating_setback_start_hr, inputs.heating_setback_hrs_per_week))
    clg_day = daily_values(inputs.cooling_setpoint, inputs.cooling_setup,
                           offset_hours(inputs.cooling_setup_start_hr, inputs.cooling_setup_hrs_per_week))
    heating, cooling = [], []
    for month in range(12):
        clg = list(clg_day)
        if inputs.ceiling_fan_offset and monthly_temps[month] > CEILING_FAN_MONTH_TEMP_F:
            clg = [v + inputs.ceiling_fan_offset for v in clg]
        htg = list(htg_day)
        for h in range(24):
            if htg[h] > clg[h]:
                avg = (htg[h] + clg[h]) / 2.0
                htg[h] = clg[h] = avg
        heating.append(htg)
        cooling.append(clg)
    return heating, cooling


def apply_setpoints(model: Model, inputs: SetpointInputs, monthly_temps: Sequence[float]) -> ModelObject:
    """
    Add heating/cooling setpoint schedules and the living zone dual-setpoint thermostat.

    Returns:
        The ZoneControl:Thermostat object
    """
    heating, cooling = calc_setpoint_arrays(inputs, monthly_temps)
    to_c = lambda rows: [[round(convert(v, "F", "C"), 4) for v in row] for row in rows]
    htg_sch = HourlyByMonthSchedule("res heating setpoint", to_c(heating)).add_to(model)
    clg_sch = HourlyByMonthSchedule("res cooling setpoint", to_c(cooling)).add_to(model)
    model.properties["heating_setpoints"] = heating
    model.properties["cooling_setpoints"] = cooling

    zone = model.create_or_get_space(constants.SPACE_TYPE_LIVING).thermal_zone.name
    dual = model.add(ModelObject("ThermostatSetpoint:DualSetpoint", "living zone temperature setpoint", {
        "Heating Setpoint Temperature Schedule Name": htg_sch.name,
        "Cooling Setpoint Temperature Schedule Name": clg_sch.name,
    }))
    model.add(ModelObject("Schedule:Constant", "living zone thermostat control type", {
        "Schedule Type Limits Name": None,
        "Hourly Value": 4,
    }))
    thermostat = model.add(ModelObject("ZoneControl:Thermostat", "living zone thermostat", {
        "Zone or ZoneList Name": zone,
        "Control Type Schedule Name": "living zone thermostat control type",
        "Control 1 Object Type": dual.obj_type,
        "Control 1 Name": dual.name,
    }))
    logger.info(f"Thermostat ({inputs.control_type}): heating {inputs.heating_setpoint} F, "
                f"cooling {inputs.cooling_setpoint} F")
    return thermostat
