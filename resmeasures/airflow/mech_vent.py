"""
Whole-house mechanical ventilation: supply, exhaust, balanced (with
optional heat or energy recovery) and central fan integrated supply (CFIS).
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import ConstantSchedule

logger = logging.getLogger(__name__)

VENT_TYPE_NONE = "none"
VENT_TYPE_SUPPLY = "supply"
VENT_TYPE_EXHAUST = "exhaust"
VENT_TYPE_BALANCED = "balanced"
VENT_TYPE_CFIS = "central fan integrated supply"

FAN_TYPE_MAP = {
    "supply only": (VENT_TYPE_SUPPLY, 1),
    "exhaust only": (VENT_TYPE_EXHAUST, 1),
    "central fan integrated supply": (VENT_TYPE_CFIS, 1),
    "balanced": (VENT_TYPE_BALANCED, 2),
    "energy recovery ventilator": (VENT_TYPE_BALANCED, 2),
    "heat recovery ventilator": (VENT_TYPE_BALANCED, 2),
}

CFIS_OPEN_TIME_MIN = 20.0
CFIS_AIRFLOW_FRAC = 1.0


def calc_ashrae_622_whole_house_cfm(cfa: float, nbeds: int) -> float:
    """ASHRAE 62.2-2013 total required ventilation rate (cfm)."""
    return 0.03 * cfa + 7.5 * (nbeds + 1)


@dataclass
class MechanicalVentilation:
    vent_type: str = VENT_TYPE_NONE
    infil_credit: bool = True
    total_efficiency: float = 0.0
    cfm: float = 0.0
    fan_power: float = 0.0  # W/cfm per fan
    sensible_efficiency: float = 0.0
    ashrae_std: str = "2013"
    hours_in_operation: float = 24.0
    cfis_open_time: float = CFIS_OPEN_TIME_MIN
    cfis_airflow_frac: float = CFIS_AIRFLOW_FRAC
    distribution_system_idref: Optional[str] = None

    @classmethod
    def from_hpxml(cls, hpxml) -> "MechanicalVentilation":
        fan = hpxml.whole_house_fan
        if fan is None:
            return cls()
        if fan.fan_type not in FAN_TYPE_MAP:
            raise MeasureError(f"Unexpected mechanical ventilation type: {fan.fan_type}.")
        vent_type, num_fans = FAN_TYPE_MAP[fan.fan_type]
        sensible = total = 0.0
        if fan.fan_type in ("energy recovery ventilator", "heat recovery ventilator"):
            sensible = fan.sensible_recovery_efficiency or 0.0
        if fan.fan_type == "energy recovery ventilator":
            total = fan.total_recovery_efficiency or 0.0
        fan_power = fan.fan_power / fan.rated_flow_rate / num_fans if fan.rated_flow_rate else 0.0
        return cls(
            vent_type=vent_type,
            total_efficiency=total,
            cfm=fan.rated_flow_rate,
            fan_power=fan_power,
            sensible_efficiency=sensible,
            hours_in_operation=fan.hours_in_operation or 24.0,
            distribution_system_idref=fan.distribution_system_idref,
        )

    @property
    def num_fans(self) -> int:
        return 2 if self.vent_type == VENT_TYPE_BALANCED else 1

    @property
    def average_cfm(self) -> float:
        return self.cfm * self.hours_in_operation / 24.0

    @property
    def fan_w(self) -> float:
        return self.fan_power * self.cfm * self.num_fans


def _fan_pressure(w_per_cfm: float, efficiency: float = 1.0) -> float:
    return round(w_per_cfm * efficiency / convert(1.0, "cfm", "m^3/s"), 2)


def _add_zone_ventilation(model: Model, zone_space: str, name: str, vent_type: str, cfm: float,
                          w_per_cfm: float, schedule: str) -> ModelObject:
    return model.add(ModelObject("ZoneVentilation:DesignFlowRate", name, {
        "Zone or ZoneList or Space or SpaceList Name": zone_space,
        "Schedule Name": schedule,
        "Design Flow Rate Calculation Method": "Flow/Zone",
        "Design Flow Rate": round(convert(cfm, "cfm", "m^3/s"), 6),
        "Ventilation Type": vent_type,
        "Fan Pressure Rise": _fan_pressure(w_per_cfm),
        "Fan Total Efficiency": 1.0,
        "Constant Term Coefficient": 1.0,
        "Temperature Term Coefficient": 0.0,
        "Velocity Term Coefficient": 0.0,
        "Velocity Squared Term Coefficient": 0.0,
    }))


def apply_mechanical_ventilation(model: Model, mech_vent: MechanicalVentilation,
                                 air_loops: Optional[List[str]] = None) -> List[ModelObject]:
    """
    Add ventilation objects to the living space.

    Args:
        air_loops: Air loops whose fans deliver CFIS outdoor air

    Returns:
        The created objects
    """
    if mech_vent.vent_type == VENT_TYPE_NONE or mech_vent.cfm <= 0:
        model.properties["mech_vent_cfm"] = 0.0
        return []
    space = model.create_or_get_space(constants.SPACE_TYPE_LIVING)
    frac = min(mech_vent.hours_in_operation / 24.0, 1.0)
    sch = ConstantSchedule("mech vent operation", frac).add_to(model)
    created = []

    if mech_vent.vent_type == VENT_TYPE_SUPPLY:
        created.append(_add_zone_ventilation(model, space.name, "mech vent supply", "Intake", mech_vent.cfm,
                                             mech_vent.fan_power, sch.name))
    elif mech_vent.vent_type == VENT_TYPE_EXHAUST:
        created.append(_add_zone_ventilation(model, space.name, "mech vent exhaust", "Exhaust", mech_vent.cfm,
                                             mech_vent.fan_power, sch.name))
    elif mech_vent.vent_type == VENT_TYPE_BALANCED:
        if mech_vent.sensible_efficiency > 0 or mech_vent.total_efficiency > 0:
            latent = max(mech_vent.total_efficiency - mech_vent.sensible_efficiency, 0.0)
            flow = round(convert(mech_vent.cfm, "cfm", "m^3/s"), 6)
            hx = model.add(ModelObject("HeatExchanger:AirToAir:SensibleAndLatent", "mech vent heat exchanger", {
                "Availability Schedule Name": sch.name,
                "Nominal Supply Air Flow Rate": flow,
                "Sensible Effectiveness at 100% Heating Air Flow": mech_vent.sensible_efficiency,
                "Latent Effectiveness at 100% Heating Air Flow": latent,
                "Sensible Effectiveness at 100% Cooling Air Flow": mech_vent.sensible_efficiency,
                "Latent Effectiveness at 100% Cooling Air Flow": latent,
                "Nominal Electric Power": 0.0,
                "Heat Exchanger Type": "Rotary",
            }))
            erv = model.add(ModelObject("ZoneHVAC:EnergyRecoveryVentilator", "mech vent erv", {
                "Availability Schedule Name": sch.name,
                "Heat Exchanger Name": hx.name,
                "Supply Air Flow Rate": flow,
                "Exhaust Air Flow Rate": flow,
                "Supply Air Fan Name": "mech vent supply fan",
                "Exhaust Air Fan Name": "mech vent exhaust fan",
            }))
            for label in ("supply", "exhaust"):
                created.append(model.add(ModelObject("Fan:OnOff", f"mech vent {label} fan", {
                    "Availability Schedule Name": sch.name,
                    "Fan Total Efficiency": 1.0,
                    "Pressure Rise": _fan_pressure(mech_vent.fan_power),
                    "Maximum Flow Rate": flow,
                    "Motor Efficiency": 1.0,
                    "Motor In Airstream Fraction": 1.0,
                    "End-Use Subcategory": "mech vent fan",
                })))
            created += [hx, erv]
        else:
            created.append(_add_zone_ventilation(model, space.name, "mech vent balanced", "Balanced",
                                                 mech_vent.cfm, mech_vent.fan_power * 2, sch.name))
    elif mech_vent.vent_type == VENT_TYPE_CFIS:
        if not air_loops:
            raise MeasureError("A CFIS system must be attached to an air distribution system with an air loop.")
        open_frac = mech_vent.cfis_open_time / 60.0
        cfis_sch = ConstantSchedule("cfis damper open fraction", open_frac).add_to(model)
        for loop in air_loops:
            created.append(model.add(ModelObject("Controller:OutdoorAir", f"{loop} cfis outdoor air controller", {
                "Minimum Outdoor Air Flow Rate": round(convert(mech_vent.cfm / open_frac, "cfm", "m^3/s"), 6),
                "Maximum Outdoor Air Flow Rate": round(convert(mech_vent.cfm / open_frac, "cfm", "m^3/s"), 6),
                "Economizer Control Type": "NoEconomizer",
                "Minimum Outdoor Air Schedule Name": cfis_sch.name,
                "Minimum Fraction of Outdoor Air Schedule Name": cfis_sch.name,
            })))
    model.properties["mech_vent_cfm"] = mech_vent.average_cfm
    model.properties["mech_vent"] = mech_vent
    logger.info(f"Mechanical ventilation ({mech_vent.vent_type}): {mech_vent.cfm:.1f} cfm, "
                f"{mech_vent.fan_w:.1f} W")
    return created
