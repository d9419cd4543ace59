"""
Water heaters: storage tanks, tankless heaters and heat pump water heaters.

Rated efficiencies (EF, or UEF converted to EF) are turned into the tank
standby loss coefficient (UA) and burner/element thermal efficiency that the
simulation's water heater objects take.

Usage:
    ua, eta_c = calc_tank_ua(vol=40, fuel="natural gas", ef=0.59, re=0.76, cap_kbtuh=40)
    apply_tank(model, "WaterHeater", space, fuel, cap_kbtuh=40, vol=40, ef=0.59, re=0.76, t_set=125)
"""

from dataclasses import dataclass, field
import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
import logging

import pandas as pd

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, ModelObject, Space
from ..schedules import ConstantSchedule

logger = logging.getLogger(__name__)

# Rating test conditions
TEST_DRAW_GAL_PER_DAY = 64.3
WATER_DENSITY = 8.2938  # lb/gal
WATER_CP = 1.0007  # Btu/lb-F
TEST_TANK_TEMP = 135.0  # F
TEST_INLET_TEMP = 58.0  # F
TEST_AMBIENT_TEMP = 67.5  # F
TANK_HEIGHT_IN = 48.0

ELECTRIC_RECOVERY_EFFICIENCY = 0.98
TANKLESS_CAPACITY_KBTUH = 100000.0
TANKLESS_CYCLING_DERATE = 0.08

# Off-cycle skin loss to the zone: atmospheric vs power-vented burners
SKIN_LOSS_FRAC_ATMOSPHERIC = 0.64
SKIN_LOSS_FRAC_POWER_VENT = 0.91

SETPOINT_MIN_F = 0.0
SETPOINT_MAX_F = 212.0
SETPOINT_WARN_LOW_F = 110.0
SETPOINT_WARN_HIGH_F = 140.0


# =============================================================================
# Defaults and rating conversions
# =============================================================================

def get_default_hot_water_temperature(eri_version: Optional[str] = None) -> float:
    return 125.0


def calc_ef_from_uef(uef: float, wh_type: str, fuel: str) -> float:
    """
    Energy factor from a uniform energy factor.

    Raises:
        ValueError: For an unknown water heater type
    """
    if wh_type == constants.WATER_HEATER_STORAGE:
        if fuel == constants.FUEL_ELECTRIC:
            return 2.4029 * uef - 1.2844
        return 0.9066 * uef + 0.0711
    if wh_type == constants.WATER_HEATER_TANKLESS:
        return uef
    if wh_type == constants.WATER_HEATER_HEAT_PUMP:
        return 1.2101 * uef - 0.6052
    raise ValueError(f"Unhandled water heater ({wh_type}).")


def get_ef_multiplier(wh_type: str) -> float:
    """Derate applied to tankless heaters for cycling losses."""
    if wh_type == constants.WATER_HEATER_TANKLESS:
        return 0.92
    return 1.0


def calc_actual_tankvol(vol: float, fuel: str, wh_type: str) -> float:
    """Actual water volume of a nominal tank size."""
    if wh_type == constants.WATER_HEATER_STORAGE:
        if fuel == constants.FUEL_ELECTRIC:
            return 0.9 * vol
        return 0.95 * vol
    if wh_type == constants.WATER_HEATER_HEAT_PUMP:
        return 0.9 * vol
    return vol


def get_default_tank_volume(nbeds: int, nbaths: Optional[float], fuel: str) -> float:
    """Nominal tank volume (gal) by bedrooms and bathrooms."""
    nbaths = nbaths or 2
    electric = fuel == constants.FUEL_ELECTRIC
    if nbeds <= 1:
        return 30.0 if electric else 20.0
    if nbeds == 2:
        return 40.0 if electric else 30.0
    if nbeds == 3:
        return 50.0 if electric else 40.0
    if nbeds == 4:
        if nbaths > 2.5:
            return 66.0 if electric else 50.0
        return 50.0 if electric else 40.0
    if nbeds == 5:
        return 66.0 if electric else 50.0
    return 80.0 if electric else 50.0


def get_default_capacity(nbeds: int, fuel: str) -> float:
    """Heating capacity (kBtu/hr)."""
    if fuel == constants.FUEL_ELECTRIC:
        return convert(4.5, "kW", "kBtu/hr")
    if nbeds <= 3:
        return 36.0
    if nbeds == 4:
        return 38.0
    return 48.0


def get_default_ef(vol: float, fuel: str, wh_type: str = constants.WATER_HEATER_STORAGE) -> float:
    if wh_type == constants.WATER_HEATER_TANKLESS:
        return 0.99 if fuel == constants.FUEL_ELECTRIC else 0.82
    if fuel == constants.FUEL_ELECTRIC:
        return 0.97 - 0.00132 * vol
    return 0.67 - 0.0019 * vol


def get_default_recovery_efficiency(fuel: str) -> float:
    if fuel == constants.FUEL_ELECTRIC:
        return ELECTRIC_RECOVERY_EFFICIENCY
    return 0.76


def get_location_hierarchy(iecc_zone: Optional[str]) -> List[str]:
    """Space types to try, in order, when the location is 'auto'."""
    warm = {"1A", "1B", "1C", "2A", "2B", "2C", "3A", "3B", "3C"}
    if iecc_zone in warm:
        return [constants.SPACE_TYPE_GARAGE, constants.SPACE_TYPE_LIVING,
                constants.SPACE_TYPE_FINISHED_BASEMENT, constants.SPACE_TYPE_UNFINISHED_BASEMENT]
    return [constants.SPACE_TYPE_FINISHED_BASEMENT, constants.SPACE_TYPE_UNFINISHED_BASEMENT,
            constants.SPACE_TYPE_LIVING, constants.SPACE_TYPE_GARAGE]


def get_space_from_location(model: Model, location: str, iecc_zone: Optional[str] = None) -> Optional[Space]:
    """Space for an explicit space type, or the first existing space of the hierarchy for 'auto'."""
    if location != constants.AUTO:
        return model.get_space(location)
    for space_type in get_location_hierarchy(iecc_zone):
        space = model.get_space(space_type)
        if space is not None:
            return space
    return None


# =============================================================================
# Tank physics
# =============================================================================

def tank_dimensions(vol_gal: float) -> Tuple[float, float, float]:
    """
    Returns:
        (height ft, diameter ft, surface area ft^2) of a 48 in tall cylinder
    """
    height = TANK_HEIGHT_IN / 12.0
    diameter = 24.0 * math.sqrt((vol_gal * 0.1337) / (4.0 * math.pi)) / 12.0
    area = math.pi * diameter * height + 2.0 * math.pi * diameter ** 2 / 4.0
    return height, diameter, area


def calc_tank_ua(vol: float, fuel: str, ef: float, re: float, cap_kbtuh: float,
                 wh_type: str = constants.WATER_HEATER_STORAGE) -> Tuple[float, float]:
    """
    Standby loss coefficient and thermal efficiency from the EF rating test.

    Args:
        vol: Nominal volume (gal)
        ef: Energy factor
        re: Recovery efficiency
        cap_kbtuh: Heating capacity (kBtu/hr)

    Returns:
        (UA in Btu/hr-F, thermal efficiency)

    Raises:
        MeasureError: If the inputs give a non-physical tank
    """
    if wh_type == constants.WATER_HEATER_TANKLESS:
        return 0.0, ef * (1.0 - TANKLESS_CYCLING_DERATE)
    volume_drawn = TEST_DRAW_GAL_PER_DAY
    q_load = volume_drawn * WATER_DENSITY * WATER_CP * (TEST_TANK_TEMP - TEST_INLET_TEMP)
    delta_t = TEST_TANK_TEMP - TEST_AMBIENT_TEMP
    if fuel != constants.FUEL_ELECTRIC:
        ua = (re / ef - 1.0) / (delta_t * (24.0 / q_load - 1.0 / (1000.0 * cap_kbtuh * ef)))
        eta_c = re + ua * delta_t / (1000.0 * cap_kbtuh)
    else:
        ua = q_load * (1.0 / ef - 1.0) / (delta_t * 24.0)
        eta_c = 1.0
    if eta_c > 1.0:
        raise MeasureError("A water heater heat source (either burner or element) efficiency of > 1 has been "
                           "calculated, double check water heater inputs.")
    if ua < 0.0:
        raise MeasureError("A negative water heater standby loss coefficient (UA) was calculated, double check "
                           "water heater inputs.")
    return ua, eta_c


def get_skin_loss_frac(fuel: str, oncycle_power: float) -> float:
    if fuel == constants.FUEL_ELECTRIC:
        return 1.0
    if oncycle_power > 0:
        return SKIN_LOSS_FRAC_POWER_VENT
    return SKIN_LOSS_FRAC_ATMOSPHERIC


def check_setpoint(t_set: float) -> Optional[str]:
    """
    Returns:
        A warning for unusual setpoints, else None

    Raises:
        ValueError: If the setpoint is outside 0-212 F
    """
    if t_set < SETPOINT_MIN_F or t_set > SETPOINT_MAX_F:
        raise ValueError("Water heater temperature setpoint must not be less than 0F or greater than 212F.")
    if t_set > SETPOINT_WARN_HIGH_F:
        return "Hot water setpoint schedule SetpointSchedule has values greater than 140F. " \
               "This temperature, if achieved, may cause scalding."
    if t_set < SETPOINT_WARN_LOW_F:
        return "Hot water setpoint schedule SetpointSchedule has values less than 110F. " \
               "This temperature, if achieved, may cause microbial growth."
    return None


def read_hourly_schedule(path: Union[str, Path], num_hours: int = 8760) -> List[float]:
    """
    Read a one-column hourly CSV (no header).

    Raises:
        ValueError: If the file is not one value per simulation hour
    """
    path = Path(path)
    if not path.exists():
        raise ValueError(f"'{path}' does not exist.")
    values = pd.read_csv(path, header=None).iloc[:, 0].astype(float).tolist()
    if len(values) not in (num_hours, 8760, 8784):
        raise ValueError("Hourly water heater schedule must be the length of the simulation period or a full year")
    return values


# =============================================================================
# Model objects
# =============================================================================

@dataclass
class WaterHeaterRecord:
    """What the model holds for one water heating system."""
    sys_id: str
    wh_type: str
    fuel: str
    loop: str
    heater: str
    setpoint_f: float
    volume_gal: float
    capacity_kbtuh: float
    ec_adj: float = 1.0
    objects: List[str] = field(default_factory=list)
    ua: float = 0.0  # Btu/hr-F
    thermal_efficiency: float = 1.0


def add_dhw_loop(model: Model, sys_id: str, t_set: float) -> Tuple[ModelObject, ConstantSchedule]:
    """Domestic hot water plant loop with its pump and setpoint schedule."""
    setpoint = ConstantSchedule(model.unique_name("Schedule:Constant", f"{sys_id} setpoint"),
                                round(convert(t_set, "F", "C"), 4), type_limits="Temperature")
    model.add(setpoint)
    loop = model.add(ModelObject("PlantLoop", model.unique_name("PlantLoop", f"{sys_id} dhw loop"), {
        "Fluid Type": "Water",
        "Plant Equipment Operation Scheme Name": None,
        "Loop Temperature Setpoint Node Name": f"{sys_id} supply outlet",
        "Maximum Loop Temperature": 60.0,
        "Minimum Loop Temperature": 10.0,
        "Maximum Loop Flow Rate": 0.01,
        "Loop Demand Side Design Temperature Difference": convert(10.0, "deltaF", "deltaC"),
    }))
    model.add(ModelObject("Pump:VariableSpeed", f"{loop.name} pump", {
        "Inlet Node Name": f"{sys_id} supply inlet",
        "Outlet Node Name": f"{sys_id} pump outlet",
        "Design Maximum Flow Rate": "autosize",
        "Design Pump Head": 0.0,
        "Design Power Consumption": 0.0,
        "Motor Efficiency": 1.0,
    }))
    return loop, setpoint


def _register(model: Model, record: WaterHeaterRecord) -> WaterHeaterRecord:
    model.properties.setdefault("water_heaters", {})[record.sys_id] = record
    logger.info(f"Added {record.wh_type} '{record.sys_id}' ({record.fuel}, {record.volume_gal:g} gal, "
                f"{record.capacity_kbtuh:.1f} kBtu/hr, setpoint {record.setpoint_f:g} F)")
    return record


def apply_tank(model: Model, sys_id: str, space: Space, fuel: str, cap_kbtuh: float, vol: float,
               ef: float, re: float, t_set: float, oncycle_power: float = 0.0, offcycle_power: float = 0.0,
               ec_adj: float = 1.0, tank_model_type: str = "mixed",
               setpoint_values: Optional[List[float]] = None) -> WaterHeaterRecord:
    """
    Storage water heater.

    Args:
        cap_kbtuh: Burner/element capacity (kBtu/hr)
        vol: Nominal volume (gal)
        oncycle_power, offcycle_power: Parasitic power (W)
        ec_adj: Distribution energy consumption adjustment
        tank_model_type: "mixed" or "stratified"
        setpoint_values: Optional hourly setpoints (F)
    """
    ua, eta_c = calc_tank_ua(vol, fuel, ef, re, cap_kbtuh)
    actual_vol = calc_actual_tankvol(vol, fuel, constants.WATER_HEATER_STORAGE)
    loop, setpoint = add_dhw_loop(model, sys_id, t_set)
    if setpoint_values is not None:
        setpoint = _add_hourly_setpoint(model, sys_id, setpoint_values)
    skin_loss = get_skin_loss_frac(fuel, oncycle_power)
    ua_w_k = convert(ua, "Btu/(hr*F)", "W/K")
    cap_w = convert(cap_kbtuh, "kBtu/hr", "W")
    name = model.unique_name("WaterHeater:Mixed", f"{sys_id} water heater")

    if tank_model_type == "stratified":
        _, _, area_ft2 = tank_dimensions(actual_vol)
        heater = model.add(ModelObject("WaterHeater:Stratified", name, {
            "End-Use Subcategory": "Domestic Hot Water",
            "Tank Volume": round(convert(actual_vol, "gal", "m^3"), 6),
            "Tank Height": round(convert(TANK_HEIGHT_IN, "in", "m"), 4),
            "Heater Priority Control": "MasterSlave",
            "Heater 1 Setpoint Temperature Schedule Name": setpoint.name,
            "Heater 1 Deadband Temperature Difference": 2.0,
            "Heater 1 Capacity": round(cap_w, 2),
            "Heater 2 Setpoint Temperature Schedule Name": setpoint.name,
            "Heater 2 Deadband Temperature Difference": 2.0,
            "Heater 2 Capacity": round(cap_w, 2),
            "Heater Fuel Type": constants.EPLUS_FUELS[fuel],
            "Heater Thermal Efficiency": round(eta_c, 4),
            "Off Cycle Parasitic Fuel Consumption Rate": offcycle_power,
            "On Cycle Parasitic Fuel Consumption Rate": oncycle_power,
            "Ambient Temperature Indicator": "Zone",
            "Ambient Temperature Zone Name": space.thermal_zone.name,
            "Uniform Skin Loss Coefficient per Unit Area to Ambient Temperature":
                round(ua_w_k / convert(area_ft2, "ft^2", "m^2"), 6),
            "Skin Loss Fraction to Zone": skin_loss,
            "Number of Nodes": 12,
        }))
    else:
        heater = model.add(ModelObject("WaterHeater:Mixed", name, {
            "Tank Volume": round(convert(actual_vol, "gal", "m^3"), 6),
            "Setpoint Temperature Schedule Name": setpoint.name,
            "Deadband Temperature Difference": 2.0,
            "Maximum Temperature Limit": 99.0,
            "Heater Control Type": "Cycle",
            "Heater Maximum Capacity": round(cap_w, 2),
            "Heater Minimum Capacity": 0.0,
            "Heater Fuel Type": constants.EPLUS_FUELS[fuel],
            "Heater Thermal Efficiency": round(eta_c / ec_adj, 4),
            "Off Cycle Parasitic Fuel Consumption Rate": offcycle_power,
            "Off Cycle Parasitic Fuel Type": "Electricity",
            "On Cycle Parasitic Fuel Consumption Rate": oncycle_power,
            "On Cycle Parasitic Fuel Type": "Electricity",
            "Ambient Temperature Indicator": "Zone",
            "Ambient Temperature Zone Name": space.thermal_zone.name,
            "Off Cycle Loss Coefficient to Ambient Temperature": round(ua_w_k, 4),
            "Off Cycle Loss Fraction to Zone": skin_loss,
            "On Cycle Loss Coefficient to Ambient Temperature": round(ua_w_k, 4),
            "On Cycle Loss Fraction to Zone": skin_loss,
        }))
    record = WaterHeaterRecord(sys_id, constants.WATER_HEATER_STORAGE, fuel, loop.name, heater.name, t_set,
                               vol, cap_kbtuh, ec_adj, [loop.name, heater.name])
    record.ua = ua
    record.thermal_efficiency = eta_c
    return _register(model, record)


def apply_tankless(model: Model, sys_id: str, space: Space, fuel: str, ef: float, t_set: float,
                   oncycle_power: float = 0.0, offcycle_power: float = 0.0, ec_adj: float = 1.0) -> WaterHeaterRecord:
    """Instantaneous water heater: a 1 gallon lossless mixed tank with unlimited capacity."""
    _, eta_c = calc_tank_ua(1.0, fuel, ef, 0.0, TANKLESS_CAPACITY_KBTUH, constants.WATER_HEATER_TANKLESS)
    loop, setpoint = add_dhw_loop(model, sys_id, t_set)
    name = model.unique_name("WaterHeater:Mixed", f"{sys_id} water heater")
    heater = model.add(ModelObject("WaterHeater:Mixed", name, {
        "Tank Volume": round(convert(1.0, "gal", "m^3"), 6),
        "Setpoint Temperature Schedule Name": setpoint.name,
        "Deadband Temperature Difference": 0.0,
        "Maximum Temperature Limit": 99.0,
        "Heater Control Type": "Modulate",
        "Heater Maximum Capacity": round(convert(TANKLESS_CAPACITY_KBTUH, "kBtu/hr", "W"), 2),
        "Heater Minimum Capacity": 0.0,
        "Heater Fuel Type": constants.EPLUS_FUELS[fuel],
        "Heater Thermal Efficiency": round(eta_c / ec_adj, 4),
        "Off Cycle Parasitic Fuel Consumption Rate": offcycle_power,
        "Off Cycle Parasitic Fuel Type": "Electricity",
        "On Cycle Parasitic Fuel Consumption Rate": oncycle_power,
        "On Cycle Parasitic Fuel Type": "Electricity",
        "Ambient Temperature Indicator": "Zone",
        "Ambient Temperature Zone Name": space.thermal_zone.name,
        "Off Cycle Loss Coefficient to Ambient Temperature": 0.0,
        "On Cycle Loss Coefficient to Ambient Temperature": 0.0,
    }))
    record = WaterHeaterRecord(sys_id, constants.WATER_HEATER_TANKLESS, fuel, loop.name, heater.name, t_set,
                               0.0, TANKLESS_CAPACITY_KBTUH, ec_adj, [loop.name, heater.name])
    record.thermal_efficiency = eta_c
    return _register(model, record)


@dataclass
class HeatPumpWaterHeaterParams:
    """Heat pump water heater inputs; defaults describe a typical 50 gal unit."""
    vol: float = 50.0  # gal
    e_cap: float = 4.5  # kW, backup elements
    min_temp: float = 45.0  # F, compressor lockout
    max_temp: float = 120.0  # F
    cap: float = 0.5  # kW input
    cop: float = 2.8
    shr: float = 0.88
    airflow_rate: float = 181.0  # cfm
    fan_power: float = 0.0462  # W/cfm
    parasitics: float = 3.0  # W
    tank_ua: float = 3.9  # Btu/hr-F
    int_factor: float = 1.0
    temp_depress: float = 0.0  # F
    operating_mode: str = constants.WATER_HEATER_MODE_STANDARD

    def validate(self) -> None:
        checks = [
            (self.vol > 0, "Storage tank volume must be greater than 0."),
            (self.e_cap >= 0, "Element capacity must be greater than or equal to 0."),
            (self.min_temp < self.max_temp, "Minimum temperature must be less than the maximum temperature."),
            (self.cap > 0, "Rated capacity must be greater than 0."),
            (self.cop > 0, "Rated COP must be greater than 0."),
            (0 < self.shr <= 1, "Rated sensible heat ratio must be greater than 0 and less than or equal to 1."),
            (self.airflow_rate > 0, "Airflow rate must be greater than 0."),
            (self.fan_power >= 0, "Fan power must be greater than or equal to 0."),
            (self.parasitics >= 0, "Parasitics must be greater than or equal to 0."),
            (self.tank_ua > 0, "Tank UA must be greater than 0."),
            (0 <= self.int_factor <= 1, "Interaction factor must be between 0 and 1."),
            (self.temp_depress >= 0, "Temperature depression must be greater than or equal to 0."),
        ]
        for ok, message in checks:
            if not ok:
                raise ValueError(message)


def apply_heatpump(model: Model, sys_id: str, space: Space, params: HeatPumpWaterHeaterParams, t_set: float,
                   ec_adj: float = 1.0, setpoint_values: Optional[List[float]] = None,
                   operating_mode_values: Optional[List[float]] = None) -> WaterHeaterRecord:
    """
    Heat pump water heater: wrapped-condenser heat pump on a stratified tank
    with backup resistance elements.

    Raises:
        ValueError: On invalid parameters or when mains temperatures are missing
    """
    from .mains import get_mains_temperatures

    params.validate()
    get_mains_temperatures(model)

    actual_vol = calc_actual_tankvol(params.vol, constants.FUEL_ELECTRIC, constants.WATER_HEATER_HEAT_PUMP)
    _, _, area_ft2 = tank_dimensions(actual_vol)
    loop, setpoint = add_dhw_loop(model, sys_id, t_set)
    if setpoint_values is not None:
        setpoint = _add_hourly_setpoint(model, sys_id, setpoint_values)

    e_cap = 0.0 if params.operating_mode == constants.WATER_HEATER_MODE_HP_ONLY else params.e_cap
    tank_name = model.unique_name("WaterHeater:Stratified", f"{sys_id} hpwh tank")
    tank = model.add(ModelObject("WaterHeater:Stratified", tank_name, {
        "End-Use Subcategory": "Domestic Hot Water",
        "Tank Volume": round(convert(actual_vol, "gal", "m^3"), 6),
        "Tank Height": round(convert(TANK_HEIGHT_IN, "in", "m"), 4),
        "Heater Priority Control": "MasterSlave",
        "Heater 1 Setpoint Temperature Schedule Name": setpoint.name,
        "Heater 1 Deadband Temperature Difference": 18.5 / 1.8,
        "Heater 1 Capacity": round(e_cap * 1000.0, 2),
        "Heater 2 Setpoint Temperature Schedule Name": setpoint.name,
        "Heater 2 Deadband Temperature Difference": 3.89,
        "Heater 2 Capacity": round(e_cap * 1000.0, 2),
        "Heater Fuel Type": "Electricity",
        "Heater Thermal Efficiency": round(1.0 / ec_adj, 4),
        "Off Cycle Parasitic Fuel Consumption Rate": params.parasitics,
        "On Cycle Parasitic Fuel Consumption Rate": params.parasitics,
        "Ambient Temperature Indicator": "Zone",
        "Ambient Temperature Zone Name": space.thermal_zone.name,
        "Uniform Skin Loss Coefficient per Unit Area to Ambient Temperature":
            round(convert(params.tank_ua, "Btu/(hr*F)", "W/K") / convert(area_ft2, "ft^2", "m^2"), 6),
        "Skin Loss Fraction to Zone": 1.0,
        "Number of Nodes": 12,
    }))
    coil = model.add(ModelObject("Coil:WaterHeating:AirToWaterHeatPump:Wrapped", f"{sys_id} hpwh coil", {
        "Rated Heating Capacity": round(params.cap * params.cop * 1000.0, 2),
        "Rated COP": params.cop,
        "Rated Sensible Heat Ratio": params.shr,
        "Rated Evaporator Inlet Air Dry-Bulb Temperature": 19.72,
        "Rated Evaporator Inlet Air Wet-Bulb Temperature": 13.5,
        "Rated Condenser Water Temperature": 48.89,
        "Rated Evaporator Air Flow Rate": round(convert(params.airflow_rate, "cfm", "m^3/s"), 6),
        "Evaporator Fan Power Included in Rated COP": True,
        "Crankcase Heater Capacity": 0.0,
    }))
    fan = model.add(ModelObject("Fan:OnOff", f"{sys_id} hpwh fan", {
        "Availability Schedule Name": None,
        "Fan Total Efficiency": 0.172,
        "Pressure Rise": round(params.fan_power * 0.172 * 1000.0 / 0.47194745, 4),
        "Maximum Flow Rate": round(convert(params.airflow_rate, "cfm", "m^3/s"), 6),
        "Motor Efficiency": 1.0,
        "Motor In Airstream Fraction": 1.0,
    }))
    mode_name = None
    if operating_mode_values is not None:
        mode_name = _add_hourly_setpoint(model, f"{sys_id} operating mode", operating_mode_values, convert_f=False).name
    hp = model.add(ModelObject("WaterHeater:HeatPump:WrappedCondenser", f"{sys_id} hpwh", {
        "Availability Schedule Name": mode_name,
        "Compressor Setpoint Temperature Schedule Name": setpoint.name,
        "Dead Band Temperature Difference": 3.89,
        "Tank Name": tank.name,
        "DX Coil Name": coil.name,
        "Minimum Inlet Air Temperature for Compressor Operation": round(convert(params.min_temp, "F", "C"), 4),
        "Maximum Inlet Air Temperature for Compressor Operation": round(convert(params.max_temp, "F", "C"), 4),
        "Compressor Location": "Zone",
        "Fan Name": fan.name,
        "Tank Element Control Logic": "MutuallyExclusive",
        "Interaction Factor": params.int_factor,
        "Temperature Depression": params.temp_depress,
    }))
    record = WaterHeaterRecord(sys_id, constants.WATER_HEATER_HEAT_PUMP, constants.FUEL_ELECTRIC, loop.name,
                               tank.name, t_set, params.vol, convert(params.cap * params.cop, "kW", "kBtu/hr"),
                               ec_adj, [loop.name, tank.name, coil.name, fan.name, hp.name])
    return _register(model, record)


def _add_hourly_setpoint(model: Model, base: str, values: List[float], convert_f: bool = True) -> ModelObject:
    name = model.unique_name("Schedule:File:Values", f"{base} schedule")
    data = [round(convert(v, "F", "C"), 3) if convert_f else v for v in values]
    return model.add(ModelObject("Schedule:File:Values", name, {
        "Schedule Type Limits Name": "Temperature" if convert_f else "Any Number",
        "Number of Hours": len(data),
        "Values": " ".join(f"{v:g}" for v in data),
    }))


def get_water_heater_setpoint(model: Model, sys_id: str) -> float:
    record = model.properties.get("water_heaters", {}).get(sys_id)
    if record is None:
        raise MeasureError(f"No water heater found for '{sys_id}'.")
    return record.setpoint_f


def remove_water_heaters(model: Model) -> int:
    """Remove every water heater and its loop. Returns the number of systems removed."""
    records: Dict[str, Any] = model.properties.get("water_heaters", {})
    removed = 0
    for record in list(records.values()):
        for obj in list(model):
            if obj.name in record.objects or obj.name.startswith(f"{record.sys_id} "):
                model.remove(obj)
        removed += 1
    records.clear()
    return removed
