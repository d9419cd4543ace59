"""
HVAC system builders.

Each apply_* function adds one system's objects to the model (air loop,
unitary system, fan, coils, curves or zone equipment) and registers an
HVACSystemRecord. Capacities given as None are written as 'autosize' and
filled in later by sizing.
"""

from typing import Optional
import logging

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, ModelObject
from . import curves as crv
from .equipment import (
    AIR_FLOW_CFM_PER_TON, ASHP, BOILER, CENTRAL_AC, CRANKCASE_TEMP_F, ELECTRIC_RESISTANCE, FURNACE,
    GSHP, IDEAL_AIR, MSHP, ROOM_AC, STOVE, WALL_FURNACE,
    DXParams, GSHPParams, HVACSystemRecord, MiniSplitParams,
    calc_cop_from_eer, calc_cop_heating_wo_fan, get_ashp_params, get_central_ac_params, register_system,
)

logger = logging.getLogger(__name__)

FAN_EFFICIENCY = 0.75
FAN_PA_PER_W_PER_CFM = 1.0 / convert(1.0, "cfm", "m^3/s")
FURNACE_MAX_SUPPLY_TEMP_F = 120.0
HP_MAX_SUPPLY_TEMP_F = 170.0
ROOM_AC_SHR = 0.65
ROOM_AC_AIRFLOW = 350.0  # cfm/ton
STOVE_AIRFLOW = 125.0  # cfm/ton
FURNACE_FAN_POWER = 0.5  # W/cfm
BOILER_DESIGN_TEMP_F = 180.0


def living_zone_name(model: Model) -> str:
    return model.create_or_get_space(constants.SPACE_TYPE_LIVING).thermal_zone.name


def _eplus_fuel(fuel: str) -> str:
    try:
        return constants.EPLUS_FUELS[fuel]
    except KeyError:
        raise MeasureError(f"Unexpected fuel type '{fuel}'.")


def _fan_pressure_rise(w_per_cfm: float) -> float:
    """Fan pressure rise (Pa) that yields the given W/cfm at the fan efficiency."""
    return round(w_per_cfm * FAN_EFFICIENCY * FAN_PA_PER_W_PER_CFM, 2)


# =============================================================================
# Air loop plumbing
# =============================================================================

def _add_fan(model: Model, rec: HVACSystemRecord, name: str, w_per_cfm: float, kind: str) -> ModelObject:
    fan = rec.add(model, ModelObject("Fan:OnOff", name, {
        "Availability Schedule Name": "Always On Discrete",
        "Fan Total Efficiency": FAN_EFFICIENCY if w_per_cfm > 0 else 1.0,
        "Pressure Rise": _fan_pressure_rise(w_per_cfm),
        "Motor Efficiency": 1.0,
        "Motor In Airstream Fraction": 1.0,
        "End-Use Subcategory": f"{rec.sys_id} supply fan",
    }))
    rec.track_capacity(fan, "Maximum Flow Rate", kind, units="cfm")
    rec.fans.append(fan.name)
    return fan


def _add_unitary(model: Model, rec: HVACSystemRecord, name: str, fan: ModelObject,
                 cooling_coil: Optional[ModelObject] = None, heating_coil: Optional[ModelObject] = None,
                 supp_coil: Optional[ModelObject] = None, max_supply_temp_f: float = HP_MAX_SUPPLY_TEMP_F,
                 ducted: bool = True) -> ModelObject:
    zone = living_zone_name(model)
    unitary = rec.add(model, ModelObject("AirLoopHVAC:UnitarySystem", name, {
        "Control Type": "Load",
        "Controlling Zone or Thermostat Location": zone,
        "Supply Fan Object Type": fan.obj_type,
        "Supply Fan Name": fan.name,
        "Fan Placement": "BlowThrough",
        "Supply Air Fan Operating Mode Schedule Name": "Always Off Discrete",
        "Heating Coil Object Type": heating_coil.obj_type if heating_coil is not None else None,
        "Heating Coil Name": heating_coil.name if heating_coil is not None else None,
        "Cooling Coil Object Type": cooling_coil.obj_type if cooling_coil is not None else None,
        "Cooling Coil Name": cooling_coil.name if cooling_coil is not None else None,
        "Supplemental Heating Coil Object Type": supp_coil.obj_type if supp_coil is not None else None,
        "Supplemental Heating Coil Name": supp_coil.name if supp_coil is not None else None,
        "Maximum Supply Air Temperature": round(convert(max_supply_temp_f, "F", "C"), 2),
        "Maximum Outdoor Dry-Bulb Temperature for Supplemental Heater Operation":
            round(convert(40.0, "F", "C"), 2),
    }))
    if cooling_coil is not None:
        rec.track_capacity(unitary, "Cooling Supply Air Flow Rate", "cooling", units="cfm")
    if heating_coil is not None:
        rec.track_capacity(unitary, "Heating Supply Air Flow Rate", "heating", units="cfm")
    if not ducted:
        rec.zone_equipment.append((unitary.obj_type, unitary.name))
        return unitary

    loop = rec.add(model, ModelObject("AirLoopHVAC", f"{rec.sys_id} central air system", {
        "Design Supply Air Flow Rate": "autosize",
        "Supply Side Inlet Node Name": f"{rec.sys_id} supply inlet",
        "Demand Side Outlet Node Name": f"{rec.sys_id} demand outlet",
        "Supply Side Outlet Node Names": f"{rec.sys_id} supply outlet",
        "Branch List Name": unitary.name,
    }))
    rec.air_loops.append(loop.name)
    terminal = rec.add(model, ModelObject("AirTerminal:SingleDuct:ConstantVolume:NoReheat",
                                          f"{rec.sys_id} living zone direct air", {
        "Availability Schedule Name": "Always On Discrete",
        "Air Inlet Node Name": f"{rec.sys_id} zone splitter outlet",
        "Air Outlet Node Name": f"{zone} {rec.sys_id} inlet",
        "Maximum Air Flow Rate": "autosize",
    }))
    rec.zone_equipment.append((terminal.obj_type, terminal.name))
    return unitary


# =============================================================================
# Coils
# =============================================================================

def _add_dx_cooling_coil(model: Model, rec: HVACSystemRecord, params: DXParams) -> ModelObject:
    speed_curves = crv.cooling_curves(rec.sys_id, params.num_speeds)
    for c in speed_curves:
        crv.add_curves(model, c.all())
    cops = []
    for eer in params.eers:
        cops.append(round(calc_cop_from_eer(eer * rec.dse_cool, params.fan_power_rated), 4))
    rec.efficiency = cops[params.rated_speed]

    crankcase = {
        "Crankcase Heater Capacity": convert(params.crankcase_kw, "kW", "W"),
        "Maximum Outdoor Dry-Bulb Temperature for Crankcase Heater Operation":
            round(convert(CRANKCASE_TEMP_F, "F", "C"), 2),
    }
    if params.num_speeds == 1:
        c = speed_curves[0]
        coil = rec.add(model, ModelObject("Coil:Cooling:DX:SingleSpeed", f"{rec.sys_id} cooling coil", {
            "Availability Schedule Name": "Always On Discrete",
            "Gross Rated Sensible Heat Ratio": params.shrs[0],
            "Gross Rated Cooling COP": cops[0],
            "Total Cooling Capacity Function of Temperature Curve Name": c.cap_ft.name,
            "Total Cooling Capacity Function of Flow Fraction Curve Name": c.cap_fff.name,
            "Energy Input Ratio Function of Temperature Curve Name": c.eir_ft.name,
            "Energy Input Ratio Function of Flow Fraction Curve Name": c.eir_fff.name,
            "Part Load Fraction Correlation Curve Name": c.plf.name,
            **crankcase,
        }))
        rec.track_capacity(coil, "Gross Rated Total Cooling Capacity", "cooling")
        rec.track_capacity(coil, "Rated Air Flow Rate", "cooling", units="cfm")
        rec.track_efficiency(coil, "Gross Rated Cooling COP", "cooling")
        return coil

    coil = rec.add(model, ModelObject("Coil:Cooling:DX:MultiSpeed", f"{rec.sys_id} cooling coil", {
        "Availability Schedule Name": "Always On Discrete",
        "Condenser Type": "AirCooled",
        "Apply Part Load Fraction to Speeds Greater than 1": "No",
        "Apply Latent Degradation to Speeds Greater than 1": "No",
        "Fuel Type": "Electricity",
        "Number of Speeds": params.num_speeds,
        **crankcase,
    }))
    for i, c in enumerate(speed_curves):
        s = f"Speed {i + 1}"
        coil.set(f"{s} Gross Rated Sensible Heat Ratio", params.shrs[i])
        coil.set(f"{s} Gross Rated Cooling COP", cops[i])
        rec.track_efficiency(coil, f"{s} Gross Rated Cooling COP", "cooling")
        coil.set(f"{s} Total Cooling Capacity Function of Temperature Curve Name", c.cap_ft.name)
        coil.set(f"{s} Total Cooling Capacity Function of Flow Fraction Curve Name", c.cap_fff.name)
        coil.set(f"{s} Energy Input Ratio Function of Temperature Curve Name", c.eir_ft.name)
        coil.set(f"{s} Energy Input Ratio Function of Flow Fraction Curve Name", c.eir_fff.name)
        coil.set(f"{s} Part Load Fraction Correlation Curve Name", c.plf.name)
        rec.track_capacity(coil, f"{s} Gross Rated Total Cooling Capacity", "cooling",
                           ratio=params.capacity_ratios[i])
        rec.track_capacity(coil, f"{s} Rated Air Flow Rate", "cooling", ratio=params.fan_speed_ratios[i],
                           units="cfm")
    return coil


def _add_dx_heating_coil(model: Model, rec: HVACSystemRecord, params: DXParams) -> ModelObject:
    speed_curves = crv.heating_curves(rec.sys_id, params.num_speeds)
    for c in speed_curves:
        crv.add_curves(model, c.all())
    cops = []
    for cop in params.cops:
        cops.append(round(calc_cop_heating_wo_fan(cop * rec.dse_heat, params.fan_power_rated), 4))

    common = {
        "Availability Schedule Name": "Always On Discrete",
        "Minimum Outdoor Dry-Bulb Temperature for Compressor Operation":
            round(convert(params.min_temp, "F", "C"), 2),
        "Crankcase Heater Capacity": convert(params.crankcase_kw, "kW", "W"),
        "Maximum Outdoor Dry-Bulb Temperature for Crankcase Heater Operation":
            round(convert(CRANKCASE_TEMP_F, "F", "C"), 2),
        "Maximum Outdoor Dry-Bulb Temperature for Defrost Operation": round(convert(40.0, "F", "C"), 2),
        "Defrost Strategy": "ReverseCycle",
        "Defrost Control": "OnDemand",
    }
    if params.num_speeds == 1:
        c = speed_curves[0]
        coil = rec.add(model, ModelObject("Coil:Heating:DX:SingleSpeed", f"{rec.sys_id} heating coil", {
            "Gross Rated Heating COP": cops[0],
            "Heating Capacity Function of Temperature Curve Name": c.cap_ft.name,
            "Heating Capacity Function of Flow Fraction Curve Name": c.cap_fff.name,
            "Energy Input Ratio Function of Temperature Curve Name": c.eir_ft.name,
            "Energy Input Ratio Function of Flow Fraction Curve Name": c.eir_fff.name,
            "Part Load Fraction Correlation Curve Name": c.plf.name,
            **common,
        }))
        rec.track_capacity(coil, "Gross Rated Heating Capacity", "heating")
        rec.track_capacity(coil, "Rated Air Flow Rate", "heating", units="cfm")
        rec.track_efficiency(coil, "Gross Rated Heating COP", "heating")
        return coil

    coil = rec.add(model, ModelObject("Coil:Heating:DX:MultiSpeed", f"{rec.sys_id} heating coil", {
        "Apply Part Load Fraction to Speeds Greater than 1": "No",
        "Fuel Type": "Electricity",
        "Number of Speeds": params.num_speeds,
        **common,
    }))
    for i, c in enumerate(speed_curves):
        s = f"Speed {i + 1}"
        coil.set(f"{s} Gross Rated Heating COP", cops[i])
        rec.track_efficiency(coil, f"{s} Gross Rated Heating COP", "heating")
        coil.set(f"{s} Heating Capacity Function of Temperature Curve Name", c.cap_ft.name)
        coil.set(f"{s} Heating Capacity Function of Flow Fraction Curve Name", c.cap_fff.name)
        coil.set(f"{s} Energy Input Ratio Function of Temperature Curve Name", c.eir_ft.name)
        coil.set(f"{s} Energy Input Ratio Function of Flow Fraction Curve Name", c.eir_fff.name)
        coil.set(f"{s} Part Load Fraction Correlation Curve Name", c.plf.name)
        rec.track_capacity(coil, f"{s} Gross Rated Heating Capacity", "heating", ratio=params.capacity_ratios[i])
        rec.track_capacity(coil, f"{s} Rated Air Flow Rate", "heating",
                           ratio=params.fan_speed_ratios_heating[i], units="cfm")
    return coil


def _add_furnace_coil(model: Model, rec: HVACSystemRecord, name: str, fuel: str, efficiency: float,
                      kind: str = "heating") -> ModelObject:
    if fuel == constants.FUEL_ELECTRIC:
        coil = rec.add(model, ModelObject("Coil:Heating:Electric", name, {
            "Availability Schedule Name": "Always On Discrete",
            "Efficiency": round(efficiency, 4),
        }))
        rec.track_capacity(coil, "Nominal Capacity", kind)
        rec.track_efficiency(coil, "Efficiency", "heating")
        return coil
    coil = rec.add(model, ModelObject("Coil:Heating:Fuel", name, {
        "Availability Schedule Name": "Always On Discrete",
        "Fuel Type": _eplus_fuel(fuel),
        "Burner Efficiency": round(efficiency, 4),
        "On Cycle Parasitic Electric Load": 0.0,
        "Off Cycle Parasitic Fuel Load": 0.0,
    }))
    rec.track_capacity(coil, "Nominal Capacity", kind)
    rec.track_efficiency(coil, "Burner Efficiency", "heating")
    return coil


# =============================================================================
# Cooling systems
# =============================================================================

def apply_central_ac(model: Model, sys_id: str, seer: float, capacity: Optional[float], load_frac: float,
                     dse: float = 1.0) -> HVACSystemRecord:
    """
    Central air conditioner with 1, 2 or variable speeds selected from SEER.

    Args:
        capacity: Btu/hr, None to autosize
        load_frac: Fraction of the cooling load served
    """
    params = get_central_ac_params(seer)
    rec = HVACSystemRecord(sys_id, CENTRAL_AC, constants.FUEL_ELECTRIC, cooling_capacity=capacity,
                           load_frac_cool=load_frac, dse_cool=dse, num_speeds=params.num_speeds)
    coil = _add_dx_cooling_coil(model, rec, params)
    fan = _add_fan(model, rec, f"{sys_id} supply fan", params.fan_power_installed, "cooling")
    _add_unitary(model, rec, f"{sys_id} unitary system", fan, cooling_coil=coil)
    return register_system(model, rec)


def apply_room_ac(model: Model, sys_id: str, eer: float, capacity: Optional[float],
                  load_frac: float) -> HVACSystemRecord:
    rec = HVACSystemRecord(sys_id, ROOM_AC, constants.FUEL_ELECTRIC, cooling_capacity=capacity,
                           load_frac_cool=load_frac, num_speeds=1, airflow_cfm_per_ton=ROOM_AC_AIRFLOW)
    c = crv.cooling_curves(sys_id, 1)[0]
    crv.add_curves(model, c.all())
    rec.efficiency = round(convert(eer, "Btu/hr", "W"), 4)
    coil = rec.add(model, ModelObject("Coil:Cooling:DX:SingleSpeed", f"{sys_id} cooling coil", {
        "Availability Schedule Name": "Always On Discrete",
        "Gross Rated Sensible Heat Ratio": ROOM_AC_SHR,
        "Gross Rated Cooling COP": rec.efficiency,
        "Total Cooling Capacity Function of Temperature Curve Name": c.cap_ft.name,
        "Total Cooling Capacity Function of Flow Fraction Curve Name": c.cap_fff.name,
        "Energy Input Ratio Function of Temperature Curve Name": c.eir_ft.name,
        "Energy Input Ratio Function of Flow Fraction Curve Name": c.eir_fff.name,
        "Part Load Fraction Correlation Curve Name": c.plf.name,
    }))
    rec.track_capacity(coil, "Gross Rated Total Cooling Capacity", "cooling")
    fan = _add_fan(model, rec, f"{sys_id} supply fan", 0.0, "cooling")
    ptac = rec.add(model, ModelObject("ZoneHVAC:PackagedTerminalAirConditioner", f"{sys_id} ptac", {
        "Availability Schedule Name": "Always On Discrete",
        "Outdoor Air Mixer Object Type": None,
        "Cooling Supply Air Flow Rate": "autosize",
        "Outdoor Air Flow Rate During Cooling Operation": 0.0,
        "Supply Air Fan Object Type": fan.obj_type,
        "Supply Air Fan Name": fan.name,
        "Heating Coil Object Type": "Coil:Heating:Electric",
        "Heating Coil Name": None,
        "Cooling Coil Object Type": coil.obj_type,
        "Cooling Coil Name": coil.name,
        "Fan Placement": "BlowThrough",
    }))
    rec.zone_equipment.append((ptac.obj_type, ptac.name))
    return register_system(model, rec)


# =============================================================================
# Heating systems
# =============================================================================

def apply_furnace(model: Model, sys_id: str, fuel: str, afue: float, capacity: Optional[float],
                  load_frac: float, dse: float = 1.0, fan_power: float = FURNACE_FAN_POWER) -> HVACSystemRecord:
    rec = HVACSystemRecord(sys_id, FURNACE, fuel, heating_capacity=capacity, load_frac_heat=load_frac,
                           dse_heat=dse, efficiency=afue * dse)
    coil = _add_furnace_coil(model, rec, f"{sys_id} heating coil", fuel, afue * dse)
    fan = _add_fan(model, rec, f"{sys_id} supply fan", fan_power, "heating")
    _add_unitary(model, rec, f"{sys_id} unitary system", fan, heating_coil=coil,
                 max_supply_temp_f=FURNACE_MAX_SUPPLY_TEMP_F)
    return register_system(model, rec)


def apply_unit_heater(model: Model, sys_id: str, htg_type: str, fuel: str, efficiency: float,
                      capacity: Optional[float], load_frac: float, fan_power: float = 0.0,
                      airflow_rate: float = 0.0) -> HVACSystemRecord:
    """Unducted zone heater (wall furnace or stove) as a zone unitary system."""
    rec = HVACSystemRecord(sys_id, htg_type, fuel, heating_capacity=capacity, load_frac_heat=load_frac,
                           efficiency=efficiency, airflow_cfm_per_ton=airflow_rate or AIR_FLOW_CFM_PER_TON)
    coil = _add_furnace_coil(model, rec, f"{sys_id} heating coil", fuel, efficiency)
    fan = _add_fan(model, rec, f"{sys_id} fan", fan_power, "heating")
    _add_unitary(model, rec, f"{sys_id} unit heater", fan, heating_coil=coil,
                 max_supply_temp_f=FURNACE_MAX_SUPPLY_TEMP_F, ducted=False)
    return register_system(model, rec)


def apply_boiler(model: Model, sys_id: str, fuel: str, afue: float, capacity: Optional[float],
                 load_frac: float, dse: float = 1.0, boiler_type: str = constants.BOILER_TYPE_FORCED_DRAFT,
                 design_temp_f: float = BOILER_DESIGN_TEMP_F, oat_reset: bool = False) -> HVACSystemRecord:
    """Hot water boiler on a plant loop serving baseboards in the living zone."""
    rec = HVACSystemRecord(sys_id, BOILER, fuel, heating_capacity=capacity, load_frac_heat=load_frac,
                           dse_heat=dse, efficiency=afue * dse)
    loop_name = f"{sys_id} hydronic heat loop"
    loop = rec.add(model, ModelObject("PlantLoop", loop_name, {
        "Fluid Type": "Water",
        "Maximum Loop Temperature": round(convert(design_temp_f, "F", "C"), 2),
        "Minimum Loop Temperature": 0.0,
        "Maximum Loop Flow Rate": "autosize",
        "Load Distribution Scheme": "SequentialLoad",
        "Loop Demand Side Design Temperature Difference": round(convert(20.0, "deltaF", "deltaC"), 2),
    }))
    rec.plant_loops.append(loop.name)
    boiler = rec.add(model, ModelObject("Boiler:HotWater", f"{sys_id} boiler", {
        "Fuel Type": "Electricity" if fuel == constants.FUEL_ELECTRIC else _eplus_fuel(fuel),
        "Nominal Thermal Efficiency": round(afue * dse, 4),
        "Efficiency Curve Temperature Evaluation Variable": "LeavingBoiler",
        "Design Water Flow Rate": "autosize",
        "Boiler Flow Mode": "LeavingSetpointModulated",
        "Parasitic Electric Load": 0.0,
        "End-Use Subcategory": boiler_type,
    }))
    rec.track_capacity(boiler, "Nominal Capacity", "heating")
    rec.add(model, ModelObject("Pump:VariableSpeed", f"{sys_id} hydronic pump", {
        "Design Maximum Flow Rate": "autosize",
        "Design Pump Head": 20000.0,
        "Design Power Consumption": "autosize",
        "Pump Control Type": "Intermittent",
    }))
    if oat_reset:
        rec.add(model, ModelObject("SetpointManager:OutdoorAirReset", f"{sys_id} hydronic heat loop setpoint", {
            "Control Variable": "Temperature",
            "Setpoint at Outdoor Low Temperature": round(convert(design_temp_f, "F", "C"), 2),
            "Outdoor Low Temperature": round(convert(0.0, "F", "C"), 2),
            "Setpoint at Outdoor High Temperature": round(convert(design_temp_f - 40.0, "F", "C"), 2),
            "Outdoor High Temperature": round(convert(60.0, "F", "C"), 2),
            "Setpoint Node or NodeList Name": f"{loop_name} supply outlet",
        }))
    else:
        rec.add(model, ModelObject("SetpointManager:Scheduled", f"{sys_id} hydronic heat loop setpoint", {
            "Control Variable": "Temperature",
            "Schedule Name": f"{sys_id} hydronic heat supply setpoint",
            "Setpoint Node or NodeList Name": f"{loop_name} supply outlet",
        }))
        rec.add(model, ModelObject("Schedule:Constant", f"{sys_id} hydronic heat supply setpoint", {
            "Schedule Type Limits Name": "Temperature",
            "Hourly Value": round(convert(design_temp_f, "F", "C"), 2),
        }))
    baseboard = rec.add(model, ModelObject("ZoneHVAC:Baseboard:Convective:Water", f"{sys_id} baseboard", {
        "Availability Schedule Name": "Always On Discrete",
        "Heat Exchanger Plant Loop": loop_name,
        "U-Factor Times Area Value": "autosize",
        "Maximum Water Flow Rate": "autosize",
    }))
    rec.track_capacity(baseboard, "Heating Design Capacity", "heating")
    rec.zone_equipment.append((baseboard.obj_type, baseboard.name))
    return register_system(model, rec)


def apply_electric_baseboard(model: Model, sys_id: str, efficiency: float, capacity: Optional[float],
                             load_frac: float) -> HVACSystemRecord:
    rec = HVACSystemRecord(sys_id, ELECTRIC_RESISTANCE, constants.FUEL_ELECTRIC, heating_capacity=capacity,
                           load_frac_heat=load_frac, efficiency=efficiency)
    baseboard = rec.add(model, ModelObject("ZoneHVAC:Baseboard:Convective:Electric",
                                           f"{sys_id} electric baseboard", {
        "Availability Schedule Name": "Always On Discrete",
        "Heating Design Capacity Method": "HeatingDesignCapacity",
        "Efficiency": efficiency,
    }))
    rec.track_capacity(baseboard, "Heating Design Capacity", "heating")
    rec.zone_equipment.append((baseboard.obj_type, baseboard.name))
    return register_system(model, rec)


# =============================================================================
# Heat pumps
# =============================================================================

def _add_backup_coil(model: Model, rec: HVACSystemRecord, fuel: Optional[str],
                     efficiency: Optional[float]) -> ModelObject:
    return _add_furnace_coil(model, rec, f"{rec.sys_id} supp heater", fuel or constants.FUEL_ELECTRIC,
                             efficiency or 1.0, kind="backup")


def apply_central_ashp(model: Model, sys_id: str, seer: float, hspf: float, heating_capacity: Optional[float],
                       cooling_capacity: Optional[float], backup_capacity: Optional[float],
                       load_frac_heat: float, load_frac_cool: float, dse: float = 1.0,
                       backup_fuel: Optional[str] = None, backup_efficiency: Optional[float] = None) -> HVACSystemRecord:
    """Air-to-air heat pump with 1, 2 or variable speeds selected from SEER."""
    params = get_ashp_params(seer, hspf)
    rec = HVACSystemRecord(sys_id, ASHP, constants.FUEL_ELECTRIC, heating_capacity=heating_capacity,
                           cooling_capacity=cooling_capacity, backup_capacity=backup_capacity,
                           load_frac_heat=load_frac_heat, load_frac_cool=load_frac_cool,
                           dse_heat=dse, dse_cool=dse, num_speeds=params.num_speeds)
    clg_coil = _add_dx_cooling_coil(model, rec, params)
    htg_coil = _add_dx_heating_coil(model, rec, params)
    supp = _add_backup_coil(model, rec, backup_fuel, backup_efficiency)
    fan = _add_fan(model, rec, f"{sys_id} supply fan", params.fan_power_installed, "cooling")
    _add_unitary(model, rec, f"{sys_id} unitary system", fan, cooling_coil=clg_coil, heating_coil=htg_coil,
                 supp_coil=supp)
    return register_system(model, rec)


def apply_mshp(model: Model, sys_id: str, seer: float, hspf: float, heating_capacity: Optional[float],
               cooling_capacity: Optional[float], backup_capacity: Optional[float], load_frac_heat: float,
               load_frac_cool: float, ducted: bool, dse: float = 1.0, backup_fuel: Optional[str] = None,
               backup_efficiency: Optional[float] = None,
               params: Optional[MiniSplitParams] = None) -> HVACSystemRecord:
    """Mini-split heat pump with four modulating speeds."""
    p = params or MiniSplitParams()
    clg_caps = p.speeds(p.min_cooling_capacity, p.max_cooling_capacity)
    htg_caps = p.speeds(p.min_heating_capacity, p.max_heating_capacity)
    clg_flows = p.speeds(p.min_cooling_airflow_rate, p.max_cooling_airflow_rate)
    htg_flows = p.speeds(p.min_heating_airflow_rate, p.max_heating_airflow_rate)
    # Per-speed capacity ratios relative to the nominal speed (index 2)
    dx = DXParams(
        num_speeds=4,
        eers=[convert(cop, "W", "Btu/hr") for cop in p.cooling_cops(seer)],
        shrs=[p.shr] * 4,
        capacity_ratios=[c / clg_caps[2] for c in clg_caps[:2]] + [1.0] + [clg_caps[3] / clg_caps[2]],
        fan_speed_ratios=[(f * c) / (clg_flows[2] * clg_caps[2]) for f, c in zip(clg_flows, clg_caps)],
        fan_power_rated=p.fan_power,
        fan_power_installed=p.fan_power,
        cops=p.heating_cops(hspf),
        fan_speed_ratios_heating=[(f * c) / (htg_flows[2] * htg_caps[2]) for f, c in zip(htg_flows, htg_caps)],
        min_temp=p.cap_retention_temp,
    )
    rec = HVACSystemRecord(sys_id, MSHP, constants.FUEL_ELECTRIC, heating_capacity=heating_capacity,
                           cooling_capacity=cooling_capacity, backup_capacity=backup_capacity,
                           load_frac_heat=load_frac_heat, load_frac_cool=load_frac_cool,
                           dse_heat=dse, dse_cool=dse, num_speeds=4)
    clg_coil = _add_dx_cooling_coil(model, rec, dx)
    htg_coil = _add_dx_heating_coil(model, rec, dx)
    supp = _add_backup_coil(model, rec, backup_fuel, backup_efficiency)
    fan = _add_fan(model, rec, f"{sys_id} supply fan", p.fan_power, "cooling")
    _add_unitary(model, rec, f"{sys_id} unitary system", fan, cooling_coil=clg_coil, heating_coil=htg_coil,
                 supp_coil=supp, ducted=ducted)
    return register_system(model, rec)


def apply_gshp(model: Model, sys_id: str, eer: float, cop: float, heating_capacity: Optional[float],
               cooling_capacity: Optional[float], backup_capacity: Optional[float], load_frac_heat: float,
               load_frac_cool: float, dse: float = 1.0, backup_fuel: Optional[str] = None,
               backup_efficiency: Optional[float] = None,
               params: Optional[GSHPParams] = None) -> HVACSystemRecord:
    """Ground source heat pump with a vertical bore field on a glycol ground loop."""
    p = params or GSHPParams()
    rec = HVACSystemRecord(sys_id, GSHP, constants.FUEL_ELECTRIC, heating_capacity=heating_capacity,
                           cooling_capacity=cooling_capacity, backup_capacity=backup_capacity,
                           load_frac_heat=load_frac_heat, load_frac_cool=load_frac_cool,
                           dse_heat=dse, dse_cool=dse, num_speeds=1)
    cool_cop = calc_cop_from_eer(eer * dse, p.fan_power)
    heat_cop = calc_cop_heating_wo_fan(cop * dse, p.fan_power)
    rec.efficiency = round(cool_cop, 4)

    loop_name = f"{sys_id} ground loop"
    loop = rec.add(model, ModelObject("PlantLoop", loop_name, {
        "Fluid Type": "UserDefinedFluidType",
        "User Defined Fluid Type": f"PropyleneGlycol {int(p.frac_glycol * 100)}%",
        "Maximum Loop Temperature": 48.88,
        "Minimum Loop Temperature": round(convert(-20.0, "F", "C"), 2),
        "Maximum Loop Flow Rate": "autosize",
        "Loop Demand Side Design Temperature Difference": round(convert(p.design_delta_t, "deltaF", "deltaC"), 2),
    }))
    rec.plant_loops.append(loop.name)
    cap_tons = (cooling_capacity or heating_capacity or 36000.0) / 12000.0
    holes, depth = p.bore_layout(cap_tons)
    rec.add(model, ModelObject("GroundHeatExchanger:System", f"{sys_id} ground heat exchanger", {
        "Design Flow Rate": "autosize",
        "Ground Thermal Conductivity": round(convert(p.ground_conductivity, "Btu/(hr*F)", "W/K")
                                             / convert(1.0, "ft", "m"), 4),
        "Ground Thermal Heat Capacity": round(p.ground_conductivity / p.ground_diffusivity
                                              * convert(1.0, "Btu/(hr*F)", "W/K") * 3600.0
                                              / convert(1.0, "ft^2", "m^2") / convert(1.0, "ft", "m"), 1),
        "Grout Thermal Conductivity": round(convert(p.grout_conductivity, "Btu/(hr*F)", "W/K")
                                            / convert(1.0, "ft", "m"), 4),
        "Number of Bore Holes": holes,
        "Bore Hole Length": round(convert(depth, "ft", "m"), 2),
        "Bore Hole Radius": round(convert(p.bore_diameter / 2.0, "in", "m"), 4),
        "Bore Hole Spacing": round(convert(p.bore_spacing, "ft", "m"), 2),
        "U-Tube Distance": round(convert(p.u_tube_leg_spacing, "in", "m"), 4),
        "Pipe Outer Diameter": round(convert(p.pipe_size, "in", "m"), 4),
    }))
    rec.add(model, ModelObject("Pump:VariableSpeed", f"{sys_id} ground loop pump", {
        "Design Maximum Flow Rate": "autosize",
        "Design Pump Head": round(p.pump_head * 2989.067, 1),
        "Design Power Consumption": "autosize",
        "Pump Control Type": "Intermittent",
    }))

    clg_curves = [
        crv.PerformanceCurve(f"{sys_id} cool-cap", "biquadratic", crv.GSHP_COOL_CAP_FT_SPEC),
        crv.PerformanceCurve(f"{sys_id} cool-power", "biquadratic", crv.GSHP_COOL_POWER_FT_SPEC),
        crv.PerformanceCurve(f"{sys_id} cool-sh", "biquadratic", crv.GSHP_COOL_SH_FT_SPEC),
    ]
    htg_curves = [
        crv.PerformanceCurve(f"{sys_id} heat-cap", "biquadratic", crv.GSHP_HEAT_CAP_FT_SPEC),
        crv.PerformanceCurve(f"{sys_id} heat-power", "biquadratic", crv.GSHP_HEAT_POWER_FT_SPEC),
    ]
    crv.add_curves(model, clg_curves + htg_curves)
    clg_coil = rec.add(model, ModelObject("Coil:Cooling:WaterToAirHeatPump:EquationFit",
                                          f"{sys_id} cooling coil", {
        "Rated Air Flow Rate": "autosize",
        "Rated Water Flow Rate": "autosize",
        "Gross Rated Sensible Heat Ratio": p.shr,
        "Gross Rated Cooling COP": round(cool_cop, 4),
        "Total Cooling Capacity Curve Name": clg_curves[0].name,
        "Sensible Cooling Capacity Curve Name": clg_curves[2].name,
        "Cooling Power Consumption Curve Name": clg_curves[1].name,
    }))
    rec.track_capacity(clg_coil, "Gross Rated Total Cooling Capacity", "cooling")
    htg_coil = rec.add(model, ModelObject("Coil:Heating:WaterToAirHeatPump:EquationFit",
                                          f"{sys_id} heating coil", {
        "Rated Air Flow Rate": "autosize",
        "Rated Water Flow Rate": "autosize",
        "Gross Rated Heating COP": round(heat_cop, 4),
        "Heating Capacity Curve Name": htg_curves[0].name,
        "Heating Power Consumption Curve Name": htg_curves[1].name,
    }))
    rec.track_capacity(htg_coil, "Gross Rated Heating Capacity", "heating")
    supp = _add_backup_coil(model, rec, backup_fuel, backup_efficiency)
    fan = _add_fan(model, rec, f"{sys_id} supply fan", p.fan_power, "cooling")
    _add_unitary(model, rec, f"{sys_id} unitary system", fan, cooling_coil=clg_coil, heating_coil=htg_coil,
                 supp_coil=supp)
    logger.debug(f"GSHP '{sys_id}': {holes} bore(s) at {depth:.0f} ft")
    return register_system(model, rec)


# =============================================================================
# Ideal air
# =============================================================================

def apply_ideal_air(model: Model, sys_id: str, load_frac_heat: float, load_frac_cool: float) -> HVACSystemRecord:
    """Ideal loads system meeting the given fractions of the heating and cooling loads."""
    rec = HVACSystemRecord(sys_id, IDEAL_AIR, None, load_frac_heat=load_frac_heat, load_frac_cool=load_frac_cool)
    ideal = rec.add(model, ModelObject("ZoneHVAC:IdealLoadsAirSystem", f"{sys_id} ideal loads", {
        "Availability Schedule Name": "Always On Discrete",
        "Zone Supply Air Node Name": f"{sys_id} supply inlet",
        "Heating Limit": "NoLimit",
        "Cooling Limit": "NoLimit",
        "Dehumidification Control Type": "None",
        "Humidification Control Type": "None",
    }))
    rec.zone_equipment.append((ideal.obj_type, ideal.name))
    return register_system(model, rec)


HEATING_BUILDERS = {
    FURNACE: apply_furnace,
    BOILER: apply_boiler,
    ELECTRIC_RESISTANCE: apply_electric_baseboard,
}

UNIT_HEATER_TYPES = {
    WALL_FURNACE: (0.0, 0.0),
    STOVE: (0.5, STOVE_AIRFLOW),
}
