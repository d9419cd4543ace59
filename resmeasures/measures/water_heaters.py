"""
Water heating measures: storage tank, heat pump water heater and solar
water heating.

Each measure replaces the water heater already in the model (if any) and
needs the mains water temperature to have been set.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from ..core import constants
from ..core.units import convert
from ..envelope.geometry import get_abs_azimuth, get_abs_tilt, get_roof_pitch
from ..measure import Measure, MeasureArgument, MeasureRunner
from ..model import Model, Space
from ..waterheating.mains import get_mains_temperatures
from ..waterheating.solar import (
    SolarHotWaterSystem,
    apply_solar_hot_water,
    calc_shw_pump_power,
    calc_shw_storage_volume,
)
from ..waterheating.water_heater import (
    HeatPumpWaterHeaterParams,
    apply_heatpump,
    apply_tank,
    check_setpoint,
    get_default_capacity,
    get_default_ef,
    get_default_recovery_efficiency,
    get_default_tank_volume,
    get_space_from_location,
    read_hourly_schedule,
    remove_water_heaters,
)

logger = logging.getLogger(__name__)

WATER_HEATER_ID = "WaterHeater"

FUEL_CHOICES = (constants.FUEL_GAS, constants.FUEL_ELECTRIC, constants.FUEL_OIL, constants.FUEL_PROPANE)
LOCATION_CHOICES = (constants.AUTO, constants.SPACE_TYPE_LIVING, constants.SPACE_TYPE_FINISHED_BASEMENT,
                    constants.SPACE_TYPE_UNFINISHED_BASEMENT, constants.SPACE_TYPE_GARAGE,
                    constants.SPACE_TYPE_UNFINISHED_ATTIC)
SETPOINT_CHOICES = (constants.WATER_HEATER_SETPOINT_CONSTANT, constants.WATER_HEATER_SETPOINT_SCHEDULED)


# =============================================================================
# Shared checks
# =============================================================================

def _check_building(model: Model, runner: MeasureRunner) -> bool:
    if not model.spaces:
        return runner.register_error("No building geometry has been defined.")
    try:
        get_mains_temperatures(model)
    except ValueError as e:
        return runner.register_error(str(e))
    return True


def _get_space(model: Model, location: str, runner: MeasureRunner) -> Optional[Space]:
    space = get_space_from_location(model, location, model.properties.get("iecc_zone"))
    if space is None:
        runner.register_error(f"No space found for water heater location '{location}'.")
    return space


def _setpoint_args() -> List[MeasureArgument]:
    return [
        MeasureArgument("setpoint_type", "choice", default=constants.WATER_HEATER_SETPOINT_CONSTANT,
                        choices=SETPOINT_CHOICES, display_name="Setpoint type",
                        description="The water heater setpoint type. 'constant' uses the setpoint temperature, "
                                    "'scheduled' reads hourly values from the setpoint schedule file."),
        MeasureArgument("setpoint_temp", "double", default=125.0, units="degrees F",
                        display_name="Setpoint", description="Water heater setpoint temperature."),
        MeasureArgument("schedule_directory", "path", default="./resources",
                        display_name="Schedule directory", description="Directory holding the schedule files."),
        MeasureArgument("setpoint_schedule", "string", default="hourly_setpoint_schedule.csv",
                        display_name="Setpoint schedule",
                        description="File name of the hourly setpoint schedule (F)."),
    ]


def _setpoint_values(args: Dict[str, Any], runner: MeasureRunner) -> Optional[List[float]]:
    """
    Hourly setpoints for a scheduled setpoint, else None.

    Raises:
        ValueError: On a missing or malformed schedule file
    """
    if args["setpoint_type"] != constants.WATER_HEATER_SETPOINT_SCHEDULED:
        return None
    path = Path(args["schedule_directory"]).expanduser().resolve() / args["setpoint_schedule"]
    values = read_hourly_schedule(path)
    for t in (min(values), max(values)):
        warning = check_setpoint(t)
        if warning:
            runner.register_warning(warning)
    return values


def _register_removed(model: Model, runner: MeasureRunner) -> None:
    removed = remove_water_heaters(model)
    if removed:
        runner.register_info(f"Removed {removed} existing water heater(s).")


# =============================================================================
# Storage tank
# =============================================================================

class WaterHeaterTank(Measure):
    """Fuel-fired or electric storage water heater."""

    name = "Set Residential Tank Water Heater"
    description = "Adds a storage tank water heater to the domestic hot water loop, replacing any existing one."

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("fuel_type", "choice", default=constants.FUEL_GAS, choices=FUEL_CHOICES,
                            display_name="Fuel Type", description="Type of fuel used for water heating."),
            MeasureArgument("tank_volume", "string", default=constants.AUTO, units="gal",
                            display_name="Tank Volume",
                            description="Nominal volume of the water heater tank. Set to 'auto' to size from "
                                        "the number of bedrooms and bathrooms."),
        ] + _setpoint_args() + [
            MeasureArgument("location", "choice", default=constants.AUTO, choices=LOCATION_CHOICES,
                            display_name="Location",
                            description="The space type for the location. 'auto' picks a space by climate zone."),
            MeasureArgument("capacity", "string", default="40", units="kBtu/hr",
                            display_name="Input Capacity",
                            description="The input capacity of the water heater. Set to 'auto' to size from "
                                        "the number of bedrooms."),
            MeasureArgument("energy_factor", "string", default="0.59", display_name="Rated Energy Factor",
                            description="Ratio of useful energy output to total energy input. Set to 'auto' for "
                                        "the federal minimum at the tank volume."),
            MeasureArgument("recovery_efficiency", "double", default=0.76, display_name="Recovery Efficiency",
                            description="Ratio of energy delivered to the water to energy content of the fuel "
                                        "consumed. Ignored for electric water heaters."),
            MeasureArgument("oncyc_power", "double", default=0.0, units="W",
                            display_name="Forced draft fan power", description="Power of the forced draft fan."),
            MeasureArgument("offcyc_power", "double", default=0.0, units="W",
                            display_name="Parasitic electricity power",
                            description="Off cycle electric power draw for controls."),
            MeasureArgument("tank_model_type", "choice", default="mixed", choices=("mixed", "stratified"),
                            display_name="Tank Model Type",
                            description="Mixed uses a single-node tank, stratified a 12-node tank."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        if not _check_building(model, runner):
            return False

        fuel = args["fuel_type"]
        nbeds = model.properties.get("num_bedrooms", 3)
        nbaths = model.properties.get("num_bathrooms")
        vol = (get_default_tank_volume(nbeds, nbaths, fuel) if args["tank_volume"] == constants.AUTO
               else float(args["tank_volume"]))
        cap = (get_default_capacity(nbeds, fuel) if args["capacity"] == constants.AUTO
               else float(args["capacity"]))
        ef = get_default_ef(vol, fuel) if args["energy_factor"] == constants.AUTO else float(args["energy_factor"])
        re = args["recovery_efficiency"]
        if fuel == constants.FUEL_ELECTRIC:
            re = get_default_recovery_efficiency(fuel)

        if vol <= 0:
            return runner.register_error("Storage tank volume must be greater than 0.")
        if cap <= 0:
            return runner.register_error("Nominal capacity must be greater than 0.")
        if not 0 < ef < 1:
            return runner.register_error("Rated energy factor must be greater than 0 and less than 1.")
        if not 0 < re <= 1:
            return runner.register_error("Recovery efficiency must be greater than 0 and at most 1.")
        if args["oncyc_power"] < 0 or args["offcyc_power"] < 0:
            return runner.register_error("Parasitic power must be greater than or equal to 0.")

        t_set = args["setpoint_temp"]
        try:
            setpoint_values = _setpoint_values(args, runner)
            if setpoint_values is None:
                warning = check_setpoint(t_set)
                if warning:
                    runner.register_warning(warning)
        except ValueError as e:
            return runner.register_error(str(e))

        space = _get_space(model, args["location"], runner)
        if space is None:
            return False

        _register_removed(model, runner)
        record = apply_tank(model, WATER_HEATER_ID, space, fuel, cap, vol, ef, re, t_set,
                            args["oncyc_power"], args["offcyc_power"],
                            tank_model_type=args["tank_model_type"], setpoint_values=setpoint_values)

        runner.register_value("tank_volume_gal", vol)
        runner.register_value("input_capacity_kw", round(convert(cap, "kBtu/hr", "kW"), 2))
        runner.register_value("thermal_efficiency", round(record.thermal_efficiency, 3))
        runner.register_value("tank_ua", round(record.ua, 3))
        runner.register_final_condition(
            f"A new {vol:g} gallon {fuel} water heater with a capacity of {cap:g} kBtu/hr, an energy factor of "
            f"{ef:g} and a recovery efficiency of {re:g} has been added to the model in '{space.name}'.")
        return True


# =============================================================================
# Heat pump water heater
# =============================================================================

class HeatPumpWaterHeater(Measure):
    """Wrapped-condenser heat pump water heater with backup elements."""

    name = "Set Residential Heat Pump Water Heater"
    description = ("Adds an electric heat pump water heater to the domestic hot water loop, replacing any "
                   "existing water heater.")

    def arguments(self) -> List[MeasureArgument]:
        d = HeatPumpWaterHeaterParams()
        return [
            MeasureArgument("storage_tank_volume", "double", default=d.vol, units="gal",
                            display_name="Tank Volume", description="Nominal volume of the water heater tank."),
        ] + _setpoint_args() + [
            MeasureArgument("operating_mode_schedule_type", "choice", default="constant",
                            choices=("constant", "scheduled"), display_name="Operating mode type",
                            description="Constant uses the operating mode below, scheduled reads hourly "
                                        "values (0 = heat pump only, 1 = standard) from a file."),
            MeasureArgument("operating_mode", "choice", default=constants.WATER_HEATER_MODE_STANDARD,
                            choices=(constants.WATER_HEATER_MODE_STANDARD, constants.WATER_HEATER_MODE_HP_ONLY),
                            display_name="Operating Mode",
                            description="In heat pump only mode the backup elements never run."),
            MeasureArgument("operating_mode_schedule", "string", default="hourly_operating_mode_schedule.csv",
                            display_name="Operating mode schedule",
                            description="File name of the hourly operating mode schedule."),
            MeasureArgument("location", "choice", default=constants.AUTO, choices=LOCATION_CHOICES,
                            display_name="Location", description="The space type for the location."),
            MeasureArgument("element_capacity", "double", default=d.e_cap, units="kW",
                            display_name="Input Capacity", description="The capacity of the backup elements."),
            MeasureArgument("min_temp", "double", default=d.min_temp, units="degrees F",
                            display_name="Minimum Ambient Temperature",
                            description="Minimum ambient temperature at which the heat pump runs."),
            MeasureArgument("max_temp", "double", default=d.max_temp, units="degrees F",
                            display_name="Maximum Ambient Temperature",
                            description="Maximum ambient temperature at which the heat pump runs."),
            MeasureArgument("cap", "double", default=d.cap, units="kW", display_name="Rated Capacity",
                            description="Input power of the compressor at rating conditions."),
            MeasureArgument("cop", "double", default=d.cop, display_name="Rated COP",
                            description="COP of the heat pump at rating conditions."),
            MeasureArgument("shr", "double", default=d.shr, display_name="Rated SHR",
                            description="Sensible heat ratio of the evaporator at rating conditions."),
            MeasureArgument("airflow_rate", "double", default=d.airflow_rate, units="cfm",
                            display_name="Airflow Rate", description="Evaporator airflow rate."),
            MeasureArgument("fan_power", "double", default=d.fan_power, units="W/cfm",
                            display_name="Fan Power", description="Fan power per unit airflow."),
            MeasureArgument("parasitics", "double", default=d.parasitics, units="W",
                            display_name="Parasitics", description="Parasitic electricity consumption."),
            MeasureArgument("tank_ua", "double", default=d.tank_ua, units="Btu/h-R",
                            display_name="Tank UA", description="UA of the storage tank."),
            MeasureArgument("int_factor", "double", default=d.int_factor, display_name="Interaction Factor",
                            description="How much the heat pump cooling interacts with the space it sits in."),
            MeasureArgument("temp_depress", "double", default=d.temp_depress, units="degrees F",
                            display_name="Temperature Depression",
                            description="Reduction in ambient temperature when the heat pump runs in a closet."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        if not _check_building(model, runner):
            return False

        params = HeatPumpWaterHeaterParams(
            vol=args["storage_tank_volume"], e_cap=args["element_capacity"], min_temp=args["min_temp"],
            max_temp=args["max_temp"], cap=args["cap"], cop=args["cop"], shr=args["shr"],
            airflow_rate=args["airflow_rate"], fan_power=args["fan_power"], parasitics=args["parasitics"],
            tank_ua=args["tank_ua"], int_factor=args["int_factor"], temp_depress=args["temp_depress"],
            operating_mode=args["operating_mode"])
        t_set = args["setpoint_temp"]
        try:
            params.validate()
            setpoint_values = _setpoint_values(args, runner)
            if setpoint_values is None:
                warning = check_setpoint(t_set)
                if warning:
                    runner.register_warning(warning)
            mode_values = None
            if args["operating_mode_schedule_type"] == "scheduled":
                path = Path(args["schedule_directory"]).expanduser().resolve() / args["operating_mode_schedule"]
                mode_values = read_hourly_schedule(path)
        except ValueError as e:
            return runner.register_error(str(e))

        space = _get_space(model, args["location"], runner)
        if space is None:
            return False

        _register_removed(model, runner)
        apply_heatpump(model, WATER_HEATER_ID, space, params, t_set, setpoint_values=setpoint_values,
                       operating_mode_values=mode_values)

        runner.register_value("tank_volume_gal", params.vol)
        runner.register_value("heat_pump_capacity_kw", round(params.cap * params.cop, 2))
        runner.register_final_condition(
            f"A new {round(params.vol)} gallon heat pump water heater, with a rated COP of {params.cop} and a "
            f"nominal heat pump capacity of {round(params.cap * params.cop, 2)} kW has been added to the model")
        return True


# =============================================================================
# Solar water heating
# =============================================================================

def _site_latitude(model: Model) -> float:
    for site in model.objects_of("Site:Location"):
        if site.get("Latitude") is not None:
            return float(site.get("Latitude"))
    inputs = model.properties.get("mains_inputs")
    return inputs[2] if inputs else 0.0


class SolarHotWater(Measure):
    """Flat plate collector loop with a preheat tank ahead of each water heater."""

    name = "Set Residential Solar Water Heating"
    description = ("Adds a solar hot water system with a flat plate collector and storage tank feeding the "
                   "existing water heater. Any existing solar hot water system is replaced.")

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("collector_area", "double", default=40.0, units="ft^2",
                            display_name="Collector Area", description="Area of the collector array."),
            MeasureArgument("frta", "double", default=0.77, display_name="FRta",
                            description="Optical gain coefficient of the collector (y-intercept of the "
                                        "efficiency curve)."),
            MeasureArgument("frul", "double", default=0.793, units="Btu/hr-ft^2-R", display_name="FRUL",
                            description="Thermal loss coefficient of the collector (slope of the efficiency "
                                        "curve)."),
            MeasureArgument("iam", "double", default=0.1, display_name="Incident Angle Modifier",
                            description="Incident angle modifier coefficient of the collector."),
            MeasureArgument("storage_vol", "string", default=constants.AUTO, units="gal",
                            display_name="Storage Volume",
                            description="Volume of the solar storage tank. 'auto' sizes 1.5 gal per ft^2 of "
                                        "collector."),
            MeasureArgument("tank_r", "double", default=10.0, units="hr-ft^2-R/Btu",
                            display_name="Tank Insulation Nominal R-value",
                            description="R-value of the storage tank insulation."),
            MeasureArgument("fluid_type", "choice", default=constants.FLUID_PROPYLENE_GLYCOL,
                            choices=(constants.FLUID_PROPYLENE_GLYCOL, constants.FLUID_WATER),
                            display_name="Fluid Type", description="Fluid in the collector loop."),
            MeasureArgument("heat_ex_eff", "double", default=0.7, display_name="Heat Exchanger Effectiveness",
                            description="Effectiveness of the heat exchanger between the loops."),
            MeasureArgument("pump_power", "double", default=0.8, units="W/ft^2",
                            display_name="Pump Power", description="Collector loop pump power per unit area."),
            MeasureArgument("azimuth_type", "choice", default=constants.COORD_RELATIVE,
                            choices=(constants.COORD_RELATIVE, constants.COORD_ABSOLUTE),
                            display_name="Azimuth Type",
                            description="Relative azimuths follow the building orientation."),
            MeasureArgument("azimuth", "double", default=180.0, units="degrees",
                            display_name="Azimuth", description="Collector azimuth, clockwise from north."),
            MeasureArgument("tilt_type", "choice", default=constants.TILT_PITCH,
                            choices=(constants.TILT_PITCH, constants.TILT_LATITUDE, constants.COORD_ABSOLUTE),
                            display_name="Tilt Type",
                            description="Pitch and latitude tilts are offsets from the roof pitch or the site "
                                        "latitude."),
            MeasureArgument("tilt", "double", default=0.0, units="degrees",
                            display_name="Tilt", description="Collector tilt."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        azimuth = args["azimuth"]
        if azimuth > 360 or azimuth < 0:
            return runner.register_error("Invalid azimuth entered.")

        orientation = 0.0
        if args["azimuth_type"] == constants.COORD_ABSOLUTE:
            orientation = -model.properties.get("north_axis", 0.0)
        abs_azimuth = get_abs_azimuth(args["azimuth_type"], azimuth, orientation, offset=0.0)
        abs_tilt = get_abs_tilt(args["tilt_type"], args["tilt"], get_roof_pitch(model.surfaces),
                                _site_latitude(model))

        area = args["collector_area"]
        try:
            storage_vol = calc_shw_storage_volume(area, args["storage_vol"])
        except ValueError:
            return runner.register_error(f"Invalid storage volume '{args['storage_vol']}'.")
        system = SolarHotWaterSystem(
            collector_area=area, frta=args["frta"], frul=args["frul"], iam=args["iam"],
            storage_vol=storage_vol, tank_r=args["tank_r"], fluid_type=args["fluid_type"],
            heat_ex_eff=args["heat_ex_eff"], pump_power=calc_shw_pump_power(area, args["pump_power"]),
            azimuth=abs_azimuth, tilt=abs_tilt)

        records = model.properties.get("water_heaters", {})
        added = 0
        for sys_id, record in records.items():
            heater = None
            for obj_type in ("WaterHeater:Mixed", "WaterHeater:Stratified"):
                heater = heater or model.get(obj_type, record.heater)
            if heater is None or not model.has("PlantLoop", record.loop):
                continue
            setpoint = heater.get("Setpoint Temperature Schedule Name") or \
                heater.get("Heater 1 Setpoint Temperature Schedule Name")
            objects = apply_solar_hot_water(model, system, record.loop, heater.name, setpoint,
                                            heater.get("Ambient Temperature Zone Name"),
                                            obj_name=f"{sys_id} solar hot water")
            for obj in objects:
                runner.register_info(f"Added '{obj.name}' ({obj.obj_type}).")
            added += 1

        if added == 0:
            runner.register_warning("Model must have a water heater.")
            return True

        runner.register_value("storage_volume_gal", round(storage_vol, 1))
        runner.register_final_condition(
            f"A {area:g} ft^2 solar water heating system with {storage_vol:.0f} gal of storage "
            f"(azimuth {abs_azimuth:.0f}, tilt {abs_tilt:.1f}) has been added to {added} water heater(s).")
        return True
