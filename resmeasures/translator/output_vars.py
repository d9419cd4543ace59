"""
Output variables for HVAC and water heating end uses, and the TSV files
that map HPXML system ids to the model objects reporting them.
"""

import csv
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging

from ..core.exceptions import MeasureError
from ..hvac.equipment import get_hvac_systems
from ..model import Model, ModelObject

logger = logging.getLogger(__name__)

MAP_HEADER = ["HPXML Name", "E+ Name(s)"]
REPORTING_FREQUENCY = "runperiod"

_HTG_ELEC = ["Heating Coil Electricity Energy", "Heating Coil Crankcase Heater Electricity Energy",
             "Heating Coil Defrost Electricity Energy"]
_FUELS = ["NaturalGas", "Propane", "FuelOilNo1"]

SPACE_HEATING_ELECTRICITY = {
    "Coil:Heating:DX:SingleSpeed": _HTG_ELEC,
    "Coil:Heating:DX:MultiSpeed": _HTG_ELEC,
    "Coil:Heating:Electric": _HTG_ELEC,
    "Coil:Heating:WaterToAirHeatPump:EquationFit": _HTG_ELEC,
    "Coil:Heating:Fuel": [],
    "ZoneHVAC:Baseboard:Convective:Electric": ["Baseboard Electricity Energy"],
    "Boiler:HotWater": ["Boiler Electricity Energy"],
    "Fan:OnOff": ["Fan Electricity Energy"],
}

SPACE_HEATING_FUEL = {
    "Coil:Heating:DX:SingleSpeed": [],
    "Coil:Heating:DX:MultiSpeed": [],
    "Coil:Heating:Electric": [],
    "Coil:Heating:WaterToAirHeatPump:EquationFit": [],
    "Coil:Heating:Fuel": [f"Heating Coil {f} Energy" for f in _FUELS],
    "ZoneHVAC:Baseboard:Convective:Electric": [],
    "Boiler:HotWater": [f"Boiler {f} Energy" for f in _FUELS],
    "Fan:OnOff": [],
}

SPACE_HEATING_LOAD = {
    "Coil:Heating:DX:SingleSpeed": ["Heating Coil Heating Energy"],
    "Coil:Heating:DX:MultiSpeed": ["Heating Coil Heating Energy"],
    "Coil:Heating:Electric": ["Heating Coil Heating Energy"],
    "Coil:Heating:WaterToAirHeatPump:EquationFit": ["Heating Coil Heating Energy"],
    "Coil:Heating:Fuel": ["Heating Coil Heating Energy"],
    "ZoneHVAC:Baseboard:Convective:Electric": ["Baseboard Total Heating Energy"],
    "Boiler:HotWater": ["Boiler Heating Energy"],
    "Fan:OnOff": ["Fan Electricity Energy"],
}

SPACE_COOLING_ELECTRICITY = {
    "Coil:Cooling:DX:SingleSpeed": ["Cooling Coil Electricity Energy",
                                    "Cooling Coil Crankcase Heater Electricity Energy"],
    "Coil:Cooling:DX:MultiSpeed": ["Cooling Coil Electricity Energy",
                                   "Cooling Coil Crankcase Heater Electricity Energy"],
    "Coil:Cooling:WaterToAirHeatPump:EquationFit": ["Cooling Coil Electricity Energy",
                                                    "Cooling Coil Crankcase Heater Electricity Energy"],
    "Fan:OnOff": ["Fan Electricity Energy"],
}

SPACE_COOLING_LOAD = {
    "Coil:Cooling:DX:SingleSpeed": ["Cooling Coil Total Cooling Energy"],
    "Coil:Cooling:DX:MultiSpeed": ["Cooling Coil Total Cooling Energy"],
    "Coil:Cooling:WaterToAirHeatPump:EquationFit": ["Cooling Coil Total Cooling Energy"],
    "Fan:OnOff": ["Fan Electricity Energy"],
}

_WH_ELEC = ["Water Heater Electricity Energy", "Water Heater Off Cycle Parasitic Electricity Energy",
            "Water Heater On Cycle Parasitic Electricity Energy"]

WATER_HEATING_ELECTRICITY = {
    "WaterHeater:Mixed": _WH_ELEC,
    "WaterHeater:Stratified": _WH_ELEC,
    "Coil:WaterHeating:AirToWaterHeatPump:Wrapped": ["Cooling Coil Water Heating Electricity Energy"],
    "WaterUse:Equipment": [],
    "ElectricEquipment": [],
}

WATER_HEATING_ELECTRICITY_RECIRC_PUMP = {
    "WaterHeater:Mixed": [],
    "WaterHeater:Stratified": [],
    "Coil:WaterHeating:AirToWaterHeatPump:Wrapped": [],
    "WaterUse:Equipment": [],
    "ElectricEquipment": ["Electric Equipment Electricity Energy"],
}

WATER_HEATING_FUEL = {
    "WaterHeater:Mixed": [f"Water Heater {f} Energy" for f in _FUELS],
    "WaterHeater:Stratified": [f"Water Heater {f} Energy" for f in _FUELS],
    "Coil:WaterHeating:AirToWaterHeatPump:Wrapped": [],
    "WaterUse:Equipment": [],
    "ElectricEquipment": [],
}

WATER_HEATING_LOAD = {
    "WaterHeater:Mixed": [],
    "WaterHeater:Stratified": [],
    "Coil:WaterHeating:AirToWaterHeatPump:Wrapped": [],
    "WaterUse:Equipment": ["Water Use Equipment Heating Energy"],
    "ElectricEquipment": [],
}

Mapping = Dict[str, List[Tuple[str, str]]]


# =============================================================================
# System -> object mappings
# =============================================================================

def get_hvac_mappings(model: Model) -> Tuple[Mapping, Mapping]:
    """
    Heating and cooling objects of every HVAC system.

    Returns:
        (heating mapping, cooling mapping): sys_id -> [(object type, name)]
    """
    htg: Mapping = {}
    clg: Mapping = {}
    for sys_id, rec in get_hvac_systems(model).items():
        htg[sys_id] = []
        clg[sys_id] = []
        for obj_type, name in rec.objects:
            if obj_type in SPACE_HEATING_LOAD and obj_type != "Fan:OnOff":
                htg[sys_id].append((obj_type, name))
            elif obj_type in SPACE_COOLING_LOAD and obj_type != "Fan:OnOff":
                clg[sys_id].append((obj_type, name))
            elif obj_type == "Fan:OnOff":
                # Heat pumps share one fan across both modes
                if rec.is_heating:
                    htg[sys_id].append((obj_type, name))
                if rec.is_cooling:
                    clg[sys_id].append((obj_type, name))
    return htg, clg


def get_water_heating_mapping(model: Model) -> Mapping:
    """Water heater, heat pump coil, recirculation pump and draws per water heating system."""
    dhw: Mapping = {}
    recirc = [o for o in model.objects_of("ElectricEquipment") if o.name.startswith("recirculation pump")]
    for sys_id, record in model.properties.get("water_heaters", {}).items():
        objects = []
        for obj_type in ("WaterHeater:Mixed", "WaterHeater:Stratified",
                         "Coil:WaterHeating:AirToWaterHeatPump:Wrapped"):
            objects += [(obj_type, n) for n in record.objects if model.has(obj_type, n)]
        objects += [(o.obj_type, o.name) for o in recirc]
        objects += [(o.obj_type, o.name) for o in model.objects_of("WaterUse:Equipment")
                    if o.get("Plant Loop Name") == record.loop]
        dhw[sys_id] = objects
    return dhw


# =============================================================================
# Output variables and TSVs
# =============================================================================

def add_output_variables(model: Model, variables: Dict[str, List[str]],
                         objects: Optional[List[Tuple[str, str]]]) -> List[ModelObject]:
    """
    Output:Variable per variable name and object.

    Raises:
        MeasureError: For an object type the variable set does not cover
    """
    added = []
    if objects is None:
        for var in variables.get(None, []):
            added.append(_add_output_variable(model, "*", var))
        return added
    for obj_type, name in objects:
        if obj_type not in variables:
            raise MeasureError(f"Unexpected object type {obj_type}.")
        for var in variables[obj_type]:
            added.append(_add_output_variable(model, name, var))
    return added


def _add_output_variable(model: Model, key: str, var: str) -> ModelObject:
    name = f"{key}|{var}"
    existing = model.get("Output:Variable", name)
    if existing is not None:
        return existing
    return model.add(ModelObject("Output:Variable", name, {
        "Key Value": key,
        "Variable Name": var,
        "Reporting Frequency": REPORTING_FREQUENCY,
    }))


def write_mapping(mapping: Mapping, path: Union[str, Path]) -> Path:
    """
    Write a tab separated HPXML id -> model object names file. Systems with
    no objects are left out.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="") as f:
        writer = csv.writer(f, delimiter="\t")
        writer.writerow(MAP_HEADER)
        for sys_id, objects in mapping.items():
            if objects:
                writer.writerow([sys_id] + [name for _, name in objects])
    logger.debug(f"Wrote {path}")
    return path


def add_building_output_variables(model: Model, map_tsv_dir: Optional[Union[str, Path]] = None) -> int:
    """
    Add end use output variables for every HVAC and water heating system
    and optionally write the mapping TSVs.

    Returns:
        Number of output variables in the model
    """
    htg, clg = get_hvac_mappings(model)
    dhw = get_water_heating_mapping(model)

    for objects in htg.values():
        for variables in (SPACE_HEATING_ELECTRICITY, SPACE_HEATING_FUEL, SPACE_HEATING_LOAD):
            add_output_variables(model, variables, objects)
    for objects in clg.values():
        for variables in (SPACE_COOLING_ELECTRICITY, SPACE_COOLING_LOAD):
            add_output_variables(model, variables, objects)
    for objects in dhw.values():
        for variables in (WATER_HEATING_ELECTRICITY, WATER_HEATING_ELECTRICITY_RECIRC_PUMP,
                          WATER_HEATING_FUEL, WATER_HEATING_LOAD):
            add_output_variables(model, variables, objects)

    if map_tsv_dir is not None:
        map_tsv_dir = Path(map_tsv_dir)
        write_mapping(htg, map_tsv_dir / "map_hvac_heating.tsv")
        write_mapping(clg, map_tsv_dir / "map_hvac_cooling.tsv")
        write_mapping(dhw, map_tsv_dir / "map_water_heating.tsv")
    count = len(model.objects_of("Output:Variable"))
    logger.info(f"Added {count} output variables")
    return count
