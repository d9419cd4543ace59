"""
Central plant HVAC measure: a shared boiler serving hydronic baseboards.
"""

from typing import Any, Dict, List
import logging

from ..core import constants
from ..hvac.equipment import get_hvac_systems, remove_system
from ..hvac.systems import apply_boiler
from ..measure import Measure, MeasureArgument, MeasureRunner
from ..model import Model, ModelObject

logger = logging.getLogger(__name__)

CENTRAL_ID = "Central"
CENTRAL_PUMP = "Central pump"
CENTRAL_BOILER_AFUE = 0.8


class CentralBoilerBaseboards(Measure):
    """Replace the heating systems with a central boiler on a hot water loop."""

    name = "Set Residential Central System Boiler Baseboards"
    description = ("Removes any existing heating equipment and adds a central hot water boiler serving "
                   "baseboards in the living zone.")

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("central_boiler_system_type", "choice", default=constants.BOILER_TYPE_FORCED_DRAFT,
                            choices=(constants.BOILER_TYPE_FORCED_DRAFT, constants.BOILER_TYPE_STEAM),
                            display_name="Central Boiler System Type",
                            description="The system type of the central boiler."),
            MeasureArgument("central_boiler_fuel_type", "choice", default=constants.FUEL_GAS,
                            choices=(constants.FUEL_GAS, constants.FUEL_OIL, constants.FUEL_PROPANE,
                                     constants.FUEL_ELECTRIC),
                            display_name="Central Boiler Fuel Type",
                            description="The fuel type of the central boiler."),
            MeasureArgument("has_hvac_flue", "boolean", default=True,
                            display_name="Air Leakage: Has Open HVAC Flue",
                            description="Specifies whether the building has an open flue associated with the "
                                        "HVAC system."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        if not model.spaces:
            return runner.register_error("No building geometry has been defined.")
        model.properties["has_hvac_flue"] = args["has_hvac_flue"]

        for sys_id, record in list(get_hvac_systems(model).items()):
            if record.is_heating and remove_system(model, sys_id):
                runner.register_info(f"Removed '{sys_id}' ({record.system_type}).")

        boiler_type = args["central_boiler_system_type"]
        record = apply_boiler(model, CENTRAL_ID, args["central_boiler_fuel_type"], CENTRAL_BOILER_AFUE,
                              None, 1.0, boiler_type=boiler_type)
        runner.register_info(f"Added '{record.plant_loops[0]}' to model.")

        pump = self._rename_pump(model, record)
        if boiler_type == constants.BOILER_TYPE_STEAM:
            pump.set("Design Power Consumption", 0.0)
        self._add_pump_reporting(model, record, pump)

        for sim_control in model.objects_of("SimulationControl"):
            sim_control.set("Run Simulation for Sizing Periods", "Yes")

        runner.register_final_condition(f"A central {args['central_boiler_fuel_type']} boiler ({boiler_type}) "
                                        f"serving baseboards has been added to the model.")
        return True

    @staticmethod
    def _rename_pump(model: Model, record) -> ModelObject:
        for i, (obj_type, name) in enumerate(record.objects):
            if obj_type == "Pump:VariableSpeed":
                pump = model.get(obj_type, name)
                model.remove(pump)
                pump.name = CENTRAL_PUMP
                record.objects[i] = (obj_type, CENTRAL_PUMP)
                return model.add(pump)
        raise ValueError("Central boiler loop has no pump.")

    @staticmethod
    def _add_pump_reporting(model: Model, record, pump: ModelObject) -> None:
        """Report the shared pump's electricity as its own meter."""
        sensor = record.add(model, ModelObject("EnergyManagementSystem:Sensor", "Central_pump s", {
            "Output:Variable or Output:Meter Index Key Name": pump.name,
            "Output:Variable or Output:Meter Name": "Pump Electricity Energy",
        }))
        program = record.add(model, ModelObject("EnergyManagementSystem:Program", "Central pumps program", {
            "Program Line 1": f"Set central_pumps_h = {sensor.name}",
        }))
        record.add(model, ModelObject("EnergyManagementSystem:OutputVariable",
                                      "Central htg pump:Pumps:Electricity", {
            "EMS Variable Name": "central_pumps_h",
            "Type of Data in Variable": "Summed",
            "Update Frequency": "SystemTimestep",
            "EMS Program or Subroutine Name": program.name,
            "Units": "J",
        }))
        record.add(model, ModelObject("EnergyManagementSystem:ProgramCallingManager",
                                      "Central pump program calling manager", {
            "EnergyPlus Model Calling Point": "EndOfSystemTimestepBeforeHVACReporting",
            "Program Name 1": program.name,
        }))
