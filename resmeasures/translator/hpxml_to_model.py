"""
HPXML to simulation model translator.

Reads an HPXML building description and its weather file and builds the
whole model in a fixed order: simulation parameters, enclosure, occupants,
hot water and appliances, HVAC, plug loads and lighting, airflow, sizing,
auxiliary energy, PV and output variables.

Usage:
    from resmeasures.translator import HPXMLTranslator

    model = Model()
    ok, runner = HPXMLTranslator().apply(model, {
        "hpxml_path": "/path/to/home.xml",
        "weather_dir": "/path/to/weather",
        "osm_output_path": "/tmp/in.idf",
    })
"""

from pathlib import Path
import shutil
from typing import Any, Dict, List, Optional
import logging
import traceback

from ..airflow import apply_airflow, apply_duct_losses
from ..core.exceptions import MeasureError
from ..envelope.enclosure import WALL_STORY_HEIGHT, EnclosureBuilder
from ..generation import apply_pv_systems
from ..hpxml import HPXMLDocument, validate_against_schema
from ..hvac import (
    SetpointInputs,
    add_hvac,
    apply_ceiling_fans,
    apply_fuel_eae,
    apply_load_distribution,
    apply_setpoints,
    apply_sizing,
)
from ..loads import (
    add_appliances,
    add_lighting,
    add_mels,
    calc_lighting_energy,
    get_occupancy_default_num,
    get_reference_fractions,
    process_occupants,
)
from ..measure import Measure, MeasureArgument, MeasureRunner
from ..model import Model, ModelObject
from ..waterheating import HotWaterSystemInputs, add_water_heaters, apply_hot_water, set_mains_temperature
from ..weather import EPWFile, WeatherStations, WeatherStationError
from .output_vars import add_building_output_variables

logger = logging.getLogger(__name__)


class HPXMLTranslator(Measure):
    """Translates an HPXML file into a simulation model."""

    name = "HPXML Translator"
    description = "Translates HPXML file to a simulation model"

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("hpxml_path", "path", required=True, display_name="HPXML File Path",
                            description="Absolute (or relative) path of the HPXML file."),
            MeasureArgument("weather_dir", "path", required=True, display_name="Weather Directory",
                            description="Absolute path of the weather directory."),
            MeasureArgument("schemas_dir", "path", required=False, display_name="HPXML Schemas Directory",
                            description="Absolute path of the hpxml schemas directory."),
            MeasureArgument("epw_output_path", "path", required=False, display_name="EPW Output File Path",
                            description="Absolute (or relative) path of the output EPW file."),
            MeasureArgument("osm_output_path", "path", required=False, display_name="Model Output File Path",
                            description="Absolute (or relative) path of the output model file."),
            MeasureArgument("skip_validation", "boolean", required=True, default=False,
                            display_name="Skip HPXML validation",
                            description="If true, only checks for and reports HPXML validation issues if an "
                                        "error occurs during processing."),
            MeasureArgument("map_tsv_dir", "path", required=False, display_name="Map TSV Directory",
                            description="Creates TSV files in the specified directory that map HPXML object "
                                        "names to model object names."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        hpxml_path = Path(args["hpxml_path"]).expanduser().resolve()
        if not hpxml_path.is_file() or hpxml_path.suffix.lower() != ".xml":
            runner.register_error(f"'{hpxml_path}' does not exist or is not an .xml file.")
            return False

        skip_validation = args["skip_validation"]
        schemas_dir = args.get("schemas_dir")
        if not skip_validation and not self.validate_hpxml(runner, hpxml_path, schemas_dir):
            return False

        try:
            hpxml = HPXMLDocument.load(hpxml_path)
            epw_path = self.get_epw_path(hpxml, args["weather_dir"])
            if args.get("epw_output_path"):
                shutil.copy(epw_path, args["epw_output_path"])
            epw = EPWFile.load(epw_path)
            builder = ModelBuilder(model, hpxml, epw, runner)
            if not builder.create(args.get("map_tsv_dir")):
                runner.register_error("Unsuccessful creation of model.")
                return False
        except Exception as e:
            if skip_validation:
                # Report any schema problems that may explain the failure
                self.validate_hpxml(runner, hpxml_path, schemas_dir)
            runner.register_error(f"{e}\n{traceback.format_exc()}")
            return False

        if args.get("osm_output_path"):
            model.write(Path(args["osm_output_path"]))
            runner.register_info(f"Wrote file: {args['osm_output_path']}")
        return True

    @staticmethod
    def validate_hpxml(runner: MeasureRunner, hpxml_path: Path, schemas_dir: Optional[str]) -> bool:
        """Validate against HPXML.xsd in the schemas directory, when one is given."""
        if schemas_dir is None:
            runner.register_warning(f"{hpxml_path}: No schema dir provided, no HPXML validation performed.")
            return True
        schemas_dir = Path(schemas_dir)
        if not schemas_dir.is_dir():
            runner.register_error(f"'{schemas_dir}' does not exist.")
            return False
        errors = validate_against_schema(hpxml_path, schemas_dir / "HPXML.xsd")
        for error in errors:
            runner.register_error(error)
        if errors:
            return False
        runner.register_info(f"{hpxml_path}: Validated against HPXML schema.")
        return True

    @staticmethod
    def get_epw_path(hpxml: HPXMLDocument, weather_dir: str) -> Path:
        if hpxml.weather_station is None or hpxml.weather_station.wmo is None:
            raise MeasureError("HPXML document has no weather station WMO.")
        try:
            return WeatherStations(weather_dir).epw_path(hpxml.weather_station.wmo)
        except WeatherStationError as e:
            raise MeasureError(str(e)) from e


class ModelBuilder:
    """
    Builds the model for one parsed HPXML building.

    Each step raises MeasureError (or ValueError) on invalid input; steps that
    register their own errors return False.
    """

    def __init__(self, model: Model, hpxml: HPXMLDocument, epw: EPWFile, runner: MeasureRunner):
        self.model = model
        self.hpxml = hpxml
        self.epw = epw
        self.runner = runner
        b = hpxml.building
        self.cfa = b.conditioned_floor_area
        self.cvolume = b.conditioned_building_volume
        self.ncfl = b.number_of_conditioned_floors
        self.ncfl_ag = b.number_of_conditioned_floors_above_grade
        self.nbeds = b.number_of_bedrooms
        self.has_uncond_bsmnt = hpxml.has_unconditioned_basement
        self.setpoints: Optional[SetpointInputs] = None

    def create(self, map_tsv_dir: Optional[str] = None) -> bool:
        if self.hpxml.eri_version is None:
            raise MeasureError("Could not find ERI Version")
        self.add_simulation_params()
        self.model.properties.update({"cfa": self.cfa, "nbeds": self.nbeds, "ncfl": self.ncfl})

        if not EnclosureBuilder(self.model, self.hpxml, self.runner).build():
            return False
        self.add_num_bedrooms_occupants()
        self.add_hot_water_and_appliances()
        self.add_hvac()
        self.add_mels_and_lighting()
        self.add_airflow()
        self.add_hvac_sizing()
        apply_fuel_eae(self.model, self.hpxml)
        apply_pv_systems(self.model, self.hpxml)
        add_building_output_variables(self.model, map_tsv_dir)
        logger.info(f"Model created: {len(self.model)} objects")
        return True

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def add_simulation_params(self) -> None:
        m = self.model
        h = self.epw.header
        m.add(ModelObject("SimulationControl", "simulation control", {
            "Do Zone Sizing Calculation": "No",
            "Do System Sizing Calculation": "No",
            "Do Plant Sizing Calculation": "No",
            "Run Simulation for Sizing Periods": "No",
            "Run Simulation for Weather File Run Periods": "Yes",
        }))
        m.add(ModelObject("Timestep", "timestep", {"Number of Timesteps per Hour": 1}))
        m.add(ModelObject("ShadowCalculation", "shadow calculation", {
            "Shading Calculation Update Frequency": 20,
            "Maximum Figures in Shadow Overlap Calculations": 200,
        }))
        m.add(ModelObject("SurfaceConvectionAlgorithm:Outside", "outside convection", {"Algorithm": "DOE-2"}))
        m.add(ModelObject("SurfaceConvectionAlgorithm:Inside", "inside convection", {"Algorithm": "TARP"}))
        m.add(ModelObject("ZoneCapacitanceMultiplier:ResearchSpecial", "zone capacitance multiplier", {
            "Temperature Capacity Multiplier": 1.0,
            "Humidity Capacity Multiplier": 15.0,
            "Carbon Dioxide Capacity Multiplier": 1.0,
        }))
        m.add(ModelObject("ConvergenceLimits", "convergence limits", {"Minimum System Timestep": 0}))
        m.add(ModelObject("Site:Location", f"{h.city} {h.state} {h.country}".strip(), {
            "Latitude": h.latitude,
            "Longitude": h.longitude,
            "Time Zone": h.timezone,
            "Elevation": h.elevation,
        }))
        m.add(ModelObject("RunPeriod", "annual", {
            "Begin Month": 1,
            "Begin Day of Month": 1,
            "End Month": 12,
            "End Day of Month": 31,
            "Use Weather File Holidays and Special Days": "Yes",
            "Use Weather File Daylight Saving Period": "Yes",
        }))

    def add_num_bedrooms_occupants(self) -> None:
        self.model.properties["num_bedrooms"] = self.nbeds
        self.model.properties["num_bathrooms"] = self.hpxml.building.number_of_bathrooms
        num_occ = self.hpxml.number_of_residents
        if num_occ is None:
            num_occ = get_occupancy_default_num(self.nbeds)
        process_occupants(self.model, num_occ)
        self.model.properties["num_occupants"] = num_occ

    def add_hot_water_and_appliances(self) -> None:
        set_mains_temperature(self.model, self.epw.annual_avg_drybulb, self.epw.max_monthly_avg_drybulb_diff,
                              self.epw.header.latitude)
        appliances = add_appliances(self.model, self.hpxml, self.nbeds)
        if not self.hpxml.water_heating_systems:
            logger.info("No water heating systems")
            return
        inputs = HotWaterSystemInputs.from_hpxml(self.hpxml, self.cfa, self.ncfl)
        ec_adj = inputs.ec_adj(self.has_uncond_bsmnt, self.cfa, self.ncfl)
        loop_fracs = add_water_heaters(self.model, self.hpxml, self.nbeds, ec_adj)
        apply_hot_water(self.model, inputs, self.nbeds, self.cfa, self.ncfl, self.has_uncond_bsmnt,
                        appliances, loop_fracs)

    def add_hvac(self) -> None:
        add_hvac(self.model, self.hpxml)
        self.setpoints = SetpointInputs.from_hpxml(self.hpxml)
        monthly_temps = self.epw.monthly_avg_drybulb
        apply_setpoints(self.model, self.setpoints, monthly_temps)
        fan = self.hpxml.ceiling_fan
        if fan is not None:
            apply_ceiling_fans(self.model, self.nbeds, monthly_temps, fan.efficiency, fan.quantity)
        apply_load_distribution(self.model, self.hpxml.load_distribution_scheme)

    def add_mels_and_lighting(self) -> None:
        add_mels(self.model, self.hpxml, self.cfa, self.nbeds)

        fractions = list(get_reference_fractions())
        lighting = self.hpxml.lighting
        if lighting is not None:
            given = [lighting.fraction_tier_i_interior, lighting.fraction_tier_i_exterior,
                     lighting.fraction_tier_i_garage, lighting.fraction_tier_ii_interior,
                     lighting.fraction_tier_ii_exterior, lighting.fraction_tier_ii_garage]
            fractions = [f if g is None else g for f, g in zip(fractions, given)]
        int_kwh, ext_kwh, grg_kwh = calc_lighting_energy(self.cfa, self.hpxml.building.garage_present, *fractions)
        add_lighting(self.model, int_kwh, ext_kwh, grg_kwh, self.epw.header.latitude)

    def add_airflow(self) -> None:
        heating_setpoint = self.setpoints.heating_setpoint if self.setpoints else 68.0
        height = WALL_STORY_HEIGHT * self.ncfl_ag
        results = apply_airflow(self.model, self.hpxml, self.cvolume, self.ncfl_ag, height, heating_setpoint)
        self.runner.register_value("natural_ach", round(results["natural_ach"], 4))

    def add_hvac_sizing(self) -> None:
        loads = apply_sizing(self.model, self.epw, self.nbeds)
        self.runner.register_value("design_heating_load_btuh", round(loads.heating, 1))
        self.runner.register_value("design_cooling_load_btuh", round(loads.cooling, 1))
        apply_duct_losses(self.model, self.epw)
