"""
HPXML document parsing.

Loads an HPXML file with lxml and exposes the building as typed elements
(see elements.py). Namespaces are stripped on load so element paths can be
written without prefixes.

Usage:
    from resmeasures.hpxml import HPXMLDocument

    doc = HPXMLDocument.load(Path("home.xml"))
    print(doc.building.conditioned_floor_area, len(doc.walls))
"""

from pathlib import Path
from typing import Any, Callable, List, Optional, Union
import logging

from lxml import etree

from ..core.exceptions import MeasureError
from .elements import (
    AirInfiltrationMeasurement,
    Attic,
    AtticFloor,
    AtticRoof,
    AtticWall,
    BuildingConstruction,
    CeilingFan,
    ClothesDryer,
    ClothesWasher,
    CookingRange,
    CoolingSystem,
    Dishwasher,
    Door,
    Ducts,
    Foundation,
    FoundationWall,
    FrameFloor,
    HeatingSystem,
    HeatPump,
    HotWaterDistribution,
    HVACControl,
    HVACDistribution,
    Lighting,
    MiscLoadsSchedule,
    Oven,
    PlugLoad,
    PVSystem,
    Refrigerator,
    RimJoist,
    Skylight,
    Slab,
    VentilationFan,
    Wall,
    WaterFixture,
    WaterHeatingSystem,
    WeatherStation,
    Window,
)

logger = logging.getLogger(__name__)

Element = Any  # lxml.etree._Element

WALL_TYPES = [
    "WoodStud",
    "DoubleWoodStud",
    "ConcreteMasonryUnit",
    "StructurallyInsulatedPanel",
    "InsulatedConcreteForms",
    "SteelFrame",
    "SolidConcrete",
    "StructuralBrick",
    "StrawBale",
    "Stone",
    "LogWall",
]


# =============================================================================
# XPATH HELPERS
# =============================================================================

def _first(el: Optional[Element], path: str) -> Optional[Any]:
    if el is None:
        return None
    found = el.xpath(path)
    if not found:
        return None
    return found[0]


def get_value(el: Optional[Element], path: str, cast: Callable = str) -> Optional[Any]:
    """
    Typed text of the first node matching an XPath, or None.

    Booleans accept "true"/"false" (any case).
    """
    node = _first(el, path)
    if node is None:
        return None
    text = node if isinstance(node, str) else node.text
    if text is None:
        return None
    text = text.strip()
    if cast is bool:
        return text.lower() == "true"
    if cast is int:
        return int(float(text))
    return cast(text)


def get_id(el: Element) -> Optional[str]:
    return get_value(el, "SystemIdentifier/@id")


def has_element(el: Optional[Element], path: str) -> bool:
    return _first(el, path) is not None


def _child_name(el: Optional[Element], path: str) -> Optional[str]:
    """Tag name of the first child under path (e.g. WallType/WoodStud -> 'WoodStud')."""
    parent = _first(el, path)
    if parent is None:
        return None
    for child in parent:
        if isinstance(child.tag, str):
            return child.tag
    return None


def _strip_namespaces(root: Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str):
            el.tag = etree.QName(el).localname
    etree.cleanup_namespaces(root)


# =============================================================================
# ELEMENT PARSERS
# =============================================================================

def _foundation_type(fnd: Element) -> Optional[str]:
    if has_element(fnd, "FoundationType/Basement[Conditioned='true']"):
        return "ConditionedBasement"
    if has_element(fnd, "FoundationType/Basement[Conditioned='false']"):
        return "UnconditionedBasement"
    if has_element(fnd, "FoundationType/Crawlspace[Vented='true']"):
        return "VentedCrawlspace"
    if has_element(fnd, "FoundationType/Crawlspace[Vented='false']"):
        return "UnventedCrawlspace"
    if has_element(fnd, "FoundationType/SlabOnGrade"):
        return "SlabOnGrade"
    if has_element(fnd, "FoundationType/Ambient"):
        return "Ambient"
    return None


def _attic_type(attic: Element) -> Optional[str]:
    if has_element(attic, "AtticType/Attic[Vented='true']"):
        return "VentedAttic"
    if has_element(attic, "AtticType/Attic[Conditioned='true']"):
        return "ConditionedAttic"
    if has_element(attic, "AtticType/Attic"):
        return "UnventedAttic"
    if has_element(attic, "AtticType/CathedralCeiling"):
        return "CathedralCeiling"
    if has_element(attic, "AtticType/FlatRoof"):
        return "FlatRoof"
    return None


def _assembly_r(el: Element) -> Optional[float]:
    return get_value(el, "Insulation/AssemblyEffectiveRValue", float)


def parse_wall(el: Element) -> Wall:
    return Wall(
        id=get_id(el),
        exterior_adjacent_to=get_value(el, "ExteriorAdjacentTo"),
        interior_adjacent_to=get_value(el, "InteriorAdjacentTo"),
        wall_type=_child_name(el, "WallType"),
        area=get_value(el, "Area", float),
        azimuth=get_value(el, "Azimuth", float),
        solar_absorptance=get_value(el, "SolarAbsorptance", float),
        emittance=get_value(el, "Emittance", float),
        insulation_assembly_r_value=_assembly_r(el),
    )


def parse_rim_joist(el: Element) -> RimJoist:
    return RimJoist(
        id=get_id(el),
        exterior_adjacent_to=get_value(el, "ExteriorAdjacentTo"),
        interior_adjacent_to=get_value(el, "InteriorAdjacentTo"),
        area=get_value(el, "Area", float),
        azimuth=get_value(el, "Azimuth", float),
        insulation_assembly_r_value=_assembly_r(el),
    )


def parse_attic(el: Element) -> Attic:
    attic = Attic(
        id=get_id(el),
        attic_type=_attic_type(el),
        attic_specific_leakage_area=get_value(el, "AtticType/Attic/SpecificLeakageArea", float),
        attic_constant_ach_natural=get_value(el, "extension/AtticConstantACHnatural", float),
    )
    for floor in el.xpath("Floors/Floor"):
        attic.floors.append(AtticFloor(
            id=get_id(floor),
            adjacent_to=get_value(floor, "AdjacentTo"),
            area=get_value(floor, "Area", float),
            insulation_assembly_r_value=_assembly_r(floor),
        ))
    for roof in el.xpath("Roofs/Roof"):
        attic.roofs.append(AtticRoof(
            id=get_id(roof),
            area=get_value(roof, "Area", float),
            azimuth=get_value(roof, "Azimuth", float),
            solar_absorptance=get_value(roof, "SolarAbsorptance", float),
            emittance=get_value(roof, "Emittance", float),
            pitch=get_value(roof, "Pitch", float),
            insulation_assembly_r_value=_assembly_r(roof),
            radiant_barrier=bool(get_value(roof, "RadiantBarrier", bool)),
        ))
    for wall in el.xpath("Walls/Wall"):
        attic.walls.append(AtticWall(
            id=get_id(wall),
            adjacent_to=get_value(wall, "AdjacentTo"),
            wall_type=_child_name(wall, "WallType"),
            area=get_value(wall, "Area", float),
            azimuth=get_value(wall, "Azimuth", float),
            solar_absorptance=get_value(wall, "SolarAbsorptance", float),
            emittance=get_value(wall, "Emittance", float),
            insulation_assembly_r_value=_assembly_r(wall),
        ))
    return attic


def parse_foundation(el: Element) -> Foundation:
    fnd = Foundation(
        id=get_id(el),
        foundation_type=_foundation_type(el),
        crawlspace_specific_leakage_area=get_value(el, "FoundationType/Crawlspace/SpecificLeakageArea", float),
    )
    for floor in el.xpath("FrameFloor"):
        fnd.frame_floors.append(FrameFloor(
            id=get_id(floor),
            adjacent_to=get_value(floor, "AdjacentTo"),
            area=get_value(floor, "Area", float),
            insulation_assembly_r_value=_assembly_r(floor),
        ))
    for wall in el.xpath("FoundationWall"):
        fnd.foundation_walls.append(FoundationWall(
            id=get_id(wall),
            adjacent_to=get_value(wall, "AdjacentTo"),
            height=get_value(wall, "Height", float),
            area=get_value(wall, "Area", float),
            thickness=get_value(wall, "Thickness", float),
            depth_below_grade=get_value(wall, "DepthBelowGrade", float),
            insulation_assembly_r_value=_assembly_r(wall),
            azimuth=get_value(wall, "Azimuth", float),
        ))
    for slab in el.xpath("Slab"):
        fnd.slabs.append(Slab(
            id=get_id(slab),
            area=get_value(slab, "Area", float),
            thickness=get_value(slab, "Thickness", float),
            exposed_perimeter=get_value(slab, "ExposedPerimeter", float),
            perimeter_insulation_depth=get_value(slab, "PerimeterInsulationDepth", float),
            under_slab_insulation_width=get_value(slab, "UnderSlabInsulationWidth", float),
            depth_below_grade=get_value(slab, "DepthBelowGrade", float),
            perimeter_insulation_r_value=get_value(
                slab, "PerimeterInsulation/Layer[InstallationType='continuous']/NominalRValue", float),
            under_slab_insulation_r_value=get_value(
                slab, "UnderSlabInsulation/Layer[InstallationType='continuous']/NominalRValue", float),
            carpet_fraction=get_value(slab, "extension/CarpetFraction", float),
            carpet_r_value=get_value(slab, "extension/CarpetRValue", float),
        ))
    return fnd


def parse_window(el: Element) -> Window:
    return Window(
        id=get_id(el),
        area=get_value(el, "Area", float),
        azimuth=get_value(el, "Azimuth", float),
        ufactor=get_value(el, "UFactor", float),
        shgc=get_value(el, "SHGC", float),
        wall_idref=get_value(el, "AttachedToWall/@idref"),
        interior_shading_factor_summer=get_value(el, "InteriorShading/SummerShadingCoefficient", float),
        interior_shading_factor_winter=get_value(el, "InteriorShading/WinterShadingCoefficient", float),
        overhangs_depth=get_value(el, "Overhangs/Depth", float),
        overhangs_distance_to_top_of_window=get_value(el, "Overhangs/DistanceToTopOfWindow", float),
        overhangs_distance_to_bottom_of_window=get_value(el, "Overhangs/DistanceToBottomOfWindow", float),
    )


def parse_skylight(el: Element) -> Skylight:
    return Skylight(
        id=get_id(el),
        area=get_value(el, "Area", float),
        azimuth=get_value(el, "Azimuth", float),
        ufactor=get_value(el, "UFactor", float),
        shgc=get_value(el, "SHGC", float),
        roof_idref=get_value(el, "AttachedToRoof/@idref"),
    )


def parse_door(el: Element) -> Door:
    return Door(
        id=get_id(el),
        wall_idref=get_value(el, "AttachedToWall/@idref"),
        area=get_value(el, "Area", float),
        azimuth=get_value(el, "Azimuth", float),
        r_value=get_value(el, "RValue", float),
    )


def _efficiency(el: Element, prefix: str, units: List[str]):
    for unit in units:
        value = get_value(el, f"{prefix}[Units='{unit}']/Value", float)
        if value is not None:
            return unit, value
    return None, None


def parse_heating_system(el: Element) -> HeatingSystem:
    units, value = _efficiency(el, "AnnualHeatingEfficiency", ["AFUE", "Percent"])
    return HeatingSystem(
        id=get_id(el),
        heating_system_type=_child_name(el, "HeatingSystemType"),
        heating_system_fuel=get_value(el, "HeatingSystemFuel"),
        heating_capacity=get_value(el, "HeatingCapacity", float),
        heating_efficiency_units=units,
        heating_efficiency_value=value,
        fraction_heat_load_served=get_value(el, "FractionHeatLoadServed", float),
        distribution_system_idref=get_value(el, "DistributionSystem/@idref"),
        electric_auxiliary_energy=get_value(el, "ElectricAuxiliaryEnergy", float),
    )


def parse_cooling_system(el: Element) -> CoolingSystem:
    units, value = _efficiency(el, "AnnualCoolingEfficiency", ["SEER", "EER"])
    return CoolingSystem(
        id=get_id(el),
        cooling_system_type=get_value(el, "CoolingSystemType"),
        cooling_system_fuel=get_value(el, "CoolingSystemFuel") or "electricity",
        cooling_capacity=get_value(el, "CoolingCapacity", float),
        cooling_efficiency_units=units,
        cooling_efficiency_value=value,
        fraction_cool_load_served=get_value(el, "FractionCoolLoadServed", float),
        distribution_system_idref=get_value(el, "DistributionSystem/@idref"),
    )


def parse_heat_pump(el: Element) -> HeatPump:
    clg_units, clg_value = _efficiency(el, "AnnualCoolingEfficiency", ["SEER", "EER"])
    htg_units, htg_value = _efficiency(el, "AnnualHeatingEfficiency", ["HSPF", "COP"])
    return HeatPump(
        id=get_id(el),
        heat_pump_type=get_value(el, "HeatPumpType"),
        heat_pump_fuel=get_value(el, "HeatPumpFuel") or "electricity",
        heating_capacity=get_value(el, "HeatingCapacity", float),
        cooling_capacity=get_value(el, "CoolingCapacity", float),
        backup_heating_fuel=get_value(el, "BackupSystemFuel"),
        backup_heating_efficiency_percent=get_value(el, "BackupAnnualHeatingEfficiency[Units='Percent']/Value", float),
        backup_heating_capacity=get_value(el, "BackupHeatingCapacity", float),
        fraction_heat_load_served=get_value(el, "FractionHeatLoadServed", float),
        fraction_cool_load_served=get_value(el, "FractionCoolLoadServed", float),
        cooling_efficiency_units=clg_units,
        cooling_efficiency_value=clg_value,
        heating_efficiency_units=htg_units,
        heating_efficiency_value=htg_value,
        distribution_system_idref=get_value(el, "DistributionSystem/@idref"),
    )


def parse_hvac_distribution(el: Element) -> HVACDistribution:
    if has_element(el, "DistributionSystemType[Other='DSE']"):
        dist_type = "DSE"
    elif has_element(el, "DistributionSystemType/AirDistribution"):
        dist_type = "AirDistribution"
    elif has_element(el, "DistributionSystemType/HydronicDistribution"):
        dist_type = "HydronicDistribution"
    else:
        dist_type = _child_name(el, "DistributionSystemType") or "Other"
    dist = HVACDistribution(
        id=get_id(el),
        distribution_system_type=dist_type,
        annual_heating_dse=get_value(el, "AnnualHeatingDistributionSystemEfficiency", float),
        annual_cooling_dse=get_value(el, "AnnualCoolingDistributionSystemEfficiency", float),
    )
    air = _first(el, "DistributionSystemType/AirDistribution")
    if air is not None:
        leakage = ("DuctLeakageMeasurement[DuctType='{0}']/DuctLeakage"
                   "[Units='CFM25' and TotalOrToOutside='to outside']/Value")
        dist.supply_leakage_cfm25 = get_value(air, leakage.format("supply"), float)
        dist.return_leakage_cfm25 = get_value(air, leakage.format("return"), float)
        for ducts in air.xpath("Ducts"):
            dist.ducts.append(Ducts(
                duct_type=get_value(ducts, "DuctType"),
                duct_insulation_r_value=get_value(ducts, "DuctInsulationRValue", float),
                duct_location=get_value(ducts, "DuctLocation"),
                duct_surface_area=get_value(ducts, "DuctSurfaceArea", float),
            ))
    return dist


def parse_water_heating_system(el: Element) -> WaterHeatingSystem:
    return WaterHeatingSystem(
        id=get_id(el),
        fuel_type=get_value(el, "FuelType"),
        water_heater_type=get_value(el, "WaterHeaterType"),
        location=get_value(el, "Location") or "living space",
        fraction_dhw_load_served=get_value(el, "FractionDHWLoadServed", float) or 1.0,
        tank_volume=get_value(el, "TankVolume", float),
        heating_capacity=get_value(el, "HeatingCapacity", float),
        energy_factor=get_value(el, "EnergyFactor", float),
        uniform_energy_factor=get_value(el, "UniformEnergyFactor", float),
        recovery_efficiency=get_value(el, "RecoveryEfficiency", float),
        energy_factor_multiplier=get_value(el, "extension/EnergyFactorMultiplier", float),
    )


def parse_hot_water_distribution(el: Element) -> HotWaterDistribution:
    if has_element(el, "SystemType/Recirculation"):
        system_type = "Recirculation"
    else:
        system_type = "Standard"
    return HotWaterDistribution(
        system_type=system_type,
        pipe_r_value=get_value(el, "PipeInsulation/PipeRValue", float),
        standard_piping_length=get_value(el, "SystemType/Standard/PipingLength", float),
        recirculation_control_type=get_value(el, "SystemType/Recirculation/ControlType"),
        recirculation_piping_length=get_value(el, "SystemType/Recirculation/RecirculationPipingLoopLength", float),
        recirculation_branch_piping_length=get_value(el, "SystemType/Recirculation/BranchPipingLoopLength", float),
        recirculation_pump_power=get_value(el, "SystemType/Recirculation/PumpPower", float),
        dwhr_facilities_connected=get_value(el, "DrainWaterHeatRecovery/FacilitiesConnected"),
        dwhr_equal_flow=get_value(el, "DrainWaterHeatRecovery/EqualFlow", bool),
        dwhr_efficiency=get_value(el, "DrainWaterHeatRecovery/Efficiency", float),
    )


def parse_pv_system(el: Element) -> PVSystem:
    return PVSystem(
        id=get_id(el),
        module_type=get_value(el, "ModuleType") or "standard",
        array_type=get_value(el, "ArrayType") or "fixed roof mount",
        array_azimuth=get_value(el, "ArrayAzimuth", float),
        array_tilt=get_value(el, "ArrayTilt", float),
        max_power_output=get_value(el, "MaxPowerOutput", float),
        inverter_efficiency=get_value(el, "InverterEfficiency", float),
        system_losses_fraction=get_value(el, "SystemLossesFraction", float),
    )


# =============================================================================
# DOCUMENT
# =============================================================================

class HPXMLDocument:
    """
    Parsed HPXML building.

    Attributes mirror BuildingDetails; lists are empty when the document has
    no elements of that kind and single elements are None when absent.
    """

    def __init__(self, root: Element, path: Optional[Path] = None):
        self.root = root
        self.path = path
        building = _first(root, "/HPXML/Building")
        if building is None:
            raise MeasureError("HPXML document has no Building element.")
        self._building = building
        self._parse(building)

    @classmethod
    def load(cls, path: Union[str, Path]) -> "HPXMLDocument":
        """Parse an HPXML file."""
        path = Path(path)
        tree = etree.parse(str(path))
        root = tree.getroot()
        _strip_namespaces(root)
        logger.debug(f"Loaded HPXML {path}")
        return cls(root, path)

    @classmethod
    def from_string(cls, text: Union[str, bytes]) -> "HPXMLDocument":
        if isinstance(text, str):
            text = text.encode("utf-8")
        root = etree.fromstring(text)
        _strip_namespaces(root)
        return cls(root)

    def xpath(self, path: str) -> List[Element]:
        """Raw XPath query relative to the Building element."""
        return self._building.xpath(path)

    def sum_values(self, path: str) -> float:
        return float(sum(float(v.text) for v in self._building.xpath(path) if v.text))

    def _parse(self, b: Element) -> None:
        details = "BuildingDetails"
        self.eri_version = get_value(self.root, "/HPXML/SoftwareInfo/extension/ERICalculation/Version")

        bc = _first(b, f"{details}/BuildingSummary/BuildingConstruction")
        if bc is None:
            raise MeasureError("HPXML document has no BuildingConstruction element.")
        ncfl = get_value(bc, "NumberofConditionedFloors", int)
        self.building = BuildingConstruction(
            number_of_conditioned_floors=ncfl,
            number_of_conditioned_floors_above_grade=get_value(bc, "NumberofConditionedFloorsAboveGrade", int) or ncfl,
            number_of_bedrooms=get_value(bc, "NumberofBedrooms", int),
            conditioned_floor_area=get_value(bc, "ConditionedFloorArea", float),
            conditioned_building_volume=get_value(bc, "ConditionedBuildingVolume", float),
            number_of_bathrooms=get_value(bc, "NumberofBathrooms", int),
            garage_present=bool(get_value(bc, "GaragePresent", bool)),
        )
        self.number_of_residents = get_value(b, f"{details}/BuildingSummary/BuildingOccupancy/NumberofResidents", float)
        self.shelter_coefficient = get_value(b, f"{details}/BuildingSummary/Site/extension/ShelterCoefficient", float)

        ws = _first(b, f"{details}/ClimateandRiskZones/WeatherStation")
        self.weather_station = None
        if ws is not None:
            self.weather_station = WeatherStation(id=get_id(ws), name=get_value(ws, "Name"), wmo=get_value(ws, "WMO"))
        self.iecc_zone_2006 = get_value(b, f"{details}/ClimateandRiskZones/ClimateZoneIECC[Year='2006']/ClimateZone")

        # Enclosure
        enc = f"{details}/Enclosure"
        self.air_infiltration_measurements = [
            AirInfiltrationMeasurement(
                house_pressure=get_value(m, "HousePressure", float),
                unit_of_measure=get_value(m, "BuildingAirLeakage/UnitofMeasure"),
                air_leakage=get_value(m, "BuildingAirLeakage/AirLeakage", float),
                constant_ach_natural=get_value(m, "extension/ConstantACHnatural", float),
                infiltration_volume=get_value(m, "InfiltrationVolume", float),
            )
            for m in b.xpath(f"{enc}/AirInfiltration/AirInfiltrationMeasurement")
        ]
        self.attics = [parse_attic(e) for e in b.xpath(f"{enc}/Attics/Attic")]
        self.foundations = [parse_foundation(e) for e in b.xpath(f"{enc}/Foundations/Foundation")]
        self.walls = [parse_wall(e) for e in b.xpath(f"{enc}/Walls/Wall")]
        self.rim_joists = [parse_rim_joist(e) for e in b.xpath(f"{enc}/RimJoists/RimJoist")]
        self.windows = [parse_window(e) for e in b.xpath(f"{enc}/Windows/Window")]
        self.skylights = [parse_skylight(e) for e in b.xpath(f"{enc}/Skylights/Skylight")]
        self.doors = [parse_door(e) for e in b.xpath(f"{enc}/Doors/Door")]
        self.disable_natural_ventilation = bool(get_value(b, f"{enc}/extension/DisableNaturalVentilation", bool))

        # HVAC
        hvac = f"{details}/Systems/HVAC"
        self.heating_systems = [parse_heating_system(e) for e in b.xpath(f"{hvac}/HVACPlant/HeatingSystem")]
        self.cooling_systems = [parse_cooling_system(e) for e in b.xpath(f"{hvac}/HVACPlant/CoolingSystem")]
        self.heat_pumps = [parse_heat_pump(e) for e in b.xpath(f"{hvac}/HVACPlant/HeatPump")]
        self.hvac_distributions = [parse_hvac_distribution(e) for e in b.xpath(f"{hvac}/HVACDistribution")]
        ctrl = _first(b, f"{hvac}/HVACControl")
        self.hvac_control = None
        if ctrl is not None:
            self.hvac_control = HVACControl(
                control_type=get_value(ctrl, "ControlType") or "manual thermostat",
                setpoint_temp_heating_season=get_value(ctrl, "SetpointTempHeatingSeason", float),
                setpoint_temp_cooling_season=get_value(ctrl, "SetpointTempCoolingSeason", float),
                ceiling_fan_cooling_setpoint_temp_offset=get_value(
                    ctrl, "extension/CeilingFanSetpointTempCoolingSeasonOffset", float),
            )
        self.use_only_ideal_air_system = bool(get_value(b, f"{hvac}/extension/UseOnlyIdealAirSystem", bool))
        self.load_distribution_scheme = get_value(b, f"{hvac}/extension/LoadDistributionScheme")

        fan = _first(b, f"{details}/Systems/MechanicalVentilation/VentilationFans/"
                        "VentilationFan[UsedForWholeBuildingVentilation='true']")
        self.whole_house_fan = None
        if fan is not None:
            self.whole_house_fan = VentilationFan(
                id=get_id(fan),
                fan_type=get_value(fan, "FanType"),
                rated_flow_rate=get_value(fan, "RatedFlowRate", float),
                hours_in_operation=get_value(fan, "HoursInOperation", float) or 24.0,
                fan_power=get_value(fan, "FanPower", float),
                sensible_recovery_efficiency=get_value(fan, "SensibleRecoveryEfficiency", float),
                total_recovery_efficiency=get_value(fan, "TotalRecoveryEfficiency", float),
                distribution_system_idref=get_value(fan, "AttachedToHVACDistributionSystem/@idref"),
            )

        # Water heating
        wh = f"{details}/Systems/WaterHeating"
        self.water_heating_systems = [parse_water_heating_system(e) for e in b.xpath(f"{wh}/WaterHeatingSystem")]
        dist = _first(b, f"{wh}/HotWaterDistribution")
        self.hot_water_distribution = parse_hot_water_distribution(dist) if dist is not None else None
        self.water_fixtures = [
            WaterFixture(
                id=get_id(e),
                water_fixture_type=get_value(e, "WaterFixtureType"),
                low_flow=bool(get_value(e, "LowFlow", bool)),
            )
            for e in b.xpath(f"{wh}/WaterFixture")
        ]

        # PV
        self.pv_systems = [parse_pv_system(e) for e in b.xpath(f"{details}/Systems/Photovoltaics/PVSystem")]

        # Appliances
        app = f"{details}/Appliances"
        cw = _first(b, f"{app}/ClothesWasher")
        self.clothes_washer = None if cw is None else ClothesWasher(
            id=get_id(cw),
            location=get_value(cw, "Location") or "living space",
            modified_energy_factor=get_value(cw, "ModifiedEnergyFactor", float),
            integrated_modified_energy_factor=get_value(cw, "IntegratedModifiedEnergyFactor", float),
            rated_annual_kwh=get_value(cw, "RatedAnnualkWh", float),
            label_electric_rate=get_value(cw, "LabelElectricRate", float),
            label_gas_rate=get_value(cw, "LabelGasRate", float),
            label_annual_gas_cost=get_value(cw, "LabelAnnualGasCost", float),
            capacity=get_value(cw, "Capacity", float),
        )
        cd = _first(b, f"{app}/ClothesDryer")
        self.clothes_dryer = None if cd is None else ClothesDryer(
            id=get_id(cd),
            location=get_value(cd, "Location") or "living space",
            fuel_type=get_value(cd, "FuelType"),
            energy_factor=get_value(cd, "EnergyFactor", float),
            combined_energy_factor=get_value(cd, "CombinedEnergyFactor", float),
            control_type=get_value(cd, "ControlType"),
        )
        dw = _first(b, f"{app}/Dishwasher")
        self.dishwasher = None if dw is None else Dishwasher(
            id=get_id(dw),
            energy_factor=get_value(dw, "EnergyFactor", float),
            rated_annual_kwh=get_value(dw, "RatedAnnualkWh", float),
            place_setting_capacity=get_value(dw, "PlaceSettingCapacity", float),
        )
        rf = _first(b, f"{app}/Refrigerator")
        self.refrigerator = None if rf is None else Refrigerator(
            id=get_id(rf),
            location=get_value(rf, "Location") or "living space",
            rated_annual_kwh=get_value(rf, "RatedAnnualkWh", float),
        )
        cr = _first(b, f"{app}/CookingRange")
        self.cooking_range = None if cr is None else CookingRange(
            id=get_id(cr),
            fuel_type=get_value(cr, "FuelType"),
            is_induction=get_value(cr, "IsInduction", bool),
        )
        ov = _first(b, f"{app}/Oven")
        self.oven = None if ov is None else Oven(id=get_id(ov), is_convection=get_value(ov, "IsConvection", bool))

        # Lighting
        lt = f"{details}/Lighting"
        group = "LightingGroup[ThirdPartyCertification='{0}' and Location='{1}']/FractionofUnitsInLocation"
        self.lighting = None
        if has_element(b, lt):
            lighting = _first(b, lt)
            self.lighting = Lighting(
                fraction_tier_i_interior=get_value(lighting, group.format("ERI Tier I", "interior"), float),
                fraction_tier_i_exterior=get_value(lighting, group.format("ERI Tier I", "exterior"), float),
                fraction_tier_i_garage=get_value(lighting, group.format("ERI Tier I", "garage"), float),
                fraction_tier_ii_interior=get_value(lighting, group.format("ERI Tier II", "interior"), float),
                fraction_tier_ii_exterior=get_value(lighting, group.format("ERI Tier II", "exterior"), float),
                fraction_tier_ii_garage=get_value(lighting, group.format("ERI Tier II", "garage"), float),
            )
        cf = _first(b, f"{lt}/CeilingFan")
        self.ceiling_fan = None if cf is None else CeilingFan(
            id=get_id(cf),
            efficiency=get_value(cf, "Airflow[FanSpeed='medium']/Efficiency", float),
            quantity=get_value(cf, "Quantity", int),
        )

        # Misc loads
        misc = f"{details}/MiscLoads"
        self.plug_loads = [
            PlugLoad(
                id=get_id(e),
                plug_load_type=get_value(e, "PlugLoadType"),
                kwh_per_year=get_value(e, "Load[Units='kWh/year']/Value", float),
                frac_sensible=get_value(e, "extension/FracSensible", float),
                frac_latent=get_value(e, "extension/FracLatent", float),
            )
            for e in b.xpath(f"{misc}/PlugLoad")
        ]
        self.misc_loads_schedule = MiscLoadsSchedule(
            weekday_fractions=get_value(b, f"{misc}/extension/WeekdayScheduleFractions"),
            weekend_fractions=get_value(b, f"{misc}/extension/WeekendScheduleFractions"),
            monthly_multipliers=get_value(b, f"{misc}/extension/MonthlyScheduleMultipliers"),
        )

    # -------------------------------------------------------------------------
    # Convenience lookups
    # -------------------------------------------------------------------------

    def plug_load(self, plug_load_type: str) -> Optional[PlugLoad]:
        for pl in self.plug_loads:
            if pl.plug_load_type == plug_load_type:
                return pl
        return None

    def hvac_distribution(self, dist_id: Optional[str]) -> Optional[HVACDistribution]:
        for dist in self.hvac_distributions:
            if dist.id == dist_id:
                return dist
        return None

    def all_roofs(self):
        for attic in self.attics:
            for roof in attic.roofs:
                yield attic, roof

    @property
    def has_unconditioned_basement(self) -> bool:
        return any(f.foundation_type == "UnconditionedBasement" for f in self.foundations)

    @property
    def heating_load_fraction(self) -> float:
        return (sum(h.fraction_heat_load_served for h in self.heating_systems) +
                sum(h.fraction_heat_load_served for h in self.heat_pumps))

    @property
    def cooling_load_fraction(self) -> float:
        return (sum(c.fraction_cool_load_served for c in self.cooling_systems) +
                sum(h.fraction_cool_load_served for h in self.heat_pumps))


# =============================================================================
# SCHEMA VALIDATION
# =============================================================================

def validate_against_schema(path: Union[str, Path], schema_path: Union[str, Path]) -> List[str]:
    """
    Validate an HPXML file against its XSD with lxml.

    Unreadable schemas and documents that are not well-formed XML are
    reported as errors rather than raised.

    Returns:
        Schema error messages (empty when valid)
    """
    try:
        schema = etree.XMLSchema(etree.parse(str(schema_path)))
    except (OSError, etree.XMLSyntaxError, etree.XMLSchemaParseError) as e:
        return [f"{path}: Could not load schema {schema_path}: {e}"]
    try:
        doc = etree.parse(str(path))
    except (OSError, etree.XMLSyntaxError) as e:
        return [f"{path}: {e}"]
    if schema.validate(doc):
        return []
    return [f"{path}: line {e.line}: {e.message}" for e in schema.error_log]
