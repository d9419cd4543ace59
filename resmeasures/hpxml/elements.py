"""
Typed views of HPXML building elements.

All values are in HPXML (IP) units: ft, ft^2, Btu/hr, hr-ft^2-F/Btu, F.
Fields left as None were absent from the document.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class BuildingConstruction:
    """BuildingSummary/BuildingConstruction."""
    number_of_conditioned_floors: int
    number_of_conditioned_floors_above_grade: int
    number_of_bedrooms: int
    conditioned_floor_area: float
    conditioned_building_volume: float
    number_of_bathrooms: Optional[int] = None
    garage_present: bool = False


@dataclass
class WeatherStation:
    id: Optional[str]
    name: Optional[str]
    wmo: Optional[str]


@dataclass
class AirInfiltrationMeasurement:
    house_pressure: Optional[float] = None
    unit_of_measure: Optional[str] = None
    air_leakage: Optional[float] = None
    constant_ach_natural: Optional[float] = None
    infiltration_volume: Optional[float] = None


@dataclass
class AtticFloor:
    id: str
    adjacent_to: str
    area: float
    insulation_assembly_r_value: float


@dataclass
class AtticRoof:
    id: str
    area: float
    azimuth: Optional[float]
    solar_absorptance: float
    emittance: float
    pitch: float
    insulation_assembly_r_value: float
    radiant_barrier: bool = False


@dataclass
class AtticWall:
    id: str
    adjacent_to: str
    wall_type: str
    area: float
    azimuth: Optional[float]
    solar_absorptance: float
    emittance: float
    insulation_assembly_r_value: float


@dataclass
class Attic:
    id: str
    attic_type: str
    attic_specific_leakage_area: Optional[float] = None
    attic_constant_ach_natural: Optional[float] = None
    floors: List[AtticFloor] = field(default_factory=list)
    roofs: List[AtticRoof] = field(default_factory=list)
    walls: List[AtticWall] = field(default_factory=list)


@dataclass
class FrameFloor:
    id: str
    adjacent_to: str
    area: float
    insulation_assembly_r_value: float


@dataclass
class FoundationWall:
    id: str
    adjacent_to: str
    height: float
    area: float
    thickness: float
    depth_below_grade: float
    insulation_assembly_r_value: Optional[float]
    azimuth: Optional[float] = None


@dataclass
class Slab:
    id: str
    area: float
    thickness: float
    exposed_perimeter: float
    perimeter_insulation_depth: float
    under_slab_insulation_width: float
    depth_below_grade: float
    perimeter_insulation_r_value: float
    under_slab_insulation_r_value: float
    carpet_fraction: float = 0.0
    carpet_r_value: float = 0.0


@dataclass
class Foundation:
    id: str
    foundation_type: str
    crawlspace_specific_leakage_area: Optional[float] = None
    frame_floors: List[FrameFloor] = field(default_factory=list)
    foundation_walls: List[FoundationWall] = field(default_factory=list)
    slabs: List[Slab] = field(default_factory=list)


@dataclass
class Wall:
    id: str
    exterior_adjacent_to: str
    interior_adjacent_to: str
    wall_type: str
    area: float
    azimuth: Optional[float]
    solar_absorptance: float
    emittance: float
    insulation_assembly_r_value: float


@dataclass
class RimJoist:
    id: str
    exterior_adjacent_to: str
    interior_adjacent_to: str
    area: float
    azimuth: Optional[float]
    insulation_assembly_r_value: float
    solar_absorptance: float = 0.75
    emittance: float = 0.9


@dataclass
class Window:
    id: str
    area: float
    azimuth: float
    ufactor: float
    shgc: float
    wall_idref: str
    interior_shading_factor_summer: Optional[float] = None
    interior_shading_factor_winter: Optional[float] = None
    overhangs_depth: Optional[float] = None
    overhangs_distance_to_top_of_window: Optional[float] = None
    overhangs_distance_to_bottom_of_window: Optional[float] = None


@dataclass
class Skylight:
    id: str
    area: float
    azimuth: float
    ufactor: float
    shgc: float
    roof_idref: str


@dataclass
class Door:
    id: str
    wall_idref: str
    area: Optional[float]
    azimuth: Optional[float]
    r_value: float


@dataclass
class HeatingSystem:
    id: str
    heating_system_type: str
    heating_system_fuel: str
    heating_capacity: Optional[float]
    heating_efficiency_units: Optional[str]
    heating_efficiency_value: Optional[float]
    fraction_heat_load_served: float
    distribution_system_idref: Optional[str] = None
    electric_auxiliary_energy: Optional[float] = None


@dataclass
class CoolingSystem:
    id: str
    cooling_system_type: str
    cooling_system_fuel: str
    cooling_capacity: Optional[float]
    cooling_efficiency_units: Optional[str]
    cooling_efficiency_value: Optional[float]
    fraction_cool_load_served: float
    distribution_system_idref: Optional[str] = None


@dataclass
class HeatPump:
    id: str
    heat_pump_type: str
    heat_pump_fuel: str
    heating_capacity: Optional[float]
    cooling_capacity: Optional[float]
    backup_heating_fuel: Optional[str]
    backup_heating_efficiency_percent: Optional[float]
    backup_heating_capacity: Optional[float]
    fraction_heat_load_served: float
    fraction_cool_load_served: float
    cooling_efficiency_units: Optional[str]
    cooling_efficiency_value: Optional[float]
    heating_efficiency_units: Optional[str]
    heating_efficiency_value: Optional[float]
    distribution_system_idref: Optional[str] = None


@dataclass
class HVACControl:
    control_type: str
    setpoint_temp_heating_season: Optional[float] = None
    setpoint_temp_cooling_season: Optional[float] = None
    ceiling_fan_cooling_setpoint_temp_offset: Optional[float] = None


@dataclass
class Ducts:
    duct_type: str
    duct_insulation_r_value: float
    duct_location: Optional[str]
    duct_surface_area: float


@dataclass
class HVACDistribution:
    id: str
    distribution_system_type: str
    annual_heating_dse: Optional[float] = None
    annual_cooling_dse: Optional[float] = None
    supply_leakage_cfm25: Optional[float] = None
    return_leakage_cfm25: Optional[float] = None
    ducts: List[Ducts] = field(default_factory=list)


@dataclass
class VentilationFan:
    id: str
    fan_type: str
    rated_flow_rate: float
    hours_in_operation: float
    fan_power: float
    sensible_recovery_efficiency: Optional[float] = None
    total_recovery_efficiency: Optional[float] = None
    distribution_system_idref: Optional[str] = None


@dataclass
class WaterHeatingSystem:
    id: str
    fuel_type: Optional[str]
    water_heater_type: str
    location: str
    fraction_dhw_load_served: float
    tank_volume: Optional[float] = None
    heating_capacity: Optional[float] = None
    energy_factor: Optional[float] = None
    uniform_energy_factor: Optional[float] = None
    recovery_efficiency: Optional[float] = None
    energy_factor_multiplier: Optional[float] = None


@dataclass
class HotWaterDistribution:
    system_type: str
    pipe_r_value: float = 0.0
    standard_piping_length: Optional[float] = None
    recirculation_control_type: Optional[str] = None
    recirculation_piping_length: Optional[float] = None
    recirculation_branch_piping_length: Optional[float] = None
    recirculation_pump_power: Optional[float] = None
    dwhr_facilities_connected: Optional[str] = None
    dwhr_equal_flow: Optional[bool] = None
    dwhr_efficiency: Optional[float] = None


@dataclass
class WaterFixture:
    id: str
    water_fixture_type: str
    low_flow: bool


@dataclass
class ClothesWasher:
    id: str
    location: str
    modified_energy_factor: Optional[float] = None
    integrated_modified_energy_factor: Optional[float] = None
    rated_annual_kwh: Optional[float] = None
    label_electric_rate: Optional[float] = None
    label_gas_rate: Optional[float] = None
    label_annual_gas_cost: Optional[float] = None
    capacity: Optional[float] = None


@dataclass
class ClothesDryer:
    id: str
    location: str
    fuel_type: str
    energy_factor: Optional[float] = None
    combined_energy_factor: Optional[float] = None
    control_type: Optional[str] = None


@dataclass
class Dishwasher:
    id: str
    energy_factor: Optional[float] = None
    rated_annual_kwh: Optional[float] = None
    place_setting_capacity: Optional[float] = None


@dataclass
class Refrigerator:
    id: str
    location: str
    rated_annual_kwh: Optional[float] = None


@dataclass
class CookingRange:
    id: str
    fuel_type: str
    is_induction: Optional[bool] = None


@dataclass
class Oven:
    id: str
    is_convection: Optional[bool] = None


@dataclass
class Lighting:
    fraction_tier_i_interior: Optional[float] = None
    fraction_tier_i_exterior: Optional[float] = None
    fraction_tier_i_garage: Optional[float] = None
    fraction_tier_ii_interior: Optional[float] = None
    fraction_tier_ii_exterior: Optional[float] = None
    fraction_tier_ii_garage: Optional[float] = None


@dataclass
class CeilingFan:
    id: str
    efficiency: Optional[float] = None
    quantity: Optional[int] = None


@dataclass
class PlugLoad:
    id: str
    plug_load_type: str
    kwh_per_year: Optional[float] = None
    frac_sensible: Optional[float] = None
    frac_latent: Optional[float] = None


@dataclass
class MiscLoadsSchedule:
    weekday_fractions: Optional[str] = None
    weekend_fractions: Optional[str] = None
    monthly_multipliers: Optional[str] = None


@dataclass
class PVSystem:
    id: str
    module_type: str
    array_type: str
    array_azimuth: float
    array_tilt: float
    max_power_output: float
    inverter_efficiency: Optional[float] = None
    system_losses_fraction: Optional[float] = None
