"""
Shared names and default values.
"""

# Space types
SPACE_TYPE_LIVING = "living"
SPACE_TYPE_FINISHED_BASEMENT = "finished basement"
SPACE_TYPE_UNFINISHED_BASEMENT = "unfinished basement"
SPACE_TYPE_CRAWL = "crawlspace"
SPACE_TYPE_GARAGE = "garage"
SPACE_TYPE_UNFINISHED_ATTIC = "unfinished attic"
SPACE_TYPE_FINISHED_ATTIC = "finished attic"

CONDITIONED_SPACE_TYPES = (
    SPACE_TYPE_LIVING,
    SPACE_TYPE_FINISHED_BASEMENT,
    SPACE_TYPE_FINISHED_ATTIC,
)

# HPXML location strings
LOCATION_LIVING = "living space"
LOCATION_GARAGE = "garage"
LOCATION_BASEMENT_CONDITIONED = "basement - conditioned"
LOCATION_BASEMENT_UNCONDITIONED = "basement - unconditioned"
LOCATION_CRAWL_VENTED = "crawlspace - vented"
LOCATION_CRAWL_UNVENTED = "crawlspace - unvented"
LOCATION_ATTIC_VENTED = "attic - vented"
LOCATION_ATTIC_UNVENTED = "attic - unvented"
LOCATION_ATTIC_CONDITIONED = "attic - conditioned"
LOCATION_OUTSIDE = "outside"
LOCATION_GROUND = "ground"

# Location -> space type
LOCATION_SPACE_TYPES = {
    LOCATION_LIVING: SPACE_TYPE_LIVING,
    LOCATION_GARAGE: SPACE_TYPE_GARAGE,
    LOCATION_BASEMENT_CONDITIONED: SPACE_TYPE_FINISHED_BASEMENT,
    LOCATION_BASEMENT_UNCONDITIONED: SPACE_TYPE_UNFINISHED_BASEMENT,
    LOCATION_CRAWL_VENTED: SPACE_TYPE_CRAWL,
    LOCATION_CRAWL_UNVENTED: SPACE_TYPE_CRAWL,
    LOCATION_ATTIC_VENTED: SPACE_TYPE_UNFINISHED_ATTIC,
    LOCATION_ATTIC_UNVENTED: SPACE_TYPE_UNFINISHED_ATTIC,
    LOCATION_ATTIC_CONDITIONED: SPACE_TYPE_FINISHED_ATTIC,
    "flat roof": SPACE_TYPE_LIVING,
    "cathedral ceiling": SPACE_TYPE_LIVING,
}

# Fuels
FUEL_ELECTRIC = "electricity"
FUEL_GAS = "natural gas"
FUEL_OIL = "fuel oil"
FUEL_PROPANE = "propane"
FUEL_WOOD = "wood"

# Simulation engine fuel names
EPLUS_FUELS = {
    FUEL_ELECTRIC: "Electricity",
    FUEL_GAS: "NaturalGas",
    FUEL_OIL: "FuelOilNo1",
    FUEL_PROPANE: "Propane",
    FUEL_WOOD: "OtherFuel1",
}

# Water heater types
WATER_HEATER_STORAGE = "storage water heater"
WATER_HEATER_TANKLESS = "instantaneous water heater"
WATER_HEATER_HEAT_PUMP = "heat pump water heater"

# HVAC distribution
LOAD_DISTRIBUTION_SCHEMES = ("UniformLoad", "SequentialLoad")

# Boilers
BOILER_TYPE_FORCED_DRAFT = "hot water, forced draft"
BOILER_TYPE_STEAM = "steam"

# Water heater setpoint / operating mode
WATER_HEATER_SETPOINT_CONSTANT = "constant"
WATER_HEATER_SETPOINT_SCHEDULED = "scheduled"
WATER_HEATER_MODE_STANDARD = "standard"
WATER_HEATER_MODE_HP_ONLY = "heat pump only"

# Solar thermal
FLUID_WATER = "water"
FLUID_PROPYLENE_GLYCOL = "propylene-glycol"
COORD_RELATIVE = "relative"
COORD_ABSOLUTE = "absolute"
TILT_PITCH = "pitch"
TILT_LATITUDE = "latitude"

AUTO = "auto"

# Plug loads
OPTION_TYPE_PLUG_LOADS_MULTIPLIER = "Multiplier"
OPTION_TYPE_PLUG_LOADS_ENERGY_USE = "Annual Energy Use"

# Explode gap between foundation/attic zones and the living zone
EXPLODE_GAP_FT = 10.0


def get_default_door_area() -> float:
    """Default total door area (ft^2) when HPXML omits it."""
    return 20.0


def get_default_vented_crawl_sla() -> float:
    """Default specific leakage area of a vented crawlspace."""
    return 1.0 / 150.0


def get_default_vented_attic_sla() -> float:
    """Default specific leakage area of a vented attic."""
    return 1.0 / 300.0


def object_name(prefix: str, suffix: str = "") -> str:
    """Consistent object naming: 'prefix' or 'prefix suffix'."""
    return f"{prefix} {suffix}".strip()
