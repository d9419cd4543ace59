"""
Solar water heating: flat plate collector loop with an indirect storage tank
that preheats the water heater inlet.
"""

from dataclasses import dataclass
import math
from typing import List, Union
import logging

import numpy as np

from ..core import constants
from ..core.units import convert
from ..model import Model, ModelObject

logger = logging.getLogger(__name__)

STORAGE_VOLUME_FACTOR = 1.5  # gal per ft^2 of collector
TEST_FLOW_LBM_PER_MIN_FT2 = 55.0 / 27.2155422  # 55 kg/hr-m^2 of collector
WATER_DENSITY_LBM_FT3 = 62.4
PANEL_ORIGIN_FT = 100.0


def calc_shw_storage_volume(collector_area: float, storage_vol: Union[str, float]) -> float:
    """Storage volume (gal); 'auto' sizes 1.5 gal per ft^2 of collector."""
    if storage_vol == constants.AUTO:
        return STORAGE_VOLUME_FACTOR * collector_area
    return float(storage_vol)


def calc_shw_pump_power(collector_area: float, pump_power_per_area: float) -> float:
    return pump_power_per_area * collector_area


def calc_collector_flow(collector_area: float) -> float:
    """Collector loop flow (cfm) at the rating test flow rate."""
    test_flow = TEST_FLOW_LBM_PER_MIN_FT2 / WATER_DENSITY_LBM_FT3 * convert(1.0, "ft^2", "m^2")
    return test_flow * collector_area


@dataclass
class SolarHotWaterSystem:
    """Sized solar water heating system. Areas in ft^2, volumes in gal."""
    collector_area: float
    frta: float
    frul: float  # Btu/hr-ft^2-F
    iam: float
    storage_vol: float
    tank_r: float
    fluid_type: str
    heat_ex_eff: float
    pump_power: float  # W
    azimuth: float  # absolute, degrees
    tilt: float  # absolute, degrees

    @property
    def coll_flow(self) -> float:
        return calc_collector_flow(self.collector_area)

    @property
    def storage_diam(self) -> float:
        """Tank diameter (ft) of a cylinder three diameters tall."""
        vol_ft3 = convert(self.storage_vol, "gal", "ft^3")
        return (4.0 * vol_ft3 / 3.0 / math.pi) ** (1.0 / 3.0)

    @property
    def storage_ht(self) -> float:
        return 3.0 * self.storage_diam

    @property
    def tank_area(self) -> float:
        d = self.storage_diam
        return self.storage_ht * math.pi * d + 2.0 * math.pi * d ** 2 / 4.0

    @property
    def storage_u(self) -> float:
        return 1.0 / self.tank_r

    def panel_vertices(self) -> List[tuple]:
        """Collector outline (m), square, tilted and rotated to the azimuth."""
        length = convert(self.collector_area, "ft^2", "m^2") ** 0.5
        run = math.cos(math.radians(self.tilt)) * length
        rise = (length ** 2 - run ** 2) ** 0.5
        x0 = y0 = convert(PANEL_ORIGIN_FT, "ft", "m")
        pts = np.array([
            [x0, y0, 0.0],
            [x0 + length, y0, 0.0],
            [x0 + length, y0 + run, rise],
            [x0, y0 + run, rise],
        ])
        angle = math.radians(-self.azimuth)
        rot = np.array([
            [math.cos(angle), -math.sin(angle), 0.0],
            [math.sin(angle), math.cos(angle), 0.0],
            [0.0, 0.0, 1.0],
        ])
        return [tuple(float(c) for c in p) for p in pts @ rot.T]


def remove_solar_hot_water(model: Model, obj_name: str) -> int:
    removed = 0
    for obj in list(model):
        if obj.name.startswith(obj_name):
            model.remove(obj)
            removed += 1
    return removed


def apply_solar_hot_water(model: Model, system: SolarHotWaterSystem, dhw_loop: str, heater_name: str,
                          setpoint_schedule: str, zone_name: str,
                          obj_name: str = "solar hot water") -> List[ModelObject]:
    """
    Add the collector loop and preheat tank ahead of an existing water heater.

    Returns:
        The created objects
    """
    remove_solar_hot_water(model, obj_name)
    flow_m3s = round(convert(system.coll_flow, "cfm", "m^3/s"), 8)
    vol_m3 = convert(system.storage_vol, "gal", "m^3")
    ht_m = convert(system.storage_ht, "ft", "m")
    created = []

    loop = model.add(ModelObject("PlantLoop", f"{obj_name} loop", {
        "Fluid Type": "Water" if system.fluid_type == constants.FLUID_WATER else "UserDefinedFluidType",
        "User Defined Fluid Type": None if system.fluid_type == constants.FLUID_WATER else "PropyleneGlycol 50%",
        "Loop Temperature Setpoint Node Name": f"{obj_name} supply outlet",
        "Maximum Loop Temperature": 100.0,
        "Minimum Loop Temperature": 0.0,
        "Minimum Loop Flow Rate": 0.0,
        "Load Distribution Scheme": "Optimal",
        "Loop Demand Side Design Temperature Difference": convert(10.0, "deltaF", "deltaC"),
    }))
    created.append(loop)
    created.append(model.add(ModelObject("SetpointManager:Scheduled", f"{obj_name} setpoint mgr", {
        "Control Variable": "Temperature",
        "Schedule Name": setpoint_schedule,
        "Setpoint Node or NodeList Name": f"{obj_name} supply outlet",
    })))
    created.append(model.add(ModelObject("Pump:ConstantSpeed", f"{obj_name} pump", {
        "Inlet Node Name": f"{obj_name} supply inlet",
        "Outlet Node Name": f"{obj_name} pump outlet",
        "Design Flow Rate": flow_m3s,
        "Design Pump Head": 90000.0,
        "Design Power Consumption": round(system.pump_power, 4),
        "Motor Efficiency": 0.3,
        "Fraction of Motor Inefficiencies to Fluid Stream": 0.2,
        "Pump Control Type": "Intermittent",
    })))

    fields = {"Base Surface Name": None, "Transmittance Schedule Name": None,
              "Number of Vertices": 4}
    for i, (x, y, z) in enumerate(system.panel_vertices(), 1):
        fields.update({f"Vertex {i} X-coordinate": x, f"Vertex {i} Y-coordinate": y,
                       f"Vertex {i} Z-coordinate": z})
    shading = model.add(ModelObject("Shading:Building:Detailed", f"{obj_name} shading surface", fields))
    created.append(shading)

    perf = model.add(ModelObject("SolarCollectorPerformance:FlatPlate", f"{obj_name} coll perf", {
        "Gross Area": round(convert(system.collector_area, "ft^2", "m^2"), 4),
        "Test Fluid": "Water",
        "Test Flow Rate": flow_m3s,
        "Test Correlation Type": "Inlet",
        "Coefficient 1 of Efficiency Equation": system.frta,
        "Coefficient 2 of Efficiency Equation": round(-convert(system.frul, "Btu/(hr*ft^2*F)", "W/(m^2*K)"), 6),
        "Coefficient 3 of Efficiency Equation": 0.0,
        "Coefficient 2 of Incident Angle Modifier": -system.iam,
    }))
    created.append(perf)
    created.append(model.add(ModelObject("SolarCollector:FlatPlate:Water", f"{obj_name} coll plate", {
        "SolarCollectorPerformance Name": perf.name,
        "Surface Name": shading.name,
        "Inlet Node Name": f"{obj_name} coll inlet",
        "Outlet Node Name": f"{obj_name} coll outlet",
        "Maximum Flow Rate": flow_m3s,
    })))

    tank = model.add(ModelObject("WaterHeater:Stratified", f"{obj_name} storage tank", {
        "End-Use Subcategory": "Domestic Hot Water",
        "Tank Volume": round(vol_m3, 6),
        "Tank Height": round(ht_m, 4),
        "Tank Shape": "VerticalCylinder",
        "Tank Perimeter": round(math.pi * convert(system.storage_diam, "ft", "m"), 4),
        "Maximum Temperature Limit": 99.0,
        "Heater Priority Control": "MasterSlave",
        "Heater 1 Setpoint Temperature Schedule Name": setpoint_schedule,
        "Heater 1 Capacity": 0.0,
        "Heater 1 Height": 0.0,
        "Heater 2 Setpoint Temperature Schedule Name": setpoint_schedule,
        "Heater 2 Capacity": 0.0,
        "Heater 2 Height": 0.0,
        "Heater Fuel Type": "Electricity",
        "Heater Thermal Efficiency": 1.0,
        "Ambient Temperature Indicator": "Zone",
        "Ambient Temperature Zone Name": zone_name,
        "Uniform Skin Loss Coefficient per Unit Area to Ambient Temperature":
            round(convert(system.storage_u, "Btu/(hr*ft^2*F)", "W/(m^2*K)"), 6),
        "Skin Loss Fraction to Zone": 1.0,
        "Off Cycle Flue Loss Fraction to Zone": 1.0,
        "Use Side Effectiveness": 1.0,
        "Use Side Inlet Height": 0.0,
        "Use Side Outlet Height": round(ht_m, 4),
        "Source Side Effectiveness": system.heat_ex_eff,
        "Source Side Inlet Height": round(ht_m / 3.0, 4),
        "Source Side Outlet Height": 0.0,
        "Inlet Mode": "Fixed",
        "Use Side Design Flow Rate": round(vol_m3 / 60.1, 8),
        "Source Side Design Flow Rate": flow_m3s,
        "Indirect Water Heating Recovery Time": 1.5,
        "Number of Nodes": 8,
        "Use Side Plant Loop Name": dhw_loop,
        "Source Side Plant Loop Name": loop.name,
        "Downstream Water Heater Name": heater_name,
    }))
    created.append(tank)
    created.append(model.add(ModelObject("AvailabilityManager:DifferentialThermostat", f"{obj_name} useful energy", {
        "Hot Node Name": f"{obj_name} coll outlet",
        "Cold Node Name": f"{obj_name} storage tank demand outlet",
        "Temperature Difference On Limit": 0.0,
        "Temperature Difference Off Limit": 0.0,
    })))
    logger.info(f"Added {system.collector_area:g} ft^2 solar collector and {system.storage_vol:g} gal storage "
                f"tank ahead of '{heater_name}' on '{dhw_loop}'")
    return created
