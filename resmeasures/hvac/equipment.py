"""
HVAC equipment parameters and system bookkeeping.

Rated efficiencies (SEER, HSPF, AFUE, EER, COP) are expanded into per-speed
performance parameters; every system added to a model is tracked as an
HVACSystemRecord so sizing, fan EAE, reporting and output variables can
find its objects later.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple
import logging

from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import ConstantSchedule

logger = logging.getLogger(__name__)

AIR_FLOW_CFM_PER_TON = 400.0
CRANKCASE_TEMP_F = 55.0

# HVAC types
CENTRAL_AC = "central air conditioning"
ROOM_AC = "room air conditioner"
FURNACE = "Furnace"
WALL_FURNACE = "WallFurnace"
BOILER = "Boiler"
ELECTRIC_RESISTANCE = "ElectricResistance"
STOVE = "Stove"
ASHP = "air-to-air"
MSHP = "mini-split"
GSHP = "ground-to-air"
IDEAL_AIR = "ideal air"

FUEL_EAE_TYPES = (FURNACE, WALL_FURNACE, STOVE, BOILER)


# =============================================================================
# Speed selection and per-speed parameters
# =============================================================================

def get_ac_num_speeds(seer: float) -> int:
    """Number of compressor speeds (1, 2 or 4 for variable speed) implied by SEER."""
    if seer <= 15:
        return 1
    if seer <= 21:
        return 2
    return 4


def get_ashp_num_speeds(seer: float) -> int:
    if seer <= 15:
        return 1
    if seer <= 21:
        return 2
    return 4


def speed_label(num_speeds: int) -> str:
    return {1: "1-Speed", 2: "2-Speed", 4: "Variable-Speed"}[num_speeds]


@dataclass
class DXParams:
    """Per-speed DX parameters. Lists run from low to high speed."""
    num_speeds: int
    eers: List[float]
    shrs: List[float]
    capacity_ratios: List[float]
    fan_speed_ratios: List[float]
    fan_power_rated: float  # W/cfm
    fan_power_installed: float  # W/cfm
    crankcase_kw: float = 0.0
    cops: List[float] = field(default_factory=list)
    fan_speed_ratios_heating: List[float] = field(default_factory=list)
    min_temp: float = 0.0  # F, compressor lockout for heat pumps

    @property
    def rated_speed(self) -> int:
        """Index of the speed whose capacity ratio is 1.0."""
        return self.capacity_ratios.index(1.0)


def get_central_ac_params(seer: float) -> DXParams:
    n = get_ac_num_speeds(seer)
    if n == 1:
        return DXParams(1, [0.82 * seer + 0.64], [0.73], [1.0], [1.0], 0.365, 0.5)
    if n == 2:
        return DXParams(2, [0.83 * seer + 0.15, 0.56 * seer + 3.57], [0.71, 0.73], [0.72, 1.0], [0.86, 1.0],
                        0.14, 0.3)
    return DXParams(4, [0.80 * seer, 0.75 * seer, 0.65 * seer, 0.60 * seer], [0.98, 0.82, 0.745, 0.77],
                    [0.36, 0.64, 1.0, 1.16], [0.51, 0.84, 1.0, 1.19], 0.14, 0.3)


def get_ashp_params(seer: float, hspf: float) -> DXParams:
    """Cooling parameters follow SEER, heating COPs follow HSPF."""
    n = get_ashp_num_speeds(seer)
    if n == 1:
        return DXParams(1, [0.80 * seer + 1.0], [0.73], [1.0], [1.0], 0.365, 0.5, crankcase_kw=0.02,
                        cops=[0.45 * hspf - 0.34], fan_speed_ratios_heating=[1.0])
    if n == 2:
        # Rated per-speed EER and COP scale with SEER and HSPF from the SEER 16, HSPF 8.6 unit
        return DXParams(2, [0.819 * seer, 0.731 * seer], [0.71, 0.724], [0.72, 1.0], [0.86, 1.0],
                        0.14, 0.3, crankcase_kw=0.02, cops=[0.442 * hspf, 0.384 * hspf],
                        fan_speed_ratios_heating=[0.8, 1.0])
    return DXParams(4, [0.80 * seer, 0.75 * seer, 0.65 * seer, 0.60 * seer], [0.84, 0.79, 0.76, 0.77],
                    [0.49, 0.67, 1.0, 1.2], [0.7, 0.9, 1.0, 1.26], 0.14, 0.3, crankcase_kw=0.02,
                    cops=[0.48 * hspf, 0.45 * hspf, 0.39 * hspf, 0.39 * hspf],
                    fan_speed_ratios_heating=[0.74, 0.92, 1.0, 1.22])


@dataclass
class MiniSplitParams:
    shr: float = 0.73
    min_cooling_capacity: float = 0.4
    max_cooling_capacity: float = 1.2
    min_cooling_airflow_rate: float = 200.0  # cfm/ton
    max_cooling_airflow_rate: float = 425.0
    min_heating_capacity: float = 0.3
    max_heating_capacity: float = 1.2
    min_heating_airflow_rate: float = 200.0
    max_heating_airflow_rate: float = 400.0
    heating_capacity_offset: float = 2300.0  # Btu/hr
    cap_retention_frac: float = 0.25
    cap_retention_temp: float = -5.0  # F
    pan_heater_power: float = 0.0
    fan_power: float = 0.07  # W/cfm

    def speeds(self, lo: float, hi: float, n: int = 4) -> List[float]:
        step = (hi - lo) / (n - 1)
        return [lo + i * step for i in range(n)]

    def cooling_cops(self, seer: float) -> List[float]:
        rated = 0.2692 * seer + 0.2706
        return [rated * m for m in (1.20, 1.10, 1.0, 0.92)]

    def heating_cops(self, hspf: float) -> List[float]:
        rated = 0.3225 * hspf + 0.9099
        return [rated * m for m in (1.20, 1.10, 1.0, 0.92)]


@dataclass
class GSHPParams:
    shr: float = 0.732
    ground_conductivity: float = 0.6  # Btu/hr-ft-R
    grout_conductivity: float = 0.4
    bore_spacing: float = 20.0  # ft
    bore_diameter: float = 5.0  # in
    pipe_size: float = 0.75  # in
    ground_diffusivity: float = 0.0208  # ft^2/hr
    frac_glycol: float = 0.3
    design_delta_t: float = 10.0  # F
    pump_head: float = 50.0  # ft
    u_tube_leg_spacing: float = 0.9661  # in
    u_tube_spacing_type: str = "b"
    fan_power: float = 0.5  # W/cfm
    max_bore_depth: float = 500.0  # ft

    def bore_length_per_ton(self) -> float:
        """Total bore length (ft/ton), shorter in better-conducting ground."""
        return 200.0 * (0.6 / self.ground_conductivity) ** 0.5

    def bore_layout(self, capacity_tons: float) -> Tuple[int, float]:
        """
        Returns:
            (number of bores, depth per bore ft)
        """
        total = max(capacity_tons, 0.5) * self.bore_length_per_ton()
        holes = max(1, int(-(-total // self.max_bore_depth)))
        return holes, total / holes


def calc_cop_from_eer(eer: float, fan_power_rated: float, cfm_per_ton: float = AIR_FLOW_CFM_PER_TON) -> float:
    """Compressor-only cooling COP from a rated EER that includes fan power."""
    fan_w_per_btuh = fan_power_rated * cfm_per_ton / 12000.0
    eir = ((1.0 - convert(fan_w_per_btuh, "Wh", "Btu")) / eer - fan_w_per_btuh) * convert(1.0, "Wh", "Btu")
    return 1.0 / eir


def calc_cop_heating_wo_fan(cop: float, fan_power_rated: float, cfm_per_ton: float = AIR_FLOW_CFM_PER_TON) -> float:
    """Compressor-only heating COP from a rated COP that includes fan power."""
    fan_w_per_btuh = fan_power_rated * cfm_per_ton / 12000.0
    eir = ((convert(1.0, "Btu", "Wh") + fan_w_per_btuh) / cop - fan_w_per_btuh) * convert(1.0, "Wh", "Btu")
    return 1.0 / eir


def get_default_eae(htg_type: str, fuel: str, load_frac: float, furnace_capacity_kbtuh: Optional[float]) -> float:
    """
    Default electric auxiliary energy (kWh/yr) of fuel-fired heating.

    Returns:
        0 for equipment without a fan or pump
    """
    if htg_type == BOILER:
        return (330.0 if fuel == "fuel oil" else 170.0) * load_frac
    if htg_type == FURNACE:
        cap = furnace_capacity_kbtuh or 0.0
        if fuel == "fuel oil":
            return (439.0 + 5.5 * cap) * load_frac
        return (149.0 + 10.3 * cap) * load_frac
    return 0.0


# =============================================================================
# DSE
# =============================================================================

def get_dse(hpxml, system) -> Tuple[float, float, bool]:
    """
    Distribution system efficiencies of the system's attached DSE distribution.

    Returns:
        (heating DSE, cooling DSE, whether a DSE distribution is attached)
    """
    dist_id = getattr(system, "distribution_system_idref", None)
    if dist_id is None:
        return 1.0, 1.0, False
    dist = hpxml.hvac_distribution(dist_id)
    if dist is None or dist.distribution_system_type != "DSE":
        return 1.0, 1.0, False
    dse_heat = dist.annual_heating_dse if dist.annual_heating_dse is not None else 1.0
    dse_cool = dist.annual_cooling_dse if dist.annual_cooling_dse is not None else 1.0
    return dse_heat, dse_cool, True


def check_heat_pump_dse(dse_heat: float, dse_cool: float) -> None:
    if dse_heat != dse_cool:
        raise MeasureError("Cannot handle different distribution system efficiency (DSE) values for heating "
                           "and cooling.")


# =============================================================================
# System records
# =============================================================================

@dataclass
class CapacityField:
    """A capacity field to fill once the system is sized."""
    obj_type: str
    name: str
    field: str
    kind: str  # heating, cooling or backup
    ratio: float = 1.0
    units: str = "W"


@dataclass
class HVACSystemRecord:
    sys_id: str
    system_type: str
    fuel: Optional[str] = None
    heating_capacity: Optional[float] = None  # Btu/hr, None = autosize
    cooling_capacity: Optional[float] = None
    backup_capacity: Optional[float] = None
    load_frac_heat: float = 0.0
    load_frac_cool: float = 0.0
    dse_heat: float = 1.0
    dse_cool: float = 1.0
    num_speeds: int = 0
    efficiency: Optional[float] = None
    objects: List[Tuple[str, str]] = field(default_factory=list)
    capacity_fields: List[CapacityField] = field(default_factory=list)
    efficiency_fields: List[Tuple[str, str, str, str]] = field(default_factory=list)
    air_loops: List[str] = field(default_factory=list)
    plant_loops: List[str] = field(default_factory=list)
    zone_equipment: List[Tuple[str, str]] = field(default_factory=list)
    fans: List[str] = field(default_factory=list)
    airflow_cfm_per_ton: float = AIR_FLOW_CFM_PER_TON

    @property
    def is_heating(self) -> bool:
        return self.load_frac_heat > 0

    @property
    def is_cooling(self) -> bool:
        return self.load_frac_cool > 0

    def add(self, model: Model, obj) -> ModelObject:
        model.add(obj)
        self.objects.append((obj.obj_type, obj.name))
        return obj

    def capacity(self, kind: str) -> Optional[float]:
        return {"heating": self.heating_capacity, "cooling": self.cooling_capacity,
                "backup": self.backup_capacity}[kind]

    def track_capacity(self, obj: ModelObject, field_name: str, kind: str, ratio: float = 1.0,
                       units: str = "W") -> None:
        """Write the capacity now if known, else 'autosize' and remember the field for sizing."""
        self.capacity_fields.append(CapacityField(obj.obj_type, obj.name, field_name, kind, ratio, units))
        value = self.capacity(kind)
        if value is None:
            obj.set(field_name, "autosize")
        else:
            obj.set(field_name, _capacity_value(value * ratio, units, self.airflow_cfm_per_ton))

    def track_efficiency(self, obj: ModelObject, field_name: str, kind: str) -> None:
        """Remember an efficiency field (kind heating or cooling) that distribution losses scale."""
        self.efficiency_fields.append((obj.obj_type, obj.name, field_name, kind))

    def apply_distribution_efficiency(self, model: Model, heating: float, cooling: float) -> None:
        for obj_type, name, field_name, kind in self.efficiency_fields:
            obj = model.get(obj_type, name)
            if obj is None or obj.get(field_name) is None:
                continue
            factor = heating if kind == "heating" else cooling
            obj.set(field_name, round(obj.get(field_name) * factor, 4))

    def apply_capacities(self, model: Model) -> None:
        for cf in self.capacity_fields:
            value = self.capacity(cf.kind)
            obj = model.get(cf.obj_type, cf.name)
            if obj is None or value is None:
                continue
            obj.set(cf.field, _capacity_value(value * cf.ratio, cf.units, self.airflow_cfm_per_ton))


def _capacity_value(btuh: float, units: str, cfm_per_ton: float = AIR_FLOW_CFM_PER_TON) -> float:
    if units == "cfm":
        return round(convert(btuh / 12000.0 * cfm_per_ton, "cfm", "m^3/s"), 6)
    return round(convert(btuh, "Btu/hr", units), 2)


def get_hvac_systems(model: Model) -> Dict[str, HVACSystemRecord]:
    return model.properties.setdefault("hvac_systems", {})


def register_system(model: Model, record: HVACSystemRecord) -> HVACSystemRecord:
    systems = get_hvac_systems(model)
    if record.sys_id in systems:
        raise MeasureError(f"HVAC system '{record.sys_id}' already exists.")
    ConstantSchedule("Always On Discrete", 1.0, type_limits="OnOff").add_to(model)
    ConstantSchedule("Always Off Discrete", 0.0, type_limits="OnOff").add_to(model)
    systems[record.sys_id] = record
    logger.info(f"Added {record.system_type} '{record.sys_id}' "
                f"(heat {record.load_frac_heat:.2f}, cool {record.load_frac_cool:.2f})")
    return record


def remove_system(model: Model, sys_id: str) -> bool:
    record = get_hvac_systems(model).pop(sys_id, None)
    if record is None:
        return False
    for obj_type, name in record.objects:
        obj = model.get(obj_type, name)
        if obj is not None:
            model.remove(obj)
    return True
