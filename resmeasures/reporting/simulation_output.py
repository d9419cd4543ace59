"""
Simulation output report.

Two parts:
- Cost multipliers measured from the model (areas, system sizes, flow rates)
  that upgrade costs are scaled by.
- Annual end-use totals by fuel read from the EnergyPlus tabular output
  (eplustbl.csv).

Usage:
    report = SimulationOutputReport()
    mult = report.get_cost_multiplier("Roof Area (ft^2)", model)
    outputs = report.run(model, Path("./run"))
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import csv
import logging

from ..core import constants
from ..core.units import convert
from ..envelope.geometry import get_finished_floor_area, get_floor_area
from ..hvac.equipment import get_hvac_systems
from ..model import Model, Surface

logger = logging.getLogger(__name__)

COST_MULTIPLIER_TYPES = [
    "Fixed (1)",
    "Wall Area, Above-Grade, Conditioned (ft^2)",
    "Wall Area, Above-Grade, Exterior (ft^2)",
    "Wall Area, Below-Grade (ft^2)",
    "Floor Area, Conditioned (ft^2)",
    "Floor Area, Attic (ft^2)",
    "Floor Area, Lighting (ft^2)",
    "Roof Area (ft^2)",
    "Window Area (ft^2)",
    "Door Area (ft^2)",
    "Duct Unconditioned Surface Area (ft^2)",
    "Size, Heating System (kBtu/h)",
    "Size, Heating Supplemental System (kBtu/h)",
    "Size, Cooling System (kBtu/h)",
    "Size, Water Heater (gal)",
    "Flow Rate, Mechanical Ventilation (cfm)",
]

# Tabular end use rows -> report end use names
END_USES = {
    "heating": "heating",
    "cooling": "cooling",
    "interior lighting": "interior_lighting",
    "exterior lighting": "exterior_lighting",
    "interior equipment": "interior_equipment",
    "exterior equipment": "exterior_equipment",
    "fans": "fans",
    "pumps": "pumps",
    "water systems": "water_systems",
    "generators": "pv",
}

# Tabular fuel columns -> (report fuel name, report units)
FUELS = {
    "electricity": ("electricity", "kwh"),
    "natural gas": ("natural_gas", "therm"),
    "fuel oil no 1": ("fuel_oil", "mbtu"),
    "fuel oil no 2": ("fuel_oil", "mbtu"),
    "propane": ("propane", "mbtu"),
    "other fuel 1": ("wood", "mbtu"),
}

ATTIC_SPACE_TYPES = (constants.SPACE_TYPE_UNFINISHED_ATTIC, constants.SPACE_TYPE_FINISHED_ATTIC)


def _ft2(area_m2: float) -> float:
    return convert(area_m2, "m^2", "ft^2")


def _is_conditioned(space) -> bool:
    return space is not None and space.space_type in constants.CONDITIONED_SPACE_TYPES


def _is_above_grade(surface: Surface) -> bool:
    return surface.outside_boundary_condition != "Foundation"


def _to_kwh(value: float, units: str) -> float:
    units = units.lower()
    if units == "kwh":
        return value
    if units == "gj":
        return convert(convert(value, "GJ", "J"), "J", "kWh")
    if units == "j":
        return convert(value, "J", "kWh")
    if units == "kbtu":
        return convert(value, "kBtu", "kWh")
    raise ValueError(f"Unexpected energy units '{units}'.")


def _from_kwh(value: float, units: str) -> float:
    if units == "kwh":
        return value
    if units == "therm":
        return convert(value, "kWh", "therm")
    return convert(convert(value, "kWh", "Btu"), "Btu", "MBtu")


@dataclass
class EndUseTotals:
    """Annual site energy by fuel and end use."""
    # "{fuel}_{end use}_{units}" -> value
    values: Dict[str, float] = field(default_factory=dict)
    source_file: str = ""

    def add(self, fuel: str, end_use: str, units: str, value: float) -> None:
        key = f"{fuel}_{end_use}_{units}"
        self.values[key] = self.values.get(key, 0.0) + value

    def fuel_total(self, fuel: str) -> float:
        prefix = f"{fuel}_"
        return sum(v for k, v in self.values.items() if k.startswith(prefix) and "_pv_" not in k)

    def total_site_energy_mbtu(self) -> float:
        total = 0.0
        for fuel, units in {f: u for f, u in FUELS.values()}.items():
            kwh = self.fuel_total(fuel)
            if units == "therm":
                kwh = convert(kwh, "therm", "kWh")
            elif units == "mbtu":
                kwh = convert(convert(kwh, "MBtu", "Btu"), "Btu", "kWh")
            total += kwh
        return convert(convert(total, "kWh", "Btu"), "Btu", "MBtu")

    def to_dict(self) -> Dict[str, float]:
        out = {"total_site_energy_mbtu": round(self.total_site_energy_mbtu(), 2)}
        for fuel, units in {f: u for f, u in FUELS.values()}.items():
            out[f"total_site_{fuel}_{units}"] = round(self.fuel_total(fuel), 2)
        out.update({k: round(v, 2) for k, v in sorted(self.values.items())})
        return out


class SimulationOutputReport:
    """Cost multipliers and annual end-use outputs for one simulated building."""

    # =========================================================================
    # Cost multipliers
    # =========================================================================

    def get_cost_multiplier(self, mult_type: str, model: Model) -> Optional[float]:
        """
        Value of one cost multiplier, or None for an unknown type.
        """
        if mult_type == "Fixed (1)":
            return 1.0

        if mult_type == "Wall Area, Above-Grade, Conditioned (ft^2)":
            return _ft2(sum(s.gross_area for s in model.surfaces
                            if s.surface_type == "Wall" and _is_above_grade(s) and _is_conditioned(s.space)
                            and not _is_conditioned(s.adjacent_space)))

        if mult_type == "Wall Area, Above-Grade, Exterior (ft^2)":
            return _ft2(sum(s.gross_area for s in model.surfaces
                            if s.surface_type == "Wall" and s.outside_boundary_condition == "Outdoors"))

        if mult_type == "Wall Area, Below-Grade (ft^2)":
            return _ft2(sum(s.gross_area for s in model.surfaces
                            if s.surface_type == "Wall" and s.outside_boundary_condition == "Foundation"))

        if mult_type == "Floor Area, Conditioned (ft^2)":
            return get_finished_floor_area(model)

        if mult_type == "Floor Area, Attic (ft^2)":
            return get_floor_area(model, [s for s in model.spaces if s.space_type in ATTIC_SPACE_TYPES])

        if mult_type == "Floor Area, Lighting (ft^2)":
            spaces = [s for s in model.spaces
                      if _is_conditioned(s) or s.space_type == constants.SPACE_TYPE_GARAGE]
            return get_floor_area(model, spaces)

        if mult_type == "Roof Area (ft^2)":
            return _ft2(sum(s.gross_area for s in model.surfaces
                            if s.surface_type == "RoofCeiling" and s.outside_boundary_condition == "Outdoors"))

        if mult_type == "Window Area (ft^2)":
            return _ft2(sum(sub.area for s in model.surfaces for sub in s.sub_surfaces
                            if sub.sub_surface_type != "Door" and s.surface_type == "Wall"))

        if mult_type == "Door Area (ft^2)":
            return _ft2(sum(sub.area for s in model.surfaces for sub in s.sub_surfaces
                            if sub.sub_surface_type == "Door"))

        if mult_type == "Duct Unconditioned Surface Area (ft^2)":
            return self._duct_unconditioned_area(model)

        if mult_type.startswith("Size, "):
            return self._system_size(mult_type, model)

        if mult_type == "Flow Rate, Mechanical Ventilation (cfm)":
            return float(model.properties.get("mech_vent_cfm", 0.0) or 0.0)

        return None

    def get_cost_multipliers(self, model: Model) -> Dict[str, float]:
        return {t: round(self.get_cost_multiplier(t, model), 2) for t in COST_MULTIPLIER_TYPES}

    @staticmethod
    def _duct_unconditioned_area(model: Model) -> float:
        area = 0.0
        seen = set()
        for ducts in model.properties.get("duct_systems", {}).values():
            # Systems sharing a distribution share one Ducts object
            if id(ducts) in seen:
                continue
            seen.add(id(ducts))
            if ducts.location in (constants.LOCATION_LIVING, constants.LOCATION_BASEMENT_CONDITIONED):
                continue
            supply = ducts.supply_area or 0.0
            ret = ducts.return_area or 0.0
            area += supply * ducts.location_frac + ret
        return area

    @staticmethod
    def _system_size(mult_type: str, model: Model) -> float:
        if mult_type == "Size, Water Heater (gal)":
            return sum(r.volume_gal for r in model.properties.get("water_heaters", {}).values()
                       if r.wh_type != constants.WATER_HEATER_TANKLESS)
        kind = {
            "Size, Heating System (kBtu/h)": "heating",
            "Size, Heating Supplemental System (kBtu/h)": "backup",
            "Size, Cooling System (kBtu/h)": "cooling",
        }.get(mult_type)
        if kind is None:
            raise ValueError(f"Unexpected cost multiplier '{mult_type}'.")
        btuh = sum(rec.capacity(kind) or 0.0 for rec in get_hvac_systems(model).values())
        return convert(btuh, "Btu/hr", "kBtu/hr")

    # =========================================================================
    # End uses
    # =========================================================================

    def parse_end_uses(self, tbl_path: Path) -> Optional[EndUseTotals]:
        """
        Annual end uses from the "End Uses" table of eplustbl.csv.

        Returns:
            EndUseTotals, or None if the table is missing
        """
        tbl_path = Path(tbl_path)
        if not tbl_path.exists():
            logger.warning(f"No tabular output at {tbl_path}")
            return None

        with open(tbl_path, newline="") as f:
            rows = list(csv.reader(f))

        totals = EndUseTotals(source_file=str(tbl_path))
        in_end_uses = False
        columns: Dict[int, tuple] = {}
        found = False
        for row in rows:
            cells = [c.strip() for c in row]
            line = ",".join(cells).strip(",")
            if line == "End Uses":
                in_end_uses = True
                continue
            if not in_end_uses:
                continue
            if "End Uses By" in line or line.startswith("REPORT:"):
                break
            if not line:
                if found:
                    break
                continue

            if any("[" in c for c in cells):
                columns = self._fuel_columns(cells)
                continue
            if len(cells) < 3 or not cells[1]:
                continue
            end_use = END_USES.get(cells[1].lower())
            if end_use is None:
                continue
            for idx, (fuel, units, src_units) in columns.items():
                try:
                    value = float(cells[idx])
                except (ValueError, IndexError):
                    continue
                if value == 0:
                    continue
                totals.add(fuel, end_use, units, _from_kwh(_to_kwh(value, src_units), units))
                found = True

        logger.debug(f"Parsed {len(totals.values)} end use values from {tbl_path}")
        return totals

    @staticmethod
    def _fuel_columns(header: List[str]) -> Dict[int, tuple]:
        columns = {}
        for j, cell in enumerate(header):
            if "[" not in cell:
                continue
            name, _, units = cell.partition("[")
            fuel = FUELS.get(name.strip().lower())
            if fuel is not None:
                columns[j] = (fuel[0], fuel[1], units.rstrip("]").strip())
        return columns

    def run(self, model: Model, run_dir: Path) -> Dict[str, float]:
        """
        Cost multipliers plus end uses of a finished run.

        Returns:
            Flat dict of output name -> value
        """
        outputs: Dict[str, float] = {}
        for mult_type, value in self.get_cost_multipliers(model).items():
            outputs[mult_type] = value
        totals = self.parse_end_uses(Path(run_dir) / "eplustbl.csv")
        if totals is not None:
            outputs.update(totals.to_dict())
        logger.info(f"Simulation output report: {len(outputs)} values")
        return outputs
