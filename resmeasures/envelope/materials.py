"""
Building materials in IP units.

Conductivity is Btu-in/(hr-ft^2-F), density lbm/ft^3, specific heat
Btu/(lbm-F). Air films and air gaps are resistance-only materials.
"""

from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple
import math

from ..core.units import convert
from ..model.objects import format_idf_object


@dataclass(frozen=True)
class BaseMaterial:
    rho: float
    cp: float
    k_in: Optional[float] = None


GYPSUM = BaseMaterial(rho=50.0, cp=0.2, k_in=1.1112)
WOOD = BaseMaterial(rho=32.0, cp=0.29, k_in=0.8)
CONCRETE = BaseMaterial(rho=140.0, cp=0.2, k_in=9.1)
BRICK = BaseMaterial(rho=110.0, cp=0.19, k_in=5.5)
STONE = BaseMaterial(rho=140.0, cp=0.2, k_in=12.5)
STRAW_BALE = BaseMaterial(rho=11.1667, cp=0.2, k_in=0.4815)
SOIL = BaseMaterial(rho=115.0, cp=0.1, k_in=12.0)
INSULATION_RIGID = BaseMaterial(rho=2.0, cp=0.29, k_in=0.204)
INSULATION_DENSEPACK = BaseMaterial(rho=2.2, cp=0.25)
INSULATION_LOOSEFILL = BaseMaterial(rho=0.5, cp=0.25)
CARPET = BaseMaterial(rho=3.4, cp=0.32)
STEEL = BaseMaterial(rho=488.0, cp=0.12, k_in=346.8)

BASE_MATERIALS: Dict[str, BaseMaterial] = {
    "gypsum": GYPSUM,
    "wood": WOOD,
    "concrete": CONCRETE,
    "brick": BRICK,
    "stone": STONE,
    "straw bale": STRAW_BALE,
    "soil": SOIL,
}

# name -> (thick_in, rvalue, rho, cp, solar_abs, emittance)
EXTERIOR_FINISHES: Dict[str, Tuple[float, float, float, float, float, float]] = {
    "Wood, Light": (1.0, 1.4, 34.0, 0.28, 0.5, 0.82),
    "Wood, Medium/Dark": (1.0, 1.4, 34.0, 0.28, 0.75, 0.92),
    "Stucco, Light": (1.0, 0.2, 80.0, 0.21, 0.5, 0.9),
    "Stucco, Medium/Dark": (1.0, 0.2, 80.0, 0.21, 0.75, 0.9),
    "Vinyl, Light": (0.375, 0.62, 11.1, 0.25, 0.5, 0.9),
    "Vinyl, Medium/Dark": (0.375, 0.62, 11.1, 0.25, 0.75, 0.9),
    "Aluminum, Light": (0.375, 0.61, 10.9, 0.29, 0.5, 0.9),
    "Aluminum, Medium/Dark": (0.375, 0.61, 10.9, 0.29, 0.75, 0.9),
    "Brick, Light": (4.0, 0.7, 110.0, 0.19, 0.55, 0.93),
    "Brick, Medium/Dark": (4.0, 0.7, 110.0, 0.19, 0.88, 0.96),
    "Fiber-Cement, Light": (0.375, 0.2, 11.1, 0.24, 0.5, 0.9),
    "Fiber-Cement, Medium/Dark": (0.375, 0.2, 11.1, 0.24, 0.75, 0.9),
}


@dataclass
class Material:
    """
    One homogeneous material.

    Either thick_in and k_in are given, or only rvalue (resistance-only).
    """
    name: str
    thick_in: Optional[float] = None
    k_in: Optional[float] = None
    rho: Optional[float] = None
    cp: Optional[float] = None
    r: Optional[float] = None
    solar_abs: float = 0.75
    thermal_abs: float = 0.9
    vis_abs: Optional[float] = None

    def __post_init__(self):
        if self.r is None and (self.thick_in is None or not self.k_in):
            raise ValueError(f"Material '{self.name}' needs a thickness and conductivity or an R-value.")

    @property
    def rvalue(self) -> float:
        """R-value in hr-ft^2-F/Btu."""
        if self.r is not None:
            return self.r
        return self.thick_in / self.k_in

    @property
    def no_mass(self) -> bool:
        return self.rho is None or self.thick_in is None

    @property
    def obj_type(self) -> str:
        return "Material:NoMass" if self.no_mass else "Material"

    @property
    def thick(self) -> float:
        """Thickness in ft."""
        return convert(self.thick_in or 0.0, "in", "ft")

    def with_name(self, name: str) -> "Material":
        return replace(self, name=name)

    def to_idf(self) -> str:
        if self.no_mass:
            return format_idf_object("Material:NoMass", [
                ("Name", self.name),
                ("Roughness", "Rough"),
                ("Thermal Resistance", round(convert(self.rvalue, "hr*ft^2*F/Btu", "m^2*K/W"), 6)),
                ("Thermal Absorptance", self.thermal_abs),
                ("Solar Absorptance", self.solar_abs),
                ("Visible Absorptance", self.vis_abs if self.vis_abs is not None else self.solar_abs),
            ])
        k_ip = self.thick_in / self.rvalue
        return format_idf_object("Material", [
            ("Name", self.name),
            ("Roughness", "Rough"),
            ("Thickness", round(convert(self.thick_in, "in", "m"), 7)),
            ("Conductivity", round(convert(k_ip, "Btu*in/(hr*ft^2*R)", "W/(m*K)"), 7)),
            ("Density", round(convert(self.rho, "lbm/ft^3", "kg/m^3"), 4)),
            ("Specific Heat", round(convert(self.cp, "Btu/(lbm*R)", "J/(kg*K)"), 4)),
            ("Thermal Absorptance", self.thermal_abs),
            ("Solar Absorptance", self.solar_abs),
            ("Visible Absorptance", self.vis_abs if self.vis_abs is not None else self.solar_abs),
        ])


# =============================================================================
# FACTORIES
# =============================================================================

def from_base(name: str, thick_in: float, base: BaseMaterial, k_in: Optional[float] = None) -> Material:
    return Material(name, thick_in=thick_in, k_in=k_in if k_in is not None else base.k_in,
                    rho=base.rho, cp=base.cp)


def from_rvalue(name: str, thick_in: float, rvalue: float, base: BaseMaterial) -> Material:
    """Material of a given thickness whose conductivity yields rvalue."""
    if rvalue <= 0:
        raise ValueError(f"Material '{name}' needs a positive R-value (got {rvalue}).")
    return Material(name, thick_in=thick_in, k_in=thick_in / rvalue, rho=base.rho, cp=base.cp)


def air_film_outside() -> Material:
    return Material("AirFilmOutside", r=0.197)


def air_film_vertical() -> Material:
    return Material("AirFilmVertical", r=0.68)


def air_film_flat_enhanced() -> Material:
    return Material("AirFilmFlatEnhanced", r=0.61)


def air_film_flat_reduced() -> Material:
    return Material("AirFilmFlatReduced", r=0.92)


def air_film_floor_average() -> Material:
    # Average of enhanced and reduced convection
    return Material("AirFilmFloorAverage", r=(0.61 + 0.92) / 2.0)


def air_film_floor_reduced() -> Material:
    return Material("AirFilmFloorReduced", r=0.92)


def air_film_slope_enhanced(pitch_deg: float) -> Material:
    # Flat enhanced at 0 deg, 0.62 at 45 deg, vertical at 90 deg
    return Material("AirFilmSlopeEnhanced", r=0.002 * math.exp(0.0398 * pitch_deg) + 0.608)


def air_film_slope_reduced(pitch_deg: float) -> Material:
    # Flat reduced at 0 deg, 0.76 at 45 deg, vertical at 90 deg
    return Material("AirFilmSlopeReduced", r=0.32 * math.exp(-0.0154 * pitch_deg) + 0.6)


def air_film_roof(pitch_deg: float) -> Material:
    r = (air_film_slope_enhanced(pitch_deg).rvalue + air_film_slope_reduced(pitch_deg).rvalue) / 2.0
    return Material("AirFilmRoof", r=r)


def roof_pitch_degrees(pitch: float) -> float:
    """HPXML roof pitch (rise per 12 in run) in degrees."""
    return math.degrees(math.atan(pitch / 12.0))


def air_gap(thick_in: float = 1.0) -> Material:
    return Material("AirGap", thick_in=thick_in, r=1.0)


def gypsum_wall(thick_in: float) -> Material:
    return from_base("WallDrywall", thick_in, GYPSUM)


def gypsum_ceiling(thick_in: float) -> Material:
    return from_base("CeilingDrywall", thick_in, GYPSUM)


def plywood(thick_in: float, name: str = "Sheathing") -> Material:
    return from_base(name, thick_in, WOOD)


def osb_sheathing(thick_in: float) -> Material:
    return from_base("OSBSheathing", thick_in, WOOD)


def rigid_insulation(rvalue: float, name: str = "WallRigidIns") -> Material:
    thick_in = rvalue * INSULATION_RIGID.k_in
    return Material(name, thick_in=thick_in, k_in=INSULATION_RIGID.k_in,
                    rho=INSULATION_RIGID.rho, cp=INSULATION_RIGID.cp)


def stud(thick_in: float, name: str = "Stud") -> Material:
    return from_base(name, thick_in, WOOD)


def stud_2x4() -> Material:
    return stud(3.5, "Stud2x4")


def stud_2x6() -> Material:
    return stud(5.5, "Stud2x6")


def roofing_asphalt_shingles(solar_abs: float = 0.85, emittance: float = 0.91) -> Material:
    return Material("RoofingMaterial", thick_in=0.372, k_in=1.1282, rho=70.0, cp=0.35,
                    solar_abs=solar_abs, thermal_abs=emittance)


def concrete(thick_in: float, name: str = "Concrete") -> Material:
    return from_base(name, thick_in, CONCRETE)


def soil(thick_in: float = 12.0) -> Material:
    return from_base("Soil", thick_in, SOIL)


def carpet_bare(carpet_frac: float = 0.8, carpet_r: float = 2.08) -> Material:
    """Floor covering; carpet resistance scaled by coverage."""
    thick_in = 0.5 * carpet_frac
    if carpet_frac <= 0 or carpet_r <= 0:
        return Material("FloorCovering", thick_in=0.01, k_in=0.01 / 0.001, rho=CARPET.rho, cp=CARPET.cp)
    return from_rvalue("FloorCovering", thick_in, carpet_r * carpet_frac, CARPET)


def exterior_finish(finish: str) -> Material:
    """Exterior finish material by name, e.g. 'Vinyl, Light'."""
    try:
        thick_in, rvalue, rho, cp, solar_abs, emitt = EXTERIOR_FINISHES[finish]
    except KeyError:
        raise ValueError(f"Unknown exterior finish '{finish}'.") from None
    return Material(f"ExteriorFinish {finish}", thick_in=thick_in, k_in=thick_in / rvalue, rho=rho, cp=cp,
                    solar_abs=solar_abs, thermal_abs=emitt)


def ext_finish_wood_light() -> Material:
    return exterior_finish("Wood, Light")


def generic_layer(name: str, thick_in: float, k_in: float, rho: float, cp: float) -> Material:
    return Material(name, thick_in=thick_in, k_in=k_in, rho=rho, cp=cp)


def cavity_insulation(name: str, thick_in: float, rvalue: float, densepack: bool = True) -> Material:
    base = INSULATION_DENSEPACK if densepack else INSULATION_LOOSEFILL
    return from_rvalue(name, thick_in, rvalue, base)
