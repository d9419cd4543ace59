"""
Insulation back-solving.

HPXML gives an assembly R-value rather than layer details. For each wall
type a list of candidate construction sets is tried in order; the first one
for which the unknown insulation R-value comes out positive is used, and the
resulting construction is checked against the target assembly R-value.

The closed-form solutions invert the parallel-path equation of each
assembly type (see constructions.py for the matching layer layouts).
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import math

from ..core.exceptions import MeasureError
from ..model import Model, Surface
from . import constructions as cons
from . import materials as mats
from .defaults import get_default_frame_wall_ufactor
from .materials import Material


@dataclass
class WoodStudConstructionSet:
    stud: Material
    framing_factor: float
    rigid_r: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


@dataclass
class SteelStudConstructionSet:
    cavity_thick_in: float
    corr_factor: float
    framing_factor: float
    rigid_r: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


@dataclass
class DoubleStudConstructionSet:
    stud: Material
    framing_factor: float
    framing_spacing: float
    rigid_r: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


@dataclass
class SIPConstructionSet:
    thick_in: float
    framing_factor: float
    rigid_r: float
    sheath_thick_in: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


@dataclass
class CMUConstructionSet:
    thick_in: float
    cond_in: float
    framing_factor: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]
    rigid_r: Optional[float] = None


@dataclass
class ICFConstructionSet:
    ins_thick_in: float
    concrete_thick_in: float
    framing_factor: float
    rigid_r: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


@dataclass
class GenericConstructionSet:
    rigid_r: float
    osb_thick_in: float
    drywall_thick_in: float
    exterior_material: Optional[Material]


def calc_non_cavity_r(film_r: float, constr_set) -> float:
    """R-value of films plus every layer outside the unknown one."""
    non_cavity_r = film_r
    if constr_set.exterior_material is not None:
        non_cavity_r += constr_set.exterior_material.rvalue
    if constr_set.rigid_r:
        non_cavity_r += constr_set.rigid_r
    if constr_set.osb_thick_in:
        non_cavity_r += mats.plywood(constr_set.osb_thick_in).rvalue
    if constr_set.drywall_thick_in:
        non_cavity_r += mats.gypsum_wall(constr_set.drywall_thick_in).rvalue
    return non_cavity_r


def _unable(surface_name: str, assembly_r: float) -> MeasureError:
    return MeasureError(f"Unable to calculate a construction for '{surface_name}' using the provided "
                        f"assembly R-value ({assembly_r}).")


def pick_wood_stud_construction_set(assembly_r: float, constr_sets: Sequence[WoodStudConstructionSet],
                                    film_r: float, surface_name: str) -> Tuple[WoodStudConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        # Install grade 1
        cavity_frac = 1.0 - constr_set.framing_factor
        denom = 1.0 / assembly_r - constr_set.framing_factor / (constr_set.stud.rvalue + non_cavity_r)
        if denom <= 0:
            continue
        cavity_r = cavity_frac / denom - non_cavity_r
        if cavity_r > 0:
            return constr_set, cavity_r
    raise _unable(surface_name, assembly_r)


def pick_steel_stud_construction_set(assembly_r: float, constr_sets: Sequence[SteelStudConstructionSet],
                                     film_r: float, surface_name: str) -> Tuple[SteelStudConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        cavity_r = (assembly_r - non_cavity_r) / constr_set.corr_factor
        if cavity_r > 0:
            return constr_set, cavity_r
    raise _unable(surface_name, assembly_r)


def pick_double_stud_construction_set(assembly_r: float, constr_sets: Sequence[DoubleStudConstructionSet],
                                      film_r: float, surface_name: str) -> Tuple[DoubleStudConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        # Not staggered, gap depth equal to stud depth.
        # 1/a = b/(2c+x+d) + e/(3c+d) + (1-b-e)/(3x+d), solved for x
        a = assembly_r
        b = 1.5 / constr_set.framing_spacing
        c = constr_set.stud.rvalue
        d = non_cavity_r
        e = constr_set.framing_factor - b
        disc = (4 * a**2 * b**2 + 12 * a**2 * b * e + 4 * a**2 * b + 9 * a**2 * e**2 - 6 * a**2 * e + a**2
                - 48 * a * b * c - 16 * a * b * d - 36 * a * c * e + 12 * a * c - 12 * a * d * e + 4 * a * d
                + 36 * c**2 + 24 * c * d + 4 * d**2)
        denom = 2 * (-3 * a * e + 9 * c + 3 * d)
        if disc < 0 or denom == 0:
            continue
        x = ((3 * c + d) * math.sqrt(disc) + 6 * a * b * c + 2 * a * b * d + 3 * a * c * e + 3 * a * c
             + 3 * a * d * e + a * d - 18 * c**2 - 18 * c * d - 4 * d**2) / denom
        cavity_r = 3 * x
        if cavity_r > 0:
            return constr_set, cavity_r
    raise _unable(surface_name, assembly_r)


def pick_sip_construction_set(assembly_r: float, constr_sets: Sequence[SIPConstructionSet],
                              film_r: float, surface_name: str) -> Tuple[SIPConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        non_cavity_r += mats.plywood(constr_set.sheath_thick_in).rvalue

        # 1/a = b/(c+d) + e/(2f + g/h*x + d) + (1-b-e)/(x+d), solved for x
        spline_thick_in = cons.SIP_SPLINE_THICK_IN
        a = assembly_r
        b = constr_set.framing_factor
        c = mats.stud(constr_set.thick_in).rvalue
        d = non_cavity_r
        e = cons.SIP_SPLINE_FRAC
        f = mats.stud(spline_thick_in).rvalue
        g = constr_set.thick_in - 2.0 * spline_thick_in
        h = constr_set.thick_in
        # Quadratic p*x^2 + q*x + r = 0
        p = -a * b * g + c * g + d * g
        q = (a * b * c * g - a * b * d * h - 2 * a * b * f * h + a * c * e * g - a * c * e * h - a * c * g
             + a * d * e * g - a * d * e * h - a * d * g + c * d * g + c * d * h + 2 * c * f * h
             + d**2 * g + d**2 * h + 2 * d * f * h)
        r = (a * b * c * d * h + 2 * a * b * c * f * h - a * c * d * h + 2 * a * c * e * f * h
             - 2 * a * c * f * h - a * d**2 * h + 2 * a * d * e * f * h - 2 * a * d * f * h
             + c * d**2 * h + 2 * c * d * f * h + d**3 * h + 2 * d**2 * f * h)
        disc = q**2 - 4 * p * r
        if disc < 0 or p == 0:
            continue
        cavity_r = (math.sqrt(disc) - q) / (2 * p)
        if cavity_r > 0:
            return constr_set, cavity_r
    raise _unable(surface_name, assembly_r)


def pick_cmu_construction_set(assembly_r: float, constr_sets: Sequence[CMUConstructionSet],
                              film_r: float, surface_name: str) -> Tuple[CMUConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        # No furring strips. 1/a = b/(c+e+x) + (1-b)/(d+e+x), solved for x
        a = assembly_r
        b = constr_set.framing_factor
        c = mats.stud(constr_set.thick_in).rvalue
        d = constr_set.thick_in / constr_set.cond_in
        e = non_cavity_r
        disc = a**2 - 4 * a * b * c + 4 * a * b * d + 2 * a * c - 2 * a * d + c**2 - 2 * c * d + d**2
        if disc < 0:
            continue
        rigid_r = 0.5 * (math.sqrt(disc) + a - c - d - 2 * e)
        if rigid_r > 0:
            return constr_set, rigid_r
    raise _unable(surface_name, assembly_r)


def pick_icf_construction_set(assembly_r: float, constr_sets: Sequence[ICFConstructionSet],
                              film_r: float, surface_name: str) -> Tuple[ICFConstructionSet, float]:
    for constr_set in constr_sets:
        non_cavity_r = calc_non_cavity_r(film_r, constr_set)
        # 1/a = b/(c+e) + (1-b)/(d+e+2x), solved for x
        a = assembly_r
        b = constr_set.framing_factor
        c = mats.stud(2 * constr_set.ins_thick_in + constr_set.concrete_thick_in).rvalue
        d = mats.concrete(constr_set.concrete_thick_in).rvalue
        e = non_cavity_r
        denom = 2 * (a * b - c - e)
        if denom == 0:
            continue
        icf_r = (a * b * c - a * b * d - a * c - a * e + c * d + c * e + d * e + e**2) / denom
        if icf_r > 0:
            return constr_set, icf_r
    raise _unable(surface_name, assembly_r)


def pick_generic_construction_set(assembly_r: float, constr_sets: Sequence[GenericConstructionSet],
                                  film_r: float, surface_name: str) -> Tuple[GenericConstructionSet, float]:
    for constr_set in constr_sets:
        layer_r = assembly_r - calc_non_cavity_r(film_r, constr_set)
        if layer_r > 0:
            return constr_set, layer_r
    raise _unable(surface_name, assembly_r)


# Generic wall types -> (thickness in, base material)
GENERIC_WALL_TYPES = {
    "SolidConcrete": (6.0, mats.CONCRETE),
    "StructuralBrick": (8.0, mats.BRICK),
    "StrawBale": (23.0, mats.STRAW_BALE),
    "Stone": (6.0, mats.STONE),
    "LogWall": (6.0, mats.WOOD),
}

CMU_DENSITY = 119.0  # lbm/ft^3


def apply_wall_construction(model: Model, surface: Surface, wall_id: str, wall_type: str,
                            assembly_r: Optional[float], drywall_thick_in: float, film_r: float,
                            mat_ext_finish: Optional[Material], solar_abs: Optional[float],
                            emittance: Optional[float], iecc_zone: Optional[str] = None) -> None:
    """
    Build and assign a wall construction of the given HPXML wall type that
    reaches the assembly R-value.

    Raises:
        MeasureError: Unknown wall type, no feasible construction, or an
            R-value mismatch
    """
    if assembly_r is None:
        assembly_r = 1.0 / get_default_frame_wall_ufactor(iecc_zone)
    name = f"wall {wall_id}"

    if wall_type == "WoodStud":
        constr_sets = [
            WoodStudConstructionSet(mats.stud_2x6(), 0.20, 10.0, 0.5, drywall_thick_in, mat_ext_finish),  # 2x6, 24" o.c. + R10
            WoodStudConstructionSet(mats.stud_2x6(), 0.20, 5.0, 0.5, drywall_thick_in, mat_ext_finish),   # 2x6, 24" o.c. + R5
            WoodStudConstructionSet(mats.stud_2x6(), 0.20, 0.0, 0.5, drywall_thick_in, mat_ext_finish),   # 2x6, 24" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.23, 0.0, 0.5, drywall_thick_in, mat_ext_finish),   # 2x4, 16" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.01, 0.0, 0.0, 0.0, None),                          # Fallback
        ]
        constr_set, cavity_r = pick_wood_stud_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_wood_stud(model, [surface], "WallConstruction", cavity_r, 1, constr_set.stud.thick_in, True,
                             constr_set.framing_factor, constr_set.drywall_thick_in, constr_set.osb_thick_in,
                             constr_set.rigid_r, constr_set.exterior_material, film_r)

    elif wall_type == "SteelFrame":
        corr_factor = 0.45
        constr_sets = [
            SteelStudConstructionSet(5.5, corr_factor, 0.20, 10.0, 0.5, drywall_thick_in, mat_ext_finish),
            SteelStudConstructionSet(5.5, corr_factor, 0.20, 5.0, 0.5, drywall_thick_in, mat_ext_finish),
            SteelStudConstructionSet(5.5, corr_factor, 0.20, 0.0, 0.5, drywall_thick_in, mat_ext_finish),
            SteelStudConstructionSet(3.5, corr_factor, 0.23, 0.0, 0.5, drywall_thick_in, mat_ext_finish),
            SteelStudConstructionSet(3.5, 1.0, 0.01, 0.0, 0.0, 0.0, None),
        ]
        constr_set, cavity_r = pick_steel_stud_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_steel_stud(model, [surface], "WallConstruction", cavity_r, constr_set.cavity_thick_in,
                              constr_set.corr_factor, constr_set.drywall_thick_in, constr_set.osb_thick_in,
                              constr_set.rigid_r, constr_set.exterior_material, film_r)

    elif wall_type == "DoubleWoodStud":
        constr_sets = [
            DoubleStudConstructionSet(mats.stud_2x4(), 0.23, 24.0, 0.0, 0.5, drywall_thick_in, mat_ext_finish),
            DoubleStudConstructionSet(mats.stud_2x4(), 0.10, 16.0, 0.0, 0.0, 0.0, None),
        ]
        constr_set, cavity_r = pick_double_stud_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_double_stud(model, [surface], "WallConstruction", cavity_r, constr_set.stud.thick_in,
                               constr_set.framing_factor, constr_set.framing_spacing, constr_set.drywall_thick_in,
                               constr_set.osb_thick_in, constr_set.rigid_r, constr_set.exterior_material, film_r)

    elif wall_type == "ConcreteMasonryUnit":
        constr_sets = [
            CMUConstructionSet(8.0, 1.4, 0.08, 0.5, drywall_thick_in, mat_ext_finish),  # 8" perlite-filled CMU
            CMUConstructionSet(6.0, 5.29, 0.01, 0.0, 0.0, None),                        # 6" hollow CMU
        ]
        constr_set, rigid_r = pick_cmu_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_cmu(model, [surface], "WallConstruction", constr_set.thick_in, constr_set.cond_in,
                       CMU_DENSITY, constr_set.framing_factor, constr_set.drywall_thick_in,
                       constr_set.osb_thick_in, rigid_r, constr_set.exterior_material, film_r)

    elif wall_type == "StructurallyInsulatedPanel":
        sheathing_thick_in = 0.44
        constr_sets = [
            SIPConstructionSet(10.0, 0.16, 0.0, sheathing_thick_in, 0.5, drywall_thick_in, mat_ext_finish),
            SIPConstructionSet(5.0, 0.16, 0.0, sheathing_thick_in, 0.5, drywall_thick_in, mat_ext_finish),
            SIPConstructionSet(1.0, 0.01, 0.0, sheathing_thick_in, 0.0, 0.0, None),
        ]
        constr_set, core_r = pick_sip_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_sip(model, [surface], "WallConstruction", core_r, constr_set.thick_in,
                       constr_set.framing_factor, constr_set.sheath_thick_in, constr_set.drywall_thick_in,
                       constr_set.osb_thick_in, constr_set.rigid_r, constr_set.exterior_material, film_r)

    elif wall_type == "InsulatedConcreteForms":
        constr_sets = [
            ICFConstructionSet(2.0, 4.0, 0.08, 0.0, 0.5, drywall_thick_in, mat_ext_finish),
            ICFConstructionSet(1.0, 1.0, 0.01, 0.0, 0.0, 0.0, None),
        ]
        constr_set, icf_r = pick_icf_construction_set(assembly_r, constr_sets, film_r, name)
        cons.apply_icf(model, [surface], "WallConstruction", icf_r, constr_set.ins_thick_in,
                       constr_set.concrete_thick_in, constr_set.framing_factor, constr_set.drywall_thick_in,
                       constr_set.osb_thick_in, constr_set.rigid_r, constr_set.exterior_material, film_r)

    elif wall_type in GENERIC_WALL_TYPES:
        constr_sets = [
            GenericConstructionSet(10.0, 0.5, drywall_thick_in, mat_ext_finish),  # w/ R-10 rigid
            GenericConstructionSet(0.0, 0.5, drywall_thick_in, mat_ext_finish),   # Standard
            GenericConstructionSet(0.0, 0.0, 0.0, None),                          # Fallback
        ]
        constr_set, layer_r = pick_generic_construction_set(assembly_r, constr_sets, film_r, name)
        thick_in, base = GENERIC_WALL_TYPES[wall_type]
        cons.apply_generic(model, [surface], "WallConstruction", [thick_in], [thick_in / layer_r],
                           [base.rho], [base.cp], constr_set.drywall_thick_in, constr_set.osb_thick_in,
                           constr_set.rigid_r, constr_set.exterior_material, film_r)

    else:
        raise MeasureError(f"Unexpected wall type '{wall_type}'.")

    cons.check_surface_assembly_rvalue(model, surface, film_r, assembly_r)
    cons.apply_solar_abs_emittance(model, surface, solar_abs, emittance)
