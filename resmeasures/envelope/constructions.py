"""
Layered constructions with parallel-path framing.

A Construction has one or more heat-flow paths (e.g. stud and cavity), each
with a fraction of the area, and a stack of layers from outside to inside.
A layer holds either one material (same in every path) or one material per
path. The assembly R-value is

    R = 1 / sum_p(frac_p / sum_l R(l, p))

Framed layers are collapsed into one effective material each so the
simulation sees a plain layered construction with the same R-value. For a
single framed layer this is the classic

    R_eff = 1 / sum_i(frac_i / (R_i + R_other)) - R_other

where R_other is every other layer including the air films.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
import logging

from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, ModelObject, Surface
from ..model.objects import format_idf_object
from . import materials as mats
from .materials import Material

logger = logging.getLogger(__name__)

# Install grade -> fraction of cavity area left as air gaps
INSTALL_GRADE_GAP_FACTORS = {1: 0.0, 2: 0.02, 3: 0.05}


def get_gap_factor(install_grade: int, framing_factor: float, cavity_r: float) -> float:
    """Fraction of the assembly area that is an uninsulated gap."""
    if cavity_r <= 0:
        return 0.0
    try:
        return INSTALL_GRADE_GAP_FACTORS[install_grade] * (1.0 - framing_factor)
    except KeyError:
        raise ValueError(f"Invalid installation grade ({install_grade}); must be 1, 2 or 3.") from None


@dataclass
class Layer:
    name: str
    materials: List[Material]
    is_film: bool = False

    @property
    def homogeneous(self) -> bool:
        first = self.materials[0]
        return all(m is first or m == first for m in self.materials[1:])


class Construction:
    """
    Parallel-path layered construction.

    Usage:
        c = Construction("WallConstruction", [0.23, 0.77])
        c.add_film(0.68 + 0.197)
        c.add_layer(ext_finish)
        c.add_layer([stud, cavity_ins], "WallStudAndCavity")
        c.add_layer(drywall)
        c.create_and_assign(model, [surface])
    """

    def __init__(self, name: str, path_fracs: Sequence[float]):
        if not path_fracs:
            raise ValueError(f"Construction '{name}' needs at least one path.")
        if abs(sum(path_fracs) - 1.0) > 0.01:
            raise ValueError(f"Path fractions for construction '{name}' sum to {sum(path_fracs)}, not 1.")
        if any(f < 0 for f in path_fracs):
            raise ValueError(f"Negative path fraction for construction '{name}'.")
        self.name = name
        self.path_fracs = list(path_fracs)
        self.layers: List[Layer] = []

    def add_layer(self, materials: Union[Material, Sequence[Material]], name: Optional[str] = None) -> None:
        if isinstance(materials, Material):
            materials = [materials] * len(self.path_fracs)
        materials = list(materials)
        if len(materials) != len(self.path_fracs):
            raise ValueError(f"Layer '{name}' has {len(materials)} materials for {len(self.path_fracs)} paths.")
        self.layers.append(Layer(name or materials[0].name, materials))

    def add_film(self, rvalue: float) -> None:
        """Air films. Count toward the assembly R-value but are not written as layers."""
        if rvalue > 0:
            film = Material("AirFilms", r=rvalue)
            self.layers.append(Layer("AirFilms", [film] * len(self.path_fracs), is_film=True))

    # -------------------------------------------------------------------------
    # Parallel path
    # -------------------------------------------------------------------------

    def _active_paths(self) -> List[int]:
        return [i for i, f in enumerate(self.path_fracs) if f > 0]

    def path_rvalues(self) -> List[float]:
        return [sum(layer.materials[p].rvalue for layer in self.layers) for p in range(len(self.path_fracs))]

    def assembly_rvalue(self) -> float:
        """Overall R-value including films (hr-ft^2-F/Btu)."""
        rs = self.path_rvalues()
        u = sum(self.path_fracs[p] / rs[p] for p in self._active_paths())
        return 1.0 / u

    def effective_layers(self) -> List[Material]:
        """One homogeneous material per non-film layer, preserving the assembly R-value."""
        total_r = self.assembly_rvalue()
        active = self._active_paths()
        framed = [l for l in self.layers if not l.homogeneous]
        fixed_r = sum(l.materials[0].rvalue for l in self.layers if l.homogeneous)
        weights = {id(l): sum(self.path_fracs[p] * l.materials[p].rvalue for p in active) for l in framed}
        weight_sum = sum(weights.values())

        result = []
        for layer in self.layers:
            if layer.is_film:
                continue
            if layer.homogeneous:
                result.append(layer.materials[0].with_name(f"{self.name} {layer.name}"))
                continue
            eff_r = (total_r - fixed_r) * weights[id(layer)] / weight_sum
            thick_in = max((m.thick_in or 0.0) for m in layer.materials)
            massive = [(self.path_fracs[p], layer.materials[p]) for p in active if not layer.materials[p].no_mass]
            if thick_in <= 0 or not massive:
                result.append(Material(f"{self.name} {layer.name}", r=eff_r))
                continue
            frac_sum = sum(f for f, _ in massive)
            rho = sum(f * m.rho for f, m in massive) / frac_sum
            cp = sum(f * m.rho * m.cp for f, m in massive) / (frac_sum * rho)
            result.append(Material(f"{self.name} {layer.name}", thick_in=thick_in, k_in=thick_in / eff_r,
                                   rho=rho, cp=cp))
        return result

    def create_and_assign(self, model: Model, surfaces: Sequence[Surface]) -> "LayeredConstruction":
        """Add the effective materials and construction to the model and assign to surfaces."""
        name = model.unique_name("Construction", self.name)
        layers = []
        for mat in self.effective_layers():
            mat = mat.with_name(model.unique_name(mat.obj_type, mat.name))
            model.add(mat)
            layers.append(mat)
        if not layers:
            raise MeasureError(f"Construction '{self.name}' has no layers.")
        constr = model.add(LayeredConstruction(name, layers))
        for surface in surfaces:
            surface.construction = constr.name
        logger.debug(f"Construction '{name}' R-{self.assembly_rvalue():.2f} assigned to {len(surfaces)} surface(s)")
        return constr


@dataclass
class LayeredConstruction:
    """Construction as stored in the model: materials outside to inside."""
    name: str
    layers: List[Material] = field(default_factory=list)
    obj_type: str = "Construction"

    @property
    def rvalue(self) -> float:
        """R-value without air films (hr-ft^2-F/Btu)."""
        return sum(m.rvalue for m in self.layers)

    def to_idf(self) -> str:
        fields = [("Name", self.name)]
        for i, mat in enumerate(self.layers):
            fields.append(("Outside Layer" if i == 0 else f"Layer {i + 1}", mat.name))
        return format_idf_object(self.obj_type, fields)


def get_construction(model: Model, surface: Surface) -> Optional[LayeredConstruction]:
    if surface.construction is None:
        return None
    return model.get("Construction", surface.construction)


def check_surface_assembly_rvalue(model: Model, surface: Surface, film_r: float, assembly_r: float) -> None:
    """
    Verify the surface's construction matches the target assembly R-value.

    Raises:
        MeasureError: If they differ by more than 0.01
    """
    constr = get_construction(model, surface)
    if constr is None:
        raise MeasureError(f"Surface '{surface.name}' has no construction.")
    constr_r = constr.rvalue + film_r
    if abs(assembly_r - constr_r) > 0.01:
        raise MeasureError(f"Construction R-value ({constr_r}) does not match Assembly R-value ({assembly_r}) "
                           f"for '{surface.name}'.")


def apply_solar_abs_emittance(model: Model, surface: Surface, solar_abs: Optional[float],
                              emittance: Optional[float]) -> None:
    """Set the exterior layer's absorptances."""
    constr = get_construction(model, surface)
    if constr is None or not constr.layers:
        return
    outer = constr.layers[0]
    if solar_abs is not None:
        outer.solar_abs = solar_abs
        outer.vis_abs = solar_abs
    if emittance is not None:
        outer.thermal_abs = emittance


# =============================================================================
# ASSEMBLY BUILDERS
# =============================================================================

def _add_exterior_layers(c: Construction, mat_ext_finish: Optional[Material], rigid_r: float,
                         osb_thick_in: float) -> None:
    if mat_ext_finish is not None:
        c.add_layer(mat_ext_finish, "ExteriorFinish")
    if rigid_r and rigid_r > 0:
        c.add_layer(mats.rigid_insulation(rigid_r), "RigidIns")
    if osb_thick_in and osb_thick_in > 0:
        c.add_layer(mats.osb_sheathing(osb_thick_in), "Sheathing")


def _add_drywall(c: Construction, drywall_thick_in: float) -> None:
    if drywall_thick_in and drywall_thick_in > 0:
        c.add_layer(mats.gypsum_wall(drywall_thick_in), "Drywall")


def _cavity_material(name: str, cavity_depth_in: float, cavity_r: float, cavity_filled: bool) -> Material:
    if cavity_r <= 0:
        return mats.air_gap(cavity_depth_in)
    r = cavity_r if cavity_filled else cavity_r + mats.air_gap().rvalue
    return mats.cavity_insulation(name, cavity_depth_in, r)


def apply_wood_stud(model: Model, surfaces: Sequence[Surface], name: str, cavity_r: float,
                    install_grade: int, cavity_depth_in: float, cavity_filled: bool,
                    framing_factor: float, drywall_thick_in: float, osb_thick_in: float,
                    rigid_r: float, mat_ext_finish: Optional[Material],
                    film_r: float = 0.0) -> LayeredConstruction:
    """Wood-framed wall, floor or roof: stud, cavity and install-grade gap paths."""
    if cavity_depth_in <= 0:
        raise ValueError("Cavity depth must be greater than 0.")
    if not 0 <= framing_factor < 1:
        raise ValueError("Framing factor must be greater than or equal to 0 and less than 1.")
    gap_frac = get_gap_factor(install_grade, framing_factor, cavity_r)
    cavity_frac = 1.0 - framing_factor - gap_frac

    c = Construction(name, [framing_factor, cavity_frac, gap_frac])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer([
        mats.stud(cavity_depth_in),
        _cavity_material("CavityIns", cavity_depth_in, cavity_r, cavity_filled),
        mats.air_gap(cavity_depth_in),
    ], "StudAndCavity")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_framed_floor(model: Model, surfaces: Sequence[Surface], name: str, cavity_r: float,
                       joist_depth_in: float, framing_factor: float, plywood_thick_in: float,
                       drywall_thick_in: float, mat_covering: Optional[Material],
                       film_r: float = 0.0) -> LayeredConstruction:
    """Framed floor/ceiling: drywall below, joists and cavity, subfloor and covering above."""
    if joist_depth_in <= 0:
        raise ValueError("Cavity depth must be greater than 0.")
    c = Construction(name, [framing_factor, 1.0 - framing_factor])
    c.add_film(film_r)
    if drywall_thick_in and drywall_thick_in > 0:
        c.add_layer(mats.gypsum_ceiling(drywall_thick_in), "Drywall")
    c.add_layer([
        mats.stud(joist_depth_in, "Joist"),
        _cavity_material("FloorIns", joist_depth_in, cavity_r, True),
    ], "JoistAndCavity")
    if plywood_thick_in and plywood_thick_in > 0:
        c.add_layer(mats.plywood(plywood_thick_in, "Subfloor"), "Subfloor")
    if mat_covering is not None:
        c.add_layer(mat_covering, "Covering")
    return c.create_and_assign(model, surfaces)


def apply_steel_stud(model: Model, surfaces: Sequence[Surface], name: str, cavity_r: float,
                     cavity_depth_in: float, corr_factor: float, drywall_thick_in: float,
                     osb_thick_in: float, rigid_r: float, mat_ext_finish: Optional[Material],
                     film_r: float = 0.0) -> LayeredConstruction:
    """Steel-framed wall; the framing effect is a correction factor on the cavity R-value."""
    eff_r = cavity_r * corr_factor if cavity_r > 0 else mats.air_gap().rvalue
    c = Construction(name, [1.0])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer(mats.cavity_insulation("StudAndCavity", cavity_depth_in, eff_r), "StudAndCavity")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_double_stud(model: Model, surfaces: Sequence[Surface], name: str, cavity_r: float,
                      stud_depth_in: float, framing_factor: float, framing_spacing: float,
                      drywall_thick_in: float, osb_thick_in: float, rigid_r: float,
                      mat_ext_finish: Optional[Material], film_r: float = 0.0) -> LayeredConstruction:
    """
    Double wood stud wall (not staggered, gap depth equal to stud depth).

    Paths: stud (stud / insulated gap / stud), misc framing (solid wood) and
    cavity (insulation through all three layers).
    """
    stud_frac = 1.5 / framing_spacing
    misc_frac = framing_factor - stud_frac
    if misc_frac < 0:
        raise ValueError("Framing factor is less than the stud fraction for the framing spacing.")
    cavity_frac = 1.0 - stud_frac - misc_frac
    ins = mats.cavity_insulation("CavityIns", stud_depth_in, cavity_r / 3.0)
    wood = mats.stud(stud_depth_in)

    c = Construction(name, [stud_frac, misc_frac, cavity_frac])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer([wood, wood, ins], "OuterStudAndCavity")
    c.add_layer([ins, wood, ins], "GapAndCavity")
    c.add_layer([wood, wood, ins], "InnerStudAndCavity")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


SIP_SPLINE_THICK_IN = 0.5
SIP_SPLINE_FRAC = 4.0 / 48.0  # one 4" spline per 48" panel


def apply_sip(model: Model, surfaces: Sequence[Surface], name: str, core_r: float, thick_in: float,
              framing_factor: float, sheath_thick_in: float, drywall_thick_in: float,
              osb_thick_in: float, rigid_r: float, mat_ext_finish: Optional[Material],
              film_r: float = 0.0) -> LayeredConstruction:
    """Structurally insulated panel: framing, spline and core paths."""
    ins_thick_in = thick_in - 2.0 * SIP_SPLINE_THICK_IN
    spline_frac = SIP_SPLINE_FRAC
    cavity_frac = 1.0 - spline_frac - framing_factor
    core_per_in = core_r / thick_in

    spline = mats.stud(SIP_SPLINE_THICK_IN, "Spline")
    edge_ins = mats.cavity_insulation("CoreIns", SIP_SPLINE_THICK_IN, core_per_in * SIP_SPLINE_THICK_IN)
    mid_ins = None
    if ins_thick_in > 0:
        mid_ins = mats.cavity_insulation("CoreIns", ins_thick_in, core_per_in * ins_thick_in)

    c = Construction(name, [framing_factor, spline_frac, cavity_frac])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer(mats.plywood(sheath_thick_in, "SIPSheathing"), "SIPSheathing")
    c.add_layer([mats.stud(SIP_SPLINE_THICK_IN), spline, edge_ins], "OuterSpline")
    if ins_thick_in > 0:
        c.add_layer([mats.stud(ins_thick_in), mid_ins, mid_ins], "Core")
    c.add_layer([mats.stud(SIP_SPLINE_THICK_IN), spline, edge_ins], "InnerSpline")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_cmu(model: Model, surfaces: Sequence[Surface], name: str, thick_in: float, cond_in: float,
              density: float, framing_factor: float, drywall_thick_in: float, osb_thick_in: float,
              rigid_r: float, mat_ext_finish: Optional[Material], film_r: float = 0.0) -> LayeredConstruction:
    """Concrete masonry unit wall with framing and continuous insulation."""
    cmu = Material("CMU", thick_in=thick_in, k_in=cond_in, rho=density, cp=mats.CONCRETE.cp)
    c = Construction(name, [framing_factor, 1.0 - framing_factor])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer([mats.stud(thick_in), cmu], "CMU")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_icf(model: Model, surfaces: Sequence[Surface], name: str, icf_r: float, ins_thick_in: float,
              concrete_thick_in: float, framing_factor: float, drywall_thick_in: float,
              osb_thick_in: float, rigid_r: float, mat_ext_finish: Optional[Material],
              film_r: float = 0.0) -> LayeredConstruction:
    """Insulated concrete form wall: rigid / concrete / rigid, with framing."""
    ins = mats.from_rvalue("ICFIns", ins_thick_in, icf_r, mats.INSULATION_RIGID)
    c = Construction(name, [framing_factor, 1.0 - framing_factor])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    c.add_layer([mats.stud(ins_thick_in), ins], "OuterICFIns")
    c.add_layer([mats.stud(concrete_thick_in), mats.concrete(concrete_thick_in)], "ICFConcrete")
    c.add_layer([mats.stud(ins_thick_in), ins], "InnerICFIns")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_generic(model: Model, surfaces: Sequence[Surface], name: str, thick_ins: Sequence[float],
                  conds: Sequence[float], denss: Sequence[float], specheats: Sequence[float],
                  drywall_thick_in: float, osb_thick_in: float, rigid_r: float,
                  mat_ext_finish: Optional[Material], film_r: float = 0.0) -> LayeredConstruction:
    """Wall of homogeneous layers, listed outside to inside."""
    if not (len(thick_ins) == len(conds) == len(denss) == len(specheats)):
        raise ValueError("Layer property lists must have the same length.")
    c = Construction(name, [1.0])
    c.add_film(film_r)
    _add_exterior_layers(c, mat_ext_finish, rigid_r, osb_thick_in)
    for i, (t, k, rho, cp) in enumerate(zip(thick_ins, conds, denss, specheats), 1):
        if t <= 0:
            raise ValueError(f"Thickness of layer {i} must be greater than 0.")
        if k <= 0:
            raise ValueError(f"Conductivity of layer {i} must be greater than 0.")
        c.add_layer(mats.generic_layer(f"Layer{i}", t, k, rho, cp), f"Layer{i}")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_foundation_wall(model: Model, surfaces: Sequence[Surface], name: str, concrete_thick_in: float,
                          cont_r: float, drywall_thick_in: float, film_r: float = 0.0) -> LayeredConstruction:
    """Concrete foundation wall with continuous insulation on the interior."""
    c = Construction(name, [1.0])
    c.add_film(film_r)
    c.add_layer(mats.concrete(concrete_thick_in, "FoundationWallConcrete"), "Concrete")
    if cont_r > 0:
        c.add_layer(mats.rigid_insulation(cont_r, "FoundationWallIns"), "ContIns")
    _add_drywall(c, drywall_thick_in)
    return c.create_and_assign(model, surfaces)


def apply_slab(model: Model, surfaces: Sequence[Surface], name: str, concrete_thick_in: float,
               under_r: float, under_width: float, perim_r: float, perim_depth: float,
               slab_area: float, exposed_perimeter: float, carpet_frac: float = 0.0,
               carpet_r: float = 0.0) -> LayeredConstruction:
    """
    Slab on grade.

    Under-slab and perimeter insulation are area-weighted over the slab,
    with a soil layer below.
    """
    c = Construction(name, [1.0])
    c.add_layer(mats.soil(), "Soil")
    ins_r = 0.0
    if slab_area > 0:
        if under_r > 0 and under_width > 0:
            ins_area = min(slab_area, exposed_perimeter * under_width)
            ins_r += under_r * ins_area / slab_area
        if perim_r > 0 and perim_depth > 0:
            ins_area = min(slab_area, exposed_perimeter * perim_depth)
            ins_r += perim_r * ins_area / slab_area
    if ins_r > 0:
        c.add_layer(mats.rigid_insulation(ins_r, "SlabIns"), "SlabIns")
    c.add_layer(mats.concrete(concrete_thick_in or 4.0, "SlabConcrete"), "Concrete")
    if carpet_frac > 0 and carpet_r > 0:
        c.add_layer(mats.carpet_bare(carpet_frac, carpet_r), "Carpet")
    return c.create_and_assign(model, surfaces)


def apply_adiabatic(model: Model, surfaces: Sequence[Surface], kind: str = "floor") -> LayeredConstruction:
    """Lightweight construction for inferred adiabatic surfaces."""
    c = Construction(f"Adiabatic{kind.capitalize()}Construction", [1.0])
    if kind == "wall":
        c.add_layer(mats.gypsum_wall(0.5), "Drywall")
        c.add_layer(mats.gypsum_wall(0.5), "Drywall2")
    elif kind == "roof":
        c.add_layer(mats.roofing_asphalt_shingles(), "Roofing")
        c.add_layer(mats.osb_sheathing(0.75), "Sheathing")
        c.add_layer(mats.stud(7.25, "Rafter"), "Rafter")
    elif kind == "floor":
        c.add_layer(mats.plywood(0.75), "Sheathing")
        c.add_layer(mats.carpet_bare(), "Carpet")
    else:
        raise ValueError(f"Unexpected adiabatic construction type '{kind}'.")
    return c.create_and_assign(model, surfaces)


def apply_door(model: Model, surfaces: Sequence, name: str, ufactor: float) -> LayeredConstruction:
    """Door construction with the given U-factor (including films)."""
    film_r = mats.air_film_outside().rvalue + mats.air_film_vertical().rvalue
    door_r = 1.0 / ufactor - film_r
    if door_r <= 0:
        raise MeasureError(f"Door U-factor ({ufactor}) is too high for construction '{name}'.")
    thick_in = 1.75
    door = mats.from_rvalue("DoorMaterial", thick_in, door_r, mats.WOOD)
    c = Construction(name, [1.0])
    c.add_layer(door, "Door")
    constr = c.create_and_assign(model, [])
    for sub in surfaces:
        sub.construction = constr.name
    return constr


def apply_window(model: Model, sub_surfaces: Sequence, name: str, ufactor: float, shgc: float) -> ModelObject:
    """Simple glazing system construction for windows and skylights."""
    if ufactor <= 0 or not 0 < shgc < 1:
        raise MeasureError(f"Invalid window properties for '{name}' (U-factor {ufactor}, SHGC {shgc}).")
    glazing_name = model.unique_name("WindowMaterial:SimpleGlazingSystem", f"{name} Glazing")
    model.add(ModelObject("WindowMaterial:SimpleGlazingSystem", glazing_name, {
        "U-Factor": round(convert(ufactor, "Btu/(hr*ft^2*F)", "W/(m^2*K)"), 4),
        "Solar Heat Gain Coefficient": shgc,
    }))
    constr_name = model.unique_name("Construction", name)
    constr = model.add(ModelObject("Construction", constr_name, {"Outside Layer": glazing_name}))
    for sub in sub_surfaces:
        sub.construction = constr.name
    return constr
