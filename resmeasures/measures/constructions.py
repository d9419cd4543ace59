"""
Envelope construction measures: finished (cathedral) roofs and generic
layered walls.
"""

from typing import Any, Dict, List, Optional
import logging

from ..core import constants
from ..envelope import constructions as cons
from ..envelope import materials as mats
from ..envelope.geometry import get_roof_pitch
from ..measure import Measure, MeasureArgument, MeasureRunner
from ..model import Model, Surface

logger = logging.getLogger(__name__)

NUM_GENERIC_LAYERS = 5
EXT_FINISH_NONE = "None"


def get_conditioned_surfaces(model: Model, surface_type: str) -> List[Surface]:
    """Exterior surfaces of one type bounding the conditioned spaces."""
    surfaces = []
    for space in model.spaces:
        if space.space_type not in constants.CONDITIONED_SPACE_TYPES:
            continue
        for surface in model.surfaces_in(space):
            if surface.surface_type == surface_type and surface.outside_boundary_condition == "Outdoors":
                surfaces.append(surface)
    return surfaces


# =============================================================================
# Finished roof
# =============================================================================

class FinishedRoofConstruction(Measure):
    """Wood-framed roof over a finished attic or cathedral ceiling."""

    name = "Set Residential Finished Roof Construction"
    description = ("Sets the wood stud construction of roofs above finished space. "
                   "Any existing constructions for these surfaces are replaced.")

    ROOFING_THICK_IN = 0.372
    OSB_THICK_IN = 0.75
    DRYWALL_THICK_IN = 0.5

    def arguments(self) -> List[MeasureArgument]:
        return [
            MeasureArgument("cavity_r", "double", default=30.0, units="h-ft^2-R/Btu",
                            display_name="Cavity Insulation Installed R-value",
                            description="Refers to the R-value of the cavity insulation and not the overall R-value "
                                        "of the assembly. If batt insulation must be compressed to fit within the "
                                        "cavity, use the compressed R-value."),
            MeasureArgument("install_grade", "choice", default="1", choices=("1", "2", "3"),
                            display_name="Cavity Install Grade",
                            description="Installation grade as defined by RESNET standard. 5% of the cavity is "
                                        "considered missing insulation for Grade 3, 2% for Grade 2, and 0% for "
                                        "Grade 1."),
            MeasureArgument("cavity_depth", "double", default=9.25, units="in",
                            display_name="Cavity Depth",
                            description="Depth of the stud cavity. 3.5\" for 2x4s, 5.5\" for 2x6s, etc."),
            MeasureArgument("filled_cavity", "boolean", default=True,
                            display_name="Insulation Fills Cavity",
                            description="When the insulation does not completely fill the depth of the cavity, "
                                        "air film resistances are added to the insulation R-value."),
            MeasureArgument("framing_factor", "double", default=0.07, units="frac",
                            display_name="Framing Factor",
                            description="The fraction of a roof assembly that is comprised of structural framing."),
        ]

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        surfaces = get_conditioned_surfaces(model, "RoofCeiling")
        if not surfaces:
            runner.register_info("No surfaces found to apply the finished roof construction to.")
            return True

        cavity_r = args["cavity_r"]
        if cavity_r < 0:
            return runner.register_error("Cavity Insulation Installed R-value must be greater than or equal to 0.")
        if args["cavity_depth"] <= 0:
            return runner.register_error("Cavity Depth must be greater than 0.")
        if not 0 <= args["framing_factor"] < 1:
            return runner.register_error("Framing Factor must be greater than or equal to 0 and less than 1.")

        # Films take part in the parallel-path sum but are not written as layers
        film_r = mats.air_film_outside().rvalue + mats.air_film_roof(get_roof_pitch(surfaces)).rvalue
        constr = cons.apply_wood_stud(
            model, surfaces, "FinishedRoofConstruction", cavity_r, int(args["install_grade"]),
            args["cavity_depth"], args["filled_cavity"], args["framing_factor"],
            self.DRYWALL_THICK_IN, self.OSB_THICK_IN, 0.0, mats.roofing_asphalt_shingles(), film_r=film_r)
        for surface in surfaces:
            cons.apply_solar_abs_emittance(model, surface, 0.85, 0.91)

        runner.register_value("assembly_r", round(constr.rvalue, 3))
        runner.register_final_condition(f"Construction '{constr.name}' (R-{constr.rvalue:.2f}) "
                                        f"assigned to {len(surfaces)} roof surface(s).")
        return True


# =============================================================================
# Generic wall
# =============================================================================

class GenericWallConstruction(Measure):
    """Above-grade exterior walls built from up to five homogeneous layers."""

    name = "Set Residential Generic Wall Construction"
    description = ("Sets the construction of above-grade exterior walls from user-defined layers, listed "
                   "outside to inside. Any existing constructions for these surfaces are replaced.")

    def arguments(self) -> List[MeasureArgument]:
        args = []
        for i in range(1, NUM_GENERIC_LAYERS + 1):
            args += [
                MeasureArgument(f"thick_in_{i}", "double", required=False, units="in",
                                display_name=f"Thickness {i}",
                                description=f"Thickness of layer {i} of the wall (outside to inside)."),
                MeasureArgument(f"conductivity_{i}", "double", required=False, units="Btu-in/h-ft^2-R",
                                display_name=f"Conductivity {i}",
                                description=f"Conductivity of layer {i} of the wall."),
                MeasureArgument(f"density_{i}", "double", required=False, units="lb/ft^3",
                                display_name=f"Density {i}", description=f"Density of layer {i} of the wall."),
                MeasureArgument(f"specific_heat_{i}", "double", required=False, units="Btu/lb-R",
                                display_name=f"Specific Heat {i}",
                                description=f"Specific heat of layer {i} of the wall."),
            ]
        args += [
            MeasureArgument("drywall_thick_in", "double", default=0.5, units="in",
                            display_name="Drywall Thickness",
                            description="Thickness of the wall drywall. Enter 0 for no drywall."),
            MeasureArgument("osb_thick_in", "double", default=0.5, units="in",
                            display_name="OSB Sheathing Thickness",
                            description="Thickness of the wall OSB sheathing. Enter 0 for no sheathing."),
            MeasureArgument("rigid_r", "double", default=0.0, units="h-ft^2-R/Btu",
                            display_name="Continuous Insulation Nominal R-value",
                            description="The R-value of the continuous insulation."),
            MeasureArgument("exterior_finish", "choice", default="Wood, Light",
                            choices=tuple(mats.EXTERIOR_FINISHES) + (EXT_FINISH_NONE,),
                            display_name="Exterior Finish",
                            description="The exterior finish material."),
        ]
        return args

    @staticmethod
    def get_layers(args: Dict[str, Any]) -> Optional[List[tuple]]:
        """
        (thickness, conductivity, density, specific heat) per entered layer.

        Raises:
            ValueError: On a non-positive value or a partially entered layer
        """
        layers = []
        for i in range(1, NUM_GENERIC_LAYERS + 1):
            values = [args.get(f"{prop}_{i}") for prop in ("thick_in", "conductivity", "density", "specific_heat")]
            if all(v is None for v in values):
                continue
            for label, v in zip(("Thickness", "Conductivity", "Density", "Specific Heat"), values):
                if v is not None and v <= 0:
                    raise ValueError(f"{label} {i} must be greater than 0.")
            if any(v is None for v in values):
                raise ValueError(f"Layer {i} does not have all four properties "
                                 f"(thickness, conductivity, density, specific heat) entered.")
            layers.append(tuple(values))
        return layers

    def run(self, model: Model, runner: MeasureRunner, args: Dict[str, Any]) -> bool:
        try:
            layers = self.get_layers(args)
        except ValueError as e:
            return runner.register_error(str(e))

        if args["exterior_finish"] == EXT_FINISH_NONE:
            return runner.register_error("Generic wall type cannot have a 'None' exterior finish")

        surfaces = get_conditioned_surfaces(model, "Wall")
        if not surfaces:
            runner.register_info("No surfaces found to apply the generic wall construction to.")
            return True

        thick_ins, conds, denss, specheats = (list(col) for col in zip(*layers)) if layers else ([], [], [], [])
        constr = cons.apply_generic(model, surfaces, "ExtInsFinWallConstruction", thick_ins, conds, denss,
                                    specheats, args["drywall_thick_in"], args["osb_thick_in"], args["rigid_r"],
                                    mats.exterior_finish(args["exterior_finish"]))

        runner.register_value("assembly_r", round(constr.rvalue, 3))
        runner.register_final_condition(f"Construction '{constr.name}' ({len(layers)} layer(s), "
                                        f"R-{constr.rvalue:.2f}) assigned to {len(surfaces)} wall(s).")
        return True
