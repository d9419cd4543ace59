"""
Building enclosure from HPXML.

Adds foundations, walls, rim joists, windows, doors, skylights and attics as
surfaces with constructions back-solved from the HPXML assembly R-values,
then reconciles conditioned floor area, adds thermal mass, assigns zone
volumes and explodes the surfaces.

Usage:
    builder = EnclosureBuilder(model, hpxml, runner)
    if not builder.build():
        return False
"""

from typing import Dict, List, Optional
import logging
import math

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..hpxml import (
    get_attic_adjacent_to,
    get_foundation_adjacent_to,
    get_space_type,
    is_external_thermal_boundary,
)
from ..measure import MeasureRunner
from ..model import Model, SubSurface, Surface
from . import constructions as cons
from . import geometry as geo
from . import materials as mats
from .backsolve import WoodStudConstructionSet, apply_wall_construction, pick_wood_stud_construction_set
from .constructions import Construction
from .defaults import (
    get_default_basement_wall_ufactor,
    get_default_ceiling_ufactor,
    get_default_floor_ufactor,
    get_default_frame_wall_ufactor,
    get_default_interior_shading_factors,
    get_default_slab_perimeter_rvalue_depth,
    get_default_slab_under_rvalue_width,
    get_default_window_ufactor_shgc,
)

logger = logging.getLogger(__name__)

WALL_STORY_HEIGHT = 8.0  # ft
RIM_JOIST_HEIGHT = 1.0  # ft
WINDOW_DEFAULT_HEIGHT = 4.0  # ft
DOOR_HEIGHT = 6.67  # ft


class EnclosureBuilder:
    """
    Adds the building enclosure to a model.

    Steps raise MeasureError on invalid input; build() also registers the
    per-zone completeness errors with the runner.
    """

    def __init__(self, model: Model, hpxml, runner: MeasureRunner):
        self.model = model
        self.hpxml = hpxml
        self.runner = runner
        self.iecc_zone = hpxml.iecc_zone_2006
        self.subsurface_areas: Dict[str, float] = geo.get_subsurface_areas(hpxml)

    def build(self) -> bool:
        self.add_building_info()
        self.add_foundations()
        self.add_walls()
        self.add_rim_joists()
        self.add_windows()
        self.add_doors()
        self.add_skylights()
        self.add_attics()
        if not self.add_finished_floor_area():
            return False
        self.add_thermal_mass()

        errors = geo.check_for_errors(self.model)
        for error in errors:
            self.runner.register_error(error)
        if errors:
            return False

        geo.set_zone_volumes(self.model, self.hpxml.building.conditioned_building_volume)
        geo.explode_surfaces(self.model)
        logger.info(f"Enclosure: {len(self.model.surfaces)} surfaces in {len(self.model.spaces)} spaces")
        return True

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _add_surface(self, name: str, surface_type: str, vertices, **properties) -> Surface:
        surface = Surface(name=name, surface_type=surface_type, vertices=vertices)
        surface.properties.update(properties)
        return self.model.add(surface)

    def set_surface_interior(self, surface: Surface, surface_id: str, interior_adjacent_to: str) -> None:
        surface.space = self.model.create_or_get_space(get_space_type(interior_adjacent_to, surface_id))

    def set_surface_exterior(self, surface: Surface, surface_id: str, exterior_adjacent_to: str) -> None:
        if exterior_adjacent_to == constants.LOCATION_OUTSIDE:
            surface.outside_boundary_condition = "Outdoors"
        elif exterior_adjacent_to == constants.LOCATION_GROUND:
            surface.outside_boundary_condition = "Foundation"
        else:
            surface.outside_boundary_condition = "Surface"
            surface.adjacent_space = self.model.create_or_get_space(get_space_type(exterior_adjacent_to, surface_id))

    def _net_area(self, gross_area: float, surface_id: str, kind: str = "Wall") -> float:
        net_area = geo.net_wall_area(gross_area, self.subsurface_areas, surface_id)
        if net_area <= 0:
            raise MeasureError(f"Calculated a negative net surface area for {kind} '{surface_id}'.")
        return net_area

    @staticmethod
    def _wall_films(exterior_adjacent_to: str):
        """(film R, exterior finish) of a wall by what is outside it."""
        if exterior_adjacent_to == constants.LOCATION_OUTSIDE:
            return mats.air_film_vertical().rvalue + mats.air_film_outside().rvalue, mats.ext_finish_wood_light()
        return 2.0 * mats.air_film_vertical().rvalue, None

    @staticmethod
    def _drywall(interior_adjacent_to: str, exterior_adjacent_to: str) -> float:
        return 0.5 if is_external_thermal_boundary(interior_adjacent_to, exterior_adjacent_to) else 0.0

    def _wall_space_for(self, wall_idref: str, subsurface_id: str, kind: str):
        for wall in self.hpxml.walls:
            if wall.id == wall_idref:
                return self.model.create_or_get_space(get_space_type(wall.interior_adjacent_to, subsurface_id))
        raise MeasureError(f"Attached wall '{wall_idref}' not found for {kind} '{subsurface_id}'.")

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def add_building_info(self) -> None:
        b = self.hpxml.building
        self.model.properties.update({
            "number_of_stories": b.number_of_conditioned_floors,
            "number_of_stories_above_grade": b.number_of_conditioned_floors_above_grade,
            "number_of_living_units": 1,
        })
        if b.garage_present:
            self.model.properties["garage_frac_under_finished_space"] = 0.5

    def add_foundations(self) -> None:
        for foundation in self.hpxml.foundations:
            self._add_foundation(foundation)

    def _add_foundation(self, foundation) -> None:
        interior_adjacent_to = get_foundation_adjacent_to(foundation.foundation_type)

        if len(foundation.slabs) > 1:
            raise MeasureError("Cannot currently handle multiple Foundation/Slab elements.")
        if len(foundation.foundation_walls) > 1:
            raise MeasureError("Cannot currently handle multiple Foundation/FoundationWall elements.")

        slab_surface = None
        slab = foundation.slabs[0] if foundation.slabs else None
        if slab is not None:
            length, width = geo.get_slab_dimensions(slab.exposed_perimeter, slab.area)
            slab_surface = self._add_surface(slab.id, "Floor", geo.add_floor_polygon(length, width, -slab.depth_below_grade))
            slab_surface.outside_boundary_condition = "Foundation"
            self.set_surface_interior(slab_surface, slab.id, interior_adjacent_to)

        wall_surface = None
        fnd_wall = foundation.foundation_walls[0] if foundation.foundation_walls else None
        wall_assembly_r = wall_film_r = None
        if fnd_wall is not None:
            net_area = self._net_area(fnd_wall.area, fnd_wall.id)
            length = net_area / fnd_wall.height
            azimuth = fnd_wall.azimuth if fnd_wall.azimuth is not None else 0.0
            wall_surface = self._add_surface(
                fnd_wall.id, "Wall",
                geo.add_wall_polygon(length, fnd_wall.height, -fnd_wall.depth_below_grade, azimuth),
                Length=length, Azimuth=azimuth,
            )
            self.set_surface_interior(wall_surface, fnd_wall.id, interior_adjacent_to)
            self.set_surface_exterior(wall_surface, fnd_wall.id, fnd_wall.adjacent_to)

            drywall_thick_in = self._drywall(interior_adjacent_to, fnd_wall.adjacent_to)
            wall_assembly_r = fnd_wall.insulation_assembly_r_value
            if wall_assembly_r is None:
                wall_assembly_r = 1.0 / get_default_basement_wall_ufactor(self.iecc_zone)
            wall_film_r = mats.air_film_vertical().rvalue
            concrete_r = mats.concrete(fnd_wall.thickness).rvalue
            cont_r = wall_assembly_r - concrete_r - mats.gypsum_wall(drywall_thick_in).rvalue - wall_film_r
            if cont_r < 0:
                # Try without drywall
                drywall_thick_in = 0.0
                cont_r = wall_assembly_r - concrete_r - wall_film_r
            if cont_r < 0:
                raise MeasureError(f"Unable to calculate a construction for 'foundation wall {fnd_wall.id}' "
                                   f"using the provided assembly R-value ({wall_assembly_r}).")
            cons.apply_foundation_wall(self.model, [wall_surface], "FndWallConstruction", fnd_wall.thickness,
                                       cont_r, drywall_thick_in, wall_film_r)

        ceiling_surfaces: List[Surface] = []
        floor_assembly_r = floor_film_r = floor_set = floor_cav_r = None
        for frame_floor in foundation.frame_floors:
            width = math.sqrt(frame_floor.area)
            length = frame_floor.area / width
            if foundation.foundation_type == "Ambient":
                z_origin = 2.0
            elif foundation.foundation_type == "SlabOnGrade":
                z_origin = 0.0
            else:
                if fnd_wall is None:
                    raise MeasureError(f"Foundation '{foundation.id}' of type {foundation.foundation_type} "
                                       f"has no FoundationWall.")
                z_origin = -fnd_wall.depth_below_grade + fnd_wall.height

            polygon = geo.add_floor_polygon(length, width, z_origin)
            if interior_adjacent_to == constants.LOCATION_OUTSIDE:
                # Pier and beam
                surface = self._add_surface(frame_floor.id, "Floor", polygon)
                self.set_surface_interior(surface, frame_floor.id, frame_floor.adjacent_to)
                self.set_surface_exterior(surface, frame_floor.id, interior_adjacent_to)
            else:
                surface = self._add_surface(frame_floor.id, "RoofCeiling", polygon)
                self.set_surface_interior(surface, frame_floor.id, interior_adjacent_to)
                self.set_surface_exterior(surface, frame_floor.id, frame_floor.adjacent_to)
            ceiling_surfaces.append(surface)

            floor_film_r = 2.0 * mats.air_film_floor_reduced().rvalue
            floor_assembly_r = frame_floor.insulation_assembly_r_value
            if floor_assembly_r is None:
                floor_assembly_r = 1.0 / get_default_floor_ufactor(self.iecc_zone)
            covering = mats.carpet_bare()
            constr_sets = [
                WoodStudConstructionSet(mats.stud_2x6(), 0.10, 0.0, 0.75, 0.0, covering),  # 2x6, 24" o.c.
                WoodStudConstructionSet(mats.stud_2x4(), 0.13, 0.0, 0.5, 0.0, covering),   # 2x4, 16" o.c.
                WoodStudConstructionSet(mats.stud_2x4(), 0.01, 0.0, 0.0, 0.0, None),        # Fallback
            ]
            floor_set, floor_cav_r = pick_wood_stud_construction_set(
                floor_assembly_r, constr_sets, floor_film_r, f"foundation framefloor {frame_floor.id}")

        if slab_surface is not None:
            self._apply_slab(slab, slab_surface)
        if wall_surface is not None:
            cons.check_surface_assembly_rvalue(self.model, wall_surface, wall_film_r, wall_assembly_r)

        if ceiling_surfaces:
            cons.apply_framed_floor(self.model, ceiling_surfaces, "FndCeilingConstruction", floor_cav_r,
                                    floor_set.stud.thick_in, floor_set.framing_factor, floor_set.osb_thick_in,
                                    floor_set.drywall_thick_in, floor_set.exterior_material, floor_film_r)
            cons.check_surface_assembly_rvalue(self.model, ceiling_surfaces[0], floor_film_r, floor_assembly_r)

    def _apply_slab(self, slab, surface: Surface) -> None:
        perim_r, perim_depth = slab.perimeter_insulation_r_value, slab.perimeter_insulation_depth
        if perim_r is None or perim_depth is None:
            perim_r, perim_depth = get_default_slab_perimeter_rvalue_depth(self.iecc_zone)
        if perim_r == 0 or perim_depth == 0:
            perim_r = perim_depth = 0.0
        under_r, under_width = slab.under_slab_insulation_r_value, slab.under_slab_insulation_width
        if under_r is None or under_width is None:
            under_r, under_width = get_default_slab_under_rvalue_width()
        if under_r == 0 or under_width == 0:
            under_r = under_width = 0.0
        cons.apply_slab(self.model, [surface], "SlabConstruction", slab.thickness, under_r, under_width,
                        perim_r, perim_depth, slab.area, slab.exposed_perimeter,
                        slab.carpet_fraction or 0.0, slab.carpet_r_value or 0.0)

    def add_walls(self) -> None:
        foundation_top = geo.get_foundation_top(self.model)
        wall_height = WALL_STORY_HEIGHT * self.hpxml.building.number_of_conditioned_floors_above_grade
        for wall in self.hpxml.walls:
            net_area = self._net_area(wall.area, wall.id)
            length = net_area / wall_height
            azimuth = wall.azimuth if wall.azimuth is not None else 0.0
            surface = self._add_surface(wall.id, "Wall", geo.add_wall_polygon(length, wall_height, foundation_top, azimuth),
                                        Length=length, Azimuth=azimuth)
            self.set_surface_interior(surface, wall.id, wall.interior_adjacent_to)
            self.set_surface_exterior(surface, wall.id, wall.exterior_adjacent_to)

            drywall_thick_in = self._drywall(wall.interior_adjacent_to, wall.exterior_adjacent_to)
            film_r, mat_ext_finish = self._wall_films(wall.exterior_adjacent_to)
            apply_wall_construction(self.model, surface, wall.id, wall.wall_type, wall.insulation_assembly_r_value,
                                    drywall_thick_in, film_r, mat_ext_finish, wall.solar_absorptance, wall.emittance,
                                    self.iecc_zone)

    def add_rim_joists(self) -> None:
        foundation_top = geo.get_foundation_top(self.model)
        for rim_joist in self.hpxml.rim_joists:
            length = rim_joist.area / RIM_JOIST_HEIGHT
            azimuth = rim_joist.azimuth if rim_joist.azimuth is not None else 0.0
            surface = self._add_surface(rim_joist.id, "Wall",
                                        geo.add_wall_polygon(length, RIM_JOIST_HEIGHT, foundation_top, azimuth),
                                        Length=length, Azimuth=azimuth)
            self.set_surface_interior(surface, rim_joist.id, rim_joist.interior_adjacent_to)
            self.set_surface_exterior(surface, rim_joist.id, rim_joist.exterior_adjacent_to)

            drywall_thick_in = self._drywall(rim_joist.interior_adjacent_to, rim_joist.exterior_adjacent_to)
            film_r, mat_ext_finish = self._wall_films(rim_joist.exterior_adjacent_to)
            assembly_r = rim_joist.insulation_assembly_r_value
            if assembly_r is None:
                assembly_r = 1.0 / get_default_frame_wall_ufactor(self.iecc_zone)
            rim = mats.stud(2.0, "RimJoist")
            constr_sets = [
                WoodStudConstructionSet(rim, 0.17, 10.0, 2.0, drywall_thick_in, mat_ext_finish),  # 2x4 + R10
                WoodStudConstructionSet(rim, 0.17, 5.0, 2.0, drywall_thick_in, mat_ext_finish),   # 2x4 + R5
                WoodStudConstructionSet(rim, 0.17, 0.0, 2.0, drywall_thick_in, mat_ext_finish),   # 2x4
                WoodStudConstructionSet(rim, 0.01, 0.0, 0.0, 0.0, None),                          # Fallback
            ]
            constr_set, cavity_r = pick_wood_stud_construction_set(assembly_r, constr_sets, film_r,
                                                                   f"rim joist {rim_joist.id}")
            cons.apply_wood_stud(self.model, [surface], "RimJoistConstruction", cavity_r, 1,
                                 constr_set.stud.thick_in, True, constr_set.framing_factor,
                                 constr_set.drywall_thick_in, constr_set.osb_thick_in, constr_set.rigid_r,
                                 constr_set.exterior_material, film_r)
            cons.check_surface_assembly_rvalue(self.model, surface, film_r, assembly_r)
            cons.apply_solar_abs_emittance(self.model, surface, 0.75, 0.9)

    def add_windows(self) -> None:
        foundation_top = geo.get_foundation_top(self.model)
        default_summer, default_winter = get_default_interior_shading_factors()
        shade_mults = self.model.properties.setdefault("window_shade_multipliers", {})
        surfaces = []
        for window in self.hpxml.windows:
            height = WINDOW_DEFAULT_HEIGHT
            if window.overhangs_depth is not None:
                height = window.overhangs_distance_to_bottom_of_window - window.overhangs_distance_to_top_of_window
            width = window.area / height
            # Base surface is slightly larger than its window
            surface = self._add_surface(
                f"surface {window.id}", "Wall",
                geo.add_wall_polygon(width, height, foundation_top, window.azimuth, (0.0, 0.001, 0.002, 0.001)),
                Length=width, Azimuth=window.azimuth,
            )
            surface.space = self._wall_space_for(window.wall_idref, window.id, "window")
            surface.outside_boundary_condition = "Outdoors"
            surfaces.append(surface)

            sub = surface.add_sub_surface(SubSurface(
                window.id, "FixedWindow",
                geo.add_wall_polygon(width, height, foundation_top, window.azimuth, (-0.001, 0.0, 0.001, 0.0)),
            ))
            if window.overhangs_depth is not None:
                self.model.add_object(
                    "Shading:Overhang", f"{window.id} - overhangs",
                    Window_or_Door_Name=window.id,
                    Height_above_Window_or_Door=round(convert(window.overhangs_distance_to_top_of_window, "ft", "m"), 4),
                    Tilt_Angle_from_WindowDoor=90.0,
                    Left_extension_from_WindowDoor_Width=0.0,
                    Right_extension_from_WindowDoor_Width=0.0,
                    Depth=round(convert(window.overhangs_depth, "ft", "m"), 4),
                )

            cool_mult = window.interior_shading_factor_summer
            heat_mult = window.interior_shading_factor_winter
            shade_mults[window.id] = (
                default_winter if heat_mult is None else heat_mult,
                default_summer if cool_mult is None else cool_mult,
            )
            cons.apply_window(self.model, [sub], "WindowConstruction", window.ufactor, window.shgc)

        if surfaces:
            cons.apply_adiabatic(self.model, surfaces, "wall")

    def add_skylights(self) -> None:
        walls_top = geo.get_walls_top(self.model)
        surfaces = []
        for skylight in self.hpxml.skylights:
            tilt = None
            for _, roof in self.hpxml.all_roofs():
                if roof.id == skylight.roof_idref:
                    tilt = roof.pitch / 12.0
            if tilt is None:
                raise MeasureError(f"Attached roof '{skylight.roof_idref}' not found for skylight '{skylight.id}'.")

            height = math.sqrt(skylight.area)
            width = skylight.area / height
            z_origin = walls_top + 0.5 * math.sin(math.atan(tilt)) * height
            surface = self._add_surface(
                f"surface {skylight.id}", "RoofCeiling",
                geo.add_roof_polygon(width + 0.001, height + 0.001, z_origin, skylight.azimuth, tilt),
                Length=width, Width=height, Tilt=tilt, Azimuth=skylight.azimuth,
            )
            # In the living space so that it counts toward design loads
            surface.space = self.model.create_or_get_space(constants.SPACE_TYPE_LIVING)
            surface.outside_boundary_condition = "Outdoors"
            surfaces.append(surface)

            sub = surface.add_sub_surface(SubSurface(
                skylight.id, "Skylight", geo.add_roof_polygon(width, height, z_origin, skylight.azimuth, tilt),
            ))
            cons.apply_window(self.model, [sub], "SkylightConstruction", skylight.ufactor, skylight.shgc)

        if surfaces:
            cons.apply_adiabatic(self.model, surfaces, "roof")

    def add_doors(self) -> None:
        foundation_top = geo.get_foundation_top(self.model)
        surfaces = []
        for door in self.hpxml.doors:
            area = door.area if door.area is not None else constants.get_default_door_area()
            width = area / DOOR_HEIGHT
            azimuth = door.azimuth if door.azimuth is not None else 0.0
            surface = self._add_surface(
                f"surface {door.id}", "Wall",
                geo.add_wall_polygon(width, DOOR_HEIGHT, foundation_top, azimuth, (0.0, 0.001, 0.001, 0.001)),
                Length=width, Azimuth=azimuth,
            )
            surface.space = self._wall_space_for(door.wall_idref, door.id, "door")
            surface.outside_boundary_condition = "Outdoors"
            surfaces.append(surface)

            sub = surface.add_sub_surface(SubSurface(
                door.id, "Door", geo.add_wall_polygon(width, DOOR_HEIGHT, foundation_top, azimuth),
            ))
            if door.r_value:
                ufactor = 1.0 / door.r_value
            else:
                ufactor, _ = get_default_window_ufactor_shgc(self.iecc_zone)
            cons.apply_door(self.model, [sub], "Door", ufactor)

        if surfaces:
            cons.apply_adiabatic(self.model, surfaces, "wall")

    def add_attics(self) -> None:
        walls_top = geo.get_walls_top(self.model)
        for attic in self.hpxml.attics:
            interior_adjacent_to = get_attic_adjacent_to(attic.attic_type)
            for floor in attic.floors:
                self._add_attic_floor(floor, interior_adjacent_to, walls_top)
            for roof in attic.roofs:
                self._add_attic_roof(roof, interior_adjacent_to, walls_top)
            for wall in attic.walls:
                net_area = self._net_area(wall.area, wall.id)
                length = net_area / WALL_STORY_HEIGHT
                azimuth = wall.azimuth if wall.azimuth is not None else 0.0
                surface = self._add_surface(wall.id, "Wall",
                                            geo.add_wall_polygon(length, WALL_STORY_HEIGHT, walls_top, azimuth),
                                            Length=length, Azimuth=azimuth)
                self.set_surface_interior(surface, wall.id, interior_adjacent_to)
                self.set_surface_exterior(surface, wall.id, wall.adjacent_to)
                drywall_thick_in = self._drywall(interior_adjacent_to, wall.adjacent_to)
                film_r, mat_ext_finish = self._wall_films(wall.adjacent_to)
                apply_wall_construction(self.model, surface, wall.id, wall.wall_type,
                                        wall.insulation_assembly_r_value, drywall_thick_in, film_r,
                                        mat_ext_finish, wall.solar_absorptance, wall.emittance, self.iecc_zone)

    def _add_attic_floor(self, floor, interior_adjacent_to: str, walls_top: float) -> None:
        width = math.sqrt(floor.area)
        length = floor.area / width
        surface = self._add_surface(floor.id, "Floor", geo.add_floor_polygon(length, width, walls_top))
        self.set_surface_interior(surface, floor.id, interior_adjacent_to)
        self.set_surface_exterior(surface, floor.id, floor.adjacent_to)

        drywall_thick_in = self._drywall(interior_adjacent_to, floor.adjacent_to)
        film_r = 2.0 * mats.air_film_floor_average().rvalue
        assembly_r = floor.insulation_assembly_r_value
        if assembly_r is None:
            assembly_r = 1.0 / get_default_ceiling_ufactor(self.iecc_zone)
        constr_sets = [
            WoodStudConstructionSet(mats.stud_2x6(), 0.11, 0.0, 0.0, drywall_thick_in, None),  # 2x6, 24" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.24, 0.0, 0.0, drywall_thick_in, None),  # 2x4, 16" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.01, 0.0, 0.0, 0.0, None),               # Fallback
        ]
        constr_set, ceiling_r = pick_wood_stud_construction_set(assembly_r, constr_sets, film_r,
                                                                f"attic floor {floor.id}")
        cons.apply_framed_floor(self.model, [surface], "FloorConstruction", ceiling_r, constr_set.stud.thick_in,
                                constr_set.framing_factor, 0.0, constr_set.drywall_thick_in, None, film_r)
        cons.check_surface_assembly_rvalue(self.model, surface, film_r, assembly_r)

    def _add_attic_roof(self, roof, interior_adjacent_to: str, walls_top: float) -> None:
        net_area = self._net_area(roof.area, roof.id, "Roof")
        width = math.sqrt(net_area)
        length = net_area / width
        tilt = roof.pitch / 12.0
        z_origin = walls_top + 0.5 * math.sin(math.atan(tilt)) * width
        azimuth = roof.azimuth if roof.azimuth is not None else 0.0
        surface = self._add_surface(roof.id, "RoofCeiling", geo.add_roof_polygon(length, width, z_origin, azimuth, tilt),
                                    Length=length, Width=width, Tilt=tilt, Azimuth=azimuth)
        surface.outside_boundary_condition = "Outdoors"
        self.set_surface_interior(surface, roof.id, interior_adjacent_to)

        drywall_thick_in = self._drywall(interior_adjacent_to, constants.LOCATION_OUTSIDE)
        film_r = mats.air_film_outside().rvalue + mats.air_film_roof(geo.get_roof_pitch([surface])).rvalue
        roofing = mats.roofing_asphalt_shingles()
        rafter_8 = mats.stud(7.25, "Stud2x8")
        constr_sets = [
            WoodStudConstructionSet(rafter_8, 0.07, 10.0, 0.75, drywall_thick_in, roofing),         # 2x8, 24" o.c. + R10
            WoodStudConstructionSet(rafter_8, 0.07, 5.0, 0.75, drywall_thick_in, roofing),          # 2x8, 24" o.c. + R5
            WoodStudConstructionSet(rafter_8, 0.07, 0.0, 0.75, drywall_thick_in, roofing),          # 2x8, 24" o.c.
            WoodStudConstructionSet(mats.stud_2x6(), 0.07, 0.0, 0.75, drywall_thick_in, roofing),   # 2x6, 24" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.07, 0.0, 0.5, drywall_thick_in, roofing),    # 2x4, 16" o.c.
            WoodStudConstructionSet(mats.stud_2x4(), 0.01, 0.0, 0.0, 0.0, roofing),                 # Fallback
        ]
        constr_set, cavity_r = pick_wood_stud_construction_set(roof.insulation_assembly_r_value, constr_sets,
                                                               film_r, f"attic roof {roof.id}")
        cons.apply_wood_stud(self.model, [surface], "RoofConstruction", cavity_r, 1, constr_set.stud.thick_in,
                             True, constr_set.framing_factor, constr_set.drywall_thick_in, constr_set.osb_thick_in,
                             constr_set.rigid_r, constr_set.exterior_material, film_r)
        cons.check_surface_assembly_rvalue(self.model, surface, film_r, roof.insulation_assembly_r_value)
        cons.apply_solar_abs_emittance(self.model, surface, roof.solar_absorptance, roof.emittance)

    def add_finished_floor_area(self) -> bool:
        """
        Add adiabatic floors so that the model's conditioned floor area
        matches the HPXML ConditionedFloorArea.

        Returns:
            False if the modeled area already exceeds it
        """
        ffa = round(self.hpxml.building.conditioned_floor_area, 1)
        foundation_top = geo.get_foundation_top(self.model)
        living = self.model.create_or_get_space(constants.SPACE_TYPE_LIVING)

        for space in list(self.model.spaces):
            if space.space_type != constants.SPACE_TYPE_FINISHED_BASEMENT:
                continue
            floor_area = round(geo.get_floor_area(self.model, [space]), 1)
            ceiling_area = convert(sum(s.gross_area for t, _, s in geo.space_surfaces(self.model, space)
                                       if t == "RoofCeiling"), "m^2", "ft^2")
            addtl_ffa = floor_area - ceiling_area
            if addtl_ffa <= 0:
                continue
            self.runner.register_warning(f"Adding finished basement adiabatic ceiling with {addtl_ffa} ft^2.")
            width = math.sqrt(addtl_ffa)
            length = addtl_ffa / width
            surface = self._add_surface("inferred finished basement ceiling", "RoofCeiling",
                                        geo.add_ceiling_polygon(-width, -length, foundation_top))
            surface.space = space
            surface.outside_boundary_condition = "Surface"
            surface.adjacent_space = living
            cons.apply_adiabatic(self.model, [surface], "floor")

        model_ffa = round(geo.get_finished_floor_area(self.model), 1)
        if model_ffa > ffa:
            self.runner.register_error(f"Sum of conditioned floor surface areas {model_ffa} is greater than "
                                       f"ConditionedFloorArea specified {ffa}.")
            return False

        addtl_ffa = round(ffa - model_ffa, 1)
        if addtl_ffa <= 0:
            return True
        self.runner.register_warning(f"Adding adiabatic conditioned floor with {addtl_ffa} ft^2 to preserve "
                                     f"building total conditioned floor area.")
        width = math.sqrt(addtl_ffa)
        length = addtl_ffa / width
        nstories_ag = self.hpxml.building.number_of_conditioned_floors_above_grade
        z_origin = foundation_top + WALL_STORY_HEIGHT * (nstories_ag - 1)
        surface = self._add_surface("inferred finished floor", "Floor", geo.add_floor_polygon(-width, -length, z_origin))
        surface.space = living
        surface.outside_boundary_condition = "Adiabatic"
        cons.apply_adiabatic(self.model, [surface], "floor")
        return True

    def add_thermal_mass(self, partition_frac_of_ffa: float = 1.0, furniture_frac_of_ffa: float = 1.0,
                         mass_lb_per_sqft: float = 8.0, density_lb_per_cuft: float = 40.0) -> None:
        """Partition walls and furniture as internal mass in each conditioned space."""
        partition = Construction("PartitionWallConstruction", [1.0])
        partition.add_layer(mats.gypsum_wall(0.5), "Drywall")
        partition.add_layer(mats.air_gap(3.5), "Cavity")
        partition.add_layer(mats.gypsum_wall(0.5), "Drywall2")
        partition_constr = partition.create_and_assign(self.model, [])

        thick_in = convert(mass_lb_per_sqft / density_lb_per_cuft, "ft", "in")
        furniture = Construction("FurnitureConstruction", [1.0])
        furniture.add_layer(mats.Material("Furniture", thick_in=thick_in, k_in=mats.WOOD.k_in,
                                          rho=density_lb_per_cuft, cp=mats.WOOD.cp), "Furniture")
        furniture_constr = furniture.create_and_assign(self.model, [])

        for space in self.model.spaces:
            if space.space_type not in constants.CONDITIONED_SPACE_TYPES:
                continue
            area = geo.get_floor_area(self.model, [space])
            if area <= 0:
                continue
            area_m2 = convert(area, "ft^2", "m^2")
            # Both sides of a partition wall are exposed
            self.model.add_object("InternalMass", f"{space.name} partition walls",
                                  Construction_Name=partition_constr.name,
                                  Zone_or_ZoneList_Name=space.thermal_zone.name,
                                  Surface_Area=round(2.0 * partition_frac_of_ffa * area_m2, 4))
            self.model.add_object("InternalMass", f"{space.name} furniture",
                                  Construction_Name=furniture_constr.name,
                                  Zone_or_ZoneList_Name=space.thermal_zone.name,
                                  Surface_Area=round(furniture_frac_of_ffa * area_m2, 4))
