"""
Surface geometry for the translated building.

HPXML describes surfaces by area only, so every surface is generated as a
simple rectangle of the right area and orientation. Polygon builders take
dimensions in ft and return vertices in m. After all surfaces exist they are
pushed apart ("exploded") so that exterior surfaces do not shade each other.
"""

from typing import Dict, Iterator, List, Optional, Sequence, Tuple
import logging
import math

import numpy as np

from ..core import constants
from ..core.exceptions import MeasureError
from ..core.units import convert
from ..model import Model, Space, Surface
from ..model.objects import Vertex

logger = logging.getLogger(__name__)

BELOW_GRADE_SPACE_TYPES = (
    constants.SPACE_TYPE_FINISHED_BASEMENT,
    constants.SPACE_TYPE_UNFINISHED_BASEMENT,
    constants.SPACE_TYPE_CRAWL,
)

# Surface type seen from the adjacent space
_MIRRORED_TYPES = {"Wall": "Wall", "Floor": "RoofCeiling", "RoofCeiling": "Floor"}


def _to_vertices(points: np.ndarray) -> List[Vertex]:
    return [(float(x), float(y), float(z)) for x, y, z in points]


def _rotate_z(points: np.ndarray, angle_rad: float) -> np.ndarray:
    c, s = math.cos(angle_rad), math.sin(angle_rad)
    m = np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    return points @ m.T


# =============================================================================
# POLYGONS
# =============================================================================

def add_floor_polygon(x: float, y: float, z: float) -> List[Vertex]:
    """Horizontal rectangle facing down, centered on the origin."""
    x, y, z = (convert(v, "ft", "m") for v in (x, y, z))
    return [
        (-x / 2, -y / 2, z),
        (-x / 2, y / 2, z),
        (x / 2, y / 2, z),
        (x / 2, -y / 2, z),
    ]


def add_ceiling_polygon(x: float, y: float, z: float) -> List[Vertex]:
    """Horizontal rectangle facing up."""
    return list(reversed(add_floor_polygon(x, y, z)))


def add_wall_polygon(x: float, y: float, z: float, azimuth: float = 0.0,
                     offsets: Sequence[float] = (0.0, 0.0, 0.0, 0.0)) -> List[Vertex]:
    """
    Vertical rectangle of width x and height y with its bottom at z.

    Args:
        x: Length (ft)
        y: Height (ft)
        z: Bottom elevation (ft)
        azimuth: Outward normal, degrees clockwise from north
        offsets: Extra extent (m) at bottom, left, top, right

    Returns:
        Vertices in m
    """
    x, y, z = (convert(v, "ft", "m") for v in (x, y, z))
    bottom, left, top, right = offsets
    points = np.array([
        [-x / 2 - left, 0.0, z - bottom],
        [-x / 2 - left, 0.0, z + y + top],
        [x / 2 + right, 0.0, z + y + top],
        [x / 2 + right, 0.0, z - bottom],
    ])
    return _to_vertices(_rotate_z(points, -math.radians(azimuth)))


def add_roof_polygon(x: float, y: float, z: float, azimuth: float = 0.0, tilt: float = 0.5) -> List[Vertex]:
    """
    Sloped rectangle of length x and width y centered at elevation z.

    Args:
        tilt: Rise over run (pitch / 12)
    """
    x, y, z = (convert(v, "ft", "m") for v in (x, y, z))
    points = np.array([
        [x / 2, -y / 2, 0.0],
        [x / 2, y / 2, 0.0],
        [-x / 2, y / 2, 0.0],
        [-x / 2, -y / 2, 0.0],
    ])
    a = math.atan(tilt)
    tilt_m = np.array([
        [1.0, 0.0, 0.0],
        [0.0, math.cos(a), -math.sin(a)],
        [0.0, math.sin(a), math.cos(a)],
    ])
    points = points @ tilt_m.T
    points = _rotate_z(points, math.pi - math.radians(azimuth))
    points[:, 2] += z
    return _to_vertices(points)


def get_slab_dimensions(exposed_perimeter: float, area: float) -> Tuple[float, float]:
    """
    Rectangle (length, width) in ft with the given perimeter and area.

    Falls back to a square of side perimeter/4 when no such rectangle exists.
    """
    sqrt_term = exposed_perimeter ** 2 - 16.0 * area
    if sqrt_term < 0:
        return exposed_perimeter / 4.0, exposed_perimeter / 4.0
    root = math.sqrt(sqrt_term)
    return exposed_perimeter / 4.0 + root / 4.0, exposed_perimeter / 4.0 - root / 4.0


# =============================================================================
# AREAS
# =============================================================================

def get_subsurface_areas(hpxml) -> Dict[str, float]:
    """Window and door area per wall id, skylight area per roof id (ft^2)."""
    areas: Dict[str, float] = {}
    for window in hpxml.windows:
        areas[window.wall_idref] = areas.get(window.wall_idref, 0.0) + window.area
    for skylight in hpxml.skylights:
        areas[skylight.roof_idref] = areas.get(skylight.roof_idref, 0.0) + skylight.area
    for door in hpxml.doors:
        area = door.area if door.area is not None else constants.get_default_door_area()
        areas[door.wall_idref] = areas.get(door.wall_idref, 0.0) + area
    return areas


def net_wall_area(gross_area: float, subsurface_areas: Dict[str, float], surface_id: str) -> float:
    return gross_area - subsurface_areas.get(surface_id, 0.0)


def space_surfaces(model: Model, space: Space) -> Iterator[Tuple[str, str, Surface]]:
    """
    (surface type, boundary condition, surface) for every surface bounding a space.

    Interzone surfaces are stored once; the adjacent space sees them mirrored.
    """
    for surface in model.surfaces:
        if surface.space is space:
            yield surface.surface_type, surface.outside_boundary_condition, surface
        elif surface.adjacent_space is space:
            yield _MIRRORED_TYPES[surface.surface_type], "Surface", surface


def get_floor_area(model: Model, spaces: Sequence[Space]) -> float:
    """Floor area (ft^2) of the given spaces."""
    area = 0.0
    for space in spaces:
        for surface_type, _, surface in space_surfaces(model, space):
            if surface_type == "Floor":
                area += surface.gross_area
    return convert(area, "m^2", "ft^2")


def get_finished_floor_area(model: Model) -> float:
    spaces = [s for s in model.spaces if s.space_type in constants.CONDITIONED_SPACE_TYPES]
    return get_floor_area(model, spaces)


def get_height_of_spaces(model: Model, spaces: Sequence[Space]) -> float:
    """Vertical extent (ft) of all surfaces bounding the spaces."""
    zs = [z for space in spaces for _, _, s in space_surfaces(model, space) for z in s.z_values]
    if not zs:
        return 0.0
    return convert(max(zs) - min(zs), "m", "ft")


def get_roof_pitch(surfaces: Sequence[Surface]) -> float:
    """Average tilt (degrees) of the roof surfaces."""
    tilts = [s.tilt for s in surfaces
             if s.surface_type == "RoofCeiling" and s.outside_boundary_condition == "Outdoors"]
    if not tilts:
        return 0.0
    return sum(tilts) / len(tilts)


def get_foundation_top(model: Model) -> float:
    """
    Elevation (ft) of the top of the foundation.

    Highest vertex of any below-grade space, otherwise the lowest floor
    (pier and beam).

    Raises:
        MeasureError: If the model has neither
    """
    tops = [z for space in model.spaces if space.space_type in BELOW_GRADE_SPACE_TYPES
            for _, _, s in space_surfaces(model, space) for z in s.z_values]
    if tops:
        return convert(max(tops), "m", "ft")
    floors = [z for space in model.spaces for surface_type, _, s in space_surfaces(model, space)
              if surface_type == "Floor" for z in s.z_values]
    if floors:
        return convert(min(floors), "m", "ft")
    raise MeasureError("Could not calculate foundation top.")


def get_walls_top(model: Model) -> float:
    """Elevation (ft) of the top of the walls, ignoring window and door surfaces."""
    tops = [z for s in model.surfaces
            if s.surface_type == "Wall" and s.space is not None and not s.sub_surfaces
            for z in s.z_values]
    if not tops:
        raise MeasureError("Could not calculate walls top.")
    return convert(max(tops), "m", "ft")


# =============================================================================
# ZONES
# =============================================================================

def check_for_errors(model: Model) -> List[str]:
    """
    Every thermal zone needs a floor, a roof/ceiling and an exterior surface.

    Returns:
        Error messages for the first offending zone (empty when valid)
    """
    for zone in model.thermal_zones:
        n_floors = n_roofceilings = n_exteriors = 0
        for space in model.spaces:
            if space.thermal_zone is not zone:
                continue
            for surface_type, boundary, _ in space_surfaces(model, space):
                if boundary in ("Outdoors", "Foundation"):
                    n_exteriors += 1
                if surface_type == "Floor":
                    n_floors += 1
                elif surface_type == "RoofCeiling":
                    n_roofceilings += 1
        errors = []
        if n_floors == 0:
            errors.append(f"Thermal zone '{zone.name}' must have at least one floor surface.")
        if n_roofceilings == 0:
            errors.append(f"Thermal zone '{zone.name}' must have at least one roof/ceiling surface.")
        if n_exteriors == 0:
            errors.append(f"Thermal zone '{zone.name}' must have at least one surface adjacent to outside/ground.")
        if errors:
            return errors
    return []


def _zone_spaces(model: Model, zone) -> List[Space]:
    return [s for s in model.spaces if s.thermal_zone is zone]


def set_zone_volumes(model: Model, cvolume: float) -> None:
    """
    Assign thermal zone volumes.

    Foundation and garage zones get height x floor area, the living zone the
    conditioned volume less any finished basement, and unfinished attics a
    hip-roof pyramid over their floor.

    Args:
        cvolume: Conditioned building volume (ft^3)
    """
    living_volume = cvolume
    updated = 0
    for zone in model.thermal_zones:
        spaces = _zone_spaces(model, zone)
        space_types = {s.space_type for s in spaces}
        if not space_types & {constants.SPACE_TYPE_FINISHED_BASEMENT, constants.SPACE_TYPE_UNFINISHED_BASEMENT,
                              constants.SPACE_TYPE_CRAWL, constants.SPACE_TYPE_GARAGE}:
            continue
        updated += 1
        volume = get_height_of_spaces(model, spaces) * get_floor_area(model, spaces)
        if volume <= 0:
            raise MeasureError(f"Calculated volume for {zone.name} zone ({volume}) is not greater than zero.")
        zone.volume = convert(volume, "ft^3", "m^3")
        if constants.SPACE_TYPE_FINISHED_BASEMENT in space_types:
            living_volume = cvolume - volume

    for zone in model.thermal_zones:
        spaces = _zone_spaces(model, zone)
        if constants.SPACE_TYPE_LIVING not in {s.space_type for s in spaces}:
            continue
        updated += 1
        if living_volume <= 0:
            raise MeasureError(f"Calculated volume for living zone ({living_volume}) is not greater than zero.")
        zone.volume = convert(living_volume, "ft^3", "m^3")

    for zone in model.thermal_zones:
        spaces = _zone_spaces(model, zone)
        if constants.SPACE_TYPE_UNFINISHED_ATTIC not in {s.space_type for s in spaces}:
            continue
        updated += 1
        surfaces = [surf for space in spaces for _, _, surf in space_surfaces(model, space)]
        area = get_floor_area(model, spaces)
        length = area ** 0.5
        height = math.tan(math.radians(get_roof_pitch(surfaces))) * length / 2.0
        volume = max(area * height / 3.0, 0.01)
        zone.volume = convert(volume, "ft^3", "m^3")

    if updated != len(model.thermal_zones):
        raise MeasureError("Unhandled volume calculations for thermal zones.")


def explode_surfaces(model: Model, gap_distance: float = constants.EXPLODE_GAP_FT) -> int:
    """
    Move exterior walls and roofs outward along their azimuth and spread
    surfaces of the same azimuth sideways so none of them shade each other.

    Returns:
        Number of surfaces moved
    """
    surfaces = sorted(
        (s for s in model.surfaces
         if s.surface_type in ("Wall", "RoofCeiling") and s.outside_boundary_condition in ("Outdoors", "Foundation")),
        key=lambda s: s.name,
    )
    if not surfaces:
        return 0

    azimuth_lengths: Dict[int, float] = {}
    for surface in surfaces:
        azimuth = int(surface.properties["Azimuth"])
        azimuth_lengths[azimuth] = azimuth_lengths.get(azimuth, 0.0) + surface.properties["Length"] + gap_distance
    max_azimuth_length = max(azimuth_lengths.values())
    side_shifts = {az: max_azimuth_length / 2.0 for az in azimuth_lengths}

    for surface in surfaces:
        azimuth = int(surface.properties["Azimuth"])
        az_rad = math.radians(azimuth)
        distance = max_azimuth_length
        if surface.surface_type == "RoofCeiling":
            distance -= 0.5 * math.cos(math.atan(surface.properties["Tilt"])) * surface.properties["Width"]
        d = convert(distance, "ft", "m")
        surface.translate(d * math.sin(az_rad), d * math.cos(az_rad), 0.0)

        length = surface.properties["Length"]
        side_shifts[azimuth] -= length / 2.0
        d = convert(side_shifts[azimuth], "ft", "m")
        side = az_rad + math.pi / 2.0
        surface.translate(d * math.sin(side), d * math.cos(side), 0.0)
        side_shifts[azimuth] -= length / 2.0 + gap_distance

    logger.debug(f"Exploded {len(surfaces)} surfaces over {len(azimuth_lengths)} azimuths")
    return len(surfaces)


def get_abs_azimuth(azimuth_type: str, relative_azimuth: float, building_orientation: float,
                    offset: float = 180.0) -> float:
    """
    Absolute azimuth (degrees clockwise from north) of a component.

    Relative azimuths are measured from the building front.
    """
    if azimuth_type == constants.COORD_RELATIVE:
        return (relative_azimuth + building_orientation + offset) % 360.0
    return (relative_azimuth + offset) % 360.0


def get_abs_tilt(tilt_type: str, relative_tilt: float, roof_tilt: float, latitude: float) -> float:
    """Absolute tilt (degrees) from a roof-pitch, latitude or absolute tilt input."""
    if tilt_type == constants.TILT_PITCH:
        return relative_tilt + roof_tilt
    if tilt_type == constants.TILT_LATITUDE:
        return relative_tilt + latitude
    return relative_tilt
