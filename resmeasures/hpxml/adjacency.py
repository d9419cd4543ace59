"""
Mapping between HPXML location strings and model space types.
"""

from typing import Optional

from ..core import constants
from ..core.exceptions import MeasureError


_FOUNDATION_LOCATIONS = {
    "ConditionedBasement": constants.LOCATION_BASEMENT_CONDITIONED,
    "UnconditionedBasement": constants.LOCATION_BASEMENT_UNCONDITIONED,
    "VentedCrawlspace": constants.LOCATION_CRAWL_VENTED,
    "UnventedCrawlspace": constants.LOCATION_CRAWL_UNVENTED,
    "SlabOnGrade": constants.LOCATION_LIVING,
    "Ambient": constants.LOCATION_OUTSIDE,
}

_ATTIC_LOCATIONS = {
    "VentedAttic": constants.LOCATION_ATTIC_VENTED,
    "UnventedAttic": constants.LOCATION_ATTIC_UNVENTED,
    "ConditionedAttic": constants.LOCATION_ATTIC_CONDITIONED,
    "CathedralCeiling": constants.LOCATION_LIVING,
    "FlatRoof": constants.LOCATION_LIVING,
}

_CONDITIONED_LOCATIONS = (
    constants.LOCATION_LIVING,
    constants.LOCATION_BASEMENT_CONDITIONED,
    constants.LOCATION_ATTIC_CONDITIONED,
)

_UNCONDITIONED_LOCATIONS = (
    constants.LOCATION_GARAGE,
    constants.LOCATION_BASEMENT_UNCONDITIONED,
    constants.LOCATION_CRAWL_VENTED,
    constants.LOCATION_CRAWL_UNVENTED,
    constants.LOCATION_ATTIC_VENTED,
    constants.LOCATION_ATTIC_UNVENTED,
    constants.LOCATION_OUTSIDE,
    constants.LOCATION_GROUND,
)


def get_foundation_adjacent_to(foundation_type: str) -> str:
    """HPXML location of the space enclosed by a foundation type."""
    try:
        return _FOUNDATION_LOCATIONS[foundation_type]
    except KeyError:
        raise MeasureError(f"Unexpected foundation type ({foundation_type}).") from None


def get_attic_adjacent_to(attic_type: str) -> str:
    """HPXML location of the space enclosed by an attic type."""
    try:
        return _ATTIC_LOCATIONS[attic_type]
    except KeyError:
        raise MeasureError(f"Unexpected attic type ({attic_type}).") from None


def is_adjacent_to_conditioned(adjacent_to: str) -> bool:
    if adjacent_to in _CONDITIONED_LOCATIONS:
        return True
    if adjacent_to in _UNCONDITIONED_LOCATIONS:
        return False
    raise MeasureError(f"Unexpected adjacent_to ({adjacent_to}).")


def is_external_thermal_boundary(interior_adjacent_to: str, exterior_adjacent_to: str) -> bool:
    """True when a surface separates conditioned space from unconditioned space or outdoors."""
    interior_conditioned = is_adjacent_to_conditioned(interior_adjacent_to)
    exterior_conditioned = is_adjacent_to_conditioned(exterior_adjacent_to)
    return interior_conditioned != exterior_conditioned


def get_space_type(adjacent_to: str, surface_id: Optional[str] = None) -> str:
    """
    Model space type for an HPXML location.

    Raises:
        MeasureError: If the location has no space (e.g. 'outside')
    """
    space_type = constants.LOCATION_SPACE_TYPES.get(adjacent_to)
    if space_type is None:
        raise MeasureError(f"Unhandled AdjacentTo value ({adjacent_to}) for surface '{surface_id}'.")
    return space_type


def get_space_type_from_location(location: Optional[str], object_name: str) -> str:
    """Space type holding equipment at an HPXML location (None means living space)."""
    if location is None:
        return constants.SPACE_TYPE_LIVING
    space_type = constants.LOCATION_SPACE_TYPES.get(location)
    if space_type is None or location in ("flat roof", "cathedral ceiling"):
        raise MeasureError(f"Unhandled {object_name} location: {location}.")
    return space_type
