"""HPXML input parsing."""

from .document import HPXMLDocument, get_value, get_id, has_element, validate_against_schema, WALL_TYPES
from .adjacency import (
    get_foundation_adjacent_to,
    get_attic_adjacent_to,
    is_adjacent_to_conditioned,
    is_external_thermal_boundary,
    get_space_type,
    get_space_type_from_location,
)
from . import elements

__all__ = [
    "HPXMLDocument",
    "get_value",
    "get_id",
    "has_element",
    "validate_against_schema",
    "WALL_TYPES",
    "get_foundation_adjacent_to",
    "get_attic_adjacent_to",
    "is_adjacent_to_conditioned",
    "is_external_thermal_boundary",
    "get_space_type",
    "get_space_type_from_location",
    "elements",
]
