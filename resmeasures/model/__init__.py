"""In-memory simulation model."""

from .objects import (
    ModelObject,
    Space,
    ThermalZone,
    Surface,
    SubSurface,
    format_idf_object,
    polygon_area,
)
from .store import Model

__all__ = [
    "Model",
    "ModelObject",
    "Space",
    "ThermalZone",
    "Surface",
    "SubSurface",
    "format_idf_object",
    "polygon_area",
]
