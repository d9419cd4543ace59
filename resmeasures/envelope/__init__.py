"""Envelope: materials, layered constructions, insulation back-solving and geometry."""

from .materials import Material
from .constructions import Construction, LayeredConstruction, check_surface_assembly_rvalue
from .backsolve import apply_wall_construction
from .enclosure import EnclosureBuilder

__all__ = [
    "Material",
    "Construction",
    "LayeredConstruction",
    "check_surface_assembly_rvalue",
    "apply_wall_construction",
    "EnclosureBuilder",
]
