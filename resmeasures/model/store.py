"""
In-memory simulation model.

Measures add named objects to a Model; the translator writes the result as
EnergyPlus IDF text.

Usage:
    from resmeasures.model import Model

    model = Model()
    living = model.create_or_get_space("living")
    model.add(ModelObject("Schedule:Constant", "always on", {"Hourly Value": 1}))
    model.write(Path("in.idf"))
"""

from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional
import logging

from .objects import ModelObject, Space, Surface, ThermalZone, format_idf_object

logger = logging.getLogger(__name__)


class Model:
    """
    Named object store grouped by object type.

    Names are unique within a type. Spaces and thermal zones are created on
    demand, one zone per space type.
    """

    def __init__(self, name: str = "Building"):
        self.name = name
        self.north_axis = 0.0
        self._objects: "OrderedDict[str, OrderedDict[str, Any]]" = OrderedDict()
        self.properties: Dict[str, Any] = {}

    # -------------------------------------------------------------------------
    # Generic access
    # -------------------------------------------------------------------------

    def add(self, obj: Any) -> Any:
        """
        Add an object.

        Raises:
            ValueError: If an object of the same type and name already exists
        """
        bucket = self._objects.setdefault(obj.obj_type, OrderedDict())
        if obj.name in bucket:
            raise ValueError(f"Duplicate {obj.obj_type} name '{obj.name}'.")
        bucket[obj.name] = obj
        return obj

    def add_object(self, obj_type: str, name: str, **fields: Any) -> ModelObject:
        """Shortcut for adding a generic object; keyword names become field names."""
        return self.add(ModelObject(obj_type, name, {k.replace("_", " "): v for k, v in fields.items()}))

    def get(self, obj_type: str, name: str) -> Optional[Any]:
        return self._objects.get(obj_type, {}).get(name)

    def objects_of(self, obj_type: str) -> List[Any]:
        return list(self._objects.get(obj_type, {}).values())

    def has(self, obj_type: str, name: Optional[str] = None) -> bool:
        if name is None:
            return bool(self._objects.get(obj_type))
        return self.get(obj_type, name) is not None

    def remove(self, obj: Any) -> None:
        bucket = self._objects.get(obj.obj_type, {})
        bucket.pop(obj.name, None)

    def remove_type(self, obj_type: str) -> int:
        """Remove every object of a type. Returns the number removed."""
        removed = len(self._objects.get(obj_type, {}))
        self._objects.pop(obj_type, None)
        return removed

    def unique_name(self, obj_type: str, base: str) -> str:
        name = base
        i = 1
        while self.get(obj_type, name) is not None:
            name = f"{base} {i}"
            i += 1
        return name

    def __iter__(self) -> Iterator[Any]:
        for bucket in self._objects.values():
            yield from bucket.values()

    def __len__(self) -> int:
        return sum(len(b) for b in self._objects.values())

    # -------------------------------------------------------------------------
    # Geometry
    # -------------------------------------------------------------------------

    @property
    def spaces(self) -> List[Space]:
        return self.objects_of("Space")

    @property
    def thermal_zones(self) -> List[ThermalZone]:
        return self.objects_of("Zone")

    @property
    def surfaces(self) -> List[Surface]:
        return self.objects_of("BuildingSurface:Detailed")

    def create_or_get_space(self, space_type: str) -> Space:
        """Space of the given type, created with its thermal zone if needed."""
        for space in self.spaces:
            if space.space_type == space_type:
                return space
        zone = self.add(ThermalZone(name=f"{space_type} zone"))
        space = self.add(Space(name=f"{space_type} space", space_type=space_type, thermal_zone=zone))
        logger.debug(f"Created space '{space.name}'")
        return space

    def get_space(self, space_type: str) -> Optional[Space]:
        for space in self.spaces:
            if space.space_type == space_type:
                return space
        return None

    def surfaces_in(self, space: Space) -> List[Surface]:
        return [s for s in self.surfaces if s.space is space]

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def summary(self) -> Dict[str, int]:
        """Object count per type."""
        return {obj_type: len(bucket) for obj_type, bucket in self._objects.items() if bucket}

    def to_idf(self) -> str:
        parts = [format_idf_object("Building", [
            ("Name", self.name),
            ("North Axis", self.north_axis),
            ("Terrain", self.properties.get("terrain", "Suburbs")),
            ("Loads Convergence Tolerance Value", 0.04),
            ("Temperature Convergence Tolerance Value", 0.4),
            ("Solar Distribution", "FullExterior"),
            ("Maximum Number of Warmup Days", 25),
        ])]
        for obj in self:
            parts.append(obj.to_idf())
        return "\n".join(parts)

    def write(self, path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_idf())
        logger.info(f"Wrote model with {len(self)} objects to {path}")
        return path
