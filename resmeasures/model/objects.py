"""
Simulation model objects.

Geometry objects (Space, ThermalZone, Surface, SubSurface) carry the
behavior the translator needs (areas, azimuth, adjacency). Everything else
is a generic ModelObject: an EnergyPlus object type, a name and ordered
fields.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

Vertex = Tuple[float, float, float]


def format_idf_object(obj_type: str, fields: Sequence[Tuple[str, Any]]) -> str:
    """
    Render one EnergyPlus object as IDF text.

    Args:
        obj_type: Object class, e.g. "Zone"
        fields: (field name, value) pairs in IDD order. None renders blank.
    """
    lines = [f"{obj_type},"]
    for i, (name, value) in enumerate(fields):
        if value is None:
            text = ""
        elif isinstance(value, bool):
            text = "Yes" if value else "No"
        elif isinstance(value, float):
            text = f"{value:.10g}"
        else:
            text = str(value)
        sep = ";" if i == len(fields) - 1 else ","
        lines.append(f"    {text + sep:<36}!- {name}")
    if not fields:
        lines[0] = f"{obj_type};"
    return "\n".join(lines) + "\n"


@dataclass
class ModelObject:
    """Generic named simulation object with ordered fields."""
    obj_type: str
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def set(self, key: str, value: Any) -> "ModelObject":
        self.fields[key] = value
        return self

    def to_idf(self) -> str:
        return format_idf_object(self.obj_type, [("Name", self.name)] + list(self.fields.items()))


@dataclass
class ThermalZone:
    name: str
    volume: Optional[float] = None  # m^3
    multiplier: int = 1
    obj_type: str = "Zone"

    def to_idf(self) -> str:
        return format_idf_object(self.obj_type, [
            ("Name", self.name),
            ("Direction of Relative North", 0.0),
            ("X Origin", 0.0),
            ("Y Origin", 0.0),
            ("Z Origin", 0.0),
            ("Type", 1),
            ("Multiplier", self.multiplier),
            ("Ceiling Height", None),
            ("Volume", self.volume),
        ])


@dataclass
class Space:
    """A space of one space type, served by exactly one thermal zone."""
    name: str
    space_type: str
    thermal_zone: ThermalZone
    obj_type: str = "Space"

    def to_idf(self) -> str:
        return format_idf_object(self.obj_type, [
            ("Name", self.name),
            ("Zone Name", self.thermal_zone.name),
            ("Space Type", self.space_type),
        ])


def polygon_area(vertices: Sequence[Vertex]) -> float:
    """Area of a planar 3D polygon (Newell's method)."""
    if len(vertices) < 3:
        return 0.0
    pts = np.asarray(vertices, dtype=float)
    nxt = np.roll(pts, -1, axis=0)
    normal = np.cross(pts, nxt).sum(axis=0)
    return float(np.linalg.norm(normal) / 2.0)


def polygon_normal(vertices: Sequence[Vertex]) -> np.ndarray:
    pts = np.asarray(vertices, dtype=float)
    nxt = np.roll(pts, -1, axis=0)
    normal = np.cross(pts, nxt).sum(axis=0)
    length = np.linalg.norm(normal)
    if length == 0:
        return normal
    return normal / length


@dataclass
class SubSurface:
    name: str
    sub_surface_type: str  # FixedWindow, Door, Skylight
    vertices: List[Vertex]
    construction: Optional[str] = None
    obj_type: str = "FenestrationSurface:Detailed"

    @property
    def area(self) -> float:
        return polygon_area(self.vertices)

    def to_idf(self, surface_name: str) -> str:
        fields = [
            ("Name", self.name),
            ("Surface Type", "Window" if self.sub_surface_type != "Door" else "Door"),
            ("Construction Name", self.construction),
            ("Building Surface Name", surface_name),
            ("Outside Boundary Condition Object", None),
            ("View Factor to Ground", None),
            ("Frame and Divider Name", None),
            ("Multiplier", 1),
            ("Number of Vertices", len(self.vertices)),
        ]
        for i, (x, y, z) in enumerate(self.vertices, 1):
            fields += [(f"Vertex {i} X-coordinate", x), (f"Vertex {i} Y-coordinate", y),
                       (f"Vertex {i} Z-coordinate", z)]
        return format_idf_object(self.obj_type, fields)


@dataclass
class Surface:
    """
    Opaque building surface. Vertices are in meters, counter-clockwise
    seen from outside.
    """
    name: str
    surface_type: str  # Wall, Floor, RoofCeiling
    vertices: List[Vertex]
    space: Optional[Space] = None
    outside_boundary_condition: str = "Outdoors"
    adjacent_space: Optional[Space] = None
    construction: Optional[str] = None
    sub_surfaces: List[SubSurface] = field(default_factory=list)
    # Layout hints in ft: Length, Width, Tilt, Azimuth
    properties: Dict[str, Any] = field(default_factory=dict)
    obj_type: str = "BuildingSurface:Detailed"

    @property
    def gross_area(self) -> float:
        """Gross area in m^2."""
        return polygon_area(self.vertices)

    @property
    def net_area(self) -> float:
        return self.gross_area - sum(s.area for s in self.sub_surfaces)

    @property
    def outward_normal(self) -> np.ndarray:
        return polygon_normal(self.vertices)

    @property
    def azimuth(self) -> float:
        """Azimuth of the outward normal in degrees clockwise from north."""
        nx, ny, _ = self.outward_normal
        if abs(nx) < 1e-9 and abs(ny) < 1e-9:
            return 0.0
        return float(np.degrees(np.arctan2(nx, ny)) % 360.0)

    @property
    def tilt(self) -> float:
        """Tilt from horizontal-up in degrees (0 = roof facing up, 90 = wall)."""
        nz = float(np.clip(self.outward_normal[2], -1.0, 1.0))
        return float(np.degrees(np.arccos(nz)))

    @property
    def z_values(self) -> List[float]:
        return [v[2] for v in self.vertices]

    def translate(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> None:
        self.vertices = [(x + dx, y + dy, z + dz) for x, y, z in self.vertices]
        for sub in self.sub_surfaces:
            sub.vertices = [(x + dx, y + dy, z + dz) for x, y, z in sub.vertices]

    def add_sub_surface(self, sub: SubSurface) -> SubSurface:
        self.sub_surfaces.append(sub)
        return sub

    def to_idf(self) -> str:
        obc = self.outside_boundary_condition
        obc_object = None
        if obc == "Surface" and self.adjacent_space is not None:
            obc = "Zone"
            obc_object = self.adjacent_space.thermal_zone.name
        exposed = obc == "Outdoors"
        fields = [
            ("Name", self.name),
            ("Surface Type", "Roof" if self.surface_type == "RoofCeiling" and exposed else
             ("Ceiling" if self.surface_type == "RoofCeiling" else self.surface_type)),
            ("Construction Name", self.construction),
            ("Zone Name", self.space.thermal_zone.name if self.space else None),
            ("Space Name", self.space.name if self.space else None),
            ("Outside Boundary Condition", obc),
            ("Outside Boundary Condition Object", obc_object),
            ("Sun Exposure", "SunExposed" if exposed else "NoSun"),
            ("Wind Exposure", "WindExposed" if exposed else "NoWind"),
            ("View Factor to Ground", None),
            ("Number of Vertices", len(self.vertices)),
        ]
        for i, (x, y, z) in enumerate(self.vertices, 1):
            fields += [(f"Vertex {i} X-coordinate", x), (f"Vertex {i} Y-coordinate", y),
                       (f"Vertex {i} Z-coordinate", z)]
        text = format_idf_object(self.obj_type, fields)
        for sub in self.sub_surfaces:
            text += "\n" + sub.to_idf(self.name)
        return text
