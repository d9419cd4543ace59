"""
HVAC performance curves.

Capacity and EIR vary with operating temperatures (biquadratic) and with
air flow fraction and part load ratio (quadratic). Coefficient tables are
stored in IP units (F) and converted to SI for the simulation.

Curve forms:
- Curve:Biquadratic  f(x,y) = c1 + c2*x + c3*x² + c4*y + c5*y² + c6*x*y
- Curve:Quadratic    f(x) = c1 + c2*x + c3*x²
- Curve:Cubic        f(x) = c1 + c2*x + c3*x² + c4*x³

For DX cooling x is the entering wet-bulb and y the outdoor dry-bulb; for DX
heating x is the indoor dry-bulb and y the outdoor dry-bulb.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from ..model import Model, format_idf_object


@dataclass
class PerformanceCurve:
    """
    Performance curve with clamped inputs and output.

    Coefficients are SI (temperatures in C).
    """
    name: str
    curve_type: str = "biquadratic"  # or "quadratic", "cubic"
    coefficients: List[float] = field(default_factory=lambda: [1.0])

    x_min: float = -100.0
    x_max: float = 100.0
    y_min: float = -100.0
    y_max: float = 100.0

    output_min: float = None
    output_max: float = None

    @property
    def obj_type(self) -> str:
        return {"biquadratic": "Curve:Biquadratic", "quadratic": "Curve:Quadratic",
                "cubic": "Curve:Cubic"}[self.curve_type]

    def evaluate(self, x: float, y: float = 0.0) -> float:
        """
        Evaluate the curve.

        Args:
            x: Primary variable
            y: Secondary variable (biquadratic only)

        Returns:
            Curve output, clamped to the output limits when they are set
        """
        x = max(self.x_min, min(self.x_max, x))
        y = max(self.y_min, min(self.y_max, y))
        c = list(self.coefficients) + [0.0] * (6 - len(self.coefficients))

        if self.curve_type == "biquadratic":
            result = c[0] + c[1] * x + c[2] * x * x + c[3] * y + c[4] * y * y + c[5] * x * y
        elif self.curve_type == "quadratic":
            result = c[0] + c[1] * x + c[2] * x * x
        elif self.curve_type == "cubic":
            result = c[0] + c[1] * x + c[2] * x * x + c[3] * x * x * x
        else:
            raise ValueError(f"Unknown curve type '{self.curve_type}'.")

        if self.output_min is not None:
            result = max(self.output_min, result)
        if self.output_max is not None:
            result = min(self.output_max, result)
        return result

    def to_idf(self) -> str:
        fields = [("Name", self.name)]
        labels = ["Constant", "x", "x**2", "y", "y**2", "x*y"] if self.curve_type == "biquadratic" else \
            ["Constant", "x", "x**2", "x**3"]
        n = {"biquadratic": 6, "quadratic": 3, "cubic": 4}[self.curve_type]
        coeffs = list(self.coefficients) + [0.0] * (n - len(self.coefficients))
        for i in range(n):
            fields.append((f"Coefficient{i + 1} {labels[i]}", float(coeffs[i])))
        fields += [("Minimum Value of x", self.x_min), ("Maximum Value of x", self.x_max)]
        if self.curve_type == "biquadratic":
            fields += [("Minimum Value of y", self.y_min), ("Maximum Value of y", self.y_max)]
        fields += [("Minimum Curve Output", self.output_min), ("Maximum Curve Output", self.output_max)]
        return format_idf_object(self.obj_type, fields)

    def add_to(self, model: Model) -> "PerformanceCurve":
        """Add to the model once; identical names are shared."""
        existing = model.get(self.obj_type, self.name)
        return existing if existing is not None else model.add(self)


def convert_curve_biquadratic(coeff: Sequence[float], ip_to_si: bool = True) -> List[float]:
    """
    Convert biquadratic coefficients between F and C inputs.

    Raises:
        NotImplementedError: For SI to IP
    """
    if not ip_to_si:
        raise NotImplementedError("Only IP to SI curve conversion is supported.")
    c = coeff
    return [
        c[0] + 32.0 * (c[1] + c[3]) + 1024.0 * (c[2] + c[4] + c[5]),
        9.0 / 5.0 * c[1] + 576.0 / 5.0 * c[2] + 288.0 / 5.0 * c[5],
        81.0 / 25.0 * c[2],
        9.0 / 5.0 * c[3] + 576.0 / 5.0 * c[4] + 288.0 / 5.0 * c[5],
        81.0 / 25.0 * c[4],
        81.0 / 25.0 * c[5],
    ]


# =============================================================================
# DX coefficient tables (IP), one row per speed
# =============================================================================

COOL_CAP_FT_SPEC: Dict[int, List[List[float]]] = {
    1: [[3.670270705, -0.098652414, 0.000955906, 0.006552414, -0.0000156, -0.000131877]],
    2: [[3.940185508, -0.104723455, 0.001019298, 0.006471171, -0.00000953, -0.000161658],
        [3.109456535, -0.085520461, 0.000863238, 0.00863107, -0.0000210, -0.000140186]],
    4: [[3.845135427537, -0.095933272242, 0.000924533273, 0.008939030321, -0.000021025870, -0.000191684744]] * 4,
}
COOL_EIR_FT_SPEC: Dict[int, List[List[float]]] = {
    1: [[-3.302695861, 0.137871531, -0.001056996, -0.012573945, 0.000214638, -0.000145054]],
    2: [[-3.877526888, 0.164566276, -0.001272755, -0.019956043, 0.000256512, -0.000133539],
        [-1.990708931, 0.093969249, -0.00073335, -0.009062553, 0.000165099, -0.0000997]],
    4: [[-1.990708931, 0.093969249, -0.000733350, -0.009062553, 0.000165099, -0.000099700]] * 4,
}
COOL_CAP_FFLOW_SPEC: Dict[int, List[List[float]]] = {
    1: [[0.718605468, 0.410099989, -0.128705457]],
    2: [[0.65673024, 0.516470835, -0.172887149], [0.690334551, 0.464383753, -0.154507638]],
    4: [[1.0, 0.0, 0.0]] * 4,
}
COOL_EIR_FFLOW_SPEC: Dict[int, List[List[float]]] = {
    1: [[1.32299905, -0.477711207, 0.154712157]],
    2: [[1.562945114, -0.791859997, 0.230030877], [1.31565404, -0.482467162, 0.166239001]],
    4: [[1.0, 0.0, 0.0]] * 4,
}

HEAT_CAP_FT_SPEC: Dict[int, List[List[float]]] = {
    1: [[0.566333415, -0.000744164, -0.0000103, 0.009414634, 0.0000506, -0.00000675]],
    2: [[0.335690634, 0.002405123, -0.0000464, 0.013498735, 0.0000499, -0.00000725],
        [0.306358843, 0.005376987, -0.0000579, 0.011645092, 0.0000591, -0.0000203]],
    4: [[0.304192655, -0.003972566, 0.0000196432, 0.024471251, -0.000000774126, -0.0000841323]] * 4,
}
HEAT_EIR_FT_SPEC: Dict[int, List[List[float]]] = {
    1: [[0.718398423, 0.003498178, 0.000142202, -0.005724331, 0.00014085, -0.000215321]],
    2: [[0.36338171, 0.013523725, 0.000258872, -0.009450269, 0.000439519, -0.000653723],
        [0.981100941, -0.005158493, 0.000243416, -0.005274352, 0.000230742, -0.000336954]],
    4: [[0.74966469, -0.00659002, 0.000261142, 0.00433389, 0.000271985, -0.000410706]] * 4,
}
HEAT_CAP_FFLOW_SPEC: Dict[int, List[List[float]]] = {
    1: [[0.694045465, 0.474207981, -0.168253446]],
    2: [[0.741466907, 0.378645444, -0.119754733], [0.76634609, 0.32840943, -0.094701495]],
    4: [[1.0, 0.0, 0.0]] * 4,
}
HEAT_EIR_FFLOW_SPEC: Dict[int, List[List[float]]] = {
    1: [[2.185418751, -1.942827919, 0.757409168]],
    2: [[2.153618211, -1.737190609, 0.584269478], [2.001041353, -1.58869128, 0.587593517]],
    4: [[1.0, 0.0, 0.0]] * 4,
}

# Cycling degradation coefficient by number of speeds
CD_BY_SPEEDS = {1: 0.2, 2: 0.11, 4: 0.25}

# Water-to-air heat pump equation-fit coefficients
GSHP_COOL_CAP_FT_SPEC = [0.39039063, 0.01382596, -0.00028316, 0.00041592, 0.0]
GSHP_COOL_POWER_FT_SPEC = [4.27136253, -0.04678521, 0.00035662, -0.00058337, 0.0]
GSHP_COOL_SH_FT_SPEC = [4.54172049, 0.12904630, -0.00028010, -0.01101280, 0.0, 0.0]
GSHP_HEAT_CAP_FT_SPEC = [0.67104926, -0.00210834, 0.00052561, 0.01011893, 0.0]
GSHP_HEAT_POWER_FT_SPEC = [-0.46308105, 0.02008988, -0.00017548, 0.00165614, 0.0]


# =============================================================================
# Builders
# =============================================================================

def biquadratic(name: str, ip_coeff: Sequence[float], x_min: float, x_max: float,
                y_min: float, y_max: float) -> PerformanceCurve:
    return PerformanceCurve(name, "biquadratic", convert_curve_biquadratic(ip_coeff),
                            x_min=x_min, x_max=x_max, y_min=y_min, y_max=y_max)


def quadratic(name: str, coeff: Sequence[float], x_min: float = 0.0, x_max: float = 2.0,
              output_min: float = None, output_max: float = None) -> PerformanceCurve:
    return PerformanceCurve(name, "quadratic", list(coeff), x_min=x_min, x_max=x_max,
                            output_min=output_min, output_max=output_max)


def plf_curve(name: str, cd: float) -> PerformanceCurve:
    """Part load fraction correlation PLF = (1 - Cd) + Cd*PLR."""
    return quadratic(name, [1.0 - cd, cd, 0.0], 0.0, 1.0, 0.7, 1.0)


@dataclass
class DXSpeedCurves:
    cap_ft: PerformanceCurve
    eir_ft: PerformanceCurve
    cap_fff: PerformanceCurve
    eir_fff: PerformanceCurve
    plf: PerformanceCurve

    def all(self) -> List[PerformanceCurve]:
        return [self.cap_ft, self.eir_ft, self.cap_fff, self.eir_fff, self.plf]


def _speeds(num_speeds: int) -> int:
    if num_speeds not in COOL_CAP_FT_SPEC:
        raise ValueError(f"Unexpected number of speeds ({num_speeds}).")
    return num_speeds


def cooling_curves(prefix: str, num_speeds: int) -> List[DXSpeedCurves]:
    """DX cooling curves per speed."""
    n = _speeds(num_speeds)
    curves = []
    for i in range(n):
        s = f"{prefix} clg speed {i + 1}"
        curves.append(DXSpeedCurves(
            cap_ft=biquadratic(f"{s} cap-ft", COOL_CAP_FT_SPEC[n][i], 13.88, 23.88, 18.33, 51.66),
            eir_ft=biquadratic(f"{s} eir-ft", COOL_EIR_FT_SPEC[n][i], 13.88, 23.88, 18.33, 51.66),
            cap_fff=quadratic(f"{s} cap-fff", COOL_CAP_FFLOW_SPEC[n][i]),
            eir_fff=quadratic(f"{s} eir-fff", COOL_EIR_FFLOW_SPEC[n][i]),
            plf=plf_curve(f"{s} plf", CD_BY_SPEEDS[n]),
        ))
    return curves


def heating_curves(prefix: str, num_speeds: int) -> List[DXSpeedCurves]:
    """DX heating curves per speed."""
    n = _speeds(num_speeds)
    curves = []
    for i in range(n):
        s = f"{prefix} htg speed {i + 1}"
        curves.append(DXSpeedCurves(
            cap_ft=biquadratic(f"{s} cap-ft", HEAT_CAP_FT_SPEC[n][i], -100.0, 100.0, -100.0, 100.0),
            eir_ft=biquadratic(f"{s} eir-ft", HEAT_EIR_FT_SPEC[n][i], -100.0, 100.0, -100.0, 100.0),
            cap_fff=quadratic(f"{s} cap-fff", HEAT_CAP_FFLOW_SPEC[n][i]),
            eir_fff=quadratic(f"{s} eir-fff", HEAT_EIR_FFLOW_SPEC[n][i]),
            plf=plf_curve(f"{s} plf", CD_BY_SPEEDS[n]),
        ))
    return curves


def add_curves(model: Model, curves: Sequence[PerformanceCurve]) -> None:
    for curve in curves:
        curve.add_to(model)
