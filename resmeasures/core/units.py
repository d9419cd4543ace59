"""
Unit conversions between IP and SI units.

HPXML inputs are IP (ft, Btu/hr, F); the simulation model is SI.

Usage:
    from resmeasures.core.units import convert

    area_m2 = convert(2000.0, "ft^2", "m^2")
    temp_c = convert(68.0, "F", "C")
"""

import math
from typing import Dict, Tuple


# Multiplicative factors, from -> to. Reverse pairs are derived.
_FACTORS: Dict[Tuple[str, str], float] = {
    # Length
    ("ft", "m"): 0.3048,
    ("in", "m"): 0.0254,
    ("in", "ft"): 1.0 / 12.0,
    ("ft", "in"): 12.0,
    ("m", "mm"): 1000.0,
    # Area
    ("ft^2", "m^2"): 0.09290304,
    ("in^2", "ft^2"): 1.0 / 144.0,
    # Volume
    ("ft^3", "m^3"): 0.028316846592,
    ("gal", "m^3"): 0.003785411784,
    ("gal", "ft^3"): 0.13368055555555556,
    ("gal", "L"): 3.785411784,
    ("L", "m^3"): 0.001,
    # Energy
    ("kWh", "J"): 3.6e6,
    ("Btu", "J"): 1055.05585262,
    ("kBtu", "Btu"): 1000.0,
    ("MBtu", "Btu"): 1.0e6,
    ("therm", "Btu"): 1.0e5,
    ("therm", "kBtu"): 100.0,
    ("kWh", "Btu"): 3412.141633127942,
    ("kWh", "kBtu"): 3.412141633127942,
    ("therm", "kWh"): 29.307107017222222,
    ("GJ", "J"): 1.0e9,
    ("MJ", "J"): 1.0e6,
    ("kWh", "Wh"): 1000.0,
    ("Wh", "Btu"): 3.412141633127942,
    # Power
    ("W", "Btu/hr"): 3.412141633127942,
    ("kW", "W"): 1000.0,
    ("kW", "Btu/hr"): 3412.141633127942,
    ("kBtu/hr", "Btu/hr"): 1000.0,
    ("kBtu/hr", "W"): 293.0710701722222,
    ("kW", "kBtu/hr"): 3.412141633127942,
    ("ton", "Btu/hr"): 12000.0,
    ("ton", "kBtu/hr"): 12.0,
    ("ton", "W"): 3516.8528420666667,
    # Time
    ("hr", "s"): 3600.0,
    ("min", "s"): 60.0,
    ("hr", "min"): 60.0,
    ("day", "hr"): 24.0,
    ("yr", "day"): 365.0,
    ("yr", "hr"): 8760.0,
    # Flow
    ("cfm", "m^3/s"): 0.00047194745,
    ("cfm", "ft^3/hr"): 60.0,
    ("cfm", "L/s"): 0.47194745,
    ("gal/min", "m^3/s"): 6.30901964e-05,
    ("lbm/min", "kg/hr"): 27.2155422,
    # Heat transfer
    ("Btu/(hr*ft^2*F)", "W/(m^2*K)"): 5.678263337,
    ("hr*ft^2*F/Btu", "m^2*K/W"): 0.1761101838,
    ("Btu/(hr*ft*R)", "W/(m*K)"): 1.730734666,
    ("Btu*in/(hr*ft^2*R)", "W/(m*K)"): 0.1442278888,
    ("Btu/(hr*F)", "W/K"): 0.5275279262,
    ("Btu/(lbm*R)", "J/(kg*K)"): 4186.8,
    ("lbm/ft^3", "kg/m^3"): 16.01846337,
    ("Btu/(hr*ft^2)", "W/m^2"): 3.154591,
    ("W/ft^2", "W/m^2"): 10.763910417,
    ("Btu/hr", "W"): 0.2930710701722222,
    # Pressure
    ("inH2O", "Pa"): 249.0889,
    ("psi", "Pa"): 6894.757,
    # Angle
    ("deg", "rad"): math.pi / 180.0,
    # Fractions
    ("frac", "%"): 100.0,
}

_LOOKUP: Dict[Tuple[str, str], float] = {}
for (_a, _b), _f in _FACTORS.items():
    _LOOKUP[(_a.lower(), _b.lower())] = _f
    _LOOKUP.setdefault((_b.lower(), _a.lower()), 1.0 / _f)


def _convert_temperature(value: float, unit_from: str, unit_to: str) -> float:
    # Absolute temperatures pass through Fahrenheit
    to_f = {
        "f": lambda x: x,
        "c": lambda x: x * 1.8 + 32.0,
        "k": lambda x: (x - 273.15) * 1.8 + 32.0,
        "r": lambda x: x - 459.67,
    }
    from_f = {
        "f": lambda x: x,
        "c": lambda x: (x - 32.0) / 1.8,
        "k": lambda x: (x - 32.0) / 1.8 + 273.15,
        "r": lambda x: x + 459.67,
    }
    return from_f[unit_to](to_f[unit_from](value))


_TEMPERATURES = {"f", "c", "k", "r"}
_DELTAS = {("deltaf", "deltac"): 1.0 / 1.8, ("deltac", "deltaf"): 1.8}


def convert(value: float, unit_from: str, unit_to: str) -> float:
    """
    Convert a value between units.

    Args:
        value: Value to convert
        unit_from: Source unit, e.g. "ft^2"
        unit_to: Target unit, e.g. "m^2"

    Returns:
        Converted value

    Raises:
        ValueError: If the unit pair is not known
    """
    a = unit_from.lower()
    b = unit_to.lower()
    if a == b:
        return value
    if a in _TEMPERATURES and b in _TEMPERATURES:
        return _convert_temperature(value, a, b)
    if (a, b) in _DELTAS:
        return value * _DELTAS[(a, b)]
    factor = _LOOKUP.get((a, b))
    if factor is None:
        raise ValueError(f"Unhandled unit conversion from {unit_from} to {unit_to}.")
    return value * factor
