"""
Default envelope values by IECC 2006 climate zone, used when HPXML omits an
assembly R-value.
"""

from typing import Optional, Tuple


def _zone_number(iecc_zone: Optional[str]) -> int:
    if not iecc_zone:
        return 4
    digits = "".join(ch for ch in iecc_zone if ch.isdigit())
    if not digits:
        raise ValueError(f"Unexpected IECC climate zone '{iecc_zone}'.")
    return int(digits)


def get_default_frame_wall_ufactor(iecc_zone: Optional[str]) -> float:
    zone = _zone_number(iecc_zone)
    if zone <= 4 and iecc_zone != "4C":
        return 0.082
    if zone <= 6:
        return 0.060
    return 0.057


def get_default_floor_ufactor(iecc_zone: Optional[str]) -> float:
    zone = _zone_number(iecc_zone)
    if zone <= 2:
        return 0.064
    if zone <= 4 and iecc_zone != "4C":
        return 0.047
    return 0.033


def get_default_ceiling_ufactor(iecc_zone: Optional[str]) -> float:
    zone = _zone_number(iecc_zone)
    if zone <= 3:
        return 0.035
    if zone <= 5:
        return 0.030
    return 0.026


def get_default_basement_wall_ufactor(iecc_zone: Optional[str]) -> float:
    zone = _zone_number(iecc_zone)
    if zone <= 3:
        return 0.360
    return 0.059


def get_default_slab_perimeter_rvalue_depth(iecc_zone: Optional[str]) -> Tuple[float, float]:
    """(R-value, depth ft) of slab edge insulation."""
    zone = _zone_number(iecc_zone)
    if zone <= 3:
        return 0.0, 0.0
    if zone <= 5:
        return 10.0, 2.0
    return 10.0, 4.0


def get_default_slab_under_rvalue_width() -> Tuple[float, float]:
    return 0.0, 0.0


def get_default_window_ufactor_shgc(iecc_zone: Optional[str]) -> Tuple[float, float]:
    """(U-factor, SHGC) of fenestration; also used for doors without an R-value."""
    zone = _zone_number(iecc_zone)
    if zone == 1:
        return 1.20, 0.40
    if zone == 2:
        return 0.75, 0.40
    if zone == 3:
        return 0.65, 0.40
    if zone == 4 and iecc_zone != "4C":
        return 0.40, 0.40
    return 0.35, 0.40


def get_default_interior_shading_factors() -> Tuple[float, float]:
    """(summer, winter) interior shading multipliers for windows."""
    return 0.70, 0.85
