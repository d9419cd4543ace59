"""On-site generation."""

from .pv import PVSystemParams, apply_pv, apply_pv_systems

__all__ = ["PVSystemParams", "apply_pv", "apply_pv_systems"]
