"""Airflow: infiltration, mechanical and natural ventilation, ducts."""

from typing import Dict
import logging

from ..hvac.equipment import get_hvac_systems
from ..model import Model
from .infiltration import Infiltration, apply_infiltration, calc_ela_from_ach50, calc_natural_ach, calc_sla
from .mech_vent import MechanicalVentilation, apply_mechanical_ventilation, calc_ashrae_622_whole_house_cfm
from .natural_vent import NaturalVentilation, apply_natural_ventilation
from .ducts import Ducts, apply_duct_losses, calc_delivery_effectiveness, register_duct_systems

logger = logging.getLogger(__name__)


def apply_airflow(model: Model, hpxml, volume_ft3: float, num_stories: int, height_ft: float,
                  heating_setpoint_f: float = 68.0) -> Dict[str, float]:
    """
    Add infiltration, ventilation and register duct systems from HPXML.

    Returns:
        Infiltration results (ELA, SLA, natural ACH)
    """
    infil = Infiltration.from_hpxml(hpxml, volume_ft3)
    results = apply_infiltration(model, infil, num_stories, height_ft)

    mech_vent = MechanicalVentilation.from_hpxml(hpxml)
    systems = get_hvac_systems(model)
    air_loops = []
    if mech_vent.distribution_system_idref is not None:
        attached = [s.id for s in list(hpxml.heating_systems) + list(hpxml.cooling_systems) + list(hpxml.heat_pumps)
                    if s.distribution_system_idref == mech_vent.distribution_system_idref]
        air_loops = [loop for sys_id in attached if sys_id in systems for loop in systems[sys_id].air_loops]
    else:
        air_loops = [loop for rec in systems.values() for loop in rec.air_loops]
    apply_mechanical_ventilation(model, mech_vent, air_loops)

    apply_natural_ventilation(model, NaturalVentilation.from_hpxml(hpxml), heating_setpoint_f)
    register_duct_systems(model, hpxml)
    return results


__all__ = [
    "Infiltration",
    "apply_infiltration",
    "calc_ela_from_ach50",
    "calc_natural_ach",
    "calc_sla",
    "MechanicalVentilation",
    "apply_mechanical_ventilation",
    "calc_ashrae_622_whole_house_cfm",
    "NaturalVentilation",
    "apply_natural_ventilation",
    "Ducts",
    "apply_duct_losses",
    "calc_delivery_effectiveness",
    "register_duct_systems",
    "apply_airflow",
]
