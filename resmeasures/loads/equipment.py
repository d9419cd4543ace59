"""
Internal-gain equipment objects shared by appliances, lighting and plug loads.
"""

from typing import Optional
import logging

from ..core import constants
from ..model import Model, ModelObject, Space

logger = logging.getLogger(__name__)


def gain_fractions(frac_sens: float, frac_lat: float):
    """
    Split a sensible/latent internal gain into model fractions.

    Returns:
        (fraction latent, fraction radiant, fraction lost)

    Raises:
        ValueError: If the fractions are out of range
    """
    if frac_sens < 0 or frac_sens > 1:
        raise ValueError("Sensible fraction must be greater than or equal to 0 and less than or equal to 1.")
    if frac_lat < 0 or frac_lat > 1:
        raise ValueError("Latent fraction must be greater than or equal to 0 and less than or equal to 1.")
    frac_lost = 1.0 - frac_sens - frac_lat
    if frac_lost < 0:
        raise ValueError("Sum of sensible and latent fractions must be less than or equal to 1.")
    return frac_lat, 0.6 * frac_sens, frac_lost


def add_equipment(
    model: Model,
    name: str,
    space: Space,
    design_level_w: float,
    schedule_name: str,
    frac_sens: float = 1.0,
    frac_lat: float = 0.0,
    fuel: str = constants.FUEL_ELECTRIC,
    end_use: Optional[str] = None,
) -> Optional[ModelObject]:
    """
    Add an electric (or fuel) equipment load to a space.

    Zero design levels add nothing.

    Args:
        design_level_w: Peak power (W) reached when the schedule is 1.0
        schedule_name: Fraction schedule name
        fuel: Electricity creates ElectricEquipment, other fuels OtherEquipment

    Returns:
        The created object, or None
    """
    if design_level_w <= 0:
        return None
    frac_lat, frac_rad, frac_lost = gain_fractions(frac_sens, frac_lat)
    name = model.unique_name("ElectricEquipment" if fuel == constants.FUEL_ELECTRIC else "OtherEquipment", name)
    fields = {}
    if fuel == constants.FUEL_ELECTRIC:
        obj_type = "ElectricEquipment"
    else:
        obj_type = "OtherEquipment"
        fields["Fuel Type"] = constants.EPLUS_FUELS[fuel]
    fields.update({
        "Zone or ZoneList or Space or SpaceList Name": space.name,
        "Schedule Name": schedule_name,
        "Design Level Calculation Method": "EquipmentLevel",
        "Design Level": round(design_level_w, 4),
        "Watts per Zone Floor Area": None,
        "Watts per Person": None,
        "Fraction Latent": round(frac_lat, 4),
        "Fraction Radiant": round(frac_rad, 4),
        "Fraction Lost": round(frac_lost, 4),
        "End-Use Subcategory": end_use or name,
    })
    obj = model.add(ModelObject(obj_type, name, fields))
    logger.debug(f"Added {obj_type} '{name}' at {design_level_w:.1f} W in {space.name}")
    return obj
