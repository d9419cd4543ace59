"""Electric auxiliary energy (fans and pumps) of fuel-fired heating."""

from typing import Dict
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model
from .equipment import FUEL_EAE_TYPES, get_default_eae, get_hvac_systems
from .systems import FAN_EFFICIENCY, FAN_PA_PER_W_PER_CFM

logger = logging.getLogger(__name__)

# Annual EAE (kWh) spread over 2080 operating hours, as W
EAE_HOURS = 2080.0


def eae_to_power(eae_kwh: float) -> float:
    return eae_kwh * 1000.0 / EAE_HOURS


def apply_fuel_eae(model: Model, hpxml) -> Dict[str, float]:
    """
    Set fan or pump power of fuel heating systems from their annual EAE.

    Must run after sizing since fan power per cfm depends on airflow.

    Returns:
        sys_id -> electric power (W)
    """
    systems = get_hvac_systems(model)
    applied = {}
    for htg in hpxml.heating_systems:
        rec = systems.get(htg.id)
        if rec is None or htg.heating_system_type not in FUEL_EAE_TYPES:
            continue
        if htg.heating_system_fuel == constants.FUEL_ELECTRIC:
            continue
        eae = htg.electric_auxiliary_energy
        if eae is None:
            cap_kbtuh = convert(rec.heating_capacity, "Btu/hr", "kBtu/hr") if rec.heating_capacity else None
            eae = get_default_eae(htg.heating_system_type, htg.heating_system_fuel, rec.load_frac_heat, cap_kbtuh)
        power = eae_to_power(eae)
        applied[htg.id] = power

        for obj_type, name in rec.objects:
            obj = model.get(obj_type, name)
            if obj is None:
                continue
            if obj_type == "Fan:OnOff":
                cfm = (rec.heating_capacity or 0.0) / 12000.0 * rec.airflow_cfm_per_ton
                w_per_cfm = power / cfm if cfm > 0 else 0.0
                obj.set("Pressure Rise", round(w_per_cfm * FAN_EFFICIENCY * FAN_PA_PER_W_PER_CFM, 2))
                obj.set("Fan Total Efficiency", FAN_EFFICIENCY)
            elif obj_type == "Pump:VariableSpeed":
                obj.set("Design Power Consumption", round(power, 2))
        logger.debug(f"EAE for '{htg.id}': {eae:.1f} kWh/yr ({power:.1f} W)")
    return applied
