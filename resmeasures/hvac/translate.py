"""
HPXML HVAC translation: cooling systems, heating systems, heat pumps,
residual ideal air and zone equipment load distribution.
"""

from typing import List, Optional
import logging

from ..core import constants
from ..core.exceptions import MeasureError
from ..model import Model, ModelObject
from . import systems
from .equipment import (
    ASHP, BOILER, CENTRAL_AC, ELECTRIC_RESISTANCE, FURNACE, GSHP, MSHP, ROOM_AC,
    HVACSystemRecord, check_heat_pump_dse, get_dse, get_hvac_systems,
)

logger = logging.getLogger(__name__)

RESIDUAL_MIN_FRACTION = 0.02


def _capacity(value: Optional[float]) -> Optional[float]:
    """HPXML capacities <= 0 mean autosize."""
    if value is None or value <= 0:
        return None
    return value


def add_cooling_systems(model: Model, hpxml) -> List[HVACSystemRecord]:
    added = []
    for clg in hpxml.cooling_systems:
        cap = _capacity(clg.cooling_capacity)
        frac = clg.fraction_cool_load_served
        if clg.cooling_system_type == CENTRAL_AC:
            _, dse_cool, _ = get_dse(hpxml, clg)
            added.append(systems.apply_central_ac(model, clg.id, clg.cooling_efficiency_value, cap, frac, dse_cool))
        elif clg.cooling_system_type == ROOM_AC:
            added.append(systems.apply_room_ac(model, clg.id, clg.cooling_efficiency_value, cap, frac))
        else:
            raise MeasureError(f"Unexpected cooling system type: {clg.cooling_system_type}.")
    return added


def add_heating_systems(model: Model, hpxml) -> List[HVACSystemRecord]:
    added = []
    for htg in hpxml.heating_systems:
        cap = _capacity(htg.heating_capacity)
        frac = htg.fraction_heat_load_served
        eff = htg.heating_efficiency_value
        dse_heat, _, _ = get_dse(hpxml, htg)
        t = htg.heating_system_type
        if t == FURNACE:
            added.append(systems.apply_furnace(model, htg.id, htg.heating_system_fuel, eff, cap, frac, dse_heat))
        elif t in systems.UNIT_HEATER_TYPES:
            fan_power, airflow = systems.UNIT_HEATER_TYPES[t]
            added.append(systems.apply_unit_heater(model, htg.id, t, htg.heating_system_fuel, eff, cap, frac,
                                                   fan_power=fan_power, airflow_rate=airflow))
        elif t == BOILER:
            added.append(systems.apply_boiler(model, htg.id, htg.heating_system_fuel, eff, cap, frac, dse_heat))
        elif t == ELECTRIC_RESISTANCE:
            added.append(systems.apply_electric_baseboard(model, htg.id, eff, cap, frac))
        else:
            raise MeasureError(f"Unexpected heating system type: {t}.")
    return added


def add_heat_pumps(model: Model, hpxml) -> List[HVACSystemRecord]:
    added = []
    for hp in hpxml.heat_pumps:
        dse_heat, dse_cool, has_dse = get_dse(hpxml, hp)
        check_heat_pump_dse(dse_heat, dse_cool)
        backup_eff = hp.backup_heating_efficiency_percent
        common = dict(
            heating_capacity=_capacity(hp.heating_capacity),
            cooling_capacity=_capacity(hp.cooling_capacity),
            backup_capacity=_capacity(hp.backup_heating_capacity),
            load_frac_heat=hp.fraction_heat_load_served,
            load_frac_cool=hp.fraction_cool_load_served,
            dse=dse_heat,
            backup_fuel=hp.backup_heating_fuel,
            backup_efficiency=backup_eff,
        )
        if hp.heat_pump_type == ASHP:
            added.append(systems.apply_central_ashp(model, hp.id, hp.cooling_efficiency_value,
                                                    hp.heating_efficiency_value, **common))
        elif hp.heat_pump_type == MSHP:
            ducted = hp.distribution_system_idref is not None and not has_dse
            added.append(systems.apply_mshp(model, hp.id, hp.cooling_efficiency_value, hp.heating_efficiency_value,
                                            ducted=ducted, **common))
        elif hp.heat_pump_type == GSHP:
            added.append(systems.apply_gshp(model, hp.id, hp.cooling_efficiency_value, hp.heating_efficiency_value,
                                            **common))
        else:
            raise MeasureError(f"Unexpected heat pump type: {hp.heat_pump_type}.")
    return added


def add_residual_hvac(model: Model, hpxml) -> Optional[HVACSystemRecord]:
    """
    Ideal air for any load fraction the real systems leave unserved.

    With UseOnlyIdealAirSystem, ideal air serves everything and nothing
    else is added.
    """
    if hpxml.use_only_ideal_air_system:
        return systems.apply_ideal_air(model, "ideal air system", 1.0, 1.0)
    residual_heat = 1.0 - hpxml.heating_load_fraction
    residual_cool = 1.0 - hpxml.cooling_load_fraction
    frac_heat = residual_heat if RESIDUAL_MIN_FRACTION < residual_heat < 1.0 else 0.0
    frac_cool = residual_cool if RESIDUAL_MIN_FRACTION < residual_cool < 1.0 else 0.0
    if frac_heat == 0.0 and frac_cool == 0.0:
        return None
    logger.info(f"Residual ideal air: heating {frac_heat:.3f}, cooling {frac_cool:.3f}")
    return systems.apply_ideal_air(model, "residual ideal air system", frac_heat, frac_cool)


def add_hvac(model: Model, hpxml) -> List[HVACSystemRecord]:
    """All HVAC systems in order; returns the records added."""
    if hpxml.use_only_ideal_air_system:
        return [add_residual_hvac(model, hpxml)]
    added = add_cooling_systems(model, hpxml) + add_heating_systems(model, hpxml) + add_heat_pumps(model, hpxml)
    residual = add_residual_hvac(model, hpxml)
    if residual is not None:
        added.append(residual)
    return added


def apply_load_distribution(model: Model, scheme: Optional[str]) -> Optional[ModelObject]:
    """
    Living zone equipment list. Sequential load fractions follow each
    system's share of the load.

    Raises:
        MeasureError: If the scheme is not UniformLoad or SequentialLoad
    """
    scheme = scheme or "UniformLoad"
    if scheme not in constants.LOAD_DISTRIBUTION_SCHEMES:
        raise MeasureError(f"Unexpected load distribution scheme {scheme}.")
    records = list(get_hvac_systems(model).values())
    if not records:
        return None
    fields = {
        "Zone Name": systems.living_zone_name(model),
        "Load Distribution Scheme": scheme,
    }
    i = 0
    for rec in records:
        for obj_type, name in rec.zone_equipment:
            i += 1
            fields[f"Zone Equipment {i} Object Type"] = obj_type
            fields[f"Zone Equipment {i} Name"] = name
            fields[f"Zone Equipment {i} Cooling Sequence"] = i
            fields[f"Zone Equipment {i} Heating or No-Load Sequence"] = i
            fields[f"Zone Equipment {i} Sequential Cooling Fraction"] = round(rec.load_frac_cool, 4)
            fields[f"Zone Equipment {i} Sequential Heating Fraction"] = round(rec.load_frac_heat, 4)
    return model.add(ModelObject("ZoneHVAC:EquipmentList", "living zone equipment list", fields))
