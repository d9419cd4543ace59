"""
Major appliances: reference values, annual energy and hot water use.

Energy and hot water use follow the ANSI/RESNET 301 reference home
equations. Rated values from HPXML replace the reference values where given.

Usage:
    kwh, gpd = calc_dishwasher_energy_gpd(nbeds=3, ef=0.46, cap=12)
    add_appliances(model, hpxml, nbeds=3)
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model
from ..schedules import MonthWeekdayWeekendSchedule
from .equipment import add_equipment

logger = logging.getLogger(__name__)

MONTHLY_FLAT = ", ".join(["1.0"] * 12)

# 24-hour weekday/weekend profiles and monthly multipliers
REFRIGERATOR_WEEKDAY_SCH = ("0.040, 0.039, 0.038, 0.037, 0.036, 0.036, 0.038, 0.040, 0.041, 0.041, 0.040, 0.040, "
                            "0.042, 0.042, 0.042, 0.041, 0.044, 0.048, 0.050, 0.048, 0.047, 0.046, 0.044, 0.041")
REFRIGERATOR_MONTHLY_SCH = "0.837, 0.835, 1.084, 1.084, 1.084, 1.096, 1.096, 1.096, 1.096, 0.931, 0.925, 0.837"
CLOTHES_WASHER_WEEKDAY_SCH = ("0.009, 0.007, 0.004, 0.004, 0.007, 0.011, 0.022, 0.049, 0.073, 0.086, 0.084, 0.075, "
                              "0.067, 0.060, 0.049, 0.052, 0.050, 0.049, 0.049, 0.049, 0.049, 0.047, 0.032, 0.017")
CLOTHES_DRYER_WEEKDAY_SCH = ("0.010, 0.006, 0.004, 0.002, 0.004, 0.006, 0.016, 0.032, 0.048, 0.068, 0.078, 0.081, "
                             "0.074, 0.067, 0.057, 0.061, 0.055, 0.054, 0.051, 0.051, 0.052, 0.054, 0.044, 0.024")
DISHWASHER_WEEKDAY_SCH = ("0.015, 0.007, 0.005, 0.003, 0.003, 0.010, 0.020, 0.031, 0.058, 0.065, 0.056, 0.048, "
                          "0.041, 0.046, 0.036, 0.038, 0.038, 0.049, 0.087, 0.111, 0.090, 0.067, 0.044, 0.031")
COOKING_WEEKDAY_SCH = ("0.007, 0.007, 0.004, 0.004, 0.007, 0.011, 0.025, 0.042, 0.046, 0.048, 0.042, 0.050, "
                       "0.057, 0.046, 0.057, 0.044, 0.092, 0.150, 0.117, 0.060, 0.035, 0.025, 0.016, 0.011")

# Clothes washer label test conditions
CW_TEST_CYCLES_PER_YEAR = 392
CW_TEST_GAS_DHW_EFFICIENCY = 0.75


# =============================================================================
# Reference values
# =============================================================================

def get_clothes_washer_reference_mef() -> float:
    return 0.817


def get_clothes_washer_reference_ler() -> float:
    return 704.0  # kWh/yr


def get_clothes_washer_reference_elec_rate() -> float:
    return 0.08  # $/kWh


def get_clothes_washer_reference_gas_rate() -> float:
    return 0.58  # $/therm


def get_clothes_washer_reference_agc() -> float:
    return 23.0  # $/yr


def get_clothes_washer_reference_cap() -> float:
    return 2.874  # ft^3


def calc_clothes_washer_mef_from_imef(imef: float) -> float:
    return 0.503 + 0.95 * imef


def get_clothes_dryer_reference_ef(fuel: str) -> float:
    if fuel == constants.FUEL_ELECTRIC:
        return 3.01
    return 2.67


def get_clothes_dryer_reference_control() -> str:
    return "timer"


def calc_clothes_dryer_ef_from_cef(cef: float) -> float:
    return cef * 1.15


def get_dishwasher_reference_ef() -> float:
    return 0.46


def get_dishwasher_reference_cap() -> float:
    return 12.0  # place settings


def calc_dishwasher_ef_from_annual_kwh(annual_kwh: float) -> float:
    return 215.0 / annual_kwh


def get_refrigerator_reference_annual_kwh(nbeds: int) -> float:
    return 637.0 + 18.0 * nbeds


def get_range_oven_reference_is_induction() -> bool:
    return False


def get_range_oven_reference_is_convection() -> bool:
    return False


# =============================================================================
# Annual energy
# =============================================================================

@dataclass
class ApplianceEnergy:
    """Annual energy, hot water use and internal gain fractions of one appliance."""
    name: str
    annual_kwh: float = 0.0
    annual_therm: float = 0.0
    gpd: float = 0.0
    frac_sens: float = 1.0
    frac_lat: float = 0.0
    fuel: str = constants.FUEL_ELECTRIC


def calc_refrigerator_energy(annual_kwh: float) -> ApplianceEnergy:
    if annual_kwh < 0:
        raise ValueError("Rated annual consumption must be greater than or equal to 0.")
    return ApplianceEnergy(constants.object_name("refrigerator"), annual_kwh=annual_kwh, frac_sens=1.0, frac_lat=0.0)


def calc_range_oven_energy(nbeds: int, fuel: str, is_induction: bool, is_convection: bool) -> ApplianceEnergy:
    """
    Cooking range and oven.

    Fuel ranges use electricity for ignition and controls.
    """
    burner_ef = 0.91 if is_induction else 1.0
    oven_ef = 0.95 if is_convection else 1.0
    energy = ApplianceEnergy("cooking range", frac_sens=0.4, frac_lat=0.3, fuel=fuel)
    if fuel != constants.FUEL_ELECTRIC:
        energy.annual_therm = oven_ef * (22.6 + 2.7 * nbeds)
        energy.annual_kwh = 22.6 + 2.7 * nbeds
    else:
        energy.annual_kwh = burner_ef * oven_ef * (331 + 39.0 * nbeds)
    return energy


def calc_dishwasher_energy_gpd(nbeds: int, ef: float, cap: float) -> Tuple[float, float]:
    """
    Dishwasher annual electricity and daily hot water.

    Returns:
        (kWh/yr, gal/day)

    Raises:
        ValueError: On invalid ratings
    """
    if cap < 1:
        raise ValueError("Number of place settings must be greater than or equal to 1.")
    if ef <= 0:
        raise ValueError("Rated annual consumption must be greater than 0.0.")
    dwcpy = (88.4 + 34.9 * nbeds) * (12.0 / cap)
    annual_kwh = ((86.3 + 47.73 / ef) / 215.0) * dwcpy
    gpd = dwcpy * (4.6415 * (1.0 / ef) - 1.9295) / 365.0
    if annual_kwh < 0 or gpd < 0:
        raise ValueError("The inputs for the dishwasher resulted in a negative amount of energy consumption.")
    return annual_kwh, gpd


def calc_clothes_washer_energy_gpd(nbeds: int, ler: float, elec_rate: float, gas_rate: float,
                                   agc: float, cap: float) -> Tuple[float, float]:
    """
    Clothes washer annual electricity and daily hot water.

    Args:
        ler: Labeled energy rating (kWh/yr)
        elec_rate: Label electric rate ($/kWh)
        gas_rate: Label gas rate ($/therm)
        agc: Annual gas cost on the label ($)
        cap: Drum volume (ft^3)

    Returns:
        (kWh/yr, gal/day)
    """
    if ler <= 0:
        raise ValueError("Rated annual consumption must be greater than 0.0.")
    if agc <= 0:
        raise ValueError("Annual cost with gas DHW must be greater than 0.0.")
    if cap <= 0:
        raise ValueError("Drum volume must be greater than 0.0.")
    ncy = (3.0 / 2.847) * (164 + nbeds * 46.5)
    acy = ncy * ((3.0 * 2.08 + 1.59) / (cap * 2.08 + 1.59))
    annual_kwh = ler / 392.0 * acy
    therms_per_cycle = (ler * elec_rate - agc) / (21.9825 * elec_rate - gas_rate) / 392.0
    gpd = 60.0 * therms_per_cycle * acy / 365.0
    return annual_kwh, max(gpd, 0.0)


def calc_clothes_dryer_energy(nbeds: int, fuel: str, ef: float, control: str,
                              cw_ler: float, cw_cap: float, cw_mef: float) -> ApplianceEnergy:
    """
    Clothes dryer annual energy. Fuel dryers also use electricity for the
    drum motor and controls.
    """
    if ef <= 0:
        raise ValueError("Combined energy factor must be greater than 0.0.")
    field_util = 1.0 if control == "timer" else 0.91
    annual_kwh = 12.5 * (164 + 46.5 * nbeds) * (field_util / ef) * ((cw_cap / cw_mef) - cw_ler / 392.0) / \
        (0.2184 * (cw_cap * 4.08 + 0.24))
    annual_kwh = max(annual_kwh, 0.0)
    if fuel == constants.FUEL_ELECTRIC:
        return ApplianceEnergy("clothes dryer", annual_kwh=annual_kwh, frac_sens=0.15, frac_lat=0.05)
    annual_therm = convert(annual_kwh, "kWh", "therm") * 0.91
    return ApplianceEnergy("clothes dryer", annual_kwh=annual_kwh * 0.09, annual_therm=annual_therm,
                           frac_sens=0.1, frac_lat=0.05, fuel=fuel)


# =============================================================================
# EnergyGuide label costs
# =============================================================================

_GAS_COST_CENTS_PER_THERM: Dict[int, float] = {
    1992: 58.0, 1993: (58.0 + 60.40) / 2, 1994: 60.40, 1995: 63.0, 1996: 62.6, 1997: 61.2, 1998: 61.9,
    1999: 68.8, 2000: 68.8, 2001: 83.7, 2002: 65.6, 2003: 81.6, 2004: 91.0, 2005: 109.2, 2006: 141.5,
    2007: 121.8, 2008: 132.8, 2009: 111.2, 2010: 119.4, 2011: 110.1, 2012: 105.9, 2013: 108.7, 2014: 112.8,
}
_ELEC_COST_CENTS_PER_KWH: Dict[int, float] = {
    1992: 8.25, 1993: (8.25 + 8.41) / 2, 1994: 8.41, 1995: 8.67, 1996: 8.60, 1997: 8.31, 1998: 8.42,
    1999: 8.22, 2000: 8.03, 2001: 8.29, 2002: 8.28, 2003: 8.41, 2004: 8.60, 2005: 9.06, 2006: 9.91,
    2007: 10.65, 2008: 10.80, 2009: 11.40, 2010: 11.50, 2011: 11.65, 2012: 11.84, 2013: 12.10, 2014: 12.40,
}


def get_energy_guide_gas_cost(year: int) -> float:
    """Gas price (cents/therm) printed on EnergyGuide labels for a test year."""
    if year <= 1991:
        return 60.54
    if year >= 2015:
        return 100.3
    return _GAS_COST_CENTS_PER_THERM[year]


def get_energy_guide_elec_cost(year: int) -> float:
    """Electricity price (cents/kWh) printed on EnergyGuide labels for a test year."""
    if year <= 1991:
        return 8.24
    if year >= 2015:
        return 12.7
    return _ELEC_COST_CENTS_PER_KWH[year]


def calc_clothes_washer_label_per_cycle(rated_annual_kwh: float, annual_cost: float, test_year: int,
                                        drum_volume: float) -> Dict[str, float]:
    """
    Per-cycle gas, electricity and hot water use derived from an EnergyGuide label.

    Returns:
        Dict with therm_per_cycle, kwh_per_cycle, gal_per_cycle, test_load_lb
    """
    if rated_annual_kwh <= 0:
        raise ValueError("Rated annual consumption must be greater than 0.0.")
    if annual_cost <= 0:
        raise ValueError("Annual cost with gas DHW must be greater than 0.0.")
    if test_year < 1900:
        raise ValueError("Test date must be greater than or equal to 1900.")
    if drum_volume <= 0:
        raise ValueError("Drum volume must be greater than 0.0.")

    gas_cost = get_energy_guide_gas_cost(test_year) / 100.0
    elec_cost = get_energy_guide_elec_cost(test_year) / 100.0
    eff_kwh = convert(CW_TEST_GAS_DHW_EFFICIENCY, "therm", "kWh")
    therm_per_cycle = (rated_annual_kwh * elec_cost - annual_cost) / (eff_kwh * elec_cost - gas_cost) / \
        CW_TEST_CYCLES_PER_YEAR
    kwh_per_cycle = rated_annual_kwh / CW_TEST_CYCLES_PER_YEAR - therm_per_cycle * eff_kwh
    dhw_delta_t = 90.0 if test_year < 2004 else 75.0
    # Water: 62.4 lbm/ft^3, 1.0 Btu/lbm-R, 7.48 gal/ft^3
    btu_per_gal_f = 62.4 * 1.0 / convert(1.0, "ft^3", "gal")
    gal_per_cycle = convert(therm_per_cycle, "therm", "Btu") * CW_TEST_GAS_DHW_EFFICIENCY / \
        (dhw_delta_t * btu_per_gal_f)
    return {
        "therm_per_cycle": therm_per_cycle,
        "kwh_per_cycle": kwh_per_cycle,
        "gal_per_cycle": gal_per_cycle,
        "test_load_lb": 4.103003337 * drum_volume + 0.198242492,
    }


# =============================================================================
# Model objects
# =============================================================================

def _schedule(model: Model, name: str, weekday: str, monthly: str = MONTHLY_FLAT) -> MonthWeekdayWeekendSchedule:
    schedule = MonthWeekdayWeekendSchedule(f"{name} schedule", weekday, weekday, monthly)
    schedule.add_to(model)
    return schedule


def _space_for(model: Model, location: Optional[str]):
    space_type = constants.LOCATION_SPACE_TYPES.get(location or constants.LOCATION_LIVING,
                                                    constants.SPACE_TYPE_LIVING)
    return model.create_or_get_space(space_type)


def add_appliance(model: Model, energy: ApplianceEnergy, weekday_sch: str, monthly_sch: str = MONTHLY_FLAT,
                  location: Optional[str] = None) -> None:
    """Add the electric and fuel equipment of one appliance."""
    space = _space_for(model, location)
    schedule = _schedule(model, energy.name, weekday_sch, monthly_sch)
    if energy.annual_kwh > 0:
        add_equipment(model, energy.name, space, schedule.calc_design_level_from_annual_kwh(energy.annual_kwh),
                      schedule.name, energy.frac_sens, energy.frac_lat, end_use=energy.name)
    if energy.annual_therm > 0:
        add_equipment(model, f"{energy.name} {energy.fuel}", space,
                      schedule.calc_design_level_from_annual_therm(energy.annual_therm),
                      schedule.name, energy.frac_sens, energy.frac_lat, fuel=energy.fuel, end_use=energy.name)


def add_appliances(model: Model, hpxml, nbeds: int) -> Dict[str, ApplianceEnergy]:
    """
    Add the HPXML appliances (reference values where ratings are missing).

    Returns:
        Appliance name -> energy, including the clothes washer and dishwasher
        hot water use consumed by the hot water model
    """
    results: Dict[str, ApplianceEnergy] = {}

    cw_mef = get_clothes_washer_reference_mef()
    cw_ler = get_clothes_washer_reference_ler()
    cw_cap = get_clothes_washer_reference_cap()
    cw = hpxml.clothes_washer
    if cw is not None:
        cw_elec_rate = get_clothes_washer_reference_elec_rate()
        cw_gas_rate = get_clothes_washer_reference_gas_rate()
        cw_agc = get_clothes_washer_reference_agc()
        if cw.integrated_modified_energy_factor is not None or cw.modified_energy_factor is not None:
            if cw.integrated_modified_energy_factor is not None:
                if cw.integrated_modified_energy_factor <= 0:
                    raise ValueError("Integrated modified energy factor must be greater than 0.0.")
                cw_mef = calc_clothes_washer_mef_from_imef(cw.integrated_modified_energy_factor)
            else:
                cw_mef = cw.modified_energy_factor
            cw_ler = cw.rated_annual_kwh
            cw_elec_rate = cw.label_electric_rate
            cw_gas_rate = cw.label_gas_rate
            cw_agc = cw.label_annual_gas_cost
            cw_cap = cw.capacity
        kwh, gpd = calc_clothes_washer_energy_gpd(nbeds, cw_ler, cw_elec_rate, cw_gas_rate, cw_agc, cw_cap)
        energy = ApplianceEnergy("clothes washer", annual_kwh=kwh, gpd=gpd, frac_sens=0.3, frac_lat=0.0)
        add_appliance(model, energy, CLOTHES_WASHER_WEEKDAY_SCH, location=cw.location)
        results["clothes washer"] = energy

    cd = hpxml.clothes_dryer
    if cd is not None:
        ef = get_clothes_dryer_reference_ef(cd.fuel_type)
        control = get_clothes_dryer_reference_control()
        if cd.energy_factor is not None or cd.combined_energy_factor is not None:
            if cd.combined_energy_factor is not None:
                ef = calc_clothes_dryer_ef_from_cef(cd.combined_energy_factor)
            else:
                ef = cd.energy_factor
            control = cd.control_type or control
        energy = calc_clothes_dryer_energy(nbeds, cd.fuel_type, ef, control, cw_ler, cw_cap, cw_mef)
        add_appliance(model, energy, CLOTHES_DRYER_WEEKDAY_SCH, location=cd.location)
        results["clothes dryer"] = energy

    dw = hpxml.dishwasher
    if dw is not None:
        ef = get_dishwasher_reference_ef()
        cap = get_dishwasher_reference_cap()
        if dw.energy_factor is not None or dw.rated_annual_kwh is not None:
            if dw.energy_factor is not None:
                ef = dw.energy_factor
            else:
                ef = calc_dishwasher_ef_from_annual_kwh(dw.rated_annual_kwh)
            cap = dw.place_setting_capacity
        kwh, gpd = calc_dishwasher_energy_gpd(nbeds, ef, cap)
        energy = ApplianceEnergy("dishwasher", annual_kwh=kwh, gpd=gpd, frac_sens=0.6, frac_lat=0.15)
        add_appliance(model, energy, DISHWASHER_WEEKDAY_SCH)
        results["dishwasher"] = energy

    fridge = hpxml.refrigerator
    if fridge is not None:
        kwh = fridge.rated_annual_kwh
        if kwh is None:
            kwh = get_refrigerator_reference_annual_kwh(nbeds)
        energy = calc_refrigerator_energy(kwh)
        add_appliance(model, energy, REFRIGERATOR_WEEKDAY_SCH, REFRIGERATOR_MONTHLY_SCH, location=fridge.location)
        results["refrigerator"] = energy

    cooking = hpxml.cooking_range
    if cooking is not None and hpxml.oven is not None:
        is_induction = cooking.is_induction
        if is_induction is None:
            is_induction = get_range_oven_reference_is_induction()
        is_convection = hpxml.oven.is_convection
        if is_convection is None:
            is_convection = get_range_oven_reference_is_convection()
        energy = calc_range_oven_energy(nbeds, cooking.fuel_type, is_induction, is_convection)
        add_appliance(model, energy, COOKING_WEEKDAY_SCH)
        results["cooking range"] = energy

    for name, energy in results.items():
        logger.info(f"{name}: {energy.annual_kwh:.1f} kWh/yr, {energy.annual_therm:.1f} therm/yr, "
                    f"{energy.gpd:.2f} gal/day")
    return results
