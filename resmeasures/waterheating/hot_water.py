"""
Hot water use: fixtures, distribution, recirculation and drain water heat recovery.

Daily draws and distribution adjustments follow the reference home rules
for service hot water (fixtures, distribution waste, recirculation pump
energy, DWHR). Draws are added as WaterUse:Equipment on each water
heater's loop, split by the fraction of load the heater serves.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging
import math

from ..core import constants
from ..core.units import convert
from ..loads.appliances import ApplianceEnergy
from ..loads.equipment import add_equipment
from ..model import Model, ModelObject
from ..schedules import ConstantSchedule, MonthWeekdayWeekendSchedule

logger = logging.getLogger(__name__)

DIST_STANDARD = "standard"
DIST_RECIRCULATION = "recirculation"

RECIRC_NO_CONTROL = "no control"
RECIRC_TIMER = "timer"
RECIRC_TEMPERATURE = "temperature"
RECIRC_PRESENCE = "presence sensor demand control"
RECIRC_MANUAL = "manual demand control"

MIXED_WATER_TEMP_F = 105.0
DWHR_INLET_TEMP_F = 97.0

HOT_WATER_WEEKDAY_SCH = ("0.0085,0.0040,0.0025,0.0021,0.0036,0.0126,0.0379,0.0560,0.0532,0.0445,0.0366,0.0302,"
                         "0.0276,0.0251,0.0226,0.0222,0.0246,0.0312,0.0365,0.0384,0.0354,0.0287,0.0212,0.0140")
HOT_WATER_WEEKEND_SCH = ("0.0101,0.0052,0.0031,0.0024,0.0031,0.0069,0.0178,0.0367,0.0517,0.0553,0.0485,0.0421,"
                         "0.0356,0.0306,0.0274,0.0256,0.0266,0.0309,0.0357,0.0378,0.0349,0.0292,0.0222,0.0160")
HOT_WATER_MONTHLY_SCH = "1.04,1.04,1.04,1.02,1.0,0.98,0.96,0.96,0.97,0.99,1.01,1.03"

# Waste factors by (recirculation control, pipe R < 3)
_RECIRC_WASTE_FACTORS = {
    RECIRC_NO_CONTROL: (500.0, 250.0),
    RECIRC_TIMER: (500.0, 250.0),
    RECIRC_TEMPERATURE: (375.0, 187.5),
    RECIRC_PRESENCE: (64.8, 43.2),
    RECIRC_MANUAL: (43.2, 28.8),
}

# Pump annual kWh per W of pump power
_RECIRC_PUMP_FACTORS = {
    RECIRC_NO_CONTROL: 8.76,
    RECIRC_TIMER: 8.76,
    RECIRC_TEMPERATURE: 1.46,
    RECIRC_PRESENCE: 0.15,
    RECIRC_MANUAL: 0.10,
}


# =============================================================================
# Reference rules
# =============================================================================

def get_default_std_pipe_length(has_uncond_bsmnt: bool, cfa: float, ncfl: float) -> float:
    """Reference piping length (ft)."""
    bsmnt = 1 if has_uncond_bsmnt else 0
    return 2.0 * (cfa / ncfl) ** 0.5 + 10.0 * ncfl + 5.0 * bsmnt


def get_default_recirc_loop_length(std_pipe_length: float) -> float:
    return 2.0 * std_pipe_length - 20.0


def get_dist_energy_waste_factor(dist_type: str, recirc_control_type: Optional[str], pipe_r: float) -> float:
    """
    Relative annual energy waste factor of the distribution system.

    Raises:
        ValueError: For unknown distribution types or recirculation controls
    """
    low_r = pipe_r < 3.0
    if dist_type == DIST_STANDARD:
        return 32.0 if low_r else 28.8
    if dist_type == DIST_RECIRCULATION and recirc_control_type in _RECIRC_WASTE_FACTORS:
        uninsulated, insulated = _RECIRC_WASTE_FACTORS[recirc_control_type]
        return uninsulated if low_r else insulated
    raise ValueError("Unexpected hot water distribution system.")


def get_dist_energy_consumption_adjustment(has_uncond_bsmnt: bool, cfa: float, ncfl: float, dist_type: str,
                                           recirc_control_type: Optional[str], pipe_r: float,
                                           std_pipe_length: Optional[float],
                                           recirc_loop_length: Optional[float]) -> float:
    """
    Multiplier on water heater energy use for distribution losses.

    Returns:
        1.0 for the reference standard system; larger for lossier systems
    """
    ew_fact = get_dist_energy_waste_factor(dist_type, recirc_control_type, pipe_r)
    ref_pipe_l = get_default_std_pipe_length(has_uncond_bsmnt, cfa, ncfl)
    if dist_type == DIST_STANDARD:
        o_frac = 0.25
        pe_ratio = std_pipe_length / ref_pipe_l
    else:
        o_frac = 0.15
        pe_ratio = recirc_loop_length / get_default_recirc_loop_length(ref_pipe_l)
    oew_fact = ew_fact * o_frac
    sew_fact = ew_fact - oew_fact
    e_waste = oew_fact + sew_fact * pe_ratio
    return (e_waste + 128.0) / 160.0


def get_fixtures_effectiveness(has_low_flow_fixtures: bool) -> float:
    return 0.95 if has_low_flow_fixtures else 1.0


def get_fixtures_gpd(nbeds: int, has_low_flow_fixtures: bool) -> float:
    """Shower and sink hot water use (gal/day)."""
    return get_fixtures_effectiveness(has_low_flow_fixtures) * (14.6 + 10.0 * nbeds)


def get_fixtures_gains(nbeds: int) -> Tuple[float, float]:
    """
    Returns:
        (sensible, latent) fixture internal gains in Btu/day
    """
    return 1227.0 + 409.0 * nbeds, 1245.0 + 415.0 * nbeds


def get_dist_waste_gpd(nbeds: int, has_uncond_bsmnt: bool, cfa: float, ncfl: float, dist_type: str,
                       std_pipe_length: Optional[float], recirc_branch_length: Optional[float],
                       has_low_flow_fixtures: bool) -> float:
    """Hot water wasted waiting for hot water at the fixture (gal/day)."""
    wd_eff = 0.1 if dist_type == DIST_RECIRCULATION else 1.0
    ref_w_gpd = 9.8 * nbeds ** 0.43
    o_frac = 0.25
    if dist_type == DIST_RECIRCULATION:
        p_ratio = recirc_branch_length / 10.0
    else:
        p_ratio = std_pipe_length / get_default_std_pipe_length(has_uncond_bsmnt, cfa, ncfl)
    mw_gpd = ref_w_gpd * (o_frac + (1.0 - o_frac) * p_ratio * wd_eff)
    return mw_gpd * get_fixtures_effectiveness(has_low_flow_fixtures)


def get_recirc_pump_annual_kwh(dist_type: str, recirc_control_type: Optional[str],
                               recirc_pump_power: Optional[float]) -> float:
    if dist_type != DIST_RECIRCULATION:
        return 0.0
    return _RECIRC_PUMP_FACTORS.get(recirc_control_type, 0.0) * (recirc_pump_power or 0.0)


def get_dwhr_factors(nbeds: int, dist_type: str, std_pipe_length: Optional[float],
                     recirc_branch_length: Optional[float], equal_flow: bool, facilities_connected: str,
                     has_low_flow_fixtures: bool) -> Tuple[float, float, float, float, float]:
    """
    Returns:
        (efficiency adjustment, impacted fraction, piping loss coefficient,
        location factor, fixture factor)
    """
    eff_adj = 1.082 if has_low_flow_fixtures else 1.0
    i_frac = 0.56 + 0.015 * nbeds - 0.0004 * nbeds ** 2
    p_length = recirc_branch_length if dist_type == DIST_RECIRCULATION else std_pipe_length
    plc = 1.0 - 0.0002 * p_length
    loc_f = 1.0 if equal_flow else 0.777
    fix_f = 1.0 if facilities_connected == "all" else 0.5
    return eff_adj, i_frac, plc, loc_f, fix_f


def calc_dwhr_inlet_adjustment(mains_f: float, dwhr_efficiency: float,
                               factors: Tuple[float, float, float, float, float]) -> float:
    """Rise (F) of the water heater inlet temperature from drain water heat recovery."""
    eff_adj, i_frac, plc, loc_f, fix_f = factors
    return i_frac * dwhr_efficiency * eff_adj * plc * loc_f * fix_f * (DWHR_INLET_TEMP_F - mains_f)


# =============================================================================
# Distribution inputs
# =============================================================================

@dataclass
class HotWaterSystemInputs:
    """Resolved distribution, fixture and DWHR inputs for one home."""
    dist_type: str = DIST_STANDARD
    pipe_r: float = 0.0
    std_pipe_length: Optional[float] = None
    recirc_loop_length: Optional[float] = None
    recirc_branch_length: Optional[float] = None
    recirc_control_type: Optional[str] = None
    recirc_pump_power: Optional[float] = None
    has_low_flow_fixtures: bool = False
    dwhr_present: bool = False
    dwhr_facilities_connected: Optional[str] = None
    dwhr_equal_flow: Optional[bool] = None
    dwhr_efficiency: Optional[float] = None

    @classmethod
    def from_hpxml(cls, hpxml, cfa: float, ncfl: float) -> "HotWaterSystemInputs":
        """
        Resolve defaults from an HPXML document.

        Low-flow fixtures count only when every shower head and faucet is low-flow.
        """
        inputs = cls()
        flags = {f.low_flow for f in hpxml.water_fixtures if f.water_fixture_type in ("shower head", "faucet")}
        inputs.has_low_flow_fixtures = flags == {True}

        dist = hpxml.hot_water_distribution
        if dist is None:
            inputs.std_pipe_length = get_default_std_pipe_length(hpxml.has_unconditioned_basement, cfa, ncfl)
            return inputs
        has_bsmnt = hpxml.has_unconditioned_basement
        inputs.dist_type = dist.system_type.lower()
        inputs.pipe_r = dist.pipe_r_value or 0.0
        if inputs.dist_type == DIST_STANDARD:
            inputs.std_pipe_length = dist.standard_piping_length
            if inputs.std_pipe_length is None:
                inputs.std_pipe_length = get_default_std_pipe_length(has_bsmnt, cfa, ncfl)
        elif inputs.dist_type == DIST_RECIRCULATION:
            inputs.recirc_loop_length = dist.recirculation_piping_length
            if inputs.recirc_loop_length is None:
                inputs.recirc_loop_length = get_default_recirc_loop_length(
                    get_default_std_pipe_length(has_bsmnt, cfa, ncfl))
            inputs.recirc_branch_length = dist.recirculation_branch_piping_length
            inputs.recirc_control_type = dist.recirculation_control_type
            inputs.recirc_pump_power = dist.recirculation_pump_power
        else:
            raise ValueError(f"Unexpected hot water distribution system type '{dist.system_type}'.")
        if dist.dwhr_efficiency is not None:
            inputs.dwhr_present = True
            inputs.dwhr_facilities_connected = dist.dwhr_facilities_connected
            inputs.dwhr_equal_flow = bool(dist.dwhr_equal_flow)
            inputs.dwhr_efficiency = dist.dwhr_efficiency
        return inputs

    def ec_adj(self, has_uncond_bsmnt: bool, cfa: float, ncfl: float) -> float:
        return get_dist_energy_consumption_adjustment(has_uncond_bsmnt, cfa, ncfl, self.dist_type,
                                                      self.recirc_control_type, self.pipe_r,
                                                      self.std_pipe_length, self.recirc_loop_length)


# =============================================================================
# Model objects
# =============================================================================

def _add_water_use(model: Model, name: str, gpd: float, schedule: MonthWeekdayWeekendSchedule,
                   schedule_name: str, temp_schedule: str, loop_fracs: Dict[str, float]) -> List[ModelObject]:
    """WaterUse:Equipment per served loop, with the peak flow that yields gpd over the schedule."""
    created = []
    if gpd <= 0:
        return created
    eflh = schedule.annual_equivalent_full_load_hrs()
    peak_gal_per_hr = gpd * 365.0 / eflh
    for loop_name, frac in loop_fracs.items():
        if frac <= 0:
            continue
        peak_flow = convert(peak_gal_per_hr * frac / 60.0, "gal/min", "m^3/s")
        obj_name = model.unique_name("WaterUse:Equipment", f"{name} {loop_name}")
        created.append(model.add(ModelObject("WaterUse:Equipment", obj_name, {
            "End-Use Subcategory": name,
            "Peak Flow Rate": round(peak_flow, 10),
            "Flow Rate Fraction Schedule Name": schedule_name,
            "Target Temperature Schedule Name": temp_schedule,
            "Plant Loop Name": loop_name,
        })))
    return created


def apply_hot_water(model: Model, inputs: HotWaterSystemInputs, nbeds: int, cfa: float, ncfl: float,
                    has_uncond_bsmnt: bool, appliances: Dict[str, ApplianceEnergy],
                    loop_fracs: Dict[str, float]) -> Dict[str, float]:
    """
    Add hot water draws and the recirculation pump.

    Args:
        appliances: Appliance energy from the loads module (washer/dishwasher gpd)
        loop_fracs: DHW plant loop name -> fraction of hot water load served

    Returns:
        Daily hot water use (gal/day) per end use
    """
    from .mains import annual_avg, get_mains_temperatures

    fixtures_gpd = get_fixtures_gpd(nbeds, inputs.has_low_flow_fixtures)
    waste_gpd = get_dist_waste_gpd(nbeds, has_uncond_bsmnt, cfa, ncfl, inputs.dist_type, inputs.std_pipe_length,
                                   inputs.recirc_branch_length, inputs.has_low_flow_fixtures)
    uses = {
        "showers and sinks": fixtures_gpd,
        "distribution waste": waste_gpd,
        "clothes washer": appliances["clothes washer"].gpd if "clothes washer" in appliances else 0.0,
        "dishwasher": appliances["dishwasher"].gpd if "dishwasher" in appliances else 0.0,
    }
    if not loop_fracs:
        logger.info("No water heater; skipping hot water draws")
        return {}

    schedule = MonthWeekdayWeekendSchedule("hot water schedule", HOT_WATER_WEEKDAY_SCH, HOT_WATER_WEEKEND_SCH,
                                           HOT_WATER_MONTHLY_SCH)
    schedule_obj = schedule.add_to(model)
    temp = ConstantSchedule("mixed water temperature", round(convert(MIXED_WATER_TEMP_F, "F", "C"), 4),
                            type_limits="Temperature").add_to(model)
    for name, gpd in uses.items():
        _add_water_use(model, name, gpd, schedule, schedule_obj.name, temp.name, loop_fracs)

    living = model.create_or_get_space(constants.SPACE_TYPE_LIVING)
    sens_btu, lat_btu = get_fixtures_gains(nbeds)
    total_w = convert((sens_btu + lat_btu) * 365.0 / 1000.0, "kBtu", "kWh")
    total_btu = sens_btu + lat_btu
    add_equipment(model, "hot water fixtures gains", living,
                  schedule.calc_design_level_from_annual_kwh(total_w), schedule_obj.name,
                  frac_sens=sens_btu / total_btu, frac_lat=lat_btu / total_btu, end_use="hot water fixtures")

    pump_kwh = get_recirc_pump_annual_kwh(inputs.dist_type, inputs.recirc_control_type, inputs.recirc_pump_power)
    if pump_kwh > 0:
        add_equipment(model, "recirculation pump", living, schedule.calc_design_level_from_annual_kwh(pump_kwh),
                      schedule_obj.name, frac_sens=0.0, frac_lat=0.0, end_use="recirc pump")
    model.properties["recirc_pump_kwh"] = pump_kwh

    if inputs.dwhr_present:
        mains = annual_avg(get_mains_temperatures(model))
        factors = get_dwhr_factors(nbeds, inputs.dist_type, inputs.std_pipe_length, inputs.recirc_branch_length,
                                   inputs.dwhr_equal_flow, inputs.dwhr_facilities_connected,
                                   inputs.has_low_flow_fixtures)
        adj = calc_dwhr_inlet_adjustment(mains, inputs.dwhr_efficiency, factors)
        model.properties["dwhr_inlet_temp_adjustment"] = adj
        logger.info(f"Drain water heat recovery raises the inlet temperature by {adj:.2f} F")

    total = math.fsum(uses.values())
    logger.info(f"Hot water use {total:.1f} gal/day across {len(loop_fracs)} loop(s)")
    return uses
