"""
Mains water temperature (Burch & Christensen).
"""

import math
from typing import List, Tuple
import logging

import numpy as np

from ..model import Model, ModelObject

logger = logging.getLogger(__name__)

_MONTH_DAYS = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]


def calc_mains_temperatures(avg_oat: float, max_diff_monthly_avg_oat: float, latitude: float,
                            num_days: int = 365) -> Tuple[float, List[float], List[float]]:
    """
    Daily and monthly mains temperatures.

    Args:
        avg_oat: Annual average outdoor dry-bulb (F)
        max_diff_monthly_avg_oat: Warmest minus coldest monthly average (F)
        latitude: Site latitude; the southern hemisphere shifts the phase

    Returns:
        (annual average F, 12 monthly averages F, daily values F)
    """
    ratio = 0.4 + 0.01 * (avg_oat - 44.0)
    lag = 35.0 - (avg_oat - 44.0)
    sign = -1.0 if latitude >= 0 else 1.0
    days = np.arange(1, num_days + 1)
    daily = (avg_oat + 6.0) + ratio * max_diff_monthly_avg_oat / 2.0 * \
        np.sin(np.radians(0.986 * (days - 15 - lag) + sign * 90.0))

    month_days = list(_MONTH_DAYS)
    if num_days == 366:
        month_days[1] = 29
    monthly = []
    start = 0
    for n in month_days:
        monthly.append(float(daily[start:start + n].mean()))
        start += n
    return float(daily.mean()), monthly, [float(d) for d in daily]


def set_mains_temperature(model: Model, avg_oat: float, max_diff_monthly_avg_oat: float,
                          latitude: float) -> List[float]:
    """
    Record the mains temperature inputs on the model.

    Returns:
        Monthly mains temperatures (F)
    """
    _, monthly, _ = calc_mains_temperatures(avg_oat, max_diff_monthly_avg_oat, latitude)
    existing = model.get("Site:WaterMainsTemperature", "mains temperature")
    if existing is not None:
        model.remove(existing)
    model.add(ModelObject("Site:WaterMainsTemperature", "mains temperature", {
        "Calculation Method": "Correlation",
        "Temperature Schedule Name": None,
        "Annual Average Outdoor Air Temperature": round((avg_oat - 32.0) / 1.8, 4),
        "Maximum Difference In Monthly Average Outdoor Air Temperatures": round(max_diff_monthly_avg_oat / 1.8, 4),
    }))
    model.properties["mains_temperatures"] = monthly
    model.properties["mains_inputs"] = (avg_oat, max_diff_monthly_avg_oat, latitude)
    logger.debug(f"Mains temperatures {min(monthly):.1f}-{max(monthly):.1f} F")
    return monthly


def get_mains_temperatures(model: Model) -> List[float]:
    """
    Raises:
        ValueError: If the mains temperature has not been set
    """
    monthly = model.properties.get("mains_temperatures")
    if not monthly:
        raise ValueError("Mains water temperature has not been set.")
    return monthly


def annual_avg(monthly: List[float]) -> float:
    return math.fsum(m * d for m, d in zip(monthly, _MONTH_DAYS)) / 365.0
