"""Natural ventilation through operable windows."""

from dataclasses import dataclass
from typing import Optional
import logging

from ..core import constants
from ..core.units import convert
from ..model import Model, ModelObject
from ..schedules import MonthWeekdayWeekendSchedule

logger = logging.getLogger(__name__)


@dataclass
class NaturalVentilation:
    htg_offset: float = 1.0  # F above heating setpoint
    clg_offset: float = 1.0  # F below cooling setpoint
    ovlp_offset: float = 1.0
    htg_season: bool = True
    clg_season: bool = True
    ovlp_season: bool = True
    num_weekdays: int = 5
    num_weekends: int = 2
    frac_windows_open: float = 0.33
    frac_window_area_openable: float = 0.2
    max_oa_hr: float = 0.0115
    max_oa_rh: float = 0.7

    @classmethod
    def disabled(cls) -> "NaturalVentilation":
        return cls(0.0, 0.0, 0.0, False, False, False, 0, 0, 0.0, 0.0)

    @classmethod
    def from_hpxml(cls, hpxml) -> "NaturalVentilation":
        return cls.disabled() if hpxml.disable_natural_ventilation else cls()

    @property
    def enabled(self) -> bool:
        return (self.num_weekdays + self.num_weekends) > 0 and self.frac_windows_open > 0

    def open_area_ft2(self, window_area_ft2: float) -> float:
        return window_area_ft2 * self.frac_windows_open * self.frac_window_area_openable


def _window_area_ft2(model: Model) -> float:
    space = model.get_space(constants.SPACE_TYPE_LIVING)
    if space is None:
        return 0.0
    area = 0.0
    for surface in model.surfaces_in(space):
        for sub in surface.sub_surfaces:
            if sub.sub_surface_type != "Door":
                area += convert(sub.area, "m^2", "ft^2")
    return area


def apply_natural_ventilation(model: Model, nat_vent: NaturalVentilation,
                              min_indoor_temp_f: float = 68.0) -> Optional[ModelObject]:
    """
    Wind and stack driven ventilation of the living space.

    Windows open on the configured share of weekdays and weekend days when
    it is comfortable indoors (above the heating setpoint plus offset).
    """
    if not nat_vent.enabled:
        logger.info("Natural ventilation disabled")
        return None
    open_area = nat_vent.open_area_ft2(_window_area_ft2(model))
    if open_area <= 0:
        return None
    weekday = [min(nat_vent.num_weekdays / 5.0, 1.0)] * 24
    weekend = [min(nat_vent.num_weekends / 2.0, 1.0)] * 24
    sch = MonthWeekdayWeekendSchedule("natural ventilation", weekday, weekend, [1.0] * 12,
                                      normalize_values=False).add_to(model)
    space = model.create_or_get_space(constants.SPACE_TYPE_LIVING)
    obj = model.add(ModelObject("ZoneVentilation:WindandStackOpenArea", "natural ventilation", {
        "Zone or Space Name": space.name,
        "Opening Area": round(convert(open_area, "ft^2", "m^2"), 4),
        "Opening Area Fraction Schedule Name": sch.name,
        "Opening Effectiveness": "autocalculate",
        "Effective Angle": 0.0,
        "Height Difference": 0.0,
        "Discharge Coefficient for Opening": "autocalculate",
        "Minimum Indoor Temperature": round(convert(min_indoor_temp_f + nat_vent.htg_offset, "F", "C"), 2),
        "Maximum Outdoor Temperature": round(convert(80.0 - nat_vent.clg_offset, "F", "C"), 2),
        "Delta Temperature": 0.0,
    }))
    logger.info(f"Natural ventilation: {open_area:.1f} ft^2 open area")
    return obj
