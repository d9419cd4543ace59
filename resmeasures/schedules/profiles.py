"""
Schedules for residential loads.

Loads are described by a 24-hour weekday profile, a 24-hour weekend profile
and 12 monthly multipliers. The combined annual schedule is normalized so
its peak is 1.0; an annual energy then maps to a peak design level through
the schedule's equivalent full-load hours.

Usage:
    sch = MonthWeekdayWeekendSchedule.from_strings(
        "misc plug loads", weekday_sch, weekend_sch, monthly_sch)
    design_w = sch.calc_design_level_from_annual_kwh(2531.0)
    sch.add_to(model)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union
import logging

import numpy as np
import pandas as pd

from ..model import Model
from ..model.objects import format_idf_object

logger = logging.getLogger(__name__)

MONTH_END_DAYS = [31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31]
SCHEDULE_YEAR = 2007  # non-leap, starts on a Monday


def parse_schedule_values(text: Union[str, Sequence[float]], expected: int, label: str) -> List[float]:
    """
    Parse a comma-separated schedule string.

    Raises:
        ValueError: If it does not hold exactly `expected` numbers
    """
    message = f"A comma-separated string of {expected} numbers must be entered for the {label} schedule."
    if isinstance(text, str):
        try:
            values = [float(v) for v in text.split(",") if v.strip() != ""]
        except ValueError:
            raise ValueError(message) from None
    else:
        values = [float(v) for v in text]
    if len(values) != expected:
        raise ValueError(message)
    return values


@dataclass
class HourlyProfile:
    """24-hour profile (one value per hour, 0-23)."""
    values: List[float]

    def __post_init__(self):
        if len(self.values) != 24:
            raise ValueError(f"HourlyProfile requires 24 values, got {len(self.values)}")
        if any(v < 0 for v in self.values):
            raise ValueError("HourlyProfile values must be greater than or equal to 0.")
        self.values = [float(v) for v in self.values]

    def to_idf_list(self) -> str:
        return ",\n    ".join([f"{v:.5f}" for v in self.values])

    def average(self) -> float:
        return sum(self.values) / 24

    def peak_hour(self) -> int:
        return self.values.index(max(self.values))

    def scaled(self, factor: float) -> "HourlyProfile":
        return HourlyProfile([v * factor for v in self.values])


@dataclass
class CompactSchedule:
    """Schedule:Compact with its field list (Through/For/Until entries)."""
    name: str
    type_limits: str
    entries: List[str] = field(default_factory=list)
    obj_type: str = "Schedule:Compact"

    def to_idf(self) -> str:
        fields = [("Name", self.name), ("Schedule Type Limits Name", self.type_limits)]
        fields += [(f"Field {i}", e) for i, e in enumerate(self.entries, 1)]
        return format_idf_object(self.obj_type, fields)


@dataclass
class ConstantSchedule:
    name: str
    value: float
    type_limits: str = "Fraction"
    obj_type: str = "Schedule:Constant"

    def to_idf(self) -> str:
        return format_idf_object(self.obj_type, [
            ("Name", self.name),
            ("Schedule Type Limits Name", self.type_limits),
            ("Hourly Value", self.value),
        ])

    def add_to(self, model: Model) -> "ConstantSchedule":
        existing = model.get(self.obj_type, self.name)
        return existing if existing is not None else model.add(self)


def _until_entries(values: Sequence[float]) -> List[str]:
    """Until entries for 24 hourly values, merging equal consecutive hours."""
    entries = []
    for hour, value in enumerate(values):
        if hour < 23 and values[hour + 1] == value:
            continue
        entries.append(f"Until: {hour + 1:02d}:00")
        entries.append(f"{value:.6g}")
    return entries


class MonthWeekdayWeekendSchedule:
    """
    Annual schedule from weekday/weekend hourly profiles and monthly multipliers.

    Args:
        name: Schedule name
        weekday: 24 hourly values
        weekend: 24 hourly values
        monthly: 12 monthly multipliers
        normalize_values: Scale so the hourly and monthly peaks are 1.0
    """

    def __init__(self, name: str, weekday: Sequence[float], weekend: Sequence[float],
                 monthly: Sequence[float], normalize_values: bool = True, type_limits: str = "Fraction"):
        self.name = name
        self.type_limits = type_limits
        weekday = parse_schedule_values(weekday, 24, "weekday")
        weekend = parse_schedule_values(weekend, 24, "weekend")
        monthly = parse_schedule_values(monthly, 12, "monthly")
        if normalize_values:
            peak = max(weekday + weekend)
            if peak > 0:
                weekday = [v / peak for v in weekday]
                weekend = [v / peak for v in weekend]
            peak_month = max(monthly)
            if peak_month > 0:
                monthly = [v / peak_month for v in monthly]
        self.weekday = HourlyProfile(weekday)
        self.weekend = HourlyProfile(weekend)
        self.monthly = monthly

    @classmethod
    def from_strings(cls, name: str, weekday_sch: str, weekend_sch: str, monthly_sch: str,
                     **kwargs) -> "MonthWeekdayWeekendSchedule":
        return cls(name, weekday_sch, weekend_sch, monthly_sch, **kwargs)

    def hourly_values(self) -> np.ndarray:
        """8760 hourly values for a non-leap year."""
        index = pd.date_range(f"{SCHEDULE_YEAR}-01-01", periods=8760, freq="h")
        weekday = np.asarray(self.weekday.values)
        weekend = np.asarray(self.weekend.values)
        is_weekend = index.dayofweek >= 5
        hourly = np.where(is_weekend, weekend[index.hour], weekday[index.hour])
        return hourly * np.asarray(self.monthly)[index.month - 1]

    def annual_equivalent_full_load_hrs(self) -> float:
        return float(self.hourly_values().sum())

    def calc_design_level_from_annual_kwh(self, annual_kwh: float) -> float:
        """Peak power (W) that yields annual_kwh over this schedule."""
        hrs = self.annual_equivalent_full_load_hrs()
        if hrs <= 0:
            return 0.0
        return annual_kwh * 1000.0 / hrs

    def calc_design_level_from_daily_kwh(self, daily_kwh: float) -> float:
        return self.calc_design_level_from_annual_kwh(daily_kwh * 365.0)

    def calc_design_level_from_annual_therm(self, annual_therm: float) -> float:
        """Peak power (W) that yields annual_therm over this schedule."""
        return self.calc_design_level_from_annual_kwh(annual_therm * 29.307107017222222)

    def to_compact(self) -> CompactSchedule:
        entries = []
        for month, mult in enumerate(self.monthly, 1):
            entries.append(f"Through: {month:02d}/{MONTH_END_DAYS[month - 1]:02d}")
            entries.append("For: Weekdays SummerDesignDay")
            entries += _until_entries([v * mult for v in self.weekday.values])
            entries.append("For: AllOtherDays")
            entries += _until_entries([v * mult for v in self.weekend.values])
        return CompactSchedule(self.name, self.type_limits, entries)

    def add_to(self, model: Model) -> CompactSchedule:
        schedule = self.to_compact()
        schedule.name = model.unique_name(schedule.obj_type, schedule.name)
        self.name = schedule.name
        return model.add(schedule)


class HourlyByMonthSchedule:
    """
    Schedule with 24 hourly values for each month, e.g. thermostat setpoints.

    Args:
        weekday: 12 x 24 values
        weekend: 12 x 24 values (defaults to weekday)
    """

    def __init__(self, name: str, weekday: Sequence[Sequence[float]],
                 weekend: Optional[Sequence[Sequence[float]]] = None, type_limits: str = "Temperature"):
        weekend = weekday if weekend is None else weekend
        for label, values in (("weekday", weekday), ("weekend", weekend)):
            if len(values) != 12 or any(len(m) != 24 for m in values):
                raise ValueError(f"HourlyByMonthSchedule {label} values must be 12 x 24.")
        self.name = name
        self.type_limits = type_limits
        self.weekday = [list(map(float, m)) for m in weekday]
        self.weekend = [list(map(float, m)) for m in weekend]

    def to_compact(self) -> CompactSchedule:
        entries = []
        for month in range(12):
            entries.append(f"Through: {month + 1:02d}/{MONTH_END_DAYS[month]:02d}")
            if self.weekday[month] == self.weekend[month]:
                entries.append("For: AllDays")
                entries += _until_entries(self.weekday[month])
            else:
                entries.append("For: Weekdays SummerDesignDay WinterDesignDay")
                entries += _until_entries(self.weekday[month])
                entries.append("For: AllOtherDays")
                entries += _until_entries(self.weekend[month])
        return CompactSchedule(self.name, self.type_limits, entries)

    def add_to(self, model: Model) -> CompactSchedule:
        schedule = self.to_compact()
        schedule.name = model.unique_name(schedule.obj_type, schedule.name)
        self.name = schedule.name
        return model.add(schedule)
