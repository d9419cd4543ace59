"""Load and thermostat schedules."""

from .profiles import (
    HourlyProfile,
    MonthWeekdayWeekendSchedule,
    HourlyByMonthSchedule,
    CompactSchedule,
    ConstantSchedule,
    parse_schedule_values,
)

__all__ = [
    "HourlyProfile",
    "MonthWeekdayWeekendSchedule",
    "HourlyByMonthSchedule",
    "CompactSchedule",
    "ConstantSchedule",
    "parse_schedule_values",
]
