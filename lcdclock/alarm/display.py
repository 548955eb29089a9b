"""Formatting helpers shared by the clock screens."""

from typing import Sequence

from lcdclock.alarm.models import WEEKDAY_NAMES, parse_time_of_day
from lcdclock.alarm.resolver import MINUTES_PER_DAY

SOUND_OPTIONS = ("WAKE UP", "BEEP", "CHIME", "DIGITAL")
SNOOZE_OPTIONS = ("EVERY 5 MIN", "EVERY 10 MIN", "EVERY 15 MIN", "NO")
REPEAT_OPTIONS = ("DAILY", "WEEKDAYS", "WEEKENDS", "NO")


def format_alarm_time(time_str: str) -> str:
    """Render ``"HH:MM"`` on a 12-hour clock, e.g. ``"13:05"`` -> ``"1:05 PM"``."""
    hour, minute = parse_time_of_day(time_str)
    period = "PM" if hour >= 12 else "AM"
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def format_days(days: Sequence[bool]) -> str:
    """First letter of each eligible weekday, Monday first: ``"M W F"``."""
    return " ".join(name[0] for name, on in zip(WEEKDAY_NAMES, days) if on)


def format_countdown(minutes: int | None) -> str:
    if minutes is None:
        return "NO ALARMS SET"
    return f"NEXT ALARM IN {minutes // 60}h {minutes % 60}m"


def countdown_progress(minutes: int | None) -> float:
    """Share of a 24 hour span still to wait, as a percentage in [0, 100]."""
    if minutes is None:
        return 0.0
    return min(100.0, max(0.0, minutes / MINUTES_PER_DAY * 100))


def cycle_option(options: Sequence[str], current: str) -> str:
    """Next option after ``current``, wrapping around. Unknown values restart at the first."""
    try:
        index = list(options).index(current)
    except ValueError:
        return options[0]
    return options[(index + 1) % len(options)]
