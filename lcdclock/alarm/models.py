"""Alarm records (Pydantic models with camelCase JSON aliases)."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, field_validator

WEEKDAY_NAMES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")

DEFAULT_SOUND = "WAKE UP"
DEFAULT_SNOOZE = "EVERY 10 MIN"
DEFAULT_REPEAT = "NO"

_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_time_of_day(value: str) -> tuple[int, int]:
    """Parse ``"HH:MM"`` into ``(hour, minute)``.

    Raises:
        ValueError: If the string is not a valid 24-hour time.
    """
    match = _TIME_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time of day: {value!r}. Use HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        raise ValueError(f"Time of day out of range: {value!r}")
    return hour, minute


def format_time_of_day(hour: int, minute: int) -> str:
    """Build the canonical ``"HH:MM"`` string."""
    return f"{hour:02d}:{minute:02d}"


def _canonical_time(value: str) -> str:
    return format_time_of_day(*parse_time_of_day(value))


def _check_days(value: list[bool]) -> list[bool]:
    if len(value) != 7:
        raise ValueError(f"days must have exactly 7 entries (Monday first), got {len(value)}")
    return value


class AlarmDraft(BaseModel):
    """User input for a new or edited alarm, before an id is assigned."""

    time: str
    days: list[bool] = Field(default_factory=lambda: [False] * 7)
    sound: str = DEFAULT_SOUND
    snooze_time: str = Field(DEFAULT_SNOOZE, alias="snoozeTime")
    repeat_option: str = Field(DEFAULT_REPEAT, alias="repeatOption")
    label: str = ""

    model_config = {"populate_by_name": True}

    @field_validator("time")
    @classmethod
    def normalize_time(cls, value: str) -> str:
        return _canonical_time(value)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[bool]) -> list[bool]:
        return _check_days(value)


class Alarm(BaseModel):
    """A weekly-recurring alarm.

    Replaced, never mutated: toggles and edits produce a new instance via
    ``model_copy``.
    """

    id: str
    time: str
    days: list[bool]
    sound: str = DEFAULT_SOUND
    snooze_time: str = Field(DEFAULT_SNOOZE, alias="snoozeTime")
    repeat_option: str = Field(DEFAULT_REPEAT, alias="repeatOption")
    label: str = ""
    is_active: bool = Field(True, alias="isActive")
    created_at: int = Field(0, alias="createdAt")  # epoch millis, display ordering only

    model_config = {"populate_by_name": True}

    @field_validator("time")
    @classmethod
    def normalize_time(cls, value: str) -> str:
        return _canonical_time(value)

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: list[bool]) -> list[bool]:
        return _check_days(value)

    @property
    def hour(self) -> int:
        return parse_time_of_day(self.time)[0]

    @property
    def minute(self) -> int:
        return parse_time_of_day(self.time)[1]

    @property
    def repeats(self) -> bool:
        """Whether the notification re-arms after firing."""
        return self.repeat_option != "NO"

    @property
    def has_eligible_day(self) -> bool:
        return any(self.days)

    def to_dict(self) -> dict:
        """Convert alarm to its stored JSON shape."""
        return self.model_dump(by_alias=True)

    def __str__(self) -> str:
        days = ",".join(name for name, on in zip(WEEKDAY_NAMES, self.days) if on) or "-"
        state = "on" if self.is_active else "off"
        return f"[{self.id}] {self.time} {days} ({state})"


class AlarmSettings(BaseModel):
    """Last values used in the alarm editor, restored when it reopens."""

    hour: str = Field(default_factory=lambda: f"{datetime.now().hour:02d}")
    minute: str = Field(default_factory=lambda: f"{datetime.now().minute:02d}")
    sound: str = DEFAULT_SOUND
    snooze: str = DEFAULT_SNOOZE
    repeat: str = DEFAULT_REPEAT

    @property
    def time(self) -> str:
        return f"{self.hour}:{self.minute}"
