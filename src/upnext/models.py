#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Events, categories and the colours used to tell them apart."""

import datetime
import uuid
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from upnext.time_utils import (
    RepeatOption,
    RepeatRule,
    RepeatUnit,
    RepeatUntilOption,
    TerminationCondition,
    as_date,
    days_between,
    start_of_day,
)

EventId = str
SeriesId = str

DATE_FIELDS = ("date", "end_date", "repeat_until")
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def _new_id() -> str:
    return str(uuid.uuid4())


def _truncate_time(value: Any) -> Any:
    """Dates are stored with day granularity, but blobs written by the apps
    carry full ISO-8601 timestamps, in UTC. Those are read as the day they fall
    on for the user."""
    if isinstance(value, str):
        value = datetime.datetime.fromisoformat(value)
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def _to_timestamp(value: datetime.date | None) -> str | None:
    """The UTC ISO-8601 timestamp of the user's midnight on `value`, the
    format the apps decode."""
    if value is None:
        return None
    midnight = datetime.datetime.combine(value, datetime.time()).astimezone()
    return midnight.astimezone(datetime.timezone.utc).strftime(TIMESTAMP_FORMAT)


class Color(BaseModel):
    """An RGBA colour with components in [0, 1]."""

    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    opacity: float = 1.0

    @field_validator("red", "green", "blue", "opacity")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return min(max(value, 0.0), 1.0)

    @classmethod
    def from_hex(cls, hex_: str) -> Self:
        """Parse a "#RRGGBB" or "#RRGGBBAA" string."""
        digits = hex_.removeprefix("#")
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex colour: {hex_}")
        components = [int(digits[i : i + 2], 16) / 255 for i in range(0, len(digits), 2)]
        if len(components) == 3:
            components.append(1.0)
        red, green, blue, opacity = components
        return cls(red=red, green=green, blue=blue, opacity=opacity)

    def to_hex(self, include_alpha: bool = False) -> str:
        components = [self.red, self.green, self.blue]
        if include_alpha:
            components.append(self.opacity)
        return "#" + "".join(f"{round(c * 255):02X}" for c in components)


class Event(BaseModel):
    """An event the user is looking forward to.

    Parameters
    ----------
    id
        The unique ID of the event, generated on creation.
    date
        The day the event starts on.
    end_date
        For events lasting several days, the last day of the event.
    category
        The *name* of the category the event belongs to. Renaming or deleting
        the category does not invalidate the event.
    repeat_option
        How often the event repeats.
    repeat_until
        The last date an instance of a repeating event may occur on.
    repeat_until_count
        The number of instances a repeating series is made of.
    series_id
        Shared by all the instances generated from the same repeating event.
        Not set for events that do not repeat.
    custom_repeat_count
        Number of `repeat_unit` periods between instances of a custom
        repeating event.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: EventId = Field(default_factory=_new_id)
    title: str
    date: datetime.date
    end_date: datetime.date | None = Field(None, alias="endDate")
    color: Color = Field(default_factory=Color)
    category: str | None = None
    notifications_enabled: bool = Field(True, alias="notificationsEnabled")
    repeat_option: RepeatOption = Field(RepeatOption.Never, alias="repeatOption")
    repeat_until: datetime.date | None = Field(None, alias="repeatUntil")
    repeat_until_count: int | None = Field(None, alias="repeatUntilCount")
    series_id: SeriesId | None = Field(None, alias="seriesID")
    custom_repeat_count: int | None = Field(None, alias="customRepeatCount")
    repeat_unit: RepeatUnit | None = Field(None, alias="repeatUnit")

    @field_validator(*DATE_FIELDS, mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        return _truncate_time(value)

    @field_serializer(*DATE_FIELDS, when_used="json")
    def _serialize_date(self, value: datetime.date | None) -> str | None:
        return _to_timestamp(value)

    @field_validator("repeat_unit", mode="before")
    @classmethod
    def _parse_unit(cls, value: Any) -> RepeatUnit | None:
        if value is None:
            return None
        return RepeatUnit.parse(str(value))

    @model_validator(mode="after")
    def _check_consistency(self) -> Self:
        if self.end_date is not None and self.end_date < self.date:
            self.end_date = self.date
        if self.repeat_option == RepeatOption.Never:
            self.series_id = None
        return self

    @property
    def last_day(self) -> datetime.date:
        """The day the event ends on."""
        return self.end_date or self.date

    @property
    def span_days(self) -> int:
        """Number of days between the first and last day of the event."""
        return days_between(self.date, self.last_day)

    @property
    def is_recurring(self) -> bool:
        return self.series_id is not None

    def covers(self, day: datetime.date | datetime.datetime) -> bool:
        """Whether the event is in progress on `day`."""
        return self.date <= as_date(day) <= self.last_day

    def __str__(self) -> str:
        display = f"'{self.title}' on {self.date.isoformat()}"
        if self.end_date is not None and self.end_date != self.date:
            display = f"'{self.title}' from {self.date.isoformat()} to {self.end_date.isoformat()}"
        if self.category:
            display += f" ({self.category})"
        return display


class Category(BaseModel):
    """A user-defined group of events.

    Parameters
    ----------
    name
        Unique among the user's categories. Events reference categories
        by name.
    color
        Colour given to the events created in this category.
    repeat_option
        Default repetition applied to the events created in this category.
        The remaining `repeat_*` fields further specify it.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    color: Color = Field(default_factory=Color)
    repeat_option: RepeatOption = Field(RepeatOption.Never, alias="repeatOption")
    custom_repeat_count: int = Field(1, alias="customRepeatCount")
    repeat_unit: RepeatUnit = Field(RepeatUnit.Days, alias="repeatUnit")
    repeat_until_option: RepeatUntilOption = Field(
        RepeatUntilOption.Indefinitely, alias="repeatUntilOption"
    )
    repeat_until_count: int = Field(1, alias="repeatUntilCount")
    repeat_until: datetime.date = Field(
        default_factory=lambda: start_of_day(), alias="repeatUntil"
    )
    show_repeat_options: bool = Field(False, alias="showRepeatOptions")

    @field_validator("repeat_until", mode="before")
    @classmethod
    def _date_only(cls, value: Any) -> Any:
        if value is None:
            return start_of_day()
        return _truncate_time(value)

    @field_serializer("repeat_until", when_used="json")
    def _serialize_date(self, value: datetime.date) -> str:
        return _to_timestamp(value)

    @model_validator(mode="after")
    def _sync_repeat_options(self) -> Self:
        self.show_repeat_options = self.repeat_option != RepeatOption.Never
        return self

    @field_validator("repeat_unit", mode="before")
    @classmethod
    def _parse_unit(cls, value: Any) -> RepeatUnit:
        return RepeatUnit.parse(str(value)) or RepeatUnit.Days

    def default_rule(self) -> RepeatRule:
        """The repeat rule new events in this category start with."""
        match self.repeat_until_option:
            case RepeatUntilOption.After:
                termination = TerminationCondition.after(self.repeat_until_count)
            case RepeatUntilOption.OnDate:
                termination = TerminationCondition.on_date(self.repeat_until)
            case _:
                termination = TerminationCondition.indefinite()
        return RepeatRule(
            frequency=self.repeat_option,
            interval=self.custom_repeat_count,
            unit=self.repeat_unit,
            termination=termination,
        )


def default_categories() -> list[Category]:
    """The categories a new user starts with."""
    return [
        Category(name="Work", color=Color(red=0.0, green=0.478, blue=1.0)),
        Category(name="Social", color=Color(red=0.204, green=0.78, blue=0.349)),
        Category(name="Birthdays", color=Color(red=1.0, green=0.231, blue=0.188)),
        Category(name="Movies", color=Color(red=0.686, green=0.322, blue=0.871)),
    ]
