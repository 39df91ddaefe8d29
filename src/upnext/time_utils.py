#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""A light wrapper around the `datetime` library, containing the calendar
arithmetic used to repeat events and the helpers which turn dates into short,
human-readable labels relative to the current day."""

import datetime
import re
from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Literal, NamedTuple, Self

from dateutil.relativedelta import relativedelta

from upnext.constants import MONTH_YEAR_FORMAT, SHORT_DATE_FORMAT

if TYPE_CHECKING:
    from upnext.models import Event

DateLike = datetime.date | datetime.datetime

_IN_DAYS = re.compile(r"^in (\d+) days?$", re.IGNORECASE)
_DAYS_AGO = re.compile(r"^(\d+) days? ago$", re.IGNORECASE)


class RepeatOption(StrEnum):
    """How often an event repeats."""

    Never = "Never"
    Daily = "Daily"
    Weekly = "Weekly"
    Monthly = "Monthly"
    Yearly = "Yearly"
    Custom = "Custom"


class RepeatUnit(StrEnum):
    """The unit of a custom repetition period (eg every 2 *Weeks*)."""

    Days = "Days"
    Weeks = "Weeks"
    Months = "Months"
    Years = "Years"

    @classmethod
    def parse(cls, value: "str | RepeatUnit | None") -> "RepeatUnit | None":
        """Case-insensitive lookup which also accepts the singular form
        ("day", "Week"). Unknown units resolve to `None`."""
        if value is None or isinstance(value, RepeatUnit):
            return value
        normalised = value.strip().lower()
        if not normalised.endswith("s"):
            normalised += "s"
        for unit in cls:
            if unit.value.lower() == normalised:
                return unit
        return None

    @property
    def singular(self) -> str:
        return self.value[:-1]


class RepeatUntilOption(StrEnum):
    Indefinitely = "Indefinitely"
    After = "After"
    OnDate = "On Date"


class TerminationKind(StrEnum):
    Indefinite = auto()
    AfterOccurrences = auto()
    OnDate = auto()


class TerminationCondition(NamedTuple):
    """When a repeating series stops producing instances.

    Parameters
    ----------
    kind
        Whether the series repeats indefinitely, a fixed number of times or
        until a given date.
    count
        The total number of instances, including the first, for
        `AfterOccurrences`.
    until
        The last date on which an instance may occur, for `OnDate`.
    """

    kind: TerminationKind = TerminationKind.Indefinite
    count: int | None = None
    until: datetime.date | None = None

    @classmethod
    def indefinite(cls) -> Self:
        return cls(kind=TerminationKind.Indefinite)

    @classmethod
    def after(cls, count: int) -> Self:
        return cls(kind=TerminationKind.AfterOccurrences, count=count)

    @classmethod
    def on_date(cls, until: DateLike) -> Self:
        return cls(kind=TerminationKind.OnDate, until=as_date(until))


_FIXED_PERIODS = {
    RepeatOption.Daily: RepeatUnit.Days,
    RepeatOption.Weekly: RepeatUnit.Weeks,
    RepeatOption.Monthly: RepeatUnit.Months,
    RepeatOption.Yearly: RepeatUnit.Years,
}


@dataclass
class RepeatRule:
    """
    Represents the rule according to which an event repeats.

    Parameters
    ----------
    frequency
        How often the event occurs.
    interval
        Number of `unit` periods between instances. Only used for `Custom`
        rules, where a value of 2 with `Weeks` means once every two weeks.
    unit
        The period unit of a `Custom` rule.
    termination
        When the series stops.

    Notes
    -----
    The date of the first instance is inherited from the event the rule is
    applied to.
    """

    frequency: RepeatOption = RepeatOption.Never
    interval: int = 1
    unit: RepeatUnit | None = None
    termination: TerminationCondition = field(
        default_factory=TerminationCondition.indefinite
    )

    @property
    def repeats(self) -> bool:
        return self.frequency != RepeatOption.Never

    def period(self) -> tuple[RepeatUnit, int] | None:
        """The `(unit, count)` step between two consecutive instances, `None`
        for events that do not repeat. Non-positive intervals are clamped to 1
        and custom rules missing a unit step in days."""
        if self.frequency == RepeatOption.Never:
            return None
        if self.frequency == RepeatOption.Custom:
            unit = RepeatUnit.parse(self.unit) or RepeatUnit.Days
            return unit, max(self.interval or 1, 1)
        return _FIXED_PERIODS[self.frequency], 1

    @classmethod
    def from_event(cls, event: "Event") -> Self:
        """Derive the rule from the repeat fields stored on an event.

        A stored occurrence count takes precedence over a stored end date; with
        neither the series repeats indefinitely.
        """
        if event.repeat_until_count is not None:
            termination = TerminationCondition.after(event.repeat_until_count)
        elif event.repeat_until is not None:
            termination = TerminationCondition.on_date(event.repeat_until)
        else:
            termination = TerminationCondition.indefinite()
        return cls(
            frequency=event.repeat_option,
            interval=event.custom_repeat_count or 1,
            unit=RepeatUnit.parse(event.repeat_unit),
            termination=termination,
        )


def now_() -> datetime.datetime:
    """Return the current date and time on the user's device."""
    return datetime.datetime.now()


def as_date(value: DateLike) -> datetime.date:
    """Drop the time of day, if any."""
    if isinstance(value, datetime.datetime):
        return value.date()
    return value


def start_of_day(value: DateLike | None = None) -> datetime.date:
    """The calendar day `value` falls on, defaulting to today."""
    if value is None:
        value = now_()
    return as_date(value)


def days_between(start: DateLike, end: DateLike) -> int:
    """Number of calendar days from `start` to `end`, ignoring the time of day."""
    return (as_date(end) - as_date(start)).days


def advance(date: DateLike, unit: RepeatUnit, count: int = 1) -> datetime.date:
    """Move `date` forward by `count` units.

    Month and year steps land on the last valid day of the target month when
    the day does not exist there (eg Jan 31 + 1 month is the last day of
    February and Feb 29 + 1 year is Feb 28).
    """
    date = as_date(date)
    if unit == RepeatUnit.Days:
        return date + relativedelta(days=count)
    elif unit == RepeatUnit.Weeks:
        return date + relativedelta(weeks=count)
    elif unit == RepeatUnit.Months:
        return date + relativedelta(months=count)
    elif unit == RepeatUnit.Years:
        return date + relativedelta(years=count)
    else:
        raise ValueError(f"Unsupported repeat unit: {unit}")


def add_months(date: DateLike, months: int) -> datetime.date:
    return advance(date, RepeatUnit.Months, months)


def month_key(date: DateLike) -> datetime.date:
    """The first day of the month `date` falls in."""
    return as_date(date).replace(day=1)


def format_month_year(date: DateLike) -> str:
    """Eg "June 2024"."""
    return as_date(date).strftime(MONTH_YEAR_FORMAT)


def format_short_date(date: DateLike) -> str:
    """Eg "Tue, Jun 25". The day of month is not zero padded."""
    date = as_date(date)
    return date.strftime(SHORT_DATE_FORMAT).format(day=date.day)


def _plural(count: int, noun: str = "day") -> str:
    return noun if count == 1 else f"{noun}s"


def relative_label(
    date: DateLike,
    today: DateLike | None = None,
    end_date: DateLike | None = None,
) -> str:
    """A short label describing `date` relative to `today`.

    Returns "Today", "Tomorrow", "Yesterday", "in N days" or "N days ago". Only
    calendar days are compared, so two times on the same day get the same
    label. If `end_date` is given and the span it closes covers `today`, the
    label is "Today".
    """
    today = start_of_day(today)
    date = as_date(date)
    if end_date is not None and date <= today <= as_date(end_date):
        return "Today"
    day_count = days_between(today, date)
    if day_count == 0:
        return "Today"
    elif day_count == 1:
        return "Tomorrow"
    elif day_count == -1:
        return "Yesterday"
    elif day_count > 1:
        return f"in {day_count} days"
    return f"{abs(day_count)} days ago"


def days_from_relative_label(label: str) -> int:
    """Inverse of `relative_label`: the signed day offset a label stands for.

    Labels which were not produced by `relative_label` map to 0.
    """
    label = label.strip()
    lowered = label.lower()
    if lowered == "today":
        return 0
    if lowered == "tomorrow":
        return 1
    if lowered == "yesterday":
        return -1
    if match := _IN_DAYS.match(label):
        return int(match.group(1))
    if match := _DAYS_AGO.match(label):
        return -int(match.group(1))
    return 0


def time_remaining(
    start: DateLike,
    end: DateLike | None = None,
    today: DateLike | None = None,
    style: Literal["relative", "date"] = "relative",
) -> str:
    """Describe how long an event lasts or how long it has left.

    Parameters
    ----------
    start
        The first day of the event.
    end
        The last day of the event. For single-date events (`None`) the
        relative label is returned, or the short formatted date when `style`
        is "date".
    today
        Reference day, defaults to the current day.

    Notes
    -----
    1. Events starting after `today` are described by their span, eg
    "Tue, Jun 25 → Thu, Jun 27 (3 days)".
    2. Events in progress are described by the days left including the last
    one, eg "Tue, Jun 25 (1 day left)".
    3. Events which are over are described by their span, as in (1).
    4. An `end` before `start` is treated as `start`.
    """
    if end is None:
        if style == "date":
            return format_short_date(start)
        return relative_label(start, today=today)

    today = start_of_day(today)
    start_day = as_date(start)
    end_day = max(as_date(end), start_day)
    if start_day == end_day:
        dates = format_short_date(start_day)
    else:
        dates = f"{format_short_date(start_day)} → {format_short_date(end_day)}"

    days_left = days_between(today, end_day) + 1
    if start_day > today or days_left < 1:
        duration = days_between(start_day, end_day) + 1
        return f"{dates} ({duration} {_plural(duration)})"
    return f"{dates} ({days_left} {_plural(days_left)} left)"
