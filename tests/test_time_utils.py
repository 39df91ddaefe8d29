#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from upnext.time_utils import (
    RepeatUnit,
    advance,
    days_from_relative_label,
    format_month_year,
    format_short_date,
    month_key,
    relative_label,
    time_remaining,
)
from tests.utils import TODAY, days


@pytest.mark.parametrize(
    "start, unit, count, expected",
    [
        (datetime.date(2024, 1, 31), RepeatUnit.Months, 1, datetime.date(2024, 2, 29)),
        (datetime.date(2023, 1, 31), RepeatUnit.Months, 1, datetime.date(2023, 2, 28)),
        (datetime.date(2024, 2, 29), RepeatUnit.Years, 1, datetime.date(2025, 2, 28)),
        (datetime.date(2024, 2, 29), RepeatUnit.Years, 4, datetime.date(2028, 2, 29)),
        (datetime.date(2024, 12, 31), RepeatUnit.Days, 1, datetime.date(2025, 1, 1)),
        (datetime.date(2024, 6, 25), RepeatUnit.Weeks, 2, datetime.date(2024, 7, 9)),
        (datetime.date(2024, 8, 31), RepeatUnit.Months, 3, datetime.date(2024, 11, 30)),
    ],
)
def test_advance_follows_calendar(start, unit, count, expected):
    assert advance(start, unit, count) == expected


def test_advance_drops_time_of_day():
    assert advance(datetime.datetime(2024, 1, 31, 18, 30), RepeatUnit.Months) == (
        datetime.date(2024, 2, 29)
    )


@pytest.mark.parametrize(
    "offset, expected",
    [
        (0, "Today"),
        (1, "Tomorrow"),
        (-1, "Yesterday"),
        (2, "in 2 days"),
        (30, "in 30 days"),
        (-2, "2 days ago"),
        (-45, "45 days ago"),
    ],
)
def test_relative_label(offset: int, expected: str):
    assert relative_label(days(offset), today=TODAY) == expected


def test_relative_label_ignores_time_of_day():
    morning = datetime.datetime(2024, 6, 28, 0, 5)
    evening = datetime.datetime(2024, 6, 28, 23, 55)
    now = datetime.datetime(2024, 6, 25, 22, 0)
    assert relative_label(morning, today=now) == relative_label(evening, today=now)
    assert relative_label(evening, today=now) == "in 3 days"


def test_relative_label_event_in_progress():
    assert relative_label(days(-3), today=TODAY, end_date=days(2)) == "Today"
    assert relative_label(days(-3), today=TODAY, end_date=days(-1)) == "3 days ago"


@pytest.mark.parametrize("offset", range(-10, 11))
def test_days_from_relative_label_inverts_label(offset: int):
    assert days_from_relative_label(relative_label(days(offset), today=TODAY)) == offset


@pytest.mark.parametrize("label", ["", "Soon", "in a while"])
def test_days_from_unknown_label(label: str):
    assert days_from_relative_label(label) == 0


def test_time_remaining_single_day_today():
    assert time_remaining(TODAY, TODAY, today=TODAY) == "Tue, Jun 25 (1 day left)"


def test_time_remaining_future_single_day():
    assert time_remaining(days(5), days(5), today=TODAY) == "Sun, Jun 30 (1 day)"


def test_time_remaining_future_range():
    assert (
        time_remaining(days(2), days(4), today=TODAY)
        == "Thu, Jun 27 → Sat, Jun 29 (3 days)"
    )


def test_time_remaining_in_progress():
    assert (
        time_remaining(days(-1), days(2), today=TODAY)
        == "Mon, Jun 24 → Thu, Jun 27 (3 days left)"
    )


def test_time_remaining_last_day():
    assert (
        time_remaining(days(-2), TODAY, today=TODAY)
        == "Sun, Jun 23 → Tue, Jun 25 (1 day left)"
    )


def test_time_remaining_ended():
    assert (
        time_remaining(days(-5), days(-4), today=TODAY)
        == "Thu, Jun 20 → Fri, Jun 21 (2 days)"
    )


def test_time_remaining_without_end():
    assert time_remaining(days(1), today=TODAY) == "Tomorrow"
    assert time_remaining(days(1), today=TODAY, style="date") == "Wed, Jun 26"


def test_time_remaining_end_before_start():
    assert time_remaining(days(2), days(1), today=TODAY) == "Thu, Jun 27 (1 day)"


def test_time_remaining_does_not_mutate_inputs():
    start, end = days(1), days(3)
    time_remaining(start, end, today=TODAY)
    assert (start, end) == (days(1), days(3))


def test_formatting():
    assert format_short_date(datetime.date(2024, 7, 4)) == "Thu, Jul 4"
    assert format_month_year(datetime.date(2024, 7, 4)) == "July 2024"
    assert month_key(datetime.datetime(2024, 7, 4, 12)) == datetime.date(2024, 7, 1)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("Days", RepeatUnit.Days),
        ("weeks", RepeatUnit.Weeks),
        ("Month", RepeatUnit.Months),
        ("year", RepeatUnit.Years),
        (RepeatUnit.Days, RepeatUnit.Days),
        ("fortnights", None),
        (None, None),
    ],
)
def test_repeat_unit_parse(value, expected):
    assert RepeatUnit.parse(value) == expected
