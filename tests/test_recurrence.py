#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

import pytest

from upnext.models import Event
from upnext.recurrence import (
    DeletePolicy,
    calculate_repeat_until_date,
    describe_repeat,
    expand,
    next_repeat_date,
    select_for_deletion,
)
from upnext.time_utils import (
    RepeatOption,
    RepeatRule,
    RepeatUnit,
    TerminationCondition,
)
from tests.utils import TODAY, days


def _dates(events: list[Event]) -> list[datetime.date]:
    return [e.date for e in events]


def test_never_is_identity(basic_event: Event):
    instances = expand(basic_event, RepeatRule(frequency=RepeatOption.Never))
    assert instances == [basic_event]
    assert instances[0].series_id is None


@pytest.mark.parametrize("n", [1, 2, 7, 100, 250])
def test_after_occurrences(basic_event: Event, n: int):
    rule = RepeatRule(
        frequency=RepeatOption.Daily, termination=TerminationCondition.after(n)
    )
    instances = expand(basic_event, rule)
    assert len(instances) == min(n, 100)
    dates = _dates(instances)
    assert all(a < b for a, b in zip(dates, dates[1:]))
    assert len({e.series_id for e in instances}) == 1
    assert instances[0].series_id is not None


def test_series_ids_differ_between_expansions(basic_event: Event):
    rule = RepeatRule(
        frequency=RepeatOption.Weekly, termination=TerminationCondition.after(3)
    )
    first = expand(basic_event, rule)
    second = expand(basic_event, rule)
    assert first[0].series_id != second[0].series_id


def test_non_positive_count_yields_seed(basic_event: Event):
    rule = RepeatRule(
        frequency=RepeatOption.Daily, termination=TerminationCondition.after(0)
    )
    assert _dates(expand(basic_event, rule)) == [basic_event.date]


def test_indefinite_is_capped(basic_event: Event):
    rule = RepeatRule(frequency=RepeatOption.Daily)
    assert len(expand(basic_event, rule)) == 100
    assert len(expand(basic_event, rule, max_occurrences=10)) == 10


def test_on_date_includes_cutoff():
    seed = Event(title="Yoga", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Weekly,
        termination=TerminationCondition.on_date(datetime.date(2024, 7, 16)),
    )
    assert _dates(expand(seed, rule)) == [
        datetime.date(2024, 6, 25),
        datetime.date(2024, 7, 2),
        datetime.date(2024, 7, 9),
        datetime.date(2024, 7, 16),
    ]


def test_on_date_before_seed_yields_seed_only():
    seed = Event(title="Yoga", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Daily,
        termination=TerminationCondition.on_date(days(-3)),
    )
    instances = expand(seed, rule)
    assert _dates(instances) == [TODAY]
    assert instances[0].id == seed.id


def test_on_date_still_capped():
    seed = Event(title="Water plants", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Daily,
        termination=TerminationCondition.on_date(days(1000)),
    )
    assert len(expand(seed, rule)) == 100


def test_monthly_end_of_month():
    seed = Event(title="Rent", date=datetime.date(2024, 1, 31))
    rule = RepeatRule(
        frequency=RepeatOption.Monthly, termination=TerminationCondition.after(4)
    )
    assert _dates(expand(seed, rule)) == [
        datetime.date(2024, 1, 31),
        datetime.date(2024, 2, 29),
        datetime.date(2024, 3, 29),
        datetime.date(2024, 4, 29),
    ]


def test_yearly_leap_day():
    seed = Event(title="Leap birthday", date=datetime.date(2024, 2, 29))
    rule = RepeatRule(
        frequency=RepeatOption.Yearly, termination=TerminationCondition.after(3)
    )
    assert _dates(expand(seed, rule)) == [
        datetime.date(2024, 2, 29),
        datetime.date(2025, 2, 28),
        datetime.date(2026, 2, 28),
    ]


def test_custom_period():
    seed = Event(title="Sprint review", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Custom,
        interval=2,
        unit=RepeatUnit.Weeks,
        termination=TerminationCondition.after(3),
    )
    instances = expand(seed, rule)
    assert _dates(instances) == [TODAY, days(14), days(28)]
    assert all(e.custom_repeat_count == 2 for e in instances)
    assert all(e.repeat_unit == RepeatUnit.Weeks for e in instances)


@pytest.mark.parametrize("interval", [0, -3])
def test_custom_non_positive_interval_is_clamped(interval: int):
    seed = Event(title="Journal", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Custom,
        interval=interval,
        unit=RepeatUnit.Days,
        termination=TerminationCondition.after(3),
    )
    assert _dates(expand(seed, rule)) == [TODAY, days(1), days(2)]


def test_custom_without_unit_steps_in_days():
    seed = Event(title="Journal", date=TODAY)
    rule = RepeatRule(
        frequency=RepeatOption.Custom,
        interval=3,
        termination=TerminationCondition.after(2),
    )
    assert _dates(expand(seed, rule)) == [TODAY, days(3)]


def test_instances_copy_seed_fields(basic_event: Event):
    seed = basic_event.model_copy(update={"notifications_enabled": False})
    rule = RepeatRule(
        frequency=RepeatOption.Weekly, termination=TerminationCondition.after(4)
    )
    instances = expand(seed, rule)
    assert instances[0].id == seed.id
    assert len({e.id for e in instances}) == 4
    for instance in instances:
        assert instance.title == seed.title
        assert instance.color == seed.color
        assert instance.category == seed.category
        assert instance.notifications_enabled is False
        assert instance.repeat_option == RepeatOption.Weekly
        assert instance.repeat_until_count == 4


def test_instances_keep_span():
    seed = Event(title="Festival", date=TODAY, end_date=days(2))
    rule = RepeatRule(
        frequency=RepeatOption.Yearly, termination=TerminationCondition.after(2)
    )
    second = expand(seed, rule)[1]
    assert second.date == datetime.date(2025, 6, 25)
    assert second.end_date == datetime.date(2025, 6, 27)


def test_rule_derived_from_event(daily_event: Event):
    instances = expand(daily_event)
    assert len(instances) == 10
    assert _dates(instances)[-1] == days(9)


def test_rule_derived_from_repeat_until():
    seed = Event(
        title="Physio",
        date=TODAY,
        repeat_option=RepeatOption.Weekly,
        repeat_until=days(14),
    )
    assert _dates(expand(seed)) == [TODAY, days(7), days(14)]


def test_expand_does_not_mutate_seed(basic_event: Event):
    before = basic_event.model_copy(deep=True)
    expand(basic_event, RepeatRule(frequency=RepeatOption.Daily))
    assert basic_event == before


@pytest.fixture
def series(daily_event: Event) -> list[Event]:
    return expand(daily_event)


def test_delete_this_and_upcoming(series: list[Event]):
    removed = select_for_deletion(series, series[3], DeletePolicy.ThisAndUpcoming)
    remaining = [e for e in series if e.id not in removed]
    assert remaining == series[:3]
    assert {e.series_id for e in remaining} == {series[0].series_id}


def test_delete_this_event(series: list[Event]):
    assert select_for_deletion(series, series[3], DeletePolicy.ThisEvent) == [
        series[3].id
    ]


def test_delete_entire_series_only_matches_series_id(series: list[Event]):
    other = expand(
        series[0].model_copy(update={"id": "other-seed", "series_id": None})
    )
    everything = series + other
    removed = select_for_deletion(everything, series[5], DeletePolicy.EntireSeries)
    assert set(removed) == {e.id for e in series}


def test_delete_single_event_ignores_policy(basic_event: Event):
    assert select_for_deletion(
        [basic_event], basic_event, DeletePolicy.EntireSeries
    ) == [basic_event.id]


def test_next_repeat_date():
    event = Event(title="Rent", date=datetime.date(2024, 1, 31))
    assert next_repeat_date(event) is None
    event.repeat_option = RepeatOption.Monthly
    assert next_repeat_date(event) == datetime.date(2024, 2, 29)


@pytest.mark.parametrize(
    "frequency, count, unit, expected",
    [
        (RepeatOption.Never, 3, None, TODAY),
        (RepeatOption.Daily, 3, None, days(3)),
        (RepeatOption.Weekly, 2, None, days(14)),
        (RepeatOption.Monthly, 1, None, datetime.date(2024, 7, 25)),
        (RepeatOption.Yearly, 1, None, datetime.date(2025, 6, 25)),
        (RepeatOption.Custom, 2, "days", days(2)),
        (RepeatOption.Custom, 2, "fortnights", TODAY),
    ],
)
def test_calculate_repeat_until_date(frequency, count, unit, expected):
    assert calculate_repeat_until_date(frequency, TODAY, count, unit) == expected


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({}, ""),
        ({"repeat_option": RepeatOption.Weekly}, "Weekly"),
        (
            {
                "repeat_option": RepeatOption.Custom,
                "custom_repeat_count": 1,
                "repeat_unit": "days",
            },
            "1 Day",
        ),
        (
            {
                "repeat_option": RepeatOption.Custom,
                "custom_repeat_count": 3,
                "repeat_unit": "Weeks",
            },
            "3 Weeks",
        ),
        ({"repeat_option": RepeatOption.Custom}, ""),
    ],
)
def test_describe_repeat(fields, expected):
    assert describe_repeat(Event(title="Gym", date=TODAY, **fields)) == expected
