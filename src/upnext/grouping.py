#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Read-side helpers which filter, sort and group events for display."""

import datetime
from collections.abc import Iterable

from upnext.constants import ALL_CATEGORIES, DEFAULT_MONTHS_TO_LOAD
from upnext.models import Event
from upnext.time_utils import (
    DateLike,
    add_months,
    as_date,
    days_from_relative_label,
    format_month_year,
    month_key,
    relative_label,
    start_of_day,
)

MonthKey = datetime.date
BucketLabel = str
Agenda = dict[MonthKey, dict[BucketLabel, list[Event]]]


def default_window_end(
    today: DateLike | None = None, months: int = DEFAULT_MONTHS_TO_LOAD
) -> datetime.date:
    """The last day shown when `months` months are loaded."""
    return add_months(start_of_day(today), months)


def _in_window(event: Event, start: datetime.date, end: datetime.date) -> bool:
    if start <= event.date <= end:
        return True
    return event.end_date is not None and start <= event.end_date <= end


def filter_events(
    events: Iterable[Event],
    window_end: DateLike | None = None,
    today: DateLike | None = None,
    category_filter: str | None = None,
) -> list[Event]:
    """Events starting or ending between the start of `today` and `window_end`,
    sorted by date.

    Parameters
    ----------
    window_end
        Last day of the window. Defaults to a year from today.
    category_filter
        If specified, only events whose category name is exactly this one
        are kept.
    """
    today = start_of_day(today)
    window_end = as_date(window_end) if window_end else default_window_end(today)
    kept = [
        e
        for e in events
        if (category_filter is None or e.category == category_filter)
        and _in_window(e, today, window_end)
    ]
    kept.sort(key=lambda e: e.date)
    return kept


def bucket_label(event: Event, today: DateLike | None = None) -> BucketLabel:
    """Events in progress today are grouped under "Today", all others under
    their relative date label."""
    today = start_of_day(today)
    if event.date <= today <= event.last_day:
        return "Today"
    return relative_label(event.date, today=today)


def sort_bucket_labels(labels: Iterable[BucketLabel]) -> list[BucketLabel]:
    """Order labels by the day they stand for, so that "Tomorrow" comes before
    "in 3 days"."""
    return sorted(labels, key=days_from_relative_label)


def group_events_by_month(events: Iterable[Event]) -> dict[MonthKey, list[Event]]:
    grouped: dict[MonthKey, list[Event]] = {}
    for event in events:
        grouped.setdefault(month_key(event.date), []).append(event)
    return grouped


def group_events_by_bucket(
    events: Iterable[Event], today: DateLike | None = None
) -> dict[BucketLabel, list[Event]]:
    """Group events by `bucket_label`, buckets in chronological order."""
    grouped: dict[BucketLabel, list[Event]] = {}
    for event in events:
        grouped.setdefault(bucket_label(event, today), []).append(event)
    return {label: grouped[label] for label in sort_bucket_labels(grouped)}


def group_for_display(
    events: Iterable[Event],
    window_end: DateLike | None = None,
    today: DateLike | None = None,
    category_filter: str | None = None,
) -> Agenda:
    """Arrange the upcoming events as month -> relative date bucket -> events.

    Months are keyed by their first day and appear in ascending order, buckets
    are ordered chronologically and events in a bucket are sorted by date. The
    input is not modified and an empty input yields an empty agenda.

    See also: `filter_events` for the meaning of the parameters.
    """
    today = start_of_day(today)
    upcoming = filter_events(events, window_end, today, category_filter)
    by_month = group_events_by_month(upcoming)
    return {
        month: group_events_by_bucket(by_month[month], today)
        for month in sorted(by_month)
    }


def agenda_headers(agenda: Agenda) -> list[str]:
    """Human readable month headers, eg "June 2024"."""
    return [format_month_year(month) for month in agenda]


def has_more_events_to_load(
    events: Iterable[Event],
    window_end: DateLike | None = None,
    today: DateLike | None = None,
    category_filter: str | None = None,
) -> bool:
    """Whether some events end after the loaded window."""
    window_end = as_date(window_end) if window_end else default_window_end(today)
    return any(
        e.last_day > window_end
        for e in events
        if category_filter is None or e.category == category_filter
    )


def past_events(
    events: Iterable[Event], today: DateLike | None = None
) -> list[Event]:
    """Events which ended before today, the most recent first."""
    today = start_of_day(today)
    ended = [e for e in events if e.last_day < today]
    ended.sort(key=lambda e: (e.last_day, e.date), reverse=True)
    return ended


def group_past_events(
    events: Iterable[Event], today: DateLike | None = None
) -> dict[MonthKey, list[Event]]:
    """Past events grouped by the month they started in, newest month first."""
    by_month = group_events_by_month(past_events(events, today))
    return {month: by_month[month] for month in sorted(by_month, reverse=True)}


def upcoming_events(
    events: Iterable[Event],
    today: DateLike | None = None,
    category: str | None = None,
) -> list[Event]:
    """Events which have not ended yet, as shown by the home screen widget.

    Categories are compared ignoring case and the "All Categories" pseudo
    category disables the filter.
    """
    today = start_of_day(today)
    kept = [e for e in events if e.last_day >= today]
    if category is not None and category != ALL_CATEGORIES:
        kept = [
            e
            for e in kept
            if e.category is not None and e.category.casefold() == category.casefold()
        ]
    return kept


def today_events(events: Iterable[Event], today: DateLike | None = None) -> list[Event]:
    """Events starting today."""
    today = start_of_day(today)
    return [e for e in events if e.date == today]


def daily_digest(events: Iterable[Event], today: DateLike | None = None) -> str | None:
    """Body of the daily notification listing today's events, `None` when there
    is nothing to notify about."""
    titles = [e.title for e in today_events(events, today)]
    if not titles:
        return None
    return ", ".join(titles)


def notifiable_events(
    events: Iterable[Event], today: DateLike | None = None
) -> list[Event]:
    """Events a notification should be scheduled for: those starting today or
    later which have notifications enabled."""
    today = start_of_day(today)
    return sorted(
        (e for e in events if e.notifications_enabled and e.date >= today),
        key=lambda e: e.date,
    )
