#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Expansion of repeating events into the concrete instances of a series."""

import datetime
import logging
import uuid
from collections.abc import Generator, Iterable
from enum import StrEnum, auto
from itertools import islice
from typing import Any

from upnext.constants import MAX_EVENT_RECURRENCES
from upnext.models import Event, EventId
from upnext.time_utils import (
    DateLike,
    RepeatOption,
    RepeatRule,
    RepeatUnit,
    TerminationKind,
    advance,
    as_date,
)

logger = logging.getLogger(__name__)


class DeletePolicy(StrEnum):
    """Which instances of a series are removed when one of them is deleted."""

    ThisEvent = auto()
    ThisAndUpcoming = auto()
    EntireSeries = auto()


def repetition_schedule(
    start: DateLike, rule: RepeatRule
) -> Generator[datetime.date, None, None]:
    """Lazily generate the dates of a series, starting with `start`.

    Each date is obtained by advancing the previous one by the rule period, so
    a monthly series started on Jan 31 continues on the last day of February
    and then on the 28th (or 29th) of each following month. Generation stops
    after the `OnDate` cutoff, if any, but is otherwise unbounded: callers are
    expected to bound it.
    """
    current = as_date(start)
    yield current
    period = rule.period()
    if period is None:
        return
    unit, count = period
    termination = rule.termination
    while True:
        current = advance(current, unit, count)
        if termination.kind == TerminationKind.OnDate and current > termination.until:
            return
        yield current


def _occurrence_limit(rule: RepeatRule, max_occurrences: int) -> int:
    termination = rule.termination
    if termination.kind == TerminationKind.AfterOccurrences:
        return min(max(termination.count or 1, 1), max_occurrences)
    return max_occurrences


def rule_fields(rule: RepeatRule) -> dict[str, Any]:
    """The event fields which record `rule` so it can be derived again
    with `RepeatRule.from_event`."""
    fields: dict[str, Any] = {
        "repeat_option": rule.frequency,
        "repeat_until": None,
        "repeat_until_count": None,
    }
    termination = rule.termination
    if termination.kind == TerminationKind.AfterOccurrences:
        fields["repeat_until_count"] = termination.count
    elif termination.kind == TerminationKind.OnDate:
        fields["repeat_until"] = termination.until
    if rule.frequency == RepeatOption.Custom:
        unit, count = rule.period()
        fields["repeat_unit"] = unit
        fields["custom_repeat_count"] = count
    return fields


def expand(
    seed: Event,
    rule: RepeatRule | None = None,
    max_occurrences: int = MAX_EVENT_RECURRENCES,
) -> list[Event]:
    """Returns the instances of the series started by `seed`.

    Parameters
    ----------
    seed
        The first instance of the series. It keeps its ID.
    rule
        How the event repeats. Derived from the `seed` repeat fields if
        not specified.
    max_occurrences
        Ceiling on the number of instances, applied whatever the termination
        condition. Series that repeat indefinitely are cut at this length.

    Returns
    -------
    The instances in ascending date order. All of them share a newly generated
    `series_id`, and each one but the seed gets a new ID. Multi-day events keep
    their span. For events which do not repeat, a single instance without a
    `series_id` is returned.
    """

    if rule is None:
        rule = RepeatRule.from_event(seed)
    if not rule.repeats:
        return [
            seed.model_copy(
                update={"series_id": None, "repeat_option": RepeatOption.Never}
            )
        ]
    series_id = str(uuid.uuid4())
    span = datetime.timedelta(days=seed.span_days)
    shared = rule_fields(rule) | {"series_id": series_id}
    limit = _occurrence_limit(rule, max(max_occurrences, 1))
    instances = []
    for i, date in enumerate(islice(repetition_schedule(seed.date, rule), limit)):
        update = shared | {"date": date}
        if i > 0:
            update["id"] = str(uuid.uuid4())
        if seed.end_date is not None:
            update["end_date"] = date + span
        instances.append(seed.model_copy(update=update, deep=True))
    bounded = rule.termination.kind == TerminationKind.AfterOccurrences
    if len(instances) == max_occurrences and not bounded:
        logger.warning(
            f"Series for {seed.title!r} was truncated to {max_occurrences} instances"
        )
    logger.debug(f"Expanded {seed.title!r} into {len(instances)} instances")
    return instances


def next_repeat_date(event: Event) -> datetime.date | None:
    """The date the instance following `event` falls on, or `None` if the
    event does not repeat."""
    period = RepeatRule.from_event(event).period()
    if period is None:
        return None
    unit, count = period
    return advance(event.date, unit, count)


def calculate_repeat_until_date(
    frequency: RepeatOption,
    start: DateLike,
    count: int,
    unit: RepeatUnit | str | None = None,
) -> datetime.date:
    """The date reached by advancing `start` by `count` periods of `frequency`.

    Used to preview when a series limited to a number of occurrences ends.
    `start` is returned for events that do not repeat or custom rules with an
    unknown unit.
    """
    start = as_date(start)
    if frequency == RepeatOption.Never:
        return start
    if frequency == RepeatOption.Custom:
        unit = RepeatUnit.parse(unit)
        if unit is None:
            return start
        return advance(start, unit, count)
    unit, _ = RepeatRule(frequency=frequency).period()
    return advance(start, unit, count)


def describe_repeat(event: Event) -> str:
    """Short description of how an event repeats, eg "Weekly" or "2 Weeks".
    Empty for events that do not repeat."""
    if event.repeat_option == RepeatOption.Never:
        return ""
    if event.repeat_option != RepeatOption.Custom:
        return event.repeat_option.value
    if event.custom_repeat_count is None or event.repeat_unit is None:
        return ""
    count = event.custom_repeat_count
    unit = event.repeat_unit.singular if count == 1 else event.repeat_unit.value
    return f"{count} {unit}"


def select_for_deletion(
    events: Iterable[Event], target: Event, policy: DeletePolicy
) -> list[EventId]:
    """IDs of the events removed when `target` is deleted under `policy`.

    Series are matched by `series_id` only. Deleting an event which is not part
    of a series only ever removes that event.
    """
    if policy == DeletePolicy.ThisEvent or target.series_id is None:
        return [target.id]
    in_series = [e for e in events if e.series_id == target.series_id]
    if policy == DeletePolicy.ThisAndUpcoming:
        return [e.id for e in in_series if e.date >= target.date]
    return [e.id for e in in_series]
