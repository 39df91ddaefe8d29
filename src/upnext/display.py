#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Terminal rendering of the agenda and of past events."""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from upnext.grouping import Agenda, MonthKey
from upnext.models import Event
from upnext.recurrence import describe_repeat
from upnext.time_utils import DateLike, format_month_year, time_remaining

BUCKET_COL_WIDTH = 14


def _event_text(event: Event) -> Text:
    text = Text(event.title, style=f"bold {event.color.to_hex()}")
    if repeat := describe_repeat(event):
        text.append(f"  ↻ {repeat}", style="dim")
    if event.category:
        text.append(f"  [{event.category}]", style="cyan")
    return text


def display_agenda(
    agenda: Agenda,
    today: DateLike | None = None,
    console: Console | None = None,
    empty_message: str = "No upcoming events",
):
    """Display the grouped events as one rich table per month

    ┏━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━┳━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┓
    ┃ When         ┃ Event           ┃ Dates                          ┃
    ┡━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━╇━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━┩
    """  # noqa

    console = console or Console()
    if not agenda:
        console.print(f"[bold]{empty_message}[/bold]")
        return
    for month, buckets in agenda.items():
        table = Table(
            title=format_month_year(month),
            show_header=True,
            header_style="bold magenta",
            expand=True,
        )
        table.add_column("When", style="dim", width=BUCKET_COL_WIDTH, no_wrap=True)
        table.add_column("Event", style="white")
        table.add_column("Dates", style="green")
        for label, events in buckets.items():
            for i, event in enumerate(events):
                table.add_row(
                    label.upper() if i == 0 else "",
                    _event_text(event),
                    time_remaining(event.date, event.end_date, today=today, style="date"),
                )
        console.print(table)


def display_past_events(
    grouped: dict[MonthKey, list[Event]],
    today: DateLike | None = None,
    console: Console | None = None,
):
    """Display past events, one table per month, most recent first."""
    console = console or Console()
    if not grouped:
        console.print("[bold]No past events[/bold]")
        return
    for month, events in grouped.items():
        table = Table(title=format_month_year(month), show_header=False, expand=True)
        table.add_column("Event", style="white")
        table.add_column("Dates", style="dim")
        for event in events:
            table.add_row(
                _event_text(event),
                time_remaining(event.date, event.end_date, today=today, style="date"),
            )
        console.print(table)
