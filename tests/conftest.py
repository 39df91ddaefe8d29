#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import time

import pytest

from upnext.config import StoreSettings
from upnext.models import Color, Event
from upnext.persistence import InMemoryKeyValueStore
from upnext.store import EventStore
from upnext.time_utils import RepeatOption
from tests.utils import TODAY


@pytest.fixture
def today() -> datetime.date:
    return TODAY


@pytest.fixture
def basic_event() -> Event:
    return Event(
        title="End of internship party",
        date=datetime.date(2024, 9, 26),
        color=Color(red=1.0, green=0.5, blue=0.0),
        category="Social",
    )


@pytest.fixture
def daily_event() -> Event:
    return Event(
        title="Stand-up",
        date=TODAY,
        category="Work",
        repeat_option=RepeatOption.Daily,
        repeat_until_count=10,
    )


@pytest.fixture
def utc_minus_seven(monkeypatch):
    """Run the test on a device seven hours behind UTC, without DST."""
    monkeypatch.setenv("TZ", "MST7")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.fixture
def persistence() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def store(persistence: InMemoryKeyValueStore) -> EventStore:
    return EventStore(persistence=persistence, settings=StoreSettings())
