#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""The user's events and categories.

An `EventStore` is a full encapsulation of the user data. It is created by the
application entry point and handed to whatever needs to read or change the
data; persistence is injected so the same store works against a file
container, an in-memory container or nothing at all.
"""

import logging
from collections.abc import Iterable
from typing import Any, Self

import polars as pl
from omegaconf import DictConfig

from upnext.config import StoreSettings, storage_settings, store_settings
from upnext.constants import CATEGORIES_KEY, DEFAULT_CATEGORY_KEY, EVENTS_KEY
from upnext.database_schemas import EVENT_SCHEMA
from upnext.exceptions import CategoryError, SearchError
from upnext.grouping import Agenda, default_window_end, group_for_display
from upnext.models import Category, Color, Event, EventId, SeriesId
from upnext.persistence import (
    JsonFileKeyValueStore,
    KeyValueStore,
    decode_categories,
    decode_events,
    encode_categories,
    encode_events,
)
from upnext.recurrence import DeletePolicy, expand, rule_fields, select_for_deletion
from upnext.time_utils import DateLike, RepeatRule

logger = logging.getLogger(__name__)


class EventStore:
    """The events and categories of a user.

    Events are held in a dataframe with one row per event instance. Categories
    are kept in the order chosen by the user.

    Parameters
    ----------
    persistence
        Where the data is loaded from and saved to. If not specified, the data
        only lives in memory.
    settings
        Store settings. Defaults are used if not specified.
    """

    schema: dict[str, Any] = EVENT_SCHEMA

    def __init__(
        self,
        persistence: KeyValueStore | None = None,
        settings: StoreSettings | None = None,
    ):
        self.settings = settings or StoreSettings()
        self.persistence = persistence
        self._events: pl.DataFrame = pl.DataFrame(schema=self.schema)
        self._categories: list[Category] = [
            c.model_copy(deep=True) for c in self.settings.categories
        ]
        self._default_category: str | None = None

    @classmethod
    def from_config(cls, cfg: DictConfig) -> Self:
        """Create a store persisted in the file container described by the
        `storage` node of `cfg` and load its content."""
        storage = storage_settings(cfg)
        store = cls(
            persistence=JsonFileKeyValueStore(storage.dir, storage.suite_name),
            settings=store_settings(cfg),
        )
        store.load()
        return store

    def _to_frame(self, events: Iterable[Event]) -> pl.DataFrame:
        return pl.DataFrame(
            [e.model_dump() for e in events],
            schema=self.schema,
        )

    @staticmethod
    def _to_events(dataframe: pl.DataFrame) -> list[Event]:
        return [Event(**record) for record in dataframe.to_dicts()]

    def load(self) -> None:
        """Replace the content of the store with the persisted data. Data that
        cannot be decoded is ignored."""
        if self.persistence is None:
            return
        self._events = self._to_frame(
            decode_events(self.persistence.get(EVENTS_KEY))
        )
        categories = decode_categories(self.persistence.get(CATEGORIES_KEY))
        if categories is not None:
            self._categories = categories
        self._default_category = self._decode_default_category(
            self.persistence.get(DEFAULT_CATEGORY_KEY)
        )
        logger.info(
            f"Loaded {self._events.height} events and "
            f"{len(self._categories)} categories"
        )

    @staticmethod
    def _decode_default_category(data: bytes | None) -> str | None:
        if not data:
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Failed to decode the default category: {e}")
            return None

    def save(self) -> None:
        if self.persistence is None:
            logger.warning("No persistence configured, data will not be saved")
            return
        self.persistence.set(EVENTS_KEY, encode_events(self.events))
        self.persistence.set(CATEGORIES_KEY, encode_categories(self._categories))
        self.persistence.set(
            DEFAULT_CATEGORY_KEY, (self._default_category or "").encode("utf-8")
        )

    def _commit(self) -> None:
        if self.persistence is not None and self.settings.autosave:
            self.save()

    def _insert(self, events: list[Event]) -> None:
        self._events = pl.concat([self._events, self._to_frame(events)], how="vertical")

    def _remove(self, event_ids: list[EventId]) -> None:
        self._events = self._events.filter(~pl.col("id").is_in(event_ids))

    @property
    def events(self) -> list[Event]:
        """All the event instances, sorted by date."""
        return self._to_events(self._events.sort("date", maintain_order=True))

    @property
    def event_ids(self) -> set[EventId]:
        return set(self._events["id"].to_list())

    def __len__(self) -> int:
        return self._events.height

    def get_event(self, event_id: EventId) -> Event:
        """Retrieve the event with `event_id`.

        Raises
        ------
        SearchError if there is no such event.
        """
        records = self._events.filter(pl.col("id") == event_id)
        if records.is_empty():
            raise SearchError(f"No event with {event_id} was found.")
        return self._to_events(records)[0]

    def series(self, series_id: SeriesId) -> list[Event]:
        """The instances of a series, sorted by date."""
        records = self._events.filter(pl.col("series_id") == series_id)
        return self._to_events(records.sort("date", maintain_order=True))

    def new_event(
        self,
        title: str,
        date: DateLike,
        category: str | None = None,
        **fields: Any,
    ) -> Event:
        """Create an event, not yet added to the store, which takes its colour
        and repeat settings from `category`. Explicit `fields` win over the
        category defaults."""
        if category is None:
            category = self.default_category
        defaults: dict[str, Any] = {}
        if (found := self.get_category(category)) is not None:
            defaults["color"] = found.color.model_copy()
            defaults |= rule_fields(found.default_rule())
        return Event(title=title, date=date, category=category, **(defaults | fields))

    def add_event(self, seed: Event, rule: RepeatRule | None = None) -> list[Event]:
        """Add an event and, if it repeats, the rest of its series.

        Parameters
        ----------
        seed
            The event to add. If an event with the same ID exists, it is
            updated instead.
        rule
            How the event repeats. Derived from the `seed` fields if not
            specified.

        Returns
        -------
        The instances added to the store.
        """
        if seed.id in self.event_ids:
            return self.update_event(seed, rule or RepeatRule.from_event(seed))
        instances = expand(seed, rule, max_occurrences=self.settings.max_occurrences)
        self._insert(instances)
        logger.info(f"Added {seed} ({len(instances)} instances)")
        self._commit()
        return instances

    def update_event(self, event: Event, rule: RepeatRule | None = None) -> list[Event]:
        """Save changes made to an existing event.

        Without a `rule`, only the event itself is replaced. With a `rule`, the
        whole series the event belongs to is deleted and `event` is expanded
        again into a new series.

        Raises
        ------
        SearchError if the event is not in the store.
        """
        existing = self.get_event(event.id)
        if rule is None:
            self._remove([existing.id])
            self._insert([event])
            self._commit()
            return [event]
        stale = select_for_deletion(self.events, existing, DeletePolicy.EntireSeries)
        self._remove(stale)
        instances = expand(
            event.model_copy(update={"series_id": None}),
            rule,
            max_occurrences=self.settings.max_occurrences,
        )
        self._insert(instances)
        logger.info(
            f"Regenerated {event}: replaced {len(stale)} instances "
            f"with {len(instances)}"
        )
        self._commit()
        return instances

    def delete_event(
        self, event_id: EventId, policy: DeletePolicy = DeletePolicy.ThisEvent
    ) -> list[Event]:
        """Delete an event and, depending on `policy`, other instances of its
        series.

        Returns
        -------
        The deleted events.

        Raises
        ------
        SearchError if the event is not in the store.
        """
        target = self.get_event(event_id)
        events = self.events
        to_remove = set(select_for_deletion(events, target, policy))
        self._remove(list(to_remove))
        logger.info(f"Deleted {len(to_remove)} events ({policy})")
        self._commit()
        return [e for e in events if e.id in to_remove]

    def delete_all_events(self) -> None:
        self._events = self._events.clear()
        self._commit()

    def agenda(
        self, today: DateLike | None = None, category_filter: str | None = None
    ) -> Agenda:
        """Upcoming events grouped for display over the configured number of
        months.

        Events only match `category_filter` while it names one of the user's
        categories. Events left in a deleted category match again if a
        category with the same name is added back.
        """
        if category_filter is not None and category_filter not in self.category_names:
            return {}
        window_end = default_window_end(today, self.settings.months_to_load)
        return group_for_display(self.events, window_end, today, category_filter)

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    @property
    def category_names(self) -> list[str]:
        return [c.name for c in self._categories]

    def get_category(self, name: str | None) -> Category | None:
        for category in self._categories:
            if category.name == name:
                return category
        return None

    def _index_of(self, name: str) -> int:
        try:
            return self.category_names.index(name)
        except ValueError:
            raise SearchError(f"No category named {name!r}")

    def add_category(self, category: Category) -> None:
        if category.name in self.category_names:
            raise CategoryError(f"Category {category.name!r} already exists")
        self._categories.append(category)
        self._commit()

    def rename_category(self, old_name: str, new_name: str) -> int:
        """Rename a category and every event referencing it.

        Returns
        -------
        The number of events moved to the new name.
        """
        index = self._index_of(old_name)
        if new_name == old_name:
            return 0
        if new_name in self.category_names:
            raise CategoryError(f"Category {new_name!r} already exists")
        self._categories[index] = self._categories[index].model_copy(
            update={"name": new_name}
        )
        affected = self._events.filter(pl.col("category") == old_name).height
        self._events = self._events.with_columns(
            pl.when(pl.col("category") == old_name)
            .then(pl.lit(new_name))
            .otherwise(pl.col("category"))
            .alias("category")
        )
        if self._default_category == old_name:
            self._default_category = new_name
        logger.info(f"Renamed category {old_name!r} to {new_name!r} ({affected} events)")
        self._commit()
        return affected

    def recolor_category(self, name: str, color: Color) -> None:
        index = self._index_of(name)
        self._categories[index] = self._categories[index].model_copy(
            update={"color": color}
        )
        self._commit()

    def move_category(self, source: int, destination: int) -> None:
        """Move the category at `source` so that it is displayed before the
        category which was at `destination` (at the end for
        `destination == len(categories)`)."""
        category = self._categories.pop(source)
        if destination > source:
            destination -= 1
        self._categories.insert(destination, category)
        self._commit()

    def delete_category(self, name: str) -> None:
        """Delete a category. Events keep referencing it by name but no longer
        match any of the user's categories."""
        index = self._index_of(name)
        del self._categories[index]
        if self._default_category == name:
            self._default_category = None
        self._commit()

    @property
    def default_category(self) -> str | None:
        """Category preselected for new events, the first category unless
        the user chose one."""
        if self._default_category in self.category_names:
            return self._default_category
        return self._categories[0].name if self._categories else None

    @default_category.setter
    def default_category(self, name: str | None) -> None:
        if name is not None:
            self._index_of(name)
        self._default_category = name
        self._commit()
