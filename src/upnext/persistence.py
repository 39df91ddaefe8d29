#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Key-value containers in which the events and categories are stored as JSON
blobs, shared between the app and its widgets."""

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from upnext.constants import DEFAULT_SUITE_NAME
from upnext.models import Category, Event

logger = logging.getLogger(__name__)

_EVENTS_ADAPTER = TypeAdapter(list[Event])
_CATEGORIES_ADAPTER = TypeAdapter(list[Category])


@runtime_checkable
class KeyValueStore(Protocol):
    """Storage for opaque blobs, keyed by name."""

    def get(self, key: str) -> bytes | None: ...

    def set(self, key: str, value: bytes) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self, data: dict[str, bytes] | None = None):
        self._data: dict[str, bytes] = dict(data or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self._data


class JsonFileKeyValueStore:
    """Stores each key as `<directory>/<suite_name>/<key>.json`.

    Parameters
    ----------
    directory
        Root directory of the containers.
    suite_name
        Name of the container shared by the app and its widgets.
    """

    def __init__(self, directory: str | Path, suite_name: str = DEFAULT_SUITE_NAME):
        self.root = Path(directory) / suite_name

    def _path(self, key: str) -> Path:
        return self.root / f"{key}.json"

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            logger.info(f"No data found for key: {key}")
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        # readers never see a partially written blob
        staging = path.with_name(f"{path.name}.tmp")
        staging.write_bytes(value)
        staging.replace(path)
        logger.debug(f"Saved data for key: {key}")


def encode_events(events: list[Event]) -> bytes:
    return _EVENTS_ADAPTER.dump_json(events, by_alias=True)


def decode_events(data: bytes | None) -> list[Event]:
    """Decode an events blob. Missing or malformed blobs decode to no events."""
    if data is None:
        return []
    try:
        return _EVENTS_ADAPTER.validate_json(data)
    except ValidationError as e:
        logger.warning(f"Failed to decode events, starting empty: {e}")
        return []


def encode_categories(categories: list[Category]) -> bytes:
    return _CATEGORIES_ADAPTER.dump_json(categories, by_alias=True)


def decode_categories(data: bytes | None) -> list[Category] | None:
    """Decode a categories blob. Returns `None` when the blob is missing or
    malformed so that callers can fall back to their defaults."""
    if data is None:
        return None
    try:
        return _CATEGORIES_ADAPTER.validate_json(data)
    except ValidationError as e:
        logger.warning(f"Failed to decode categories: {e}")
        return None
