#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Settings of the event store and of its storage, loaded from the YAML configs."""

from pathlib import Path
from typing import Any

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field

from upnext.constants import (
    DEFAULT_MONTHS_TO_LOAD,
    DEFAULT_SUITE_NAME,
    MAX_EVENT_RECURRENCES,
)
from upnext.models import Category, default_categories

CONFIG_DIR = Path(__file__).resolve().parent / "configs"
DEFAULT_CONFIG_NAME = "upnext"


class StoreSettings(BaseModel):
    """Settings of an `EventStore`.

    Parameters
    ----------
    max_occurrences
        Ceiling on the number of instances a repeating event expands into.
    months_to_load
        How many months ahead of today the agenda shows.
    autosave
        Persist every change as soon as it is made.
    categories
        Categories used when none have been saved yet.
    """

    max_occurrences: int = Field(MAX_EVENT_RECURRENCES, ge=1)
    months_to_load: int = Field(DEFAULT_MONTHS_TO_LOAD, ge=1)
    autosave: bool = True
    categories: list[Category] = Field(default_factory=default_categories)


class StorageSettings(BaseModel):
    dir: Path
    suite_name: str = DEFAULT_SUITE_NAME


def load_config(
    overrides: list[str] | None = None, config_name: str = DEFAULT_CONFIG_NAME
) -> DictConfig:
    """Load a config from the package `configs` directory, merged with
    dotlist `overrides` (eg ["store.months_to_load=3"])."""
    cfg = OmegaConf.load(CONFIG_DIR / f"{config_name}.yaml")
    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(overrides))
    return cfg


def _to_dict(node: DictConfig) -> dict[str, Any]:
    return OmegaConf.to_container(node, resolve=True)


def store_settings(cfg: DictConfig) -> StoreSettings:
    return StoreSettings(**_to_dict(cfg.store))


def storage_settings(cfg: DictConfig) -> StorageSettings:
    return StorageSettings(**_to_dict(cfg.storage))
