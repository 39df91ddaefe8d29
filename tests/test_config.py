#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import pytest
from hydra import compose, initialize_config_module
from pydantic import ValidationError

from upnext.config import load_config, storage_settings, store_settings
from upnext.constants import DEFAULT_CACHE_DIR, DEFAULT_SUITE_NAME


def test_default_config():
    cfg = load_config()
    settings = store_settings(cfg)
    assert settings.max_occurrences == 100
    assert settings.months_to_load == 12
    assert settings.autosave
    assert [c.name for c in settings.categories] == [
        "Work",
        "Social",
        "Birthdays",
        "Movies",
    ]
    storage = storage_settings(cfg)
    assert storage.dir == DEFAULT_CACHE_DIR
    assert storage.suite_name == DEFAULT_SUITE_NAME


def test_overrides(tmp_path):
    cfg = load_config(
        [f"storage.dir={tmp_path}", "store.max_occurrences=5", "store.autosave=false"]
    )
    settings = store_settings(cfg)
    assert settings.max_occurrences == 5
    assert not settings.autosave
    assert storage_settings(cfg).dir == tmp_path


def test_invalid_settings_are_rejected():
    cfg = load_config(["store.max_occurrences=0"])
    with pytest.raises(ValidationError):
        store_settings(cfg)


def test_agenda_config_extends_base():
    with initialize_config_module(version_base=None, config_module="upnext.configs"):
        cfg = compose(config_name="agenda", overrides=["category=Work"])
    assert cfg.past is False
    assert cfg.category == "Work"
    assert store_settings(cfg).months_to_load == 12
