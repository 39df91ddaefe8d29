#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import logging

import hydra
from omegaconf import DictConfig, OmegaConf

from upnext.constants import CONFIGS_ROOT
from upnext.display import display_agenda, display_past_events
from upnext.grouping import (
    default_window_end,
    group_past_events,
    has_more_events_to_load,
)
from upnext.store import EventStore

logger = logging.getLogger(__name__)


@hydra.main(
    version_base=None,
    config_name="agenda",
    config_path=f"pkg://{CONFIGS_ROOT}",
)
def show_agenda(cfg: DictConfig):
    if cfg.debug:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    store = EventStore.from_config(cfg)
    if cfg.past:
        display_past_events(group_past_events(store.events))
        return
    if cfg.category is not None and cfg.category not in store.category_names:
        logger.warning(f"Unknown category {cfg.category}, showing no events")
        display_agenda({}, empty_message=f"No events in {cfg.category}")
        return
    agenda = store.agenda(category_filter=cfg.category)
    empty_message = (
        f"No events in {cfg.category}" if cfg.category else "No upcoming events"
    )
    display_agenda(agenda, empty_message=empty_message)
    window_end = default_window_end(months=store.settings.months_to_load)
    if has_more_events_to_load(store.events, window_end, category_filter=cfg.category):
        logger.info(
            "More events are scheduled after the displayed window, "
            "increase store.months_to_load to see them"
        )


if __name__ == "__main__":
    show_agenda()
