#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from pathlib import Path

PACKAGE_NAME = "upnext"
CONFIGS_ROOT = f"{PACKAGE_NAME}.configs"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / PACKAGE_NAME
DEFAULT_SUITE_NAME = "group.UpNextIdentifier"
EVENTS_KEY = "events"
CATEGORIES_KEY = "categories"
DEFAULT_CATEGORY_KEY = "defaultCategory"
MAX_EVENT_RECURRENCES = 100
"""Ceiling on the number of instances a single series expands into."""
DEFAULT_MONTHS_TO_LOAD = 12
ALL_CATEGORIES = "All Categories"
"""Sentinel category used by the widget to disable category filtering."""
SHORT_DATE_FORMAT = "%a, %b {day}"
MONTH_YEAR_FORMAT = "%B %Y"
