#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import polars as pl

from upnext.time_utils import RepeatOption, RepeatUnit

COLOR_SCHEMA = pl.Struct(
    {
        "red": pl.Float64,
        "green": pl.Float64,
        "blue": pl.Float64,
        "opacity": pl.Float64,
    }
)

# column order follows the `Event` field order
EVENT_SCHEMA = {
    "id": pl.String,
    "title": pl.String,
    "date": pl.Date,
    "end_date": pl.Date,
    "color": COLOR_SCHEMA,
    "category": pl.String,
    "notifications_enabled": pl.Boolean,
    "repeat_option": pl.Enum([x.value for x in RepeatOption]),
    "repeat_until": pl.Date,
    "repeat_until_count": pl.Int32,
    "series_id": pl.String,
    "custom_repeat_count": pl.Int32,
    "repeat_unit": pl.Enum([x.value for x in RepeatUnit]),
}
