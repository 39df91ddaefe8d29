#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime

TODAY = datetime.date(2024, 6, 25)  # Tuesday


def days(n: int) -> datetime.date:
    """The date `n` days after `TODAY`."""
    return TODAY + datetime.timedelta(days=n)
