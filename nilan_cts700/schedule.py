"""Resolution of the weekly program entry currently in effect."""

from __future__ import annotations

import math
import sys
from collections.abc import Sequence

from .models import DateTime, WeekScheduleRecord


def _sort_key(record: WeekScheduleRecord) -> tuple[int, int, int, float]:
    return (record.week_day, record.hour, record.minute, record.temperature)


def resolve_active(
    records: Sequence[WeekScheduleRecord], now: DateTime
) -> WeekScheduleRecord | None:
    """Return the record of ``records`` that is in effect at ``now``.

    A placeholder record carrying the time of ``now`` and maximal values for
    every other field is sorted together with the real records. The active
    record is the one sorted right before the placeholder. When the
    placeholder comes first the current time precedes every change of this
    week, so the last change of the previous week is still in effect.

    Records sharing the same week day, hour and minute are ordered by their
    temperature set point. Of two such records the one with the higher set
    point sorts last and is the one returned.

    ``None`` is returned for an empty table.
    """

    if not records:
        return None

    query = WeekScheduleRecord(
        week_day=now.week_day,
        hour=now.hour,
        minute=now.minute,
        temperature=math.inf,
        dhw_temperature=math.inf,
        flags=sys.maxsize,
        fan_speed=sys.maxsize,
    )
    ordered = sorted([*records, query], key=_sort_key)
    index = next(i for i, record in enumerate(ordered) if record is query)
    if index == 0:
        return ordered[-1]
    return ordered[index - 1]
