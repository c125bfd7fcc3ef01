"""Pure numeric helpers over tracked time intervals."""

from __future__ import annotations

from collections import defaultdict
from datetime import timedelta

from analytics_engine.schema import TimeEntry, ValidationWarning
from analytics_engine.validation import split_entries


def total_duration(entries) -> tuple[float, list[ValidationWarning]]:
    """Sum entry durations in minutes, skipping entries that end before they start."""

    valid, warnings = split_entries(entries)
    return sum((entry.duration_minutes for entry in valid), 0.0), warnings


def rate(count: float, duration_minutes: float) -> float:
    """Return count per hour; 0 when no time was logged."""

    if duration_minutes <= 0:
        return 0.0
    return count / (duration_minutes / 60.0)


def _split_by_hour(entry: TimeEntry, buckets: dict[int, float]) -> None:
    cursor = entry.start_time
    while cursor < entry.end_time:
        boundary = cursor.replace(minute=0, second=0, microsecond=0) + timedelta(hours=1)
        segment_end = min(boundary, entry.end_time)
        buckets[cursor.hour] += (segment_end - cursor).total_seconds() / 60.0
        cursor = segment_end


def bucket_by_hour(entries) -> tuple[dict[int, float], list[ValidationWarning]]:
    """Map hour-of-day to logged minutes, splitting entries across hour boundaries."""

    valid, warnings = split_entries(entries)
    buckets: dict[int, float] = defaultdict(float)
    for entry in valid:
        _split_by_hour(entry, buckets)
    return dict(buckets), warnings


def session_gaps(entries: list[TimeEntry], threshold_minutes: float) -> float:
    """
    Sum idle gaps shorter than ``threshold_minutes`` between a user's consecutive entries.

    Gaps are measured per user so one user's idle time never bleeds into
    another's. Overlapping entries produce no gap. Callers pass entries that
    already passed validation.
    """

    by_user: dict[str, list[TimeEntry]] = defaultdict(list)
    for entry in entries:
        by_user[entry.user_id].append(entry)

    total = 0.0
    for user_id in sorted(by_user):
        ordered = sorted(by_user[user_id], key=lambda e: (e.start_time, e.end_time, e.entry_id))
        latest_end = ordered[0].end_time
        for entry in ordered[1:]:
            gap = (entry.start_time - latest_end).total_seconds() / 60.0
            if 0 < gap < threshold_minutes:
                total += gap
            latest_end = max(latest_end, entry.end_time)
    return total
