"""Screening of malformed task and time-entry records."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Optional

from analytics_engine.schema import PRIORITIES, STATUSES, Task, TimeEntry, ValidationWarning

logger = logging.getLogger(__name__)


def _is_aware(value: datetime) -> bool:
    return value.tzinfo is not None and value.utcoffset() is not None


class _AwarenessCheck:
    """Track whether a snapshot's timestamps are naive or offset-aware.

    The first self-consistent record fixes the snapshot's convention; later
    records must follow it, since naive and aware datetimes cannot be compared.
    """

    def __init__(self) -> None:
        self.expected: Optional[bool] = None

    def problem(self, first: datetime, second: datetime) -> Optional[str]:
        aware = _is_aware(first)
        if aware != _is_aware(second):
            return "mixes naive and offset-aware timestamps"
        if self.expected is None:
            self.expected = aware
        elif aware != self.expected:
            expected = "offset-aware" if self.expected else "naive"
            return f"timestamps must be {expected} like the rest of the snapshot"
        return None


def split_entries(entries) -> tuple[list[TimeEntry], list[ValidationWarning]]:
    """Separate usable entries from ones with unusable timestamps."""

    valid: list[TimeEntry] = []
    warnings: list[ValidationWarning] = []
    awareness = _AwarenessCheck()
    for entry in entries:
        tz_problem = awareness.problem(entry.start_time, entry.end_time)
        if tz_problem is not None:
            warnings.append(ValidationWarning(entry.entry_id, "timezone_mismatch", tz_problem))
            continue
        if entry.end_time < entry.start_time:
            warnings.append(
                ValidationWarning(
                    record_id=entry.entry_id,
                    kind="negative_duration",
                    message=f"end_time {entry.end_time.isoformat()} precedes start_time {entry.start_time.isoformat()}",
                )
            )
            continue
        valid.append(entry)
    if warnings:
        logger.debug("Excluded %d of %d time entries", len(warnings), len(valid) + len(warnings))
    return valid, warnings


def _task_problem(task: Task, awareness: _AwarenessCheck) -> tuple[str, str] | None:
    if task.priority not in PRIORITIES:
        return "unknown_priority", f"priority {task.priority!r} is not one of {PRIORITIES}"
    if task.status not in STATUSES:
        return "unknown_status", f"status {task.status!r} is not one of {STATUSES}"
    if not math.isfinite(task.estimated_time):
        return "non_finite_time", f"estimated_time {task.estimated_time} is not a finite number"
    if task.actual_time is not None and not math.isfinite(task.actual_time):
        return "non_finite_time", f"actual_time {task.actual_time} is not a finite number"
    if task.estimated_time < 0:
        return "negative_estimate", f"estimated_time {task.estimated_time} is negative"
    if task.actual_time is not None and task.actual_time < 0:
        return "negative_actual", f"actual_time {task.actual_time} is negative"
    tz_problem = awareness.problem(task.created_at, task.updated_at)
    if tz_problem is not None:
        return "timezone_mismatch", tz_problem
    if task.updated_at < task.created_at:
        return "timestamp_order", "updated_at precedes created_at"
    return None


def split_tasks(tasks) -> tuple[list[Task], list[ValidationWarning]]:
    """Separate usable tasks from malformed ones."""

    valid: list[Task] = []
    warnings: list[ValidationWarning] = []
    awareness = _AwarenessCheck()
    for task in tasks:
        problem = _task_problem(task, awareness)
        if problem is None:
            valid.append(task)
            continue
        kind, message = problem
        warnings.append(ValidationWarning(record_id=task.task_id, kind=kind, message=message))
    if warnings:
        logger.debug("Excluded %d of %d tasks", len(warnings), len(valid) + len(warnings))
    return valid, warnings
