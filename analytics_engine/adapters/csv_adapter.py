"""CSV adapter for task and time-entry exports."""

from __future__ import annotations

import csv
import math
from datetime import datetime
from typing import Callable, TypeVar

from analytics_engine.schema import PRIORITIES, STATUSES, Task, TimeEntry

T = TypeVar("T")

_TASK_FIELDS = ("task_id", "priority", "status", "estimated_time", "created_at", "updated_at")
_ENTRY_FIELDS = ("entry_id", "task_id", "user_id", "start_time", "end_time")


def _require(row: dict, fields: tuple[str, ...], row_number: int) -> None:
    missing = [field for field in fields if not (row.get(field) or "").strip()]
    if missing:
        raise ValueError(f"Row {row_number}: missing required fields {missing}")


def _timestamp(row: dict, field: str, row_number: int) -> datetime:
    try:
        return datetime.fromisoformat(row[field].strip())
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: malformed {field}") from exc


def _number(raw: str, field: str, row_number: int) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Row {row_number}: invalid {field}") from exc
    if not math.isfinite(value):
        raise ValueError(f"Row {row_number}: {field} must be a finite number")
    return value


def _parse_task(row: dict, row_number: int) -> Task:
    _require(row, _TASK_FIELDS, row_number)

    priority = row["priority"].strip()
    if priority not in PRIORITIES:
        raise ValueError(f"Row {row_number}: invalid priority '{priority}'")
    status = row["status"].strip()
    if status not in STATUSES:
        raise ValueError(f"Row {row_number}: invalid status '{status}'")

    actual_raw = (row.get("actual_time") or "").strip()
    assignee = (row.get("assignee") or "").strip()
    tags_raw = row.get("tags") or ""

    return Task(
        task_id=row["task_id"].strip(),
        priority=priority,
        status=status,
        estimated_time=_number(row["estimated_time"], "estimated_time", row_number),
        created_at=_timestamp(row, "created_at", row_number),
        updated_at=_timestamp(row, "updated_at", row_number),
        actual_time=_number(actual_raw, "actual_time", row_number) if actual_raw else None,
        tags=frozenset(tag.strip() for tag in tags_raw.split(";") if tag.strip()),
        assignee=assignee or None,
        title=(row.get("title") or "").strip(),
    )


def _parse_entry(row: dict, row_number: int) -> TimeEntry:
    _require(row, _ENTRY_FIELDS, row_number)
    return TimeEntry(
        entry_id=row["entry_id"].strip(),
        task_id=row["task_id"].strip(),
        user_id=row["user_id"].strip(),
        start_time=_timestamp(row, "start_time", row_number),
        end_time=_timestamp(row, "end_time", row_number),
    )


def _parse_rows(file_path: str, parse_row: Callable[[dict, int], T]) -> list[T]:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        return [parse_row(row, row_number) for row_number, row in enumerate(reader, start=2)]


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a task CSV; tags are ``;``-separated."""

    return _parse_rows(file_path, _parse_task)


def parse_time_entries(file_path: str) -> list[TimeEntry]:
    """Parse a time-entry CSV."""

    return _parse_rows(file_path, _parse_entry)
