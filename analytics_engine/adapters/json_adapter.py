"""JSON adapter for task and time-entry exports."""

from __future__ import annotations

import json
import math
from datetime import datetime

from analytics_engine.schema import PRIORITIES, STATUSES, Task, TimeEntry

_TASK_FIELDS = ("task_id", "priority", "status", "estimated_time", "created_at", "updated_at")
_ENTRY_FIELDS = ("entry_id", "task_id", "user_id", "start_time", "end_time")


def _require(item: dict, fields: tuple[str, ...], index: int) -> None:
    if not isinstance(item, dict):
        raise ValueError(f"Item {index}: expected an object")
    missing = [field for field in fields if item.get(field) in (None, "")]
    if missing:
        raise ValueError(f"Item {index}: missing required fields {missing}")


def _timestamp(item: dict, field: str, index: int) -> datetime:
    try:
        return datetime.fromisoformat(str(item[field]))
    except ValueError as exc:
        raise ValueError(f"Item {index}: malformed {field}") from exc


def _number(raw, field: str, index: int) -> float:
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Item {index}: invalid {field}") from exc
    if not math.isfinite(value):
        raise ValueError(f"Item {index}: {field} must be a finite number")
    return value


def _parse_task(item: dict, index: int) -> Task:
    _require(item, _TASK_FIELDS, index)

    priority = str(item["priority"]).strip()
    if priority not in PRIORITIES:
        raise ValueError(f"Item {index}: invalid priority '{priority}'")
    status = str(item["status"]).strip()
    if status not in STATUSES:
        raise ValueError(f"Item {index}: invalid status '{status}'")

    tags = item.get("tags") or []
    if not isinstance(tags, list):
        raise ValueError(f"Item {index}: tags must be a list")

    actual_raw = item.get("actual_time")
    assignee = item.get("assignee")
    return Task(
        task_id=str(item["task_id"]).strip(),
        priority=priority,
        status=status,
        estimated_time=_number(item["estimated_time"], "estimated_time", index),
        created_at=_timestamp(item, "created_at", index),
        updated_at=_timestamp(item, "updated_at", index),
        actual_time=_number(actual_raw, "actual_time", index) if actual_raw is not None else None,
        tags=frozenset(str(tag).strip() for tag in tags if str(tag).strip()),
        assignee=str(assignee).strip() if assignee else None,
        title=str(item.get("title") or ""),
    )


def _parse_entry(item: dict, index: int) -> TimeEntry:
    _require(item, _ENTRY_FIELDS, index)
    return TimeEntry(
        entry_id=str(item["entry_id"]).strip(),
        task_id=str(item["task_id"]).strip(),
        user_id=str(item["user_id"]).strip(),
        start_time=_timestamp(item, "start_time", index),
        end_time=_timestamp(item, "end_time", index),
    )


def _load_list(file_path: str) -> list:
    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise ValueError("JSON payload must be a list of objects")
    return payload


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a JSON list of task objects."""

    return [_parse_task(item, i) for i, item in enumerate(_load_list(file_path), start=1)]


def parse_time_entries(file_path: str) -> list[TimeEntry]:
    """Parse a JSON list of time-entry objects."""

    return [_parse_entry(item, i) for i, item in enumerate(_load_list(file_path), start=1)]
