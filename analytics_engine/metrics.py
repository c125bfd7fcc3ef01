"""Productivity outcome metrics."""

from __future__ import annotations

from typing import Optional

from analytics_engine.config import EngineConfig
from analytics_engine.primitives import rate, session_gaps, total_duration
from analytics_engine.schema import ProductivityMetrics, Task
from analytics_engine.validation import split_entries, split_tasks


def _efficiency(completed: list[Task]) -> float:
    ratios = []
    for task in completed:
        if task.actual_time is None or task.actual_time <= 0 or task.estimated_time <= 0:
            continue
        ratios.append(min(1.0, task.estimated_time / task.actual_time))
    return sum(ratios) / len(ratios) if ratios else 0.0


def compute_metrics(tasks, time_entries, config: Optional[EngineConfig] = None) -> ProductivityMetrics:
    """Compute completion, throughput, focus, break and efficiency metrics."""

    config = config or EngineConfig()
    valid_tasks, task_warnings = split_tasks(tasks)
    valid_entries, entry_warnings = split_entries(time_entries)
    warnings = tuple(task_warnings + entry_warnings)

    completed = [task for task in valid_tasks if task.is_completed]
    completed_ids = {task.task_id for task in completed}

    focus_time, _ = total_duration(valid_entries)
    completed_time, _ = total_duration([entry for entry in valid_entries if entry.task_id in completed_ids])

    score = rate(len(completed), focus_time) * config.score_scale
    return ProductivityMetrics(
        tasks_completed=len(completed),
        average_completion_time=completed_time / len(completed) if completed else 0.0,
        productivity_score=max(0.0, min(100.0, score)),
        focus_time=focus_time,
        break_time=session_gaps(valid_entries, config.session_gap_minutes),
        efficiency=_efficiency(completed),
        warnings=warnings,
    )
