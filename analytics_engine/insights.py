"""Behavioral insight extraction."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Optional

from analytics_engine.config import EngineConfig
from analytics_engine.metrics import compute_metrics
from analytics_engine.primitives import bucket_by_hour
from analytics_engine.rules import Rule, apply_rules, merge_unique
from analytics_engine.schema import AdvisoryHint, ProductivityMetrics, UserInsights, UserPreferences
from analytics_engine.validation import split_entries, split_tasks


@dataclass(frozen=True)
class InsightContext:
    """Values the suggestion rules are evaluated against."""

    metrics: ProductivityMetrics
    total_tasks: int
    completion_rate: float
    peak_hours: tuple[int, ...]
    average_task_duration: float
    average_session_length: float
    preferences: Optional[UserPreferences]
    config: EngineConfig


def _peak_outside_work_hours(ctx: InsightContext) -> bool:
    if ctx.preferences is None or not ctx.peak_hours:
        return False
    top = ctx.peak_hours[0]
    return not ctx.preferences.work_start_hour <= top < ctx.preferences.work_end_hour


SUGGESTION_RULES: tuple[Rule, ...] = (
    Rule(
        "few_breaks",
        lambda ctx: ctx.metrics.focus_time > 0
        and ctx.metrics.break_time / ctx.metrics.focus_time < ctx.config.min_break_ratio,
        "Take regular breaks to maintain focus and prevent burnout",
    ),
    Rule(
        "sessions_exceed_focus_preference",
        lambda ctx: ctx.preferences is not None
        and ctx.average_session_length > ctx.preferences.focus_duration,
        "Your work sessions run longer than your preferred focus block; pause between blocks",
    ),
    Rule(
        "low_completion",
        lambda ctx: ctx.total_tasks > 0 and ctx.completion_rate < ctx.config.low_completion_rate,
        "Consider breaking down large tasks into smaller, manageable chunks",
    ),
    Rule(
        "long_tasks",
        lambda ctx: ctx.average_task_duration > ctx.config.long_task_minutes,
        "Split long-running tasks into smaller deliverables",
    ),
    Rule(
        "optimistic_estimates",
        lambda ctx: 0 < ctx.metrics.efficiency < ctx.config.low_efficiency,
        "Tasks are taking longer than estimated; add a buffer to your estimates",
    ),
    Rule(
        "peak_outside_work_hours",
        _peak_outside_work_hours,
        "Your most productive hour falls outside your configured work hours",
    ),
    Rule(
        "use_peak_hours",
        lambda ctx: bool(ctx.peak_hours),
        "Schedule your most important tasks during your peak productivity hours",
    ),
)


def rank_peak_hours(buckets: dict[int, float], count: int) -> tuple[int, ...]:
    """Rank hours by logged minutes, earlier hour first on ties."""

    ranked = sorted((item for item in buckets.items() if item[1] > 0), key=lambda item: (-item[1], item[0]))
    return tuple(hour for hour, _ in ranked[:count])


def rank_task_types(tasks) -> tuple[str, ...]:
    """Rank tags of completed tasks by frequency, alphabetically on ties."""

    counts = Counter(tag for task in tasks if task.is_completed for tag in task.tags)
    return tuple(tag for tag, _ in sorted(counts.items(), key=lambda item: (-item[1], item[0])))


def completion_rate(tasks) -> float:
    if not tasks:
        return 0.0
    return sum(1 for task in tasks if task.is_completed) / len(tasks) * 100.0


def generate_insights(
    tasks,
    time_entries,
    preferences: Optional[UserPreferences] = None,
    config: Optional[EngineConfig] = None,
    advisory: Optional[AdvisoryHint] = None,
) -> UserInsights:
    """Derive peak hours, preferred task types, completion rate and suggestions."""

    config = config or EngineConfig()
    metrics = compute_metrics(tasks, time_entries, config)
    valid_tasks, _ = split_tasks(tasks)
    valid_entries, _ = split_entries(time_entries)

    buckets, _ = bucket_by_hour(valid_entries)
    peak_hours = rank_peak_hours(buckets, config.peak_hours_count)

    worked_tasks = {entry.task_id for entry in valid_entries}
    average_task_duration = metrics.focus_time / len(worked_tasks) if worked_tasks else 0.0
    average_session = metrics.focus_time / len(valid_entries) if valid_entries else 0.0
    rate = completion_rate(valid_tasks)

    context = InsightContext(
        metrics=metrics,
        total_tasks=len(valid_tasks),
        completion_rate=rate,
        peak_hours=peak_hours,
        average_task_duration=average_task_duration,
        average_session_length=average_session,
        preferences=preferences,
        config=config,
    )
    advisory_suggestions = advisory.suggestions if advisory is not None else ()

    return UserInsights(
        peak_productivity_hours=peak_hours,
        preferred_task_types=rank_task_types(valid_tasks),
        average_task_duration=average_task_duration,
        completion_rate=rate,
        improvement_suggestions=merge_unique(apply_rules(SUGGESTION_RULES, context), advisory_suggestions),
        warnings=metrics.warnings,
    )
