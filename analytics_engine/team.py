"""Team-level aggregation of member productivity."""

from __future__ import annotations

import logging
from collections import Counter, defaultdict
from dataclasses import replace
from typing import Optional

from analytics_engine.config import EngineConfig
from analytics_engine.metrics import compute_metrics
from analytics_engine.recommendations import UNASSIGNED, team_recommendations
from analytics_engine.schema import Task, TeamAnalytics, TimeEntry
from analytics_engine.validation import split_entries, split_tasks

logger = logging.getLogger(__name__)


def task_distribution(tasks: list[Task], members: list[str]) -> dict[str, float]:
    """Share of completed tasks per member; work without a known assignee goes to UNASSIGNED."""

    member_set = set(members)
    counts = Counter(
        task.assignee if task.assignee in member_set else UNASSIGNED for task in tasks if task.is_completed
    )
    total = sum(counts.values())
    distribution = {member: (counts[member] / total if total else 0.0) for member in members}
    if counts[UNASSIGNED]:
        distribution[UNASSIGNED] = counts[UNASSIGNED] / total
    return distribution


def logged_minutes_by_task(entries: list[TimeEntry]) -> dict[str, float]:
    logged: dict[str, float] = defaultdict(float)
    for entry in entries:
        logged[entry.task_id] += entry.duration_minutes
    return dict(logged)


def bottleneck_tasks(tasks: list[Task], entries: list[TimeEntry], multiplier: float) -> tuple[str, ...]:
    """Ids of tasks whose logged time reached ``multiplier`` times their estimate, worst first."""

    logged = logged_minutes_by_task(entries)
    flagged = []
    for task in tasks:
        minutes = logged.get(task.task_id, 0.0)
        if minutes <= 0 or minutes < multiplier * task.estimated_time:
            continue
        overrun = minutes / task.estimated_time if task.estimated_time > 0 else float("inf")
        flagged.append((overrun, task.task_id))
    return tuple(task_id for _, task_id in sorted(flagged, key=lambda item: (-item[0], item[1])))


def collaboration_score(tasks: list[Task], entries: list[TimeEntry]) -> float:
    """Fraction of tasks worked on by more than one user."""

    if not tasks:
        return 0.0
    users_by_task: dict[str, set[str]] = defaultdict(set)
    for entry in entries:
        users_by_task[entry.task_id].add(entry.user_id)
    shared = sum(1 for task in tasks if len(users_by_task.get(task.task_id, ())) > 1)
    return shared / len(tasks)


def aggregate_team(team_tasks, team_time_entries, members, config: Optional[EngineConfig] = None) -> TeamAnalytics:
    """Aggregate per-member productivity into team analytics."""

    config = config or EngineConfig()
    members = list(dict.fromkeys(members))
    tasks, task_warnings = split_tasks(team_tasks)
    entries, entry_warnings = split_entries(team_time_entries)

    member_productivity = {}
    for member in members:
        member_metrics = compute_metrics(
            [task for task in tasks if task.assignee == member],
            [entry for entry in entries if entry.user_id == member],
            config,
        )
        member_productivity[member] = member_metrics.productivity_score

    team_productivity = (
        sum(member_productivity.values()) / len(member_productivity) / 100.0 if member_productivity else 0.0
    )
    logger.debug("Aggregated %d members over %d tasks", len(members), len(tasks))

    analytics = TeamAnalytics(
        team_productivity=team_productivity,
        collaboration_score=collaboration_score(tasks, entries),
        task_distribution=task_distribution(tasks, members),
        bottleneck_tasks=bottleneck_tasks(tasks, entries, config.bottleneck_multiplier),
        member_productivity=member_productivity,
        warnings=tuple(task_warnings + entry_warnings),
    )
    return replace(analytics, recommendations=team_recommendations(analytics, config))
