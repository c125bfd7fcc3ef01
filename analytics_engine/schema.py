"""Core data schema for tasks, time entries and derived analytics."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from analytics_engine.config import ConfigurationError

PRIORITIES = ("low", "medium", "high", "urgent")
STATUSES = ("todo", "in-progress", "completed", "cancelled")
COMPLETED = "completed"


@dataclass(frozen=True)
class Task:
    """Task record supplied by the task store. Times are in minutes."""

    task_id: str
    priority: str
    status: str
    estimated_time: float
    created_at: datetime
    updated_at: datetime
    actual_time: Optional[float] = None
    tags: frozenset[str] = frozenset()
    assignee: Optional[str] = None
    title: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED


@dataclass(frozen=True)
class TimeEntry:
    """A single tracked work interval on one task by one user."""

    entry_id: str
    task_id: str
    user_id: str
    start_time: datetime
    end_time: datetime

    @property
    def duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60.0


@dataclass(frozen=True)
class UserPreferences:
    """Working-pattern preferences from the user profile."""

    work_start_hour: int = 9
    work_end_hour: int = 17
    break_duration: float = 15.0
    focus_duration: float = 90.0

    def __post_init__(self) -> None:
        if not 0 <= self.work_start_hour <= 23:
            raise ConfigurationError(f"work_start_hour must be within 0..23, got {self.work_start_hour!r}")
        if not 1 <= self.work_end_hour <= 24:
            raise ConfigurationError(f"work_end_hour must be within 1..24, got {self.work_end_hour!r}")
        if self.work_start_hour >= self.work_end_hour:
            raise ConfigurationError(
                f"work_start_hour {self.work_start_hour!r} must precede work_end_hour {self.work_end_hour!r}"
            )
        for name in ("break_duration", "focus_duration"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"{name} must be a finite number >= 0, got {value!r}")


@dataclass(frozen=True)
class AdvisoryHint:
    """Optional output of the external LLM task analyzer."""

    priority_hint: Optional[str] = None
    suggestions: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationWarning:
    """A record excluded from aggregation, with the reason."""

    record_id: str
    kind: str
    message: str

    def to_dict(self) -> dict:
        return {"record_id": self.record_id, "kind": self.kind, "message": self.message}


def _warnings_to_list(warnings: tuple[ValidationWarning, ...]) -> list[dict]:
    return [warning.to_dict() for warning in warnings]


@dataclass(frozen=True)
class ProductivityMetrics:
    tasks_completed: int = 0
    average_completion_time: float = 0.0
    productivity_score: float = 0.0
    focus_time: float = 0.0
    break_time: float = 0.0
    efficiency: float = 0.0
    warnings: tuple[ValidationWarning, ...] = ()

    def to_dict(self) -> dict:
        return {
            "tasks_completed": self.tasks_completed,
            "average_completion_time": self.average_completion_time,
            "productivity_score": self.productivity_score,
            "focus_time": self.focus_time,
            "break_time": self.break_time,
            "efficiency": self.efficiency,
            "warnings": _warnings_to_list(self.warnings),
        }


@dataclass(frozen=True)
class UserInsights:
    peak_productivity_hours: tuple[int, ...] = ()
    preferred_task_types: tuple[str, ...] = ()
    average_task_duration: float = 0.0
    completion_rate: float = 0.0
    improvement_suggestions: tuple[str, ...] = ()
    warnings: tuple[ValidationWarning, ...] = ()

    def to_dict(self) -> dict:
        return {
            "peak_productivity_hours": list(self.peak_productivity_hours),
            "preferred_task_types": list(self.preferred_task_types),
            "average_task_duration": self.average_task_duration,
            "completion_rate": self.completion_rate,
            "improvement_suggestions": list(self.improvement_suggestions),
            "warnings": _warnings_to_list(self.warnings),
        }


@dataclass(frozen=True)
class TeamAnalytics:
    team_productivity: float = 0.0
    collaboration_score: float = 0.0
    task_distribution: Mapping[str, float] = field(default_factory=dict)
    bottleneck_tasks: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    member_productivity: Mapping[str, float] = field(default_factory=dict)
    warnings: tuple[ValidationWarning, ...] = ()

    def __post_init__(self) -> None:
        # read-only views over private copies; frozen fields are set through object.__setattr__
        object.__setattr__(self, "task_distribution", MappingProxyType(dict(self.task_distribution)))
        object.__setattr__(self, "member_productivity", MappingProxyType(dict(self.member_productivity)))

    def __hash__(self) -> int:
        return hash(
            (
                self.team_productivity,
                self.collaboration_score,
                tuple(sorted(self.task_distribution.items())),
                self.bottleneck_tasks,
                self.recommendations,
                tuple(sorted(self.member_productivity.items())),
                self.warnings,
            )
        )

    def to_dict(self) -> dict:
        return {
            "team_productivity": self.team_productivity,
            "collaboration_score": self.collaboration_score,
            "task_distribution": dict(self.task_distribution),
            "bottleneck_tasks": list(self.bottleneck_tasks),
            "recommendations": list(self.recommendations),
            "member_productivity": dict(self.member_productivity),
            "warnings": _warnings_to_list(self.warnings),
        }


@dataclass(frozen=True)
class Prediction:
    estimated_time: float
    confidence: float
    factors: tuple[str, ...]
    sample_size: int = 0
    tier: str = "none"
    warnings: tuple[ValidationWarning, ...] = ()

    def to_dict(self) -> dict:
        return {
            "estimated_time": self.estimated_time,
            "confidence": self.confidence,
            "factors": list(self.factors),
            "sample_size": self.sample_size,
            "tier": self.tier,
            "warnings": _warnings_to_list(self.warnings),
        }


@dataclass(frozen=True)
class Recommendations:
    personal: tuple[str, ...] = ()
    team: tuple[str, ...] = ()
    system: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {"personal": list(self.personal), "team": list(self.team), "system": list(self.system)}
