"""Rule-based recommendations grouped by audience."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from analytics_engine.config import EngineConfig
from analytics_engine.rules import Rule, apply_rules, merge_unique
from analytics_engine.schema import (
    AdvisoryHint,
    ProductivityMetrics,
    Recommendations,
    TeamAnalytics,
    UserInsights,
)

UNASSIGNED = "(unassigned)"


@dataclass(frozen=True)
class TeamContext:
    analytics: TeamAnalytics
    config: EngineConfig


@dataclass(frozen=True)
class RecommendationContext:
    metrics: ProductivityMetrics
    insights: UserInsights
    team: TeamAnalytics
    config: EngineConfig
    advisory: Optional[AdvisoryHint]


def _member_shares(analytics: TeamAnalytics) -> list[float]:
    return [share for member, share in analytics.task_distribution.items() if member != UNASSIGNED]


def _imbalanced(ctx: TeamContext) -> bool:
    shares = _member_shares(ctx.analytics)
    return len(shares) > 1 and max(shares) > ctx.config.imbalance_share


def _has_activity(ctx: RecommendationContext) -> bool:
    return ctx.metrics.tasks_completed > 0 or ctx.metrics.focus_time > 0


TEAM_RULES: tuple[Rule, ...] = (
    Rule(
        "bottlenecks",
        lambda ctx: bool(ctx.analytics.bottleneck_tasks),
        "Review bottleneck tasks that have run well past their estimates",
    ),
    Rule(
        "imbalanced_workload",
        _imbalanced,
        "Redistribute workload to balance team capacity",
    ),
    Rule(
        "unassigned_work",
        lambda ctx: ctx.analytics.task_distribution.get(UNASSIGNED, 0.0) > 0,
        "Assign an owner to completed work that has no assignee",
    ),
    Rule(
        "low_collaboration",
        lambda ctx: bool(ctx.analytics.task_distribution)
        and ctx.analytics.collaboration_score < ctx.config.low_collaboration,
        "Pair on complex tasks to spread knowledge across the team",
    ),
    Rule(
        "low_team_productivity",
        lambda ctx: bool(ctx.analytics.member_productivity)
        and ctx.analytics.team_productivity < ctx.config.low_team_productivity,
        "Improve task prioritization so logged time turns into completed work",
    ),
)


PERSONAL_RULES: tuple[Rule, ...] = (
    Rule(
        "use_peak_hours",
        lambda ctx: bool(ctx.insights.peak_productivity_hours),
        "Focus on high-priority tasks during peak hours",
    ),
    Rule(
        "advisory_priority",
        lambda ctx: ctx.advisory is not None and ctx.advisory.priority_hint in ("high", "urgent"),
        "The task analyzer flagged pending work as high priority; schedule it first",
    ),
    Rule(
        "few_breaks",
        lambda ctx: ctx.metrics.focus_time > 0
        and ctx.metrics.break_time / ctx.metrics.focus_time < ctx.config.min_break_ratio,
        "Take regular breaks to maintain productivity",
    ),
    Rule(
        "low_completion",
        lambda ctx: _has_activity(ctx) and ctx.insights.completion_rate < ctx.config.low_completion_rate,
        "Break down complex tasks into smaller chunks",
    ),
)


SYSTEM_RULES: tuple[Rule, ...] = (
    Rule(
        "estimation_drift",
        lambda ctx: 0 < ctx.metrics.efficiency < ctx.config.low_efficiency,
        "Calibrate default estimates against completion-time predictions",
    ),
    Rule(
        "data_quality",
        lambda ctx: bool(ctx.metrics.warnings or ctx.insights.warnings or ctx.team.warnings),
        "Fix malformed task or time-tracking records excluded from analytics",
    ),
    Rule(
        "untracked_completions",
        lambda ctx: ctx.metrics.tasks_completed > 0 and ctx.metrics.focus_time == 0,
        "Enable time tracking so completed work can be measured",
    ),
)


def team_recommendations(analytics: TeamAnalytics, config: Optional[EngineConfig] = None) -> tuple[str, ...]:
    return tuple(apply_rules(TEAM_RULES, TeamContext(analytics=analytics, config=config or EngineConfig())))


def compose_recommendations(
    metrics: ProductivityMetrics,
    insights: UserInsights,
    team_analytics: TeamAnalytics,
    config: Optional[EngineConfig] = None,
    advisory: Optional[AdvisoryHint] = None,
) -> Recommendations:
    """Map metric, insight and team thresholds to personal, team and system recommendations."""

    config = config or EngineConfig()
    context = RecommendationContext(
        metrics=metrics, insights=insights, team=team_analytics, config=config, advisory=advisory
    )
    advisory_suggestions = advisory.suggestions if advisory is not None else ()
    return Recommendations(
        personal=merge_unique(apply_rules(PERSONAL_RULES, context), advisory_suggestions),
        team=merge_unique(team_analytics.recommendations, team_recommendations(team_analytics, config)),
        system=merge_unique(apply_rules(SYSTEM_RULES, context)),
    )
