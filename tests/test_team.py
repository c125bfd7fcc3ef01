from datetime import datetime, timedelta

import pytest

from analytics_engine.config import EngineConfig
from analytics_engine.recommendations import TEAM_RULES, UNASSIGNED
from analytics_engine.schema import Task, TeamAnalytics, TimeEntry
from analytics_engine.team import aggregate_team

BASE = datetime(2025, 1, 6, 9, 0)


def task(task_id, assignee=None, status="completed", estimated=60.0):
    return Task(task_id, "medium", status, estimated, BASE, BASE, assignee=assignee)


def entry(entry_id, task_id, user, minutes, start_minute=0):
    start = BASE + timedelta(minutes=start_minute)
    return TimeEntry(entry_id, task_id, user, start, start + timedelta(minutes=minutes))


def team_text(name):
    return next(rule.text for rule in TEAM_RULES if rule.name == name)


def test_distribution_buckets_unassigned_work_separately():
    tasks = [
        task("t1", "alice"),
        task("t2", "alice"),
        task("t3", "bob"),
        task("t4", None),
        task("t5", "bob", status="todo"),
    ]
    analytics = aggregate_team(tasks, [], ["alice", "bob"])
    assert analytics.task_distribution == {"alice": 0.5, "bob": 0.25, UNASSIGNED: 0.25}
    assert team_text("unassigned_work") in analytics.recommendations


@pytest.mark.parametrize(
    "assignees",
    [["a"], ["a", "b", "c"], ["a", "a", "b"], ["c", "b", "a", "a", "a", "b", "c"], ["a"] * 3 + ["b"] * 7],
)
def test_distribution_shares_sum_to_one(assignees):
    tasks = [task(f"t{i}", assignee) for i, assignee in enumerate(assignees)]
    analytics = aggregate_team(tasks, [], ["a", "b", "c"])
    assert abs(sum(analytics.task_distribution.values()) - 1.0) <= 1e-9
    assert UNASSIGNED not in analytics.task_distribution


def test_distribution_is_zero_without_completed_work():
    analytics = aggregate_team([task("t1", "alice", status="todo")], [], ["alice", "bob"])
    assert analytics.task_distribution == {"alice": 0.0, "bob": 0.0}


def test_bottlenecks_ordered_by_overrun():
    tasks = [
        task("t1", estimated=60),
        task("t2", estimated=60),
        task("t3", estimated=10),
        task("t4", estimated=0),
        task("t5", estimated=30),
    ]
    entries = [
        entry("e1", "t1", "u1", 90),
        entry("e2", "t2", "u1", 89),
        entry("e3", "t3", "u1", 25),
        entry("e4", "t3", "u2", 15),
        entry("e5", "t4", "u1", 5),
    ]
    analytics = aggregate_team(tasks, entries, ["u1", "u2"])
    assert analytics.bottleneck_tasks == ("t4", "t3", "t1")
    assert team_text("bottlenecks") in analytics.recommendations

    stricter = aggregate_team(tasks, entries, ["u1", "u2"], EngineConfig(bottleneck_multiplier=2.0))
    assert stricter.bottleneck_tasks == ("t4", "t3")


def test_collaboration_score_counts_multi_user_tasks():
    tasks = [task(f"t{i}") for i in range(4)]
    entries = [
        entry("e1", "t0", "alice", 10),
        entry("e2", "t0", "bob", 10, start_minute=20),
        entry("e3", "t1", "alice", 10),
        entry("e4", "t1", "alice", 10, start_minute=20),
    ]
    analytics = aggregate_team(tasks, entries, ["alice", "bob"])
    assert analytics.collaboration_score == 0.25


def test_team_productivity_is_mean_of_member_scores():
    tasks = [task("t1", "alice"), task("t2", "bob", status="in-progress")]
    entries = [entry("e1", "t1", "alice", 60), entry("e2", "t2", "bob", 60)]
    analytics = aggregate_team(tasks, entries, ["alice", "bob"])
    assert analytics.member_productivity == {"alice": 10.0, "bob": 0.0}
    assert analytics.team_productivity == pytest.approx(0.05)
    assert 0.0 <= analytics.team_productivity <= 1.0


def test_empty_team_returns_zero_values():
    analytics = aggregate_team([], [], [])
    assert analytics.team_productivity == 0.0
    assert analytics.collaboration_score == 0.0
    assert analytics.task_distribution == {}
    assert analytics.bottleneck_tasks == ()
    assert analytics.recommendations == ()


def test_aggregate_is_deterministic():
    tasks = [task("t1", "alice"), task("t2", "bob"), task("t3", "bob", estimated=5)]
    entries = [entry("e1", "t3", "bob", 30), entry("e2", "t3", "alice", 30, start_minute=40)]
    assert aggregate_team(tasks, entries, ["alice", "bob"]) == aggregate_team(tasks, entries, ["alice", "bob"])


def test_non_finite_estimate_is_not_a_bottleneck():
    tasks = [task("t1", estimated=float("nan")), task("t2", estimated=float("inf")), task("t3", estimated=10)]
    entries = [entry("e1", "t1", "u1", 60), entry("e2", "t2", "u1", 60), entry("e3", "t3", "u1", 60, start_minute=90)]
    analytics = aggregate_team(tasks, entries, ["u1"])
    assert analytics.bottleneck_tasks == ("t3",)
    assert {(w.record_id, w.kind) for w in analytics.warnings} == {("t1", "non_finite_time"), ("t2", "non_finite_time")}


def test_team_analytics_mappings_are_read_only_and_hashable():
    tasks = [task("t1", "alice"), task("t2", "bob")]
    entries = [entry("e1", "t1", "alice", 60)]
    analytics = aggregate_team(tasks, entries, ["alice", "bob"])

    with pytest.raises(TypeError):
        analytics.task_distribution["alice"] = 1.0
    with pytest.raises(TypeError):
        analytics.member_productivity["bob"] = 99.0

    assert analytics.task_distribution == {"alice": 0.5, "bob": 0.5}
    assert hash(analytics) == hash(aggregate_team(tasks, entries, ["alice", "bob"]))
    assert analytics.to_dict()["task_distribution"] == {"alice": 0.5, "bob": 0.5}


def test_team_analytics_copies_the_mappings_it_is_given():
    distribution = {"alice": 1.0}
    analytics = TeamAnalytics(task_distribution=distribution)
    distribution["alice"] = 0.0
    assert analytics.task_distribution == {"alice": 1.0}
