from types import SimpleNamespace

from app.services.leaderboard import rank, group_rewards, UNKNOWN_NAME

BONUSES = {1: 500, 2: 300, 3: 100}


def approved(user_id, xp):
    return SimpleNamespace(completed_by=user_id, xp=xp, completed=True, approval_status="approved")


def test_bonus_scenario_with_tie_broken_by_first_seen():
    tasks = [approved(10, 100), approved(20, 150), approved(10, 100), approved(30, 150)]
    names = {10: "Alice", 20: "Bob", 30: "Cyril", 40: "Dana"}

    entries = rank(tasks, BONUSES, names)

    assert [(e.user_id, e.total_reward, e.rank, e.bonus) for e in entries] == [
        (10, 200, 1, 500),
        (20, 150, 2, 300),
        (30, 150, 3, 100),
    ]
    # no approved work, no entry
    assert 40 not in {e.user_id for e in entries}


def test_ties_get_distinct_consecutive_ranks():
    tasks = [approved(3, 80), approved(1, 80), approved(2, 80)]
    entries = rank(tasks, BONUSES)
    assert [e.user_id for e in entries] == [3, 1, 2]
    assert [e.rank for e in entries] == [1, 2, 3]


def test_rank_is_stable_across_runs():
    tasks = [approved(5, 10), approved(6, 30), approved(7, 10), approved(8, 30)]
    first = rank(tasks, BONUSES)
    second = rank(tasks, BONUSES)
    assert first == second


def test_fourth_place_and_below_get_no_bonus():
    tasks = [approved(i, 100 - i) for i in range(1, 6)]
    entries = rank(tasks, BONUSES)
    assert [e.bonus for e in entries] == [500, 300, 100, 0, 0]


def test_unapproved_and_anonymous_tasks_are_ignored():
    tasks = [
        approved(1, 40),
        SimpleNamespace(completed_by=2, xp=90, completed=True, approval_status="pending"),
        SimpleNamespace(completed_by=3, xp=90, completed=True, approval_status="rejected"),
        SimpleNamespace(completed_by=None, xp=90, completed=True, approval_status="approved"),
    ]
    assert group_rewards(tasks) == {1: 40}


def test_unknown_user_gets_placeholder_name():
    entries = rank([approved(99, 10)], BONUSES, names={})
    assert entries[0].full_name == UNKNOWN_NAME


def test_empty_bonus_schedule():
    entries = rank([approved(1, 10)], {})
    assert entries[0].bonus == 0
