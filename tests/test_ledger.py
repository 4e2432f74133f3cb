from types import SimpleNamespace

import pytest

from app.services.ledger import compute_level, total_reward, LEVEL_THRESHOLD


def make_task(user_id, xp, completed=True, status="approved"):
    return SimpleNamespace(completed_by=user_id, xp=xp, completed=completed, approval_status=status)


@pytest.mark.parametrize(
    "total, level, within",
    [(0, 1, 0), (99, 1, 99), (100, 2, 0), (250, 3, 50), (1000, 11, 0)],
)
def test_compute_level_fixed_threshold(total, level, within):
    progress = compute_level(total)
    assert progress.level == level
    assert progress.within_level == within
    assert progress.level_threshold == LEVEL_THRESHOLD
    assert progress.to_next_level == LEVEL_THRESHOLD - within


def test_level_is_monotonic():
    levels = [compute_level(total).level for total in range(0, 1001, 7)]
    assert levels == sorted(levels)


@pytest.mark.parametrize("total", [0, 37, 100, 199])
@pytest.mark.parametrize("k", [0, 1, 5])
def test_adding_whole_levels(total, k):
    assert compute_level(total + k * 100).level == compute_level(total).level + k


def test_negative_total_rejected():
    with pytest.raises(ValueError):
        compute_level(-1)


def test_total_reward_counts_only_approved_tasks_of_the_user():
    tasks = [
        make_task(1, 50),
        make_task(1, 30, status="pending"),
        make_task(1, 20, status="rejected"),
        make_task(2, 70),
        make_task(1, 10, completed=False, status="none"),
    ]
    assert total_reward(tasks, 1) == 50
    assert total_reward(tasks, 2) == 70
    assert total_reward(tasks, 3) == 0
