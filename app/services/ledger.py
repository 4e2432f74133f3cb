from dataclasses import dataclass
from typing import Iterable

from app.models.task import APPROVAL_APPROVED

LEVEL_THRESHOLD = 100


@dataclass(frozen=True)
class LevelProgress:
    level: int
    within_level: int
    level_threshold: int = LEVEL_THRESHOLD

    @property
    def to_next_level(self) -> int:
        return self.level_threshold - self.within_level


def compute_level(total_reward: int) -> LevelProgress:
    """Level N needs a cumulative reward of at least (N - 1) * 100."""
    if total_reward < 0:
        raise ValueError("total_reward must be non-negative")
    return LevelProgress(
        level=total_reward // LEVEL_THRESHOLD + 1,
        within_level=total_reward % LEVEL_THRESHOLD,
    )


def is_counted(task) -> bool:
    return bool(task.completed) and task.approval_status == APPROVAL_APPROVED


def total_reward(tasks: Iterable, user_id: int) -> int:
    """Sum of xp over the user's completed and approved tasks."""
    return sum(t.xp or 0 for t in tasks if t.completed_by == user_id and is_counted(t))
