from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional

from app.services.ledger import is_counted

UNKNOWN_NAME = "Unknown"


@dataclass
class LeaderboardEntry:
    user_id: int
    full_name: str
    total_reward: int
    rank: int
    bonus: int


def group_rewards(tasks: Iterable) -> Dict[int, int]:
    """user_id -> summed xp, keyed in order of first appearance."""
    totals: Dict[int, int] = {}
    for task in tasks:
        if not is_counted(task) or task.completed_by is None:
            continue
        totals[task.completed_by] = totals.get(task.completed_by, 0) + (task.xp or 0)
    return totals


def rank(
    tasks: Iterable,
    bonus_schedule: Mapping[int, int],
    names: Optional[Mapping[int, str]] = None,
) -> List[LeaderboardEntry]:
    """
    Rank users by approved reward, highest first.

    Ties keep first-seen order (sorted() is stable) and still get distinct
    consecutive ranks. Only ranks 1-3 carry a bonus.
    """
    names = names or {}
    totals = group_rewards(tasks)
    ordered = sorted(totals.items(), key=lambda item: item[1], reverse=True)

    entries = []
    for index, (user_id, total) in enumerate(ordered):
        position = index + 1
        entries.append(
            LeaderboardEntry(
                user_id=user_id,
                full_name=names.get(user_id) or UNKNOWN_NAME,
                total_reward=total,
                rank=position,
                bonus=bonus_schedule.get(position, 0) if position <= 3 else 0,
            )
        )
    return entries
