from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.core.auth import get_current_profile
from app.models.profile import Profile
from app.models.task import Task, APPROVAL_APPROVED
from app.schemas.leaderboard import LeaderboardResponse, LeaderboardEntryResponse, ProgressResponse
from app.services.leaderboard import rank
from app.services.ledger import compute_level, total_reward
from app.services.task_lifecycle import task_view, VIEW_ACTIVE, VIEW_PENDING, VIEW_COMPLETED, VIEW_REJECTED
from app.services.teams import get_team, require_team_role, profile_names

router = APIRouter(prefix="/teams", tags=["leaderboard"])


@router.get("/{team_id}/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    await require_team_role(db, team, profile.id)

    # Recomputed from a fresh snapshot on every request
    result = await db.execute(
        select(Task)
        .where(Task.team_id == team.id)
        .where(Task.completed.is_(True))
        .where(Task.approval_status == APPROVAL_APPROVED)
        .order_by(Task.completed_at, Task.id)
    )
    tasks = result.scalars().all()
    names = await profile_names(db, [t.completed_by for t in tasks])
    entries = rank(tasks, team.bonus_schedule, names)

    return LeaderboardResponse(
        team_id=team.id,
        first_place_reward=team.first_place_reward or 0,
        second_place_reward=team.second_place_reward or 0,
        third_place_reward=team.third_place_reward or 0,
        entries=[LeaderboardEntryResponse.model_validate(e) for e in entries],
    )


@router.get("/{team_id}/progress", response_model=ProgressResponse)
async def get_my_progress(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    """Caller's level within the team plus team task counts."""
    team = await get_team(db, team_id)
    await require_team_role(db, team, profile.id)

    result = await db.execute(select(Task).where(Task.team_id == team.id))
    tasks = result.scalars().all()

    total = total_reward(tasks, profile.id)
    progress = compute_level(total)

    # Same buckets as the task list views
    counts = {VIEW_ACTIVE: 0, VIEW_PENDING: 0, VIEW_COMPLETED: 0, VIEW_REJECTED: 0}
    for task in tasks:
        view = task_view(task)
        if view is not None:
            counts[view] += 1
    success_rate = round(counts[VIEW_COMPLETED] / len(tasks) * 100) if tasks else 0

    return ProgressResponse(
        user_id=profile.id,
        total_reward=total,
        level=progress.level,
        within_level=progress.within_level,
        level_threshold=progress.level_threshold,
        to_next_level=progress.to_next_level,
        active_tasks=counts[VIEW_ACTIVE],
        pending_tasks=counts[VIEW_PENDING],
        completed_tasks=counts[VIEW_COMPLETED],
        rejected_tasks=counts[VIEW_REJECTED],
        total_tasks=len(tasks),
        success_rate=success_rate,
    )
