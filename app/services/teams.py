from typing import Dict, Iterable, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, PermissionDenied
from app.core.permissions import effective_role
from app.models.profile import Profile
from app.models.team import Team, TeamMember
from app.models.task import Task


async def get_team(db: AsyncSession, team_id: int) -> Team:
    team = await db.get(Team, team_id)
    if team is None:
        raise NotFoundError("Team not found")
    return team


async def get_task(db: AsyncSession, task_id: int) -> Task:
    task = await db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


async def get_membership(db: AsyncSession, team_id: int, user_id: int) -> Optional[TeamMember]:
    result = await db.execute(
        select(TeamMember)
        .where(TeamMember.team_id == team_id)
        .where(TeamMember.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def team_role_for(db: AsyncSession, team: Team, user_id: int) -> Optional[str]:
    """Effective team role, or None when the user has no access to the team."""
    if team.owner_id == user_id:
        return effective_role(user_id, team)
    membership = await get_membership(db, team.id, user_id)
    if membership is None:
        return None
    return effective_role(user_id, team, membership)


async def require_team_role(db: AsyncSession, team: Team, user_id: int) -> str:
    role = await team_role_for(db, team, user_id)
    if role is None:
        raise PermissionDenied("Not a member of this team")
    return role


async def is_team_participant(db: AsyncSession, team: Team, user_id: int) -> bool:
    return await team_role_for(db, team, user_id) is not None


async def profile_names(db: AsyncSession, user_ids: Iterable[int]) -> Dict[int, str]:
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    result = await db.execute(select(Profile.id, Profile.full_name).where(Profile.id.in_(ids)))
    return {row[0]: row[1] for row in result.fetchall()}
