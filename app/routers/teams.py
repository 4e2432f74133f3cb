# app/routers/teams.py
import logging
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.auth import get_current_profile
from app.core.errors import ConflictError, NotFoundError, ValidationError
from app.core.permissions import Action, OWNER, require
from app.models.profile import Profile
from app.models.team import Team, TeamMember
from app.models.task import Task
from app.models.message import Message
from app.schemas.team import TeamCreate, TeamRewardsUpdate, TeamResponse, MemberResponse, MemberRoleUpdate
from app.services.change_feed import change_feed, DELETE
from app.services.leaderboard import UNKNOWN_NAME
from app.services.teams import get_team, get_membership, require_team_role, team_role_for, profile_names
from app.utils.photos import decode_photos

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/teams", tags=["teams"])


def team_response(team: Team, role=None) -> TeamResponse:
    response = TeamResponse.model_validate(team)
    response.my_role = role
    return response


async def delete_team_cascade(db: AsyncSession, team: Team) -> None:
    """Delete a team with its tasks, memberships and messages. Caller commits."""
    photos = await db.execute(select(Task.photo_url).where(Task.team_id == team.id))
    orphaned = sum(len(decode_photos(row[0])) for row in photos.fetchall())

    await db.execute(delete(Message).where(Message.team_id == team.id))
    await db.execute(delete(Task).where(Task.team_id == team.id))
    await db.execute(delete(TeamMember).where(TeamMember.team_id == team.id))
    await db.execute(delete(Team).where(Team.id == team.id))
    if orphaned:
        logger.warning("Team %s deleted with %d orphaned evidence object(s)", team.id, orphaned)


@router.post("", response_model=TeamResponse, status_code=201)
async def create_team(
    team_in: TeamCreate,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    require(profile.role, None, Action.CREATE_TEAM)

    team = Team(
        name=team_in.name,
        owner_id=profile.id,
        first_place_reward=team_in.first_place_reward,
        second_place_reward=team_in.second_place_reward,
        third_place_reward=team_in.third_place_reward,
    )
    db.add(team)
    await db.commit()
    await db.refresh(team)
    logger.info("Team %s created by user %s", team.id, profile.id)
    return team_response(team, OWNER)


@router.get("", response_model=List[TeamResponse])
async def get_my_teams(
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    """Teams the caller owns or belongs to."""
    member_of = select(TeamMember.team_id).where(TeamMember.user_id == profile.id)
    result = await db.execute(
        select(Team)
        .where(or_(Team.owner_id == profile.id, Team.id.in_(member_of)))
        .order_by(Team.created_at.desc(), Team.id.desc())
    )
    teams = result.scalars().all()

    memberships = await db.execute(
        select(TeamMember.team_id, TeamMember.role).where(TeamMember.user_id == profile.id)
    )
    roles = {row[0]: row[1] for row in memberships.fetchall()}
    return [
        team_response(team, OWNER if team.owner_id == profile.id else roles.get(team.id) or "employee")
        for team in teams
    ]


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team_detail(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    role = await require_team_role(db, team, profile.id)
    return team_response(team, role)


@router.patch("/{team_id}/rewards", response_model=TeamResponse)
async def update_rewards(
    team_id: int,
    rewards_in: TeamRewardsUpdate,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    role = await team_role_for(db, team, profile.id)
    require(profile.role, role, Action.MANAGE_TEAM)

    team.first_place_reward = rewards_in.first_place_reward
    team.second_place_reward = rewards_in.second_place_reward
    team.third_place_reward = rewards_in.third_place_reward
    db.add(team)
    await db.commit()
    await db.refresh(team)
    return team_response(team, role)


@router.delete("/{team_id}", status_code=204)
async def delete_team(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    role = await team_role_for(db, team, profile.id)
    require(profile.role, role, Action.MANAGE_TEAM)

    await delete_team_cascade(db, team)
    await db.commit()
    logger.info("Team %s deleted by user %s", team_id, profile.id)
    change_feed.publish("teams", DELETE, {"id": team_id, "team_id": team_id})


@router.post("/{team_id}/join", response_model=TeamResponse)
async def join_team(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    if team.owner_id == profile.id:
        raise ConflictError("Owner is already part of the team")
    if await get_membership(db, team.id, profile.id) is not None:
        raise ConflictError("Already a member of this team")

    db.add(TeamMember(team_id=team.id, user_id=profile.id, role="employee"))
    await db.commit()
    logger.info("User %s joined team %s", profile.id, team.id)
    return team_response(team, "employee")


@router.get("/{team_id}/members", response_model=List[MemberResponse])
async def get_members(
    team_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    await require_team_role(db, team, profile.id)

    result = await db.execute(
        select(TeamMember)
        .where(TeamMember.team_id == team.id)
        .order_by(TeamMember.joined_at, TeamMember.id)
    )
    members = result.scalars().all()
    names = await profile_names(db, [m.user_id for m in members])
    return [
        MemberResponse(
            user_id=m.user_id,
            full_name=names.get(m.user_id) or UNKNOWN_NAME,
            role=m.role or "employee",
            joined_at=m.joined_at,
        )
        for m in members
    ]


@router.patch("/{team_id}/members/{user_id}", response_model=MemberResponse)
async def update_member_role(
    team_id: int,
    user_id: int,
    role_in: MemberRoleUpdate,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    """Promote a member to manager or demote back to employee (owner only)."""
    team = await get_team(db, team_id)
    role = await team_role_for(db, team, profile.id)
    require(profile.role, role, Action.MANAGE_MEMBERS)
    if user_id == profile.id:
        raise ValidationError("Owner role cannot be changed")

    member = await get_membership(db, team.id, user_id)
    if member is None:
        raise NotFoundError("Member not found")

    member.role = role_in.role
    db.add(member)
    await db.commit()
    await db.refresh(member)
    logger.info("User %s is now %s in team %s", user_id, member.role, team.id)

    names = await profile_names(db, [user_id])
    return MemberResponse(
        user_id=member.user_id,
        full_name=names.get(user_id) or UNKNOWN_NAME,
        role=member.role,
        joined_at=member.joined_at,
    )
