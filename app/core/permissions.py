# app/core/permissions.py
"""
Team role resolution and the capability gate.

Two independent role axes are combined at every gate:
  - the global account role set at sign-up ("employer" / "employee")
  - the per-team role ("owner" / "manager" / "employee")
"""
from enum import Enum
from typing import Optional

from app.core.errors import PermissionDenied
from app.models.profile import EMPLOYER, EMPLOYEE

OWNER = "owner"
MANAGER = "manager"
MEMBER = "employee"
TEAM_ROLES = (OWNER, MANAGER, MEMBER)


class Action(str, Enum):
    CREATE_TEAM = "create_team"
    CREATE_TASK = "create_task"
    RESERVE_TASK = "reserve_task"
    COMPLETE_TASK = "complete_task"
    APPROVE_TASK = "approve_task"
    DELETE_TASK = "delete_task"
    RELEASE_ANY = "release_any"
    MANAGE_MEMBERS = "manage_members"
    MANAGE_TEAM = "manage_team"
    POST_MESSAGE = "post_message"


def effective_role(user_id: int, team, membership=None) -> str:
    """
    owner if the user owns the team, else the membership role.
    A missing membership row (or an empty role) counts as "employee".
    """
    if team.owner_id == user_id:
        return OWNER
    if membership is None or not getattr(membership, "role", None):
        return MEMBER
    return membership.role


def can(global_role: str, team_role: Optional[str], action: Action) -> bool:
    privileged = global_role == EMPLOYER or team_role in (OWNER, MANAGER)

    if action == Action.CREATE_TEAM:
        return global_role == EMPLOYER
    if action in (Action.CREATE_TASK, Action.APPROVE_TASK, Action.DELETE_TASK, Action.RELEASE_ANY):
        return privileged
    if action in (Action.RESERVE_TASK, Action.COMPLETE_TASK):
        return global_role == EMPLOYEE
    if action in (Action.MANAGE_MEMBERS, Action.MANAGE_TEAM):
        return team_role == OWNER
    if action == Action.POST_MESSAGE:
        return team_role in TEAM_ROLES
    return False


def require(global_role: str, team_role: Optional[str], action: Action) -> None:
    if not can(global_role, team_role, action):
        raise PermissionDenied(f"Not allowed to {action.value.replace('_', ' ')}")
