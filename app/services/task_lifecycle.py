# app/services/task_lifecycle.py
"""
Task lifecycle: create -> (reserve/release) -> complete -> review, or delete.

Derived states:
  open              not completed, not reserved
  reserved          held by one employee
  pending_approval  completed with evidence, awaiting review
  approved          terminal; the reward counts
  rejected          completed stays true but the reward does not count;
                    may be reserved/completed again (resubmission)

Every state change is a single conditional UPDATE, so two concurrent
requests cannot both win; the loser gets ConflictError and nothing is
written on its behalf.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import update, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import ConflictError, PermissionDenied, ValidationError
from app.core.permissions import Action, can, require
from app.models.profile import Profile
from app.models.task import (
    Task,
    APPROVAL_NONE,
    APPROVAL_PENDING,
    APPROVAL_APPROVED,
    APPROVAL_REJECTED,
)
from app.models.team import Team
from app.services.change_feed import change_feed, publish_row, INSERT, UPDATE, DELETE
from app.services.teams import get_membership
from app.utils.photos import encode_photos, decode_photos

logger = logging.getLogger(__name__)

OPEN = "open"
RESERVED = "reserved"
PENDING_APPROVAL = "pending_approval"
APPROVED = "approved"
REJECTED = "rejected"

REVIEW_DECISIONS = (APPROVAL_APPROVED, APPROVAL_REJECTED)


def task_state(task: Task) -> str:
    if task.completed and task.approval_status == APPROVAL_APPROVED:
        return APPROVED
    if task.completed and task.approval_status != APPROVAL_REJECTED:
        return PENDING_APPROVAL
    if task.reserved_by is not None:
        return RESERVED
    if task.completed:
        return REJECTED
    return OPEN


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Rows that are "effectively open": never completed, or completed and rejected
_reopenable = or_(Task.completed.is_(False), Task.approval_status == APPROVAL_REJECTED)


# Listing buckets. A rejected task stays out of "active" even while re-reserved;
# it comes back only through resubmission (pending).
VIEW_ACTIVE = "active"
VIEW_PENDING = "pending"
VIEW_COMPLETED = "completed"
VIEW_REJECTED = "rejected"

_VIEW_STATUS = {
    VIEW_PENDING: APPROVAL_PENDING,
    VIEW_COMPLETED: APPROVAL_APPROVED,
    VIEW_REJECTED: APPROVAL_REJECTED,
}


def task_view(task: Task) -> Optional[str]:
    if not task.completed:
        return VIEW_ACTIVE
    for view, status in _VIEW_STATUS.items():
        if task.approval_status == status:
            return view
    return None


def view_clause(view: str):
    """SQL filter matching task_view(task) == view; None for "all"."""
    if view == VIEW_ACTIVE:
        return Task.completed.is_(False)
    if view in _VIEW_STATUS:
        return and_(Task.completed.is_(True), Task.approval_status == _VIEW_STATUS[view])
    return None


def validate_evidence(photos: Optional[Sequence[str]], minimum: Optional[int] = None) -> List[str]:
    minimum = settings.min_evidence_photos if minimum is None else minimum
    urls = [p.strip() for p in (photos or []) if p and p.strip()]
    if len(urls) < minimum:
        noun = "photo" if minimum == 1 else "photos"
        raise ValidationError(f"At least {minimum} evidence {noun} required, got {len(urls)}")
    if len(urls) > settings.MAX_EVIDENCE_PHOTOS:
        raise ValidationError(f"At most {settings.MAX_EVIDENCE_PHOTOS} evidence photos allowed")
    return urls


async def _apply(db: AsyncSession, task: Task, stmt, conflict: str) -> None:
    task_id = task.id
    result = await db.execute(stmt.execution_options(synchronize_session=False))
    if result.rowcount != 1:
        await db.rollback()
        logger.warning("Task %s: %s", task_id, conflict)
        raise ConflictError(conflict)
    await db.commit()
    await db.refresh(task)
    publish_row("tasks", UPDATE, task)


async def create_task(
    db: AsyncSession,
    team: Team,
    actor: Profile,
    team_role: Optional[str],
    *,
    title: str,
    description: Optional[str] = None,
    xp: int = 0,
    location: Optional[str] = None,
    assigned_to: Optional[int] = None,
) -> Task:
    require(actor.role, team_role, Action.CREATE_TASK)
    if xp < 0:
        raise ValidationError("Reward must be non-negative")

    if assigned_to is not None and assigned_to != team.owner_id:
        if await get_membership(db, team.id, assigned_to) is None:
            raise ValidationError("Assignee is not a member of this team")

    task = Task(
        team_id=team.id,
        created_by=actor.id,
        title=title,
        description=description,
        xp=xp,
        location=location,
        assigned_to=assigned_to,
        completed=False,
        approval_status=APPROVAL_NONE,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    logger.info("Task %s created in team %s by user %s (xp=%s)", task.id, team.id, actor.id, xp)
    publish_row("tasks", INSERT, task)
    return task


async def reserve(db: AsyncSession, task: Task, actor: Profile, team_role: Optional[str]) -> Task:
    require(actor.role, team_role, Action.RESERVE_TASK)
    state = task_state(task)
    if state == RESERVED:
        raise ConflictError("Task is already reserved")
    if state not in (OPEN, REJECTED):
        raise ConflictError(f"Task cannot be reserved while {state}")

    stmt = (
        update(Task)
        .where(Task.id == task.id)
        .where(Task.reserved_by.is_(None))
        .where(_reopenable)
        .values(reserved_by=actor.id, reserved_at=_now())
    )
    await _apply(db, task, stmt, "Task was reserved by someone else")
    logger.info("Task %s reserved by user %s", task.id, actor.id)
    return task


async def release(db: AsyncSession, task: Task, actor: Profile, team_role: Optional[str]) -> Task:
    holder = task.reserved_by
    if holder != actor.id and not can(actor.role, team_role, Action.RELEASE_ANY):
        raise PermissionDenied("Only the reservation holder can release this task")
    if task_state(task) != RESERVED:
        raise ConflictError("Task is not reserved")

    stmt = (
        update(Task)
        .where(Task.id == task.id)
        .where(Task.reserved_by == holder)
        .values(reserved_by=None, reserved_at=None)
    )
    await _apply(db, task, stmt, "Reservation changed concurrently")
    logger.info("Task %s released by user %s (holder was %s)", task.id, actor.id, holder)
    return task


async def complete(
    db: AsyncSession,
    task: Task,
    actor: Profile,
    team_role: Optional[str],
    photos: Optional[Sequence[str]],
) -> Task:
    require(actor.role, team_role, Action.COMPLETE_TASK)
    state = task_state(task)
    if state == RESERVED and task.reserved_by != actor.id:
        raise ConflictError("Task is reserved by another user")
    if state not in (OPEN, RESERVED, REJECTED):
        raise ConflictError(f"Task cannot be completed while {state}")
    if settings.ENFORCE_ASSIGNEE and task.assigned_to is not None and task.assigned_to != actor.id:
        raise PermissionDenied("Task is assigned to another user")

    urls = validate_evidence(photos)

    stmt = (
        update(Task)
        .where(Task.id == task.id)
        .where(_reopenable)
        .where(or_(Task.reserved_by.is_(None), Task.reserved_by == actor.id))
        .values(
            completed=True,
            completed_by=actor.id,
            photo_url=encode_photos(urls),
            completed_at=_now(),
            approval_status=APPROVAL_PENDING,
            reserved_by=None,
            reserved_at=None,
        )
    )
    await _apply(db, task, stmt, "Task changed while completing it")
    logger.info("Task %s completed by user %s with %d photo(s)", task.id, actor.id, len(urls))
    return task


async def review(
    db: AsyncSession,
    task: Task,
    actor: Profile,
    team_role: Optional[str],
    decision: str,
) -> Task:
    """Approve or reject a pending submission; the only way a reward becomes countable."""
    require(actor.role, team_role, Action.APPROVE_TASK)
    if decision not in REVIEW_DECISIONS:
        raise ValidationError(f"Decision must be one of {', '.join(REVIEW_DECISIONS)}")
    state = task_state(task)
    if state != PENDING_APPROVAL:
        raise ConflictError(f"Only tasks pending approval can be reviewed (task is {state})")

    stmt = (
        update(Task)
        .where(Task.id == task.id)
        .where(and_(Task.completed.is_(True), Task.approval_status == APPROVAL_PENDING))
        .values(approval_status=decision)
    )
    await _apply(db, task, stmt, "Task was already reviewed")
    logger.info("Task %s %s by user %s", task.id, decision, actor.id)
    return task


async def delete_task(db: AsyncSession, task: Task, actor: Profile, team_role: Optional[str]) -> None:
    require(actor.role, team_role, Action.DELETE_TASK)
    task_id, team_id = task.id, task.team_id
    photos = decode_photos(task.photo_url)

    await db.delete(task)
    await db.commit()
    logger.info("Task %s deleted by user %s", task_id, actor.id)
    if photos:
        # Evidence objects are not removed from storage
        logger.warning("Task %s deleted with %d orphaned evidence object(s)", task_id, len(photos))
    change_feed.publish("tasks", DELETE, {"id": task_id, "team_id": team_id})
