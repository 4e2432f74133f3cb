from typing import List, Literal
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.core.auth import get_current_profile
from app.models.profile import Profile
from app.models.task import Task
from app.schemas.task import TaskCreate, TaskComplete, TaskReview, TaskResponse
from app.services import task_lifecycle
from app.services.teams import get_team, get_task, require_team_role

router = APIRouter(tags=["tasks"])

TaskView = Literal["active", "pending", "completed", "rejected", "all"]


def view_filter(query, view: str):
    clause = task_lifecycle.view_clause(view)
    return query if clause is None else query.where(clause)


async def load_task(db: AsyncSession, task_id: int, profile: Profile):
    """Task plus the caller's role in its team; non-members get 403."""
    task = await get_task(db, task_id)
    team = await get_team(db, task.team_id)
    role = await require_team_role(db, team, profile.id)
    return task, role


@router.post("/teams/{team_id}/tasks", response_model=TaskResponse, status_code=201)
async def create_task(
    team_id: int,
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    role = await require_team_role(db, team, profile.id)
    task = await task_lifecycle.create_task(
        db, team, profile, role,
        title=task_in.title,
        description=task_in.description,
        xp=task_in.xp,
        location=task_in.location,
        assigned_to=task_in.assigned_to,
    )
    return TaskResponse.from_task(task)


@router.get("/teams/{team_id}/tasks", response_model=List[TaskResponse])
async def get_team_tasks(
    team_id: int,
    view: TaskView = Query("all"),
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    team = await get_team(db, team_id)
    await require_team_role(db, team, profile.id)

    query = select(Task).where(Task.team_id == team.id)
    query = view_filter(query, view).order_by(Task.created_at.desc(), Task.id.desc())
    result = await db.execute(query)
    return [TaskResponse.from_task(t) for t in result.scalars().all()]


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task_detail(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, _ = await load_task(db, task_id, profile)
    return TaskResponse.from_task(task)


@router.post("/tasks/{task_id}/reserve", response_model=TaskResponse)
async def reserve_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, role = await load_task(db, task_id, profile)
    task = await task_lifecycle.reserve(db, task, profile, role)
    return TaskResponse.from_task(task)


@router.post("/tasks/{task_id}/release", response_model=TaskResponse)
async def release_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, role = await load_task(db, task_id, profile)
    task = await task_lifecycle.release(db, task, profile, role)
    return TaskResponse.from_task(task)


@router.post("/tasks/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: int,
    complete_in: TaskComplete,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, role = await load_task(db, task_id, profile)
    task = await task_lifecycle.complete(db, task, profile, role, complete_in.photo_urls)
    return TaskResponse.from_task(task)


@router.post("/tasks/{task_id}/review", response_model=TaskResponse)
async def review_task(
    task_id: int,
    review_in: TaskReview,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, role = await load_task(db, task_id, profile)
    task = await task_lifecycle.review(db, task, profile, role, review_in.decision)
    return TaskResponse.from_task(task)


@router.delete("/tasks/{task_id}", status_code=204)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    profile: Profile = Depends(get_current_profile)
):
    task, role = await load_task(db, task_id, profile)
    await task_lifecycle.delete_task(db, task, profile, role)
