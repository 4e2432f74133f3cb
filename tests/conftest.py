# tests/conftest.py
import os
import tempfile
import uuid
from types import SimpleNamespace

# Settings are read at import time, so the environment must be ready first
_TMP = tempfile.mkdtemp(prefix="questboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP}/api.db"
os.environ["STORAGE_ROOT"] = os.path.join(_TMP, "storage")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["MULTI_PHOTO_WORKFLOW"] = "true"
os.environ["ENFORCE_ASSIGNEE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.database import Base
from app.main import app
from app.models.profile import Profile
from app.models.task import Task
from app.models.team import Team, TeamMember
from app.models.user import User

PASSWORD = "correct-horse-42"
PHOTOS = [
    "http://localhost:8000/storage/task-photos/1/a.jpg",
    "http://localhost:8000/storage/task-photos/1/b.jpg",
    "http://localhost:8000/storage/task-photos/1/c.jpg",
]


# ---------- API fixtures ----------

@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def make_user(client):
    """Register + log in an account; returns id, headers and token."""

    def _make(role: str = "employee", full_name: str = "Jan Novak"):
        email = f"{role}-{uuid.uuid4().hex[:10]}@questboard.io"
        r = client.post(
            "/auth/register",
            json={"email": email, "password": PASSWORD, "full_name": full_name, "role": role},
        )
        assert r.status_code == 201, r.text
        r = client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert r.status_code == 200, r.text
        body = r.json()
        return SimpleNamespace(
            id=body["user"]["id"],
            email=email,
            token=body["access_token"],
            refresh_token=body["refresh_token"],
            headers={"Authorization": f"Bearer {body['access_token']}"},
        )

    return _make


@pytest.fixture()
def team_setup(client, make_user):
    """An employer-owned team with two joined employees."""
    employer = make_user("employer", "Eva Boss")
    r = client.post(
        "/teams",
        json={"name": "Warehouse", "first_place_reward": 500, "second_place_reward": 300, "third_place_reward": 100},
        headers=employer.headers,
    )
    assert r.status_code == 201, r.text
    team_id = r.json()["id"]

    alice = make_user("employee", "Alice")
    bob = make_user("employee", "Bob")
    for member in (alice, bob):
        r = client.post(f"/teams/{team_id}/join", headers=member.headers)
        assert r.status_code == 200, r.text

    return SimpleNamespace(team_id=team_id, employer=employer, alice=alice, bob=bob)


# ---------- service-level fixtures ----------

@pytest.fixture()
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'lifecycle.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


class Factory:
    """Inserts rows directly, bypassing the HTTP layer."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def profile(self, role: str = "employee", full_name: str = "Worker") -> Profile:
        user = User(email=f"{uuid.uuid4().hex[:10]}@questboard.io", hashed_password="x")
        self.db.add(user)
        await self.db.flush()
        profile = Profile(id=user.id, full_name=full_name, role=role)
        self.db.add(profile)
        await self.db.commit()
        return profile

    async def team(self, owner: Profile, **rewards) -> Team:
        team = Team(name="Crew", owner_id=owner.id, **rewards)
        self.db.add(team)
        await self.db.commit()
        await self.db.refresh(team)
        return team

    async def member(self, team: Team, profile: Profile, role: str = "employee") -> TeamMember:
        member = TeamMember(team_id=team.id, user_id=profile.id, role=role)
        self.db.add(member)
        await self.db.commit()
        return member

    async def task(self, team: Team, xp: int = 50, **fields) -> Task:
        task = Task(team_id=team.id, title="Sweep the floor", xp=xp, **fields)
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task


@pytest.fixture()
def factory(db):
    return Factory(db)
