from __future__ import annotations
import os
import tempfile

# Point the app at a throwaway SQLite file before anything imports scavhunt.config
_DB_PATH = os.path.join(tempfile.gettempdir(), f"scavhunt-test-{os.getpid()}.db")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
os.environ["JWT_SECRET"] = "test-secret"

from datetime import datetime, timezone
import httpx
import pytest
import pytest_asyncio

from scavhunt.db import Base, engine, SessionLocal
from scavhunt.main import app
from scavhunt.models.clue import Clue, ClueSet
from scavhunt.models.hunt import Hunt, Team
from scavhunt.models.progress import TeamProgress
from scavhunt.schemas.clue import ClueCreate
from scavhunt.schemas.hunt import HuntCreate
from scavhunt.services import clues as clue_repo
from scavhunt.services import hunts as hunt_svc
from scavhunt.services import teams as team_svc
from scavhunt.services.obscure import Obscurer
from scavhunt.services.progress import get_progress


@pytest_asyncio.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield


@pytest_asyncio.fixture
async def session(db):
    async with SessionLocal() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return {"X-Admin-Key": "test-admin-key"}


@pytest.fixture
def obscurer() -> Obscurer:
    return Obscurer("test-obscure-key")


class Builder:
    """Seeds hunts, clue-sets, clues and teams straight through the services."""

    def __init__(self, session, obscurer: Obscurer):
        self.session = session
        self.obscurer = obscurer

    async def hunt(self, name: str = "Campus Hunt", status: str = "active") -> Hunt:
        hunt = await hunt_svc.create_hunt(self.session, HuntCreate(name=name))
        hunt.status = status
        await self.session.commit()
        return hunt

    async def clue_set(self, hunt: Hunt, name: str = "Set") -> ClueSet:
        cs = await clue_repo.create_clue_set(self.session, hunt.id, name)
        await self.session.commit()
        return cs

    async def clue(
        self,
        clue_set: ClueSet,
        answer: str | None = "answer",
        clue_type: str = "REQUIRED",
        allows_media: bool = False,
        minutes: int | None = None,
    ) -> Clue:
        data = ClueCreate(
            clue_type=clue_type,
            prompt=f"Find the {clue_type.lower()} thing",
            correct_answer=answer,
            allows_media=allows_media,
            minutes=minutes,
        )
        clue = await clue_repo.create_clue(self.session, clue_set.id, data, self.obscurer)
        await self.session.commit()
        return clue

    async def team(self, hunt: Hunt, name: str = "Red Team") -> Team:
        team = await team_svc.create_team(self.session, hunt.id, name)
        await self.session.commit()
        return team

    async def joined_team(self, hunt: Hunt, name: str = "Red Team") -> tuple[Team, TeamProgress]:
        team = await self.team(hunt, name)
        await team_svc.join_hunt(self.session, team.join_code, datetime.now(timezone.utc))
        return team, await get_progress(self.session, team.id)


@pytest.fixture
def build(session, obscurer) -> Builder:
    return Builder(session, obscurer)
