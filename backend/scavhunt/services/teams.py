from __future__ import annotations
from datetime import datetime
from uuid import UUID
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from scavhunt.config import settings
from scavhunt.db import commit_or_raise, flush_or_raise
from scavhunt.errors import NotFound, InvalidState, StoreFailure
from scavhunt.models.hunt import Team
from scavhunt.models.progress import TeamProgress
from scavhunt.models.submission import AnswerSubmission
from scavhunt.services.clues import get_next_clue
from scavhunt.services.hunts import get_hunt
from scavhunt.services.join_codes import generate_code, normalize_code
from scavhunt.services.progress import create_progress, team_progress_lock

log = structlog.get_logger()

async def create_team(session: AsyncSession, hunt_id: UUID, name: str) -> Team:
    """Create a team with a fresh join code and an empty progress record."""
    await get_hunt(session, hunt_id)
    # Generate a unique join code (retry on collision)
    for _ in range(5):
        team = Team(hunt_id=hunt_id, name=name, join_code=generate_code(settings.join_code_length))
        session.add(team)
        try:
            await session.flush()
        except IntegrityError:
            await session.rollback()
            continue
        await create_progress(session, team)
        return team
    raise StoreFailure("Failed to generate unique join code")

async def get_team(session: AsyncSession, team_id: UUID) -> Team:
    team = await session.get(Team, team_id)
    if not team:
        raise NotFound("Team not found")
    return team

async def get_team_by_join_code(session: AsyncSession, join_code: str) -> Team | None:
    return await session.scalar(select(Team).where(Team.join_code == normalize_code(join_code)))

async def list_teams(session: AsyncSession, hunt_id: UUID) -> list[Team]:
    return list((await session.execute(
        select(Team).where(Team.hunt_id == hunt_id).order_by(Team.created_at.asc())
    )).scalars().all())

async def update_team(session: AsyncSession, team_id: UUID, name: str) -> Team:
    team = await get_team(session, team_id)
    team.name = name
    await flush_or_raise(session, "update team")
    return team

async def delete_team(session: AsyncSession, team_id: UUID) -> None:
    team = await get_team(session, team_id)
    await session.execute(delete(AnswerSubmission).where(AnswerSubmission.team_id == team.id))
    await session.execute(delete(TeamProgress).where(TeamProgress.team_id == team.id))
    await session.delete(team)
    await flush_or_raise(session, "delete team")

async def join_hunt(session: AsyncSession, join_code: str, now: datetime) -> Team:
    """
    Attach players to their team by join code.

    Starts the clock on first join and places a team that has never
    progressed on the hunt's first REQUIRED clue.
    """
    team = await get_team_by_join_code(session, join_code)
    if not team:
        raise NotFound("Team not found")
    hunt = await get_hunt(session, team.hunt_id)
    if hunt.status != "active":
        raise InvalidState("This hunt is not currently active")

    async with team_progress_lock(session, team.id):
        progress = await session.get(TeamProgress, team.id)
        if progress is None:
            progress = await create_progress(session, team)
        if progress.started_at is None:
            progress.started_at = now
        if progress.current_clue_id is None and progress.completed_at is None and not progress.completed_clue_ids:
            first = await get_next_clue(session, team.hunt_id, None)
            if first:
                progress.current_clue_id = first.id
                progress.current_clue_set_id = first.clue_set_id
        await commit_or_raise(session, "join hunt")
    log.info("team_joined", team_id=str(team.id), hunt_id=str(team.hunt_id))
    return team
