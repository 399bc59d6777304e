from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from scavhunt.models.submission import AnswerSubmission


async def list_for_team(session: AsyncSession, team_id: UUID) -> list[AnswerSubmission]:
    return list((await session.execute(
        select(AnswerSubmission)
        .where(AnswerSubmission.team_id == team_id)
        .order_by(AnswerSubmission.submitted_at.desc())
    )).scalars().all())


async def list_for_hunt(session: AsyncSession, hunt_id: UUID, team_id: UUID | None = None, limit: int = 200) -> list[AnswerSubmission]:
    q = select(AnswerSubmission).where(AnswerSubmission.hunt_id == hunt_id)
    if team_id:
        q = q.where(AnswerSubmission.team_id == team_id)
    q = q.order_by(AnswerSubmission.submitted_at.desc()).limit(limit)
    return list((await session.execute(q)).scalars().all())


async def delete_for_clue(session: AsyncSession, clue_id: UUID) -> None:
    await session.execute(delete(AnswerSubmission).where(AnswerSubmission.clue_id == clue_id))


async def delete_for_hunt(session: AsyncSession, hunt_id: UUID) -> None:
    await session.execute(delete(AnswerSubmission).where(AnswerSubmission.hunt_id == hunt_id))
