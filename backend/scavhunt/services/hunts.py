from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from scavhunt.db import flush_or_raise
from scavhunt.errors import NotFound
from scavhunt.models.clue import Clue, ClueSet
from scavhunt.models.hunt import Hunt, Team
from scavhunt.models.progress import TeamProgress
from scavhunt.schemas.hunt import HuntCreate, HuntUpdate
from scavhunt.services.submissions import delete_for_hunt

log = structlog.get_logger()

async def create_hunt(session: AsyncSession, data: HuntCreate) -> Hunt:
    hunt = Hunt(name=data.name, description=data.description, status="draft")
    session.add(hunt)
    await flush_or_raise(session, "create hunt")
    return hunt

async def get_hunt(session: AsyncSession, hunt_id: UUID) -> Hunt:
    hunt = await session.get(Hunt, hunt_id)
    if not hunt:
        raise NotFound("Hunt not found")
    return hunt

async def list_hunts(session: AsyncSession) -> list[Hunt]:
    return list((await session.execute(select(Hunt).order_by(Hunt.created_at.desc()))).scalars().all())

async def update_hunt(session: AsyncSession, hunt_id: UUID, data: HuntUpdate) -> Hunt:
    hunt = await get_hunt(session, hunt_id)
    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None and key != "description":
            continue
        setattr(hunt, key, value)
    await flush_or_raise(session, "update hunt")
    if "status" in data.model_fields_set:
        log.info("hunt_status_changed", hunt_id=str(hunt.id), status=hunt.status)
    return hunt

async def delete_hunt(session: AsyncSession, hunt_id: UUID) -> None:
    """Remove the hunt and everything hanging off it."""
    hunt = await get_hunt(session, hunt_id)
    set_ids = select(ClueSet.id).where(ClueSet.hunt_id == hunt.id)
    await delete_for_hunt(session, hunt.id)
    await session.execute(delete(TeamProgress).where(TeamProgress.hunt_id == hunt.id))
    await session.execute(delete(Team).where(Team.hunt_id == hunt.id))
    await session.execute(delete(Clue).where(Clue.clue_set_id.in_(set_ids)))
    await session.execute(delete(ClueSet).where(ClueSet.hunt_id == hunt.id))
    await session.delete(hunt)
    await flush_or_raise(session, "delete hunt")
