from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from scavhunt.models.clue import Clue, EXPRESS_PASS, ROAD_BLOCK
from scavhunt.services.clues import get_clues_by_clue_set
from scavhunt.services.progress import get_progress, gated_clue_set_ids, id_list


async def get_available_express_passes(session: AsyncSession, team_id: UUID) -> list[Clue]:
    """Unsolved express passes in the team's current clue-set."""
    progress = await get_progress(session, team_id)
    if not progress.current_clue_set_id:
        return []
    done = set(id_list(progress.completed_clue_ids))
    clues = await get_clues_by_clue_set(session, progress.current_clue_set_id, EXPRESS_PASS)
    return [c for c in clues if str(c.id) not in done]


async def get_available_road_blocks(session: AsyncSession, team_id: UUID) -> list[Clue]:
    """
    Uncleared road blocks assigned to this team, in its current clue-set or
    in any clue-set it already finished but that is held open by one of them.
    Unassigned road blocks are never listed; they could not be submitted.
    """
    progress = await get_progress(session, team_id)
    assigned = set(id_list(progress.road_block_clue_ids))
    if not assigned:
        return []
    done = set(id_list(progress.completed_clue_ids))

    set_ids: list[UUID] = list(await gated_clue_set_ids(session, progress))
    if progress.current_clue_set_id and progress.current_clue_set_id not in set_ids:
        set_ids.insert(0, progress.current_clue_set_id)

    out: list[Clue] = []
    for set_id in set_ids:
        for c in await get_clues_by_clue_set(session, set_id, ROAD_BLOCK):
            if str(c.id) in assigned and str(c.id) not in done:
                out.append(c)
    return out


async def get_time_adjustment(session: AsyncSession, team_id: UUID) -> int:
    """Sum of `minutes` over solved express passes (negative = time saved)."""
    progress = await get_progress(session, team_id)
    done = [UUID(cid) for cid in id_list(progress.completed_clue_ids)]
    if not done:
        return 0
    total = await session.scalar(
        select(func.coalesce(func.sum(Clue.minutes), 0))
        .where(Clue.id.in_(done), Clue.clue_type == EXPRESS_PASS)
    )
    return int(total or 0)
