from __future__ import annotations
import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from scavhunt.db import commit_or_raise, flush_or_raise
from scavhunt.errors import NotFound, ValidationFailed
from scavhunt.models.clue import Clue, ClueSet, ROAD_BLOCK
from scavhunt.models.hunt import Team
from scavhunt.models.progress import TeamProgress
from scavhunt.services.clues import get_clues_by_ids, required_clue_ids_in_set, required_clue_ids_in_hunt

log = structlog.get_logger()

# ---------- per-team critical section ----------

_team_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
# Holders and waiters per team; the lock is dropped when this reaches zero
_lock_users: defaultdict[str, int] = defaultdict(int)


async def advisory_lock_team(session: AsyncSession, team_id: UUID) -> None:
    """Serialize progress writes for one team across processes (Postgres only, released at commit)."""
    if session.get_bind().dialect.name == "postgresql":
        await session.execute(text("SELECT pg_advisory_xact_lock(hashtext(:k))"), {"k": f"team:{team_id}"})


@asynccontextmanager
async def team_progress_lock(session: AsyncSession, team_id: UUID):
    """
    Guard a read-modify-write of one team's progress.

    The in-process lock orders concurrent requests for the same team inside
    this worker; the advisory lock does the same across workers. The
    `version` column on TeamProgress still rejects any write that raced
    past both (ProgressConflict).
    """
    key = str(team_id)
    _lock_users[key] += 1
    try:
        async with _team_locks[key]:
            await advisory_lock_team(session, team_id)
            yield
    finally:
        _lock_users[key] -= 1
        if _lock_users[key] == 0:
            del _lock_users[key]
            _team_locks.pop(key, None)

# ---------- id-list helpers ----------

def id_list(values) -> list[str]:
    return [str(v) for v in (values or [])]

def with_id(values, new_id) -> list[str]:
    """Append-if-absent, preserving order."""
    out = id_list(values)
    if str(new_id) not in out:
        out.append(str(new_id))
    return out

# ---------- store ----------

async def get_progress(session: AsyncSession, team_id: UUID) -> TeamProgress:
    progress = await session.get(TeamProgress, team_id)
    if not progress:
        raise NotFound("Team progress not found")
    return progress

async def create_progress(session: AsyncSession, team: Team) -> TeamProgress:
    progress = TeamProgress(
        team_id=team.id,
        hunt_id=team.hunt_id,
        current_clue_set_id=None,
        current_clue_id=None,
        completed_clue_ids=[],
        completed_clue_set_ids=[],
        road_block_clue_ids=[],
    )
    session.add(progress)
    await flush_or_raise(session, "create team progress")
    return progress

# ---------- road-block gate ----------

async def outstanding_road_blocks(session: AsyncSession, progress: TeamProgress) -> list[Clue]:
    """Road blocks assigned to the team and not yet cleared."""
    done = set(id_list(progress.completed_clue_ids))
    pending = [cid for cid in id_list(progress.road_block_clue_ids) if cid not in done]
    return [c for c in await get_clues_by_ids(session, pending) if c.clue_type == ROAD_BLOCK]

async def gated_clue_set_ids(session: AsyncSession, progress: TeamProgress) -> list[UUID]:
    """
    Clue-sets whose REQUIRED clues are all solved but which stay open because
    an assigned road block in them is still outstanding. Ordered by position.
    """
    done = set(id_list(progress.completed_clue_ids))
    set_ids = {rb.clue_set_id for rb in await outstanding_road_blocks(session, progress)}
    gated: list[ClueSet] = []
    for set_id in set_ids:
        required = await required_clue_ids_in_set(session, set_id)
        if required and required <= done:
            cs = await session.get(ClueSet, set_id)
            if cs:
                gated.append(cs)
    return [cs.id for cs in sorted(gated, key=lambda cs: cs.position)]

async def clue_set_is_complete(session: AsyncSession, progress: TeamProgress, clue_set_id: UUID) -> bool:
    done = set(id_list(progress.completed_clue_ids))
    required = await required_clue_ids_in_set(session, clue_set_id)
    if not required or not required <= done:
        return False
    for rb in await outstanding_road_blocks(session, progress):
        if rb.clue_set_id == clue_set_id:
            return False
    return True

async def settle_completion(session: AsyncSession, progress: TeamProgress, clue_set_ids, now: datetime) -> bool:
    """
    Re-run the completion check after a gate may have opened (a road block
    was cleared or the assignment changed). Registers any of `clue_set_ids`
    that are now complete and completes the hunt when nothing is left.
    Returns True when the hunt completed in this call.
    """
    completed_sets = id_list(progress.completed_clue_set_ids)
    for set_id in clue_set_ids:
        if str(set_id) in completed_sets:
            continue
        if await clue_set_is_complete(session, progress, set_id):
            completed_sets = with_id(completed_sets, set_id)
            log.info("clue_set_completed", team_id=str(progress.team_id), clue_set_id=str(set_id), via="gate_cleared")
    progress.completed_clue_set_ids = completed_sets

    if progress.current_clue_id is not None or progress.completed_at is not None:
        return False
    required = await required_clue_ids_in_hunt(session, progress.hunt_id)
    if not required or not required <= set(id_list(progress.completed_clue_ids)):
        return False
    if await outstanding_road_blocks(session, progress):
        return False
    progress.completed_at = now
    log.info("hunt_completed", team_id=str(progress.team_id), hunt_id=str(progress.hunt_id), via="gate_cleared")
    return True

# ---------- admin: road-block assignment ----------

async def assign_road_blocks(session: AsyncSession, team_id: UUID, clue_ids: list[UUID], now: datetime) -> TeamProgress:
    """Replace the team's assigned road blocks. Every id must be a ROAD_BLOCK clue of the team's hunt."""
    team = await session.get(Team, team_id)
    if not team:
        raise NotFound("Team not found")
    async with team_progress_lock(session, team_id):
        progress = await get_progress(session, team_id)
        wanted: list[str] = []
        for cid in clue_ids:
            if str(cid) not in wanted:
                wanted.append(str(cid))
        clues = {str(c.id): c for c in await get_clues_by_ids(session, wanted)}
        for cid in wanted:
            clue = clues.get(cid)
            if clue is None:
                raise ValidationFailed(f"Clue {cid} not found")
            if clue.clue_type != ROAD_BLOCK:
                raise ValidationFailed(f"Clue {cid} is not a road block")
            cs = await session.get(ClueSet, clue.clue_set_id)
            if cs is None or cs.hunt_id != team.hunt_id:
                raise ValidationFailed(f"Clue {cid} is not part of this team's hunt")
            # A set with no REQUIRED clues is never current, so a road block there could never be cleared
            if not await required_clue_ids_in_set(session, clue.clue_set_id):
                raise ValidationFailed(f"Clue {cid} is in a clue set with no required clues")

        previous = {c.clue_set_id for c in await get_clues_by_ids(session, id_list(progress.road_block_clue_ids))}
        progress.road_block_clue_ids = wanted
        # Dropping an outstanding road block can open its gate
        with session.no_autoflush:
            await settle_completion(session, progress, sorted(previous, key=str), now)
        await commit_or_raise(session, "assign road blocks")
    log.info("road_blocks_assigned", team_id=str(team_id), count=len(wanted))
    return progress
