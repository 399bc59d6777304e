from __future__ import annotations
from uuid import UUID
from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from scavhunt.db import flush_or_raise
from scavhunt.errors import NotFound, ValidationFailed
from scavhunt.models.clue import Clue, ClueSet, REQUIRED, EXPRESS_PASS
from scavhunt.models.hunt import Hunt
from scavhunt.models.submission import AnswerSubmission
from scavhunt.schemas.clue import ClueCreate, ClueUpdate
from scavhunt.services.obscure import Obscurer
from scavhunt.services.submissions import delete_for_clue

# ---------- reads ----------

async def get_clue(session: AsyncSession, clue_id: UUID) -> Clue:
    clue = await session.get(Clue, clue_id)
    if not clue:
        raise NotFound("Clue not found")
    return clue

async def get_clue_set(session: AsyncSession, clue_set_id: UUID) -> ClueSet:
    cs = await session.get(ClueSet, clue_set_id)
    if not cs:
        raise NotFound("Clue set not found")
    return cs

async def get_clue_sets_by_hunt(session: AsyncSession, hunt_id: UUID) -> list[ClueSet]:
    return list((await session.execute(
        select(ClueSet).where(ClueSet.hunt_id == hunt_id).order_by(ClueSet.position.asc())
    )).scalars().all())

async def get_clues_by_clue_set(session: AsyncSession, clue_set_id: UUID, clue_type: str | None = None) -> list[Clue]:
    """Required clues by position first, then side-quests in creation order."""
    q = select(Clue).where(Clue.clue_set_id == clue_set_id)
    if clue_type:
        q = q.where(Clue.clue_type == clue_type)
    q = q.order_by(Clue.position.asc().nulls_last(), Clue.created_at.asc())
    return list((await session.execute(q)).scalars().all())

async def get_clues_by_ids(session: AsyncSession, ids) -> list[Clue]:
    uuids = [UUID(str(i)) for i in ids]
    if not uuids:
        return []
    return list((await session.execute(select(Clue).where(Clue.id.in_(uuids)))).scalars().all())

async def required_clue_ids_in_hunt(session: AsyncSession, hunt_id: UUID) -> set[str]:
    rows = (await session.execute(
        select(Clue.id)
        .join(ClueSet, ClueSet.id == Clue.clue_set_id)
        .where(ClueSet.hunt_id == hunt_id, Clue.clue_type == REQUIRED)
    )).scalars().all()
    return {str(r) for r in rows}

async def required_clue_ids_in_set(session: AsyncSession, clue_set_id: UUID) -> set[str]:
    rows = (await session.execute(
        select(Clue.id).where(Clue.clue_set_id == clue_set_id, Clue.clue_type == REQUIRED)
    )).scalars().all()
    return {str(r) for r in rows}

async def _first_required_clue(session: AsyncSession, clue_set_id: UUID) -> Clue | None:
    return await session.scalar(
        select(Clue)
        .where(Clue.clue_set_id == clue_set_id, Clue.clue_type == REQUIRED)
        .order_by(Clue.position.asc())
        .limit(1)
    )

# ---------- traversal ----------

async def get_next_clue(session: AsyncSession, hunt_id: UUID, current: Clue | None) -> Clue | None:
    """
    Next REQUIRED clue in traversal order (clue-set position, clue position).

    1. Same clue-set, smallest position greater than the current clue's.
    2. Otherwise the following clue-sets by position (all of them when
       `current` is None); the first one holding a REQUIRED clue wins.
       Sets with no REQUIRED clue are skipped.
    3. None when the hunt is exhausted.
    """
    cur_set: ClueSet | None = None
    if current is not None:
        if current.is_required and current.position is not None:
            nxt = await session.scalar(
                select(Clue)
                .where(
                    Clue.clue_set_id == current.clue_set_id,
                    Clue.clue_type == REQUIRED,
                    Clue.position > current.position,
                )
                .order_by(Clue.position.asc())
                .limit(1)
            )
            if nxt:
                return nxt
        cur_set = await session.get(ClueSet, current.clue_set_id)
        if cur_set is None:
            return None

    q = select(ClueSet).where(ClueSet.hunt_id == hunt_id)
    if cur_set is not None:
        q = q.where(ClueSet.position > cur_set.position)
    next_sets = (await session.execute(q.order_by(ClueSet.position.asc()))).scalars().all()
    for cs in next_sets:
        first = await _first_required_clue(session, cs.id)
        if first:
            return first
    return None

# ---------- clue sets ----------

async def create_clue_set(session: AsyncSession, hunt_id: UUID, name: str) -> ClueSet:
    if not await session.get(Hunt, hunt_id):
        raise NotFound("Hunt not found")
    # Next free slot; (hunt_id, position) is unique
    max_pos = await session.scalar(select(func.max(ClueSet.position)).where(ClueSet.hunt_id == hunt_id))
    cs = ClueSet(hunt_id=hunt_id, name=name, position=(max_pos + 1) if max_pos is not None else 0, clue_ids=[])
    session.add(cs)
    await flush_or_raise(session, "create clue set")
    return cs

async def update_clue_set(session: AsyncSession, clue_set_id: UUID, name: str) -> ClueSet:
    cs = await get_clue_set(session, clue_set_id)
    cs.name = name
    await flush_or_raise(session, "update clue set")
    return cs

async def delete_clue_set(session: AsyncSession, clue_set_id: UUID) -> None:
    cs = await get_clue_set(session, clue_set_id)
    clue_ids = select(Clue.id).where(Clue.clue_set_id == cs.id)
    await session.execute(delete(AnswerSubmission).where(AnswerSubmission.clue_id.in_(clue_ids)))
    await session.execute(delete(Clue).where(Clue.clue_set_id == cs.id))
    await session.delete(cs)
    await flush_or_raise(session, "delete clue set")

async def sync_clue_ids(session: AsyncSession, clue_set_id: UUID) -> ClueSet:
    """Rebuild the denormalized `clue_ids` cache from clue positions."""
    cs = await get_clue_set(session, clue_set_id)
    await flush_or_raise(session, "sync clue ids")
    clues = await get_clues_by_clue_set(session, clue_set_id)
    cs.clue_ids = [str(c.id) for c in clues]
    await flush_or_raise(session, "sync clue ids")
    return cs

# ---------- clues ----------

async def _next_required_position(session: AsyncSession, clue_set_id: UUID) -> int:
    max_pos = await session.scalar(
        select(func.max(Clue.position)).where(Clue.clue_set_id == clue_set_id, Clue.clue_type == REQUIRED)
    )
    return (max_pos + 1) if max_pos is not None else 0

def _check_minutes(clue_type: str, minutes: int | None) -> None:
    if minutes is not None and clue_type != EXPRESS_PASS:
        raise ValidationFailed("minutes is only valid for EXPRESS_PASS clues")

async def create_clue(session: AsyncSession, clue_set_id: UUID, data: ClueCreate, obscurer: Obscurer) -> Clue:
    await get_clue_set(session, clue_set_id)
    _check_minutes(data.clue_type, data.minutes)
    position = await _next_required_position(session, clue_set_id) if data.clue_type == REQUIRED else None
    clue = Clue(
        clue_set_id=clue_set_id,
        clue_type=data.clue_type,
        position=position,
        prompt=data.prompt,
        images=list(data.images),
        correct_answer=obscurer.obscure(data.correct_answer) or None,
        allows_media=data.allows_media,
        minutes=data.minutes if data.clue_type == EXPRESS_PASS else None,
    )
    session.add(clue)
    await flush_or_raise(session, "create clue")
    await sync_clue_ids(session, clue_set_id)
    return clue

async def update_clue(session: AsyncSession, clue_id: UUID, data: ClueUpdate, obscurer: Obscurer) -> Clue:
    clue = await get_clue(session, clue_id)
    fields = data.model_dump(exclude_unset=True)

    new_type = fields.pop("clue_type", None) or clue.clue_type
    if new_type != clue.clue_type:
        if new_type == REQUIRED:
            clue.position = await _next_required_position(session, clue.clue_set_id)
        else:
            clue.position = None
        if new_type != EXPRESS_PASS:
            clue.minutes = None
        clue.clue_type = new_type

    if "correct_answer" in fields:
        clue.correct_answer = obscurer.obscure(fields.pop("correct_answer")) or None
    if "minutes" in fields:
        _check_minutes(clue.clue_type, fields["minutes"])
    for key, value in fields.items():
        if key == "images":
            value = list(value or [])
        elif key in ("prompt", "allows_media") and value is None:
            continue
        setattr(clue, key, value)

    await flush_or_raise(session, "update clue")
    await sync_clue_ids(session, clue.clue_set_id)
    return clue

async def delete_clue(session: AsyncSession, clue_id: UUID) -> None:
    clue = await get_clue(session, clue_id)
    clue_set_id = clue.clue_set_id
    await delete_for_clue(session, clue.id)
    await session.delete(clue)
    await flush_or_raise(session, "delete clue")
    await sync_clue_ids(session, clue_set_id)
