from __future__ import annotations
import asyncio
from datetime import datetime, timezone
import pytest

from scavhunt.db import SessionLocal, commit_or_raise
from scavhunt.errors import InvalidState, ProgressConflict, ValidationFailed
from scavhunt.models.progress import TeamProgress
from scavhunt.schemas.submission import SubmitAnswerRequest
from scavhunt.services.game_logic import submit_answer
from scavhunt.services.progress import (
    _lock_users, _team_locks, assign_road_blocks, gated_clue_set_ids, get_progress, team_progress_lock,
)
from scavhunt.services.teams import join_hunt


def _now():
    return datetime.now(timezone.utc)


@pytest.mark.asyncio
async def test_assign_road_blocks_rejects_other_clue_types(session, build):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    required = await build.clue(cs, "apple")
    team, _ = await build.joined_team(hunt)

    with pytest.raises(ValidationFailed, match="not a road block"):
        await assign_road_blocks(session, team.id, [required.id], _now())


@pytest.mark.asyncio
async def test_assign_road_blocks_rejects_other_hunts(session, build):
    hunt = await build.hunt()
    await build.clue(await build.clue_set(hunt), "apple")
    other = await build.hunt("Other hunt")
    foreign = await build.clue(await build.clue_set(other), "detour", clue_type="ROAD_BLOCK")
    team, _ = await build.joined_team(hunt)

    with pytest.raises(ValidationFailed, match="not part of this team's hunt"):
        await assign_road_blocks(session, team.id, [foreign.id], _now())


@pytest.mark.asyncio
async def test_assign_road_blocks_rejects_sets_without_required_clues(session, obscurer, build):
    hunt = await build.hunt()
    a1 = await build.clue(await build.clue_set(hunt, "Main"), "apple")
    block = await build.clue(await build.clue_set(hunt, "Side only"), "detour", clue_type="ROAD_BLOCK")
    team, _ = await build.joined_team(hunt)

    with pytest.raises(ValidationFailed, match="no required clues"):
        await assign_road_blocks(session, team.id, [block.id], _now())

    progress = await get_progress(session, team.id)
    assert progress.road_block_clue_ids == []
    result = await submit_answer(session, team.id, SubmitAnswerRequest(hunt_id=hunt.id, clue_id=a1.id, answer="apple"), obscurer)
    assert result.hunt_completed


@pytest.mark.asyncio
async def test_assignment_is_replaced_and_deduplicated(session, build):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    await build.clue(cs, "apple")
    first = await build.clue(cs, "one", clue_type="ROAD_BLOCK")
    second = await build.clue(cs, "two", clue_type="ROAD_BLOCK")
    team, _ = await build.joined_team(hunt)

    progress = await assign_road_blocks(session, team.id, [first.id, first.id, second.id], _now())
    assert progress.road_block_clue_ids == [str(first.id), str(second.id)]

    progress = await assign_road_blocks(session, team.id, [second.id], _now())
    assert progress.road_block_clue_ids == [str(second.id)]


@pytest.mark.asyncio
async def test_unassigning_the_last_road_block_completes_the_hunt(session, obscurer, build):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    a1 = await build.clue(cs, "apple")
    block = await build.clue(cs, "detour", clue_type="ROAD_BLOCK")
    team, _ = await build.joined_team(hunt)
    await assign_road_blocks(session, team.id, [block.id], _now())

    result = await submit_answer(session, team.id, SubmitAnswerRequest(hunt_id=hunt.id, clue_id=a1.id, answer="apple"), obscurer)
    assert not result.hunt_completed
    progress = await get_progress(session, team.id)
    assert await gated_clue_set_ids(session, progress) == [cs.id]

    progress = await assign_road_blocks(session, team.id, [], _now())
    assert progress.completed_at is not None
    assert progress.completed_clue_set_ids == [str(cs.id)]


@pytest.mark.asyncio
async def test_rejoining_does_not_reset_progress(session, obscurer, build):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    a1 = await build.clue(cs, "apple")
    a2 = await build.clue(cs, "banana")
    team, progress = await build.joined_team(hunt)
    started = progress.started_at

    await submit_answer(session, team.id, SubmitAnswerRequest(hunt_id=hunt.id, clue_id=a1.id, answer="apple"), obscurer)
    await join_hunt(session, team.join_code.lower(), _now())

    progress = await get_progress(session, team.id)
    assert progress.current_clue_id == a2.id
    assert progress.started_at == started


@pytest.mark.asyncio
async def test_join_requires_an_active_hunt(session, build):
    hunt = await build.hunt(status="draft")
    team = await build.team(hunt)
    with pytest.raises(InvalidState):
        await join_hunt(session, team.join_code, _now())


@pytest.mark.asyncio
async def test_stale_progress_write_is_a_conflict(session, build):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    await build.clue(cs, "apple")
    block = await build.clue(cs, "detour", clue_type="ROAD_BLOCK")
    team, _ = await build.joined_team(hunt)

    async with SessionLocal() as stale:
        old = await stale.get(TeamProgress, team.id)
        await assign_road_blocks(session, team.id, [block.id], _now())

        old.completed_clue_set_ids = [str(block.clue_set_id)]
        with pytest.raises(ProgressConflict):
            await commit_or_raise(stale, "save team progress")


@pytest.mark.asyncio
async def test_concurrent_submissions_for_one_team_are_serialized(build, obscurer):
    hunt = await build.hunt()
    cs = await build.clue_set(hunt)
    a1 = await build.clue(cs, "apple")
    a2 = await build.clue(cs, "banana")
    team, _ = await build.joined_team(hunt)
    payload = SubmitAnswerRequest(hunt_id=hunt.id, clue_id=a1.id, answer="apple")

    async def attempt():
        async with SessionLocal() as s:
            return await submit_answer(s, team.id, payload, obscurer)

    results = await asyncio.gather(attempt(), attempt(), return_exceptions=True)
    advanced = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(advanced) == 1 and advanced[0].next_clue.id == a2.id
    assert len(rejected) == 1 and isinstance(rejected[0], InvalidState)

    async with SessionLocal() as s:
        progress = await get_progress(s, team.id)
        assert progress.completed_clue_ids == [str(a1.id)]


@pytest.mark.asyncio
async def test_team_lock_is_dropped_once_nobody_holds_it(session, build):
    hunt = await build.hunt()
    await build.clue(await build.clue_set(hunt), "apple")
    team, _ = await build.joined_team(hunt)
    key = str(team.id)
    assert key not in _team_locks

    entered = asyncio.Event()

    async def second():
        async with team_progress_lock(session, team.id):
            entered.set()

    async with team_progress_lock(session, team.id):
        waiter = asyncio.create_task(second())
        await asyncio.sleep(0)
        assert _lock_users[key] == 2
        assert not entered.is_set()
    await waiter

    assert entered.is_set()
    assert key not in _team_locks and key not in _lock_users
