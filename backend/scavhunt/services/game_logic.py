from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone as dt_tz
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from scavhunt.db import commit_or_raise
from scavhunt.errors import NotFound, InvalidState, ValidationFailed
from scavhunt.models.clue import Clue, EXPRESS_PASS, ROAD_BLOCK, SIDE_QUEST_TYPES
from scavhunt.models.hunt import Hunt
from scavhunt.models.progress import TeamProgress
from scavhunt.models.submission import AnswerSubmission
from scavhunt.schemas.submission import SubmitAnswerRequest
from scavhunt.services.clues import get_next_clue
from scavhunt.services.obscure import Obscurer
from scavhunt.services.progress import (
    advisory_lock_team,
    gated_clue_set_ids,
    get_progress,
    id_list,
    outstanding_road_blocks,
    settle_completion,
    team_progress_lock,
    with_id,
)

log = structlog.get_logger()


@dataclass
class SubmitResult:
    correct: bool
    hunt_completed: bool
    next_clue: Clue | None


def normalize_answer(answer: str | None) -> str:
    return (answer or "").strip().lower()


def is_correct(submitted: str | None, expected: str | None, allows_media: bool, has_media: bool) -> bool:
    """
    Text match wins when both sides have text (trimmed, case-insensitive).
    Otherwise a media upload on a media clue counts as correct.
    """
    answer = normalize_answer(submitted)
    target = normalize_answer(expected)
    if answer and target:
        return answer == target
    if allows_media and has_media:
        return True
    return False


async def _resolve_target(session: AsyncSession, progress: TeamProgress, clue_id: UUID) -> Clue:
    if progress.current_clue_id is not None and clue_id == progress.current_clue_id:
        clue = await session.get(Clue, progress.current_clue_id)
        if not clue:
            raise NotFound("Current clue not found")
        return clue

    clue = await session.get(Clue, clue_id)
    if not clue:
        raise NotFound("Clue not found")

    if clue.clue_type == EXPRESS_PASS:
        pass
    elif clue.clue_type == ROAD_BLOCK and str(clue.id) in id_list(progress.road_block_clue_ids):
        pass
    elif progress.current_clue_id is None and clue.clue_type not in SIDE_QUEST_TYPES:
        raise InvalidState("No active clue")
    else:
        raise InvalidState("Can only submit for the current clue, an express pass, or an assigned road block")

    if clue.clue_set_id != progress.current_clue_set_id:
        # A road block may still be cleared in a finished set that it holds open
        if clue.clue_type == ROAD_BLOCK and clue.clue_set_id in await gated_clue_set_ids(session, progress):
            return clue
        raise InvalidState("That clue is not in your current clue set")
    return clue


def _check_preconditions(clue: Clue, answer: str, media_urls: list[str]) -> None:
    if clue.allows_media and not media_urls:
        raise ValidationFailed("Upload a photo or video before submitting this clue")
    if not clue.allows_media and not answer.strip():
        raise ValidationFailed("An answer is required for this clue")


async def _apply_side_quest(session: AsyncSession, progress: TeamProgress, clue: Clue, now: datetime) -> SubmitResult:
    progress.completed_clue_ids = with_id(progress.completed_clue_ids, clue.id)
    # Clearing a road block can open a gated clue-set
    hunt_completed = await settle_completion(session, progress, [clue.clue_set_id], now)
    current = await session.get(Clue, progress.current_clue_id) if progress.current_clue_id else None
    log.info("side_quest_cleared", team_id=str(progress.team_id), clue_id=str(clue.id), clue_type=clue.clue_type)
    return SubmitResult(correct=True, hunt_completed=hunt_completed, next_clue=current)


async def _apply_required(session: AsyncSession, progress: TeamProgress, clue: Clue, now: datetime) -> SubmitResult:
    next_clue = await get_next_clue(session, progress.hunt_id, clue)
    set_finished = next_clue is None or next_clue.clue_set_id != clue.clue_set_id

    progress.completed_clue_ids = with_id(progress.completed_clue_ids, clue.id)

    blocked = False
    if set_finished:
        for rb in await outstanding_road_blocks(session, progress):
            if rb.clue_set_id == clue.clue_set_id:
                blocked = True
                break
        if blocked:
            log.info("road_block_gate", team_id=str(progress.team_id), clue_set_id=str(clue.clue_set_id))
        else:
            progress.completed_clue_set_ids = with_id(progress.completed_clue_set_ids, clue.clue_set_id)
            log.info("clue_set_completed", team_id=str(progress.team_id), clue_set_id=str(clue.clue_set_id))

    progress.current_clue_id = next_clue.id if next_clue else None
    progress.current_clue_set_id = next_clue.clue_set_id if next_clue else None

    hunt_completed = next_clue is None and not blocked
    if hunt_completed and await outstanding_road_blocks(session, progress):
        # An earlier clue-set is still held open by a road block
        hunt_completed = False
    if hunt_completed and progress.completed_at is None:
        progress.completed_at = now
        log.info("hunt_completed", team_id=str(progress.team_id), hunt_id=str(progress.hunt_id))
    elif next_clue is not None:
        log.info("progress_advanced", team_id=str(progress.team_id), clue_id=str(next_clue.id))

    return SubmitResult(correct=True, hunt_completed=hunt_completed, next_clue=next_clue)


async def submit_answer(
    session: AsyncSession,
    team_id: UUID,
    payload: SubmitAnswerRequest,
    obscurer: Obscurer,
    now: datetime | None = None,
) -> SubmitResult:
    """
    Evaluate one answer attempt and advance the team's progress.

    The attempt is committed to the audit log before correctness is
    decided, so it survives even if the progress write-back fails.
    Raises NotFound / InvalidState / ValidationFailed for rejected
    submissions and StoreFailure / ProgressConflict for persistence
    problems; a wrong answer is a normal `correct=False` result.
    """
    now = now or datetime.now(dt_tz.utc)
    media_urls = [u for u in (payload.media_urls or []) if u and u.strip()]
    answer = payload.answer or ""

    async with team_progress_lock(session, team_id):
        progress = await get_progress(session, team_id)
        hunt = await session.get(Hunt, progress.hunt_id)
        if not hunt:
            raise NotFound("Hunt not found")
        if payload.hunt_id != progress.hunt_id:
            raise InvalidState("That clue belongs to a different hunt")
        if hunt.status != "active":
            raise InvalidState("This hunt is not currently active")

        clue = await _resolve_target(session, progress, payload.clue_id)
        _check_preconditions(clue, answer, media_urls)

        session.add(AnswerSubmission(
            team_id=team_id,
            clue_id=clue.id,
            hunt_id=progress.hunt_id,
            answer_text=answer,
            media_urls=media_urls,
            submitted_at=now,
        ))
        await commit_or_raise(session, "record answer submission")

        correct = is_correct(answer, obscurer.reveal(clue.correct_answer), clue.allows_media, bool(media_urls))
        log.info(
            "answer_submitted",
            team_id=str(team_id),
            clue_id=str(clue.id),
            clue_type=clue.clue_type,
            media_count=len(media_urls),
            correct=correct,
        )
        if not correct:
            return SubmitResult(correct=False, hunt_completed=False, next_clue=None)

        # New transaction after the audit commit
        await advisory_lock_team(session, team_id)
        # Flush once, at commit, so a stale version surfaces as ProgressConflict
        with session.no_autoflush:
            if clue.clue_type in SIDE_QUEST_TYPES:
                result = await _apply_side_quest(session, progress, clue, now)
            else:
                result = await _apply_required(session, progress, clue, now)
        await commit_or_raise(session, "save team progress")
        return result
