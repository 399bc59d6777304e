from __future__ import annotations
import asyncio
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from scavhunt.auth_deps import get_current_team, get_obscurer
from scavhunt.config import settings
from scavhunt.db import get_session
from scavhunt.errors import StoreFailure
from scavhunt.models.clue import Clue
from scavhunt.models.hunt import Team
from scavhunt.schemas.clue import CluePublic
from scavhunt.schemas.progress import ProgressPublic, TimeAdjustment
from scavhunt.schemas.submission import SubmitAnswerRequest, SubmitAnswerResponse, AnswerSubmissionPublic
from scavhunt.services.game_logic import submit_answer
from scavhunt.services.obscure import Obscurer
from scavhunt.services.progress import get_progress
from scavhunt.services.reports import progress_view
from scavhunt.services.side_quests import get_available_express_passes, get_available_road_blocks, get_time_adjustment
from scavhunt.services.submissions import list_for_team

router = APIRouter(prefix="/play", tags=["play"])
log = structlog.get_logger()

@router.get("/progress", response_model=ProgressPublic)
async def my_progress(team: Team = Depends(get_current_team), session: AsyncSession = Depends(get_session)):
    progress = await get_progress(session, team.id)
    return await progress_view(session, progress, datetime.now(dt_tz.utc))

@router.get("/clue", response_model=CluePublic | None)
async def current_clue(
    team: Team = Depends(get_current_team),
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    progress = await get_progress(session, team.id)
    if progress.current_clue_id is None:
        return None
    clue = await session.get(Clue, progress.current_clue_id)
    return CluePublic.from_clue(clue, obscurer) if clue else None

@router.post("/answers", response_model=SubmitAnswerResponse)
async def answer(
    payload: SubmitAnswerRequest,
    team: Team = Depends(get_current_team),
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    try:
        result = await asyncio.wait_for(
            submit_answer(session, team.id, payload, obscurer),
            timeout=settings.store_timeout_seconds,
        )
    except asyncio.TimeoutError as e:
        log.warning("submit_timeout", team_id=str(team.id), clue_id=str(payload.clue_id))
        raise StoreFailure("Saving your answer took too long, please retry") from e
    return SubmitAnswerResponse(
        correct=result.correct,
        hunt_completed=result.hunt_completed,
        next_clue=CluePublic.from_clue(result.next_clue, obscurer) if result.next_clue else None,
    )

@router.get("/express-passes", response_model=list[CluePublic])
async def express_passes(
    team: Team = Depends(get_current_team),
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    return [CluePublic.from_clue(c, obscurer) for c in await get_available_express_passes(session, team.id)]

@router.get("/road-blocks", response_model=list[CluePublic])
async def road_blocks(
    team: Team = Depends(get_current_team),
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    return [CluePublic.from_clue(c, obscurer) for c in await get_available_road_blocks(session, team.id)]

@router.get("/time-adjustment", response_model=TimeAdjustment)
async def time_adjustment(team: Team = Depends(get_current_team), session: AsyncSession = Depends(get_session)):
    return TimeAdjustment(total_minutes=await get_time_adjustment(session, team.id))

@router.get("/submissions", response_model=list[AnswerSubmissionPublic])
async def my_submissions(team: Team = Depends(get_current_team), session: AsyncSession = Depends(get_session)):
    return [
        AnswerSubmissionPublic(
            id=s.id, team_id=s.team_id, clue_id=s.clue_id, hunt_id=s.hunt_id,
            answer_text=s.answer_text, media_urls=list(s.media_urls or []), submitted_at=s.submitted_at,
        )
        for s in await list_for_team(session, team.id)
    ]
