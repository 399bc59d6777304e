from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from scavhunt.auth_deps import require_admin, get_obscurer
from scavhunt.db import get_session, commit_or_raise
from scavhunt.models.hunt import Hunt
from scavhunt.models.submission import AnswerSubmission
from scavhunt.schemas.clue import ClueSetCreate, ClueSetUpdate, ClueSetPublic, ClueCreate, ClueUpdate, ClueAdmin
from scavhunt.schemas.hunt import HuntCreate, HuntUpdate, HuntPublic
from scavhunt.schemas.submission import AnswerSubmissionPublic
from scavhunt.services import clues as clue_repo
from scavhunt.services import hunts as hunt_svc
from scavhunt.services.obscure import Obscurer
from scavhunt.services.submissions import list_for_hunt

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

def _hunt_public(h: Hunt) -> HuntPublic:
    return HuntPublic(id=h.id, name=h.name, description=h.description, status=h.status, created_at=h.created_at)

def _submission_public(s: AnswerSubmission) -> AnswerSubmissionPublic:
    return AnswerSubmissionPublic(
        id=s.id, team_id=s.team_id, clue_id=s.clue_id, hunt_id=s.hunt_id,
        answer_text=s.answer_text, media_urls=list(s.media_urls or []), submitted_at=s.submitted_at,
    )

# ---------- hunts ----------

@router.post("/hunts", response_model=HuntPublic, status_code=201)
async def create_hunt(payload: HuntCreate, session: AsyncSession = Depends(get_session)):
    hunt = await hunt_svc.create_hunt(session, payload)
    await commit_or_raise(session, "create hunt")
    await session.refresh(hunt)
    return _hunt_public(hunt)

@router.get("/hunts", response_model=list[HuntPublic])
async def list_hunts(session: AsyncSession = Depends(get_session)):
    return [_hunt_public(h) for h in await hunt_svc.list_hunts(session)]

@router.get("/hunts/{hunt_id}", response_model=HuntPublic)
async def get_hunt(hunt_id: UUID, session: AsyncSession = Depends(get_session)):
    return _hunt_public(await hunt_svc.get_hunt(session, hunt_id))

@router.patch("/hunts/{hunt_id}", response_model=HuntPublic)
async def update_hunt(hunt_id: UUID, payload: HuntUpdate, session: AsyncSession = Depends(get_session)):
    hunt = await hunt_svc.update_hunt(session, hunt_id, payload)
    await commit_or_raise(session, "update hunt")
    return _hunt_public(hunt)

@router.delete("/hunts/{hunt_id}", status_code=204)
async def delete_hunt(hunt_id: UUID, session: AsyncSession = Depends(get_session)):
    await hunt_svc.delete_hunt(session, hunt_id)
    await commit_or_raise(session, "delete hunt")

@router.get("/hunts/{hunt_id}/submissions", response_model=list[AnswerSubmissionPublic])
async def hunt_submissions(
    hunt_id: UUID,
    team_id: UUID | None = Query(default=None),
    limit: int = Query(default=200, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
):
    await hunt_svc.get_hunt(session, hunt_id)
    return [_submission_public(s) for s in await list_for_hunt(session, hunt_id, team_id=team_id, limit=limit)]

# ---------- clue sets ----------

@router.get("/hunts/{hunt_id}/clue-sets", response_model=list[ClueSetPublic])
async def list_clue_sets(hunt_id: UUID, session: AsyncSession = Depends(get_session)):
    await hunt_svc.get_hunt(session, hunt_id)
    return [ClueSetPublic.from_clue_set(cs) for cs in await clue_repo.get_clue_sets_by_hunt(session, hunt_id)]

@router.post("/hunts/{hunt_id}/clue-sets", response_model=ClueSetPublic, status_code=201)
async def create_clue_set(hunt_id: UUID, payload: ClueSetCreate, session: AsyncSession = Depends(get_session)):
    cs = await clue_repo.create_clue_set(session, hunt_id, payload.name)
    await commit_or_raise(session, "create clue set")
    return ClueSetPublic.from_clue_set(cs)

@router.get("/clue-sets/{clue_set_id}", response_model=ClueSetPublic)
async def get_clue_set(clue_set_id: UUID, session: AsyncSession = Depends(get_session)):
    return ClueSetPublic.from_clue_set(await clue_repo.get_clue_set(session, clue_set_id))

@router.patch("/clue-sets/{clue_set_id}", response_model=ClueSetPublic)
async def update_clue_set(clue_set_id: UUID, payload: ClueSetUpdate, session: AsyncSession = Depends(get_session)):
    cs = await clue_repo.update_clue_set(session, clue_set_id, payload.name)
    await commit_or_raise(session, "update clue set")
    return ClueSetPublic.from_clue_set(cs)

@router.delete("/clue-sets/{clue_set_id}", status_code=204)
async def delete_clue_set(clue_set_id: UUID, session: AsyncSession = Depends(get_session)):
    await clue_repo.delete_clue_set(session, clue_set_id)
    await commit_or_raise(session, "delete clue set")

# ---------- clues ----------

@router.get("/clue-sets/{clue_set_id}/clues", response_model=list[ClueAdmin])
async def list_clues(
    clue_set_id: UUID,
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    await clue_repo.get_clue_set(session, clue_set_id)
    return [ClueAdmin.from_clue(c, obscurer) for c in await clue_repo.get_clues_by_clue_set(session, clue_set_id)]

@router.post("/clue-sets/{clue_set_id}/clues", response_model=ClueAdmin, status_code=201)
async def create_clue(
    clue_set_id: UUID,
    payload: ClueCreate,
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    clue = await clue_repo.create_clue(session, clue_set_id, payload, obscurer)
    await commit_or_raise(session, "create clue")
    await session.refresh(clue)
    return ClueAdmin.from_clue(clue, obscurer)

@router.get("/clues/{clue_id}", response_model=ClueAdmin)
async def get_clue(clue_id: UUID, session: AsyncSession = Depends(get_session), obscurer: Obscurer = Depends(get_obscurer)):
    return ClueAdmin.from_clue(await clue_repo.get_clue(session, clue_id), obscurer)

@router.patch("/clues/{clue_id}", response_model=ClueAdmin)
async def update_clue(
    clue_id: UUID,
    payload: ClueUpdate,
    session: AsyncSession = Depends(get_session),
    obscurer: Obscurer = Depends(get_obscurer),
):
    clue = await clue_repo.update_clue(session, clue_id, payload, obscurer)
    await commit_or_raise(session, "update clue")
    return ClueAdmin.from_clue(clue, obscurer)

@router.delete("/clues/{clue_id}", status_code=204)
async def delete_clue(clue_id: UUID, session: AsyncSession = Depends(get_session)):
    await clue_repo.delete_clue(session, clue_id)
    await commit_or_raise(session, "delete clue")
