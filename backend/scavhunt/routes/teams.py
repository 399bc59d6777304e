from __future__ import annotations
from datetime import datetime, timezone as dt_tz
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from scavhunt.auth_deps import require_admin
from scavhunt.db import get_session, commit_or_raise
from scavhunt.models.hunt import Team
from scavhunt.schemas.hunt import TeamCreate, TeamUpdate, TeamPublic, JoinRequest, TeamSession
from scavhunt.schemas.progress import ProgressPublic, RoadBlockAssignment, TeamWithProgress
from scavhunt.security import make_team_token
from scavhunt.services import teams as team_svc
from scavhunt.services.hunts import get_hunt
from scavhunt.services.progress import assign_road_blocks, get_progress
from scavhunt.services.reports import progress_view, teams_with_progress

router = APIRouter(tags=["teams"])
admin = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])

def to_public(t: Team) -> TeamPublic:
    return TeamPublic(id=t.id, hunt_id=t.hunt_id, name=t.name, join_code=t.join_code, created_at=t.created_at)

@router.post("/teams/join", response_model=TeamSession)
async def join(payload: JoinRequest, session: AsyncSession = Depends(get_session)):
    team = await team_svc.join_hunt(session, payload.join_code, datetime.now(dt_tz.utc))
    return TeamSession(team=to_public(team), access=make_team_token(str(team.id)))

# ---------- admin ----------

@admin.get("/hunts/{hunt_id}/teams", response_model=list[TeamWithProgress])
async def list_teams(hunt_id: UUID, session: AsyncSession = Depends(get_session)):
    await get_hunt(session, hunt_id)
    return await teams_with_progress(session, hunt_id, datetime.now(dt_tz.utc))

@admin.post("/hunts/{hunt_id}/teams", response_model=TeamPublic, status_code=201)
async def create_team(hunt_id: UUID, payload: TeamCreate, session: AsyncSession = Depends(get_session)):
    team = await team_svc.create_team(session, hunt_id, payload.name)
    await commit_or_raise(session, "create team")
    await session.refresh(team)
    return to_public(team)

@admin.get("/teams/{team_id}", response_model=TeamPublic)
async def get_team(team_id: UUID, session: AsyncSession = Depends(get_session)):
    return to_public(await team_svc.get_team(session, team_id))

@admin.patch("/teams/{team_id}", response_model=TeamPublic)
async def update_team(team_id: UUID, payload: TeamUpdate, session: AsyncSession = Depends(get_session)):
    team = await team_svc.update_team(session, team_id, payload.name)
    await commit_or_raise(session, "update team")
    return to_public(team)

@admin.delete("/teams/{team_id}", status_code=204)
async def delete_team(team_id: UUID, session: AsyncSession = Depends(get_session)):
    await team_svc.delete_team(session, team_id)
    await commit_or_raise(session, "delete team")

@admin.get("/teams/{team_id}/progress", response_model=ProgressPublic)
async def team_progress(team_id: UUID, session: AsyncSession = Depends(get_session)):
    progress = await get_progress(session, team_id)
    return await progress_view(session, progress, datetime.now(dt_tz.utc))

@admin.put("/teams/{team_id}/road-blocks", response_model=ProgressPublic)
async def set_road_blocks(team_id: UUID, payload: RoadBlockAssignment, session: AsyncSession = Depends(get_session)):
    now = datetime.now(dt_tz.utc)
    progress = await assign_road_blocks(session, team_id, payload.clue_ids, now)
    return await progress_view(session, progress, now)
