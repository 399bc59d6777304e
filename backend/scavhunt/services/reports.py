from __future__ import annotations
from datetime import datetime
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from scavhunt.models.progress import TeamProgress
from scavhunt.schemas.hunt import TeamPublic
from scavhunt.schemas.progress import ProgressPublic, TeamWithProgress
from scavhunt.services.clues import required_clue_ids_in_hunt
from scavhunt.services.progress import gated_clue_set_ids, id_list
from scavhunt.services.side_quests import get_time_adjustment
from scavhunt.services.teams import list_teams
from scavhunt.services.timing import effective, elapsed, format_elapsed


async def progress_view(session: AsyncSession, progress: TeamProgress, now: datetime) -> ProgressPublic:
    required = await required_clue_ids_in_hunt(session, progress.hunt_id)
    done = id_list(progress.completed_clue_ids)
    minutes = await get_time_adjustment(session, progress.team_id)

    spent = elapsed(progress.started_at, progress.completed_at, now)
    eff = effective(spent, minutes) if spent is not None else None

    return ProgressPublic(
        team_id=progress.team_id,
        hunt_id=progress.hunt_id,
        current_clue_set_id=progress.current_clue_set_id,
        current_clue_id=progress.current_clue_id,
        completed_clue_ids=done,
        completed_clue_set_ids=id_list(progress.completed_clue_set_ids),
        road_block_clue_ids=id_list(progress.road_block_clue_ids),
        started_at=progress.started_at,
        completed_at=progress.completed_at,
        total_clue_count=len(required),
        completed_required_clue_count=len(required.intersection(done)),
        pending_road_block_set_ids=await gated_clue_set_ids(session, progress),
        time_adjustment_minutes=minutes,
        elapsed_seconds=int(spent.total_seconds()) if spent is not None else None,
        effective_seconds=int(eff.total_seconds()) if eff is not None else None,
        effective_display=format_elapsed(eff) if eff is not None else None,
    )


async def teams_with_progress(session: AsyncSession, hunt_id: UUID, now: datetime) -> list[TeamWithProgress]:
    out: list[TeamWithProgress] = []
    for team in await list_teams(session, hunt_id):
        progress = await session.get(TeamProgress, team.id)
        out.append(TeamWithProgress(
            team=TeamPublic(id=team.id, hunt_id=team.hunt_id, name=team.name, join_code=team.join_code, created_at=team.created_at),
            progress=await progress_view(session, progress, now) if progress else None,
        ))
    return out
