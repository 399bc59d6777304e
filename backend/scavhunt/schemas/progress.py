from __future__ import annotations
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime

from scavhunt.schemas.hunt import TeamPublic


class ProgressPublic(BaseModel):
    team_id: UUID
    hunt_id: UUID
    current_clue_set_id: UUID | None
    current_clue_id: UUID | None
    completed_clue_ids: list[UUID] = Field(default_factory=list)
    completed_clue_set_ids: list[UUID] = Field(default_factory=list)
    road_block_clue_ids: list[UUID] = Field(default_factory=list)
    started_at: datetime | None
    completed_at: datetime | None
    # Derived
    total_clue_count: int = 0
    completed_required_clue_count: int = 0
    pending_road_block_set_ids: list[UUID] = Field(default_factory=list, description="Clue-sets held open by an uncleared road block")
    time_adjustment_minutes: int = 0
    elapsed_seconds: int | None = None
    effective_seconds: int | None = None
    effective_display: str | None = None


class TimeAdjustment(BaseModel):
    total_minutes: int


class RoadBlockAssignment(BaseModel):
    clue_ids: list[UUID] = Field(default_factory=list)


class TeamWithProgress(BaseModel):
    team: TeamPublic
    progress: ProgressPublic | None = None
