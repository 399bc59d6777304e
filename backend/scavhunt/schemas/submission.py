from __future__ import annotations
from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime

from scavhunt.schemas.clue import CluePublic


class SubmitAnswerRequest(BaseModel):
    answer: str = ""
    hunt_id: UUID
    clue_id: UUID
    media_urls: list[str] = Field(default_factory=list)


class SubmitAnswerResponse(BaseModel):
    correct: bool
    hunt_completed: bool
    next_clue: CluePublic | None = None


class AnswerSubmissionPublic(BaseModel):
    id: UUID
    team_id: UUID
    clue_id: UUID
    hunt_id: UUID
    answer_text: str
    media_urls: list[str] = Field(default_factory=list)
    submitted_at: datetime
