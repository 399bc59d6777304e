from __future__ import annotations
from pydantic import BaseModel, Field, model_validator
from typing import Literal
from uuid import UUID
from datetime import datetime

from scavhunt.models.clue import Clue, ClueSet
from scavhunt.services.obscure import Obscurer

ClueType = Literal["REQUIRED", "EXPRESS_PASS", "ROAD_BLOCK"]

class ClueSetCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)

class ClueSetUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=120)

class ClueSetPublic(BaseModel):
    id: UUID
    hunt_id: UUID
    name: str
    position: int
    clue_ids: list[UUID] = Field(default_factory=list)

    @classmethod
    def from_clue_set(cls, cs: ClueSet) -> "ClueSetPublic":
        return cls(id=cs.id, hunt_id=cs.hunt_id, name=cs.name, position=cs.position, clue_ids=list(cs.clue_ids or []))

class ClueCreate(BaseModel):
    clue_type: ClueType = "REQUIRED"
    prompt: str = ""
    images: list[str] = Field(default_factory=list)
    correct_answer: str | None = None
    allows_media: bool = False
    minutes: int | None = Field(default=None, description="Signed time adjustment, EXPRESS_PASS only")

    @model_validator(mode="after")
    def minutes_only_on_express_pass(self):
        if self.minutes is not None and self.clue_type != "EXPRESS_PASS":
            raise ValueError("minutes is only valid for EXPRESS_PASS clues")
        return self

class ClueUpdate(BaseModel):
    clue_type: ClueType | None = None
    prompt: str | None = None
    images: list[str] | None = None
    correct_answer: str | None = None
    allows_media: bool | None = None
    minutes: int | None = None

class CluePublic(BaseModel):
    """Team-facing view: never carries the correct answer."""
    id: UUID
    clue_set_id: UUID
    clue_type: ClueType
    position: int | None
    prompt: str
    images: list[str]
    allows_media: bool
    minutes: int | None
    has_text_answer: bool

    @classmethod
    def from_clue(cls, clue: Clue, obscurer: Obscurer) -> "CluePublic":
        return cls(
            id=clue.id, clue_set_id=clue.clue_set_id, clue_type=clue.clue_type, position=clue.position,
            prompt=clue.prompt, images=list(clue.images or []), allows_media=clue.allows_media,
            minutes=clue.minutes, has_text_answer=bool(obscurer.reveal(clue.correct_answer)),
        )

class ClueAdmin(CluePublic):
    correct_answer: str | None = None
    created_at: datetime

    @classmethod
    def from_clue(cls, clue: Clue, obscurer: Obscurer) -> "ClueAdmin":
        answer = obscurer.reveal(clue.correct_answer)
        return cls(
            id=clue.id, clue_set_id=clue.clue_set_id, clue_type=clue.clue_type, position=clue.position,
            prompt=clue.prompt, images=list(clue.images or []), allows_media=clue.allows_media,
            minutes=clue.minutes, has_text_answer=bool(answer), correct_answer=answer or None,
            created_at=clue.created_at,
        )
