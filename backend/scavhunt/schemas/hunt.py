from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Literal
from uuid import UUID
from datetime import datetime

HuntStatus = Literal["draft", "active", "completed"]

class HuntCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: str | None = None

class HuntUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    description: str | None = None
    status: HuntStatus | None = None

class HuntPublic(BaseModel):
    id: UUID
    name: str
    description: str | None
    status: HuntStatus
    created_at: datetime

class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)

class TeamUpdate(BaseModel):
    name: str = Field(min_length=1, max_length=120)

class TeamPublic(BaseModel):
    id: UUID
    hunt_id: UUID
    name: str
    join_code: str
    created_at: datetime

class JoinRequest(BaseModel):
    join_code: str = Field(min_length=1, max_length=32)

class TeamSession(BaseModel):
    team: TeamPublic
    access: str
