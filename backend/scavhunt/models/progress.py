from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, DateTime, ForeignKey, Uuid
from scavhunt.db import Base, JSONList

class TeamProgress(Base):
    """
    One row per team.

    `version` is bumped by SQLAlchemy on every UPDATE and checked in the
    WHERE clause, so a write based on a stale read raises StaleDataError
    instead of clobbering the newer state.

    List columns hold stringified UUIDs. Always assign a new list; the ORM
    does not track in-place mutation of JSON values.
    """
    __tablename__ = "team_progress"

    team_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True)
    hunt_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("hunts.id", ondelete="CASCADE"), index=True, nullable=False)

    current_clue_set_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    current_clue_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)

    completed_clue_ids: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    completed_clue_set_ids: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    road_block_clue_ids: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)

    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
