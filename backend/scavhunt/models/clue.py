from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, Text, Uuid, UniqueConstraint, func
from scavhunt.db import Base, JSONList

REQUIRED = "REQUIRED"
EXPRESS_PASS = "EXPRESS_PASS"
ROAD_BLOCK = "ROAD_BLOCK"
SIDE_QUEST_TYPES = (EXPRESS_PASS, ROAD_BLOCK)

class ClueSet(Base):
    __tablename__ = "clue_sets"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    hunt_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("hunts.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    # Cache only; authoritative order is Clue.position
    clue_ids: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("hunt_id", "position", name="uq_clue_set_position"),
    )

class Clue(Base):
    """
    A single clue inside a clue-set.

    REQUIRED clues carry a `position` and form the mandatory path.
    EXPRESS_PASS / ROAD_BLOCK clues always have `position = None`.
    `correct_answer` is stored obscured; reveal it with an `Obscurer`.
    """
    __tablename__ = "clues"
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    clue_set_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("clue_sets.id", ondelete="CASCADE"), index=True, nullable=False)
    clue_type: Mapped[str] = mapped_column(String(16), nullable=False, default=REQUIRED)  # REQUIRED|EXPRESS_PASS|ROAD_BLOCK
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    prompt: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    images: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)
    correct_answer: Mapped[str | None] = mapped_column(Text(), nullable=True)
    allows_media: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)  # EXPRESS_PASS only, signed
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @property
    def is_required(self) -> bool:
        return self.clue_type == REQUIRED
