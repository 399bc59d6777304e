from __future__ import annotations
import uuid
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Text, DateTime, ForeignKey, Uuid, func
from scavhunt.db import Base, JSONList


class AnswerSubmission(Base):
    """Append-only audit row; one per attempt, right or wrong."""
    __tablename__ = "answer_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    team_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("teams.id", ondelete="CASCADE"), index=True, nullable=False
    )
    clue_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("clues.id", ondelete="CASCADE"), index=True, nullable=False
    )
    hunt_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("hunts.id", ondelete="CASCADE"), index=True, nullable=False
    )

    answer_text: Mapped[str] = mapped_column(Text(), nullable=False, default="")
    media_urls: Mapped[list] = mapped_column(JSONList, nullable=False, default=list)

    submitted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
