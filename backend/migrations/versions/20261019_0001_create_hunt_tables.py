from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "hunts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="draft"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("status IN ('draft','active','completed')", name="ck_hunt_status"),
    )

    op.create_table(
        "teams",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("hunt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hunts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("join_code", sa.String(length=12), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_teams_hunt_id", "teams", ["hunt_id"])
    op.create_index("ix_teams_join_code", "teams", ["join_code"], unique=True)

    op.create_table(
        "clue_sets",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("hunt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hunts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("clue_ids", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.UniqueConstraint("hunt_id", "position", name="uq_clue_set_position"),
    )
    op.create_index("ix_clue_sets_hunt_id", "clue_sets", ["hunt_id"])

    op.create_table(
        "clues",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("clue_set_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clue_sets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("clue_type", sa.String(length=16), nullable=False, server_default="REQUIRED"),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("prompt", sa.Text(), nullable=False, server_default=""),
        sa.Column("images", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("correct_answer", sa.Text(), nullable=True),
        sa.Column("allows_media", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("minutes", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("clue_type IN ('REQUIRED','EXPRESS_PASS','ROAD_BLOCK')", name="ck_clue_type"),
        sa.CheckConstraint(
            "(clue_type = 'REQUIRED' AND position IS NOT NULL) OR (clue_type <> 'REQUIRED' AND position IS NULL)",
            name="ck_clue_position_by_type",
        ),
        sa.CheckConstraint("minutes IS NULL OR clue_type = 'EXPRESS_PASS'", name="ck_clue_minutes_express_only"),
    )
    op.create_index("ix_clues_clue_set_id", "clues", ["clue_set_id"])

    op.create_table(
        "team_progress",
        sa.Column("team_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("teams.id", ondelete="CASCADE"), primary_key=True, nullable=False),
        sa.Column("hunt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hunts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("current_clue_set_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("current_clue_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("completed_clue_ids", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("completed_clue_set_ids", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("road_block_clue_ids", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("started_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("completed_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index("ix_team_progress_hunt_id", "team_progress", ["hunt_id"])

    op.create_table(
        "answer_submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("team_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("teams.id", ondelete="CASCADE"), nullable=False),
        sa.Column("clue_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("clues.id", ondelete="CASCADE"), nullable=False),
        sa.Column("hunt_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("hunts.id", ondelete="CASCADE"), nullable=False),
        sa.Column("answer_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("media_urls", postgresql.JSONB(astext_type=sa.Text()), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_answer_submissions_team_id", "answer_submissions", ["team_id"])
    op.create_index("ix_answer_submissions_clue_id", "answer_submissions", ["clue_id"])
    op.create_index("ix_answer_submissions_hunt_id", "answer_submissions", ["hunt_id"])

def downgrade() -> None:
    op.drop_index("ix_answer_submissions_hunt_id", table_name="answer_submissions")
    op.drop_index("ix_answer_submissions_clue_id", table_name="answer_submissions")
    op.drop_index("ix_answer_submissions_team_id", table_name="answer_submissions")
    op.drop_table("answer_submissions")
    op.drop_index("ix_team_progress_hunt_id", table_name="team_progress")
    op.drop_table("team_progress")
    op.drop_index("ix_clues_clue_set_id", table_name="clues")
    op.drop_table("clues")
    op.drop_index("ix_clue_sets_hunt_id", table_name="clue_sets")
    op.drop_table("clue_sets")
    op.drop_index("ix_teams_join_code", table_name="teams")
    op.drop_index("ix_teams_hunt_id", table_name="teams")
    op.drop_table("teams")
    op.drop_table("hunts")
