from __future__ import annotations
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision = "20251019_0002"
down_revision = "20251019_0001"
branch_labels = None
depends_on = None

def upgrade() -> None:
    op.create_table(
        "competitions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=32), nullable=False),
        sa.Column("tags", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("prize_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("currency", sa.String(length=8), nullable=False, server_default="VND"),
        sa.Column("start_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("end_date", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("submission_deadline", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("max_participants", sa.Integer(), nullable=True),
        sa.Column("current_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("evaluation_metric", sa.String(length=64), nullable=True),
        sa.Column("dataset_url", sa.Text(), nullable=True),
        sa.Column("rules", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="upcoming"),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.CheckConstraint("end_date > start_date", name="ck_competitions_dates"),
        sa.CheckConstraint("current_participants >= 0", name="ck_competitions_participants_nonneg"),
    )
    op.create_index("ix_competitions_organization_id", "competitions", ["organization_id"])
    op.create_index("ix_competitions_category", "competitions", ["category"])
    op.create_index("ix_competitions_status", "competitions", ["status"])
    op.create_index("ix_competitions_is_featured", "competitions", ["is_featured"])

    op.create_table(
        "participants",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("competition_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("team_name", sa.String(length=120), nullable=True),
        sa.Column("joined_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("last_submission_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("best_score", sa.Float(), nullable=True),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("is_disqualified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.create_index("ix_participants_user_id", "participants", ["user_id"])
    op.create_index("ix_participants_competition_id", "participants", ["competition_id"])
    op.create_unique_constraint("uq_participant_user_competition", "participants", ["user_id", "competition_id"])

    op.create_table(
        "submissions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column("participant_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("participants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("competition_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("competitions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("file_name", sa.String(length=255), nullable=False),
        sa.Column("file_url", sa.Text(), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=True),
        sa.Column("score", sa.Float(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("feedback", sa.Text(), nullable=True),
        sa.Column("submitted_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("now()"), nullable=False),
    )
    op.create_index("ix_submissions_participant_id", "submissions", ["participant_id"])
    op.create_index("ix_submissions_competition_id", "submissions", ["competition_id"])
    op.create_index("ix_submissions_competition_score", "submissions", ["competition_id", "score"])

def downgrade() -> None:
    op.drop_index("ix_submissions_competition_score", table_name="submissions")
    op.drop_index("ix_submissions_competition_id", table_name="submissions")
    op.drop_index("ix_submissions_participant_id", table_name="submissions")
    op.drop_table("submissions")
    op.drop_constraint("uq_participant_user_competition", "participants", type_="unique")
    op.drop_index("ix_participants_competition_id", table_name="participants")
    op.drop_index("ix_participants_user_id", table_name="participants")
    op.drop_table("participants")
    op.drop_index("ix_competitions_is_featured", table_name="competitions")
    op.drop_index("ix_competitions_status", table_name="competitions")
    op.drop_index("ix_competitions_category", table_name="competitions")
    op.drop_index("ix_competitions_organization_id", table_name="competitions")
    op.drop_table("competitions")
