"""Initial schema — accounts, jobs, feedback.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("identity", sa.String(100), nullable=False, unique=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("handle", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text, nullable=True),
        sa.Column("language", sa.String(50), nullable=True),
        sa.Column("specialty", sa.String(50), nullable=True),
        sa.Column("verification_token", sa.String(32), nullable=True),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("likes_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("dislikes_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_jobs", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # No foreign keys: deleting an account keeps its jobs and feedback
    op.create_table(
        "jobs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("job_number", sa.String(16), nullable=False, unique=True),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("customer_id", sa.String(36), nullable=False),
        sa.Column("porter_id", sa.String(36), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="OPEN"),
        sa.Column("location", sa.String(200), nullable=True),
        sa.Column("payment", sa.Integer, nullable=False, server_default="0"),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("needed_by", sa.String(100), nullable=True),
        sa.Column("customer_prompt_ref", sa.String(100), nullable=True),
        sa.Column("porter_prompt_ref", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_jobs_customer_id", "jobs", ["customer_id"])
    op.create_index("ix_jobs_status", "jobs", ["status"])

    op.create_table(
        "feedback",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("job_id", sa.String(36), nullable=False),
        sa.Column("reviewer_id", sa.String(36), nullable=False),
        sa.Column("reviewed_id", sa.String(36), nullable=False),
        sa.Column("liked", sa.Boolean, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_feedback_job_id", "feedback", ["job_id"])
    op.create_index("ix_feedback_reviewed_id", "feedback", ["reviewed_id"])


def downgrade() -> None:
    op.drop_index("ix_feedback_reviewed_id", table_name="feedback")
    op.drop_index("ix_feedback_job_id", table_name="feedback")
    op.drop_table("feedback")
    op.drop_index("ix_jobs_status", table_name="jobs")
    op.drop_index("ix_jobs_customer_id", table_name="jobs")
    op.drop_table("jobs")
    op.drop_table("accounts")
