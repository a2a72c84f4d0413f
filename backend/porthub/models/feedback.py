"""Feedback ORM — one like/dislike about one party for one job.

Invariants:
    - Append-only: rows are never updated or deleted
    - No uniqueness on (job_id, reviewer_id): aggregation is a full recomputation
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from porthub.db.base import Base


class FeedbackRow(Base):
    """FeedbackRecord entity."""
    __tablename__ = "feedback"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    job_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    reviewer_id: Mapped[str] = mapped_column(String(36), nullable=False)
    reviewed_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    liked: Mapped[bool] = mapped_column(Boolean, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
