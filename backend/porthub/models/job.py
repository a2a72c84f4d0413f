"""Job ORM — one task posting and its lifecycle status.

Invariants:
    - job_number is unique and immutable once assigned (JOB-####)
    - status / porter_id / *_prompt_ref are written only through
      SqlPersistenceStore.conditional_update_job (status-guarded UPDATE)
    - customer_id / porter_id are plain ids, not foreign keys (history survives account deletion)

Design Decisions:
    - Outstanding prompt refs denormalized onto the job row: retraction needs
      nothing but the job
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from porthub.db.base import Base


class JobRow(Base):
    """Job entity."""
    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    job_number: Mapped[str] = mapped_column(
        String(16), nullable=False, unique=True, index=True,
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    porter_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="OPEN", index=True,
    )
    location: Mapped[str | None] = mapped_column(String(200), nullable=True)
    payment: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    needed_by: Mapped[str | None] = mapped_column(String(100), nullable=True)
    customer_prompt_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    porter_prompt_ref: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
