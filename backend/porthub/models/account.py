"""Account ORM — a registered participant keyed by external identity.

Invariants:
    - id is a generated string primary key, immutable
    - identity is unique (upsert key)
    - role is PORTER or CUSTOMER (core/domain_types.Role)
    - likes_count / dislikes_count are derived by FeedbackLedger.recompute, never hand-edited

Design Decisions:
    - String enums stored as String columns: readable rows, no DB enum migrations
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from porthub.db.base import Base


class AccountRow(Base):
    """Account entity."""
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    identity: Mapped[str] = mapped_column(
        String(100), nullable=False, unique=True, index=True,
    )
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False)
    handle: Mapped[str | None] = mapped_column(String(100), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str | None] = mapped_column(String(50), nullable=True)
    specialty: Mapped[str | None] = mapped_column(String(50), nullable=True)
    verification_token: Mapped[str | None] = mapped_column(String(32), nullable=True)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    likes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dislikes_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_jobs: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
