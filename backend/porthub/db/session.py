"""Schema Bootstrap — creates tables straight from ORM metadata.

Invariants:
    - For SQLite/local runs and test fixtures only; production schemas come from alembic

Design Decisions:
    - Imports porthub.models lazily so Base.metadata is complete whoever calls first
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from porthub.db.base import Base


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables directly from ORM metadata."""
    import porthub.models  # noqa: F401  (populate Base.metadata)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
