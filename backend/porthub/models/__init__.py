"""ORM Models — SQLAlchemy declarative models for accounts, jobs, and feedback.

Invariants:
    - All models inherit from Base (db/base.py)
    - No ForeignKey constraints between tables: deleting an account must leave
      its jobs and feedback readable with an orphaned id

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all / alembic
"""

from porthub.models.account import AccountRow  # noqa: F401
from porthub.models.job import JobRow  # noqa: F401
from porthub.models.feedback import FeedbackRow  # noqa: F401
