"""SQL Persistence Store — async SQLAlchemy implementation of core/repository_protocols.PersistenceStore.

Invariants:
    - One short session per call: nothing is cached between operations
    - conditional_update_job is a single `UPDATE ... WHERE job_number = :n AND status = :expected`;
      success iff exactly one row changed. This is the claim race guard.
    - Only porter_id and the two prompt refs may ride along with a status change
    - Rows are copied into frozen core records before the session closes
    - SQLAlchemy errors surface as PersistenceFailure (via DatabaseSessionManager)

Design Decisions:
    - Core UPDATE statement over ORM read-modify-write: the status test and the
      write happen in one statement, so no lock or isolation level is needed
    - insert_job swallows only the unique-number IntegrityError and returns None,
      the engine owns the retry policy
"""

import logging
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import func, select, update, delete
from sqlalchemy.exc import IntegrityError

from porthub.core.domain_types import (
    AccountId, Category, FeedbackId, JobId, JobNumber, JobStatus, MessageRef, Role,
)
from porthub.core.errors import PersistenceFailure
from porthub.core.records import Account, FeedbackRecord, Job
from porthub.infrastructure.database import DatabaseSessionManager
from porthub.models.account import AccountRow
from porthub.models.feedback import FeedbackRow
from porthub.models.job import JobRow

logger = logging.getLogger(__name__)

_ACCOUNT_FIELDS = frozenset({
    "display_name", "role", "handle", "bio", "language", "specialty",
    "verification_token", "verified",
})
_JOB_INSERT_FIELDS = frozenset({
    "category", "customer_id", "location", "payment", "description", "needed_by",
})
_JOB_TRANSITION_FIELDS = frozenset({
    "porter_id", "customer_prompt_ref", "porter_prompt_ref",
})


def _column_values(fields: dict, allowed: frozenset[str]) -> dict:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unsupported fields: {sorted(unknown)}")
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in fields.items()
    }


def _account_record(row: AccountRow) -> Account:
    return Account(
        id=AccountId(row.id),
        identity=row.identity,
        display_name=row.display_name,
        role=Role(row.role),
        bio=row.bio,
        language=row.language,
        specialty=Category(row.specialty) if row.specialty else None,
        handle=row.handle,
        verification_token=row.verification_token,
        verified=bool(row.verified),
        likes_count=row.likes_count or 0,
        dislikes_count=row.dislikes_count or 0,
        completed_jobs=row.completed_jobs or 0,
        created_at=row.created_at,
    )


def _job_record(row: JobRow) -> Job:
    return Job(
        id=JobId(row.id),
        job_number=JobNumber(row.job_number),
        category=Category(row.category),
        customer_id=AccountId(row.customer_id),
        status=JobStatus(row.status),
        payment=row.payment or 0,
        porter_id=AccountId(row.porter_id) if row.porter_id else None,
        location=row.location,
        description=row.description,
        needed_by=row.needed_by,
        customer_prompt_ref=(
            MessageRef(row.customer_prompt_ref) if row.customer_prompt_ref else None
        ),
        porter_prompt_ref=(
            MessageRef(row.porter_prompt_ref) if row.porter_prompt_ref else None
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _feedback_record(row: FeedbackRow) -> FeedbackRecord:
    return FeedbackRecord(
        id=FeedbackId(row.id),
        job_id=JobId(row.job_id),
        reviewer_id=AccountId(row.reviewer_id),
        reviewed_id=AccountId(row.reviewed_id),
        liked=bool(row.liked),
        created_at=row.created_at,
    )


class SqlPersistenceStore:
    """Accounts, jobs, and feedback over one DatabaseSessionManager."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    # ─── Accounts ────────────────────────────────────────────────

    async def get_account(self, account_id: AccountId) -> Account | None:
        async with self._db.session() as db:
            row = await db.get(AccountRow, account_id)
            return _account_record(row) if row else None

    async def get_account_by_identity(self, identity: str) -> Account | None:
        async with self._db.session() as db:
            row = await self._account_row(db, identity)
            return _account_record(row) if row else None

    async def upsert_account(self, identity: str, **fields: object) -> Account:
        values = _column_values(fields, _ACCOUNT_FIELDS)
        async with self._db.session() as db:
            row = await self._account_row(db, identity)
            if row is None:
                row = AccountRow(identity=identity, **values)
                db.add(row)
                try:
                    await db.commit()
                    return _account_record(row)
                except IntegrityError:
                    # Concurrent first registration won the insert; update it instead
                    await db.rollback()
                    row = await self._account_row(db, identity)
                    if row is None:
                        raise PersistenceFailure(
                            f"Account {identity} could not be created", "commit",
                        )
            for key, value in values.items():
                setattr(row, key, value)
            await db.commit()
            return _account_record(row)

    async def update_account(self, identity: str, **fields: object) -> Account | None:
        values = _column_values(fields, _ACCOUNT_FIELDS)
        async with self._db.session() as db:
            row = await self._account_row(db, identity)
            if row is None:
                return None
            for key, value in values.items():
                setattr(row, key, value)
            await db.commit()
            return _account_record(row)

    async def delete_account(self, identity: str) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                delete(AccountRow).where(AccountRow.identity == identity),
            )
            await db.commit()
            return result.rowcount > 0

    async def set_feedback_counters(
        self, account_id: AccountId, likes: int, dislikes: int,
    ) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                update(AccountRow)
                .where(AccountRow.id == account_id)
                .values(likes_count=likes, dislikes_count=dislikes)
                .execution_options(synchronize_session=False),
            )
            await db.commit()
            return result.rowcount == 1

    async def increment_completed_jobs(self, account_id: AccountId) -> bool:
        async with self._db.session() as db:
            result = await db.execute(
                update(AccountRow)
                .where(AccountRow.id == account_id)
                .values(completed_jobs=AccountRow.completed_jobs + 1)
                .execution_options(synchronize_session=False),
            )
            await db.commit()
            return result.rowcount == 1

    async def top_porters(self, limit: int) -> list[Account]:
        async with self._db.session() as db:
            result = await db.execute(
                select(AccountRow)
                .where(AccountRow.role == Role.PORTER.value)
                .order_by(
                    AccountRow.likes_count.desc(),
                    AccountRow.completed_jobs.desc(),
                    AccountRow.created_at.asc(),
                )
                .limit(limit),
            )
            return [_account_record(row) for row in result.scalars().all()]

    @staticmethod
    async def _account_row(db, identity: str) -> AccountRow | None:
        result = await db.execute(
            select(AccountRow).where(AccountRow.identity == identity),
        )
        return result.scalar_one_or_none()

    # ─── Jobs ────────────────────────────────────────────────────

    async def insert_job(self, job_number: JobNumber, **fields: object) -> Job | None:
        values = _column_values(fields, _JOB_INSERT_FIELDS)
        async with self._db.session() as db:
            row = JobRow(job_number=job_number, status=JobStatus.OPEN.value, **values)
            db.add(row)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                logger.info(
                    f"Job number {job_number} already taken",
                    extra={"job_number": job_number},
                )
                return None
            return _job_record(row)

    async def get_job(self, job_number: JobNumber) -> Job | None:
        async with self._db.session() as db:
            result = await db.execute(
                select(JobRow).where(JobRow.job_number == job_number),
            )
            row = result.scalar_one_or_none()
            return _job_record(row) if row else None

    async def get_job_by_id(self, job_id: JobId) -> Job | None:
        async with self._db.session() as db:
            row = await db.get(JobRow, job_id)
            return _job_record(row) if row else None

    async def conditional_update_job(
        self,
        job_number: JobNumber,
        expected_status: JobStatus,
        new_status: JobStatus,
        *,
        expected_porter_id: AccountId | None = None,
        **fields: object,
    ) -> bool:
        values = _column_values(fields, _JOB_TRANSITION_FIELDS)
        conditions = [
            JobRow.job_number == job_number,
            JobRow.status == expected_status.value,
        ]
        if expected_porter_id is not None:
            conditions.append(JobRow.porter_id == expected_porter_id)
        async with self._db.session() as db:
            result = await db.execute(
                update(JobRow)
                .where(*conditions)
                .values(
                    status=new_status.value,
                    updated_at=datetime.now(timezone.utc),
                    **values,
                )
                .execution_options(synchronize_session=False),
            )
            await db.commit()
            return result.rowcount == 1

    async def list_open_jobs(self, page: int, page_size: int) -> list[Job]:
        offset = (max(page, 1) - 1) * page_size
        async with self._db.session() as db:
            result = await db.execute(
                select(JobRow)
                .where(JobRow.status == JobStatus.OPEN.value)
                .order_by(JobRow.created_at.desc(), JobRow.job_number.asc())
                .limit(page_size)
                .offset(offset),
            )
            return [_job_record(row) for row in result.scalars().all()]

    async def count_open_jobs(self) -> int:
        async with self._db.session() as db:
            result = await db.execute(
                select(func.count())
                .select_from(JobRow)
                .where(JobRow.status == JobStatus.OPEN.value),
            )
            return int(result.scalar_one() or 0)

    # ─── Feedback ────────────────────────────────────────────────

    async def append_feedback(
        self, job_id: JobId, reviewer_id: AccountId, reviewed_id: AccountId, liked: bool,
    ) -> FeedbackRecord:
        async with self._db.session() as db:
            row = FeedbackRow(
                job_id=job_id, reviewer_id=reviewer_id,
                reviewed_id=reviewed_id, liked=liked,
            )
            db.add(row)
            await db.commit()
            return _feedback_record(row)

    async def list_feedback_for(self, reviewed_id: AccountId) -> list[FeedbackRecord]:
        async with self._db.session() as db:
            result = await db.execute(
                select(FeedbackRow)
                .where(FeedbackRow.reviewed_id == reviewed_id)
                .order_by(FeedbackRow.created_at.asc()),
            )
            return [_feedback_record(row) for row in result.scalars().all()]
