"""Feedback Ledger — append-only like/dislike records and the counters derived from them.

Invariants:
    - Records are appended, never updated or deleted
    - An account's likes/dislikes counters equal the tally of all records about it,
      recomputed from scratch (idempotent: running recompute twice changes nothing)
    - Counters for a deleted account are simply not written; records stay
    - credit_completion increments completed_jobs only when the reviewed party is
      the job's porter and still holds the PORTER role

Design Decisions:
    - Recompute over increment for likes/dislikes: a missed or repeated update
      heals on the next recompute
    - completed_jobs is an increment, not derived from records: the engine calls
      it once per accepted feedback answer, and one completion opens one answer
"""

import logging
from typing import Protocol

from porthub.core.domain_types import AccountId, JobId, Role
from porthub.core.errors import ValidationRejection
from porthub.core.feedback_tally import tally
from porthub.core.records import FeedbackRecord, FeedbackTally, Job
from porthub.core.repository_protocols import AccountRepository, FeedbackRepository
from porthub.services.operation_boundary import returns_outcome

logger = logging.getLogger(__name__)


class LedgerStore(AccountRepository, FeedbackRepository, Protocol):
    """What the ledger needs from persistence."""


class FeedbackLedger:
    """Feedback records and reputation counters."""

    def __init__(self, store: LedgerStore):
        self._store = store

    @returns_outcome
    async def record(
        self, job_id: JobId, reviewer_id: AccountId, reviewed_id: AccountId, liked: bool,
    ) -> FeedbackRecord:
        if not isinstance(liked, bool):
            raise ValidationRejection("Feedback must be a like or a dislike.", field="liked")
        record = await self._store.append_feedback(job_id, reviewer_id, reviewed_id, liked)
        logger.info(
            f"Feedback recorded: {'like' if liked else 'dislike'}",
            extra={"account_id": reviewed_id},
        )
        return record

    @returns_outcome
    async def recompute(self, reviewed_id: AccountId) -> FeedbackTally:
        result = tally(await self._store.list_feedback_for(reviewed_id))
        written = await self._store.set_feedback_counters(
            reviewed_id, result.likes, result.dislikes,
        )
        if not written:
            logger.info(
                "Reviewed account no longer exists; counters not written",
                extra={"account_id": reviewed_id},
            )
        return result

    @returns_outcome
    async def credit_completion(self, job: Job, reviewed_id: AccountId) -> bool:
        if reviewed_id != job.porter_id:
            return False
        account = await self._store.get_account(reviewed_id)
        if account is None or account.role != Role.PORTER:
            return False
        credited = await self._store.increment_completed_jobs(reviewed_id)
        if credited:
            logger.info(
                "Completed job credited",
                extra={"job_number": job.job_number, "account_id": reviewed_id},
            )
        return credited
