"""Lifecycle Engine — owns every job status change and the side effects that follow it.

Invariants:
    - Every status change is one store.conditional_update_job call; a lost race is
      a STATE_CONFLICT, never a silent overwrite
    - Side effects (notifications, retractions, escalation, feedback windows) run
      only after the conditional update succeeded, and their failure never rolls
      the transition back
    - At most one porter wins a claim: OPEN -> PENDING_APPROVAL happens once
    - Approve/deny are guarded by the pending porter, so a decision on a stale
      claim cannot land on a re-claimed job
    - Outstanding completion-prompt refs live on the job while ACCEPTED and are
      cleared by the same update that leaves ACCEPTED
    - A dispute escalates exactly once (only one ACCEPTED -> DISPUTED can win)
    - The party who confirms completion gets one feedback window about the
      counterpart; the window closes on answer, timeout, or shutdown

Design Decisions:
    - Read, check pure rules, then conditional update: the read is advisory, the
      conditional update decides (see repository_protocols)
    - Paired notifications go out concurrently via NotificationTracker.deliver_many
    - Feedback windows run as background tasks keyed by (job_number, reviewer):
      resolve_completion returns immediately, submit_feedback hands the answer
      to the waiting task and awaits its ledger writes
    - Job numbers come from an injectable random.Random so tests are deterministic
"""

import asyncio
import functools
import logging
import math
import random
from dataclasses import replace

from porthub.core.domain_types import (
    AccountId, ClaimDecision, CompletionOutcome, JobNumber, JobStatus, MessageRef,
)
from porthub.core.enforce_job_rules import (
    check_can_claim, check_can_post, check_can_resolve_claim,
    check_can_resolve_completion, check_can_submit_feedback, parse_category,
)
from porthub.core.errors import (
    ErrorContext, NotFoundRejection, PersistenceFailure,
    StateConflictRejection, ValidationRejection,
)
from porthub.core.job_numbers import generate_job_number, normalize_job_number
from porthub.core.notification_content import (
    claim_acknowledgement, claim_denied, claim_request, completion_prompt,
    counterpart_acted, dispute_escalation, feedback_prompt,
)
from porthub.core.records import Account, FeedbackTally, Job, JobDraft, OpenJobsPage
from porthub.core.repository_protocols import PersistenceStore
from porthub.services.feedback_ledger import FeedbackLedger
from porthub.services.notification_tracker import NotificationTracker
from porthub.services.operation_boundary import returns_outcome
from porthub.services.reply_collector import PendingReply, ReplyCollector

logger = logging.getLogger(__name__)

FeedbackKey = tuple[JobNumber, AccountId]


class LifecycleEngine:
    """Post, claim, approve/deny, complete/dispute, and feedback for jobs."""

    def __init__(
        self,
        store: PersistenceStore,
        notifier: NotificationTracker,
        ledger: FeedbackLedger,
        replies: ReplyCollector | None = None,
        *,
        page_size: int = 10,
        job_number_attempts: int = 20,
        rng: random.Random | None = None,
    ):
        self._store = store
        self._notifier = notifier
        self._ledger = ledger
        self._replies = replies or ReplyCollector()
        self._page_size = page_size
        self._job_number_attempts = job_number_attempts
        self._rng = rng or random.Random()
        self._feedback_tasks: dict[FeedbackKey, asyncio.Task] = {}

    # ─── Reads ───────────────────────────────────────────────────

    @returns_outcome
    async def get_job(self, job_number: str) -> Job:
        return await self._require_job(normalize_job_number(job_number))

    @returns_outcome
    async def list_open_jobs(self, page: int = 1) -> OpenJobsPage:
        """One page of OPEN jobs, newest first. Out-of-range pages are clamped."""
        total = await self._store.count_open_jobs()
        last_page = max(1, math.ceil(total / self._page_size))
        page = min(max(page, 1), last_page)
        jobs = await self._store.list_open_jobs(page, self._page_size)
        return OpenJobsPage(jobs=jobs, page=page, page_size=self._page_size, total=total)

    # ─── Post ────────────────────────────────────────────────────

    @returns_outcome
    async def post(
        self, customer_id: AccountId, category: str, draft: JobDraft | None = None,
    ) -> Job:
        draft = draft or JobDraft()
        customer = await self._require_account(customer_id)
        error = check_can_post(customer, category, draft)
        if error:
            raise error
        parsed = parse_category(category)

        for _ in range(self._job_number_attempts):
            job = await self._store.insert_job(
                generate_job_number(self._rng),
                category=parsed,
                customer_id=customer.id,
                location=draft.location,
                payment=draft.payment,
                description=draft.description,
                needed_by=draft.needed_by,
            )
            if job is not None:
                logger.info(
                    f"Job posted in {parsed.value}",
                    extra={"job_number": job.job_number, "account_id": customer.id},
                )
                return job
        raise PersistenceFailure(
            f"no free job number after {self._job_number_attempts} attempts",
            "insert_job",
            ErrorContext(account_id=customer.id),
        )

    # ─── Claim ───────────────────────────────────────────────────

    @returns_outcome
    async def claim(self, job_number: str, porter_id: AccountId) -> Job:
        number = normalize_job_number(job_number)
        job = await self._require_job(number)
        porter = await self._require_account(porter_id)
        error = check_can_claim(job, porter)
        if error:
            raise error

        won = await self._store.conditional_update_job(
            number, JobStatus.OPEN, JobStatus.PENDING_APPROVAL, porter_id=porter.id,
        )
        if not won:
            raise StateConflictRejection(
                f"{number} was claimed by another porter first",
                context=ErrorContext(
                    job_number=number, account_id=porter.id,
                    user_message="Another porter already took this job.",
                ),
            )
        claimed = replace(job, status=JobStatus.PENDING_APPROVAL, porter_id=porter.id)
        logger.info("Job claimed", extra={"job_number": number, "account_id": porter.id})

        customer = await self._store.get_account(job.customer_id)
        await self._notifier.deliver_many(
            (customer.identity if customer else None, claim_request(claimed, porter)),
            (porter.identity, claim_acknowledgement(claimed)),
            job_number=number,
        )
        return claimed

    # ─── Resolve Claim ───────────────────────────────────────────

    @returns_outcome
    async def resolve_claim(
        self,
        job_number: str,
        customer_id: AccountId,
        porter_id: AccountId,
        decision: ClaimDecision | str,
    ) -> Job:
        decision = _parse_enum(ClaimDecision, decision, "decision")
        number = normalize_job_number(job_number)
        job = await self._require_job(number)
        customer = await self._require_account(customer_id)
        target = (
            JobStatus.ACCEPTED if decision == ClaimDecision.APPROVE else JobStatus.OPEN
        )
        error = check_can_resolve_claim(job, customer, porter_id, target)
        if error:
            raise error

        if decision == ClaimDecision.APPROVE:
            return await self._approve(job, customer, porter_id)
        return await self._deny(job, porter_id)

    async def _approve(self, job: Job, customer: Account, porter_id: AccountId) -> Job:
        number = job.job_number
        won = await self._store.conditional_update_job(
            number, JobStatus.PENDING_APPROVAL, JobStatus.ACCEPTED,
            expected_porter_id=porter_id,
        )
        if not won:
            raise _lost_race(number, customer.id)
        accepted = replace(job, status=JobStatus.ACCEPTED)
        logger.info("Claim approved", extra={"job_number": number, "account_id": porter_id})

        porter = await self._store.get_account(porter_id)
        customer_ref, porter_ref = await self._notifier.deliver_many(
            (customer.identity, completion_prompt(accepted, for_customer=True)),
            (porter.identity if porter else None, completion_prompt(accepted, for_customer=False)),
            job_number=number,
        )
        if customer_ref is None and porter_ref is None:
            return accepted

        # Same-status update: records refs only while the job is still ACCEPTED
        kept = await self._store.conditional_update_job(
            number, JobStatus.ACCEPTED, JobStatus.ACCEPTED,
            expected_porter_id=porter_id,
            customer_prompt_ref=customer_ref,
            porter_prompt_ref=porter_ref,
        )
        if not kept:
            logger.info(
                "Job left ACCEPTED before prompt refs were recorded; retracting",
                extra={"job_number": number},
            )
            await self._notifier.retract([customer_ref, porter_ref], job_number=number)
            return accepted
        return replace(accepted, customer_prompt_ref=customer_ref, porter_prompt_ref=porter_ref)

    async def _deny(self, job: Job, porter_id: AccountId) -> Job:
        number = job.job_number
        won = await self._store.conditional_update_job(
            number, JobStatus.PENDING_APPROVAL, JobStatus.OPEN,
            expected_porter_id=porter_id, porter_id=None,
        )
        if not won:
            raise _lost_race(number, job.customer_id)
        reopened = replace(job, status=JobStatus.OPEN, porter_id=None)
        logger.info("Claim denied", extra={"job_number": number, "account_id": porter_id})

        porter = await self._store.get_account(porter_id)
        await self._notifier.deliver(
            porter.identity if porter else None, claim_denied(reopened), job_number=number,
        )
        return reopened

    # ─── Resolve Completion ──────────────────────────────────────

    @returns_outcome
    async def resolve_completion(
        self,
        job_number: str,
        account_id: AccountId,
        outcome: CompletionOutcome | str,
    ) -> Job:
        outcome = _parse_enum(CompletionOutcome, outcome, "outcome")
        number = normalize_job_number(job_number)
        job = await self._require_job(number)
        acting = await self._require_account(account_id)
        target = (
            JobStatus.COMPLETED if outcome == CompletionOutcome.COMPLETE
            else JobStatus.DISPUTED
        )
        error = check_can_resolve_completion(job, acting, target)
        if error:
            raise error

        won = await self._store.conditional_update_job(
            number, JobStatus.ACCEPTED, target,
            expected_porter_id=job.porter_id,
            customer_prompt_ref=None,
            porter_prompt_ref=None,
        )
        if not won:
            raise _lost_race(number, acting.id)
        resolved = replace(
            job, status=target, customer_prompt_ref=None, porter_prompt_ref=None,
        )
        logger.info(
            f"Job {target.value.lower()}",
            extra={"job_number": number, "account_id": acting.id, "status": target.value},
        )

        counterpart_id = job.counterpart_of(acting.id)
        counterpart = (
            await self._store.get_account(counterpart_id) if counterpart_id else None
        )
        await asyncio.gather(
            self._notifier.retract(job.outstanding_refs, job_number=number),
            self._notifier.deliver(
                counterpart.identity if counterpart else None,
                counterpart_acted(resolved),
                job_number=number,
            ),
        )

        if target == JobStatus.COMPLETED:
            await self._open_feedback_window(resolved, acting, counterpart_id, counterpart)
        else:
            await self._notifier.escalate(
                dispute_escalation(resolved, acting.id), job_number=number,
            )
        return resolved

    # ─── Feedback ────────────────────────────────────────────────

    @returns_outcome
    async def submit_feedback(
        self, job_number: str, reviewer_id: AccountId, liked: bool,
    ) -> FeedbackTally:
        """Answer an open feedback window. Returns the reviewed party's new tally."""
        if not isinstance(liked, bool):
            raise ValidationRejection("Feedback must be a like or a dislike.", field="liked")
        number = normalize_job_number(job_number)
        job = await self._require_job(number)
        reviewer = await self._require_account(reviewer_id)
        error = check_can_submit_feedback(job, reviewer)
        if error:
            raise error

        key = (number, reviewer.id)
        task = self._feedback_tasks.get(key)
        if task is None or not self._replies.offer(key, liked):
            raise StateConflictRejection(
                f"No feedback window open for {reviewer.id} on {number}",
                current_status=job.status.value,
                context=ErrorContext(
                    job_number=number, account_id=reviewer.id,
                    user_message="Feedback for this job is closed.",
                ),
            )
        result = await task
        if result is None:
            raise _lost_race(number, reviewer.id)
        return result

    def pending_feedback(self) -> list[FeedbackKey]:
        return list(self._feedback_tasks)

    async def shutdown(self) -> None:
        """Close every open feedback window and wait for the tasks to finish."""
        self._replies.cancel_all()
        tasks = list(self._feedback_tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _open_feedback_window(
        self,
        job: Job,
        reviewer: Account,
        reviewed_id: AccountId | None,
        reviewed: Account | None,
    ) -> None:
        if reviewed_id is None:
            return
        key = (job.job_number, reviewer.id)
        pending = self._replies.expect(key)
        prompt_ref = await self._notifier.deliver(
            reviewer.identity, feedback_prompt(job, reviewed), job_number=job.job_number,
        )
        task = asyncio.create_task(
            self._collect_feedback(job, reviewer.id, reviewed_id, pending, prompt_ref),
        )
        self._feedback_tasks[key] = task
        task.add_done_callback(functools.partial(self._forget_feedback_task, key))

    async def _collect_feedback(
        self,
        job: Job,
        reviewer_id: AccountId,
        reviewed_id: AccountId,
        pending: PendingReply,
        prompt_ref: MessageRef | None,
    ) -> FeedbackTally | None:
        liked = await self._replies.wait(pending)
        await self._notifier.retract([prompt_ref], job_number=job.job_number)
        if liked is None:
            logger.info(
                "Feedback window closed without an answer",
                extra={"job_number": job.job_number, "account_id": reviewer_id},
            )
            return None

        (await self._ledger.record(job.id, reviewer_id, reviewed_id, liked)).unwrap()
        result = (await self._ledger.recompute(reviewed_id)).unwrap()
        (await self._ledger.credit_completion(job, reviewed_id)).unwrap()
        return result

    def _forget_feedback_task(self, key: FeedbackKey, task: asyncio.Task) -> None:
        if self._feedback_tasks.get(key) is task:
            del self._feedback_tasks[key]
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                f"Feedback collection failed: {task.exception()}",
                extra={"job_number": key[0], "account_id": key[1]},
            )

    # ─── Lookups ─────────────────────────────────────────────────

    async def _require_job(self, job_number: JobNumber) -> Job:
        job = await self._store.get_job(job_number)
        if job is None:
            raise NotFoundRejection("Job", job_number, ErrorContext(job_number=job_number))
        return job

    async def _require_account(self, account_id: AccountId) -> Account:
        account = await self._store.get_account(account_id)
        if account is None:
            raise NotFoundRejection(
                "Account", account_id,
                ErrorContext(
                    account_id=account_id,
                    user_message="Create a profile first.",
                ),
            )
        return account


def _parse_enum(enum_type, raw, field: str):
    if isinstance(raw, enum_type):
        return raw
    try:
        return enum_type(str(raw).strip().lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_type)
        raise ValidationRejection(
            f"Unknown {field} {raw!r}. Choose one of: {allowed}.", field=field,
        ) from None


def _lost_race(job_number: JobNumber, account_id: AccountId) -> StateConflictRejection:
    return StateConflictRejection(
        f"{job_number} changed state before this action landed",
        context=ErrorContext(job_number=job_number, account_id=account_id),
    )
