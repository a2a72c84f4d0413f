"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection (constructor args)
    - conditional_update_job is the only way a job's status changes: it is a
      no-op returning False when the stored status differs from expected_status
    - NotificationChannel and VerificationProbe never raise to the caller

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Async in Protocol: implementations do IO; the pure rules in core/ that
      decide what to write are never async themselves
"""

from typing import Protocol

from porthub.core.domain_types import (
    AccountId, JobId, JobNumber, JobStatus, MessageRef,
)
from porthub.core.notification_content import MessageContent
from porthub.core.records import Account, FeedbackRecord, Job


class AccountRepository(Protocol):
    """Contract for account persistence — implemented by shell."""
    async def get_account(self, account_id: AccountId) -> Account | None: ...
    async def get_account_by_identity(self, identity: str) -> Account | None: ...
    async def upsert_account(self, identity: str, **fields: object) -> Account: ...
    async def update_account(self, identity: str, **fields: object) -> Account | None: ...
    async def delete_account(self, identity: str) -> bool: ...
    async def set_feedback_counters(
        self, account_id: AccountId, likes: int, dislikes: int,
    ) -> bool: ...
    async def increment_completed_jobs(self, account_id: AccountId) -> bool: ...
    async def top_porters(self, limit: int) -> list[Account]: ...


class JobRepository(Protocol):
    """Contract for job persistence — implemented by shell."""
    async def insert_job(self, job_number: JobNumber, **fields: object) -> Job | None:
        """Insert an OPEN job. Returns None when job_number is already taken."""
        ...
    async def get_job(self, job_number: JobNumber) -> Job | None: ...
    async def get_job_by_id(self, job_id: JobId) -> Job | None: ...
    async def conditional_update_job(
        self,
        job_number: JobNumber,
        expected_status: JobStatus,
        new_status: JobStatus,
        *,
        expected_porter_id: AccountId | None = None,
        **fields: object,
    ) -> bool:
        """Move expected_status -> new_status atomically.

        With expected_porter_id the row must also still name that porter.
        """
        ...
    async def list_open_jobs(self, page: int, page_size: int) -> list[Job]: ...
    async def count_open_jobs(self) -> int: ...


class FeedbackRepository(Protocol):
    """Contract for feedback persistence — append-only."""
    async def append_feedback(
        self, job_id: JobId, reviewer_id: AccountId, reviewed_id: AccountId, liked: bool,
    ) -> FeedbackRecord: ...
    async def list_feedback_for(self, reviewed_id: AccountId) -> list[FeedbackRecord]: ...


class PersistenceStore(AccountRepository, JobRepository, FeedbackRepository, Protocol):
    """The three logical tables behind one injected object."""


class NotificationChannel(Protocol):
    """Best-effort delivery to a party. Returns None on delivery failure."""
    async def send(self, identity: str, content: MessageContent) -> MessageRef | None: ...
    async def retract_controls(self, message_ref: MessageRef) -> bool: ...


class VerificationProbe(Protocol):
    """Checks that a token is displayed on the party's external profile."""
    async def check_token(self, handle: str, token: str) -> bool: ...
