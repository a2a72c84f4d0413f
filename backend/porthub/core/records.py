"""Domain Records — immutable snapshots of persisted entities handed across the core boundary.

Invariants:
    - Records are frozen: a snapshot never changes after it is read
    - Job.porter_id is None exactly when status is OPEN
    - Job.outstanding_refs lists only refs that are set (0, 1 or 2 entries)

Design Decisions:
    - Frozen dataclasses over ORM objects: core rules stay testable without a DB,
      and no lazy-load can happen outside a session
    - Store re-reads on every call: no record is cached across operations
"""

from dataclasses import dataclass
from datetime import datetime

from porthub.core.domain_types import (
    AccountId, Category, FeedbackId, JobId, JobNumber, JobStatus, MessageRef, Role,
)


@dataclass(frozen=True)
class Account:
    """A registered participant."""
    id: AccountId
    identity: str
    display_name: str
    role: Role
    bio: str | None = None
    language: str | None = None
    specialty: Category | None = None
    handle: str | None = None
    verification_token: str | None = None
    verified: bool = False
    likes_count: int = 0
    dislikes_count: int = 0
    completed_jobs: int = 0
    created_at: datetime | None = None


@dataclass(frozen=True)
class Job:
    """One task posting."""
    id: JobId
    job_number: JobNumber
    category: Category
    customer_id: AccountId
    status: JobStatus
    payment: int = 0
    porter_id: AccountId | None = None
    location: str | None = None
    description: str | None = None
    needed_by: str | None = None
    customer_prompt_ref: MessageRef | None = None
    porter_prompt_ref: MessageRef | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def outstanding_refs(self) -> list[MessageRef]:
        return [
            ref for ref in (self.customer_prompt_ref, self.porter_prompt_ref)
            if ref
        ]

    def is_participant(self, account_id: AccountId) -> bool:
        return account_id in (self.customer_id, self.porter_id)

    def counterpart_of(self, account_id: AccountId) -> AccountId | None:
        """The other participant, or None if account_id is not a participant."""
        if account_id == self.customer_id:
            return self.porter_id
        if self.porter_id is not None and account_id == self.porter_id:
            return self.customer_id
        return None


@dataclass(frozen=True)
class JobDraft:
    """Attributes supplied when posting a job."""
    location: str | None = None
    payment: int = 0
    description: str | None = None
    needed_by: str | None = None


@dataclass(frozen=True)
class FeedbackRecord:
    """One reviewer's like/dislike about one reviewed party for one job."""
    id: FeedbackId
    job_id: JobId
    reviewer_id: AccountId
    reviewed_id: AccountId
    liked: bool
    created_at: datetime | None = None


@dataclass(frozen=True)
class FeedbackTally:
    """Counters derived from all feedback about one account."""
    likes: int
    dislikes: int
    total: int


@dataclass(frozen=True)
class OpenJobsPage:
    """One page of the open job board."""
    jobs: list[Job]
    page: int
    page_size: int
    total: int

    @property
    def total_pages(self) -> int:
        return max(1, -(-self.total // self.page_size))
