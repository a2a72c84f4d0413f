"""Job Rule Enforcement — validation and authorization checks for every engine operation.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return the rejection on violation, None on success
    - Check order is fixed: validation → authorization → state. A participant
      asking for an illegal transition gets STATE_CONFLICT, an outsider gets
      NOT_AUTHORIZED regardless of state
    - State checks delegate to job_transitions (single authority)

Design Decisions:
    - Return rejections (not raise): the engine raises at one place, tests assert
      on the returned object without pytest.raises boilerplate
"""

from porthub.core.domain_types import AccountId, Category, JobStatus, Role
from porthub.core.errors import (
    AuthorizationRejection, ErrorContext, PortHubError,
    StateConflictRejection, ValidationRejection,
)
from porthub.core.job_transitions import check_transition
from porthub.core.records import Account, Job, JobDraft


def parse_category(raw: str | None) -> Category | None:
    """Map user input to a Category, case-insensitive. None if unknown."""
    if not raw:
        return None
    wanted = raw.strip().lower()
    for category in Category:
        if category.value.lower() == wanted or category.name.lower() == wanted:
            return category
    return None


# --- post --------------------------------------------------------------------

MAX_PAYMENT = 2_147_483_647  # int4 column
TEXT_LIMITS = {"location": 200, "description": 2000, "needed_by": 100}


def check_can_post(
    customer: Account, category: str | None, draft: JobDraft,
) -> PortHubError | None:
    """Only customers post; category must be known; payment and text must fit their columns."""
    if parse_category(category) is None:
        allowed = ", ".join(c.value for c in Category)
        return ValidationRejection(
            f"Unknown or missing category {category!r}. Choose one of: {allowed}.",
            field="category",
        )
    if not isinstance(draft.payment, int) or isinstance(draft.payment, bool):
        return ValidationRejection("Payment must be a whole number.", field="payment")
    if draft.payment < 0:
        return ValidationRejection("Payment cannot be negative.", field="payment")
    if draft.payment > MAX_PAYMENT:
        return ValidationRejection(
            f"Payment cannot exceed {MAX_PAYMENT:,}.", field="payment",
        )
    for field, limit in TEXT_LIMITS.items():
        value = getattr(draft, field)
        if value is not None and len(value) > limit:
            return ValidationRejection(
                f"{field} is limited to {limit} characters.", field=field,
            )
    if customer.role != Role.CUSTOMER:
        return AuthorizationRejection(
            "Only Customers can post jobs.",
            ErrorContext(account_id=customer.id),
        )
    return None


# --- claim -------------------------------------------------------------------

def check_can_claim(job: Job, porter: Account) -> PortHubError | None:
    """Only porters claim, never their own posting, and only OPEN jobs."""
    ctx = ErrorContext(job_number=job.job_number, account_id=porter.id)
    if porter.role != Role.PORTER:
        return AuthorizationRejection("Only Porters can take jobs.", ctx)
    if porter.id == job.customer_id:
        return AuthorizationRejection("You cannot take your own job.", ctx)
    return check_transition(job, JobStatus.PENDING_APPROVAL)


# --- resolve claim -----------------------------------------------------------

def check_can_resolve_claim(
    job: Job, acting: Account, porter_id: AccountId, target: JobStatus,
) -> PortHubError | None:
    """Only the job's customer answers a claim, and only for the pending porter."""
    ctx = ErrorContext(job_number=job.job_number, account_id=acting.id)
    if acting.id != job.customer_id:
        return AuthorizationRejection("Only the job poster can accept or deny.", ctx)
    conflict = check_transition(job, target)
    if conflict:
        return conflict
    if job.porter_id != porter_id:
        return StateConflictRejection(
            f"Claim by {porter_id} is no longer pending on {job.job_number}.",
            current_status=job.status.value, context=ctx,
        )
    return None


# --- resolve completion ------------------------------------------------------

def check_can_resolve_completion(
    job: Job, acting: Account, target: JobStatus,
) -> PortHubError | None:
    """Either participant may confirm or dispute an ACCEPTED job."""
    if not job.is_participant(acting.id):
        return AuthorizationRejection(
            "Only the customer or porter of this job can confirm it.",
            ErrorContext(job_number=job.job_number, account_id=acting.id),
        )
    return check_transition(job, target)


# --- feedback ----------------------------------------------------------------

def check_can_submit_feedback(job: Job, reviewer: Account) -> PortHubError | None:
    """Feedback only from a participant, only about a COMPLETED job."""
    ctx = ErrorContext(job_number=job.job_number, account_id=reviewer.id)
    if not job.is_participant(reviewer.id):
        return AuthorizationRejection(
            "Only participants of this job can leave feedback.", ctx,
        )
    if job.status != JobStatus.COMPLETED:
        return StateConflictRejection(
            f"Feedback requires a COMPLETED job, {job.job_number} is {job.status.value}.",
            current_status=job.status.value, context=ctx,
        )
    return None
