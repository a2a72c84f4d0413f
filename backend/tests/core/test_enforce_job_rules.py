"""Job Rule Enforcement — tests for pure validation/authorization/state checks.

Tests cover:
    - parse_category accepts values and names, case-insensitive
    - check_can_post: category, payment, role
    - check_can_claim: porter role, own job, OPEN only
    - check_can_resolve_claim: customer only, pending porter must match
    - check_can_resolve_completion: participants only, ACCEPTED only
    - check_can_submit_feedback: participants only, COMPLETED only
    - Outsiders get NOT_AUTHORIZED regardless of state
"""

from porthub.core.domain_types import (
    AccountId, Category, JobId, JobNumber, JobStatus, Role,
)
from porthub.core.enforce_job_rules import (
    MAX_PAYMENT, TEXT_LIMITS, check_can_claim, check_can_post, check_can_resolve_claim,
    check_can_resolve_completion, check_can_submit_feedback, parse_category,
)
from porthub.core.records import Account, Job, JobDraft

CUSTOMER = Account(id=AccountId("c1"), identity="u-c", display_name="Cass", role=Role.CUSTOMER)
PORTER = Account(id=AccountId("p1"), identity="u-p", display_name="Pike", role=Role.PORTER)
OTHER_PORTER = Account(id=AccountId("p2"), identity="u-q", display_name="Quill", role=Role.PORTER)


def _job(status: JobStatus = JobStatus.OPEN, porter_id: str | None = None) -> Job:
    return Job(
        id=JobId("j1"), job_number=JobNumber("JOB-2001"), category=Category.CARGO,
        customer_id=CUSTOMER.id, status=status,
        porter_id=AccountId(porter_id) if porter_id else None,
    )


# ─── parse_category ──────────────────────────────────────────────

def test_parse_category_by_value_and_name():
    assert parse_category("Cargo") is Category.CARGO
    assert parse_category("fps combat") is Category.FPS_COMBAT
    assert parse_category("AIR_COMBAT") is Category.AIR_COMBAT


def test_parse_category_unknown_or_empty():
    assert parse_category("Mining") is None
    assert parse_category("") is None
    assert parse_category(None) is None


# ─── check_can_post ──────────────────────────────────────────────

def test_customer_can_post():
    assert check_can_post(CUSTOMER, "Cargo", JobDraft(payment=5000)) is None


def test_unknown_category_is_validation_error():
    error = check_can_post(CUSTOMER, "Mining", JobDraft())
    assert error.code == "VALIDATION_ERROR"
    assert error.field == "category"


def test_negative_payment_rejected():
    error = check_can_post(CUSTOMER, "Cargo", JobDraft(payment=-1))
    assert error.code == "VALIDATION_ERROR"
    assert error.field == "payment"


def test_bool_payment_rejected():
    error = check_can_post(CUSTOMER, "Cargo", JobDraft(payment=True))
    assert error is not None
    assert error.field == "payment"


def test_payment_must_fit_int4_column():
    assert check_can_post(CUSTOMER, "Cargo", JobDraft(payment=MAX_PAYMENT)) is None
    error = check_can_post(CUSTOMER, "Cargo", JobDraft(payment=3_000_000_000))
    assert error.code == "VALIDATION_ERROR"
    assert error.field == "payment"


def test_text_fields_bounded_by_column_length():
    for field, limit in TEXT_LIMITS.items():
        assert check_can_post(CUSTOMER, "Cargo", JobDraft(**{field: "x" * limit})) is None
        error = check_can_post(CUSTOMER, "Cargo", JobDraft(**{field: "x" * (limit + 1)}))
        assert error.code == "VALIDATION_ERROR"
        assert error.field == field


def test_porter_cannot_post():
    error = check_can_post(PORTER, "Cargo", JobDraft())
    assert error.code == "NOT_AUTHORIZED"


# ─── check_can_claim ─────────────────────────────────────────────

def test_porter_can_claim_open_job():
    assert check_can_claim(_job(), PORTER) is None


def test_customer_cannot_claim():
    assert check_can_claim(_job(), CUSTOMER).code == "NOT_AUTHORIZED"


def test_cannot_claim_own_job():
    own = Account(id=CUSTOMER.id, identity="u-c", display_name="Cass", role=Role.PORTER)
    assert check_can_claim(_job(), own).code == "NOT_AUTHORIZED"


def test_claim_on_pending_job_is_conflict():
    error = check_can_claim(_job(JobStatus.PENDING_APPROVAL, "p2"), PORTER)
    assert error.code == "STATE_CONFLICT"


# ─── check_can_resolve_claim ─────────────────────────────────────

def test_customer_resolves_pending_claim():
    job = _job(JobStatus.PENDING_APPROVAL, "p1")
    assert check_can_resolve_claim(job, CUSTOMER, PORTER.id, JobStatus.ACCEPTED) is None
    assert check_can_resolve_claim(job, CUSTOMER, PORTER.id, JobStatus.OPEN) is None


def test_porter_cannot_resolve_claim():
    job = _job(JobStatus.PENDING_APPROVAL, "p1")
    error = check_can_resolve_claim(job, PORTER, PORTER.id, JobStatus.ACCEPTED)
    assert error.code == "NOT_AUTHORIZED"


def test_resolving_for_wrong_porter_is_conflict():
    job = _job(JobStatus.PENDING_APPROVAL, "p1")
    error = check_can_resolve_claim(job, CUSTOMER, OTHER_PORTER.id, JobStatus.ACCEPTED)
    assert error.code == "STATE_CONFLICT"


def test_resolving_accepted_job_is_conflict():
    job = _job(JobStatus.ACCEPTED, "p1")
    error = check_can_resolve_claim(job, CUSTOMER, PORTER.id, JobStatus.OPEN)
    assert error.code == "STATE_CONFLICT"


# ─── check_can_resolve_completion ────────────────────────────────

def test_either_participant_can_resolve_completion():
    job = _job(JobStatus.ACCEPTED, "p1")
    assert check_can_resolve_completion(job, CUSTOMER, JobStatus.COMPLETED) is None
    assert check_can_resolve_completion(job, PORTER, JobStatus.DISPUTED) is None


def test_outsider_rejected_regardless_of_state():
    for status in (JobStatus.ACCEPTED, JobStatus.COMPLETED):
        error = check_can_resolve_completion(
            _job(status, "p1"), OTHER_PORTER, JobStatus.COMPLETED,
        )
        assert error.code == "NOT_AUTHORIZED"


def test_completion_after_terminal_is_conflict():
    job = _job(JobStatus.COMPLETED, "p1")
    error = check_can_resolve_completion(job, PORTER, JobStatus.DISPUTED)
    assert error.code == "STATE_CONFLICT"


# ─── check_can_submit_feedback ───────────────────────────────────

def test_feedback_on_completed_job_allowed():
    assert check_can_submit_feedback(_job(JobStatus.COMPLETED, "p1"), CUSTOMER) is None


def test_feedback_before_completion_is_conflict():
    error = check_can_submit_feedback(_job(JobStatus.ACCEPTED, "p1"), CUSTOMER)
    assert error.code == "STATE_CONFLICT"


def test_feedback_from_outsider_rejected():
    error = check_can_submit_feedback(_job(JobStatus.COMPLETED, "p1"), OTHER_PORTER)
    assert error.code == "NOT_AUTHORIZED"
