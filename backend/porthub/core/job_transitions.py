"""Job Transitions — the single authority on legal job status changes.

Job lifecycle:
    OPEN → PENDING_APPROVAL → ACCEPTED → COMPLETED | DISPUTED
    PENDING_APPROVAL → OPEN   (claim denied; job claimable again)

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - COMPLETED and DISPUTED are terminal: no outgoing edges
    - Every status write in the engine is checked here first; no call site
      compares raw status strings

Design Decisions:
    - Fail-closed: an edge not in _TRANSITIONS is illegal, no implicit transitions
    - Return error (not raise): callers decide whether a conflict is fatal
"""

from porthub.core.domain_types import JobStatus
from porthub.core.errors import ErrorContext, StateConflictRejection
from porthub.core.records import Job


# Valid transitions: {from_state: {allowed_to_states}}
_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.OPEN: frozenset({JobStatus.PENDING_APPROVAL}),
    JobStatus.PENDING_APPROVAL: frozenset({JobStatus.ACCEPTED, JobStatus.OPEN}),
    JobStatus.ACCEPTED: frozenset({JobStatus.COMPLETED, JobStatus.DISPUTED}),
    # Terminal states — no outgoing transitions
    JobStatus.COMPLETED: frozenset(),
    JobStatus.DISPUTED: frozenset(),
}


def valid_transitions(status: JobStatus) -> frozenset[JobStatus]:
    """Return the set of legal target states from the given state."""
    return _TRANSITIONS.get(status, frozenset())


def is_terminal(status: JobStatus) -> bool:
    return not valid_transitions(status)


def is_legal(current: JobStatus, target: JobStatus) -> bool:
    return target in valid_transitions(current)


def check_transition(
    job: Job, target: JobStatus,
) -> StateConflictRejection | None:
    """Return a conflict if job.status → target is not a legal edge, else None."""
    if is_legal(job.status, target):
        return None
    allowed = ", ".join(sorted(s.value for s in valid_transitions(job.status)))
    return StateConflictRejection(
        f"Invalid job transition: {job.status.value} → {target.value}. "
        f"Allowed from {job.status.value}: [{allowed}]",
        current_status=job.status.value,
        context=ErrorContext(job_number=job.job_number),
    )
