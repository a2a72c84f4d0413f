"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId, JobId, FeedbackId wrap str ids — never mix them with external identities
    - JobNumber is the only human-facing job identifier (format JOB-####)
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to DB String columns without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", str)
JobId = NewType("JobId", str)
FeedbackId = NewType("FeedbackId", str)
JobNumber = NewType("JobNumber", str)      # JOB-####
MessageRef = NewType("MessageRef", str)    # opaque, issued by NotificationChannel


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account role — mutually exclusive, switchable after registration."""
    PORTER = "PORTER"
    CUSTOMER = "CUSTOMER"


class JobStatus(str, Enum):
    """Job lifecycle states — maps to DB `status` column."""
    OPEN = "OPEN"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACCEPTED = "ACCEPTED"
    COMPLETED = "COMPLETED"
    DISPUTED = "DISPUTED"


class Category(str, Enum):
    """Fixed job categories. Porter specialties use the same set."""
    CARGO = "Cargo"
    BOUNTIES = "Bounties"
    FPS_COMBAT = "FPS Combat"
    AIR_COMBAT = "Air Combat"
    TRADING = "Trading"
    SALVAGING = "Salvaging"


class ClaimDecision(str, Enum):
    """Customer's answer to a pending claim."""
    APPROVE = "approve"
    DENY = "deny"


class CompletionOutcome(str, Enum):
    """Participant's answer to the complete/incomplete prompt."""
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"


# Statuses in which porter_id must be set
ASSIGNED_STATUSES = frozenset({
    JobStatus.PENDING_APPROVAL,
    JobStatus.ACCEPTED,
    JobStatus.COMPLETED,
    JobStatus.DISPUTED,
})
