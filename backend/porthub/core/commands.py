"""Commands — explicit request objects for every engine operation, plus control-id parsing.

Invariants:
    - Commands are frozen dataclasses carrying everything the operation needs
    - parse_control is PURE: action id + acting account → command, or None if
      the id is not one the engine issued
    - parse_control accepts exactly the ids built by core/notification_content

Design Decisions:
    - Command objects over per-UI-action callbacks: the router builds a command,
      services/command_dispatch routes it, the result is a typed Outcome
    - Acting account is never read from the action id: a forwarded prompt
      cannot impersonate its original recipient
"""

from dataclasses import dataclass, field

from porthub.core.domain_types import (
    AccountId, ClaimDecision, CompletionOutcome, JobNumber,
)
from porthub.core.job_numbers import normalize_job_number
from porthub.core.records import JobDraft


@dataclass(frozen=True)
class PostJob:
    customer_id: AccountId
    category: str
    draft: JobDraft = field(default_factory=JobDraft)


@dataclass(frozen=True)
class ClaimJob:
    job_number: JobNumber
    porter_id: AccountId


@dataclass(frozen=True)
class ResolveClaim:
    job_number: JobNumber
    customer_id: AccountId
    porter_id: AccountId
    decision: ClaimDecision


@dataclass(frozen=True)
class ResolveCompletion:
    job_number: JobNumber
    account_id: AccountId
    outcome: CompletionOutcome


@dataclass(frozen=True)
class SubmitFeedback:
    job_number: JobNumber
    reviewer_id: AccountId
    liked: bool


Command = PostJob | ClaimJob | ResolveClaim | ResolveCompletion | SubmitFeedback


def parse_control(action_id: str, actor_id: AccountId) -> Command | None:
    """Translate a pressed control back into a command."""
    parts = action_id.strip().split(":")
    if len(parts) < 3:
        return None
    scope, verb, job_number = parts[0], parts[1], normalize_job_number(parts[2])

    if scope == "job" and verb in ("take", "claim") and len(parts) == 3:
        return ClaimJob(job_number=job_number, porter_id=actor_id)

    if scope == "job" and verb in ("accept", "deny") and len(parts) == 4 and parts[3]:
        return ResolveClaim(
            job_number=job_number,
            customer_id=actor_id,
            porter_id=AccountId(parts[3]),
            decision=ClaimDecision.APPROVE if verb == "accept" else ClaimDecision.DENY,
        )

    if scope == "job" and len(parts) == 3:
        try:
            outcome = CompletionOutcome(verb)
        except ValueError:
            return None
        return ResolveCompletion(
            job_number=job_number, account_id=actor_id, outcome=outcome,
        )

    if scope == "feedback" and verb in ("like", "dislike") and len(parts) == 3:
        return SubmitFeedback(
            job_number=job_number, reviewer_id=actor_id, liked=verb == "like",
        )

    return None
