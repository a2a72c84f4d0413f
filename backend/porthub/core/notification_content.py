"""Notification Content — pure builders for every message the engine delivers.

Invariants:
    - All functions are pure (no IO, no async, no DB)
    - Interactive controls carry action ids that core/commands.parse_control
      turns back into commands; both sides share the *_action_id helpers below
    - Content is transport-neutral: text, optional fields, optional controls

Design Decisions:
    - Builders live in core, delivery in services/notification_tracker: the engine
      can be tested for *what* it sends without any channel
    - Job card fields mirror what the board shows (payment, location, needed by)
"""

from dataclasses import dataclass, field
from enum import Enum

from porthub.core.domain_types import AccountId, ClaimDecision, CompletionOutcome, JobNumber
from porthub.core.records import Account, Job

TICKET_NOTICE = (
    "If something went sideways, please open a support ticket so an admin can help."
)


class ControlStyle(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    SUCCESS = "success"
    DANGER = "danger"


@dataclass(frozen=True)
class Control:
    """One interactive control (button) on a delivered message."""
    action_id: str
    label: str
    style: ControlStyle = ControlStyle.SECONDARY


@dataclass(frozen=True)
class MessageContent:
    """Transport-neutral message: text, labelled fields, controls."""
    text: str
    fields: tuple[tuple[str, str], ...] = ()
    controls: tuple[Control, ...] = ()
    kind: str = "notice"

    @property
    def is_interactive(self) -> bool:
        return bool(self.controls)

    def to_payload(self) -> dict:
        return {
            "kind": self.kind,
            "text": self.text,
            "fields": [{"name": n, "value": v} for n, v in self.fields],
            "controls": [
                {"action_id": c.action_id, "label": c.label, "style": c.style.value}
                for c in self.controls
            ],
        }


# ─── Action ids (shared with core/commands.parse_control) ────────

def claim_action_id(
    decision: ClaimDecision, job_number: JobNumber, porter_id: AccountId,
) -> str:
    verb = "accept" if decision == ClaimDecision.APPROVE else "deny"
    return f"job:{verb}:{job_number}:{porter_id}"


def completion_action_id(outcome: CompletionOutcome, job_number: JobNumber) -> str:
    return f"job:{outcome.value}:{job_number}"


def feedback_action_id(liked: bool, job_number: JobNumber) -> str:
    return f"feedback:{'like' if liked else 'dislike'}:{job_number}"


# ─── Builders ────────────────────────────────────────────────────

def job_card_fields(job: Job) -> tuple[tuple[str, str], ...]:
    return (
        ("Category", job.category.value),
        ("Payment", str(job.payment or 0)),
        ("Location", job.location or "N/A"),
        ("Date Needed", job.needed_by or "N/A"),
        ("Status", job.status.value),
        ("Description", job.description or "—"),
    )


def porter_card_fields(porter: Account) -> tuple[tuple[str, str], ...]:
    return (
        ("Specialty", porter.specialty.value if porter.specialty else "—"),
        ("Likes", str(porter.likes_count)),
        ("Completed Jobs", str(porter.completed_jobs)),
        ("Verified", "Yes" if porter.verified else "No"),
        ("Handle", porter.handle or "—"),
    )


def claim_request(job: Job, porter: Account) -> MessageContent:
    """To the customer: a porter wants the job. Accept / Deny."""
    return MessageContent(
        text=(
            f"{porter.display_name} wants to take your job {job.job_number}. "
            f"Accept this Porter?"
        ),
        fields=porter_card_fields(porter),
        controls=(
            Control(
                claim_action_id(ClaimDecision.APPROVE, job.job_number, porter.id),
                "Accept", ControlStyle.SUCCESS,
            ),
            Control(
                claim_action_id(ClaimDecision.DENY, job.job_number, porter.id),
                "Deny", ControlStyle.DANGER,
            ),
        ),
        kind="claim_request",
    )


def claim_acknowledgement(job: Job) -> MessageContent:
    """To the porter: request recorded, waiting on the customer."""
    return MessageContent(
        text=f"You've requested to take {job.job_number}. Waiting for customer approval...",
        kind="claim_acknowledgement",
    )


def claim_denied(job: Job) -> MessageContent:
    return MessageContent(
        text=f"The customer declined your request for {job.job_number}. It is back on the board.",
        kind="claim_denied",
    )


def completion_prompt(job: Job, for_customer: bool) -> MessageContent:
    """To both parties after approval: Complete / Incomplete."""
    text = (
        f"You accepted a Porter for {job.job_number}."
        if for_customer
        else f"The customer accepted you for {job.job_number}."
    )
    return MessageContent(
        text=text,
        fields=job_card_fields(job),
        controls=(
            Control(
                completion_action_id(CompletionOutcome.COMPLETE, job.job_number),
                "Complete Job", ControlStyle.SUCCESS,
            ),
            Control(
                completion_action_id(CompletionOutcome.INCOMPLETE, job.job_number),
                "Job Incomplete", ControlStyle.DANGER,
            ),
        ),
        kind="completion_prompt",
    )


def counterpart_acted(job: Job) -> MessageContent:
    return MessageContent(
        text=f"The other party has acted on {job.job_number}. {TICKET_NOTICE}",
        kind="counterpart_acted",
    )


def feedback_prompt(job: Job, reviewed: Account | None) -> MessageContent:
    """To the reviewer after completion: Like / Dislike the counterpart."""
    name = reviewed.display_name if reviewed else "your counterpart"
    return MessageContent(
        text=f"{job.job_number} is complete. How was working with {name}?",
        controls=(
            Control(feedback_action_id(True, job.job_number), "Like", ControlStyle.SUCCESS),
            Control(feedback_action_id(False, job.job_number), "Dislike", ControlStyle.SECONDARY),
        ),
        kind="feedback_prompt",
    )


def dispute_escalation(job: Job, reported_by: AccountId) -> MessageContent:
    """To the operations channel: a participant marked the job incomplete."""
    return MessageContent(
        text=f"Dispute opened for {job.job_number} (reported by {reported_by}).",
        fields=job_card_fields(job) + (
            ("Customer", job.customer_id),
            ("Porter", job.porter_id or "—"),
        ),
        kind="dispute_escalation",
    )
