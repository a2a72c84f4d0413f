"""Control Parsing — action ids produced by notification builders map back to commands."""

from porthub.core.commands import (
    ClaimJob, ResolveClaim, ResolveCompletion, SubmitFeedback, parse_control,
)
from porthub.core.domain_types import (
    AccountId, Category, ClaimDecision, CompletionOutcome, JobId, JobNumber, JobStatus, Role,
)
from porthub.core.notification_content import (
    claim_request, completion_prompt, feedback_prompt,
)
from porthub.core.records import Account, Job

PORTER = Account(id=AccountId("p-77"), identity="u-p", display_name="Pike", role=Role.PORTER)
JOB = Job(
    id=JobId("j1"), job_number=JobNumber("JOB-3100"), category=Category.TRADING,
    customer_id=AccountId("c1"), status=JobStatus.PENDING_APPROVAL, porter_id=PORTER.id,
)


def test_take_maps_to_claim():
    assert parse_control("job:take:job-3100", AccountId("p-9")) == ClaimJob(
        job_number=JobNumber("JOB-3100"), porter_id=AccountId("p-9"),
    )


def test_claim_request_controls_round_trip():
    accept, deny = claim_request(JOB, PORTER).controls
    command = parse_control(accept.action_id, AccountId("c1"))
    assert command == ResolveClaim(
        job_number=JOB.job_number, customer_id=AccountId("c1"),
        porter_id=PORTER.id, decision=ClaimDecision.APPROVE,
    )
    assert parse_control(deny.action_id, AccountId("c1")).decision == ClaimDecision.DENY


def test_completion_controls_round_trip():
    complete, incomplete = completion_prompt(JOB, for_customer=False).controls
    command = parse_control(complete.action_id, PORTER.id)
    assert command == ResolveCompletion(
        job_number=JOB.job_number, account_id=PORTER.id,
        outcome=CompletionOutcome.COMPLETE,
    )
    assert parse_control(incomplete.action_id, PORTER.id).outcome == CompletionOutcome.INCOMPLETE


def test_feedback_controls_round_trip():
    like, dislike = feedback_prompt(JOB, PORTER).controls
    assert parse_control(like.action_id, AccountId("c1")) == SubmitFeedback(
        job_number=JOB.job_number, reviewer_id=AccountId("c1"), liked=True,
    )
    assert parse_control(dislike.action_id, AccountId("c1")).liked is False


def test_actor_comes_from_caller_not_id():
    command = parse_control("job:complete:JOB-3100", AccountId("someone"))
    assert command.account_id == "someone"


def test_malformed_ids_return_none():
    for raw in ("", "job", "job:take", "job:explode:JOB-1", "ticket:open:JOB-1",
                "job:accept:JOB-1", "job:accept:JOB-1:"):
        assert parse_control(raw, AccountId("x")) is None
