"""Feedback Ledger — append, recompute, and completion credit."""

from dataclasses import replace

from porthub.core.domain_types import AccountId, JobId, JobNumber, JobStatus, Category
from porthub.core.records import FeedbackTally, Job
from porthub.services.feedback_ledger import FeedbackLedger


def _job(customer, porter) -> Job:
    return Job(
        id=JobId("job-1"), job_number=JobNumber("JOB-4000"), category=Category.CARGO,
        customer_id=customer.id, status=JobStatus.COMPLETED, porter_id=porter.id,
    )


async def test_record_then_recompute(store, customer, porter):
    ledger = FeedbackLedger(store)
    await ledger.record(JobId("a"), customer.id, porter.id, True)
    await ledger.record(JobId("b"), customer.id, porter.id, False)
    await ledger.record(JobId("c"), customer.id, porter.id, True)

    outcome = await ledger.recompute(porter.id)
    assert outcome.value == FeedbackTally(likes=2, dislikes=1, total=3)
    assert store.accounts[porter.id].likes_count == 2
    assert store.accounts[porter.id].dislikes_count == 1


async def test_recompute_is_idempotent(store, customer, porter):
    ledger = FeedbackLedger(store)
    await ledger.record(JobId("a"), customer.id, porter.id, True)
    first = await ledger.recompute(porter.id)
    second = await ledger.recompute(porter.id)
    assert first.value == second.value
    assert store.accounts[porter.id].likes_count == 1


async def test_recompute_heals_drifted_counters(store, customer, porter):
    ledger = FeedbackLedger(store)
    await ledger.record(JobId("a"), customer.id, porter.id, False)
    store.accounts[porter.id] = replace(store.accounts[porter.id], likes_count=40)
    await ledger.recompute(porter.id)
    assert store.accounts[porter.id].likes_count == 0
    assert store.accounts[porter.id].dislikes_count == 1


async def test_recompute_for_deleted_account_keeps_records(store, customer, porter):
    ledger = FeedbackLedger(store)
    await ledger.record(JobId("a"), customer.id, porter.id, True)
    await store.delete_account(porter.identity)

    outcome = await ledger.recompute(porter.id)
    assert outcome.ok
    assert outcome.value.likes == 1
    assert len(store.feedback) == 1


async def test_record_requires_bool(store, customer, porter):
    outcome = await FeedbackLedger(store).record(JobId("a"), customer.id, porter.id, "yes")
    assert outcome.rejection.code == "VALIDATION_ERROR"
    assert store.feedback == []


async def test_credit_only_for_the_jobs_porter(store, customer, porter, other_porter):
    ledger = FeedbackLedger(store)
    job = _job(customer, porter)

    assert (await ledger.credit_completion(job, porter.id)).value is True
    assert (await ledger.credit_completion(job, customer.id)).value is False
    assert (await ledger.credit_completion(job, other_porter.id)).value is False
    assert store.accounts[porter.id].completed_jobs == 1
    assert store.accounts[other_porter.id].completed_jobs == 0


async def test_no_credit_after_role_switch(store, customer, porter):
    from porthub.core.domain_types import Role

    await store.update_account(porter.identity, role=Role.CUSTOMER)
    outcome = await FeedbackLedger(store).credit_completion(_job(customer, porter), porter.id)
    assert outcome.value is False


async def test_no_credit_for_missing_account(store, customer, porter):
    job = _job(customer, porter)
    await store.delete_account(porter.identity)
    outcome = await FeedbackLedger(store).credit_completion(job, AccountId(porter.id))
    assert outcome.value is False
