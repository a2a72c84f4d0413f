"""Claim Race — many porters press Claim on the same job at once.

Invariants:
    - Exactly one claim wins; every other caller gets STATE_CONFLICT
    - The stored porter is the winner, and only the winner's customer
      notification is sent
"""

import asyncio

from porthub.core.domain_types import JobStatus, Role
from porthub.core.errors import ErrorCategory

from tests.services.fakes import post_job

CONTENDERS = 8


async def _porters(store, count):
    return [
        await store.upsert_account(f"u-porter-{n}", display_name=f"Porter {n}", role=Role.PORTER)
        for n in range(count)
    ]


async def test_exactly_one_concurrent_claim_wins(engine, store, channel, customer):
    job = await post_job(engine, customer.id)
    porters = await _porters(store, CONTENDERS)

    results = await asyncio.gather(*(
        engine.claim(job.job_number, p.id) for p in porters
    ))

    winners = [r.value for r in results if r.ok]
    losers = [r.rejection for r in results if not r.ok]
    assert len(winners) == 1
    assert all(r.kind == ErrorCategory.STATE_CONFLICT for r in losers)

    stored = store.jobs[job.job_number]
    assert stored.status == JobStatus.PENDING_APPROVAL
    assert stored.porter_id == winners[0].porter_id
    assert len(channel.delivered_to(customer.identity, "claim_request")) == 1


async def test_losers_reached_the_conditional_update(engine, store, customer):
    job = await post_job(engine, customer.id)
    porters = await _porters(store, CONTENDERS)

    await asyncio.gather(*(engine.claim(job.job_number, p.id) for p in porters))

    attempts = [u for u in store.conditional_updates if u[0] == job.job_number]
    assert len(attempts) == CONTENDERS
    assert sum(1 for u in attempts if u[3]) == 1


async def test_race_after_deny_has_single_winner(engine, store, customer, porter):
    job = await post_job(engine, customer.id)
    await engine.claim(job.job_number, porter.id)
    await engine.resolve_claim(job.job_number, customer.id, porter.id, "deny")
    porters = await _porters(store, 4)

    results = await asyncio.gather(*(engine.claim(job.job_number, p.id) for p in porters))
    assert sum(1 for r in results if r.ok) == 1
