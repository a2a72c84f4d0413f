"""Account Service — registration, profile, verification, deletion, leaderboard."""

from porthub.core.domain_types import Category, JobStatus, Role
from porthub.core.errors import ErrorCategory

from tests.services.fakes import MASTER_ADMIN, accepted_job


async def test_register_creates_account(account_service):
    outcome = await account_service.register("u-new", " Nova ", "porter", handle="nova")
    assert outcome.ok
    account = outcome.value
    assert account.role == Role.PORTER
    assert account.display_name == "Nova"
    assert account.handle == "nova"


async def test_register_again_updates_in_place(account_service, store):
    first = (await account_service.register("u-new", "Nova", Role.PORTER, bio="hauler")).value
    second = (await account_service.register("u-new", "Nova Prime", Role.CUSTOMER)).value
    assert first.id == second.id
    assert second.role == Role.CUSTOMER
    assert second.bio == "hauler"
    assert len(store.accounts) == 1


async def test_register_rejects_blank_name_and_bad_role(account_service):
    blank = await account_service.register("u-x", "   ", "porter")
    assert blank.rejection.code == "VALIDATION_ERROR"
    bad_role = await account_service.register("u-x", "X", "pilot")
    assert bad_role.rejection.code == "VALIDATION_ERROR"


async def test_switch_role(account_service, porter):
    outcome = await account_service.switch_role(porter.identity, "customer")
    assert outcome.value.role == Role.CUSTOMER


async def test_specialty_only_for_porters(account_service, porter, customer):
    ok = await account_service.set_specialty(porter.identity, "salvaging")
    assert ok.value.specialty == Category.SALVAGING
    refused = await account_service.set_specialty(customer.identity, "Cargo")
    assert refused.rejection.kind == ErrorCategory.AUTHORIZATION
    unknown = await account_service.set_specialty(porter.identity, "Racing")
    assert unknown.rejection.code == "VALIDATION_ERROR"


async def test_edit_profile_keeps_unset_fields(account_service, porter):
    await account_service.edit_profile(porter.identity, bio="Long hauls only")
    outcome = await account_service.edit_profile(porter.identity, language="Deutsch")
    assert outcome.value.bio == "Long hauls only"
    assert outcome.value.language == "Deutsch"


async def test_unknown_identity_is_not_found(account_service):
    outcome = await account_service.get_profile("u-missing")
    assert outcome.rejection.http_status == 404


# ─── Verification ────────────────────────────────────────────────

async def test_verification_flow(account_service, probe, porter):
    await account_service.edit_profile(porter.identity, handle="PikeRSI")
    started = (await account_service.start_verification(porter.identity)).value
    assert started.verification_token.startswith("PORT-")
    assert not started.verified

    checked = await account_service.check_verification(porter.identity)
    assert checked.value.verified
    assert probe.calls == [("PikeRSI", started.verification_token)]


async def test_failed_probe_leaves_unverified(account_service, probe, porter):
    probe.answer = False
    await account_service.edit_profile(porter.identity, handle="PikeRSI")
    await account_service.start_verification(porter.identity)
    outcome = await account_service.check_verification(porter.identity)
    assert outcome.ok
    assert not outcome.value.verified


async def test_check_requires_handle_and_token(account_service, porter):
    no_handle = await account_service.check_verification(porter.identity)
    assert no_handle.rejection.code == "VALIDATION_ERROR"

    await account_service.edit_profile(porter.identity, handle="PikeRSI")
    no_token = await account_service.check_verification(porter.identity)
    assert no_token.rejection.code == "VALIDATION_ERROR"


async def test_handle_change_clears_verification(account_service, porter):
    await account_service.edit_profile(porter.identity, handle="PikeRSI")
    await account_service.start_verification(porter.identity)
    await account_service.check_verification(porter.identity)

    outcome = await account_service.edit_profile(porter.identity, handle="PikeAlt")
    assert not outcome.value.verified


# ─── Deletion ────────────────────────────────────────────────────

async def test_only_master_admin_deletes(account_service, porter, customer):
    refused = await account_service.delete_account(customer.identity, porter.identity)
    assert refused.rejection.kind == ErrorCategory.AUTHORIZATION

    deleted = await account_service.delete_account(MASTER_ADMIN, porter.identity)
    assert deleted.value is True
    gone = await account_service.get_profile(porter.identity)
    assert gone.rejection.http_status == 404


async def test_delete_keeps_jobs_and_feedback(account_service, engine, store, customer, porter):
    job = await accepted_job(engine, customer, porter)
    await engine.resolve_completion(job.job_number, customer.id, "complete")
    await engine.submit_feedback(job.job_number, customer.id, True)

    await account_service.delete_account(MASTER_ADMIN, porter.identity)

    kept = await store.get_job_by_id(job.id)
    assert kept is not None
    assert kept.porter_id == porter.id
    assert kept.status == JobStatus.COMPLETED
    assert [r.reviewed_id for r in await store.list_feedback_for(porter.id)] == [porter.id]


async def test_no_master_admin_configured(store, probe, porter):
    from porthub.services.account_service import AccountService

    service = AccountService(store, probe, master_admin_identity="")
    outcome = await service.delete_account("", porter.identity)
    assert outcome.rejection.kind == ErrorCategory.AUTHORIZATION


# ─── Leaderboard ─────────────────────────────────────────────────

async def test_top_porters_ordered_by_likes(account_service, store, porter, other_porter, customer):
    await store.set_feedback_counters(other_porter.id, likes=5, dislikes=0)
    await store.set_feedback_counters(porter.id, likes=2, dislikes=1)

    outcome = await account_service.top_porters(10)
    assert [a.id for a in outcome.value] == [other_porter.id, porter.id]


async def test_top_porters_limit_bounds(account_service):
    assert (await account_service.top_porters(0)).rejection.code == "VALIDATION_ERROR"
    assert (await account_service.top_porters(51)).rejection.code == "VALIDATION_ERROR"
