"""Account Routes — registration, profile, role, verification, admin delete, leaderboard.

Invariants:
    - Accounts are addressed by external identity in paths
    - Only the verification start endpoint returns the token
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from porthub.api.dependencies import get_accounts, unwrap_or_raise
from porthub.schemas.accounts import (
    AccountDelete, AccountRegister, AccountResponse, ProfileEdit, RoleSwitch,
    SpecialtyUpdate, VerificationChallenge,
)
from porthub.services.account_service import AccountService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["accounts"])


@router.post(
    "/accounts", response_model=AccountResponse, status_code=status.HTTP_201_CREATED,
)
async def register(body: AccountRegister, accounts: AccountService = Depends(get_accounts)):
    """Create an account, or update it if the identity is already registered."""
    account = unwrap_or_raise(await accounts.register(
        body.identity, body.display_name, body.role,
        handle=body.handle, bio=body.bio, language=body.language,
    ))
    return AccountResponse.model_validate(account)


@router.get("/accounts/{identity}", response_model=AccountResponse)
async def get_profile(identity: str, accounts: AccountService = Depends(get_accounts)):
    return AccountResponse.model_validate(
        unwrap_or_raise(await accounts.get_profile(identity)),
    )


@router.patch("/accounts/{identity}", response_model=AccountResponse)
async def edit_profile(
    identity: str, body: ProfileEdit, accounts: AccountService = Depends(get_accounts),
):
    account = unwrap_or_raise(await accounts.edit_profile(
        identity, display_name=body.display_name, handle=body.handle,
        bio=body.bio, language=body.language,
    ))
    return AccountResponse.model_validate(account)


@router.put("/accounts/{identity}/role", response_model=AccountResponse)
async def switch_role(
    identity: str, body: RoleSwitch, accounts: AccountService = Depends(get_accounts),
):
    return AccountResponse.model_validate(
        unwrap_or_raise(await accounts.switch_role(identity, body.role)),
    )


@router.put("/accounts/{identity}/specialty", response_model=AccountResponse)
async def set_specialty(
    identity: str, body: SpecialtyUpdate, accounts: AccountService = Depends(get_accounts),
):
    return AccountResponse.model_validate(
        unwrap_or_raise(await accounts.set_specialty(identity, body.specialty)),
    )


@router.post("/accounts/{identity}/verification", response_model=VerificationChallenge)
async def start_verification(identity: str, accounts: AccountService = Depends(get_accounts)):
    """Issue a token to paste into the public profile bio."""
    account = unwrap_or_raise(await accounts.start_verification(identity))
    return VerificationChallenge(
        handle=account.handle, verification_token=account.verification_token,
    )


@router.post("/accounts/{identity}/verification/check", response_model=AccountResponse)
async def check_verification(identity: str, accounts: AccountService = Depends(get_accounts)):
    return AccountResponse.model_validate(
        unwrap_or_raise(await accounts.check_verification(identity)),
    )


@router.delete("/accounts/{identity}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    identity: str, body: AccountDelete, accounts: AccountService = Depends(get_accounts),
):
    """Master admin removes a profile. Jobs and feedback are kept."""
    unwrap_or_raise(await accounts.delete_account(body.actor_identity, identity))


@router.get("/porters/top", response_model=list[AccountResponse])
async def top_porters(
    limit: int = Query(10, ge=1, le=50),
    accounts: AccountService = Depends(get_accounts),
):
    porters = unwrap_or_raise(await accounts.top_porters(limit))
    return [AccountResponse.model_validate(p) for p in porters]
