"""Account Service — registration, profile edits, role switch, verification, deletion.

Invariants:
    - An external identity maps to at most one account (store upsert keyed on identity)
    - Re-registering an identity updates it in place; unset profile fields are kept
    - Changing the handle clears verification: the token was checked against the old profile
    - A verification token is issued before it can be checked, and a passed check
      marks the account verified
    - Only the configured master admin deletes accounts; deleting never touches
      jobs or feedback that reference the account

Design Decisions:
    - Same Outcome boundary as the lifecycle engine: routes treat both alike
    - VerificationProbe injected: production fetches the public profile page
      with httpx, tests stub the answer
"""

import logging

from porthub.core.domain_types import Category, Role
from porthub.core.enforce_job_rules import parse_category
from porthub.core.errors import (
    AuthorizationRejection, ErrorContext, NotFoundRejection, ValidationRejection,
)
from porthub.core.records import Account
from porthub.core.repository_protocols import AccountRepository, VerificationProbe
from porthub.core.verification_tokens import generate_verification_token
from porthub.services.operation_boundary import returns_outcome

logger = logging.getLogger(__name__)

MAX_TOP_PORTERS = 50


class AccountService:
    """Account-level operations outside the job lifecycle."""

    def __init__(
        self,
        store: AccountRepository,
        probe: VerificationProbe,
        master_admin_identity: str = "",
    ):
        self._store = store
        self._probe = probe
        self._master_admin_identity = master_admin_identity

    @returns_outcome
    async def register(
        self,
        identity: str,
        display_name: str,
        role: Role | str,
        *,
        handle: str | None = None,
        bio: str | None = None,
        language: str | None = None,
    ) -> Account:
        identity = _required(identity, "identity")
        display_name = _required(display_name, "display_name")
        fields = {
            "display_name": display_name,
            "role": _parse_role(role),
            **_present(handle=handle, bio=bio, language=language),
        }
        existing = await self._store.get_account_by_identity(identity)
        if existing and "handle" in fields and fields["handle"] != existing.handle:
            fields["verified"] = False
        account = await self._store.upsert_account(identity, **fields)
        logger.info(
            f"Account {'updated' if existing else 'registered'} as {account.role.value}",
            extra={"account_id": account.id},
        )
        return account

    @returns_outcome
    async def get_profile(self, identity: str) -> Account:
        return await self._require(identity)

    @returns_outcome
    async def set_specialty(self, identity: str, specialty: Category | str) -> Account:
        parsed = specialty if isinstance(specialty, Category) else parse_category(specialty)
        if parsed is None:
            allowed = ", ".join(c.value for c in Category)
            raise ValidationRejection(
                f"Unknown specialty {specialty!r}. Choose one of: {allowed}.",
                field="specialty",
            )
        account = await self._require(identity)
        if account.role != Role.PORTER:
            raise AuthorizationRejection(
                "Only Porters have a specialty.", ErrorContext(account_id=account.id),
            )
        return await self._update(identity, specialty=parsed)

    @returns_outcome
    async def switch_role(self, identity: str, role: Role | str) -> Account:
        parsed = _parse_role(role)
        account = await self._require(identity)
        if account.role == parsed:
            return account
        updated = await self._update(identity, role=parsed)
        logger.info(
            f"Role switched to {parsed.value}", extra={"account_id": account.id},
        )
        return updated

    @returns_outcome
    async def edit_profile(
        self,
        identity: str,
        *,
        display_name: str | None = None,
        handle: str | None = None,
        bio: str | None = None,
        language: str | None = None,
    ) -> Account:
        account = await self._require(identity)
        fields = _present(
            display_name=display_name, handle=handle, bio=bio, language=language,
        )
        if not fields:
            return account
        if "handle" in fields and fields["handle"] != account.handle:
            fields["verified"] = False
        return await self._update(identity, **fields)

    # ─── Verification ────────────────────────────────────────────

    @returns_outcome
    async def start_verification(self, identity: str) -> Account:
        """Issue a fresh token for the party to paste into their external profile."""
        await self._require(identity)
        return await self._update(
            identity, verification_token=generate_verification_token(), verified=False,
        )

    @returns_outcome
    async def check_verification(self, identity: str) -> Account:
        account = await self._require(identity)
        if not account.handle:
            raise ValidationRejection(
                "Set your handle before verifying.", field="handle",
            )
        if not account.verification_token:
            raise ValidationRejection(
                "Request a verification code first.", field="verification_token",
            )
        verified = await self._probe.check_token(account.handle, account.verification_token)
        logger.info(
            f"Verification {'passed' if verified else 'failed'}",
            extra={"account_id": account.id},
        )
        return await self._update(identity, verified=verified)

    # ─── Admin / Leaderboard ─────────────────────────────────────

    @returns_outcome
    async def delete_account(self, actor_identity: str, target_identity: str) -> bool:
        if not self._master_admin_identity or actor_identity != self._master_admin_identity:
            raise AuthorizationRejection("Only the master admin can delete profiles.")
        target = await self._require(target_identity)
        deleted = await self._store.delete_account(target_identity)
        if deleted:
            logger.warning("Account deleted by admin", extra={"account_id": target.id})
        return deleted

    @returns_outcome
    async def top_porters(self, limit: int = 10) -> list[Account]:
        if limit < 1 or limit > MAX_TOP_PORTERS:
            raise ValidationRejection(
                f"limit must be between 1 and {MAX_TOP_PORTERS}", field="limit",
            )
        return await self._store.top_porters(limit)

    async def _require(self, identity: str) -> Account:
        account = await self._store.get_account_by_identity(identity)
        if account is None:
            raise NotFoundRejection(
                "Account", identity,
                ErrorContext(user_message="Create a profile first."),
            )
        return account

    async def _update(self, identity: str, **fields: object) -> Account:
        account = await self._store.update_account(identity, **fields)
        if account is None:
            raise NotFoundRejection("Account", identity)
        return account


def _required(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationRejection(f"{field} is required.", field=field)
    return value.strip()


def _present(**fields: str | None) -> dict[str, str]:
    return {key: value for key, value in fields.items() if value is not None}


def _parse_role(raw: Role | str) -> Role:
    if isinstance(raw, Role):
        return raw
    try:
        return Role(str(raw).strip().upper())
    except ValueError:
        raise ValidationRejection(
            f"Unknown role {raw!r}. Choose Porter or Customer.", field="role",
        ) from None
