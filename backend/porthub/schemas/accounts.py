"""Account Schemas — registration, profile, and leaderboard payloads.

Invariants:
    - identity and display_name are stripped and non-empty
    - AccountResponse never exposes the verification token except to the
      verification start endpoint (VerificationChallenge)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from porthub.core.domain_types import Category, Role


class AccountRegister(BaseModel):
    identity: str = Field(min_length=1, max_length=100)
    display_name: str = Field(min_length=1, max_length=100)
    role: Role
    handle: str | None = Field(None, max_length=60)
    bio: str | None = Field(None, max_length=1000)
    language: str | None = Field(None, max_length=40)

    @field_validator("identity", "display_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty or whitespace")
        return v


class ProfileEdit(BaseModel):
    display_name: str | None = Field(None, min_length=1, max_length=100)
    handle: str | None = Field(None, max_length=60)
    bio: str | None = Field(None, max_length=1000)
    language: str | None = Field(None, max_length=40)


class RoleSwitch(BaseModel):
    role: Role


class SpecialtyUpdate(BaseModel):
    specialty: str = Field(min_length=1, max_length=40)


class AccountDelete(BaseModel):
    actor_identity: str = Field(min_length=1)


class AccountResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    identity: str
    display_name: str
    role: Role
    handle: str | None = None
    bio: str | None = None
    language: str | None = None
    specialty: Category | None = None
    verified: bool = False
    likes_count: int = 0
    dislikes_count: int = 0
    completed_jobs: int = 0
    created_at: datetime | None = None


class VerificationChallenge(BaseModel):
    """Token the party must place on their public profile."""
    handle: str | None
    verification_token: str
