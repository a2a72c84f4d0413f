"""Job Schemas — Pydantic models for job board and lifecycle endpoints.

Invariants:
    - JobCreate.payment is a non-negative whole number (strict: no bools, no floats)
    - Free-text fields are stripped and length-bounded
    - JobResponse never exposes prompt refs: those belong to the notification relay

Design Decisions:
    - Category stays a str on input so the engine reports unknown categories with
      the allowed list; responses use the enum
    - from_attributes on responses: built directly from frozen core records
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from porthub.core.domain_types import Category, ClaimDecision, CompletionOutcome, JobStatus
from porthub.core.enforce_job_rules import MAX_PAYMENT


def _strip_or_none(v: str | None) -> str | None:
    if v is None:
        return None
    v = v.strip()
    return v or None


class JobCreate(BaseModel):
    """Posting request from a customer."""
    customer_id: str = Field(min_length=1)
    category: str = Field(min_length=1, max_length=40)
    location: str | None = Field(None, max_length=200)
    payment: StrictInt = Field(0, ge=0, le=MAX_PAYMENT)
    description: str | None = Field(None, max_length=2000)
    needed_by: str | None = Field(None, max_length=100)

    @field_validator("location", "description", "needed_by")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return _strip_or_none(v)


class JobResponse(BaseModel):
    """Public job view."""
    model_config = ConfigDict(from_attributes=True)

    job_number: str
    category: Category
    status: JobStatus
    customer_id: str
    porter_id: str | None = None
    location: str | None = None
    payment: int = 0
    description: str | None = None
    needed_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OpenJobsResponse(BaseModel):
    """One page of the open job board."""
    jobs: list[JobResponse]
    page: int
    page_size: int
    total: int
    total_pages: int


class ClaimRequest(BaseModel):
    porter_id: str = Field(min_length=1)


class ClaimResolution(BaseModel):
    """Customer's answer to a pending claim."""
    customer_id: str = Field(min_length=1)
    porter_id: str = Field(min_length=1)
    decision: ClaimDecision


class CompletionRequest(BaseModel):
    account_id: str = Field(min_length=1)
    outcome: CompletionOutcome


class FeedbackRequest(BaseModel):
    reviewer_id: str = Field(min_length=1)
    liked: bool


class FeedbackResponse(BaseModel):
    """Reviewed party's tally after the feedback was recorded."""
    likes: int
    dislikes: int
    total: int
