"""Job Routes — job board and lifecycle transitions over HTTP.

Invariants:
    - Every handler calls exactly one LifecycleEngine operation
    - Rejections render with the status from the error table (400/403/404/409/503)
    - Job numbers in paths are case-insensitive (normalized by the engine)
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from porthub.core.domain_types import AccountId
from porthub.core.records import JobDraft
from porthub.api.dependencies import get_engine, unwrap_or_raise
from porthub.schemas.jobs import (
    ClaimRequest, ClaimResolution, CompletionRequest, FeedbackRequest,
    FeedbackResponse, JobCreate, JobResponse, OpenJobsResponse,
)
from porthub.services.lifecycle_engine import LifecycleEngine

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/jobs", tags=["jobs"])


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def post_job(body: JobCreate, engine: LifecycleEngine = Depends(get_engine)):
    """Customer posts a new OPEN job."""
    draft = JobDraft(
        location=body.location, payment=body.payment,
        description=body.description, needed_by=body.needed_by,
    )
    job = unwrap_or_raise(
        await engine.post(AccountId(body.customer_id), body.category, draft),
    )
    return JobResponse.model_validate(job)


@router.get("", response_model=OpenJobsResponse)
async def list_open_jobs(
    page: int = Query(1, ge=1),
    engine: LifecycleEngine = Depends(get_engine),
):
    result = unwrap_or_raise(await engine.list_open_jobs(page))
    return OpenJobsResponse(
        jobs=[JobResponse.model_validate(job) for job in result.jobs],
        page=result.page,
        page_size=result.page_size,
        total=result.total,
        total_pages=result.total_pages,
    )


@router.get("/{job_number}", response_model=JobResponse)
async def get_job(job_number: str, engine: LifecycleEngine = Depends(get_engine)):
    return JobResponse.model_validate(unwrap_or_raise(await engine.get_job(job_number)))


@router.post("/{job_number}/claim", response_model=JobResponse)
async def claim_job(
    job_number: str, body: ClaimRequest, engine: LifecycleEngine = Depends(get_engine),
):
    """Porter claims an OPEN job. 409 if another porter got there first."""
    job = unwrap_or_raise(await engine.claim(job_number, AccountId(body.porter_id)))
    return JobResponse.model_validate(job)


@router.post("/{job_number}/claim/resolution", response_model=JobResponse)
async def resolve_claim(
    job_number: str, body: ClaimResolution, engine: LifecycleEngine = Depends(get_engine),
):
    """Customer approves or denies the pending claim."""
    job = unwrap_or_raise(await engine.resolve_claim(
        job_number, AccountId(body.customer_id), AccountId(body.porter_id), body.decision,
    ))
    return JobResponse.model_validate(job)


@router.post("/{job_number}/completion", response_model=JobResponse)
async def resolve_completion(
    job_number: str, body: CompletionRequest, engine: LifecycleEngine = Depends(get_engine),
):
    """Either participant confirms completion or reports the job incomplete."""
    job = unwrap_or_raise(await engine.resolve_completion(
        job_number, AccountId(body.account_id), body.outcome,
    ))
    return JobResponse.model_validate(job)


@router.post("/{job_number}/feedback", response_model=FeedbackResponse)
async def submit_feedback(
    job_number: str, body: FeedbackRequest, engine: LifecycleEngine = Depends(get_engine),
):
    """Answer the open feedback window with a like or dislike."""
    result = unwrap_or_raise(await engine.submit_feedback(
        job_number, AccountId(body.reviewer_id), body.liked,
    ))
    return FeedbackResponse(
        likes=result.likes, dislikes=result.dislikes, total=result.total,
    )
