"""
Job Routes

GET /jobs - List active jobs (public)
GET /jobs/{job_id} - Get job details (admins also see inactive jobs)
POST /jobs - Create job posting (admin only)
PUT /jobs/{job_id} - Update job (admin only)
DELETE /jobs/{job_id} - Delete job (admin only)
PATCH /jobs/{job_id}/status - Activate / deactivate job (admin only)
GET /jobs/admin/all/list - List every job (admin only)
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_anon_store, get_service_store
from jobboard.core.auth import ADMIN_ONLY, get_current_user
from jobboard.core.errors import BadRequest, NotFound
from jobboard.core.tokens import Identity
from jobboard.schemas.schemas import (
    JobCreate, JobEnvelope, JobListResponse, JobStatusUpdate, JobUpdate, OkResponse
)
from jobboard.services.store import DataStore
from jobboard.services.users import utcnow

router = APIRouter(prefix="/jobs", tags=["Jobs"])

JOBS_TABLE = "jobs"
PUBLIC_JOBS_VIEW = "jobs_public"


@router.get("", response_model=JobListResponse)
async def list_jobs(store: DataStore = Depends(get_anon_store)):
    """List active job postings, newest first."""
    jobs = await store.select(PUBLIC_JOBS_VIEW, order_by="created_at")
    return JobListResponse(jobs=jobs)


@router.get("/admin/all/list", response_model=JobListResponse, dependencies=ADMIN_ONLY)
async def list_all_jobs(store: DataStore = Depends(get_service_store)):
    """List every job posting including inactive ones."""
    jobs = await store.select(JOBS_TABLE, order_by="created_at")
    return JobListResponse(jobs=jobs)


@router.get("/{job_id}", response_model=JobEnvelope)
async def get_job(
    job_id: UUID,
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    """Get details of a specific job. Only admins can see inactive jobs."""
    table = JOBS_TABLE if identity.is_admin else PUBLIC_JOBS_VIEW
    job = await store.select_one(table, filters={"id": str(job_id)})
    if job is None:
        raise NotFound("Job not found")
    return JobEnvelope(job=job)


@router.post("", response_model=JobEnvelope, status_code=201, dependencies=ADMIN_ONLY)
async def create_job(
    job: JobCreate,
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    """Create a new job posting."""
    created = await store.insert(JOBS_TABLE, {**job.model_dump(), "posted_by": identity.subject})
    return JobEnvelope(job=created)


@router.put("/{job_id}", response_model=JobEnvelope, dependencies=ADMIN_ONLY)
async def update_job(job_id: UUID, update: JobUpdate, store: DataStore = Depends(get_service_store)):
    """Update a job posting. Only provided fields are updated."""
    values = update.model_dump(exclude_unset=True)
    if not values:
        raise BadRequest("No fields to update")

    job = await store.update(JOBS_TABLE, {**values, "updated_at": utcnow()}, filters={"id": str(job_id)})
    if job is None:
        raise NotFound("Job not found")
    return JobEnvelope(job=job)


@router.delete("/{job_id}", response_model=OkResponse, dependencies=ADMIN_ONLY)
async def delete_job(job_id: UUID, store: DataStore = Depends(get_service_store)):
    """Delete a job posting."""
    deleted = await store.delete(JOBS_TABLE, filters={"id": str(job_id)})
    if not deleted:
        raise NotFound("Job not found")
    return OkResponse()


@router.patch("/{job_id}/status", response_model=JobEnvelope, dependencies=ADMIN_ONLY)
async def set_job_status(
    job_id: UUID,
    update: JobStatusUpdate,
    store: DataStore = Depends(get_service_store),
):
    """Activate or deactivate a job posting."""
    job = await store.update(
        JOBS_TABLE,
        {"is_active": update.is_active, "updated_at": utcnow()},
        filters={"id": str(job_id)},
    )
    if job is None:
        raise NotFound("Job not found")
    return JobEnvelope(job=job)
