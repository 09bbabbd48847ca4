"""
Application Routes

POST /applications - Apply to a job with a PDF resume (multipart, field `resume`)
GET /applications/my-applications - Jobs the current user applied to
GET /applications/{application_id}/resume-url - Signed resume link (owner or admin)
DELETE /applications/{application_id}/resume - Delete resume file (owner or admin)
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError

from jobboard.api.deps import get_resume_storage, get_service_store
from jobboard.core.auth import ensure_owner_or_admin, get_current_user
from jobboard.core.config import Settings, get_settings
from jobboard.core.errors import BadRequest, Conflict, NotFound, StoreError, bad_request_from
from jobboard.core.tokens import Identity
from jobboard.schemas.schemas import (
    ApplicationCreate, ApplicationEnvelope, ApplicationStatus, JobListResponse,
    OkResponse, SignedUrlResponse
)
from jobboard.services.resume_storage import ResumeStorage
from jobboard.services.store import DataStore
from jobboard.services.users import utcnow
from jobboard.utils.file_upload import PDF_CONTENT_TYPE, read_resume_upload, resume_storage_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["Applications"])

APPLICATIONS_TABLE = "applications"
JOB_COLUMNS = (
    "id, title, description, requirements, qualifications, skills, location, experience, "
    "salary_range, is_active, posted_by, created_at, updated_at"
)


@router.post("", response_model=ApplicationEnvelope, status_code=201)
async def submit_application(
    job_id: Optional[str] = Form(None),
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    skills: Optional[str] = Form(None),
    expected_salary: Optional[str] = Form(None),
    cover_letter: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    city: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    education: Optional[str] = Form(None),
    position_applying: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None, description="Resume (PDF, max 5MB)"),
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
    storage: ResumeStorage = Depends(get_resume_storage),
    settings: Settings = Depends(get_settings),
):
    """
    Apply to a job with a PDF resume.

    Process:
    1. Reject non-PDF or oversized files
    2. Validate form fields
    3. Reject unknown jobs (404) and a second application to the same job (409)
    4. Store the resume, then create the application as `pending`
    """
    content = await read_resume_upload(resume, settings.max_resume_size_mb)

    raw_fields = {
        "job_id": job_id, "name": name, "email": email, "phone": phone,
        "skills": skills, "expected_salary": expected_salary, "cover_letter": cover_letter,
        "location": location, "city": city, "experience": experience,
        "education": education, "position_applying": position_applying,
    }
    try:
        fields = ApplicationCreate.model_validate({k: v for k, v in raw_fields.items() if v is not None})
    except ValidationError as e:
        raise bad_request_from(e)

    job = await store.select_one("jobs", "id", filters={"id": str(fields.job_id)})
    if job is None:
        raise NotFound("Job not found")

    # Read-then-insert: concurrent duplicates can both pass this check
    duplicate = await store.select_one(
        APPLICATIONS_TABLE,
        "id",
        filters={"job_id": str(fields.job_id), "user_id": identity.subject},
    )
    if duplicate:
        raise Conflict("You already applied to this job")

    if content is None:
        raise BadRequest("resume (PDF) is required")

    path = resume_storage_path(identity.subject)
    await storage.upload(path, content, PDF_CONTENT_TYPE)

    payload = {
        **fields.model_dump(mode="json"),
        "user_id": identity.subject,
        "resume_path": path,
        "status": ApplicationStatus.pending.value,
    }
    try:
        application = await store.insert(APPLICATIONS_TABLE, payload)
    except StoreError:
        await _discard_upload(storage, path)
        raise

    logger.info("User %s applied to job %s", identity.subject, fields.job_id)
    return ApplicationEnvelope(application=application)


async def _discard_upload(storage: ResumeStorage, path: str) -> None:
    try:
        await storage.remove(path)
    except StoreError as e:
        logger.warning("Orphaned resume %s could not be removed: %s", path, e)


@router.get("/my-applications", response_model=JobListResponse)
async def my_applications(
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    """Jobs the current user applied to, latest application first (inactive jobs included)."""
    applications = await store.select(
        APPLICATIONS_TABLE,
        "job_id, applied_at",
        filters={"user_id": identity.subject},
        order_by="applied_at",
    )
    if not applications:
        return JobListResponse(jobs=[])

    job_ids: List[str] = list(dict.fromkeys(a["job_id"] for a in applications))
    jobs = await store.select("jobs", JOB_COLUMNS, where_in={"id": job_ids})

    by_id: Dict[str, dict] = {job["id"]: job for job in jobs}
    return JobListResponse(jobs=[by_id[jid] for jid in job_ids if jid in by_id])


async def _get_owned_application(application_id: UUID, identity: Identity, store: DataStore) -> dict:
    application = await store.select_one(
        APPLICATIONS_TABLE,
        "id, user_id, resume_path",
        filters={"id": str(application_id)},
    )
    if application is None:
        raise NotFound("Application not found")
    ensure_owner_or_admin(identity, application["user_id"])
    return application


@router.get("/{application_id}/resume-url", response_model=SignedUrlResponse)
async def resume_url(
    application_id: UUID,
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    """Time-limited link to the application's resume (owner or admin)."""
    application = await _get_owned_application(application_id, identity, store)
    if not application.get("resume_path"):
        raise NotFound("Resume not found")
    return SignedUrlResponse(url=storage.create_signed_url(application["resume_path"]))


@router.delete("/{application_id}/resume", response_model=OkResponse)
async def delete_resume(
    application_id: UUID,
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    """Delete the resume file and clear the application's reference to it."""
    application = await _get_owned_application(application_id, identity, store)
    if application.get("resume_path"):
        await storage.remove(application["resume_path"])

    await store.update(
        APPLICATIONS_TABLE,
        {"resume_path": None, "updated_at": utcnow()},
        filters={"id": application["id"]},
    )
    return OkResponse()
