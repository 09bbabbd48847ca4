"""
Admin Routes (admin token required for every route)

GET /admin/users - List users
GET /admin/applications - List applications (admin view)
GET /admin/applications/{application_id} - Get one application
PATCH /admin/applications/{application_id} - Update application status
GET /admin/stats - Aggregate report from stats_overview()
"""

from uuid import UUID

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_service_store
from jobboard.core.auth import ADMIN_ONLY
from jobboard.core.errors import NotFound
from jobboard.schemas.schemas import (
    AdminUserListResponse, ApplicationEnvelope, ApplicationListResponse, ApplicationStatusUpdate
)
from jobboard.services.store import DataStore
from jobboard.services.users import USERS_TABLE, utcnow

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=ADMIN_ONLY)

ADMIN_APPLICATIONS_VIEW = "applications_admin_view"


@router.get("/users", response_model=AdminUserListResponse)
async def list_users(store: DataStore = Depends(get_service_store)):
    users = await store.select(USERS_TABLE, "id, name, email, is_admin, created_at", order_by="created_at")
    return AdminUserListResponse(users=users)


@router.get("/applications", response_model=ApplicationListResponse)
async def list_applications(store: DataStore = Depends(get_service_store)):
    """All applications with job and applicant details, newest first."""
    applications = await store.select(ADMIN_APPLICATIONS_VIEW, order_by="applied_at")
    return ApplicationListResponse(applications=applications)


@router.get("/applications/{application_id}", response_model=ApplicationEnvelope)
async def get_application(application_id: UUID, store: DataStore = Depends(get_service_store)):
    application = await store.select_one(ADMIN_APPLICATIONS_VIEW, filters={"id": str(application_id)})
    if application is None:
        raise NotFound("Application not found")
    return ApplicationEnvelope(application=application)


@router.patch("/applications/{application_id}", response_model=ApplicationEnvelope)
async def update_application_status(
    application_id: UUID,
    update: ApplicationStatusUpdate,
    store: DataStore = Depends(get_service_store),
):
    """Set status to pending, reviewed, approved or rejected."""
    application = await store.update(
        "applications",
        {"status": update.status.value, "updated_at": utcnow()},
        filters={"id": str(application_id)},
    )
    if application is None:
        raise NotFound("Application not found")
    return ApplicationEnvelope(application=application)


@router.get("/stats")
async def get_stats(store: DataStore = Depends(get_service_store)):
    """Aggregate counts computed by the stats_overview() SQL function."""
    return await store.rpc("stats_overview")
