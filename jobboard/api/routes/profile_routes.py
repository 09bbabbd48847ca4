"""
Profile Routes

GET /user/profile - Get own profile
PUT /user/profile - Update display name
"""

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_service_store
from jobboard.core.auth import get_current_user
from jobboard.core.errors import NotFound
from jobboard.core.tokens import Identity
from jobboard.schemas.schemas import ProfileEnvelope, ProfileUpdate, UserEnvelope
from jobboard.services.store import DataStore
from jobboard.services.users import USERS_TABLE, utcnow

router = APIRouter(prefix="/user", tags=["Profile"])


@router.get("/profile", response_model=ProfileEnvelope)
async def get_profile(
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    profile = await store.select_one("user_profile_view", filters={"id": identity.subject})
    if profile is None:
        raise NotFound("Profile not found")
    return ProfileEnvelope(profile=profile)


@router.put("/profile", response_model=UserEnvelope)
async def update_profile(
    data: ProfileUpdate,
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    """Update the display name."""
    user = await store.update(
        USERS_TABLE,
        {"name": data.name, "updated_at": utcnow()},
        filters={"id": identity.subject},
    )
    if user is None:
        raise NotFound("User not found")
    return UserEnvelope(user=user)
