"""
Authentication Routes

POST /auth/google - Sign in with a Google access token or ID token
POST /auth/login - Administrator email/password login
GET /auth/me - Get current user info
"""

from fastapi import APIRouter, Depends

from jobboard.api.deps import get_admin_login, get_identity_exchange, get_service_store
from jobboard.core.auth import get_current_user
from jobboard.core.errors import NotFound
from jobboard.core.tokens import Identity
from jobboard.schemas.schemas import GoogleAuthRequest, LoginRequest, TokenResponse, UserEnvelope
from jobboard.services.admin_login import AdminLogin
from jobboard.services.identity_exchange import IdentityExchange
from jobboard.services.store import DataStore
from jobboard.services.users import USERS_TABLE

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/google", response_model=TokenResponse)
async def google_sign_in(
    request: GoogleAuthRequest,
    exchange: IdentityExchange = Depends(get_identity_exchange),
):
    """
    Exchange a Google proof of identity for a session token.

    Send `accessToken` (preferred) or `idToken`. First sign-in creates the user.
    """
    token, user = await exchange.sign_in(access_token=request.access_token, id_token=request.id_token)
    return TokenResponse(token=token, user=user)


@router.post("/login", response_model=TokenResponse)
async def admin_login(request: LoginRequest, login: AdminLogin = Depends(get_admin_login)):
    """
    Administrator login with the configured email and password.

    Include token in requests: Authorization: Bearer <token>
    """
    token, user = await login.login(request.email, request.password)
    return TokenResponse(token=token, user=user)


@router.get("/me", response_model=UserEnvelope)
async def get_me(
    identity: Identity = Depends(get_current_user),
    store: DataStore = Depends(get_service_store),
):
    """Get current authenticated user's info."""
    user = await store.select_one(
        USERS_TABLE,
        "id, name, email, is_admin, profile_picture_url, created_at, updated_at",
        filters={"id": identity.subject},
    )
    if user is None:
        raise NotFound("User not found")
    return UserEnvelope(user=user)
