"""
Access Control - FastAPI dependencies for protected routes.

Provides:
- get_current_user: verifies the bearer token and attaches the identity
- require_role / require_admin: role gate, run after get_current_user

Usage:
    @router.get("/protected")
    async def route(user: Identity = Depends(get_current_user)):
        return user

    @router.post("/admin-only", dependencies=ADMIN_ONLY)
    async def admin_route():
        ...
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobboard.core.config import Settings, get_settings
from jobboard.core.errors import Forbidden, InvalidToken, Unauthenticated
from jobboard.core.tokens import Identity, Role, TokenCodec

# Bearer token extractor (errors are raised by get_current_user)
bearer_scheme = HTTPBearer(auto_error=False)


def get_token_codec(settings: Settings = Depends(get_settings)) -> TokenCodec:
    return TokenCodec.from_settings(settings)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    codec: TokenCodec = Depends(get_token_codec),
) -> Identity:
    """FastAPI dependency - verify the bearer token and attach the identity."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated("Missing token")

    try:
        identity = codec.verify(credentials.credentials)
    except InvalidToken:
        raise Unauthenticated("Invalid or expired token")

    request.state.identity = identity
    return identity


def check_role(identity: Optional[Identity], role: Role) -> Identity:
    if identity is None:
        raise Unauthenticated("Unauthenticated")
    if identity.role is not role:
        raise Forbidden("Admin only" if role is Role.admin else "Forbidden")
    return identity


def require_role(role: Role):
    """Dependency factory - require the attached identity to carry `role`."""

    async def dependency(request: Request) -> Identity:
        return check_role(getattr(request.state, "identity", None), role)

    return dependency


require_admin = require_role(Role.admin)

# Route-level pipeline: authenticate first, then gate on role
ADMIN_ONLY = [Depends(get_current_user), Depends(require_admin)]


def ensure_owner_or_admin(identity: Identity, owner_id: Optional[str]) -> None:
    """Ownership check used by per-record handlers."""
    if identity.is_admin:
        return
    if owner_id is None or str(owner_id) != identity.subject:
        raise Forbidden("Forbidden")
