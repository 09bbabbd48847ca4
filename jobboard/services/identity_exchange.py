"""
Identity Exchange - Google sign-in.

Flow:
1. Resolve a verified profile from Google (access token preferred, ID token fallback)
2. Look up the local user by lower-cased email
3. Provision a new user, or reconcile picture / google id / name drift
4. Mint a session token (role from the stored admin flag)
"""

import logging
from typing import Any, Dict, Optional, Tuple

from jobboard.core.errors import BadRequest, StoreError
from jobboard.core.tokens import TokenCodec, role_for
from jobboard.services.google_identity import GoogleIdentityClient, GoogleProfile
from jobboard.services.store import DataStore
from jobboard.services.users import USERS_TABLE, find_user_by_email, provision_user, public_user, utcnow

logger = logging.getLogger(__name__)


def reconcile_changes(user: Dict[str, Any], profile: GoogleProfile) -> Dict[str, Any]:
    """Fields of a stored user that drifted from the Google profile."""
    updates: Dict[str, Any] = {}
    if profile.picture and profile.picture != user.get("profile_picture_url"):
        updates["profile_picture_url"] = profile.picture
    if not user.get("google_id") and profile.subject:
        updates["google_id"] = profile.subject
    if not (user.get("name") or "").strip() and profile.name:
        updates["name"] = profile.name
    return updates


class IdentityExchange:
    def __init__(self, store: DataStore, google: GoogleIdentityClient, codec: TokenCodec):
        self.store = store
        self.google = google
        self.codec = codec

    async def sign_in(
        self,
        access_token: Optional[str] = None,
        id_token: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Return (session token, public user) for a Google proof of identity."""
        if not access_token and not id_token:
            raise BadRequest("Provide accessToken (preferred) or idToken")

        profile = await self.google.resolve(access_token=access_token, id_token=id_token)
        user = await find_user_by_email(self.store, profile.email)

        if user is None:
            user = await provision_user(
                self.store,
                {
                    "email": profile.email,
                    "name": profile.name,
                    "is_admin": False,
                    "google_id": profile.subject,
                    "profile_picture_url": profile.picture,
                },
            )
        else:
            user = await self._reconcile(user, profile)

        token = self.codec.issue(user["id"], user["email"], role_for(user.get("is_admin")))
        return token, public_user(user)

    async def _reconcile(self, user: Dict[str, Any], profile: GoogleProfile) -> Dict[str, Any]:
        updates = reconcile_changes(user, profile)
        if not updates:
            return user

        updates["updated_at"] = utcnow()
        try:
            updated = await self.store.update(USERS_TABLE, updates, filters={"id": user["id"]})
        except StoreError as e:
            # Sign-in still succeeds with the stored record
            logger.warning("User %s profile sync failed: %s", user["id"], e)
            return user
        return updated or user
