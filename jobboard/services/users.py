"""User record helpers shared by the two sign-in paths."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from jobboard.core.errors import StoreError
from jobboard.services.store import DataStore

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
PUBLIC_USER_FIELDS = ("id", "email", "name", "is_admin", "profile_picture_url")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """Projection of a user record that is safe to return to clients."""
    return {field: user.get(field) for field in PUBLIC_USER_FIELDS}


async def find_user_by_email(store: DataStore, email: str) -> Optional[Dict[str, Any]]:
    return await store.select_one(USERS_TABLE, filters={"email": email.strip().lower()})


async def provision_user(store: DataStore, values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert a new user with a fresh id.

    Emails are unique in the store: when a concurrent sign-in wins the
    insert, the existing record is returned instead of a second one.
    """
    row = {"id": str(uuid4()), **values, "email": values["email"].strip().lower()}
    try:
        user = await store.insert(USERS_TABLE, row)
    except StoreError:
        existing = await find_user_by_email(store, row["email"])
        if existing is None:
            raise
        return existing
    logger.info("Provisioned user %s (admin=%s)", user["id"], user.get("is_admin"))
    return user
