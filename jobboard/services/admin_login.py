"""
Administrator Credential Path - static email/password login.

The configured admin pair is compared directly (email case-insensitive,
password in constant time). The admin user record is provisioned on
first login and keyed by email, so repeated logins never create a
second record.
"""

import logging
import secrets
from typing import Any, Dict, Tuple

from jobboard.core.config import Settings
from jobboard.core.errors import InvalidCredentials
from jobboard.core.tokens import Role, TokenCodec
from jobboard.services.store import DataStore
from jobboard.services.users import USERS_TABLE, find_user_by_email, provision_user, public_user, utcnow

logger = logging.getLogger(__name__)


class AdminLogin:
    def __init__(self, store: DataStore, codec: TokenCodec, settings: Settings):
        self.store = store
        self.codec = codec
        self.admin_email = settings.admin_email
        self.admin_password = settings.admin_password

    def check_credentials(self, email: str, password: str) -> None:
        email_ok = email.strip().lower() == self.admin_email
        password_ok = secrets.compare_digest(password.encode(), self.admin_password.encode())
        if not (email_ok and password_ok):
            logger.warning("Rejected admin login for %s", email)
            raise InvalidCredentials("Invalid admin credentials")

    async def login(self, email: str, password: str) -> Tuple[str, Dict[str, Any]]:
        self.check_credentials(email, password)

        user = await find_user_by_email(self.store, self.admin_email)
        if user is None:
            user = await provision_user(
                self.store,
                {"email": self.admin_email, "name": "Admin", "is_admin": True},
            )
        if not user.get("is_admin"):
            user = await self.store.update(
                USERS_TABLE,
                {"is_admin": True, "updated_at": utcnow()},
                filters={"id": user["id"]},
            ) or {**user, "is_admin": True}

        token = self.codec.issue(user["id"], user["email"], Role.admin)
        return token, {**public_user(user), "is_admin": True}
