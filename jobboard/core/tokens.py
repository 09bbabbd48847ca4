"""
Session Token Codec - issues and verifies signed session tokens.

Tokens are stateless HS256 JWTs:
    {"sub": <user id>, "email": <email>, "role": "user" | "admin", "iat", "exp"}

Nothing is persisted, so a token cannot be revoked before it expires.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from jose import JWTError, jwt

from jobboard.core.config import Settings
from jobboard.core.errors import InvalidToken


class Role(str, Enum):
    user = "user"
    admin = "admin"


@dataclass(frozen=True)
class Identity:
    """Decoded token payload attached to authenticated requests."""

    subject: str
    email: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.admin


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenCodec:
    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = ttl
        self.clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenCodec":
        return cls(
            secret=settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(days=settings.jwt_expire_days),
        )

    def issue(self, subject_id: str, email: str, role: Role) -> str:
        """Create a signed session token valid for the configured window."""
        issued_at = self.clock()
        claims = {
            "sub": str(subject_id),
            "email": email,
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """
        Decode and validate a session token.

        Raises InvalidToken on a bad signature, malformed structure,
        missing claims, expiry, or an unknown role.
        """
        try:
            # Expiry is checked against our own clock below
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            raise InvalidToken(str(e)) from e

        subject = claims.get("sub")
        email = claims.get("email")
        expires_at = claims.get("exp")
        if not subject or not isinstance(email, str) or not isinstance(expires_at, (int, float)):
            raise InvalidToken("Token is missing required claims")

        if self.clock().timestamp() >= expires_at:
            raise InvalidToken("Token expired")

        try:
            role = Role(claims.get("role"))
        except ValueError as e:
            raise InvalidToken("Unknown role") from e

        return Identity(subject=str(subject), email=email, role=role)


def role_for(is_admin: Optional[bool]) -> Role:
    """Role carried in the token for a stored user record."""
    return Role.admin if is_admin else Role.user
