"""
Google Identity Client

Resolves a Google proof of identity into a verified profile:
- access token: tokeninfo check, then the OpenID userinfo endpoint
- ID token: RS256 signature checked against Google's JWKS, plus
  audience (our client id) and issuer
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from jose import JWTError, jwt

from jobboard.core.config import Settings
from jobboard.core.errors import IdentityVerificationFailed

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


@dataclass(frozen=True)
class GoogleProfile:
    email: str
    name: str
    subject: Optional[str] = None
    picture: Optional[str] = None


def profile_from_claims(claims: Dict[str, Any]) -> GoogleProfile:
    """Build a profile from userinfo / ID token claims."""
    email = (claims.get("email") or "").strip().lower()
    if not email:
        raise IdentityVerificationFailed("Google account email missing")
    verified = claims.get("email_verified")
    if verified is False or str(verified).lower() == "false":
        raise IdentityVerificationFailed("Google account email is not verified")
    name = (claims.get("name") or "").strip() or email.split("@")[0] or "User"
    return GoogleProfile(
        email=email,
        name=name,
        subject=claims.get("sub") or None,
        picture=claims.get("picture") or None,
    )


def _json_body(resp: httpx.Response) -> Dict[str, Any]:
    """JSON object of a 200 response, or {} for anything else."""
    if resp.status_code != 200:
        return {}
    try:
        body = resp.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


class GoogleIdentityClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = settings.google_client_id
        self.tokeninfo_url = settings.google_tokeninfo_url
        self.userinfo_url = settings.google_userinfo_url
        self.certs_url = settings.google_certs_url
        self.timeout = settings.google_http_timeout
        self._transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def resolve(
        self,
        access_token: Optional[str] = None,
        id_token: Optional[str] = None,
    ) -> GoogleProfile:
        """Resolve a profile, preferring the access token when both are given."""
        try:
            if access_token:
                claims = await self._userinfo(access_token)
            elif id_token:
                claims = await self._verify_id_token(id_token)
            else:
                raise IdentityVerificationFailed("No Google token supplied")
        except httpx.HTTPError as e:
            raise IdentityVerificationFailed(f"Google request failed: {type(e).__name__}") from e
        return profile_from_claims(claims)

    async def _userinfo(self, access_token: str) -> Dict[str, Any]:
        async with self._http() as client:
            # tokeninfo failures are tolerated: some environments do not
            # report an audience there, userinfo is the authoritative call
            info = await client.get(self.tokeninfo_url, params={"access_token": access_token})
            if not _json_body(info).get("aud"):
                logger.warning("Google tokeninfo check failed (HTTP %s), trying userinfo", info.status_code)

            resp = await client.get(
                self.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        claims = _json_body(resp)
        if not claims:
            raise IdentityVerificationFailed(f"Google userinfo rejected the token (HTTP {resp.status_code})")
        return claims

    async def _verify_id_token(self, id_token: str) -> Dict[str, Any]:
        if not self.client_id:
            raise IdentityVerificationFailed("Google client id is not configured")
        async with self._http() as client:
            jwks = _json_body(await client.get(self.certs_url))
        if not jwks.get("keys"):
            raise IdentityVerificationFailed("Google signing keys unavailable")
        try:
            return jwt.decode(
                id_token,
                jwks,
                algorithms=["RS256"],
                audience=self.client_id,
                issuer=GOOGLE_ISSUERS,
                options={"verify_at_hash": False},
            )
        except JWTError as e:
            raise IdentityVerificationFailed(f"Invalid Google ID token: {e}") from e
