"""
Resume Storage - uploaded resume files in MongoDB GridFS.

Signed URLs:
    A signed URL points at GET /api/files/<path>?token=<jwt>.
    The JWT is bound to one storage path and expires after
    `signed_url_expire_seconds` (600s by default).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Tuple
from urllib.parse import quote

from gridfs import AsyncGridFSBucket
from gridfs.errors import NoFile
from jose import JWTError, jwt
from pymongo.errors import PyMongoError

from jobboard.core.config import Settings
from jobboard.core.errors import InvalidToken, NotFound, StoreError

logger = logging.getLogger(__name__)

SIGNED_URL_PURPOSE = "resume-download"


class ResumeStorage:
    def __init__(
        self,
        bucket_factory: Callable[[], AsyncGridFSBucket],
        settings: Settings,
    ):
        self._bucket_factory = bucket_factory
        self.secret = settings.download_link_secret
        self.algorithm = settings.jwt_algorithm
        self.base_url = settings.public_base_url.rstrip("/")
        self.expires_in = settings.signed_url_expire_seconds

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store file bytes under `path` (never overwrites)."""
        try:
            await self._bucket_factory().upload_from_stream_with_id(
                path,
                path.rsplit("/", 1)[-1],
                content,
                metadata={"contentType": content_type},
            )
        except PyMongoError as e:
            raise StoreError(f"Resume upload failed: {e}") from e
        logger.info("Stored resume %s (%d bytes)", path, len(content))
        return path

    async def download(self, path: str) -> Tuple[bytes, str]:
        """Return (content, content_type) for a stored file."""
        try:
            stream = await self._bucket_factory().open_download_stream(path)
            content = await stream.read()
        except NoFile as e:
            raise NotFound("Resume not found") from e
        except PyMongoError as e:
            raise StoreError(f"Resume download failed: {e}") from e
        metadata = stream.metadata or {}
        return content, metadata.get("contentType", "application/pdf")

    async def remove(self, path: str) -> None:
        try:
            await self._bucket_factory().delete(path)
        except NoFile:
            logger.info("Resume %s already removed", path)
        except PyMongoError as e:
            raise StoreError(f"Resume delete failed: {e}") from e

    def create_signed_url(self, path: str) -> str:
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "path": path,
                "purpose": SIGNED_URL_PURPOSE,
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(seconds=self.expires_in)).timestamp()),
            },
            self.secret,
            algorithm=self.algorithm,
        )
        return f"{self.base_url}/api/files/{quote(path)}?token={token}"

    def verify_signed_path(self, token: str, path: str) -> None:
        """Raise InvalidToken unless `token` grants access to `path`."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidToken(str(e)) from e
        if claims.get("purpose") != SIGNED_URL_PURPOSE or claims.get("path") != path:
            raise InvalidToken("Link does not match the requested file")
